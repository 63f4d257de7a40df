"""Deterministic fakes shared by the test-suite."""
