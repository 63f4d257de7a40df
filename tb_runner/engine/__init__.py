"""Run engine: waits, steps, orchestrator and suite scheduler."""
