"""Typed lookups for ``TB_*`` environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

_TRUE_VALUES = {"1", "true", "yes", "on"}


def env_str(name: str, environ: Mapping[str, str] | None = None) -> str | None:
    """Return the stripped value of ``name`` or None when unset or blank."""
    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def env_bool(name: str, environ: Mapping[str, str] | None = None) -> bool | None:
    """Read a boolean flag; "1", "true", "yes" and "on" count as True."""
    value = env_str(name, environ)
    if value is None:
        return None
    return value.lower() in _TRUE_VALUES


def env_path(name: str, environ: Mapping[str, str] | None = None) -> Path | None:
    """Read a filesystem path with ``~`` expanded."""
    value = env_str(name, environ)
    return Path(value).expanduser() if value else None
