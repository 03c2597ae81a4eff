"""Misc utilities shared across watch_core modules."""

from __future__ import annotations

import os
from typing import List

MS_IN_SECOND = 1000
MS_IN_MINUTE = 60 * MS_IN_SECOND


def get_boolean_env(name: str, default: bool = False) -> bool:
    """Parse a boolean environment variable."""
    val = os.environ.get(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def parse_comma_separated(raw: str | None) -> List[str]:
    """Split ``a, b,,c`` into ``["a", "b", "c"]``."""
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]


def format_duration(ms: int) -> str:
    """Render milliseconds as ``1 minute(s), 2 second(s), 3 millisecond(s)``.

    Zero components are omitted, except that a zero duration still reads
    ``0 millisecond(s)``.
    """
    ms = max(int(ms), 0)
    minutes, ms = divmod(ms, MS_IN_MINUTE)
    seconds, ms = divmod(ms, MS_IN_SECOND)

    parts: List[str] = []
    if minutes:
        parts.append(f"{minutes} minute(s)")
    if seconds:
        parts.append(f"{seconds} second(s)")
    if ms or not parts:
        parts.append(f"{ms} millisecond(s)")
    return ", ".join(parts)


__all__ = [
    "get_boolean_env",
    "parse_comma_separated",
    "format_duration",
]
