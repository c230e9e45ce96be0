"""Common time utilities."""

from __future__ import annotations

import datetime as dt


def utcnow() -> dt.datetime:
    """Return an aware UTC timestamp for poll bookkeeping."""
    return dt.datetime.now(dt.UTC)


def monotonic_ms(clock_s: float) -> int:
    """Convert a monotonic clock reading in seconds to whole milliseconds."""
    return int(clock_s * 1000)
