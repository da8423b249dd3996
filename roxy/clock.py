"""Coarse monotonic timestamps for protocol headers."""

from __future__ import annotations

import time

_COARSE_CLOCK = getattr(time, "CLOCK_MONOTONIC_COARSE", None)
_NS_PER_SEC = 1_000_000_000


def now_timestamp() -> int:
    """Return the coarse monotonic clock as 32.32 fixed-point seconds."""
    if _COARSE_CLOCK is not None:
        nanos = time.clock_gettime_ns(_COARSE_CLOCK)
    else:
        nanos = time.monotonic_ns()
    seconds, nsec = divmod(nanos, _NS_PER_SEC)
    return (seconds << 32) | ((nsec * 9_223_372_037) >> 31)