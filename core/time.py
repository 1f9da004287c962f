"""
Time utilities for ethgate.

Millisecond clock helpers used by the provider stats and the receipt waiter.
"""

import time


def now_ms() -> int:
    """Get current Unix timestamp in milliseconds."""
    return int(time.time() * 1000)


def elapsed_ms(start_ms: int, current_ms: int | None = None) -> int:
    """
    Milliseconds elapsed since start_ms.

    Args:
        start_ms: Start timestamp in milliseconds
        current_ms: Current timestamp (defaults to now)
    """
    current = now_ms() if current_ms is None else current_ms
    return current - start_ms


def is_timed_out(start_ms: int, timeout_ms: int, current_ms: int | None = None) -> bool:
    """
    Check whether a deadline measured from start_ms has passed.

    A timeout of zero or less never expires.
    """
    if timeout_ms <= 0:
        return False
    return elapsed_ms(start_ms, current_ms) > timeout_ms
