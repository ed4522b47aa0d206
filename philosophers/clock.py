"""Millisecond wall-clock helpers used to pace the simulation."""

import time

_POLL_INTERVAL_S = 0.0001


def now_ms() -> int:
    """Return the current wall-clock time in whole milliseconds."""
    return time.time_ns() // 1_000_000


def wait_until(start_time: int) -> None:
    """Block until the wall clock reaches ``start_time`` (milliseconds)."""
    while now_ms() < start_time:
        time.sleep(_POLL_INTERVAL_S)


def precise_sleep(duration_ms: int) -> None:
    """Sleep for ``duration_ms`` milliseconds, busy-waiting over the last few."""
    start = now_ms()
    while True:
        elapsed = now_ms() - start
        if elapsed >= duration_ms:
            return
        remain = duration_ms - elapsed
        if remain > 10:
            time.sleep((remain - 2) / 1000)
        elif remain > 2:
            time.sleep(remain * 0.8 / 1000)
        else:
            while now_ms() - start < duration_ms:
                pass
            return