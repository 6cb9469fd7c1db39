"""Timekeeping, event formatting and sleeping for the simulation."""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional


def _now_us() -> int:
    """Current wall-clock time in whole microseconds."""
    return time.time_ns() // 1000


class Event(Enum):
    """Things a philosopher can be reported doing."""

    FORK = "has taken a fork"
    EAT = "is eating"
    SLEEP = "is sleeping"
    THINK = "is thinking"
    DIED = "died"


class Clock:
    """Measures milliseconds elapsed since timestamps in microseconds."""

    def __init__(self, start: Optional[int] = None) -> None:
        self.start = _now_us() if start is None else start

    def elapsed_ms(self, since: Optional[int] = None, round_up: bool = False) -> int:
        """Milliseconds from ``since`` (default: the start) until now.

        With ``round_up`` a partial millisecond of up to 999 microseconds is
        counted as a whole one.
        """
        reference = self.start if since is None else since
        delay = 999 if round_up else 0
        return (_now_us() - reference + delay) // 1000


def format_event(ms: int, philo_id: int, event: Event) -> str:
    """Render one log line such as ``"200 3 is eating"``."""
    return f"{ms} {philo_id} {event.value}"


def precise_sleep(seconds: float, stop: Optional[Callable[[], bool]] = None) -> bool:
    """Sleep for ``seconds``, polling finely near the end.

    Durations longer than two milliseconds first sleep in one block, leaving
    the last millisecond to the polling loop. ``stop`` is checked while
    polling; the return value tells whether the full time elapsed.
    """
    begin = time.monotonic()
    if seconds > 0.002:
        time.sleep(seconds - 0.001)
    while True:
        elapsed = time.monotonic() - begin
        if elapsed >= seconds:
            return True
        if stop is not None and stop():
            return False
        time.sleep(0.0001)