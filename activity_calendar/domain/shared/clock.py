"""
Current time provider.

Injectable clock used for current-month detection, `is_today` flags and
cache timestamps.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Port for the "current time" collaborator."""

    def now(self) -> datetime:
        """Return the current instant."""
        ...


class SystemClock:
    """Wall clock in the local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock:
    """
    Clock frozen at a given instant.

    Example:
        >>> clock = FixedClock(datetime(2024, 6, 15, 12, 0))
        >>> clock.advance(timedelta(days=1))
        >>> clock.now().day
        16
    """

    def __init__(self, instant: datetime) -> None:
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


def epoch_millis(instant: datetime) -> int:
    """Convert a datetime to epoch milliseconds."""
    return int(instant.timestamp() * 1000)
