"""
Calendar navigation.

Month arithmetic for moving between displayed months. This is the only
place out-of-range months are normalized; everything downstream expects
months in 0-11.
"""

from enum import Enum


class NavigationDirection(str, Enum):
    """Direction of a month step."""

    PREVIOUS = "previous"
    NEXT = "next"

    @property
    def delta(self) -> int:
        return -1 if self is NavigationDirection.PREVIOUS else 1


def normalize_month(year: int, month: int) -> tuple[int, int]:
    """
    Roll an out-of-range 0-based month into its canonical (year, month).

    Example:
        >>> normalize_month(2024, 12)
        (2025, 0)
        >>> normalize_month(2024, -1)
        (2023, 11)
    """
    carry, normalized = divmod(month, 12)
    return year + carry, normalized


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move `delta` months forward (negative: backward)."""
    return normalize_month(year, month + delta)
