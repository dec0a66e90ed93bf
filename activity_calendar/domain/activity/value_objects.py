"""Activity value objects.

Immutable, self-validating scalar wrappers used by the Activity entity
and by every aggregate derived from it. Construction with an invalid
magnitude raises ValidationError.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, Union

from activity_calendar.domain.shared.errors import ValidationError

METERS_PER_MILE = 1609.344


def _format_number(value: float) -> str:
    """Render integral floats without a trailing .0."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


@dataclass(frozen=True)
class ActivityId:
    """Opaque activity identifier.

    Examples:
        >>> ActivityId("475xyz") == ActivityId.from_string("475xyz")
        True
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValidationError("Activity ID cannot be empty")

    @classmethod
    def from_string(cls, value: str) -> "ActivityId":
        return cls(value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Distance:
    """Non-negative distance in meters.

    Examples:
        >>> str(Distance.from_kilometers(5))
        '5.00 km'
        >>> str(Distance(800))
        '800 m'
    """

    meters: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.meters):
            raise ValidationError(f"Distance must be finite: {self.meters}")
        if self.meters < 0:
            raise ValidationError(f"Distance cannot be negative: {self.meters}")

    @classmethod
    def from_meters(cls, meters: float) -> "Distance":
        return cls(meters)

    @classmethod
    def from_kilometers(cls, kilometers: float) -> "Distance":
        return cls(kilometers * 1000)

    @classmethod
    def from_miles(cls, miles: float) -> "Distance":
        return cls(miles * METERS_PER_MILE)

    @classmethod
    def zero(cls) -> "Distance":
        return cls(0)

    def to_kilometers(self) -> float:
        return self.meters / 1000

    def to_miles(self) -> float:
        return self.meters / METERS_PER_MILE

    def add(self, other: "Distance") -> "Distance":
        return Distance(self.meters + other.meters)

    def __add__(self, other: "Distance") -> "Distance":
        return self.add(other)

    def __str__(self) -> str:
        km = self.to_kilometers()
        if km >= 1:
            return f"{km:.2f} km"
        return f"{self.meters:.0f} m"


@dataclass(frozen=True)
class Duration:
    """Non-negative duration in seconds.

    Examples:
        >>> str(Duration(5405))
        '1h 30m 5s'
        >>> str(Duration.from_minutes(2))
        '2m 0s'
    """

    seconds: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.seconds):
            raise ValidationError(f"Duration must be finite: {self.seconds}")
        if self.seconds < 0:
            raise ValidationError(f"Duration cannot be negative: {self.seconds}")

    @classmethod
    def from_seconds(cls, seconds: float) -> "Duration":
        return cls(seconds)

    @classmethod
    def from_minutes(cls, minutes: float) -> "Duration":
        return cls(minutes * 60)

    @classmethod
    def from_hours(cls, hours: float) -> "Duration":
        return cls(hours * 3600)

    @classmethod
    def zero(cls) -> "Duration":
        return cls(0)

    def to_minutes(self) -> float:
        return self.seconds / 60

    def to_hours(self) -> float:
        return self.seconds / 3600

    def add(self, other: "Duration") -> "Duration":
        return Duration(self.seconds + other.seconds)

    def __add__(self, other: "Duration") -> "Duration":
        return self.add(other)

    def __str__(self) -> str:
        total = int(round(self.seconds))
        hours, rest = divmod(total, 3600)
        minutes, seconds = divmod(rest, 60)
        if hours > 0:
            return f"{hours}h {minutes}m {seconds}s"
        if minutes > 0:
            return f"{minutes}m {seconds}s"
        return f"{seconds}s"


@dataclass(frozen=True)
class Calories:
    """Non-negative energy expenditure in kcal."""

    value: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.value):
            raise ValidationError(f"Calories must be finite: {self.value}")
        if self.value < 0:
            raise ValidationError(f"Calories cannot be negative: {self.value}")

    @classmethod
    def from_value(cls, value: float) -> "Calories":
        return cls(value)

    @classmethod
    def zero(cls) -> "Calories":
        return cls(0)

    def add(self, other: "Calories") -> "Calories":
        return Calories(self.value + other.value)

    def __add__(self, other: "Calories") -> "Calories":
        return self.add(other)

    def __str__(self) -> str:
        return f"{_format_number(self.value)} cal"


@dataclass(frozen=True)
class Pace:
    """Pace in minutes per kilometer.

    Examples:
        >>> str(Pace(5.5))
        '5:30 min/km'
    """

    minutes_per_kilometer: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.minutes_per_kilometer):
            raise ValidationError("Pace must be finite")
        if self.minutes_per_kilometer < 0:
            raise ValidationError("Pace cannot be negative")

    def __str__(self) -> str:
        minutes = int(self.minutes_per_kilometer)
        seconds = int((self.minutes_per_kilometer - minutes) * 60)
        return f"{minutes}:{seconds:02d} min/km"


@dataclass(frozen=True)
class DateTime:
    """Calendar instant.

    Wraps a datetime and exposes its calendar components with a 0-based
    month, matching the (year, month) convention of the calendar grid.

    Examples:
        >>> dt = DateTime.from_components(2024, 1, 29)
        >>> (dt.year, dt.month, dt.day)
        (2024, 1, 29)
    """

    value: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.value, datetime):
            raise ValidationError(f"Invalid date provided: {self.value!r}")

    @classmethod
    def from_datetime(cls, value: datetime) -> "DateTime":
        return cls(value)

    @classmethod
    def from_date(cls, value: date) -> "DateTime":
        return cls(datetime(value.year, value.month, value.day))

    @classmethod
    def from_components(cls, year: int, month: int, day: int) -> "DateTime":
        """Build from a 0-based month."""
        try:
            return cls(datetime(year, month + 1, day))
        except (ValueError, OverflowError) as e:
            raise ValidationError(f"Invalid date: {year:04d}-{month + 1:02d}-{day:02d}") from e

    @classmethod
    def from_timestamp(
        cls, seconds: Union[int, float], tz: Optional[timezone] = None
    ) -> "DateTime":
        """Build from unix seconds, in local time unless a timezone is given."""
        try:
            return cls(datetime.fromtimestamp(seconds, tz))
        except (ValueError, OverflowError, OSError) as e:
            raise ValidationError(f"Invalid timestamp: {seconds}") from e

    @classmethod
    def from_iso(cls, iso_string: str) -> "DateTime":
        if iso_string.endswith("Z"):
            iso_string = iso_string[:-1] + "+00:00"
        try:
            return cls(datetime.fromisoformat(iso_string))
        except ValueError as e:
            raise ValidationError(f"Invalid ISO date: {iso_string}") from e

    @property
    def year(self) -> int:
        return self.value.year

    @property
    def month(self) -> int:
        """0-based month."""
        return self.value.month - 1

    @property
    def day(self) -> int:
        return self.value.day

    def to_date(self) -> date:
        return self.value.date()

    def to_datetime(self) -> datetime:
        return self.value

    def is_same_day(self, other: "DateTime") -> bool:
        return self.to_date() == other.to_date()

    def to_iso(self) -> str:
        return self.value.isoformat()

    def __str__(self) -> str:
        return self.to_iso()
