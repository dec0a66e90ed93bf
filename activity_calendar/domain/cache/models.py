"""
Monthly cache domain models.

Month keys, cache settings, the stored entry layout and the explicit
lookup results of the monthly activity cache.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.activity.sport_type import SportType
from activity_calendar.domain.activity.value_objects import (
    ActivityId,
    Calories,
    DateTime,
    Distance,
    Duration,
)
from activity_calendar.domain.shared.errors import ValidationError

DEFAULT_PREFIX = "coros_activities_"
DEFAULT_TTL_MS = 30 * 24 * 60 * 60 * 1000  # 30 days
DEFAULT_MAX_ENTRIES = 50
DEFAULT_VERSION = "1.0"

_MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True, order=True)
class MonthKey:
    """
    Calendar month identifier.

    Built from a 0-based month, rendered 1-based as "YYYY-MM" so that the
    lexicographic order of keys is chronological.

    Example:
        >>> str(MonthKey(2024, 11))
        '2024-12'
        >>> MonthKey.parse("2025-01")
        MonthKey(year=2025, month=0)
    """

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 0 <= self.month <= 11:
            raise ValidationError(f"Month must be in 0-11, got {self.month}")
        if not 0 <= self.year <= 9999:
            raise ValidationError(f"Year out of range: {self.year}")

    @classmethod
    def parse(cls, value: str) -> "MonthKey":
        match = _MONTH_KEY_PATTERN.match(value)
        if not match:
            raise ValidationError(f"Invalid month key: {value!r}")
        return cls(int(match.group(1)), int(match.group(2)) - 1)

    @classmethod
    def from_datetime(cls, instant: datetime) -> "MonthKey":
        return cls(instant.year, instant.month - 1)

    @staticmethod
    def is_month_key(value: str) -> bool:
        return _MONTH_KEY_PATTERN.match(value) is not None

    @property
    def value(self) -> str:
        return f"{self.year:04d}-{self.month + 1:02d}"

    def __str__(self) -> str:
        return self.value


class CacheSettings(BaseModel):
    """
    Monthly cache configuration.

    Attributes:
        prefix: Namespace prepended to every month key in the store
        ttl_ms: Age after which an entry is stale (default 30 days)
        max_entries: Maximum number of month entries kept (default 50)
        version: Entry layout version written with each entry
    """

    model_config = ConfigDict(frozen=True)

    prefix: str = Field(default=DEFAULT_PREFIX, min_length=1)
    ttl_ms: int = Field(default=DEFAULT_TTL_MS, ge=0)
    max_entries: int = Field(default=DEFAULT_MAX_ENTRIES, ge=1)
    version: str = Field(default=DEFAULT_VERSION, min_length=1)

    def storage_key(self, month_key: MonthKey) -> str:
        return f"{self.prefix}{month_key.value}"

    def month_key_of(self, storage_key: str) -> Optional[MonthKey]:
        """Month key of a store key in this namespace, None otherwise."""
        if not storage_key.startswith(self.prefix):
            return None
        suffix = storage_key[len(self.prefix) :]
        if not MonthKey.is_month_key(suffix):
            return None
        return MonthKey.parse(suffix)


class CachedActivity(BaseModel):
    """
    Serialized Activity stored inside a cache entry.

    Example:
        >>> record = CachedActivity.from_activity(activity)
        >>> assert record.to_activity() == activity
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    sport_type: int
    start_time: str = Field(..., description="ISO 8601 start time")
    duration_seconds: float = Field(..., ge=0)
    distance_meters: float = Field(..., ge=0)
    calories: float = Field(..., ge=0)
    device: Optional[str] = None
    average_heart_rate: Optional[float] = None
    average_speed: Optional[float] = None

    @classmethod
    def from_activity(cls, activity: Activity) -> "CachedActivity":
        return cls(
            id=activity.id.value,
            name=activity.name,
            sport_type=activity.sport_type.code,
            start_time=activity.start_time.to_iso(),
            duration_seconds=activity.duration.seconds,
            distance_meters=activity.distance.meters,
            calories=activity.calories.value,
            device=activity.device,
            average_heart_rate=activity.average_heart_rate,
            average_speed=activity.average_speed,
        )

    def to_activity(self) -> Activity:
        """Rebuild the entity.

        Raises:
            ValidationError: If a stored magnitude or date is invalid
        """
        return Activity(
            id=ActivityId(self.id),
            name=self.name,
            sport_type=SportType.from_code(self.sport_type),
            start_time=DateTime.from_iso(self.start_time),
            duration=Duration(self.duration_seconds),
            distance=Distance(self.distance_meters),
            calories=Calories(self.calories),
            device=self.device,
            average_heart_rate=self.average_heart_rate,
            average_speed=self.average_speed,
        )


class CacheEntry(BaseModel):
    """
    Stored month record: {activities, timestamp, monthKey, version}.

    Attributes:
        month_key: "YYYY-MM" (serialized as monthKey)
        activities: Serialized activities of the month
        timestamp: Store time in epoch milliseconds
        version: Entry layout version
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    month_key: str = Field(..., alias="monthKey")
    activities: list[CachedActivity] = Field(default_factory=list)
    timestamp: int = Field(..., ge=0)
    version: str = DEFAULT_VERSION

    @field_validator("month_key")
    @classmethod
    def valid_month_key(cls, v: str) -> str:
        if not MonthKey.is_month_key(v):
            raise ValueError(f"Invalid month key: {v!r}")
        return v

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.timestamp

    def is_expired(self, now_ms: int, ttl_ms: int) -> bool:
        return self.age_ms(now_ms) > ttl_ms

    def to_activities(self) -> list[Activity]:
        return [record.to_activity() for record in self.activities]

    def to_record(self) -> dict[str, Any]:
        """Plain dict for the key-value store."""
        return self.model_dump(mode="json", by_alias=True)


# ═══════════════════════════════════════════════════════════
# LOOKUP RESULTS
# ═══════════════════════════════════════════════════════════


class MissReason(str, Enum):
    """Why a lookup did not produce cached activities."""

    ABSENT = "absent"
    EXPIRED = "expired"


@dataclass(frozen=True)
class CacheHit:
    """Valid, unexpired entry."""

    entry: CacheEntry
    activities: list[Activity]


@dataclass(frozen=True)
class CacheMiss:
    """No usable entry."""

    reason: MissReason


@dataclass(frozen=True)
class CacheCorrupt:
    """Stored payload is malformed."""

    reason: str


CacheLookup = Union[CacheHit, CacheMiss, CacheCorrupt]
