"""Sport taxonomy.

Maps numeric sport codes to display metadata (name, category, icon,
color). Codes missing from the table resolve to a synthesized "Other"
sport type that keeps the original code, so unknown sports still group
separately.

SportType equality and hashing use the code only: two instances built
for the same code are interchangeable as dict keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict


class SportCategory(str, Enum):
    """Coarse sport grouping."""

    RUNNING = "running"
    CYCLING = "cycling"
    SWIMMING = "swimming"
    STRENGTH = "strength"
    OUTDOOR = "outdoor"
    WINTER = "winter"
    INDOOR = "indoor"
    OTHER = "other"


OTHER_NAME = "Other"
OTHER_ICON = "⚡"
OTHER_COLOR = "#95A5A6"


@dataclass(frozen=True)
class SportType:
    """Sport type value object.

    Examples:
        >>> SportType.from_code(1).name
        'Running'
        >>> SportType.from_code(1) == SportType(1, "Run", SportCategory.OTHER, "", "")
        True
        >>> SportType.from_code(4242).name
        'Other'
    """

    code: int
    name: str = field(compare=False)
    category: SportCategory = field(compare=False)
    icon: str = field(compare=False, default=OTHER_ICON)
    color: str = field(compare=False, default=OTHER_COLOR)

    @classmethod
    def from_code(cls, code: int) -> "SportType":
        """Resolve a code, falling back to "Other" for unknown codes."""
        known = _SPORT_TABLE.get(code)
        if known is not None:
            return known
        return cls(code, OTHER_NAME, SportCategory.OTHER, OTHER_ICON, OTHER_COLOR)

    @classmethod
    def running(cls) -> "SportType":
        return cls.from_code(1)

    @classmethod
    def cycling(cls) -> "SportType":
        return cls.from_code(2)

    @classmethod
    def swimming(cls) -> "SportType":
        return cls.from_code(3)

    @classmethod
    def all_sport_types(cls) -> list["SportType"]:
        return list(_SPORT_TABLE.values())

    def is_known(self) -> bool:
        return self.code in _SPORT_TABLE

    def is_running(self) -> bool:
        return self.category is SportCategory.RUNNING

    def is_cycling(self) -> bool:
        return self.category is SportCategory.CYCLING

    def is_swimming(self) -> bool:
        return self.category is SportCategory.SWIMMING

    def is_indoor(self) -> bool:
        return self.category is SportCategory.INDOOR

    def is_outdoor(self) -> bool:
        return self.category is SportCategory.OUTDOOR

    def __str__(self) -> str:
        return self.name


def _build_table(*entries: SportType) -> Dict[int, SportType]:
    return {entry.code: entry for entry in entries}


_RUN = "rgb(248, 192, 50)"
_BIKE = "rgb(28, 181, 64)"
_SWIM = "rgb(48, 112, 255)"
_GYM = "rgb(217, 46, 218)"
_CLIMB = "rgb(48, 201, 202)"
_WALK = "rgb(250, 225, 60)"

_SPORT_TABLE: Dict[int, SportType] = _build_table(
    # Canonical codes
    SportType(1, "Running", SportCategory.RUNNING, "🏃", "#FF6B6B"),
    SportType(2, "Cycling", SportCategory.CYCLING, "🚴", "#4ECDC4"),
    SportType(3, "Swimming", SportCategory.SWIMMING, "🏊", "#45B7D1"),
    SportType(4, "Hiking", SportCategory.OUTDOOR, "🥾", "#96CEB4"),
    SportType(5, "Walking", SportCategory.OUTDOOR, "🚶", "#FECA57"),
    SportType(6, "Strength Training", SportCategory.STRENGTH, "💪", "#FF9FF3"),
    SportType(7, "Yoga", SportCategory.INDOOR, "🧘", "#A8E6CF"),
    SportType(8, "Indoor Cycling", SportCategory.INDOOR, "🏋️", "#6C7CE0"),
    SportType(9, "Treadmill", SportCategory.INDOOR, "🏃", "#FF8A80"),
    SportType(10, "Elliptical", SportCategory.INDOOR, "⚡", "#81C784"),
    SportType(11, "Rowing", SportCategory.INDOOR, "🚣", "#4DB6AC"),
    SportType(12, "Skiing", SportCategory.WINTER, "⛷️", "#E1F5FE"),
    SportType(13, "Snowboarding", SportCategory.WINTER, "🏂", "#B3E5FC"),
    # COROS API codes
    SportType(100, "Running", SportCategory.RUNNING, "🏃", _RUN),
    SportType(101, "Indoor Running", SportCategory.RUNNING, "🏃", _RUN),
    SportType(102, "Trail Running", SportCategory.RUNNING, "🏃", _RUN),
    SportType(103, "Track Running", SportCategory.RUNNING, "🏃", _RUN),
    SportType(104, "Hiking", SportCategory.OUTDOOR, "🥾", _WALK),
    SportType(105, "Mountain Climbing", SportCategory.OUTDOOR, "🥾", _CLIMB),
    SportType(200, "Road Cycling", SportCategory.CYCLING, "🚴", _BIKE),
    SportType(201, "Indoor Cycling", SportCategory.INDOOR, "🏋️", _BIKE),
    SportType(202, "E-Bike", SportCategory.CYCLING, "🚴", _BIKE),
    SportType(203, "Gravel Cycling", SportCategory.CYCLING, "🚴", _BIKE),
    SportType(204, "Mountain Biking", SportCategory.CYCLING, "🚴", _BIKE),
    SportType(205, "E-Mountain Bike", SportCategory.CYCLING, "🚴", _BIKE),
    SportType(299, "Other Cycling", SportCategory.CYCLING, "🚴", _BIKE),
    SportType(300, "Pool Swimming", SportCategory.SWIMMING, "🏊", _SWIM),
    SportType(301, "Open Water", SportCategory.SWIMMING, "🏊", _SWIM),
    SportType(400, "Indoor Aerobics", SportCategory.INDOOR, "⚡", _GYM),
    SportType(401, "Outdoor Aerobics", SportCategory.OUTDOOR, "⚡", _GYM),
    SportType(402, "Strength Training", SportCategory.STRENGTH, "💪", _GYM),
    SportType(800, "Indoor Climbing", SportCategory.INDOOR, "🧗", _CLIMB),
    SportType(801, "Bouldering", SportCategory.INDOOR, "🧗", _CLIMB),
    SportType(900, "Walking", SportCategory.OUTDOOR, "🚶", _WALK),
    SportType(901, "Jump Rope", SportCategory.INDOOR, "⚡", _GYM),
    SportType(10000, "Triathlon", SportCategory.OTHER, "⚡", "rgb(255, 159, 64)"),
    SportType(10003, "Climbing", SportCategory.OUTDOOR, "🧗", _CLIMB),
)
