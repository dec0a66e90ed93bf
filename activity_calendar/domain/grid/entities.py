"""Calendar entities.

A Calendar is a fixed 6x7 grid of CalendarDay cells for one month,
padded with trailing days of the previous month and leading days of the
next month. Both are rebuilt on every render.
"""

from __future__ import annotations

import calendar as _calendar
from dataclasses import dataclass
from datetime import date
from typing import Tuple

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.activity.value_objects import (
    Calories,
    DateTime,
    Distance,
    Duration,
)

GRID_SIZE = 42
DAYS_PER_WEEK = 7


@dataclass(frozen=True)
class CalendarDay:
    """One grid cell.

    Attributes:
        date: Calendar date of the cell
        activities: Activities started on that date (read-only snapshot)
        is_current_month: True for days of the displayed month
        is_today: True when the cell is the reference "today"
    """

    date: DateTime
    activities: Tuple[Activity, ...] = ()
    is_current_month: bool = False
    is_today: bool = False

    @property
    def day_number(self) -> int:
        return self.date.day

    @property
    def activity_count(self) -> int:
        return len(self.activities)

    def has_activities(self) -> bool:
        return len(self.activities) > 0

    def to_date(self) -> date:
        return self.date.to_date()


@dataclass(frozen=True)
class Calendar:
    """Month grid with activities overlaid.

    Attributes:
        year: Displayed year
        month: Displayed month, 0-based
        days: Exactly 42 chronologically ordered cells, starting on a Sunday
    """

    year: int
    month: int
    days: Tuple[CalendarDay, ...]

    @property
    def month_name(self) -> str:
        if 0 <= self.month <= 11:
            return _calendar.month_name[self.month + 1]
        return "Unknown"

    @property
    def weeks(self) -> list[Tuple[CalendarDay, ...]]:
        return [
            self.days[start : start + DAYS_PER_WEEK]
            for start in range(0, len(self.days), DAYS_PER_WEEK)
        ]

    def current_month_days(self) -> list[CalendarDay]:
        return [day for day in self.days if day.is_current_month]

    def activities_for_date(self, day: date) -> list[Activity]:
        for cell in self.days:
            if cell.to_date() == day:
                return list(cell.activities)
        return []

    def all_activities(self) -> list[Activity]:
        return [activity for day in self.days for activity in day.activities]

    def active_days(self) -> int:
        return sum(1 for day in self.days if day.has_activities())

    def total_activities(self) -> int:
        return sum(day.activity_count for day in self.days)

    def total_distance(self) -> Distance:
        return Distance(sum(a.distance.meters for a in self.all_activities()))

    def total_duration(self) -> Duration:
        return Duration(sum(a.duration.seconds for a in self.all_activities()))

    def total_calories(self) -> Calories:
        return Calories(sum(a.calories.value for a in self.all_activities()))
