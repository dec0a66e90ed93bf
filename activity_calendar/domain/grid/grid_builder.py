"""Calendar grid builder.

Produces the fixed 42-cell grid for a (year, month) and overlays
activities onto the cells whose calendar date matches their start time.
"""

from __future__ import annotations

import calendar as _calendar
from collections import defaultdict
from datetime import MAXYEAR, MINYEAR, date, timedelta
from typing import Iterable, Optional, Sequence

import structlog

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.activity.value_objects import DateTime
from activity_calendar.domain.grid.entities import GRID_SIZE, Calendar, CalendarDay
from activity_calendar.domain.shared.clock import Clock, SystemClock
from activity_calendar.domain.shared.errors import ValidationError

logger = structlog.get_logger(__name__)


def days_in_month(year: int, month: int) -> int:
    """Number of days of a 0-based month."""
    return _calendar.monthrange(year, month + 1)[1]


def first_weekday(year: int, month: int) -> int:
    """Weekday of the 1st of a 0-based month, 0 = Sunday."""
    return (date(year, month + 1, 1).weekday() + 1) % 7


def _validate(year: int, month: int) -> None:
    if not 0 <= month <= 11:
        raise ValidationError(f"Month must be in 0-11, got {month}")
    # The grid spills into the neighbouring years.
    if not MINYEAR < year < MAXYEAR:
        raise ValidationError(f"Year out of range: {year}")


class CalendarGridBuilder:
    """Builds month grids.

    Months are expected in 0-11; out-of-range values raise
    ValidationError and must be normalized by the navigation layer.
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        self.clock = clock or SystemClock()

    def generate_days(
        self, year: int, month: int, today: Optional[date] = None
    ) -> list[CalendarDay]:
        """Generate the 42 empty cells of a month grid.

        Args:
            year: Displayed year
            month: Displayed month, 0-based
            today: Reference date for `is_today`, defaults to the clock

        Returns:
            Cells from the Sunday on/before the 1st, 42 consecutive days
        """
        _validate(year, month)
        reference = today or self.clock.now().date()

        grid_start = date(year, month + 1, 1) - timedelta(days=first_weekday(year, month))
        days = []
        for offset in range(GRID_SIZE):
            current = grid_start + timedelta(days=offset)
            days.append(
                CalendarDay(
                    date=DateTime.from_date(current),
                    activities=(),
                    is_current_month=(current.year == year and current.month == month + 1),
                    is_today=(current == reference),
                )
            )
        return days

    def map_activities_to_days(
        self, activities: Iterable[Activity], days: Sequence[CalendarDay]
    ) -> list[CalendarDay]:
        """Return new cells carrying the activities started on each date."""
        by_date: dict[date, list[Activity]] = defaultdict(list)
        for activity in activities:
            by_date[activity.calendar_date].append(activity)

        return [
            CalendarDay(
                date=day.date,
                activities=tuple(by_date.get(day.to_date(), ())),
                is_current_month=day.is_current_month,
                is_today=day.is_today,
            )
            for day in days
        ]

    def build_calendar(
        self,
        year: int,
        month: int,
        activities: Iterable[Activity],
        today: Optional[date] = None,
    ) -> Calendar:
        """Build the grid for a month and overlay activities.

        Example:
            >>> builder = CalendarGridBuilder()
            >>> grid = builder.build_calendar(2024, 1, [])
            >>> len(grid.days), len(grid.current_month_days())
            (42, 29)
        """
        days = self.map_activities_to_days(activities, self.generate_days(year, month, today))
        calendar = Calendar(year=year, month=month, days=tuple(days))
        logger.debug(
            "Calendar built",
            year=year,
            month=month,
            activities=calendar.total_activities(),
        )
        return calendar
