"""
Load monthly activities use case.

Month loads go through the monthly activity cache; date ranges are
assembled from the months they span.
"""

from datetime import date

import structlog

from activity_calendar.application.navigation import shift_month
from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.shared.errors import ValidationError
from activity_calendar.infrastructure.cache.monthly_activity_cache import (
    MonthlyActivityCache,
    MonthlyLoadResult,
)

logger = structlog.get_logger(__name__)


class LoadMonthlyActivitiesUseCase:
    """Loads activities month by month through the cache."""

    def __init__(self, cache: MonthlyActivityCache) -> None:
        self.cache = cache

    async def execute(self, year: int, month: int) -> MonthlyLoadResult:
        """Load a 0-based month.

        Raises:
            ValidationError: If the month is out of range
            AuthenticationError: If the remote source is not logged in
            ApiError: If the remote fetch fails
        """
        return await self.cache.load_month(year, month)

    async def load_range(self, start: date, end: date) -> list[Activity]:
        """
        Load activities whose start date falls in [start, end].

        Every month touched by the range is loaded through the cache, so
        past months are served from the store when possible.

        Raises:
            ValidationError: If end is before start
        """
        if end < start:
            raise ValidationError(f"Range end {end} is before start {start}")

        year, month = start.year, start.month - 1
        last = (end.year, end.month - 1)
        activities: list[Activity] = []
        months = 0

        while (year, month) <= last:
            result = await self.cache.load_month(year, month)
            activities.extend(a for a in result.activities if start <= a.calendar_date <= end)
            months += 1
            year, month = shift_month(year, month, 1)

        logger.info(
            "Loaded date range",
            start=start.isoformat(),
            end=end.isoformat(),
            months=months,
            activities=len(activities),
        )
        return activities
