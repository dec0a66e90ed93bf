"""
Activity calendar application service.

Facade used by the presentation layer: tracks the displayed month and
exposes month loading, calendar display, navigation, statistics and
cache maintenance.
"""

from datetime import date
from typing import Any, Optional, Sequence

import structlog

from activity_calendar.application.calculate_statistics import CalculateStatisticsUseCase
from activity_calendar.application.display_calendar import CalendarView, DisplayCalendarUseCase
from activity_calendar.application.load_monthly_activities import (
    LoadMonthlyActivitiesUseCase,
)
from activity_calendar.application.navigation import NavigationDirection, shift_month
from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.grid.entities import Calendar
from activity_calendar.domain.grid.grid_builder import CalendarGridBuilder
from activity_calendar.domain.shared.clock import Clock
from activity_calendar.domain.shared.errors import ValidationError
from activity_calendar.domain.statistics.models import PeriodType, Statistics, TimePeriod
from activity_calendar.infrastructure.cache.monthly_activity_cache import (
    CacheStats,
    MonthlyActivityCache,
    MonthlyLoadResult,
)

logger = structlog.get_logger(__name__)


class ActivityCalendarService:
    """
    Calendar and statistics facade.

    Responsibilities:
    - Keep track of the displayed (year, month)
    - Load months through the monthly activity cache
    - Build calendar grids and statistics for the displayed month
    - Expose cache maintenance

    Example:
        >>> service = create_activity_calendar()
        >>> view = await service.display_calendar(2024, 11)
        >>> view = await service.navigate(NavigationDirection.NEXT)
        >>> (view.calendar.year, view.calendar.month)
        (2025, 0)
    """

    def __init__(
        self,
        cache: MonthlyActivityCache,
        grid_builder: Optional[CalendarGridBuilder] = None,
        statistics: Optional[CalculateStatisticsUseCase] = None,
        clock: Optional[Clock] = None,
        resources: Sequence[Any] = (),
    ):
        """
        Initialize service with dependencies.

        Args:
            cache: Monthly activity cache
            grid_builder: Calendar grid builder (default: uses the same clock)
            statistics: Statistics use case
            clock: Current time provider
            resources: Objects with an async close() released by close()
        """
        self.clock = clock or cache.clock
        self.cache = cache
        self.grid_builder = grid_builder or CalendarGridBuilder(self.clock)
        self.loader = LoadMonthlyActivitiesUseCase(cache)
        self.display = DisplayCalendarUseCase(self.loader, self.grid_builder)
        self.statistics = statistics or CalculateStatisticsUseCase()
        self._resources = list(resources)

        now = self.clock.now()
        self.current_year = now.year
        self.current_month = now.month - 1

    async def __aenter__(self) -> "ActivityCalendarService":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def close(self) -> None:
        for resource in self._resources:
            await resource.close()

    # ═══════════════════════════════════════════════════════════
    # MONTHS AND CALENDAR
    # ═══════════════════════════════════════════════════════════

    async def load_month(self, year: int, month: int) -> MonthlyLoadResult:
        return await self.loader.execute(year, month)

    def build_calendar(
        self,
        year: int,
        month: int,
        activities: Sequence[Activity],
        today: Optional[date] = None,
    ) -> Calendar:
        return self.grid_builder.build_calendar(year, month, activities, today=today)

    async def display_calendar(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> CalendarView:
        """
        Load and lay out a month, making it the displayed month.

        Args:
            year: Year (default: displayed year)
            month: 0-based month (default: displayed month)
        """
        year = self.current_year if year is None else year
        month = self.current_month if month is None else month

        view = await self.display.execute(year, month)
        self.current_year, self.current_month = year, month

        logger.info(
            "Calendar displayed",
            year=year,
            month=month + 1,
            activities=view.calendar.total_activities(),
            was_cached=view.was_cached,
        )
        return view

    async def navigate(self, direction: NavigationDirection) -> CalendarView:
        year, month = shift_month(self.current_year, self.current_month, direction.delta)
        return await self.display_calendar(year, month)

    async def go_to_current_month(self) -> CalendarView:
        now = self.clock.now()
        return await self.display_calendar(now.year, now.month - 1)

    async def refresh_current_month(self) -> list[Activity]:
        """Fetch this month's activities from the remote source."""
        now = self.clock.now()
        result = await self.loader.execute(now.year, now.month - 1)
        return result.activities

    async def refresh_month(self, year: int, month: int) -> CalendarView:
        """Drop a month's cache entry, then load and display it again."""
        await self.cache.invalidate(year, month)
        return await self.display_calendar(year, month)

    async def load_date_range(self, start: date, end: date) -> list[Activity]:
        return await self.loader.load_range(start, end)

    # ═══════════════════════════════════════════════════════════
    # STATISTICS
    # ═══════════════════════════════════════════════════════════

    def compute_statistics(
        self,
        activities: Sequence[Activity],
        period: Optional[TimePeriod] = None,
        previous_activities: Optional[Sequence[Activity]] = None,
    ) -> Statistics:
        return self.statistics.execute(activities, period, previous_activities)

    async def calculate_monthly_statistics(
        self,
        year: Optional[int] = None,
        month: Optional[int] = None,
        compare_with_previous: bool = True,
    ) -> Statistics:
        """
        Statistics of a month, with trends against the month before.

        Args:
            year: Year (default: displayed year)
            month: 0-based month (default: displayed month)
            compare_with_previous: Also load the previous month for trends
        """
        year = self.current_year if year is None else year
        month = self.current_month if month is None else month

        current = await self.loader.execute(year, month)
        previous_activities: Optional[list[Activity]] = None
        if compare_with_previous:
            previous = await self.loader.execute(*shift_month(year, month, -1))
            previous_activities = previous.activities

        return self.compute_statistics(
            current.activities,
            TimePeriod.for_month(year, month),
            previous_activities,
        )

    async def calculate_year_to_date_statistics(self, year: Optional[int] = None) -> Statistics:
        """
        Statistics from January 1st to today (or December 31st for past years).

        Raises:
            ValidationError: If the year is in the future
        """
        today = self.clock.now().date()
        year = today.year if year is None else year
        if year > today.year:
            raise ValidationError(f"Year {year} is in the future")

        end = today if year == today.year else date(year, 12, 31)
        activities = await self.loader.load_range(date(year, 1, 1), end)
        return self.compute_statistics(
            activities,
            TimePeriod(start=date(year, 1, 1), end=end, type=PeriodType.YEAR),
        )

    # ═══════════════════════════════════════════════════════════
    # CACHE MAINTENANCE
    # ═══════════════════════════════════════════════════════════

    async def clear_cache(self) -> int:
        return await self.cache.clear()

    async def cache_stats(self) -> CacheStats:
        return await self.cache.stats()
