"""Display calendar use case."""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from activity_calendar.application.load_monthly_activities import (
    LoadMonthlyActivitiesUseCase,
)
from activity_calendar.domain.grid.entities import Calendar
from activity_calendar.domain.grid.grid_builder import CalendarGridBuilder


@dataclass(frozen=True)
class CalendarView:
    """Calendar grid of a month plus where its activities came from."""

    calendar: Calendar
    was_cached: bool


class DisplayCalendarUseCase:
    """Loads a month and lays it out on the 42-cell grid."""

    def __init__(
        self,
        loader: LoadMonthlyActivitiesUseCase,
        grid_builder: CalendarGridBuilder,
    ) -> None:
        self.loader = loader
        self.grid_builder = grid_builder

    async def execute(self, year: int, month: int, today: Optional[date] = None) -> CalendarView:
        result = await self.loader.execute(year, month)
        calendar = self.grid_builder.build_calendar(year, month, result.activities, today=today)
        return CalendarView(calendar=calendar, was_cached=result.was_cached)
