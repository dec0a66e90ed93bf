"""
Calculate statistics use case.

Bundles totals, per-sport stats, averages, insights and trends for a
list of activities into one Statistics aggregate.
"""

from typing import Optional, Sequence

import structlog

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.statistics.calculation import StatisticsCalculationService
from activity_calendar.domain.statistics.models import MonthlyStats, Statistics, TimePeriod

logger = structlog.get_logger(__name__)


class CalculateStatisticsUseCase:
    """Computes the statistics of a period."""

    def __init__(self, calculator: Optional[StatisticsCalculationService] = None) -> None:
        self.calculator = calculator or StatisticsCalculationService()

    def execute(
        self,
        activities: Sequence[Activity],
        period: Optional[TimePeriod] = None,
        previous_activities: Optional[Sequence[Activity]] = None,
    ) -> Statistics:
        """
        Compute statistics for a period.

        Never raises for empty input: totals and averages are zero and a
        single neutral insight is returned.

        Args:
            activities: Activities of the period
            period: Period the activities belong to
            previous_activities: Activities of the preceding period, for trends

        Returns:
            Statistics aggregate
        """
        totals = self.calculator.calculate_monthly_totals(activities)
        statistics = Statistics(
            activities=tuple(activities),
            monthly_stats=MonthlyStats.from_totals(totals),
            sport_stats=tuple(self.calculator.calculate_sport_stats(activities)),
            insights=tuple(self.calculator.calculate_insights(activities, period)),
            averages=self.calculator.calculate_averages(activities),
            period=period,
            trends=tuple(self.calculator.calculate_trends(activities, previous_activities)),
        )

        logger.debug(
            "Statistics computed",
            activities=totals.total_activities,
            active_days=totals.active_days,
            sports=len(statistics.sport_stats),
        )
        return statistics
