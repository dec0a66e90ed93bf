"""
Statistics calculation service.

Derives per-sport statistics, averages, trends and qualitative insights
from the aggregates of ActivityAggregationService.
"""

from __future__ import annotations

from typing import Optional, Sequence

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.activity.value_objects import Calories, Distance, Duration
from activity_calendar.domain.statistics.aggregation import ActivityAggregationService
from activity_calendar.domain.statistics.models import (
    ActivityAverages,
    Insight,
    InsightPolarity,
    MonthlyTotals,
    SportStats,
    TimePeriod,
    Trend,
    TrendDirection,
)

# Insight thresholds
GREAT_CONSISTENCY_DAYS = 20
GOOD_CONSISTENCY_DAYS = 10
AMAZING_DISTANCE_KM = 100
GOOD_DISTANCE_KM = 50
GREAT_VARIETY_SPORTS = 3
GOOD_VARIETY_SPORTS = 2

# Relative change under which a trend is reported as stable
STABLE_TREND_PERCENT = 5.0


class StatisticsCalculationService:
    """Statistics derived from activity lists."""

    def __init__(self, aggregation_service: Optional[ActivityAggregationService] = None) -> None:
        """Initialize service.

        Args:
            aggregation_service: Grouping/totals service (default: new instance)
        """
        self.aggregation_service = aggregation_service or ActivityAggregationService()

    def calculate_sport_stats(self, activities: Sequence[Activity]) -> list[SportStats]:
        """Per-sport totals, most practised sport first.

        Ties keep the grouping's encounter order.
        """
        sport_stats = [
            SportStats(
                sport_type=sport_type,
                activity_count=len(group),
                total_distance=Distance(sum(a.distance.meters for a in group)),
                total_duration=Duration(sum(a.duration.seconds for a in group)),
                total_calories=Calories(sum(a.calories.value for a in group)),
            )
            for sport_type, group in self.aggregation_service.group_by_sport(activities).items()
        ]
        return sorted(sport_stats, key=lambda stats: stats.activity_count, reverse=True)

    def calculate_averages(self, activities: Sequence[Activity]) -> ActivityAverages:
        """Averages per activity, and activities per active day."""
        totals = self.aggregation_service.calculate_monthly_totals(activities)
        count = max(totals.total_activities, 1)

        return ActivityAverages(
            average_distance=Distance(totals.total_distance.meters / count),
            average_duration=Duration(totals.total_duration.seconds / count),
            average_calories=Calories(totals.total_calories.value / count),
            average_activities_per_day=totals.total_activities / max(totals.active_days, 1),
        )

    def calculate_insights(
        self, activities: Sequence[Activity], period: Optional[TimePeriod] = None
    ) -> list[Insight]:
        """Rule cascade over consistency, distance and sport variety.

        Args:
            activities: Activities of the period
            period: Period the activities belong to

        Returns:
            One neutral insight for no activities, otherwise a consistency
            insight, an optional distance insight and a variety insight
        """
        if not activities:
            return [Insight("No activities found for this period", InsightPolarity.NEUTRAL)]

        totals = self.aggregation_service.calculate_monthly_totals(activities)
        insights: list[Insight] = []

        active_days = totals.active_days
        if active_days >= GREAT_CONSISTENCY_DAYS:
            insights.append(
                Insight(
                    f"Great consistency! You were active {active_days} days",
                    InsightPolarity.POSITIVE,
                )
            )
        elif active_days >= GOOD_CONSISTENCY_DAYS:
            insights.append(
                Insight(
                    f"Good activity level with {active_days} active days",
                    InsightPolarity.POSITIVE,
                )
            )
        else:
            insights.append(
                Insight(
                    f"Try to be more active! Only {active_days} active days",
                    InsightPolarity.NEGATIVE,
                )
            )

        total_km = totals.total_distance.to_kilometers()
        if total_km >= AMAZING_DISTANCE_KM:
            insights.append(
                Insight(f"Amazing! You covered {total_km:.1f} km", InsightPolarity.POSITIVE)
            )
        elif total_km >= GOOD_DISTANCE_KM:
            insights.append(
                Insight(f"Good distance coverage: {total_km:.1f} km", InsightPolarity.POSITIVE)
            )

        sport_count = len(self.aggregation_service.group_by_sport(activities))
        if sport_count >= GREAT_VARIETY_SPORTS:
            insights.append(
                Insight(
                    f"Great variety! You practiced {sport_count} different sports",
                    InsightPolarity.POSITIVE,
                )
            )
        elif sport_count == GOOD_VARIETY_SPORTS:
            insights.append(
                Insight(f"Good variety with {sport_count} sports", InsightPolarity.POSITIVE)
            )
        else:
            insights.append(
                Insight("Try adding more sport variety to your routine", InsightPolarity.NEUTRAL)
            )

        return insights

    def calculate_trends(
        self,
        activities: Sequence[Activity],
        previous_activities: Optional[Sequence[Activity]] = None,
    ) -> list[Trend]:
        """Compare totals against a previous period.

        Returns:
            Trends for activity count, distance and duration; empty when
            there is no previous period data
        """
        if not previous_activities:
            return []

        current = self.aggregation_service.calculate_monthly_totals(activities)
        previous = self.aggregation_service.calculate_monthly_totals(previous_activities)

        return [
            _trend("activities", current.total_activities, previous.total_activities),
            _trend("distance", current.total_distance.meters, previous.total_distance.meters),
            _trend("duration", current.total_duration.seconds, previous.total_duration.seconds),
        ]

    def calculate_monthly_totals(self, activities: Sequence[Activity]) -> MonthlyTotals:
        return self.aggregation_service.calculate_monthly_totals(activities)


def _trend(metric: str, current: float, previous: float) -> Trend:
    if previous == 0:
        percentage = 100.0 if current > 0 else 0.0
    else:
        percentage = (current - previous) / previous * 100

    if abs(percentage) < STABLE_TREND_PERCENT:
        direction = TrendDirection.STABLE
        description = f"{metric.capitalize()} stable vs previous period"
    elif percentage > 0:
        direction = TrendDirection.UP
        description = f"{metric.capitalize()} up {percentage:.1f}% vs previous period"
    else:
        direction = TrendDirection.DOWN
        description = f"{metric.capitalize()} down {abs(percentage):.1f}% vs previous period"

    return Trend(
        metric=metric,
        direction=direction,
        percentage=round(percentage, 1),
        description=description,
    )
