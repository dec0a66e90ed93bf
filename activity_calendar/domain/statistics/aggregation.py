"""
Activity aggregation service.

Groups activities by calendar date and by sport, and sums monthly
totals. Never raises for empty input: empty lists give zeroed results.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.activity.sport_type import SportType
from activity_calendar.domain.activity.value_objects import Calories, Distance, Duration
from activity_calendar.domain.statistics.models import MonthlyTotals


def date_key(day: date) -> str:
    """Stable grouping key for a calendar date (ISO format)."""
    return day.isoformat()


class ActivityAggregationService:
    """Grouping and totals over activity lists."""

    def group_by_date(self, activities: Iterable[Activity]) -> dict[str, list[Activity]]:
        """Group activities by local calendar date.

        Returns:
            Mapping of ISO date ("2024-05-01") to activities, in encounter order
        """
        grouped: dict[str, list[Activity]] = {}
        for activity in activities:
            grouped.setdefault(date_key(activity.calendar_date), []).append(activity)
        return grouped

    def group_by_sport(self, activities: Iterable[Activity]) -> dict[SportType, list[Activity]]:
        """Group activities by sport code.

        Buckets are looked up through an index keyed by the integer code,
        so distinct SportType instances with the same code share a bucket.
        The first SportType seen for a code becomes the bucket's key.

        Returns:
            Mapping of SportType to activities, in encounter order
        """
        by_code: dict[int, tuple[SportType, list[Activity]]] = {}
        for activity in activities:
            code = activity.sport_type.code
            if code not in by_code:
                by_code[code] = (activity.sport_type, [])
            by_code[code][1].append(activity)
        return {sport_type: bucket for sport_type, bucket in by_code.values()}

    def calculate_monthly_totals(self, activities: Sequence[Activity]) -> MonthlyTotals:
        """Sum distance, duration and calories and count active days."""
        if not activities:
            return MonthlyTotals.empty()

        return MonthlyTotals(
            total_activities=len(activities),
            total_distance=Distance(sum(a.distance.meters for a in activities)),
            total_duration=Duration(sum(a.duration.seconds for a in activities)),
            total_calories=Calories(sum(a.calories.value for a in activities)),
            active_days=self.get_active_days(activities),
        )

    def get_active_days(self, activities: Iterable[Activity]) -> int:
        """Count distinct calendar dates with at least one activity."""
        return len({activity.calendar_date for activity in activities})
