"""
COROS data mapper.

Transforms COROS API responses to domain activities.
"""

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from activity_calendar.domain.activity.entities import Activity
from activity_calendar.domain.activity.sport_type import SportType
from activity_calendar.domain.activity.value_objects import (
    ActivityId,
    Calories,
    DateTime,
    Distance,
    Duration,
)
from activity_calendar.domain.shared.errors import ApiError, ValidationError
from activity_calendar.infrastructure.coros.models import (
    COROS_API_SUCCESS_CODE,
    CorosActivityDto,
    ResponseShape,
)

logger = structlog.get_logger(__name__)

DEFAULT_ACTIVITY_NAME = "Activity"


class CorosMapper:
    """Maps COROS API data to domain models."""

    @staticmethod
    def detect_shape(payload: Any) -> ResponseShape:
        """Classify a response body.

        Raises:
            ApiError: If the body matches no known layout
        """
        if isinstance(payload, list):
            return ResponseShape.BARE_LIST

        if isinstance(payload, dict):
            data = payload.get("data")
            if isinstance(data, dict) and isinstance(data.get("dataList"), list):
                if payload.get("apiCode") == COROS_API_SUCCESS_CODE:
                    return ResponseShape.ENVELOPE
                return ResponseShape.DATA
            if isinstance(payload.get("dataList"), list):
                return ResponseShape.DATA_LIST

            # COROS reports failures in-band with a message and a non-success code
            if "apiCode" in payload or "message" in payload:
                raise ApiError(
                    f"COROS API error: {payload.get('message', 'unknown error')} "
                    f"(apiCode={payload.get('apiCode')})"
                )

        raise ApiError(f"Unexpected COROS response layout: {type(payload).__name__}")

    @staticmethod
    def extract_records(payload: Any) -> list[Any]:
        """Raw activity records of a response body, whatever its layout."""
        shape = CorosMapper.detect_shape(payload)
        if shape is ResponseShape.BARE_LIST:
            return payload
        if shape is ResponseShape.DATA_LIST:
            return payload["dataList"]
        return payload["data"]["dataList"]

    @staticmethod
    def parse_start_time(dto: CorosActivityDto) -> DateTime:
        """startTime (unix seconds) or, failing that, date (YYYYMMDD)."""
        if dto.start_time is not None:
            return DateTime.from_timestamp(dto.start_time)

        raw = dto.date or ""
        if len(raw) != 8 or not raw.isdigit():
            raise ValidationError(f"Invalid COROS date: {raw!r}")
        return DateTime.from_components(int(raw[:4]), int(raw[4:6]) - 1, int(raw[6:]))

    @staticmethod
    def to_activity(dto: CorosActivityDto) -> Activity:
        """Convert a COROS record to an Activity.

        Raises:
            ValidationError: If a magnitude or date is invalid

        Example:
            >>> dto = CorosActivityDto.model_validate({
            ...     "labelId": "a1", "name": "Morning Run", "sportType": 100,
            ...     "date": "20240115", "distance": 5000, "workoutTime": 1800,
            ... })
            >>> CorosMapper.to_activity(dto).sport_type.name
            'Running'
        """
        return Activity(
            id=ActivityId(dto.activity_id or ""),
            name=dto.name or DEFAULT_ACTIVITY_NAME,
            sport_type=SportType.from_code(dto.sport_type),
            start_time=CorosMapper.parse_start_time(dto),
            duration=Duration.from_seconds(dto.duration_seconds),
            distance=Distance.from_meters(dto.distance),
            calories=Calories.from_value(dto.calorie),
            device=dto.device,
            average_heart_rate=dto.avg_hr,
            average_speed=dto.avg_speed,
        )

    @staticmethod
    def parse_activities(payload: Any) -> list[Activity]:
        """Decode a response body into activities.

        Malformed records are skipped and logged.

        Raises:
            ApiError: If the body matches no known layout
        """
        activities: list[Activity] = []
        records = CorosMapper.extract_records(payload)

        for index, record in enumerate(records):
            try:
                dto = CorosActivityDto.model_validate(record)
                activities.append(CorosMapper.to_activity(dto))
            except (PydanticValidationError, ValidationError) as e:
                logger.warning(
                    "Skipping malformed COROS record",
                    index=index,
                    error=str(e),
                )

        if len(activities) < len(records):
            logger.info(
                "Decoded COROS activities",
                total=len(records),
                decoded=len(activities),
            )
        return activities
