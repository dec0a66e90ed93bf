"""
COROS API models.

Raw activity records as returned by the COROS activity query endpoint.
Only the fields the calendar uses are declared; everything else is ignored.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

COROS_API_SUCCESS_CODE = "C33BB719"


class ResponseShape(str, Enum):
    """Observed layouts of the activity query response."""

    ENVELOPE = "envelope"  # {apiCode, data: {dataList}}
    DATA = "data"  # {data: {dataList}}
    DATA_LIST = "data_list"  # {dataList}
    BARE_LIST = "bare_list"  # [...]


class CorosActivityDto(BaseModel):
    """Single activity record from the COROS API.

    Example:
        >>> dto = CorosActivityDto.model_validate(
        ...     {"labelId": 42, "sportType": 100, "startTime": 1704103200}
        ... )
        >>> dto.activity_id
        '42'
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    label_id: Optional[str] = Field(default=None, alias="labelId")
    id: Optional[str] = None
    name: Optional[str] = None
    sport_type: int = Field(..., alias="sportType")
    start_time: Optional[float] = Field(default=None, alias="startTime")
    date: Optional[str] = Field(default=None, description="YYYYMMDD")
    distance: float = Field(default=0.0, ge=0, description="Meters")
    workout_time: Optional[float] = Field(default=None, alias="workoutTime")
    total_time: Optional[float] = Field(default=None, alias="totalTime")
    calorie: float = Field(default=0.0, ge=0)
    device: Optional[str] = None
    avg_hr: Optional[float] = Field(default=None, alias="avgHr")
    avg_speed: Optional[float] = Field(default=None, alias="avgSpeed")

    @field_validator("label_id", "id", "date", "device", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v)) if float(v).is_integer() else str(v)
        return v

    @field_validator("distance", "calorie", mode="before")
    @classmethod
    def missing_as_zero(cls, v: Any) -> Any:
        return 0.0 if v is None or v == "" else v

    @model_validator(mode="after")
    def has_identity_and_start(self) -> "CorosActivityDto":
        if self.activity_id is None:
            raise ValueError("Record has neither labelId nor id")
        if self.start_time is None and self.date is None:
            raise ValueError("Record has neither startTime nor date")
        return self

    @property
    def activity_id(self) -> Optional[str]:
        return self.label_id or self.id

    @property
    def duration_seconds(self) -> float:
        """workoutTime, falling back to totalTime."""
        if self.workout_time is not None:
            return self.workout_time
        return self.total_time or 0.0
