"""
Schedule Model

Tagged union of the three schedule shapes the pipeline form can produce.
Times are always stored in UTC.
"""

from typing import Annotated
from typing import Literal
from typing import Tuple
from typing import Union

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator


class TimeOfDay(BaseModel):
    """Hour and minute of a schedule, in UTC."""

    model_config = ConfigDict(frozen=True)

    hour: int = Field(ge=0, le=23)
    minute: int = Field(ge=0, le=59)


class ManualSchedule(BaseModel):
    """No cron; the pipeline only runs when triggered."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["manual"] = "manual"


class DailySchedule(BaseModel):
    """Every day at time_of_day (UTC)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["daily"] = "daily"
    time_of_day: TimeOfDay


class WeeklySchedule(BaseModel):
    """Selected weekdays (Sunday=0) at time_of_day (UTC)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["weekly"] = "weekly"
    time_of_day: TimeOfDay
    days_of_week: Tuple[int, ...] = Field(min_length=1)

    @field_validator("days_of_week")
    @classmethod
    def validate_days_of_week(cls, v: Tuple[int, ...]) -> Tuple[int, ...]:
        """Every day must be a cron weekday number 0-6."""
        for day in v:
            if not 0 <= day <= 6:
                raise ValueError(f"Day of week must be between 0 (Sunday) and 6 (Saturday), got {day}")
        return v


Schedule = Annotated[
    Union[ManualSchedule, DailySchedule, WeeklySchedule],
    Field(discriminator="kind"),
]
