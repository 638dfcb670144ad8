####################################
# --- Request/response schemas --- #
####################################

from datetime import datetime
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from pipeline_console.enums import WEEKDAYS
from pipeline_console.enums import DisplayStatus
from pipeline_console.enums import ScheduleKind
from pipeline_console.models.pipeline import LastRunRecord
from pipeline_console.models.schedule import Schedule
from pipeline_console.runs.run_info import LastRunInfo
from pipeline_console.runs.run_info import format_duration
from pipeline_console.runs.run_info import run_duration


# health
class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str
    version: str
    orchestrator_url: str
    polling: bool


# read (cRud)
class PipelineRow(BaseModel):
    """One rendered row of the pipeline list."""

    deployment_id: str
    name: str
    active: bool
    schedule: str
    status: DisplayStatus
    status_label: str
    run_disabled: bool
    last_run: Optional[LastRunInfo] = None
    queue_no: Optional[int] = None


class GetPipelinesResponse(BaseModel):
    """Response model for listing pipelines."""

    Message: str
    Pipeline: List[PipelineRow]
    polling: bool


# run (crUd)
class RunPipelineResponse(BaseModel):
    """Response model for a triggered run."""

    message: str
    deployment_id: str


class SetScheduleStatusResponse(BaseModel):
    """Response model for turning a pipeline schedule on or off."""

    message: str
    deployment_id: str
    active: bool


class RunHistoryQueryParams(BaseModel):
    """Query parameters for the run history of a pipeline."""

    limit: Optional[int] = 10
    offset: Optional[int] = 0

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v):
        """Validate that limit is greater than 0."""
        if v is not None and v <= 0:
            raise ValueError("limit must be greater than 0")
        return v

    @field_validator("offset")
    @classmethod
    def validate_offset(cls, v):
        """Validate that offset is not negative."""
        if v is not None and v < 0:
            raise ValueError("offset must not be negative")
        return v


class RunHistoryEntry(LastRunRecord):
    """A past flow run with its duration, in seconds and as shown in the history view ("2m 5s")."""

    duration_seconds: int = 0
    duration: str = "0s"

    @classmethod
    def from_run(cls, run: LastRunRecord) -> "RunHistoryEntry":
        seconds = run_duration(run)
        return cls(**run.model_dump(), duration_seconds=seconds, duration=format_duration(seconds))


class RunHistoryResponse(BaseModel):
    """Response model for the run history of a pipeline."""

    deployment_id: str
    runs: List[RunHistoryEntry]


# schedules
class DescribeScheduleResponse(BaseModel):
    cron: Optional[str] = None
    description: str


class ParseScheduleResponse(BaseModel):
    """Parsed schedule (UTC) plus the values a schedule form shows (local time)."""

    cron: Optional[str] = None
    schedule: Schedule
    kind: ScheduleKind
    days_of_week: List[str]
    local_time: Optional[str] = None
    utc_time: Optional[str] = Field(default=None, description="UTC time of day as the form stores it, \"H M\"")
    description: str


class EncodeScheduleRequest(BaseModel):
    """Request model for turning schedule form values into a UTC cron expression."""

    kind: ScheduleKind
    days_of_week: List[str] = Field(default_factory=list, description="Weekday tokens, Sunday=0")
    local_time: Optional[str] = Field(default=None, description="Local time of day, HH:MM")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "kind": "weekly",
                "days_of_week": ["1", "3"],
                "local_time": "09:00",
            }
        }
    )

    @field_validator("days_of_week")
    @classmethod
    def validate_days_of_week(cls, v: List[str]) -> List[str]:
        """Validate that every day token is a weekday number 0-6."""
        unknown = [day for day in v if day not in WEEKDAYS]
        if unknown:
            raise ValueError(f"days_of_week must be values 0-6 (Sunday=0), got {unknown}")
        return v


class EncodeScheduleResponse(BaseModel):
    cron: str
    schedule: Schedule
    description: str


class LocalCronResponse(BaseModel):
    cron: str
    local_cron: str
    timezone: str
