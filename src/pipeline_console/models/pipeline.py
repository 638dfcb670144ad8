"""
Pipeline Model

Pipelines as reported by the orchestrator list endpoint. Keys arrive in
camelCase; models are read-only snapshots and are never mutated locally.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from pipeline_console.enums import LockStatus


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class LockRecord(BaseModel):
    """Server-side claim on a pipeline (or a pipeline sharing one of its connections)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    locked_by: str = Field(default="", alias="lockedBy")
    locked_at: Optional[datetime] = Field(default=None, alias="lockedAt")
    status: LockStatus
    flow_run_id: Optional[str] = Field(default=None, alias="flowRunId")
    celery_task_id: Optional[str] = Field(default=None, alias="celeryTaskId")

    normalize_locked_at = field_validator("locked_at", mode="before")(_blank_to_none)


class LastRunRecord(BaseModel):
    """Most recent flow run of a pipeline's deployment."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    name: Optional[str] = None
    status: str
    state_name: Optional[str] = None
    start_time: Optional[datetime] = Field(default=None, alias="startTime")
    expected_start_time: Optional[datetime] = Field(default=None, alias="expectedStartTime")
    end_time: Optional[datetime] = Field(default=None, alias="endTime")
    total_run_time: Optional[float] = Field(default=None, alias="totalRunTime")
    orguser: Optional[str] = None

    normalize_times = field_validator("start_time", "expected_start_time", "end_time", mode="before")(_blank_to_none)


class QueuedRuntimeInfo(BaseModel):
    """Queue position and wait estimate for a queued flow run."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    max_wait_time: int = 0
    min_wait_time: int = 0
    queue_no: int = 0


class Pipeline(BaseModel):
    """Pipeline aggregate from the list endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    deployment_id: str = Field(alias="deploymentId")
    name: str = ""
    deployment_name: Optional[str] = Field(default=None, alias="deploymentName")
    cron: Optional[str] = None
    lock: Optional[LockRecord] = None
    last_run: Optional[LastRunRecord] = Field(default=None, alias="lastRun")
    active: bool = Field(default=True, alias="status")  # schedule on/off toggle
    queued_wait_time: Optional[QueuedRuntimeInfo] = Field(default=None, alias="queuedFlowRunWaitTime")
