"""Data models for schedules and pipelines."""

from pipeline_console.models.pipeline import LastRunRecord
from pipeline_console.models.pipeline import LockRecord
from pipeline_console.models.pipeline import Pipeline
from pipeline_console.models.pipeline import QueuedRuntimeInfo
from pipeline_console.models.schedule import DailySchedule
from pipeline_console.models.schedule import ManualSchedule
from pipeline_console.models.schedule import Schedule
from pipeline_console.models.schedule import TimeOfDay
from pipeline_console.models.schedule import WeeklySchedule

__all__ = [
    "DailySchedule",
    "LastRunRecord",
    "LockRecord",
    "ManualSchedule",
    "Pipeline",
    "QueuedRuntimeInfo",
    "Schedule",
    "TimeOfDay",
    "WeeklySchedule",
]
