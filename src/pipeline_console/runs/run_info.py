"""Helpers for the "last run" column: relative times, durations and who started a run."""

from datetime import datetime
from datetime import timezone
from typing import Optional
from typing import Union

from pydantic import BaseModel

from pipeline_console.enums import LockStatus
from pipeline_console.models.pipeline import LastRunRecord
from pipeline_console.models.pipeline import Pipeline

# We started recording who manually triggered flow runs on 2025-05-20
FLOW_RUN_STARTED_BY_DATE_CUTOFF = datetime(2025, 5, 20, tzinfo=timezone.utc)
SYSTEM_USER = "System"

Timestamp = Union[datetime, str, None]


class LastRunInfo(BaseModel):
    """When the last (or current) run started and who started it."""

    time: str
    by: Optional[str] = None
    is_running: bool = False


def to_datetime(value: Timestamp) -> Optional[datetime]:
    """Parse an ISO timestamp (naive values are taken as UTC). Returns None for missing or invalid input."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _distance(seconds: float) -> str:
    minutes = round(seconds / 60)
    if seconds < 45:
        return "less than a minute"
    if minutes < 2:
        return "1 minute"
    if minutes < 45:
        return f"{minutes} minutes"
    hours = round(minutes / 60)
    if minutes < 90:
        return "about 1 hour"
    if minutes < 24 * 60:
        return f"about {hours} hours"
    days = round(minutes / (24 * 60))
    if minutes < 42 * 60:
        return "1 day"
    if days < 30:
        return f"{days} days"
    months = round(days / 30)
    if days < 45:
        return "about 1 month"
    if days < 365:
        return f"{months} months"
    years = days // 365
    return "about 1 year" if years == 1 else f"about {years} years"


def last_run_time(start_time: Timestamp, now: Optional[datetime] = None) -> str:
    """Relative time such as "5 minutes ago"; "-" when the timestamp is missing or invalid."""
    start = to_datetime(start_time)
    if start is None:
        return "-"

    now = to_datetime(now) or datetime.now(timezone.utc)
    delta = (now - start).total_seconds()
    if delta < 0:
        return f"in {_distance(-delta)}"
    return f"{_distance(delta)} ago"


def format_duration(seconds: float) -> str:
    """
    Compact duration with at most two units.

    0 -> "0s", 125 -> "2m 5s", 3725 -> "1h 2m", 90000 -> "1d 1h"
    """
    seconds = max(int(seconds), 0)
    units = (
        ("d", seconds // 86400),
        ("h", (seconds % 86400) // 3600),
        ("m", (seconds % 3600) // 60),
    )

    parts = [f"{value}{unit}" for unit, value in units if value > 0][:2]
    secs = seconds % 60
    if len(parts) < 2 and (secs > 0 or not parts):
        parts.append(f"{secs}s")
    return " ".join(parts)


def calculate_duration(start_time: Timestamp, end_time: Timestamp) -> int:
    """Whole seconds between two timestamps, 0 if either cannot be parsed."""
    start, end = to_datetime(start_time), to_datetime(end_time)
    if start is None or end is None:
        return 0
    return int((end - start).total_seconds())


def run_duration(run: LastRunRecord) -> int:
    """Seconds a flow run took: the orchestrator's total run time when reported, else end minus start."""
    if run.total_run_time:
        return int(run.total_run_time)
    return calculate_duration(run.start_time, run.end_time)


def trim_email(email: str) -> str:
    return email.split("@")[0]


def flow_run_started_by(start_time: Timestamp, user: str) -> Optional[str]:
    """Who started a flow run, or None for runs from before starters were recorded."""
    start = to_datetime(start_time)
    if start is None or start < FLOW_RUN_STARTED_BY_DATE_CUTOFF:
        return None
    return SYSTEM_USER if user == SYSTEM_USER else trim_email(user)


def last_run_info(pipeline: Pipeline, optimistic_flag: bool = False, now: Optional[datetime] = None) -> Optional[LastRunInfo]:
    """
    Last run column for a pipeline row.

    While a run is queued/running (or optimistically triggered) and the server reports
    a lock, the lock's time and owner are shown; otherwise the last run's.
    """
    lock = pipeline.lock
    is_running = optimistic_flag or (lock is not None and lock.status in (LockStatus.RUNNING, LockStatus.QUEUED))

    if is_running and lock is not None:
        return LastRunInfo(
            time=last_run_time(lock.locked_at, now=now),
            by=trim_email(lock.locked_by) if lock.locked_by else None,
            is_running=True,
        )

    last_run = pipeline.last_run
    if last_run is not None:
        return LastRunInfo(
            time=last_run_time(last_run.start_time or last_run.expected_start_time, now=now),
            by=flow_run_started_by(last_run.start_time, last_run.orguser or SYSTEM_USER),
            is_running=False,
        )
    return None
