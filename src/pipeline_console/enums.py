"""
Console Enums

Enum types shared by the schedule codec and the run-status machinery.
Values must match exactly what the orchestrator backend reports.
"""

from enum import Enum

# ════════════════════════════════════════════════════════════════════════════
# Schedule Enums
# ════════════════════════════════════════════════════════════════════════════


class ScheduleKind(str, Enum):
    """Schedule options offered by the pipeline form."""

    MANUAL = "manual"  # No cron, runs only when triggered
    DAILY = "daily"  # Every day at a fixed UTC time
    WEEKLY = "weekly"  # Selected weekdays at a fixed UTC time


# Cron day-of-week token -> weekday name (Sunday=0)
WEEKDAYS = {
    "0": "Sunday",
    "1": "Monday",
    "2": "Tuesday",
    "3": "Wednesday",
    "4": "Thursday",
    "5": "Friday",
    "6": "Saturday",
}


# ════════════════════════════════════════════════════════════════════════════
# Run Enums
# ════════════════════════════════════════════════════════════════════════════


class LockStatus(str, Enum):
    """Status of the server-side lock held on a pipeline's deployment."""

    LOCKED = "locked"  # Claimed, typically by a run on a pipeline sharing a connection
    QUEUED = "queued"  # Flow run accepted, waiting for a worker
    RUNNING = "running"  # Flow run executing
    COMPLETE = "complete"  # Run finished, lock not yet released
    CANCELLED = "cancelled"


# Lock states during which a new run must not be triggered
ACTIVE_LOCK_STATUSES = frozenset({LockStatus.LOCKED, LockStatus.QUEUED, LockStatus.RUNNING})


class FlowRunStatus(str, Enum):
    """Terminal flow run status reported on a pipeline's last run."""

    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CRASHED = "CRASHED"
    CANCELLED = "CANCELLED"


# state_name reported when dbt models built but dbt tests failed
DBT_TEST_FAILED = "DBT_TEST_FAILED"


class DisplayStatus(str, Enum):
    """Single badge rendered for a pipeline row."""

    NONE = "none"
    LOCKED_OPTIMISTIC = "locked_optimistic"  # Client just triggered, server not caught up yet
    LOCKED = "locked"
    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    TESTS_FAILED = "tests_failed"
