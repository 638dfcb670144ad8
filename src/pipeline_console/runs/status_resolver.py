"""
Run Status Resolver

Merges the three signals that describe a pipeline's run state into the single
badge shown on its row:

    1. lock.status == running                -> RUNNING
    2. lock.status == queued                 -> QUEUED
    3. lock.status in (locked, complete)     -> LOCKED
    4. optimistic flag (client just ran it)  -> LOCKED_OPTIMISTIC
    5. last run state_name DBT_TEST_FAILED   -> TESTS_FAILED
       last run status COMPLETED             -> SUCCESS
       any other last run                    -> FAILED
    6. nothing                               -> NONE

The server's lock always wins over the client's optimistic flag, which in turn
wins over the last run. Pipelines sharing a connection with a running pipeline
report their own lock as "locked" and are rendered as such.
"""

from typing import Optional

from pipeline_console.enums import ACTIVE_LOCK_STATUSES
from pipeline_console.enums import DBT_TEST_FAILED
from pipeline_console.enums import DisplayStatus
from pipeline_console.enums import FlowRunStatus
from pipeline_console.enums import LockStatus
from pipeline_console.models.pipeline import LastRunRecord
from pipeline_console.models.pipeline import LockRecord
from pipeline_console.models.pipeline import Pipeline

STATUS_LABELS = {
    DisplayStatus.NONE: "—",
    DisplayStatus.LOCKED_OPTIMISTIC: "Locked",
    DisplayStatus.LOCKED: "Locked",
    DisplayStatus.QUEUED: "Queued",
    DisplayStatus.RUNNING: "Running",
    DisplayStatus.SUCCESS: "Success",
    DisplayStatus.FAILED: "Failed",
    DisplayStatus.TESTS_FAILED: "dbt tests failed",
}


def resolve(optimistic_flag: bool, lock: Optional[LockRecord], last_run: Optional[LastRunRecord]) -> DisplayStatus:
    """Three-way merge of (optimistic flag, lock, last run) into a DisplayStatus."""
    if lock is not None:
        if lock.status == LockStatus.RUNNING:
            return DisplayStatus.RUNNING
        if lock.status == LockStatus.QUEUED:
            return DisplayStatus.QUEUED
        if lock.status in (LockStatus.LOCKED, LockStatus.COMPLETE):
            return DisplayStatus.LOCKED

    if optimistic_flag:
        return DisplayStatus.LOCKED_OPTIMISTIC

    if last_run is None:
        return DisplayStatus.NONE
    if last_run.state_name == DBT_TEST_FAILED:
        return DisplayStatus.TESTS_FAILED
    if last_run.status == FlowRunStatus.COMPLETED.value:
        return DisplayStatus.SUCCESS
    return DisplayStatus.FAILED


def resolve_status(pipeline: Pipeline, optimistic_flag: bool = False) -> DisplayStatus:
    """Display status for one pipeline row."""
    return resolve(optimistic_flag, pipeline.lock, pipeline.last_run)


def has_active_lock(pipeline: Pipeline) -> bool:
    """True while the server holds a locked/queued/running claim on the pipeline."""
    return pipeline.lock is not None and pipeline.lock.status in ACTIVE_LOCK_STATUSES


def is_run_disabled(pipeline: Pipeline, optimistic_flag: bool = False) -> bool:
    """The run control is disabled while a run is optimistically pending or the server holds an active lock."""
    return optimistic_flag or has_active_lock(pipeline)


def status_label(status: DisplayStatus) -> str:
    return STATUS_LABELS[status]
