"""Run status, optimistic run flags and lock polling."""

from pipeline_console.runs.board import PipelineBoard
from pipeline_console.runs.optimistic import OptimisticFlags
from pipeline_console.runs.optimistic import RunTrigger
from pipeline_console.runs.polling import PollingController
from pipeline_console.runs.status_resolver import is_run_disabled
from pipeline_console.runs.status_resolver import resolve_status

__all__ = [
    "OptimisticFlags",
    "PipelineBoard",
    "PollingController",
    "RunTrigger",
    "is_run_disabled",
    "resolve_status",
]
