"""
Optimistic Run Flags

When a user clicks Run, the row switches to a locked state immediately, before
the orchestrator has reported any lock. The flag lives here, keyed by
deployment id, until the server's own lock has taken over and gone again, the
pipeline reports a newer last run, or the trigger call fails.
"""

import asyncio
from dataclasses import dataclass
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional

from loguru import logger

from pipeline_console.exceptions import OrchestratorError
from pipeline_console.exceptions import RunAlreadyInProgress
from pipeline_console.exceptions import RunTriggerError
from pipeline_console.models.pipeline import Pipeline
from pipeline_console.runs.status_resolver import has_active_lock


@dataclass
class PendingRun:
    """Bookkeeping for one optimistic flag."""

    last_run_id: Optional[str] = None  # last run reported when the run was triggered
    lock_seen: bool = False  # a poll has reported a lock since the trigger


class OptimisticFlags:
    """Per-pipeline optimistic "run requested" flags."""

    def __init__(self):
        self._pending: Dict[str, PendingRun] = {}

    def set(self, deployment_id: str, last_run_id: Optional[str] = None) -> None:
        self._pending[deployment_id] = PendingRun(last_run_id=last_run_id)

    def clear(self, deployment_id: str) -> bool:
        """Clear a flag. Returns True if one was set."""
        return self._pending.pop(deployment_id, None) is not None

    def is_set(self, deployment_id: str) -> bool:
        return deployment_id in self._pending

    def any(self) -> bool:
        return bool(self._pending)

    def deployment_ids(self) -> List[str]:
        return list(self._pending)

    def __contains__(self, deployment_id: str) -> bool:
        return self.is_set(deployment_id)

    def __len__(self) -> int:
        return len(self._pending)

    def reconcile(self, pipelines: Iterable[Pipeline]) -> List[str]:
        """
        Fold a freshly fetched pipeline list into the flags.

        - a reported lock marks the flag as superseded by the server (kept until the lock ends)
        - a lock that was seen and is now gone clears the flag
        - a new last run with no lock clears the flag (the run finished between two polls)
        - a pipeline missing from the list clears its flag

        Returns:
            Deployment ids whose flag was cleared
        """
        by_id = {pipeline.deployment_id: pipeline for pipeline in pipelines}
        cleared = []

        for deployment_id, pending in list(self._pending.items()):
            pipeline = by_id.get(deployment_id)
            if pipeline is None:
                cleared.append(deployment_id)
                continue

            if pipeline.lock is not None:
                pending.lock_seen = True
                continue

            last_run_id = pipeline.last_run.id if pipeline.last_run else None
            if pending.lock_seen or (last_run_id is not None and last_run_id != pending.last_run_id):
                cleared.append(deployment_id)

        for deployment_id in cleared:
            del self._pending[deployment_id]

        if cleared:
            logger.debug("Optimistic run flags resolved by server state", deployment_ids=cleared)
        return cleared


class RunTrigger:
    """
    Triggers pipeline runs with an optimistic flag.

    Args:
        flags: Flag store shared with the pipeline board
        trigger_run: Coroutine function starting a run for a deployment id (the orchestrator client)
    """

    def __init__(self, flags: OptimisticFlags, trigger_run: Callable[[str], Awaitable[Any]]):
        self.flags = flags
        self._trigger_run = trigger_run

    def can_trigger(self, deployment_id: str, pipeline: Optional[Pipeline] = None) -> bool:
        if self.flags.is_set(deployment_id):
            return False
        return pipeline is None or not has_active_lock(pipeline)

    async def trigger(self, deployment_id: str, pipeline: Optional[Pipeline] = None) -> Any:
        """
        Trigger a run.

        The flag is set before the orchestrator is called, so the run control is
        disabled for the whole round trip. It stays set on success.

        Raises:
            RunAlreadyInProgress: If the flag is already set or the server holds an active lock
            RunTriggerError: If the orchestrator call fails; the flag is cleared first
        """
        if not self.can_trigger(deployment_id, pipeline):
            raise RunAlreadyInProgress(deployment_id)

        last_run_id = pipeline.last_run.id if pipeline is not None and pipeline.last_run else None
        self.flags.set(deployment_id, last_run_id=last_run_id)

        try:
            result = await self._trigger_run(deployment_id)
        except asyncio.CancelledError:
            self.flags.clear(deployment_id)
            raise
        except Exception as e:
            self.flags.clear(deployment_id)
            message = e.detail if isinstance(e, OrchestratorError) else str(e)
            logger.error("Failed to run pipeline", deployment_id=deployment_id, error=message)
            raise RunTriggerError(deployment_id, message or "Failed to run pipeline") from e

        logger.success("Pipeline started, flow run initiated", deployment_id=deployment_id)
        return result
