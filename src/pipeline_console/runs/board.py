"""
Pipeline Board

State behind the pipeline list: the last applied pipeline snapshot, the
optimistic run flags and the polling timer. Every refresh is numbered and a
response older than the last applied one is dropped, so a slow poll can never
overwrite a newer list.
"""

import asyncio
from datetime import datetime
from datetime import tzinfo
from typing import Any
from typing import Awaitable
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional

from loguru import logger

from pipeline_console.exceptions import PipelineFetchError
from pipeline_console.exceptions import PipelineNotFound
from pipeline_console.models.pipeline import Pipeline
from pipeline_console.runs.optimistic import OptimisticFlags
from pipeline_console.runs.optimistic import RunTrigger
from pipeline_console.runs.polling import POLLING_INTERVAL_WHEN_LOCKED_MS
from pipeline_console.runs.polling import PollingController
from pipeline_console.runs.polling import SleepFunction
from pipeline_console.runs.run_info import last_run_info
from pipeline_console.runs.status_resolver import has_active_lock
from pipeline_console.runs.status_resolver import is_run_disabled
from pipeline_console.runs.status_resolver import resolve_status
from pipeline_console.runs.status_resolver import status_label
from pipeline_console.schedule.formatter import describe
from pipeline_console.schemas.schemas import PipelineRow

FetchPipelines = Callable[[], Awaitable[List[Pipeline]]]
TriggerRun = Callable[[str], Awaitable[Any]]


class PipelineBoard:
    """
    Pipeline list with optimistic run state and lock polling.

    Args:
        fetch_pipelines: Coroutine function returning the current pipeline list
        trigger_run: Coroutine function starting a run for a deployment id
        interval_ms: Polling interval while any pipeline is busy
        sleep: Sleep function used by the polling timer
        auto_poll: Start polling after loads and triggers when something is busy
    """

    def __init__(
        self,
        fetch_pipelines: FetchPipelines,
        trigger_run: TriggerRun,
        interval_ms: int = POLLING_INTERVAL_WHEN_LOCKED_MS,
        sleep: SleepFunction = asyncio.sleep,
        auto_poll: bool = True,
    ):
        self._fetch_pipelines = fetch_pipelines
        self.flags = OptimisticFlags()
        self.run_trigger = RunTrigger(self.flags, trigger_run)
        self.poller = PollingController(interval_ms=interval_ms, sleep=sleep)
        self.auto_poll = auto_poll

        self._pipelines: Dict[str, Pipeline] = {}
        self._issued = 0
        self._applied = 0
        self.loaded = False

    @property
    def pipelines(self) -> List[Pipeline]:
        return list(self._pipelines.values())

    def get(self, deployment_id: str) -> Optional[Pipeline]:
        return self._pipelines.get(deployment_id)

    async def refresh(self) -> bool:
        """
        Fetch the pipeline list and apply it unless a newer refresh already landed.

        Returns:
            True if the result was applied, False if it was discarded as stale

        Raises:
            PipelineFetchError: If the fetch fails
        """
        self._issued += 1
        seq = self._issued

        try:
            pipelines = await self._fetch_pipelines()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise PipelineFetchError(f"Failed to fetch pipelines: {e}") from e

        if seq < self._applied:
            logger.debug("Discarding stale pipeline list", seq=seq, applied=self._applied)
            return False

        self._applied = seq
        self._pipelines = {pipeline.deployment_id: pipeline for pipeline in pipelines}
        self.loaded = True
        self.flags.reconcile(pipelines)
        logger.debug("Pipeline list refreshed", seq=seq, pipelines=len(pipelines), pending_runs=len(self.flags))
        return True

    async def load(self) -> List[Pipeline]:
        """Initial (or manual) load; starts polling if anything is busy."""
        await self.refresh()
        self._maybe_start_polling()
        return self.pipelines

    def should_poll(self) -> bool:
        """Poll while a run is optimistically pending or any pipeline holds an active lock."""
        return self.flags.any() or any(has_active_lock(pipeline) for pipeline in self._pipelines.values())

    async def _tick(self) -> None:
        await self.refresh()

    def _maybe_start_polling(self) -> bool:
        if not self.auto_poll:
            return False
        return self.poller.start(self.should_poll, self._tick)

    async def trigger(self, deployment_id: str) -> Any:
        """
        Trigger a run for a loaded pipeline, then refresh and poll until it settles.

        Raises:
            PipelineNotFound: If the deployment id is not in the loaded list
            RunAlreadyInProgress: If the run control is disabled
            RunTriggerError: If the orchestrator rejected the run
        """
        pipeline = self.get(deployment_id)
        if pipeline is None:
            raise PipelineNotFound(deployment_id)

        result = await self.run_trigger.trigger(deployment_id, pipeline)

        try:
            await self.refresh()
        except PipelineFetchError as e:
            logger.warning("Refresh after run trigger failed", deployment_id=deployment_id, error=str(e))

        self._maybe_start_polling()
        return result

    def rows(self, tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> List[PipelineRow]:
        """Render the loaded pipelines as list rows."""
        rows = []
        for pipeline in self._pipelines.values():
            flag = self.flags.is_set(pipeline.deployment_id)
            status = resolve_status(pipeline, optimistic_flag=flag)
            rows.append(
                PipelineRow(
                    deployment_id=pipeline.deployment_id,
                    name=pipeline.name,
                    active=pipeline.active,
                    schedule=describe(pipeline.cron, tz=tz, now=now),
                    status=status,
                    status_label=status_label(status),
                    run_disabled=is_run_disabled(pipeline, optimistic_flag=flag),
                    last_run=last_run_info(pipeline, optimistic_flag=flag, now=now),
                    queue_no=pipeline.queued_wait_time.queue_no if pipeline.queued_wait_time else None,
                )
            )
        return rows

    async def aclose(self) -> None:
        await self.poller.aclose()
