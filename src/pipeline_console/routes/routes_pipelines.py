from datetime import tzinfo
from typing import Literal

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Path
from fastapi import Request
from fastapi import Response
from fastapi import status
from loguru import logger

from pipeline_console.client.orchestrator_client import OrchestratorClient
from pipeline_console.dependencies import get_board
from pipeline_console.dependencies import get_client
from pipeline_console.dependencies import get_display_timezone
from pipeline_console.exceptions import PipelineFetchError
from pipeline_console.runs.board import PipelineBoard
from pipeline_console.schemas.schemas import GetPipelinesResponse
from pipeline_console.schemas.schemas import RunHistoryEntry
from pipeline_console.schemas.schemas import RunHistoryQueryParams
from pipeline_console.schemas.schemas import RunHistoryResponse
from pipeline_console.schemas.schemas import RunPipelineResponse
from pipeline_console.schemas.schemas import SetScheduleStatusResponse

ROUTER_PIPELINES = APIRouter(tags=["Pipelines"])


def _list_response(board: PipelineBoard, tz: tzinfo, message: str) -> GetPipelinesResponse:
    rows = board.rows(tz=tz)
    return GetPipelinesResponse(Message=message, Pipeline=rows, polling=board.poller.running)


@ROUTER_PIPELINES.get(
    "/pipelines",
    responses={
        status.HTTP_200_OK: {"description": "Pipelines with their schedule, run status and last run"},
        status.HTTP_502_BAD_GATEWAY: {"description": "The orchestrator returned an error"},
        status.HTTP_503_SERVICE_UNAVAILABLE: {"description": "The orchestrator could not be reached"},
    },
)
async def list_pipelines(
    request: Request,
    response: Response,
    board: PipelineBoard = Depends(get_board),
    tz: tzinfo = Depends(get_display_timezone),
) -> GetPipelinesResponse:
    """
    List pipelines as rendered rows.

    Fetches the list from the orchestrator on every call, except while the lock
    poller is running and already re-fetching it every interval.
    """
    if not board.poller.running:
        logger.info("Loading pipelines", method=request.method, path=request.url.path)
        await board.load()

    result = _list_response(board, tz, f"Fetched {len(board.pipelines)} pipelines!")
    response.status_code = status.HTTP_200_OK
    return result


@ROUTER_PIPELINES.post(
    "/pipelines/refresh",
    responses={
        status.HTTP_200_OK: {"description": "Pipeline list re-fetched from the orchestrator"},
    },
)
async def refresh_pipelines(
    request: Request,
    response: Response,
    board: PipelineBoard = Depends(get_board),
    tz: tzinfo = Depends(get_display_timezone),
) -> GetPipelinesResponse:
    """Re-fetch the pipeline list now (and start polling if any pipeline is busy)."""
    logger.info("Refreshing pipelines", method=request.method, path=request.url.path)
    await board.load()

    response.status_code = status.HTTP_200_OK
    return _list_response(board, tz, "Pipelines refreshed!")


@ROUTER_PIPELINES.post(
    "/pipelines/{deployment_id}/run",
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        status.HTTP_202_ACCEPTED: {
            "description": "Flow run initiated",
            "content": {
                "application/json": {
                    "example": {"message": "Flow run initiated successfully", "deployment_id": "dep-1"}
                }
            },
        },
        status.HTTP_404_NOT_FOUND: {"description": "Pipeline not found"},
        status.HTTP_409_CONFLICT: {"description": "A run is already in progress for this pipeline"},
        status.HTTP_502_BAD_GATEWAY: {"description": "The orchestrator failed to start the run"},
    },
)
async def run_pipeline(
    request: Request,
    response: Response,
    deployment_id: str = Path(..., description="Deployment id of the pipeline to run"),
    board: PipelineBoard = Depends(get_board),
) -> RunPipelineResponse:
    """
    Trigger a run.

    The pipeline is shown as locked straight away and stays disabled until the
    orchestrator's own lock has come and gone.
    """
    logger.info("Run requested", deployment_id=deployment_id, method=request.method, path=request.url.path)

    if not board.loaded:
        await board.load()

    await board.trigger(deployment_id)

    response.status_code = status.HTTP_202_ACCEPTED
    return RunPipelineResponse(message="Flow run initiated successfully", deployment_id=deployment_id)


@ROUTER_PIPELINES.post(
    "/pipelines/{deployment_id}/schedule/{state}",
    responses={
        status.HTTP_200_OK: {"description": "Schedule turned on or off"},
        status.HTTP_502_BAD_GATEWAY: {"description": "The orchestrator rejected the change"},
    },
)
async def set_schedule_status(
    request: Request,
    response: Response,
    deployment_id: str = Path(..., description="Deployment id of the pipeline"),
    state: Literal["active", "inactive"] = Path(..., description="New schedule state"),
    board: PipelineBoard = Depends(get_board),
    client: OrchestratorClient = Depends(get_client),
) -> SetScheduleStatusResponse:
    """Turn a pipeline's schedule on or off."""
    active = state == "active"
    await client.set_schedule_status(deployment_id, active)

    try:
        await board.refresh()
    except PipelineFetchError as e:
        logger.warning("Refresh after schedule change failed", deployment_id=deployment_id, error=str(e))

    logger.success("Schedule status updated", deployment_id=deployment_id, state=state, path=request.url.path)
    response.status_code = status.HTTP_200_OK
    return SetScheduleStatusResponse(
        message=f"Schedule set to {state}",
        deployment_id=deployment_id,
        active=active,
    )


@ROUTER_PIPELINES.get(
    "/pipelines/{deployment_id}/history",
    responses={
        status.HTTP_200_OK: {"description": "Past flow runs, newest first"},
    },
)
async def get_run_history(
    request: Request,
    response: Response,
    deployment_id: str = Path(..., description="Deployment id of the pipeline"),
    query_params: RunHistoryQueryParams = Depends(),
    client: OrchestratorClient = Depends(get_client),
) -> RunHistoryResponse:
    """Flow run history of a pipeline, paged with limit/offset, with each run's duration."""
    logger.info(
        "Fetching run history",
        deployment_id=deployment_id,
        limit=query_params.limit,
        offset=query_params.offset,
        path=request.url.path,
    )
    runs = await client.get_run_history(deployment_id, limit=query_params.limit, offset=query_params.offset)

    response.status_code = status.HTTP_200_OK
    return RunHistoryResponse(deployment_id=deployment_id, runs=[RunHistoryEntry.from_run(run) for run in runs])
