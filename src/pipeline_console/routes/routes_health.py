"""Health check endpoint for load balancers and uptime probes."""

from datetime import datetime
from datetime import timezone

from fastapi import APIRouter
from fastapi import Depends
from fastapi import status
from loguru import logger

from pipeline_console.dependencies import get_board
from pipeline_console.dependencies import get_settings
from pipeline_console.runs.board import PipelineBoard
from pipeline_console.schemas.schemas import HealthResponse
from pipeline_console.settings import Settings

SERVICE_NAME = "Pipeline Console API"
SERVICE_VERSION = "v1"

ROUTER_HEALTH = APIRouter(tags=["Health"])


@ROUTER_HEALTH.get(
    "/health",
    summary="Health check endpoint",
    responses={
        status.HTTP_200_OK: {"description": "Application is up; the orchestrator is not contacted"},
    },
)
async def health_check(
    settings: Settings = Depends(get_settings),
    board: PipelineBoard = Depends(get_board),
) -> HealthResponse:
    """Report service metadata and whether the lock poller is currently running."""
    logger.debug("Health check requested")
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        orchestrator_url=settings.orchestrator_base_url,
        polling=board.poller.running,
    )
