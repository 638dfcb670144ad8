from contextlib import asynccontextmanager
from textwrap import dedent

import pydantic
from fastapi import FastAPI
from fastapi.routing import APIRoute
from loguru import logger

from pipeline_console.client.orchestrator_client import OrchestratorClient
from pipeline_console.errors import handle_broad_exceptions
from pipeline_console.errors import handle_invalid_format
from pipeline_console.errors import handle_orchestrator_errors
from pipeline_console.errors import handle_pipeline_fetch_error
from pipeline_console.errors import handle_pipeline_not_found
from pipeline_console.errors import handle_pydantic_validation_errors
from pipeline_console.errors import handle_run_already_in_progress
from pipeline_console.errors import handle_run_trigger_error
from pipeline_console.exceptions import InvalidFormat
from pipeline_console.exceptions import OrchestratorError
from pipeline_console.exceptions import PipelineFetchError
from pipeline_console.exceptions import PipelineNotFound
from pipeline_console.exceptions import RunAlreadyInProgress
from pipeline_console.exceptions import RunTriggerError
from pipeline_console.monitoring.logger import configure_logger
from pipeline_console.monitoring.request_context import RequestContextMiddleware
from pipeline_console.routes.routes_health import ROUTER_HEALTH
from pipeline_console.routes.routes_pipelines import ROUTER_PIPELINES
from pipeline_console.routes.routes_schedule import ROUTER_SCHEDULE
from pipeline_console.runs.board import PipelineBoard
from pipeline_console.schedule.timezones import set_display_timezone
from pipeline_console.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Stop the lock poller and close the orchestrator connection pool on shutdown."""
    logger.info("Pipeline console started", polling_enabled=app.state.board.auto_poll)
    yield
    await app.state.board.aclose()
    await app.state.client.aclose()
    logger.info("Pipeline console stopped")


def create_app(settings: Settings | None = None, client: OrchestratorClient | None = None) -> FastAPI:
    """Create a FastAPI application.

    Configuration is loaded from environment variables (or a .env file) via pydantic-settings.
    A pre-built client can be passed in, e.g. one wired to an httpx.MockTransport.
    """
    settings = settings or Settings()

    configure_logger(
        level=settings.log_level,
        json_logs=settings.log_json,
        log_file=settings.log_file,
    )
    set_display_timezone(settings.display_timezone)

    logger.info(
        "Configuration loaded successfully",
        orchestrator_url=settings.orchestrator_base_url,
        api_token_set=bool(settings.orchestrator_api_token),
        org_slug=settings.orchestrator_org_slug,
        poll_interval_ms=settings.poll_interval_ms,
        display_timezone=settings.display_timezone,
    )

    client = client or OrchestratorClient(
        base_url=settings.orchestrator_base_url,
        api_token=settings.orchestrator_api_token,
        org_slug=settings.orchestrator_org_slug,
        timeout=settings.request_timeout_seconds,
    )
    board = PipelineBoard(
        fetch_pipelines=client.list_pipelines,
        trigger_run=client.trigger_run,
        interval_ms=settings.poll_interval_ms,
        auto_poll=settings.enable_background_polling,
    )

    app = FastAPI(
        title="Pipeline Console API",
        version="v1",
        description=dedent(
            """
        Pipeline list, run triggers and schedules for the orchestration backend.

        | Area | Notes |
        | --- | --- |
        | Pipelines | Rendered rows with run status; runs are tracked optimistically until the server's lock settles |
        | Schedules | UTC cron strings described and edited in local time |
        """
        ),
        lifespan=lifespan,
        generate_unique_id_function=custom_generate_unique_id,
        swagger_ui_parameters={
            "defaultModelsExpandDepth": -1,  # Hide schemas section
            "defaultModelExpandDepth": 1,  # Keep models collapsed if shown
        },
    )
    app.state.settings = settings
    app.state.client = client
    app.state.board = board

    # Add request context middleware for tracking who/where requests come from
    app.add_middleware(RequestContextMiddleware)
    app.include_router(ROUTER_HEALTH, prefix="/api")
    app.include_router(ROUTER_PIPELINES, prefix="/api")
    app.include_router(ROUTER_SCHEDULE, prefix="/api")

    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(exc_class_or_status_code=InvalidFormat, handler=handle_invalid_format)
    app.add_exception_handler(exc_class_or_status_code=PipelineNotFound, handler=handle_pipeline_not_found)
    app.add_exception_handler(exc_class_or_status_code=RunAlreadyInProgress, handler=handle_run_already_in_progress)
    app.add_exception_handler(exc_class_or_status_code=RunTriggerError, handler=handle_run_trigger_error)
    app.add_exception_handler(exc_class_or_status_code=PipelineFetchError, handler=handle_pipeline_fetch_error)
    app.add_exception_handler(exc_class_or_status_code=OrchestratorError, handler=handle_orchestrator_errors)

    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name
