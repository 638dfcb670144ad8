"""Error handling for the FastAPI application and the console's domain exceptions."""

from typing import Any
from typing import Dict

import pydantic
from fastapi import Request
from fastapi import status
from fastapi.responses import JSONResponse
from loguru import logger

from pipeline_console.exceptions import InvalidFormat
from pipeline_console.exceptions import OrchestratorError
from pipeline_console.exceptions import PipelineFetchError
from pipeline_console.exceptions import PipelineNotFound
from pipeline_console.exceptions import RunAlreadyInProgress
from pipeline_console.exceptions import RunTriggerError
from pipeline_console.monitoring.logger import log_response_info

__all__ = [
    "handle_broad_exceptions",
    "handle_invalid_format",
    "handle_orchestrator_errors",
    "handle_pipeline_fetch_error",
    "handle_pipeline_not_found",
    "handle_pydantic_validation_errors",
    "handle_run_already_in_progress",
    "handle_run_trigger_error",
]


def _error_response(
    request: Request,
    http_status: int,
    error_response: Dict[str, Any],
    message: str,
    exc: Exception,
    level: str = "WARNING",
    **extra,
) -> JSONResponse:
    """Log a handled error with request context and build its JSON response."""
    # Get request body from request state (set by RequestContextMiddleware)
    request_body = getattr(request.state, "request_body", None)

    # bind() keeps exception text containing braces out of str.format
    logger.bind(
        http_status=http_status,
        status_code=http_status,
        http_method=request.method,
        url_path=str(request.url.path),
        error_type=type(exc).__name__,
        error_message=str(exc),
        request_body=request_body,
        response_body=error_response,
        **extra,
    ).log(level, message)

    response = JSONResponse(status_code=http_status, content=error_response)
    log_response_info(response)
    return response


# fastapi docs on middlewares: https://fastapi.tiangolo.com/tutorial/middleware/
async def handle_broad_exceptions(request: Request, call_next):
    """Handle any exception that goes unhandled by a more specific exception handler."""
    try:
        return await call_next(request)
    except Exception as err:  # pylint: disable=broad-except
        error_response = {"detail": "Internal server error", "error_type": type(err).__name__}

        request_body = getattr(request.state, "request_body", None)

        logger.bind(
            http_status=500,
            status_code=500,
            http_method=request.method,
            url_path=str(request.url.path),
            error_type=type(err).__name__,
            error_message=str(err),
            request_body=request_body,
            response_body=error_response,
        ).opt(exception=err).error(f"Unhandled exception: {type(err).__name__}: {str(err)}")

        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_response,
        )
        log_response_info(response)
        return response


# fastapi docs on error handlers: https://fastapi.tiangolo.com/tutorial/handling-errors/
async def handle_pydantic_validation_errors(request: Request, exc: pydantic.ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors."""
    errors = exc.errors()
    error_response = {
        "detail": [
            {
                "msg": error["msg"],
                "input": error["input"],
            }
            for error in errors
        ]
    }

    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_CONTENT,
        error_response,
        f"Validation error: {len(errors)} validation errors",
        exc,
        validation_errors=errors,
    )


async def handle_invalid_format(request: Request, exc: InvalidFormat) -> JSONResponse:
    """A time or schedule value sent by the client is malformed -> 400."""
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        {"detail": str(exc), "error_type": "InvalidFormat"},
        f"Invalid format: {exc}",
        exc,
    )


async def handle_pipeline_not_found(request: Request, exc: PipelineNotFound) -> JSONResponse:
    return _error_response(
        request,
        status.HTTP_404_NOT_FOUND,
        {"detail": str(exc), "error_type": "PipelineNotFound"},
        f"Pipeline not found: {exc.deployment_id}",
        exc,
        deployment_id=exc.deployment_id,
    )


async def handle_run_already_in_progress(request: Request, exc: RunAlreadyInProgress) -> JSONResponse:
    """A run was requested while the run control is disabled -> 409."""
    return _error_response(
        request,
        status.HTTP_409_CONFLICT,
        {"detail": str(exc), "error_type": "RunAlreadyInProgress"},
        f"Rejected duplicate run request for pipeline {exc.deployment_id}",
        exc,
        deployment_id=exc.deployment_id,
    )


async def handle_run_trigger_error(request: Request, exc: RunTriggerError) -> JSONResponse:
    """
    The orchestrator refused or failed to start a run -> 502.

    The optimistic flag has already been reverted by the time this runs. A
    connection failure underneath maps to 503 like any other orchestrator error.
    """
    cause = exc.__cause__
    http_status = status.HTTP_502_BAD_GATEWAY
    if isinstance(cause, OrchestratorError) and cause.is_connection_error:
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE

    return _error_response(
        request,
        http_status,
        {"detail": str(exc), "error_type": "RunTriggerError", "deployment_id": exc.deployment_id},
        f"Run trigger failed for pipeline {exc.deployment_id}: {exc}",
        exc,
        level="ERROR",
        deployment_id=exc.deployment_id,
    )


async def handle_pipeline_fetch_error(request: Request, exc: PipelineFetchError) -> JSONResponse:
    cause = exc.__cause__
    if isinstance(cause, OrchestratorError):
        return await handle_orchestrator_errors(request, cause)

    return _error_response(
        request,
        status.HTTP_502_BAD_GATEWAY,
        {"detail": str(exc), "error_type": "PipelineFetchError"},
        f"Pipeline list fetch failed: {exc}",
        exc,
        level="ERROR",
    )


async def handle_orchestrator_errors(request: Request, exc: OrchestratorError) -> JSONResponse:
    """
    Map orchestrator failures to HTTP responses.

    - connection errors (no status code) -> 503 Service Unavailable
    - anything the orchestrator answered with an error -> 502 Bad Gateway
    """
    if exc.is_connection_error:
        http_status = status.HTTP_503_SERVICE_UNAVAILABLE
        detail = f"Unable to connect to the orchestrator: {exc.detail}"
    else:
        http_status = status.HTTP_502_BAD_GATEWAY
        detail = f"Orchestrator error: {exc.detail}"

    return _error_response(
        request,
        http_status,
        {"detail": detail, "error_type": "OrchestratorError", "upstream_status": exc.status_code},
        f"Orchestrator error: {exc}",
        exc,
        level="ERROR",
        upstream_status=exc.status_code,
    )
