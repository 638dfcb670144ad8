"""FastAPI dependencies for accessing app state."""

from datetime import tzinfo

from fastapi import Request

from pipeline_console.client.orchestrator_client import OrchestratorClient
from pipeline_console.runs.board import PipelineBoard
from pipeline_console.schedule.timezones import display_timezone
from pipeline_console.settings import Settings


def get_settings(request: Request) -> Settings:
    """
    Get application settings from request state.

    Parameters
    ----------
    request : Request
        FastAPI request object

    Returns
    -------
    Settings
        Application settings instance
    """
    return request.app.state.settings


def get_client(request: Request) -> OrchestratorClient:
    """
    Get the orchestrator client created during application startup.

    Parameters
    ----------
    request : Request
        FastAPI request object

    Returns
    -------
    OrchestratorClient
        Shared client (one connection pool per application)
    """
    return request.app.state.client


def get_board(request: Request) -> PipelineBoard:
    """
    Get the pipeline board holding the pipeline list, run flags and poller.

    Parameters
    ----------
    request : Request
        FastAPI request object

    Returns
    -------
    PipelineBoard
        Application-wide pipeline board
    """
    return request.app.state.board


def get_display_timezone() -> tzinfo:
    """Timezone schedules are rendered in (from the display_timezone setting)."""
    return display_timezone()
