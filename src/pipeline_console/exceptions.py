"""Exceptions raised by the schedule codecs, the run trigger and the orchestrator client."""

from typing import Optional


class PipelineConsoleError(Exception):
    """Base class for every error raised by pipeline_console."""


class InvalidFormat(PipelineConsoleError, ValueError):
    """A time value is out of range or does not match the expected shape."""


class OrchestratorError(PipelineConsoleError):
    """
    The orchestrator backend rejected a request or could not be reached.

    Attributes:
        status_code: HTTP status returned by the backend, None for connection-level failures
        detail: Error detail extracted from the response body (or the transport error message)
    """

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail or message

    @property
    def is_connection_error(self) -> bool:
        return self.status_code is None


class PipelineFetchError(PipelineConsoleError):
    """Fetching the pipeline list failed."""


class RunTriggerError(PipelineConsoleError):
    """Triggering a pipeline run failed; the optimistic flag has been reverted."""

    def __init__(self, deployment_id: str, message: str):
        super().__init__(message)
        self.deployment_id = deployment_id


class RunAlreadyInProgress(PipelineConsoleError):
    """A run was requested while the pipeline's run control is disabled."""

    def __init__(self, deployment_id: str):
        super().__init__(f"A run is already in progress for pipeline {deployment_id}")
        self.deployment_id = deployment_id


class PipelineNotFound(PipelineConsoleError):
    """The deployment id is not part of the currently loaded pipeline list."""

    def __init__(self, deployment_id: str):
        super().__init__(f"Pipeline not found: {deployment_id}")
        self.deployment_id = deployment_id
