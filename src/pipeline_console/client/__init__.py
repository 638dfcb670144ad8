"""HTTP client for the orchestrator backend."""

from pipeline_console.client.orchestrator_client import OrchestratorClient

__all__ = [
    "OrchestratorClient",
]
