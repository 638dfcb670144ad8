"""
Orchestrator Client

Async HTTP client for the orchestrator backend's pipeline (flow) endpoints.
Every failure is raised as OrchestratorError: HTTP errors keep the status code
and the backend's "detail" message, transport errors have no status code.
"""

from typing import Any
from typing import Dict
from typing import List
from typing import Optional

import httpx
from loguru import logger
from pydantic import TypeAdapter
from pydantic import ValidationError

from pipeline_console.exceptions import OrchestratorError
from pipeline_console.models.pipeline import LastRunRecord
from pipeline_console.models.pipeline import Pipeline

ORG_HEADER = "x-dalgo-org"

FLOWS_PATH = "/api/prefect/v1/flows/"
FLOW_RUN_PATH = "/api/prefect/v1/flows/{deployment_id}/flow_run/"
SET_SCHEDULE_PATH = "/api/prefect/flows/{deployment_id}/set_schedule/{state}"
RUN_HISTORY_PATH = "/api/prefect/v1/flows/{deployment_id}/flow_runs/history"

_PIPELINE_LIST = TypeAdapter(List[Pipeline])
_RUN_LIST = TypeAdapter(List[LastRunRecord])


def _error_detail(response: httpx.Response) -> str:
    """Pull the backend's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class OrchestratorClient:
    """
    Client for the orchestrator's flow endpoints.

    Args:
        base_url: Orchestrator base URL, e.g. http://localhost:8002
        api_token: Bearer token sent with every request
        org_slug: Organization selected via the x-dalgo-org header
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        org_slug: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        if org_slug:
            headers[ORG_HEADER] = org_slug

        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(base_url=self.base_url, headers=headers, timeout=timeout, transport=transport)

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_detail(e.response)
            logger.warning(
                "Orchestrator request failed",
                method=method,
                path=path,
                status_code=e.response.status_code,
                detail=detail,
            )
            raise OrchestratorError(
                f"Orchestrator returned {e.response.status_code} for {method} {path}",
                status_code=e.response.status_code,
                detail=detail,
            ) from e
        except httpx.RequestError as e:
            logger.error("Could not reach orchestrator", method=method, path=path, error_type=type(e).__name__, error=str(e))
            raise OrchestratorError(f"Could not reach orchestrator at {self.base_url}: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise OrchestratorError(
                f"Orchestrator returned a non-JSON body for {method} {path}", status_code=response.status_code
            ) from e

    async def list_pipelines(self) -> List[Pipeline]:
        """GET the pipeline list."""
        data = await self._request("GET", FLOWS_PATH)
        try:
            pipelines = _PIPELINE_LIST.validate_python(data or [])
        except ValidationError as e:
            raise OrchestratorError(f"Unexpected pipeline list payload: {e.error_count()} validation errors") from e
        logger.debug("Fetched pipelines", count=len(pipelines))
        return pipelines

    async def trigger_run(self, deployment_id: str) -> Dict[str, Any]:
        """Start a flow run for a deployment."""
        logger.info("Triggering flow run", deployment_id=deployment_id)
        data = await self._request("POST", FLOW_RUN_PATH.format(deployment_id=deployment_id), json={})
        return data or {}

    async def set_schedule_status(self, deployment_id: str, active: bool) -> Dict[str, Any]:
        """Turn a deployment's schedule on or off."""
        state = "active" if active else "inactive"
        logger.info("Setting schedule status", deployment_id=deployment_id, state=state)
        data = await self._request(
            "POST", SET_SCHEDULE_PATH.format(deployment_id=deployment_id, state=state), json={}
        )
        return data or {}

    async def get_run_history(self, deployment_id: str, limit: int = 10, offset: int = 0) -> List[LastRunRecord]:
        """Past flow runs of a deployment, newest first."""
        data = await self._request(
            "GET",
            RUN_HISTORY_PATH.format(deployment_id=deployment_id),
            params={"limit": limit, "offset": offset},
        )
        try:
            return _RUN_LIST.validate_python(data or [])
        except ValidationError as e:
            raise OrchestratorError(f"Unexpected run history payload: {e.error_count()} validation errors") from e

    async def aclose(self) -> None:
        await self._http.aclose()
