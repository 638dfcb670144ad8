"""Request context middleware for logging."""
import json
import time
import uuid
from typing import Any
from typing import Callable
from typing import Optional

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from pipeline_console.monitoring.logger import log_request_info

# Maximum size for request body logging
MAX_BODY_LOG_SIZE = 10000  # 10KB limit


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture request context and attach it to every log line of the request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Any:
        """
        Capture request context and add to logging.

        Captures:
        - Request ID (from X-Request-ID header or generated)
        - Request path and method
        - Request body (for POST/PUT/PATCH), stored on request.state for error handlers
        """
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request_path = f"{request.method} {request.url.path}"

        # Store in request state early so error handlers can access it
        request.state.request_body = None
        if request.method in ("POST", "PUT", "PATCH"):
            request.state.request_body = await self._get_request_body(request)

        with logger.contextualize(request_id=request_id, request_path=request_path):
            log_request_info(request)
            start_time = time.perf_counter()
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000

            logger.info(
                f"{request.method} {request.url.path} - {response.status_code}",
                event_type="http_request",
                status_code=response.status_code,
                response_time_ms=round(duration_ms, 2),
            )
            response.headers["X-Request-ID"] = request_id
            return response

    async def _get_request_body(self, request: Request) -> Optional[dict]:
        """
        Read the request body for logging.

        Returns:
            Parsed JSON body, a truncation marker for large bodies, or None if not JSON/empty
        """
        body = await request.body()
        if not body:
            return None

        if "application/json" not in request.headers.get("Content-Type", "").lower():
            return None

        if len(body) > MAX_BODY_LOG_SIZE:
            return {"_truncated": True, "_size": len(body)}

        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return {"_error": "Failed to parse request body", "_error_detail": str(e)}

