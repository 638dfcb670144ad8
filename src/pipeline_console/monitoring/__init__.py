"""Monitoring package for logging and request context."""

from pipeline_console.monitoring.request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
]
