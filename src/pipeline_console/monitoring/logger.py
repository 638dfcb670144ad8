"""
Loguru setup for the console.

Every log call passes context as keyword extras (deployment_id, tick, ...).
The plain stdout sink renders those extras as one JSON blob per line; the JSON
sink and the optional file sink serialize whole records.
"""

import json
import logging
import sys
import traceback
from typing import Optional

import loguru
from fastapi import Request
from fastapi import Response
from loguru import logger

STDOUT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<bold><white>{message}</white></bold> | <dim>{extra_json}</dim> {stacktrace}\n"
)

LOG_FILE_ROTATION = "10 MB"
LOG_FILE_RETENTION = 7

# stdlib loggers that are too chatty at INFO for a polling client
NOISY_LIBRARY_LOGGERS = ("httpx", "httpcore")


def configure_logger(level: str = "INFO", json_logs: bool = False, log_file: Optional[str] = None):
    """
    Replace all loguru sinks with the console's stdout sink (and optional file sink).

    Called with defaults on package import, then again by create_app() with the
    configured level and sinks.

    Args:
        level: Minimum level for every sink
        json_logs: Serialize stdout records as JSON instead of the colored format
        log_file: Optional path for a rotating, serialized file sink
    """
    for name in NOISY_LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.remove()

    if json_logs:
        logger.add(sink=sys.stdout, level=level, serialize=True, diagnose=False)
    else:
        logger.add(sink=sys.stdout, level=level, diagnose=False, format=format_stdout_record)

    if log_file:
        _add_file_sink(log_file, level)


def _add_file_sink(log_file: str, level: str) -> None:
    try:
        logger.add(
            sink=log_file,
            level=level,
            rotation=LOG_FILE_ROTATION,
            retention=LOG_FILE_RETENTION,
            serialize=True,
            enqueue=True,
        )
    except (OSError, ValueError) as e:
        logger.warning("File logging disabled", log_file=log_file, error=str(e))
        return
    logger.info("File logging enabled", log_file=log_file)


def format_stdout_record(record: "loguru.Record") -> str:
    r"""
    Format callable for the plain stdout sink.

    The extras dict is rendered as one JSON string under extra_json, and any
    traceback is joined with \r so log collectors keep it as one event.
    record["extra"] itself stays a dict for the other sinks.
    """
    record["extra_json"] = json.dumps(record["extra"], default=str) if record["extra"] else ""

    exception = record["exception"]
    record["stacktrace"] = (
        get_formatted_stacktrace(exception, replace_newline_character_with_carriage_return=True) if exception else ""
    )
    return STDOUT_FORMAT


def get_formatted_stacktrace(loguru_record_exception, replace_newline_character_with_carriage_return: bool) -> str:
    exc_type, exc_value, exc_traceback = loguru_record_exception
    stacktrace = "".join(traceback.format_exception(exc_type, exc_value, exc_traceback))
    if replace_newline_character_with_carriage_return:
        return stacktrace.replace("\n", "\r")
    return stacktrace


def log_request_info(request: Request):
    """Debug-log an incoming request (method, path, query and path params, client)."""
    logger.debug(
        "Request received",
        http_request={
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params.items()),
            "path_params": dict(request.path_params.items()),
            "client": str(request.client),
        },
    )


def log_response_info(response: Response):
    """Debug-log an outgoing error response (status and headers)."""
    logger.debug(
        "Response sent",
        http_response={"status_code": response.status_code, "headers": dict(response.headers.items())},
    )
