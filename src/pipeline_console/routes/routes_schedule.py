"""Schedule API routes: describe, parse and encode the UTC cron strings stored on pipelines."""

from datetime import tzinfo
from typing import Optional

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Query
from fastapi import Request
from fastapi import Response
from fastapi import status
from loguru import logger

from pipeline_console.enums import ScheduleKind
from pipeline_console.exceptions import InvalidFormat
from pipeline_console.schedule import cron_codec
from pipeline_console.schedule.day_shifter import cron_to_local_tz
from pipeline_console.schedule.formatter import describe
from pipeline_console.schedule.formatter import describe_schedule
from pipeline_console.schedule.formatter import schedule_form_values
from pipeline_console.schedule.time_codec import format_utc_pair
from pipeline_console.schedule.timezones import display_timezone
from pipeline_console.schedule.timezones import resolve_tz
from pipeline_console.schemas.schemas import DescribeScheduleResponse
from pipeline_console.schemas.schemas import EncodeScheduleRequest
from pipeline_console.schemas.schemas import EncodeScheduleResponse
from pipeline_console.schemas.schemas import LocalCronResponse
from pipeline_console.schemas.schemas import ParseScheduleResponse

ROUTER_SCHEDULE = APIRouter(tags=["Schedule"])

CRON_QUERY_DESCRIPTION = "UTC cron expression as stored on the pipeline (5 fields, or 6 with leading seconds)"


def get_request_timezone(
    tz: Optional[str] = Query(
        default=None,
        description="Timezone to render in (IANA name, UTC or +HH:MM). Defaults to the configured display timezone",
        examples=["Asia/Kolkata"],
    ),
) -> tzinfo:
    """Resolve the tz query parameter, falling back to the display timezone."""
    if tz is None:
        return display_timezone()
    try:
        return resolve_tz(tz)
    except ValueError as e:
        raise InvalidFormat(str(e)) from e


@ROUTER_SCHEDULE.get(
    "/schedules/describe",
    responses={
        status.HTTP_200_OK: {
            "description": "Human readable schedule in local time",
            "content": {
                "application/json": {"example": {"cron": "0 9 * * 1,3", "description": "Monday, Wednesday at 9:00 AM"}}
            },
        },
    },
)
async def describe_cron(
    request: Request,
    response: Response,
    cron: Optional[str] = Query(default=None, description=CRON_QUERY_DESCRIPTION),
    tz: tzinfo = Depends(get_request_timezone),
) -> DescribeScheduleResponse:
    """Describe a stored cron, e.g. "Daily at 9:00 AM". Missing or empty cron is "Manual"."""
    description = describe(cron, tz=tz)
    logger.debug("Described schedule", cron=cron, description=description, path=request.url.path)

    response.status_code = status.HTTP_200_OK
    return DescribeScheduleResponse(cron=cron, description=description)


@ROUTER_SCHEDULE.get(
    "/schedules/parse",
    responses={
        status.HTTP_200_OK: {"description": "Parsed schedule plus the form values shown when editing it"},
    },
)
async def parse_cron(
    request: Request,
    response: Response,
    cron: Optional[str] = Query(default=None, description=CRON_QUERY_DESCRIPTION),
    tz: tzinfo = Depends(get_request_timezone),
) -> ParseScheduleResponse:
    """
    Parse a stored cron into a schedule.

    Never fails: anything that is not a daily or weekly cron comes back as manual.
    """
    values = schedule_form_values(cron, tz=tz)
    schedule = values["schedule"]
    utc_time = format_utc_pair(schedule.time_of_day) if values["kind"] != ScheduleKind.MANUAL else None
    logger.debug("Parsed schedule", cron=cron, kind=values["kind"].value, path=request.url.path)

    response.status_code = status.HTTP_200_OK
    return ParseScheduleResponse(
        cron=cron,
        schedule=schedule,
        kind=values["kind"],
        days_of_week=values["days_of_week"],
        local_time=values["local_time"] or None,
        utc_time=utc_time,
        description=describe(cron, tz=tz),
    )


@ROUTER_SCHEDULE.post(
    "/schedules/encode",
    responses={
        status.HTTP_200_OK: {
            "description": "UTC cron expression to store on the pipeline",
            "content": {
                "application/json": {
                    "example": {
                        "cron": "30 3 * * 1,3",
                        "schedule": {
                            "kind": "weekly",
                            "time_of_day": {"hour": 3, "minute": 30},
                            "days_of_week": [1, 3],
                        },
                        "description": "Monday, Wednesday at 9:00 AM",
                    }
                }
            },
        },
        status.HTTP_400_BAD_REQUEST: {"description": "Malformed local time or missing weekdays"},
    },
)
async def encode_schedule(
    request: Request,
    response: Response,
    body: EncodeScheduleRequest,
    tz: tzinfo = Depends(get_request_timezone),
) -> EncodeScheduleResponse:
    """Convert schedule form values (local time) into the UTC cron stored on the pipeline."""
    schedule = cron_codec.build_schedule(
        body.kind,
        days_of_week=[int(day) for day in body.days_of_week],
        local_time=body.local_time,
        tz=tz,
    )
    cron = cron_codec.encode(schedule)
    logger.info("Encoded schedule", kind=body.kind.value, cron=cron, path=request.url.path)

    response.status_code = status.HTTP_200_OK
    return EncodeScheduleResponse(cron=cron, schedule=schedule, description=describe_schedule(schedule, tz=tz))


@ROUTER_SCHEDULE.get(
    "/schedules/local",
    responses={
        status.HTTP_200_OK: {
            "description": "Cron rewritten in local time (hour, minute and weekdays)",
            "content": {
                "application/json": {"example": {"cron": "0 22 * * 3", "local_cron": "30 3 * * 4", "timezone": "Asia/Kolkata"}}
            },
        },
    },
)
async def local_cron(
    request: Request,
    response: Response,
    cron: str = Query(..., description=CRON_QUERY_DESCRIPTION),
    tz: tzinfo = Depends(get_request_timezone),
) -> LocalCronResponse:
    """Rewrite a UTC cron into local time; unsupported crons come back unchanged and malformed ones empty."""
    result = cron_to_local_tz(cron, tz=tz)
    logger.debug("Converted cron to local timezone", cron=cron, local_cron=result, path=request.url.path)

    response.status_code = status.HTTP_200_OK
    return LocalCronResponse(
        cron=cron,
        local_cron=result,
        timezone=str(tz),
    )
