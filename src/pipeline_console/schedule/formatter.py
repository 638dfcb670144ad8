"""Human readable schedule descriptions for the pipeline list."""

from datetime import datetime
from datetime import tzinfo
from typing import Any
from typing import Dict
from typing import List
from typing import Optional

from loguru import logger

from pipeline_console.enums import WEEKDAYS
from pipeline_console.enums import ScheduleKind
from pipeline_console.models.schedule import Schedule
from pipeline_console.schedule import cron_codec
from pipeline_console.schedule.day_shifter import cron_to_local_tz
from pipeline_console.schedule.time_codec import utc_to_local

MANUAL_LABEL = "Manual"


def format_12_hour(hour: int, minute: int) -> str:
    """9, 5 -> "9:05 AM"; 0, 0 -> "12:00 AM"; 14, 30 -> "2:30 PM"."""
    ampm = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{minute:02d} {ampm}"


def weekday_name(token: str) -> str:
    """Name for a day-of-week token; ranges name both ends, unknown tokens render as is."""
    if "-" in token:
        start, _, end = token.partition("-")
        return f"{WEEKDAYS.get(start, start)}-{WEEKDAYS.get(end, end)}"
    return WEEKDAYS.get(token, token)


def describe(cron: Optional[str], tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> str:
    """
    Describe a stored UTC cron in the viewer's local time.

    Examples:
        None / ""           -> "Manual"
        "0 9 * * *"         -> "Daily at 9:00 AM" (in UTC)
        "30 14 * * 1,3"     -> "Monday, Wednesday at 2:30 PM" (in UTC)
    """
    if not cron:
        return MANUAL_LABEL

    local_cron = cron_to_local_tz(cron, tz=tz, now=now)
    if not local_cron:
        return MANUAL_LABEL

    parts = local_cron.split()
    if len(parts) != 5:
        return cron

    minutes, hours, _, _, day_of_week = parts
    try:
        time_str = format_12_hour(int(hours), int(minutes))
    except ValueError:
        logger.warning("Could not convert cron to a human readable format", cron=cron)
        return cron

    if day_of_week == "*":
        return f"Daily at {time_str}"

    days = [weekday_name(token) for token in day_of_week.split(",")]
    return f"{', '.join(days)} at {time_str}"


def describe_schedule(schedule: Schedule, tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> str:
    """Describe an already parsed Schedule."""
    return describe(cron_codec.encode(schedule), tz=tz, now=now)


def schedule_form_values(cron: Optional[str], tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Values the pipeline form is populated with when editing a pipeline.

    Days stay in UTC cron numbering (what gets saved back); the time is shown in local time.
    """
    schedule = cron_codec.parse(cron)
    days: List[str] = []
    local_time = ""
    if schedule.kind != ScheduleKind.MANUAL:
        local_time = utc_to_local(schedule.time_of_day.hour, schedule.time_of_day.minute, tz=tz, now=now)
    if schedule.kind == ScheduleKind.WEEKLY:
        days = [str(day) for day in schedule.days_of_week]

    return {
        "schedule": schedule,
        "kind": ScheduleKind(schedule.kind),
        "days_of_week": days,
        "local_time": local_time,
    }
