"""
Cron Codec

Parses the UTC cron strings stored on pipelines into a Schedule and encodes
a Schedule back. Only the shapes the pipeline form produces are understood:

    manual  -> ""
    daily   -> "{minute} {hour} * * *"
    weekly  -> "{minute} {hour} * * {d1,d2,...}"

A 6-field cron with a leading seconds field is accepted; the seconds are discarded.
"""

import re
from datetime import datetime
from datetime import tzinfo
from typing import Iterable
from typing import List
from typing import Optional
from typing import Sequence
from typing import Union

from loguru import logger
from pydantic import ValidationError

from pipeline_console.enums import ScheduleKind
from pipeline_console.exceptions import InvalidFormat
from pipeline_console.models.schedule import DailySchedule
from pipeline_console.models.schedule import ManualSchedule
from pipeline_console.models.schedule import Schedule
from pipeline_console.models.schedule import TimeOfDay
from pipeline_console.models.schedule import WeeklySchedule
from pipeline_console.schedule.time_codec import local_to_utc
from pipeline_console.schedule.time_codec import parse_utc_pair

DOW_TOKEN_PATTERN = re.compile(r"^(\d)(?:-(\d))?$")
NUMBER_PATTERN = re.compile(r"^\d{1,2}$")

# Form default for a new schedule: 1:00 AM UTC, Monday
DEFAULT_UTC_TIME = "1 0"
DEFAULT_DAYS_OF_WEEK = ("1",)


def split_cron_fields(cron: Optional[str]) -> List[str]:
    """
    Split a cron string into its 5 standard fields.

    Returns an empty list for empty input or a field count other than 5 or 6.
    """
    if not cron or not cron.strip():
        return []

    fields = cron.split()
    if len(fields) == 6:
        fields = fields[1:]  # drop seconds
    if len(fields) != 5:
        return []
    return fields


def parse_days_of_week(dow: str) -> List[int]:
    """
    Expand a day-of-week field ("1,3,5", "1-5", "0,2-4") into weekday numbers.

    Raises:
        ValueError: If any token is not a 0-6 day or an ascending a-b range of days
    """
    days: List[int] = []
    for token in dow.split(","):
        match = DOW_TOKEN_PATTERN.match(token)
        if not match:
            raise ValueError(f"Unsupported day-of-week token: {token!r}")
        start = int(match.group(1))
        end = int(match.group(2)) if match.group(2) is not None else start
        if start > 6 or end > 6 or start > end:
            raise ValueError(f"Day-of-week token out of range: {token!r}")
        days.extend(range(start, end + 1))
    return days


def parse(cron: Optional[str]) -> Schedule:
    """
    Parse a UTC cron string into a Schedule.

    Never raises: empty input, a wrong field count or fields this codec does not
    understand all degrade to ManualSchedule. Day-of-month and month are not inspected.
    """
    fields = split_cron_fields(cron)
    if not fields:
        return ManualSchedule()

    minute, hour, _dom, _month, dow = fields
    if not NUMBER_PATTERN.match(minute) or not NUMBER_PATTERN.match(hour):
        logger.debug("Cron time fields are not plain numbers, treating as manual", cron=cron)
        return ManualSchedule()

    try:
        time_of_day = TimeOfDay(hour=int(hour), minute=int(minute))
        if dow == "*":
            return DailySchedule(time_of_day=time_of_day)
        return WeeklySchedule(time_of_day=time_of_day, days_of_week=tuple(parse_days_of_week(dow)))
    except (ValueError, ValidationError) as e:
        logger.debug("Unsupported cron expression, treating as manual", cron=cron, error=str(e))
        return ManualSchedule()


def _coerce_time(time_of_day: Union[TimeOfDay, str]) -> TimeOfDay:
    if isinstance(time_of_day, TimeOfDay):
        return time_of_day
    return parse_utc_pair(time_of_day)


def encode(schedule: Schedule, time_of_day: Optional[Union[TimeOfDay, str]] = None) -> str:
    """
    Encode a Schedule as a UTC cron string.

    Args:
        schedule: Schedule to encode
        time_of_day: Optional UTC time overriding the schedule's own, as TimeOfDay or the form's "H M" pair

    Returns:
        "" for manual, "{m} {h} * * *" for daily, "{m} {h} * * {days}" for weekly (days ascending)
    """
    if schedule.kind == ScheduleKind.MANUAL:
        return ""

    utc_time = _coerce_time(time_of_day) if time_of_day is not None else schedule.time_of_day

    if schedule.kind == ScheduleKind.DAILY:
        return f"{utc_time.minute} {utc_time.hour} * * *"

    days = ",".join(str(day) for day in sorted(schedule.days_of_week))
    return f"{utc_time.minute} {utc_time.hour} * * {days}"


def to_cron_expression(
    kind: Union[ScheduleKind, str],
    days_of_week: Sequence[Union[str, int]] = DEFAULT_DAYS_OF_WEEK,
    time_of_day: str = DEFAULT_UTC_TIME,
) -> str:
    """
    Build the cron string saved by the pipeline form.

    Unknown kinds fall back to daily. Weekly days are joined in the caller's order.

    Raises:
        InvalidFormat: If time_of_day is not a valid "H M" UTC pair
    """
    kind_value = kind.value if isinstance(kind, ScheduleKind) else str(kind)
    if kind_value == ScheduleKind.MANUAL.value:
        return ""

    utc_time = parse_utc_pair(time_of_day)
    if kind_value == ScheduleKind.WEEKLY.value:
        days = ",".join(str(day) for day in days_of_week)
        return f"{utc_time.minute} {utc_time.hour} * * {days}"
    return f"{utc_time.minute} {utc_time.hour} * * *"


def build_schedule(
    kind: Union[ScheduleKind, str],
    days_of_week: Iterable[int] = (),
    local_time: Optional[str] = None,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> Schedule:
    """
    Build a Schedule from pipeline form values entered in local time.

    Raises:
        InvalidFormat: If the kind is unknown, local_time is missing or malformed,
            or a weekly schedule has no valid days
    """
    try:
        kind = ScheduleKind(kind)
    except ValueError as e:
        raise InvalidFormat(f"Unknown schedule kind: {kind!r}") from e

    if kind == ScheduleKind.MANUAL:
        return ManualSchedule()

    if not local_time:
        raise InvalidFormat(f"A time of day is required for a {kind.value} schedule")

    hour, minute = local_to_utc(local_time, tz=tz, now=now)
    time_of_day = TimeOfDay(hour=hour, minute=minute)

    if kind == ScheduleKind.DAILY:
        return DailySchedule(time_of_day=time_of_day)

    days = tuple(days_of_week)
    try:
        return WeeklySchedule(time_of_day=time_of_day, days_of_week=days)
    except ValidationError as e:
        raise InvalidFormat(f"Invalid days of week for a weekly schedule: {list(days)}") from e
