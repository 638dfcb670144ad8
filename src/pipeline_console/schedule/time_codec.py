"""
Time Codec

Converts a schedule's time of day between UTC (how cron strings are stored)
and the viewer's local wall clock (how the pipeline form displays it).
Both directions apply the one UTC offset in effect at the current instant,
so converting there and back always returns the original time.
"""

import re
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from datetime import tzinfo
from typing import Optional
from typing import Tuple

from pipeline_console.exceptions import InvalidFormat
from pipeline_console.models.schedule import TimeOfDay
from pipeline_console.schedule.timezones import display_timezone
from pipeline_console.schedule.timezones import utc_now

LOCAL_TIME_PATTERN = re.compile(r"([0-9]{1,2}):([0-9]{2})")
UTC_PAIR_PATTERN = re.compile(r"([0-9]{1,2}) +([0-9]{1,2})")


def _validate_hour_minute(hour: int, minute: int) -> None:
    if isinstance(hour, bool) or not isinstance(hour, int) or not 0 <= hour <= 23:
        raise InvalidFormat(f"Hour must be an integer between 0 and 23, got {hour!r}")
    if isinstance(minute, bool) or not isinstance(minute, int) or not 0 <= minute <= 59:
        raise InvalidFormat(f"Minute must be an integer between 0 and 59, got {minute!r}")


def _as_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return utc_now()
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def utc_instant(hour: int, minute: int, now: Optional[datetime] = None) -> datetime:
    """Today's (UTC calendar day) instant at hour:minute UTC."""
    _validate_hour_minute(hour, minute)
    return _as_utc(now).replace(hour=hour, minute=minute, second=0, microsecond=0)


def utc_offset(tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> timedelta:
    """UTC offset of tz (default: display timezone) at the instant now."""
    return _as_utc(now).astimezone(tz or display_timezone()).utcoffset()


def utc_to_local_datetime(
    hour: int,
    minute: int,
    tz: Optional[tzinfo] = None,
    now: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """
    Convert hour:minute UTC to local wall-clock time.

    Returns:
        (utc_datetime, local_datetime) for the same instant, so callers can compare calendar days
    """
    utc_dt = utc_instant(hour, minute, now)
    return utc_dt, utc_dt.astimezone(timezone(utc_offset(tz, now)))


def utc_to_local(hour: int, minute: int, tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> str:
    """
    Convert a UTC hour/minute to a local "HH:MM" string.

    Args:
        hour: UTC hour (0-23)
        minute: UTC minute (0-59)
        tz: Local timezone (default: configured display timezone)
        now: Instant whose UTC offset applies (default: current time)

    Returns:
        Zero-padded 24-hour local time, e.g. "03:30"

    Raises:
        InvalidFormat: If hour or minute is out of range
    """
    _, local_dt = utc_to_local_datetime(hour, minute, tz, now)
    return f"{local_dt.hour:02d}:{local_dt.minute:02d}"


def local_to_utc(local_time: str, tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> Tuple[int, int]:
    """
    Convert a local "HH:MM" string to a UTC (hour, minute) pair.

    Raises:
        InvalidFormat: If the string is not "H:MM"/"HH:MM" or is out of range ("25:00", "12:60", "12-30")
    """
    if not isinstance(local_time, str):
        raise InvalidFormat(f"Local time must be a string in HH:MM format, got {local_time!r}")

    match = LOCAL_TIME_PATTERN.fullmatch(local_time)
    if not match:
        raise InvalidFormat(f"Local time must be in HH:MM format, got {local_time!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise InvalidFormat(f"Local time out of range: {local_time!r}")

    utc_dt = _as_utc(now).replace(hour=hour, minute=minute, second=0, microsecond=0) - utc_offset(tz, now)
    return utc_dt.hour, utc_dt.minute


def parse_utc_pair(value: str) -> TimeOfDay:
    """
    Parse the form's stored UTC time "H M" (hours then minutes, space separated).

    Raises:
        InvalidFormat: If the pair is malformed or out of range
    """
    match = UTC_PAIR_PATTERN.fullmatch(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidFormat(f"UTC time must be in 'H M' format, got {value!r}")

    hour, minute = int(match.group(1)), int(match.group(2))
    _validate_hour_minute(hour, minute)
    return TimeOfDay(hour=hour, minute=minute)


def format_utc_pair(time_of_day: TimeOfDay) -> str:
    """Render a UTC time of day as the form's "H M" pair (no zero padding)."""
    return f"{time_of_day.hour} {time_of_day.minute}"
