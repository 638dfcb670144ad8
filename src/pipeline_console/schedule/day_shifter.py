"""
Timezone Day Shifter

Rewrites a UTC cron string into the viewer's local time. When the local wall
clock falls on a different calendar day than the UTC time (a local midnight is
crossed), every day-of-week token is shifted by that day so the weekday shown
matches the day the run actually happens locally.
"""

from datetime import datetime
from datetime import tzinfo
from typing import Optional

from loguru import logger

from pipeline_console.exceptions import InvalidFormat
from pipeline_console.schedule.cron_codec import NUMBER_PATTERN
from pipeline_console.schedule.cron_codec import split_cron_fields
from pipeline_console.schedule.time_codec import utc_to_local_datetime


def normalize_day_shift(local_day: int, utc_day: int) -> int:
    """
    Day delta between the local and UTC calendar days, folded into -1, 0 or +1.

    Day-of-month differences larger than one only happen across a month end
    (local 1st vs UTC 31st is one day forward, local 31st vs UTC 1st one day back).
    """
    shift = local_day - utc_day
    if shift > 1:
        return -1
    if shift < -1:
        return 1
    return shift


def _shift_token(token: str, day_shift: int) -> str:
    if not token.isdigit():
        return token
    return str((int(token) + day_shift + 7) % 7)


def shift_days_of_week(dow: str, day_shift: int) -> str:
    """
    Shift every day in a day-of-week field by day_shift, wrapping around the week.

    Lists shift member by member, ranges shift both endpoints and "*" is left as is.
    """
    if dow == "*" or day_shift == 0:
        return dow

    shifted = []
    for token in dow.split(","):
        if "-" in token:
            start, _, end = token.partition("-")
            shifted.append(f"{_shift_token(start, day_shift)}-{_shift_token(end, day_shift)}")
        else:
            shifted.append(_shift_token(token, day_shift))
    return ",".join(shifted)


def cron_to_local_tz(expression: Optional[str], tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> str:
    """
    Convert a UTC cron string to the equivalent cron in local time.

    Never raises:
        - empty input or a field count other than 5 (after dropping seconds) -> ""
        - day-of-month or month other than "*" -> expression returned unchanged
        - hour/minute this codec cannot read -> expression returned unchanged

    Returns:
        "{local_minute} {local_hour} * * {shifted_dow}"
    """
    fields = split_cron_fields(expression)
    if not fields:
        return ""

    minute, hour, dom, month, dow = fields
    # TODO: convert monthly schedules once the pipeline form can produce them
    if dom != "*" or month != "*":
        logger.warning("Expected day of month and month to be '*', leaving cron unshifted", cron=expression)
        return expression

    if not NUMBER_PATTERN.match(minute) or not NUMBER_PATTERN.match(hour):
        logger.warning("Cron hour/minute are not plain numbers, leaving cron unshifted", cron=expression)
        return expression

    try:
        utc_dt, local_dt = utc_to_local_datetime(int(hour), int(minute), tz=tz, now=now)
    except InvalidFormat as e:
        logger.warning("Error converting cron expression to local timezone", cron=expression, error=str(e))
        return expression

    day_shift = normalize_day_shift(local_dt.day, utc_dt.day)
    return f"{local_dt.minute} {local_dt.hour} {dom} {month} {shift_days_of_week(dow, day_shift)}"
