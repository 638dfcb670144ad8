"""Timezone resolution for rendering UTC schedules in the viewer's local time."""

import re
from datetime import datetime
from datetime import timedelta
from datetime import timezone
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo
from zoneinfo import ZoneInfoNotFoundError

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

# Display timezone used when callers pass tz=None; set from Settings.display_timezone
_display_tz_name = "local"


def normalize_tz_name(name: Optional[str]) -> str:
    """
    Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Asia/Kolkata"
      - Fixed offsets: "+05:30", "+0530", "-05:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system"}:
        return "local"
    if low in {"utc", "z", "gmt"}:
        return "UTC"
    return s


def resolve_tz(name: Optional[str]) -> tzinfo:
    """
    Resolve a timezone name into a tzinfo.

    Raises:
        ValueError: for unknown zone names or out-of-range offsets
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return timezone.utc

    if tz_name == "local":
        return datetime.now().astimezone().tzinfo or timezone.utc

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh, mm = int(hh_s), int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return timezone(sign * timedelta(hours=hh, minutes=mm))

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def set_display_timezone(name: Optional[str]) -> None:
    """Set the timezone used by the schedule codecs when no tz is passed explicitly."""
    global _display_tz_name
    resolve_tz(name)  # fail fast on bad configuration
    _display_tz_name = normalize_tz_name(name)


def display_timezone() -> tzinfo:
    """Timezone schedules are rendered in by default."""
    return resolve_tz(_display_tz_name)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
