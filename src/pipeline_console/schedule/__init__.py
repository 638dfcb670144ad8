"""Cron schedule codecs: UTC storage format <-> local display."""

from pipeline_console.schedule.cron_codec import build_schedule
from pipeline_console.schedule.cron_codec import encode
from pipeline_console.schedule.cron_codec import parse
from pipeline_console.schedule.cron_codec import to_cron_expression
from pipeline_console.schedule.day_shifter import cron_to_local_tz
from pipeline_console.schedule.formatter import describe
from pipeline_console.schedule.formatter import describe_schedule
from pipeline_console.schedule.time_codec import local_to_utc
from pipeline_console.schedule.time_codec import utc_to_local

__all__ = [
    "build_schedule",
    "cron_to_local_tz",
    "describe",
    "describe_schedule",
    "encode",
    "local_to_utc",
    "parse",
    "to_cron_expression",
    "utc_to_local",
]
