"""Tests for parsing and encoding stored cron strings."""

from datetime import timezone

import pytest

from pipeline_console.enums import ScheduleKind
from pipeline_console.exceptions import InvalidFormat
from pipeline_console.models.schedule import DailySchedule
from pipeline_console.models.schedule import ManualSchedule
from pipeline_console.models.schedule import TimeOfDay
from pipeline_console.models.schedule import WeeklySchedule
from pipeline_console.schedule.cron_codec import build_schedule
from pipeline_console.schedule.cron_codec import encode
from pipeline_console.schedule.cron_codec import parse
from pipeline_console.schedule.cron_codec import parse_days_of_week
from pipeline_console.schedule.cron_codec import split_cron_fields
from pipeline_console.schedule.cron_codec import to_cron_expression


class TestParse:
    """Tests for parse()."""

    @pytest.mark.parametrize(
        "cron",
        [None, "", "   ", "0 9 * *", "0 0 9 * * * 2025"],
        ids=["none", "empty", "blank", "four-fields", "seven-fields"],
    )
    def test_manual(self, cron):
        assert parse(cron) == ManualSchedule()

    def test_daily(self):
        assert parse("0 9 * * *") == DailySchedule(time_of_day=TimeOfDay(hour=9, minute=0))

    def test_seconds_field_is_dropped(self):
        assert parse("0 0 9 * * *") == DailySchedule(time_of_day=TimeOfDay(hour=9, minute=0))

    def test_weekly_list(self):
        schedule = parse("30 14 * * 1,3")

        assert schedule.kind == ScheduleKind.WEEKLY
        assert schedule.time_of_day == TimeOfDay(hour=14, minute=30)
        assert schedule.days_of_week == (1, 3)

    @pytest.mark.parametrize(
        "dow,expected",
        [("1-5", (1, 2, 3, 4, 5)), ("0,2-4", (0, 2, 3, 4)), ("6", (6,))],
        ids=["range", "list-with-range", "single"],
    )
    def test_weekly_ranges_are_expanded(self, dow, expected):
        assert parse(f"0 9 * * {dow}").days_of_week == expected

    @pytest.mark.parametrize(
        "cron",
        ["*/5 * * * *", "0 25 * * *", "60 9 * * *", "0 9 * * 7", "0 9 * * MON", "0 9 * * 5-1"],
        ids=["step", "hour-25", "minute-60", "day-7", "day-name", "descending-range"],
    )
    def test_unsupported_degrades_to_manual(self, cron):
        assert parse(cron) == ManualSchedule()


class TestEncode:
    """Tests for encode()."""

    def test_manual(self):
        assert encode(ManualSchedule()) == ""

    def test_daily(self):
        assert encode(DailySchedule(time_of_day=TimeOfDay(hour=9, minute=0))) == "0 9 * * *"

    def test_weekly_days_sorted(self):
        schedule = WeeklySchedule(time_of_day=TimeOfDay(hour=9, minute=0), days_of_week=(3, 1))
        assert encode(schedule) == "0 9 * * 1,3"

    def test_time_override_from_utc_pair(self):
        schedule = WeeklySchedule(time_of_day=TimeOfDay(hour=9, minute=0), days_of_week=(1, 3))
        assert encode(schedule, time_of_day="2 30") == "30 2 * * 1,3"

    @pytest.mark.parametrize(
        "cron",
        ["", "0 9 * * *", "30 14 * * 1,3", "5 0 * * 0,6"],
        ids=["manual", "daily", "weekly", "weekend"],
    )
    def test_encode_reproduces_canonical_cron(self, cron):
        assert encode(parse(cron)) == cron

    def test_weekly_without_days_is_unrepresentable(self):
        with pytest.raises(ValueError):
            WeeklySchedule(time_of_day=TimeOfDay(hour=9, minute=0), days_of_week=())


class TestToCronExpression:
    """Tests for to_cron_expression() (form save helper)."""

    def test_daily_default_time(self):
        assert to_cron_expression("daily") == "0 1 * * *"

    def test_weekly_keeps_caller_order(self):
        assert to_cron_expression(ScheduleKind.WEEKLY, ["3", "1"], "9 30") == "30 9 * * 3,1"

    def test_manual(self):
        assert to_cron_expression("manual") == ""

    def test_unknown_kind_falls_back_to_daily(self):
        assert to_cron_expression("hourly", time_of_day="9 0") == "0 9 * * *"

    def test_invalid_time_raises(self):
        with pytest.raises(InvalidFormat):
            to_cron_expression("daily", time_of_day="9:00")


class TestBuildSchedule:
    """Tests for build_schedule() (form values in local time)."""

    def test_weekly_from_local_time(self, ist, fixed_now):
        schedule = build_schedule("weekly", [1, 3], "09:00", tz=ist, now=fixed_now)

        assert schedule == WeeklySchedule(time_of_day=TimeOfDay(hour=3, minute=30), days_of_week=(1, 3))
        assert encode(schedule) == "30 3 * * 1,3"

    def test_daily_from_local_time(self, fixed_now):
        assert build_schedule(ScheduleKind.DAILY, local_time="09:00", tz=timezone.utc, now=fixed_now) == (
            DailySchedule(time_of_day=TimeOfDay(hour=9, minute=0))
        )

    def test_manual_ignores_time(self):
        assert build_schedule("manual", local_time="not a time") == ManualSchedule()

    @pytest.mark.parametrize(
        "kind,days,local_time",
        [
            ("daily", [], None),
            ("weekly", [], "09:00"),
            ("weekly", [7], "09:00"),
            ("hourly", [], "09:00"),
            ("daily", [], "9am"),
        ],
        ids=["missing-time", "weekly-no-days", "weekly-bad-day", "unknown-kind", "malformed-time"],
    )
    def test_invalid_form_values_raise(self, kind, days, local_time, fixed_now):
        with pytest.raises(InvalidFormat):
            build_schedule(kind, days, local_time, tz=timezone.utc, now=fixed_now)


class TestHelpers:
    """Tests for field splitting and day-of-week expansion."""

    def test_split_drops_seconds(self):
        assert split_cron_fields("15 30 9 * * 1") == ["30", "9", "*", "*", "1"]

    def test_split_wrong_count(self):
        assert split_cron_fields("0 9 * * * * *") == []

    @pytest.mark.parametrize(
        "dow",
        ["8", "4-2", "1,,2", "*"],
        ids=["out-of-range", "descending", "empty-token", "wildcard"],
    )
    def test_parse_days_of_week_rejects(self, dow):
        with pytest.raises(ValueError):
            parse_days_of_week(dow)
