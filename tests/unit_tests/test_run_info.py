"""Tests for last-run column helpers."""

from datetime import datetime
from datetime import timezone

import pytest

from pipeline_console.models.pipeline import LastRunRecord
from pipeline_console.runs.run_info import calculate_duration
from pipeline_console.runs.run_info import flow_run_started_by
from pipeline_console.runs.run_info import format_duration
from pipeline_console.runs.run_info import last_run_info
from pipeline_console.runs.run_info import last_run_time
from pipeline_console.runs.run_info import run_duration
from pipeline_console.runs.run_info import to_datetime

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


class TestLastRunTime:
    """Tests for last_run_time()."""

    @pytest.mark.parametrize(
        "seconds_ago,expected",
        [
            (30, "less than a minute ago"),
            (60, "1 minute ago"),
            (5 * 60, "5 minutes ago"),
            (2 * 3600, "about 2 hours ago"),
            (24 * 3600, "1 day ago"),
            (7 * 86400, "7 days ago"),
            (40 * 86400, "about 1 month ago"),
            (100 * 86400, "3 months ago"),
            (800 * 86400, "about 2 years ago"),
        ],
        ids=["seconds", "minute", "minutes", "hours", "day", "days", "month", "months", "years"],
    )
    def test_past(self, seconds_ago, expected):
        start = datetime.fromtimestamp(NOW.timestamp() - seconds_ago, tz=timezone.utc)
        assert last_run_time(start, now=NOW) == expected

    def test_future(self):
        assert last_run_time("2025-06-01T12:05:00Z", now=NOW) == "in 5 minutes"

    @pytest.mark.parametrize("value", [None, "", "not a date"], ids=["none", "empty", "garbage"])
    def test_missing(self, value):
        assert last_run_time(value, now=NOW) == "-"

    def test_naive_timestamp_is_utc(self):
        assert to_datetime("2025-06-01T10:00:00") == datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "0s"), (45, "45s"), (125, "2m 5s"), (3600, "1h"), (3725, "1h 2m"), (86405, "1d 5s"), (90000, "1d 1h"), (-5, "0s")],
    ids=["zero", "seconds", "minutes", "hour", "hour-minutes", "day-seconds", "day-hour", "negative"],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_calculate_duration():
    assert calculate_duration("2025-06-01T10:00:00Z", "2025-06-01T10:02:05Z") == 125
    assert calculate_duration("2025-06-01T10:00:00Z", None) == 0
    assert calculate_duration("garbage", "2025-06-01T10:02:05Z") == 0


@pytest.mark.parametrize(
    "extra,expected",
    [
        ({"totalRunTime": 42.7}, 42),
        ({"totalRunTime": 0, "endTime": "2025-06-01T10:02:05+00:00"}, 125),
        ({"endTime": ""}, 0),
    ],
    ids=["reported", "from-end-time", "unfinished"],
)
def test_run_duration(extra, expected, make_last_run):
    run = LastRunRecord.model_validate({**make_last_run(), **extra})
    assert run_duration(run) == expected


class TestFlowRunStartedBy:
    """Tests for flow_run_started_by()."""

    def test_before_cutoff(self):
        assert flow_run_started_by("2025-05-19T23:59:00Z", "owner@example.com") is None

    def test_user_email_trimmed(self):
        assert flow_run_started_by("2025-05-20T00:00:00Z", "owner@example.com") == "owner"

    def test_system(self):
        assert flow_run_started_by("2025-06-01T00:00:00Z", "System") == "System"

    def test_missing_start(self):
        assert flow_run_started_by(None, "owner@example.com") is None


class TestLastRunInfo:
    """Tests for last_run_info()."""

    def test_running_lock(self, running_pipeline):
        info = last_run_info(running_pipeline, now=NOW)

        assert info.is_running is True
        assert info.time == "5 minutes ago"
        assert info.by == "runner"

    def test_queued_lock(self, make_pipeline, make_lock):
        info = last_run_info(make_pipeline(lock=make_lock(status="queued")), now=NOW)

        assert info.is_running is True

    def test_locked_by_other_pipeline_shows_last_run(self, make_pipeline, make_lock, make_last_run):
        pipeline = make_pipeline(lock=make_lock(status="locked"), last_run=make_last_run())
        info = last_run_info(pipeline, now=NOW)

        assert info.is_running is False
        assert info.time == "about 2 hours ago"

    def test_last_run(self, idle_pipeline):
        info = last_run_info(idle_pipeline, now=NOW)

        assert info.is_running is False
        assert info.time == "about 2 hours ago"
        assert info.by == "owner"

    def test_last_run_without_user_is_system(self, make_pipeline, make_last_run):
        info = last_run_info(make_pipeline(last_run=make_last_run(orguser=None)), now=NOW)

        assert info.by == "System"

    def test_old_run_has_no_starter(self, make_pipeline, make_last_run):
        info = last_run_info(make_pipeline(last_run=make_last_run(start_time="2025-05-01T10:00:00Z")), now=NOW)

        assert info.by is None
        assert info.time == "about 1 month ago"

    def test_never_run(self, make_pipeline):
        assert last_run_info(make_pipeline(), now=NOW) is None

    def test_optimistic_without_lock_shows_last_run(self, idle_pipeline):
        info = last_run_info(idle_pipeline, optimistic_flag=True, now=NOW)

        assert info.by == "owner"
