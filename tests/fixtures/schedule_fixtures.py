"""Fixtures for deterministic timezone conversions."""

from datetime import datetime
from datetime import timedelta
from datetime import timezone
from zoneinfo import ZoneInfo

import pytest


@pytest.fixture
def fixed_now():
    """A winter instant (no DST in effect anywhere in the northern hemisphere)."""
    return datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def ist():
    """UTC+05:30."""
    return timezone(timedelta(hours=5, minutes=30))


@pytest.fixture
def est():
    """UTC-05:00."""
    return timezone(timedelta(hours=-5))


@pytest.fixture
def new_york():
    return ZoneInfo("America/New_York")
