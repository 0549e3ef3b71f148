"""
Shared pytest fixtures for weekview tests.

This module provides common fixtures used across all test files, including:
- A civil clock pinned to Europe/Bratislava
- Wall-clock instant helpers
- Task factories
- Host timezone switching
"""

import time
from datetime import datetime

import pytest
from freezegun import freeze_time

from weekview.clock import CivilClock
from weekview.models import CalendarTask


@pytest.fixture
def clock():
    """
    Provides a CivilClock for Europe/Bratislava, independent of the host zone.
    """
    return CivilClock("Europe/Bratislava")


@pytest.fixture
def wall(clock):
    """
    Returns a function building an aware instant from a civil wall time.

    Usage:
        def test_something(wall):
            start = wall(2026, 10, 20, 9, 30)
    """
    def _wall(year, month, day, hour=0, minute=0, second=0):
        return clock.to_instant(datetime(year, month, day, hour, minute, second))
    return _wall


@pytest.fixture
def make_task():
    """
    Returns a factory for CalendarTask with sensible defaults.
    """
    counter = {"n": 0}

    def _make(start, end, title=None, **kwargs):
        counter["n"] += 1
        task_id = kwargs.pop("id", f"task-{counter['n']}")
        return CalendarTask(
            id=task_id,
            title=title or task_id,
            start=start,
            end=end,
            **kwargs,
        )
    return _make


@pytest.fixture
def frozen_time():
    """
    Freezes time to 2026-10-21 10:00:00 UTC (12:00 in Bratislava, a Wednesday).
    """
    with freeze_time("2026-10-21 10:00:00") as frozen:
        yield frozen


@pytest.fixture
def host_tz(monkeypatch):
    """
    Returns a function that switches the host's local timezone (TZ + tzset).
    The original zone is restored after the test.
    """
    def _set(name):
        monkeypatch.setenv("TZ", name)
        if hasattr(time, "tzset"):
            time.tzset()

    yield _set
    monkeypatch.undo()
    if hasattr(time, "tzset"):
        time.tzset()
