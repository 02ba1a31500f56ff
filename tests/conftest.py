# SPDX-License-Identifier: Apache-2.0
"""
Pytest configuration for StudyPlanner tests.
"""

import logging
import time
from datetime import datetime, timezone

import pytest

from config.app_config import CalendarSettings


@pytest.fixture
def wednesday_noon():
    """Wednesday 2024-01-10 12:00 UTC; the week starts Sunday 2024-01-07."""
    return datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def utc_settings():
    """Calendar settings pinned to UTC so tests do not depend on the host zone."""
    return CalendarSettings(provider="mock", timezone="UTC")


@pytest.fixture(autouse=True)
def _isolate_app_logger():
    """Drop handlers installed by setup_logging between tests."""
    yield
    logger = logging.getLogger("studyplanner")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _raw_event(summary="Event", start=None, end=None, status=None, **extra):
    """Build a Google-style raw event; ``start``/``end`` strings become dateTime specs."""
    event = dict(extra)
    if summary is not None:
        event['summary'] = summary
    if status is not None:
        event['status'] = status
    for key, value in (('start', start), ('end', end)):
        if isinstance(value, str):
            event[key] = {'dateTime': value}
        elif value is not None:
            event[key] = value
    return event


@pytest.fixture
def make_event():
    """Factory for Google-style raw event records."""
    return _raw_event


@pytest.fixture
def new_york_local_time(monkeypatch):
    """Run with the process local timezone set to America/New_York."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
