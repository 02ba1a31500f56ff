# SPDX-License-Identifier: Apache-2.0
"""
Constants for calendar synchronization.

Defines provider names, sync statuses and normalization defaults to avoid
hardcoded strings.
"""


class CalendarSource:
    """Enumeration of calendar event providers."""

    GOOGLE = "google"
    BACKEND = "backend"
    HOST_CONTEXT = "host_context"
    MOCK = "mock"


class SyncStatus:
    """Enumeration of fetch/push outcomes."""

    SUCCESS = "success"
    EMPTY = "empty"
    PARTIAL = "partial"
    FAILED = "failed"


class EventStatus:
    """Provider-side event status values."""

    CANCELLED = "cancelled"


DEFAULT_EVENT_TITLE = "Calendar Event"
LOOKAHEAD_DAYS = 14
DEFAULT_WEEK_START = "sunday"

# Key paths probed, in order, when the event list is nested in a container.
CANDIDATE_PATHS = (
    ("googleCalendar", "events"),
    ("googleCalendar", "items"),
    ("googleCalendar",),
    ("calendar", "events"),
    ("calendarEvents",),
    ("events",),
)

MANAGED_BY = "studyplanner"
