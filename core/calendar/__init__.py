"""Calendar event normalization and synchronization logic."""

from core.calendar.manager import CalendarManager
from core.calendar.models import CanonicalEvent, EventWindow, FetchResult, PushResult
from core.calendar.normalizer import (
    locate_event_list,
    normalize_events,
    normalize_events_detailed,
    normalize_payload,
    to_instant,
)

__all__ = [
    'CalendarManager',
    'CanonicalEvent',
    'EventWindow',
    'FetchResult',
    'PushResult',
    'locate_event_list',
    'normalize_events',
    'normalize_events_detailed',
    'normalize_payload',
    'to_instant',
]
