"""Calendar provider adapters."""

from engines.calendar_sync.backend_relay import BackendRelayAdapter
from engines.calendar_sync.base import CalendarProviderAdapter, HttpCalendarAdapter
from engines.calendar_sync.factory import create_adapter
from engines.calendar_sync.google_calendar import GoogleCalendarAdapter
from engines.calendar_sync.host_context import HostContextAdapter
from engines.calendar_sync.mock_calendar import MockCalendarAdapter

__all__ = [
    'BackendRelayAdapter',
    'CalendarProviderAdapter',
    'GoogleCalendarAdapter',
    'HostContextAdapter',
    'HttpCalendarAdapter',
    'MockCalendarAdapter',
    'create_adapter',
]
