"""Provider adapter selection by configuration."""

import logging
from typing import Any, Dict, Optional, Sequence

from config.app_config import CalendarSettings
from core.calendar.constants import CalendarSource
from core.calendar.exceptions import ProviderNotConfiguredError
from engines.calendar_sync.backend_relay import BackendRelayAdapter
from engines.calendar_sync.base import CalendarProviderAdapter
from engines.calendar_sync.google_calendar import GoogleCalendarAdapter
from engines.calendar_sync.host_context import HostContextAdapter
from engines.calendar_sync.mock_calendar import MockCalendarAdapter
from utils.http_client import RetryableHttpClient


logger = logging.getLogger('studyplanner.calendar_sync.factory')

_HTTP_CONFIG_KEYS = ('max_retries', 'timeout', 'base_delay', 'max_retry_after')


def _http_client_config(settings: CalendarSettings) -> Dict[str, Any]:
    return {key: settings.http[key] for key in _HTTP_CONFIG_KEYS if key in settings.http}


def create_adapter(
    settings: CalendarSettings,
    access_token: Optional[str] = None,
    *,
    provider: Optional[str] = None,
    host: Any = None,
    mock_events: Optional[Sequence[Dict[str, Any]]] = None,
    http_client: Optional[RetryableHttpClient] = None,
) -> CalendarProviderAdapter:
    """
    Create the adapter for the configured provider.

    Args:
        settings: Calendar settings
        access_token: Bearer token for HTTP providers
        provider: Overrides ``settings.provider``
        host: Host object exposing ``context``/``get_context`` (host_context)
        mock_events: Initial events for the mock provider
        http_client: Shared HTTP client; built from settings when omitted

    Raises:
        ProviderNotConfiguredError: If the provider name is unknown
    """
    name = (provider or settings.provider or '').strip().lower()
    http_kwargs: Dict[str, Any] = (
        {'http_client': http_client} if http_client
        else {'http_client_config': _http_client_config(settings)}
    )

    if name == CalendarSource.GOOGLE:
        adapter = GoogleCalendarAdapter(
            access_token=access_token,
            calendar_id=settings.google.get('calendar_id', 'primary'),
            api_base_url=settings.google.get('api_base_url'),
            max_results=settings.google.get('max_results', 250),
            **http_kwargs,
        )
    elif name == CalendarSource.BACKEND:
        adapter = BackendRelayAdapter(
            access_token=access_token,
            base_url=settings.backend.get('base_url'),
            **http_kwargs,
        )
    elif name == CalendarSource.HOST_CONTEXT:
        adapter = HostContextAdapter.from_host(
            host, candidate_paths=settings.candidate_paths
        )
    elif name == CalendarSource.MOCK:
        adapter = MockCalendarAdapter(events=mock_events)
    else:
        raise ProviderNotConfiguredError(name)

    logger.info("Using calendar provider: %s", adapter.get_name())
    return adapter
