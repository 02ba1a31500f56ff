"""
Base classes for calendar provider adapters.

Defines the interface every provider (Google, backend relay, host context,
mock) implements, plus the HTTP plumbing shared by token-based providers.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import httpx

from core.calendar.exceptions import (
    AuthenticationRequiredError,
    SyncError,
    UnsupportedOperationError,
)
from core.calendar.models import ScheduleBlock
from utils.http_client import RetryableHttpClient


class CalendarProviderAdapter(ABC):
    """
    Abstract base class for calendar provider adapters.

    Adapters return provider-native event records; normalization happens in
    ``core.calendar.normalizer``.
    """

    provider_name: Optional[str] = None

    @abstractmethod
    def fetch_raw_events(
        self,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> Any:
        """
        Fetch raw events from the provider.

        Args:
            time_min: Optional lower bound of the requested range
            time_max: Optional upper bound of the requested range

        Returns:
            Provider payload: a list of raw event records or a container
            nesting one

        Raises:
            CalendarError: If the provider cannot be reached
        """
        pass

    @abstractmethod
    def push_events(self, blocks: Sequence[ScheduleBlock]) -> List[str]:
        """
        Create schedule blocks as events on the provider.

        Returns:
            Provider identifiers of the created events

        Raises:
            CalendarError: If pushing fails
        """
        pass

    def get_name(self) -> str:
        """
        Get the name of the calendar provider.

        Returns:
            Provider name (e.g., 'google', 'mock')
        """
        if self.provider_name:
            return self.provider_name
        return self.__class__.__name__.lower().replace('adapter', '')

    def get_supported_features(self) -> Dict[str, bool]:
        """
        Get the features supported by this adapter.

        Returns:
            Dictionary of feature flags:
            {
                'time_range': bool,
                'push_events': bool,
                'push_schedule': bool
            }
        """
        return {
            'time_range': True,
            'push_events': True,
            'push_schedule': False,
        }

    def push_schedule(self, schedule: Any, tasks: Any, week_start: datetime) -> List[str]:
        """Forward an unconverted weekly schedule; only relay providers support it."""
        raise UnsupportedOperationError(self.get_name(), 'push_schedule')

    def close(self) -> None:
        """Release resources held by the adapter."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class HttpCalendarAdapter(CalendarProviderAdapter):
    """Provider adapter base with bearer-token HTTP helpers."""

    missing_token_message = "No access token found. Please sign in first."

    def __init__(
        self,
        access_token: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        http_client: Optional[RetryableHttpClient] = None,
        http_client_config: Optional[Dict[str, Any]] = None,
    ):
        if http_client and http_client_config:
            raise ValueError("Provide either http_client or http_client_config, not both")

        self.access_token = access_token
        self.logger = logger or logging.getLogger(
            f"studyplanner.calendar_sync.{self.get_name()}"
        )

        http_client_config = http_client_config or {}
        self._owns_http_client = http_client is None
        self.http_client = http_client or RetryableHttpClient(**http_client_config)

    def close(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_http_client and self.http_client:
            self.http_client.close()

    def api_request(
        self, method: str, url: str, *, headers: Optional[Dict[str, str]] = None, **kwargs
    ) -> httpx.Response:
        """
        Send an authenticated request.

        Raises:
            AuthenticationRequiredError: If no access token is set
            SyncError: If the request fails after retries
        """
        if not self.access_token:
            raise AuthenticationRequiredError(self.missing_token_message)

        auth_headers = {'Authorization': f'Bearer {self.access_token}'}
        if headers:
            auth_headers.update(headers)

        try:
            return self.http_client.request(method, url, headers=auth_headers, **kwargs)
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            self.logger.error("HTTP error %s for %s %s", status, method, url)
            if status == 401:
                raise AuthenticationRequiredError(
                    "Access token rejected by provider. Please sign in again."
                ) from exc
            raise SyncError(f"{method} {url} failed with status {status}", status) from exc
        except httpx.HTTPError as exc:
            self.logger.error("Request %s %s failed: %s", method, url, exc)
            raise SyncError(f"{method} {url} failed: {exc}") from exc

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            self.logger.error("Provider returned invalid JSON: %s", exc)
            raise SyncError("Provider returned invalid JSON") from exc
