"""Google Calendar provider adapter."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from config.constants import GOOGLE_MAX_RESULTS_PER_PAGE
from core.calendar.constants import CalendarSource
from core.calendar.exceptions import SyncError
from core.calendar.models import ScheduleBlock
from engines.calendar_sync.base import HttpCalendarAdapter
from utils.http_client import RetryableHttpClient
from utils.time_utils import to_utc_iso


logger = logging.getLogger('studyplanner.calendar_sync.google')


class GoogleCalendarAdapter(HttpCalendarAdapter):
    """Reads and writes events through the Google Calendar v3 API."""

    provider_name = CalendarSource.GOOGLE
    missing_token_message = "No Google access token found. Please sign in first."

    API_BASE_URL = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: Optional[str] = None,
        calendar_id: str = "primary",
        api_base_url: Optional[str] = None,
        max_results: int = GOOGLE_MAX_RESULTS_PER_PAGE,
        http_client: Optional[RetryableHttpClient] = None,
        http_client_config: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            access_token=access_token,
            logger=logger,
            http_client=http_client,
            http_client_config=http_client_config,
        )
        self.calendar_id = calendar_id
        self.api_base_url = (api_base_url or self.API_BASE_URL).rstrip('/')
        self.max_results = max_results
        self.logger.info("GoogleCalendarAdapter initialized for calendar %s", calendar_id)

    @property
    def events_url(self) -> str:
        return f"{self.api_base_url}/calendars/{quote(self.calendar_id, safe='')}/events"

    def fetch_raw_events(
        self,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        List events of the configured calendar, following pagination.

        Recurring events are expanded into single instances.
        """
        items: List[Dict[str, Any]] = []
        page_token = None
        seen_tokens = set()

        while True:
            params: Dict[str, Any] = {
                'maxResults': self.max_results,
                'singleEvents': True,
                'orderBy': 'startTime',
            }
            if time_min:
                params['timeMin'] = to_utc_iso(time_min)
            if time_max:
                params['timeMax'] = to_utc_iso(time_max)
            if page_token:
                params['pageToken'] = page_token

            response = self.api_request('GET', self.events_url, params=params)
            data = self._json(response)
            if not isinstance(data, dict):
                raise SyncError("Unexpected Google Calendar response shape")

            page_items = data.get('items') or []
            if isinstance(page_items, list):
                items.extend(page_items)

            page_token = data.get('nextPageToken')
            if not page_token:
                break
            if page_token in seen_tokens:
                self.logger.warning("Google returned repeated page token %s, stopping", page_token)
                break
            seen_tokens.add(page_token)

        self.logger.info("Fetched %s events from Google", len(items))
        return items

    def push_events(self, blocks: Sequence[ScheduleBlock]) -> List[str]:
        """Insert each block as a Google Calendar event."""
        created: List[str] = []
        for block in blocks:
            response = self.api_request(
                'POST',
                self.events_url,
                json=block.to_google_body(),
                headers={'Content-Type': 'application/json'},
            )
            data = self._json(response)
            event_id = data.get('id') if isinstance(data, dict) else None
            if not event_id:
                raise SyncError("Google Calendar did not return an event id")
            created.append(event_id)
            self.logger.debug("Pushed block %s as Google event %s", block.title, event_id)

        self.logger.info("Pushed %s events to Google", len(created))
        return created
