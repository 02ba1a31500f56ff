"""
Backend relay provider adapter.

Talks to the study-planner backend, which holds the provider credentials
and relays calls to Google Calendar.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from core.calendar.constants import CalendarSource
from core.calendar.exceptions import UnsupportedOperationError
from core.calendar.models import ScheduleBlock
from engines.calendar_sync.base import HttpCalendarAdapter
from utils.http_client import RetryableHttpClient
from utils.time_utils import to_utc_iso


logger = logging.getLogger('studyplanner.calendar_sync.backend')


class BackendRelayAdapter(HttpCalendarAdapter):
    """Fetches events and pushes schedules through the backend relay."""

    provider_name = CalendarSource.BACKEND
    missing_token_message = "No Google access token found. Please sign in first."

    DEFAULT_BASE_URL = "http://localhost:5000"

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[RetryableHttpClient] = None,
        http_client_config: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            access_token=access_token,
            logger=logger,
            http_client=http_client,
            http_client_config=http_client_config,
        )
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip('/')

    def get_supported_features(self) -> Dict[str, bool]:
        return {
            'time_range': True,
            'push_events': False,
            'push_schedule': True,
        }

    def fetch_raw_events(
        self,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> Any:
        """Return the backend payload unchanged; its shape is not fixed."""
        params: Dict[str, str] = {}
        if time_min:
            params['timeMin'] = to_utc_iso(time_min)
        if time_max:
            params['timeMax'] = to_utc_iso(time_max)

        response = self.api_request(
            'GET', f"{self.base_url}/calendar/events", params=params
        )
        payload = self._json(response)
        self.logger.info("Fetched calendar events from backend")
        return payload

    def push_events(self, blocks: Sequence[ScheduleBlock]) -> List[str]:
        raise UnsupportedOperationError(self.get_name(), 'push_events')

    def push_schedule(self, schedule: Any, tasks: Any, week_start: datetime) -> List[str]:
        """
        Post the generated weekly schedule and tasks to the backend.

        Returns:
            Event ids reported by the backend, if any
        """
        body = {
            'schedule': schedule,
            'tasks': list(tasks or []),
            'weekStart': to_utc_iso(week_start),
        }
        response = self.api_request(
            'POST',
            f"{self.base_url}/calendar/add",
            json=body,
            headers={'Content-Type': 'application/json'},
        )

        ids: List[str] = []
        if response.content:
            data = self._json(response)
            if isinstance(data, dict) and isinstance(data.get('ids'), list):
                ids = [str(event_id) for event_id in data['ids']]

        self.logger.info("Schedule pushed to calendar through backend")
        return ids
