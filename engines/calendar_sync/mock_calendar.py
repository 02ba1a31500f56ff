"""In-memory calendar provider for demos and tests."""

import copy
import itertools
import logging
from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence

from core.calendar.constants import CalendarSource
from core.calendar.models import ScheduleBlock
from engines.calendar_sync.base import CalendarProviderAdapter
from utils.time_utils import now_local


logger = logging.getLogger('studyplanner.calendar_sync.mock')


def _sample_events(now: datetime) -> List[Dict[str, Any]]:
    tomorrow = now.date() + timedelta(days=1)
    tz = now.tzinfo

    def _at(day, hour, minute=0):
        return datetime.combine(day, time(hour, minute), tzinfo=tz).isoformat()

    return [
        {
            'id': 'mock-sample-1',
            'summary': 'Lecture: Linear Algebra',
            'start': {'dateTime': _at(tomorrow, 10)},
            'end': {'dateTime': _at(tomorrow, 11, 30)},
        },
        {
            'id': 'mock-sample-2',
            'summary': 'Study Group',
            'start': {'dateTime': _at(tomorrow + timedelta(days=1), 14)},
            'end': {'dateTime': _at(tomorrow + timedelta(days=1), 15, 30)},
        },
        {
            'id': 'mock-sample-3',
            'summary': 'Exam Week',
            'start': {'date': (tomorrow + timedelta(days=5)).isoformat()},
        },
    ]


class MockCalendarAdapter(CalendarProviderAdapter):
    """
    Calendar held in memory.

    Starts with a few sample events unless ``events`` is given. Pushed
    blocks are stored as provider events and returned by later fetches.
    """

    provider_name = CalendarSource.MOCK

    def __init__(
        self,
        events: Optional[Sequence[Dict[str, Any]]] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        if events is None:
            events = _sample_events(clock())
        self._events: List[Dict[str, Any]] = [copy.deepcopy(e) for e in events]
        self._ids = itertools.count(1)

    @property
    def events(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._events)

    def get_supported_features(self) -> Dict[str, bool]:
        return {
            'time_range': False,
            'push_events': True,
            'push_schedule': False,
        }

    def fetch_raw_events(
        self,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        # range filtering is left to the normalizer
        return self.events

    def push_events(self, blocks: Sequence[ScheduleBlock]) -> List[str]:
        created = []
        for block in blocks:
            event_id = f"mock-{next(self._ids)}"
            body = block.to_google_body()
            body['id'] = event_id
            self._events.append(body)
            created.append(event_id)
        logger.info("Stored %s pushed events in mock calendar", len(created))
        return created
