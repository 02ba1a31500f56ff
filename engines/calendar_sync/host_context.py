"""
Host context provider adapter.

Reads calendar events from a context object exposed by the hosting
environment instead of calling a provider API.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from core.calendar.constants import CANDIDATE_PATHS, CalendarSource
from core.calendar.exceptions import UnsupportedOperationError
from core.calendar.models import ScheduleBlock
from core.calendar.normalizer import locate_event_list
from engines.calendar_sync.base import CalendarProviderAdapter


logger = logging.getLogger('studyplanner.calendar_sync.host_context')


class HostContextAdapter(CalendarProviderAdapter):
    """
    Adapter over ambient context sources.

    Each source is either a context object or a zero-argument callable
    returning one. The first source whose payload contains a non-empty
    event list wins.
    """

    provider_name = CalendarSource.HOST_CONTEXT

    def __init__(
        self,
        sources: Optional[Sequence[Any]] = None,
        candidate_paths: Optional[Sequence[Sequence[str]]] = None,
    ):
        self.sources = list(sources or [])
        self.candidate_paths = candidate_paths or CANDIDATE_PATHS

    @classmethod
    def from_host(cls, host: Any, **kwargs) -> 'HostContextAdapter':
        """
        Build an adapter from a host object.

        Uses ``host.context`` when present and ``host.get_context`` when it
        is callable, in that order.
        """
        sources: List[Any] = []
        if host is not None:
            direct = getattr(host, 'context', None)
            if direct:
                sources.append(direct)
            get_context = getattr(host, 'get_context', None)
            if callable(get_context):
                sources.append(get_context)
        return cls(sources, **kwargs)

    def get_supported_features(self) -> Dict[str, bool]:
        return {
            'time_range': False,
            'push_events': False,
            'push_schedule': False,
        }

    def _resolve_contexts(self) -> List[Any]:
        contexts: List[Any] = []
        for source in self.sources:
            if callable(source):
                try:
                    source = source()
                except Exception as exc:
                    logger.warning("Failed to retrieve host context: %s", exc)
                    continue
            if source:
                contexts.append(source)
        return contexts

    def fetch_raw_events(
        self,
        time_min: Optional[datetime] = None,
        time_max: Optional[datetime] = None,
    ) -> List[Any]:
        for context in self._resolve_contexts():
            raw_events = locate_event_list(context, self.candidate_paths)
            if raw_events:
                logger.info("Found %s events in host context", len(raw_events))
                return raw_events

        logger.info("No calendar events found in host context")
        return []

    def push_events(self, blocks: Sequence[ScheduleBlock]) -> List[str]:
        raise UnsupportedOperationError(self.get_name(), 'push_events')
