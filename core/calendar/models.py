# SPDX-License-Identifier: Apache-2.0
"""
Data models for calendar synchronization.

Canonical events, the lookahead window, schedule blocks and the result
types returned by the calendar manager.
"""

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, tzinfo
from typing import Any, Dict, List, Optional

from core.calendar.constants import (
    DEFAULT_WEEK_START,
    LOOKAHEAD_DAYS,
    MANAGED_BY,
    SyncStatus,
)
from utils.time_utils import localize, parse_iso_datetime, start_of_week, to_utc_iso


@dataclass(frozen=True)
class CanonicalEvent:
    """Provider-agnostic event with UTC ISO 8601 start and end times."""

    title: str
    start_time: str
    end_time: str

    @property
    def start(self) -> datetime:
        return parse_iso_datetime(self.start_time)

    @property
    def end(self) -> datetime:
        return parse_iso_datetime(self.end_time)

    def to_dict(self) -> Dict[str, str]:
        """Serialize with the camelCase keys used by the presentation layer."""
        return {
            'title': self.title,
            'startTime': self.start_time,
            'endTime': self.end_time,
        }

    def to_provider_event(self) -> Dict[str, Any]:
        """Return an equivalent raw provider record."""
        return {
            'summary': self.title,
            'start': {'dateTime': self.start_time},
            'end': {'dateTime': self.end_time},
        }


@dataclass(frozen=True)
class EventWindow:
    """Time window ``[start, end)`` used to filter events."""

    start: datetime
    end: datetime

    @classmethod
    def for_week(
        cls,
        now: datetime,
        lookahead_days: int = LOOKAHEAD_DAYS,
        week_start: str = DEFAULT_WEEK_START,
        tz: Optional[tzinfo] = None,
    ) -> 'EventWindow':
        """Build the lookahead window starting at the current week start."""
        first_day = start_of_week(now, week_start, tz)
        last_day = first_day.date() + timedelta(days=lookahead_days)
        return cls(start=first_day, end=localize(datetime.combine(last_day, time.min), tz))

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return end >= self.start and start <= self.end


@dataclass
class ScheduleBlock:
    """A generated study block to be pushed to the provider."""

    title: str
    start: datetime
    end: datetime
    description: Optional[str] = None

    def to_google_body(self) -> Dict[str, Any]:
        timezone_name = getattr(self.start.tzinfo, 'key', None)

        def _format(value: datetime) -> Dict[str, str]:
            payload = {'dateTime': value.isoformat()}
            if timezone_name:
                payload['timeZone'] = timezone_name
            return payload

        body = {
            'summary': self.title,
            'start': _format(self.start),
            'end': _format(self.end),
            'extendedProperties': {
                'private': {'managed_by': MANAGED_BY},
            },
        }
        if self.description:
            body['description'] = self.description
        return body

    def to_canonical(self) -> CanonicalEvent:
        return CanonicalEvent(
            title=self.title,
            start_time=to_utc_iso(self.start),
            end_time=to_utc_iso(self.end),
        )


@dataclass
class NormalizationReport:
    """Normalized events plus counters of what was dropped and why."""

    events: List[CanonicalEvent] = field(default_factory=list)
    total: int = 0
    cancelled: int = 0
    unusable: int = 0
    out_of_window: int = 0


@dataclass
class FetchResult:
    """Outcome of loading upcoming events."""

    status: str
    events: List[CanonicalEvent] = field(default_factory=list)
    discarded: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != SyncStatus.FAILED


@dataclass
class PushResult:
    """Outcome of pushing a generated schedule."""

    status: str
    pushed_ids: List[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status != SyncStatus.FAILED
