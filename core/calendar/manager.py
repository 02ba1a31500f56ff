# SPDX-License-Identifier: Apache-2.0
"""
Calendar Manager for StudyPlanner.

Coordinates the configured provider adapter with event normalization and
reports outcomes as explicit result objects.
"""

import logging
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Optional, Tuple, Union

from config.app_config import CalendarSettings
from core.calendar.constants import CANDIDATE_PATHS, SyncStatus
from core.calendar.exceptions import CalendarError
from core.calendar.models import CanonicalEvent, EventWindow, FetchResult, PushResult
from core.calendar.normalizer import locate_event_list, normalize_events_detailed
from core.calendar.schedule import build_schedule_blocks
from utils.time_utils import localize, now_utc, resolve_timezone

if TYPE_CHECKING:
    from engines.calendar_sync.base import CalendarProviderAdapter


logger = logging.getLogger('studyplanner.calendar.manager')


class CalendarManager:
    """
    Loads upcoming events and pushes generated study schedules.

    Responsibilities:
    - Building the lookahead window from settings
    - Fetching and normalizing provider events
    - Converting and pushing weekly schedules
    """

    def __init__(
        self,
        adapter: 'CalendarProviderAdapter',
        settings: Optional[CalendarSettings] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        """
        Initialize the calendar manager.

        Args:
            adapter: Provider adapter instance
            settings: Calendar settings, defaults to built-in values
            clock: Returns the current time; injectable for tests
        """
        self.adapter = adapter
        self.settings = settings or CalendarSettings()
        self.clock = clock
        self.timezone = resolve_timezone(self.settings.timezone)
        logger.info("CalendarManager initialized with provider %s", adapter.get_name())

    def build_window(self, now: Optional[datetime] = None) -> EventWindow:
        """Return the lookahead window for ``now`` (defaults to the clock)."""
        return EventWindow.for_week(
            now or self.clock(),
            self.settings.lookahead_days,
            self.settings.week_start,
            self.timezone,
        )

    def load_upcoming_events(self, now: Optional[datetime] = None) -> FetchResult:
        """
        Fetch and normalize events overlapping the lookahead window.

        Provider failures are reported in the result, not raised.
        """
        window = self.build_window(now)

        try:
            payload = self.adapter.fetch_raw_events(window.start, window.end)
        except CalendarError as e:
            logger.error("Failed to load events from %s: %s", self.adapter.get_name(), e)
            return FetchResult(status=SyncStatus.FAILED, error=str(e))

        raw_events = locate_event_list(
            payload, self.settings.candidate_paths or CANDIDATE_PATHS
        )
        report = normalize_events_detailed(
            raw_events,
            window,
            tz=self.timezone,
            default_title=self.settings.default_event_title,
        )

        if report.unusable:
            status = SyncStatus.PARTIAL
            logger.warning(
                "Dropped %s unusable events out of %s", report.unusable, report.total
            )
        elif report.events:
            status = SyncStatus.SUCCESS
        else:
            status = SyncStatus.EMPTY

        logger.info(
            "Loaded %s upcoming events (%s) between %s and %s",
            len(report.events), status, window.start, window.end
        )
        return FetchResult(status=status, events=report.events, discarded=report.unusable)

    def push_schedule(
        self,
        schedule: Any,
        tasks: Optional[Iterable[Any]] = None,
        week_start: Optional[Union[date, datetime]] = None,
    ) -> PushResult:
        """
        Push a generated weekly schedule to the provider.

        Relay providers receive the schedule as-is; others receive the
        converted schedule blocks.
        """
        tasks = list(tasks or [])
        if week_start is None:
            week_start = self.build_window().start
        elif not isinstance(week_start, datetime):
            week_start = localize(datetime.combine(week_start, datetime.min.time()), self.timezone)

        try:
            if self.adapter.get_supported_features().get('push_schedule'):
                ids = self.adapter.push_schedule(schedule, tasks, week_start)
                logger.info("Schedule pushed through %s", self.adapter.get_name())
                return PushResult(status=SyncStatus.SUCCESS, pushed_ids=ids)

            blocks = build_schedule_blocks(schedule, week_start, self.timezone, tasks)
            if not blocks:
                logger.info("Schedule contains no blocks; nothing to push")
                return PushResult(status=SyncStatus.EMPTY)

            ids = self.adapter.push_events(blocks)
        except CalendarError as e:
            logger.error("Failed to push schedule to %s: %s", self.adapter.get_name(), e)
            return PushResult(status=SyncStatus.FAILED, error=str(e))

        logger.info("Pushed %s schedule blocks to %s", len(ids), self.adapter.get_name())
        return PushResult(status=SyncStatus.SUCCESS, pushed_ids=ids)

    @staticmethod
    def get_blocked_intervals(events: Iterable[CanonicalEvent]) -> List[Tuple[datetime, datetime]]:
        """Return ``(start, end)`` pairs the schedule generator must avoid."""
        return [(event.start, event.end) for event in events]
