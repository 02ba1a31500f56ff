# SPDX-License-Identifier: Apache-2.0
"""
Calendar event normalization.

Converts provider-native event records, possibly nested inside a container
of unknown shape, into canonical events restricted to a lookahead window and
sorted by start time.

Malformed input never raises: a missing event list yields an empty result
and an unusable record is dropped without affecting the rest of the batch.
"""

import logging
from collections.abc import Mapping
from datetime import date, datetime, time, timezone, tzinfo
from typing import Any, List, Optional, Sequence, Tuple

from core.calendar.constants import (
    CANDIDATE_PATHS,
    DEFAULT_EVENT_TITLE,
    DEFAULT_WEEK_START,
    LOOKAHEAD_DAYS,
    EventStatus,
)
from core.calendar.models import CanonicalEvent, EventWindow, NormalizationReport
from utils.time_utils import localize, now_utc, parse_iso_datetime, to_utc_iso


logger = logging.getLogger('studyplanner.calendar.normalizer')

# A container found under a candidate path is searched one level deeper.
_MAX_NESTING = 1


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _value_at_path(source: Any, path: Sequence[str]) -> Any:
    current = source
    for key in path:
        if isinstance(current, Mapping) and key in current:
            current = current[key]
        else:
            return None
    return current


def locate_event_list(
    payload: Any,
    candidate_paths: Sequence[Sequence[str]] = CANDIDATE_PATHS,
    _depth: int = 0,
) -> List[Any]:
    """
    Find the raw event list inside a payload of unknown shape.

    Args:
        payload: Event list, or a mapping nesting it under a known key path
        candidate_paths: Key paths probed in order

    Returns:
        The first sequence found, or an empty list
    """
    if not payload:
        return []

    if _is_sequence(payload):
        return list(payload)

    for path in candidate_paths:
        value = _value_at_path(payload, path)
        if _is_sequence(value):
            return list(value)
        if isinstance(value, Mapping) and _depth < _MAX_NESTING:
            nested = locate_event_list(value, candidate_paths, _depth + 1)
            if nested:
                return nested

    return []


def to_instant(date_spec: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Convert a provider ``{dateTime | date, timeZone}`` spec to an instant.

    All-day dates without a ``timeZone`` are taken at midnight UTC. When a
    ``timeZone`` is present it is not applied; midnight is taken in the
    local zone ``tz`` instead.

    Returns:
        Aware datetime, or None if the spec is missing or unparseable
    """
    if not isinstance(date_spec, Mapping):
        return None

    date_time = date_spec.get('dateTime')
    if date_time:
        return parse_iso_datetime(date_time, tz)

    all_day = date_spec.get('date')
    if not all_day:
        return None
    if not isinstance(all_day, str):
        return None

    try:
        day = date.fromisoformat(all_day.strip())
    except ValueError:
        return None

    if date_spec.get('timeZone'):
        logger.debug(
            "All-day event timezone %s noted but not applied",
            date_spec.get('timeZone')
        )
        try:
            return localize(datetime.combine(day, time.min), tz)
        except (OverflowError, OSError, ValueError):
            return None
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _event_title(raw_event: Mapping, default_title: str) -> str:
    summary = raw_event.get('summary')
    if isinstance(summary, str) and summary.strip():
        return summary.strip()
    return default_title


def _convert_event(
    raw_event: Mapping,
    tz: Optional[tzinfo],
    default_title: str,
) -> Optional[Tuple[datetime, datetime, CanonicalEvent]]:
    start_dt = to_instant(raw_event.get('start'), tz)
    if start_dt is None:
        return None

    end_dt = to_instant(raw_event.get('end'), tz)
    if end_dt is None:
        end_dt = start_dt

    try:
        event = CanonicalEvent(
            title=_event_title(raw_event, default_title),
            start_time=to_utc_iso(start_dt),
            end_time=to_utc_iso(end_dt),
        )
    except (OverflowError, ValueError):
        return None

    return start_dt, end_dt, event


def normalize_events_detailed(
    raw_events: Any,
    window: Optional[EventWindow] = None,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    lookahead_days: int = LOOKAHEAD_DAYS,
    week_start: str = DEFAULT_WEEK_START,
    default_title: str = DEFAULT_EVENT_TITLE,
) -> NormalizationReport:
    """
    Normalize raw provider events and report what was dropped.

    Args:
        raw_events: Sequence of raw provider event records
        window: Filter window; built from ``now`` when omitted
        now: Current time, defaults to the wall clock
        tz: Local timezone for week start and offset-less times
        lookahead_days: Window length when ``window`` is omitted
        week_start: First weekday of the window when ``window`` is omitted
        default_title: Title used when the source title is blank

    Returns:
        NormalizationReport with events sorted ascending by start time
    """
    report = NormalizationReport()
    if not _is_sequence(raw_events):
        return report

    if window is None:
        window = EventWindow.for_week(
            now or now_utc(), lookahead_days, week_start, tz
        )

    kept: List[Tuple[datetime, CanonicalEvent]] = []
    for raw_event in raw_events:
        report.total += 1

        if not isinstance(raw_event, Mapping):
            report.unusable += 1
            logger.debug("Skipping non-mapping event record: %r", raw_event)
            continue

        if raw_event.get('status') == EventStatus.CANCELLED:
            report.cancelled += 1
            continue

        converted = _convert_event(raw_event, tz, default_title)
        if converted is None:
            report.unusable += 1
            logger.debug("Skipping event without usable dates: %r", raw_event.get('start'))
            continue

        start_dt, end_dt, event = converted
        if not window.overlaps(start_dt, end_dt):
            report.out_of_window += 1
            continue

        kept.append((start_dt, event))

    kept.sort(key=lambda item: item[0])
    report.events = [event for _, event in kept]

    logger.debug(
        "Normalized %s of %s events (cancelled=%s, unusable=%s, out_of_window=%s)",
        len(report.events),
        report.total,
        report.cancelled,
        report.unusable,
        report.out_of_window,
    )
    return report


def normalize_events(raw_events: Any, window: Optional[EventWindow] = None, **kwargs) -> List[CanonicalEvent]:
    """Normalize raw provider events into canonical events within the window."""
    return normalize_events_detailed(raw_events, window, **kwargs).events


def normalize_payload(payload: Any, window: Optional[EventWindow] = None, **kwargs) -> List[CanonicalEvent]:
    """Locate the event list inside ``payload`` and normalize it."""
    return normalize_events(locate_event_list(payload), window, **kwargs)
