# SPDX-License-Identifier: Apache-2.0
"""
Conversion of a generated weekly study schedule into schedule blocks.

A weekly schedule maps day names to items with ``task``, ``startTime`` and
``endTime`` (``HH:MM``). Items may also be given as a flat list carrying a
``day`` key.
"""

import logging
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from core.calendar.models import ScheduleBlock
from utils.time_utils import localize, weekday_index


logger = logging.getLogger('studyplanner.calendar.schedule')


def _parse_clock(value: Any) -> Optional[time]:
    if not isinstance(value, str):
        return None
    parts = value.strip().split(':')
    if len(parts) < 2:
        return None
    try:
        hour, minute = int(parts[0]), int(parts[1])
        return time(hour, minute)
    except ValueError:
        return None


def _iter_items(schedule: Any) -> Iterable[Tuple[Any, Mapping]]:
    if isinstance(schedule, Mapping):
        for day, items in schedule.items():
            if not isinstance(items, (list, tuple)):
                continue
            for item in items:
                if isinstance(item, Mapping):
                    yield day, item
    elif isinstance(schedule, (list, tuple)):
        for item in schedule:
            if isinstance(item, Mapping):
                yield item.get('day'), item


def _task_due_dates(tasks: Optional[Iterable[Any]]) -> Dict[str, str]:
    due_dates: Dict[str, str] = {}
    for task in tasks or []:
        if not isinstance(task, Mapping):
            continue
        title = task.get('title')
        due = task.get('dueDate')
        if isinstance(title, str) and title.strip() and due:
            due_dates[title.strip()] = str(due)
    return due_dates


def build_schedule_blocks(
    schedule: Any,
    week_start: Union[date, datetime],
    tz: Optional[tzinfo] = None,
    tasks: Optional[Iterable[Any]] = None,
) -> List[ScheduleBlock]:
    """
    Convert a weekly schedule into absolute-time blocks.

    Args:
        schedule: Mapping of day name to items, or list of items with ``day``
        week_start: First day of the scheduled week
        tz: Timezone of the clock times, defaults to system local time
        tasks: Optional to-do tasks; due dates are added to descriptions

    Returns:
        Blocks sorted by start time. Items with an unknown day or malformed
        times are skipped.
    """
    if isinstance(week_start, datetime):
        if week_start.tzinfo is not None:
            week_start = week_start.astimezone(tz)
        first_day = week_start.date()
    else:
        first_day = week_start

    due_dates = _task_due_dates(tasks)
    blocks: List[ScheduleBlock] = []

    for day, item in _iter_items(schedule):
        try:
            offset = (weekday_index(str(day)) - first_day.weekday()) % 7
        except ValueError:
            logger.warning("Skipping schedule item with unknown day: %s", day)
            continue

        start_clock = _parse_clock(item.get('startTime'))
        end_clock = _parse_clock(item.get('endTime'))
        if start_clock is None or end_clock is None:
            logger.warning(
                "Skipping schedule item with malformed times: %s-%s",
                item.get('startTime'),
                item.get('endTime'),
            )
            continue

        block_day = first_day + timedelta(days=offset)
        end_day = block_day if end_clock > start_clock else block_day + timedelta(days=1)
        start = localize(datetime.combine(block_day, start_clock), tz)
        end = localize(datetime.combine(end_day, end_clock), tz)

        title = str(item.get('task') or item.get('title') or '').strip() or 'Study Session'
        description = None
        if title in due_dates:
            description = f"Due: {due_dates[title]}"

        blocks.append(ScheduleBlock(title=title, start=start, end=end, description=description))

    blocks.sort(key=lambda block: block.start)
    logger.debug("Built %s schedule blocks for week of %s", len(blocks), first_day)
    return blocks
