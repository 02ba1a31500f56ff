# SPDX-License-Identifier: Apache-2.0
#
# Copyright (c) 2024-2025 StudyPlanner Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Time utilities for StudyPlanner."""

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger("studyplanner.utils.time_utils")

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def now_utc() -> datetime:
    """Get current datetime with UTC timezone."""
    return datetime.now(timezone.utc)


def now_local() -> datetime:
    """Get current datetime in system local timezone (aware)."""
    return now_utc().astimezone()


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """
    Resolve an IANA timezone name.

    Returns None for an empty name, meaning the system local timezone.
    Unknown names fall back to the system local timezone with a warning.
    """
    if not name:
        return None
    if name.upper() in ("UTC", "Z"):
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %s, falling back to local time", name)
        return None


def localize(value: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """
    Attach a timezone to a naive datetime.

    Without ``tz`` the system local offset in effect at that wall time is
    used, so dates on either side of a DST change get their own offset.
    """
    if value.tzinfo is not None:
        return value
    if tz is None:
        return value.astimezone()
    return value.replace(tzinfo=tz)


def parse_iso_datetime(value: Any, default_tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """
    Parse an ISO 8601 date-time string into an aware datetime.

    A trailing 'Z' means UTC. A date-only string is midnight UTC. An
    offset-less date-time is interpreted in ``default_tz`` (system local
    timezone when omitted).

    Returns:
        Aware datetime, or None if the value cannot be parsed.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in ("Z", "z"):
            text = f"{text[:-1]}+00:00"
        try:
            if "T" not in text and " " not in text:
                day = date.fromisoformat(text)
                return datetime.combine(day, time.min, tzinfo=timezone.utc)
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    try:
        return localize(dt, default_tz)
    except (OverflowError, OSError, ValueError):
        return None


def to_utc_iso(value: Any) -> str:
    """
    Convert a datetime or ISO string to a UTC ISO 8601 string with 'Z' suffix.

    Naive datetimes are treated as local time. Unparseable strings are
    returned unchanged.
    """
    if not value:
        return ""

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = parse_iso_datetime(value)
        if dt is None:
            logger.warning("Failed to parse ISO string: %s", value)
            return value
    else:
        logger.warning("Unsupported type for to_utc_iso: %s", type(value))
        return str(value)

    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def weekday_index(name: str) -> int:
    """Return the Python weekday index (Monday=0) for a weekday name."""
    key = name.strip().lower()
    if key not in WEEKDAY_NAMES:
        raise ValueError(f"Unknown weekday: {name}")
    return WEEKDAY_NAMES.index(key)


def start_of_week(
    now: datetime,
    week_start: str = "sunday",
    tz: Optional[tzinfo] = None,
) -> datetime:
    """
    Return local midnight of the most recent ``week_start`` day.

    If ``now`` already falls on that weekday, midnight of the same day is
    returned. Without ``tz`` the system local timezone is used.
    """
    local_now = localize(now, tz).astimezone(tz)
    days_back = (local_now.weekday() - weekday_index(week_start)) % 7
    first_day = local_now.date() - timedelta(days=days_back)
    return localize(datetime.combine(first_day, time.min), tz)
