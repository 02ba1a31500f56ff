#!/usr/bin/env python3
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
"""
StudyPlanner - calendar sync for the study planner.

Lists the upcoming calendar events that block study time, using the
configured calendar provider.
"""

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from typing import List, Optional

from config.__version__ import get_display_version
from config.app_config import VALID_PROVIDERS, CalendarSettings, ConfigManager
from config.constants import ACCESS_TOKEN_ENV_VAR
from core.calendar.constants import SyncStatus
from core.calendar.exceptions import CalendarError
from core.calendar.manager import CalendarManager
from core.calendar.models import CanonicalEvent
from engines.calendar_sync import create_adapter
from utils.logger import setup_logging
from utils.time_utils import parse_iso_datetime

logger = logging.getLogger("studyplanner.main")

NO_EVENTS_MESSAGE = "No upcoming events found for this week."


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List upcoming calendar events for study planning")
    parser.add_argument("--provider", choices=VALID_PROVIDERS, help="Override the configured provider")
    parser.add_argument(
        "--token",
        default=os.environ.get(ACCESS_TOKEN_ENV_VAR),
        help=f"Provider access token (default: ${ACCESS_TOKEN_ENV_VAR})",
    )
    parser.add_argument("--context-file", type=Path, help="JSON host context for the host_context provider")
    parser.add_argument("--now", help="Current time as ISO 8601, for reproducible output")
    parser.add_argument("--json", action="store_true", help="Print events as JSON")
    parser.add_argument("--config-dir", type=Path, help="Directory holding app_config.json")
    parser.add_argument("--log-dir", type=Path, help="Directory for log files")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="version", version=get_display_version())
    return parser.parse_args(argv)


def format_datetime(value: datetime) -> str:
    """Format an instant in local time for display."""
    return value.astimezone().strftime("%b %d, %Y %H:%M")


def render_events(events: List[CanonicalEvent]) -> str:
    if not events:
        return NO_EVENTS_MESSAGE

    lines = []
    for event in events:
        lines.append(event.title)
        span = format_datetime(event.start)
        if event.end_time != event.start_time:
            span = f"{span} - {format_datetime(event.end)}"
        lines.append(f"  {span}")
    return "\n".join(lines)


def _load_host(context_file: Optional[Path]):
    if context_file is None:
        return None
    with open(context_file, "r", encoding="utf-8") as f:
        return SimpleNamespace(context=json.load(f))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = ConfigManager(args.config_dir)
    except (ValueError, TypeError, OSError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(
        log_dir=args.log_dir,
        level=args.log_level,
        console_output=bool(config.get("logging.console_output", True)),
    )
    settings = CalendarSettings.from_config(config)

    now = None
    if args.now:
        now = parse_iso_datetime(args.now)
        if now is None:
            print(f"Invalid --now value: {args.now}", file=sys.stderr)
            return 2

    try:
        host = _load_host(args.context_file)
    except (OSError, ValueError) as e:
        print(f"Failed to read context file: {e}", file=sys.stderr)
        return 2

    try:
        adapter = create_adapter(settings, args.token, provider=args.provider, host=host)
    except CalendarError as e:
        print(str(e), file=sys.stderr)
        return 2

    with adapter:
        result = CalendarManager(adapter, settings).load_upcoming_events(now)

    if result.status == SyncStatus.FAILED:
        print(f"Failed to load calendar events: {result.error}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([event.to_dict() for event in result.events], indent=2))
    else:
        print(render_events(result.events))

    if result.status == SyncStatus.PARTIAL:
        logger.warning("%s calendar events could not be read", result.discarded)
    return 0


if __name__ == "__main__":
    sys.exit(main())
