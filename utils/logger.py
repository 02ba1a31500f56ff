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
Logging configuration.

Centralized logging setup with a rotating log file and console output.
"""

import logging
import os
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from config.app_config import get_app_dir
from config.constants import (
    LOG_ENV_VAR,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
    LOG_FILE_NAME,
)

ROOT_LOGGER_NAME = "studyplanner"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class SensitiveDataFilter(logging.Filter):
    """
    Mask credentials in log records.

    Keeps access tokens and bearer values obtained from the calendar
    provider out of log files.
    """

    SENSITIVE_KEYWORDS = [
        "api_key",
        "api-key",
        "apikey",
        "token",
        "password",
        "secret",
        "credential",
        "authorization",
        "bearer",
    ]

    PATTERNS = [
        (r"(api[_-]?key\s*[=:]\s*)[^\s,\)]+", r"\1***"),
        (r"(token\s*[=:]\s*)[^\s,\)]+", r"\1***"),
        (r"(password\s*[=:]\s*)[^\s,\)]+", r"\1***"),
        (r"(secret\s*[=:]\s*)[^\s,\)]+", r"\1***"),
        (r"(bearer\s+)[^\s,\)]+", r"\1***"),
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        lowered = message.lower()

        for keyword in self.SENSITIVE_KEYWORDS:
            if keyword in lowered:
                record.msg = self._mask_sensitive_data(message)
                record.args = None
                break

        return True

    def _mask_sensitive_data(self, message: str) -> str:
        masked = message
        for pattern, replacement in self.PATTERNS:
            masked = re.sub(pattern, replacement, masked, flags=re.IGNORECASE)
        return masked


def setup_logging(
    log_dir: Optional[Union[str, Path]] = None,
    level: Optional[str] = None,
    console_output: bool = True,
) -> logging.Logger:
    """
    Set up application logging.

    Args:
        log_dir: Log file directory, defaults to ~/.studyplanner/logs
        level: Log level; when omitted it is DEBUG if STUDYPLANNER_ENV is
               "development" and INFO otherwise
        console_output: Whether to log to stderr as well

    Returns:
        The configured application root logger
    """
    log_dir = Path(log_dir) if log_dir is not None else get_app_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    if level is None:
        env = os.environ.get(LOG_ENV_VAR, "production").lower()
        level = "DEBUG" if env == "development" else "INFO"

    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)  # handlers decide what gets through

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    sensitive_filter = SensitiveDataFilter()

    log_file = log_dir / LOG_FILE_NAME
    file_handler = RotatingFileHandler(
        log_file, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setLevel(log_level)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )
    )
    file_handler.addFilter(sensitive_filter)
    logger.addHandler(file_handler)

    if console_output:
        # stdout is reserved for command output
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(max(log_level, logging.INFO))
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        console_handler.addFilter(sensitive_filter)
        logger.addHandler(console_handler)

    logger.debug("Logging initialized, file: %s, level: %s", log_file, level)
    return logger
