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
Application-wide constants for StudyPlanner.

This module contains constants used across multiple modules to avoid
hardcoded values throughout the codebase.
"""

# ============================================================================
# Logging Constants
# ============================================================================

LOG_FILE_NAME = "studyplanner.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB log file size
LOG_FILE_BACKUP_COUNT = 5  # Number of backup log files
LOG_ENV_VAR = "STUDYPLANNER_ENV"

# ============================================================================
# Calendar Provider Constants
# ============================================================================

ACCESS_TOKEN_ENV_VAR = "STUDYPLANNER_ACCESS_TOKEN"
GOOGLE_MAX_RESULTS_PER_PAGE = 250
