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
Version management for StudyPlanner.

Single source of truth for version information.
"""

__version__ = "0.3.0"


def get_version() -> str:
    """Get the current application version."""
    return __version__


def get_display_version() -> str:
    """
    Get formatted version for display.

    Returns:
        Version string with 'v' prefix
    """
    version = get_version()
    if not version.lower().startswith("v"):
        return f"v{version}"
    return version
