# SPDX-License-Identifier: Apache-2.0
"""
Exceptions for calendar synchronization.

Defines specific exceptions for provider adapters and sync operations.
"""

from typing import Optional


class CalendarError(Exception):
    """Base exception for calendar operations."""

    pass


class ProviderNotConfiguredError(CalendarError):
    """Raised when no adapter exists for the configured provider."""

    def __init__(self, provider: str):
        super().__init__(f"Calendar provider not supported: {provider}")
        self.provider = provider


class AuthenticationRequiredError(CalendarError):
    """Raised when a provider call needs an access token that is missing."""

    pass


class UnsupportedOperationError(CalendarError):
    """Raised when an adapter cannot perform the requested operation."""

    def __init__(self, provider: str, operation: str):
        super().__init__(f"{provider} does not support {operation}")
        self.provider = provider
        self.operation = operation


class SyncError(CalendarError):
    """Raised when communication with an external provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
