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
Retrying HTTP client.

Wraps ``httpx.Client`` with exponential backoff, rate-limit handling and
retryable-error detection for calendar provider calls.
"""

import logging
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Callable, Iterable, Optional, Set

import httpx


logger = logging.getLogger("studyplanner.utils.http_client")


class RetryableHttpClient:
    """
    HTTP client with automatic retries.

    - exponential backoff (1s, 2s, 4s, ...)
    - honours ``Retry-After`` on 429 responses
    - retries network errors and 408/429/5xx statuses only
    """

    RETRYABLE_STATUS_CODES = {
        408,  # Request Timeout
        429,  # Too Many Requests
        500,  # Internal Server Error
        502,  # Bad Gateway
        503,  # Service Unavailable
        504,  # Gateway Timeout
    }

    NETWORK_ERRORS = (
        httpx.ConnectError,
        httpx.TimeoutException,
        httpx.NetworkError,
    )

    def __init__(
        self,
        max_retries: int = 3,
        timeout: float = 30.0,
        base_delay: float = 1.0,
        max_retry_after: Optional[float] = 60.0,
        retryable_status_codes: Optional[Iterable[int]] = None,
        sleep: Callable[[float], None] = time.sleep,
        **client_kwargs
    ):
        """
        Args:
            max_retries: Maximum number of retries after the first attempt
            timeout: Request timeout in seconds
            base_delay: Backoff base delay in seconds
            max_retry_after: Largest Retry-After honoured, None for no limit
            retryable_status_codes: Overrides RETRYABLE_STATUS_CODES
            sleep: Function used to wait between attempts
            **client_kwargs: Passed to ``httpx.Client`` (e.g. ``transport``)
        """
        self.max_retries = max_retries
        self.timeout = timeout
        self.base_delay = base_delay
        self.max_retry_after = max_retry_after
        self.retryable_status_codes: Set[int] = (
            set(retryable_status_codes)
            if retryable_status_codes is not None
            else set(self.RETRYABLE_STATUS_CODES)
        )
        self._sleep = sleep

        client_kwargs.setdefault('timeout', timeout)
        self.client = httpx.Client(**client_kwargs)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.client.close()

    def _calculate_delay(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)

    def _get_retry_after(self, response: httpx.Response) -> Optional[float]:
        """Read Retry-After as seconds or as an HTTP date."""
        retry_after = response.headers.get('Retry-After')
        if not retry_after:
            return None

        try:
            return float(retry_after)
        except ValueError:
            pass

        try:
            retry_date = parsedate_to_datetime(retry_after)
        except (TypeError, ValueError) as exc:
            logger.warning("Failed to parse Retry-After header %s: %s", retry_after, exc)
            return None
        delta = (retry_date - datetime.now(timezone.utc)).total_seconds()
        return max(0.0, delta)

    def _delay_for_status(self, response: httpx.Response, attempt: int) -> Optional[float]:
        """Return the wait before the next attempt, or None to give up."""
        if response.status_code != 429:
            return self._calculate_delay(attempt)

        retry_after = self._get_retry_after(response)
        if retry_after is None:
            return self._calculate_delay(attempt)

        if self.max_retry_after is not None and retry_after > self.max_retry_after:
            logger.error(
                "Rate limit retry time too long (%ss > %ss), not retrying",
                retry_after,
                self.max_retry_after,
            )
            return None
        return retry_after

    def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a request, retrying transient failures.

        Raises:
            httpx.HTTPStatusError: Non-retryable status or retries exhausted
            httpx.TransportError: Network failure after retries exhausted
        """
        for attempt in range(self.max_retries + 1):
            try:
                response = self.client.request(method, url, **kwargs)
                response.raise_for_status()
                if attempt > 0:
                    logger.info("Request succeeded after %s retries: %s %s", attempt, method, url)
                return response

            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if status not in self.retryable_status_codes:
                    logger.error("Non-retryable HTTP error: %s %s %s", status, method, url)
                    raise
                if attempt >= self.max_retries:
                    logger.error("Max retries exceeded: %s %s", method, url)
                    raise

                delay = self._delay_for_status(exc.response, attempt)
                if delay is None:
                    raise
                logger.warning(
                    "HTTP error %s, retrying in %ss (attempt %s/%s)",
                    status, delay, attempt + 1, self.max_retries,
                )
                self._sleep(delay)

            except self.NETWORK_ERRORS as exc:
                if attempt >= self.max_retries:
                    logger.error("Max retries exceeded for network error: %s %s", method, url)
                    raise

                delay = self._calculate_delay(attempt)
                logger.warning(
                    "Network error: %s, retrying in %ss (attempt %s/%s)",
                    type(exc).__name__, delay, attempt + 1, self.max_retries,
                )
                self._sleep(delay)

        raise RuntimeError("Unexpected exit from retry loop")

    def get(self, url: str, **kwargs) -> httpx.Response:
        return self.request('GET', url, **kwargs)

    def post(self, url: str, **kwargs) -> httpx.Response:
        return self.request('POST', url, **kwargs)
