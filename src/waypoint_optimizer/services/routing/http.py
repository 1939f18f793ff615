"""Shared HTTP plumbing for routing service clients."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


def describe_http_error(error: Exception) -> str:
    """Summarize an httpx error without echoing request URLs (they may carry API keys)."""
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    if isinstance(error, ValueError):
        return "invalid JSON response"
    return type(error).__name__


class RetryingHTTPClient:
    """Issue JSON requests with a bounded retry loop on transient failures."""

    def __init__(
        self,
        base_url: str = "",
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.http_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.http_backoff_seconds
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self.transport,
        )

    def request_json(self, method: str, url: str, **kwargs: Any) -> Any:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.request(method, url, **kwargs)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as e:
                    status_code = e.response.status_code
                    # Client errors other than rate limiting will not succeed on retry
                    if status_code < 500 and status_code != 429:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    logger.debug(f"HTTP {status_code} from {self.base_url}, retrying (attempt {attempt}/{self.max_retries})")
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Request to {self.base_url} failed after {self.max_retries} retries: {type(e).__name__}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"{type(e).__name__} from {self.base_url}, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
        finally:
            client.close()
