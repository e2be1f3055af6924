"""HTTP client for the Hoorin courier aggregator."""

from __future__ import annotations

import logging
import time

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class HoorinClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.hoorin_api_key
        if not self.api_key:
            raise ValueError("Hoorin API key is not configured.")
        self.base_url = base_url or settings.hoorin_base_url
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.http_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.http_backoff_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def search(self, phone: str) -> dict:
        """Courier summaries recorded against ``phone`` across the aggregated couriers."""
        params = {"apiKey": self.api_key, "searchTerm": phone}
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(self.base_url, params=params, headers={"Content-Type": "application/json"})
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise ValueError("Hoorin response is not a JSON object.")
                    return data
                except httpx.HTTPStatusError as exc:
                    # 4xx will not get better on retry
                    if exc.response.status_code < 500:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Hoorin search failed after {attempt} attempts: {exc}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Hoorin network error, retrying in {wait_time:.1f}s ({attempt}/{self.max_retries})")
                    time.sleep(wait_time)
        finally:
            client.close()
