# src/adapters/http_feed_adapter.py

"""Adapter fetching raw offers from a JSON endpoint over HTTP."""

import logging
import time

from curl_cffi import requests as curl_requests

from src.adapters.site_adapter import AdapterError, records_from_payload
from src.config.settings import Settings
from src.models.offer import RawOfferFields


class HttpFeedAdapter:
    """GETs a JSON offers feed published by an external extractor."""

    def __init__(self, site: str, location: str) -> None:
        self.site = site
        self.url = location
        self.logger = logging.getLogger(f"lease_digest.{site}")
        self.settings = Settings()
        self.session = curl_requests.Session()
        self._current_delay: float = self.settings.REQUEST_DELAY
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _escalate_delay(self) -> None:
        """Double the current delay up to the configured max."""
        max_delay = (
            self.settings.REQUEST_DELAY
            * self.settings.MAX_DELAY_MULTIPLIER
        )
        self._current_delay = min(self._current_delay * 2, max_delay)
        self.logger.warning(
            "[%s] Rate-limited, delay escalated to %.1fs",
            self.site,
            self._current_delay,
        )

    def _fetch_get(self) -> curl_requests.Response | None:
        """GET the feed with retries and adaptive delay."""
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = self.session.get(
                    self.url,
                    headers=self.settings.DEFAULT_HEADERS,
                    timeout=self._request_timeout,
                )
                if resp.status_code == 200:
                    self._current_delay = self.settings.REQUEST_DELAY
                    return resp
                self.logger.warning(
                    "[%s] HTTP %d on attempt %d",
                    self.site,
                    resp.status_code,
                    attempt + 1,
                )
                if resp.status_code in (429, 403):
                    self._escalate_delay()
                time.sleep(self._current_delay)
            except Exception as exc:
                self.logger.warning(
                    "[%s] Request error on attempt %d: %s",
                    self.site,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
                time.sleep(self._current_delay * (attempt + 1))
        return None

    def fetch(self) -> list[RawOfferFields]:
        """Download and decode the feed.

        Raises :class:`AdapterError` when retries are exhausted or the
        body is not JSON.
        """
        resp = self._fetch_get()
        if resp is None:
            msg = (
                f"[{self.site}] feed unavailable after "
                f"{self.settings.MAX_RETRIES} attempts: {self.url}"
            )
            raise AdapterError(msg)
        try:
            payload = resp.json()
        except ValueError as exc:
            msg = f"[{self.site}] feed is not valid JSON: {exc}"
            raise AdapterError(msg) from exc

        records = records_from_payload(self.site, payload)
        self.logger.info(
            "[%s] Fetched %d raw offers from %s",
            self.site,
            len(records),
            self.url,
        )
        return records
