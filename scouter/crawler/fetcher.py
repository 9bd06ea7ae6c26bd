# scouter/crawler/fetcher.py
"""
Fetcher module: HTTP requests with rate limiting, retry/backoff and timeout,
followed by HTML-to-text and link extraction.
"""
from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Optional, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from scouter.config import FetcherConfig
from scouter.crawler.link_extractor import parse_page
from scouter.crawler.models import FetchedPage
from scouter.errors import FetchError
from scouter.logger import LOGGER_NAME

__all__ = ("HttpFetcher",)

_HTML_TYPES = ("text/html", "application/xhtml+xml")


class HttpFetcher:
    """aiohttp-based Fetcher. Use as ``async with HttpFetcher(cfg) as fetcher``."""

    RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, config: Optional[FetcherConfig] = None, session: Optional[ClientSession] = None) -> None:
        self.config = config or FetcherConfig()
        self.session = session
        self._owns_session = session is None
        self.logger = logging.getLogger(LOGGER_NAME)
        self._rate_lock = asyncio.Lock()
        self._last_request_ts = 0.0

    async def __aenter__(self) -> HttpFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={
                    "User-Agent": self.config.user_agent,
                    "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5",
                },
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> FetchedPage:
        html = await self._get_html(url)
        return parse_page(url, html)

    async def _get_html(self, url: str) -> str:
        if not self.session:
            raise RuntimeError("Session not initialized")
        attempts = 0
        while True:
            await self._wait_for_rate_limit()
            try:
                async with self.session.get(url, allow_redirects=True) as resp:
                    status = resp.status
                    if status in self.RETRY_STATUS:
                        raise ClientError(f"retryable status {status}")
                    if status != 200:
                        raise FetchError(url, f"HTTP {status}")
                    mime = resp.headers.get("Content-Type", "").split(";", 1)[0].strip().lower()
                    if mime not in _HTML_TYPES:
                        raise FetchError(url, f"unsupported content type {mime or 'unknown'}")
                    return await resp.text(errors="replace")
            except asyncio.TimeoutError as exc:
                # no retry on timeout
                raise FetchError(url, "timeout") from exc
            except ClientError as exc:
                attempts += 1
                if attempts > self.config.retry_times:
                    raise FetchError(url, str(exc)) from exc
                backoff = min(60.0, self.config.retry_backoff * 2**attempts)
                backoff += random.random() * self.config.retry_backoff
                self.logger.debug(
                    "Retry %d/%d for %s after %.2f s", attempts, self.config.retry_times, url, backoff
                )
                await asyncio.sleep(backoff)

    async def _wait_for_rate_limit(self) -> None:
        interval = 1 / self.config.rate_limit
        async with self._rate_lock:
            now = time.monotonic()
            wait = interval - (now - self._last_request_ts)
            if wait > 0:
                await asyncio.sleep(wait)
            self._last_request_ts = time.monotonic()
