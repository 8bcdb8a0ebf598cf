# site_qa/crawler/fetcher.py
"""
Fetcher module: downloads sitemap manifests with retry/backoff and timeout.
"""
from __future__ import annotations

import asyncio
import random
from typing import Sequence

from aiohttp import ClientError, ClientSession

from site_qa.config import ScannerConfig
from site_qa.exceptions import FetchError
from site_qa.logger import logger


class ManifestFetcher:
    """Handles manifest fetching with retries/backoff; every failure is a FetchError."""

    RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, session: ClientSession, config: ScannerConfig) -> None:
        self.session = session
        self.config = config

    async def fetch(self, url: str) -> bytes:
        """
        Fetch the manifest body as raw bytes (lxml decodes using the XML prolog).

        Raises FetchError on a non-2xx answer or when the host is unreachable.
        """
        attempts = 0
        while True:
            try:
                async with self.session.get(url) as resp:
                    if resp.status in self.RETRY_STATUS and attempts < self.config.retry_times:
                        raise _Retryable(resp.status)
                    if not 200 <= resp.status < 300:
                        raise FetchError(url, status=resp.status)
                    body = await resp.read()
                    logger.debug("Fetched %s (%d bytes)", url, len(body))
                    return body
            except _Retryable as exc:
                reason = f"HTTP {exc.status}"
            except (ClientError, asyncio.TimeoutError) as exc:
                if attempts >= self.config.retry_times:
                    raise FetchError(url, reason=str(exc) or type(exc).__name__) from exc
                reason = str(exc) or type(exc).__name__
            attempts += 1
            # exponential backoff, cap at 60s
            backoff = min(60, 2 ** (attempts - 1) + random.random() / 2)
            logger.debug(
                "Retry %d/%d for %s after %.2f s (%s)",
                attempts, self.config.retry_times, url, backoff, reason,
            )
            await asyncio.sleep(backoff)


class _Retryable(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status
