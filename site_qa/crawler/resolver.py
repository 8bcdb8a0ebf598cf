# === FILE: site_qa/crawler/resolver.py ===
from __future__ import annotations

import asyncio
import time
from typing import List, Optional, Set

from aiohttp import ClientSession, ClientTimeout

from site_qa.config import ScannerConfig
from site_qa.crawler.fetcher import ManifestFetcher
from site_qa.logger import logger
from site_qa.parser.sitemap_parser import EmptySitemap, SitemapIndex, UrlSet, parse_sitemap
from site_qa.utils import remove_duplicates

__all__ = ("SitemapResolver", "resolve_sitemap")


class SitemapResolver:
    """Разворачивает sitemap-индекс любой вложенности в плоский список страниц.

    Ветви индекса загружаются параллельно. Множество посещённых манифестов
    живёт один вызов :meth:`resolve` и защищает от циклов (A → B → A).
    """

    def __init__(self, config: Optional[ScannerConfig] = None) -> None:
        self.config = config or ScannerConfig()
        self.session: Optional[ClientSession] = None
        self.fetcher: Optional[ManifestFetcher] = None
        self._visited: Set[str] = set()

    async def __aenter__(self) -> SitemapResolver:
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.fetch_timeout),
            headers={"User-Agent": self.config.user_agent},
            raise_for_status=False,
        )
        self.fetcher = ManifestFetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def resolve(self, root_url: str, *, dedupe: Optional[bool] = None) -> List[str]:
        """Return every page URL reachable from *root_url*, sorted ascending.

        Raises FetchError / ParseError from any manifest along the way.
        """
        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        logger.info("Resolving sitemap: %s", root_url)
        start = time.monotonic()
        self._visited = set()
        urls = await self._collect(root_url)
        urls.sort()
        if dedupe is None:
            dedupe = self.config.dedupe_urls
        if dedupe:
            urls = remove_duplicates(urls)
        logger.info(
            "Resolved %d page URLs from %d manifests in %.2f s",
            len(urls), len(self._visited), time.monotonic() - start,
        )
        return urls

    async def _collect(self, url: str) -> List[str]:
        # check-and-mark has no await in between, so it is atomic on the loop
        if url in self._visited:
            logger.debug("Skipping already visited manifest %s", url)
            return []
        self._visited.add(url)

        if self.fetcher is None:
            raise RuntimeError("Session not initialized")
        body = await self.fetcher.fetch(url)
        node = parse_sitemap(body, url=url, strict=self.config.strict_manifests)

        if isinstance(node, SitemapIndex):
            logger.debug("%s: sitemap index with %d children", url, len(node.entries))
            branches = await asyncio.gather(
                *(self._collect(child) for child in node.entries), return_exceptions=True
            )
            for branch in branches:
                if isinstance(branch, BaseException):
                    raise branch
            return [page for branch in branches for page in branch]
        if isinstance(node, UrlSet):
            logger.debug("%s: urlset with %d pages", url, len(node.entries))
            return list(node.entries)
        if isinstance(node, EmptySitemap):
            logger.warning("Sitemap %s has no entries", url)
        return []


async def resolve_sitemap(root_url: str, config: Optional[ScannerConfig] = None, **kwargs) -> List[str]:
    """Запускает SitemapResolver в контексте и возвращает отсортированный список URL."""
    async with SitemapResolver(config) as resolver:
        return await resolver.resolve(root_url, **kwargs)
