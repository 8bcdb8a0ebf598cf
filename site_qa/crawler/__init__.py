"""site_qa.crawler: загрузка и разворачивание sitemap-манифестов."""

from site_qa.crawler.resolver import SitemapResolver, resolve_sitemap

__all__ = ["SitemapResolver", "resolve_sitemap"]
