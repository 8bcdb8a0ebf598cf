"""site_qa.parser: разбор sitemap-манифестов."""
