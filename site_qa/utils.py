# File: site_qa/utils.py
"""site_qa.utils: Утилитарные функции для списков URL и имён артефактов."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path
from typing import Collection, List, Sequence, Union
from urllib.parse import urlparse

from site_qa.logger import logger

__all__: Sequence[str] = (
    "read_url_list",
    "remove_duplicates",
    "artifact_slug",
)

_SLUG_RE = re.compile(r"[^A-Za-z0-9]+")


def read_url_list(path: Union[str, Path]) -> List[str]:
    """Читает файл со списком URL, возвращает непустые строки без пробелов."""
    p = Path(path).expanduser()
    if not p.is_file():
        logger.error("URL list not found: %s", p)
        raise FileNotFoundError(f"URL list file not found: {p}")
    urls = [line.strip() for line in p.read_text(encoding="utf-8").splitlines() if line.strip()]
    logger.debug("Loaded %d URLs from %s", len(urls), p)
    return urls


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique


def artifact_slug(url: str, max_len: int = 80) -> str:
    """Filesystem-safe, collision-free directory name for a page URL."""
    parsed = urlparse(url)
    readable = _SLUG_RE.sub("-", f"{parsed.netloc}{parsed.path}").strip("-")[:max_len] or "page"
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:8]
    return f"{readable}-{digest}"
