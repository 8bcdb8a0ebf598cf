# File: site_qa/parser/sitemap_parser.py
"""site_qa.parser.sitemap_parser: Модуль для парсинга sitemap.xml.

Документ бывает двух форм: индекс (``<sitemapindex><sitemap><loc>``),
указывающий на другие манифесты, или набор страниц (``<urlset><url><loc>``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from lxml import etree

from site_qa.exceptions import ParseError

__all__ = ("SitemapIndex", "UrlSet", "EmptySitemap", "SitemapNode", "parse_sitemap")


@dataclass(frozen=True, slots=True)
class SitemapIndex:
    """Манифест, чьи записи указывают на другие манифесты."""

    entries: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class UrlSet:
    """Манифест, чьи записи — адреса страниц."""

    entries: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class EmptySitemap:
    """Sitemap-like document without any usable locator."""


SitemapNode = Union[SitemapIndex, UrlSet, EmptySitemap]


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return etree.QName(tag).localname.lower()


def _locators(root: etree._Element, item_name: str) -> Tuple[str, ...]:
    locs = []
    for item in root:
        if _local_name(item.tag) != item_name:
            continue
        for child in item:
            if _local_name(child.tag) == "loc" and child.text and child.text.strip():
                locs.append(child.text.strip())
                break
    return tuple(locs)


def parse_sitemap(
    xml_content: Union[str, bytes], *, url: str = "<string>", strict: bool = True
) -> SitemapNode:
    """Разбирает XML sitemap и возвращает SitemapIndex, UrlSet или EmptySitemap.

    Args:
        xml_content: содержимое sitemap.xml (str или bytes).
        url: адрес документа, только для сообщений об ошибках.
        strict: если True, корректный XML без формы sitemap даёт ParseError;
            иначе он считается пустым манифестом.

    Raises:
        ParseError: тело не является корректным XML (или не похоже на sitemap
            при ``strict=True``).

    Пример:
    ```python
    from site_qa.parser.sitemap_parser import UrlSet, parse_sitemap

    node = parse_sitemap(open('sitemap.xml', 'rb').read())
    if isinstance(node, UrlSet):
        print(node.entries)
    ```
    """
    if isinstance(xml_content, str):
        xml_content = xml_content.encode("utf-8")
    parser = etree.XMLParser(
        ns_clean=True, recover=False, resolve_entities=False, no_network=True
    )
    try:
        root = etree.fromstring(xml_content, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise ParseError(url, f"malformed XML: {exc}") from exc
    if root is None:
        raise ParseError(url, "empty document")

    shape = _local_name(root.tag)
    if shape == "sitemapindex":
        entries = _locators(root, "sitemap")
        return SitemapIndex(entries) if entries else EmptySitemap()
    if shape == "urlset":
        entries = _locators(root, "url")
        return UrlSet(entries) if entries else EmptySitemap()

    if strict:
        raise ParseError(url, f"unexpected root element <{shape or root.tag}>")
    return EmptySitemap()
