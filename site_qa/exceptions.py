# File: site_qa/exceptions.py
"""site_qa.exceptions: Иерархия ошибок, которые прерывают единицу работы.

Проблемы самих страниц (плохой статус, ошибки консоли, битые картинки)
исключениями не являются — они записываются в DiagnosticRecord.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from site_qa.diagnostics.models import DiagnosticRecord

__all__ = ("SiteQAError", "FetchError", "ParseError", "SessionError")


class SiteQAError(Exception):
    """Base class for all run-aborting SiteQA errors."""


class FetchError(SiteQAError):
    """A sitemap manifest could not be downloaded (transport error or non-2xx)."""

    def __init__(self, url: str, status: Optional[int] = None, reason: Optional[str] = None) -> None:
        self.url = url
        self.status = status
        self.reason = reason
        if status is not None:
            detail = f"HTTP {status}"
        else:
            detail = reason or "unreachable"
        super().__init__(f"{detail} for {url}")


class ParseError(SiteQAError):
    """A manifest body is not well-formed XML or has no sitemap shape."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"cannot parse sitemap {url}: {reason}")


class SessionError(SiteQAError):
    """The browser page died mid-scan; carries whatever was captured so far."""

    def __init__(self, url: str, record: "DiagnosticRecord", reason: str = "") -> None:
        self.url = url
        self.record = record
        self.reason = reason
        super().__init__(f"browser session lost while scanning {url}: {reason}".rstrip(": "))
