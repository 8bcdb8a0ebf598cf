# site_qa/diagnostics/capture.py
"""
Scoped console / network listeners for one page scan.
"""
from __future__ import annotations

from typing import Any, Callable, List, Sequence, Tuple

from site_qa.diagnostics.models import FailedRequest

CAPTURED_CONSOLE_TYPES: Sequence[str] = ("error", "warning")


class SignalCapture:
    """Подписка на события страницы, живущая ровно один скан.

    Используется как контекстный менеджер: слушатели снимаются на выходе,
    так что между сканами ничего не протекает.
    """

    def __init__(self, page: Any) -> None:
        self.page = page
        self.console_messages: List[str] = []
        self.failed_requests: List[FailedRequest] = []
        self._listeners: List[Tuple[str, Callable[[Any], None]]] = []

    def __enter__(self) -> SignalCapture:
        return self.attach()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.detach()

    def attach(self) -> SignalCapture:
        self._subscribe("console", self._on_console)
        self._subscribe("requestfailed", self._on_request_failed)
        return self

    def detach(self) -> None:
        while self._listeners:
            event, handler = self._listeners.pop()
            self.page.remove_listener(event, handler)

    def _subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self.page.on(event, handler)
        self._listeners.append((event, handler))

    def _on_console(self, message: Any) -> None:
        if message.type in CAPTURED_CONSOLE_TYPES:
            self.console_messages.append(message.text)

    def _on_request_failed(self, request: Any) -> None:
        self.failed_requests.append(FailedRequest(url=request.url, reason=request.failure))


__all__ = ["SignalCapture", "CAPTURED_CONSOLE_TYPES"]
