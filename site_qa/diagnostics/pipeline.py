# === FILE: site_qa/diagnostics/pipeline.py ===
"""
Page diagnostic pipeline: drives one browser page through a fixed sequence of
steps and reduces everything it observes into a :class:`DiagnosticRecord`.

Steps (strictly in this order)::

    instrumentation → navigation → baseline screenshot → accessibility
    → math/layout probe → stability wait → comparison screenshot → layout diff

A failing step leaves its fields at their defaults, appends a note to the
record and lets the next step run. Only a lost browser session
(``page.is_closed()``) stops the scan, with :class:`SessionError`.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from site_qa.config import ScannerConfig
from site_qa.diagnostics.accessibility import AccessibilityAnalyzer, AxeAnalyzer
from site_qa.diagnostics.capture import SignalCapture
from site_qa.diagnostics.layout_diff import compare_screenshots
from site_qa.diagnostics.models import DiagnosticRecord
from site_qa.diagnostics.probes import MathRuntime, collect_page_diagnostics, probe_math_runtime
from site_qa.exceptions import SessionError
from site_qa.logger import logger

__all__ = ["PageDiagnosticPipeline"]

_T = TypeVar("_T")


class PageDiagnosticPipeline:
    """Сканирует одну страницу и возвращает DiagnosticRecord."""

    def __init__(
        self,
        config: Optional[ScannerConfig] = None,
        analyzer: Optional[AccessibilityAnalyzer] = None,
    ) -> None:
        self.config = config or ScannerConfig()
        self.analyzer = analyzer or AxeAnalyzer(self.config.axe_script, self.config.axe_tags)

    async def scan(self, url: str, page: Any, project: str = "default") -> DiagnosticRecord:
        record = DiagnosticRecord(url=url, project=project)
        capture = SignalCapture(page)
        # the record shares the capture lists, so a partial record stays current
        record.console_messages = capture.console_messages
        record.failed_requests = capture.failed_requests
        logger.info("[%s] Scanning %s", project, url)

        try:
            await self._step(record, page, "instrumentation", lambda: _sync(capture.attach))
            await self._navigate(record, page)

            shot = await self._step(record, page, "baseline screenshot", page.screenshot)
            record.before_shot = shot or b""

            a11y = await self._step(record, page, "accessibility", lambda: self.analyzer.analyze(page))
            record.accessibility = a11y if a11y is not None else {"error": record.notes[-1]}

            await self._probe(record, page)

            await asyncio.sleep(self.config.settle_delay)

            shot = await self._step(record, page, "comparison screenshot", page.screenshot)
            record.after_shot = shot or b""

            await self._step(record, page, "layout diff", lambda: _sync(lambda: self._diff(record)))
        finally:
            capture.detach()

        logger.info(
            "[%s] Done %s: status=%s console=%d failed_requests=%d shift=%.2f%%",
            project, url, record.http_status, len(record.console_messages),
            len(record.failed_requests), record.layout_shift_ratio * 100,
        )
        return record

    async def _navigate(self, record: DiagnosticRecord, page: Any) -> None:
        timeout_ms = self.config.navigation_timeout * 1000
        response = await self._step(
            record, page, "navigation",
            lambda: page.goto(record.url, wait_until="networkidle", timeout=timeout_ms),
        )
        record.http_status = response.status if response is not None else 0

    async def _probe(self, record: DiagnosticRecord, page: Any) -> None:
        runtime = await self._step(record, page, "math runtime probe", lambda: probe_math_runtime(page))
        result = await self._step(
            record, page, "math/layout probe",
            lambda: collect_page_diagnostics(page, runtime or MathRuntime.absent()),
        )
        if result is not None:
            record.math, record.layout = result

    def _diff(self, record: DiagnosticRecord) -> None:
        if not record.before_shot or not record.after_shot:
            raise ValueError("screenshot missing, layout shift not measured")
        diff = compare_screenshots(
            record.before_shot, record.after_shot, threshold=self.config.diff_threshold
        )
        record.layout_shift_ratio = diff.ratio
        record.diff_image = diff.diff_png

    async def _step(
        self,
        record: DiagnosticRecord,
        page: Any,
        name: str,
        action: Callable[[], Awaitable[_T]],
    ) -> Optional[_T]:
        try:
            return await action()
        except Exception as exc:
            message = f"{name} failed: {exc}"
            record.notes.append(message)
            logger.warning("[%s] %s: %s", record.project, record.url, message)
            if _session_lost(page):
                record.scanned = False
                raise SessionError(record.url, record, str(exc)) from exc
            return None


async def _sync(fn: Callable[[], _T]) -> _T:
    return fn()


def _session_lost(page: Any) -> bool:
    try:
        return bool(page.is_closed())
    except Exception:
        return True
