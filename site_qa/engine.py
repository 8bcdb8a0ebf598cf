# File: site_qa/engine.py
"""site_qa.engine: Orchestration layer — запуск браузера, пул воркеров и агрегация результатов."""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from playwright.async_api import async_playwright

from site_qa.aggregator import PageResult, ScanReport, aggregate_results, evaluate
from site_qa.config import ProjectConfig, ScannerConfig
from site_qa.diagnostics.models import DiagnosticRecord
from site_qa.diagnostics.pipeline import PageDiagnosticPipeline
from site_qa.exceptions import SessionError
from site_qa.logger import logger
from site_qa.report.artifacts import write_artifacts
from site_qa.utils import artifact_slug

__all__ = ["start_scan", "run_scans", "context_options"]


def context_options(
    project: ProjectConfig, config: ScannerConfig, devices: Mapping[str, Mapping[str, Any]]
) -> Dict[str, Any]:
    """Параметры browser.new_context() для проекта: эмуляция устройства или viewport."""
    if project.device:
        if project.device not in devices:
            raise ValueError(f"Unknown device for project {project.name!r}: {project.device!r}")
        options: Dict[str, Any] = dict(devices[project.device])
        options.pop("default_browser_type", None)
    else:
        options = {}
    if config.browser_user_agent and "user_agent" not in options:
        options["user_agent"] = config.browser_user_agent
    viewport = project.viewport or (None if project.device else config.viewport)
    if viewport is not None:
        options["viewport"] = {"width": viewport.width, "height": viewport.height}
    options["ignore_https_errors"] = config.ignore_https_errors
    return options


async def run_scans(
    browser: Any,
    config: ScannerConfig,
    urls: Sequence[str],
    *,
    devices: Optional[Mapping[str, Mapping[str, Any]]] = None,
    pipeline: Optional[PageDiagnosticPipeline] = None,
    output_dir: Optional[Path] = None,
) -> ScanReport:
    """Сканирует каждый URL в каждом проекте на уже запущенном браузере.

    Одновременно идёт не больше ``config.workers`` сканов, у каждого свой
    browser context. Сбой одного скана не останавливает остальные.
    """
    devices = devices or {}
    pipeline = pipeline or PageDiagnosticPipeline(config)
    output_dir = Path(output_dir or config.output_dir)
    options = {p.name: context_options(p, config, devices) for p in config.projects}
    semaphore = asyncio.Semaphore(config.workers)

    async def _scan_one(project: ProjectConfig, url: str) -> PageResult:
        async with semaphore:
            record = await _scan_in_context(browser, pipeline, options[project.name], project.name, url)
        try:
            artifacts = write_artifacts(
                record,
                output_dir / project.name / artifact_slug(url),
                keep_screenshots=config.keep_screenshots,
            )
        except OSError as exc:
            logger.error("[%s] Writing artifacts for %s failed: %s", project.name, url, exc)
            record.notes.append(f"artifacts not written: {exc}")
            artifacts = {}
        report = evaluate(record)
        status = "PASS" if report.passed else ("ERROR" if not record.scanned else "FAIL")
        logger.info("[%s] %s %s", project.name, status, url)
        return PageResult(record=record, report=report, artifacts=artifacts)

    start = time.monotonic()
    results: List[PageResult] = await asyncio.gather(
        *(_scan_one(project, url) for project in config.projects for url in urls)
    )
    scan_report = aggregate_results(results)
    summary = scan_report.summary()
    logger.info(
        "Scanned %d pages in %.2f s: %d passed, %d soft failures, %d hard failures",
        summary["pages"], time.monotonic() - start,
        summary["passed"], summary["soft_failures"], summary["hard_failures"],
    )
    return scan_report


async def _scan_in_context(
    browser: Any,
    pipeline: PageDiagnosticPipeline,
    options: Dict[str, Any],
    project: str,
    url: str,
) -> DiagnosticRecord:
    context = None
    try:
        context = await browser.new_context(**options)
        page = await context.new_page()
        return await pipeline.scan(url, page, project=project)
    except SessionError as exc:
        logger.error("[%s] %s", project, exc)
        return exc.record
    except Exception as exc:
        logger.error("[%s] Scan of %s aborted: %s", project, url, exc)
        return DiagnosticRecord(
            url=url, project=project, scanned=False, notes=[f"scan aborted: {exc}"]
        )
    finally:
        if context is not None:
            try:
                await context.close()
            except Exception as exc:
                logger.debug("Closing context for %s failed: %s", url, exc)


async def start_scan(config: ScannerConfig, urls: Sequence[str], **kwargs: Any) -> ScanReport:
    """Запускает Playwright, сканирует все страницы и возвращает ScanReport.

    Ошибка запуска браузера пробрасывается наружу — это жёсткий сбой прогона.
    """
    logger.info("Starting scan of %d URLs with %s (%d workers)", len(urls), config.browser, config.workers)
    async with async_playwright() as pw:
        browser = await getattr(pw, config.browser).launch(headless=config.headless)
        try:
            return await run_scans(browser, config, urls, devices=pw.devices, **kwargs)
        finally:
            await browser.close()
