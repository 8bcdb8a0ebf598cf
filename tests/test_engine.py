# File: tests/test_engine.py
"""Batch engine with a fake browser: isolation, bounded concurrency, hard failures."""
from __future__ import annotations

import asyncio
from typing import Any, Dict, List

import pytest

from site_qa.config import ProjectConfig, ScannerConfig
from site_qa.diagnostics.models import DiagnosticRecord
from site_qa.diagnostics.pipeline import PageDiagnosticPipeline
from site_qa.engine import context_options, run_scans
from site_qa.exceptions import SessionError
from site_qa.utils import artifact_slug
from tests.conftest import FakePage, StubAnalyzer

DEVICES = {
    "Pixel 7": {
        "user_agent": "Mozilla/5.0 (Linux; Android 14; Pixel 7)",
        "viewport": {"width": 412, "height": 839},
        "device_scale_factor": 2.625,
        "is_mobile": True,
        "has_touch": True,
        "default_browser_type": "chromium",
    }
}


class FakeContext:
    def __init__(self, browser: "FakeBrowser", options: Dict[str, Any]) -> None:
        self.browser = browser
        self.options = options
        self.closed = False

    async def new_page(self) -> FakePage:
        page = FakePage()
        self.browser.pages.append(page)
        return page

    async def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, fail_contexts: int = 0) -> None:
        self.contexts: List[FakeContext] = []
        self.pages: List[FakePage] = []
        self.fail_contexts = fail_contexts

    async def new_context(self, **options: Any) -> FakeContext:
        if self.fail_contexts:
            self.fail_contexts -= 1
            raise RuntimeError("Browser has been closed")
        context = FakeContext(self, options)
        self.contexts.append(context)
        return context


class RecordingPipeline:
    """Stand-in pipeline tracking how many scans run at the same time."""

    def __init__(self, behaviour: Dict[str, str] | None = None) -> None:
        self.behaviour = behaviour or {}
        self.active = 0
        self.max_active = 0

    async def scan(self, url: str, page: Any, project: str = "default") -> DiagnosticRecord:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(0.05)
            mode = self.behaviour.get(url)
            if mode == "timeout":
                return DiagnosticRecord(url=url, project=project, notes=["navigation failed: Timeout"])
            if mode == "session":
                partial = DiagnosticRecord(url=url, project=project, http_status=200, scanned=False)
                raise SessionError(url, partial, "Target closed")
            if mode == "crash":
                raise RuntimeError("renderer crashed")
            return DiagnosticRecord(url=url, project=project, http_status=200)
        finally:
            self.active -= 1


URLS = ["https://example.com/a", "https://example.com/b", "https://example.com/c"]


@pytest.mark.asyncio()
async def test_one_isolated_context_per_url(basic_config):
    browser = FakeBrowser()
    pipeline = PageDiagnosticPipeline(basic_config, analyzer=StubAnalyzer())
    report = await run_scans(browser, basic_config, URLS, pipeline=pipeline)

    assert [p.record.url for p in report.pages] == URLS
    assert report.hard_failures == []
    assert len(browser.contexts) == 3
    assert all(c.closed for c in browser.contexts)


@pytest.mark.asyncio()
async def test_timeout_page_still_reported(basic_config):
    pipeline = RecordingPipeline({"https://example.com/b": "timeout"})
    report = await run_scans(FakeBrowser(), basic_config, URLS, pipeline=pipeline)

    assert len(report.pages) == 3
    page_b = report.pages[1]
    assert page_b.record.scanned
    assert page_b.record.http_status == 0
    assert not page_b.report.passed
    assert report.summary()["hard_failures"] == 0


@pytest.mark.asyncio()
async def test_hard_failures_do_not_abort_siblings(basic_config):
    pipeline = RecordingPipeline(
        {"https://example.com/a": "session", "https://example.com/b": "crash"}
    )
    report = await run_scans(FakeBrowser(), basic_config, URLS, pipeline=pipeline)

    by_url = {p.record.url: p for p in report.pages}
    assert not by_url["https://example.com/a"].record.scanned
    assert by_url["https://example.com/a"].record.http_status == 200  # partial kept
    assert not by_url["https://example.com/b"].record.scanned
    assert "renderer crashed" in by_url["https://example.com/b"].record.notes[0]
    assert by_url["https://example.com/c"].report.passed
    assert len(report.hard_failures) == 2


@pytest.mark.asyncio()
async def test_context_creation_failure_marks_page_unscanned(basic_config):
    report = await run_scans(FakeBrowser(fail_contexts=1), basic_config, URLS[:2], pipeline=RecordingPipeline())
    assert sum(1 for p in report.pages if not p.record.scanned) == 1
    assert sum(1 for p in report.pages if p.record.scanned) == 1


@pytest.mark.asyncio()
async def test_concurrency_bounded_by_workers(basic_config):
    cfg = basic_config.model_copy(update={"workers": 2})
    pipeline = RecordingPipeline()
    urls = [f"https://example.com/{i}" for i in range(6)]
    await run_scans(FakeBrowser(), cfg, urls, pipeline=pipeline)
    assert pipeline.max_active == 2


@pytest.mark.asyncio()
async def test_projects_multiply_scans_and_write_artifacts(basic_config, tmp_path):
    cfg = basic_config.model_copy(
        update={"projects": [ProjectConfig(name="desktop"), ProjectConfig(name="mobile", device="Pixel 7")]}
    )
    browser = FakeBrowser()
    pipeline = PageDiagnosticPipeline(cfg, analyzer=StubAnalyzer())
    report = await run_scans(
        browser, cfg, URLS[:1], devices=DEVICES, pipeline=pipeline, output_dir=tmp_path / "out"
    )

    assert [p.record.project for p in report.pages] == ["desktop", "mobile"]
    assert browser.contexts[0].options["viewport"] == {"width": 1366, "height": 900}
    assert browser.contexts[1].options["is_mobile"] is True
    for page in report.pages:
        assert page.artifacts["a11y.json"].startswith(str(tmp_path / "out" / page.record.project))


def test_context_options_for_device_and_viewport():
    cfg = ScannerConfig(ignore_https_errors=False)
    desktop = context_options(ProjectConfig(name="desktop"), cfg, DEVICES)
    assert desktop == {"viewport": {"width": 1366, "height": 900}, "ignore_https_errors": False}

    phone = context_options(ProjectConfig(name="m", device="Pixel 7"), cfg, DEVICES)
    assert phone["viewport"] == {"width": 412, "height": 839}
    assert phone["user_agent"].startswith("Mozilla/5.0 (Linux; Android")
    assert "default_browser_type" not in phone

    custom = context_options(
        ProjectConfig(name="wide", viewport={"width": 1920, "height": 1080}), cfg, DEVICES
    )
    assert custom["viewport"] == {"width": 1920, "height": 1080}


def test_unknown_device_rejected():
    with pytest.raises(ValueError):
        context_options(ProjectConfig(name="m", device="Nokia 3310"), ScannerConfig(), DEVICES)


def test_context_options_browser_user_agent():
    cfg = ScannerConfig(browser_user_agent="SiteQA-Browser/1.0")
    desktop = context_options(ProjectConfig(name="desktop"), cfg, DEVICES)
    assert desktop["user_agent"] == "SiteQA-Browser/1.0"

    # the device descriptor keeps its own user agent
    phone = context_options(ProjectConfig(name="m", device="Pixel 7"), cfg, DEVICES)
    assert phone["user_agent"] == DEVICES["Pixel 7"]["user_agent"]

    # manifest User-Agent is not sent by the browser
    assert "user_agent" not in context_options(ProjectConfig(name="desktop"), ScannerConfig(), DEVICES)


@pytest.mark.asyncio()
async def test_artifact_write_failure_keeps_page_in_report(basic_config, tmp_path):
    out = tmp_path / "out"
    blocker = out / "desktop" / artifact_slug(URLS[1])
    blocker.parent.mkdir(parents=True)
    blocker.write_text("not a directory", encoding="utf-8")

    report = await run_scans(FakeBrowser(), basic_config, URLS, pipeline=RecordingPipeline(), output_dir=out)

    assert [p.record.url for p in report.pages] == URLS
    page_b = report.pages[1]
    assert page_b.artifacts == {}
    assert any(n.startswith("artifacts not written") for n in page_b.record.notes)
    assert page_b.record.scanned
    assert page_b.report.passed
    assert any(a.type == "note" and "artifacts not written" in a.description for a in page_b.report.annotations)
    assert report.pages[0].artifacts and report.pages[2].artifacts
