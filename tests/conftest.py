# File: tests/conftest.py
import io
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
from PIL import Image

from site_qa.config import ScannerConfig
from site_qa.diagnostics.probes import MATH_RUNTIME_PROBE_JS, PAGE_DIAGNOSTICS_JS


def make_png(color: Tuple[int, int, int] = (255, 255, 255), size: Tuple[int, int] = (20, 10)) -> bytes:
    """Return PNG bytes of a solid-colour image."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


CLEAN_PROBE: Dict[str, Any] = {
    "hasRenderedMath": False,
    "renderErrors": [],
    "rawMarkupSamples": [],
    "horizontalOverflow": False,
    "brokenImages": [],
}


class FakeConsoleMessage:
    def __init__(self, type_: str, text: str) -> None:
        self.type = type_
        self.text = text


class FakeRequest:
    def __init__(self, url: str, failure: Optional[str]) -> None:
        self.url = url
        self.failure = failure


class FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status


class FakePage:
    """Minimal stand-in for playwright.async_api.Page."""

    def __init__(
        self,
        *,
        status: Optional[int] = 200,
        goto_error: Optional[Exception] = None,
        shots: Optional[List[Any]] = None,
        probe: Optional[Dict[str, Any]] = None,
        runtime: Optional[Dict[str, Any]] = None,
        events: Optional[List[Tuple[str, Any]]] = None,
        axe_loaded: bool = True,
        axe_result: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.status = status
        self.goto_error = goto_error
        self.shots = list(shots) if shots is not None else [make_png(), make_png()]
        self.probe = dict(CLEAN_PROBE) if probe is None else probe
        self.runtime = runtime
        self.events = events or []
        self.axe_loaded = axe_loaded
        self.axe_result = axe_result if axe_result is not None else {"violations": [], "passes": []}
        self.closed = False
        self.handlers: Dict[str, List[Callable[[Any], None]]] = {}
        self.calls: List[Tuple[str, Any]] = []

    def on(self, event: str, handler: Callable[[Any], None]) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable[[Any], None]) -> None:
        self.handlers[event].remove(handler)
        if not self.handlers[event]:
            del self.handlers[event]

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.handlers.get(event, [])):
            handler(payload)

    def is_closed(self) -> bool:
        return self.closed

    async def goto(self, url: str, **kwargs: Any) -> Optional[FakeResponse]:
        self.calls.append(("goto", (url, kwargs)))
        for event, payload in self.events:
            self.emit(event, payload)
        if self.goto_error is not None:
            raise self.goto_error
        return FakeResponse(self.status) if self.status is not None else None

    async def screenshot(self, **kwargs: Any) -> bytes:
        self.calls.append(("screenshot", kwargs))
        shot = self.shots.pop(0)
        if isinstance(shot, Exception):
            raise shot
        return shot

    async def add_script_tag(self, **kwargs: Any) -> None:
        self.calls.append(("add_script_tag", kwargs))
        self.axe_loaded = True

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        self.calls.append(("evaluate", arg))
        if script == MATH_RUNTIME_PROBE_JS:
            return self.runtime
        if script == PAGE_DIAGNOSTICS_JS:
            if isinstance(self.probe, Exception):
                raise self.probe
            return self.probe
        if "typeof window.axe" in script:
            return self.axe_loaded
        if "axe.run" in script:
            return self.axe_result
        raise AssertionError(f"unexpected script: {script[:40]}")


class StubAnalyzer:
    def __init__(self, result: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None) -> None:
        self.result = result if result is not None else {"violations": []}
        self.error = error

    async def analyze(self, page: Any) -> Dict[str, Any]:
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture()
def basic_config(tmp_path) -> ScannerConfig:
    """
    Return a ScannerConfig suitable for fast tests: no settle delay, no retries.
    """
    return ScannerConfig(
        user_agent="TestAgent/1.0",
        fetch_timeout=2.0,
        retry_times=0,
        settle_delay=0,
        output_dir=tmp_path / "report",
    )
