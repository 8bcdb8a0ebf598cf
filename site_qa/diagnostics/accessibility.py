# site_qa/diagnostics/accessibility.py
"""
Accessibility analysis with axe-core injected into the page.

axe-core is a JavaScript library; it is loaded from ``axe.min.js`` on disk
(``npm install axe-core`` provides it). Lookup order:

1. ``axe_script`` from the configuration;
2. the ``AXE_CORE_JS`` environment variable;
3. ``./node_modules/axe-core/axe.min.js``.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Sequence

from site_qa.logger import logger

__all__ = ("AccessibilityAnalyzer", "AxeAnalyzer", "resolve_axe_script")

_LOCAL_AXE = Path("node_modules/axe-core/axe.min.js")

AXE_RUN_JS = """
async (tags) => {
  return await window.axe.run(document, { runOnly: { type: 'tag', values: tags } });
}
"""


class AccessibilityAnalyzer(Protocol):
    async def analyze(self, page: Any) -> Dict[str, Any]:
        ...


def resolve_axe_script(configured: Optional[Path] = None) -> Optional[Path]:
    """Возвращает путь к axe.min.js или None, если он не найден."""
    candidates = [configured, os.environ.get("AXE_CORE_JS"), _LOCAL_AXE]
    for candidate in candidates:
        if not candidate:
            continue
        path = Path(candidate).expanduser()
        if path.is_file():
            return path
    return None


class AxeAnalyzer:
    """Runs axe-core restricted to the given rule tags (WCAG A and AA by default)."""

    def __init__(self, script: Optional[Path] = None, tags: Sequence[str] = ("wcag2a", "wcag2aa")) -> None:
        self.script = resolve_axe_script(script)
        self.tags = list(tags)
        if self.script is None:
            logger.warning("axe-core script not found, accessibility analysis will be skipped")

    async def analyze(self, page: Any) -> Dict[str, Any]:
        if not await page.evaluate("() => typeof window.axe !== 'undefined'"):
            if self.script is None:
                raise RuntimeError("axe-core is not available (set axe_script or AXE_CORE_JS)")
            await page.add_script_tag(path=str(self.script))
        result = await page.evaluate(AXE_RUN_JS, self.tags)
        if not isinstance(result, dict):
            raise RuntimeError(f"unexpected axe-core result: {type(result).__name__}")
        return result
