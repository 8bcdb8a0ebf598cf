# site_qa/diagnostics/probes.py
"""
In-page probes: math typesetting runtime detection and math/layout checks.

The scripts run inside the page's JavaScript context via ``page.evaluate``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Tuple

from site_qa.diagnostics.models import (
    MAX_MATH_SAMPLES,
    MAX_SAMPLE_LENGTH,
    LayoutDiagnostics,
    MathDiagnostics,
)

__all__ = ("MathRuntime", "probe_math_runtime", "collect_page_diagnostics")

MATH_RUNTIME_PROBE_JS = """
() => {
  const mj = window.MathJax;
  if (!mj || !mj.startup || typeof mj.startup.promise?.then !== 'function') return null;
  return { version: typeof mj.version === 'string' ? mj.version : null };
}
"""

# MathJax v3 renders to <mjx-container>, errors to <mjx-merror>.
PAGE_DIAGNOSTICS_JS = r"""
async ([waitForStartup, maxSamples, maxLength]) => {
  if (waitForStartup) {
    try { await window.MathJax.startup.promise; } catch (e) {}
  }

  const hasRenderedMath = !!document.querySelector('mjx-container');
  const renderErrors = Array.from(document.querySelectorAll('mjx-merror'))
    .slice(0, maxSamples)
    .map(e => (e.textContent || '').trim());

  const rawMarkupSamples = [];
  const skip = new Set(['SCRIPT', 'STYLE', 'CODE', 'PRE', 'NOSCRIPT']);
  const rx = /(\$\$[^$]+\$\$|\$[^$]+\$|\\\[.+?\\\]|\\\(.+?\\\))/s;
  if (document.body) {
    const walker = document.createTreeWalker(document.body, NodeFilter.SHOW_TEXT);
    while (rawMarkupSamples.length < maxSamples && walker.nextNode()) {
      const node = walker.currentNode;
      const parent = node.parentElement;
      if (parent && skip.has(parent.tagName)) continue;
      const text = (node.textContent || '').trim();
      if (rx.test(text)) rawMarkupSamples.push(text.slice(0, maxLength));
    }
  }

  const horizontalOverflow = document.documentElement.scrollWidth > window.innerWidth + 1;
  const brokenImages = Array.from(document.images)
    .filter(img => img.complete && img.naturalWidth === 0)
    .map(img => img.src);

  return { hasRenderedMath, renderErrors, rawMarkupSamples, horizontalOverflow, brokenImages };
}
"""


@dataclass(frozen=True, slots=True)
class MathRuntime:
    """Result of the capability probe: present (with its version, if exposed) or absent."""

    present: bool
    version: Optional[str] = None

    @classmethod
    def absent(cls) -> MathRuntime:
        return cls(present=False)


async def probe_math_runtime(page: Any) -> MathRuntime:
    """Проверяет, есть ли на странице MathJax с сигналом окончания запуска."""
    info = await page.evaluate(MATH_RUNTIME_PROBE_JS)
    if not isinstance(info, dict):
        return MathRuntime.absent()
    version = info.get("version")
    return MathRuntime(present=True, version=version if isinstance(version, str) else None)


async def collect_page_diagnostics(
    page: Any, runtime: MathRuntime
) -> Tuple[MathDiagnostics, LayoutDiagnostics]:
    """Runs the math/layout script and converts its result into model objects."""
    data = await page.evaluate(
        PAGE_DIAGNOSTICS_JS, [runtime.present, MAX_MATH_SAMPLES, MAX_SAMPLE_LENGTH]
    )
    if not isinstance(data, dict):
        data = {}
    math = MathDiagnostics.from_probe(data)
    math.runtime_present = runtime.present
    return math, LayoutDiagnostics.from_probe(data)
