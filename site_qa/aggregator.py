# File: site_qa/aggregator.py
"""site_qa.aggregator: Оценка DiagnosticRecord по порогам и сводный отчёт прогона."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List

from site_qa.diagnostics.models import DiagnosticRecord


@dataclass(slots=True)
class AssertionOutcome:
    """Результат одной мягкой проверки."""

    name: str
    passed: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "passed": self.passed, "message": self.message}


@dataclass(slots=True)
class Annotation:
    """Информационная метка страницы (не pass/fail)."""

    type: str
    description: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type, "description": self.description}


@dataclass(slots=True)
class ThresholdReport:
    url: str
    project: str
    assertions: List[AssertionOutcome] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(a.passed for a in self.assertions)

    @property
    def failures(self) -> List[AssertionOutcome]:
        return [a for a in self.assertions if not a.passed]

    def check(self, name: str, passed: bool, message: str) -> None:
        self.assertions.append(AssertionOutcome(name, bool(passed), message))

    def annotate(self, type_: str, description: str) -> None:
        self.annotations.append(Annotation(type_, description))


def evaluate(record: DiagnosticRecord) -> ThresholdReport:
    """Сводит запись к списку мягких проверок и меток. Ничего не бросает и не пишет."""
    report = ThresholdReport(url=record.url, project=record.project)
    math = record.math

    if not record.scanned:
        report.check("session", False, "Page scan was interrupted by a browser session failure")
    report.check(
        "status", 200 <= record.http_status < 400, f"HTTP status {record.http_status} in [200, 400)"
    )
    report.check(
        "console", not record.console_messages,
        f"No console errors ({len(record.console_messages)} found)",
    )
    report.check(
        "requests", not record.failed_requests,
        f"No failed requests ({len(record.failed_requests)} found)",
    )
    report.check("overflow", not record.layout.horizontal_overflow, "No horizontal overflow")
    report.check(
        "math-errors", not math.render_errors,
        f"No MathJax errors ({len(math.render_errors)} found)",
    )
    report.check(
        "raw-math", not math.raw_markup_samples or math.has_rendered_math,
        "Raw TeX should be rendered",
    )

    report.annotate("status", str(record.http_status))
    report.annotate("layoutShift", f"{record.layout_shift_ratio * 100:.2f}% pixels changed")
    if math.raw_markup_samples and not math.has_rendered_math:
        report.annotate("math", "Unprocessed TeX detected")
    if math.render_errors:
        report.annotate("math", f"MathJax errors: {len(math.render_errors)}")
    if record.layout.broken_images:
        report.annotate("img", f"Broken images: {len(record.layout.broken_images)}")
    for note in record.notes:
        report.annotate("note", note)
    return report


@dataclass(slots=True)
class PageResult:
    """Запись, её оценка и пути к сохранённым артефактам."""

    record: DiagnosticRecord
    report: ThresholdReport
    artifacts: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.record.url,
            "project": self.record.project,
            "scanned": self.record.scanned,
            "status": self.record.http_status,
            "passed": self.report.passed,
            "layout_shift_ratio": self.record.layout_shift_ratio,
            "assertions": [a.to_dict() for a in self.report.assertions],
            "annotations": [a.to_dict() for a in self.report.annotations],
            "artifacts": dict(self.artifacts),
        }


@dataclass(slots=True)
class ScanReport:
    """Результаты прогона по всем страницам и проектам."""

    pages: List[PageResult] = field(default_factory=list)

    @property
    def hard_failures(self) -> List[PageResult]:
        return [p for p in self.pages if not p.record.scanned]

    @property
    def soft_failures(self) -> List[PageResult]:
        return [p for p in self.pages if p.record.scanned and not p.report.passed]

    def summary(self) -> Dict[str, int]:
        return {
            "pages": len(self.pages),
            "passed": sum(1 for p in self.pages if p.report.passed),
            "soft_failures": len(self.soft_failures),
            "hard_failures": len(self.hard_failures),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary(), "pages": [p.to_dict() for p in self.pages]}

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def aggregate_results(results: List[PageResult]) -> ScanReport:
    """Собирает результаты страниц в ScanReport."""
    return ScanReport(pages=list(results))


__all__ = [
    "AssertionOutcome",
    "Annotation",
    "ThresholdReport",
    "PageResult",
    "ScanReport",
    "evaluate",
    "aggregate_results",
]
