# site_qa/diagnostics/models.py
"""
Data models for the page diagnostic pipeline.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

MAX_MATH_SAMPLES = 10
MAX_SAMPLE_LENGTH = 120


@dataclass(slots=True)
class FailedRequest:
    """Sub-resource request that failed at the transport level."""

    url: str
    reason: Optional[str] = None


@dataclass(slots=True)
class MathDiagnostics:
    has_rendered_math: bool = False
    render_errors: List[str] = field(default_factory=list)
    raw_markup_samples: List[str] = field(default_factory=list)
    runtime_present: bool = False

    @classmethod
    def from_probe(cls, data: Dict[str, Any]) -> MathDiagnostics:
        """Строит объект из результата in-page скрипта, обрезая списки до лимитов."""
        errors = [str(e) for e in data.get("renderErrors") or [] if e is not None]
        samples = [str(s)[:MAX_SAMPLE_LENGTH] for s in data.get("rawMarkupSamples") or []]
        return cls(
            has_rendered_math=bool(data.get("hasRenderedMath")),
            render_errors=errors[:MAX_MATH_SAMPLES],
            raw_markup_samples=samples[:MAX_MATH_SAMPLES],
            runtime_present=bool(data.get("runtimePresent")),
        )


@dataclass(slots=True)
class LayoutDiagnostics:
    horizontal_overflow: bool = False
    broken_images: List[str] = field(default_factory=list)

    @classmethod
    def from_probe(cls, data: Dict[str, Any]) -> LayoutDiagnostics:
        return cls(
            horizontal_overflow=bool(data.get("horizontalOverflow")),
            broken_images=[str(src) for src in data.get("brokenImages") or []],
        )


@dataclass(slots=True)
class DiagnosticRecord:
    """Все сигналы, собранные для одной страницы.

    Каждое поле имеет пустое значение по умолчанию: сбой отдельного шага
    ухудшает значения полей, но запись существует всегда.
    """

    url: str
    project: str = "default"
    http_status: int = 0
    console_messages: List[str] = field(default_factory=list)
    failed_requests: List[FailedRequest] = field(default_factory=list)
    accessibility: Dict[str, Any] = field(default_factory=dict)
    math: MathDiagnostics = field(default_factory=MathDiagnostics)
    layout: LayoutDiagnostics = field(default_factory=LayoutDiagnostics)
    layout_shift_ratio: float = 0.0
    before_shot: bytes = b""
    after_shot: bytes = b""
    diff_image: bytes = b""
    notes: List[str] = field(default_factory=list)
    scanned: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe representation without the binary image buffers."""
        data = asdict(self)
        for key in ("before_shot", "after_shot", "diff_image"):
            data.pop(key)
        return data


__all__ = [
    "FailedRequest",
    "MathDiagnostics",
    "LayoutDiagnostics",
    "DiagnosticRecord",
    "MAX_MATH_SAMPLES",
    "MAX_SAMPLE_LENGTH",
]
