"""site_qa.diagnostics: диагностика одной страницы в headless-браузере."""

from site_qa.diagnostics.models import (
    DiagnosticRecord,
    FailedRequest,
    LayoutDiagnostics,
    MathDiagnostics,
)
from site_qa.diagnostics.pipeline import PageDiagnosticPipeline

__all__ = [
    "DiagnosticRecord",
    "FailedRequest",
    "LayoutDiagnostics",
    "MathDiagnostics",
    "PageDiagnosticPipeline",
]
