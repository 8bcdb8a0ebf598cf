# File: site_qa/report/__init__.py
"""site_qa.report: артефакты страниц и сводные отчёты (JSON и HTML)."""

from __future__ import annotations

from site_qa.report.artifacts import write_artifacts
from site_qa.report.html_report import render_html
from site_qa.report.json_report import render_json

__all__ = ["write_artifacts", "render_json", "render_html"]
