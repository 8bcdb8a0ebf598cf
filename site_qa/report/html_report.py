# File: site_qa/report/html_report.py
"""site_qa.report.html_report: Генерация HTML-отчёта с помощью Jinja2."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from site_qa.aggregator import ScanReport

TEMPLATE_NAME = "report.html.j2"


def render_html(
    report: ScanReport,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Рендерит HTML-отчёт из шаблона и сохраняет его по указанному пути.

    Args:
        report: объект ScanReport.
        output_path: путь к итоговому HTML-файлу.
        template_dir: директория со своим ``report.html.j2``; по умолчанию
            используется шаблон из пакета.

    Returns:
        Path до сохранённого HTML-файла.

    Пример:
    ```python
    from site_qa.report.html_report import render_html
    html_path = render_html(report, 'site-qa-report/index.html')
    ```
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    loaders = [PackageLoader("site_qa", "templates")]
    if template_dir is not None:
        loaders.insert(0, FileSystemLoader(str(template_dir)))
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template(TEMPLATE_NAME)

    base = output_path.parent.resolve()
    pages = []
    for page in report.pages:
        entry = page.to_dict()
        entry["artifacts"] = {
            name: _relative(path, base) for name, path in entry["artifacts"].items()
        }
        pages.append(entry)

    context: dict[str, Any] = {
        "summary": report.summary(),
        "pages": pages,
    }

    html_content = template.render(**context)
    output_path.write_text(html_content, encoding="utf-8")

    return output_path


def _relative(path: str, base: Path) -> str:
    try:
        return Path(os.path.relpath(Path(path).resolve(), base)).as_posix()
    except ValueError:
        # different drive on Windows
        return Path(path).as_posix()
