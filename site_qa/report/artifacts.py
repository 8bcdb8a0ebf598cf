# site_qa/report/artifacts.py
"""
Per-page artifacts: the structured evidence behind each page's assertions.
"""
from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Union

from site_qa.diagnostics.models import DiagnosticRecord
from site_qa.logger import logger


def _write_json(path: Path, data: Any) -> None:
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")


def write_artifacts(
    record: DiagnosticRecord,
    directory: Union[str, Path],
    *,
    keep_screenshots: bool = False,
) -> Dict[str, str]:
    """Сохраняет артефакты записи в *directory* и возвращает {имя: путь}.

    Всегда: ``a11y.json``, ``math.json``; ``layout-diff.png`` — если diff
    посчитан; ``console.txt`` и ``request-failures.json`` — только если не пусты.
    """
    out = Path(directory)
    out.mkdir(parents=True, exist_ok=True)
    written: Dict[str, Path] = {}

    written["a11y.json"] = out / "a11y.json"
    _write_json(written["a11y.json"], record.accessibility)

    written["math.json"] = out / "math.json"
    _write_json(written["math.json"], {**asdict(record.math), **asdict(record.layout)})

    if record.diff_image:
        written["layout-diff.png"] = out / "layout-diff.png"
        written["layout-diff.png"].write_bytes(record.diff_image)

    if record.console_messages:
        written["console.txt"] = out / "console.txt"
        written["console.txt"].write_text("\n".join(record.console_messages), encoding="utf-8")

    if record.failed_requests:
        written["request-failures.json"] = out / "request-failures.json"
        _write_json(written["request-failures.json"], [asdict(r) for r in record.failed_requests])

    if keep_screenshots:
        for name, data in (("before.png", record.before_shot), ("after.png", record.after_shot)):
            if data:
                written[name] = out / name
                written[name].write_bytes(data)

    logger.debug("Wrote %d artifacts for %s to %s", len(written), record.url, out)
    return {name: str(path) for name, path in written.items()}
