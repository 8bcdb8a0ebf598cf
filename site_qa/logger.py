# === FILE: site_qa/logger.py ===
"""Логирование SiteQA.

Все модули пишут в один логгер ``SiteQA``::

    from site_qa.logger import logger
    logger.info("Scan started")

Консольный вывод идёт в *stderr*: stdout команды ``sitemap`` занят списком
URL. Файл лога (если задан) ротируется по 5 MB, хранится три копии.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "SiteQA"
LOG_FILE_MAX_BYTES: Final[int] = 5 * 1024 * 1024
LOG_FILE_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _stderr_handler(fmt: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    Path(file).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _drop_handlers(lg: logging.Logger) -> None:
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Перенастраивает логгер ``SiteQA``.

    Старые обработчики закрываются, так что повторный вызов (например, из
    CLI после разбора опций) не дублирует строки и не держит открытый файл.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Path to a logfile. *None* → stderr only.
    log_format
        Format string for :class:`logging.Formatter`.
    """
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    _drop_handlers(lg)
    lg.addHandler(_stderr_handler(log_format))
    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Positional shortcut for :func:`configure`, used by the CLI."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "LOGGER_NAME", "DEFAULT_FORMAT"]
