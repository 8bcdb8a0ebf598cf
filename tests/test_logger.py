# File: tests/test_logger.py
import logging
from logging.handlers import RotatingFileHandler

import pytest
from site_qa.logger import LOGGER_NAME, configure, init_logging


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    init_logging()


def test_reconfigure_replaces_handlers():
    configure(level="DEBUG")
    lg = configure(level="WARNING")
    assert len(lg.handlers) == 1
    assert lg.level == logging.WARNING
    assert lg.propagate is False


def test_log_file_gets_records(tmp_path):
    log_file = tmp_path / "logs" / "site-qa.log"
    lg = init_logging("INFO", log_file, "%(levelname)s %(message)s")
    file_handlers = [h for h in lg.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1

    logging.getLogger(LOGGER_NAME).info("hello %s", "file")
    file_handlers[0].flush()
    assert "INFO hello file" in log_file.read_text(encoding="utf-8")


def test_reconfigure_closes_old_file_handler(tmp_path):
    lg = init_logging("INFO", tmp_path / "first.log")
    old = next(h for h in lg.handlers if isinstance(h, RotatingFileHandler))
    init_logging("INFO")
    assert old not in lg.handlers
    assert old.stream is None
