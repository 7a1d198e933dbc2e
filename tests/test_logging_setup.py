# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from pragmatic_tasks.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_own_records_only() -> None:
    f = _ConsoleNoiseFilter()
    assert f.filter(_record("pragmatic_tasks.tasks.task_log", logging.DEBUG))
    assert f.filter(_record("pragmatic_tasks", logging.INFO))
    assert not f.filter(_record("dateutil", logging.WARNING))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert f.filter(_record("dateutil", logging.ERROR))


def test_setup_logging_writes_debug_to_file(tmp_path: Path, restore_root_logger) -> None:
    setup_logging(log_dir=tmp_path / "logs", console_level=logging.WARNING)

    assert len(restore_root_logger.handlers) == 2
    logging.getLogger("pragmatic_tasks.test").debug("hello file")
    for h in restore_root_logger.handlers:
        h.flush()

    assert "hello file" in (tmp_path / "logs" / "ptasks.log").read_text(encoding="utf-8")
