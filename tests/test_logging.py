# tests/test_logging.py

from __future__ import annotations

import logging
from pathlib import Path

from sitebuild.orchestrator.logging import get_logger


def test_names_are_placed_under_sitebuild() -> None:
    assert get_logger("cli").name == "sitebuild.cli"
    assert get_logger("sitebuild.watch").name == "sitebuild.watch"
    assert get_logger("sitebuild").name == "sitebuild"
    assert get_logger("sitebuildx").name == "sitebuild.sitebuildx"


def test_file_handler_on_root_sees_child_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "build.log"
    root = get_logger("sitebuild", log_file)
    try:
        get_logger("tasks.html").warning("copied %d file(s)", 3)
        for handler in root.handlers:
            handler.flush()
        assert "sitebuild.tasks.html | WARNING | copied 3 file(s)" in log_file.read_text(
            encoding="utf-8"
        )
        assert get_logger("sitebuild", log_file).handlers == root.handlers
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        logging.getLogger("sitebuild").handlers.clear()
