"""Tests for logging setup."""

import json
import logging
from pathlib import Path

import pytest

from mirkit.runtime.logging import (
    LOG_FILE_NAME,
    JSONLFormatter,
    component_name,
    log_with_context,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the mirkit logger after each test."""
    yield
    logger = logging.getLogger("mirkit")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestLogging:
    """Tests for the JSONL log file and formatters."""

    def test_component_name(self) -> None:
        """The package prefix is stripped from logger names."""
        assert component_name("mirkit.core.routing") == "core.routing"
        assert component_name("other") == "other"

    def test_jsonl_formatter(self) -> None:
        """Records become one JSON object with structured context."""
        record = logging.LogRecord("mirkit.adapters.icons", logging.WARNING, __file__, 10, "failed %s", ("x",), None)
        record.context = {"provider": "phosphor"}
        entry = json.loads(JSONLFormatter().format(record))
        assert entry["level"] == "WARNING"
        assert entry["component"] == "adapters.icons"
        assert entry["message"] == "failed x"
        assert entry["context"] == {"provider": "phosphor"}
        assert entry["source"]["line"] == 10

    def test_file_logging(self, tmp_path: Path) -> None:
        """With a log directory, records at the level are written as JSONL."""
        logger = setup_logging(level=logging.DEBUG, log_dir=tmp_path)
        log_with_context(logging.getLogger("mirkit.codegen"), logging.INFO, "compiled", name="Card")
        for handler in logger.handlers:
            handler.flush()

        lines = (tmp_path / LOG_FILE_NAME).read_text().splitlines()
        entries = [json.loads(line) for line in lines]
        assert entries[0]["message"] == "mirkit logging initialized"
        assert entries[-1]["component"] == "codegen"
        assert entries[-1]["context"] == {"name": "Card"}

    def test_console_only(self) -> None:
        """Without a log directory only the console handler is installed."""
        logger = setup_logging()
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
