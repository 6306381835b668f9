"""Unit tests for logging setup.

Tests cover:
- setup_logger with JSON output
- routing of standard logging records through InterceptHandler
- import ID correlation
"""

import json
import logging

import pytest

from apkg_import.core.config import get_settings
from apkg_import.shared.context import import_id_var
from apkg_import.shared.logging import InterceptHandler, get_logger, setup_logger


@pytest.fixture
def json_logging(monkeypatch: pytest.MonkeyPatch, reset_logging) -> None:
    """Configure JSON lines output at DEBUG level."""
    monkeypatch.setenv("LOG_FORMAT", "json")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    get_settings.cache_clear()
    setup_logger()


def _records(output: str) -> list[dict]:
    return [json.loads(line) for line in output.splitlines() if line.strip()]


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_package_logger_is_intercepted(self, json_logging):
        package_logger = logging.getLogger("apkg_import")

        assert any(isinstance(h, InterceptHandler) for h in package_logger.handlers)
        assert package_logger.propagate is False
        assert package_logger.level == logging.DEBUG

    def test_stdlib_record_becomes_json(self, json_logging, capsys: pytest.CaptureFixture[str]):
        capsys.readouterr()

        logging.getLogger("apkg_import.modules.apkg.collection").info("Parsed %s", "collection.anki2")

        records = _records(capsys.readouterr().out)
        assert len(records) == 1
        assert records[0]["message"] == "Parsed collection.anki2"
        assert records[0]["level"] == "INFO"
        assert records[0]["service"] == "apkg-import"
        assert records[0]["import_id"] == "-"

    def test_import_id_is_attached(self, json_logging, capsys: pytest.CaptureFixture[str]):
        capsys.readouterr()
        token = import_id_var.set("deadbeef")
        try:
            logging.getLogger("apkg_import.tests").warning("inside an import")
        finally:
            import_id_var.reset(token)

        records = _records(capsys.readouterr().out)
        assert records[-1]["import_id"] == "deadbeef"
        assert records[-1]["level"] == "WARNING"

    def test_parse_is_logged(self, json_logging, capsys: pytest.CaptureFixture[str], apkg_path):
        from apkg_import.modules.apkg import parse_package

        capsys.readouterr()
        parse_package(apkg_path)

        messages = [record["message"] for record in _records(capsys.readouterr().out)]
        assert any(m.startswith("Parsed collection.anki2") for m in messages)

    def test_bound_logger_name(self, json_logging, capsys: pytest.CaptureFixture[str]):
        capsys.readouterr()

        get_logger("apkg_import.cli").info("bound")

        record = _records(capsys.readouterr().out)[-1]
        assert record["message"] == "bound"
        assert record["module"] == "apkg_import.cli"
        assert "name" not in record
