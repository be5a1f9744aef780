from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from cyclelog import Rotation
from cyclelog.config.schema import LoggingSettings
from cyclelog.core.errors import ConfigurationError
from cyclelog.core.manager import GLOBAL_MANAGER, LOGGER_NAME, build_formatter
from cyclelog.formatters.jsonl import JSONLinesFormatter
from cyclelog.formatters.text import RotationTextFormatter
from cyclelog.handlers.console import build_console_handler


def test_jsonl_reports_rotation_events(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    GLOBAL_MANAGER.configure(LoggingSettings(level="INFO", stream="stdout", format="jsonl"))
    log = tmp_path / "app.log"
    log.write_text("data", encoding="utf-8")
    (tmp_path / "dir.log").mkdir()

    rotation = Rotation()
    assert rotation.rotate(log)
    assert not rotation.rotate(tmp_path / "dir.log")

    records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert [record["level"] for record in records] == ["INFO", "ERROR"]
    assert records[0]["name"] == "cyclelog.rotation"
    assert records[0]["target"] == str(log)
    assert records[1]["code"] == 10
    assert records[1]["target"] == str(tmp_path / "dir.log")


def test_text_format_and_level_threshold(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    GLOBAL_MANAGER.configure(LoggingSettings(level="WARNING", stream="stderr", format="text"))
    log = tmp_path / "app.log"
    log.write_text("data", encoding="utf-8")
    (tmp_path / "dir.log").mkdir()

    assert Rotation().rotate(log)
    assert not Rotation().rotate(tmp_path / "dir.log")

    lines = capsys.readouterr().err.splitlines()
    assert len(lines) == 1
    assert "| ERROR |" in lines[0]
    assert f"| {tmp_path / 'dir.log'} |" in lines[0]
    assert lines[0].endswith("code=10")


def test_shutdown_detaches_handler() -> None:
    GLOBAL_MANAGER.configure(LoggingSettings())
    logger = logging.getLogger(LOGGER_NAME)
    assert len(logger.handlers) == 1

    GLOBAL_MANAGER.shutdown()

    assert logger.handlers == []
    assert logger.propagate is True
    assert GLOBAL_MANAGER.settings is None


def test_reconfigure_replaces_handler() -> None:
    first = GLOBAL_MANAGER.configure(LoggingSettings())
    second = GLOBAL_MANAGER.configure(LoggingSettings(format="jsonl"))

    handlers = logging.getLogger(LOGGER_NAME).handlers
    assert handlers == [second]
    assert first is not second
    assert isinstance(second.formatter, JSONLinesFormatter)


def test_text_formatter_fills_missing_fields() -> None:
    formatter = RotationTextFormatter(show_code=True)
    record = logging.LogRecord("cyclelog.rotation", logging.INFO, __file__, 1, "hello", None, None)

    line = formatter.format(record)

    assert line.endswith("| cyclelog.rotation | - | hello | code=-")


def test_unknown_formatter_kind() -> None:
    with pytest.raises(ValueError):
        build_formatter("xml")


def test_console_handler_follows_redirected_stream(capsys: pytest.CaptureFixture[str]) -> None:
    handler = build_console_handler("stdout", formatter=logging.Formatter("%(message)s"))
    handler.handle(logging.LogRecord("cyclelog.rotation", logging.INFO, __file__, 1, "rotated", None, None))

    assert capsys.readouterr().out == "rotated\n"


def test_console_handler_rejects_unknown_stream() -> None:
    with pytest.raises(ConfigurationError):
        build_console_handler("file")
