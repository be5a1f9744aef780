from __future__ import annotations

import gzip
import logging
from pathlib import Path

import pytest

from cyclelog.config.schema import RotationSettings
from cyclelog.handlers.file_rotating import (
    CyclingFileHandler,
    FileHandlerConfig,
    build_file_handler,
)


def test_rotation_and_retention(tmp_path: Path) -> None:
    config = FileHandlerConfig(
        filename=tmp_path / "logs" / "app.log",
        max_bytes=128,
        rotation=RotationSettings(files=2, compress=True),
    )
    handler = build_file_handler(config)
    logger = logging.getLogger("cyclelog_tests.rotation")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(handler)
    try:
        for idx in range(40):
            logger.info("event-%s %s", idx, "x" * 50)
    finally:
        logger.removeHandler(handler)
        handler.flush()
        handler.close()

    folder = tmp_path / "logs"
    archives = sorted(p.name for p in folder.iterdir() if p.name.startswith("app.log."))
    assert archives == ["app.log.1.gz", "app.log.2.gz"]
    newest = gzip.decompress((folder / "app.log.1.gz").read_bytes()).decode("utf-8")
    assert "event-" in newest
    assert (folder / "app.log").exists()


def test_rollover_keeps_every_record_with_truncate(tmp_path: Path) -> None:
    path = tmp_path / "app.log"
    handler = CyclingFileHandler(path, max_bytes=64)
    handler.rotation.truncate()
    logger = logging.getLogger("cyclelog_tests.truncate")
    logger.setLevel(logging.INFO)
    logger.propagate = False
    logger.addHandler(handler)
    try:
        for idx in range(10):
            logger.info("record-%02d %s", idx, "y" * 20)
    finally:
        logger.removeHandler(handler)
        handler.close()

    lines = []
    for candidate in sorted(tmp_path.iterdir()):
        lines.extend(candidate.read_text(encoding="utf-8").splitlines())
    assert sorted(line.split()[0] for line in lines) == [f"record-{idx:02d}" for idx in range(10)]


def test_config_rejects_non_positive_size(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        FileHandlerConfig(filename=tmp_path / "app.log", max_bytes=0)
