from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

import pytest

import cyclelog.api as cyclelog_api
from cyclelog.config import loader
from cyclelog.core.manager import GLOBAL_MANAGER, LOGGER_NAME


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(tmp_path / "user-config"))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("CYCLELOG__") or key == "CYCLELOG_CONFIG":
            monkeypatch.delenv(key)
    yield


@pytest.fixture(autouse=True)
def reset_cyclelog() -> Iterator[None]:
    yield
    GLOBAL_MANAGER.shutdown()
    cyclelog_api._CONFIG = None
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
