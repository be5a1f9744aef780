from __future__ import annotations

from pathlib import Path

import pytest

from cyclelog.config import loader
from cyclelog.config.schema import build_config, default_config
from cyclelog.core.errors import ConfigurationError


def test_configuration_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    user_dir = tmp_path / "user"
    user_dir.mkdir()
    (user_dir / "cyclelog.toml").write_text("""[rotation]\nfiles = 1\n""")
    monkeypatch.setattr(loader, "user_config_dir", lambda _: str(user_dir))

    project_dir = tmp_path / "project"
    project_dir.mkdir()
    (project_dir / "cyclelog.toml").write_text("""[rotation]\nfiles = 2\n""")
    monkeypatch.chdir(project_dir)

    (project_dir / "pyproject.toml").write_text("""[tool.cyclelog.rotation]\nfiles = 3\n""")

    monkeypatch.setenv("CYCLELOG__ROTATION__FILES", "4")

    config = loader.load_configuration({"rotation": {"files": 5}})
    assert config.rotation.files == 5

    config = loader.load_configuration({})
    assert config.rotation.files == 4

    monkeypatch.delenv("CYCLELOG__ROTATION__FILES")
    config = loader.load_configuration({})
    assert config.rotation.files == 3

    (project_dir / "pyproject.toml").unlink()
    config = loader.load_configuration({})
    assert config.rotation.files == 2

    (project_dir / "cyclelog.toml").unlink()
    config = loader.load_configuration({})
    assert config.rotation.files == 1


def test_env_config_trims_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CYCLELOG__LOGGING__LEVEL", "  DEBUG  ")

    config = loader.load_configuration({})

    assert config.logging.level == "DEBUG"


def test_env_config_coerces_nested_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CYCLELOG__ROTATION__COMPRESS__ENABLED", "true")
    monkeypatch.setenv("CYCLELOG__ROTATION__COMPRESS__LEVEL", "3")
    monkeypatch.setenv("CYCLELOG__ROTATION__MIN_SIZE", "2K")

    config = loader.load_configuration({})

    assert config.rotation.compress is True
    assert config.rotation.compress_level == 3
    assert config.rotation.min_size == 2048


def test_explicit_yaml_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "rotation.yaml"
    config_file.write_text(
        "rotation:\n"
        "  files: 4\n"
        "  truncate: true\n"
        "targets:\n"
        "  - path: app.log\n"
        "    files: 2\n"
        "  - other.log\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("CYCLELOG__ROTATION__TRUNCATE", "false")

    config = loader.load_configuration({}, config_file=config_file)

    assert config.rotation.files == 4
    assert config.rotation.truncate is False
    assert [str(t.path) for t in config.targets] == ["app.log", "other.log"]
    assert config.settings_for("app.log").files == 2
    assert config.settings_for("other.log").files == 4


def test_explicit_file_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        loader.load_configuration({}, config_file=tmp_path / "absent.toml")


def test_explicit_file_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "rotation.toml"
    config_file.write_text("[rotation]\nfiles = 7\n", encoding="utf-8")
    monkeypatch.setenv("CYCLELOG_CONFIG", str(config_file))

    assert loader.load_configuration({}).rotation.files == 7


def test_malformed_file_names_the_path(tmp_path: Path) -> None:
    (tmp_path / "cyclelog.toml").write_text("[rotation\nfiles = ", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="cyclelog.toml"):
        loader.load_configuration({})


def test_yaml_top_level_must_be_a_table(tmp_path: Path) -> None:
    (tmp_path / "cyclelog.yaml").write_text("- app.log\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="top level"):
        loader.load_configuration({})


def test_env_none_clears_retention(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CYCLELOG__ROTATION__FILES", "none")

    assert loader.load_configuration({"rotation": {"files": 3}}).rotation.files == 3
    assert loader.load_configuration({}).rotation.files is None


def test_targets_inherit_rotation_settings() -> None:
    data = default_config()
    data["rotation"].update({"files": 3, "compress": {"enabled": True, "codec": "xz"}})
    data["targets"] = [{"path": "a.log", "files": 1, "compress": {"level": 9}}, "b.log"]

    config = build_config(data)

    a = config.settings_for("a.log")
    assert (a.files, a.compress, a.compress_level, a.codec) == (1, True, 9, "xz")
    b = config.settings_for("b.log")
    assert (b.files, b.compress, b.compress_level, b.codec) == (3, True, None, "xz")
    assert config.settings_for("unknown.log") is config.rotation


def test_targets_as_mapping() -> None:
    data = default_config()
    data["targets"] = {"a.log": {"truncate": True}, "b.log": None}

    config = build_config(data)

    assert [str(t.path) for t in config.targets] == ["a.log", "b.log"]
    assert config.settings_for("a.log").truncate is True
    assert config.settings_for("b.log").truncate is False


def test_defaults() -> None:
    config = loader.load_configuration({})

    assert config.rotation.files is None
    assert config.rotation.min_size == 0
    assert config.rotation.truncate is False
    assert config.rotation.compress is False
    assert config.rotation.codec == "gzip"
    assert config.logging.format == "text"
    assert config.targets == []
