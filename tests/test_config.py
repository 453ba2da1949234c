"""Tests for curlgen.config -- XDG paths, atomic writes, precedence."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from curlgen.config import (
    _atomic_write,
    get_config_dir,
    get_data_dir,
    global_config_path,
    load_global_config,
    load_project_config,
    resolve_config,
    save_global_config,
)
from curlgen.exceptions import ConfigError
from curlgen.models import ConvertOptions, GlobalConfig, PluginsConfig


def _dump(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


# ---------------------------------------------------------------------------
# Directories
# ---------------------------------------------------------------------------


class TestPaths:
    def test_config_dir_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_config"
        monkeypatch.setattr("curlgen.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_CONFIG_HOME", str(custom))

        result = get_config_dir()
        assert result == custom / "curlgen"
        assert result.is_dir()

    def test_config_dir_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("curlgen.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".config" / "curlgen"

    def test_data_dir_xdg(self, isolated_config: Path) -> None:
        assert get_data_dir() == isolated_config / "data" / "curlgen"

    def test_fallback_dirs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("curlgen.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_config_dir() == tmp_path / ".curlgen"
        assert get_data_dir() == tmp_path / ".curlgen" / "data"


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "file.json"
        _atomic_write(target, '{"a": 1}\n')
        assert target.read_text(encoding="utf-8") == '{"a": 1}\n'

    def test_no_temp_file_left_on_failure(self, tmp_path: Path) -> None:
        target = tmp_path / "file.json"
        with patch("curlgen.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                _atomic_write(target, "data")
        assert not target.exists()
        assert os.listdir(tmp_path) == []


# ---------------------------------------------------------------------------
# Global config
# ---------------------------------------------------------------------------


class TestGlobalConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_global_config()
        assert config == GlobalConfig()
        assert config.default_target == "python-requests"
        assert config.convert.indent == 4

    def test_round_trip(self, isolated_config: Path) -> None:
        config = GlobalConfig(
            default_target="go",
            convert=ConvertOptions(indent=2, include_imports=False),
            plugins=PluginsConfig(disabled=["ruby"]),
        )
        save_global_config(config)
        assert global_config_path().is_file()
        assert load_global_config() == config

    def test_invalid_json(self, isolated_config: Path) -> None:
        global_config_path().write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid global config"):
            load_global_config()

    def test_invalid_values(self, isolated_config: Path) -> None:
        _dump(global_config_path(), {"convert": {"indent": 99}})
        with pytest.raises(ConfigError):
            load_global_config()


# ---------------------------------------------------------------------------
# Project config
# ---------------------------------------------------------------------------


class TestProjectConfig:
    def test_missing(self, isolated_config: Path) -> None:
        assert load_project_config() is None

    def test_loaded_from_cwd(self, isolated_config: Path) -> None:
        _dump(isolated_config / "curlgen.json", {"default_target": "go"})
        assert load_project_config() == {"default_target": "go"}

    def test_not_an_object(self, isolated_config: Path) -> None:
        _dump(isolated_config / "curlgen.json", ["go"])
        with pytest.raises(ConfigError, match="expected a JSON object"):
            load_project_config()

    def test_invalid_json(self, isolated_config: Path) -> None:
        (isolated_config / "curlgen.json").write_text("{", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_project_config()


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self, isolated_config: Path) -> None:
        assert resolve_config().default_target == "python-requests"

    def test_global_config(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_target="httpie"))
        assert resolve_config().default_target == "httpie"

    def test_project_overrides_global(self, isolated_config: Path) -> None:
        save_global_config(GlobalConfig(default_target="httpie", convert=ConvertOptions(indent=8)))
        _dump(
            isolated_config / "curlgen.json",
            {"default_target": "go", "convert": {"include_imports": False}},
        )
        config = resolve_config()
        assert config.default_target == "go"
        assert config.convert.include_imports is False
        assert config.convert.indent == 8

    def test_env_overrides_project(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _dump(isolated_config / "curlgen.json", {"default_target": "go"})
        monkeypatch.setenv("CURLGEN_TARGET", "curl")
        assert resolve_config().default_target == "curl"

    def test_cli_overrides_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CURLGEN_TARGET", "curl")
        assert resolve_config(cli_target="js").default_target == "js"

    def test_invalid_project_values(self, isolated_config: Path) -> None:
        _dump(isolated_config / "curlgen.json", {"convert": {"indent": 0}})
        with pytest.raises(ConfigError, match="Invalid project config"):
            resolve_config()
