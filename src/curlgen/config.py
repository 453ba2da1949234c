"""Where curlgen keeps its settings, and how the layers combine.

* **Directories** -- XDG Base Directory layout on Linux and the BSDs
  (``$XDG_CONFIG_HOME/curlgen``, ``$XDG_DATA_HOME/curlgen``), a single
  ``~/.curlgen/`` elsewhere. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Global config** -- ``config.json`` in the config directory, holding a
  :class:`~curlgen.models.GlobalConfig`.
* **Project config** -- an optional ``./curlgen.json`` that pins the
  default target and formatting for one repository.
* **Resolution** -- :func:`resolve_config` applies, from weakest to
  strongest: defaults, global file, project file, ``CURLGEN_TARGET``,
  command-line flags.

The conversion pipeline never reads any of this. The CLI resolves the
config once and hands the target and
:class:`~curlgen.models.ConvertOptions` to
:func:`~curlgen.converter.convert`.
"""

from __future__ import annotations

import json
import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from curlgen.exceptions import ConfigError
from curlgen.models import GlobalConfig

logger = logging.getLogger(__name__)

_APP_NAME = "curlgen"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "curlgen.json"

ENV_TARGET = "CURLGEN_TARGET"
"""Environment variable overriding the default target."""

# kind -> (XDG variable, default under $HOME, subdirectory of ~/.curlgen)
_DIRS: dict[str, tuple[str, tuple[str, ...], str]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), ""),
    "data": ("XDG_DATA_HOME", (".local", "share"), "data"),
}


# --- Directories ---


def _is_xdg_platform() -> bool:
    """True on Linux and the BSDs, where XDG directories are the norm."""
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, home_default, fallback_sub = _DIRS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var) or str(Path.home().joinpath(*home_default))
        path = Path(base) / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
        if fallback_sub:
            path = path / fallback_sub
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Return (and create) the directory holding ``config.json``."""
    return _app_dir("config")


def get_data_dir() -> Path:
    """Return (and create) the data directory; crash logs go in ``logs/``."""
    return _app_dir("data")


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a half-written file.

    The text goes to a temporary file in the same directory, is synced, and
    is then renamed over *path*. On any failure the temporary file is
    removed and the exception propagates.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid {what} at {path}: {exc}") from exc


# --- Global config ---


def global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read the global config, or return defaults when there is none.

    Raises:
        ConfigError: If the file is not valid JSON or does not validate
            as a :class:`~curlgen.models.GlobalConfig`.
    """
    path = global_config_path()
    if not path.is_file():
        logger.debug("No global config at %s, using defaults", path)
        return GlobalConfig()
    data = _read_json(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    text = json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    _atomic_write(global_config_path(), text)


# --- Project config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./curlgen.json`` from the working directory, if present.

    Only ``default_target`` and ``convert`` are used by
    :func:`resolve_config`; other keys are ignored.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    data = _read_json(path, "project config")
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    logger.debug("Loaded project config from %s", path)
    return data


def _apply_project(config: GlobalConfig, project: dict[str, Any]) -> GlobalConfig:
    merged = config.model_dump()
    if "default_target" in project:
        merged["default_target"] = project["default_target"]
    if isinstance(project.get("convert"), dict):
        merged["convert"].update(project["convert"])
    try:
        return GlobalConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid project config: {exc}") from exc


# --- Resolution ---


def resolve_config(cli_target: Optional[str] = None) -> GlobalConfig:
    """Return the effective configuration for this invocation.

    Layers, strongest first: *cli_target*, the ``CURLGEN_TARGET``
    environment variable, ``./curlgen.json``, the global config file,
    built-in defaults. ``output.format`` is read by the app callback, where
    ``--json`` and ``--plain`` take precedence over it.

    Raises:
        ConfigError: If the global or project file is invalid.
    """
    config = load_global_config()

    project = load_project_config()
    if project is not None:
        config = _apply_project(config, project)

    env_target = os.environ.get(ENV_TARGET)
    if env_target:
        logger.debug("Target %r from %s", env_target, ENV_TARGET)
        config.default_target = env_target

    if cli_target is not None:
        config.default_target = cli_target
    return config
