"""``curlgen config`` -- inspect and edit the global configuration.

Keys use dot notation into :class:`~curlgen.models.GlobalConfig`:
``default_target``, ``convert.indent``, ``convert.include_imports``,
``output.format``, ``plugins.enabled`` and ``plugins.disabled``.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from curlgen.exceptions import CurlgenError
from curlgen.exit_codes import EXIT_INVALID_USAGE
from curlgen.output import error, info, print_json, success

config_app = typer.Typer(no_args_is_help=True)

_TRUE_WORDS = ("true", "1", "yes", "on")


def _usage_error(message: str) -> typer.Exit:
    error(message)
    return typer.Exit(code=EXIT_INVALID_USAGE)


def _leaf(data: dict[str, Any], key: str) -> tuple[dict[str, Any], str]:
    """Return the dict that holds *key* and the last key segment."""
    *parents, name = key.split(".")
    section = data
    for part in parents:
        child = section.get(part)
        if not isinstance(child, dict):
            raise _usage_error(f"Invalid config key: {key}")
        section = child
    if name not in section or isinstance(section[name], dict):
        raise _usage_error(f"Unknown config key: {key}")
    return section, name


def _coerce(current: Any, raw: str, key: str) -> Any:
    """Convert *raw* to the type of the value it replaces."""
    if isinstance(current, bool):
        return raw.strip().lower() in _TRUE_WORDS
    if isinstance(current, int):
        try:
            return int(raw)
        except ValueError:
            raise _usage_error(f"Expected integer for {key}, got: {raw}") from None
    if isinstance(current, list):
        return [item.strip() for item in raw.split(",") if item.strip()]
    return raw


@config_app.command("show")
def config_show() -> None:
    """Print the global configuration as JSON.

    Example::

        curlgen config show
    """
    from curlgen.commands.convert import fail
    from curlgen.config import global_config_path, load_global_config

    try:
        config = load_global_config()
    except CurlgenError as exc:
        fail(exc)
    info(f"Config file: {global_config_path()}")
    print_json(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Dotted key, e.g. 'default_target' or 'convert.indent'."
    ),
    value: str = typer.Argument(
        help="New value. Lists are comma-separated; booleans accept true/false."
    ),
) -> None:
    """Change one configuration value.

    The new config is validated before it is written, so an out-of-range
    indent or a misspelled key leaves the file untouched (exit code 2).

    Example::

        curlgen config set default_target go
        curlgen config set convert.indent 2
        curlgen config set plugins.disabled ruby,php
    """
    from curlgen.commands.convert import fail
    from curlgen.config import load_global_config, save_global_config
    from curlgen.models import GlobalConfig

    try:
        data = load_global_config().model_dump(mode="json")
    except CurlgenError as exc:
        fail(exc)

    section, name = _leaf(data, key)
    section[name] = _coerce(section[name], value, key)

    try:
        updated = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise _usage_error(f"Validation error: {exc}") from None

    save_global_config(updated)
    success(f"Set {key} = {section[name]}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
) -> None:
    """Restore the default configuration.

    Example::

        curlgen config reset --force
    """
    from curlgen.config import save_global_config
    from curlgen.models import GlobalConfig

    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
