"""Fixtures shared by the whole curlgen suite.

Nothing here touches the real home directory: every test that reads or
writes config goes through ``isolated_config``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from curlgen.emitters import EmitterRegistry, create_default_registry
from curlgen.output import OutputFormat, OutputManager, reset_output, set_output


@pytest.fixture(autouse=True)
def _fresh_output_manager():
    """Forget the installed OutputManager once each test is done.

    A manager built inside ``CliRunner.invoke`` keeps the runner's captured
    streams, which are closed after the invocation returns.
    """
    yield
    reset_output()


@pytest.fixture
def registry() -> EmitterRegistry:
    """Built-in emitters only, no entry-point plugins."""
    return create_default_registry()


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test in ``tmp_path`` with XDG dirs under it.

    ``config.json`` lands in ``tmp_path/config/curlgen``, crash logs in
    ``tmp_path/data/curlgen/logs`` and a ``curlgen.json`` written to
    ``tmp_path`` is picked up as the project config.
    """
    monkeypatch.setattr("curlgen.config._is_xdg_platform", lambda: True)
    for var, sub in (("XDG_CONFIG_HOME", "config"), ("XDG_DATA_HOME", "data")):
        monkeypatch.setenv(var, str(tmp_path / sub))
    for var in ("CURLGEN_TARGET", "NO_COLOR"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _installed(fmt: OutputFormat):
    manager = OutputManager(format=fmt, no_color=True)
    set_output(manager)
    return manager


@pytest.fixture
def plain_output() -> OutputManager:
    """Colourless PLAIN output: code is written to stdout verbatim."""
    yield _installed(OutputFormat.PLAIN)
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """JSON output, as selected by ``--json``."""
    yield _installed(OutputFormat.JSON)
    reset_output()


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
