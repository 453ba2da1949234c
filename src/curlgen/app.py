"""The ``curlgen`` command line.

Builds the root Typer app, mounts the command modules and applies the
global flags (output format, colour, verbosity, ``--output``) before any
sub-command runs.

:func:`main` is the console-script entry point. Known failures
(:class:`~curlgen.exceptions.CurlgenError`) exit with their own code;
anything else is a bug, so the traceback goes to a crash log under the
data directory and the user gets its path.
"""

from __future__ import annotations

import logging
import os
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer

from curlgen import __version__
from curlgen.commands.config import config_app
from curlgen.commands.convert import convert_command, inspect_command, targets_command
from curlgen.commands.examples import examples_app
from curlgen.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from curlgen.output import OutputFormat

app = typer.Typer(
    name="curlgen",
    help="Convert curl commands into code for HTTP client libraries.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
)

app.command("convert")(convert_command)
app.command("inspect")(inspect_command)
app.command("targets")(targets_command)
app.add_typer(examples_app, name="examples", help="Browse the example gallery.")
app.add_typer(config_app, name="config", help="Show or change the global configuration.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"curlgen {__version__}")
        raise typer.Exit()


def _configured_format() -> tuple[OutputFormat, Optional[str]]:
    """Return the ``output.format`` from the global config.

    A broken config file must not stop ``--help`` or ``config reset`` from
    working, so the problem is returned as a warning instead of raised.
    """
    from curlgen.config import load_global_config
    from curlgen.exceptions import ConfigError

    try:
        value = load_global_config().output.format
    except ConfigError as exc:
        return OutputFormat.AUTO, exc.message
    try:
        return OutputFormat(value), None
    except ValueError:
        return OutputFormat.AUTO, f"Ignoring unknown output.format {value!r}"


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print results as JSON."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Print code without syntax highlighting."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only print code, warnings and errors."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write generated code to a file."
    ),
) -> None:
    """Apply the global flags before a sub-command runs.

    ``--json`` and ``--plain`` win over the configured ``output.format``.
    ``--verbose`` also turns on ``DEBUG`` logging for plugin discovery and
    config loading.
    """
    from curlgen.output import OutputManager, set_output, warning

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    problem: Optional[str] = None
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt, problem = _configured_format()

    set_output(
        OutputManager(
            format=fmt,
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )
    if problem:
        warning(problem)


def _on_interrupt(signum: int, frame: Any) -> None:  # noqa: ANN401
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _write_crash_log(exc: BaseException) -> Path:
    """Save the traceback of *exc* with version and argv; return the file path."""
    from curlgen.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{stamp}-{os.getpid()}.log"
    header = f"curlgen {__version__}\nargv: {sys.argv!r}\n\n"
    log_path.write_text(
        header + "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        encoding="utf-8",
    )
    return log_path


def main() -> None:
    """Console-script entry point.

    Raises:
        SystemExit: Always; with the command's exit code, the error's
            ``exit_code``, 130 on Ctrl-C or 1 after a crash.
    """
    from curlgen.exceptions import CurlgenError
    from curlgen.output import error

    signal.signal(signal.SIGINT, _on_interrupt)
    try:
        app()
    except CurlgenError as exc:
        error(exc.message)
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Traceback saved to {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
