"""Convert commands -- turn a curl command into code, or inspect it.

Implements three top-level commands:

* ``curlgen convert`` -- print generated code for one target.
* ``curlgen inspect`` -- print the normalized request model as JSON.
* ``curlgen targets`` -- list the registered emitter targets.

The curl command comes from the positional argument, from ``--file``
(``-`` for stdin), or from piped stdin when neither is given.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer

from curlgen.exceptions import CurlgenError
from curlgen.models import ConversionResult
from curlgen.output import (
    debug,
    error,
    get_output,
    print_code,
    print_json,
    print_table,
    suggest,
    warning,
)


def read_command(command: Optional[str], file: Optional[str]) -> str:
    """Return the curl command text from the argument, a file, or stdin.

    Args:
        command: The positional argument, if given.
        file: A file path, or ``-`` for stdin.

    Returns:
        The raw command text.

    Raises:
        typer.Exit: With code 2 when no input is available or the file
            cannot be read.
    """
    if command is not None and file is not None:
        error("Give the curl command either as an argument or with --file, not both.")
        raise typer.Exit(code=2)
    if command is not None:
        return command

    if file is not None and file != "-":
        path = Path(file)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            error(f"Cannot read {path}: {exc.strerror or exc}")
            raise typer.Exit(code=2) from None
        debug(f"Read {len(text)} characters from {path}")
        return text

    if file is None and sys.stdin.isatty():
        error("No curl command given.")
        suggest("curlgen convert \"curl https://api.example.com\" -t python")
        raise typer.Exit(code=2)

    text = sys.stdin.read()
    if not text.strip():
        error("No input received from stdin.")
        raise typer.Exit(code=2)
    return text


def fail(exc: CurlgenError) -> NoReturn:
    """Print *exc* and exit with its exit code."""
    error(exc.message)
    raise typer.Exit(code=exc.exit_code)


def report_failure(result: ConversionResult, targets: list[str]) -> NoReturn:
    """Print a failed conversion with its suggestion and exit.

    In JSON mode the error payload is also written to stdout so scripts
    can pattern-match on ``errorKind``.
    """
    from curlgen.reporter import exit_code_for, suggestion_for

    if get_output().is_json:
        print_json(result.to_payload())

    message = f"{result.error_kind}: {result.message}"
    token = result.offending_token
    if token and token not in (result.message or ""):
        message += f": {token}"
    error(message)
    hint = suggestion_for(result, targets)
    if hint:
        suggest(hint)
    raise typer.Exit(code=exit_code_for(result))


def convert_command(
    command: Optional[str] = typer.Argument(
        None, help="The curl command, quoted as one argument."
    ),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="Target language/library (see 'curlgen targets').",
    ),
    file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Read the curl command from a file ('-' for stdin)."
    ),
    indent: Optional[int] = typer.Option(
        None, "--indent", min=1, max=8, help="Spaces per indent level."
    ),
    no_imports: bool = typer.Option(
        False, "--no-imports", help="Leave out import/package lines."
    ),
) -> None:
    """Convert a curl command into code.

    The target defaults to the configured ``default_target``
    (``python-requests`` unless changed). Generated code goes to stdout,
    warnings and errors to stderr.

    Example::

        curlgen convert "curl -u user:pass https://httpbin.org/basic-auth/user/pass" -t go
        pbpaste | curlgen convert -t javascript
    """
    from curlgen.config import resolve_config
    from curlgen.converter import convert
    from curlgen.emitters import create_default_registry

    raw = read_command(command, file)
    try:
        config = resolve_config(cli_target=target)
    except CurlgenError as exc:
        fail(exc)

    options = config.convert.model_copy()
    if indent is not None:
        options.indent = indent
    if no_imports:
        options.include_imports = False

    registry = create_default_registry(discover=True, config=config.plugins)
    debug(f"Converting to {config.default_target}")
    result = convert(raw, config.default_target, options=options, registry=registry)

    for message in result.warnings:
        warning(message)
    if not result.ok:
        report_failure(result, registry.list_targets())

    if get_output().is_json:
        print_json(result.to_payload())
    else:
        print_code(result.code or "", result.language or "text")


def inspect_command(
    command: Optional[str] = typer.Argument(
        None, help="The curl command, quoted as one argument."
    ),
    file: Optional[str] = typer.Option(
        None, "--file", "-f", help="Read the curl command from a file ('-' for stdin)."
    ),
) -> None:
    """Show the normalized request a curl command describes.

    Prints the request model as JSON: method, URL, headers in order,
    decoded query parameters, body, auth and client options.

    Example::

        curlgen inspect "curl -G -d q=1 https://x.com"
    """
    from curlgen.converter import build_request
    from curlgen.reporter import classify

    raw = read_command(command, file)
    try:
        request = build_request(raw)
    except CurlgenError as exc:
        report_failure(classify(exc), [])
    print_json(request.model_dump(mode="json"))


def targets_command() -> None:
    """List the available code generation targets.

    Includes third-party emitters installed under the ``curlgen.emitters``
    entry-point group unless they are disabled in the config.
    """
    from curlgen.config import load_global_config
    from curlgen.emitters import create_default_registry

    try:
        config = load_global_config()
    except CurlgenError as exc:
        fail(exc)

    registry = create_default_registry(discover=True, config=config.plugins)
    rows = [
        [entry["target"], entry["aliases"], entry["language"], entry["label"]]
        for entry in registry.describe()
    ]
    print_table(["Target", "Aliases", "Language", "Description"], rows, title="Targets")
