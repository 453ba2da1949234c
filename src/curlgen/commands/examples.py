"""Examples commands -- browse and convert the built-in example gallery.

Provides the ``curlgen examples`` sub-command group. The gallery covers
the common shapes of real-world curl commands, from a bare GET to a
multipart upload, and doubles as a quick way to see what each target
produces.
"""

from __future__ import annotations

from typing import Optional

import typer

from curlgen.exceptions import CurlgenError
from curlgen.output import get_output, print_code, print_json, print_table

examples_app = typer.Typer(no_args_is_help=True)


@examples_app.command("list")
def examples_list() -> None:
    """List the example curl commands, grouped by level.

    Example::

        curlgen examples list
        curlgen examples list --json
    """
    from curlgen.commands.convert import fail
    from curlgen.examples import examples_by_level

    try:
        grouped = examples_by_level()
    except CurlgenError as exc:
        fail(exc)

    rows = [
        [example.name, level, example.label, example.description]
        for level, examples in grouped.items()
        for example in examples
    ]
    print_table(["Name", "Level", "Label", "Description"], rows, title="Examples")


@examples_app.command("show")
def examples_show(
    name: str = typer.Argument(help="Example name (see 'curlgen examples list')."),
    target: Optional[str] = typer.Option(
        None, "--target", "-t", help="Also convert the example to this target."
    ),
) -> None:
    """Print an example curl command, or the code it converts to.

    Without ``--target`` the curl command itself is printed, ready to be
    piped back into ``curlgen convert``.

    Example::

        curlgen examples show stripe
        curlgen examples show stripe -t go
    """
    from curlgen.commands.convert import fail, report_failure
    from curlgen.config import resolve_config
    from curlgen.converter import convert
    from curlgen.emitters import create_default_registry
    from curlgen.examples import get_example

    try:
        example = get_example(name)
    except CurlgenError as exc:
        fail(exc)

    if target is None:
        if get_output().is_json:
            print_json(example.model_dump())
        else:
            print_code(example.curl, "bash")
        return

    try:
        config = resolve_config(cli_target=target)
    except CurlgenError as exc:
        fail(exc)

    registry = create_default_registry(discover=True, config=config.plugins)
    result = convert(
        example.curl, config.default_target, options=config.convert, registry=registry
    )
    if not result.ok:
        report_failure(result, registry.list_targets())
    print_code(result.code or "", result.language or "text")
