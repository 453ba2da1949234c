"""Terminal output for the curlgen CLI.

Generated code is the product, so it gets stdout to itself:

* **stdout** -- code, request JSON and tables. Safe to redirect into a
  source file or pipe into another tool.
* **stderr** -- warnings, errors, hints and debug lines.

Code is syntax-highlighted with Rich only when stdout is a terminal and
colour is allowed (``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all turn
it off). Otherwise it is written byte for byte.

:class:`OutputManager` holds the per-invocation settings and is installed
by :func:`~curlgen.app.main_callback` through :func:`set_output`. Commands
call the module-level shortcuts (:func:`print_code`, :func:`warning`, ...),
which forward to the installed manager.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, NamedTuple, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

SYNTAX_THEME = "monokai"


class OutputFormat(str, Enum):
    """How primary data is rendered.

    ``AUTO`` picks ``RICH`` for an interactive, colour-capable stdout and
    ``PLAIN`` for everything else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Diagnostic(NamedTuple):
    prefix: str
    style: str
    quiet_hides: bool
    verbose_only: bool = False


_DIAGNOSTICS: dict[str, _Diagnostic] = {
    "info": _Diagnostic("", "", quiet_hides=True),
    "success": _Diagnostic("", "green", quiet_hides=True),
    "warning": _Diagnostic("Warning: ", "yellow", quiet_hides=False),
    "error": _Diagnostic("Error: ", "bold red", quiet_hides=False),
    "suggest": _Diagnostic("→ ", "dim", quiet_hides=True),
    "debug": _Diagnostic("[debug] ", "dim", quiet_hides=False, verbose_only=True),
}


class OutputManager:
    """Per-invocation output settings and the Rich consoles that use them.

    Args:
        format: Requested format; ``AUTO`` is resolved immediately.
        no_color: Disable colour even on a terminal.
        quiet: Hide info, success and hint messages. Warnings and errors
            are always shown.
        verbose: Show debug messages.
        output_file: Write primary data to this path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = Path(output_file) if output_file else None
        self._format = _resolve_format(format, self._no_color)

        highlight = self._format == OutputFormat.RICH and self._output_file is None
        self._highlight = highlight
        self._stdout = Console(file=sys.stdout, no_color=self._no_color, force_terminal=highlight)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        """The resolved output format (never ``AUTO``)."""
        return self._format

    @property
    def is_json(self) -> bool:
        return self._format == OutputFormat.JSON

    # ------------------------------------------------------------------ #
    # Primary data (stdout or --output file)
    # ------------------------------------------------------------------ #

    def _write(self, text: str) -> None:
        if not text.endswith("\n"):
            text += "\n"
        if self._output_file is not None:
            # Each run replaces the file; it holds exactly one conversion.
            self._output_file.write_text(text, encoding="utf-8")
            return
        sys.stdout.write(text)
        sys.stdout.flush()

    def print_code(self, code: str, language: str) -> None:
        """Print generated source code.

        JSON mode wraps it as ``{"code": ..., "language": ...}``; Rich mode
        highlights it with the emitter's Pygments lexer; plain mode and
        ``--output`` files get the code unchanged.

        Args:
            code: The generated source.
            language: Lexer name, e.g. ``"python"`` or ``"go"``.
        """
        if self.is_json:
            self.print_json({"code": code, "language": language})
        elif self._highlight:
            self._stdout.print(Syntax(code.rstrip("\n"), language, theme=SYNTAX_THEME))
        else:
            self._write(code)

    def print_json(self, data: Any) -> None:
        """Print *data* as indented JSON, highlighted in Rich mode."""
        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._highlight:
            self._stdout.print(Syntax(text, "json", theme=SYNTAX_THEME, word_wrap=True))
        else:
            self._write(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, tab-separated text, or a JSON array.

        In JSON mode each row becomes an object keyed by *headers*.
        """
        if self.is_json:
            self.print_json([dict(zip(headers, row)) for row in rows])
            return
        if not self._highlight:
            self._write("\n".join("\t".join(line) for line in [headers, *rows]))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def diagnose(self, kind: str, message: str) -> None:
        """Write a diagnostic of *kind* (``info``, ``warning``, ...) to stderr."""
        spec = _DIAGNOSTICS[kind]
        if spec.verbose_only and not self._verbose:
            return
        if spec.quiet_hides and self._quiet:
            return

        if self._no_color:
            print(f"{spec.prefix}{message}", file=sys.stderr, flush=True)
            return
        text = escape(f"{spec.prefix}{message}")
        if spec.style:
            text = f"[{spec.style}]{text}[/{spec.style}]"
        self._stderr.print(text, highlight=False)

    def info(self, message: str) -> None:
        self.diagnose("info", message)

    def success(self, message: str) -> None:
        self.diagnose("success", message)

    def warning(self, message: str) -> None:
        self.diagnose("warning", message)

    def error(self, message: str) -> None:
        self.diagnose("error", message)

    def suggest(self, message: str) -> None:
        self.diagnose("suggest", message)

    def debug(self, message: str) -> None:
        self.diagnose("debug", message)


def _resolve_format(requested: OutputFormat, no_color: bool) -> OutputFormat:
    if requested != OutputFormat.AUTO:
        return requested
    if _is_tty() and not no_color:
        return OutputFormat.RICH
    return OutputFormat.PLAIN


def _is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value, even empty) or ``TERM=dumb`` disables colour."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# The installed manager and shortcuts to it
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the installed manager so the next call builds a fresh one."""
    global _output
    _output = None


def print_code(code: str, language: str) -> None:
    get_output().print_code(code, language)


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)
