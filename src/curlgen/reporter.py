"""Classify pipeline failures into the public error taxonomy.

Every stage of the pipeline raises a :class:`~curlgen.exceptions.CurlgenError`
subclass. :func:`classify` turns one of those into a failed
:class:`~curlgen.models.ConversionResult`, and :func:`suggestion_for` picks
the next-step hint the CLI prints under the error message.

The taxonomy is closed: ``SyntaxError``, ``UnknownFlagError``,
``MissingArgumentError`` and ``ValidationError``. Any other ``CurlgenError``
(a broken plugin, for instance) is reported as a ``ValidationError`` raised
by the stage it came from.
"""

from __future__ import annotations

import difflib
from typing import Iterable, Optional

from curlgen.exceptions import CurlgenError
from curlgen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MISSING_ARGUMENT,
    EXIT_SUCCESS,
    EXIT_SYNTAX_ERROR,
    EXIT_UNKNOWN_FLAG,
)
from curlgen.models import ConversionResult
from curlgen.parser.options import known_flags

ERROR_KINDS = ("SyntaxError", "UnknownFlagError", "MissingArgumentError", "ValidationError")

_EXIT_CODES = {
    "SyntaxError": EXIT_SYNTAX_ERROR,
    "UnknownFlagError": EXIT_UNKNOWN_FLAG,
    "MissingArgumentError": EXIT_MISSING_ARGUMENT,
    "ValidationError": EXIT_INVALID_USAGE,
}


def classify(exc: CurlgenError, target: Optional[str] = None) -> ConversionResult:
    """Build the failed :class:`ConversionResult` for *exc*.

    Args:
        exc: The error raised by a pipeline stage.
        target: The requested target, echoed back on the result.

    Returns:
        A result with ``error_kind``, ``message``, ``offending_token`` and
        ``stage`` set and ``code`` left empty.
    """
    kind = exc.kind if exc.kind in ERROR_KINDS else "ValidationError"
    return ConversionResult(
        target=target,
        error_kind=kind,
        message=exc.message,
        offending_token=exc.token,
        stage=exc.stage,
    )


def suggestion_for(
    result: ConversionResult,
    targets: Iterable[str] = (),
) -> Optional[str]:
    """Return a short next-step hint for a failed *result*.

    Args:
        result: A failed conversion.
        targets: Registered target identifiers, used to suggest a close
            match for an unknown target.

    Returns:
        The hint, or ``None`` when there is nothing useful to add.
    """
    kind = result.error_kind
    token = result.offending_token or ""
    message = result.message or ""

    if kind == "SyntaxError":
        return "Check that every quote is closed and that the command was pasted whole."

    if kind == "UnknownFlagError":
        matches = difflib.get_close_matches(token, known_flags(), n=1, cutoff=0.6)
        if matches:
            return f"Did you mean '{matches[0]}'?"
        return "This option is not supported. Remove it and try again."

    if kind == "MissingArgumentError":
        if "number" in message:
            return f"Give {token} a number of seconds, e.g. '{token} 30'."
        return f"Put the value right after {token}, quoted if it contains spaces."

    if message == "unknown target":
        targets = list(targets)
        matches = difflib.get_close_matches(token.lower(), targets, n=1)
        if matches:
            return f"Did you mean '{matches[0]}'? Run 'curlgen targets' to list them all."
        return "Run 'curlgen targets' to list the available targets."
    if message == "missing URL":
        return "Add the request URL, e.g. 'curl https://api.example.com/items'."
    if message.startswith("malformed header"):
        return "Headers must look like -H 'Name: Value'."
    if message.startswith("unsupported method"):
        return "Use one of GET, POST, PUT, PATCH, DELETE, HEAD or OPTIONS."
    if message.startswith("unsupported URL scheme"):
        return "Only http:// and https:// URLs can be converted."
    if message.startswith("cannot fold"):
        return "With -G every -d value must be key=value pairs."
    return None


def exit_code_for(result: ConversionResult) -> int:
    """Return the process exit code the CLI uses for *result*."""
    if result.ok:
        return EXIT_SUCCESS
    return _EXIT_CODES.get(result.error_kind or "", EXIT_GENERIC_FAILURE)
