"""Exception hierarchy for curlgen.

All exceptions inherit from :class:`CurlgenError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`curlgen.exit_codes`,
a ``kind`` string forming the public error taxonomy, and the ``stage`` of
the conversion pipeline that raised it. The conversion boundary
(:func:`curlgen.converter.convert`) turns these into a
:class:`~curlgen.models.ConversionResult`; the CLI entry point prints them
and exits with ``exit_code``.

Subclass hierarchy::

    CurlgenError                (exit 1)
    +-- CommandSyntaxError      (exit 3, kind "SyntaxError")
    +-- UnknownFlagError        (exit 4, kind "UnknownFlagError")
    +-- MissingArgumentError    (exit 5, kind "MissingArgumentError")
    +-- RequestValidationError  (exit 2, kind "ValidationError")
    +-- ConfigError             (exit 1)
    +-- PluginError             (exit 10)
"""

from __future__ import annotations

from typing import Optional

from curlgen.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_MISSING_ARGUMENT,
    EXIT_PLUGIN_ERROR,
    EXIT_SYNTAX_ERROR,
    EXIT_UNKNOWN_FLAG,
)


class CurlgenError(Exception):
    """Base exception for all curlgen errors.

    Args:
        message: Human-readable error description printed to stderr.
        token: The offending token or flag name, when one is known.
        exit_code: Optional override for the class-level exit code.
        stage: Optional override for the class-level pipeline stage.
    """

    exit_code: int = EXIT_GENERIC_FAILURE
    kind: str = "Error"
    stage: str = "convert"

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        exit_code: int | None = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.token = token
        if stage is not None:
            self.stage = stage
        if exit_code is not None:
            self.exit_code = exit_code


class CommandSyntaxError(CurlgenError):
    """Raised when the command line has malformed shell quoting.

    Named to avoid shadowing the built-in ``SyntaxError``; its taxonomy
    ``kind`` is still ``"SyntaxError"``.
    """

    exit_code = EXIT_SYNTAX_ERROR
    kind = "SyntaxError"
    stage = "tokenize"


class UnknownFlagError(CurlgenError):
    """Raised for an option token that matches no known flag family."""

    exit_code = EXIT_UNKNOWN_FLAG
    kind = "UnknownFlagError"
    stage = "parse"

    def __init__(self, flag: str):
        super().__init__(f"unknown option: {flag}", token=flag)


class MissingArgumentError(CurlgenError):
    """Raised when a value-bearing flag has no value, or an unusable one."""

    exit_code = EXIT_MISSING_ARGUMENT
    kind = "MissingArgumentError"
    stage = "parse"

    def __init__(self, flag: str, message: Optional[str] = None):
        super().__init__(message or f"option {flag} requires a value", token=flag)


class RequestValidationError(CurlgenError):
    """Raised when a command parses but does not describe a valid request.

    Also raised for an unknown emitter target. Named to avoid confusion with
    :class:`pydantic.ValidationError`; its taxonomy ``kind`` is
    ``"ValidationError"``.
    """

    exit_code = EXIT_INVALID_USAGE
    kind = "ValidationError"
    stage = "normalize"


class ConfigError(CurlgenError):
    """Raised for configuration problems (invalid JSON, bad keys)."""

    exit_code = EXIT_GENERIC_FAILURE
    kind = "ConfigError"
    stage = "config"


class PluginError(CurlgenError):
    """Raised when a third-party emitter fails to load or register."""

    exit_code = EXIT_PLUGIN_ERROR
    kind = "PluginError"
    stage = "registry"
