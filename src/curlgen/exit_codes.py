"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~curlgen.exceptions.CurlgenError` subclass.
Editor integrations and shell wrappers can inspect the exit code to decide
which hint to show without parsing stderr.

Example::

    $ curlgen convert "curl --bogus https://example.com"
    $ echo $?
    4   # EXIT_UNKNOWN_FLAG -- the command used an option we do not know
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The request was parseable but semantically invalid, or the CLI was misused."""

EXIT_SYNTAX_ERROR = 3
"""The command line could not be tokenized (for example an unterminated quote)."""

EXIT_UNKNOWN_FLAG = 4
"""The command line used an option outside the supported flag grammar."""

EXIT_MISSING_ARGUMENT = 5
"""A value-bearing option was given without a (valid) value."""

EXIT_PLUGIN_ERROR = 10
"""A third-party emitter failed to load or register."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C (128 + SIGINT, as shells report it)."""
