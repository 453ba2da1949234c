"""The conversion boundary: raw curl text in, code or a classified error out.

:func:`convert` is the single entry point shared by the CLI and by library
callers. It runs the whole pipeline::

    tokenize -> parse -> normalize -> emit

and never raises for bad input: every :class:`~curlgen.exceptions.CurlgenError`
is turned into a failed :class:`~curlgen.models.ConversionResult` by
:func:`curlgen.reporter.classify`. Anything else is a bug and propagates.

:func:`build_request` stops after normalization and raises instead, for
callers that want the :class:`~curlgen.models.RequestModel` itself.
"""

from __future__ import annotations

from typing import Optional

from curlgen.emitters.registry import EmitterRegistry, create_default_registry
from curlgen.exceptions import CurlgenError
from curlgen.models import ConversionResult, ConvertOptions, PartialRequest, RequestModel
from curlgen.parser import normalize, parse, tokenize
from curlgen.reporter import classify


def build_request(raw: str) -> RequestModel:
    """Parse and normalize *raw* into a :class:`RequestModel`.

    Args:
        raw: A curl command line, optionally spanning several lines joined
            with backslash continuations.

    Returns:
        The normalized request.

    Raises:
        CommandSyntaxError: For unbalanced quoting.
        UnknownFlagError: For an unsupported option.
        MissingArgumentError: For an option without its value.
        RequestValidationError: For a command that is not a valid request.
    """
    return normalize(parse(tokenize(raw)))


def convert(
    raw: str,
    target: str,
    options: Optional[ConvertOptions] = None,
    registry: Optional[EmitterRegistry] = None,
) -> ConversionResult:
    """Convert a curl command line into source code for *target*.

    Args:
        raw: The curl command line.
        target: Target identifier or alias, e.g. ``"python"`` or ``"go"``.
        options: Formatting options. Defaults to :class:`ConvertOptions`.
        registry: Where to look up *target*. Defaults to a registry with
            only the built-in emitters.

    Returns:
        A successful result carrying ``code``, or a failed one carrying
        ``error_kind``, ``message`` and ``offending_token``.

    Example::

        result = convert("curl -u user:pass https://x.com", "python")
        if result.ok:
            print(result.code)
    """
    options = options or ConvertOptions()
    registry = registry or create_default_registry()

    partial: Optional[PartialRequest] = None
    try:
        emitter = registry.get(target)
        partial = parse(tokenize(raw))
        request = normalize(partial)
        code = emitter.emit(request, options)
    except CurlgenError as exc:
        result = classify(exc, target=target)
        if partial is not None:
            result.warnings = list(partial.warnings)
        return result

    return ConversionResult(
        code=code,
        target=emitter.target,
        language=emitter.language,
        warnings=list(partial.warnings),
    )
