"""curlgen -- Convert curl command lines into code for HTTP client libraries.

A pasted ``curl`` command is tokenized like a shell would, its options are
parsed into a normalized, validated request model, and that model is
rendered as a ready-to-run snippet for Python (requests, httpx),
JavaScript (fetch), Go (net/http), HTTPie, or back into a canonical curl
command.

Typical usage::

    from curlgen import convert

    result = convert("curl -H 'Accept: application/json' https://api.github.com/zen", "go")
    print(result.code if result.ok else result.message)

Or from the terminal::

    curlgen convert "curl -d '{\\"a\\": 1}' https://x.com" -t python

Modules:
    converter: The ``convert`` boundary and ``build_request``.
    parser: Tokenizer, option parser and normalizer.
    emitters: Code emitters and the emitter registry.
    reporter: Error classification and suggestions.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration management.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"

from curlgen.converter import build_request, convert

__all__ = ["__version__", "build_request", "convert"]
