"""curl command parser -- tokenize, parse flags, and normalize into a request.

This sub-package is the first half of the curlgen pipeline: turning the
raw command-line string into a :class:`~curlgen.models.RequestModel` that
the emitters can consume.

Typical usage::

    from curlgen.parser import tokenize, parse, normalize

    tokens = tokenize("curl -H 'Accept: application/json' https://api.github.com/zen")
    partial = parse(tokens)
    request = normalize(partial)

Sub-modules:

* :mod:`~curlgen.parser.tokenizer` -- Shell-like word splitting with
  quoting, escapes and line continuations.
* :mod:`~curlgen.parser.options` -- Walks tokens against curl's flag
  grammar and produces a :class:`~curlgen.models.PartialRequest`.
* :mod:`~curlgen.parser.normalizer` -- Applies defaults and conflict rules
  and validates the result.
"""

from curlgen.parser.normalizer import normalize
from curlgen.parser.options import parse
from curlgen.parser.tokenizer import tokenize

__all__ = ["tokenize", "parse", "normalize"]
