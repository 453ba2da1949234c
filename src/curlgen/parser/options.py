"""Walk a token list against curl's flag grammar and build a PartialRequest.

The parser is a single left-to-right pass with a cursor. Each recognised
spelling (``-H``, ``--header``) maps to a canonical flag family name, and
each family has a handler that records its effect on the
:class:`~curlgen.models.PartialRequest`. No defaults are applied here;
that is the job of :mod:`curlgen.parser.normalizer`.

**Spelling rules:**

* Long flags (``--data``) take their value from the following token.
* Short value flags accept the value attached (``-XPOST``) or as the
  next token (``-X POST``).
* Boolean short flags may be clustered (``-sSLk``); a value flag may end
  a cluster (``-sXPOST``).
* Any other token beginning with ``-`` is an unknown flag and fails
  immediately, so no option is ever silently skipped.

The public function is :func:`parse`.
"""

from __future__ import annotations

import math
from typing import Callable, Optional, Sequence
from urllib.parse import quote

from curlgen.exceptions import MissingArgumentError, UnknownFlagError
from curlgen.models import (
    BasicAuth,
    BearerAuth,
    DataChunk,
    DataOrigin,
    HeaderSource,
    HTTPMethod,
    PartialRequest,
    RawFormPart,
)


# ---------------------------------------------------------------------------
# Flag grammar
# ---------------------------------------------------------------------------

_SHORT_FLAGS: dict[str, str] = {
    "X": "request",
    "H": "header",
    "d": "data",
    "F": "form",
    "u": "user",
    "G": "get",
    "I": "head",
    "A": "user-agent",
    "e": "referer",
    "b": "cookie",
    "k": "insecure",
    "L": "location",
    "m": "max-time",
    # Accepted but irrelevant to the generated code.
    "s": "ignore",
    "S": "ignore",
    "v": "ignore",
    "i": "ignore",
    "o": "ignore-value",
    "w": "ignore-value",
}

_LONG_FLAGS: dict[str, str] = {
    "--request": "request",
    "--header": "header",
    "--data": "data",
    "--data-raw": "data-raw",
    "--data-binary": "data",
    "--data-ascii": "data",
    "--data-urlencode": "data-urlencode",
    "--json": "json",
    "--form": "form",
    "--form-string": "form-string",
    "--user": "user",
    "--oauth2-bearer": "oauth2-bearer",
    "--get": "get",
    "--head": "head",
    "--user-agent": "user-agent",
    "--referer": "referer",
    "--cookie": "cookie",
    "--url": "url",
    "--insecure": "insecure",
    "--location": "location",
    "--max-time": "max-time",
    "--silent": "ignore",
    "--show-error": "ignore",
    "--verbose": "ignore",
    "--include": "ignore",
    "--compressed": "ignore",
    "--output": "ignore-value",
    "--write-out": "ignore-value",
}

_VALUE_FLAGS = frozenset({
    "request",
    "header",
    "data",
    "data-raw",
    "data-urlencode",
    "json",
    "form",
    "form-string",
    "user",
    "oauth2-bearer",
    "user-agent",
    "referer",
    "cookie",
    "url",
    "max-time",
    "ignore-value",
})

_KNOWN_METHODS = frozenset(m.value for m in HTTPMethod)


def known_flags() -> list[str]:
    """Return every accepted flag spelling, short forms first.

    Used by the CLI to suggest alternatives for an unknown flag.
    """
    return [f"-{letter}" for letter in _SHORT_FLAGS] + list(_LONG_FLAGS)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse(tokens: Sequence[str]) -> PartialRequest:
    """Apply every flag in *tokens* to a fresh :class:`PartialRequest`.

    A first token exactly equal to ``curl`` is dropped, so both
    ``curl https://x`` and ``https://x`` are accepted.

    Args:
        tokens: Output of :func:`curlgen.parser.tokenizer.tokenize`.

    Returns:
        The accumulated, un-normalized request description.

    Raises:
        UnknownFlagError: If a token starting with ``-`` is not a known flag.
        MissingArgumentError: If a value flag is the last token, or
            ``--max-time`` is given something other than a non-negative
            number.
    """
    args = list(tokens)
    if args and args[0] == "curl":
        args = args[1:]

    partial = PartialRequest()
    i = 0
    while i < len(args):
        token = args[i]
        i += 1

        if token.startswith("--"):
            name = _LONG_FLAGS.get(token)
            if name is None:
                raise UnknownFlagError(token)
            value: Optional[str] = None
            if name in _VALUE_FLAGS:
                if i >= len(args):
                    raise MissingArgumentError(token)
                value = args[i]
                i += 1
            _HANDLERS[name](partial, token, value)

        elif token.startswith("-"):
            i = _parse_short_cluster(partial, token, args, i)

        else:
            _set_url(partial, token)

    return partial


def _parse_short_cluster(
    partial: PartialRequest,
    token: str,
    args: list[str],
    i: int,
) -> int:
    """Apply a ``-abc`` style token and return the updated cursor."""
    letters = token[1:]
    if not letters:
        raise UnknownFlagError(token)

    for pos, letter in enumerate(letters):
        name = _SHORT_FLAGS.get(letter)
        if name is None:
            raise UnknownFlagError(token)
        flag = f"-{letter}"

        if name in _VALUE_FLAGS:
            attached = letters[pos + 1:]
            if attached:
                _HANDLERS[name](partial, flag, attached)
                return i
            if i >= len(args):
                raise MissingArgumentError(flag)
            _HANDLERS[name](partial, flag, args[i])
            return i + 1

        _HANDLERS[name](partial, flag, None)

    return i


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def _set_url(partial: PartialRequest, url: str) -> None:
    if partial.url is None:
        partial.url = url
    else:
        partial.extra_urls.append(url)


def _on_url(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    _set_url(partial, value)


def _on_request(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    method = value.upper()
    if method not in _KNOWN_METHODS:
        partial.warnings.append(f"non-standard method {value!r} given to {flag}")
    partial.method = method


def _on_head(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    partial.method = HTTPMethod.HEAD.value


def _on_header(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    """Record ``Name: Value``. ``Name;`` is curl's spelling of an empty header."""
    assert value is not None
    name, sep, rest = value.partition(":")
    if not sep:
        if value.endswith(";") and value[:-1].strip():
            partial.set_header(value[:-1].strip(), "", HeaderSource.HEADER)
        else:
            partial.malformed_headers.append(value)
        return
    name = name.strip()
    if not name:
        partial.malformed_headers.append(value)
        return
    if rest.startswith(" "):
        rest = rest[1:]
    partial.set_header(name, rest, HeaderSource.HEADER)


def _on_data(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    if value.startswith("@"):
        partial.warnings.append(
            f"{flag} {value}: file contents are not read; the text is sent as-is"
        )
    partial.data.append(DataChunk(value=value))


def _on_data_raw(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    partial.data.append(DataChunk(value=value))


def _on_data_urlencode(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    """Encode the content part of ``content``, ``=content`` or ``name=content``."""
    assert value is not None
    name, sep, content = value.partition("=")
    if not sep:
        content = value
        name = ""
    encoded = quote(content, safe="")
    if name:
        chunk = DataChunk(
            value=f"{name}={encoded}",
            origin=DataOrigin.URLENCODE,
            name=name,
            decoded=content,
        )
    else:
        chunk = DataChunk(value=encoded, origin=DataOrigin.URLENCODE, decoded=content)
    partial.data.append(chunk)


def _on_json(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    partial.data.append(DataChunk(value=value, origin=DataOrigin.JSON))
    partial.set_header("Content-Type", "application/json", HeaderSource.JSON)
    partial.set_header("Accept", "application/json", HeaderSource.JSON)


def _on_form(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    partial.form_parts.append(RawFormPart(spec=value))


def _on_form_string(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    partial.form_parts.append(RawFormPart(spec=value, literal=True))


def _on_user(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    username, _, password = value.partition(":")
    partial.auth = BasicAuth(username=username, password=password)


def _on_bearer(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    partial.auth = BearerAuth(token=value)


def _on_get(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    partial.get = True


def _on_user_agent(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    partial.set_header("User-Agent", value, HeaderSource.USER_AGENT)


def _on_referer(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    referer = value[: -len(";auto")] if value.endswith(";auto") else value
    if referer:
        partial.set_header("Referer", referer, HeaderSource.REFERER)


def _on_cookie(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    partial.cookies.append(value)


def _on_insecure(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    partial.insecure = True


def _on_location(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    partial.follow_redirects = True


def _on_max_time(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    assert value is not None
    try:
        seconds = float(value)
    except ValueError:
        raise MissingArgumentError(
            flag, f"option {flag} requires a number of seconds, got {value!r}"
        ) from None
    if not math.isfinite(seconds) or seconds < 0:
        raise MissingArgumentError(
            flag, f"option {flag} requires a non-negative number of seconds, got {value!r}"
        )
    partial.timeout_seconds = seconds


def _on_ignore(partial: PartialRequest, flag: str, value: Optional[str]) -> None:
    pass


_HANDLERS: dict[str, Callable[[PartialRequest, str, Optional[str]], None]] = {
    "request": _on_request,
    "header": _on_header,
    "data": _on_data,
    "data-raw": _on_data_raw,
    "data-urlencode": _on_data_urlencode,
    "json": _on_json,
    "form": _on_form,
    "form-string": _on_form_string,
    "user": _on_user,
    "oauth2-bearer": _on_bearer,
    "get": _on_get,
    "head": _on_head,
    "user-agent": _on_user_agent,
    "referer": _on_referer,
    "cookie": _on_cookie,
    "url": _on_url,
    "insecure": _on_insecure,
    "location": _on_location,
    "max-time": _on_max_time,
    "ignore": _on_ignore,
    "ignore-value": _on_ignore,
}
