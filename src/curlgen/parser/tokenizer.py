"""Split a raw command line into shell-like argument tokens.

The rules follow POSIX ``sh`` word splitting closely enough for commands
copied from documentation, terminals and browser developer tools:

* Whitespace (space, tab, CR, LF) outside quotes separates tokens.
* Single quotes preserve everything literally.
* Double quotes honour backslash escapes only before ``$``, backtick,
  ``"``, backslash and newline; any other backslash is kept.
* Outside quotes a backslash escapes the next character, and a
  backslash-newline pair is a line continuation that joins the lines
  without a token break.
* ``$'...'`` (ANSI-C quoting, as produced by "Copy as cURL" in browsers)
  interprets C-style escapes.

Nothing is expanded: ``$VAR``, globs, pipes and subshells are plain text.
The public function is :func:`tokenize`.
"""

from __future__ import annotations

import re

from curlgen.exceptions import CommandSyntaxError


_WHITESPACE = frozenset(" \t\r\n")
_DOUBLE_QUOTE_ESCAPABLE = frozenset('$`"\\')

_ANSI_C_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "b": "\b",
    "e": "\x1b",
    "E": "\x1b",
    "f": "\f",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "?": "?",
}

_ANSI_C_HEX: dict[str, re.Pattern[str]] = {
    "x": re.compile(r"[0-9a-fA-F]{1,2}"),
    "u": re.compile(r"[0-9a-fA-F]{1,4}"),
    "U": re.compile(r"[0-9a-fA-F]{1,8}"),
}

_EXCERPT_LENGTH = 24


def tokenize(raw: str) -> list[str]:
    """Split *raw* into argument tokens.

    A leading ``curl`` is kept; :func:`curlgen.parser.options.parse`
    decides whether to drop it.

    Args:
        raw: The command line exactly as the user typed or pasted it.

    Returns:
        The tokens in order. An empty or all-whitespace input yields an
        empty list.

    Raises:
        CommandSyntaxError: If a quoted section is never closed.

    Example::

        >>> tokenize("curl -H 'A: B' https://x.com/path")
        ['curl', '-H', 'A: B', 'https://x.com/path']
    """
    tokens: list[str] = []
    current: list[str] = []
    # Tracks whether a token has started, so that '' yields an empty token.
    in_token = False
    length = len(raw)
    i = 0

    while i < length:
        ch = raw[i]

        if ch in _WHITESPACE:
            if in_token:
                tokens.append("".join(current))
                current = []
                in_token = False
            i += 1

        elif ch == "\\":
            i = _read_escape(raw, i, current)
            if current:
                in_token = True

        elif ch == "'":
            end = raw.find("'", i + 1)
            if end == -1:
                raise CommandSyntaxError("unterminated quote", token=_excerpt(raw, i))
            current.append(raw[i + 1:end])
            in_token = True
            i = end + 1

        elif ch == '"':
            i = _read_double_quoted(raw, i, current)
            in_token = True

        elif ch == "$" and raw.startswith("'", i + 1):
            i = _read_ansi_c_quoted(raw, i, current)
            in_token = True

        else:
            current.append(ch)
            in_token = True
            i += 1

    if in_token:
        tokens.append("".join(current))
    return tokens


def _read_escape(raw: str, start: int, out: list[str]) -> int:
    """Handle a backslash outside quotes and return the next index.

    Backslash-newline (LF or CRLF) is a line continuation and produces
    nothing. A backslash at the very end of the input is dropped.
    """
    following = raw[start + 1:start + 2]
    if following == "\n":
        return start + 2
    if following == "\r" and raw.startswith("\n", start + 2):
        return start + 3
    if following == "":
        return start + 1
    out.append(following)
    return start + 2


def _read_double_quoted(raw: str, start: int, out: list[str]) -> int:
    """Consume a ``"..."`` section beginning at *start* (the opening quote)."""
    length = len(raw)
    i = start + 1
    while i < length:
        ch = raw[i]
        if ch == '"':
            return i + 1
        if ch == "\\" and i + 1 < length:
            following = raw[i + 1]
            if following == "\n":
                i += 2
                continue
            if following == "\r" and raw.startswith("\n", i + 2):
                i += 3
                continue
            if following in _DOUBLE_QUOTE_ESCAPABLE:
                out.append(following)
                i += 2
                continue
        out.append(ch)
        i += 1
    raise CommandSyntaxError("unterminated quote", token=_excerpt(raw, start))


def _read_ansi_c_quoted(raw: str, start: int, out: list[str]) -> int:
    """Consume a ``$'...'`` section beginning at *start* (the ``$``)."""
    length = len(raw)
    i = start + 2
    while i < length:
        ch = raw[i]
        if ch == "'":
            return i + 1
        if ch == "\\" and i + 1 < length:
            following = raw[i + 1]
            if following in _ANSI_C_ESCAPES:
                out.append(_ANSI_C_ESCAPES[following])
                i += 2
                continue
            pattern = _ANSI_C_HEX.get(following)
            if pattern is not None:
                match = pattern.match(raw, i + 2)
                if match is not None:
                    codepoint = int(match.group(0), 16)
                    if codepoint <= 0x10FFFF:
                        out.append(chr(codepoint))
                        i = match.end()
                        continue
        out.append(ch)
        i += 1
    raise CommandSyntaxError("unterminated quote", token=_excerpt(raw, start))


def _excerpt(raw: str, start: int) -> str:
    """Return the text from *start*, shortened for error messages."""
    text = raw[start:]
    if len(text) > _EXCERPT_LENGTH:
        return text[:_EXCERPT_LENGTH] + "..."
    return text
