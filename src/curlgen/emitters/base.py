"""Abstract base class and shared rendering helpers for code emitters.

An emitter turns a :class:`~curlgen.models.RequestModel` into source code
for one target language or library. Each concrete emitter:

1. Declares its registry identity (:attr:`Emitter.target`,
   :attr:`Emitter.aliases`), a display :attr:`~Emitter.label`, the
   :attr:`~Emitter.language` used for syntax highlighting and the Jinja2
   :attr:`~Emitter.template_name` it renders.
2. Implements :meth:`Emitter.build_context`, which flattens the request into
   plain values the template can lay out.

:meth:`Emitter.emit` creates a fresh Jinja2 environment for every call, so
emitters share no state between conversions.

See Also:
    :mod:`curlgen.emitters.registry` for registration and lookup.
"""

from __future__ import annotations

import base64
import json
import math
import shlex
from abc import ABC, abstractmethod
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from curlgen.models import (
    BasicAuth,
    BearerAuth,
    ConvertOptions,
    FormPart,
    JSONBody,
    RequestModel,
)


TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``emitters/templates/``)."""

MAX_LITERAL_DEPTH = 50
"""Deepest JSON nesting :func:`python_literal` is asked to render.

Compilers reject deeply nested brackets, so deeper documents are sent as
their raw text instead.
"""


class Emitter(ABC):
    """Abstract base class for code emitters.

    Subclasses provide :attr:`target`, :attr:`language` and
    :attr:`template_name`, and implement :meth:`build_context`.
    :meth:`emit` must stay a pure function of its arguments: no I/O and no
    failure path. Anything a library cannot express is rendered as a
    best-effort literal or comment.
    """

    aliases: tuple[str, ...] = ()
    """Alternative identifiers accepted by the registry."""

    label: str = ""
    """Human-readable name shown by ``curlgen targets``."""

    @property
    @abstractmethod
    def target(self) -> str:
        """Return the unique registry identifier, e.g. ``"python-requests"``."""

    @property
    @abstractmethod
    def language(self) -> str:
        """Return the Pygments lexer name used to highlight the output."""

    @property
    @abstractmethod
    def template_name(self) -> str:
        """Return the template file name inside :data:`TEMPLATE_DIR`."""

    @abstractmethod
    def build_context(self, request: RequestModel, options: ConvertOptions) -> dict[str, Any]:
        """Flatten *request* into template variables.

        Args:
            request: The normalized request to render.
            options: Formatting options for this conversion.

        Returns:
            The variables passed to the template. ``options`` and
            ``request`` are added by :meth:`emit`.
        """

    def emit(self, request: RequestModel, options: Optional[ConvertOptions] = None) -> str:
        """Render *request* as source code.

        Args:
            request: The normalized request to render.
            options: Formatting options. Defaults to :class:`ConvertOptions`.

        Returns:
            The generated source text, ending with a single newline.
        """
        options = options or ConvertOptions()
        env = create_environment()
        context = self.build_context(request, options)
        context.setdefault("options", options)
        context.setdefault("request", request)
        context.setdefault("pad", " " * options.indent)
        rendered = env.get_template(self.template_name).render(**context)
        return rendered.rstrip("\n") + "\n"


def create_environment() -> Environment:
    """Create the Jinja2 environment used by every emitter.

    Templates produce source code rather than markup, so autoescaping is
    off. Block trimming and lstrip keep ``{% if %}`` lines out of the
    output, and undefined variables raise instead of rendering empty.

    Returns:
        A configured :class:`~jinja2.Environment` instance.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["quote"] = quote_string
    env.filters["shquote"] = shlex.quote
    return env


# ------------------------------------------------------------------ #
# Literal helpers shared by emitters
# ------------------------------------------------------------------ #


def quote_string(value: str) -> str:
    """Return *value* as a double-quoted string literal.

    The JSON escaping rules produce a literal that is valid, and identical,
    in Python, JavaScript and Go.
    """
    return json.dumps(value, ensure_ascii=False)


def python_literal(value: Any, indent: int = 4, level: int = 0) -> str:
    """Render a parsed JSON value as a Python expression.

    Objects and arrays are laid out one item per line with a trailing
    comma; key order is preserved.

    Example::

        >>> print(python_literal({"a": [1, True, None]}))
        {
            "a": [
                1,
                True,
                None,
            ],
        }
    """
    inner = " " * (indent * (level + 1))
    outer = " " * (indent * level)
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = [
            f"{inner}{quote_string(str(key))}: {python_literal(item, indent, level + 1)},"
            for key, item in value.items()
        ]
        return "{\n" + "\n".join(items) + f"\n{outer}}}"
    if isinstance(value, list):
        if not value:
            return "[]"
        items = [f"{inner}{python_literal(item, indent, level + 1)}," for item in value]
        return "[\n" + "\n".join(items) + f"\n{outer}]"
    if value is True:
        return "True"
    if value is False:
        return "False"
    if value is None:
        return "None"
    if isinstance(value, str):
        return quote_string(value)
    if isinstance(value, float) and not math.isfinite(value):
        return f'float("{value}")'
    return repr(value)


def literal_is_faithful(body: JSONBody) -> bool:
    """Return True if re-serializing ``body.value`` sends what ``body.raw`` says.

    The parsed value loses information when the document repeats an object
    key, spells a float with more digits than a double holds, or uses
    ``NaN``/``Infinity``. It also cannot be rendered as a literal when it
    nests deeper than :data:`MAX_LITERAL_DEPTH`. Emitters fall back to the
    raw text in all of these cases.
    """
    faithful = True

    def object_pairs(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
        nonlocal faithful
        if len({key for key, _ in pairs}) != len(pairs):
            faithful = False
        return dict(pairs)

    def parse_float(text: str) -> float:
        nonlocal faithful
        value = float(text)
        if not math.isfinite(value) or Decimal(repr(value)) != Decimal(text):
            faithful = False
        return value

    def parse_constant(text: str) -> float:
        nonlocal faithful
        faithful = False
        return float(text)

    try:
        value = json.loads(
            body.raw,
            object_pairs_hook=object_pairs,
            parse_float=parse_float,
            parse_constant=parse_constant,
        )
    except (ValueError, RecursionError):
        return False
    return faithful and nesting_depth(value) <= MAX_LITERAL_DEPTH


def nesting_depth(value: Any) -> int:
    """Return how many arrays/objects deep *value* goes (scalars are 0)."""
    deepest = 0
    stack = [(value, 1)]
    while stack:
        item, level = stack.pop()
        if isinstance(item, dict):
            children = list(item.values())
        elif isinstance(item, list):
            children = item
        else:
            continue
        deepest = max(deepest, level)
        stack.extend((child, level + 1) for child in children)
    return deepest


def merged_headers(request: RequestModel) -> list[tuple[str, str]]:
    """Return headers for libraries that take a mapping.

    Repeated names (case-insensitive) are combined into the first
    occurrence, joined with ``", "`` (``"; "`` for ``Cookie``), which is
    equivalent on the wire. Order of first appearance is kept.
    """
    merged: list[tuple[str, str]] = []
    positions: dict[str, int] = {}
    for header in request.headers:
        key = header.name.lower()
        if key in positions:
            index = positions[key]
            name, value = merged[index]
            separator = "; " if key == "cookie" else ", "
            merged[index] = (name, f"{value}{separator}{header.value}")
        else:
            positions[key] = len(merged)
            merged.append((header.name, header.value))
    return merged


def bearer_header(request: RequestModel) -> Optional[tuple[str, str]]:
    """Return the ``Authorization`` header for bearer auth, if any."""
    if isinstance(request.auth, BearerAuth):
        return ("Authorization", f"Bearer {request.auth.token}")
    return None


def basic_header(request: RequestModel) -> Optional[tuple[str, str]]:
    """Return a precomputed ``Authorization: Basic ...`` header, if any."""
    if isinstance(request.auth, BasicAuth):
        credentials = f"{request.auth.username}:{request.auth.password}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return ("Authorization", f"Basic {encoded}")
    return None


def upload_filename(part: FormPart) -> str:
    """Return the filename a multipart upload should advertise."""
    assert part.file is not None
    if part.file.filename:
        return part.file.filename
    return part.file.path.replace("\\", "/").rsplit("/", 1)[-1]


def format_seconds(seconds: float) -> str:
    """Render a timeout without a pointless ``.0``."""
    if float(seconds).is_integer():
        return str(int(seconds))
    return repr(float(seconds))
