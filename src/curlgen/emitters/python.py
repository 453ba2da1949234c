"""Python emitters -- ``requests`` and ``httpx``.

Both libraries share one template (``python.py.j2``) and most of the
context: the URL is kept whole (query string included), headers become a
dict, and the body is bound to a variable (``payload``, ``data`` or
``files``) before the call. The subclasses only differ in the keyword
names each library uses and in how they spell a form body.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Optional

from curlgen.emitters.base import (
    Emitter,
    bearer_header,
    format_seconds,
    literal_is_faithful,
    merged_headers,
    python_literal,
    quote_string,
    upload_filename,
)
from curlgen.models import (
    BasicAuth,
    ConvertOptions,
    FormBody,
    HTTPMethod,
    JSONBody,
    MultipartBody,
    NoBody,
    RawBody,
    RequestModel,
)


class _PythonEmitter(Emitter):
    """Shared context building for the Python HTTP client emitters."""

    language = "python"
    template_name = "python.py.j2"

    module: str = ""
    raw_body_keyword: str = "data"

    def build_context(self, request: RequestModel, options: ConvertOptions) -> dict[str, Any]:
        pad = " " * options.indent

        headers = merged_headers(request)
        bearer = bearer_header(request)
        if bearer is not None:
            headers.append(bearer)

        assignments: list[str] = []
        args = ["url"]
        if headers:
            args.append("headers=headers")

        body = request.body
        if isinstance(body, JSONBody) and literal_is_faithful(body):
            assignments.append(f"payload = {python_literal(body.value, options.indent)}")
            args.append("json=payload")
        elif isinstance(body, (JSONBody, RawBody)):
            text = body.raw if isinstance(body, JSONBody) else body.text
            assignments.append(f"data = {quote_string(text)}")
            args.append(f"{self.raw_body_keyword}=data")
        elif isinstance(body, FormBody):
            assignments.append(f"data = {self.form_literal(body, pad)}")
            args.append("data=data")
        elif isinstance(body, MultipartBody):
            assignments.append(f"files = {_files_literal(body, pad)}")
            args.append("files=files")

        if isinstance(request.auth, BasicAuth):
            args.append(
                f"auth=({quote_string(request.auth.username)}, "
                f"{quote_string(request.auth.password)})"
            )
        if request.insecure_skip_verify:
            args.append("verify=False")
        redirect = self.redirect_argument(request)
        if redirect is not None:
            args.append(redirect)
        if request.timeout_seconds is not None:
            args.append(f"timeout={format_seconds(request.timeout_seconds)}")

        call, args = self.call_for(request, args)
        return {
            "module": self.module,
            "url": quote_string(request.url),
            "headers": [(quote_string(n), quote_string(v)) for n, v in headers],
            "assignments": assignments,
            "call": call,
            "args": args,
        }

    def call_for(self, request: RequestModel, args: list[str]) -> tuple[str, list[str]]:
        """Return the function to call and its final argument list."""
        return f"{self.module}.{request.method.value.lower()}", args

    @abstractmethod
    def redirect_argument(self, request: RequestModel) -> Optional[str]:
        """Return the keyword argument that sets redirect handling, if needed."""

    @abstractmethod
    def form_literal(self, body: FormBody, pad: str) -> str:
        """Return the expression bound to ``data`` for a form body."""


class PythonRequestsEmitter(_PythonEmitter):
    """Render a request as a :mod:`requests` call."""

    target = "python-requests"
    aliases = ("python", "requests")
    label = "Python (requests)"

    module = "requests"
    raw_body_keyword = "data"

    def redirect_argument(self, request: RequestModel) -> Optional[str]:
        """Always explicit: requests follows redirects unless told not to."""
        return f"allow_redirects={request.follow_redirects}"

    def form_literal(self, body: FormBody, pad: str) -> str:
        """A list of pairs, which keeps order and repeated names."""
        lines = [
            f"{pad}({quote_string(f.name)}, {quote_string(f.value)}),"
            for f in body.fields
        ]
        return "[\n" + "\n".join(lines) + "\n]"


class PythonHttpxEmitter(_PythonEmitter):
    """Render a request as an :mod:`httpx` call."""

    target = "python-httpx"
    aliases = ("httpx",)
    label = "Python (httpx)"

    module = "httpx"
    raw_body_keyword = "content"

    _BODYLESS_HELPERS = frozenset({
        HTTPMethod.GET,
        HTTPMethod.HEAD,
        HTTPMethod.OPTIONS,
        HTTPMethod.DELETE,
    })

    def redirect_argument(self, request: RequestModel) -> Optional[str]:
        # httpx does not follow redirects by default.
        return "follow_redirects=True" if request.follow_redirects else None

    def call_for(self, request: RequestModel, args: list[str]) -> tuple[str, list[str]]:
        # httpx.get() and friends take no body arguments.
        if request.method in self._BODYLESS_HELPERS and not isinstance(request.body, NoBody):
            return "httpx.request", [quote_string(request.method.value), *args]
        return super().call_for(request, args)

    def form_literal(self, body: FormBody, pad: str) -> str:
        """A dict; repeated names become a list of values."""
        grouped: dict[str, list[str]] = {}
        for field in body.fields:
            grouped.setdefault(field.name, []).append(field.value)
        lines = []
        for name, values in grouped.items():
            if len(values) == 1:
                rendered = quote_string(values[0])
            else:
                rendered = "[" + ", ".join(quote_string(v) for v in values) + "]"
            lines.append(f"{pad}{quote_string(name)}: {rendered},")
        return "{\n" + "\n".join(lines) + "\n}"


def _files_literal(body: MultipartBody, pad: str) -> str:
    """Render multipart parts as an ordered list of ``(name, value)`` pairs.

    Inline fields use a ``(None, value)`` tuple so they are sent without a
    filename; files are opened at request time.
    """
    lines = []
    for part in body.parts:
        name = quote_string(part.name)
        if part.file is None:
            lines.append(f"{pad}({name}, (None, {quote_string(part.value or '')})),")
            continue
        handle = f"open({quote_string(part.file.path)}, \"rb\")"
        if part.file.content_type:
            value = (
                f"({quote_string(upload_filename(part))}, {handle}, "
                f"{quote_string(part.file.content_type)})"
            )
        elif part.file.filename:
            value = f"({quote_string(upload_filename(part))}, {handle})"
        else:
            value = handle
        lines.append(f"{pad}({name}, {value}),")
    return "[\n" + "\n".join(lines) + "\n]"
