"""Shell emitters -- HTTPie and a canonical ``curl`` command.

Both render one word per line joined with backslash continuations. Every
word is quoted with :func:`shlex.quote`, so the output can be pasted into
any POSIX shell. The ``curl`` emitter writes the request back in a
normalized form: explicit method only when it differs from the implied one,
inferred headers left for curl to infer again, and ``-G`` data already
folded into the URL.
"""

from __future__ import annotations

import shlex
from abc import abstractmethod
from typing import Any

from curlgen.emitters.base import Emitter, format_seconds
from curlgen.models import (
    BasicAuth,
    BearerAuth,
    ConvertOptions,
    FormBody,
    FormPart,
    HeaderSource,
    HTTPMethod,
    JSONBody,
    MultipartBody,
    NoBody,
    RawBody,
    RequestModel,
)


class _ShellEmitter(Emitter):
    language = "bash"
    template_name = "shell.sh.j2"

    def build_context(self, request: RequestModel, options: ConvertOptions) -> dict[str, Any]:
        return {
            "words": self.words(request),
            "separator": " \\\n" + " " * options.indent,
        }

    @abstractmethod
    def words(self, request: RequestModel) -> list[str]:
        """Return the command words, each already shell-quoted."""


class HTTPieEmitter(_ShellEmitter):
    """Render a request as an HTTPie (``http``) command."""

    target = "httpie"
    aliases = ("http",)
    label = "HTTPie"

    def words(self, request: RequestModel) -> list[str]:
        words = ["http"]

        body = request.body
        if isinstance(body, FormBody):
            words.append("--form")
        elif isinstance(body, MultipartBody):
            words.append("--multipart")
        elif isinstance(body, JSONBody):
            words.append(f"--raw {shlex.quote(body.raw)}")
        elif isinstance(body, RawBody):
            words.append(f"--raw {shlex.quote(body.text)}")

        if isinstance(request.auth, BasicAuth):
            words.append(
                f"--auth {shlex.quote(f'{request.auth.username}:{request.auth.password}')}"
            )
        elif isinstance(request.auth, BearerAuth):
            words.append(f"--auth-type=bearer --auth {shlex.quote(request.auth.token)}")
        if request.insecure_skip_verify:
            words.append("--verify=no")
        if request.follow_redirects:
            words.append("--follow")
        if request.timeout_seconds is not None:
            words.append(f"--timeout={format_seconds(request.timeout_seconds)}")

        words.append(f"{request.method.value} {shlex.quote(request.url)}")

        for header in request.headers:
            item = f"{header.name}:{header.value}" if header.value else f"{header.name};"
            words.append(shlex.quote(item))

        if isinstance(body, FormBody):
            words.extend(shlex.quote(f"{f.name}={f.value}") for f in body.fields)
        elif isinstance(body, MultipartBody):
            words.extend(shlex.quote(_httpie_part(p)) for p in body.parts)
        return words


def _httpie_part(part: FormPart) -> str:
    if part.file is None:
        return f"{part.name}={part.value or ''}"
    item = f"{part.name}@{part.file.path}"
    if part.file.content_type:
        item += f";type={part.file.content_type}"
    return item


class CurlEmitter(_ShellEmitter):
    """Render a request back as a normalized ``curl`` command."""

    target = "curl"
    label = "curl (normalized)"

    def words(self, request: RequestModel) -> list[str]:
        words = ["curl"]

        body = request.body
        implied = HTTPMethod.GET if isinstance(body, NoBody) else HTTPMethod.POST
        if request.method is HTTPMethod.HEAD and isinstance(body, NoBody):
            words.append("--head")
        elif request.method is not implied:
            words.append(f"-X {request.method.value}")
        words.append(shlex.quote(request.url))

        for header in request.headers:
            if header.source == HeaderSource.INFERRED:
                continue
            item = f"{header.name}: {header.value}" if header.value else f"{header.name};"
            words.append(f"-H {shlex.quote(item)}")

        if isinstance(body, JSONBody):
            words.append(f"--data-raw {shlex.quote(body.raw)}")
        elif isinstance(body, RawBody):
            words.append(f"--data-raw {shlex.quote(body.text)}")
        elif isinstance(body, FormBody):
            words.extend(
                f"--data-urlencode {shlex.quote(f'{f.name}={f.value}')}" for f in body.fields
            )
        elif isinstance(body, MultipartBody):
            words.extend(_curl_part(p) for p in body.parts)

        if isinstance(request.auth, BasicAuth):
            words.append(
                f"-u {shlex.quote(f'{request.auth.username}:{request.auth.password}')}"
            )
        elif isinstance(request.auth, BearerAuth):
            words.append(f"--oauth2-bearer {shlex.quote(request.auth.token)}")
        if request.insecure_skip_verify:
            words.append("-k")
        if request.follow_redirects:
            words.append("-L")
        if request.timeout_seconds is not None:
            words.append(f"--max-time {format_seconds(request.timeout_seconds)}")
        return words


def _curl_part(part: FormPart) -> str:
    if part.file is None:
        value = part.value or ""
        # -F would treat these as file references or attributes.
        if value.startswith(("@", "<")) or ";" in value:
            return f"--form-string {shlex.quote(f'{part.name}={value}')}"
        return f"-F {shlex.quote(f'{part.name}={value}')}"
    spec = f"{part.name}=@{part.file.path}"
    if part.file.content_type:
        spec += f";type={part.file.content_type}"
    if part.file.filename:
        spec += f";filename={part.file.filename}"
    return f"-F {shlex.quote(spec)}"
