"""Go emitter -- ``net/http`` from the standard library.

Produces a complete ``package main`` program. Headers are added one by one
with ``Header.Add`` so repeated names and their order survive. Multipart
bodies are assembled with ``mime/multipart`` and files are streamed from
disk with ``os.Open``. Without ``-L`` the client stops at the first
redirect, as curl does. The import block is derived from what the body and
client options need, sorted the way ``gofmt`` leaves it.
"""

from __future__ import annotations

from typing import Any

from curlgen.emitters.base import (
    Emitter,
    bearer_header,
    format_seconds,
    quote_string,
    upload_filename,
)
from curlgen.models import (
    BasicAuth,
    ConvertOptions,
    FormBody,
    JSONBody,
    MultipartBody,
    RawBody,
    RequestModel,
)


_PANIC_ON_ERROR = ["\tif err != nil {", "\t\tpanic(err)", "\t}"]

# http.Client follows up to 10 redirects unless CheckRedirect says otherwise.
_NO_REDIRECTS = [
    "\t\tCheckRedirect: func(req *http.Request, via []*http.Request) error {",
    "\t\t\treturn http.ErrUseLastResponse",
    "\t\t},",
]


class GoEmitter(Emitter):
    """Render a request as a Go ``net/http`` program."""

    target = "go"
    aliases = ("golang", "go-net-http")
    label = "Go (net/http)"
    language = "go"
    template_name = "go.go.j2"

    def build_context(self, request: RequestModel, options: ConvertOptions) -> dict[str, Any]:
        imports = {"fmt", "io", "net/http"}
        setup: list[str] = []
        reader = "nil"

        body = request.body
        if isinstance(body, (JSONBody, RawBody)):
            text = body.raw if isinstance(body, JSONBody) else body.text
            imports.add("strings")
            reader = f"strings.NewReader({go_string(text)})"
        elif isinstance(body, FormBody):
            imports.update({"net/url", "strings"})
            setup.append("\tform := url.Values{}")
            for field in body.fields:
                setup.append(
                    f"\tform.Add({quote_string(field.name)}, {quote_string(field.value)})"
                )
            setup.append("")
            reader = "strings.NewReader(form.Encode())"
        elif isinstance(body, MultipartBody):
            imports.update({"bytes", "mime/multipart"})
            setup.extend(_multipart_setup(body, imports))
            reader = "body"

        header_lines: list[str] = []
        if isinstance(body, MultipartBody):
            header_lines.append('req.Header.Set("Content-Type", writer.FormDataContentType())')
        for header in request.headers:
            if header.matches("Host"):
                header_lines.append(f"req.Host = {quote_string(header.value)}")
                continue
            if isinstance(body, MultipartBody) and header.matches("Content-Type") and (
                header.value.lower().startswith("multipart/form-data")
            ):
                # The writer supplies the boundary parameter.
                continue
            header_lines.append(
                f"req.Header.Add({quote_string(header.name)}, {quote_string(header.value)})"
            )
        if isinstance(request.auth, BasicAuth):
            header_lines.append(
                f"req.SetBasicAuth({quote_string(request.auth.username)}, "
                f"{quote_string(request.auth.password)})"
            )
        bearer = bearer_header(request)
        if bearer is not None:
            header_lines.append(
                f"req.Header.Add({quote_string(bearer[0])}, {quote_string(bearer[1])})"
            )

        client_fields: list[str] = []
        if request.timeout_seconds is not None:
            imports.add("time")
            client_fields.append(f"\t\tTimeout: {_go_duration(request.timeout_seconds)},")
        if request.insecure_skip_verify:
            imports.add("crypto/tls")
            client_fields.extend([
                "\t\tTransport: &http.Transport{",
                "\t\t\tTLSClientConfig: &tls.Config{InsecureSkipVerify: true},",
                "\t\t},",
            ])
        if not request.follow_redirects:
            client_fields.extend(_NO_REDIRECTS)

        return {
            "imports": sorted(imports),
            "setup": setup,
            "method": f"http.Method{request.method.value.title()}",
            "url": quote_string(request.url),
            "reader": reader,
            "header_lines": header_lines,
            "client_fields": client_fields,
        }


def go_string(text: str) -> str:
    """Prefer a raw string literal for multi-line or quote-heavy text.

    Raw literals cannot hold a backtick and silently drop carriage
    returns, so those fall back to an interpreted literal.
    """
    if "`" in text or "\r" in text:
        return quote_string(text)
    if "\n" in text or '"' in text:
        return f"`{text}`"
    return quote_string(text)


def _go_duration(seconds: float) -> str:
    if float(seconds).is_integer():
        return f"{format_seconds(seconds)} * time.Second"
    return f"{int(round(seconds * 1000))} * time.Millisecond"


def _multipart_setup(body: MultipartBody, imports: set[str]) -> list[str]:
    lines = [
        "\tbody := &bytes.Buffer{}",
        "\twriter := multipart.NewWriter(body)",
    ]
    file_index = 0
    for part in body.parts:
        name = quote_string(part.name)
        if part.file is None:
            lines.append(f"\twriter.WriteField({name}, {quote_string(part.value or '')})")
            continue

        imports.add("os")
        file_index += 1
        handle = f"file{file_index}"
        writer_part = f"part{file_index}"
        lines.append(f"\t{handle}, err := os.Open({quote_string(part.file.path)})")
        lines.extend(_PANIC_ON_ERROR)
        lines.append(f"\tdefer {handle}.Close()")

        filename = upload_filename(part)
        if part.file.content_type:
            imports.add("net/textproto")
            mime_header = f"header{file_index}"
            disposition = f'form-data; name="{part.name}"; filename="{filename}"'
            lines.extend([
                f"\t{mime_header} := make(textproto.MIMEHeader)",
                f"\t{mime_header}.Set(\"Content-Disposition\", {quote_string(disposition)})",
                f"\t{mime_header}.Set(\"Content-Type\", {quote_string(part.file.content_type)})",
                f"\t{writer_part}, err := writer.CreatePart({mime_header})",
            ])
        else:
            lines.append(
                f"\t{writer_part}, err := writer.CreateFormFile({name}, {quote_string(filename)})"
            )
        lines.extend(_PANIC_ON_ERROR)
        lines.append(f"\tio.Copy({writer_part}, {handle})")
    lines.append("\twriter.Close()")
    lines.append("")
    return lines
