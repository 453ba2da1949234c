"""JavaScript emitter -- the standard ``fetch`` API.

The output targets Node.js 20+ (and browsers, when no file upload is
involved) as an ES module with top-level ``await``. Multipart file parts
are read with ``fs.openAsBlob``. ``fetch`` has no switch for TLS
verification, so ``-k`` becomes a comment.
"""

from __future__ import annotations

from typing import Any

from curlgen.emitters.base import (
    Emitter,
    basic_header,
    bearer_header,
    merged_headers,
    quote_string,
    upload_filename,
)
from curlgen.models import (
    ConvertOptions,
    FormBody,
    JSONBody,
    MultipartBody,
    RawBody,
    RequestModel,
)


class JavaScriptFetchEmitter(Emitter):
    """Render a request as a ``fetch()`` call."""

    target = "javascript-fetch"
    aliases = ("javascript", "js", "fetch", "node")
    label = "JavaScript (fetch)"
    language = "javascript"
    template_name = "fetch.js.j2"

    def build_context(self, request: RequestModel, options: ConvertOptions) -> dict[str, Any]:
        pad = " " * options.indent

        headers = merged_headers(request)
        for extra in (basic_header(request), bearer_header(request)):
            if extra is not None:
                headers.append(extra)

        setup: list[str] = []
        init = [f"method: {quote_string(request.method.value)},"]
        if headers:
            lines = [f"{pad * 2}{quote_string(n)}: {quote_string(v)}," for n, v in headers]
            init.append("headers: {\n" + "\n".join(lines) + f"\n{pad}}},")

        body = request.body
        needs_fs = False
        if isinstance(body, JSONBody):
            # The exact text; a JS number cannot hold every JSON number.
            init.append(f"body: {quote_string(body.raw)},")
        elif isinstance(body, RawBody):
            init.append(f"body: {quote_string(body.text)},")
        elif isinstance(body, FormBody):
            pairs = [
                f"{pad * 2}[{quote_string(f.name)}, {quote_string(f.value)}],"
                for f in body.fields
            ]
            init.append("body: new URLSearchParams([\n" + "\n".join(pairs) + f"\n{pad}]),")
        elif isinstance(body, MultipartBody):
            setup.append(_form_data_block(body))
            init.append("body: form,")
            needs_fs = body.has_files

        # fetch follows redirects unless told otherwise; curl does not.
        redirect = "follow" if request.follow_redirects else "manual"
        init.append(f'redirect: "{redirect}",')
        if request.timeout_seconds is not None:
            milliseconds = int(round(request.timeout_seconds * 1000))
            init.append(f"signal: AbortSignal.timeout({milliseconds}),")
        if request.insecure_skip_verify:
            init.append(
                "// fetch cannot skip TLS verification; "
                "run Node with NODE_TLS_REJECT_UNAUTHORIZED=0 instead"
            )

        return {
            "url": quote_string(request.url),
            "setup": setup,
            "init": init,
            "needs_fs": needs_fs,
        }


def _form_data_block(body: MultipartBody) -> str:
    lines = ["const form = new FormData();"]
    for part in body.parts:
        name = quote_string(part.name)
        if part.file is None:
            lines.append(f"form.append({name}, {quote_string(part.value or '')});")
            continue
        blob_args = quote_string(part.file.path)
        if part.file.content_type:
            blob_args += f", {{ type: {quote_string(part.file.content_type)} }}"
        lines.append(
            f"form.append({name}, await fs.openAsBlob({blob_args}), "
            f"{quote_string(upload_filename(part))});"
        )
    return "\n".join(lines)
