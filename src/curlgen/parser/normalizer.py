"""Turn a :class:`PartialRequest` into a validated :class:`RequestModel`.

The normalizer applies every implicit default and conflict rule that the
option parser deliberately leaves alone:

* **URL** -- required; a missing scheme becomes ``https://``; only
  ``http`` and ``https`` are accepted.
* **Method** -- an explicit ``-X``/``-I`` wins; otherwise ``POST`` when a
  body flag is present, else ``GET``. Anything outside
  :class:`~curlgen.models.HTTPMethod` is rejected.
* **Query folding** -- with ``-G`` every data pair moves into the URL query
  string and the data body is dropped.
* **Body** -- multipart (any ``-F``) beats data, data beats nothing. Data
  is JSON when it parses as a JSON object or array (or parses and the
  Content-Type says JSON), a url-encoded form when every chunk came from
  ``--data-urlencode name=...``, and raw text otherwise.
* **Headers** -- ``Content-Type`` is inferred from the body only when
  absent; explicit ``-H`` headers override the ones ``--json`` adds; an
  explicit ``Authorization`` header disables ``-u``/``--oauth2-bearer``.

The public function is :func:`normalize`. It either returns a model or
raises :class:`~curlgen.exceptions.RequestValidationError`.
"""

from __future__ import annotations

import json
import re
from typing import Any, Optional
from urllib.parse import parse_qsl, urlsplit

from curlgen.exceptions import RequestValidationError
from curlgen.models import (
    Body,
    DataChunk,
    DataOrigin,
    FileReference,
    FormBody,
    FormField,
    FormPart,
    Header,
    HeaderSource,
    HTTPMethod,
    JSONBody,
    MultipartBody,
    NoAuth,
    NoBody,
    PartialRequest,
    QueryParam,
    RawBody,
    RawFormPart,
    RequestModel,
)


_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.-]*)://")
_ALLOWED_SCHEMES = frozenset({"http", "https"})
_DEFAULT_SCHEME = "https://"

_JSON_CONTENT_TYPE = "application/json"
_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_NOT_JSON = object()


def normalize(partial: PartialRequest) -> RequestModel:
    """Validate *partial* and resolve it into an immutable request.

    Args:
        partial: The output of :func:`curlgen.parser.options.parse`.

    Returns:
        The normalized :class:`~curlgen.models.RequestModel`.

    Raises:
        RequestValidationError: If the URL is missing, duplicated or uses
            another scheme, the method is not supported, a header, cookie
            or form field is malformed, or ``-G`` data is not ``key=value``.

    Example::

        partial = parse(tokenize("curl -d '{\\"a\\":1}' https://x.com"))
        model = normalize(partial)
        assert model.method is HTTPMethod.POST
        assert model.header("Content-Type").value == "application/json"
    """
    if partial.url is None or not partial.url.strip():
        raise RequestValidationError("missing URL")
    if partial.extra_urls:
        raise RequestValidationError(
            "unexpected extra URL", token=partial.extra_urls[0]
        )
    if partial.malformed_headers:
        raise RequestValidationError(
            "malformed header (expected 'Name: Value')",
            token=partial.malformed_headers[0],
        )

    method = _resolve_method(partial)
    url = _normalize_url(partial.url)
    headers = _resolve_headers(partial)

    body: Body = NoBody()
    if partial.data:
        if partial.get:
            url = _fold_into_query(url, partial.data)
        else:
            body = _body_from_data(partial.data, headers)
    if partial.form_parts:
        body = MultipartBody(parts=tuple(_parse_form_part(p) for p in partial.form_parts))

    _infer_content_type(headers, body)

    auth = partial.auth
    if any(h.matches("Authorization") for h in headers):
        auth = NoAuth()

    return RequestModel(
        url=url,
        method=method,
        headers=tuple(headers),
        query_params=_query_params(url),
        body=body,
        auth=auth,
        follow_redirects=partial.follow_redirects,
        insecure_skip_verify=partial.insecure,
        timeout_seconds=_resolve_timeout(partial.timeout_seconds),
    )


# ---------------------------------------------------------------------------
# Method and URL
# ---------------------------------------------------------------------------


def _resolve_method(partial: PartialRequest) -> HTTPMethod:
    if partial.method is not None:
        try:
            return HTTPMethod(partial.method)
        except ValueError:
            raise RequestValidationError(
                "unsupported method", token=partial.method
            ) from None
    if partial.form_parts or (partial.data and not partial.get):
        return HTTPMethod.POST
    return HTTPMethod.GET


def _normalize_url(raw_url: str) -> str:
    """Add a default scheme and reject anything that is not http(s)."""
    url = raw_url.strip()
    match = _SCHEME_RE.match(url)
    if match is None:
        url = _DEFAULT_SCHEME + url
    elif match.group(1).lower() not in _ALLOWED_SCHEMES:
        raise RequestValidationError("unsupported URL scheme", token=raw_url)

    try:
        host = urlsplit(url).netloc
    except ValueError:
        raise RequestValidationError("invalid URL", token=raw_url) from None
    if not host:
        raise RequestValidationError("URL has no host", token=raw_url)
    return url


def _fold_into_query(url: str, chunks: list[DataChunk]) -> str:
    """Append ``-G`` data pairs to the query string of *url*."""
    pairs: list[str] = []
    for chunk in chunks:
        for piece in chunk.value.split("&"):
            if not piece:
                continue
            key, sep, _ = piece.partition("=")
            if not sep or not key:
                raise RequestValidationError(
                    "cannot fold non key-value data into query", token=piece
                )
            pairs.append(piece)
    if not pairs:
        return url

    base, hash_sep, fragment = url.partition("#")
    if "?" not in base:
        base += "?"
    elif not base.endswith(("?", "&")):
        base += "&"
    return base + "&".join(pairs) + hash_sep + fragment


def _query_params(url: str) -> tuple[QueryParam, ...]:
    query = urlsplit(url).query
    return tuple(
        QueryParam(key=key, value=value)
        for key, value in parse_qsl(query, keep_blank_values=True)
    )


def _resolve_timeout(seconds: Optional[float]) -> Optional[float]:
    # curl reads --max-time 0 as "no limit".
    if not seconds:
        return None
    return seconds


# ---------------------------------------------------------------------------
# Headers
# ---------------------------------------------------------------------------


def _resolve_headers(partial: PartialRequest) -> list[Header]:
    """Apply explicit-over-inferred rules and fold cookies into a header."""
    explicit = [h for h in partial.headers if h.source == HeaderSource.HEADER]
    headers = [
        h
        for h in partial.headers
        if h.source != HeaderSource.JSON
        or not any(e.matches(h.name) for e in explicit)
    ]

    if partial.cookies:
        for cookie in partial.cookies:
            if "=" not in cookie:
                raise RequestValidationError(
                    "cookie files are not supported (expected 'name=value')",
                    token=cookie,
                )
        value = "; ".join(c.strip().rstrip(";") for c in partial.cookies)
        headers.append(Header(name="Cookie", value=value, source=HeaderSource.COOKIE))

    return headers


def _content_type(headers: list[Header]) -> Optional[str]:
    for header in headers:
        if header.matches("Content-Type"):
            return header.value
    return None


def _infer_content_type(headers: list[Header], body: Body) -> None:
    """Add the Content-Type curl would send, unless one is already set."""
    if _content_type(headers) is not None:
        return
    if isinstance(body, JSONBody) or (
        isinstance(body, RawBody) and body.text.lstrip().startswith(("{", "["))
    ):
        inferred = _JSON_CONTENT_TYPE
    elif isinstance(body, (RawBody, FormBody)):
        inferred = _FORM_CONTENT_TYPE
    else:
        return
    headers.append(
        Header(name="Content-Type", value=inferred, source=HeaderSource.INFERRED)
    )


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------


def _body_from_data(chunks: list[DataChunk], headers: list[Header]) -> Body:
    if all(c.origin == DataOrigin.URLENCODE and c.name for c in chunks):
        return FormBody(
            fields=tuple(FormField(name=c.name or "", value=c.decoded or "") for c in chunks)
        )

    text = "&".join(c.value for c in chunks)
    value = _try_json(text)
    if value is not _NOT_JSON:
        content_type = (_content_type(headers) or "").lower()
        if (
            isinstance(value, (dict, list))
            or "json" in content_type
            or any(c.origin == DataOrigin.JSON for c in chunks)
        ):
            return JSONBody(raw=text, value=value)
    return RawBody(text=text)


def _try_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return _NOT_JSON


def _parse_form_part(raw: RawFormPart) -> FormPart:
    """Parse ``name=value`` or ``name=@path[;type=...][;filename=...]``."""
    name, sep, value = raw.spec.partition("=")
    if not sep or not name:
        raise RequestValidationError(
            "malformed form field (expected 'name=value')", token=raw.spec
        )
    if raw.literal or not value.startswith("@"):
        return FormPart(name=name, value=value)

    path, *attributes = value[1:].split(";")
    if not path:
        raise RequestValidationError("form file reference has no path", token=raw.spec)

    content_type: Optional[str] = None
    filename: Optional[str] = None
    for attribute in attributes:
        key, _, attr_value = attribute.partition("=")
        key = key.strip().lower()
        if key == "type":
            content_type = attr_value.strip() or None
        elif key == "filename":
            filename = attr_value.strip().strip('"') or None
    return FormPart(
        name=name,
        file=FileReference(path=path, content_type=content_type, filename=filename),
    )
