"""Canonical Pydantic models shared across all curlgen modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Request models** -- produced by the parser and consumed by the emitters:
    :class:`HTTPMethod`, :class:`Header`, :class:`QueryParam`, the body
    variants (:class:`NoBody`, :class:`RawBody`, :class:`JSONBody`,
    :class:`FormBody`, :class:`MultipartBody`), the auth variants
    (:class:`NoAuth`, :class:`BasicAuth`, :class:`BearerAuth`),
    :class:`PartialRequest` and the frozen :class:`RequestModel`.

**Conversion models** -- the boundary between the core and its callers:
    :class:`ConvertOptions` and :class:`ConversionResult`.

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`PluginsConfig` and :class:`GlobalConfig`.

All models use Pydantic v2. Body and auth are discriminated unions keyed
on ``kind`` so a request can never hold two body kinds at once.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field


# --- Request building blocks ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods a normalized request may carry."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class HeaderSource(str, enum.Enum):
    """The flag family that produced a header.

    Two headers with the same name from the same source collapse
    (last write wins); from different sources both are kept.
    """

    HEADER = "header"
    USER_AGENT = "user-agent"
    REFERER = "referer"
    COOKIE = "cookie"
    JSON = "json"
    INFERRED = "inferred"


class Header(BaseModel):
    """A single request header. Names keep their original spelling."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: str
    source: HeaderSource = HeaderSource.HEADER

    def matches(self, name: str) -> bool:
        """Case-insensitive name comparison."""
        return self.name.lower() == name.lower()


class QueryParam(BaseModel):
    """One decoded ``key=value`` pair from the URL query string."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str


# --- Body variants ---


class NoBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class RawBody(BaseModel):
    """Body sent verbatim, as assembled from ``-d`` chunks."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["raw"] = "raw"
    text: str


class JSONBody(BaseModel):
    """A JSON document. ``raw`` is the exact text the user wrote."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["json"] = "json"
    raw: str
    value: Any = None


class FormField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: str


class FormBody(BaseModel):
    """``application/x-www-form-urlencoded`` fields in their decoded form."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["form"] = "form"
    fields: tuple[FormField, ...] = ()


class FileReference(BaseModel):
    """A file named by ``-F name=@path``. Contents are never read."""

    model_config = ConfigDict(frozen=True)

    path: str
    content_type: Optional[str] = None
    filename: Optional[str] = None


class FormPart(BaseModel):
    """One multipart field: either an inline ``value`` or a ``file``."""

    model_config = ConfigDict(frozen=True)

    name: str
    value: Optional[str] = None
    file: Optional[FileReference] = None

    @property
    def is_file(self) -> bool:
        return self.file is not None


class MultipartBody(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["multipart"] = "multipart"
    parts: tuple[FormPart, ...] = ()

    @property
    def has_files(self) -> bool:
        return any(part.is_file for part in self.parts)


Body = Annotated[
    Union[NoBody, RawBody, JSONBody, FormBody, MultipartBody],
    Field(discriminator="kind"),
]


# --- Auth variants ---


class NoAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["none"] = "none"


class BasicAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["basic"] = "basic"
    username: str
    password: str = ""


class BearerAuth(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bearer"] = "bearer"
    token: str


Auth = Annotated[
    Union[NoAuth, BasicAuth, BearerAuth],
    Field(discriminator="kind"),
]


# --- Parser output ---


class DataOrigin(str, enum.Enum):
    """Which flag family contributed a data chunk."""

    RAW = "raw"
    URLENCODE = "urlencode"
    JSON = "json"


class DataChunk(BaseModel):
    """One ``-d``-style argument, already url-encoded for ``--data-urlencode``.

    ``name`` and ``decoded`` keep the pre-encoding pieces of a
    ``--data-urlencode`` argument so the normalizer can build a form body.
    """

    value: str
    origin: DataOrigin = DataOrigin.RAW
    name: Optional[str] = None
    decoded: Optional[str] = None


class RawFormPart(BaseModel):
    """An unparsed ``-F`` argument. ``literal`` is set for ``--form-string``."""

    spec: str
    literal: bool = False


class PartialRequest(BaseModel):
    """Mutable accumulator filled in by :func:`curlgen.parser.options.parse`.

    Holds exactly what the flags said, with no defaults applied. Problems
    the option parser can detect but not judge (a second URL, a header
    without a colon) are recorded here and rejected by the normalizer.
    """

    url: Optional[str] = None
    extra_urls: list[str] = Field(default_factory=list)
    method: Optional[str] = None
    headers: list[Header] = Field(default_factory=list)
    malformed_headers: list[str] = Field(default_factory=list)
    data: list[DataChunk] = Field(default_factory=list)
    form_parts: list[RawFormPart] = Field(default_factory=list)
    cookies: list[str] = Field(default_factory=list)
    auth: Auth = Field(default_factory=NoAuth)
    get: bool = False
    follow_redirects: bool = False
    insecure: bool = False
    timeout_seconds: Optional[float] = None
    warnings: list[str] = Field(default_factory=list)

    def set_header(self, name: str, value: str, source: HeaderSource) -> None:
        """Add a header, replacing an earlier one of the same name and source."""
        header = Header(name=name, value=value, source=source)
        for index, existing in enumerate(self.headers):
            if existing.source == source and existing.matches(name):
                self.headers[index] = header
                return
        self.headers.append(header)


# --- Normalized request ---


class RequestModel(BaseModel):
    """The normalized, validated, immutable description of one HTTP request.

    Built once per conversion by :func:`curlgen.parser.normalizer.normalize`
    and consumed by exactly one emitter.

    Example::

        RequestModel(
            url="https://api.example.com/items?page=2",
            method=HTTPMethod.POST,
            headers=(Header(name="Accept", value="application/json"),),
            query_params=(QueryParam(key="page", value="2"),),
            body=JSONBody(raw='{"a": 1}', value={"a": 1}),
        )
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1)
    method: HTTPMethod = HTTPMethod.GET
    headers: tuple[Header, ...] = ()
    query_params: tuple[QueryParam, ...] = ()
    body: Body = Field(default_factory=NoBody)
    auth: Auth = Field(default_factory=NoAuth)
    follow_redirects: bool = False
    insecure_skip_verify: bool = False
    timeout_seconds: Optional[float] = None

    @property
    def base_url(self) -> str:
        """The URL without its query string or fragment."""
        parts = urlsplit(self.url)
        return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))

    def header(self, name: str) -> Optional[Header]:
        """Return the first header called *name* (case-insensitive)."""
        for header in self.headers:
            if header.matches(name):
                return header
        return None

    def has_header(self, name: str) -> bool:
        return self.header(name) is not None


# --- Conversion boundary ---


class ConvertOptions(BaseModel):
    """Formatting options passed explicitly into every conversion."""

    indent: int = Field(
        default=4, ge=1, le=8, description="Spaces per indent level (Python and JavaScript)"
    )
    include_imports: bool = Field(
        default=True, description="Emit import/package preamble"
    )


class ConversionResult(BaseModel):
    """Outcome of one :func:`curlgen.converter.convert` call.

    Exactly one of ``code`` or ``error_kind`` is set.
    """

    code: Optional[str] = None
    target: Optional[str] = None
    language: Optional[str] = None
    error_kind: Optional[str] = None
    message: Optional[str] = None
    offending_token: Optional[str] = None
    stage: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    def to_payload(self) -> dict[str, str]:
        """Return the dict shape callers pattern-match on.

        ``{"code": ...}`` on success, otherwise
        ``{"errorKind": ..., "message": ..., "offendingToken": ...}`` with
        ``offendingToken`` omitted when unknown.
        """
        if self.ok:
            return {"code": self.code or ""}
        payload = {"errorKind": self.error_kind or "", "message": self.message or ""}
        if self.offending_token is not None:
            payload["offendingToken"] = self.offending_token
        return payload


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class PluginsConfig(BaseModel):
    """Allow/deny lists for emitters discovered through entry points."""

    enabled: list[str] = Field(default_factory=list)
    disabled: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/curlgen/config.json``.

    Loaded and saved by :func:`~curlgen.config.load_global_config` and
    :func:`~curlgen.config.save_global_config`. See
    :func:`~curlgen.config.resolve_config` for the precedence chain.
    """

    default_target: str = Field(
        default="python-requests", description="Emitter used when --target is omitted"
    )
    convert: ConvertOptions = Field(default_factory=ConvertOptions)
    output: OutputConfig = Field(default_factory=OutputConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)
