"""Type definitions for kopru.

This module defines the data model shared by every stage of the request
pipeline: the request configuration, the normalized response, and the
protocols a transport has to satisfy to be plugged into a client.

Configuration objects are immutable. Interceptors that want to change a
request or a response build a modified copy with ``replace()`` and return it.

Classes:
    ResponseType: How a response body should be decoded
    RequestConfig: Per-call (and per-client default) request options
    HttpResponse: Normalized response handed back to callers
    ProgressEvent: Upload progress notification
    Blob: Binary body together with its content type
    TransportRequest: What the pipeline hands to a transport
    RawResponse: Protocol for the response a transport yields
    Transport: Protocol for fetch-like transports

Example:
    Deriving a config inside a request interceptor::

        def add_trace_header(config: RequestConfig) -> RequestConfig:
            return config.replace(headers={**config.headers, "X-Trace": "1"})
"""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .signals import AbortSignal

HTTP_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"})
"""Methods accepted by :class:`RequestConfig`."""


class ResponseType(str, Enum):
    """Declared decoding mode for a response body.

    Unknown values fall back to ``JSON``.
    """

    JSON = "json"
    TEXT = "text"
    BLOB = "blob"
    ARRAY_BUFFER = "arraybuffer"

    @classmethod
    def _missing_(cls, value: object) -> ResponseType:
        return cls.JSON


ParamValue = str | int | float | bool | None


@dataclass(frozen=True)
class ProgressEvent:
    """Upload progress, in bytes."""

    loaded: int
    total: int


@dataclass(frozen=True)
class Blob:
    """Binary response body."""

    data: bytes
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class RequestConfig:
    """Options for a single request, or the defaults of a client.

    Every field defaults to ``None``, meaning "not set". When a call config
    is merged over client defaults, only the fields that are set win.

    Attributes:
        base_url: Prefix joined verbatim in front of ``url``
        url: Request path (or a full URL when ``base_url`` is empty)
        method: HTTP method, upper-cased on construction
        headers: Header mapping; keys are kept exactly as supplied
        params: Query parameters; ``None`` values are left out of the URL
        body: Request payload; structured values are JSON-encoded when the
            content type asks for it
        timeout: Timeout in milliseconds; ``0`` disables it
        response_type: How to decode the response body
        signal: External cancellation signal; disables the internal timer
        on_upload_progress: Called with a :class:`ProgressEvent` while the
            body is being sent

    Notes:
        ``headers`` and ``params`` are copied into read-only mappings, so a
        caller mutating its own dict afterwards never changes a config.
    """

    base_url: str | None = None
    url: str | None = None
    method: str | None = None
    headers: Mapping[str, str] | None = None
    params: Mapping[str, ParamValue] | None = None
    body: Any = None
    timeout: float | None = None
    response_type: ResponseType | None = None
    signal: AbortSignal | None = None
    on_upload_progress: Callable[[ProgressEvent], Any] | None = None

    def __post_init__(self) -> None:
        if self.method is not None:
            method = self.method.upper()
            if method not in HTTP_METHODS:
                raise ValueError(f"Unsupported HTTP method: {self.method!r}")
            object.__setattr__(self, "method", method)
        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout must be >= 0 when provided")
        if self.response_type is not None and not isinstance(self.response_type, ResponseType):
            object.__setattr__(self, "response_type", ResponseType(self.response_type))
        object.__setattr__(self, "headers", _freeze(self.headers))
        object.__setattr__(self, "params", _freeze(self.params))

    def replace(self, **changes: Any) -> RequestConfig:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def set_fields(self) -> dict[str, Any]:
        """Return the fields that are set, by name."""
        return {
            f.name: getattr(self, f.name)
            for f in dataclasses.fields(self)
            if getattr(self, f.name) is not None
        }


@dataclass(frozen=True)
class HttpResponse:
    """A decoded response.

    Attributes:
        data: Body decoded according to the config's ``response_type``
        status: Numeric status code
        status_text: Reason phrase
        headers: Response headers
        config: The effective config that produced this response
    """

    data: Any
    status: int
    status_text: str
    headers: Mapping[str, str]
    config: RequestConfig

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze(self.headers))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def replace(self, **changes: Any) -> HttpResponse:
        """Return a copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class TransportRequest:
    """Everything a transport needs to perform one exchange."""

    url: str
    method: str
    headers: Mapping[str, str]
    body: Any = None
    signal: AbortSignal | None = None
    on_upload_progress: Callable[[ProgressEvent], Any] | None = None


@runtime_checkable
class RawResponse(Protocol):
    """Protocol for responses yielded by a transport.

    The body can be read exactly once, through any one of the decoding
    methods.
    """

    @property
    def ok(self) -> bool: ...

    @property
    def status(self) -> int: ...

    @property
    def status_text(self) -> str: ...

    @property
    def headers(self) -> Iterable[tuple[str, str]]: ...

    async def json(self) -> Any: ...

    async def text(self) -> str: ...

    async def blob(self) -> Blob: ...

    async def array_buffer(self) -> bytes: ...


Transport = Callable[[TransportRequest], Awaitable[RawResponse]]
"""A fetch-like capability: performs one exchange or raises."""
