"""Exception hierarchy for request failures.

Every failure that leaves :meth:`HttpClient.request` is an :class:`HttpError`
carrying the effective config of the request. The concrete class is decided
where the failure happens, not guessed afterwards from the exception's shape.

Exception Hierarchy:
    HttpError: Base exception for all request failures
    ├── TransportError: The exchange could not be completed (no status)
    ├── ProtocolError: A response arrived with a non-2xx status
    ├── CancellationError: The caller's signal aborted the request
    │   └── RequestTimeoutError: The request's own timer fired
    └── UnknownError: Anything else raised inside the pipeline

Example:
    >>> try:
    ...     await client.get("/users/42")
    ... except ProtocolError as e:
    ...     print(e.status, e.data)
    ... except RequestTimeoutError as e:
    ...     print(f"gave up after {e.timeout}ms")
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .types import RequestConfig


class ErrorKind(str, Enum):
    """Origin of an :class:`HttpError`."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    CANCELLATION = "cancellation"
    UNKNOWN = "unknown"


def format_timeout(timeout: float | None) -> str:
    """Render a millisecond timeout without exponent notation."""
    if not timeout:
        return "0"
    if isinstance(timeout, float) and timeout.is_integer():
        return str(int(timeout))
    return str(timeout)


class HttpError(Exception):
    """Base exception for all request failures."""

    kind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        config: RequestConfig | None = None,
        *,
        status: int | None = None,
        status_text: str | None = None,
        headers: Mapping[str, str] | None = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.config = config
        self.status = status
        self.status_text = status_text
        self.headers = dict(headers) if headers is not None else None
        self.data = data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, status={self.status!r})"


class TransportError(HttpError):
    """The network exchange failed before any response was received.

    The transport's own exception is chained as ``__cause__``.
    """

    kind = ErrorKind.TRANSPORT


class ProtocolError(HttpError):
    """A response was received with a status outside the 2xx range.

    ``data`` holds the decoded error body, or ``None`` when it could not be
    decoded.
    """

    kind = ErrorKind.PROTOCOL

    def __init__(
        self,
        config: RequestConfig | None,
        *,
        status: int,
        status_text: str,
        headers: Mapping[str, str],
        data: Any = None,
    ):
        super().__init__(
            f"Request failed with status {status}",
            config,
            status=status,
            status_text=status_text,
            headers=headers,
            data=data,
        )


class CancellationError(HttpError):
    """The request was aborted through a caller-supplied signal."""

    kind = ErrorKind.CANCELLATION

    def __init__(self, config: RequestConfig | None = None, message: str = "Request aborted"):
        super().__init__(message, config)


class RequestTimeoutError(CancellationError):
    """The request's own timeout elapsed."""

    def __init__(self, timeout: float | None, config: RequestConfig | None = None):
        self.timeout = timeout
        super().__init__(config, f"Request timeout of {format_timeout(timeout)}ms exceeded")


class UnknownError(HttpError):
    """A failure that is neither transport, protocol nor cancellation.

    Wraps exceptions raised by interceptors or by decoding a successful
    response; the original exception is chained as ``__cause__``.
    """

    kind = ErrorKind.UNKNOWN

    DEFAULT_MESSAGE = "An unknown error occurred"

    @classmethod
    def wrap(cls, error: BaseException, config: RequestConfig | None) -> UnknownError:
        wrapped = cls(str(error) or cls.DEFAULT_MESSAGE, config)
        wrapped.__cause__ = error
        return wrapped
