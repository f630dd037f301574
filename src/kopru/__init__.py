"""Asynchronous HTTP client with defaults and interceptors.

kopru wraps a fetch-like transport in a small request pipeline: per-call
options are merged over client defaults, passed through request
interceptors, sent with timeout and cancellation wiring, decoded according
to the declared response type, and passed through response interceptors.
Every failure surfaces as an :class:`HttpError` carrying the effective
config.

Key Features:
    - Client defaults with header-level merging
    - Request/response interceptors with recovery handlers
    - Query string building that skips ``None`` parameters
    - Millisecond timeouts and external cancellation via ``AbortController``
    - JSON, text, blob and raw byte response decoding
    - Pluggable transport, httpx by default

Quick Start:
    Basic usage example::

        from kopru import HttpClient

        async with HttpClient(base_url="https://api.example.com") as client:
            response = await client.get("/users", params={"id": 123})
            print(response.status, response.data)

    Using the module-level client::

        from kopru import kopru

        response = await kopru.post("https://api.example.com/users", {"name": "Ada"})

Advanced Features:
    Add interceptors::

        def add_token(config):
            return config.replace(headers={**config.headers, "Authorization": "Bearer t"})

        client.interceptors.request.use(add_token)

    Capture results instead of raising::

        result = await execute_action(lambda: client.get("/users/1"))
        if not result.ok:
            print(result.error.message)

See Also:
    - RequestConfig: Every per-request option
    - HttpError: Base class of all request failures
    - HttpxTransport: The default transport
"""

from .actions import ActionError, ActionResult, create_action_result, execute_action
from .client import HttpClient
from .config import ClientSettings, default_config, merge_config
from .errors import (
    CancellationError,
    ErrorKind,
    HttpError,
    ProtocolError,
    RequestTimeoutError,
    TransportError,
    UnknownError,
)
from .interceptors import Interceptor, InterceptorChain, InterceptorManager
from .signals import AbortController, AbortError, AbortSignal
from .transports import HttpxRawResponse, HttpxTransport
from .types import (
    Blob,
    HttpResponse,
    ProgressEvent,
    RawResponse,
    RequestConfig,
    ResponseType,
    Transport,
    TransportRequest,
)

kopru = HttpClient()
"""Module-level client with the library defaults."""

__all__ = [
    "AbortController",
    "AbortError",
    "AbortSignal",
    "ActionError",
    "ActionResult",
    "Blob",
    "CancellationError",
    "ClientSettings",
    "ErrorKind",
    "HttpClient",
    "HttpError",
    "HttpResponse",
    "HttpxRawResponse",
    "HttpxTransport",
    "Interceptor",
    "InterceptorChain",
    "InterceptorManager",
    "ProgressEvent",
    "ProtocolError",
    "RawResponse",
    "RequestConfig",
    "RequestTimeoutError",
    "ResponseType",
    "Transport",
    "TransportError",
    "TransportRequest",
    "UnknownError",
    "create_action_result",
    "default_config",
    "execute_action",
    "kopru",
    "merge_config",
]

__version__ = "0.1.0"
