"""The HTTP client facade."""

from __future__ import annotations

from typing import Any

from loguru import logger

from .config import ClientSettings, default_config, merge_config
from .errors import CancellationError, HttpError, RequestTimeoutError, UnknownError
from .interceptors import InterceptorManager
from .invoker import TransportInvoker
from .signals import AbortError
from .transports import HttpxTransport
from .types import HttpResponse, RequestConfig, Transport


def _coerce(config: RequestConfig | None, options: dict[str, Any]) -> RequestConfig:
    config = config if config is not None else RequestConfig()
    return config.replace(**options) if options else config


def _finalize_error(error: Exception, config: RequestConfig) -> HttpError:
    """Turn anything raised inside the pipeline into an :class:`HttpError`."""
    if isinstance(error, HttpError):
        if error.config is None:
            error.config = config
        return error
    if isinstance(error, AbortError):
        if error.timer_owned:
            return RequestTimeoutError(config.timeout, config)
        return CancellationError(config)
    logger.debug(f"Wrapping {type(error).__name__} raised inside the request pipeline")
    return UnknownError.wrap(error, config)


class HttpClient:
    """Asynchronous HTTP client with defaults and interceptors.

    ``defaults`` is a public attribute and may be reassigned at any time; it
    is read, never modified, by :meth:`request`.

    Example:
        >>> client = HttpClient(base_url="https://api.example.com", timeout=5000)
        >>> client.interceptors.request.use(add_auth_header)
        >>> response = await client.get("/users", params={"active": True})
        >>> response.data
    """

    def __init__(
        self,
        config: RequestConfig | None = None,
        *,
        transport: Transport | None = None,
        **options: Any,
    ):
        """Create a client.

        Args:
            config: Defaults merged over the library defaults.
            transport: Fetch-like transport. When omitted an
                :class:`~kopru.transports.HttpxTransport` is created on first
                use and closed by :meth:`aclose`.
            **options: ``RequestConfig`` fields applied on top of ``config``.
        """
        self.defaults = merge_config(default_config(), _coerce(config, options))
        self.interceptors = InterceptorManager()
        self._transport = transport
        self._owns_transport = transport is None

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs: Any) -> HttpClient:
        return cls(settings.to_config(), **kwargs)

    @classmethod
    def from_env(cls, prefix: str = "KOPRU_", **kwargs: Any) -> HttpClient:
        """Create a client from ``<prefix>*`` environment variables.

        See :meth:`ClientSettings.from_env` for the recognized names.
        """
        return cls.from_settings(ClientSettings.from_env(prefix), **kwargs)

    @property
    def transport(self) -> Transport:
        if self._transport is None:
            self._transport = HttpxTransport()
        return self._transport

    def create(self, config: RequestConfig | None = None, **options: Any) -> HttpClient:
        """Derive a client from this one.

        The new client's defaults are this client's defaults merged with
        ``config``; it shares the transport but starts without interceptors.
        """
        derived = HttpClient(transport=self.transport)
        derived.defaults = merge_config(self.defaults, _coerce(config, options))
        return derived

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            await self._transport.aclose()

    async def request(self, config: RequestConfig | None = None, **options: Any) -> HttpResponse:
        """Run a request through the pipeline.

        Args:
            config: Per-call options merged over ``defaults``.
            **options: ``RequestConfig`` fields applied on top of ``config``.

        Returns:
            The response after every response interceptor ran.

        Raises:
            HttpError: On any failure; ``config`` is always the effective
                config of the request.
        """
        effective = merge_config(self.defaults, _coerce(config, options))
        try:
            effective = await self.interceptors.request.run(effective)
            response = await TransportInvoker(self.transport).execute(effective)
            return await self.interceptors.response.run(response)
        except Exception as exc:
            error = _finalize_error(exc, effective)
            if error is exc:
                raise
            raise error from exc

    # Convenience methods
    async def get(self, url: str, config: RequestConfig | None = None, **options: Any) -> HttpResponse:
        """Make a GET request."""
        return await self.request(config, url=url, method="GET", **options)

    async def post(
        self, url: str, data: Any = None, config: RequestConfig | None = None, **options: Any
    ) -> HttpResponse:
        """Make a POST request."""
        return await self.request(config, url=url, method="POST", body=data, **options)

    async def put(
        self, url: str, data: Any = None, config: RequestConfig | None = None, **options: Any
    ) -> HttpResponse:
        """Make a PUT request."""
        return await self.request(config, url=url, method="PUT", body=data, **options)

    async def patch(
        self, url: str, data: Any = None, config: RequestConfig | None = None, **options: Any
    ) -> HttpResponse:
        """Make a PATCH request."""
        return await self.request(config, url=url, method="PATCH", body=data, **options)

    async def delete(
        self, url: str, config: RequestConfig | None = None, **options: Any
    ) -> HttpResponse:
        """Make a DELETE request."""
        return await self.request(config, url=url, method="DELETE", **options)

    async def head(self, url: str, config: RequestConfig | None = None, **options: Any) -> HttpResponse:
        """Make a HEAD request."""
        return await self.request(config, url=url, method="HEAD", **options)

    async def options(
        self, url: str, config: RequestConfig | None = None, **options: Any
    ) -> HttpResponse:
        """Make an OPTIONS request."""
        return await self.request(config, url=url, method="OPTIONS", **options)
