"""Default transport built on httpx.

:class:`HttpxTransport` satisfies the :data:`~kopru.types.Transport`
protocol. It performs exactly one exchange per call and leaves timeouts to
the pipeline, so the underlying ``httpx.AsyncClient`` is created without a
timeout of its own.

Example:
    Sharing a preconfigured httpx client::

        async with httpx.AsyncClient(http2=True, timeout=None) as http:
            client = HttpClient(transport=HttpxTransport(http))
            response = await client.get("https://example.com/data")
"""

from __future__ import annotations

import inspect
import json
from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any

import httpx

from .types import Blob, ProgressEvent, TransportRequest

DEFAULT_CHUNK_SIZE = 64 * 1024


class HttpxRawResponse:
    """Adapts an ``httpx.Response`` to the :class:`~kopru.types.RawResponse` protocol.

    The body can be read once; a second read raises ``RuntimeError``.
    """

    def __init__(self, response: httpx.Response):
        self._response = response
        self._consumed = False

    @property
    def ok(self) -> bool:
        return self._response.is_success

    @property
    def status(self) -> int:
        return self._response.status_code

    @property
    def status_text(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> list[tuple[str, str]]:
        return list(self._response.headers.items())

    @property
    def body_used(self) -> bool:
        return self._consumed

    def _consume(self) -> bytes:
        if self._consumed:
            raise RuntimeError("Body has already been consumed")
        self._consumed = True
        return self._response.content

    async def json(self) -> Any:
        return json.loads(self._consume())

    async def text(self) -> str:
        self._consume()
        return self._response.text

    async def blob(self) -> Blob:
        data = self._consume()
        return Blob(data, self._response.headers.get("content-type", ""))

    async def array_buffer(self) -> bytes:
        return bytes(self._consume())


class HttpxTransport:
    """Fetch-like transport over ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        """Create a transport.

        Args:
            client: httpx client to send requests with. When omitted, one is
                created on first use and closed by :meth:`aclose`.
            chunk_size: Chunk size in bytes used when reporting upload
                progress.
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self._client = client
        self._owns_client = client is None
        self.chunk_size = chunk_size

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=None, follow_redirects=True)
        return self._client

    async def __call__(self, request: TransportRequest) -> HttpxRawResponse:
        headers, body_kwargs = self._encode_body(request)
        http_request = self.client.build_request(
            request.method,
            request.url,
            headers=headers,
            **body_kwargs,
        )
        response = await self.client.send(http_request)
        return HttpxRawResponse(response)

    async def aclose(self) -> None:
        """Close the httpx client if this transport created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    def _encode_body(self, request: TransportRequest) -> tuple[dict[str, str], dict[str, Any]]:
        headers = dict(request.headers)
        body = request.body
        if body is None:
            return headers, {}

        if isinstance(body, (str, bytes, bytearray)):
            data = body.encode("utf-8") if isinstance(body, str) else bytes(body)
            if request.on_upload_progress is None:
                return headers, {"content": data}
            if not any(key.lower() == "content-length" for key in headers):
                headers["Content-Length"] = str(len(data))
            return headers, {"content": self._progress_stream(data, request.on_upload_progress)}

        if isinstance(body, Mapping):
            return headers, {"data": dict(body)}

        return headers, {"content": body}

    async def _progress_stream(
        self, data: bytes, callback: Callable[[ProgressEvent], Any]
    ) -> AsyncIterator[bytes]:
        total = len(data)
        loaded = 0
        for start in range(0, total, self.chunk_size):
            chunk = data[start : start + self.chunk_size]
            yield chunk
            loaded += len(chunk)
            result = callback(ProgressEvent(loaded=loaded, total=total))
            if inspect.isawaitable(result):
                await result
