"""Transport invocation: URL building, body preparation, cancellation."""

from __future__ import annotations

import asyncio
import dataclasses
import json
from collections.abc import Coroutine, Mapping
from typing import Any, TypeVar
from urllib.parse import urlencode, urlsplit, urlunsplit

from loguru import logger
from pydantic import BaseModel

from .decoding import decode_body
from .errors import (
    CancellationError,
    HttpError,
    ProtocolError,
    RequestTimeoutError,
    TransportError,
    format_timeout,
)
from .signals import AbortController, AbortError, AbortSignal
from .types import HttpResponse, ParamValue, RequestConfig, Transport, TransportRequest

R = TypeVar("R")


def _stringify(value: ParamValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_url(config: RequestConfig) -> str:
    """Join ``base_url`` and ``url`` and append the query parameters.

    Parameters whose value is ``None`` are left out; the others are appended
    in insertion order after any query already present in the URL.
    """
    url = f"{config.base_url or ''}{config.url or ''}"
    pairs = [
        (key, _stringify(value))
        for key, value in (config.params or {}).items()
        if value is not None
    ]
    if not pairs:
        return url

    parts = urlsplit(url)
    encoded = urlencode(pairs)
    query = f"{parts.query}&{encoded}" if parts.query else encoded
    return urlunsplit(parts._replace(query=query))


def _content_type(headers: Mapping[str, str]) -> str:
    for key, value in headers.items():
        if key.lower() == "content-type":
            return value
    return ""


def prepare_body(body: Any, headers: Mapping[str, str]) -> Any:
    """Serialize structured bodies to JSON when the content type is JSON.

    Mappings, sequences, dataclass instances and pydantic models are
    serialized. Strings, bytes, streams and everything else pass through
    unchanged.
    """
    if body is None or "application/json" not in _content_type(headers):
        return body
    if isinstance(body, BaseModel):
        return body.model_dump_json()
    if dataclasses.is_dataclass(body) and not isinstance(body, type):
        return json.dumps(dataclasses.asdict(body))
    if isinstance(body, (Mapping, list, tuple)):
        return json.dumps(body)
    return body


async def _race(coro: Coroutine[Any, Any, R], signal: AbortSignal) -> R:
    """Await ``coro`` unless ``signal`` fires first.

    Raises:
        AbortError: If the signal fired before ``coro`` finished.
    """
    task = asyncio.ensure_future(coro)
    waiter = asyncio.ensure_future(signal.wait())
    try:
        await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        raise
    finally:
        waiter.cancel()

    if task.done():
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise AbortError(signal)


class TransportInvoker:
    """Performs one exchange for an effective config."""

    def __init__(self, transport: Transport):
        self.transport = transport

    async def execute(self, config: RequestConfig) -> HttpResponse:
        """Send the request described by ``config`` and decode the response.

        Args:
            config: The effective (merged, intercepted) config

        Returns:
            The decoded response for a 2xx status.

        Raises:
            ProtocolError: The response status is not 2xx.
            TransportError: The transport failed to complete the exchange.
            RequestTimeoutError: ``config.timeout`` elapsed first.
            CancellationError: ``config.signal`` fired first.
        """
        url = build_url(config)
        headers = dict(config.headers or {})
        body = prepare_body(config.body, headers)
        timer: asyncio.TimerHandle | None = None

        if config.signal is not None:
            signal = config.signal
        else:
            controller = AbortController(timer_owned=True)
            signal = controller.signal
            if config.timeout:
                timer = asyncio.get_running_loop().call_later(
                    config.timeout / 1000, controller.abort, "timeout"
                )

        request = TransportRequest(
            url=url,
            method=config.method or "GET",
            headers=headers,
            body=body,
            signal=signal,
            on_upload_progress=config.on_upload_progress,
        )

        try:
            signal.throw_if_aborted()
            return await _race(self._exchange(request, config), signal)
        except AbortError as exc:
            if exc.timer_owned:
                logger.warning(f"{request.method} {url} timed out after {format_timeout(config.timeout)}ms")
                raise RequestTimeoutError(config.timeout, config) from exc
            logger.warning(f"{request.method} {url} aborted")
            raise CancellationError(config) from exc
        finally:
            if timer is not None:
                timer.cancel()

    async def _exchange(self, request: TransportRequest, config: RequestConfig) -> HttpResponse:
        logger.debug(f"{request.method} {request.url}")
        try:
            raw = await self.transport(request)
        except (AbortError, HttpError):
            raise
        except Exception as exc:
            logger.warning(f"{request.method} {request.url} failed: {exc!r}")
            raise TransportError(str(exc) or type(exc).__name__, config) from exc

        logger.debug(f"{request.method} {request.url} -> {raw.status}")
        headers = dict(raw.headers)

        if raw.ok:
            data = await decode_body(raw, config.response_type)
            return HttpResponse(
                data=data,
                status=raw.status,
                status_text=raw.status_text,
                headers=headers,
                config=config,
            )

        try:
            data = await decode_body(raw, config.response_type)
        except Exception:
            # Error bodies are best effort.
            data = None
        raise ProtocolError(
            config,
            status=raw.status,
            status_text=raw.status_text,
            headers=headers,
            data=data,
        )
