"""Request and response interceptor chains.

An interceptor is a pair of optional handlers. ``on_fulfilled`` receives the
current value (a :class:`RequestConfig` or an :class:`HttpResponse`) and
returns the value for the next interceptor. If it raises and the same
interceptor has ``on_rejected``, that handler gets the exception and may
recover by returning a replacement value; without one the exception stops
the chain.

Handlers can be plain functions or coroutine functions.

Example:
    Registering and removing an interceptor::

        handle = client.interceptors.request.use(
            lambda config: config.replace(headers={**config.headers, "X-Id": "1"})
        )
        client.interceptors.request.eject(handle)
"""

from __future__ import annotations

import inspect
import itertools
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger

from .types import HttpResponse, RequestConfig

T = TypeVar("T")

OnFulfilled = Callable[[T], Any]
OnRejected = Callable[[Exception], Any]


async def _call(handler: Callable[..., Any], value: Any) -> Any:
    result = handler(value)
    if inspect.isawaitable(result):
        result = await result
    return result


@dataclass(frozen=True)
class Interceptor(Generic[T]):
    """A fulfillment/rejection handler pair."""

    on_fulfilled: OnFulfilled[T] | None = None
    on_rejected: OnRejected | None = None


class InterceptorChain(Generic[T]):
    """Ordered interceptors for one kind of value.

    Handles come from a monotonic counter and are never reused, so ejecting
    one interceptor never shifts the handle of another.
    """

    def __init__(self, name: str = "interceptors"):
        self.name = name
        self._entries: dict[int, Interceptor[T]] = {}
        self._ids = itertools.count()

    def use(
        self,
        on_fulfilled: OnFulfilled[T] | None = None,
        on_rejected: OnRejected | None = None,
    ) -> int:
        """Append an interceptor and return its handle."""
        handle = next(self._ids)
        self._entries[handle] = Interceptor(on_fulfilled, on_rejected)
        logger.debug(f"Registered {self.name} interceptor {handle}")
        return handle

    def eject(self, handle: int) -> None:
        """Remove the interceptor registered under ``handle``.

        Unknown handles are ignored.
        """
        if self._entries.pop(handle, None) is not None:
            logger.debug(f"Ejected {self.name} interceptor {handle}")

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Interceptor[T]]:
        return iter(list(self._entries.values()))

    async def run(self, value: T) -> T:
        """Pass ``value`` through every interceptor in registration order.

        Raises:
            Exception: Whatever an unhandled ``on_fulfilled`` (or an
                ``on_rejected``) raised; later interceptors do not run.
        """
        current = value
        for interceptor in self:
            if interceptor.on_fulfilled is None:
                continue
            try:
                current = await _call(interceptor.on_fulfilled, current)
                if current is None:
                    raise TypeError(f"{self.name} interceptor returned None")
            except Exception as exc:
                if interceptor.on_rejected is None:
                    raise
                current = await _call(interceptor.on_rejected, exc)
                if current is None:
                    raise TypeError(f"{self.name} interceptor recovery returned None") from exc
        return current


class InterceptorManager:
    """The request and response chains of one client."""

    def __init__(self) -> None:
        self.request: InterceptorChain[RequestConfig] = InterceptorChain("request")
        self.response: InterceptorChain[HttpResponse] = InterceptorChain("response")
