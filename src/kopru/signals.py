"""Cancellation primitives.

An :class:`AbortController` owns an :class:`AbortSignal`; calling
``abort()`` on the controller fires the signal, and anything racing against
the signal (the transport call, body decoding) is cancelled.

Signals created by the pipeline for its own timeout carry
``timer_owned=True``. That flag is the only thing used to tell a timeout
apart from a caller aborting the request.

Example:
    Cancelling a request from elsewhere::

        controller = AbortController()
        task = asyncio.create_task(client.get("/slow", signal=controller.signal))
        controller.abort()
        # task raises CancellationError
"""

from __future__ import annotations

import asyncio
from typing import Any


class AbortError(Exception):
    """Raised when an operation is interrupted by an :class:`AbortSignal`."""

    def __init__(self, signal: AbortSignal, message: str = "The operation was aborted"):
        super().__init__(message)
        self.signal = signal

    @property
    def timer_owned(self) -> bool:
        return self.signal.timer_owned


class AbortSignal:
    """One-shot cancellation flag that coroutines can wait on."""

    def __init__(self, *, timer_owned: bool = False):
        self.timer_owned = timer_owned
        self.reason: Any = None
        self._event = asyncio.Event()

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until the signal fires."""
        await self._event.wait()

    def throw_if_aborted(self) -> None:
        if self.aborted:
            raise AbortError(self)

    def _fire(self, reason: Any) -> None:
        if self.aborted:
            return
        self.reason = reason
        self._event.set()

    def __repr__(self) -> str:
        return f"AbortSignal(aborted={self.aborted}, timer_owned={self.timer_owned})"


class AbortController:
    """Owner of an :class:`AbortSignal`."""

    def __init__(self, *, timer_owned: bool = False):
        self.signal = AbortSignal(timer_owned=timer_owned)

    def abort(self, reason: Any = None) -> None:
        """Fire the signal. Aborting twice keeps the first reason."""
        self.signal._fire(reason)
