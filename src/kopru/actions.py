"""Result objects for callers that prefer values over exceptions.

Example:
    >>> result = await execute_action(lambda: client.get("/users/1"))
    >>> if result.ok:
    ...     render(result.data)
    ... else:
    ...     flash(result.error.message, result.error.status)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import HttpError, UnknownError
from .types import HttpResponse

FALLBACK_MESSAGE = "Request failed"


@dataclass(frozen=True)
class ActionError:
    message: str
    status: int | None = None
    details: Any = None


@dataclass(frozen=True)
class ActionResult:
    """Either response data or an :class:`ActionError`."""

    data: Any = None
    error: ActionError | None = None
    status: int | None = None
    status_text: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


def create_action_result(response_or_error: HttpResponse | BaseException) -> ActionResult:
    """Convert a response or a raised error into an :class:`ActionResult`."""
    if isinstance(response_or_error, HttpError):
        return ActionResult(
            error=ActionError(
                message=response_or_error.message or FALLBACK_MESSAGE,
                status=response_or_error.status,
                details=response_or_error.data,
            )
        )
    if isinstance(response_or_error, BaseException):
        return ActionResult(error=ActionError(message=str(response_or_error) or FALLBACK_MESSAGE))
    if isinstance(response_or_error, HttpResponse):
        return ActionResult(
            data=response_or_error.data,
            status=response_or_error.status,
            status_text=response_or_error.status_text,
            headers=dict(response_or_error.headers),
        )
    return ActionResult(error=ActionError(message=UnknownError.DEFAULT_MESSAGE, details={}))


async def execute_action(action: Callable[[], Awaitable[HttpResponse]]) -> ActionResult:
    """Await ``action()`` and capture its outcome.

    Exceptions are converted rather than raised. ``asyncio.CancelledError``
    still propagates.
    """
    try:
        response = await action()
    except Exception as exc:
        return create_action_result(exc)
    return create_action_result(response)
