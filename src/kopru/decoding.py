"""Response body decoding."""

from __future__ import annotations

from typing import Any

from .types import RawResponse, ResponseType

NO_CONTENT = 204


async def decode_body(raw: RawResponse, response_type: ResponseType | str | None) -> Any:
    """Decode ``raw``'s body according to ``response_type``.

    A 204 response is never read: it decodes to ``{}`` in JSON mode and to
    ``None`` otherwise.

    Raises:
        Exception: Whatever the raw response raises while decoding.
    """
    mode = ResponseType(response_type) if response_type is not None else ResponseType.JSON

    if raw.status == NO_CONTENT:
        return {} if mode is ResponseType.JSON else None

    if mode is ResponseType.TEXT:
        return await raw.text()
    if mode is ResponseType.BLOB:
        return await raw.blob()
    if mode is ResponseType.ARRAY_BUFFER:
        return await raw.array_buffer()
    return await raw.json()
