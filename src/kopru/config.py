"""Client defaults and config merging."""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field, field_validator

from .types import HTTP_METHODS, RequestConfig, ResponseType

DEFAULT_HEADERS: Mapping[str, str] = {"Content-Type": "application/json"}


def default_config() -> RequestConfig:
    """Return the library defaults every client starts from."""
    return RequestConfig(
        base_url="",
        method="GET",
        headers=DEFAULT_HEADERS,
        timeout=0,
        response_type=ResponseType.JSON,
    )


def merge_config(defaults: RequestConfig, override: RequestConfig | None) -> RequestConfig:
    """Merge ``override`` over ``defaults``.

    Fields set in ``override`` replace the default value. Headers are merged
    key by key with ``override`` winning; every other field, ``params``
    included, is replaced wholesale.

    Args:
        defaults: Client defaults
        override: Per-call options

    Returns:
        A new config; neither input is modified.
    """
    if override is None:
        return defaults.replace()
    changes = override.set_fields()
    changes["headers"] = {**(defaults.headers or {}), **(override.headers or {})}
    return defaults.replace(**changes)


class ClientSettings(BaseModel):
    """Validated client defaults, typically loaded from the environment.

    Attributes:
        base_url: Prefix for every request URL (default: "")
        headers: Default headers (default: JSON content type)
        method: Default HTTP method (default: "GET")
        timeout: Timeout in milliseconds, 0 disables it (default: 0)
        response_type: Default decoding mode (default: json)

    Example:
        Load settings for a client from ``KOPRU_*`` variables::

            # KOPRU_BASE_URL=https://api.example.com
            # KOPRU_TIMEOUT=2500
            # KOPRU_HEADER_X_API_KEY=secret
            settings = ClientSettings.from_env()
            client = HttpClient.from_settings(settings)
    """

    base_url: str = ""
    headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_HEADERS))
    method: str = "GET"
    timeout: float = Field(default=0, ge=0)
    response_type: ResponseType = ResponseType.JSON

    @field_validator("method")
    @classmethod
    def _check_method(cls, value: str) -> str:
        method = value.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"Unsupported HTTP method: {value!r}")
        return method

    @classmethod
    def from_env(
        cls, prefix: str = "KOPRU_", environ: Mapping[str, str] | None = None
    ) -> ClientSettings:
        """Build settings from environment variables.

        Recognized names (with the default prefix): ``KOPRU_BASE_URL``,
        ``KOPRU_METHOD``, ``KOPRU_TIMEOUT``, ``KOPRU_RESPONSE_TYPE`` and any
        number of ``KOPRU_HEADER_<NAME>``, where underscores in ``<NAME>``
        become dashes (``KOPRU_HEADER_X_API_KEY`` -> ``X-Api-Key``).

        Args:
            prefix: Variable name prefix
            environ: Mapping to read instead of ``os.environ``

        Raises:
            pydantic.ValidationError: If a value is invalid
        """
        environ = os.environ if environ is None else environ
        prefix = prefix.upper()
        values: dict[str, object] = {}
        headers = dict(DEFAULT_HEADERS)
        header_prefix = f"{prefix}HEADER_"

        for key, value in environ.items():
            if not key.startswith(prefix):
                continue
            if key.startswith(header_prefix):
                name = key[len(header_prefix):]
                if name:
                    headers["-".join(part.capitalize() for part in name.split("_"))] = value
                continue
            field = key[len(prefix):].lower()
            if field in ("base_url", "method", "timeout", "response_type"):
                values[field] = value

        values["headers"] = headers
        return cls.model_validate(values)

    def to_config(self) -> RequestConfig:
        return RequestConfig(
            base_url=self.base_url,
            headers=self.headers,
            method=self.method,
            timeout=self.timeout,
            response_type=self.response_type,
        )
