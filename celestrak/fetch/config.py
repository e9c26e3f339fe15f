"""Configuration model for the CelesTrak client."""

from typing import Annotated

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from celestrak.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_MAX_RESPONSE_SIZE_BYTES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_DELAY_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
)


class ClientConfig(BaseModel):
    """Immutable configuration for :class:`celestrak.fetch.client.CelestrakClient`.

    Values are fixed for the lifetime of a client; use ``model_copy`` or the
    client's ``with_*`` methods to derive a modified configuration.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: Annotated[str, Field(min_length=1)] = DEFAULT_BASE_URL
    user_agent: Annotated[str, Field(max_length=500)] = Field(
        default=DEFAULT_USER_AGENT,
        description="User-Agent header value; empty string omits the header",
    )
    max_retries: Annotated[int, Field(ge=0, le=10)] = DEFAULT_MAX_RETRIES
    retry_delay_seconds: Annotated[float, Field(ge=0.0, le=300.0)] = (
        DEFAULT_RETRY_DELAY_SECONDS
    )
    timeout_seconds: Annotated[float, Field(gt=0.0, le=600.0)] = DEFAULT_TIMEOUT_SECONDS
    max_response_size_bytes: Annotated[
        int, Field(ge=1, le=DEFAULT_MAX_RESPONSE_SIZE_BYTES)
    ] = DEFAULT_MAX_RESPONSE_SIZE_BYTES

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate that base_url is an absolute http(s) URL."""
        try:
            url = httpx.URL(v)
        except httpx.InvalidURL as e:
            msg = f"Invalid base URL: {e}"
            raise ValueError(msg) from e
        if url.scheme not in {"http", "https"} or not url.host:
            msg = f"Base URL must be an absolute http(s) URL: {v!r}"
            raise ValueError(msg)
        return v

    def total_backoff_seconds(self) -> float:
        """Worst-case total wait across all retries.

        Returns:
            ``retry_delay_seconds * (2 ** max_retries - 1)``.
        """
        return self.retry_delay_seconds * (2**self.max_retries - 1)
