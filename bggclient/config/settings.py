"""Client settings using Pydantic. No side effects at import time."""

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_MAX_CONCURRENT_REQUESTS,
    DEFAULT_REQUEST_TIMEOUT_MS,
    DEFAULT_REQUEST_WINDOW_SIZE,
    DEFAULT_REQUESTS_PER_WINDOW_LIMIT,
    DEFAULT_RETRY_BASE,
    DEFAULT_RETRY_JITTER_MS,
    DEFAULT_RETRY_MAX_DELAY_MS,
    DEFAULT_USER_AGENT,
    MAX_RETRIES,
    XML2_API_URL,
)


class ClientSettings(BaseSettings):
    """Client settings with validation.

    Settings are loaded from ``BGG_*`` environment variables and .env file.
    The instance handed to a client stays mutable: every component reads
    the current values when it admits, retries or sends a request, so a
    change made before (or between) requests is picked up. Assignments are
    validated, invalid bounds raise immediately.
    """

    model_config = SettingsConfigDict(
        env_prefix="BGG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
        validate_assignment=True,
    )

    # === Admission control ===
    max_concurrent_requests: Annotated[int, Field(gt=0)] = DEFAULT_MAX_CONCURRENT_REQUESTS
    requests_per_window_limit: Annotated[int, Field(gt=0)] = DEFAULT_REQUESTS_PER_WINDOW_LIMIT
    request_window_size: Annotated[
        float, Field(gt=0, description="Window length in seconds")
    ] = DEFAULT_REQUEST_WINDOW_SIZE

    # === Retry ===
    max_retries: Annotated[int, Field(ge=0)] = MAX_RETRIES
    retry_base: Annotated[float, Field(gt=0)] = DEFAULT_RETRY_BASE
    retry_max_delay_ms: Annotated[int, Field(ge=0)] = DEFAULT_RETRY_MAX_DELAY_MS
    retry_jitter_ms: Annotated[int, Field(ge=0)] = DEFAULT_RETRY_JITTER_MS

    # === Timeouts ===
    request_timeout_ms: Annotated[int, Field(gt=0)] = DEFAULT_REQUEST_TIMEOUT_MS
    connect_timeout_ms: Annotated[int, Field(gt=0)] | None = None
    socket_timeout_ms: Annotated[int, Field(gt=0)] | None = None

    # === Endpoint ===
    base_url: str = XML2_API_URL
    user_agent: str = DEFAULT_USER_AGENT

