"""Configuration for the Oway SDK.

Uses Pydantic v2 frozen models so configuration and credentials are
immutable once a client has been constructed.
"""

from __future__ import annotations

from typing import Annotated, Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    SecretStr,
    field_validator,
    model_validator,
)

from .environments import TOKEN_PATH, OwayEnvironment
from .errors import ConfigurationError

TOKEN_SAFETY_MARGIN_SECONDS = 300


class RetryConfig(BaseModel):
    """Retry configuration with exponential backoff."""

    model_config = ConfigDict(frozen=True)

    initial_delay: Annotated[float, Field(ge=0, le=60)] = 1.0
    max_delay: Annotated[float, Field(gt=0)] | None = None
    exponential_base: Annotated[float, Field(ge=1.0, le=3.0)] = 2.0
    jitter: Annotated[float, Field(ge=0, le=1.0)] = 0.0

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt with exponential backoff.

        Attempt 0 waits ``initial_delay``; with the defaults the sequence
        is 1s, 2s, 4s, ... and is only capped when ``max_delay`` is set.
        """
        import random

        delay = self.initial_delay * (self.exponential_base**attempt)
        if self.max_delay is not None:
            delay = min(delay, self.max_delay)
        if not self.jitter:
            return delay
        jitter_range = delay * self.jitter
        return max(0.0, delay + random.uniform(-jitter_range, jitter_range))  # noqa: S311


class TelemetryConfig(BaseModel):
    """Logging and tracing configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "oway-sdk"
    log_level: str = "INFO"
    json_logs: bool = True


class OwayConfig(BaseModel):
    """Main configuration for the Oway SDK."""

    model_config = ConfigDict(
        frozen=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    # M2M credentials, provided by Oway Sales Engineering
    client_id: str
    client_secret: SecretStr

    # Default company API key (tenant key); omit for multi-company integrations
    api_key: SecretStr | None = None

    base_url: HttpUrl = OwayEnvironment.SANDBOX.value  # type: ignore[assignment]
    token_url: str | None = None

    max_retries: Annotated[int, Field(ge=0, le=10)] = 3
    timeout: Annotated[float, Field(gt=0, le=300)] = 30.0
    debug: bool = False

    # Any object exposing debug/info/warning/error(message, **kwargs)
    logger: Any = None

    retry: RetryConfig = Field(default_factory=RetryConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @model_validator(mode="before")
    @classmethod
    def require_credentials(cls, data: Any) -> Any:
        """Fail fast with the SDK error type when credentials are missing."""
        if isinstance(data, dict):
            missing = [
                name
                for name in ("client_id", "client_secret")
                if not _secret_value(data.get(name))
            ]
            if missing:
                msg = (
                    "client_id and client_secret are required. Contact Oway "
                    "Sales Engineering to obtain M2M credentials."
                )
                raise ConfigurationError(msg, field=missing[0])
        return data

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_api_key_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("logger")
    @classmethod
    def validate_logger(cls, v: Any) -> Any:
        """Validate custom logger exposes the expected methods."""
        if v is None:
            return v
        missing = [
            m
            for m in ("debug", "info", "warning", "error")
            if not callable(getattr(v, m, None))
        ]
        if missing:
            raise ConfigurationError(
                f"logger is missing methods: {', '.join(missing)}", field="logger"
            )
        return v

    @model_validator(mode="after")
    def set_default_token_url(self) -> Self:
        """Derive the token endpoint from base_url."""
        if self.token_url is None:
            # Use object.__setattr__ since model is frozen
            object.__setattr__(self, "token_url", f"{self.base_url_str}{TOKEN_PATH}")
        return self

    @property
    def base_url_str(self) -> str:
        """Get base URL as string without trailing slash."""
        return str(self.base_url).rstrip("/")

    @property
    def default_tenant_key(self) -> str | None:
        return self.api_key.get_secret_value() if self.api_key else None

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data["client_secret"] = self.client_secret.get_secret_value()
        data["api_key"] = self.default_tenant_key
        data["logger"] = self.logger
        if "base_url" in kwargs and "token_url" not in kwargs:
            data["token_url"] = None
        data.update(kwargs)
        return self.__class__(**data)

    @classmethod
    def from_env(cls, prefix: str = "OWAY_", **overrides: Any) -> Self:
        """Create config from environment variables.

        Reads ``{prefix}M2M_CLIENT_ID``, ``{prefix}M2M_CLIENT_SECRET``,
        ``{prefix}API_KEY``, ``{prefix}BASE_URL``, ``{prefix}TOKEN_URL``,
        ``{prefix}MAX_RETRIES``, ``{prefix}TIMEOUT`` and ``{prefix}DEBUG``.
        Keyword overrides win over the environment.
        """
        import os

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        data: dict[str, Any] = {
            "client_id": get_env("M2M_CLIENT_ID"),
            "client_secret": get_env("M2M_CLIENT_SECRET"),
            "api_key": get_env("API_KEY"),
        }
        if base_url := get_env("BASE_URL"):
            data["base_url"] = base_url
        if token_url := get_env("TOKEN_URL"):
            data["token_url"] = token_url
        if max_retries := get_env("MAX_RETRIES"):
            data["max_retries"] = int(max_retries)
        if timeout := get_env("TIMEOUT"):
            data["timeout"] = float(timeout)
        data["debug"] = str(get_env("DEBUG", "")).lower() in {"1", "true", "yes"}

        data.update(overrides)
        return cls(**data)


def _secret_value(value: Any) -> str:
    if isinstance(value, SecretStr):
        value = value.get_secret_value()
    if not isinstance(value, str):
        return ""
    return value.strip()
