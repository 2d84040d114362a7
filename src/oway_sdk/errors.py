"""Error classes for the Oway SDK.

Every failure surfaced by the SDK is an ``OwayError`` carrying a message,
a code, the HTTP status (when there was one) and the request id used for
support correlation.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Error codes produced by the SDK itself.

    Codes returned by the Oway API (e.g. ``INVALID_ADDRESS``) are passed
    through verbatim and are not members of this enum.
    """

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Authentication
    AUTH_FAILED = "AUTH_FAILED"
    AUTH_INVALID_RESPONSE = "AUTH_INVALID_RESPONSE"
    AUTH_ERROR = "AUTH_ERROR"

    # Request pipeline
    API_ERROR = "API_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    MAX_RETRIES_EXCEEDED = "MAX_RETRIES_EXCEEDED"


class OwayError(Exception):
    """Base error for the Oway SDK with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str | None = None,
        *,
        status_code: int | None = None,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.status_code = status_code
        self.request_id = request_id
        self.details = details or {}

    @property
    def is_retryable(self) -> bool:
        """Whether this failure is transient."""
        from .core.classifier import is_retryable_status

        if self.status_code is None:
            return False
        return is_retryable_status(self.status_code)

    @property
    def is_client_error(self) -> bool:
        from .core.classifier import is_client_error_status

        return is_client_error_status(self.status_code)

    @property
    def is_server_error(self) -> bool:
        from .core.classifier import is_server_error_status

        return is_server_error_status(self.status_code)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "request_id": self.request_id,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(code={self.code!r}, "
            f"status_code={self.status_code!r}, message={self.message!r})"
        )


class ConfigurationError(OwayError):
    """Missing or invalid client configuration."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(
            message,
            ErrorCode.CONFIGURATION_ERROR,
            details={"field": field} if field else None,
        )
        self.field = field


class AuthenticationError(OwayError):
    """Token endpoint failure or malformed token response."""

    def __init__(
        self,
        message: str = "Failed to obtain access token",
        code: ErrorCode | str = ErrorCode.AUTH_FAILED,
        *,
        status_code: int | None = None,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            status_code=status_code,
            request_id=request_id,
            details=details,
        )

    @property
    def is_retryable(self) -> bool:
        return False


class TransientServerError(OwayError):
    """Retryable server-side failure (5xx except 501)."""

    def __init__(
        self,
        message: str = "Server error",
        code: ErrorCode | str = ErrorCode.API_ERROR,
        *,
        status_code: int | None = 500,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            status_code=status_code,
            request_id=request_id,
            details=details,
        )


class RateLimitError(TransientServerError):
    """Rate limit exceeded (429)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        code: ErrorCode | str = ErrorCode.API_ERROR,
        *,
        retry_after: int | None = None,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged = dict(details or {})
        if retry_after:
            merged["retry_after"] = retry_after
        super().__init__(
            message,
            code,
            status_code=429,
            request_id=request_id,
            details=merged or None,
        )
        self.retry_after = retry_after


class NetworkError(TransientServerError):
    """Network request failed before any response was received."""

    def __init__(
        self,
        message: str = "Network request failed",
        *,
        request_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.NETWORK_ERROR,
            status_code=None,
            request_id=request_id,
            details={"cause": str(cause)} if cause else None,
        )
        self.__cause__ = cause

    @property
    def is_retryable(self) -> bool:
        return True


class TimeoutError(NetworkError):
    """Request attempt exceeded the configured timeout."""

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        request_id: str | None = None,
        timeout_seconds: float | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, request_id=request_id, cause=cause)
        self.code = ErrorCode.TIMEOUT_ERROR.value
        if timeout_seconds:
            self.details["timeout_seconds"] = timeout_seconds


class ClientError(OwayError):
    """Non-retryable request failure (4xx except 429, and 501)."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str = ErrorCode.API_ERROR,
        *,
        status_code: int | None = 400,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            code,
            status_code=status_code,
            request_id=request_id,
            details=details,
        )
