"""Centralized error factory for the Oway SDK.

Turns httpx responses and exceptions into ``OwayError`` records with a
consistent structure, so the sync and async pipelines classify failures
identically.
"""

from __future__ import annotations

import builtins
import uuid
from typing import Any

import httpx

from ..errors import (
    ClientError,
    ErrorCode,
    NetworkError,
    OwayError,
    RateLimitError,
    TimeoutError,
    TransientServerError,
)
from .classifier import is_retryable_status

REQUEST_ID_HEADER = "x-request-id"


class ErrorFactory:
    """Centralized error creation with consistent structure.

    All errors created through this factory include:
    - The API's error code, or an SDK ``ErrorCode``
    - The request id echoed by the server, or the one the SDK generated
    - The response body (when it was JSON) under ``details``
    """

    @staticmethod
    def generate_request_id() -> str:
        """Generate a unique request ID."""
        return str(uuid.uuid4())

    @staticmethod
    def response_request_id(response: httpx.Response, fallback: str | None) -> str | None:
        """Prefer the server's echoed request id over the generated one."""
        return response.headers.get(REQUEST_ID_HEADER) or fallback

    @staticmethod
    def from_response(
        response: httpx.Response,
        *,
        request_id: str | None = None,
    ) -> OwayError:
        """Create SDK error from a non-2xx HTTP response.

        The message and code come from the JSON body when present; a body
        that is not JSON falls back to the status text.

        Args:
            response: HTTP response object.
            request_id: Request id sent with the request.

        Returns:
            ``RateLimitError``/``TransientServerError`` for retryable
            statuses, ``ClientError`` otherwise.
        """
        status = response.status_code
        request_id = ErrorFactory.response_request_id(response, request_id)

        body: Any
        try:
            body = response.json()
        except ValueError:
            body = {"message": response.reason_phrase}

        details: dict[str, Any] = body if isinstance(body, dict) else {"body": body}
        message = details.get("message") or f"Request failed with status {status}"
        code = details.get("code") or ErrorCode.API_ERROR

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            return RateLimitError(
                message,
                code,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
                request_id=request_id,
                details=details,
            )

        if is_retryable_status(status):
            return TransientServerError(
                message,
                code,
                status_code=status,
                request_id=request_id,
                details=details,
            )

        return ClientError(
            message,
            code,
            status_code=status,
            request_id=request_id,
            details=details,
        )

    @staticmethod
    def from_exception(
        exc: Exception,
        *,
        request_id: str | None = None,
        timeout_seconds: float | None = None,
    ) -> OwayError:
        """Create SDK error from a transport-level exception.

        Args:
            exc: Original exception.
            request_id: Request id sent with the request.
            timeout_seconds: Configured attempt timeout, for the record.

        Returns:
            ``TimeoutError`` for timeouts, ``NetworkError`` otherwise.
        """
        if isinstance(exc, OwayError):
            if exc.request_id is None:
                exc.request_id = request_id
            return exc

        # asyncio.timeout raises the builtin TimeoutError
        if isinstance(exc, (httpx.TimeoutException, builtins.TimeoutError)):
            return TimeoutError(
                f"Request timed out: {exc}" if str(exc) else "Request timed out",
                request_id=request_id,
                timeout_seconds=timeout_seconds,
                cause=exc,
            )

        if isinstance(exc, httpx.ConnectError):
            return NetworkError(
                f"Connection failed: {exc}",
                request_id=request_id,
                cause=exc,
            )

        return NetworkError(
            f"HTTP error: {exc}",
            request_id=request_id,
            cause=exc,
        )
