"""HTTP status classification for the Oway request pipeline.

Pure functions deciding whether a failed status code is worth retrying.
Transport failures carry no status code and are handled by the executor.
"""

from __future__ import annotations

from http import HTTPStatus

RETRYABLE_STATUSES: frozenset[int] = frozenset(
    {
        HTTPStatus.TOO_MANY_REQUESTS,
        HTTPStatus.INTERNAL_SERVER_ERROR,
        HTTPStatus.BAD_GATEWAY,
        HTTPStatus.SERVICE_UNAVAILABLE,
        HTTPStatus.GATEWAY_TIMEOUT,
    }
)

# Permanent even though it is a 5xx.
NON_RETRYABLE_SERVER_STATUSES: frozenset[int] = frozenset({HTTPStatus.NOT_IMPLEMENTED})


def is_retryable_status(status_code: int) -> bool:
    """Check if a failed response status should be retried.

    Args:
        status_code: HTTP status code.

    Returns:
        True for 429 and every 5xx except 501.
    """
    if status_code in RETRYABLE_STATUSES:
        return True
    if status_code in NON_RETRYABLE_SERVER_STATUSES:
        return False
    return status_code >= 500


def is_client_error_status(status_code: int | None) -> bool:
    """Check if status code is a 4xx."""
    return status_code is not None and 400 <= status_code < 500


def is_server_error_status(status_code: int | None) -> bool:
    """Check if status code is a 5xx."""
    return status_code is not None and 500 <= status_code < 600
