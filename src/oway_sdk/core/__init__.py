"""Core request pipeline for the Oway SDK.

Token management, error classification and the retrying request
executors shared by the sync and async clients.
"""

from __future__ import annotations

from .classifier import is_retryable_status
from .errors import ErrorFactory
from .http_executor import (
    AsyncRequestExecutor,
    RequestState,
    RetryTracker,
    SyncRequestExecutor,
)
from .token_manager import AsyncTokenManager, TokenManager

__all__ = [
    "ErrorFactory",
    "is_retryable_status",
    "TokenManager",
    "AsyncTokenManager",
    "RequestState",
    "RetryTracker",
    "SyncRequestExecutor",
    "AsyncRequestExecutor",
]
