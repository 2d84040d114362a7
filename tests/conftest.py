"""
Shared test fixtures for Oway SDK tests.

Provides a scripted Oway API for ``httpx.MockTransport``, configuration
fixtures and backoff sleep recorders.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from oway_sdk.config import OwayConfig, RetryConfig
from oway_sdk.environments import TOKEN_PATH

TEST_BASE_URL = "https://api.test.oway.io"


class FakeOwayApi:
    """Scripted Oway API usable as an ``httpx.MockTransport`` handler.

    Token requests are answered from ``token_status``/``token_body``. Every
    other request pops the next queued response (or exception); an empty
    queue answers ``200 {}``.
    """

    def __init__(self) -> None:
        self.token_status = 200
        self.token_body: Any = {"accessToken": "test-token", "expiresIn": 3600}
        self.token_delay = 0.0
        self.token_calls = 0
        self.token_requests: list[httpx.Request] = []
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response | Exception] = []
        self._lock = threading.Lock()

    def queue(self, *responses: httpx.Response | Exception) -> None:
        self.responses.extend(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == TOKEN_PATH:
            with self._lock:
                self.token_calls += 1
                self.token_requests.append(request)
            if self.token_delay:
                time.sleep(self.token_delay)
            return httpx.Response(self.token_status, json=self.token_body)

        with self._lock:
            self.requests.append(request)
            response = self.responses.pop(0) if self.responses else None
        if response is None:
            return httpx.Response(200, json={})
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def api() -> FakeOwayApi:
    """Provide a fresh scripted Oway API."""
    return FakeOwayApi()


@pytest.fixture
def transport(api: FakeOwayApi) -> httpx.MockTransport:
    return httpx.MockTransport(api)


@pytest.fixture
def base_config() -> OwayConfig:
    """Provide a basic SDK configuration for testing."""
    return OwayConfig(
        client_id="test-client-id",
        client_secret="test-client-secret",
        base_url=TEST_BASE_URL,
    )


@pytest.fixture
def fast_config(base_config: OwayConfig) -> OwayConfig:
    """Configuration whose backoff never waits."""
    return base_config.with_overrides(retry=RetryConfig(initial_delay=0.0))


@pytest.fixture
def sleeps() -> list[float]:
    """Collects the delays passed to the backoff sleep."""
    return []


@pytest.fixture
def record_sleep(sleeps: list[float]) -> Callable[[float], None]:
    return sleeps.append


@pytest.fixture
def record_async_sleep(sleeps: list[float]) -> Callable[[float], Any]:
    async def sleep(delay: float) -> None:
        sleeps.append(delay)

    return sleep


class RecordingSink:
    """Logger sink capturing ``(level, message, fields)`` tuples."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, message: str, **kwargs: Any) -> None:
        self.records.append((level, message, kwargs))

    def debug(self, message: str, **kwargs: Any) -> None:
        self._record("debug", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._record("info", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._record("warning", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._record("error", message, **kwargs)

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m, _ in self.records if level is None or lvl == level]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
