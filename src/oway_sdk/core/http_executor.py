"""Authenticated request executors for the Oway SDK.

One logical request runs through an explicit retry state machine::

    ATTEMPTING -> SUCCEEDED
    ATTEMPTING -> RETRYING -> ATTEMPTING   (transient failure, attempts left)
    ATTEMPTING -> FAILED                   (fatal failure or attempts exhausted)

Every attempt re-resolves the bearer token and the tenant key, sends the
request under its own timeout and classifies the outcome.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import StrEnum
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

import httpx

from ..errors import ErrorCode, OwayError
from ..models import RequestContext
from ..telemetry import SDKLogger, trace_operation
from .errors import REQUEST_ID_HEADER, ErrorFactory

if TYPE_CHECKING:
    from ..config import OwayConfig
    from .token_manager import AsyncTokenManager, TokenManager

TENANT_KEY_HEADER = "x-oway-api-key"

_WIRE_ENCODING_HEADERS = frozenset({"content-encoding", "content-length", "transfer-encoding"})


class RequestState(StrEnum):
    """States of one logical request."""

    ATTEMPTING = "attempting"
    RETRYING = "retrying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class RetryTracker:
    """Attempt counter and state for one logical request.

    Allows at most ``max_retries + 1`` attempts.
    """

    max_retries: int
    attempt: int = 0
    state: RequestState = RequestState.ATTEMPTING
    last_error: OwayError | None = field(default=None, repr=False)

    @property
    def attempts_made(self) -> int:
        return self.attempt + 1

    @property
    def has_attempts_left(self) -> bool:
        return self.attempt < self.max_retries

    def succeed(self) -> None:
        self._expect(RequestState.ATTEMPTING)
        self.state = RequestState.SUCCEEDED

    def fail(self, error: OwayError) -> RequestState:
        """Record a failed attempt and decide between RETRYING and FAILED."""
        self._expect(RequestState.ATTEMPTING)
        self.last_error = error
        if error.is_retryable and self.has_attempts_left:
            self.state = RequestState.RETRYING
        else:
            self.state = RequestState.FAILED
        return self.state

    def next_attempt(self) -> None:
        self._expect(RequestState.RETRYING)
        self.attempt += 1
        self.state = RequestState.ATTEMPTING

    def final_error(self, request_id: str) -> OwayError:
        """Error to raise once the request has FAILED."""
        if self.last_error is not None:
            return self.last_error
        return OwayError(
            "Request failed after retries",
            ErrorCode.MAX_RETRIES_EXCEEDED,
            request_id=request_id,
        )

    def _expect(self, state: RequestState) -> None:
        if self.state is not state:
            msg = f"Invalid transition from {self.state} (expected {state})"
            raise RuntimeError(msg)


class RequestExecutorBase:
    """Request building and response handling shared by both executors."""

    def __init__(
        self,
        config: OwayConfig,
        *,
        logger: SDKLogger | None = None,
    ) -> None:
        self.config = config
        self._retry_config = config.retry
        self._logger = logger or SDKLogger(debug=config.debug)

    def build_context(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
        tenant_key: str | None = None,
        request_id: str | None = None,
    ) -> RequestContext:
        """Create the per-call request context."""
        data: dict[str, Any] = {
            "method": method,
            "path": path,
            "query": query,
            "body": body,
            "headers": headers,
            "tenant_key": tenant_key,
        }
        if request_id:
            data["request_id"] = request_id
        return RequestContext(**data)

    def resolve_tenant_key(self, context: RequestContext) -> str | None:
        """Per-call override, else the client default, else none."""
        return context.tenant_key or self.config.default_tenant_key

    def build_headers(self, context: RequestContext, token: str) -> dict[str, str]:
        """Compose attempt headers; caller overrides are applied last."""
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
            REQUEST_ID_HEADER: context.request_id,
        }
        tenant_key = self.resolve_tenant_key(context)
        if tenant_key:
            headers[TENANT_KEY_HEADER] = tenant_key
        if context.headers:
            headers.update(context.headers)
        return headers

    def request_kwargs(self, context: RequestContext, token: str) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "params": context.params,
            "headers": self.build_headers(context, token),
            "timeout": self.config.timeout,
        }
        if context.body is not None:
            kwargs["json"] = context.body
        return kwargs

    def handle_response(self, context: RequestContext, response: httpx.Response) -> Any:
        """Turn a response into a parsed body or raise its error record."""
        if not response.is_success:
            raise ErrorFactory.from_response(response, request_id=context.request_id)

        request_id = ErrorFactory.response_request_id(response, context.request_id)
        self._logger.debug(
            "Request successful",
            method=context.method,
            path=context.path,
            status=response.status_code,
            request_id=request_id,
        )

        if response.status_code == HTTPStatus.NO_CONTENT or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise OwayError(
                "Invalid JSON in response body",
                ErrorCode.API_ERROR,
                status_code=response.status_code,
                request_id=request_id,
            ) from e

    def transport_error(self, context: RequestContext, exc: Exception) -> OwayError:
        return ErrorFactory.from_exception(
            exc,
            request_id=context.request_id,
            timeout_seconds=self.config.timeout,
        )

    def on_failure(
        self,
        context: RequestContext,
        tracker: RetryTracker,
        error: OwayError,
        tokens: TokenManager | AsyncTokenManager,
    ) -> RequestState:
        """Record a failed attempt, log it and return the next state."""
        if error.status_code == HTTPStatus.UNAUTHORIZED:
            tokens.invalidate()

        self._logger.warning(
            "Request failed",
            method=context.method,
            path=context.path,
            status=error.status_code,
            code=error.code,
            request_id=error.request_id or context.request_id,
            attempt=tracker.attempts_made,
            retryable=error.is_retryable,
        )

        state = tracker.fail(error)
        if state is RequestState.FAILED:
            if error.is_retryable:
                self._logger.error(
                    "Max retries exceeded",
                    request_id=context.request_id,
                    attempts=tracker.attempts_made,
                    error=error.message,
                )
            else:
                self._logger.error(
                    "Non-retryable error",
                    request_id=context.request_id,
                    code=error.code,
                    status_code=error.status_code,
                )
        return state

    def retry_delay(self, context: RequestContext, tracker: RetryTracker) -> float:
        delay = self._retry_config.get_delay(tracker.attempt)
        self._logger.warning(
            "Retrying request",
            request_id=context.request_id,
            attempt=tracker.attempts_made,
            max_retries=tracker.max_retries,
            delay=delay,
        )
        return delay

    def _log_start(self, context: RequestContext) -> None:
        self._logger.debug(
            f"{context.method} {context.path}",
            request_id=context.request_id,
            has_body=context.body is not None,
            query=context.query,
        )

    def _trace_attributes(self, context: RequestContext, attempt: int) -> dict[str, Any]:
        return {
            "http.method": context.method,
            "http.route": context.path,
            "oway.request_id": context.request_id,
            "attempt": attempt,
        }


class SyncRequestExecutor(RequestExecutorBase):
    """Synchronous executor with retry and exponential backoff."""

    def __init__(
        self,
        config: OwayConfig,
        http: httpx.Client,
        tokens: TokenManager,
        *,
        logger: SDKLogger | None = None,
        sleep: Callable[[float], Any] | None = None,
    ) -> None:
        """Initialize sync executor.

        Args:
            config: SDK configuration.
            http: HTTP client used for every attempt.
            tokens: Token manager supplying the bearer token.
            logger: Optional SDK logger.
            sleep: Backoff sleep function (defaults to ``time.sleep``).
        """
        super().__init__(config, logger=logger)
        self._http = http
        self._tokens = tokens
        self._sleep = sleep or time.sleep

    def request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
        tenant_key: str | None = None,
        request_id: str | None = None,
    ) -> Any:
        """Execute one logical request with retry logic.

        Returns:
            Parsed JSON body, or ``{}`` for empty responses.

        Raises:
            OwayError: The last attempt's error once the request has failed.
        """
        context = self.build_context(
            method,
            path,
            query=query,
            body=body,
            headers=headers,
            tenant_key=tenant_key,
            request_id=request_id,
        )
        self._log_start(context)
        tracker = RetryTracker(self.config.max_retries)

        while tracker.state is RequestState.ATTEMPTING:
            try:
                result = self._attempt(context, tracker.attempt)
            except OwayError as error:
                state = self.on_failure(context, tracker, error, self._tokens)
                if state is RequestState.RETRYING:
                    self._sleep(self.retry_delay(context, tracker))
                    tracker.next_attempt()
            else:
                tracker.succeed()
                return result

        raise tracker.final_error(context.request_id)

    def _attempt(self, context: RequestContext, attempt: int) -> Any:
        token = self._tokens.get_token()
        with trace_operation(
            "oway.http_request",
            attributes=self._trace_attributes(context, attempt),
        ):
            try:
                response = self._send(context, token)
            except httpx.HTTPError as e:
                raise self.transport_error(context, e) from e
            return self.handle_response(context, response)

    def _send(self, context: RequestContext, token: str) -> httpx.Response:
        """Send one attempt and read its body before the attempt deadline.

        httpx only bounds each connect/read/write phase, so the body is
        streamed and the deadline checked between chunks.

        Raises:
            httpx.ReadTimeout: The attempt ran past ``config.timeout``.
        """
        deadline = time.monotonic() + self.config.timeout
        kwargs = self.request_kwargs(context, token)
        kwargs["timeout"] = httpx.Timeout(self.config.timeout)

        with self._http.stream(context.method, context.path, **kwargs) as response:
            chunks: list[bytes] = []
            for chunk in response.iter_bytes():
                if time.monotonic() > deadline:
                    raise httpx.ReadTimeout(
                        f"Attempt exceeded {self.config.timeout}s",
                        request=response.request,
                    )
                chunks.append(chunk)
            if time.monotonic() > deadline:
                raise httpx.ReadTimeout(
                    f"Attempt exceeded {self.config.timeout}s",
                    request=response.request,
                )

        # Body is already decoded; drop the headers describing the wire encoding.
        headers = [
            (name, value)
            for name, value in response.headers.multi_items()
            if name.lower() not in _WIRE_ENCODING_HEADERS
        ]
        return httpx.Response(
            response.status_code,
            headers=headers,
            content=b"".join(chunks),
            request=response.request,
            extensions=response.extensions,
        )


class AsyncRequestExecutor(RequestExecutorBase):
    """Asynchronous executor with retry and exponential backoff."""

    def __init__(
        self,
        config: OwayConfig,
        http: httpx.AsyncClient,
        tokens: AsyncTokenManager,
        *,
        logger: SDKLogger | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize async executor.

        Args:
            config: SDK configuration.
            http: Async HTTP client used for every attempt.
            tokens: Token manager supplying the bearer token.
            logger: Optional SDK logger.
            sleep: Backoff sleep coroutine (defaults to ``asyncio.sleep``).
        """
        super().__init__(config, logger=logger)
        self._http = http
        self._tokens = tokens
        self._sleep = sleep or asyncio.sleep

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        body: Any = None,
        headers: dict[str, str] | None = None,
        tenant_key: str | None = None,
        request_id: str | None = None,
    ) -> Any:
        """Execute one logical request with retry logic.

        Returns:
            Parsed JSON body, or ``{}`` for empty responses.

        Raises:
            OwayError: The last attempt's error once the request has failed.
        """
        context = self.build_context(
            method,
            path,
            query=query,
            body=body,
            headers=headers,
            tenant_key=tenant_key,
            request_id=request_id,
        )
        self._log_start(context)
        tracker = RetryTracker(self.config.max_retries)

        while tracker.state is RequestState.ATTEMPTING:
            try:
                result = await self._attempt(context, tracker.attempt)
            except OwayError as error:
                state = self.on_failure(context, tracker, error, self._tokens)
                if state is RequestState.RETRYING:
                    await self._sleep(self.retry_delay(context, tracker))
                    tracker.next_attempt()
            else:
                tracker.succeed()
                return result

        raise tracker.final_error(context.request_id)

    async def _attempt(self, context: RequestContext, attempt: int) -> Any:
        token = await self._tokens.get_token()
        with trace_operation(
            "oway.http_request",
            attributes=self._trace_attributes(context, attempt),
        ):
            try:
                # Bounds the whole exchange, body download included.
                async with asyncio.timeout(self.config.timeout):
                    response = await self._http.request(
                        context.method,
                        context.path,
                        **self.request_kwargs(context, token),
                    )
            except (httpx.HTTPError, TimeoutError) as e:
                raise self.transport_error(context, e) from e
            return self.handle_response(context, response)
