"""Bearer token management for the Oway SDK.

Each client instance owns one token manager. The cached token is reused
while it stays valid for longer than the safety margin; otherwise exactly
one refresh runs against the token endpoint and every concurrent caller
shares its outcome.
"""

from __future__ import annotations

import asyncio
import threading
from concurrent.futures import Future
from typing import TYPE_CHECKING, Any

import httpx

from ..config import TOKEN_SAFETY_MARGIN_SECONDS
from ..errors import AuthenticationError, ErrorCode
from ..models import TokenData, TokenResponse
from ..telemetry import SDKLogger, trace_operation
from .errors import REQUEST_ID_HEADER

if TYPE_CHECKING:
    from ..config import OwayConfig


class TokenManagerBase:
    """Token cache and token-endpoint protocol shared by sync and async managers.

    Attributes:
        config: SDK configuration holding the M2M credentials.
        margin_seconds: Remaining lifetime below which a token is refreshed.
    """

    def __init__(
        self,
        config: OwayConfig,
        *,
        logger: SDKLogger | None = None,
        margin_seconds: float = TOKEN_SAFETY_MARGIN_SECONDS,
    ) -> None:
        self.config = config
        self.margin_seconds = margin_seconds
        self._logger = logger or SDKLogger(debug=config.debug)
        self._token: TokenData | None = None

    @property
    def token(self) -> TokenData | None:
        """Get the cached token data, valid or not."""
        return self._token

    def cached_token(self) -> str | None:
        """Return the cached access token if it is still usable."""
        token = self._token
        if token is not None and token.is_valid(self.margin_seconds):
            return token.access_token
        return None

    def invalidate(self) -> None:
        """Drop the cached token so the next call refreshes."""
        self._token = None

    def build_token_request(self) -> dict[str, str]:
        """Build the JSON body posted to the token endpoint."""
        return {
            "clientId": self.config.client_id,
            "clientSecret": self.config.client_secret.get_secret_value(),
        }

    def parse_token_response(self, response: httpx.Response) -> TokenData:
        """Validate a token endpoint response.

        Raises:
            AuthenticationError: On non-2xx status or a body missing the
                token or its lifetime.
        """
        request_id = response.headers.get(REQUEST_ID_HEADER)
        if not response.is_success:
            raise AuthenticationError(
                "Failed to obtain access token",
                ErrorCode.AUTH_FAILED,
                status_code=response.status_code,
                request_id=request_id,
            )

        try:
            token_response = TokenResponse.model_validate(response.json())
        except ValueError as e:
            raise AuthenticationError(
                "Invalid token response: missing accessToken or expiresIn",
                ErrorCode.AUTH_INVALID_RESPONSE,
                status_code=response.status_code,
                request_id=request_id,
            ) from e

        return TokenData.from_response(token_response)

    def transport_failure(self, exc: Exception) -> AuthenticationError:
        """Wrap a transport failure while reaching the token endpoint."""
        return AuthenticationError(
            f"Authentication failed: {exc}",
            ErrorCode.AUTH_ERROR,
            details={"cause": str(exc)},
        )

    def _store(self, token: TokenData) -> None:
        self._token = token
        self._logger.info(
            "Access token refreshed",
            expires_at=token.expires_at.isoformat(),
        )

    def _log_failure(self, exc: BaseException) -> None:
        self._logger.error("Token refresh failed", error=str(exc))

    def _trace_attributes(self) -> dict[str, Any]:
        return {"http.method": "POST", "http.url": self.config.token_url}


class TokenManager(TokenManagerBase):
    """Thread-safe token manager for the sync client.

    A ``concurrent.futures.Future`` is the in-flight refresh marker: the
    thread that installs it performs the refresh, other threads block on
    its result.
    """

    def __init__(
        self,
        config: OwayConfig,
        http: httpx.Client,
        *,
        logger: SDKLogger | None = None,
        margin_seconds: float = TOKEN_SAFETY_MARGIN_SECONDS,
    ) -> None:
        super().__init__(config, logger=logger, margin_seconds=margin_seconds)
        self._http = http
        self._lock = threading.Lock()
        self._pending: Future[str] | None = None

    def invalidate(self) -> None:
        with self._lock:
            super().invalidate()

    def get_token(self) -> str:
        """Get a valid access token, refreshing it if needed.

        Raises:
            AuthenticationError: If the refresh fails. Every thread waiting
                on the same refresh receives the same error.
        """
        with self._lock:
            pending = self._pending
            if pending is None:
                cached = self.cached_token()
                if cached is not None:
                    return cached
                pending = self._pending = Future()
                owner = True
            else:
                owner = False

        if not owner:
            self._logger.debug("Waiting for token refresh in progress")
            return pending.result()

        self._logger.debug("Refreshing access token")
        try:
            token = self._refresh()
        except BaseException as e:
            with self._lock:
                self._pending = None
            self._log_failure(e)
            pending.set_exception(e)
            raise

        with self._lock:
            self._store(token)
            self._pending = None
        pending.set_result(token.access_token)
        return token.access_token

    def _refresh(self) -> TokenData:
        with trace_operation("oway.token_refresh", attributes=self._trace_attributes()):
            try:
                response = self._http.post(
                    self.config.token_url or "",
                    json=self.build_token_request(),
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as e:
                raise self.transport_failure(e) from e
            return self.parse_token_response(response)


class AsyncTokenManager(TokenManagerBase):
    """Token manager for the async client.

    The in-flight refresh is a single ``asyncio.Task``. Callers await it
    through ``asyncio.shield`` so cancelling one caller never cancels the
    refresh the others are waiting on.
    """

    def __init__(
        self,
        config: OwayConfig,
        http: httpx.AsyncClient,
        *,
        logger: SDKLogger | None = None,
        margin_seconds: float = TOKEN_SAFETY_MARGIN_SECONDS,
    ) -> None:
        super().__init__(config, logger=logger, margin_seconds=margin_seconds)
        self._http = http
        self._pending: asyncio.Task[str] | None = None

    async def get_token(self) -> str:
        """Get a valid access token, refreshing it if needed.

        Raises:
            AuthenticationError: If the refresh fails. Every task waiting
                on the same refresh receives the same error.
        """
        # No await between the checks and installing the task, so the
        # event loop cannot interleave another caller here.
        pending = self._pending
        if pending is not None:
            self._logger.debug("Waiting for token refresh in progress")
            return await asyncio.shield(pending)

        cached = self.cached_token()
        if cached is not None:
            return cached

        self._logger.debug("Refreshing access token")
        pending = self._pending = asyncio.ensure_future(self._refresh_and_store())
        return await asyncio.shield(pending)

    async def _refresh_and_store(self) -> str:
        try:
            token = await self._refresh()
        except BaseException as e:
            self._log_failure(e)
            raise
        else:
            self._store(token)
            return token.access_token
        finally:
            self._pending = None

    async def _refresh(self) -> TokenData:
        with trace_operation("oway.token_refresh", attributes=self._trace_attributes()):
            try:
                response = await self._http.post(
                    self.config.token_url or "",
                    json=self.build_token_request(),
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as e:
                raise self.transport_failure(e) from e
            return self.parse_token_response(response)
