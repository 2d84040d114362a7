"""Async Oway SDK client.

Same surface as ``OwayClient`` with coroutine methods. Many tasks may share
one instance; token refreshes are single-flight across them.
"""

from __future__ import annotations

from typing import Any, Self

import httpx

from .config import OwayConfig
from .core.http_executor import AsyncRequestExecutor
from .core.token_manager import AsyncTokenManager
from .http import create_async_http_client
from .resources import AsyncQuotes, AsyncShipments
from .telemetry import SDKLogger


class AsyncOwayClient:
    """Asynchronous Oway client."""

    def __init__(
        self,
        config: OwayConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize async client.

        Args:
            config: SDK configuration.
            http_client: Optional pre-built httpx client; it is not closed
                by ``close()``.
        """
        self.config = config
        self._owns_http = http_client is None
        self._http = http_client or create_async_http_client(config)
        self._logger = SDKLogger(config.logger, debug=config.debug)
        self._tokens = AsyncTokenManager(config, self._http, logger=self._logger)
        self._executor = AsyncRequestExecutor(
            config, self._http, self._tokens, logger=self._logger
        )

        self.quotes = AsyncQuotes(self)
        self.shipments = AsyncShipments(self)

        self._logger.debug(
            "Oway SDK initialized",
            base_url=config.base_url_str,
            auth_mode="M2M",
            default_tenant=config.api_key is not None,
        )

    @classmethod
    def from_env(cls, prefix: str = "OWAY_", **overrides: Any) -> Self:
        """Create a client from ``OWAY_*`` environment variables."""
        return cls(OwayConfig.from_env(prefix, **overrides))

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_http:
            await self._http.aclose()

    async def get_access_token(self) -> str:
        """Get a valid bearer token, refreshing it if needed."""
        return await self._tokens.get_token()

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
        """Make an authenticated request to the Oway API.

        See ``OwayClient.request`` for the arguments.
        """
        return await self._executor.request(
            method,
            path,
            query=query,
            body=body,
            headers=headers,
            tenant_key=tenant_key,
            request_id=request_id,
        )

    async def get(
        self,
        path: str,
        query: dict[str, Any] | None = None,
        *,
        tenant_key: str | None = None,
    ) -> Any:
        return await self.request("GET", path, query=query, tenant_key=tenant_key)

    async def post(
        self, path: str, body: Any = None, *, tenant_key: str | None = None
    ) -> Any:
        return await self.request("POST", path, body=body, tenant_key=tenant_key)

    async def put(
        self, path: str, body: Any = None, *, tenant_key: str | None = None
    ) -> Any:
        return await self.request("PUT", path, body=body, tenant_key=tenant_key)

    async def delete(self, path: str, *, tenant_key: str | None = None) -> Any:
        return await self.request("DELETE", path, tenant_key=tenant_key)
