"""Synchronous Oway SDK client."""

from __future__ import annotations

from typing import Any, Self

import httpx

from .config import OwayConfig
from .core.http_executor import SyncRequestExecutor
from .core.token_manager import TokenManager
from .http import create_http_client
from .resources import Quotes, Shipments
from .telemetry import SDKLogger


class OwayClient:
    """Synchronous Oway client.

    Safe to share between threads: configuration is immutable and the
    cached token is guarded by the token manager.

    Example::

        with OwayClient(OwayConfig(client_id="...", client_secret="...")) as oway:
            quote = oway.quotes.create(request, tenant_key="oway_sk_...")
    """

    def __init__(
        self,
        config: OwayConfig,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize client.

        Args:
            config: SDK configuration.
            http_client: Optional pre-built httpx client; it is not closed
                by ``close()``.
        """
        self.config = config
        self._owns_http = http_client is None
        self._http = http_client or create_http_client(config)
        self._logger = SDKLogger(config.logger, debug=config.debug)
        self._tokens = TokenManager(config, self._http, logger=self._logger)
        self._executor = SyncRequestExecutor(
            config, self._http, self._tokens, logger=self._logger
        )

        self.quotes = Quotes(self)
        self.shipments = Shipments(self)

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

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_http:
            self._http.close()

    def get_access_token(self) -> str:
        """Get a valid bearer token, refreshing it if needed."""
        return self._tokens.get_token()

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
        """Make an authenticated request to the Oway API.

        Args:
            method: HTTP method.
            path: Path relative to the configured base URL.
            query: Optional query parameters.
            body: Optional JSON body.
            headers: Header overrides, applied last.
            tenant_key: Company API key overriding the configured default.
            request_id: Correlation id (generated if omitted).

        Returns:
            Parsed JSON body, ``{}`` for empty responses.

        Raises:
            OwayError: On authentication failure, non-retryable errors, or
                once retries are exhausted.
        """
        return self._executor.request(
            method,
            path,
            query=query,
            body=body,
            headers=headers,
            tenant_key=tenant_key,
            request_id=request_id,
        )

    def get(
        self,
        path: str,
        query: dict[str, Any] | None = None,
        *,
        tenant_key: str | None = None,
    ) -> Any:
        return self.request("GET", path, query=query, tenant_key=tenant_key)

    def post(self, path: str, body: Any = None, *, tenant_key: str | None = None) -> Any:
        return self.request("POST", path, body=body, tenant_key=tenant_key)

    def put(self, path: str, body: Any = None, *, tenant_key: str | None = None) -> Any:
        return self.request("PUT", path, body=body, tenant_key=tenant_key)

    def delete(self, path: str, *, tenant_key: str | None = None) -> Any:
        return self.request("DELETE", path, tenant_key=tenant_key)
