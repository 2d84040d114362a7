"""Quote operations."""

from __future__ import annotations

from typing import Any

from ..models import Quote, QuoteRequest
from ._base import AsyncResource, SyncResource, segment, to_payload

QUOTE_PATH = "/v1/shipper/quote"


class Quotes(SyncResource):
    """Shipping quotes."""

    def create(
        self,
        params: QuoteRequest | dict[str, Any],
        *,
        tenant_key: str | None = None,
    ) -> Quote:
        """Request a shipping quote.

        Args:
            params: Origin, destination and freight items.
            tenant_key: Company API key for multi-company integrations.
        """
        data = self._client.post(QUOTE_PATH, to_payload(params), tenant_key=tenant_key)
        return Quote.model_validate(data)

    def retrieve(self, quote_id: str, *, tenant_key: str | None = None) -> Quote:
        """Retrieve a quote by ID."""
        data = self._client.get(f"{QUOTE_PATH}/{segment(quote_id)}", tenant_key=tenant_key)
        return Quote.model_validate(data)


class AsyncQuotes(AsyncResource):
    """Shipping quotes (async)."""

    async def create(
        self,
        params: QuoteRequest | dict[str, Any],
        *,
        tenant_key: str | None = None,
    ) -> Quote:
        """Request a shipping quote."""
        data = await self._client.post(QUOTE_PATH, to_payload(params), tenant_key=tenant_key)
        return Quote.model_validate(data)

    async def retrieve(self, quote_id: str, *, tenant_key: str | None = None) -> Quote:
        data = await self._client.get(
            f"{QUOTE_PATH}/{segment(quote_id)}", tenant_key=tenant_key
        )
        return Quote.model_validate(data)
