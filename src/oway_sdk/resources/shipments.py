"""Shipment operations: scheduling, confirmation, tracking and documents."""

from __future__ import annotations

from typing import Any

from ..models import (
    DocumentLink,
    DocumentType,
    Invoice,
    Shipment,
    ShipmentRequest,
    Tracking,
)
from ._base import AsyncResource, SyncResource, segment, to_payload

SHIPMENT_PATH = "/v1/shipper/shipment"


def _shipment_path(order_number: str, *parts: str) -> str:
    return "/".join([SHIPMENT_PATH, segment(order_number), *parts])


class Shipments(SyncResource):
    """Shipments booked from a quote."""

    def create(
        self,
        params: ShipmentRequest | dict[str, Any],
        *,
        tenant_key: str | None = None,
    ) -> Shipment:
        """Schedule a shipment from an accepted quote.

        Args:
            params: Quote id plus pickup and delivery contacts.
            tenant_key: Company API key for multi-company integrations.
        """
        data = self._client.post(SHIPMENT_PATH, to_payload(params), tenant_key=tenant_key)
        return Shipment.model_validate(data)

    def retrieve(self, order_number: str, *, tenant_key: str | None = None) -> Shipment:
        data = self._client.get(_shipment_path(order_number), tenant_key=tenant_key)
        return Shipment.model_validate(data)

    def confirm(self, order_number: str, *, tenant_key: str | None = None) -> Shipment:
        data = self._client.put(_shipment_path(order_number, "confirm"), tenant_key=tenant_key)
        return Shipment.model_validate(data)

    def cancel(self, order_number: str, *, tenant_key: str | None = None) -> None:
        self._client.put(_shipment_path(order_number, "cancel"), tenant_key=tenant_key)

    def tracking(self, order_number: str, *, tenant_key: str | None = None) -> Tracking:
        """Get tracking status and events for a shipment."""
        data = self._client.get(_shipment_path(order_number, "tracking"), tenant_key=tenant_key)
        return Tracking.model_validate(data)

    def document(
        self,
        order_number: str,
        document_type: DocumentType | str,
        *,
        tenant_key: str | None = None,
    ) -> DocumentLink:
        """Get a download link for a BOL, invoice or label."""
        doc = DocumentType(document_type)
        data = self._client.get(
            _shipment_path(order_number, "document", doc.value), tenant_key=tenant_key
        )
        return DocumentLink.model_validate(data)

    def invoice(self, order_number: str, *, tenant_key: str | None = None) -> Invoice:
        """Retrieve the invoice for a delivered shipment."""
        data = self._client.get(_shipment_path(order_number, "invoice"), tenant_key=tenant_key)
        return Invoice.model_validate(data)


class AsyncShipments(AsyncResource):
    """Shipments booked from a quote (async)."""

    async def create(
        self,
        params: ShipmentRequest | dict[str, Any],
        *,
        tenant_key: str | None = None,
    ) -> Shipment:
        data = await self._client.post(SHIPMENT_PATH, to_payload(params), tenant_key=tenant_key)
        return Shipment.model_validate(data)

    async def retrieve(self, order_number: str, *, tenant_key: str | None = None) -> Shipment:
        data = await self._client.get(_shipment_path(order_number), tenant_key=tenant_key)
        return Shipment.model_validate(data)

    async def confirm(self, order_number: str, *, tenant_key: str | None = None) -> Shipment:
        data = await self._client.put(
            _shipment_path(order_number, "confirm"), tenant_key=tenant_key
        )
        return Shipment.model_validate(data)

    async def cancel(self, order_number: str, *, tenant_key: str | None = None) -> None:
        await self._client.put(_shipment_path(order_number, "cancel"), tenant_key=tenant_key)

    async def tracking(self, order_number: str, *, tenant_key: str | None = None) -> Tracking:
        data = await self._client.get(
            _shipment_path(order_number, "tracking"), tenant_key=tenant_key
        )
        return Tracking.model_validate(data)

    async def document(
        self,
        order_number: str,
        document_type: DocumentType | str,
        *,
        tenant_key: str | None = None,
    ) -> DocumentLink:
        doc = DocumentType(document_type)
        data = await self._client.get(
            _shipment_path(order_number, "document", doc.value), tenant_key=tenant_key
        )
        return DocumentLink.model_validate(data)

    async def invoice(self, order_number: str, *, tenant_key: str | None = None) -> Invoice:
        data = await self._client.get(
            _shipment_path(order_number, "invoice"), tenant_key=tenant_key
        )
        return Invoice.model_validate(data)
