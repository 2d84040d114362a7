"""Typed resource facades over the request executor."""

from .quotes import AsyncQuotes, Quotes
from .shipments import AsyncShipments, Shipments

__all__ = [
    "AsyncQuotes",
    "AsyncShipments",
    "Quotes",
    "Shipments",
]
