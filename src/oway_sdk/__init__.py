"""Oway freight shipping Python SDK."""

__version__ = "0.1.0"

from .async_client import AsyncOwayClient
from .client import OwayClient
from .config import OwayConfig, RetryConfig, TelemetryConfig
from .environments import OwayEnvironment
from .errors import (
    AuthenticationError,
    ClientError,
    ConfigurationError,
    ErrorCode,
    NetworkError,
    OwayError,
    RateLimitError,
    TimeoutError,
    TransientServerError,
)
from .models import (
    Address,
    Contact,
    DocumentLink,
    DocumentType,
    FreightItem,
    Invoice,
    Quote,
    QuoteRequest,
    Shipment,
    ShipmentRequest,
    Tracking,
    TrackingEvent,
    WeightUnit,
)
from .telemetry import configure_telemetry, sanitize_for_logging

__all__ = [
    "OwayClient",
    "AsyncOwayClient",
    "OwayConfig",
    "RetryConfig",
    "TelemetryConfig",
    "OwayEnvironment",
    "OwayError",
    "ErrorCode",
    "ConfigurationError",
    "AuthenticationError",
    "TransientServerError",
    "RateLimitError",
    "NetworkError",
    "TimeoutError",
    "ClientError",
    "Address",
    "Contact",
    "FreightItem",
    "QuoteRequest",
    "Quote",
    "ShipmentRequest",
    "Shipment",
    "Tracking",
    "TrackingEvent",
    "Invoice",
    "DocumentLink",
    "DocumentType",
    "WeightUnit",
    "configure_telemetry",
    "sanitize_for_logging",
]
