"""Helpers shared by the resource facades."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from ..models import ApiModel

if TYPE_CHECKING:
    from ..async_client import AsyncOwayClient
    from ..client import OwayClient


def to_payload(params: ApiModel | dict[str, Any]) -> dict[str, Any]:
    """Accept either a request model or an already-shaped JSON dict."""
    if isinstance(params, ApiModel):
        return params.to_payload()
    return dict(params)


def segment(value: str) -> str:
    """Escape a caller-supplied value used as a path segment."""
    return quote(str(value), safe="")


class SyncResource:
    def __init__(self, client: OwayClient) -> None:
        self._client = client


class AsyncResource:
    def __init__(self, client: AsyncOwayClient) -> None:
        self._client = client
