"""HTTP client factories for the Oway SDK."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from . import __version__

if TYPE_CHECKING:
    from .config import OwayConfig

USER_AGENT = f"oway-sdk/{__version__} Python"


def _timeout(config: OwayConfig) -> httpx.Timeout:
    return httpx.Timeout(config.timeout)


def create_http_client(
    config: OwayConfig,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create configured sync HTTP client.

    Args:
        config: SDK configuration.
        transport: Optional transport (proxies, test doubles).

    Returns:
        Configured httpx.Client.
    """
    return httpx.Client(
        base_url=config.base_url_str,
        timeout=_timeout(config),
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        },
        follow_redirects=False,
        transport=transport,
    )


def create_async_http_client(
    config: OwayConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create configured async HTTP client.

    Args:
        config: SDK configuration.
        transport: Optional transport (proxies, test doubles).

    Returns:
        Configured httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        base_url=config.base_url_str,
        timeout=_timeout(config),
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        },
        follow_redirects=False,
        transport=transport,
    )
