"""httpx wrapper.

Why a wrapper:
- Standardizes timeouts and headers for every lookup adapter.
- Eases testing: it can be swapped for a client on `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(settings: AppSettings | None = None) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with safe defaults.

    Why a builder:
    - Centralizes timeouts/headers so every provider behaves the same.
    - Adapters accept an injected client, so tests can mount a mock transport.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
    )
