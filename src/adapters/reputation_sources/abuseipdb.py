"""Lookup provider: AbuseIPDB API v2, queried directly.

Request: `GET <base>/check?ipAddress=<ip>&maxAgeInDays=<n>&verbose` with the
`Key` header. Same `{"data": {...}}` envelope as the check endpoint.

Notes:
- 429 and 4xx answers carry `{"errors": [{"detail": ...}]}`; the detail
  becomes the failure reason.
- `X-RateLimit-Remaining: 0` means the daily quota is spent; it is logged,
  the current answer is still used.
"""

from __future__ import annotations

import httpx
import structlog

from adapters.reputation_sources.base import HttpLookupClient
from adapters.reputation_sources.cache import LookupCache
from core.config import AppSettings

logger = structlog.get_logger(__name__)


class AbuseIPDBLookupClient(HttpLookupClient):
    provider_name = "abuseipdb"

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        cache: LookupCache | None = None,
    ) -> None:
        settings = settings or AppSettings()
        if not settings.abuseipdb_api_key:
            raise ValueError("AbuseIPDB provider requires DODOBOX_ABUSEIPDB_API_KEY")
        super().__init__(settings, client=client, cache=cache)

    async def _send(self, ip: str) -> httpx.Response:
        url = f"{self._settings.abuseipdb_base_url.rstrip('/')}/check"
        params = {
            "ipAddress": ip,
            "maxAgeInDays": str(self._settings.abuseipdb_max_age_days),
            "verbose": "",
        }
        headers = {"Key": self._settings.abuseipdb_api_key or ""}
        return await self._client.get(url, params=params, headers=headers)

    def _inspect(self, response: httpx.Response) -> None:
        if response.headers.get("X-RateLimit-Remaining") == "0":
            logger.warning("abuseipdb.rate_limit_reached", status_code=response.status_code)
