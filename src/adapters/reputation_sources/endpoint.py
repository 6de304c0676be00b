"""Lookup provider: the check endpoint.

The endpoint is a thin service in front of the reputation API. One POST per
IP with `{"ip": "<addr>"}`; it answers `{"data": {...}}` on success.
"""

from __future__ import annotations

import httpx

from adapters.reputation_sources.base import HttpLookupClient


class EndpointLookupClient(HttpLookupClient):
    provider_name = "endpoint"

    async def _send(self, ip: str) -> httpx.Response:
        return await self._client.post(self._settings.lookup_endpoint, json={"ip": ip})
