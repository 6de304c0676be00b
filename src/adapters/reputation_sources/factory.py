"""Pick the lookup provider from settings."""

from __future__ import annotations

import httpx

from adapters.reputation_sources.abuseipdb import AbuseIPDBLookupClient
from adapters.reputation_sources.base import HttpLookupClient
from adapters.reputation_sources.endpoint import EndpointLookupClient
from core.config import AppSettings, LookupProvider


def build_lookup_client(
    settings: AppSettings,
    *,
    client: httpx.AsyncClient | None = None,
) -> HttpLookupClient:
    if settings.provider is LookupProvider.ABUSEIPDB:
        return AbuseIPDBLookupClient(settings, client=client)
    return EndpointLookupClient(settings, client=client)
