"""Shared plumbing for HTTP reputation providers.

Both providers answer with the same envelope, `{"data": {...}}` on success
and (for AbuseIPDB) `{"errors": [{"detail": ...}]}` on failure, so response
interpretation and caching live here and subclasses only build the request.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from adapters.http_client import build_async_client
from adapters.reputation_sources.cache import LookupCache
from core.config import AppSettings
from core.domain.models import LookupFailure, LookupRecord, LookupSuccess

logger = structlog.get_logger(__name__)

INVALID_RESPONSE_FORMAT = "Invalid response format"
_MAX_DETAIL_CHARS = 300


def provider_detail(response: httpx.Response) -> str | None:
    """Best error message the provider put in an error response."""

    try:
        payload: Any = response.json()
    except ValueError:
        text = response.text.strip()
        return text[:_MAX_DETAIL_CHARS] or None

    if isinstance(payload, dict):
        errors = payload.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict):
            detail = errors[0].get("detail")
            if isinstance(detail, str) and detail.strip():
                return detail.strip()
        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def parse_lookup_response(ip: str, response: httpx.Response) -> LookupSuccess | LookupFailure:
    if response.is_error:
        detail = provider_detail(response)
        return LookupFailure(
            ip_address=ip,
            reason=detail or f"Request failed with status code {response.status_code}",
        )

    try:
        payload: Any = response.json()
    except ValueError:
        return LookupFailure(ip_address=ip, reason=INVALID_RESPONSE_FORMAT)

    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        return LookupFailure(ip_address=ip, reason=INVALID_RESPONSE_FORMAT)

    data = dict(data)
    if not data.get("ipAddress"):
        data["ipAddress"] = ip

    try:
        record = LookupRecord.model_validate(data)
    except ValidationError:
        return LookupFailure(ip_address=ip, reason=INVALID_RESPONSE_FORMAT)
    return LookupSuccess(record=record)


class HttpLookupClient(ABC):
    """Base for providers reached over HTTP.

    Subclasses implement `_send`. The client owns its `httpx.AsyncClient`
    unless one is injected, and can be used as an async context manager.
    """

    provider_name = "http"

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        cache: LookupCache | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_client = client is None
        self._client = client or build_async_client(self._settings)
        self._cache = cache if cache is not None else LookupCache(self._settings.cache_ttl_seconds)

    @property
    def cache(self) -> LookupCache:
        return self._cache

    async def __aenter__(self) -> "HttpLookupClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def lookup(self, ip: str) -> LookupSuccess | LookupFailure:
        self._cache.purge()
        cached = self._cache.get(ip)
        if cached is not None:
            logger.debug("lookup.cache_hit", ip=ip, provider=self.provider_name)
            return cached

        try:
            response = await self._send(ip)
        except httpx.HTTPError as exc:
            reason = str(exc) or exc.__class__.__name__
            logger.warning("lookup.transport_error", ip=ip, provider=self.provider_name, error=reason)
            return LookupFailure(ip_address=ip, reason=reason)

        self._inspect(response)
        outcome = parse_lookup_response(ip, response)
        if isinstance(outcome, LookupSuccess):
            self._cache.set(ip, outcome)
        else:
            logger.warning(
                "lookup.failed",
                ip=ip,
                provider=self.provider_name,
                status_code=response.status_code,
                reason=outcome.reason,
            )
        return outcome

    @abstractmethod
    async def _send(self, ip: str) -> httpx.Response:
        """Issue the single provider request for `ip`."""

    def _inspect(self, response: httpx.Response) -> None:
        """Hook for provider-specific response headers."""
