"""Shared fixtures: an in-memory lookup double and isolated settings."""

from __future__ import annotations

import asyncio
import os
from typing import Callable

import pytest

from core.config import AppSettings
from core.domain.models import LookupFailure, LookupRecord, LookupSuccess


class FakeLookup:
    """Deterministic `ReputationLookup` without network access.

    - `latency`: per-IP sleep before answering (default 0).
    - `fail`: IPs answered with a failure.
    - `raise_for`: IPs whose lookup raises instead of returning.
    """

    def __init__(
        self,
        *,
        latency: dict[str, float] | None = None,
        fail: dict[str, str] | None = None,
        raise_for: set[str] | None = None,
        fail_all: str | None = None,
    ) -> None:
        self.latency = latency or {}
        self.fail = fail or {}
        self.raise_for = raise_for or set()
        self.fail_all = fail_all
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def __aenter__(self) -> "FakeLookup":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.closed = True

    async def lookup(self, ip: str) -> LookupSuccess | LookupFailure:
        self.calls.append(ip)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.latency.get(ip, 0))
            if ip in self.raise_for:
                raise RuntimeError(f"lookup exploded for {ip}")
            if self.fail_all is not None:
                return LookupFailure(ip_address=ip, reason=self.fail_all)
            if ip in self.fail:
                return LookupFailure(ip_address=ip, reason=self.fail[ip])
            return LookupSuccess(
                record=LookupRecord(
                    ipAddress=ip,
                    abuseConfidenceScore=sum(int(p) for p in ip.split(".")) % 101,
                    countryName="Testland",
                    isp="Example ISP",
                    domain="example.test",
                )
            )
        finally:
            self.in_flight -= 1


@pytest.fixture
def make_lookup() -> Callable[..., FakeLookup]:
    return FakeLookup


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    for name in [key for key in os.environ if key.upper().startswith("DODOBOX_")]:
        monkeypatch.delenv(name, raising=False)
    return AppSettings(_env_file=None, batch_delay_ms=0)
