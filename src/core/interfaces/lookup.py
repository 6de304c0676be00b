"""Reputation lookup contract.

Why Protocol:
- A structural contract (duck typing) without rigid inheritance.
- The batch runner only needs `lookup`; the HTTP adapters and in-memory test
  doubles are interchangeable behind it.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import LookupFailure, LookupSuccess


@runtime_checkable
class ReputationLookup(Protocol):
    """Minimal contract for one remote reputation lookup.

    Design rules:
    - `lookup` is async because it does network I/O.
    - Exactly one attempt per call; errors come back as `LookupFailure`
      instead of being raised.
    """

    async def lookup(self, ip: str) -> LookupSuccess | LookupFailure:
        """Look up `ip` and return the normalized outcome."""

        ...
