"""Reputation lookup providers.

Why a package:
- Groups one module per provider (check endpoint, AbuseIPDB).
- Each module implements `core.interfaces.lookup.ReputationLookup`.
"""

from adapters.reputation_sources.abuseipdb import AbuseIPDBLookupClient
from adapters.reputation_sources.cache import LookupCache
from adapters.reputation_sources.endpoint import EndpointLookupClient
from adapters.reputation_sources.factory import build_lookup_client

__all__ = [
	"AbuseIPDBLookupClient",
	"EndpointLookupClient",
	"LookupCache",
	"build_lookup_client",
]
