"""Fetch engine for the CelesTrak element endpoints.

This module provides the request pipeline with:
- ETag conditional requests through a pluggable cache
- Bounded retries with exponential backoff
- Cancellation and deadlines via FetchContext
- Maximum response size enforcement
- Metrics collection for observability
"""

from celestrak.fetch.cache import Cache, CachedPayload, CacheManager
from celestrak.fetch.client import CelestrakClient
from celestrak.fetch.config import ClientConfig
from celestrak.fetch.context import FetchContext
from celestrak.fetch.metrics import FetchMetrics


__all__ = [
    # Client
    "CelestrakClient",
    # Cache
    "Cache",
    "CachedPayload",
    "CacheManager",
    # Config
    "ClientConfig",
    # Cancellation
    "FetchContext",
    # Metrics
    "FetchMetrics",
]
