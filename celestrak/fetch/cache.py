"""Cache port for ETag-aware response caching.

The client never persists anything itself. Callers plug in any object
satisfying :class:`Cache`; :class:`CacheManager` wraps it with the
conditional-request logic used by the fetch engine.
"""

from dataclasses import dataclass
from typing import Protocol

import structlog

from celestrak.constants import HEADER_IF_NONE_MATCH


logger = structlog.get_logger()


class Cache(Protocol):
    """Protocol for response cache storage.

    Keys are fully resolved request URLs. Implementations shared across
    threads must be safe for concurrent use.
    """

    def get(self, key: str) -> tuple[bytes, str] | None:
        """Retrieve a cached payload.

        Args:
            key: Resolved request URL.

        Returns:
            Tuple of (payload, validator token), or None on a miss.
        """
        ...

    def put(self, key: str, data: bytes, etag: str) -> None:
        """Store a payload.

        Args:
            key: Resolved request URL.
            data: Response body.
            etag: Validator token, possibly empty.
        """
        ...


@dataclass(frozen=True)
class CachedPayload:
    """Payload and validator token found in the cache."""

    data: bytes
    etag: str


class CacheManager:
    """Manages cache operations for conditional requests.

    Encapsulates the logic for:
    - Looking up a cached payload before each attempt
    - Building the If-None-Match header from its validator
    - Storing fresh payloads with the response ETag
    """

    def __init__(self, cache: Cache | None) -> None:
        """Initialize the cache manager.

        Args:
            cache: Storage backend, or None to disable caching.
        """
        self._cache = cache
        self._log = logger.bind(component="cache")

    @property
    def enabled(self) -> bool:
        """True if a cache backend is configured."""
        return self._cache is not None

    def lookup(self, key: str) -> CachedPayload | None:
        """Look up a cached payload.

        Args:
            key: Resolved request URL.

        Returns:
            CachedPayload on a hit, None on a miss or without a cache.
        """
        if self._cache is None:
            return None

        found = self._cache.get(key)
        self._log.debug("cache_lookup", key=key, hit=found is not None)
        if found is None:
            return None

        data, etag = found
        return CachedPayload(data=data, etag=etag or "")

    def conditional_headers(self, cached: CachedPayload | None) -> dict[str, str]:
        """Get conditional request headers for a cached payload.

        Args:
            cached: Result of :meth:`lookup`.

        Returns:
            Dictionary with If-None-Match when a validator is known.
        """
        if cached is not None and cached.etag:
            return {HEADER_IF_NONE_MATCH: cached.etag}
        return {}

    def store(self, key: str, data: bytes, etag: str | None) -> None:
        """Store a fresh payload.

        Args:
            key: Resolved request URL.
            data: Response body.
            etag: Raw ETag header value, if any.
        """
        if self._cache is None:
            return

        token = (etag or "").strip()
        self._cache.put(key, data, token)
        self._log.debug("cache_store", key=key, bytes=len(data), etag=bool(token))
