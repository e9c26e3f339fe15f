"""Metrics collection for the fetch engine."""

from dataclasses import dataclass, field
from threading import Lock
from typing import ClassVar

from celestrak.errors import ErrorKind


@dataclass
class FetchMetrics:
    """Process-wide counters for fetch operations.

    Singleton shared by every client. Updates are serialized with a lock
    so concurrent fetch calls can record safely.
    """

    requests_total: dict[int, int] = field(default_factory=dict)
    cache_hits_total: int = 0
    retries_total: int = 0
    failures_total: dict[str, int] = field(default_factory=dict)
    bytes_total: int = 0

    _instance: ClassVar["FetchMetrics | None"] = None
    _lock: ClassVar[Lock] = Lock()

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get singleton metrics instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset metrics (primarily for testing)."""
        with cls._lock:
            cls._instance = None

    def record_request(self, status_code: int, bytes_received: int) -> None:
        """Record a completed HTTP exchange.

        Args:
            status_code: HTTP status code.
            bytes_received: Body bytes kept from the response.
        """
        with self._lock:
            self.requests_total[status_code] = (
                self.requests_total.get(status_code, 0) + 1
            )
            self.bytes_total += bytes_received

    def record_cache_hit(self) -> None:
        """Record a 304 served from the cache."""
        with self._lock:
            self.cache_hits_total += 1

    def record_retry(self) -> None:
        """Record a retry attempt."""
        with self._lock:
            self.retries_total += 1

    def record_failure(self, kind: ErrorKind) -> None:
        """Record a failed fetch call.

        Args:
            kind: Kind of the error returned to the caller.
        """
        with self._lock:
            self.failures_total[kind.value] = self.failures_total.get(kind.value, 0) + 1

    def to_dict(self) -> dict[str, int | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "requests_total": dict(self.requests_total),
                "cache_hits_total": self.cache_hits_total,
                "retries_total": self.retries_total,
                "failures_total": dict(self.failures_total),
                "bytes_total": self.bytes_total,
            }
