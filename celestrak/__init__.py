"""Client for the CelesTrak GP element endpoints.

Builds single-selector queries, fetches them with bounded retries and
optional ETag caching, and returns the raw payload bytes. Parsing the
payload is left to the caller.
"""

from celestrak.errors import (
    CelestrakError,
    ContextError,
    ErrorKind,
    ErrorResponse,
    QueryError,
    RetriesExhaustedError,
    TransportError,
    is_retryable,
)
from celestrak.fetch import (
    Cache,
    CelestrakClient,
    ClientConfig,
    FetchContext,
    FetchMetrics,
)
from celestrak.query import Endpoint, OutputFormat, Query, TableFlags, build_url


__version__ = "0.1.0"

__all__ = [
    # Client
    "CelestrakClient",
    "ClientConfig",
    "FetchContext",
    "FetchMetrics",
    "Cache",
    # Query
    "Query",
    "TableFlags",
    "OutputFormat",
    "Endpoint",
    "build_url",
    # Errors
    "CelestrakError",
    "ErrorKind",
    "QueryError",
    "ErrorResponse",
    "TransportError",
    "ContextError",
    "RetriesExhaustedError",
    "is_retryable",
]
