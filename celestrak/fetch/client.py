"""CelesTrak client with caching, retries, and bounded reads."""

from io import BytesIO
from types import TracebackType
from typing import Any

import httpx
import structlog

from celestrak.constants import (
    DEFAULT_CHUNK_SIZE,
    ERROR_BODY_LIMIT_BYTES,
    HEADER_ETAG,
    HEADER_USER_AGENT,
    HTTP_STATUS_NOT_MODIFIED,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
)
from celestrak.errors import (
    CelestrakError,
    ContextError,
    ErrorResponse,
    QueryError,
    RetriesExhaustedError,
    TransportError,
    is_retryable,
)
from celestrak.fetch.cache import Cache, CachedPayload, CacheManager
from celestrak.fetch.config import ClientConfig
from celestrak.fetch.context import FetchContext
from celestrak.fetch.metrics import FetchMetrics
from celestrak.query.builder import build_url
from celestrak.query.models import Endpoint, Query


logger = structlog.get_logger()


class CelestrakClient:
    """Client for the CelesTrak element endpoints.

    Provides GET operations with:
    - Single-selector query validation and deterministic URLs
    - ETag conditional requests through an optional cache
    - Bounded retries with exponential backoff
    - Cancellation and deadlines via FetchContext
    - Response size enforcement

    Configuration is immutable. The ``with_*`` methods return a new client
    sharing the same transport and leave the receiver untouched, so one
    client can serve concurrent callers as long as the transport and cache
    are thread-safe.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        http_client: httpx.Client | None = None,
        cache: Cache | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration, defaults when None.
            http_client: Transport used for requests. When None, the client
                creates one and closes it in :meth:`close`.
            cache: Optional response cache.
        """
        self._config = config or ClientConfig()
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=self._config.timeout_seconds)
        self._cache_backend = cache
        self._cache = CacheManager(cache)
        self._metrics = FetchMetrics.get_instance()
        self._log = logger.bind(component="fetch")

    @property
    def config(self) -> ClientConfig:
        """Client configuration."""
        return self._config

    @property
    def cache(self) -> Cache | None:
        """Configured cache, if any."""
        return self._cache_backend

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "CelestrakClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def with_config(self, **changes: Any) -> "CelestrakClient":
        """Derive a client with some configuration values replaced.

        Args:
            **changes: ClientConfig field overrides.

        Returns:
            New client sharing this client's transport and cache.
        """
        config = ClientConfig.model_validate({**self._config.model_dump(), **changes})
        return CelestrakClient(config, http_client=self._http, cache=self._cache_backend)

    def with_retries(
        self, max_retries: int, retry_delay_seconds: float
    ) -> "CelestrakClient":
        """Derive a client with a different retry policy."""
        return self.with_config(
            max_retries=max_retries, retry_delay_seconds=retry_delay_seconds
        )

    def with_user_agent(self, user_agent: str) -> "CelestrakClient":
        """Derive a client sending a different User-Agent."""
        return self.with_config(user_agent=user_agent)

    def with_cache(self, cache: Cache | None) -> "CelestrakClient":
        """Derive a client using a different cache."""
        return CelestrakClient(self._config, http_client=self._http, cache=cache)

    def fetch_gp(self, ctx: FetchContext, query: Query) -> bytes:
        """Fetch current GP data as raw bytes (``gp.php``)."""
        return self._fetch(ctx, query, Endpoint.GP)

    def fetch_gp_first(self, ctx: FetchContext, query: Query) -> bytes:
        """Fetch the first GP data available (``gp-first.php``)."""
        return self._fetch(ctx, query, Endpoint.GP_FIRST)

    def fetch_gp_last(self, ctx: FetchContext, query: Query) -> bytes:
        """Fetch the last GP data available (``gp-last.php``)."""
        return self._fetch(ctx, query, Endpoint.GP_LAST)

    def fetch_table(self, ctx: FetchContext, query: Query) -> bytes:
        """Fetch table data (``table.php``), applying the query's table flags."""
        return self._fetch(ctx, query, Endpoint.TABLE)

    def _fetch(self, ctx: FetchContext, query: Query, endpoint: Endpoint) -> bytes:
        """Fetch an endpoint with automatic retries.

        Args:
            ctx: Cancellation context.
            query: Query to send.
            endpoint: Target endpoint.

        Returns:
            Response body.

        Raises:
            CelestrakError: QueryError, ErrorResponse or ContextError from the
                failing attempt, or RetriesExhaustedError once every attempt
                failed with a retryable error.
        """
        if ctx is None:
            raise QueryError("context must be non-nil")

        log = self._log.bind(endpoint=endpoint.value)
        max_retries = self._config.max_retries
        delay = self._config.retry_delay_seconds
        last_error: CelestrakError | None = None

        try:
            for attempt in range(max_retries + 1):
                ctx_error = ctx.err()
                if ctx_error is not None:
                    raise ctx_error

                if attempt > 0:
                    self._metrics.record_retry()
                    log.debug(
                        "retry_wait",
                        attempt=attempt,
                        delay_seconds=delay,
                        max_retries=max_retries,
                    )
                    if ctx.wait(delay):
                        raise ctx.err() or ContextError(
                            "context deadline exceeded", deadline_exceeded=True
                        )
                    delay *= 2

                try:
                    data = self._fetch_once(ctx, query, endpoint)
                except CelestrakError as e:
                    retryable = is_retryable(e)
                    log.debug(
                        "attempt_failed",
                        attempt=attempt,
                        kind=e.kind.value,
                        retryable=retryable,
                    )
                    if not retryable:
                        raise
                    last_error = e
                    continue

                log.info("fetch_complete", attempt=attempt, bytes=len(data))
                return data

            assert last_error is not None
            raise RetriesExhaustedError(max_retries, last_error)
        except CelestrakError as e:
            self._metrics.record_failure(e.kind)
            log.info("fetch_failed", kind=e.kind.value, error=e.message)
            raise

    def _fetch_once(
        self, ctx: FetchContext, query: Query, endpoint: Endpoint | str
    ) -> bytes:
        """Perform a single fetch attempt.

        Args:
            ctx: Cancellation context.
            query: Query to send.
            endpoint: Target endpoint.

        Returns:
            Response body, or the cached body on 304.

        Raises:
            CelestrakError: On any failure of this attempt.
        """
        if ctx is None:
            raise QueryError("context must be non-nil")
        ctx_error = ctx.err()
        if ctx_error is not None:
            raise ctx_error

        url = build_url(query, self._config.base_url, endpoint)

        # Cache key = full URL, which already encodes every parameter
        cached = self._cache.lookup(url)
        headers = self._build_headers(cached)
        self._log.debug(
            "fetch_attempt", url=url, conditional=bool(cached and cached.etag)
        )

        try:
            with self._http.stream(
                "GET", url, headers=headers, timeout=self._request_timeout(ctx)
            ) as response:
                return self._handle_response(ctx, url, response, cached)
        except httpx.TransportError as e:
            ctx_error = ctx.err()
            if ctx_error is not None:
                raise ContextError(
                    f"request cancelled: {ctx_error.message}",
                    deadline_exceeded=ctx_error.deadline_exceeded,
                ) from e
            raise TransportError(str(e) or type(e).__name__) from e

    def _build_headers(self, cached: CachedPayload | None) -> dict[str, str]:
        """Build request headers.

        Args:
            cached: Cached payload for the request URL, if any.

        Returns:
            Complete headers dictionary.
        """
        headers: dict[str, str] = {}
        if self._config.user_agent:
            headers[HEADER_USER_AGENT] = self._config.user_agent
        headers.update(self._cache.conditional_headers(cached))
        return headers

    def _request_timeout(self, ctx: FetchContext) -> float:
        """Per-request timeout bounded by the context deadline."""
        remaining = ctx.remaining()
        if remaining is None:
            return self._config.timeout_seconds
        return min(self._config.timeout_seconds, remaining)

    def _handle_response(
        self,
        ctx: FetchContext,
        url: str,
        response: httpx.Response,
        cached: CachedPayload | None,
    ) -> bytes:
        """Turn a streamed response into a body or an error.

        Args:
            ctx: Cancellation context.
            url: Request URL, used as cache key.
            response: Open streaming response.
            cached: Cached payload for the URL, if any.

        Returns:
            Body bytes.

        Raises:
            ErrorResponse: For unusable responses.
            ContextError: If the context finishes while reading.
        """
        status_code = response.status_code
        status = f"{status_code} {response.reason_phrase}".strip()

        # 304: use cached body
        if status_code == HTTP_STATUS_NOT_MODIFIED:
            self._metrics.record_request(status_code, 0)
            if cached is not None:
                self._metrics.record_cache_hit()
                return cached.data
            raise ErrorResponse(
                status_code, status, "304 Not Modified but no cached body available"
            )

        if not HTTP_STATUS_OK_MIN <= status_code < HTTP_STATUS_OK_MAX:
            excerpt, _ = self._read_body(ctx, response, ERROR_BODY_LIMIT_BYTES)
            self._metrics.record_request(status_code, len(excerpt))
            message = excerpt.decode("utf-8", errors="replace").strip() or status
            raise ErrorResponse(status_code, status, message)

        max_size = self._config.max_response_size_bytes
        body, overflow = self._read_body(ctx, response, max_size)
        self._metrics.record_request(status_code, len(body))

        if overflow:
            raise ErrorResponse(
                status_code, status, f"response too large (exceeds {max_size} bytes)"
            )
        if not body:
            raise ErrorResponse(status_code, status, "empty response body")

        self._cache.store(url, body, response.headers.get(HEADER_ETAG))
        return body

    def _read_body(
        self, ctx: FetchContext, response: httpx.Response, limit: int
    ) -> tuple[bytes, bool]:
        """Read at most ``limit`` bytes of a streamed body.

        Args:
            ctx: Cancellation context, checked between chunks.
            response: Open streaming response.
            limit: Maximum bytes to keep.

        Returns:
            Tuple of (body, overflow) where overflow is True if the body
            holds more than ``limit`` bytes.

        Raises:
            ContextError: If the context finishes while reading.
        """
        buffer = BytesIO()
        total = 0

        for chunk in response.iter_bytes(chunk_size=DEFAULT_CHUNK_SIZE):
            ctx_error = ctx.err()
            if ctx_error is not None:
                raise ctx_error
            room = limit - total
            if len(chunk) > room:
                buffer.write(chunk[:room])
                return buffer.getvalue(), True
            buffer.write(chunk)
            total += len(chunk)

        return buffer.getvalue(), False
