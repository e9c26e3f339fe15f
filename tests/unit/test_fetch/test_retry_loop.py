"""Unit tests for the fetch retry loop and public operations."""

import threading
import time
from collections.abc import Callable, Generator

import httpx
import pytest

from celestrak.errors import (
    ContextError,
    ErrorResponse,
    QueryError,
    RetriesExhaustedError,
    TransportError,
)
from celestrak.fetch.client import CelestrakClient
from celestrak.fetch.config import ClientConfig
from celestrak.fetch.context import FetchContext
from celestrak.fetch.metrics import FetchMetrics
from celestrak.query.models import OutputFormat, Query, TableFlags
from tests.helpers.cache import DictCache
from tests.helpers.transport import ScriptedTransport


QUERY = Query(catnr="25544", format=OutputFormat.JSON)


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Isolate metrics between tests."""
    FetchMetrics.reset()
    yield
    FetchMetrics.reset()


def make_client(
    transport: ScriptedTransport,
    max_retries: int = 3,
    retry_delay_seconds: float = 0.01,
    cache: DictCache | None = None,
) -> CelestrakClient:
    """Build a client with fast retries over a scripted transport."""
    config = ClientConfig(
        max_retries=max_retries, retry_delay_seconds=retry_delay_seconds
    )
    return CelestrakClient(config, http_client=transport.client(), cache=cache)


class TestRetries:
    """Tests for retry decisions."""

    def test_success_first_attempt(self) -> None:
        """No retries when the first attempt succeeds."""
        transport = ScriptedTransport(httpx.Response(200, content=b"tle"))
        client = make_client(transport)

        assert client.fetch_gp(FetchContext.background(), QUERY) == b"tle"
        assert transport.calls == 1
        assert FetchMetrics.get_instance().retries_total == 0

    def test_transport_failure_exhausts_all_attempts(self) -> None:
        """Repeated network failure makes exactly max_retries + 1 attempts."""
        transport = ScriptedTransport(httpx.ConnectError("connection refused"))
        client = make_client(transport, max_retries=3)

        with pytest.raises(RetriesExhaustedError) as exc_info:
            client.fetch_gp(FetchContext.background(), QUERY)

        error = exc_info.value
        assert transport.calls == 4
        assert error.max_retries == 3
        assert isinstance(error.last_error, TransportError)
        assert error.__cause__ is error.last_error
        assert "max retries (3) exceeded" in str(error)
        assert FetchMetrics.get_instance().retries_total == 3
        assert FetchMetrics.get_instance().failures_total == {"RETRIES_EXHAUSTED": 1}

    def test_backoff_doubles(self) -> None:
        """Total wait approximates delay * (2^retries - 1)."""
        transport = ScriptedTransport(httpx.ConnectError("connection refused"))
        client = make_client(transport, max_retries=3, retry_delay_seconds=0.05)

        start = time.monotonic()
        with pytest.raises(RetriesExhaustedError):
            client.fetch_gp(FetchContext.background(), QUERY)
        elapsed = time.monotonic() - start

        # 0.05 + 0.10 + 0.20
        assert elapsed >= 0.34
        assert elapsed < 3.0

    def test_zero_retries_single_attempt(self) -> None:
        """max_retries=0 means exactly one attempt."""
        transport = ScriptedTransport(httpx.ConnectError("connection refused"))
        client = make_client(transport, max_retries=0)

        with pytest.raises(RetriesExhaustedError, match=r"max retries \(0\)"):
            client.fetch_gp(FetchContext.background(), QUERY)

        assert transport.calls == 1

    def test_server_error_then_success(self) -> None:
        """5xx responses are retried until success."""
        transport = ScriptedTransport(
            httpx.Response(503, content=b"busy"),
            httpx.Response(502, content=b"bad gateway"),
            httpx.Response(200, content=b"tle"),
        )
        client = make_client(transport)

        assert client.fetch_gp(FetchContext.background(), QUERY) == b"tle"
        assert transport.calls == 3

    def test_server_error_exhausts_with_last_error(self) -> None:
        """Persistent 5xx wraps the last ErrorResponse."""
        transport = ScriptedTransport(httpx.Response(500, content=b"boom"))
        client = make_client(transport, max_retries=2)

        with pytest.raises(RetriesExhaustedError) as exc_info:
            client.fetch_gp(FetchContext.background(), QUERY)

        last = exc_info.value.last_error
        assert isinstance(last, ErrorResponse)
        assert last.status_code == 500
        assert transport.calls == 3

    @pytest.mark.parametrize("status", [400, 403, 404, 429])
    def test_client_error_not_retried(self, status: int) -> None:
        """4xx is returned immediately."""
        transport = ScriptedTransport(httpx.Response(status, content=b"no"))
        client = make_client(transport)

        with pytest.raises(ErrorResponse) as exc_info:
            client.fetch_gp(FetchContext.background(), QUERY)

        assert exc_info.value.status_code == status
        assert transport.calls == 1

    def test_empty_body_not_retried(self) -> None:
        """Empty 2xx body fails without retry."""
        transport = ScriptedTransport(httpx.Response(200, content=b""))
        client = make_client(transport)

        with pytest.raises(ErrorResponse, match="empty response body"):
            client.fetch_gp(FetchContext.background(), QUERY)

        assert transport.calls == 1

    def test_304_without_cache_not_retried(self) -> None:
        """304 without cached body fails without retry."""
        transport = ScriptedTransport(httpx.Response(304))
        client = make_client(transport, cache=DictCache())

        with pytest.raises(ErrorResponse):
            client.fetch_gp(FetchContext.background(), QUERY)

        assert transport.calls == 1

    def test_missing_selector_never_hits_network(self) -> None:
        """Query errors fail before any request and are not retried."""
        transport = ScriptedTransport(httpx.Response(200, content=b"tle"))
        client = make_client(transport)

        with pytest.raises(QueryError, match="missing selector"):
            client.fetch_gp(FetchContext.background(), Query())

        assert transport.calls == 0
        assert FetchMetrics.get_instance().failures_total == {"QUERY": 1}

    def test_none_context(self) -> None:
        """Missing context is a query error."""
        transport = ScriptedTransport(httpx.Response(200, content=b"tle"))
        client = make_client(transport)

        with pytest.raises(QueryError, match="context must be non-nil"):
            client.fetch_gp(None, QUERY)  # type: ignore[arg-type]


class TestCancellation:
    """Tests for context cancellation in the retry loop."""

    def test_cancelled_before_first_attempt(self) -> None:
        """Done context performs no attempts."""
        transport = ScriptedTransport(httpx.Response(200, content=b"tle"))
        client = make_client(transport)
        ctx = FetchContext.background()
        ctx.cancel()

        with pytest.raises(ContextError):
            client.fetch_gp(ctx, QUERY)

        assert transport.calls == 0

    def test_cancel_during_wait_stops_retries(self) -> None:
        """Cancelling mid-wait returns promptly with no further attempts."""
        transport = ScriptedTransport(httpx.ConnectError("connection refused"))
        client = make_client(transport, max_retries=5, retry_delay_seconds=10.0)
        ctx = FetchContext.background()
        timer = threading.Timer(0.1, ctx.cancel)
        timer.start()

        start = time.monotonic()
        with pytest.raises(ContextError) as exc_info:
            client.fetch_gp(ctx, QUERY)
        elapsed = time.monotonic() - start
        timer.join()

        assert exc_info.value.deadline_exceeded is False
        assert transport.calls == 1
        assert elapsed < 5.0

    def test_deadline_during_wait(self) -> None:
        """Deadline expiring mid-wait surfaces deadline exceeded."""
        transport = ScriptedTransport(httpx.ConnectError("connection refused"))
        client = make_client(transport, max_retries=5, retry_delay_seconds=10.0)
        ctx = FetchContext.with_timeout(0.2)

        start = time.monotonic()
        with pytest.raises(ContextError) as exc_info:
            client.fetch_gp(ctx, QUERY)

        assert exc_info.value.deadline_exceeded is True
        assert transport.calls == 1
        assert time.monotonic() - start < 5.0

    def test_request_timeout_bounded_by_deadline(self) -> None:
        """Per-request timeout never exceeds the remaining deadline."""
        seen: list[dict[str, float]] = []

        def record(request: httpx.Request) -> httpx.Response:
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, content=b"tle")

        transport = ScriptedTransport(record)
        client = make_client(transport)

        client.fetch_gp(FetchContext.with_timeout(2.0), QUERY)

        assert 0.0 < seen[0]["read"] <= 2.0


class TestOperations:
    """Tests for the four public fetch operations."""

    @pytest.mark.parametrize(
        ("operation", "path"),
        [
            (CelestrakClient.fetch_gp, "/NORAD/elements/gp.php"),
            (CelestrakClient.fetch_gp_first, "/NORAD/elements/gp-first.php"),
            (CelestrakClient.fetch_gp_last, "/NORAD/elements/gp-last.php"),
            (CelestrakClient.fetch_table, "/NORAD/elements/table.php"),
        ],
    )
    def test_operation_targets_endpoint(
        self, operation: Callable[..., bytes], path: str
    ) -> None:
        """Each operation requests its endpoint."""
        transport = ScriptedTransport(httpx.Response(200, content=b"data"))
        client = make_client(transport)

        assert operation(client, FetchContext.background(), QUERY) == b"data"
        assert transport.requests[0].url.path == path

    def test_table_flags_only_on_table(self) -> None:
        """Table flags are sent by fetch_table only."""
        query = Query(group="GEO", table_flags=TableFlags(bstar=True, docked=True))
        transport = ScriptedTransport(httpx.Response(200, content=b"data"))
        client = make_client(transport)

        client.fetch_gp(FetchContext.background(), query)
        client.fetch_table(FetchContext.background(), query)

        gp_params = dict(transport.requests[0].url.params)
        table_params = dict(transport.requests[1].url.params)
        assert "BSTAR" not in gp_params
        assert table_params["BSTAR"] == "1"
        assert table_params["DOCKED"] == "1"

    def test_cached_second_call(self) -> None:
        """Second call revalidates and serves the cached body on 304."""
        cache = DictCache()
        transport = ScriptedTransport(
            httpx.Response(200, headers={"ETag": '"abc"'}, content=b"tle"),
            httpx.Response(304),
        )
        client = make_client(transport, cache=cache)

        first = client.fetch_gp(FetchContext.background(), QUERY)
        second = client.fetch_gp(FetchContext.background(), QUERY)

        assert first == second == b"tle"
        assert transport.requests[1].headers["If-None-Match"] == '"abc"'
        assert len(cache.put_calls) == 1
