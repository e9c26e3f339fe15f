"""URL construction for element queries."""

from urllib.parse import urlencode

import httpx

from celestrak.errors import QueryError
from celestrak.query.models import Endpoint, Query, SelectorKey


ELEMENTS_PATH = "/NORAD/elements/"

_SELECTOR_NAMES = "/".join(key.value for key in SelectorKey)


def build_url(query: Query, base: str | None, endpoint: Endpoint | str) -> str:
    """Build a fully-qualified URL for the specified endpoint.

    The query string lists the selector first, then ``FORMAT``, then any
    table flags (``table.php`` only), so equal inputs always produce the
    same string. That string doubles as the cache key.

    Args:
        query: Query to serialize.
        base: Origin to resolve against, e.g. ``https://celestrak.org``.
        endpoint: Endpoint file name.

    Returns:
        The resolved URL.

    Raises:
        QueryError: If base or endpoint is missing, or the query does not
            set exactly one selector.
    """
    if not base:
        raise QueryError("base URL is nil")

    endpoint_name = endpoint.value if isinstance(endpoint, Endpoint) else endpoint
    if not endpoint_name:
        raise QueryError("endpoint is required")

    key, value = single_selector(query)

    params: list[tuple[str, str]] = [
        (key.value, value),
        ("FORMAT", query.resolved_format.value),
    ]
    if endpoint_name == Endpoint.TABLE.value:
        params.extend((flag, "1") for flag in query.table_flags.enabled_params())

    try:
        resolved = httpx.URL(base).join(ELEMENTS_PATH + endpoint_name)
    except httpx.InvalidURL as e:
        msg = f"invalid base URL: {e}"
        raise QueryError(msg) from e

    return f"{resolved}?{urlencode(params)}"


def single_selector(query: Query) -> tuple[SelectorKey, str]:
    """Return the one active selector of a query.

    Args:
        query: Query to inspect.

    Returns:
        Tuple of selector key and trimmed value.

    Raises:
        QueryError: If zero or several selectors are set.
    """
    active = [(key, value) for key, value in query.selectors() if value]

    if len(active) > 1:
        msg = f"ambiguous selector: set exactly one of {_SELECTOR_NAMES}"
        raise QueryError(msg)
    if not active:
        msg = f"missing selector: set one of {_SELECTOR_NAMES}"
        raise QueryError(msg)
    return active[0]
