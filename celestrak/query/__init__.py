"""Query models and URL construction."""

from celestrak.query.builder import ELEMENTS_PATH, build_url, single_selector
from celestrak.query.models import (
    DEFAULT_FORMAT,
    Endpoint,
    OutputFormat,
    Query,
    SelectorKey,
    TableFlags,
)


__all__ = [
    "DEFAULT_FORMAT",
    "ELEMENTS_PATH",
    "Endpoint",
    "OutputFormat",
    "Query",
    "SelectorKey",
    "TableFlags",
    "build_url",
    "single_selector",
]
