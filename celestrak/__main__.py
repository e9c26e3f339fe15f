"""Entry point for ``python -m celestrak``."""

from celestrak.cli import cli


cli()
