"""Command line interface."""

from celestrak.cli.main import cli


__all__ = ["cli"]
