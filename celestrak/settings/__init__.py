"""Client settings loading."""

from .app import CelestrakSettings, get_settings


__all__ = ["CelestrakSettings", "get_settings"]
