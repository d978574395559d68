"""Core app configuration, security and database helpers."""

from portal.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
