"""Configuration: module-level defaults and environment-backed settings."""

from intentbot.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
