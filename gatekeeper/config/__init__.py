"""Configuration loading and settings management."""

from .settings import DEFAULTS, Settings, load_settings

__all__ = ["DEFAULTS", "Settings", "load_settings"]
