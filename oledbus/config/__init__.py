"""Configuration for oledbus displays."""

from .settings import OledSettings, get_settings, reset_settings

__all__ = ["OledSettings", "get_settings", "reset_settings"]
