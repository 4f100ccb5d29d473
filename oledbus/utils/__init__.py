"""Utility helpers for oledbus."""

from .logging import configure_package_logging, get_logger, set_log_level, setup_logger

__all__ = ["configure_package_logging", "get_logger", "set_log_level", "setup_logger"]
