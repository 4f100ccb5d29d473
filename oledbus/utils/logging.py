"""Logging helpers for the oledbus logger tree.

The library itself only calls ``logging.getLogger(__name__)``; applications
call ``configure_package_logging`` once to attach handlers.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "oledbus"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_LEVEL = logging.INFO

# Child loggers configured alongside the package root
SUBSYSTEMS = ("display", "drawing", "drivers", "drivers.transport", "animation", "config")


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logger(
    name: str,
    level: Union[int, str] = DEFAULT_LEVEL,
    log_format: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None,
    console: bool = True,
) -> logging.Logger:
    """Set up a logger with the specified configuration.

    Handlers previously attached by this function are replaced, so calling it
    twice does not duplicate output.

    Args:
        name: Name of the logger
        level: Logging level (default: INFO)
        log_format: Log message format
        log_file: Path to log file (optional)
        console: Whether to log to stdout

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    for handler in list(logger.handlers):
        if getattr(handler, "_oledbus_handler", False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(log_format)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        file_handler._oledbus_handler = True  # type: ignore[attr-defined]
        logger.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        console_handler._oledbus_handler = True  # type: ignore[attr-defined]
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package root.

    Args:
        name: Dotted name, with or without the ``oledbus.`` prefix

    Returns:
        Logger instance
    """
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def set_log_level(logger: logging.Logger, level: Union[int, str]) -> None:
    """Set the log level for the specified logger."""
    logger.setLevel(_resolve_level(level))


def configure_package_logging(
    level: Union[int, str] = DEFAULT_LEVEL,
    log_format: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None,
    console: bool = True,
) -> dict[str, logging.Logger]:
    """Configure logging for the whole package.

    Handlers live on the ``oledbus`` root only; subsystem loggers get the
    level and propagate to it.

    Args:
        level: Logging level (default: INFO)
        log_format: Log message format
        log_file: Path to log file (optional)
        console: Whether to log to stdout

    Returns:
        Dictionary of configured loggers keyed by subsystem
    """
    root_logger = setup_logger(
        PACKAGE_LOGGER,
        level=level,
        log_format=log_format,
        log_file=log_file,
        console=console,
    )

    loggers = {"root": root_logger}
    for subsystem in SUBSYSTEMS:
        child = logging.getLogger(f"{PACKAGE_LOGGER}.{subsystem}")
        set_log_level(child, level)
        loggers[subsystem] = child
    return loggers
