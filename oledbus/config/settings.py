"""Settings management using Pydantic for type validation and configuration."""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..drivers import available_strategies
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class OledSettings(BaseSettings):
    """Display configuration loaded from keyword arguments, environment or YAML.

    Environment variables use the ``OLED_`` prefix, e.g. ``OLED_DRIVER=SH1106``.
    """

    # Panel
    driver: str = Field(default="SSD1306", description="Controller: SSD1306 or SH1106")
    width: int = Field(default=128, description="Panel width in pixels")
    height: int = Field(default=64, description="Panel height in pixels")

    # Bus
    address: int = Field(default=0x3C, description="7-bit I2C device address")
    bus: int = Field(default=1, description="I2C bus number (/dev/i2c-N)")

    # Text layout
    line_spacing: int = Field(default=1, description="Extra pixels between text lines")
    letter_spacing: int = Field(default=1, description="Extra pixels between glyphs")

    # Busy handshake
    busy_bit: Optional[int] = Field(default=None, description="Status busy bit (default per controller)")
    busy_max_retries: int = Field(default=1000, description="Status reads before giving up")
    busy_timeout: float = Field(default=1.0, description="Busy-poll timeout in seconds")
    busy_poll_interval: float = Field(default=0.0, description="Delay between busy polls in seconds")

    log_level: str = Field(default="INFO", description="Log level for the oledbus logger tree")

    model_config = SettingsConfigDict(
        env_prefix="OLED_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("driver")
    @classmethod
    def validate_driver(cls, v: str) -> str:
        name = v.strip().upper()
        available = available_strategies()
        if name not in available:
            raise ValueError(f"driver must be one of {', '.join(available)}")
        return name

    @field_validator("width")
    @classmethod
    def validate_width(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("width must be positive")
        return v

    @field_validator("height")
    @classmethod
    def validate_height(cls, v: int) -> int:
        if v <= 0 or v % 8:
            raise ValueError("height must be a positive multiple of 8")
        return v

    @field_validator("address")
    @classmethod
    def validate_address(cls, v: int) -> int:
        if not 0x03 <= v <= 0x77:
            raise ValueError("address must be a 7-bit I2C address (0x03..0x77)")
        return v

    @field_validator("busy_bit")
    @classmethod
    def validate_busy_bit(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 0 <= v <= 7:
            raise ValueError("busy_bit must be within 0..7")
        return v

    @field_validator("busy_max_retries")
    @classmethod
    def validate_busy_max_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("busy_max_retries must not be negative")
        return v

    @field_validator("busy_timeout", "busy_poll_interval")
    @classmethod
    def validate_non_negative_seconds(cls, v: float) -> float:
        if v < 0:
            raise ValueError("durations must not be negative")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @classmethod
    def from_yaml(cls, path: Union[str, Path], **overrides: Any) -> "OledSettings":
        """Load settings from a YAML file.

        The file may hold the keys at top level or under an ``oled:`` section.
        Keyword overrides take precedence over file values.

        Args:
            path: Path to the YAML file
            **overrides: Explicit field values

        Returns:
            OledSettings instance

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file is not a YAML mapping
        """
        config_path = Path(path)
        with config_path.open() as f:
            try:
                config_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_path}", details={"error": str(e)}) from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Expected a mapping in {config_path}")

        section = config_data.get("oled", config_data)
        if not isinstance(section, dict):
            raise ConfigurationError(f"Expected a mapping under 'oled' in {config_path}")

        values = {**section, **overrides}
        logger.debug(f"Loaded display settings from {config_path}: {sorted(values)}")
        return cls(**values)


# Global settings management
_settings_instance: Optional[OledSettings] = None


def get_settings() -> OledSettings:
    """Get the process-wide settings instance, creating it lazily from the environment."""
    if globals()["_settings_instance"] is None:
        globals()["_settings_instance"] = OledSettings()
    return globals()["_settings_instance"]


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None
