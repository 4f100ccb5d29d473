"""Bit-packed monochrome framebuffer in controller page layout."""

import logging
from typing import Any

from .colors import Color, to_color
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PAGE_HEIGHT = 8


class FrameBuffer:
    """Canvas of ``width * height / 8`` bytes, one byte per column per page.

    Pixel (x, y) lives in page ``y // 8`` at bit ``y % 8`` of byte
    ``x + width * page``. Out-of-range coordinates are ignored.
    """

    def __init__(self, width: int, height: int, fill: int = 0x00) -> None:
        """Initialize the framebuffer.

        Args:
            width: Width in pixels
            height: Height in pixels, a multiple of 8
            fill: Initial value of every byte

        Raises:
            ConfigurationError: If the dimensions cannot form whole pages
        """
        if width <= 0 or height <= 0 or height % PAGE_HEIGHT:
            raise ConfigurationError(
                "Framebuffer height must be a positive multiple of 8",
                width=width,
                height=height,
            )

        self.width = width
        self.height = height
        self.pages = height // PAGE_HEIGHT
        self._buffer = bytearray([fill & 0xFF]) * (width * self.pages)

    def __len__(self) -> int:
        return len(self._buffer)

    def __repr__(self) -> str:
        return f"FrameBuffer(width={self.width}, height={self.height}, bytes={len(self._buffer)})"

    def in_bounds(self, x: int, y: int) -> bool:
        """Check whether (x, y) is on the canvas."""
        return 0 <= x < self.width and 0 <= y < self.height

    def index_of(self, x: int, y: int) -> int:
        """Return the byte index holding pixel (x, y); caller checks bounds."""
        return x + self.width * (y // PAGE_HEIGHT)

    def set_pixel(self, x: int, y: int, color: Any) -> bool:
        """Set or clear one pixel.

        Args:
            x: Column
            y: Row
            color: Color or any truthy/falsy value

        Returns:
            True if the backing byte changed
        """
        if not self.in_bounds(x, y):
            return False

        idx = x + self.width * (y // PAGE_HEIGHT)
        mask = 1 << (y & 0x07)
        old = self._buffer[idx]
        if to_color(color) is Color.ON:
            new = old | mask
        else:
            new = old & ~mask & 0xFF
        if new == old:
            return False
        self._buffer[idx] = new
        return True

    def get_pixel(self, x: int, y: int) -> bool:
        """Return True if pixel (x, y) is on; off-canvas pixels read as off."""
        if not self.in_bounds(x, y):
            return False
        return bool(self._buffer[self.index_of(x, y)] & (1 << (y & 0x07)))

    def get_byte(self, index: int) -> int:
        return self._buffer[index]

    def set_byte(self, index: int, value: int) -> bool:
        """Overwrite a whole byte; returns True if it changed."""
        value &= 0xFF
        if self._buffer[index] == value:
            return False
        self._buffer[index] = value
        return True

    def clear(self, value: Any = Color.OFF) -> list[int]:
        """Set every pixel to ``value``.

        Args:
            value: Color to fill with

        Returns:
            Indices of the bytes that changed
        """
        fill = 0xFF if to_color(value) is Color.ON else 0x00
        changed = [i for i, byte in enumerate(self._buffer) if byte != fill]
        self._buffer[:] = bytes([fill]) * len(self._buffer)
        logger.debug(f"Framebuffer cleared to 0x{fill:02x}, {len(changed)} bytes changed")
        return changed

    def page(self, page: int) -> bytes:
        """Return a copy of one page row."""
        start = page * self.width
        return bytes(self._buffer[start : start + self.width])

    def raw(self) -> bytes:
        """Return a snapshot of the whole buffer for full-frame transfers."""
        return bytes(self._buffer)
