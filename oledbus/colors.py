"""
Monochrome color model for OLED framebuffers.

Pixels are one bit each. Callers may hand in integers, booleans or the
strings used by common OLED libraries ("BLACK"/"WHITE"); they are converted
once at the API edge and the drawing core only ever sees ``Color``.
"""

from enum import IntEnum
from typing import Any, Union

ColorLike = Union["Color", bool, int, str, None]

# String aliases accepted at the API boundary
_OFF_NAMES = frozenset({"", "0", "BLACK", "OFF", "FALSE"})
_ON_NAMES = frozenset({"1", "WHITE", "ON", "TRUE"})


class Color(IntEnum):
    """Pixel state: OFF clears the bit, ON sets it."""

    OFF = 0
    ON = 1

    def inverted(self) -> "Color":
        """Return the opposite color."""
        return Color.ON if self is Color.OFF else Color.OFF


def to_color(value: Any) -> Color:
    """Convert an external color value into a ``Color``.

    Args:
        value: Color, bool, integer code or color name

    Returns:
        Color.OFF for falsy values and "BLACK"/"OFF", Color.ON otherwise
    """
    if isinstance(value, Color):
        return value
    if isinstance(value, str):
        name = value.strip().upper()
        if name in _OFF_NAMES:
            return Color.OFF
        if name in _ON_NAMES:
            return Color.ON
        # Any other non-empty name is truthy
        return Color.ON
    return Color.ON if value else Color.OFF
