"""Asynchronous driver core for SSD1306 and SH1106 monochrome OLED panels.

Core components:
- FrameBuffer: bit-packed canvas in controller page layout
- DirtyTracker: coalesces changed bytes into minimal bus writes
- DrawingEngine: pixel, line, rectangle, text and image primitives
- ControllerProtocol: per-controller command and addressing encoder
- TransportAdapter: control-byte framing and busy polling over a byte bus
- Display: the session tying them together
"""

from .capabilities import DisplayCapabilities
from .colors import Color, to_color
from .dirty_tracker import FULL_UPDATE_RATIO, DirtyTracker, PageRange, WritePlan
from .display import Display, DisplayState
from .drawing import Cursor, DrawingEngine
from .drivers import ControllerProtocol, ScrollArea, ScrollDirection
from .drivers.transport import MockBus, SMBusBus, TransportAdapter
from .exceptions import (
    BusyTimeoutError,
    ConfigurationError,
    DisplayStateError,
    OledError,
    TransportError,
    UnsupportedOperationError,
)
from .fonts import Font
from .framebuffer import FrameBuffer
from .images import RGBAImage, load_rgba_image

__version__ = "1.0.0"

__all__ = [
    "FULL_UPDATE_RATIO",
    "BusyTimeoutError",
    "Color",
    "ConfigurationError",
    "ControllerProtocol",
    "Cursor",
    "DirtyTracker",
    "Display",
    "DisplayCapabilities",
    "DisplayState",
    "DisplayStateError",
    "DrawingEngine",
    "Font",
    "FrameBuffer",
    "MockBus",
    "OledError",
    "PageRange",
    "RGBAImage",
    "SMBusBus",
    "ScrollArea",
    "ScrollDirection",
    "TransportAdapter",
    "TransportError",
    "UnsupportedOperationError",
    "WritePlan",
    "load_rgba_image",
    "to_color",
]
