"""Controller strategies for SSD1306 and SH1106 panels.

Importing this package registers both strategies.
"""

from . import sh1106, ssd1306
from .controller import (
    ControllerConfig,
    ControllerKind,
    ControllerProtocol,
    ControllerStrategy,
    ScrollArea,
    ScrollDirection,
    available_strategies,
    get_strategy,
    register_strategy,
)

SSD1306 = ssd1306.SSD1306
SH1106 = sh1106.SH1106

__all__ = [
    "SH1106",
    "SSD1306",
    "ControllerConfig",
    "ControllerKind",
    "ControllerProtocol",
    "ControllerStrategy",
    "ScrollArea",
    "ScrollDirection",
    "available_strategies",
    "get_strategy",
    "register_strategy",
]
