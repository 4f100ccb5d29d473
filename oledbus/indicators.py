"""Status icons drawn from lines and rectangles.

Each function only draws into the engine; the display decides when to flush.
Signal levels use the thresholds 70, 40 and 10 percent for three, two and one
lit bars.
"""

from .colors import Color
from .drawing import DrawingEngine


def level_bars(percentage: float) -> int:
    """Number of lit bars (0..3) for a percentage."""
    if percentage >= 70:
        return 3
    if percentage >= 40:
        return 2
    if percentage >= 10:
        return 1
    return 0


def _bar_color(index: int, lit: int) -> Color:
    return Color.ON if index < lit else Color.OFF


def battery(engine: DrawingEngine, x: int, y: int, percentage: float) -> None:
    """Draw a 19x9 battery with up to three charge bars."""
    engine.line(x, y, x + 16, y, Color.ON)
    engine.line(x, y + 8, x + 16, y + 8, Color.ON)
    engine.line(x, y, x, y + 8, Color.ON)
    engine.pixels([(x + 17, y + 1, Color.ON), (x + 17, y + 7, Color.ON)])
    engine.line(x + 18, y + 1, x + 18, y + 7, Color.ON)

    lit = level_bars(percentage)
    for i, bar_x in enumerate((x + 2, x + 7, x + 12)):
        engine.fill_rect(bar_x, y + 2, 3, 5, _bar_color(i, lit))


def bluetooth(engine: DrawingEngine, x: int, y: int) -> None:
    """Draw the bluetooth rune."""
    engine.line(x + 5, y + 1, x + 5, y + 11, Color.ON)
    engine.line(x + 2, y + 3, x + 9, y + 8, Color.ON)
    engine.line(x + 2, y + 9, x + 8, y + 3, Color.ON)
    engine.line(x + 5, y + 1, x + 9, y + 3, Color.ON)
    engine.line(x + 5, y + 11, x + 8, y + 9, Color.ON)


def wifi(engine: DrawingEngine, x: int, y: int, percentage: float) -> None:
    """Draw an antenna with up to three signal bars of rising height."""
    engine.line(x, y, x + 8, y, Color.ON)
    engine.line(x, y, x + 4, y + 4, Color.ON)
    engine.line(x + 8, y, x + 4, y + 4, Color.ON)
    engine.line(x + 4, y, x + 4, y + 9, Color.ON)

    lit = level_bars(percentage)
    bars = ((x + 6, y + 8, 2, 2), (x + 10, y + 6, 2, 4), (x + 14, y + 4, 2, 6))
    for i, (bar_x, bar_y, w, h) in enumerate(bars):
        engine.fill_rect(bar_x, bar_y, w, h, _bar_color(i, lit))
