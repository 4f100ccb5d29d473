"""Shared fixtures: in-memory bus, small fonts and panel emulators."""

from collections.abc import Iterator

import pytest

from oledbus.dirty_tracker import DirtyTracker
from oledbus.display import Display
from oledbus.drawing import DrawingEngine
from oledbus.drivers.transport.mock_bus import MockBus
from oledbus.fonts import Font
from oledbus.framebuffer import FrameBuffer

# 5x7 test font: "A" is a solid block, "B" has only rows 0 and 6 set
BLOCK = [0x7F] * 5
RAILS = [0x41] * 5
BLANK = [0x00] * 5
DOT = [0x40, 0x00, 0x00, 0x00, 0x00]


@pytest.fixture
def block_font() -> Font:
    """Fixed-width 5x7 font with four glyphs."""
    return Font(width=5, height=7, lookup="AB .", font_data=BLOCK + RAILS + BLANK + DOT)


@pytest.fixture
def mock_bus() -> MockBus:
    """Bus that records frames and reports the device idle."""
    return MockBus()


@pytest.fixture
def engine() -> DrawingEngine:
    """Drawing engine over a blank 128x64 framebuffer."""
    framebuffer = FrameBuffer(128, 64)
    return DrawingEngine(framebuffer, DirtyTracker(128, len(framebuffer)))


@pytest.fixture
def ssd1306_display(mock_bus: MockBus) -> Iterator[Display]:
    """Uninitialized 128x64 SSD1306 display on the mock bus."""
    display = Display(mock_bus, driver="SSD1306", width=128, height=64)
    yield display
    display.transport.close()


@pytest.fixture
def sh1106_display(mock_bus: MockBus) -> Iterator[Display]:
    """Uninitialized 128x64 SH1106 display on the mock bus."""
    display = Display(mock_bus, driver="SH1106", width=128, height=64)
    yield display
    display.transport.close()


class ColumnAddressedPanel:
    """Minimal SSD1306 RAM model fed with recorded bus frames."""

    def __init__(self, width: int = 128, height: int = 64) -> None:
        self.width = width
        self.pages = height // 8
        self.ram = bytearray(width * self.pages)
        self.col_start, self.col_end = 0, width - 1
        self.page_start, self.page_end = 0, self.pages - 1

    def feed(self, frames: list[bytes]) -> None:
        for frame in frames:
            if frame[0] == 0x40:
                self._write(frame[1:])
            else:
                self._command(frame[1::2])

    def _command(self, payload: bytes) -> None:
        i = 0
        while i < len(payload):
            if payload[i] == 0x21:
                self.col_start, self.col_end = payload[i + 1], payload[i + 2]
                i += 3
            elif payload[i] == 0x22:
                self.page_start, self.page_end = payload[i + 1], payload[i + 2]
                i += 3
            else:
                i += 1

    def _write(self, data: bytes) -> None:
        col, page = self.col_start, self.page_start
        for byte in data:
            self.ram[col + page * self.width] = byte
            col += 1
            if col > self.col_end:
                col = self.col_start
                page = self.page_start if page >= self.page_end else page + 1


class PageAddressedPanel:
    """Minimal SH1106 RAM model fed with recorded bus frames."""

    def __init__(self, width: int = 128, height: int = 64, column_offset: int = 2) -> None:
        self.width = width
        self.ram = bytearray(width * (height // 8))
        self.column_offset = column_offset
        self.page = 0
        self.col = 0

    def feed(self, frames: list[bytes]) -> None:
        for frame in frames:
            payload = frame[1::2]
            if frame[0] == 0x40:
                for byte in payload:
                    self.ram[self.col - self.column_offset + self.page * self.width] = byte
                    self.col += 1
            else:
                page_cmd, low, high = payload
                self.page = page_cmd - 0xB0
                self.col = ((high & 0x0F) << 4) | low


@pytest.fixture
def column_panel() -> ColumnAddressedPanel:
    return ColumnAddressedPanel()


@pytest.fixture
def page_panel() -> PageAddressedPanel:
    return PageAddressedPanel()
