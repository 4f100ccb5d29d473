"""Drawing primitives over a FrameBuffer and its DirtyTracker.

Every primitive writes through the framebuffer and marks only the bytes that
actually changed. Nothing here touches the bus; flushing is the display's job.
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .colors import Color, to_color
from .dirty_tracker import DirtyTracker
from .fonts import Font
from .framebuffer import PAGE_HEIGHT, FrameBuffer
from .images import RGBAImage

logger = logging.getLogger(__name__)


@dataclass
class Cursor:
    """Text insertion point."""

    x: int = 0
    y: int = 0


class DrawingEngine:
    """Pixel, line, rectangle, text and image algorithms on packed bits."""

    def __init__(
        self,
        framebuffer: FrameBuffer,
        tracker: DirtyTracker,
        line_spacing: int = 1,
        letter_spacing: int = 1,
    ) -> None:
        """Initialize the drawing engine.

        Args:
            framebuffer: Canvas to draw on
            tracker: Dirty tracker fed with changed byte indices
            line_spacing: Extra pixels between text lines
            letter_spacing: Extra pixels between glyphs
        """
        self.framebuffer = framebuffer
        self.tracker = tracker
        self.line_spacing = line_spacing
        self.letter_spacing = letter_spacing
        self.cursor = Cursor()

    @property
    def width(self) -> int:
        return self.framebuffer.width

    @property
    def height(self) -> int:
        return self.framebuffer.height

    def set_cursor(self, x: int, y: int) -> None:
        self.cursor.x = x
        self.cursor.y = y

    def pixel(self, x: int, y: int, color: Any) -> bool:
        """Draw one pixel; returns True if the framebuffer changed."""
        if not self.framebuffer.set_pixel(x, y, color):
            return False
        self.tracker.mark(self.framebuffer.index_of(x, y))
        return True

    def pixels(self, points: Iterable[Sequence[Any]]) -> None:
        """Draw a batch of (x, y, color) triples."""
        for x, y, color in points:
            self.pixel(x, y, color)

    def page_segment(self, page: int, seg: int, byte: int) -> bool:
        """Overwrite one framebuffer byte (8 vertical pixels) directly.

        Args:
            page: Page (row of 8 pixels)
            seg: Column within the page
            byte: New byte value, LSB at the top

        Returns:
            True if the byte changed; out-of-range page or column is a no-op
        """
        if not (0 <= page < self.framebuffer.pages and 0 <= seg < self.width):
            return False
        index = seg + page * self.width
        if not self.framebuffer.set_byte(index, byte):
            return False
        self.tracker.mark(index)
        return True

    def line(self, x0: int, y0: int, x1: int, y1: int, color: Any) -> None:
        """Draw a line with the symmetric integer Bresenham algorithm."""
        color = to_color(color)
        dx = abs(x1 - x0)
        sx = 1 if x0 < x1 else -1
        dy = abs(y1 - y0)
        sy = 1 if y0 < y1 else -1
        err = (dx if dx > dy else -dy) / 2

        while True:
            self.pixel(x0, y0, color)
            if x0 == x1 and y0 == y1:
                break
            e2 = err
            if e2 > -dx:
                err -= dy
                x0 += sx
            if e2 < dy:
                err += dx
                y0 += sy

    def fill_rect(self, x: int, y: int, w: int, h: int, color: Any) -> None:
        """Fill a rectangle as ``w`` vertical lines of height ``h``."""
        if w <= 0 or h <= 0:
            return
        color = to_color(color)
        for col in range(x, x + w):
            self.line(col, y, col, y + h - 1, color)

    def write_string(
        self,
        font: Font,
        size: int,
        text: str,
        color: Any = Color.ON,
        wrap: bool = True,
    ) -> None:
        """Render text at the cursor, advancing it glyph by glyph.

        Set glyph bits take ``color`` and clear bits the opposite color, so a
        glyph always paints its full cell. Words wrap when the next word does
        not fit, letters wrap when fewer than one glyph of width remains and a
        newline character always starts a new line.

        Args:
            font: Glyph source
            size: Integer scale factor, 1 draws single pixels
            text: Text to render
            color: Foreground color
            wrap: Enable word and letter wrapping
        """
        foreground = to_color(color)
        background = foreground.inverted()
        line_height = font.height * size + self.line_spacing
        advance = font.width * size + self.letter_spacing

        words = text.split(" ")
        word_count = len(words)
        offset = self.cursor.x

        for w, word in enumerate(words):
            # Keep the separating space except after the last word
            if w < word_count - 1 or not word:
                word += " "
            word_width = font.width * size * len(word) + size * (word_count - 1)

            if wrap and word_count > 1 and w > 0 and offset >= self.width - word_width:
                offset = 0
                self.set_cursor(offset, self.cursor.y + line_height)

            for char in word:
                if char == "\n":
                    offset = 0
                    self.set_cursor(offset, self.cursor.y + line_height)
                    continue

                self._draw_glyph(font.glyph_bits(char), size, foreground, background)
                offset += advance

                if wrap and offset >= self.width - font.width - self.letter_spacing:
                    offset = 0
                    self.cursor.y += line_height
                self.set_cursor(offset, self.cursor.y)

    def _draw_glyph(
        self, columns: list[list[int]], size: int, foreground: Color, background: Color
    ) -> None:
        x = self.cursor.x
        y = self.cursor.y
        for i, bits in enumerate(columns):
            for j, bit in enumerate(bits):
                color = foreground if bit else background
                if size == 1:
                    self.pixel(x + i, y + j, color)
                else:
                    self.fill_rect(x + i * size, y + j * size, size, size, color)

    def draw_rgba_image(self, image: RGBAImage, dx: int, dy: int) -> None:
        """Composite an RGBA image with its top-left corner at (dx, dy).

        Fully transparent pixels leave the destination untouched; any other
        pixel is on when one of its color channels is nonzero. Each destination
        byte is accumulated across its page rows and written back once.

        Args:
            image: Image source
            dx: Destination column of the image's left edge
            dy: Destination row of the image's top edge
        """
        fb = self.framebuffer
        data = image.data
        changed: set[int] = set()

        for x in range(image.width):
            dxx = dx + x
            if dxx < 0 or dxx >= fb.width:
                continue

            buff_index = -1
            buff_byte = 0
            for y in range(image.height):
                dyy = dy + y
                if dyy < 0 or dyy >= fb.height:
                    continue

                index = dxx + fb.width * (dyy // PAGE_HEIGHT)
                if index != buff_index:
                    if buff_index >= 0 and fb.set_byte(buff_index, buff_byte):
                        changed.add(buff_index)
                    buff_index = index
                    buff_byte = fb.get_byte(index)

                offset = (image.width * y + x) << 2
                if not data[offset + 3]:
                    continue

                mask = 1 << (dyy & 0x07)
                if data[offset] | data[offset + 1] | data[offset + 2]:
                    buff_byte |= mask
                else:
                    buff_byte &= ~mask & 0xFF

            if buff_index >= 0 and fb.set_byte(buff_index, buff_byte):
                changed.add(buff_index)

        self.tracker.mark_many(changed)
        logger.debug(f"Composited {image.width}x{image.height} image at ({dx}, {dy}), {len(changed)} bytes changed")

    def draw_bitmap(self, pixels: Sequence[Any]) -> None:
        """Draw a flat row-major pixel sequence covering the canvas."""
        width = self.width
        for i, value in enumerate(pixels):
            self.pixel(i % width, i // width, value)
