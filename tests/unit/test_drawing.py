"""Tests for the drawing primitives."""

import pytest

from oledbus.colors import Color
from oledbus.drawing import DrawingEngine
from oledbus.fonts import Font
from oledbus.images import RGBAImage


def lit_pixels(engine: DrawingEngine) -> set[tuple[int, int]]:
    fb = engine.framebuffer
    return {(x, y) for x in range(fb.width) for y in range(fb.height) if fb.get_pixel(x, y)}


def rgba(width: int, height: int, pixels: list[tuple[int, int, int, int]]) -> RGBAImage:
    return RGBAImage(width, height, bytes(channel for pixel in pixels for channel in pixel))


class TestPixel:
    """Test cases for single pixels and dirty marking."""

    def test_pixel_when_changed_then_marks_byte(self, engine: DrawingEngine) -> None:
        """Test a changed pixel marks exactly its byte."""
        assert engine.pixel(10, 9, Color.ON) is True
        assert engine.tracker.pending() == frozenset({138})

    def test_pixel_when_unchanged_then_not_marked(self, engine: DrawingEngine) -> None:
        """Test writing an already-off pixel does not mark anything."""
        assert engine.pixel(10, 9, Color.OFF) is False
        assert len(engine.tracker) == 0

    def test_page_segment_when_out_of_range_then_ignored(self, engine: DrawingEngine) -> None:
        """Test raw byte writes clip like pixels."""
        assert engine.page_segment(8, 0, 0xFF) is False
        assert engine.page_segment(0, 128, 0xFF) is False
        assert engine.page_segment(1, 4, 0x81) is True
        assert engine.framebuffer.get_byte(132) == 0x81
        assert engine.tracker.pending() == frozenset({132})


class TestLine:
    """Test cases for Bresenham lines."""

    def test_line_when_diagonal_then_exact_pixels(self, engine: DrawingEngine) -> None:
        """Test the 45 degree diagonal has no extra pixels."""
        engine.line(0, 0, 5, 5, Color.ON)
        assert lit_pixels(engine) == {(i, i) for i in range(6)}

    def test_line_when_shallow_slope_then_symmetric_tie_break(self, engine: DrawingEngine) -> None:
        """Test the step order of the symmetric algorithm."""
        engine.line(0, 0, 4, 1, Color.ON)
        assert lit_pixels(engine) == {(0, 0), (1, 0), (2, 0), (3, 1), (4, 1)}

    def test_line_when_reversed_then_draws_same_vertical(self, engine: DrawingEngine) -> None:
        """Test vertical lines in both directions."""
        engine.line(3, 7, 3, 2, Color.ON)
        assert lit_pixels(engine) == {(3, y) for y in range(2, 8)}

    def test_line_when_partly_off_canvas_then_clipped(self, engine: DrawingEngine) -> None:
        """Test off-canvas points are skipped without error."""
        engine.line(-3, 0, 2, 0, Color.ON)
        assert lit_pixels(engine) == {(0, 0), (1, 0), (2, 0)}


class TestFillRect:
    """Test cases for rectangle fills."""

    def test_fill_rect_when_called_then_fills_exact_area(self, engine: DrawingEngine) -> None:
        """Test fillRect(2, 2, 3, 4) covers 2<=x<5, 2<=y<6."""
        engine.fill_rect(2, 2, 3, 4, Color.ON)
        assert lit_pixels(engine) == {(x, y) for x in range(2, 5) for y in range(2, 6)}

    def test_fill_rect_when_empty_size_then_draws_nothing(self, engine: DrawingEngine) -> None:
        """Test zero width or height draws nothing."""
        engine.fill_rect(2, 2, 0, 4, Color.ON)
        engine.fill_rect(2, 2, 4, 0, Color.ON)
        assert lit_pixels(engine) == set()


class TestWriteString:
    """Test cases for text layout."""

    def test_write_string_when_single_glyph_then_draws_and_advances(
        self, engine: DrawingEngine, block_font: Font
    ) -> None:
        """Test a glyph paints its cell and moves the cursor."""
        # Arrange
        engine.set_cursor(4, 8)

        # Act
        engine.write_string(block_font, 1, "A")

        # Assert
        assert lit_pixels(engine) == {(x, y) for x in range(4, 9) for y in range(8, 15)}
        assert (engine.cursor.x, engine.cursor.y) == (10, 8)

    def test_write_string_when_too_long_then_wraps_letters(self, engine: DrawingEngine, block_font: Font) -> None:
        """Test letter wrap advances one line and stays inside width - glyph width."""
        # Act
        engine.write_string(block_font, 1, "A" * 40)

        # Assert
        # 21 glyphs fit on the first line (x = 0..120), 19 on the second
        assert (engine.cursor.x, engine.cursor.y) == (114, 8)
        assert engine.framebuffer.get_pixel(120, 0) is True
        assert engine.framebuffer.get_pixel(0, 8) is True
        assert all(not engine.framebuffer.get_pixel(x, y) for x in range(125, 128) for y in range(64))

    def test_write_string_when_word_does_not_fit_then_wraps_word(
        self, engine: DrawingEngine, block_font: Font
    ) -> None:
        """Test a word moves to the next line as a whole."""
        # Act
        engine.write_string(block_font, 1, "A" * 16 + " BBBBBB")

        # Assert
        assert engine.framebuffer.get_pixel(0, 8) is True  # first B, top rail
        assert engine.framebuffer.get_pixel(102, 0) is False
        assert (engine.cursor.x, engine.cursor.y) == (36, 8)

    def test_write_string_when_wrap_disabled_then_stays_on_line(
        self, engine: DrawingEngine, block_font: Font
    ) -> None:
        """Test no wrapping and clipping at the right edge."""
        engine.write_string(block_font, 1, "A" * 30, wrap=False)
        assert engine.cursor.y == 0
        assert engine.cursor.x == 180
        assert engine.framebuffer.get_pixel(0, 8) is False

    def test_write_string_when_newline_then_breaks_line(self, engine: DrawingEngine, block_font: Font) -> None:
        """Test a newline always starts a new line."""
        engine.write_string(block_font, 1, "A\nA", wrap=False)
        assert engine.framebuffer.get_pixel(0, 8) is True
        assert (engine.cursor.x, engine.cursor.y) == (6, 8)

    def test_write_string_when_glyph_missing_then_advances_without_drawing(
        self, engine: DrawingEngine, block_font: Font
    ) -> None:
        """Test unknown characters leave a gap."""
        engine.write_string(block_font, 1, "ZA")
        assert engine.framebuffer.get_pixel(0, 0) is False
        assert engine.framebuffer.get_pixel(6, 0) is True

    def test_write_string_when_size_two_then_scales_blocks(self, engine: DrawingEngine, block_font: Font) -> None:
        """Test scaled glyphs fill size x size blocks."""
        engine.write_string(block_font, 2, "A")
        assert lit_pixels(engine) == {(x, y) for x in range(10) for y in range(14)}
        assert engine.cursor.x == 11

    def test_write_string_when_color_off_then_inverts_glyph(self, engine: DrawingEngine, block_font: Font) -> None:
        """Test set glyph bits take the color and clear bits its inverse."""
        # Arrange
        engine.fill_rect(0, 0, 5, 8, Color.ON)

        # Act
        engine.write_string(block_font, 1, "B", color=Color.OFF)

        # Assert
        assert engine.framebuffer.get_pixel(0, 0) is False
        assert engine.framebuffer.get_pixel(0, 6) is False
        assert engine.framebuffer.get_pixel(0, 3) is True


class TestDrawRGBAImage:
    """Test cases for RGBA compositing."""

    def test_draw_rgba_image_when_transparent_then_destination_unchanged(self, engine: DrawingEngine) -> None:
        """Test alpha 0 keeps both on and off destination pixels."""
        # Arrange
        engine.pixel(1, 1, Color.ON)
        engine.tracker.clear()
        before = engine.framebuffer.raw()
        image = rgba(3, 3, [(255, 255, 255, 0), (0, 0, 0, 0), (10, 20, 30, 0)] * 3)

        # Act
        engine.draw_rgba_image(image, 0, 0)

        # Assert
        assert engine.framebuffer.raw() == before
        assert len(engine.tracker) == 0

    def test_draw_rgba_image_when_opaque_then_on_iff_any_channel(self, engine: DrawingEngine) -> None:
        """Test opaque pixels are on when any color channel is nonzero."""
        # Arrange
        engine.fill_rect(0, 0, 4, 1, Color.ON)
        image = rgba(4, 1, [(0, 0, 0, 255), (0, 1, 0, 255), (0, 0, 0, 1), (0, 0, 9, 128)])

        # Act
        engine.draw_rgba_image(image, 0, 0)

        # Assert
        assert [engine.framebuffer.get_pixel(x, 0) for x in range(4)] == [False, True, False, True]

    def test_draw_rgba_image_when_crossing_pages_then_marks_each_byte_once(self, engine: DrawingEngine) -> None:
        """Test a column spanning two pages writes back two bytes."""
        image = rgba(1, 10, [(255, 255, 255, 255)] * 10)

        engine.draw_rgba_image(image, 5, 4)

        assert engine.tracker.pending() == frozenset({5, 133})
        assert engine.framebuffer.get_byte(5) == 0xF0
        assert engine.framebuffer.get_byte(133) == 0x3F

    def test_draw_rgba_image_when_partly_off_canvas_then_clipped(self, engine: DrawingEngine) -> None:
        """Test off-canvas image pixels are skipped."""
        image = rgba(2, 2, [(255, 255, 255, 255)] * 4)
        engine.draw_rgba_image(image, 127, -1)
        assert lit_pixels(engine) == {(127, 0)}


class TestDrawBitmap:
    """Test cases for row-major bitmaps."""

    def test_draw_bitmap_when_called_then_maps_row_major(self, engine: DrawingEngine) -> None:
        """Test index i maps to (i % W, i // W)."""
        pixels = [0] * (128 * 64)
        pixels[1] = 1
        pixels[128 * 9 + 3] = True

        engine.draw_bitmap(pixels)

        assert lit_pixels(engine) == {(1, 0), (3, 9)}

    @pytest.mark.parametrize("value", [0, False])
    def test_draw_bitmap_when_all_off_then_nothing_marked(self, engine: DrawingEngine, value: object) -> None:
        engine.draw_bitmap([value] * 256)
        assert len(engine.tracker) == 0
