"""Display session: framebuffer, drawing, controller protocol and transport.

A ``Display`` owns one framebuffer and dirty tracker, encodes flushes through
the controller strategy chosen at construction and serializes every bus
operation behind a single ``asyncio.Lock``.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Union

from PIL import Image

from . import indicators
from .animation import DEFAULT_FRAME_INTERVAL, AnimationHandle, BounceAnimation
from .capabilities import DisplayCapabilities
from .colors import Color
from .dirty_tracker import DirtyTracker, WritePlan
from .drawing import Cursor, DrawingEngine
from .drivers import ControllerProtocol, ControllerStrategy, ScrollArea, ScrollDirection
from .drivers.transport.adapter import DEFAULT_BUSY_MAX_RETRIES, DEFAULT_BUSY_TIMEOUT, Transaction, TransportAdapter
from .drivers.transport.smbus import SMBusBus
from .exceptions import DisplayStateError, OledError
from .fonts import Font
from .framebuffer import FrameBuffer
from .images import RGBAImage, as_rgba_image
from .utils.logging import PACKAGE_LOGGER, set_log_level

if TYPE_CHECKING:
    from .abstraction import Bus
    from .config.settings import OledSettings

logger = logging.getLogger(__name__)

ImageSource = Union[RGBAImage, Image.Image, str, Path]


class DisplayState(str, Enum):
    """Lifecycle of a display session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    OFF = "off"


class Display:
    """One monochrome OLED panel on a byte bus.

    Drawing methods mutate the framebuffer immediately and flush when ``sync``
    is set. While the panel is powered off drawing still works and commands
    are queued; both reach the device on ``power_on``.

    Example:
        >>> async with Display(SMBusBus(1, 0x3C), driver="SH1106") as display:
        ...     await display.draw_line(0, 0, 127, 63)
    """

    def __init__(
        self,
        bus: "Bus",
        driver: Union[str, ControllerStrategy] = "SSD1306",
        width: int = 128,
        height: int = 64,
        line_spacing: int = 1,
        letter_spacing: int = 1,
        busy_bit: Optional[int] = None,
        busy_max_retries: int = DEFAULT_BUSY_MAX_RETRIES,
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
        busy_poll_interval: float = 0.0,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        """Initialize the display session.

        Args:
            bus: Raw byte link to the controller
            driver: Controller name ("SSD1306", "SH1106") or strategy
            width: Panel width in pixels
            height: Panel height in pixels
            line_spacing: Extra pixels between text lines
            letter_spacing: Extra pixels between glyphs
            busy_bit: Status busy bit override (default per controller)
            busy_max_retries: Status reads allowed before a busy timeout
            busy_timeout: Seconds allowed before a busy timeout
            busy_poll_interval: Delay between status reads
            executor: Executor for blocking bus calls

        Raises:
            ConfigurationError: If the controller or panel size is unsupported
        """
        try:
            self.protocol = ControllerProtocol.for_display(driver, width, height, busy_bit)
        except OledError as e:
            logger.error(f"Failed to configure display: {e}")
            raise

        self.framebuffer = FrameBuffer(width, height)
        self.tracker = DirtyTracker(width, len(self.framebuffer))
        self.drawing = DrawingEngine(self.framebuffer, self.tracker, line_spacing, letter_spacing)
        self.transport = TransportAdapter(bus, executor)

        self.busy_max_retries = busy_max_retries
        self.busy_timeout = busy_timeout
        self.busy_poll_interval = busy_poll_interval

        self.state = DisplayState.UNINITIALIZED
        self._lock = asyncio.Lock()
        self._deferred: list[Transaction] = []
        self._animation: Optional[AnimationHandle] = None
        self._animation_lock = asyncio.Lock()

        logger.info(
            f"Configured {self.protocol.name} ({self.protocol.kind.value}) display with dimensions {width}x{height}"
        )

    @classmethod
    def from_settings(cls, settings: "OledSettings", bus: Optional["Bus"] = None) -> "Display":
        """Build a display from settings, opening the I2C bus when none is given.

        The settings log level is applied to the package logger.
        """
        set_log_level(logging.getLogger(PACKAGE_LOGGER), settings.log_level)
        if bus is None:
            bus = SMBusBus(settings.bus, settings.address)
        return cls(
            bus,
            driver=settings.driver,
            width=settings.width,
            height=settings.height,
            line_spacing=settings.line_spacing,
            letter_spacing=settings.letter_spacing,
            busy_bit=settings.busy_bit,
            busy_max_retries=settings.busy_max_retries,
            busy_timeout=settings.busy_timeout,
            busy_poll_interval=settings.busy_poll_interval,
        )

    @property
    def width(self) -> int:
        return self.framebuffer.width

    @property
    def height(self) -> int:
        return self.framebuffer.height

    @property
    def cursor(self) -> Cursor:
        return self.drawing.cursor

    @property
    def supports_scroll(self) -> bool:
        return self.protocol.supports_scroll

    @property
    def is_ready(self) -> bool:
        return self.state is DisplayState.READY

    @property
    def animation(self) -> Optional[AnimationHandle]:
        return self._animation

    def get_capabilities(self) -> DisplayCapabilities:
        return DisplayCapabilities(
            width=self.width,
            height=self.height,
            controller=self.protocol.name,
            supports_scroll=self.supports_scroll,
            supports_partial_update=True,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Send the controller init sequence; a no-op once initialized.

        Raises:
            TransportError: If the bus write fails; the display stays uninitialized
        """
        if self.state in (DisplayState.READY, DisplayState.OFF):
            logger.debug("Display already initialized")
            return

        async with self._lock:
            self.state = DisplayState.INITIALIZING
            try:
                await self.transport.execute(self.protocol.initialize())
            except OledError as e:
                self.state = DisplayState.UNINITIALIZED
                logger.error(f"Error initializing display: {e}")
                raise
            self.state = DisplayState.READY

        logger.info(f"{self.protocol.name} display initialized")

    async def close(self) -> None:
        """Stop any animation and release the bus."""
        await self.stop_animation()
        async with self._lock:
            self.transport.close()
            self.state = DisplayState.UNINITIALIZED
        logger.info("Display closed")

    async def __aenter__(self) -> "Display":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        await self.close()

    def _require_initialized(self, operation: str) -> None:
        if self.state in (DisplayState.UNINITIALIZED, DisplayState.INITIALIZING):
            raise DisplayStateError(
                f"Cannot {operation}: display is {self.state.value}", state=self.state.value
            )

    # ------------------------------------------------------------------
    # Bus traffic (callers hold the lock)
    # ------------------------------------------------------------------

    async def _wait_ready(self) -> None:
        await self.transport.wait_until_ready(
            self.protocol.config.busy_bit,
            max_retries=self.busy_max_retries,
            timeout=self.busy_timeout,
            poll_interval=self.busy_poll_interval,
        )

    async def _transmit(self, plan: WritePlan) -> int:
        if plan.is_empty:
            return 0
        try:
            await self._wait_ready()
            await self.transport.execute(self.protocol.partial_transfer(plan))
        except asyncio.CancelledError:
            self.tracker.restore(plan)
            raise
        except OledError as e:
            self.tracker.restore(plan)
            logger.error(f"Flush failed, {len(plan.indices)} bytes kept dirty: {e}")
            raise
        return plan.byte_count

    async def _command(self, transactions: list[Transaction], operation: str) -> None:
        self._require_initialized(operation)
        async with self._lock:
            if self.state is DisplayState.OFF:
                self._deferred.extend(transactions)
                logger.debug(f"Display off, queued {operation}")
                return
            await self.transport.execute(transactions)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    async def flush(self) -> int:
        """Send the pending dirty bytes to the device.

        Uses coalesced ranges, or one full frame when enough of the buffer is
        dirty. On failure the drained bytes are marked dirty again.

        Returns:
            Number of data bytes sent (0 when nothing was pending or the panel is off)

        Raises:
            DisplayStateError: If the display is not initialized
            TransportError: If the bus fails or the device stays busy
        """
        self._require_initialized("flush")
        async with self._lock:
            if self.state is DisplayState.OFF:
                return 0
            return await self._transmit(self.tracker.drain(self.framebuffer))

    async def update(self) -> None:
        """Send the whole framebuffer regardless of what changed."""
        self._require_initialized("update")
        async with self._lock:
            if self.state is DisplayState.OFF:
                self.tracker.mark_many(range(len(self.framebuffer)))
                return
            plan = WritePlan(full_frame=True, frame=self.framebuffer.raw(), indices=self.tracker.pending())
            self.tracker.clear()
            await self._transmit(plan)

    async def _maybe_flush(self, sync: bool) -> None:
        if sync:
            await self.flush()

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def set_cursor(self, x: int, y: int) -> None:
        self.drawing.set_cursor(x, y)

    async def clear_display(self, sync: bool = False) -> None:
        """Turn every pixel off; with ``sync`` the whole frame is sent."""
        self._require_initialized("clear display")
        self.tracker.mark_many(self.framebuffer.clear())
        if sync:
            await self.update()

    async def draw_pixel(self, x: int, y: int, color: Any = Color.ON, sync: bool = False) -> None:
        self._require_initialized("draw")
        self.drawing.pixel(x, y, color)
        await self._maybe_flush(sync)

    async def draw_pixels(self, points: Iterable[Sequence[Any]], sync: bool = False) -> None:
        """Draw a batch of (x, y, color) triples."""
        self._require_initialized("draw")
        self.drawing.pixels(points)
        await self._maybe_flush(sync)

    async def draw_page_segment(self, page: int, seg: int, byte: int, sync: bool = False) -> None:
        """Overwrite the 8 vertical pixels at one page column."""
        self._require_initialized("draw")
        self.drawing.page_segment(page, seg, byte)
        await self._maybe_flush(sync)

    async def draw_line(
        self, x0: int, y0: int, x1: int, y1: int, color: Any = Color.ON, sync: bool = True
    ) -> None:
        self._require_initialized("draw")
        self.drawing.line(x0, y0, x1, y1, color)
        await self._maybe_flush(sync)

    async def fill_rect(self, x: int, y: int, w: int, h: int, color: Any = Color.ON, sync: bool = True) -> None:
        self._require_initialized("draw")
        self.drawing.fill_rect(x, y, w, h, color)
        await self._maybe_flush(sync)

    async def write_string(
        self,
        font: Font,
        size: int,
        text: str,
        color: Any = Color.ON,
        wrap: bool = True,
        sync: bool = True,
    ) -> None:
        """Render text at the cursor. See ``DrawingEngine.write_string``."""
        self._require_initialized("draw")
        self.drawing.write_string(font, size, text, color, wrap)
        await self._maybe_flush(sync)

    async def draw_rgba_image(self, image: ImageSource, dx: int, dy: int, sync: bool = True) -> None:
        """Composite an image with its top-left corner at (dx, dy)."""
        self._require_initialized("draw")
        self.drawing.draw_rgba_image(as_rgba_image(image), dx, dy)
        await self._maybe_flush(sync)

    async def draw_bitmap(self, pixels: Sequence[Any], sync: bool = False) -> None:
        """Draw a flat row-major pixel sequence covering the panel."""
        self._require_initialized("draw")
        self.drawing.draw_bitmap(pixels)
        await self._maybe_flush(sync)

    # ------------------------------------------------------------------
    # Indicators
    # ------------------------------------------------------------------

    async def battery(self, x: int, y: int, percentage: float, sync: bool = True) -> None:
        self._require_initialized("draw")
        indicators.battery(self.drawing, x, y, percentage)
        await self._maybe_flush(sync)

    async def bluetooth(self, x: int, y: int, sync: bool = True) -> None:
        self._require_initialized("draw")
        indicators.bluetooth(self.drawing, x, y)
        await self._maybe_flush(sync)

    async def wifi(self, x: int, y: int, percentage: float, sync: bool = True) -> None:
        self._require_initialized("draw")
        indicators.wifi(self.drawing, x, y, percentage)
        await self._maybe_flush(sync)

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    async def power_off(self) -> None:
        """Switch the panel off, keeping the framebuffer."""
        self._require_initialized("power off")
        async with self._lock:
            if self.state is DisplayState.OFF:
                return
            await self.transport.execute(self.protocol.power_off())
            self.state = DisplayState.OFF
        logger.info("Display powered off")

    async def power_on(self) -> None:
        """Switch the panel on, replaying queued commands and pending pixels first."""
        self._require_initialized("power on")
        async with self._lock:
            if self.state is DisplayState.OFF:
                if self._deferred:
                    logger.debug(f"Replaying {len(self._deferred)} queued commands")
                # Each command leaves the queue once it reached the bus
                while self._deferred:
                    await self.transport.send(self._deferred[0])
                    self._deferred.pop(0)
                await self._transmit(self.tracker.drain(self.framebuffer))
            await self.transport.execute(self.protocol.power_on())
            was_off = self.state is DisplayState.OFF
            self.state = DisplayState.READY
        if was_off:
            logger.info("Display powered on")

    async def turn_on_display(self) -> None:
        await self.power_on()

    async def turn_off_display(self) -> None:
        await self.power_off()

    async def set_contrast(self, value: int) -> None:
        """Set the contrast level (0..255)."""
        await self._command(self.protocol.set_contrast(value), "set contrast")

    async def dim(self, dimmed: bool) -> None:
        """Drop contrast to the minimum, or restore it to the maximum."""
        await self.set_contrast(0x00 if dimmed else 0xFF)

    async def invert(self, inverted: bool) -> None:
        await self._command(self.protocol.invert(inverted), "invert")

    async def start_scroll(
        self,
        direction: Union[str, ScrollDirection],
        start: int,
        stop: int,
        area: Optional[Union[ScrollArea, tuple[int, int]]] = None,
    ) -> bool:
        """Start hardware scrolling of pages ``start`` through ``stop``.

        Args:
            direction: "right", "left", "left diagonal" or "right diagonal"
            start: First page
            stop: Last page
            area: (top_fixed_rows, scroll_rows), required for diagonal modes

        Returns:
            True if the scroll was sent, False if the request was ignored

        Raises:
            UnsupportedOperationError: If the controller cannot scroll
        """
        self._require_initialized("scroll")
        if area is not None and not isinstance(area, ScrollArea):
            area = ScrollArea(*area)
        transactions = self.protocol.start_scroll(direction, start, stop, area)
        if not transactions:
            return False
        await self._command(transactions, "start scroll")
        return True

    async def stop_scroll(self) -> None:
        self._require_initialized("scroll")
        await self._command(self.protocol.stop_scroll(), "stop scroll")

    # ------------------------------------------------------------------
    # Images and animation
    # ------------------------------------------------------------------

    async def start_animation(
        self, image: ImageSource, clear: bool = False, interval: float = DEFAULT_FRAME_INTERVAL
    ) -> AnimationHandle:
        """Bounce an image around the panel until stopped.

        Any running animation is stopped first. Concurrent calls are
        serialized so only the last one started keeps running.
        """
        self._require_initialized("animate")
        rgba = as_rgba_image(image)
        async with self._animation_lock:
            await self._stop_animation()
            animation = BounceAnimation(self, rgba, clear=clear)
            self._animation = AnimationHandle(animation, interval).start()
            return self._animation

    async def stop_animation(self) -> None:
        async with self._animation_lock:
            await self._stop_animation()

    async def _stop_animation(self) -> None:
        if self._animation is not None:
            await self._animation.stop()
            self._animation = None

    async def reset_animation(self, clear: bool = False) -> None:
        """Stop the animation and optionally blank the panel."""
        await self.stop_animation()
        if clear:
            await self.clear_display(sync=True)

    async def show_image(
        self,
        image: ImageSource,
        x: Optional[int] = None,
        y: Optional[int] = None,
        clear: bool = False,
        animated: bool = False,
    ) -> Optional[AnimationHandle]:
        """Draw an image, centred unless a position is given, or animate it.

        Args:
            image: RGBAImage, Pillow image or path to an image file
            x: Left edge (default: centred)
            y: Top edge (default: centred)
            clear: Blank the panel first
            animated: Start the bounce animation instead of a static draw

        Returns:
            The animation handle when ``animated``, otherwise None

        Raises:
            FileNotFoundError: If a path does not exist
        """
        self._require_initialized("show image")
        rgba = as_rgba_image(image)

        if animated:
            return await self.start_animation(rgba, clear=clear)

        if clear:
            await self.clear_display()
        if x is None:
            x = (self.width - rgba.width) // 2
        if y is None:
            y = (self.height - rgba.height) // 2
        await self.draw_rgba_image(rgba, x, y, sync=True)
        return None
