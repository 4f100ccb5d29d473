"""Cancellable animations owned by a display.

An animation is a coroutine loop running as an ``asyncio.Task``. The task is
wrapped in an ``AnimationHandle`` kept on the display instance, so starting a
new animation can stop the previous one first and no two loops ever draw into
the same framebuffer.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Optional

from .colors import Color
from .images import RGBAImage

if TYPE_CHECKING:
    from .display import Display

logger = logging.getLogger(__name__)

DEFAULT_FRAME_INTERVAL = 0.01


class BounceAnimation:
    """Moves an image diagonally across the panel, bouncing off the borders.

    The image starts at (1, 1) heading right and up. Each frame erases the
    previous position (or, with ``clear``, redraws a one pixel border on a
    blank panel), draws the image and advances the position.
    """

    def __init__(self, display: "Display", image: RGBAImage, clear: bool = False) -> None:
        self.display = display
        self.image = image
        self.clear = clear
        self.x = 1
        self.y = 1
        self.prev_x = 1
        self.prev_y = 1
        self.dx = 1
        self.dy = -1
        self.frames = 0

    async def step(self) -> None:
        """Draw one frame and advance the position."""
        display = self.display
        image = self.image

        if self.clear:
            await display.fill_rect(0, 0, display.width, display.height, Color.ON, sync=False)
            await display.fill_rect(1, 1, display.width - 2, display.height - 2, Color.OFF, sync=False)
        else:
            await display.fill_rect(self.prev_x, self.prev_y, image.width, image.height, Color.OFF, sync=False)
            self.prev_x = self.x
            self.prev_y = self.y

        await display.draw_rgba_image(image, self.x, self.y, sync=True)

        if self.x + self.dx > display.width - image.width or self.x < 1:
            self.dx = -self.dx
        if self.y + self.dy > display.height - image.height or self.y < 1:
            self.dy = -self.dy

        self.x += self.dx
        self.y += self.dy
        self.frames += 1


class AnimationHandle:
    """Owns the task running one animation loop."""

    def __init__(self, animation: BounceAnimation, interval: float = DEFAULT_FRAME_INTERVAL) -> None:
        self.animation = animation
        self.interval = interval
        self.error: Optional[BaseException] = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "AnimationHandle":
        """Schedule the frame loop on the running event loop."""
        if not self.running:
            self._task = asyncio.create_task(self._run())
            logger.debug(f"Animation started ({self.interval:.3f}s per frame)")
        return self

    async def stop(self) -> None:
        """Cancel the loop and wait until it has finished."""
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.debug(f"Animation stopped after {self.animation.frames} frames")
        self._task = None

    async def _run(self) -> None:
        while True:
            try:
                await self.animation.step()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self.error = e
                logger.error(f"Animation error: {e}")
                return
            await asyncio.sleep(self.interval)
