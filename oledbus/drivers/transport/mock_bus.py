"""In-memory bus for development and tests without physical hardware."""

import logging
from collections import deque
from collections.abc import Iterable
from typing import Optional

logger = logging.getLogger(__name__)


class MockBus:
    """Records every written frame and serves scripted status bytes.

    Status reads pop from ``status_bytes``; once it is empty every read
    returns ``idle_status``. Setting ``fail_writes``/``fail_reads`` makes the
    next matching calls raise ``OSError`` like a real bus would.
    """

    def __init__(self, status_bytes: Optional[Iterable[int]] = None, idle_status: int = 0x00) -> None:
        self.frames: list[bytes] = []
        self.status_bytes: deque[int] = deque(status_bytes or ())
        self.idle_status = idle_status
        self.reads = 0
        self.fail_writes = 0
        self.fail_reads = 0
        self.closed = False
        logger.debug("MockBus initialized")

    def write_bytes(self, data: bytes) -> None:
        if self.fail_writes:
            self.fail_writes -= 1
            raise OSError(121, "Remote I/O error")
        self.frames.append(bytes(data))
        if len(data) > 10:
            logger.debug(f"MockBus write({list(data[:10])}... [{len(data)} bytes])")
        else:
            logger.debug(f"MockBus write({list(data)})")

    def read_bytes(self, length: int) -> bytes:
        self.reads += 1
        if self.fail_reads:
            self.fail_reads -= 1
            raise OSError(121, "Remote I/O error")
        values = [self.status_bytes.popleft() if self.status_bytes else self.idle_status for _ in range(length)]
        return bytes(values)

    def close(self) -> None:
        self.closed = True

    def reset(self) -> None:
        """Forget recorded frames and reads."""
        self.frames.clear()
        self.reads = 0

    @property
    def command_bytes(self) -> list[int]:
        """Command payload bytes of all interleaved command frames, in order."""
        result: list[int] = []
        for frame in self.frames:
            if frame and frame[0] == 0x00:
                result.extend(frame[1::2])
        return result

