"""Dirty-byte tracking and write-plan coalescing.

Scattered pixel writes mark individual framebuffer bytes. At flush time the
marked bytes are grouped by page, sorted by column and merged into runs of
consecutive columns, so each run costs one addressing command followed by one
burst of data.

When more than one seventh of the buffer is dirty the incremental plan is
dropped in favour of a single full-frame transfer: an incremental byte carries
roughly three bytes of addressing overhead, so past that ratio streaming the
whole frame is cheaper.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from .framebuffer import FrameBuffer

logger = logging.getLogger(__name__)

FULL_UPDATE_RATIO = 7


@dataclass(frozen=True)
class PageRange:
    """Contiguous run of dirty columns within one page."""

    page: int
    col_start: int
    data: bytes

    @property
    def col_end(self) -> int:
        return self.col_start + len(self.data) - 1


@dataclass(frozen=True)
class WritePlan:
    """What a flush must transmit.

    Either ``full_frame`` is True and ``frame`` holds the whole buffer, or
    ``ranges`` lists the coalesced runs. ``indices`` keeps the drained byte
    indices so a failed flush can put them back.
    """

    full_frame: bool = False
    ranges: tuple[PageRange, ...] = ()
    frame: bytes = b""
    indices: frozenset[int] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not self.full_frame and not self.ranges

    @property
    def byte_count(self) -> int:
        """Number of data bytes the plan sends."""
        if self.full_frame:
            return len(self.frame)
        return sum(len(r.data) for r in self.ranges)


class DirtyTracker:
    """Set of framebuffer byte indices mutated since the last successful flush."""

    def __init__(self, width: int, total_bytes: int) -> None:
        self.width = width
        self.total_bytes = total_bytes
        self._dirty: set[int] = set()

    def __len__(self) -> int:
        return len(self._dirty)

    def __contains__(self, index: object) -> bool:
        return index in self._dirty

    def mark(self, index: int) -> None:
        """Mark one byte index dirty; out-of-buffer indices are ignored."""
        if 0 <= index < self.total_bytes:
            self._dirty.add(index)

    def mark_many(self, indices: Iterable[int]) -> None:
        for index in indices:
            self.mark(index)

    def pending(self) -> frozenset[int]:
        """Return a snapshot of the dirty set."""
        return frozenset(self._dirty)

    def clear(self) -> None:
        self._dirty.clear()

    def exceeds_full_update_threshold(self, count: Optional[int] = None) -> bool:
        """Check whether ``count`` dirty bytes make a full update cheaper."""
        if count is None:
            count = len(self._dirty)
        return count > self.total_bytes / FULL_UPDATE_RATIO

    def coalesce(self, buffer: FrameBuffer, indices: Iterable[int]) -> tuple[PageRange, ...]:
        """Merge byte indices into per-page runs of consecutive columns.

        Args:
            buffer: Framebuffer supplying the byte values
            indices: Dirty byte indices

        Returns:
            Ranges ordered by page, then by starting column
        """
        pages: dict[int, list[int]] = {}
        for index in indices:
            pages.setdefault(index // self.width, []).append(index % self.width)

        ranges: list[PageRange] = []
        for page in sorted(pages):
            columns = sorted(pages[page])
            run_start = columns[0]
            run_end = columns[0]
            for col in columns[1:]:
                if col == run_end + 1:
                    run_end = col
                    continue
                ranges.append(self._make_range(buffer, page, run_start, run_end))
                run_start = run_end = col
            ranges.append(self._make_range(buffer, page, run_start, run_end))

        return tuple(ranges)

    def _make_range(self, buffer: FrameBuffer, page: int, start: int, end: int) -> PageRange:
        base = page * self.width
        data = bytes(buffer.get_byte(base + col) for col in range(start, end + 1))
        return PageRange(page=page, col_start=start, data=data)

    def drain(self, buffer: FrameBuffer) -> WritePlan:
        """Build the write plan for the pending bytes and clear the dirty set.

        Bytes marked after this call accumulate in a fresh set, so drawing may
        continue while the plan is on the bus.

        Args:
            buffer: Framebuffer the marks refer to

        Returns:
            WritePlan, empty when nothing is dirty
        """
        indices = frozenset(self._dirty)
        self._dirty = set()

        if not indices:
            return WritePlan()

        if self.exceeds_full_update_threshold(len(indices)):
            logger.debug(
                f"{len(indices)} dirty bytes exceed 1/{FULL_UPDATE_RATIO} of "
                f"{self.total_bytes}, using full-frame update"
            )
            return WritePlan(full_frame=True, frame=buffer.raw(), indices=indices)

        ranges = self.coalesce(buffer, indices)
        logger.debug(f"Coalesced {len(indices)} dirty bytes into {len(ranges)} ranges")
        return WritePlan(ranges=ranges, indices=indices)

    def restore(self, plan: WritePlan) -> None:
        """Re-mark every byte of a plan that failed to reach the device."""
        self._dirty.update(plan.indices)
