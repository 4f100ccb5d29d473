"""Controller strategies and the protocol encoder shared by both variants.

A controller variant is described by a ``ControllerStrategy`` value: its
opcode table, per-resolution parameters, capability flags and the addressing
and transfer encoders as plain functions. ``ControllerProtocol`` binds a
strategy to the ``ControllerConfig`` resolved for one display and turns
logical operations into ordered bus transactions.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from ..dirty_tracker import WritePlan
from ..exceptions import ConfigurationError, UnsupportedOperationError
from .transport.adapter import Transaction, commands

logger = logging.getLogger(__name__)

# Opcodes common to both controller families
DISPLAY_OFF = 0xAE
DISPLAY_ON = 0xAF
SET_CONTRAST = 0x81
NORMAL_DISPLAY = 0xA6
INVERT_DISPLAY = 0xA7


class ControllerKind(str, Enum):
    """Addressing model of a controller family."""

    COLUMN_ADDRESSED = "column_addressed"
    PAGE_ADDRESSED = "page_addressed"


class ScrollDirection(str, Enum):
    """Hardware scroll modes."""

    RIGHT = "right"
    LEFT = "left"
    LEFT_DIAGONAL = "left diagonal"
    RIGHT_DIAGONAL = "right diagonal"

    @property
    def is_diagonal(self) -> bool:
        return self in (ScrollDirection.LEFT_DIAGONAL, ScrollDirection.RIGHT_DIAGONAL)


@dataclass(frozen=True)
class ResolutionParams:
    """Resolution-dependent controller parameters."""

    multiplex: int
    com_pins: int


@dataclass(frozen=True)
class ControllerConfig:
    """Immutable configuration resolved once per display."""

    controller: str
    width: int
    height: int
    multiplex: int
    com_pins: int
    column_offset: int
    supports_scroll: bool
    busy_bit: int

    @property
    def pages(self) -> int:
        return self.height // 8


@dataclass(frozen=True)
class ScrollArea:
    """Vertical scroll area for diagonal scrolling (rows)."""

    top_fixed_rows: int
    scroll_rows: int


InitEncoder = Callable[[ControllerConfig], list[int]]
WindowEncoder = Callable[[ControllerConfig, int, int, int], list[int]]
FrameEncoder = Callable[[ControllerConfig, bytes], list[Transaction]]
PlanEncoder = Callable[[ControllerConfig, WritePlan], list[Transaction]]
ScrollEncoder = Callable[[ControllerConfig, ScrollDirection, int, int, Optional[ScrollArea]], Optional[list[int]]]
StopScrollEncoder = Callable[[ControllerConfig], list[int]]


@dataclass(frozen=True)
class ControllerStrategy:
    """Tagged description of one controller family."""

    name: str
    kind: ControllerKind
    opcodes: Mapping[str, int]
    resolutions: Mapping[tuple[int, int], ResolutionParams]
    column_offset: int
    busy_bit: int
    init_sequence: InitEncoder
    address_window: WindowEncoder
    full_frame_transfer: FrameEncoder
    partial_transfer: PlanEncoder
    start_scroll: Optional[ScrollEncoder] = None
    stop_scroll: Optional[StopScrollEncoder] = None

    @property
    def supports_scroll(self) -> bool:
        return self.start_scroll is not None and self.stop_scroll is not None

    def resolve(self, width: int, height: int, busy_bit: Optional[int] = None) -> ControllerConfig:
        """Resolve the configuration for a panel size.

        Args:
            width: Panel width in pixels
            height: Panel height in pixels
            busy_bit: Override for the status busy bit

        Returns:
            ControllerConfig for this strategy and size

        Raises:
            ConfigurationError: If the size is not supported
        """
        params = self.resolutions.get((width, height))
        if params is None:
            supported = ", ".join(f"{w}x{h}" for w, h in self.resolutions)
            raise ConfigurationError(
                f"{self.name} does not support {width}x{height} (supported: {supported})",
                controller=self.name,
                width=width,
                height=height,
            )
        return ControllerConfig(
            controller=self.name,
            width=width,
            height=height,
            multiplex=params.multiplex,
            com_pins=params.com_pins,
            column_offset=self.column_offset,
            supports_scroll=self.supports_scroll,
            busy_bit=self.busy_bit if busy_bit is None else busy_bit,
        )


_STRATEGIES: dict[str, ControllerStrategy] = {}


def register_strategy(strategy: ControllerStrategy) -> ControllerStrategy:
    """Register a strategy under its upper-cased name."""
    _STRATEGIES[strategy.name.upper()] = strategy
    return strategy


def get_strategy(name: str) -> ControllerStrategy:
    """Look up a controller strategy by identifier.

    Raises:
        ConfigurationError: If no strategy has that name
    """
    strategy = _STRATEGIES.get(name.upper())
    if strategy is None:
        raise ConfigurationError(
            f"Unknown driver: {name} (available: {', '.join(sorted(_STRATEGIES))})",
            controller=name,
        )
    return strategy


def available_strategies() -> list[str]:
    return sorted(_STRATEGIES)


class ControllerProtocol:
    """Encodes display operations for one controller and panel."""

    def __init__(self, strategy: ControllerStrategy, config: ControllerConfig) -> None:
        self.strategy = strategy
        self.config = config

    @classmethod
    def for_display(
        cls, driver: Union[str, ControllerStrategy], width: int, height: int, busy_bit: Optional[int] = None
    ) -> "ControllerProtocol":
        """Select the strategy and resolve its configuration in one step."""
        strategy = driver if isinstance(driver, ControllerStrategy) else get_strategy(driver)
        return cls(strategy, strategy.resolve(width, height, busy_bit))

    @property
    def name(self) -> str:
        return self.strategy.name

    @property
    def kind(self) -> ControllerKind:
        return self.strategy.kind

    @property
    def supports_scroll(self) -> bool:
        return self.strategy.supports_scroll

    def opcode(self, name: str) -> int:
        """Look up a named opcode in the controller table."""
        return self.strategy.opcodes[name]

    def init_sequence(self) -> list[int]:
        return self.strategy.init_sequence(self.config)

    def initialize(self) -> list[Transaction]:
        return [commands(self.init_sequence())]

    def power_on(self) -> list[Transaction]:
        return [commands([self.opcode("display_on")])]

    def power_off(self) -> list[Transaction]:
        return [commands([self.opcode("display_off")])]

    def set_contrast(self, value: int) -> list[Transaction]:
        """Encode a contrast change.

        Raises:
            ValueError: If value is outside 0..255
        """
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Contrast must be within 0..255, got {value}")
        return [commands([self.opcode("set_contrast"), value])]

    def invert(self, inverted: bool) -> list[Transaction]:
        return [commands([self.opcode("invert_display" if inverted else "normal_display")])]

    def address_window(self, page: int, col_start: int, col_end: int) -> list[int]:
        return self.strategy.address_window(self.config, page, col_start, col_end)

    def full_frame_transfer(self, buffer: bytes) -> list[Transaction]:
        return self.strategy.full_frame_transfer(self.config, buffer)

    def partial_transfer(self, plan: WritePlan) -> list[Transaction]:
        """Encode a write plan, full frame or ranged."""
        if plan.is_empty:
            return []
        if plan.full_frame:
            return self.full_frame_transfer(plan.frame)
        return self.strategy.partial_transfer(self.config, plan)

    def _require_scroll(self, operation: str) -> None:
        if not self.supports_scroll:
            logger.warning(f"{self.name} does not support scrolling")
            raise UnsupportedOperationError(
                f"{self.name} does not support scrolling",
                operation=operation,
                controller=self.name,
            )

    def start_scroll(
        self,
        direction: Union[str, ScrollDirection],
        start: int,
        stop: int,
        area: Optional[ScrollArea] = None,
    ) -> list[Transaction]:
        """Encode a scroll activation.

        Args:
            direction: Scroll direction
            start: First page to scroll
            stop: Last page to scroll
            area: Vertical scroll area, required for diagonal modes

        Returns:
            Transactions to send, empty when the request was rejected

        Raises:
            UnsupportedOperationError: If the controller cannot scroll
            ValueError: If the direction is unknown
        """
        self._require_scroll("start_scroll")
        mode = ScrollDirection(direction)
        assert self.strategy.start_scroll is not None
        sequence = self.strategy.start_scroll(self.config, mode, start, stop, area)
        if sequence is None:
            return []
        return [commands(sequence)]

    def stop_scroll(self) -> list[Transaction]:
        self._require_scroll("stop_scroll")
        assert self.strategy.stop_scroll is not None
        return [commands(self.strategy.stop_scroll(self.config))]
