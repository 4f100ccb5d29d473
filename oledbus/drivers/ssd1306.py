"""SSD1306: column-addressed controller with hardware scrolling.

The SSD1306 supports an auto-incrementing column/page address window in
horizontal addressing mode, so a full frame is one window command followed by
one data burst, and each coalesced range gets its own window.
"""

import logging
from types import MappingProxyType
from typing import Optional

from ..dirty_tracker import WritePlan
from .controller import (
    DISPLAY_OFF,
    DISPLAY_ON,
    INVERT_DISPLAY,
    NORMAL_DISPLAY,
    SET_CONTRAST,
    ControllerConfig,
    ControllerKind,
    ControllerStrategy,
    ResolutionParams,
    ScrollArea,
    ScrollDirection,
    register_strategy,
)
from .transport.adapter import Transaction, commands, data

logger = logging.getLogger(__name__)

# Command constants
SET_DISPLAY_CLOCK_DIV = 0xD5
SET_MULTIPLEX = 0xA8
SET_DISPLAY_OFFSET = 0xD3
SET_START_LINE = 0x40
CHARGE_PUMP = 0x8D
MEMORY_MODE = 0x20
SEG_REMAP = 0xA1
COM_SCAN_DEC = 0xC8
COM_SCAN_INC = 0xC0
SET_COM_PINS = 0xDA
SET_PRECHARGE = 0xD9
SET_VCOM_DETECT = 0xDB
DISPLAY_ALL_ON_RESUME = 0xA4
COLUMN_ADDR = 0x21
PAGE_ADDR = 0x22
ACTIVATE_SCROLL = 0x2F
DEACTIVATE_SCROLL = 0x2E
SET_VERTICAL_SCROLL_AREA = 0xA3
RIGHT_HORIZONTAL_SCROLL = 0x26
LEFT_HORIZONTAL_SCROLL = 0x27
VERTICAL_AND_RIGHT_HORIZONTAL_SCROLL = 0x29
VERTICAL_AND_LEFT_HORIZONTAL_SCROLL = 0x2A

# Operand values
CLOCK_DIV_DEFAULT = 0x80
CHARGE_PUMP_ENABLE = 0x14
HORIZONTAL_ADDRESSING = 0x00
CONTRAST_DEFAULT = 0x8F
PRECHARGE_DEFAULT = 0xF1
VCOM_DETECT_DEFAULT = 0x40
SCROLL_INTERVAL_5_FRAMES = 0x00
DIAGONAL_VERTICAL_OFFSET = 0x01

OPCODES = MappingProxyType(
    {
        "display_off": DISPLAY_OFF,
        "display_on": DISPLAY_ON,
        "set_display_clock_div": SET_DISPLAY_CLOCK_DIV,
        "set_multiplex": SET_MULTIPLEX,
        "set_display_offset": SET_DISPLAY_OFFSET,
        "set_start_line": SET_START_LINE,
        "charge_pump": CHARGE_PUMP,
        "memory_mode": MEMORY_MODE,
        "seg_remap": SEG_REMAP,
        "com_scan_dec": COM_SCAN_DEC,
        "com_scan_inc": COM_SCAN_INC,
        "set_com_pins": SET_COM_PINS,
        "set_contrast": SET_CONTRAST,
        "set_precharge": SET_PRECHARGE,
        "set_vcom_detect": SET_VCOM_DETECT,
        "display_all_on_resume": DISPLAY_ALL_ON_RESUME,
        "normal_display": NORMAL_DISPLAY,
        "invert_display": INVERT_DISPLAY,
        "column_addr": COLUMN_ADDR,
        "page_addr": PAGE_ADDR,
        "activate_scroll": ACTIVATE_SCROLL,
        "deactivate_scroll": DEACTIVATE_SCROLL,
        "set_vertical_scroll_area": SET_VERTICAL_SCROLL_AREA,
    }
)

RESOLUTIONS = MappingProxyType(
    {
        (128, 32): ResolutionParams(multiplex=0x1F, com_pins=0x02),
        (128, 64): ResolutionParams(multiplex=0x3F, com_pins=0x12),
        (96, 16): ResolutionParams(multiplex=0x0F, com_pins=0x02),
    }
)


def init_sequence(config: ControllerConfig) -> list[int]:
    """Return the power-up command sequence."""
    return [
        DISPLAY_OFF,
        SET_DISPLAY_CLOCK_DIV,
        CLOCK_DIV_DEFAULT,
        SET_MULTIPLEX,
        config.multiplex,
        SET_DISPLAY_OFFSET,
        0x00,
        SET_START_LINE,
        CHARGE_PUMP,
        CHARGE_PUMP_ENABLE,
        MEMORY_MODE,
        HORIZONTAL_ADDRESSING,
        SEG_REMAP,
        COM_SCAN_DEC,  # COM_SCAN_INC flips the panel vertically
        SET_COM_PINS,
        config.com_pins,
        SET_CONTRAST,
        CONTRAST_DEFAULT,
        SET_PRECHARGE,
        PRECHARGE_DEFAULT,
        SET_VCOM_DETECT,
        VCOM_DETECT_DEFAULT,
        DISPLAY_ALL_ON_RESUME,
        NORMAL_DISPLAY,
        DISPLAY_ON,
    ]


def address_window(config: ControllerConfig, page: int, col_start: int, col_end: int) -> list[int]:
    """Column and page window for one page."""
    offset = config.column_offset
    return [COLUMN_ADDR, offset + col_start, offset + col_end, PAGE_ADDR, page, page]


def full_frame_transfer(config: ControllerConfig, buffer: bytes) -> list[Transaction]:
    """Set horizontal mode and the whole-panel window, then stream the buffer."""
    offset = config.column_offset
    setup = [
        MEMORY_MODE,
        HORIZONTAL_ADDRESSING,
        SET_DISPLAY_CLOCK_DIV,
        CLOCK_DIV_DEFAULT,
        COLUMN_ADDR,
        offset,
        offset + config.width - 1,
        PAGE_ADDR,
        0,
        config.pages - 1,
    ]
    return [commands(setup), data(buffer)]


def partial_transfer(config: ControllerConfig, plan: WritePlan) -> list[Transaction]:
    """One window command and one data burst per coalesced range."""
    transactions: list[Transaction] = []
    for page_range in plan.ranges:
        window = address_window(config, page_range.page, page_range.col_start, page_range.col_end)
        transactions.append(commands(window))
        transactions.append(data(page_range.data))
    return transactions


def start_scroll(
    config: ControllerConfig,
    direction: ScrollDirection,
    start: int,
    stop: int,
    area: Optional[ScrollArea],
) -> Optional[list[int]]:
    """Encode a scroll activation for pages ``start`` through ``stop``.

    Diagonal modes need the vertical scroll area; without one the request is
    logged and dropped.
    """
    start &= 0x07
    stop &= 0x07

    if direction is ScrollDirection.RIGHT or direction is ScrollDirection.LEFT:
        opcode = RIGHT_HORIZONTAL_SCROLL if direction is ScrollDirection.RIGHT else LEFT_HORIZONTAL_SCROLL
        return [opcode, 0x00, start, SCROLL_INTERVAL_5_FRAMES, stop, 0x00, 0xFF, ACTIVATE_SCROLL]

    if area is None:
        logger.warning(f"Ignoring {direction.value} scroll: no vertical scroll area given")
        return None

    if area.top_fixed_rows + area.scroll_rows > config.height:
        logger.warning(
            f"Ignoring {direction.value} scroll: area {area.top_fixed_rows}+{area.scroll_rows} "
            f"exceeds {config.height} rows"
        )
        return None

    opcode = (
        VERTICAL_AND_RIGHT_HORIZONTAL_SCROLL
        if direction is ScrollDirection.RIGHT_DIAGONAL
        else VERTICAL_AND_LEFT_HORIZONTAL_SCROLL
    )
    return [
        SET_VERTICAL_SCROLL_AREA,
        area.top_fixed_rows,
        area.scroll_rows,
        opcode,
        0x00,
        start,
        SCROLL_INTERVAL_5_FRAMES,
        stop,
        DIAGONAL_VERTICAL_OFFSET,
        ACTIVATE_SCROLL,
    ]


def stop_scroll(config: ControllerConfig) -> list[int]:
    return [DEACTIVATE_SCROLL]


SSD1306 = register_strategy(
    ControllerStrategy(
        name="SSD1306",
        kind=ControllerKind.COLUMN_ADDRESSED,
        opcodes=OPCODES,
        resolutions=RESOLUTIONS,
        column_offset=0,
        busy_bit=7,
        init_sequence=init_sequence,
        address_window=address_window,
        full_frame_transfer=full_frame_transfer,
        partial_transfer=partial_transfer,
        start_scroll=start_scroll,
        stop_scroll=stop_scroll,
    )
)
