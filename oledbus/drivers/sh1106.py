"""SH1106: page-addressed controller without hardware scrolling."""

import logging
from types import MappingProxyType

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
    register_strategy,
)
from .transport.adapter import Transaction, commands, data

logger = logging.getLogger(__name__)

# Command constants
SET_DISPLAY_CLOCK_DIV = 0xD5
SET_MULTIPLEX = 0xA8
SET_DISPLAY_OFFSET = 0xD3
SET_START_LINE = 0x40
CHARGE_PUMP = 0xAD
SEG_REMAP = 0xA1
COM_SCAN_DEC = 0xC8
SET_COM_PINS = 0xDA
SET_PRECHARGE = 0xD9
SET_VCOM_DETECT = 0xDB
COLUMN_LOW_START_ADDR = 0x02
COLUMN_HIGH_START_ADDR = 0x10
PAGE_ADDR = 0xB0

# Operand values
CLOCK_DIV_DEFAULT = 0x80
CHARGE_PUMP_ON = 0x8B
CONTRAST_DEFAULT = 0x80
PRECHARGE_DEFAULT = 0x22
VCOM_DETECT_DEFAULT = 0x35

# RAM is 132 columns wide; a 128 pixel panel sits in the middle
COLUMN_OFFSET = 0x02

OPCODES = MappingProxyType(
    {
        "display_off": DISPLAY_OFF,
        "display_on": DISPLAY_ON,
        "set_display_clock_div": SET_DISPLAY_CLOCK_DIV,
        "set_multiplex": SET_MULTIPLEX,
        "set_display_offset": SET_DISPLAY_OFFSET,
        "set_start_line": SET_START_LINE,
        "charge_pump": CHARGE_PUMP,
        "seg_remap": SEG_REMAP,
        "com_scan_dec": COM_SCAN_DEC,
        "set_com_pins": SET_COM_PINS,
        "set_contrast": SET_CONTRAST,
        "set_precharge": SET_PRECHARGE,
        "set_vcom_detect": SET_VCOM_DETECT,
        "normal_display": NORMAL_DISPLAY,
        "invert_display": INVERT_DISPLAY,
        "column_low_start_addr": COLUMN_LOW_START_ADDR,
        "column_high_start_addr": COLUMN_HIGH_START_ADDR,
        "page_addr": PAGE_ADDR,
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
        CHARGE_PUMP_ON,
        SEG_REMAP,
        COM_SCAN_DEC,
        SET_COM_PINS,
        config.com_pins,
        SET_CONTRAST,
        CONTRAST_DEFAULT,
        SET_PRECHARGE,
        PRECHARGE_DEFAULT,
        SET_VCOM_DETECT,
        VCOM_DETECT_DEFAULT,
        NORMAL_DISPLAY,
        DISPLAY_ON,
    ]


def address_window(config: ControllerConfig, page: int, col_start: int, col_end: int) -> list[int]:
    """Page and split column address for a write starting at ``col_start``.

    The controller has no end column; ``col_end`` is accepted for interface
    parity and ignored.
    """
    column = (col_start & 0x7F) + config.column_offset
    return [PAGE_ADDR + page, column & 0x0F, COLUMN_HIGH_START_ADDR | (column >> 4)]


def full_frame_transfer(config: ControllerConfig, buffer: bytes) -> list[Transaction]:
    """Address and stream every page in turn."""
    transactions: list[Transaction] = []
    width = config.width
    for page in range(config.pages):
        start = page * width
        transactions.append(commands(address_window(config, page, 0, width - 1)))
        transactions.append(data(buffer[start : start + width], burst=False))
    logger.debug(f"SH1106 full frame: {config.pages} pages of {width} bytes")
    return transactions


def partial_transfer(config: ControllerConfig, plan: WritePlan) -> list[Transaction]:
    """Re-issue page and column addressing for every coalesced range."""
    transactions: list[Transaction] = []
    for page_range in plan.ranges:
        window = address_window(config, page_range.page, page_range.col_start, page_range.col_end)
        transactions.append(commands(window))
        transactions.append(data(page_range.data, burst=False))
    return transactions


SH1106 = register_strategy(
    ControllerStrategy(
        name="SH1106",
        kind=ControllerKind.PAGE_ADDRESSED,
        opcodes=OPCODES,
        resolutions=RESOLUTIONS,
        column_offset=COLUMN_OFFSET,
        busy_bit=7,
        init_sequence=init_sequence,
        address_window=address_window,
        full_frame_transfer=full_frame_transfer,
        partial_transfer=partial_transfer,
    )
)
