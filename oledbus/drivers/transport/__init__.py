"""Bus implementations and the transport adapter."""

from .adapter import CONTROL_COMMAND, CONTROL_DATA, Transaction, TransportAdapter, commands, data
from .mock_bus import MockBus
from .smbus import SMBusBus

__all__ = [
    "CONTROL_COMMAND",
    "CONTROL_DATA",
    "MockBus",
    "SMBusBus",
    "Transaction",
    "TransportAdapter",
    "commands",
    "data",
]
