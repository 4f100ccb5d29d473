"""I2C bus implementation on top of smbus2."""

import logging
from typing import Optional

from smbus2 import SMBus, i2c_msg

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = 0x3C
DEFAULT_BUS = 1


class SMBusBus:
    """Raw I2C link to one device address.

    Uses combined ``i2c_rdwr`` messages so writes are not limited to the
    32-byte SMBus block size and a full frame goes out as one transaction.
    """

    def __init__(self, bus: int = DEFAULT_BUS, address: int = DEFAULT_ADDRESS) -> None:
        """Initialize the I2C bus handle.

        Args:
            bus: I2C bus number (/dev/i2c-N)
            address: 7-bit device address
        """
        self.bus_number = bus
        self.address = address
        self._smbus: Optional[SMBus] = None

    def _handle(self) -> SMBus:
        if self._smbus is None:
            self._smbus = SMBus(self.bus_number)
            logger.debug(f"Opened I2C bus {self.bus_number} for device 0x{self.address:02x}")
        return self._smbus

    def write_bytes(self, data: bytes) -> None:
        """Write one framed transaction to the device."""
        message = i2c_msg.write(self.address, data)
        self._handle().i2c_rdwr(message)

    def read_bytes(self, length: int) -> bytes:
        """Read ``length`` bytes from the device."""
        message = i2c_msg.read(self.address, length)
        self._handle().i2c_rdwr(message)
        return bytes(list(message))

    def close(self) -> None:
        if self._smbus is not None:
            self._smbus.close()
            self._smbus = None
            logger.debug(f"Closed I2C bus {self.bus_number}")
