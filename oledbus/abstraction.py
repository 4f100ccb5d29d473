"""Bus abstraction for OLED controllers."""

from typing import Protocol


class Bus(Protocol):
    """Protocol for the raw byte link to one device.

    Implementations are blocking; the transport adapter moves them off the
    event loop. Failures surface as ``OSError``.
    """

    def write_bytes(self, data: bytes) -> None:
        """Write one bus transaction.

        Args:
            data: Control byte(s) and payload exactly as framed on the wire
        """
        ...

    def read_bytes(self, length: int) -> bytes:
        """Read ``length`` bytes from the device.

        Args:
            length: Number of bytes to read

        Returns:
            Bytes read
        """
        ...

    def close(self) -> None:
        """Release the underlying handle."""
        ...
