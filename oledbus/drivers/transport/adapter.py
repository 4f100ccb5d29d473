"""Transport adapter: control-byte framing, async bus access and busy polling."""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from ...abstraction import Bus
from ...exceptions import BusyTimeoutError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Control bytes preceding commands and display data
CONTROL_COMMAND = 0x00
CONTROL_DATA = 0x40

DEFAULT_BUSY_MAX_RETRIES = 1000
DEFAULT_BUSY_TIMEOUT = 1.0


@dataclass(frozen=True)
class Transaction:
    """One framed bus write.

    With ``burst`` a single control byte leads the whole payload; otherwise
    every payload byte gets its own control byte.
    """

    is_data: bool
    payload: bytes
    burst: bool = False

    def frame(self) -> bytes:
        """Return the bytes exactly as they go on the wire."""
        control = CONTROL_DATA if self.is_data else CONTROL_COMMAND
        if self.burst:
            return bytes([control]) + self.payload
        framed = bytearray(len(self.payload) * 2)
        framed[0::2] = bytes([control]) * len(self.payload)
        framed[1::2] = self.payload
        return bytes(framed)


def commands(values: Iterable[int]) -> Transaction:
    """Build a command batch transaction."""
    return Transaction(is_data=False, payload=bytes(values))


def data(values: Iterable[int], burst: bool = True) -> Transaction:
    """Build a display data transaction."""
    return Transaction(is_data=True, payload=bytes(values), burst=burst)


class TransportAdapter:
    """Async front end for a blocking ``Bus``.

    Bus calls run on a single-worker executor owned by the adapter so that
    bytes reach the device in submission order without blocking the event loop.
    """

    def __init__(self, bus: Bus, executor: Optional[ThreadPoolExecutor] = None) -> None:
        """Initialize the transport adapter.

        Args:
            bus: Raw byte link to the device
            executor: Executor for bus calls (default: private single worker)
        """
        self.bus = bus
        self._executor = executor
        self._owns_executor = executor is None
        self.transactions_sent = 0

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="oledbus-bus")
        return self._executor

    async def _run(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self._get_executor(), func, *args)
        except OSError as e:
            logger.error(f"Bus {operation} failed: {e}")
            raise TransportError(f"Bus {operation} failed", operation=operation, original_error=e) from e

    async def send(self, transaction: Transaction) -> None:
        """Write one transaction to the bus."""
        await self._run("write", self.bus.write_bytes, transaction.frame())
        self.transactions_sent += 1

    async def execute(self, transactions: Sequence[Transaction]) -> None:
        """Write transactions in order, stopping at the first failure."""
        for transaction in transactions:
            await self.send(transaction)

    async def write(self, is_data: bool, value: int) -> None:
        """Write a single command or data byte with its control byte."""
        await self.send(Transaction(is_data=is_data, payload=bytes([value & 0xFF])))

    async def write_batch(self, is_data: bool, values: Iterable[int]) -> None:
        """Write several bytes in one transaction, each with a control byte."""
        await self.send(Transaction(is_data=is_data, payload=bytes(values)))

    async def write_burst(self, is_data: bool, values: Iterable[int]) -> None:
        """Write a contiguous payload behind a single control byte."""
        await self.send(Transaction(is_data=is_data, payload=bytes(values), burst=True))

    async def read(self, length: int) -> bytes:
        """Read ``length`` status bytes."""
        return bytes(await self._run("read", self.bus.read_bytes, length))

    async def wait_until_ready(
        self,
        busy_bit: int,
        max_retries: int = DEFAULT_BUSY_MAX_RETRIES,
        timeout: float = DEFAULT_BUSY_TIMEOUT,
        poll_interval: float = 0.0,
    ) -> int:
        """Poll the status byte until the busy bit clears.

        Each busy reading yields to the event loop for ``poll_interval``
        seconds (0 means a single scheduler tick) before retrying.

        Args:
            busy_bit: Bit position of the busy flag in the status byte
            max_retries: Status reads allowed after the first one
            timeout: Maximum seconds to keep polling
            poll_interval: Delay between reads

        Returns:
            Number of status reads performed

        Raises:
            BusyTimeoutError: If the device is still busy past either bound
            TransportError: If a status read fails
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        attempts = 0

        while True:
            status = await self.read(1)
            attempts += 1
            byte = status[0] if status else 0
            if not (byte >> busy_bit) & 1:
                if attempts > 1:
                    logger.debug(f"Device ready after {attempts} status reads")
                return attempts

            elapsed = loop.time() - started
            if attempts > max_retries or elapsed >= timeout:
                logger.error(f"Device still busy after {attempts} status reads ({elapsed:.3f}s)")
                raise BusyTimeoutError("Device busy-poll timed out", attempts=attempts, elapsed=elapsed)

            await asyncio.sleep(poll_interval)

    def close(self) -> None:
        """Close the bus and release the executor."""
        try:
            self.bus.close()
        finally:
            if self._owns_executor and self._executor is not None:
                self._executor.shutdown(wait=False)
                self._executor = None
