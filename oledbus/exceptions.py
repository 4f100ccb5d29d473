"""
Exceptions for oledbus display sessions.

This module defines the error kinds raised by the display core: configuration
problems detected at construction, capability mismatches between controller
variants, bus failures and busy-poll timeouts. Out-of-range drawing input is
never an error; primitives clip silently.
"""

from typing import Any, Optional


class OledError(Exception):
    """Base exception for all oledbus errors.

    Args:
        message: Human-readable error description
        details: Optional dictionary containing additional error context

    Example:
        >>> raise OledError("Display failed", {"controller": "SSD1306"})
    """

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(OledError):
    """Raised when no controller configuration resolves.

    Covers unknown controller names, unsupported width x height combinations
    and heights that are not a whole number of pages.

    Args:
        message: Human-readable error description
        controller: Controller identifier that was requested
        width: Requested width in pixels
        height: Requested height in pixels
        details: Additional context
    """

    def __init__(
        self,
        message: str,
        controller: Optional[str] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.controller = controller
        self.width = width
        self.height = height

        error_details = details or {}
        if controller:
            error_details["controller"] = controller
        if width is not None:
            error_details["width"] = width
        if height is not None:
            error_details["height"] = height

        super().__init__(message, error_details)


class UnsupportedOperationError(OledError):
    """Raised when a controller variant lacks the requested capability.

    The operation is a no-op: nothing is sent on the bus and the display state
    is unchanged, so callers may catch this and carry on.

    Args:
        message: Human-readable error description
        operation: Name of the rejected operation
        controller: Controller that rejected it
        details: Additional context
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        controller: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        self.controller = controller

        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        if controller:
            error_details["controller"] = controller

        super().__init__(message, error_details)


class TransportError(OledError):
    """Raised when a bus write or read fails.

    Args:
        message: Human-readable error description
        operation: Bus operation that failed (write, read)
        original_error: The underlying exception raised by the bus
        details: Additional context
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        self.original_error = original_error

        error_details = details or {}
        if operation:
            error_details["operation"] = operation
        if original_error:
            error_details["original_error"] = str(original_error)
            error_details["error_type"] = type(original_error).__name__

        super().__init__(message, error_details)


class BusyTimeoutError(TransportError):
    """Raised when the device keeps reporting busy past the poll bound.

    Args:
        message: Human-readable error description
        attempts: Number of status reads performed
        elapsed: Seconds spent polling
    """

    def __init__(self, message: str, attempts: int, elapsed: float) -> None:
        self.attempts = attempts
        self.elapsed = elapsed
        super().__init__(
            message,
            operation="busy_poll",
            details={"attempts": attempts, "elapsed": round(elapsed, 4)},
        )


class DisplayStateError(OledError):
    """Raised when an operation needs a display that has finished initializing."""

    def __init__(self, message: str, state: Optional[str] = None) -> None:
        self.state = state
        super().__init__(message, {"state": state} if state else None)
