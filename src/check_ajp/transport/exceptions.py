"""Transport layer exceptions.

These exceptions are raised by the transport layer when network-level
errors occur. They have no knowledge of AJP13 or of the check logic.
"""

from __future__ import annotations


class TransportError(Exception):
    """Base exception for transport layer errors.

    Args:
        message: Human-readable error description
        address: ``host:port`` of the container if known
        cause: Original exception that caused this error

    Attributes:
        message: Error message
        address: Container address (or None)
        cause: Original exception (or None)
    """

    def __init__(
        self,
        message: str,
        address: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        """Initialize TransportError.

        Args:
            message: Human-readable error description
            address: ``host:port`` of the container if known
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.address = address
        self.cause = cause

    def __str__(self) -> str:
        """Return string representation of error.

        Returns:
            Error message, followed by the address if present
        """
        if self.address:
            return f"{self.message} ({self.address})"
        return self.message


class NetworkError(TransportError):
    """Network-level error occurred.

    Examples:
        - Connection refused
        - DNS lookup failed
        - Connection reset while reading the reply
    """

    pass


class TimeoutError(TransportError):
    """Connect, read or write deadline exceeded.

    Examples:
        - Connect timeout (container slow to accept)
        - Read timeout (container too slow to respond)
    """

    pass
