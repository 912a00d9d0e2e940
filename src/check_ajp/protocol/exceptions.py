"""Protocol layer exceptions.

These exceptions are raised by the AJP13 codec when a request cannot be
built, when the container's reply violates the wire format, or when the
byte stream ends early. They have no knowledge of sockets or of the check
being performed.
"""

from __future__ import annotations

from typing import Any


class CodecError(Exception):
    """Base exception for AJP13 codec errors.

    Args:
        message: Human-readable error description
        details: Additional error context (optional)

    Attributes:
        message: Error message
        details: Additional error information (empty dict if none)
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize CodecError.

        Args:
            message: Human-readable error description
            details: Additional error context (optional)
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RequestValidationError(CodecError):
    """A forward request cannot be encoded.

    Raised while the request is being built, before any byte reaches the
    wire.
    """

    pass


class UnsupportedMethodError(RequestValidationError):
    """HTTP method has no code in the supported method table.

    Example:
        >>> raise UnsupportedMethodError("POST")
    """

    def __init__(self, method: str) -> None:
        """Initialize UnsupportedMethodError.

        Args:
            method: Method name that was rejected
        """
        super().__init__(
            f"{method} method is not yet supported.",
            details={"method": method},
        )
        self.method = method


class UnknownAttributeError(RequestValidationError):
    """Request attribute name is unknown or reserved."""

    def __init__(self, name: str) -> None:
        """Initialize UnknownAttributeError.

        Args:
            name: Attribute name that was rejected
        """
        super().__init__(f"unknown attribute: {name}", details={"attribute": name})
        self.name = name


class InvalidHeaderError(RequestValidationError):
    """Request header is malformed (empty name, missing separator)."""

    pass


class InvalidRequestError(RequestValidationError):
    """A request field cannot be represented on the wire.

    Examples:
        - String longer than 65535 bytes
        - Server port outside 0..65535
    """

    pass


class PacketTooLargeError(RequestValidationError):
    """Encoded packet exceeds the maximum AJP packet size."""

    def __init__(self, size: int, limit: int) -> None:
        """Initialize PacketTooLargeError.

        Args:
            size: Encoded packet size including the 4-byte header
            limit: Maximum allowed packet size
        """
        super().__init__(
            f"packet of {size} bytes exceeds maximum packet size {limit}",
            details={"size": size, "limit": limit},
        )
        self.size = size
        self.limit = limit


class ProtocolError(CodecError):
    """Container reply violates the AJP13 wire format."""

    pass


class FramingError(ProtocolError):
    """Packet does not start with the container-to-client magic."""

    def __init__(self, magic: bytes) -> None:
        """Initialize FramingError.

        Args:
            magic: The two bytes read where ``AB`` was expected
        """
        super().__init__(
            f"unknown direction: {list(magic)}",
            details={"magic": magic.hex()},
        )
        self.magic = magic


class UnsupportedPacketError(ProtocolError):
    """Container sent a packet type this client refuses to handle.

    Raised for GET_BODY_CHUNK: this client never sends a request body.
    """

    def __init__(self, packet_type: int, reason: str) -> None:
        """Initialize UnsupportedPacketError.

        Args:
            packet_type: Packet type tag
            reason: Why the packet cannot be handled
        """
        super().__init__(reason, details={"packet_type": packet_type})
        self.packet_type = packet_type


class UnexpectedPacketError(ProtocolError):
    """Container answered with a packet type other than the one expected."""

    def __init__(self, expected: int, received: int) -> None:
        """Initialize UnexpectedPacketError.

        Args:
            expected: Packet type tag that was expected
            received: Packet type tag that arrived
        """
        super().__init__(
            f"expected packet type {expected}, received {received}",
            details={"expected": expected, "received": received},
        )
        self.expected = expected
        self.received = received


class MalformedPacketError(ProtocolError):
    """Packet fields overrun the packet's declared length."""

    pass


class ShortReadError(CodecError, EOFError):
    """Stream ended before the requested number of bytes arrived."""

    def __init__(self, expected: int, received: int) -> None:
        """Initialize ShortReadError.

        Args:
            expected: Number of bytes requested
            received: Number of bytes actually read
        """
        super().__init__(
            f"unexpected EOF: expected {expected} bytes, got {received}",
            details={"expected": expected, "received": received},
        )
        self.expected = expected
        self.received = received
