"""AJP13 packet framing and wire primitives.

Every AJP13 packet travels inside the same envelope::

    client -> container:  0x12 0x34  uint16 length  payload
    container -> client:  'A'  'B'   uint16 length  payload

All integers are big-endian. Strings are a uint16 length, that many bytes,
then a single 0x00 byte that the length does not count.
"""

from __future__ import annotations

import struct
from typing import BinaryIO, NamedTuple

from check_ajp.protocol.codes import CLIENT_MAGIC, CONTAINER_MAGIC
from check_ajp.protocol.exceptions import (
    FramingError,
    InvalidRequestError,
    MalformedPacketError,
    PacketTooLargeError,
    ShortReadError,
)

HEADER_SIZE = 4
MAX_PAYLOAD_SIZE = 0xFFFF
DEFAULT_MAX_PACKET_SIZE = 8192

# Length value the protocol reserves for a null string.
NULL_STRING_LENGTH = 0xFFFF

STRING_ENCODING = "utf-8"
STRING_ERRORS = "surrogateescape"

_UINT16 = struct.Struct(">H")


class Packet(NamedTuple):
    """One framed packet read from the container.

    Attributes:
        direction: Magic bytes the packet started with
        length: Declared payload length
        payload: Exactly ``length`` payload bytes
    """

    direction: bytes
    length: int
    payload: bytes

    @property
    def packet_type(self) -> int | None:
        """Packet type tag (first payload byte), or None for an empty payload."""
        return self.payload[0] if self.payload else None


# Encoding primitives


def pack_byte(value: int) -> bytes:
    return bytes((value & 0xFF,))


def pack_bool(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def pack_uint16(value: int) -> bytes:
    """Pack an unsigned 16-bit big-endian integer.

    Raises:
        InvalidRequestError: If value does not fit in 16 bits
    """
    if not 0 <= value <= 0xFFFF:
        raise InvalidRequestError(
            f"value {value} does not fit in 16 bits", details={"value": value}
        )
    return _UINT16.pack(value)


def pack_string(value: str) -> bytes:
    """Pack a length-prefixed, zero-terminated string.

    Args:
        value: String to encode (UTF-8 on the wire)

    Returns:
        uint16 length + bytes + 0x00

    Raises:
        InvalidRequestError: If the string cannot be encoded or is too
            long for the length field
    """
    try:
        data = value.encode(STRING_ENCODING, STRING_ERRORS)
    except UnicodeEncodeError as e:
        raise InvalidRequestError(
            f"string cannot be encoded: {e.reason}",
            details={"position": e.start},
        ) from e
    # 0xFFFF itself marks a null string
    if len(data) >= NULL_STRING_LENGTH:
        raise InvalidRequestError(
            f"string of {len(data)} bytes is too long to encode",
            details={"length": len(data)},
        )
    return _UINT16.pack(len(data)) + data + b"\x00"


def frame(payload: bytes, max_packet_size: int | None = DEFAULT_MAX_PACKET_SIZE) -> bytes:
    """Wrap a payload in the client-to-container envelope.

    Args:
        payload: Encoded packet payload
        max_packet_size: Largest packet (header included) the container
            accepts, or None to allow any payload that fits the length field

    Returns:
        Framed packet bytes

    Raises:
        PacketTooLargeError: If the framed packet would exceed the limit
    """
    size = len(payload) + HEADER_SIZE
    limit = MAX_PAYLOAD_SIZE + HEADER_SIZE
    if max_packet_size is not None:
        limit = min(limit, max_packet_size)
    if size > limit:
        raise PacketTooLargeError(size, limit)
    return CLIENT_MAGIC + _UINT16.pack(len(payload)) + payload


def write_packet(
    stream: BinaryIO,
    payload: bytes,
    max_packet_size: int | None = DEFAULT_MAX_PACKET_SIZE,
) -> int:
    """Frame a payload and write it to the stream.

    The packet is framed completely before the first write, so a rejected
    payload never leaves partial bytes on the stream.

    Returns:
        Number of bytes written
    """
    packet = frame(payload, max_packet_size)
    stream.write(packet)
    stream.flush()
    return len(packet)


# Decoding primitives


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes from the stream.

    Raises:
        ShortReadError: If the stream ends first
    """
    buf = bytearray()
    while len(buf) < size:
        chunk = stream.read(size - len(buf))
        if not chunk:
            raise ShortReadError(size, len(buf))
        buf += chunk
    return bytes(buf)


def read_packet(stream: BinaryIO) -> Packet:
    """Read one container-to-client packet.

    Raises:
        FramingError: If the packet does not start with ``AB``
        ShortReadError: If the stream ends inside the packet
    """
    direction = read_exact(stream, 2)
    if direction != CONTAINER_MAGIC:
        raise FramingError(direction)
    (length,) = _UINT16.unpack(read_exact(stream, 2))
    payload = read_exact(stream, length)
    return Packet(direction, length, payload)


class PayloadReader:
    """Sequential reader over the payload of a single packet.

    Reads never cross the packet boundary: a field that would run past the
    declared length raises MalformedPacketError instead of consuming bytes
    from the next packet.
    """

    def __init__(self, payload: bytes) -> None:
        self._payload = payload
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._payload) - self._offset

    def read_bytes(self, size: int) -> bytes:
        if size > self.remaining:
            raise MalformedPacketError(
                f"field of {size} bytes overruns packet ({self.remaining} bytes left)",
                details={"size": size, "remaining": self.remaining},
            )
        data = self._payload[self._offset : self._offset + size]
        self._offset += size
        return data

    def read_byte(self) -> int:
        return self.read_bytes(1)[0]

    def read_bool(self) -> bool:
        return self.read_byte() != 0

    def read_uint16(self) -> int:
        (value,) = _UINT16.unpack(self.read_bytes(2))
        return value

    def read_string_body(self, length: int) -> str:
        """Read ``length`` bytes of string content plus the trailing 0x00."""
        if length == NULL_STRING_LENGTH:
            return ""
        data = self.read_bytes(length)
        self.read_bytes(1)
        return data.decode(STRING_ENCODING, STRING_ERRORS)

    def read_string(self) -> str:
        return self.read_string_body(self.read_uint16())

    def skip(self, size: int | None = None) -> bytes:
        """Consume ``size`` bytes (default: everything left) and return them."""
        if size is None:
            size = self.remaining
        return self.read_bytes(size)
