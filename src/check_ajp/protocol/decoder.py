"""AJP13 response decoder.

The container answers a forward request with a sequence of packets::

    AJP13_SEND_HEADERS    (4)  status, message, headers
    AJP13_SEND_BODY_CHUNK (3)  zero or more body fragments
    AJP13_END_RESPONSE    (5)  reuse flag, terminates the reply

Decoding is split in two: apply_packet() is a pure state transition over an
already-framed packet, read_response() drives it from a byte stream.
"""

from __future__ import annotations

from enum import Enum
from typing import BinaryIO

import structlog

from check_ajp.protocol.codes import (
    CPONG_REPLY,
    END_RESPONSE,
    GET_BODY_CHUNK,
    HEADER_CODE_SENTINEL,
    SEND_BODY_CHUNK,
    SEND_HEADERS,
    response_header_name,
)
from check_ajp.protocol.exceptions import (
    MalformedPacketError,
    UnexpectedPacketError,
    UnsupportedPacketError,
)
from check_ajp.protocol.framing import Packet, PayloadReader, read_packet
from check_ajp.protocol.models import AJP13Response, ResponseHeader

logger = structlog.get_logger()


class DecodeStep(str, Enum):
    """Outcome of applying one packet to a partial response."""

    CONTINUE = "continue"
    DONE = "done"


def _read_body_chunk(reader: PayloadReader, response: AJP13Response) -> None:
    chunk_length = reader.read_uint16()
    response.body += reader.read_bytes(chunk_length)
    # Containers may pad the segment past the chunk; padding is not an error.
    if reader.remaining:
        reader.skip()


def _read_header_name(reader: PayloadReader) -> str:
    raw = reader.read_bytes(2)
    if raw[0] == HEADER_CODE_SENTINEL:
        code = int.from_bytes(raw, "big")
        name = response_header_name(code)
        if name is None:
            name = f"0x{code:04x}"
            logger.warning("Unknown AJP13 response header code", code=name)
        return name
    return reader.read_string_body(int.from_bytes(raw, "big"))


def _read_send_headers(reader: PayloadReader, response: AJP13Response) -> None:
    response.status_code = reader.read_uint16()
    response.status_message = reader.read_string()
    count = reader.read_uint16()
    for _ in range(count):
        name = _read_header_name(reader)
        value = reader.read_string()
        response.headers.append(ResponseHeader(name=name, value=value))


def _read_end_response(reader: PayloadReader, response: AJP13Response) -> None:
    response.reuse_connection = reader.read_bool()
    if reader.remaining:
        surplus = reader.skip()
        message = f"read remain unknown package ({len(surplus)} bytes after end response)"
        response.warnings.append(message)
        logger.warning(
            "Unexpected bytes after AJP13 end response",
            surplus=len(surplus),
        )


def apply_packet(response: AJP13Response, packet: Packet) -> DecodeStep:
    """Apply one container packet to a partial response.

    Args:
        response: Response being assembled (mutated in place)
        packet: Framed packet read from the container

    Returns:
        DecodeStep.DONE after END_RESPONSE, DecodeStep.CONTINUE otherwise

    Raises:
        UnsupportedPacketError: For GET_BODY_CHUNK
        MalformedPacketError: If the payload is empty or its fields overrun
            the declared length
    """
    reader = PayloadReader(packet.payload)
    if not reader.remaining:
        raise MalformedPacketError("packet has no type byte")
    packet_type = reader.read_byte()

    if packet_type == SEND_BODY_CHUNK:
        _read_body_chunk(reader, response)
    elif packet_type == SEND_HEADERS:
        _read_send_headers(reader, response)
    elif packet_type == END_RESPONSE:
        _read_end_response(reader, response)
        return DecodeStep.DONE
    elif packet_type == GET_BODY_CHUNK:
        raise UnsupportedPacketError(
            packet_type, "GET_BODY_CHUNK response is not yet supported"
        )
    else:
        logger.debug("Ignoring AJP13 packet", packet_type=packet_type, length=packet.length)
    return DecodeStep.CONTINUE


def read_response(stream: BinaryIO) -> AJP13Response:
    """Read packets until END_RESPONSE and return the assembled response.

    Args:
        stream: Binary stream positioned at the start of the reply

    Returns:
        Complete response

    Raises:
        FramingError: If a packet does not start with ``AB``
        UnsupportedPacketError: If the container asks for a request body
        MalformedPacketError: If a packet's fields overrun its length
        ShortReadError: If the stream ends before END_RESPONSE
        OSError: Propagated unchanged from the stream
    """
    response = AJP13Response()
    packets = 0
    while True:
        packet = read_packet(stream)
        packets += 1
        if apply_packet(response, packet) is DecodeStep.DONE:
            break
    logger.debug(
        "AJP13 response received",
        status=response.status_code,
        headers=len(response.headers),
        body=len(response.body),
        packets=packets,
    )
    return response


def read_cpong(stream: BinaryIO) -> None:
    """Read the container's answer to a CPing.

    Raises:
        UnexpectedPacketError: If the reply is not a CPong
    """
    packet = read_packet(stream)
    if packet.packet_type != CPONG_REPLY:
        raise UnexpectedPacketError(CPONG_REPLY, packet.packet_type or 0)
