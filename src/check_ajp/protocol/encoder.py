"""AJP13 forward request encoder.

Serializes a ForwardRequest into the Forward Request payload::

    prefix_code (byte) 0x02
    method      (byte)
    protocol, req_uri, remote_addr, remote_host, server_name  (string)
    server_port (integer)
    is_ssl      (boolean)
    num_headers (integer)
    request_headers *(0xA0xx | string, string)
    attributes      *(byte, string)
    request_terminator (byte) 0xFF
"""

from __future__ import annotations

from typing import BinaryIO

import structlog

from check_ajp.protocol.codes import (
    ATTRIBUTE_TERMINATOR,
    CPING,
    FORWARD_REQUEST,
    SENDABLE_ATTRIBUTE_CODES,
    method_code,
)
from check_ajp.protocol.exceptions import UnknownAttributeError, UnsupportedMethodError
from check_ajp.protocol.framing import (
    DEFAULT_MAX_PACKET_SIZE,
    pack_bool,
    pack_byte,
    pack_string,
    pack_uint16,
    write_packet,
)
from check_ajp.protocol.models import ForwardRequest, RequestHeader

logger = structlog.get_logger()


def _method_code(request: ForwardRequest) -> int:
    # Models built with model_construct() skip validation; check again.
    name = getattr(request.method, "value", request.method)
    code = method_code(str(name))
    if code is None:
        raise UnsupportedMethodError(str(name).upper())
    return code


def encode_header(header: RequestHeader) -> bytes:
    """Encode one header entry.

    Names found in the request header table are sent as their 2-byte code,
    all others as a literal string.
    """
    code = header.code
    name = pack_uint16(code) if code is not None else pack_string(header.name)
    return name + pack_string(header.value)


def encode_forward_request(request: ForwardRequest) -> bytes:
    """Encode a forward request payload (without the packet envelope).

    Args:
        request: Forward request to encode

    Returns:
        Payload bytes

    Raises:
        UnsupportedMethodError: If the method has no code
        UnknownAttributeError: If an attribute code is unknown or reserved
        InvalidRequestError: If a field does not fit its wire type
    """
    buf = bytearray()
    buf += pack_byte(FORWARD_REQUEST)
    buf += pack_byte(_method_code(request))
    buf += pack_string(request.protocol)
    buf += pack_string(request.uri)
    buf += pack_string(request.remote_addr)
    buf += pack_string(request.remote_host)
    buf += pack_string(request.server_name)
    buf += pack_uint16(request.server_port)
    buf += pack_bool(request.is_ssl)

    buf += pack_uint16(len(request.headers))
    for header in request.headers:
        buf += encode_header(header)

    for attribute in request.attributes:
        if attribute.code not in SENDABLE_ATTRIBUTE_CODES:
            raise UnknownAttributeError(f"0x{attribute.code:02x}")
        buf += pack_byte(attribute.code)
        buf += pack_string(attribute.value)

    buf += pack_byte(ATTRIBUTE_TERMINATOR)
    return bytes(buf)


def write_forward_request(
    stream: BinaryIO,
    request: ForwardRequest,
    max_packet_size: int | None = DEFAULT_MAX_PACKET_SIZE,
) -> int:
    """Encode, frame and write a forward request.

    Nothing is written unless the whole packet encodes successfully.

    Returns:
        Number of bytes written
    """
    payload = encode_forward_request(request)
    written = write_packet(stream, payload, max_packet_size)
    logger.debug(
        "AJP13 forward request sent",
        method=getattr(request.method, "value", request.method),
        uri=request.uri,
        headers=len(request.headers),
        attributes=len(request.attributes),
        size=written,
    )
    return written


def encode_cping() -> bytes:
    """CPing payload: a single type byte."""
    return pack_byte(CPING)
