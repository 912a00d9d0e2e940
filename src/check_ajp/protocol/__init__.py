"""Protocol layer for check-ajp.

This module implements the AJP13 wire codec with no knowledge of how the
connection was opened or what the check does with the reply. It is
responsible for:
- Code tables for headers, attributes and methods
- Packet framing in both directions
- Forward request encoding
- Response decoding across body, header and end packets
- Protocol error reporting
"""

from check_ajp.protocol.models import (
    AJP13Response,
    Attribute,
    ForwardRequest,
    Method,
    RequestHeader,
    ResponseHeader,
)
from check_ajp.protocol.exceptions import (
    CodecError,
    FramingError,
    InvalidHeaderError,
    InvalidRequestError,
    MalformedPacketError,
    PacketTooLargeError,
    ProtocolError,
    RequestValidationError,
    ShortReadError,
    UnexpectedPacketError,
    UnknownAttributeError,
    UnsupportedMethodError,
    UnsupportedPacketError,
)
from check_ajp.protocol.encoder import encode_forward_request, write_forward_request
from check_ajp.protocol.decoder import DecodeStep, apply_packet, read_response
from check_ajp.protocol.client import Ajp13Client

__all__ = [
    # Models
    "AJP13Response",
    "Attribute",
    "ForwardRequest",
    "Method",
    "RequestHeader",
    "ResponseHeader",
    # Exceptions
    "CodecError",
    "FramingError",
    "InvalidHeaderError",
    "InvalidRequestError",
    "MalformedPacketError",
    "PacketTooLargeError",
    "ProtocolError",
    "RequestValidationError",
    "ShortReadError",
    "UnexpectedPacketError",
    "UnknownAttributeError",
    "UnsupportedMethodError",
    "UnsupportedPacketError",
    # Codec
    "encode_forward_request",
    "write_forward_request",
    "DecodeStep",
    "apply_packet",
    "read_response",
    # Client
    "Ajp13Client",
]
