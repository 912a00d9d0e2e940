"""AJP13 code tables.

Static mappings between well-known names and their compact wire codes.
Every lookup returns ``None`` for an absent key so that a missing entry is
never confused with a legitimate code.

References:
    https://tomcat.apache.org/connectors-doc/ajp/ajpv13a.html
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# Packet magic
CLIENT_MAGIC = b"\x12\x34"
CONTAINER_MAGIC = b"AB"

# Packet type tags
FORWARD_REQUEST = 0x02
SEND_BODY_CHUNK = 0x03
SEND_HEADERS = 0x04
END_RESPONSE = 0x05
GET_BODY_CHUNK = 0x06
CPONG_REPLY = 0x09
CPING = 0x0A

HEADER_CODE_SENTINEL = 0xA0
ATTRIBUTE_TERMINATOR = 0xFF

REQUEST_HEADER_CODES: Mapping[str, int] = MappingProxyType(
    {
        "accept": 0xA001,
        "accept-charset": 0xA002,
        "accept-encoding": 0xA003,
        "accept-language": 0xA004,
        "authorization": 0xA005,
        "connection": 0xA006,
        "content-type": 0xA007,
        "content-length": 0xA008,
        "cookie": 0xA009,
        "cookie2": 0xA00A,
        "host": 0xA00B,
        "pragma": 0xA00C,
        "referer": 0xA00D,
        "user-agent": 0xA00E,
    }
)

REQUEST_ATTRIBUTE_CODES: Mapping[str, int] = MappingProxyType(
    {
        "context": 0x01,
        "servlet_path": 0x02,
        "remote_user": 0x03,
        "auth_type": 0x04,
        "query_string": 0x05,
        "route": 0x06,
        "ssl_cert": 0x07,
        "ssl_cipher": 0x08,
        "ssl_session": 0x09,
        "req_attribute": 0x0A,
        "ssl_key_size": 0x0B,
        "secret": 0x0C,
        "stored_method": 0x0D,
    }
)

# Defined by the protocol but never sent by this client.
RESERVED_ATTRIBUTES = frozenset({"context", "servlet_path"})

SENDABLE_ATTRIBUTE_CODES = frozenset(
    code for name, code in REQUEST_ATTRIBUTE_CODES.items() if name not in RESERVED_ATTRIBUTES
)

RESPONSE_HEADER_NAMES: Mapping[int, str] = MappingProxyType(
    {
        0xA001: "content-type",
        0xA002: "content-language",
        0xA003: "content-length",
        0xA004: "date",
        0xA005: "last-modified",
        0xA006: "location",
        0xA007: "set-cookie",
        0xA008: "set-cookie2",
        0xA009: "servlet-engine",
        0xA00A: "status",
        0xA00B: "www-authenticate",
    }
)

# Only the bodyless verbs are populated; every other verb is unsupported.
METHOD_CODES: Mapping[str, int] = MappingProxyType(
    {
        "GET": 0x02,
        "HEAD": 0x03,
    }
)


def request_header_code(name: str) -> int | None:
    """Return the 2-byte code for a request header name, if it has one."""
    return REQUEST_HEADER_CODES.get(name.lower())


def request_attribute_code(name: str) -> int | None:
    """Return the 1-byte code for a request attribute name, if known."""
    return REQUEST_ATTRIBUTE_CODES.get(name.lower())


def response_header_name(code: int) -> str | None:
    """Return the header name for a 2-byte response header code, if known."""
    return RESPONSE_HEADER_NAMES.get(code)


def method_code(name: str) -> int | None:
    """Return the method code for a supported HTTP method."""
    return METHOD_CODES.get(name.upper())
