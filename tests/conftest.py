"""Root-level pytest configuration for all tests.

Provides an in-memory duplex stream and builders for container-side AJP13
packets, plus a parser that plays the container's role when reading a
forward request.
"""

from __future__ import annotations

import io
import struct
from types import SimpleNamespace
from typing import Any

import pytest
import structlog

from check_ajp.container import reset_container
from check_ajp.protocol.codes import REQUEST_HEADER_CODES
from check_ajp.protocol.framing import PayloadReader, pack_string, pack_uint16

_HEADER_NAMES_BY_CODE = {code: name for name, code in REQUEST_HEADER_CODES.items()}


class DuplexStream:
    """In-memory stand-in for a socket file.

    Reads come from a canned container reply; writes are recorded.
    """

    def __init__(self, reply: bytes = b"", max_read: int | None = None) -> None:
        self.reader = io.BytesIO(reply)
        self.written = bytearray()
        self.flushes = 0
        self.max_read = max_read

    def read(self, size: int = -1) -> bytes:
        if self.max_read is not None and size > self.max_read:
            size = self.max_read
        return self.reader.read(size)

    def write(self, data: bytes) -> int:
        self.written += data
        return len(data)

    def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        pass


def container_packet(payload: bytes) -> bytes:
    return b"AB" + struct.pack(">H", len(payload)) + payload


def send_headers(
    status: int = 200,
    message: str = "OK",
    headers: list[tuple[Any, str]] | None = None,
) -> bytes:
    """SEND_HEADERS packet; an int header name is sent as a 2-byte code."""
    headers = headers or []
    payload = b"\x04" + pack_uint16(status) + pack_string(message)
    payload += pack_uint16(len(headers))
    for name, value in headers:
        payload += pack_uint16(name) if isinstance(name, int) else pack_string(name)
        payload += pack_string(value)
    return container_packet(payload)


def body_chunk(data: bytes, padding: int = 0) -> bytes:
    return container_packet(b"\x03" + pack_uint16(len(data)) + data + b"\x00" * padding)


def end_response(reuse: bool = True, extra: bytes = b"") -> bytes:
    return container_packet(b"\x05" + (b"\x01" if reuse else b"\x00") + extra)


def parse_forward_request(data: bytes) -> dict[str, Any]:
    """Decode a framed forward request the way a container would."""
    assert data[:2] == b"\x12\x34"
    (length,) = struct.unpack(">H", data[2:4])
    payload = data[4:]
    assert len(payload) == length

    reader = PayloadReader(payload)
    request: dict[str, Any] = {
        "prefix_code": reader.read_byte(),
        "method_code": reader.read_byte(),
        "protocol": reader.read_string(),
        "uri": reader.read_string(),
        "remote_addr": reader.read_string(),
        "remote_host": reader.read_string(),
        "server_name": reader.read_string(),
        "server_port": reader.read_uint16(),
        "is_ssl": reader.read_bool(),
        "headers": [],
        "attributes": [],
    }
    for _ in range(reader.read_uint16()):
        code = reader.read_uint16()
        if code >> 8 == 0xA0:
            name = _HEADER_NAMES_BY_CODE[code]
        else:
            name = reader.read_string_body(code)
        request["headers"].append((name, reader.read_string()))
    while True:
        code = reader.read_byte()
        if code == 0xFF:
            break
        request["attributes"].append((code, reader.read_string()))
    assert reader.remaining == 0
    return request


@pytest.fixture(autouse=True)
def _reset_container() -> Any:
    """Reset container overrides and caches around every test."""
    reset_container()
    yield
    reset_container()


@pytest.fixture(autouse=True)
def _reset_logging() -> Any:
    """Drop structlog configuration bound to a captured stderr."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def ajp() -> SimpleNamespace:
    """Container-side packet builders and request parser."""
    return SimpleNamespace(
        packet=container_packet,
        send_headers=send_headers,
        body_chunk=body_chunk,
        end_response=end_response,
        parse_request=parse_forward_request,
        stream=DuplexStream,
    )


@pytest.fixture
def ok_reply(ajp: SimpleNamespace) -> bytes:
    """Single-chunk ``200 OK`` reply with a text/plain body ``OK``."""
    return (
        ajp.send_headers(200, "OK", [(0xA001, "text/plain")])
        + ajp.body_chunk(b"OK")
        + ajp.end_response(reuse=True)
    )
