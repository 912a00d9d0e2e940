"""Unit tests for the AJP13 forward request encoder."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from check_ajp.protocol.encoder import (
    encode_cping,
    encode_forward_request,
    encode_header,
    write_forward_request,
)
from check_ajp.protocol.exceptions import (
    InvalidRequestError,
    PacketTooLargeError,
    UnknownAttributeError,
    UnsupportedMethodError,
)
from check_ajp.protocol.models import Attribute, ForwardRequest, Method, RequestHeader


@pytest.fixture
def request_with_everything() -> ForwardRequest:
    return ForwardRequest(
        method="GET",
        protocol="HTTP/1.1",
        uri="/health",
        remote_addr="10.0.0.5",
        remote_host="monitor.example.com",
        server_name="app01",
        server_port=8009,
        is_ssl=True,
        headers=[
            RequestHeader(name="Host", value="www.example.com"),
            RequestHeader(name="X-Trace", value="abc"),
            RequestHeader(name="User-Agent", value="check_ajp (0.1.0)"),
        ],
        attributes=[
            Attribute.from_name("query_string", "verbose=1"),
            Attribute.from_name("route", "node1"),
        ],
    )


class TestEncodeForwardRequest:
    """Tests for payload layout."""

    def test_minimal_request_layout(self) -> None:
        payload = encode_forward_request(
            ForwardRequest(uri="/", server_name="h", server_port=80)
        )
        assert payload == (
            b"\x02"  # forward request
            + b"\x02"  # GET
            + b"\x00\x08HTTP/1.0\x00"
            + b"\x00\x01/\x00"
            + b"\x00\x00\x00"  # remote_addr
            + b"\x00\x00\x00"  # remote_host
            + b"\x00\x01h\x00"
            + b"\x00\x50"  # port 80
            + b"\x00"  # is_ssl
            + b"\x00\x00"  # no headers
            + b"\xff"
        )

    def test_head_method_code(self) -> None:
        payload = encode_forward_request(ForwardRequest(method="HEAD"))
        assert payload[1] == 3

    def test_known_header_encodes_as_code(self) -> None:
        encoded = encode_header(RequestHeader(name="content-type", value="text/plain"))
        assert encoded == b"\xa0\x07" + b"\x00\x0atext/plain\x00"

    def test_known_header_never_encodes_as_literal(self) -> None:
        payload = encode_forward_request(
            ForwardRequest(headers=[RequestHeader(name="Content-Type", value="x")])
        )
        assert b"content-type" not in payload
        assert b"\xa0\x07\x00\x01x\x00" in payload

    def test_unknown_header_encodes_as_literal(self) -> None:
        encoded = encode_header(RequestHeader(name="X-Trace", value="abc"))
        assert encoded == b"\x00\x07x-trace\x00" + b"\x00\x03abc\x00"

    def test_attributes_and_terminator(self) -> None:
        payload = encode_forward_request(
            ForwardRequest(attributes=[Attribute.from_name("route", "n1")])
        )
        assert payload.endswith(b"\x06\x00\x02n1\x00\xff")

    def test_terminator_without_attributes(self) -> None:
        assert encode_forward_request(ForwardRequest()).endswith(b"\x00\x00\xff")

    def test_unvalidated_method_is_rejected(self) -> None:
        request = ForwardRequest.model_construct(method="POST")
        with pytest.raises(UnsupportedMethodError):
            encode_forward_request(request)

    @pytest.mark.parametrize("code", [0x01, 0x02, 0x50])
    def test_unvalidated_attribute_code_is_rejected(self, code: int) -> None:
        request = ForwardRequest.model_construct(
            attributes=[Attribute.model_construct(code=code, value="x")]
        )
        with pytest.raises(UnknownAttributeError):
            encode_forward_request(request)

    def test_oversized_string_is_rejected(self) -> None:
        with pytest.raises(InvalidRequestError):
            encode_forward_request(ForwardRequest(uri="/" + "a" * 0xFFFF))


class TestWriteForwardRequest:
    """Tests for framed writes."""

    def test_fields_survive_a_container_side_decode(
        self, ajp: SimpleNamespace, request_with_everything: ForwardRequest
    ) -> None:
        stream = ajp.stream()
        write_forward_request(stream, request_with_everything)
        decoded = ajp.parse_request(bytes(stream.written))

        assert decoded["prefix_code"] == 2
        assert decoded["method_code"] == 2
        assert decoded["protocol"] == "HTTP/1.1"
        assert decoded["uri"] == "/health"
        assert decoded["remote_addr"] == "10.0.0.5"
        assert decoded["remote_host"] == "monitor.example.com"
        assert decoded["server_name"] == "app01"
        assert decoded["server_port"] == 8009
        assert decoded["is_ssl"] is True
        assert decoded["headers"] == [
            ("host", "www.example.com"),
            ("x-trace", "abc"),
            ("user-agent", "check_ajp (0.1.0)"),
        ]
        assert decoded["attributes"] == [(0x05, "verbose=1"), (0x06, "node1")]

    @pytest.mark.parametrize("method", [Method.GET, Method.HEAD])
    def test_supported_methods_round_trip(self, ajp: SimpleNamespace, method: Method) -> None:
        stream = ajp.stream()
        write_forward_request(stream, ForwardRequest(method=method, uri="/x"))
        decoded = ajp.parse_request(bytes(stream.written))
        assert decoded["method_code"] == method.code
        assert decoded["uri"] == "/x"

    def test_mixed_case_method_encodes(self, ajp: SimpleNamespace) -> None:
        stream = ajp.stream()
        write_forward_request(stream, ForwardRequest(method="get"))
        assert ajp.parse_request(bytes(stream.written))["method_code"] == 2

    def test_post_writes_nothing(self, ajp: SimpleNamespace) -> None:
        stream = ajp.stream()
        with pytest.raises(UnsupportedMethodError):
            write_forward_request(stream, ForwardRequest(method="POST"))
        assert stream.written == b""

    def test_too_large_request_writes_nothing(self, ajp: SimpleNamespace) -> None:
        stream = ajp.stream()
        request = ForwardRequest(headers=[RequestHeader(name="cookie", value="c" * 9000)])
        with pytest.raises(PacketTooLargeError):
            write_forward_request(stream, request)
        assert stream.written == b""

    def test_returns_bytes_written(self, ajp: SimpleNamespace) -> None:
        stream = ajp.stream()
        written = write_forward_request(stream, ForwardRequest())
        assert written == len(stream.written)
        assert stream.written[:2] == b"\x12\x34"
        assert int.from_bytes(stream.written[2:4], "big") == written - 4


def test_cping_payload() -> None:
    assert encode_cping() == b"\x0a"
