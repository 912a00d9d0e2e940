"""Unit tests for AJP13 protocol models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from check_ajp.protocol.exceptions import (
    InvalidHeaderError,
    UnknownAttributeError,
    UnsupportedMethodError,
)
from check_ajp.protocol.models import (
    AJP13Response,
    Attribute,
    ForwardRequest,
    Method,
    RequestHeader,
    ResponseHeader,
)


class TestForwardRequest:
    """Tests for ForwardRequest model."""

    def test_defaults(self) -> None:
        request = ForwardRequest()
        assert request.method is Method.GET
        assert request.protocol == "HTTP/1.0"
        assert request.uri == "/"
        assert request.is_ssl is False
        assert request.headers == []
        assert request.attributes == []

    def test_method_is_normalized_to_upper_case(self) -> None:
        assert ForwardRequest(method="get").method is Method.GET
        assert ForwardRequest(method="Head").method is Method.HEAD

    def test_method_code(self) -> None:
        assert Method.GET.code == 2
        assert Method.HEAD.code == 3

    def test_unsupported_method_rejected(self) -> None:
        with pytest.raises(UnsupportedMethodError) as exc_info:
            ForwardRequest(method="POST")
        assert exc_info.value.method == "POST"
        assert "POST method is not yet supported." in str(exc_info.value)

    def test_unsupported_method_rejected_on_assignment(self) -> None:
        request = ForwardRequest()
        with pytest.raises(UnsupportedMethodError):
            request.method = "delete"  # type: ignore[assignment]
        assert request.method is Method.GET

    def test_server_port_range(self) -> None:
        ForwardRequest(server_port=65535)
        with pytest.raises(ValidationError):
            ForwardRequest(server_port=65536)

    def test_add_header_and_attribute(self) -> None:
        request = ForwardRequest()
        request.add_header("Accept", "*/*")
        request.add_attribute("route", "node1")
        assert request.headers == [RequestHeader(name="accept", value="*/*")]
        assert request.attributes == [Attribute(code=0x06, value="node1")]

    def test_add_unknown_attribute_rejected(self) -> None:
        request = ForwardRequest()
        with pytest.raises(UnknownAttributeError):
            request.add_attribute("jvmroute", "node1")
        assert request.attributes == []


class TestRequestHeader:
    """Tests for RequestHeader model."""

    def test_name_is_lower_cased(self) -> None:
        assert RequestHeader(name="Content-Type", value="text/plain").name == "content-type"

    def test_known_name_has_code(self) -> None:
        assert RequestHeader(name="Host", value="example.com").code == 0xA00B

    def test_unknown_name_has_no_code(self) -> None:
        assert RequestHeader(name="X-Request-Id", value="1").code is None

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(InvalidHeaderError):
            RequestHeader(name="  ", value="x")

    def test_parse(self) -> None:
        header = RequestHeader.parse("X-Forwarded-For:  10.0.0.1 ")
        assert header.name == "x-forwarded-for"
        assert header.value == "10.0.0.1"

    def test_parse_keeps_colons_in_value(self) -> None:
        assert RequestHeader.parse("Referer: http://example.com/").value == "http://example.com/"

    def test_parse_without_separator(self) -> None:
        with pytest.raises(InvalidHeaderError):
            RequestHeader.parse("no-separator")


class TestAttribute:
    """Tests for Attribute model."""

    def test_from_name(self) -> None:
        assert Attribute.from_name("Query_String", "a=1") == Attribute(code=0x05, value="a=1")

    def test_from_unknown_name(self) -> None:
        with pytest.raises(UnknownAttributeError) as exc_info:
            Attribute.from_name("bogus", "x")
        assert exc_info.value.name == "bogus"

    @pytest.mark.parametrize("name", ["context", "servlet_path"])
    def test_reserved_names_rejected(self, name: str) -> None:
        with pytest.raises(UnknownAttributeError):
            Attribute.from_name(name, "/app")

    def test_parse_splits_on_first_equals(self) -> None:
        assert Attribute.parse("query_string=a=1&b=2").value == "a=1&b=2"

    def test_parse_without_separator(self) -> None:
        with pytest.raises(UnknownAttributeError):
            Attribute.parse("route")

    def test_terminator_code_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Attribute(code=0xFF, value="x")

    @pytest.mark.parametrize("code", [0x01, 0x02, 0x50])
    def test_unknown_or_reserved_code_rejected(self, code: int) -> None:
        with pytest.raises(UnknownAttributeError):
            Attribute(code=code, value="/app")

    def test_known_code_accepted(self) -> None:
        assert Attribute(code=0x06, value="node1").code == 0x06


class TestAJP13Response:
    """Tests for AJP13Response model."""

    def test_defaults(self) -> None:
        response = AJP13Response()
        assert response.status_code == 0
        assert response.body == b""
        assert response.warnings == []

    def test_header_lookup_is_case_insensitive_and_returns_all_values(self) -> None:
        response = AJP13Response(
            headers=[
                ResponseHeader(name="set-cookie", value="a=1"),
                ResponseHeader(name="content-type", value="text/plain"),
                ResponseHeader(name="Set-Cookie", value="b=2"),
            ]
        )
        assert response.header("SET-COOKIE") == ["a=1", "b=2"]
        assert response.header("location") == []

    def test_content_length(self) -> None:
        assert AJP13Response(body=b"Hello").content_length == 5
