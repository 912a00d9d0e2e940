"""AJP13 protocol models.

Pydantic models for the forward request sent to the container and the
response assembled from the container's reply packets.

Validators raise the codec's own exceptions (not ValueError), so pydantic
lets them propagate unchanged: an unsupported method surfaces as
UnsupportedMethodError the moment the request is built.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from check_ajp.protocol.codes import (
    METHOD_CODES,
    RESERVED_ATTRIBUTES,
    SENDABLE_ATTRIBUTE_CODES,
    request_attribute_code,
    request_header_code,
)
from check_ajp.protocol.exceptions import (
    InvalidHeaderError,
    UnknownAttributeError,
    UnsupportedMethodError,
)


class Method(str, Enum):
    """HTTP methods this client can forward."""

    GET = "GET"
    HEAD = "HEAD"

    @property
    def code(self) -> int:
        return METHOD_CODES[self.value]


class RequestHeader(BaseModel):
    """Request header forwarded to the container.

    Header names are case-insensitive and stored lower-cased.

    Example:
        >>> RequestHeader.parse("Content-Type: text/plain")
        RequestHeader(name='content-type', value='text/plain')
    """

    name: str = Field(..., description="Header name (lower-cased)")
    value: str = Field(default="", description="Header value")

    model_config = ConfigDict(frozen=True)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            if not v:
                raise InvalidHeaderError("header name cannot be empty")
        return v

    @property
    def code(self) -> int | None:
        """2-byte header code, or None when the name is sent literally."""
        return request_header_code(self.name)

    @classmethod
    def parse(cls, raw: str) -> RequestHeader:
        """Parse a ``Name: value`` header string.

        Raises:
            InvalidHeaderError: If the separator is missing
        """
        name, sep, value = raw.partition(":")
        if not sep:
            raise InvalidHeaderError(
                f"invalid header (expected 'Name: value'): {raw}",
                details={"header": raw},
            )
        return cls(name=name, value=value.strip())


class Attribute(BaseModel):
    """Request attribute: 1-byte code from the attribute table plus value.

    The codes of the reserved context and servlet_path attributes are rejected.
    """

    code: int = Field(..., ge=0x01, le=0xFE, description="Attribute code")
    value: str = Field(default="", description="Attribute value")

    model_config = ConfigDict(frozen=True)

    @field_validator("code")
    @classmethod
    def check_code(cls, v: int) -> int:
        if v not in SENDABLE_ATTRIBUTE_CODES:
            raise UnknownAttributeError(f"0x{v:02x}")
        return v

    @classmethod
    def from_name(cls, name: str, value: str) -> Attribute:
        """Build an attribute from its name.

        Raises:
            UnknownAttributeError: If the name is unknown or reserved
        """
        code = request_attribute_code(name)
        if code is None or name.lower() in RESERVED_ATTRIBUTES:
            raise UnknownAttributeError(name)
        return cls(code=code, value=value)

    @classmethod
    def parse(cls, raw: str) -> Attribute:
        """Parse a ``name=value`` attribute string."""
        name, sep, value = raw.partition("=")
        if not sep:
            raise UnknownAttributeError(raw)
        return cls.from_name(name.strip(), value)


class ForwardRequest(BaseModel):
    """AJP13 forward request.

    Attributes:
        method: HTTP method (GET or HEAD)
        protocol: HTTP protocol version string
        uri: Request URI without query string
        remote_addr: Client address as seen by the container
        remote_host: Client host name as seen by the container
        server_name: Server name the request is addressed to
        server_port: Server port
        is_ssl: Whether the original request arrived over SSL
        headers: Ordered request headers
        attributes: Ordered request attributes

    Example:
        >>> request = ForwardRequest(method="get", uri="/health", server_name="localhost")
        >>> request.method
        <Method.GET: 'GET'>
    """

    method: Method = Field(default=Method.GET, description="HTTP method")
    protocol: str = Field(default="HTTP/1.0", description="HTTP protocol")
    uri: str = Field(default="/", description="Request URI")
    remote_addr: str = Field(default="", description="Remote address")
    remote_host: str = Field(default="", description="Remote host")
    server_name: str = Field(default="", description="Server name")
    server_port: int = Field(default=80, ge=0, le=0xFFFF, description="Server port")
    is_ssl: bool = Field(default=False, description="SSL flag")
    headers: list[RequestHeader] = Field(default_factory=list)
    attributes: list[Attribute] = Field(default_factory=list)

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        if isinstance(v, Method):
            return v
        if isinstance(v, str):
            name = v.strip().upper()
            if name not in METHOD_CODES:
                raise UnsupportedMethodError(name)
            return Method(name)
        return v

    def add_header(self, name: str, value: str) -> None:
        self.headers.append(RequestHeader(name=name, value=value))

    def add_attribute(self, name: str, value: str) -> None:
        self.attributes.append(Attribute.from_name(name, value))


class ResponseHeader(BaseModel):
    """Response header received from the container."""

    name: str = Field(..., description="Header name")
    value: str = Field(default="", description="Header value")


class AJP13Response(BaseModel):
    """Response assembled from the container's reply packets.

    Only returned once an END_RESPONSE packet has been seen.

    Attributes:
        status_code: HTTP status code
        status_message: HTTP status message
        headers: Response headers in arrival order (names may repeat)
        body: Concatenated body chunks
        reuse_connection: Reuse flag from END_RESPONSE
        warnings: Non-fatal anomalies noticed while decoding
    """

    status_code: int = Field(default=0, description="HTTP status code")
    status_message: str = Field(default="", description="HTTP status message")
    headers: list[ResponseHeader] = Field(default_factory=list)
    body: bytes = Field(default=b"", description="Response body")
    reuse_connection: bool = Field(default=False, description="Reuse flag")
    warnings: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=False)

    def header(self, name: str) -> list[str]:
        """Return every value of a header, matched case-insensitively."""
        name = name.lower()
        return [h.value for h in self.headers if h.name.lower() == name]

    @property
    def content_length(self) -> int:
        return len(self.body)
