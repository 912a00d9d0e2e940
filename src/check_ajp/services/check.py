"""Check service: probe an AJP13 container and rate the result.

This service builds a forward request from check options, runs it through
the AJP13 client and maps the outcome onto the monitoring-plugin status
convention (OK / WARNING / CRITICAL / UNKNOWN). It has no knowledge of the
wire format.
"""

from __future__ import annotations

import json
import time
from enum import IntEnum
from typing import Any, Callable

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator

from check_ajp import __version__
from check_ajp.protocol.client import Ajp13Client
from check_ajp.protocol.exceptions import CodecError, RequestValidationError
from check_ajp.protocol.framing import DEFAULT_MAX_PACKET_SIZE
from check_ajp.protocol.models import (
    AJP13Response,
    Attribute,
    ForwardRequest,
    RequestHeader,
)
from check_ajp.services.exceptions import CheckError, ValidationError
from check_ajp.transport.exceptions import TimeoutError, TransportError
from check_ajp.transport.tcp import SocketTransport

logger = structlog.get_logger()

TransportFactory = Callable[[str, int, float, float], SocketTransport]


class PluginStatus(IntEnum):
    """Monitoring-plugin status; the value is the process exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


def default_user_agent() -> str:
    return f"check_ajp ({__version__})"


class CheckOptions(BaseModel):
    """Settings for one check run.

    Attributes:
        host: Container host name or IP address
        port: Container AJP port
        uri: Request URI, optionally with a query string
        method: HTTP method (GET or HEAD)
        protocol: HTTP protocol version string
        vhost: Host header value (optional)
        user_agent: User-Agent header value (default: check_ajp (x.y.z))
        headers: Additional ``Name: value`` headers
        attributes: Additional ``name=value`` attributes
        ssl: isSSL flag sent to the container
        remote_addr: remote_addr field (default: local socket address)
        remote_host: remote_host field (default: local socket address)
        connect_timeout: Connect timeout in seconds
        warning: Response time warning threshold in seconds
        critical: Response time critical threshold, also the read/write timeout
        expect: Expected status codes (empty: any status below 400)
        json_key: Dot-separated key into a JSON response body
        json_value: Expected value at json_key
    """

    host: str = Field(default="127.0.0.1", min_length=1)
    port: int = Field(default=8009, ge=1, le=65535)
    uri: str = Field(default="/")
    method: str = Field(default="GET")
    protocol: str = Field(default="HTTP/1.0")
    vhost: str | None = None
    user_agent: str | None = None
    headers: list[str] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)
    ssl: bool = False
    remote_addr: str | None = None
    remote_host: str | None = None
    connect_timeout: float = Field(default=1.0, gt=0)
    warning: float = Field(default=5.0, ge=0)
    critical: float = Field(default=10.0, gt=0)
    expect: list[str] = Field(default_factory=list)
    json_key: str | None = None
    json_value: str | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def check_json_pair(self) -> CheckOptions:
        if bool(self.json_key) != bool(self.json_value):
            raise ValidationError("--json-key and --json-value must be used together")
        return self


class CheckResult(BaseModel):
    """Outcome of one check run.

    Attributes:
        status: Plugin status
        message: Explanation for a non-OK status (or None)
        response: Decoded response, None if the exchange failed
        elapsed: Seconds from connect to complete response
        json_document: Pretty-printed JSON body when a JSON check ran
    """

    status: PluginStatus
    message: str | None = None
    response: AJP13Response | None = None
    elapsed: float = 0.0
    json_document: str | None = None


class PingResult(BaseModel):
    """Outcome of a CPing/CPong probe."""

    status: PluginStatus
    message: str | None = None
    elapsed: float = 0.0


def build_request(options: CheckOptions) -> ForwardRequest:
    """Build the forward request described by check options.

    A query string in the URI becomes a ``query_string`` attribute, the
    virtual host becomes a ``Host`` header and a ``User-Agent`` header is
    always sent.

    Raises:
        UnsupportedMethodError: If the method is not GET or HEAD
        InvalidHeaderError: If an extra header is malformed
        UnknownAttributeError: If an extra attribute is unknown
    """
    uri, _, query = options.uri.partition("?")
    attributes = list(options.attributes)
    if query:
        attributes.append(f"query_string={query}")

    headers = list(options.headers)
    if options.vhost:
        headers.append(f"Host: {options.vhost}")
    headers.append(f"User-Agent: {options.user_agent or default_user_agent()}")

    return ForwardRequest(
        method=options.method,
        protocol=options.protocol,
        uri=uri,
        remote_addr=options.remote_addr or "",
        remote_host=options.remote_host or "",
        server_name=options.host,
        server_port=options.port,
        is_ssl=options.ssl,
        headers=[RequestHeader.parse(h) for h in headers],
        attributes=[Attribute.parse(a) for a in attributes],
    )


def evaluate_status_code(
    status_code: int, expect: list[str]
) -> tuple[PluginStatus, str | None]:
    """Rate an HTTP status code.

    Without an expect list, 5xx is CRITICAL and 4xx is WARNING. With one,
    any code not in the list is WARNING.
    """
    unexpected = f"Unexpected status code: {status_code}"
    if not expect:
        if status_code >= 500:
            return PluginStatus.CRITICAL, unexpected
        if status_code >= 400:
            return PluginStatus.WARNING, unexpected
        return PluginStatus.OK, None

    if str(status_code) in {e.strip() for e in expect}:
        return PluginStatus.OK, None
    return PluginStatus.WARNING, unexpected


def lookup_json(document: Any, key: str) -> Any:
    """Follow a dot-separated key through nested objects and arrays.

    Raises:
        CheckError: If a path segment does not exist
    """
    value = document
    for part in key.split("."):
        if isinstance(value, dict) and part in value:
            value = value[part]
        elif isinstance(value, list) and part.isdigit() and int(part) < len(value):
            value = value[int(part)]
        else:
            raise CheckError(f"`{key}` not found in response body", details={"key": key})
    return value


def _json_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)


def evaluate_json(
    body: bytes, key: str, expected: str
) -> tuple[PluginStatus, str | None, str | None]:
    """Compare a value in a JSON body against the expected value.

    Non-string values are compared by their JSON text (``true``, ``42``).

    Returns:
        (status, message, pretty-printed document or None)
    """
    try:
        document = json.loads(body)
    except ValueError:
        return PluginStatus.CRITICAL, "response body is not valid JSON", None

    pretty = json.dumps(document, indent=4, ensure_ascii=False)
    mismatch = f"`{key}` is not `{expected}`"
    try:
        value = lookup_json(document, key)
    except CheckError:
        return PluginStatus.CRITICAL, mismatch, pretty
    if _json_text(value) != expected:
        return PluginStatus.CRITICAL, mismatch, pretty
    return PluginStatus.OK, None, pretty


def evaluate(options: CheckOptions, response: AJP13Response, elapsed: float) -> CheckResult:
    """Rate a complete response against the check options."""
    status, message = evaluate_status_code(response.status_code, options.expect)

    json_document = None
    if options.json_key and options.json_value:
        json_status, json_message, json_document = evaluate_json(
            response.body, options.json_key, options.json_value
        )
        if json_status is not PluginStatus.OK:
            status, message = json_status, json_message

    if status is PluginStatus.OK and elapsed > options.warning:
        status = PluginStatus.WARNING
        message = (
            f"response time {elapsed:.3f}s exceeded warning threshold "
            f"{options.warning:.3f}s"
        )

    return CheckResult(
        status=status,
        message=message,
        response=response,
        elapsed=elapsed,
        json_document=json_document,
    )


class CheckService:
    """Service for AJP13 health checks.

    Args:
        transport_factory: Builds a transport from
            (host, port, connect_timeout, io_timeout)
        max_packet_size: Largest packet the container accepts
        clock: Monotonic clock in seconds

    Example:
        >>> service = CheckService()
        >>> result = service.run(CheckOptions(host="127.0.0.1", uri="/health"))
        >>> result.status
        <PluginStatus.OK: 0>
    """

    def __init__(
        self,
        transport_factory: TransportFactory = SocketTransport,
        max_packet_size: int | None = DEFAULT_MAX_PACKET_SIZE,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.transport_factory = transport_factory
        self.max_packet_size = max_packet_size
        self.clock = clock

    def run(self, options: CheckOptions) -> CheckResult:
        """Run one check.

        Request validation failures give UNKNOWN; connection, timeout and
        protocol failures give CRITICAL; otherwise the response is rated by
        evaluate().
        """
        try:
            request = build_request(options)
        except RequestValidationError as e:
            return CheckResult(status=PluginStatus.UNKNOWN, message=e.message)

        log = logger.bind(address=f"{options.host}:{options.port}", uri=options.uri)
        started = self.clock()
        transport = self.transport_factory(
            options.host, options.port, options.connect_timeout, options.critical
        )

        connected = False
        try:
            with transport:
                connected = True
                client = Ajp13Client(transport, self.max_packet_size)
                response = client.forward(request)
        except TimeoutError as e:
            if connected:
                message = (
                    f"read timeout exceeded critical threshold {options.critical:.3f}s "
                    f"({e.message})"
                )
            else:
                message = str(e)
            log.warning("AJP13 check timed out", error=message)
            return CheckResult(status=PluginStatus.CRITICAL, message=message)
        except RequestValidationError as e:
            log.warning("AJP13 request rejected", error=e.message)
            return CheckResult(status=PluginStatus.UNKNOWN, message=e.message)
        except (TransportError, CodecError) as e:
            log.warning("AJP13 check failed", error=str(e), error_type=type(e).__name__)
            return CheckResult(status=PluginStatus.CRITICAL, message=str(e))

        elapsed = self.clock() - started
        result = evaluate(options, response, elapsed)
        log.info(
            "AJP13 check finished",
            warnings=len(response.warnings),
            status=result.status.name,
            status_code=response.status_code,
            elapsed=round(elapsed, 6),
        )
        return result

    def ping(
        self,
        host: str,
        port: int,
        connect_timeout: float = 1.0,
        timeout: float = 10.0,
    ) -> PingResult:
        """Probe the container with CPing/CPong."""
        started = self.clock()
        transport = self.transport_factory(host, port, connect_timeout, timeout)
        try:
            with transport:
                Ajp13Client(transport, self.max_packet_size).ping()
        except (TransportError, CodecError) as e:
            return PingResult(status=PluginStatus.CRITICAL, message=str(e))
        return PingResult(status=PluginStatus.OK, elapsed=self.clock() - started)
