"""Check commands.

This module provides the monitoring commands:
- check: Send a forward request and rate the response
- ping: Probe the container with CPing/CPong

Both exit with the monitoring-plugin status code (0 OK, 1 WARNING,
2 CRITICAL, 3 UNKNOWN).
"""

from __future__ import annotations

from typing import Annotated

import typer

from check_ajp.config import Config
from check_ajp.container import get_check_service, get_config
from check_ajp.formatters import (
    format_body,
    format_header_dump,
    format_headers_table,
    format_json,
    format_ping_line,
    format_status_line,
    result_to_dict,
)
from check_ajp.logging import configure_logging
from check_ajp.services.check import CheckOptions, PluginStatus
from check_ajp.services.exceptions import ServiceError


def _load_config() -> Config:
    try:
        return get_config()
    except ValueError as e:
        print(f"AJP {PluginStatus.UNKNOWN.name} - {e}")
        raise typer.Exit(int(PluginStatus.UNKNOWN))


def check(
    ipaddr: Annotated[
        str | None,
        typer.Option("--ipaddr", "-I", help="IP address or server hostname (default: 127.0.0.1)"),
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="TCP port (default: 8009)")
    ] = None,
    uri: Annotated[str, typer.Option("--uri", "-u", help="URI")] = "/",
    method: Annotated[str, typer.Option("--method", "-m", help="HTTP method")] = "GET",
    protocol: Annotated[
        str | None, typer.Option("--protocol", "-P", help="HTTP protocol (default: HTTP/1.0)")
    ] = None,
    vhost: Annotated[str | None, typer.Option("--vhost", "-H", help="Host header value")] = None,
    user_agent: Annotated[
        str | None,
        typer.Option("--useragent", "-A", help="User-Agent header (default: check_ajp (x.y.z))"),
    ] = None,
    headers: Annotated[
        list[str] | None,
        typer.Option("--header", "-k", help="Additional header 'Name: value' (repeatable)"),
    ] = None,
    attributes: Annotated[
        list[str] | None,
        typer.Option("--attr", "-a", help="Attribute 'name=value', e.g. route=node1 (repeatable)"),
    ] = None,
    ssl: Annotated[bool, typer.Option("--ssl", "-s", help="Set the isSSL flag")] = False,
    timeout: Annotated[
        float | None, typer.Option("--timeout", "-t", help="Connect timeout in seconds")
    ] = None,
    warn: Annotated[
        float | None, typer.Option("--warn", "-w", help="Warning time in seconds")
    ] = None,
    crit: Annotated[
        float | None, typer.Option("--crit", "-c", help="Critical time in seconds")
    ] = None,
    expect: Annotated[
        str, typer.Option("--expect", "-e", help="Expected status codes (csv)")
    ] = "",
    json_key: Annotated[
        str | None, typer.Option("--json-key", help="Dot-separated JSON key")
    ] = None,
    json_value: Annotated[
        str | None, typer.Option("--json-value", help="Expected JSON value")
    ] = None,
    remote_addr: Annotated[
        str | None, typer.Option("--remote-addr", help="remote_addr value")
    ] = None,
    remote_host: Annotated[
        str | None, typer.Option("--remote-host", help="remote_host value")
    ] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Verbose output (repeatable)")
    ] = 0,
    json_output: Annotated[
        bool, typer.Option("--json", "-j", help="Output the result as JSON")
    ] = False,
) -> None:
    """Check an AJP13 container by forwarding a request.

    Examples:
        # Check the root context on the local container
        check-ajp check

        # Check a health endpoint through a virtual host
        check-ajp check -I app01 -u /health -H www.example.com

        # Require status 200 and a JSON field
        check-ajp check -u /status -e 200 --json-key app.state --json-value up
    """
    config = _load_config()
    verbosity = verbose or config.output.verbose
    configure_logging(verbosity)

    try:
        options = CheckOptions(
            host=ipaddr or config.connection.host,
            port=port if port is not None else config.connection.port,
            uri=uri,
            method=method,
            protocol=protocol or config.request.protocol,
            vhost=vhost,
            user_agent=user_agent or config.request.user_agent,
            headers=headers or [],
            attributes=attributes or [],
            ssl=ssl,
            remote_addr=remote_addr,
            remote_host=remote_host,
            connect_timeout=timeout if timeout is not None else config.connection.timeout,
            warning=warn if warn is not None else config.thresholds.warning,
            critical=crit if crit is not None else config.thresholds.critical,
            expect=[e for e in expect.split(",") if e.strip()],
            json_key=json_key,
            json_value=json_value,
        )
    except ServiceError as e:
        print(f"AJP {PluginStatus.UNKNOWN.name} - {e.message}")
        raise typer.Exit(int(PluginStatus.UNKNOWN))
    except ValueError as e:
        print(f"AJP {PluginStatus.UNKNOWN.name} - invalid options: {e}")
        raise typer.Exit(int(PluginStatus.UNKNOWN))

    result = get_check_service().run(options)

    if json_output:
        # Use print() for JSON to avoid Rich's text wrapping
        print(format_json(result_to_dict(result)))
        raise typer.Exit(int(result.status))

    if result.response is not None and verbosity > 0:
        print("[RESPONSE HEADER]")
        if verbosity > 2:
            force_color = None if config.output.color else False
            print(format_headers_table(result.response, force_color=force_color))
        else:
            print(format_header_dump(result.response))
        print("")
        if verbosity > 1:
            print("[RESPONSE BODY]")
            print(format_body(result.response))
            print("")

    print(format_status_line(result))
    if result.response is not None and result.message:
        print(result.message)
    if result.json_document:
        print(f"\n{result.json_document}")

    raise typer.Exit(int(result.status))


def ping(
    ipaddr: Annotated[
        str | None,
        typer.Option("--ipaddr", "-I", help="IP address or server hostname (default: 127.0.0.1)"),
    ] = None,
    port: Annotated[
        int | None, typer.Option("--port", "-p", help="TCP port (default: 8009)")
    ] = None,
    timeout: Annotated[
        float | None, typer.Option("--timeout", "-t", help="Connect timeout in seconds")
    ] = None,
    crit: Annotated[
        float | None, typer.Option("--crit", "-c", help="Seconds to wait for the CPong")
    ] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Verbose output (repeatable)")
    ] = 0,
) -> None:
    """Probe an AJP13 container with CPing/CPong.

    Examples:
        check-ajp ping -I app01 -p 8009
    """
    config = _load_config()
    configure_logging(verbose or config.output.verbose)

    host = ipaddr or config.connection.host
    port = port if port is not None else config.connection.port
    result = get_check_service().ping(
        host,
        port,
        connect_timeout=timeout if timeout is not None else config.connection.timeout,
        timeout=crit if crit is not None else config.thresholds.critical,
    )
    print(format_ping_line(result, f"{host}:{port}"))
    raise typer.Exit(int(result.status))
