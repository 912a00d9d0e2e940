"""Output formatters for check-ajp.

Provides:
- The single-line monitoring-plugin status with performance data
- Verbose dumps of the response headers (rich table) and body
- JSON rendering of results for scripting

Color is auto-detected and disabled for piped output.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from check_ajp.protocol.models import AJP13Response
from check_ajp.services.check import CheckResult, PingResult, PluginStatus


def _should_use_color() -> bool:
    """Determine if color output should be used.

    Color is disabled when:
    - Output is piped (not a TTY)
    - NO_COLOR environment variable is set
    - TERM is set to "dumb"
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return sys.stdout.isatty()


def _get_console(force_color: bool | None = None) -> Console:
    """Get a Rich Console with appropriate color settings.

    Args:
        force_color: If True, force color output. If False, disable color.
                    If None, auto-detect based on environment.
    """
    if force_color is None:
        force_color = _should_use_color()

    return Console(
        force_terminal=force_color,
        no_color=not force_color,
        legacy_windows=False,
    )


def format_status_line(result: CheckResult) -> str:
    """Format the plugin status line.

    With a response::

        AJP OK: 200 - 2 bytes in 0.012 second response time |time=0.012345s;;;0.000000 size=2B;;;0

    Without one::

        AJP CRITICAL - Connection failed: [Errno 111] Connection refused
    """
    status = result.status.name
    if result.response is None:
        return f"AJP {status} - {result.message or 'no response'}"

    size = result.response.content_length
    return (
        f"AJP {status}: {result.response.status_code} - {size} bytes in "
        f"{result.elapsed:.3f} second response time "
        f"|time={result.elapsed:.6f}s;;;{0.0:.6f} size={size}B;;;0"
    )


def format_ping_line(result: PingResult, address: str) -> str:
    if result.status is PluginStatus.OK:
        return (
            f"AJP {result.status.name}: CPong from {address} in {result.elapsed:.3f} "
            f"second response time |time={result.elapsed:.6f}s;;;{0.0:.6f}"
        )
    return f"AJP {result.status.name} - {result.message or 'no CPong'}"


def format_header_dump(response: AJP13Response) -> str:
    """Format status and headers as plain ``Name: value`` lines."""
    lines = [
        f"StatusCode: {response.status_code}",
        f"StatusMessage: {response.status_message}",
    ]
    for header in response.headers:
        name = "-".join(part.capitalize() for part in header.name.split("-"))
        lines.append(f"{name}: {header.value}")
    return "\n".join(lines)


def format_headers_table(
    response: AJP13Response,
    force_color: bool | None = None,
) -> str:
    """Format the response headers as a rich table."""
    table = Table(
        title=f"{response.status_code} {response.status_message}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Header", overflow="fold")
    table.add_column("Value", overflow="fold")
    for header in response.headers:
        table.add_row(header.name, header.value)

    console = _get_console(force_color)
    with console.capture() as capture:
        console.print(table)
    return capture.get()


def format_body(response: AJP13Response) -> str:
    return response.body.decode("utf-8", errors="replace")


def format_json(data: Any, pretty: bool = True) -> str:
    """Format data as JSON."""
    if pretty:
        return json.dumps(data, indent=2, sort_keys=False, ensure_ascii=False)
    return json.dumps(data, ensure_ascii=False)


def result_to_dict(result: CheckResult) -> dict[str, Any]:
    """Convert a check result to JSON-serializable data."""
    data: dict[str, Any] = {
        "status": result.status.name,
        "exit_code": int(result.status),
        "message": result.message,
        "elapsed": round(result.elapsed, 6),
    }
    if result.response is not None:
        data["response"] = {
            "status_code": result.response.status_code,
            "status_message": result.response.status_message,
            "headers": [[h.name, h.value] for h in result.response.headers],
            "size": result.response.content_length,
            "reuse_connection": result.response.reuse_connection,
            "warnings": result.response.warnings,
        }
    return data
