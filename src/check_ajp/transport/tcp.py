"""TCP transport implementation.

This module opens the connection to the container and exposes it as a
buffered binary stream for the AJP13 codec. It has NO knowledge of the
AJP13 wire format or of the check logic.
"""

from __future__ import annotations

import socket
from typing import Any, BinaryIO

import structlog

from check_ajp.transport.exceptions import NetworkError, TimeoutError, TransportError

logger = structlog.get_logger()


class SocketTransport:
    """Blocking TCP transport to an AJP13 container.

    Args:
        host: Container host name or IP address
        port: Container AJP port (default: 8009)
        connect_timeout: Connect timeout in seconds (default: 1.0)
        io_timeout: Timeout for each read or write in seconds (default: 10.0)

    Attributes:
        host: Container host
        port: Container port
        connect_timeout: Connect timeout in seconds
        io_timeout: Read/write timeout in seconds

    Example:
        >>> with SocketTransport("127.0.0.1", 8009) as transport:
        ...     transport.stream.write(packet)
    """

    def __init__(
        self,
        host: str,
        port: int = 8009,
        connect_timeout: float = 1.0,
        io_timeout: float = 10.0,
    ) -> None:
        """Initialize TCP transport.

        Raises:
            ValueError: If host is empty
        """
        if not host:
            raise ValueError("host cannot be empty")

        self.host = host
        self.port = port
        self.connect_timeout = connect_timeout
        self.io_timeout = io_timeout
        self._sock: socket.socket | None = None
        self._stream: BinaryIO | None = None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def connect(self) -> None:
        """Open the connection.

        Raises:
            TimeoutError: If the connection is not established in time
            NetworkError: If the connection fails
        """
        if self._sock is not None:
            return

        try:
            sock = socket.create_connection(
                (self.host, self.port), timeout=self.connect_timeout
            )
        except socket.timeout as e:
            raise TimeoutError(
                message=f"Connection timed out after {self.connect_timeout}s",
                address=self.address,
                cause=e,
            )
        except OSError as e:
            raise NetworkError(
                message=f"Connection failed: {e}",
                address=self.address,
                cause=e,
            )

        sock.settimeout(self.io_timeout)
        self._sock = sock
        self._stream = sock.makefile("rwb")
        logger.debug("Connected to AJP13 container", address=self.address)

    @property
    def stream(self) -> BinaryIO:
        """Buffered binary stream over the connection.

        Raises:
            TransportError: If the transport is not connected
        """
        if self._stream is None:
            raise TransportError("Transport is not connected", address=self.address)
        return self._stream

    @property
    def local_address(self) -> str:
        """Local IP address of the connection."""
        if self._sock is None:
            raise TransportError("Transport is not connected", address=self.address)
        host: str = self._sock.getsockname()[0]
        return host

    def close(self) -> None:
        """Close the stream and the socket."""
        if self._stream is not None:
            try:
                self._stream.close()
            except OSError:
                logger.debug("Error closing stream", address=self.address)
            self._stream = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> SocketTransport:
        """Context manager entry, connecting if needed."""
        self.connect()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
