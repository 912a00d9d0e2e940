"""AJP13 client.

Runs one request/response exchange over a connected transport. The codec
itself leaves stream errors untouched; this is the layer that translates
them into transport errors.
"""

from __future__ import annotations

import socket

import structlog

from check_ajp.protocol.decoder import read_cpong, read_response
from check_ajp.protocol.encoder import encode_cping, write_forward_request
from check_ajp.protocol.framing import DEFAULT_MAX_PACKET_SIZE, write_packet
from check_ajp.protocol.models import AJP13Response, ForwardRequest
from check_ajp.transport.exceptions import NetworkError, TimeoutError
from check_ajp.transport.tcp import SocketTransport

logger = structlog.get_logger()


class Ajp13Client:
    """AJP13 client bound to one transport.

    The protocol is half-duplex: one request, then its full reply. Calls
    on the same client must not be interleaved.

    Args:
        transport: TCP transport (connected on first use)
        max_packet_size: Largest packet the container accepts

    Example:
        >>> with SocketTransport("127.0.0.1", 8009) as transport:
        ...     client = Ajp13Client(transport)
        ...     response = client.forward(ForwardRequest(uri="/"))
        >>> response.status_code
        200
    """

    def __init__(
        self,
        transport: SocketTransport,
        max_packet_size: int | None = DEFAULT_MAX_PACKET_SIZE,
    ) -> None:
        self.transport = transport
        self.max_packet_size = max_packet_size

    def forward(self, request: ForwardRequest) -> AJP13Response:
        """Send a forward request and read the complete response.

        Empty ``remote_addr`` / ``remote_host`` are filled with the local
        address of the connection.

        Raises:
            RequestValidationError: If the request cannot be encoded
            ProtocolError: If the reply violates the wire format
            ShortReadError: If the container closes the connection early
            TimeoutError: If a read or write deadline is exceeded
            NetworkError: If the connection fails
        """
        self.transport.connect()

        if not request.remote_addr or not request.remote_host:
            local = self.transport.local_address
            if not request.remote_addr:
                request.remote_addr = local
            if not request.remote_host:
                request.remote_host = local

        stream = self.transport.stream
        try:
            write_forward_request(stream, request, self.max_packet_size)
            return read_response(stream)
        except socket.timeout as e:
            raise TimeoutError(
                message=f"read timeout exceeded ({self.transport.io_timeout:.3f}s)",
                address=self.transport.address,
                cause=e,
            )
        except OSError as e:
            raise NetworkError(
                message=f"Connection failed: {e}",
                address=self.transport.address,
                cause=e,
            )

    def ping(self) -> None:
        """Send a CPing and wait for the container's CPong.

        Raises:
            UnexpectedPacketError: If the container answers with another packet
            TimeoutError: If the container does not answer in time
            NetworkError: If the connection fails
        """
        self.transport.connect()
        stream = self.transport.stream
        try:
            write_packet(stream, encode_cping(), self.max_packet_size)
            read_cpong(stream)
        except socket.timeout as e:
            raise TimeoutError(
                message=f"no CPong within {self.transport.io_timeout:.3f}s",
                address=self.transport.address,
                cause=e,
            )
        except OSError as e:
            raise NetworkError(
                message=f"Connection failed: {e}",
                address=self.transport.address,
                cause=e,
            )
        logger.debug("CPong received", address=self.transport.address)
