"""Transport layer for check-ajp.

This module handles the TCP connection to the container with no knowledge
of the AJP13 wire format or the check logic. It is responsible for:
- Connection establishment with a connect timeout
- Read/write deadlines
- Exposing the connection as a binary stream
- Network error translation
"""

from check_ajp.transport.exceptions import NetworkError, TimeoutError, TransportError
from check_ajp.transport.tcp import SocketTransport

__all__ = [
    "SocketTransport",
    "TransportError",
    "NetworkError",
    "TimeoutError",
]
