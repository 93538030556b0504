"""
=============================================================================
TCP CONNECTION
=============================================================================

Owns one client socket and its lifecycle: resolve, connect with a timeout,
write, read until the peer closes, disconnect.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

                    connect() ok
    DISCONNECTED ─────────────────────► CONNECTED
         │                                  │
         │ connect() fails                  │ disconnect()
         │ disconnect()                     │
         ▼                                  │
       CLOSED ◄─────────────────────────────┘

    write() / read() unless CONNECTED  → NO_AVAILABLE_TCP_STREAM
    connect() while CONNECTED          → CONNECTION_FAILURE
    connect() while CLOSED             → NO_AVAILABLE_TCP_STREAM
    disconnect() is valid in every state and idempotent.

Only one connect attempt is made per TcpConnection instance. CLOSED is
terminal: a failed or finished connection is never reopened, so a new
probe needs a new instance.

=============================================================================
DEADLINES
=============================================================================

Each blocking call is bounded, so a silent peer cannot hang the probe:

    ┌────────────┬──────────────────────────────────────────────────────┐
    │  connect   │  connection_timeout, shared by all resolved addresses│
    │  write     │  read_timeout (sendall retries partial writes)       │
    │  read      │  read_timeout, as ONE deadline for the whole reply   │
    └────────────┴──────────────────────────────────────────────────────┘

A server that keeps the connection open after replying (keep-alive) is
read until the deadline; whatever arrived by then is returned.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional

from ..errors import ClientError, ClientErrorType


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Transport lifecycle states."""
    DISCONNECTED = "disconnected"  # Initial, no socket yet
    CONNECTED = "connected"        # Socket connected and owned
    CLOSED = "closed"              # Terminal, socket released or never opened


@dataclass
class TcpConnection:
    """
    A single-owner TCP connection to host:port.

    Attributes:
        host: Host name or IP address to connect to.
        port: TCP port.
        connection_timeout: Connect timeout in seconds.
        read_timeout: Deadline in seconds for reading the whole reply
            (also bounds writes).
        buffer_size: Bytes requested per recv() call.
        id: Short identifier used in log lines.
    """

    host: str
    port: int
    connection_timeout: float = 1.0
    read_timeout: float = 5.0
    buffer_size: int = 8192

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.DISCONNECTED

    # The live socket. Only this object touches it.
    _socket: Optional[socket.socket] = field(default=None, repr=False)

    @property
    def address(self) -> str:
        """host:port, with IPv6 literals bracketed."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{host}:{self.port}"

    @property
    def is_connected(self) -> bool:
        return self._socket is not None

    # =========================================================================
    # CONNECT
    # =========================================================================

    def connect(self) -> None:
        """
        Resolve the address and open the connection.

        Every address returned by the resolver is tried once, in order,
        until connection_timeout has elapsed in total. Valid only once per
        instance: afterwards the connection is CONNECTED or CLOSED.

        Raises:
            ClientError: INCORRECT_SOCKET_ADDR if the host does not resolve,
                CONNECTION_FAILURE if no address accepts the connection or
                the connection is already open, NO_AVAILABLE_TCP_STREAM if
                the connection was already used and closed.
        """
        if self.state is ConnectionState.CONNECTED:
            raise ClientError(
                ClientErrorType.CONNECTION_FAILURE,
                f"Already connected to {self.address}",
            )
        if self.state is ConnectionState.CLOSED:
            raise ClientError(
                ClientErrorType.NO_AVAILABLE_TCP_STREAM,
                f"Connection to {self.address} is closed and cannot be reopened",
            )

        try:
            sock = self._open_socket()
        except ClientError:
            self.state = ConnectionState.CLOSED
            raise

        self._socket = sock
        self.state = ConnectionState.CONNECTED
        logger.debug(f"[{self.id}] Connected to {self.address}")

    def _open_socket(self) -> socket.socket:
        try:
            addresses = socket.getaddrinfo(self.host, self.port, type=socket.SOCK_STREAM)
        except (OSError, UnicodeError, OverflowError) as e:
            raise ClientError(
                ClientErrorType.INCORRECT_SOCKET_ADDR,
                f"Could not resolve {self.address}: {e}",
            ) from e

        if not addresses:
            raise ClientError(
                ClientErrorType.INCORRECT_SOCKET_ADDR,
                f"Could not get socket address for {self.address}",
            )

        deadline = time.monotonic() + self.connection_timeout
        last_error: Optional[OSError] = None

        for family, socktype, proto, _, sockaddr in addresses:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                last_error = socket.timeout(
                    f"connect timeout of {self.connection_timeout}s reached"
                )
                break

            sock = None
            try:
                sock = socket.socket(family, socktype, proto)
                sock.settimeout(remaining)
                sock.connect(sockaddr)
            except OSError as e:
                if sock is not None:
                    sock.close()
                logger.debug(f"[{self.id}] Connect to {sockaddr} failed: {e}")
                last_error = e
                continue

            logger.debug(f"[{self.id}] Connect to {sockaddr} succeeded")
            return sock

        raise ClientError(
            ClientErrorType.CONNECTION_FAILURE,
            f"Could not connect to {self.address}: {last_error}",
        ) from last_error

    # =========================================================================
    # WRITE / READ
    # =========================================================================

    def write(self, data: bytes) -> None:
        """
        Send all of data.

        Raises:
            ClientError: NO_AVAILABLE_TCP_STREAM if not connected,
                WRITE_ERROR if the socket fails before everything is sent.
        """
        sock = self._require_socket()
        sock.settimeout(self.read_timeout)

        try:
            # sendall() loops over partial sends until done or error
            sock.sendall(data)
        except OSError as e:
            raise ClientError(
                ClientErrorType.WRITE_ERROR,
                f"Could not write data to {self.address}: {e}",
            ) from e

        logger.debug(f"[{self.id}] Wrote {len(data)} bytes")

    def read(self) -> bytes:
        """
        Read until the peer closes the connection or read_timeout elapses.

        Returns:
            Everything received, possibly empty.

        Raises:
            ClientError: NO_AVAILABLE_TCP_STREAM if not connected,
                READ_ERROR if the socket fails.
        """
        sock = self._require_socket()
        deadline = time.monotonic() + self.read_timeout
        chunks = []

        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._log_read_deadline()
                break

            sock.settimeout(remaining)
            try:
                chunk = sock.recv(self.buffer_size)
            except socket.timeout:
                self._log_read_deadline()
                break
            except OSError as e:
                raise ClientError(
                    ClientErrorType.READ_ERROR,
                    f"Could not read data from {self.address}: {e}",
                ) from e

            if not chunk:
                break  # Peer closed the connection
            chunks.append(chunk)

        data = b"".join(chunks)
        logger.debug(f"[{self.id}] Read {len(data)} bytes")
        return data

    def _log_read_deadline(self) -> None:
        logger.warning(
            f"[{self.id}] Read deadline of {self.read_timeout}s reached, "
            f"peer did not close the connection"
        )

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise ClientError(
                ClientErrorType.NO_AVAILABLE_TCP_STREAM,
                f"Not connected to {self.address}",
            )
        return self._socket

    # =========================================================================
    # DISCONNECT
    # =========================================================================

    def disconnect(self) -> None:
        """Close the socket and release it for good. Safe to call more than once."""
        sock, self._socket = self._socket, None
        self.state = ConnectionState.CLOSED
        if sock is None:
            return

        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # Peer already gone

        sock.close()
        logger.debug(f"[{self.id}] Disconnected from {self.address}")

    def __enter__(self) -> "TcpConnection":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
        return False
