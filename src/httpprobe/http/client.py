"""
=============================================================================
HTTP CLIENT
=============================================================================

Ties the transport and the framer together for a single request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        send(request)                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   connect()            ← once per client; errors propagate          │
    │       │                                                              │
    │   request.to_bytes()   ← request line, headers, blank line, body    │
    │       │                                                              │
    │   write(bytes)                                                       │
    │       │                                                              │
    │   read()               ← until the server closes or the deadline    │
    │       │                                                              │
    │   disconnect()         ← always, even on failure                     │
    │       │                                                              │
    │   parse_response()     ← empty reply → NO_RESPONSE                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

One request per client: the connection is closed after send() and never
reopened, so a second send() raises NO_AVAILABLE_TCP_STREAM. No keep-alive,
no pipelining, no retries.

=============================================================================
"""

import logging
from typing import TYPE_CHECKING, Optional

from ..config import ProbeConfig
from ..core.connection import TcpConnection
from ..errors import ClientError, ClientErrorType
from .request import HttpRequest
from .response import HttpResponse, ResponseParser

if TYPE_CHECKING:
    from ..params import ConnectionPlan


logger = logging.getLogger(__name__)


class HttpClient:
    """
    Sends HTTP requests over a raw TCP connection.

    Example:
        client = HttpClient("localhost", 8080)
        response = client.send(HttpRequest(path="/health"))
        print(response.status_code)
    """

    def __init__(
        self,
        host: str,
        port: int,
        connection_timeout: float = 1.0,
        read_timeout: float = 5.0,
        buffer_size: int = 8192,
        auto_content_length: bool = True,
    ):
        self.auto_content_length = auto_content_length
        self._connection = TcpConnection(
            host=host,
            port=port,
            connection_timeout=connection_timeout,
            read_timeout=read_timeout,
            buffer_size=buffer_size,
        )
        self._parser = ResponseParser()

    @classmethod
    def from_plan(
        cls,
        plan: "ConnectionPlan",
        config: Optional[ProbeConfig] = None,
    ) -> "HttpClient":
        """Create a client that connects where the plan says."""
        config = config or ProbeConfig()
        return cls(
            host=plan.connect_host,
            port=plan.connect_port,
            connection_timeout=plan.connection_timeout,
            read_timeout=config.read_timeout,
            buffer_size=config.buffer_size,
            auto_content_length=config.auto_content_length,
        )

    @property
    def connection(self) -> TcpConnection:
        return self._connection

    def send(self, request: HttpRequest) -> HttpResponse:
        """
        Send one request and return the parsed reply.

        A client sends a single request; call this once per instance.

        Raises:
            ClientError: Any transport error (NO_AVAILABLE_TCP_STREAM when
                the client was already used), NO_RESPONSE if the server
                closed without sending anything, MALFORMED_RESPONSE if the
                reply is not UTF-8.
        """
        if not self._connection.is_connected:
            self._connection.connect()

        logger.info(f"{request.request_line} → {self._connection.address}")

        try:
            self._connection.write(request.to_bytes(self.auto_content_length))
            raw = self._connection.read()
        finally:
            self._connection.disconnect()

        if not raw:
            raise ClientError(
                ClientErrorType.NO_RESPONSE,
                f"No response from {self._connection.address}",
            )

        response = self._parser.parse(raw)
        logger.info(f"{response.status_code} ({len(raw)} bytes) ← {self._connection.address}")
        return response
