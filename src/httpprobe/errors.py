"""
=============================================================================
CLIENT ERRORS
=============================================================================

Every failure in the probe client is surfaced as a ClientError carrying an
error type. Nothing here is fatal to the process: the CLI decides how to
report an error and which exit code to use.

    ┌──────────────────────────┬──────────────────────────────────────────┐
    │  Error type              │  Raised by                               │
    ├──────────────────────────┼──────────────────────────────────────────┤
    │  UNPARSEABLE_URL         │  params.resolve()                        │
    │  UNSUPPORTED_SCHEME      │  params.resolve()                        │
    │  INCORRECT_SOCKET_ADDR   │  TcpConnection.connect(), resolve()      │
    │  CONNECTION_FAILURE      │  TcpConnection.connect()                 │
    │  NO_AVAILABLE_TCP_STREAM │  TcpConnection.write() / read()          │
    │  WRITE_ERROR             │  TcpConnection.write()                   │
    │  READ_ERROR              │  TcpConnection.read()                    │
    │  NO_RESPONSE             │  HttpClient.send(), ResponseParser       │
    │  MALFORMED_RESPONSE      │  ResponseParser                          │
    │  DECODE_ERROR            │  codec.percent.decode()                  │
    └──────────────────────────┴──────────────────────────────────────────┘

=============================================================================
"""

from enum import Enum


class ClientErrorType(Enum):
    """Flat set of failure kinds. None of them is retried by the client."""
    INCORRECT_SOCKET_ADDR = "incorrect_socket_addr"
    UNPARSEABLE_URL = "unparseable_url"
    CONNECTION_FAILURE = "connection_failure"
    UNSUPPORTED_SCHEME = "unsupported_scheme"
    NO_AVAILABLE_TCP_STREAM = "no_available_tcp_stream"
    WRITE_ERROR = "write_error"
    READ_ERROR = "read_error"
    NO_RESPONSE = "no_response"
    MALFORMED_RESPONSE = "malformed_response"
    DECODE_ERROR = "decode_error"


class ClientError(Exception):
    """
    Raised when any probe operation fails.

    Carries the error type so callers can branch on what went wrong
    without parsing messages:

        try:
            response = client.send(request)
        except ClientError as e:
            if e.error_type is ClientErrorType.CONNECTION_FAILURE:
                ...
    """

    def __init__(self, error_type: ClientErrorType, message: str):
        super().__init__(message)
        self.error_type = error_type
        self.message = message

    def __str__(self) -> str:
        return f"{self.error_type.name}: {self.message}"


class DecodeError(ClientError):
    """Raised by the codec layer when input cannot be decoded."""

    def __init__(self, message: str):
        super().__init__(ClientErrorType.DECODE_ERROR, message)
