"""
=============================================================================
HTTP REQUEST FRAMING
=============================================================================

Turns an HttpRequest into the bytes written to the socket.

=============================================================================
WIRE FORMAT
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  GET /api/users HTTP/1.1\r\n           ← Request line               │
    │  accept: application/json\r\n          ← One line per header        │
    │  x-probe: 1\r\n                           (insertion order)         │
    │  \r\n                                  ← Blank line                 │
    │  {"name": "Alice"}                     ← Body (optional, UTF-8)     │
    └─────────────────────────────────────────────────────────────────────┘

The probe sends exactly what the caller asked for. It does NOT add Host,
User-Agent, Connection or any other header on its own, with one exception:
when a body is present and the caller gave no Content-Length, one is added
so the server knows where the body ends. Pass auto_content_length=False to
send a body without it (useful for probing how servers cope).

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


DEFAULT_METHOD = "GET"
HTTP_VERSION = "HTTP/1.1"
CRLF = "\r\n"


@dataclass
class HttpRequest:
    """
    A request to send to the server.

    Attributes:
        path: Request target. Either a path ("/test") or, when going
              through a proxy, an absolute URL ("http://host:8080/test").
        method: HTTP method, sent verbatim.
        headers: Header name → value. Names are sent as given.
        body: Optional body text.
    """

    path: str
    method: str = DEFAULT_METHOD
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None

    @property
    def request_line(self) -> str:
        """The first line of the request, e.g. "GET / HTTP/1.1"."""
        return f"{self.method} {self.path} {HTTP_VERSION}"

    def has_header(self, name: str) -> bool:
        """Case-insensitive check for a header."""
        name = name.lower()
        return any(key.lower() == name for key in self.headers)

    def to_bytes(self, auto_content_length: bool = True) -> bytes:
        """
        Serialize the request for socket.sendall().

        Args:
            auto_content_length: Add a Content-Length header for the body
                when the caller did not provide one.

        Returns:
            The request line, headers, blank line and body as bytes.
        """
        body_bytes = self.body.encode("utf-8") if self.body is not None else b""

        headers = dict(self.headers)
        if auto_content_length and body_bytes and not self.has_header("Content-Length"):
            headers["Content-Length"] = str(len(body_bytes))

        lines = [self.request_line]
        for name, value in headers.items():
            lines.append(f"{name}: {value}")

        # Empty entry makes the join end with the blank separator line
        lines.append("")
        head = CRLF.join(lines) + CRLF

        return head.encode("utf-8") + body_bytes
