"""
=============================================================================
HTTP RESPONSE PARSER
=============================================================================

Parses the raw bytes read from the server into an HttpResponse.

The probe reads until the server closes the connection, so the parser gets
the whole reply at once. It is deliberately lenient: the point of the tool
is to see what a server actually sends, not to reject it.

=============================================================================
PARSING RULES
=============================================================================

    HTTP/1.1 200 OK\r\n             ← Line 0: status line
    Content-Type: text/plain\r\n    ← Headers until the first empty line
    \r\n                            ← Header/body boundary
    Hello\r\n                       ← Body: remaining non-empty lines,
    World\r\n                          joined WITHOUT separators ("HelloWorld")

    1. STATUS CODE: second whitespace-separated token of line 0.
       Missing or not a number → 500. A garbled status line is treated as
       a server error, never as a parse failure.

    2. HEADERS: split on the FIRST colon only. Nothing is trimmed, so
       "Content-Type: text/plain" gives the value " text/plain".
       Lines without a colon are skipped. A repeated name keeps the
       last value.

    3. BODY: None when there are no non-empty lines after the boundary.

    4. ENCODING: the reply must be valid UTF-8; anything else fails with
       MALFORMED_RESPONSE instead of producing mangled text.

=============================================================================
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..codec import percent
from ..errors import ClientError, ClientErrorType


logger = logging.getLogger(__name__)


DEFAULT_STATUS_CODE = 500


@dataclass(frozen=True)
class HttpResponse:
    """
    A parsed server reply. Built only by ResponseParser, never mutated.

    Attributes:
        status_code: Numeric status (500 if the status line was unreadable).
        headers: Header name → raw value (leading space kept).
        body: Non-empty body lines concatenated, or None.
        raw: The bytes the server sent.
    """

    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    raw: bytes = field(default=b"", repr=False)

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value by name, ignoring case.

        Unlike the raw headers mapping, the returned value is stripped:
            response.headers["Content-Type"]      # " text/plain"
            response.get_header("content-type")   # "text/plain"
        """
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value.strip()
        return default

    @property
    def content_type(self) -> Optional[str]:
        """Content-Type without parameters, lowercased."""
        value = self.get_header("Content-Type")
        return value.split(";")[0].strip().lower() or None

    @property
    def form_fields(self) -> Dict[str, str]:
        """
        Decode an application/x-www-form-urlencoded body.

        Returns an empty dict for other content types or no body.

        Raises:
            DecodeError: If the body contains invalid escapes.
        """
        if self.content_type != "application/x-www-form-urlencoded" or not self.body:
            return {}
        return percent.decode_form(self.body)


class ResponseParser:
    """Parses raw response bytes into HttpResponse objects."""

    LINE_SEPARATOR = re.compile(r"\r?\n")
    STATUS_CODE_PATTERN = re.compile(r"[0-9]+")

    def parse(self, data: bytes) -> HttpResponse:
        """
        Parse a complete server reply.

        Args:
            data: Everything read from the socket.

        Returns:
            The parsed response.

        Raises:
            ClientError: NO_RESPONSE if data is empty, MALFORMED_RESPONSE
                if it is not valid UTF-8.
        """
        if not data:
            raise ClientError(ClientErrorType.NO_RESPONSE, "Server sent no data")

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ClientError(
                ClientErrorType.MALFORMED_RESPONSE,
                f"Response is not valid UTF-8: {e}",
            ) from e

        lines = self.LINE_SEPARATOR.split(text)
        status_code = self._parse_status_line(lines[0])

        # Find the header/body boundary
        try:
            boundary = lines.index("", 1)
        except ValueError:
            boundary = len(lines)

        headers = self._parse_headers(lines[1:boundary])
        body = "".join(line for line in lines[boundary + 1:] if line) or None

        return HttpResponse(
            status_code=status_code,
            headers=headers,
            body=body,
            raw=data,
        )

    def _parse_status_line(self, line: str) -> int:
        tokens = line.split()
        if len(tokens) < 2 or not self.STATUS_CODE_PATTERN.fullmatch(tokens[1]):
            logger.warning(f"Unreadable status line {line!r}, using {DEFAULT_STATUS_CODE}")
            return DEFAULT_STATUS_CODE
        return int(tokens[1])

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        for line in lines:
            name, separator, value = line.partition(":")
            if not separator:
                logger.debug(f"Skipping header line without colon: {line!r}")
                continue
            headers[name] = value
        return headers


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_response(data: bytes) -> HttpResponse:
    """Parse response bytes with a default ResponseParser."""
    return ResponseParser().parse(data)
