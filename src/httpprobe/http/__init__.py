"""
=============================================================================
HTTP MESSAGE FRAMING
=============================================================================

    request.py   HttpRequest → wire bytes
    response.py  wire bytes → HttpResponse
    client.py    HttpClient: connect, write, read, parse

=============================================================================
"""

from .request import HttpRequest
from .response import HttpResponse, ResponseParser, parse_response
from .client import HttpClient

__all__ = [
    "HttpRequest",
    "HttpResponse",
    "ResponseParser",
    "parse_response",
    "HttpClient",
]
