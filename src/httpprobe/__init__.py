"""
=============================================================================
HTTPPROBE - Hand-Built HTTP Requests Over Raw TCP
=============================================================================

A small probe client for checking how servers and proxies handle HTTP/1.1
requests. It opens a plain TCP connection, writes exactly the request you
describe, reads until the server hangs up and shows what came back.

=============================================================================
ARCHITECTURE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   params.resolve()         URL + proxy + headers → ConnectionPlan   │
    │         │                                                            │
    │         ▼                                                            │
    │   http.HttpClient          orchestrates one request                  │
    │         │                                                            │
    │         ├── http.HttpRequest.to_bytes()    request → bytes           │
    │         ├── core.TcpConnection             connect / write / read    │
    │         └── http.ResponseParser            bytes → HttpResponse      │
    │                                                                      │
    │   codec.b64 / codec.percent    Base64 and percent-encoding           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
QUICK START
=============================================================================

    from httpprobe import resolve, HttpClient

    plan = resolve("http://localhost:8080/test", header_spec="accept: */*")
    response = HttpClient.from_plan(plan).send(plan.to_request())
    print(response.status_code, response.body)

Or from the shell:

    python -m httpprobe -u http://localhost:8080/test -H "accept: */*"

=============================================================================
"""

__version__ = "0.1.0"

from .errors import ClientError, ClientErrorType, DecodeError
from .config import ProbeConfig
from .params import ConnectionPlan, Scheme, resolve
from .http import HttpClient, HttpRequest, HttpResponse

__all__ = [
    "ClientError",
    "ClientErrorType",
    "DecodeError",
    "ProbeConfig",
    "ConnectionPlan",
    "Scheme",
    "resolve",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "__version__",
]
