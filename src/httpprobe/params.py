"""
=============================================================================
PARAMETER RESOLUTION
=============================================================================

Turns the raw user inputs (URL, proxy, timeout, method, header spec, body)
into a ConnectionPlan: everything needed to open a socket and build the
request. No network I/O happens here.

=============================================================================
LOGICAL TARGET vs. CONNECT TARGET
=============================================================================

Without a proxy, the probe connects to the host in the URL and asks for
the path:

    URL  http://localhost:8080/test

    connect   localhost:8080
    request   GET /test HTTP/1.1

With a proxy, the probe connects to the PROXY and puts the full absolute
URL in the request line, so the proxy knows where to forward it:

    URL  http://localhost:8080/test      proxy  localhost:8888

    connect   localhost:8888
    request   GET http://localhost:8080/test HTTP/1.1

=============================================================================
DEFAULT PORTS
=============================================================================

    ┌──────────┬──────────────┐
    │  Scheme  │ Default port │
    ├──────────┼──────────────┤
    │  http    │  80          │
    │  https   │  443         │
    │  tcp     │  (none)      │  ← needs an explicit URL or proxy port
    └──────────┴──────────────┘

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional
from urllib.parse import urlsplit

from .codec import b64, percent
from .errors import ClientError, ClientErrorType
from .http.request import DEFAULT_METHOD, HttpRequest


logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT_MS = 1000
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Scheme(Enum):
    """URL schemes the probe accepts. TLS is never negotiated for https."""
    HTTP = "http"
    HTTPS = "https"
    TCP = "tcp"

    @property
    def default_port(self) -> Optional[int]:
        return DEFAULT_PORTS.get(self)

    @classmethod
    def parse(cls, value: str) -> "Scheme":
        """
        Look up a scheme by name (case-insensitive).

        Raises:
            ClientError: UNSUPPORTED_SCHEME for anything else.
        """
        try:
            return cls(value.lower())
        except ValueError:
            raise ClientError(
                ClientErrorType.UNSUPPORTED_SCHEME,
                f"Unsupported scheme: {value!r}",
            ) from None


DEFAULT_PORTS: Dict[Scheme, int] = {
    Scheme.HTTP: 80,
    Scheme.HTTPS: 443,
}


@dataclass(frozen=True)
class ConnectionPlan:
    """
    Resolved, immutable description of one probe.

    Attributes:
        scheme: Scheme of the target URL.
        target_host: Host from the URL.
        target_port: Port from the URL or the scheme default
            (None only for a tcp URL reached through a proxy port).
        connect_host: Host the socket connects to.
        connect_port: Port the socket connects to, always 1-65535.
        request_path: Request target: path (+ query), or the absolute URL
            when a proxy is used.
        connection_timeout: Connect timeout in seconds.
        method: HTTP method.
        headers: Header name → value.
        body: Body text, passed through unmodified.
        uses_proxy: Whether a proxy host or port was supplied.
    """

    scheme: Scheme
    target_host: str
    target_port: Optional[int]
    connect_host: str
    connect_port: int
    request_path: str
    connection_timeout: float = DEFAULT_TIMEOUT_MS / 1000
    method: str = DEFAULT_METHOD
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    uses_proxy: bool = False

    def to_request(self) -> HttpRequest:
        """Build the HttpRequest this plan describes."""
        return HttpRequest(
            path=self.request_path,
            method=self.method,
            headers=dict(self.headers),
            body=self.body,
        )


def resolve(
    url: str,
    proxy_host: Optional[str] = None,
    proxy_port: Optional[int] = None,
    timeout_ms: Optional[int] = None,
    method: Optional[str] = None,
    header_spec: Optional[str] = None,
    body: Optional[str] = None,
    *,
    basic_auth: Optional[str] = None,
    form_fields: Optional[Mapping[str, str]] = None,
) -> ConnectionPlan:
    """
    Resolve user inputs into a ConnectionPlan.

    Args:
        url: Target URL, e.g. "http://localhost:8080/test".
        proxy_host: Connect to this host instead of the URL's host.
        proxy_port: Connect to this port instead of the URL's port.
        timeout_ms: Connect timeout in milliseconds (default 1000).
        method: HTTP method (default GET).
        header_spec: "Name: Value, Name2: Value2".
        body: Request body.
        basic_auth: "user:password"; adds an Authorization: Basic header
            unless the header spec already has one.
        form_fields: Sent as a percent-encoded form body.

    Returns:
        The resolved plan.

    Raises:
        ClientError: UNPARSEABLE_URL, UNSUPPORTED_SCHEME or
            INCORRECT_SOCKET_ADDR.
        ValueError: For a non-positive timeout, or body and form_fields
            given together.
    """
    # ─────────────────────────────────────────────────────────────────────
    # URL → logical target
    # ─────────────────────────────────────────────────────────────────────
    try:
        parsed = urlsplit(url)
        url_port = parsed.port  # Validates the port, raises ValueError
    except ValueError as e:
        raise ClientError(
            ClientErrorType.UNPARSEABLE_URL, f"Cannot parse URL {url!r}: {e}"
        ) from e

    if not parsed.scheme or not parsed.hostname:
        raise ClientError(
            ClientErrorType.UNPARSEABLE_URL,
            f"URL must have a scheme and a host: {url!r}",
        )
    if url_port == 0:
        raise ClientError(ClientErrorType.UNPARSEABLE_URL, f"Invalid port 0 in URL {url!r}")

    scheme = Scheme.parse(parsed.scheme)
    if scheme is Scheme.HTTPS:
        logger.warning("TLS is not implemented, https requests are sent as plain TCP")
    target_host = parsed.hostname
    target_port = url_port if url_port is not None else scheme.default_port

    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"

    # ─────────────────────────────────────────────────────────────────────
    # Proxy → connect target
    # ─────────────────────────────────────────────────────────────────────
    if proxy_port is not None and not 0 < proxy_port < 65536:
        raise ClientError(
            ClientErrorType.INCORRECT_SOCKET_ADDR,
            f"Invalid proxy port: {proxy_port}. Must be 1-65535.",
        )

    uses_proxy = bool(proxy_host) or proxy_port is not None
    connect_host = proxy_host or target_host
    connect_port = proxy_port if proxy_port is not None else target_port

    if connect_port is None:
        raise ClientError(
            ClientErrorType.UNPARSEABLE_URL,
            f"No port in URL {url!r} and no default port for scheme {scheme.value}",
        )

    if uses_proxy:
        request_path = _absolute_url(scheme, target_host, target_port, path)
    else:
        request_path = path

    # ─────────────────────────────────────────────────────────────────────
    # Request contents
    # ─────────────────────────────────────────────────────────────────────
    if timeout_ms is None:
        timeout_ms = DEFAULT_TIMEOUT_MS
    if timeout_ms <= 0:
        raise ValueError(f"Connection timeout must be > 0 ms, got {timeout_ms}")

    headers = parse_header_spec(header_spec)

    if basic_auth is not None and not _has_header(headers, "Authorization"):
        headers["Authorization"] = f"Basic {b64.encode(basic_auth)}"

    if form_fields is not None:
        if body is not None:
            raise ValueError("A body and form fields cannot be sent together")
        body = percent.encode_form(form_fields)
        if not _has_header(headers, "Content-Type"):
            headers["Content-Type"] = FORM_CONTENT_TYPE

    plan = ConnectionPlan(
        scheme=scheme,
        target_host=target_host,
        target_port=target_port,
        connect_host=connect_host,
        connect_port=connect_port,
        request_path=request_path,
        connection_timeout=timeout_ms / 1000,
        method=method or DEFAULT_METHOD,
        headers=headers,
        body=body,
        uses_proxy=uses_proxy,
    )
    logger.debug(f"Resolved {url!r} to {plan}")
    return plan


def parse_header_spec(spec: Optional[str]) -> Dict[str, str]:
    """
    Parse "Name: Value, Name2: Value2" into a dict.

    Entries are split on commas, then each on its first colon; names and
    values are trimmed. Empty entries are ignored and entries without a
    colon are skipped with a warning. Values cannot contain commas.

    Example:
        parse_header_spec("accept: application/json, content-type: text/xml")
        # {"accept": "application/json", "content-type": "text/xml"}
    """
    headers: Dict[str, str] = {}
    if not spec:
        return headers

    for entry in spec.split(","):
        if not entry.strip():
            continue

        name, separator, value = entry.partition(":")
        name = name.strip()
        if not separator or not name:
            logger.warning(f"Skipping malformed header entry: {entry.strip()!r}")
            continue

        headers[name] = value.strip()

    return headers


def _has_header(headers: Mapping[str, str], name: str) -> bool:
    name = name.lower()
    return any(key.lower() == name for key in headers)


def _absolute_url(scheme: Scheme, host: str, port: Optional[int], path: str) -> str:
    # IPv6 literals need brackets in a URL authority
    if ":" in host:
        host = f"[{host}]"
    authority = host if port is None else f"{host}:{port}"
    return f"{scheme.value}://{authority}{path}"
