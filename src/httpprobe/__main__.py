"""
=============================================================================
HTTPPROBE CLI ENTRY POINT
=============================================================================

    # Plain GET
    python -m httpprobe -u http://localhost:8080/test

    # Through a proxy (request line carries the absolute URL)
    python -m httpprobe -u http://localhost:8080/test \\
        --proxy-host localhost --proxy-port 8888

    # POST with headers and a body
    python -m httpprobe -u http://localhost:8080/echo -m POST \\
        -H "content-type: application/json" -b '{"ping": 1}'

    # Form body and basic auth
    python -m httpprobe -u http://localhost:8080/login -m POST \\
        -f user=alice -f "note=hello world" --basic-auth alice:secret

Exit codes: 0 on a response, 1 on a client error, 2 on bad arguments.

=============================================================================
"""

import argparse
import logging
import sys
from typing import Dict, List, Optional

from . import __version__
from .config import ProbeConfig
from .errors import ClientError
from .http.client import HttpClient
from .http.response import HttpResponse
from .params import resolve


logger = logging.getLogger("httpprobe")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpprobe",
        description="Send a hand-built HTTP/1.1 request over raw TCP and show the reply",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m httpprobe -u http://localhost:8080/                 # Plain GET
  python -m httpprobe -u http://example.com/ --proxy-host proxy --proxy-port 3128
  python -m httpprobe -u http://localhost:8080/ -m POST -b 'hi' --raw
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # TARGET ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--url", "-u",
        required=True,
        help="URL to probe (http, https or tcp scheme)"
    )

    parser.add_argument(
        "--proxy-host",
        default=None,
        help="Connect to this proxy host instead of the URL's host"
    )

    parser.add_argument(
        "--proxy-port",
        type=int,
        default=None,
        help="Connect to this proxy port instead of the URL's port"
    )

    # ─────────────────────────────────────────────────────────────────────
    # TIMING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--connection-timeout", "-c",
        type=int,
        default=None,
        help="Connect timeout in milliseconds (default: 1000)"
    )

    parser.add_argument(
        "--read-timeout",
        type=float,
        default=None,
        help="Deadline in seconds for reading the reply (default: 5)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--method", "-m",
        default=None,
        help="HTTP method (default: GET)"
    )

    parser.add_argument(
        "--headers", "-H",
        default=None,
        help='Comma-separated headers, e.g. "accept: text/html, x-probe: 1"'
    )

    body_group = parser.add_mutually_exclusive_group()
    body_group.add_argument(
        "--body", "-b",
        default=None,
        help="Request body, sent as given"
    )
    body_group.add_argument(
        "--form", "-f",
        action="append",
        metavar="NAME=VALUE",
        default=None,
        help="Form field, percent-encoded into the body (repeatable)"
    )

    parser.add_argument(
        "--basic-auth",
        metavar="USER:PASSWORD",
        default=None,
        help="Add an Authorization: Basic header"
    )

    parser.add_argument(
        "--raw",
        action="store_true",
        help="Do not add Content-Length to bodies"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httpprobe {__version__}"
    )

    return parser


def parse_form_fields(pairs: Optional[List[str]]) -> Optional[Dict[str, str]]:
    """Turn ["a=1", "b=2"] into {"a": "1", "b": "2"}."""
    if pairs is None:
        return None
    fields: Dict[str, str] = {}
    for pair in pairs:
        name, separator, value = pair.partition("=")
        if not separator or not name:
            raise ValueError(f"Form field must be NAME=VALUE, got {pair!r}")
        fields[name] = value
    return fields


def setup_logging(log_level: str) -> None:
    """Configure logging for the CLI."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("httpprobe").setLevel(level)


def format_response(response: HttpResponse) -> str:
    lines = [f"Status: {response.status_code}"]
    for name, value in response.headers.items():
        lines.append(f"{name}:{value}")
    if response.body is not None:
        lines.append("")
        lines.append(response.body)
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    # =========================================================================
    # CONFIGURATION: CLI flags override environment, which overrides defaults
    # =========================================================================

    try:
        config = ProbeConfig.from_env()
    except ValueError as e:
        parser.error(f"Invalid environment configuration: {e}")

    if args.connection_timeout is not None:
        config.connection_timeout_ms = args.connection_timeout
    if args.read_timeout is not None:
        config.read_timeout = args.read_timeout
    if args.proxy_host is not None:
        config.proxy_host = args.proxy_host
    if args.proxy_port is not None:
        config.proxy_port = args.proxy_port
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.raw:
        config.auto_content_length = False

    try:
        config.validate()
        form_fields = parse_form_fields(args.form)
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config.log_level)

    # =========================================================================
    # RESOLVE AND SEND
    # =========================================================================

    try:
        plan = resolve(
            args.url,
            proxy_host=config.proxy_host,
            proxy_port=config.proxy_port,
            timeout_ms=config.connection_timeout_ms,
            method=args.method,
            header_spec=args.headers,
            body=args.body,
            basic_auth=args.basic_auth,
            form_fields=form_fields,
        )
        request = plan.to_request()
        print(f"Request: {request.request_line} (via {plan.connect_host}:{plan.connect_port})")

        response = HttpClient.from_plan(plan, config).send(request)
    except ClientError as e:
        logger.debug("Probe failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_response(response))
    return 0


if __name__ == "__main__":
    sys.exit(main())
