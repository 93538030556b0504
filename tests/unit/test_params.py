"""
Unit tests for parameter resolution.
"""

import base64

import pytest

from httpprobe.errors import ClientError, ClientErrorType
from httpprobe.params import (
    ConnectionPlan,
    Scheme,
    parse_header_spec,
    resolve,
)


class TestResolve:
    """Tests for resolve()."""

    def test_proxy_uses_absolute_url(self):
        """Test that a proxy gets the full URL in the request line."""
        plan = resolve("http://localhost:8080/test", proxy_host="localhost", proxy_port=8888)

        assert plan.connect_host == "localhost"
        assert plan.connect_port == 8888
        assert plan.request_path == "http://localhost:8080/test"
        assert plan.uses_proxy is True

    def test_direct_uses_path(self):
        """Test that without a proxy only the path is requested."""
        plan = resolve("http://localhost:8080/test")

        assert plan.connect_host == "localhost"
        assert plan.connect_port == 8080
        assert plan.request_path == "/test"
        assert plan.uses_proxy is False

    def test_default_ports(self):
        """Test scheme default ports."""
        assert resolve("http://example.com/").connect_port == 80
        assert resolve("https://example.com/").connect_port == 443

    def test_explicit_port_wins(self):
        """Test that a URL port overrides the scheme default."""
        assert resolve("https://example.com:8443/").connect_port == 8443

    def test_absolute_url_includes_default_port(self):
        """Test that the proxied request path always carries a port."""
        plan = resolve("http://example.com/a", proxy_host="proxy", proxy_port=3128)
        assert plan.request_path == "http://example.com:80/a"

    def test_empty_path_becomes_slash(self):
        """Test that a URL without a path requests '/'."""
        assert resolve("http://example.com").request_path == "/"

    def test_query_is_kept(self):
        """Test that the query string stays in the request path."""
        assert resolve("http://example.com/search?q=1").request_path == "/search?q=1"

    def test_proxy_host_only(self):
        """Test a proxy host without a port keeps the target port."""
        plan = resolve("http://example.com:8080/", proxy_host="proxy")

        assert plan.connect_host == "proxy"
        assert plan.connect_port == 8080
        assert plan.request_path == "http://example.com:8080/"

    def test_ipv6_host(self):
        """Test that IPv6 literals are bracketed in the absolute URL."""
        plan = resolve("http://[::1]:8080/x", proxy_port=3128)

        assert plan.target_host == "::1"
        assert plan.connect_host == "::1"
        assert plan.request_path == "http://[::1]:8080/x"

    def test_tcp_scheme(self):
        """Test the tcp scheme with an explicit port."""
        plan = resolve("tcp://localhost:9000/")

        assert plan.scheme is Scheme.TCP
        assert plan.connect_port == 9000

    def test_tcp_without_port(self):
        """Test that tcp needs an explicit port."""
        with pytest.raises(ClientError) as exc_info:
            resolve("tcp://localhost/")

        assert exc_info.value.error_type is ClientErrorType.UNPARSEABLE_URL

    def test_tcp_through_proxy_port(self):
        """Test a port-less tcp URL reached through a proxy port."""
        plan = resolve("tcp://localhost/x", proxy_port=9000)

        assert plan.connect_port == 9000
        assert plan.target_port is None
        assert plan.request_path == "tcp://localhost/x"

    def test_defaults(self):
        """Test method, timeout, headers and body defaults."""
        plan = resolve("http://localhost/")

        assert plan.method == "GET"
        assert plan.connection_timeout == 1.0
        assert plan.headers == {}
        assert plan.body is None

    def test_explicit_values(self):
        """Test that method, timeout and body are passed through."""
        plan = resolve(
            "http://localhost/",
            timeout_ms=250,
            method="PATCH",
            body="  raw body  ",
        )

        assert plan.method == "PATCH"
        assert plan.connection_timeout == 0.25
        assert plan.body == "  raw body  "

    def test_plan_is_immutable(self):
        """Test that a resolved plan cannot be changed."""
        plan = resolve("http://localhost/")

        with pytest.raises(AttributeError):
            plan.connect_port = 1

    @pytest.mark.parametrize("url", [
        "http://localhost:99999/",
        "http://localhost:abc/",
        "http://[::1/",
        "localhost:8080",
        "/just/a/path",
        "",
        "http://localhost:0/",
    ])
    def test_unparseable_url(self, url: str):
        """Test URLs that cannot be resolved."""
        with pytest.raises(ClientError) as exc_info:
            resolve(url)

        assert exc_info.value.error_type is ClientErrorType.UNPARSEABLE_URL

    def test_unsupported_scheme(self):
        """Test that unknown schemes are rejected."""
        with pytest.raises(ClientError) as exc_info:
            resolve("ftp://localhost/")

        assert exc_info.value.error_type is ClientErrorType.UNSUPPORTED_SCHEME

    def test_scheme_is_case_insensitive(self):
        """Test that HTTP:// is accepted."""
        assert resolve("HTTP://localhost/").scheme is Scheme.HTTP

    @pytest.mark.parametrize("port", [0, -1, 65536])
    def test_invalid_proxy_port(self, port: int):
        """Test that proxy ports outside 1-65535 are rejected."""
        with pytest.raises(ClientError) as exc_info:
            resolve("http://localhost/", proxy_host="proxy", proxy_port=port)

        assert exc_info.value.error_type is ClientErrorType.INCORRECT_SOCKET_ADDR

    @pytest.mark.parametrize("url, proxy_port", [
        ("http://a/", None),
        ("https://a/", None),
        ("http://a:1/", None),
        ("http://a:65535/", None),
        ("tcp://a:7/", None),
        ("tcp://a/", 8080),
    ])
    def test_connect_port_always_valid(self, url: str, proxy_port):
        """Test that every resolved plan has a concrete 16-bit port."""
        plan = resolve(url, proxy_port=proxy_port)
        assert isinstance(plan.connect_port, int)
        assert 0 < plan.connect_port < 65536

    def test_non_positive_timeout(self):
        """Test that a zero timeout is rejected."""
        with pytest.raises(ValueError):
            resolve("http://localhost/", timeout_ms=0)

    def test_basic_auth(self):
        """Test that basic auth credentials become an Authorization header."""
        plan = resolve("http://localhost/", basic_auth="alice:secret")

        expected = base64.b64encode(b"alice:secret").decode("ascii")
        assert plan.headers["Authorization"] == f"Basic {expected}"

    def test_basic_auth_keeps_explicit_header(self):
        """Test that an explicit Authorization header is not replaced."""
        plan = resolve(
            "http://localhost/",
            header_spec="authorization: Bearer abc",
            basic_auth="alice:secret",
        )

        assert plan.headers == {"authorization": "Bearer abc"}

    def test_form_fields(self):
        """Test that form fields become an encoded body."""
        plan = resolve("http://localhost/", method="POST", form_fields={"q": "a b", "x": "ü"})

        assert plan.body == "q=a%20b&x=%C3%BC"
        assert plan.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_form_fields_and_body_conflict(self):
        """Test that a body and form fields are mutually exclusive."""
        with pytest.raises(ValueError):
            resolve("http://localhost/", body="x", form_fields={"a": "b"})

    def test_to_request(self):
        """Test building the request from a plan."""
        plan = resolve(
            "http://localhost:8080/test",
            proxy_host="localhost",
            proxy_port=8888,
            method="POST",
            header_spec="x-probe: 1",
            body="hi",
        )
        request = plan.to_request()

        assert request.path == "http://localhost:8080/test"
        assert request.method == "POST"
        assert request.headers == {"x-probe": "1"}
        assert request.body == "hi"


class TestParseHeaderSpec:
    """Tests for parse_header_spec()."""

    def test_two_headers(self):
        """Test the comma-separated format with trimming."""
        headers = parse_header_spec("accept: application/json, content-type: text/xml")

        assert headers == {
            "accept": "application/json",
            "content-type": "text/xml",
        }

    def test_splits_on_first_colon(self):
        """Test that values may contain colons."""
        assert parse_header_spec("Host: localhost:8080") == {"Host": "localhost:8080"}

    def test_empty(self):
        """Test empty and missing specs."""
        assert parse_header_spec(None) == {}
        assert parse_header_spec("") == {}
        assert parse_header_spec(" , ,") == {}

    def test_malformed_entries_skipped(self):
        """Test that entries without a colon or name are skipped."""
        assert parse_header_spec("novalue, : orphan, a: 1") == {"a": "1"}

    def test_duplicate_names_last_wins(self):
        """Test that keys stay unique."""
        assert parse_header_spec("a: 1, a: 2") == {"a": "2"}


class TestScheme:
    """Tests for the Scheme enum."""

    def test_default_ports(self):
        """Test default port per scheme."""
        assert Scheme.HTTP.default_port == 80
        assert Scheme.HTTPS.default_port == 443
        assert Scheme.TCP.default_port is None

    def test_plan_dataclass_defaults(self):
        """Test ConnectionPlan defaults when built directly."""
        plan = ConnectionPlan(
            scheme=Scheme.HTTP,
            target_host="a",
            target_port=80,
            connect_host="a",
            connect_port=80,
            request_path="/",
        )

        assert plan.method == "GET"
        assert plan.connection_timeout == 1.0
        assert plan.uses_proxy is False
