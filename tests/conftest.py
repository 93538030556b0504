"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def sample_response() -> bytes:
    """Sample HTTP response with CRLF line endings."""
    return (
        b"HTTP/1.1 200 OK\r\n"
        b"Content-Type: text/plain\r\n"
        b"Content-Length: 5\r\n"
        b"\r\n"
        b"Hello"
    )


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing (nothing listens on it afterwards)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class OneShotServer:
    """
    Loopback TCP server that accepts one connection in a background thread.

    It reads the request until the blank line (plus Content-Length bytes of
    body), records it, sends the canned reply and closes the connection.
    With close_after_reply=False it keeps the connection open instead.
    """

    def __init__(self, reply: bytes = b"", close_after_reply: bool = True):
        self.reply = reply
        self.close_after_reply = close_after_reply
        self.received = b""
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._socket.bind(('127.0.0.1', 0))
        self._socket.listen(1)
        self._socket.settimeout(5.0)
        self.port = self._socket.getsockname()[1]
        self._release = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """Start accepting in a background thread."""
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        try:
            client, _ = self._socket.accept()
        except OSError:
            return

        with client:
            client.settimeout(5.0)
            self.received = self._read_request(client)
            if self.reply:
                client.sendall(self.reply)
            if not self.close_after_reply:
                self._release.wait(5.0)

    def _read_request(self, client: socket.socket) -> bytes:
        data = b""
        try:
            while b"\r\n\r\n" not in data:
                chunk = client.recv(4096)
                if not chunk:
                    return data
                data += chunk

            head, _, body = data.partition(b"\r\n\r\n")
            length = 0
            for line in head.split(b"\r\n")[1:]:
                name, _, value = line.partition(b":")
                if name.strip().lower() == b"content-length":
                    length = int(value.strip())

            while len(body) < length:
                chunk = client.recv(4096)
                if not chunk:
                    break
                body += chunk
                data += chunk
        except socket.timeout:
            pass
        return data

    def stop(self):
        """Release the connection and join the thread."""
        self._release.set()
        self._socket.close()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def make_server() -> Generator:
    """Factory for started OneShotServers, stopped after the test."""
    servers = []

    def factory(reply: bytes = b"", close_after_reply: bool = True) -> OneShotServer:
        server = OneShotServer(reply, close_after_reply)
        server.start()
        servers.append(server)
        return server

    yield factory

    for server in servers:
        server.stop()
