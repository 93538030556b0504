"""
=============================================================================
PROBE CONFIGURATION
=============================================================================

Settings that are not part of a single probe's target: deadlines, buffer
size, a default proxy and logging.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m httpprobe -u http://localhost -c 500             │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── PROBE_TIMEOUT_MS=500 python -m httpprobe -u ...            │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ProbeConfig:
    """Configuration for the probe client."""

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    connection_timeout_ms: int = 1000
    """Connect timeout in milliseconds."""

    read_timeout: float = 5.0
    """
    Deadline in seconds for reading the whole reply.
    The probe reads until the server closes the connection; servers that
    keep it open are cut off after this long.
    """

    buffer_size: int = 8192
    """Bytes requested per recv() call."""

    proxy_host: Optional[str] = None
    """Default proxy host. None = connect directly."""

    proxy_port: Optional[int] = None
    """Default proxy port."""

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    auto_content_length: bool = True
    """
    Add Content-Length for request bodies that lack one.
    Disable to send bodies exactly as given.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "WARNING"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    @property
    def connection_timeout(self) -> float:
        """Connect timeout in seconds."""
        return self.connection_timeout_ms / 1000

    @classmethod
    def from_env(cls) -> "ProbeConfig":
        """
        Create configuration from environment variables.

        PROBE_TIMEOUT_MS      Connect timeout in ms (default: 1000)
        PROBE_READ_TIMEOUT    Read deadline in seconds (default: 5)
        PROBE_BUFFER_SIZE     recv() size in bytes (default: 8192)
        PROBE_PROXY_HOST      Proxy host (default: none)
        PROBE_PROXY_PORT      Proxy port (default: none)
        PROBE_LOG_LEVEL       Logging level (default: WARNING)
        """
        proxy_port = os.getenv("PROBE_PROXY_PORT")
        return cls(
            connection_timeout_ms=int(os.getenv("PROBE_TIMEOUT_MS", "1000")),
            read_timeout=float(os.getenv("PROBE_READ_TIMEOUT", "5")),
            buffer_size=int(os.getenv("PROBE_BUFFER_SIZE", "8192")),
            proxy_host=os.getenv("PROBE_PROXY_HOST") or None,
            proxy_port=int(proxy_port) if proxy_port else None,
            log_level=os.getenv("PROBE_LOG_LEVEL", "WARNING"),
        )

    def validate(self) -> None:
        """Fail fast on values that would break a probe."""
        if self.connection_timeout_ms <= 0:
            raise ValueError("connection_timeout_ms must be > 0")

        if self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.proxy_port is not None and not 0 < self.proxy_port < 65536:
            raise ValueError(f"Invalid proxy port: {self.proxy_port}. Must be 1-65535.")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {self.log_level}")
