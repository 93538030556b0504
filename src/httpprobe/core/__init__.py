"""
Transport layer: the TCP connection and its state machine.
"""

from .connection import TcpConnection, ConnectionState

__all__ = [
    "TcpConnection",     # Owns one socket - connect, write, read, disconnect
    "ConnectionState",   # DISCONNECTED / CONNECTED / CLOSED
]
