"""
Core networking components.

    SocketServer  - Sequential TCP accept loop
    Connection    - Read-once / write-once client socket wrapper
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer

__all__ = ["Connection", "ConnectionState", "SocketServer"]
