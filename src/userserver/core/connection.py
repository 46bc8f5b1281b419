"""
=============================================================================
CONNECTION WRAPPER
=============================================================================

One accepted client socket. The service talks to each client exactly once:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   accept() ──► read_once() ──► dispatch ──► send_response() ──► close│
    │                   │                                                  │
    │                   └── ONE recv() of buffer_size bytes (1024)        │
    │                       Anything the client sends after that, or      │
    │                       that did not fit, is never read.               │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No keep-alive, no Content-Length handling, no reassembly of partial reads.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
     │         │                                      ▲
     └─────────┴──────────────────────────────────────┘
               (empty read / read error: abandon)

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states (for logs and debugging)."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSING = "closing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        buffer_size: Bytes read by read_once().
        id: Short identifier used in log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: Tuple[str, int]
    buffer_size: int = 1024

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    def __post_init__(self):
        # Blocking I/O, no timeout: a silent client holds the loop
        self.socket.setblocking(True)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    def read_once(self) -> bytes:
        """
        Read the request with a single recv().

        Returns:
            Up to buffer_size bytes; b"" if the client sent nothing.

        Raises:
            OSError: The read failed (reset, etc.).
        """
        self.state = ConnectionState.READING
        data = self.socket.recv(self.buffer_size)
        self.state = ConnectionState.PROCESSING
        return data

    def send_response(self, data: bytes) -> bool:
        """
        Send the response with sendall().

        Returns:
            True if sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.error(f"[{self.id}] Failed to write response: {e}")
            return False

    def close(self):
        """Shut down and close the socket. Safe to call twice."""
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # peer already gone

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age * 1000:.1f}ms")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
