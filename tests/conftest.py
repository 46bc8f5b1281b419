"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from userserver import ServerConfig, UserServer
from userserver.db import UserGateway


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """A fresh SQLite database file per test."""
    return f"sqlite:///{tmp_path / 'users.db'}"


@pytest.fixture
def gateway(database_url: str) -> Generator[UserGateway, None, None]:
    """Gateway with the users table already created."""
    gw = UserGateway(database_url)
    gw.ensure_schema()
    yield gw
    gw.dispose()


@pytest.fixture
def config(database_url: str) -> ServerConfig:
    """Test server configuration."""
    return ServerConfig(
        database_url=database_url,
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        log_level="WARNING",
    )


@pytest.fixture
def sample_create_request() -> bytes:
    """POST /users with a JSON body."""
    return (
        b"POST /users HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/json\r\n"
        b"\r\n"
        b'{"name":"Ann","email":"a@x.com"}'
    )


@pytest.fixture
def sample_get_request() -> bytes:
    """GET /users/1 with headers and no body."""
    return (
        b"GET /users/1 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Accept: application/json\r\n"
        b"\r\n"
    )


def send_raw(port: int, data: bytes, timeout: float = 5.0) -> bytes:
    """Send one request and read until the server closes the connection."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as sock:
        sock.sendall(data)
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def http_request(method: str, path: str, body: str = "") -> bytes:
    """Build a request the way curl would send it."""
    return (
        f"{method} {path} HTTP/1.1\r\n"
        f"Host: localhost\r\n"
        f"Content-Type: application/json\r\n"
        f"\r\n"
        f"{body}"
    ).encode("utf-8")


class RunningServer:
    """A UserServer running in a background thread."""

    def __init__(self, server: UserServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.socket_server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.socket_server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def send(self, data: bytes) -> bytes:
        return send_raw(self.port, data)

    def request(self, method: str, path: str, body: str = "") -> bytes:
        return self.send(http_request(method, path, body))


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[RunningServer, None, None]:
    """Start a server on a free port for the duration of a test."""
    srv = RunningServer(UserServer(config))
    srv.start()

    yield srv

    srv.stop()
