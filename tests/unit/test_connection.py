"""
Unit tests for Connection and the per-connection lifecycle of UserServer.
"""

import logging
import socket

import pytest

from userserver import ServerConfig, UserServer
from userserver.core import Connection, ConnectionState
from userserver.db import UserGateway
from userserver.http import RawRequest, internal_error
from userserver.middleware import Middleware


@pytest.fixture
def socket_pair():
    """(server side, client side) of a connected socket pair."""
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    client_side.close()
    server_side.close()


def read_all(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


class TestConnection:
    """Tests for the Connection wrapper."""

    def test_read_once_truncates_to_buffer_size(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"x" * 2000)

        conn = Connection(socket=server_side, address=("127.0.0.1", 0))

        assert conn.read_once() == b"x" * 1024
        assert conn.state is ConnectionState.PROCESSING

    def test_read_once_custom_buffer(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.sendall(b"GET /users HTTP/1.1\r\n\r\n")

        conn = Connection(socket=server_side, address=("127.0.0.1", 0), buffer_size=3)

        assert conn.read_once() == b"GET"

    def test_read_once_empty_when_peer_closed(self, socket_pair):
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        assert Connection(socket=server_side, address=("127.0.0.1", 0)).read_once() == b""

    def test_send_response(self, socket_pair):
        server_side, client_side = socket_pair
        conn = Connection(socket=server_side, address=("127.0.0.1", 0))

        assert conn.send_response(b"HTTP/1.1 404 NOT FOUND\r\n\r\n404 Not Found")
        conn.close()

        assert read_all(client_side) == b"HTTP/1.1 404 NOT FOUND\r\n\r\n404 Not Found"

    def test_close_is_idempotent(self, socket_pair):
        server_side, _ = socket_pair
        conn = Connection(socket=server_side, address=("127.0.0.1", 0))

        conn.close()
        conn.close()

        assert conn.state is ConnectionState.CLOSED

    def test_context_manager_closes(self, socket_pair):
        server_side, _ = socket_pair

        with Connection(socket=server_side, address=("127.0.0.1", 0)) as conn:
            assert conn.state is ConnectionState.NEW

        assert conn.state is ConnectionState.CLOSED

    def test_client_ip(self, socket_pair):
        server_side, _ = socket_pair
        assert Connection(socket=server_side, address=("10.0.0.7", 5000)).client_ip == "10.0.0.7"


class TestProcessConnection:
    """Tests for UserServer.process_connection() and dispatch()."""

    @pytest.fixture
    def server(self, config: ServerConfig, gateway: UserGateway) -> UserServer:
        return UserServer(config, gateway=gateway)

    def test_answers_and_closes(self, server: UserServer, socket_pair, sample_create_request: bytes):
        server_side, client_side = socket_pair
        client_side.sendall(sample_create_request)
        client_side.shutdown(socket.SHUT_WR)

        server.process_connection(Connection(socket=server_side, address=("127.0.0.1", 0)))

        assert read_all(client_side) == (
            b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n\r\nUser created"
        )
        assert server.gateway.get_by_id(1).name == "Ann"

    def test_empty_request_gets_no_response(self, server: UserServer, socket_pair, caplog):
        caplog.set_level(logging.WARNING, logger="userserver")
        server_side, client_side = socket_pair
        client_side.shutdown(socket.SHUT_WR)

        conn = Connection(socket=server_side, address=("127.0.0.1", 0))
        server.process_connection(conn)

        assert read_all(client_side) == b""
        assert conn.state is ConnectionState.CLOSED
        assert any("Received empty request" in r.getMessage() for r in caplog.records)

    def test_truncated_body_is_invalid_json(self, server: UserServer, socket_pair):
        """A payload past the read buffer is cut and fails to decode."""
        server_side, client_side = socket_pair
        head = b"POST /users HTTP/1.1\r\nHost: localhost\r\n\r\n"
        body = b'{"name":"' + b"a" * 2000 + b'","email":"a@x.com"}'
        client_side.sendall(head + body)

        conn = Connection(socket=server_side, address=("127.0.0.1", 0))
        data = conn.read_once()
        response = server.dispatch(RawRequest.from_bytes(data))
        conn.close()

        assert len(data) == 1024
        assert response.body == "Invalid JSON"
        assert server.gateway.get_all() == []

    def test_escaped_exception_becomes_internal_error(self, server: UserServer):
        class Exploding(Middleware):
            def __call__(self, request, next):
                raise RuntimeError("boom")

        server.use(Exploding())
        response = server.dispatch(RawRequest("GET /users HTTP/1.1\r\n\r\n"))

        assert response.to_bytes() == internal_error().to_bytes()

    def test_describe_routes(self, server: UserServer):
        assert [line.split() for line in server.describe_routes()] == [
            ["POST", "/users"],
            ["GET", "/users/:id"],
            ["GET", "/users"],
            ["PUT", "/users/:id"],
            ["DELETE", "/users/:id"],
        ]
