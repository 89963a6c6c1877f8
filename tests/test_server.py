from __future__ import annotations

import socket
import threading

import pytest

from keel.application import KeelApp
from keel.config import AppConfig, ServerConfig
from keel.requests import Request
from keel.responses import Response
from keel.server import PayloadTooLarge, SocketServer
from keel.testing import build_raw_request


class FakeClient:
    def __init__(self, chunks: list[bytes]) -> None:
        self._chunks = list(chunks)
        self.sent = bytearray()
        self.closed = False
        self.recv_sizes: list[int] = []

    def settimeout(self, value) -> None:
        return None

    def recv(self, size: int) -> bytes:
        self.recv_sizes.append(size)
        if not self._chunks:
            return b""
        return self._chunks.pop(0)

    def sendall(self, data: bytes) -> None:
        self.sent.extend(data)

    def close(self) -> None:
        self.closed = True


class BrokenPipeClient(FakeClient):
    def sendall(self, data: bytes) -> None:
        raise BrokenPipeError("client went away")


def build_app() -> KeelApp:
    app = KeelApp(AppConfig(server=ServerConfig(host="127.0.0.1", port=0, read_size=16)))

    @app.get("/hello/{name}")
    def hello(request: Request) -> Response:
        return Response.text(f"hello {request.param('name')}")

    @app.post("/echo")
    def echo(request: Request) -> Response:
        return Response.text(request.body())

    return app


def test_read_request_collects_headers_and_body() -> None:
    server = SocketServer(build_app())
    raw = build_raw_request("POST", "/echo", body="x" * 40)
    chunks = [raw[i : i + 10] for i in range(0, len(raw), 10)]
    client = FakeClient(chunks)
    assert server.read_request(client) == raw
    assert set(client.recv_sizes) == {16}


def test_read_request_stops_at_eof() -> None:
    server = SocketServer(build_app())
    client = FakeClient([b"GET / HTTP/1.1\r\n"])
    assert server.read_request(client) == b"GET / HTTP/1.1\r\n"


def test_read_request_enforces_limit() -> None:
    app = build_app()
    server = SocketServer(app, ServerConfig(max_request_bytes=64))
    raw = build_raw_request("POST", "/echo", body="x" * 100)
    with pytest.raises(PayloadTooLarge):
        server.read_request(FakeClient([raw]))


def test_serve_connection_writes_response_and_closes() -> None:
    server = SocketServer(build_app())
    client = FakeClient([build_raw_request("GET", "/hello/sam")])
    server.serve_connection(client)
    assert client.closed
    response = Response.from_bytes(bytes(client.sent))
    assert response.status_code == 200
    assert response.body == b"hello sam"


def test_serve_connection_answers_favicon_without_routing() -> None:
    server = SocketServer(build_app())
    client = FakeClient([build_raw_request("GET", "/favicon.ico")])
    server.serve_connection(client)
    assert bytes(client.sent) == b"HTTP/1.1 204 No Content\r\n\r\n"
    assert client.closed


def test_serve_connection_routes_favicon_when_enabled() -> None:
    server = SocketServer(build_app(), ServerConfig(ignore_favicon=False))
    client = FakeClient([build_raw_request("GET", "/favicon.ico")])
    server.serve_connection(client)
    assert Response.from_bytes(bytes(client.sent)).status_code == 404


def test_serve_connection_rejects_large_payload() -> None:
    server = SocketServer(build_app(), ServerConfig(max_request_bytes=32))
    client = FakeClient([build_raw_request("POST", "/echo", body="y" * 64)])
    server.serve_connection(client)
    assert Response.from_bytes(bytes(client.sent)).status_code == 413
    assert client.closed


def test_serve_connection_ignores_empty_payload() -> None:
    server = SocketServer(build_app())
    client = FakeClient([])
    server.serve_connection(client)
    assert client.sent == b""
    assert client.closed


def test_serve_connection_survives_write_errors() -> None:
    server = SocketServer(build_app())
    client = BrokenPipeClient([build_raw_request("GET", "/hello/sam")])
    server.serve_connection(client)
    assert client.closed


def test_serve_connection_answers_500_when_serialization_fails() -> None:
    app = build_app()

    @app.get("/header")
    def header(request: Request) -> Response:
        return Response.text("ok").header("X-Name", "日本")

    server = SocketServer(app)
    client = FakeClient([build_raw_request("GET", "/header")])
    server.serve_connection(client)
    assert client.closed
    assert Response.from_bytes(bytes(client.sent)).status_code == 500

    client = FakeClient([build_raw_request("GET", "/hello/sam")])
    server.serve_connection(client)
    assert Response.from_bytes(bytes(client.sent)).body == b"hello sam"


def _exchange(address: tuple[str, int], payload: bytes) -> bytes:
    with socket.create_connection(address, timeout=5) as conn:
        conn.sendall(payload)
        chunks = []
        while True:
            chunk = conn.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def test_serve_forever_handles_sequential_connections() -> None:
    server = SocketServer(build_app())
    server.bind()
    address = server.address
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        first = Response.from_bytes(_exchange(address, build_raw_request("GET", "/hello/one")))
        second = Response.from_bytes(_exchange(address, build_raw_request("POST", "/echo", body="ping")))
        missing = Response.from_bytes(_exchange(address, build_raw_request("GET", "/nowhere")))
    finally:
        server.shutdown()
        thread.join(timeout=5)
    assert first.body == b"hello one"
    assert second.body == b"ping"
    assert missing.status_code == 404
    assert not thread.is_alive()
    assert not server.is_running
