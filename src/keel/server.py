"""Blocking, single-threaded socket transport."""

from __future__ import annotations

import logging
import socket

from .application import KeelApp
from .config import ServerConfig
from .exceptions import KeelError
from .http import Status, is_server_error
from .responses import Response

logger = logging.getLogger(__name__)

_HEADER_TERMINATOR = b"\r\n\r\n"
_FAVICON_PATH = "/favicon.ico"
_NO_CONTENT = b"HTTP/1.1 204 No Content\r\n\r\n"


class PayloadTooLarge(KeelError):
    """The client sent more bytes than ``max_request_bytes`` allows."""


class SocketServer:
    """Accept one connection at a time and answer it with ``app.handle``.

    Each connection carries exactly one request; the socket is closed after
    the response is written.
    """

    def __init__(self, app: KeelApp, config: ServerConfig | None = None) -> None:
        self.app = app
        self.config = config or app.config.server
        self._socket: socket.socket | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> tuple[str, int]:
        if self._socket is None:
            return (self.config.host, self.config.port)
        host, port = self._socket.getsockname()[:2]
        return (host, port)

    def bind(self) -> socket.socket:
        if self._socket is None:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.config.host, self.config.port))
            sock.listen(self.config.backlog)
            # Lets the accept loop notice shutdown().
            sock.settimeout(1.0)
            self._socket = sock
        return self._socket

    def serve_forever(self) -> None:
        sock = self.bind()
        self._running = True
        host, port = self.address
        logger.info("Running at http://%s:%s", host, port)
        try:
            while self._running:
                try:
                    client, _ = sock.accept()
                except socket.timeout:
                    continue
                except OSError:
                    if not self._running:
                        break
                    raise
                self.serve_connection(client)
        finally:
            self.close()

    def shutdown(self) -> None:
        self._running = False

    def close(self) -> None:
        self._running = False
        if self._socket is not None:
            self._socket.close()
            self._socket = None
            logger.info("Server stopped")

    def serve_connection(self, client: socket.socket) -> None:
        """Read one request from ``client``, write its response and close it."""

        try:
            client.settimeout(None)
            try:
                raw = self.read_request(client)
            except PayloadTooLarge as exc:
                logger.warning("%s", exc)
                response = Response.html("<h1>Payload Too Large</h1>").status(Status.PAYLOAD_TOO_LARGE)
                client.sendall(self.app.render(response))
                return
            if not raw:
                return
            target = _request_target(raw)
            if self.config.ignore_favicon and target == _FAVICON_PATH:
                client.sendall(_NO_CONTENT)
                return
            try:
                response = self.app.process(raw)
                payload = self.app.render(response)
                status = response.status_code
            except Exception as exc:
                payload = self.app.render_failure(exc)
                status = int(Status.INTERNAL_SERVER_ERROR)
            client.sendall(payload)
            level = logging.WARNING if is_server_error(status) else logging.DEBUG
            logger.log(level, "%s -> %s", _request_line(raw), status)
        except OSError:
            logger.exception("Connection failed")
        finally:
            client.close()

    def read_request(self, client: socket.socket) -> bytes:
        """Read the header block and, when announced, the body of one request."""

        limit = self.config.max_request_bytes
        buffer = bytearray()
        while _HEADER_TERMINATOR not in buffer:
            chunk = client.recv(self.config.read_size)
            if not chunk:
                return bytes(buffer)
            buffer.extend(chunk)
            if len(buffer) > limit:
                raise PayloadTooLarge(f"Request exceeds {limit} bytes")
        head, _, _ = bytes(buffer).partition(_HEADER_TERMINATOR)
        expected = len(head) + len(_HEADER_TERMINATOR) + _content_length(head)
        if expected > limit:
            raise PayloadTooLarge(f"Request exceeds {limit} bytes")
        while len(buffer) < expected:
            chunk = client.recv(self.config.read_size)
            if not chunk:
                break
            buffer.extend(chunk)
        return bytes(buffer)


def run(app: KeelApp, config: ServerConfig | None = None) -> None:
    server = SocketServer(app, config)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.close()


def _content_length(head: bytes) -> int:
    for line in head.split(b"\r\n")[1:]:
        name, colon, value = line.partition(b":")
        if colon and name.strip().lower() == b"content-length":
            try:
                return max(int(value.strip()), 0)
            except ValueError:
                return 0
    return 0


def _request_line(raw: bytes) -> str:
    return raw.split(b"\r\n", 1)[0].decode("latin-1").strip()


def _request_target(raw: bytes) -> str | None:
    parts = _request_line(raw).split()
    if len(parts) < 2:
        return None
    return parts[1]


__all__ = ["PayloadTooLarge", "SocketServer", "run"]
