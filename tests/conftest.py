from __future__ import annotations

import socket
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, List, Optional, Tuple

import pytest


@dataclass
class SeenRequest:
    method: str
    path: str
    url: str
    headers: Dict[str, str]
    body: bytes


@dataclass
class Reply:
    status: int
    body: str = ""
    reason: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


class MockServer:
    """Local HTTP server that answers configured routes and records what it sees."""

    def __init__(self) -> None:
        self._routes: Dict[Tuple[str, str], Reply] = {}
        self._seen: List[SeenRequest] = []
        self._lock = threading.Lock()
        self._server = ThreadingHTTPServer(("127.0.0.1", 0), self._handler_class())
        self.port = self._server.server_address[1]
        self.url = f"http://127.0.0.1:{self.port}"
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self._server.shutdown()
        self._server.server_close()

    def reply(self, method: str, path: str, status: int, body: str = "", reason: str | None = None, **headers: str) -> None:
        with self._lock:
            self._routes[(method.upper(), path)] = Reply(status, body, reason, headers)

    def seen_requests(self, path: str | None = None) -> List[SeenRequest]:
        with self._lock:
            return [req for req in self._seen if path is None or req.path == path]

    def _handler_class(self):
        server = self

        class Handler(BaseHTTPRequestHandler):
            def _handle(self) -> None:
                length = int(self.headers.get("Content-Length") or 0)
                body = self.rfile.read(length) if length else b""
                with server._lock:
                    server._seen.append(
                        SeenRequest(
                            method=self.command,
                            path=self.path,
                            url=f"{server.url}{self.path}",
                            headers={name.lower(): value for name, value in self.headers.items()},
                            body=body,
                        )
                    )
                    reply = server._routes.get((self.command, self.path))
                if reply is None:
                    reply = Reply(503, "No mock rule matched", "Service Unavailable")
                payload = reply.body.encode("utf-8")
                self.send_response(reply.status, reply.reason)
                for name, value in reply.headers.items():
                    self.send_header(name.replace("_", "-"), value)
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                if payload:
                    self.wfile.write(payload)

            do_GET = _handle
            do_POST = _handle
            do_PUT = _handle
            do_DELETE = _handle

            def log_message(self, format, *args):  # noqa: A002
                pass

        return Handler


@pytest.fixture
def mock_server():
    server = MockServer()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def unused_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
