from __future__ import annotations

import json
import socket
import threading
import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor

import pytest

from authgate.container import Container
from authgate.interfaces.tcp.server import TcpServer

from conftest import http_request


@pytest.fixture()
def running_server(container: Container) -> Iterator[TcpServer]:
    server = container.server
    server.bind()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    assert server.wait_ready(5)
    yield server
    server.shutdown()
    thread.join(10)
    assert not thread.is_alive()


def _roundtrip(server: TcpServer, payload: bytes) -> bytes:
    with socket.create_connection(server.address, timeout=5) as sock:
        sock.sendall(payload)
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def _split(raw: bytes) -> tuple[str, str]:
    head, _, body = raw.decode("utf-8").partition("\r\n\r\n")
    return head.split("\r\n")[0], body


def test_full_flow_over_tcp(running_server: TcpServer) -> None:
    credentials = json.dumps({"username": "alice", "password": "secret123"})

    status, _ = _split(_roundtrip(running_server, http_request("POST", "/register", credentials)))
    assert status == "HTTP/1.1 204 No Content"

    status, body = _split(_roundtrip(running_server, http_request("POST", "/login", credentials)))
    assert status == "HTTP/1.1 200 OK"
    token = json.loads(body)["token"]

    status, _ = _split(
        _roundtrip(
            running_server,
            http_request("GET", "/validate", headers={"Authorization": f"Bearer {token}"}),
        )
    )
    assert status == "HTTP/1.1 200 OK"


def test_unknown_route_over_tcp(running_server: TcpServer) -> None:
    raw = _roundtrip(running_server, http_request("GET", "/nope"))

    assert raw == b"HTTP/1.1 404 Not Found\r\n\r\n404 Not Found"


def test_body_without_content_length_over_tcp(running_server: TcpServer) -> None:
    raw = _roundtrip(
        running_server,
        b"POST /register HTTP/1.1\r\nHost: x\r\n\r\n"
        b'{"username": "dave", "password": "pw1"}',
    )

    assert raw.startswith(b"HTTP/1.1 204 No Content")


def test_body_split_across_segments(running_server: TcpServer) -> None:
    credentials = json.dumps({"username": "bob", "password": "secret123"})
    payload = http_request("POST", "/register", credentials)

    with socket.create_connection(running_server.address, timeout=5) as sock:
        sock.sendall(payload[:20])
        time.sleep(0.05)
        sock.sendall(payload[20:-5])
        time.sleep(0.05)
        sock.sendall(payload[-5:])
        raw = sock.recv(4096)

    assert raw.startswith(b"HTTP/1.1 204 No Content")


def test_oversized_request_is_rejected(running_server: TcpServer) -> None:
    limit = running_server.config.max_request_size
    raw = _roundtrip(
        running_server,
        f"POST /register HTTP/1.1\r\nContent-Length: {limit + 1}\r\n\r\n".encode("ascii"),
    )

    assert raw.startswith(b"HTTP/1.1 413 ")


def test_silent_client_gets_timeout(running_server: TcpServer) -> None:
    with socket.create_connection(running_server.address, timeout=10) as sock:
        sock.sendall(b"POST /login HTTP/1.1\r\n")
        raw = sock.recv(4096)

    assert raw.startswith(b"HTTP/1.1 408 ")


def test_concurrent_connections(running_server: TcpServer) -> None:
    def register(index: int) -> bytes:
        body = json.dumps({"username": f"user{index}", "password": "secret123"})
        return _roundtrip(running_server, http_request("POST", "/register", body))

    with ThreadPoolExecutor(max_workers=8) as pool:
        responses = list(pool.map(register, range(16)))

    assert all(r.startswith(b"HTTP/1.1 204 ") for r in responses)


def test_shutdown_waits_for_in_flight_connection(container: Container) -> None:
    server = container.server
    server.bind()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    assert server.wait_ready(5)

    credentials = json.dumps({"username": "carol", "password": "secret123"})
    payload = http_request("POST", "/register", credentials)
    with socket.create_connection(server.address, timeout=10) as sock:
        sock.sendall(payload[:-3])
        deadline = time.monotonic() + 5
        while server.in_flight == 0 and time.monotonic() < deadline:
            time.sleep(0.01)

        server.shutdown()
        time.sleep(0.1)
        assert thread.is_alive()

        sock.sendall(payload[-3:])
        raw = sock.recv(4096)

    thread.join(10)
    assert not thread.is_alive()
    assert raw.startswith(b"HTTP/1.1 204 ")
    assert container.user_repository.find_by_username("carol").username == "carol"


def test_no_new_connections_after_shutdown(container: Container) -> None:
    server = container.server
    server.bind()
    address = server.address
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    assert server.wait_ready(5)

    server.shutdown()
    thread.join(10)

    with pytest.raises(OSError):
        socket.create_connection(address, timeout=1).close()
