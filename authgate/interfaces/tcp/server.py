# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""TCP listener: one thread per accepted connection, one request per connection.

    accept -> thread -> read_request -> decode_request -> route -> Response -> sendall -> close

``shutdown()`` may be called from any thread (or a signal handler). The accept
loop notices within ``ACCEPT_POLL_INTERVAL`` seconds, closes the listening
socket and then waits for in-flight connections to finish.
"""

from __future__ import annotations

import socket
import threading
import time
from collections.abc import Callable, Mapping
from http import HTTPStatus

from authgate.domain.users.entities import PoolStats
from authgate.infrastructure.observability import Metrics
from authgate.interfaces.tcp.controllers.auth_controller import Handler, Route
from authgate.interfaces.tcp.request import decode_request, read_request
from authgate.interfaces.tcp.response import NOT_FOUND, Response
from authgate.shared.config import ServerConfig
from authgate.shared.errors import AppError, DecodeError, handle_app_error, handle_unexpected_error
from authgate.shared.logging import correlation_scope, logger

ACCEPT_POLL_INTERVAL = 1.0


class RequestDispatcher:
    def __init__(
        self,
        routes: Mapping[Route, Handler],
        *,
        metrics: Metrics,
        debug_mode: bool = False,
    ) -> None:
        self._routes = dict(routes)
        self._metrics = metrics
        self._debug_mode = debug_mode

    def dispatch(self, raw: bytes | str) -> Response:
        try:
            request = decode_request(raw)
        except DecodeError as exc:
            logger.info(f"request.decode: {exc.reason}")
            return handle_app_error(exc)

        handler = self._routes.get((request.method, request.path))
        if handler is None:
            logger.info(f"{request.method.value} {request.path} -> 404")
            return NOT_FOUND

        response = Response(status=HTTPStatus.INTERNAL_SERVER_ERROR)
        with self._metrics.track_latency(request.path, lambda: str(int(response.status))):
            try:
                response = handler(request)
            except AppError as exc:
                response = handle_app_error(exc)
            except Exception as exc:
                response = handle_unexpected_error(exc, debug_mode=self._debug_mode)
        logger.info(f"{request.method.value} {request.path} -> {int(response.status)}")
        return response


class TcpServer:
    def __init__(
        self,
        config: ServerConfig,
        dispatcher: RequestDispatcher,
        *,
        metrics: Metrics,
        pool_stats: Callable[[], PoolStats | None] | None = None,
    ) -> None:
        self.config = config
        self._dispatcher = dispatcher
        self._metrics = metrics
        self._pool_stats = pool_stats
        self._socket: socket.socket | None = None
        self._shutdown_event = threading.Event()
        self._ready = threading.Event()
        self._connections: set[threading.Thread] = set()
        self._lock = threading.Lock()

    @property
    def address(self) -> tuple[str, int]:
        if self._socket is None:
            return (self.config.host, self.config.port)
        host, port = self._socket.getsockname()[:2]
        return (host, port)

    @property
    def in_flight(self) -> int:
        with self._lock:
            return len(self._connections)

    def bind(self) -> None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.config.host, self.config.port))
        except OSError as e:
            sock.close()
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            raise
        sock.listen(self.config.backlog)
        sock.settimeout(ACCEPT_POLL_INTERVAL)
        self._socket = sock
        host, port = self.address
        logger.info(f"Server running on {host}:{port}")

    def wait_ready(self, timeout: float | None = None) -> bool:
        return self._ready.wait(timeout)

    def serve_forever(self) -> None:
        if self._socket is None:
            self.bind()
        self._shutdown_event.clear()
        self._ready.set()
        try:
            self._accept_loop()
        finally:
            self._close_listener()
            self._drain()
            self._ready.clear()

    def shutdown(self) -> None:
        if not self._shutdown_event.is_set():
            logger.info("Shutting down server...")
        self._shutdown_event.set()

    def _accept_loop(self) -> None:
        assert self._socket is not None
        while not self._shutdown_event.is_set():
            try:
                client, address = self._socket.accept()
            except TimeoutError:
                continue
            except OSError:
                if self._shutdown_event.is_set():
                    break
                raise
            logger.debug(f"Accepted connection from {address[0]}:{address[1]}")
            if self._pool_stats is not None:
                self._metrics.record_pool_stats(self._pool_stats())
            self._spawn(client, address)

    def _spawn(self, client: socket.socket, address: tuple[str, int]) -> None:
        thread = threading.Thread(
            target=self._handle_connection,
            args=(client, address),
            name=f"authgate-conn-{address[1]}",
            daemon=True,
        )
        with self._lock:
            self._connections.add(thread)
        thread.start()

    def _handle_connection(self, client: socket.socket, address: tuple[str, int]) -> None:
        with correlation_scope():
            try:
                with client, self._metrics.track_connection():
                    client.settimeout(self.config.read_timeout)
                    response = self._process(client)
                    if response is not None:
                        client.sendall(response.to_bytes())
            except OSError as e:
                logger.warning(f"Connection error from {address[0]}: {e}")
            finally:
                with self._lock:
                    self._connections.discard(threading.current_thread())

    def _process(self, client: socket.socket) -> Response | None:
        try:
            raw = read_request(
                client,
                buffer_size=self.config.buffer_size,
                max_request_size=self.config.max_request_size,
            )
        except TimeoutError:
            logger.warning("request.read: timed out")
            return Response(status=HTTPStatus.REQUEST_TIMEOUT)
        except DecodeError as exc:
            logger.warning(f"request.read: {exc.reason}")
            return handle_app_error(exc)

        if raw is None:
            logger.debug("request.read: peer closed without sending")
            return None
        return self._dispatcher.dispatch(raw)

    def _close_listener(self) -> None:
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def _drain(self) -> None:
        deadline = time.monotonic() + self.config.shutdown_timeout
        with self._lock:
            pending = list(self._connections)
        if pending:
            logger.info(f"Waiting for {len(pending)} in-flight connection(s)")
        for thread in pending:
            thread.join(max(deadline - time.monotonic(), 0))
        leftover = self.in_flight
        if leftover:
            logger.warning(f"Shutdown timeout with {leftover} connection(s) still open")
        logger.info("Server stopped")
