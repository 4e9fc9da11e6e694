# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import argparse
import signal
import sys
import threading
from collections.abc import Callable, Sequence

from sqlalchemy.exc import SQLAlchemyError

from authgate import __version__
from authgate.container import Container
from authgate.domain.tokens.exceptions import KeyLoadError
from authgate.interfaces.tcp.server import TcpServer
from authgate.shared.config import AppConfig, load_config
from authgate.shared.logging import logger, setup_logging


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="authgate",
        description="Credential issuance service: register, login and token validation over TCP",
    )
    parser.add_argument("--host", "-H", default=None, help="Host to bind to (default: SERVER_HOST)")
    parser.add_argument(
        "--port", "-p", type=int, default=None, help="Port to listen on (default: SERVER_PORT)"
    )
    parser.add_argument(
        "--log-level",
        "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL)",
    )
    parser.add_argument("--version", "-v", action="version", version=f"authgate {__version__}")
    return parser.parse_args(argv)


def _apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    server_overrides = {
        name: value
        for name, value in (("host", args.host), ("port", args.port))
        if value is not None
    }
    if server_overrides:
        config.server = config.server.model_copy(update=server_overrides)
    if args.log_level:
        config.log_level = args.log_level
    return config


def install_signal_handlers(server: TcpServer) -> Callable[[], None]:
    """Route SIGINT/SIGTERM to ``server.shutdown``; returns a restore callback."""
    if threading.current_thread() is not threading.main_thread():
        return lambda: None

    def shutdown_handler(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, initiating shutdown...")
        server.shutdown()

    originals = {
        sig: signal.signal(sig, shutdown_handler) for sig in (signal.SIGTERM, signal.SIGINT)
    }

    def restore() -> None:
        for sig, handler in originals.items():
            signal.signal(sig, handler)

    return restore


def bootstrap(container: Container) -> bool:
    config = container.config
    if config.database.create_schema:
        try:
            container.database.init_db()
        except SQLAlchemyError as exc:
            logger.critical(f"Database initialisation failed: {type(exc).__name__}: {exc}")
            return False

    try:
        container.token_service.preload()
    except KeyLoadError as exc:
        context = exc.context or {}
        logger.critical(
            f"JWT {context.get('key', '?')} key could not be loaded: {context.get('reason', '?')}"
        )
        return False
    return True


def create_server(config: AppConfig | None = None) -> tuple[Container, TcpServer]:
    container = Container(config or load_config())
    return container, container.server


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    config = _apply_overrides(load_config(), args)
    setup_logging(
        config.log_level,
        log_file=config.log_file,
        debug_mode=config.debug_logging,
    )

    container, server = create_server(config)
    try:
        if not bootstrap(container):
            return 1
        try:
            server.bind()
        except OSError:
            return 1
        restore_signals = install_signal_handlers(server)
        try:
            server.serve_forever()
        finally:
            restore_signals()
    finally:
        container.database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
