# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker
from sqlalchemy.pool import QueuePool

from authgate.domain.users.entities import PoolStats
from authgate.shared.config import DatabaseConfig
from authgate.shared.logging import logger


class Base(DeclarativeBase):
    pass


def _build_engine(config: DatabaseConfig) -> Engine:
    connect_args: dict[str, object] = {}
    if config.url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": int(config.pool_timeout),
        }

    engine = create_engine(
        config.url,
        echo=False,
        future=True,
        hide_parameters=True,
        poolclass=QueuePool,
        pool_pre_ping=True,
        pool_size=config.pool_size,
        max_overflow=config.max_overflow,
        pool_timeout=config.pool_timeout,
        pool_recycle=int(config.pool_recycle),
        connect_args=connect_args,
    )

    if config.url.startswith("sqlite"):

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragmas(dbapi_conn, _):
            cur = dbapi_conn.cursor()
            try:
                cur.execute("PRAGMA journal_mode=WAL;")
                cur.execute("PRAGMA busy_timeout=30000;")
            finally:
                cur.close()

    return engine


class Database:
    """Owns the engine (and so the connection pool) for the process lifetime.

    Checkout blocks for up to ``pool_timeout`` seconds when all ``pool_size +
    max_overflow`` connections are in use.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self.engine: Engine = _build_engine(config)
        self._sessions = scoped_session(
            sessionmaker(
                bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False
            )
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        session = self._sessions()
        logger.debug("db.session: opened scoped session")
        try:
            yield session
            session.commit()
            logger.debug("db.session: committed scoped session")
        except Exception:
            logger.debug("db.session: error, rolling back")
            session.rollback()
            raise
        finally:
            session.close()
            self._sessions.remove()
            logger.debug("db.session: closed scoped session")

    def init_db(self) -> None:
        from . import models  # noqa: F401  (registers tables on Base.metadata)

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ensured")

    def pool_stats(self) -> PoolStats:
        pool = self.engine.pool
        if not isinstance(pool, QueuePool):
            raise TypeError(f"pool stats unavailable for {type(pool).__name__}")
        return PoolStats(size=pool.checkedin() + pool.checkedout(), idle=pool.checkedin())

    def dispose(self) -> None:
        self._sessions.remove()
        self.engine.dispose()
        logger.info("Database pool closed")
