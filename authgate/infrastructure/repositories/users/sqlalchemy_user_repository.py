# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from authgate.domain.users.entities import PoolStats
from authgate.domain.users.entities import User as DomainUser
from authgate.domain.users.exceptions import StoreError, UserAlreadyExistsError, UserNotFoundError
from authgate.domain.users.repositories import UserRepository
from authgate.infrastructure.db import Database
from authgate.infrastructure.db.models import User
from authgate.shared.logging import logger

_UNIQUE_VIOLATION_SQLSTATE = "23505"


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate is not None:
        return sqlstate == _UNIQUE_VIOLATION_SQLSTATE
    return "unique" in str(orig).lower()


def _to_domain(row: User) -> DomainUser:
    created_at = row.created_at
    if created_at is not None and created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return DomainUser(
        id=row.id,
        username=row.username,
        password_hash=row.password,
        created_at=created_at,
    )


class SqlAlchemyUserRepository(UserRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    def find_by_username(self, username: str) -> DomainUser:
        try:
            with self._db.session_scope() as session:
                row = session.scalars(select(User).where(User.username == username)).first()
                if row is None:
                    raise UserNotFoundError(context={"username": username})
                return _to_domain(row)
        except SQLAlchemyError as exc:
            logger.error(f"users.find: database error {type(exc).__name__}: {exc}")
            raise StoreError("find_by_username") from exc

    def insert(self, user: DomainUser) -> int:
        try:
            with self._db.session_scope() as session:
                row = User(
                    username=user.username,
                    password=user.password_hash,
                    created_at=user.created_at or datetime.now(UTC),
                )
                session.add(row)
                session.flush()
                logger.info(f"users.insert: created id={row.id}")
                return row.id
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                logger.info(f"users.insert: duplicate username={user.username}")
                raise UserAlreadyExistsError(context={"username": user.username}) from exc
            logger.error(f"users.insert: integrity error {exc.orig}")
            raise StoreError("insert") from exc
        except SQLAlchemyError as exc:
            logger.error(f"users.insert: database error {type(exc).__name__}: {exc}")
            raise StoreError("insert") from exc

    def pool_stats(self) -> PoolStats | None:
        try:
            return self._db.pool_stats()
        except Exception as exc:
            logger.debug(f"users.pool_stats: unavailable ({exc})")
            return None
