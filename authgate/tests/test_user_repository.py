from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

import pytest
from sqlalchemy import func, select

from authgate.domain.users.entities import User
from authgate.domain.users.exceptions import UserAlreadyExistsError, UserNotFoundError
from authgate.infrastructure.db import Database
from authgate.infrastructure.db.models import User as UserRow
from authgate.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
)


def _new_user(username: str, password_hash: str = "hash") -> User:
    return User(id=None, username=username, password_hash=password_hash, created_at=datetime.now(UTC))


@pytest.fixture()
def repository(database: Database) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(database)


def test_insert_then_find(repository: SqlAlchemyUserRepository) -> None:
    user_id = repository.insert(_new_user("alice", "stored-hash"))

    found = repository.find_by_username("alice")

    assert found.id == user_id
    assert found.username == "alice"
    assert found.password_hash == "stored-hash"
    assert found.created_at.tzinfo is not None


def test_find_is_repeatable(repository: SqlAlchemyUserRepository) -> None:
    repository.insert(_new_user("alice"))

    assert repository.find_by_username("alice") == repository.find_by_username("alice")


def test_find_unknown_user_raises(repository: SqlAlchemyUserRepository) -> None:
    with pytest.raises(UserNotFoundError):
        repository.find_by_username("nobody")


def test_usernames_are_case_sensitive(repository: SqlAlchemyUserRepository) -> None:
    repository.insert(_new_user("alice"))

    with pytest.raises(UserNotFoundError):
        repository.find_by_username("Alice")


def test_duplicate_insert_is_rejected_and_first_row_kept(
    repository: SqlAlchemyUserRepository, database: Database
) -> None:
    repository.insert(_new_user("alice", "first"))

    with pytest.raises(UserAlreadyExistsError):
        repository.insert(_new_user("alice", "second"))

    assert repository.find_by_username("alice").password_hash == "first"
    with database.session_scope() as session:
        count = session.scalar(select(func.count()).select_from(UserRow))
    assert count == 1


def test_concurrent_duplicate_inserts_keep_one_row(
    repository: SqlAlchemyUserRepository, database: Database
) -> None:
    def attempt(_: int) -> str:
        try:
            repository.insert(_new_user("race"))
        except UserAlreadyExistsError:
            return "duplicate"
        return "created"

    with ThreadPoolExecutor(max_workers=4) as pool:
        outcomes = list(pool.map(attempt, range(4)))

    assert outcomes.count("created") == 1
    assert outcomes.count("duplicate") == 3
    with database.session_scope() as session:
        count = session.scalar(select(func.count()).select_from(UserRow))
    assert count == 1


def test_pool_stats_reports_idle_connections(repository: SqlAlchemyUserRepository) -> None:
    repository.insert(_new_user("alice"))

    stats = repository.pool_stats()

    assert stats is not None
    assert stats.size >= 1
    assert stats.active == 0
    assert stats.idle == stats.size
