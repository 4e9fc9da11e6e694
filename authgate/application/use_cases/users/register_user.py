# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from datetime import UTC, datetime

from authgate.domain.users.entities import Credentials, User
from authgate.domain.users.repositories import PasswordHasher, UserRepository


class RegisterUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._password_hasher = password_hasher

    def execute(self, credentials: Credentials) -> int:
        hashed = self._password_hasher.hash(credentials.password)
        user = User(
            id=None,
            username=credentials.username,
            password_hash=hashed,
            created_at=datetime.now(UTC),
        )
        return self._users.insert(user)
