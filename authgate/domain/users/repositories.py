# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from typing import Protocol

from .entities import PoolStats, User


class UserRepository(Protocol):
    def find_by_username(self, username: str) -> User: ...
    def insert(self, user: User) -> int: ...
    def pool_stats(self) -> PoolStats | None: ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str: ...
    def verify(self, password: str, hashed: str) -> bool: ...


class TokenService(Protocol):
    def issue(self, user: User) -> str: ...
    def verify(self, token: str) -> str: ...
