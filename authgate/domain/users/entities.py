# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class User:

    id: int | None
    username: str
    password_hash: str
    created_at: datetime


@dataclass(slots=True, frozen=True)
class Credentials:

    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password=***)"


@dataclass(slots=True, frozen=True)
class PoolStats:

    size: int
    idle: int

    @property
    def active(self) -> int:
        return max(self.size - self.idle, 0)
