# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class Claims:
    """Signed payload of a bearer token; ``exp`` is always ``iat + ttl``."""

    sub: str
    iat: int
    exp: int

    @classmethod
    def for_subject(cls, subject: str, *, issued_at: int, ttl_seconds: int) -> Claims:
        return cls(sub=subject, iat=issued_at, exp=issued_at + ttl_seconds)

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)
