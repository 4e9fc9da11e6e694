# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from authgate.domain.users.repositories import PasswordHasher
from authgate.shared.logging import logger


class WerkzeugPasswordHasher(PasswordHasher):
    """Salted one-way hashing; the cost lives in ``method`` (e.g. ``scrypt:32768:8:1``)."""

    def __init__(self, method: str = "scrypt") -> None:
        self._method = method

    def hash(self, password: str) -> str:
        return str(generate_password_hash(password, method=self._method))

    def verify(self, password: str, hashed: str) -> bool:
        # A malformed stored hash must look exactly like a wrong password.
        try:
            return bool(check_password_hash(hashed, password))
        except Exception as exc:
            logger.debug(f"password.verify: unusable hash ({type(exc).__name__})")
            return False
