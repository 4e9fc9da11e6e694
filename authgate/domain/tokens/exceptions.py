# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from authgate.shared.errors.base import DomainError, InfrastructureError


class KeyLoadError(InfrastructureError):
    def __init__(self, key: str, reason: str) -> None:
        super().__init__("key_load_error", context={"key": key, "reason": reason})


class TokenEncodeError(InfrastructureError):
    def __init__(self, reason: str) -> None:
        super().__init__("token_encode_error", context={"reason": reason})


class InvalidTokenError(DomainError):
    """Signature mismatch, malformed token and expired claims all land here."""

    code = "invalid_token"
    status = HTTPStatus.UNAUTHORIZED

    def __init__(self, reason: str = "invalid") -> None:
        super().__init__(context={"reason": reason})

    @property
    def reason(self) -> str:
        return str((self.context or {}).get("reason", ""))


class MissingTokenError(DomainError):
    code = "missing_token"
    status = HTTPStatus.UNAUTHORIZED
