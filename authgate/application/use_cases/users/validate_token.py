# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Use-case for checking a presented bearer token."""

from __future__ import annotations

import re

from authgate.domain.tokens.exceptions import MissingTokenError
from authgate.domain.users.repositories import TokenService

_BEARER_RE = re.compile(r"^Bearer\s+(\S+)$", re.IGNORECASE)


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    match = _BEARER_RE.match(authorization.strip())
    return match.group(1) if match else None


class ValidateTokenUseCase:
    def __init__(self, *, tokens: TokenService) -> None:
        self._tokens = tokens

    def execute(self, authorization: str | None) -> str:
        token = extract_bearer_token(authorization)
        if token is None:
            raise MissingTokenError()
        return self._tokens.verify(token)
