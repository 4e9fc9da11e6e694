# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""RS256 bearer tokens.

Tokens carry ``sub`` (username), ``iat`` and ``exp`` as integer epoch seconds.
Key material arrives as PEM text, usually from environment variables where
newlines are escaped as a literal ``\\n``; both keys are parsed once on first
use and reused for the lifetime of the process.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from functools import cached_property

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from authgate.domain.tokens.entities import Claims
from authgate.domain.tokens.exceptions import InvalidTokenError, KeyLoadError, TokenEncodeError
from authgate.domain.users.entities import User
from authgate.domain.users.repositories import TokenService
from authgate.shared.logging import logger


def normalize_pem(value: str) -> bytes:
    return value.replace("\\n", "\n").strip().encode("utf-8")


class RsaJwtTokenService(TokenService):
    def __init__(
        self,
        *,
        private_key_pem: str | None,
        public_key_pem: str | None,
        ttl_seconds: int,
        algorithm: str = "RS256",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._private_key_pem = private_key_pem
        self._public_key_pem = public_key_pem
        self._ttl_seconds = ttl_seconds
        self._algorithm = algorithm
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    @cached_property
    def private_key(self) -> RSAPrivateKey:
        if not self._private_key_pem:
            raise KeyLoadError("private", "missing")
        try:
            key = serialization.load_pem_private_key(
                normalize_pem(self._private_key_pem), password=None
            )
        except (ValueError, TypeError) as exc:
            raise KeyLoadError("private", "malformed") from exc
        if not isinstance(key, RSAPrivateKey):
            raise KeyLoadError("private", "not an RSA key")
        logger.info(f"jwt.keys: private key loaded ({key.key_size} bits)")
        return key

    @cached_property
    def public_key(self) -> RSAPublicKey:
        if not self._public_key_pem:
            raise KeyLoadError("public", "missing")
        try:
            key = serialization.load_pem_public_key(normalize_pem(self._public_key_pem))
        except (ValueError, TypeError) as exc:
            raise KeyLoadError("public", "malformed") from exc
        if not isinstance(key, RSAPublicKey):
            raise KeyLoadError("public", "not an RSA key")
        logger.info(f"jwt.keys: public key loaded ({key.key_size} bits)")
        return key

    def preload(self) -> None:
        _ = self.private_key
        _ = self.public_key

    def issue(self, user: User) -> str:
        claims = Claims.for_subject(
            user.username,
            issued_at=int(self._clock()),
            ttl_seconds=self._ttl_seconds,
        )
        private_key = self.private_key
        try:
            token = jwt.encode(claims.to_payload(), private_key, algorithm=self._algorithm)
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            raise TokenEncodeError(type(exc).__name__) from exc
        logger.debug(f"jwt.issue: sub={claims.sub} exp={claims.exp}")
        return token

    def verify(self, token: str) -> str:
        public_key = self.public_key
        try:
            payload = jwt.decode(
                token,
                public_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise InvalidTokenError("expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidTokenError("signature") from exc
        except jwt.PyJWTError as exc:
            raise InvalidTokenError("malformed") from exc

        # Expired from the second exp is reached, so a zero TTL never verifies.
        if int(payload["exp"]) <= int(self._clock()):
            raise InvalidTokenError("expired")

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError("malformed")
        return subject
