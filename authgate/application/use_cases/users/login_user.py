# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from functools import cached_property

from authgate.domain.users.entities import Credentials
from authgate.domain.users.exceptions import InvalidCredentialsError, UserNotFoundError
from authgate.domain.users.repositories import PasswordHasher, TokenService, UserRepository
from authgate.shared.logging import logger


class LoginUserUseCase:
    def __init__(
        self,
        *,
        users: UserRepository,
        tokens: TokenService,
        password_hasher: PasswordHasher,
    ) -> None:
        self._users = users
        self._tokens = tokens
        self._password_hasher = password_hasher

    @cached_property
    def _dummy_hash(self) -> str:
        # Unknown users cost one verify, same as a wrong password.
        return self._password_hasher.hash("authgate-unknown-user")

    def execute(self, credentials: Credentials) -> str:
        try:
            user = self._users.find_by_username(credentials.username)
        except UserNotFoundError:
            self._password_hasher.verify(credentials.password, self._dummy_hash)
            logger.info(f"auth.login: user {credentials.username} not found")
            raise InvalidCredentialsError() from None

        if not self._password_hasher.verify(credentials.password, user.password_hash):
            logger.info(f"auth.login: user {credentials.username} wrong password")
            raise InvalidCredentialsError()

        token = self._tokens.issue(user)
        logger.info(f"auth.login: {credentials.username} succeed login")
        return token
