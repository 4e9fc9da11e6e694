# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from http import HTTPStatus

from authgate.shared.errors.base import DomainError, InfrastructureError


class UserAlreadyExistsError(DomainError):
    code = "user_already_exists"
    status = HTTPStatus.BAD_REQUEST
    message = "User already registered"


class InvalidCredentialsError(DomainError):
    code = "invalid_credentials"
    status = HTTPStatus.UNAUTHORIZED
    message = "Username or password is incorrect"


class UserNotFoundError(DomainError):
    code = "user_not_found"
    status = HTTPStatus.UNAUTHORIZED
    message = InvalidCredentialsError.message


class StoreError(InfrastructureError):
    def __init__(self, operation: str) -> None:
        super().__init__("store_error", context={"operation": operation})
