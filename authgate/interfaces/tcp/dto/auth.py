# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from authgate.domain.users.entities import Credentials


class CredentialsRequestDTO(BaseModel):
    username: str = Field(max_length=64)
    password: str = Field(min_length=1, max_length=1024)

    model_config = ConfigDict(extra="ignore")

    @field_validator("username")
    @classmethod
    def validate_username(cls, value: str) -> str:
        if not value.strip():
            raise PydanticCustomError(
                "missing",
                "Username cannot be empty",
                {}
            )
        return value

    def to_credentials(self) -> Credentials:
        return Credentials(username=self.username, password=self.password)


class LoginRequestDTO(CredentialsRequestDTO):
    pass


class RegisterRequestDTO(CredentialsRequestDTO):
    pass


class TokenResponseDTO(BaseModel):
    token: str
