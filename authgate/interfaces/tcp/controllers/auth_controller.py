# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Callable
from http import HTTPStatus

from pydantic import ValidationError

from authgate.application.use_cases.users.login_user import LoginUserUseCase
from authgate.application.use_cases.users.register_user import RegisterUserUseCase
from authgate.application.use_cases.users.validate_token import ValidateTokenUseCase
from authgate.interfaces.tcp.dto.auth import LoginRequestDTO, RegisterRequestDTO, TokenResponseDTO
from authgate.interfaces.tcp.request import Method, Request
from authgate.interfaces.tcp.response import Response
from authgate.shared.errors.validation import raise_invalid_body
from authgate.shared.logging import logger

Route = tuple[Method, str]
Handler = Callable[[Request], Response]


class AuthController:
    def __init__(
        self,
        *,
        register_use_case: RegisterUserUseCase,
        login_use_case: LoginUserUseCase,
        validate_use_case: ValidateTokenUseCase,
    ) -> None:
        self._register_use_case = register_use_case
        self._login_use_case = login_use_case
        self._validate_use_case = validate_use_case

    def register(self, request: Request) -> Response:
        try:
            dto = RegisterRequestDTO.model_validate_json(request.body)
        except ValidationError as exc:
            raise_invalid_body(exc)

        user_id = self._register_use_case.execute(dto.to_credentials())
        logger.info(f"auth.register: ok user_id={user_id}")
        return Response(status=HTTPStatus.NO_CONTENT)

    def login(self, request: Request) -> Response:
        try:
            dto = LoginRequestDTO.model_validate_json(request.body)
        except ValidationError as exc:
            raise_invalid_body(exc)

        token = self._login_use_case.execute(dto.to_credentials())
        return Response.json(TokenResponseDTO(token=token).model_dump())

    def validate(self, request: Request) -> Response:
        subject = self._validate_use_case.execute(request.header("authorization"))
        logger.debug(f"auth.validate: ok sub={subject}")
        return Response(status=HTTPStatus.OK)

    def as_routes(self) -> dict[Route, Handler]:
        return {
            (Method.POST, "/register"): self.register,
            (Method.POST, "/login"): self.login,
            (Method.GET, "/validate"): self.validate,
        }
