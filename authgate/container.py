# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Application dependency container."""

from __future__ import annotations

from functools import cached_property

from authgate.application.services.password_hashing import WerkzeugPasswordHasher
from authgate.application.use_cases.users.login_user import LoginUserUseCase
from authgate.application.use_cases.users.register_user import RegisterUserUseCase
from authgate.application.use_cases.users.validate_token import ValidateTokenUseCase
from authgate.infrastructure.auth.jwt_tokens import RsaJwtTokenService
from authgate.infrastructure.db import Database
from authgate.infrastructure.observability import Metrics
from authgate.infrastructure.repositories.users.sqlalchemy_user_repository import (
    SqlAlchemyUserRepository,
)
from authgate.interfaces.tcp.controllers.auth_controller import AuthController
from authgate.interfaces.tcp.server import RequestDispatcher, TcpServer
from authgate.shared.config import AppConfig


class Container:
    def __init__(self, config: AppConfig) -> None:
        self.config = config

    @cached_property
    def database(self) -> Database:
        return Database(self.config.database)

    @cached_property
    def metrics(self) -> Metrics:
        return Metrics(self.config.observability)

    @cached_property
    def password_hasher(self) -> WerkzeugPasswordHasher:
        return WerkzeugPasswordHasher(method=self.config.password_hash_method)

    @cached_property
    def user_repository(self) -> SqlAlchemyUserRepository:
        return SqlAlchemyUserRepository(self.database)

    @cached_property
    def token_service(self) -> RsaJwtTokenService:
        jwt_config = self.config.jwt
        return RsaJwtTokenService(
            private_key_pem=jwt_config.private_key,
            public_key_pem=jwt_config.public_key,
            ttl_seconds=jwt_config.ttl_seconds,
            algorithm=jwt_config.algorithm,
        )

    @cached_property
    def register_user_use_case(self) -> RegisterUserUseCase:
        return RegisterUserUseCase(
            users=self.user_repository,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def login_user_use_case(self) -> LoginUserUseCase:
        return LoginUserUseCase(
            users=self.user_repository,
            tokens=self.token_service,
            password_hasher=self.password_hasher,
        )

    @cached_property
    def validate_token_use_case(self) -> ValidateTokenUseCase:
        return ValidateTokenUseCase(tokens=self.token_service)

    @cached_property
    def auth_controller(self) -> AuthController:
        return AuthController(
            register_use_case=self.register_user_use_case,
            login_use_case=self.login_user_use_case,
            validate_use_case=self.validate_token_use_case,
        )

    @cached_property
    def dispatcher(self) -> RequestDispatcher:
        return RequestDispatcher(
            self.auth_controller.as_routes(),
            metrics=self.metrics,
            debug_mode=self.config.debug_logging,
        )

    @cached_property
    def server(self) -> TcpServer:
        return TcpServer(
            self.config.server,
            self.dispatcher,
            metrics=self.metrics,
            pool_stats=self.user_repository.pool_stats,
        )
