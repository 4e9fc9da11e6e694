# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SECTION_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    validate_by_name=True,
)


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///authgate.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")
    # Seconds before an idle connection is retired and reopened on next checkout.
    pool_recycle: float = Field(30.0, ge=1.0, alias="DATABASE_POOL_RECYCLE")
    create_schema: bool = Field(True, alias="DATABASE_CREATE_SCHEMA")

    model_config = _SECTION_CONFIG

    @field_validator("create_schema", mode="before")
    @classmethod
    def _parse_create_schema(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class JwtConfig(BaseSettings):
    private_key: str | None = Field(None, alias="JWT_PRIVATE_KEY")
    public_key: str | None = Field(None, alias="JWT_PUBLIC_KEY")
    ttl_seconds: int = Field(24 * 60 * 60, alias="JWT_TTL_SECONDS")
    algorithm: str = Field("RS256", alias="JWT_ALGORITHM")

    model_config = _SECTION_CONFIG

    @field_validator("algorithm")
    @classmethod
    def _require_rsa(cls, value: str) -> str:
        value = value.upper()
        if value not in ("RS256", "RS384", "RS512"):
            raise ValueError("JWT_ALGORITHM must be an RSA signature algorithm")
        return value


class ServerConfig(BaseSettings):
    host: str = Field("127.0.0.1", alias="SERVER_HOST")
    port: int = Field(7879, ge=0, le=65535, alias="SERVER_PORT")
    backlog: int = Field(128, ge=1, alias="SERVER_BACKLOG")
    buffer_size: int = Field(1024, ge=64, alias="SERVER_BUFFER_SIZE")
    max_request_size: int = Field(64 * 1024, ge=1024, alias="SERVER_MAX_REQUEST_SIZE")
    read_timeout: float = Field(30.0, gt=0, alias="SERVER_READ_TIMEOUT")
    shutdown_timeout: float = Field(30.0, ge=0, alias="SERVER_SHUTDOWN_TIMEOUT")

    model_config = _SECTION_CONFIG


class ObservabilityConfig(BaseSettings):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")

    model_config = _SECTION_CONFIG

    @field_validator("metrics_enabled", mode="before")
    @classmethod
    def _parse_metrics_enabled(cls, value: str | bool) -> bool:
        return _parse_bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _jwt_config_factory() -> JwtConfig:
    return JwtConfig()  # type: ignore[call-arg]


def _server_config_factory() -> ServerConfig:
    return ServerConfig()  # type: ignore[call-arg]


def _observability_config_factory() -> ObservabilityConfig:
    return ObservabilityConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: str | None = Field(None, alias="LOG_FILE")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")
    password_hash_method: str = Field("scrypt", alias="PASSWORD_HASH_METHOD")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    jwt: JwtConfig = Field(default_factory=_jwt_config_factory)
    server: ServerConfig = Field(default_factory=_server_config_factory)
    observability: ObservabilityConfig = Field(default_factory=_observability_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_by_name=True,
        validate_assignment=True,
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        missing = [
            name
            for name, value in (
                ("JWT_PRIVATE_KEY", self.jwt.private_key),
                ("JWT_PUBLIC_KEY", self.jwt.public_key),
            )
            if not value
        ]
        if missing:
            print(
                f"\n❌ CRITICAL CONFIGURATION ERROR: {', '.join(missing)} must be set in production.\n",
                file=sys.stderr,
            )
            sys.exit(1)

        if self.database.url.startswith("sqlite"):
            print(
                "\n⚠️  PRODUCTION WARNING: DATABASE_URL points at SQLite.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "JwtConfig",
    "ObservabilityConfig",
    "ServerConfig",
    "load_config",
]
