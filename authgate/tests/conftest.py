from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from authgate.application.services.password_hashing import WerkzeugPasswordHasher
from authgate.container import Container
from authgate.infrastructure.auth.jwt_tokens import RsaJwtTokenService
from authgate.infrastructure.db import Database
from authgate.shared.config import (
    AppConfig,
    DatabaseConfig,
    JwtConfig,
    ObservabilityConfig,
    ServerConfig,
)

FAST_HASH_METHOD = "pbkdf2:sha256:1000"


@dataclass(frozen=True)
class KeyPair:
    private_pem: str
    public_pem: str


def _generate_keypair() -> KeyPair:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")
    return KeyPair(private_pem=private_pem, public_pem=public_pem)


@pytest.fixture(scope="session")
def rsa_keys() -> KeyPair:
    return _generate_keypair()


@pytest.fixture(scope="session")
def other_rsa_keys() -> KeyPair:
    return _generate_keypair()


@pytest.fixture()
def password_hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher(method=FAST_HASH_METHOD)


@pytest.fixture()
def token_service(rsa_keys: KeyPair) -> RsaJwtTokenService:
    return RsaJwtTokenService(
        private_key_pem=rsa_keys.private_pem,
        public_key_pem=rsa_keys.public_pem,
        ttl_seconds=3600,
    )


@pytest.fixture()
def database_config(tmp_path: Path) -> DatabaseConfig:
    return DatabaseConfig(
        url=f"sqlite:///{tmp_path / 'authgate.db'}",
        pool_size=4,
        max_overflow=2,
        pool_timeout=5,
        pool_recycle=30,
        create_schema=True,
    )


@pytest.fixture()
def database(database_config: DatabaseConfig) -> Iterator[Database]:
    db = Database(database_config)
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture()
def app_config(database_config: DatabaseConfig, rsa_keys: KeyPair) -> AppConfig:
    return AppConfig(
        app_env="test",
        password_hash_method=FAST_HASH_METHOD,
        database=database_config,
        jwt=JwtConfig(
            private_key=rsa_keys.private_pem,
            public_key=rsa_keys.public_pem,
            ttl_seconds=3600,
        ),
        server=ServerConfig(host="127.0.0.1", port=0, read_timeout=2, shutdown_timeout=5),
        observability=ObservabilityConfig(metrics_enabled=True),
    )


@pytest.fixture()
def container(app_config: AppConfig) -> Iterator[Container]:
    built = Container(app_config)
    built.database.init_db()
    yield built
    built.database.dispose()


def http_request(
    method: str,
    path: str,
    body: str | None = None,
    headers: dict[str, str] | None = None,
) -> bytes:
    lines = [f"{method} {path} HTTP/1.1", "Host: localhost"]
    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")
    payload = (body or "").encode("utf-8")
    if body is not None:
        lines.append("Content-Type: application/json")
        lines.append(f"Content-Length: {len(payload)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8") + payload
