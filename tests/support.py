"""Shared builders for tests: settings with a throwaway RSA key and an in-memory database."""

from functools import lru_cache
from typing import Any

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from pydantic import SecretStr

from auth_service.core.config import Settings
from auth_service.core.database import Database

REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"


def generate_private_key_pem() -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


@lru_cache
def private_key_pem() -> str:
    """One RSA key per test run; generating 2048-bit keys is slow."""
    return generate_private_key_pem()


def build_settings(**overrides: Any) -> Settings:
    """Settings for tests: no .env, SQLite in memory, cheapest bcrypt cost."""
    values: dict[str, Any] = {
        "APP_ENV": "test",
        "DATABASE_URL": "sqlite://",
        "PRIVATE_KEY": SecretStr(private_key_pem()),
        "REFRESH_TOKEN_SECRET": SecretStr(REFRESH_SECRET),
        "BCRYPT_ROUNDS": 4,
        "COOKIE_DOMAIN": "localhost",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_database() -> Database:
    """Fresh in-memory database with all tables created."""
    database = Database("sqlite://")
    database.create_all()
    return database
