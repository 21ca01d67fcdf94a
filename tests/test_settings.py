"""
Tests for configuration loading.
"""

import pytest

from errors import TokenSignatureInvalid
from security import TokenService
from settings import Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ["JWT_SECRET", "DATABASE_URL", "CONNECTION_URI", "JWT_EXPIRES_IN", "CORS_ORIGINS", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_missing_secret_gets_random_value(clean_env):
    first = Settings(_env_file=None)
    second = Settings(_env_file=None)
    assert len(first.jwt_secret) >= 32
    assert first.jwt_secret != second.jwt_secret


def test_token_signed_with_guessable_secret_is_rejected(clean_env):
    settings = Settings(_env_file=None)
    service = TokenService(settings.jwt_secret)
    for guess in ["secret", "dev-secret", "dev-secret-change-me"]:
        forged = TokenService(guess).issue("alice1")
        with pytest.raises(TokenSignatureInvalid):
            service.validate(forged)


def test_reads_environment(clean_env):
    clean_env.setenv("JWT_SECRET", "from-env")
    clean_env.setenv("CONNECTION_URI", "mongodb://db.example:27017")
    clean_env.setenv("JWT_EXPIRES_IN", "600")
    clean_env.setenv("CORS_ORIGINS", "http://localhost:8080, http://localhost:1234")
    clean_env.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)
    assert settings.jwt_secret == "from-env"
    assert settings.database_url == "mongodb://db.example:27017"
    assert settings.jwt_expires_in == 600
    assert settings.cors_origin_list == ["http://localhost:8080", "http://localhost:1234"]
    assert settings.log_level == "DEBUG"


def test_reads_env_file(clean_env, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("JWT_SECRET=from-file\nDATABASE_URL=mongodb://file:27017\n")
    settings = Settings(_env_file=env_file)
    assert settings.jwt_secret == "from-file"
    assert settings.database_url == "mongodb://file:27017"
