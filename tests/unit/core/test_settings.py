import pytest
from pydantic import ValidationError

from src.core.config.settings import get_settings
from tests.utils.config import ACCESS_SECRET, REFRESH_SECRET, build_test_settings


def test_symmetric_signing_uses_separate_secrets():
    settings = build_test_settings()

    assert settings.signing_key("access") == ACCESS_SECRET
    assert settings.signing_key("refresh") == REFRESH_SECRET
    assert settings.verification_key("refresh") == REFRESH_SECRET


def test_short_secrets_are_rejected():
    with pytest.raises(ValidationError):
        build_test_settings(ACCESS_TOKEN_SECRET="short")


def test_identical_secrets_are_rejected():
    with pytest.raises(ValidationError):
        build_test_settings(REFRESH_TOKEN_SECRET=ACCESS_SECRET)


def test_unsupported_algorithm_is_rejected():
    with pytest.raises(ValidationError):
        build_test_settings(JWT_ALGORITHM="none")


def test_asymmetric_signing_requires_keys(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError):
        build_test_settings(JWT_ALGORITHM="RS256")


def test_database_url_falls_back_to_memory():
    settings = build_test_settings(DATABASE_URL="")

    assert settings.DATABASE_URL == "memory://"
    assert settings.uses_in_memory_store


def test_database_url_is_assembled_from_postgres_fields():
    settings = build_test_settings(
        DATABASE_URL="",
        POSTGRES_HOST="db",
        POSTGRES_USER="credence",
        POSTGRES_PASSWORD="s3cret",
        POSTGRES_DB="accounts",
    )

    assert settings.DATABASE_URL == "postgresql+asyncpg://credence:s3cret@db:5432/accounts"
    assert not settings.uses_in_memory_store


def test_get_settings_applies_overrides(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APP_ENV", "test")

    settings = get_settings(
        APP_ENV="test",
        ACCESS_TOKEN_SECRET=ACCESS_SECRET,
        REFRESH_TOKEN_SECRET=REFRESH_SECRET,
        DATABASE_URL="memory://",
    )

    assert settings.APP_ENV == "test"
    assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 15


def test_in_memory_store_is_refused_in_production(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValueError):
        get_settings(
            APP_ENV="production",
            ACCESS_TOKEN_SECRET=ACCESS_SECRET,
            REFRESH_TOKEN_SECRET=REFRESH_SECRET,
            DATABASE_URL="memory://",
            EMAIL_BACKEND="log",
        )
