import pytest
from pydantic import ValidationError

from apps.api.core.config import Settings


def _build_settings(cors_origins: object, **overrides) -> Settings:
    values = {
        "DATABASE_URL": "postgresql+psycopg://user:pw@localhost:5432/db",
        "JWT_SECRET": "a" * 32,
        "JWT_EXPIRE_MINUTES": 60,
        "CORS_ORIGINS": cors_origins,
    }
    values.update(overrides)
    return Settings.model_validate(values)


def test_cors_origins_normalizes_json_and_trailing_slash():
    settings = _build_settings('["https://reviews.example.com/","http://localhost:5173"]')

    assert settings.CORS_ORIGINS == [
        "https://reviews.example.com",
        "http://localhost:5173",
    ]


def test_cors_origins_accepts_comma_separated_values():
    settings = _build_settings("https://reviews.example.com/, http://localhost:5173 ")

    assert settings.CORS_ORIGINS == [
        "https://reviews.example.com",
        "http://localhost:5173",
    ]


def test_cors_origins_deduplicates():
    settings = _build_settings(["http://a.test", "http://a.test/"])

    assert settings.CORS_ORIGINS == ["http://a.test"]


def test_short_jwt_secret_rejected():
    with pytest.raises(ValidationError, match="JWT_SECRET"):
        _build_settings("http://a.test", JWT_SECRET="short")


def test_log_level_is_normalized():
    assert _build_settings("http://a.test", LOG_LEVEL=" debug ").LOG_LEVEL == "DEBUG"


def test_unknown_log_level_rejected():
    with pytest.raises(ValidationError, match="LOG_LEVEL"):
        _build_settings("http://a.test", LOG_LEVEL="LOUD")


def test_page_limit_default():
    assert _build_settings("http://a.test").MAX_PAGE_LIMIT == 100


def test_cors_origins_read_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("JWT_SECRET", "b" * 32)
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test/")

    assert Settings().CORS_ORIGINS == ["http://a.test", "http://b.test"]
