import json
from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, cast

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_ENV_FILE = Path(__file__).parent.parent / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=_ENV_FILE, extra="ignore")

    DATABASE_URL: str
    JWT_SECRET: str
    JWT_EXPIRE_MINUTES: int = Field(default=60 * 24, gt=0)
    # Read raw so comma-separated values reach parse_cors_origins undecoded.
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"
    MAX_PAGE_LIMIT: int = Field(default=100, ge=1, le=1000)

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: Any) -> list[str]:
        if isinstance(value, str):
            raw = value.strip()
            if not raw:
                raise ValueError("CORS_ORIGINS cannot be empty.")
            try:
                parsed = json.loads(raw) if raw.startswith("[") else raw.split(",")
            except json.JSONDecodeError:
                parsed = raw.split(",")
            value = parsed

        if not isinstance(value, list):
            raise ValueError("CORS_ORIGINS must be a list or comma-separated string.")

        normalized: list[str] = []
        for origin in value:
            if not isinstance(origin, str):
                raise ValueError("CORS_ORIGINS entries must be strings.")
            cleaned = origin.strip().strip('[]"\'').rstrip("/")
            if cleaned:
                normalized.append(cleaned)

        if not normalized:
            raise ValueError("CORS_ORIGINS must include at least one origin.")

        # Keep order while removing duplicates.
        return list(dict.fromkeys(normalized))

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, value: str) -> str:
        if len(value.encode("utf-8")) < 32:
            raise ValueError("JWT_SECRET must be at least 32 bytes for HS256.")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"LOG_LEVEL {value!r} is not a logging level.")
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


class _LazySettings:
    def __getattr__(self, item: str) -> Any:
        return getattr(get_settings(), item)


settings = cast(Settings, _LazySettings())
