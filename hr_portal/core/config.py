from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_PROTECTED_PREFIXES = [
    "/dashboard",
    "/employees",
    "/payroll",
    "/kpi",
    "/approval",
    "/attendance",
]


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "HR Portal"
    TZ: str = "UTC"
    TEMPLATES_DIR: Path = Field(default_factory=lambda: PACKAGE_DIR / "templates")
    STATIC_DIR: Path = Field(default_factory=lambda: PACKAGE_DIR / "static")

    # Browser session. The cookie keeps the historical ``auth_token`` name so
    # reverse proxies and bookmarks keep working.
    APP_SECRET: str = "dev-insecure-secret-change-me"
    SESSION_COOKIE_NAME: str = "auth_token"
    SESSION_MAX_AGE: int = 60 * 60 * 12
    SESSION_HTTPS_ONLY: bool = False

    # Upstream HR backend
    API_BASE_URL: str = "http://localhost:8000/api"
    API_TIMEOUT: float = 10.0
    API_RETRIES: int = 2
    # When set, backend tokens that are JWTs get their signature checked too.
    API_JWT_SECRET: str = ""
    API_JWT_ALGORITHMS: list[str] = Field(default_factory=lambda: ["HS256"])

    LOGIN_PATH: str = "/login"
    DASHBOARD_PATH: str = "/dashboard"
    PROTECTED_PREFIXES: list[str] = Field(default_factory=lambda: list(DEFAULT_PROTECTED_PREFIXES))

    LOG_LEVEL: str = "INFO"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    @field_validator("PROTECTED_PREFIXES", "API_JWT_ALGORITHMS", mode="before")
    @classmethod
    def parse_csv_list(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("expected a comma separated string or list")

    @field_validator("API_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
