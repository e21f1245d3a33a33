from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BACKEND_DIR / ".env", env_file_encoding="utf-8")

    database_url: str = Field(validation_alias=AliasChoices("database_url", "DATABASE_URL"))

    # Auth
    jwt_secret_key: str = Field(
        validation_alias=AliasChoices(
            "jwt_secret_key",
            "jwt_access_secret",
            "JWT_SECRET_KEY",
            "JWT_ACCESS_SECRET",
        )
    )
    jwt_refresh_secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("jwt_refresh_secret_key", "JWT_REFRESH_SECRET_KEY", "JWT_REFRESH_SECRET"),
    )
    jwt_algorithm: str = Field(default="HS256", validation_alias=AliasChoices("jwt_algorithm", "JWT_ALGORITHM"))
    access_token_expire_minutes: int = Field(
        default=15,
        validation_alias=AliasChoices("access_token_expire_minutes", "ACCESS_TOKEN_EXPIRE_MINUTES"),
    )
    refresh_token_expire_minutes: int = Field(
        default=7 * 24 * 60,
        validation_alias=AliasChoices("refresh_token_expire_minutes", "REFRESH_TOKEN_EXPIRE_MINUTES"),
    )

    allow_register: bool = Field(
        default=True,
        validation_alias=AliasChoices("allow_register", "ALLOW_REGISTER"),
    )

    # Optional bootstrap: seed an initial Super Admin.
    # Only used if BOTH email + password are provided.
    seed_admin_email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("seed_admin_email", "SEED_ADMIN_EMAIL"),
    )
    seed_admin_password: str | None = Field(
        default=None,
        validation_alias=AliasChoices("seed_admin_password", "SEED_ADMIN_PASSWORD"),
    )

    # Runtime
    environment: str = Field(default="development", validation_alias=AliasChoices("environment", "ENVIRONMENT"))
    frontend_origin: str = Field(
        default="http://localhost:5173",
        validation_alias=AliasChoices("frontend_origin", "FRONTEND_ORIGIN", "CORS_ORIGIN"),
    )
    auto_create_schema: bool = Field(
        default=True,
        validation_alias=AliasChoices("auto_create_schema", "AUTO_CREATE_SCHEMA"),
    )

    # Logging
    log_level: str | None = Field(default=None, validation_alias=AliasChoices("log_level", "LOG_LEVEL"))
    log_dir: str = Field(default="logs", validation_alias=AliasChoices("log_dir", "LOG_DIR"))

    @field_validator("frontend_origin")
    @classmethod
    def _normalize_frontend_origin(cls, v: str) -> str:
        # Starlette CORS expects the Origin to match exactly (no trailing slash).
        return v.strip().rstrip("/")

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, v: str) -> str:
        return (v or "development").strip().lower()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().upper()
        return v or None

    @field_validator("seed_admin_email")
    @classmethod
    def _normalize_seed_admin_email(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip().lower()
        return v or None

    @field_validator("seed_admin_password")
    @classmethod
    def _normalize_seed_admin_password(cls, v: str | None) -> str | None:
        if v is None:
            return None
        # Intentionally do not strip whitespace here: passwords can contain spaces.
        return v

    @property
    def refresh_secret(self) -> str:
        return self.jwt_refresh_secret_key or self.jwt_secret_key

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


settings = Settings()
