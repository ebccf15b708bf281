"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for DATABASE_URL (module-level so validators can use it).
VALID_DATABASE_URL_PREFIXES = (
    "postgresql://",
    "postgresql+psycopg2://",
    "postgres://",
    "postgres+psycopg2://",
    "sqlite://",
    "sqlite+pysqlite://",
)


class Settings(BaseSettings):
    """Validated application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Required: no sensible default for either
    DATABASE_URL: str
    JWT_SECRET: SecretStr

    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    REFRESH_COOKIE_NAME: str = "refreshToken"

    # Expired-session sweep; the request path deletes lazily, this is the safety net.
    SESSION_SWEEP_ENABLED: bool = True
    SESSION_SWEEP_INTERVAL_SEC: int = 3600

    # Single-page client origin (CORS and OAuth redirects)
    CLIENT_URL: str = "http://localhost:5173"

    # Cloudinary media provider (optional; uploads return 503 without it)
    CLOUDINARY_CLOUD_NAME: str | None = None
    CLOUDINARY_API_KEY: str | None = None
    CLOUDINARY_API_SECRET: SecretStr | None = None
    CLOUDINARY_API_BASE_URL: str = "https://api.cloudinary.com/v1_1"
    MEDIA_FOLDER: str = "photo-app-images"
    MEDIA_UPLOAD_TIMEOUT_SEC: float = 90.0
    MEDIA_REQUEST_TIMEOUT_SEC: float = 30.0
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Google OAuth (optional; required only for /auth/google)
    GOOGLE_CLIENT_ID: str | None = None
    GOOGLE_CLIENT_SECRET: SecretStr | None = None
    GOOGLE_REDIRECT_URI: str | None = None
    GOOGLE_REQUEST_TIMEOUT_SEC: float = 15.0

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "prod"

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL must be set and non-empty")
        if not any(v.startswith(prefix) for prefix in VALID_DATABASE_URL_PREFIXES):
            raise ValueError(
                "DATABASE_URL must be a PostgreSQL or SQLite URL (e.g. postgresql+psycopg2:// or sqlite://)"
            )
        return v.strip()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_ALGORITHM must be set and non-empty")
        return v.strip()

    @field_validator("ACCESS_TOKEN_EXPIRE_MINUTES")
    @classmethod
    def validate_access_token_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 1440:
            raise ValueError(
                "ACCESS_TOKEN_EXPIRE_MINUTES must be between 1 and 1440 (1 min to 1 day)"
            )
        return v

    @field_validator("REFRESH_TOKEN_EXPIRE_DAYS")
    @classmethod
    def validate_refresh_token_expire_days(cls, v: int) -> int:
        if v < 1 or v > 90:
            raise ValueError("REFRESH_TOKEN_EXPIRE_DAYS must be between 1 and 90")
        return v

    @field_validator("SESSION_SWEEP_INTERVAL_SEC")
    @classmethod
    def validate_sweep_interval(cls, v: int) -> int:
        if v < 60 or v > 86400:
            raise ValueError(
                "SESSION_SWEEP_INTERVAL_SEC must be between 60 and 86400 (1 minute to 1 day)"
            )
        return v

    @field_validator("CLIENT_URL")
    @classmethod
    def validate_client_url(cls, v: str) -> str:
        s = v.strip().rstrip("/")
        if not (s.lower().startswith("http://") or s.lower().startswith("https://")):
            raise ValueError("CLIENT_URL must use http or https (e.g. http://localhost:5173)")
        return s

    @field_validator("MEDIA_UPLOAD_TIMEOUT_SEC")
    @classmethod
    def validate_media_upload_timeout(cls, v: float) -> float:
        if v <= 0 or v > 600:
            raise ValueError(
                "MEDIA_UPLOAD_TIMEOUT_SEC must be greater than 0 and at most 600"
            )
        return v

    @field_validator("MEDIA_REQUEST_TIMEOUT_SEC", "GOOGLE_REQUEST_TIMEOUT_SEC")
    @classmethod
    def validate_request_timeout(cls, v: float) -> float:
        if v <= 0 or v > 120:
            raise ValueError("Request timeouts must be greater than 0 and at most 120")
        return v

    @field_validator("MAX_UPLOAD_BYTES")
    @classmethod
    def validate_max_upload_bytes(cls, v: int) -> int:
        if v < 1024 or v > 100 * 1024 * 1024:
            raise ValueError("MAX_UPLOAD_BYTES must be between 1 KiB and 100 MiB")
        return v


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()


settings = get_settings()
