"""Application configuration."""

from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_parse_none_str="null",
    )

    # Application
    app_name: str = Field(default="Clinic Scheduling API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")

    # Server
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    reload: bool = Field(default=False, alias="RELOAD")

    # Appointment store backend
    appointment_store: Literal["memory", "postgres", "firestore"] = Field(
        default="memory",
        alias="APPOINTMENT_STORE",
    )

    # Database (postgres backend only)
    database_url: str | None = Field(default=None, alias="DATABASE_URL")

    # Firebase (firestore backend only)
    firebase_credentials_path: str | None = Field(
        default=None,
        alias="FIREBASE_CREDENTIALS_PATH",
        description="Path to Firebase service account JSON file",
    )

    firebase_config_json: str | None = Field(
        default=None,
        alias="FIREBASE_CONFIG_JSON",
        description="Raw JSON string of the Firebase service account",
    )

    firestore_appointments_collection: str = Field(
        default="appointments",
        alias="FIRESTORE_APPOINTMENTS_COLLECTION",
    )
    firestore_activity_collection: str = Field(
        default="activity_logs",
        alias="FIRESTORE_ACTIVITY_COLLECTION",
    )

    # Scheduling
    clinic_timezone: str | None = Field(
        default=None,
        alias="CLINIC_TIMEZONE",
        description="IANA zone used for the clinic's calendar day; host zone when unset",
    )
    confirmation_window_minutes: int = Field(
        default=60,
        alias="CONFIRMATION_WINDOW_MINUTES",
        ge=1,
    )

    @field_validator("clinic_timezone")
    @classmethod
    def validate_clinic_timezone(cls, value: str | None) -> str | None:
        """Reject zone names the tz database cannot resolve."""
        if not value:
            return None
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown clinic timezone '{value}'")
        return value

    # JWT
    jwt_secret_key: str = Field(
        default="development-only-secret-change-me",
        alias="JWT_SECRET_KEY",
    )
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=30, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # CORS
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list."""
        if isinstance(self.cors_origins_str, str):
            return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]
        return [self.cors_origins_str]

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]


# Global settings instance
settings = get_settings()
