# python
# app/core/config.py
"""Configuration settings for the TaskMaster API.

Uses Pydantic BaseSettings for environment variable management.
"""
from enum import Enum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormatEnum(str, Enum):
    simple = "simple"
    json = "json"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="TaskMaster API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Database Settings =====
    database_url: str | None = Field(default=None, description="Database connection URL")
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== Authentication (identity provider) =====
    auth_jwt_secret: str | None = Field(
        default=None, description="Shared secret used to verify identity provider JWTs"
    )
    auth_jwt_audience: str = Field(default="authenticated", description="Expected JWT audience")
    auth_api_url: str | None = Field(default=None, description="Identity provider base URL")
    auth_api_key: str | None = Field(default=None, description="Identity provider public API key")
    auth_request_timeout: int = Field(default=10, description="Identity lookup timeout in seconds")

    # ===== AI Service (Gemini) =====
    gemini_api_key: str | None = Field(default=None, description="Google Gemini API key")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model to use")
    gemini_max_tokens: int = Field(default=2048, description="Maximum tokens for Gemini")
    ai_temperature: float = Field(default=0.7, description="Default sampling temperature")
    ai_request_timeout: int = Field(default=30, description="AI request timeout in seconds")
    ai_max_retry_attempts: int = Field(default=3, description="Retries on rate limit/quota")
    ai_retry_backoff_factor: float = Field(default=2.0, description="Exponential backoff factor")
    ai_retry_min_wait: int = Field(default=2, description="Minimum wait between retries")
    ai_retry_max_wait: int = Field(default=30, description="Maximum wait between retries")

    # ===== Email Configuration =====
    email_api_url: str = Field(
        default="https://api.resend.com/emails", description="Transactional email API endpoint"
    )
    email_api_key: str | None = Field(default=None, description="Transactional email API key")
    email_from: str = Field(
        default="TaskMaster <onboarding@resend.dev>", description="Email from address"
    )
    email_request_timeout: int = Field(default=10, description="Email API timeout in seconds")
    app_base_url: str = Field(
        default="http://localhost:3000", description="Public URL used in email links"
    )

    # ===== Batch jobs =====
    cron_secret: str | None = Field(default=None, description="Shared secret for cron triggers")
    celery_broker_url: str = Field(
        default="redis://localhost:6379/1", description="Celery broker URL"
    )
    celery_result_backend: str = Field(
        default="redis://localhost:6379/2", description="Celery result backend"
    )

    # ===== Scheduling =====
    scheduling_timezone: str | None = Field(
        default=None, description="IANA timezone schedule windows are expressed in"
    )
    max_subtasks_depth: int = Field(default=5, description="Maximum subtask nesting depth")

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")
    log_format: LogFormatEnum = Field(default=LogFormatEnum.json, description="Log format")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def has_ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def has_email_enabled(self) -> bool:
        return bool(self.email_api_key)

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
        return v

    @field_validator("max_subtasks_depth")
    @classmethod
    def validate_max_depth(cls, v):
        if v < 1:
            raise ValueError("Maximum subtask depth must be at least 1")
        return v

    @field_validator("app_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @model_validator(mode="after")
    def set_computed_fields(self):
        if not self.test_database_url and self.database_url and "neondb" in self.database_url:
            self.test_database_url = self.database_url.replace("neondb", "neondb_test")
        return self


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings(config: Settings | None = None):
        config = config or settings
        errors = []
        if not config.database_url:
            errors.append("DATABASE_URL is required")
        if not (config.auth_jwt_secret or config.auth_api_url):
            errors.append("AUTH_JWT_SECRET or AUTH_API_URL is required")
        if config.is_production and not config.gemini_api_key:
            errors.append("GEMINI_API_KEY is required in production")
        if config.is_production and not config.cron_secret:
            errors.append("CRON_SECRET is required in production")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status(config: Settings | None = None) -> dict:
        config = config or settings
        return {
            "ai_enabled": config.has_ai_enabled,
            "email_enabled": config.has_email_enabled,
            "cron_enabled": bool(config.cron_secret),
            "auth_mode": "jwt" if config.auth_jwt_secret else "remote",
            "environment": config.environment,
        }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "EnvironmentEnum",
    "LogLevelEnum",
    "LogFormatEnum",
]
