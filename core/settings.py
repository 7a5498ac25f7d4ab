"""
Application settings and configuration management using Pydantic Settings.
"""
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="Restaurant Booking Client", description="Application name")
    app_env: str = Field(default="development", description="Environment (development, staging, production)")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Backend API
    api_base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL of the restaurant REST backend"
    )
    request_timeout_seconds: float = Field(default=10.0, gt=0, description="HTTP request timeout")

    # Restaurant Configuration
    restaurant_timezone: Optional[str] = Field(
        default=None,
        description="Timezone used to decide 'today' (system date when unset)"
    )

    # Booking defaults
    default_reservation_time: str = Field(default="18:00", description="Pre-selected time slot")
    default_party_size: int = Field(default=2, ge=1, description="Pre-selected party size")
    max_party_size: int = Field(default=10, ge=1, description="Largest party the wizard accepts")
    min_phone_length: int = Field(default=10, ge=1, description="Minimum phone number length")

    # Availability fallback
    use_demo_tables: bool = Field(
        default=False,
        description="Fall back to the built-in demo tables when no table list is available"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed_levels:
            raise ValueError(f"log_level must be one of {allowed_levels}")
        return v_upper

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed_envs = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(f"app_env must be one of {allowed_envs}")
        return v_lower

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


# Global settings instance
settings = Settings()
