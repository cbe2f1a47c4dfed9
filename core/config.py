"""
Centralized configuration management with validation.

All environment variables are loaded and validated here.
The scheduling engines never read these directly; callers pass the
values they need (see ``from_settings`` constructors).
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings with validation."""

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    # Environment
    ENVIRONMENT: str = Field(default="development")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="text")  # json or text

    # Rule/catalog YAML directory (defaults to the packaged config dir)
    PLAN_CONFIG_DIR: Optional[str] = Field(default=None)

    # Fitness plan horizon
    DEFAULT_HORIZON_DAYS: int = Field(default=14, ge=1, le=366)

    # Prediction confidence
    REGULARITY_TOLERANCE_DAYS: int = Field(default=3, ge=0)
    REGULARITY_LOOKBACK_CYCLES: int = Field(default=6, ge=1)
    WIDENING_WINDOW_RADIUS_DAYS: int = Field(default=4, ge=0)

    # Optional derived-result cache
    CACHE_TTL_FITNESS_PLAN: int = Field(default=3600)  # 1 hour
    CACHE_TTL_RACE_PLAN: int = Field(default=86400)    # 1 day


# Global settings instance
settings = Settings()
