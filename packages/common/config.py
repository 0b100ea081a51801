"""
Application configuration using Pydantic Settings
Reads from environment variables and .env file
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Remote business API (PHP backend)
    busa_api_base_url: str = Field(
        default="https://sajfoods.net/busa-api/database",
        alias="BUSA_API_BASE_URL",
    )
    # None keeps the httpx default timeout
    busa_api_timeout_seconds: Optional[float] = Field(default=None, alias="BUSA_API_TIMEOUT_SECONDS")

    # Application
    environment: str = Field(default="production", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Company details printed on documents
    currency: str = Field(default="NGN", alias="CURRENCY")
    company_name: str = Field(default="SAJ Foods Database", alias="COMPANY_NAME")
    company_address: str = Field(
        default="123 Dairy Lane, Creamville, YK 54321, Nigeria",
        alias="COMPANY_ADDRESS",
    )
    company_phone: Optional[str] = Field(default="+234 800 123 4567", alias="COMPANY_PHONE")
    company_email: Optional[str] = Field(default="billing@sajfoods.com.ng", alias="COMPANY_EMAIL")

    # Business rules
    raw_material_low_stock_default: int = Field(default=10, alias="RAW_MATERIAL_LOW_STOCK_DEFAULT")
    dashboard_recent_activity_limit: int = Field(default=5, alias="DASHBOARD_RECENT_ACTIVITY_LIMIT")

    # Monitoring
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED")

    # Development
    debug: bool = Field(default=False, alias="DEBUG")
    skip_auth_validation: bool = Field(default=False, alias="SKIP_AUTH_VALIDATION")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment"""
        valid_envs = ["development", "staging", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of {valid_envs}")
        return v.lower()

    @field_validator("busa_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
