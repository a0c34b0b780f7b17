"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerConfig(BaseSettings):
    """Ledger service configuration"""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # API configuration
    api_host: str = "0.0.0.0"
    # Plain PORT is honoured as a fallback for container platforms
    api_port: int = Field(
        default=3000,
        validation_alias=AliasChoices("LEDGER_API_PORT", "PORT"),
    )
    cors_allow_origins: List[str] = ["*"]

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Business rules configuration
    currency: str = "USD"
    default_page_limit: int = 50

    # Client configuration
    client_base_url: str = "http://localhost:3000"
    client_timeout: float = 10.0


# Global configuration instance
config = LedgerConfig()


def get_config() -> LedgerConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> LedgerConfig:
    """Reload configuration from environment"""
    global config
    config = LedgerConfig()
    return config
