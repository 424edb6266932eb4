"""
Mockingbird Settings - Configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Find project root (where .env file is located)
PROJECT_ROOT = Path(__file__).parent.parent


class MockingbirdSettings(BaseSettings):
    """
    Mockingbird configuration settings.

    Settings are loaded from:
    1. Environment variables (highest priority)
    2. .env file in current directory
    3. Default values (lowest priority)
    """

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="MB_",  # All Mockingbird env vars must start with MB_
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR) (env: MB_LOG_LEVEL)",
    )

    # Registry Configuration
    implicit_suite_name: str = Field(
        default="Root",
        description="Description of the suite that groups top-level tests (env: MB_IMPLICIT_SUITE_NAME)",
    )

    # Virtual Clock Configuration
    timer_loop_limit: int = Field(
        default=100_000,
        description="Maximum timers fired by run_all_timers before giving up (env: MB_TIMER_LOOP_LIMIT)",
    )

    # Console Configuration
    console_indent: int = Field(
        default=2,
        description="JSON indent used when console.log receives a dict or list (env: MB_CONSOLE_INDENT)",
    )

    @field_validator("timer_loop_limit")
    @classmethod
    def _positive_limit(cls, value: int) -> int:
        if value < 1:
            raise ValueError("timer_loop_limit must be at least 1")
        return value


# Global settings instance
_settings: MockingbirdSettings | None = None


def get_settings() -> MockingbirdSettings:
    """
    Get the global settings instance.

    Creates the settings instance on first call, then returns cached instance.

    Returns:
        MockingbirdSettings instance
    """
    global _settings
    if _settings is None:
        _settings = MockingbirdSettings()
    return _settings


def reload_settings() -> MockingbirdSettings:
    """
    Reload settings from environment/files.

    Useful for testing or when .env file changes.

    Returns:
        Fresh MockingbirdSettings instance
    """
    global _settings
    _settings = MockingbirdSettings()
    return _settings
