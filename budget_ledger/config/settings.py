"""
Configuration Management for Budget Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, quota and the dashboard defaults are validated
once at startup instead of being scattered through the code.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local document storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data"),
        description="Directory holding the persisted budget document"
    )
    storage_key: str = Field(
        default="hb_budget_v1",
        min_length=1,
        description="Namespaced key the document is stored under"
    )
    # Browsers cap local storage at roughly 5 MB per origin
    max_document_bytes: int = Field(
        default=5 * 1024 * 1024,
        ge=1024,
        description="Largest serialized document the store will write"
    )

    @field_validator('storage_key')
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """The key becomes a file name, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key must not contain path separators: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    currency_locale: str = Field(
        default="en-IN",
        description="Locale new documents are created with"
    )

    # Dashboard defaults
    recent_transactions_limit: int = Field(
        default=10,
        ge=1,
        le=500,
        description="How many transactions the recent list shows"
    )
    expense_window_months: int = Field(
        default=5,
        ge=1,
        le=60,
        description="Months in the rolling expense chart"
    )
    savings_history_months: int = Field(
        default=12,
        ge=1,
        le=120,
        description="Months in the savings history chart"
    )

    # Validation
    enforce_known_categories: bool = Field(
        default=True,
        description="Reject expense entries whose category is not configured"
    )

    log_level: str = Field(
        default="INFO",
        description="Standard library logging level"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, with an
    additional "<name>_error" entry for each failure.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
