"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "growledger.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    # Optimistic transaction retries
    transaction_max_attempts: int = Field(default=5, ge=2)
    transaction_retry_delay: float = 0.05  # seconds

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class CleanQueueSettings(BaseSettings):
    """Reusable item clean queue configuration."""

    model_config = SettingsConfigDict(env_prefix="CLEAN_QUEUE_")

    # Match jar/dish/tray names when category or unit metadata is stale
    name_heuristic_enabled: bool = True
    backfill_limit: int = 2000


class LedgerSettings(BaseSettings):
    """Supply ledger configuration."""

    model_config = SettingsConfigDict(env_prefix="LEDGER_")

    # Raise on cross-group unit conversions instead of passing amounts through
    strict_units: bool = False
    recent_events_limit: int = 5


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "GrowLedger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # All documents belong to one logical partition
    tenant_id: str = "default"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    clean_queue: CleanQueueSettings = Field(default_factory=CleanQueueSettings)
    ledger: LedgerSettings = Field(default_factory=LedgerSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
