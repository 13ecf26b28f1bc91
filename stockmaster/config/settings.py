"""
Runtime configuration.

Every group reads its own environment prefix (``STORAGE_DB_NAME``,
``EVENTS_MAX_RETRIES``...) and a ``.env`` file in the working directory is
honoured for the top-level settings.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, PositiveInt, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """SQLite file location and pool sizing."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "stockmaster.db"
    pool_size: PositiveInt = 5
    busy_timeout: int = Field(default=30000, ge=0, description="SQLite busy timeout in ms")

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # Authentication happens upstream; this header only names the actor
    user_header: str = "X-User-Id"
    default_user_id: str = "system"


class CacheSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CACHE_")

    kpi_ttl: int = Field(default=60, ge=0, description="Dashboard KPI cache lifetime in seconds")


class EventSettings(BaseSettings):
    """Event notifier queue and sink retry policy."""

    model_config = SettingsConfigDict(env_prefix="EVENTS_")

    enabled: bool = True
    channel: str = "stockmaster:events"
    queue_size: PositiveInt = 1000

    max_retries: PositiveInt = 3
    retry_delay: float = Field(default=0.2, ge=0)
    retry_multiplier: float = Field(default=2.0, ge=1)


class PaginationSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PAGINATION_")

    default_limit: PositiveInt = 20
    max_limit: PositiveInt = 100

    @model_validator(mode="after")
    def default_within_max(self) -> "PaginationSettings":
        if self.default_limit > self.max_limit:
            raise ValueError(
                f"default_limit ({self.default_limit}) exceeds max_limit ({self.max_limit})"
            )
        return self


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "StockMaster"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    events: EventSettings = Field(default_factory=EventSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached instance so the next call re-reads the environment."""
    global _settings
    _settings = None
