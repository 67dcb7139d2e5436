"""
Customer Insights Statistics Service
Centralized Configuration Management

This module provides configuration management using Pydantic settings with
environment variable support, validation, and type safety.
"""

from functools import lru_cache
from typing import Optional, List
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Record Store Database Configuration"""

    model_config = SettingsConfigDict(env_prefix="DATABASE_")

    url: str = Field(
        default="sqlite+aiosqlite:///./customers.db",
        description="SQLAlchemy async database URL",
    )
    echo: bool = Field(default=False, description="Echo SQL queries")
    pool_pre_ping: bool = Field(default=True, description="Verify connections before use")

    @property
    def is_sqlite(self) -> bool:
        """Check if the store is backed by SQLite"""
        return self.url.startswith("sqlite")


class RedisSettings(BaseSettings):
    """Redis Report Cache Configuration"""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    enabled: bool = Field(default=False, description="Cache assembled reports in Redis")
    host: str = Field(default="localhost", description="Redis host")
    port: int = Field(default=6379, description="Redis port")
    password: Optional[SecretStr] = Field(default=None, description="Redis password")
    db: int = Field(default=0, description="Redis database number")
    max_connections: int = Field(default=50, description="Max connections")
    socket_timeout: int = Field(default=5, description="Socket timeout in seconds")
    report_ttl_seconds: int = Field(default=600, description="TTL of cached reports")
    url: Optional[str] = Field(default=None, alias="REDIS_URL", description="Redis URL (overrides host/port)")

    def get_url(self) -> str:
        """Redis connection URL - uses REDIS_URL if set, otherwise builds from host/port"""
        if self.url:
            return self.url
        if self.password:
            return f"redis://:{self.password.get_secret_value()}@{self.host}:{self.port}/{self.db}"
        return f"redis://{self.host}:{self.port}/{self.db}"


class SecuritySettings(BaseSettings):
    """CORS Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    cors_origins: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins"
    )


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or text")


class StatisticsSettings(BaseSettings):
    """Aggregation Engine Configuration"""

    model_config = SettingsConfigDict(env_prefix="STATS_")

    default_page_size: int = Field(default=20, description="Default page size for customer listing")
    max_page_size: int = Field(default=100, description="Largest accepted page size")
    scatter_limit: int = Field(default=1000, description="Max rows in the correlation scatter payload")
    gender_dedup_key: str = Field(default="email", description="Default dedup key of the gender report")
    summary_dedup_key: str = Field(default="email", description="Default dedup key of the summary report")
    current_year: Optional[int] = Field(default=None, description="Override the year ages are computed against")

    @field_validator("gender_dedup_key", "summary_dedup_key")
    @classmethod
    def validate_dedup_key(cls, v: str) -> str:
        """Validate dedup key names"""
        allowed = ["none", "customerId", "email", "fullName", "nameEmail"]
        if v not in allowed:
            raise ValueError(f"Dedup key must be one of: {allowed}")
        return v


class IngestionSettings(BaseSettings):
    """CSV Import Configuration"""

    model_config = SettingsConfigDict(env_prefix="IMPORT_")

    batch_size: int = Field(default=200, description="Rows per insert batch")
    csv_path: str = Field(default="Dataset.csv", description="Default CSV file to import")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="customer-insights", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=3000, alias="API_PORT", description="API port")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    statistics: StatisticsSettings = Field(default_factory=StatisticsSettings)
    ingestion: IngestionSettings = Field(default_factory=IngestionSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
