"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="devops-guard", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Persistence ==========
    use_sql: bool = Field(
        default=False,
        description="Persist work items in SQL instead of process memory"
    )
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/devops_guard",
        description="SQLAlchemy async connection URL"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== Security ==========
    api_key: Optional[str] = Field(
        default=None,
        description="Shared secret expected in the X-API-Key header (blank disables the check)"
    )

    # ========== Metrics Snapshots ==========
    metrics_auto_capture: bool = Field(
        default=False,
        description="Capture a daily metrics snapshot (requires use_sql)"
    )
    metrics_snapshot_hour_local: int = Field(
        default=9,
        description="Local hour of day at which the daily snapshot is taken"
    )
    metrics_history_default_limit: int = Field(
        default=30,
        description="Default number of snapshots returned by the history endpoint",
        ge=1,
        le=365
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("metrics_snapshot_hour_local")
    @classmethod
    def clamp_snapshot_hour(cls, v: int) -> int:
        """Out-of-range hours are clamped rather than rejected."""
        return max(0, min(23, v))

    @property
    def snapshot_scheduler_enabled(self) -> bool:
        return self.use_sql and self.metrics_auto_capture


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
