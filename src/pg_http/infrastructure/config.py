"""Configuration management for the HTTP gateway."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    max_body_bytes: int = Field(
        default=10 * 1024 * 1024, ge=1024, description="Maximum request body size (default 10MB)"
    )


class DatabaseConfig(BaseModel):
    """Embedded database configuration."""

    subdirectory: str = Field(
        default="pglite_db", min_length=1, description="Store directory name under DATA_DIR"
    )
    relaxed_durability: bool = Field(
        default=True, description="Trade immediate fsync on commit for lower write latency"
    )
    lock_file_name: str = Field(default="postmaster.pid", description="Engine process lock file")
    write_test_name: str = Field(default=".write_test", description="Startup write-check marker")
    keep_engine_running: bool = Field(
        default=False, description="Leave the engine running when the process exits"
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_enabled: bool = Field(default=False, description="Expose Prometheus metrics")
    metrics_port: int = Field(default=9100, ge=1, le=65535, description="Prometheus metrics port")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="pg_http", description="Service name for tracing")
    trace_console: bool = Field(
        default=False, description="Also print finished spans to stdout"
    )


class Config(BaseSettings):
    """Main configuration for the HTTP gateway.

    ``PORT`` and ``DATA_DIR`` are read without the ``PG_HTTP_`` prefix so the
    usual container conventions keep working; everything else is nested under
    the prefix, e.g. ``PG_HTTP_DATABASE__RELAXED_DURABILITY=false``.
    """

    model_config = SettingsConfigDict(
        env_prefix="PG_HTTP_",
        env_nested_delimiter="__",
        case_sensitive=False,
        populate_by_name=True,
    )

    port: int = Field(
        default=3000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("PORT", "port"),
        description="HTTP listen port",
    )
    data_dir: Path = Field(
        default=Path("/app/data"),
        validation_alias=AliasChoices("DATA_DIR", "data_dir"),
        description="Base directory for persistent state",
    )
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @property
    def store_path(self) -> Path:
        """Directory the embedded engine keeps its cluster in."""
        return self.data_dir / self.database.subdirectory


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
