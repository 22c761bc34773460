"""Configuration management for the key/value collection adapter."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdapterConfig(BaseModel):
    """Collection adapter configuration."""

    persistent: bool = Field(
        default=False, description="Keep data on disk instead of memory only"
    )
    db_file_path: Path = Field(
        default=Path("./.kv_adapter/collections.db"),
        description="Data file location when persistent",
    )
    schema_prefix: str = Field(
        default="schema:", min_length=1, description="Key prefix for schema definitions"
    )
    data_prefix: str = Field(
        default="data:", min_length=1, description="Key prefix for collection row sets"
    )
    attributes_case_sensitive: bool = Field(
        default=False, description="Disable attribute name case folding in matching"
    )
    match_falsy_values: bool = Field(
        default=False,
        description="Let stored 0/''/False/None values match criteria (presence check)",
    )

    @model_validator(mode="after")
    def _check_prefixes(self) -> "AdapterConfig":
        if self.schema_prefix == self.data_prefix:
            raise ValueError("schema_prefix and data_prefix must differ")
        return self

    def ensure_directories(self) -> None:
        """Ensure the data file's parent directory exists (persistent mode only)."""
        if self.persistent:
            self.db_file_path.parent.mkdir(parents=True, exist_ok=True)


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_port: int = Field(default=8011, ge=1, le=65535, description="Prometheus metrics port")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="kv_adapter", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the collection adapter."""

    model_config = SettingsConfigDict(
        env_prefix="KV_ADAPTER_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    adapter: AdapterConfig = Field(default_factory=AdapterConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure directories required by the configuration exist."""
        self.adapter.ensure_directories()


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    config = Config()
    config.ensure_directories()
    return config
