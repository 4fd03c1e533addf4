"""Configuration management for the Looker MCP gateway.

Supports YAML configuration files and environment variable overrides.
Configuration is loaded once and cached for performance.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LookerSettings(BaseSettings):
    """Downstream Looker API configuration."""
    base_url: str = Field(default="http://localhost:19999", description="Looker instance URL")
    api_version: str = Field(default="4.0")

    model_config = SettingsConfigDict(
        env_prefix="LOOKER_",
        env_file=".env",
        extra="ignore"
    )

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must be an http(s) URL")
        return value

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_version}"


class MCPServerSettings(BaseSettings):
    """MCP gateway HTTP server configuration."""
    host: str = Field(default="0.0.0.0")
    port: int = Field(
        default=5001,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("MCP_SERVER_PORT", "PORT"),
    )
    enable_audit: bool = Field(default=True)
    audit_log_path: str = Field(default="logs/audit.log")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_prefix="MCP_SERVER_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


class Settings(BaseSettings):
    """Main application settings."""
    service_name: str = Field(default="mcp-looker-gateway")
    version: str = Field(default="1.0.0")
    protocol_version: str = Field(default="2025-06-18")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Component settings
    looker: LookerSettings = Field(default_factory=LookerSettings)
    mcp_server: MCPServerSettings = Field(default_factory=MCPServerSettings)

    model_config = SettingsConfigDict(
        env_prefix="MCP_",
        env_file=".env",
        extra="ignore"
    )

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        return cls(**load_yaml_config(path))


def load_yaml_config(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file, returning {} when it does not exist."""
    path = Path(path)
    if not path.exists():
        return {}

    with open(path) as f:
        return yaml.safe_load(f) or {}


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    config_path = os.environ.get("MCP_CONFIG_PATH", "config/settings.yaml")
    return Settings.from_yaml(config_path)
