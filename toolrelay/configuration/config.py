"""Configuration management for toolrelay."""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from toolrelay.infrastructure.mcp.config import (
    McpLocalConfig,
    McpRemoteConfig,
    parse_server_config,
)


class Settings(BaseSettings):
    """Application settings."""

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # MCP Settings
    mcp_default_timeout_ms: int = Field(default=30000, alias="MCP_DEFAULT_TIMEOUT_MS")
    mcp_refresh_interval: float = Field(
        default=0, alias="MCP_REFRESH_INTERVAL"
    )  # seconds, 0 disables periodic refresh
    # JSON object: server name -> server config
    mcp_servers: dict[str, dict[str, Any]] = Field(default_factory=dict, alias="MCP_SERVERS")
    # Optional JSON file with the same shape; MCP_SERVERS entries win
    mcp_config_file: str | None = Field(default=None, alias="MCP_CONFIG_FILE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: str | None) -> str:
        """Normalize log level value from environment."""
        if value is None:
            return "INFO"
        normalized = str(value).strip().upper()
        if normalized in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return normalized
        raise ValueError("LOG_LEVEL must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")

    def load_server_configs(self) -> dict[str, McpLocalConfig | McpRemoteConfig]:
        """
        Get validated MCP server configurations.

        Servers without an explicit timeout get MCP_DEFAULT_TIMEOUT_MS.

        Raises:
            pydantic.ValidationError: If a server config is invalid
            OSError: If MCP_CONFIG_FILE cannot be read
        """
        raw: dict[str, dict[str, Any]] = {}
        if self.mcp_config_file:
            content = Path(self.mcp_config_file).read_text(encoding="utf-8")
            data = json.loads(content)
            # Accept both {"servers": {...}} and a bare mapping
            raw.update(data.get("servers", data) if isinstance(data, dict) else {})
        raw.update(self.mcp_servers)

        configs: dict[str, McpLocalConfig | McpRemoteConfig] = {}
        for name, server in raw.items():
            server = {"timeout": self.mcp_default_timeout_ms, **server}
            configs[name] = parse_server_config(server)
        return configs


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
