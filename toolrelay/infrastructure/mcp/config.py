"""
MCP Configuration Models.

Defines Pydantic models for MCP server configuration.
Supports both local (stdio) and remote (streamable HTTP) connection types.
"""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class McpLocalConfig(BaseModel):
    """
    Configuration for local MCP server (stdio transport).

    Example:
        {
            "type": "local",
            "command": ["docker", "run", "-i", "--rm", "mcp/fetch"],
            "environment": {"DEBUG": "true"},
            "enabled": true,
            "timeout": 30000
        }
    """

    type: Literal["local"] = "local"
    command: list[str] = Field(..., description="Command and arguments to run the MCP server")
    environment: dict[str, str] | None = Field(
        default=None, description="Environment variables to set when running the MCP server"
    )
    cwd: str | None = Field(default=None, description="Working directory for the server process")
    enabled: bool = Field(default=True, description="Enable or disable the MCP server on startup")
    timeout: int = Field(
        default=30000, description="Timeout in ms for MCP server requests (default: 30s)"
    )

    @field_validator("command")
    @classmethod
    def command_not_empty(cls, value: list[str]) -> list[str]:
        if not value or not value[0]:
            raise ValueError("command must contain at least the executable")
        return value

    @property
    def timeout_seconds(self) -> float:
        """Get timeout in seconds."""
        return self.timeout / 1000.0


class McpRemoteConfig(BaseModel):
    """
    Configuration for remote MCP server (streamable HTTP transport).

    Example:
        {
            "type": "remote",
            "url": "https://api.example.com/mcp",
            "headers": {"Authorization": "Bearer token"},
            "enabled": true,
            "timeout": 30000
        }
    """

    type: Literal["remote"] = "remote"
    url: str = Field(..., min_length=1, description="URL of the remote MCP server")
    headers: dict[str, str] | None = Field(
        default=None, description="Headers to send with the request"
    )
    enabled: bool = Field(default=True, description="Enable or disable the MCP server on startup")
    timeout: int = Field(
        default=30000, description="Timeout in ms for MCP server requests (default: 30s)"
    )

    @property
    def timeout_seconds(self) -> float:
        """Get timeout in seconds."""
        return self.timeout / 1000.0


# Union type for MCP configuration, discriminated by "type"
McpConfig = Annotated[Union[McpLocalConfig, McpRemoteConfig], Field(discriminator="type")]

_config_adapter: TypeAdapter[McpConfig] = TypeAdapter(McpConfig)


def parse_server_config(data: dict[str, Any]) -> McpLocalConfig | McpRemoteConfig:
    """
    Validate one server configuration.

    A config without "type" is treated as local when it has a command and
    as remote when it has a url.

    Raises:
        pydantic.ValidationError: If the configuration is invalid
    """
    if "type" not in data:
        data = {**data, "type": "remote" if "url" in data else "local"}
    return _config_adapter.validate_python(data)
