"""
MCP (Model Context Protocol) transport layer.

Architecture:
- McpConfig: Configuration models for local/remote MCP servers
- MCPSDKConnector: Opens sessions through the official MCP SDK
"""

from toolrelay.infrastructure.mcp.config import (
    McpConfig,
    McpLocalConfig,
    McpRemoteConfig,
    parse_server_config,
)

__all__ = [
    "McpConfig",
    "McpLocalConfig",
    "McpRemoteConfig",
    "parse_server_config",
]
