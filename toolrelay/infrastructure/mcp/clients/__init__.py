"""MCP client implementations."""

from toolrelay.infrastructure.mcp.clients.sdk_session import MCPSDKConnector, MCPSDKSession

__all__ = ["MCPSDKConnector", "MCPSDKSession"]
