"""MCP (Model Context Protocol) session and tool management package."""

from toolrelay.infrastructure.agent.mcp.bridge import (
    MCPToolInvocationBridge,
    normalize_content,
    parse_arguments,
)
from toolrelay.infrastructure.agent.mcp.manager import MCPToolManager
from toolrelay.infrastructure.agent.mcp.refresh import MCPToolRefresher
from toolrelay.infrastructure.agent.mcp.session_registry import MCPSessionRegistry
from toolrelay.infrastructure.agent.mcp.state_store import ConnectionStateStore
from toolrelay.infrastructure.agent.mcp.tool_registry import MCPToolRegistry

__all__ = [
    "ConnectionStateStore",
    "MCPSessionRegistry",
    "MCPToolRegistry",
    "MCPToolInvocationBridge",
    "MCPToolRefresher",
    "MCPToolManager",
    "normalize_content",
    "parse_arguments",
]
