"""
MCP Port Definitions.

Abstract interfaces (ports) for the MCP transport collaborator. The
implementation is provided by infrastructure adapters.
"""

from toolrelay.domain.ports.mcp.session_port import MCPConnectorPort, MCPSessionPort

__all__ = [
    "MCPConnectorPort",
    "MCPSessionPort",
]
