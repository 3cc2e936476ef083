"""
MCP (Model Context Protocol) Domain Models.

Key value objects:
- ConnectionState: Per-server connection status, error, session and counts
- ToolDescriptor: Tool definition advertised by a server
- ToolResult: Normalized outcome of a tool call (text, image or media)
"""

from toolrelay.domain.model.mcp.connection import (
    ConnectionCounts,
    ConnectionState,
    ConnectionStatus,
)
from toolrelay.domain.model.mcp.tool import (
    AudioPart,
    ContentPart,
    ImagePart,
    ImageResult,
    MediaResult,
    TextPart,
    TextResult,
    ToolDescriptor,
    ToolResult,
    ToolResultType,
    content_part_from_dict,
)

__all__ = [
    # Connection
    "ConnectionCounts",
    "ConnectionState",
    "ConnectionStatus",
    # Tool
    "ToolDescriptor",
    "ContentPart",
    "TextPart",
    "ImagePart",
    "AudioPart",
    "content_part_from_dict",
    # Result
    "ToolResult",
    "ToolResultType",
    "TextResult",
    "ImageResult",
    "MediaResult",
]
