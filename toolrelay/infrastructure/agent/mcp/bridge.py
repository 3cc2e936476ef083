"""
MCP Tool Invocation Bridge.

Runs a named tool on an MCP server from a raw JSON argument string and
normalizes the heterogeneous response content into a single ToolResult.
"""

import asyncio
import json
import logging
from collections.abc import Iterable
from typing import Any

from toolrelay.domain.model.mcp.tool import (
    AudioPart,
    ContentPart,
    ImagePart,
    ImageResult,
    MediaResult,
    TextPart,
    TextResult,
    ToolResult,
)
from toolrelay.infrastructure.agent.errors import ArgumentParseError, InvocationError
from toolrelay.infrastructure.agent.mcp.session_registry import MCPSessionRegistry

logger = logging.getLogger(__name__)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def parse_arguments(args_json: str | bytes, server_name: str | None = None) -> dict[str, Any]:
    """
    Parse tool arguments.

    Args:
        args_json: JSON text that must decode to an object
        server_name: Server name for error reporting

    Returns:
        The decoded arguments

    Raises:
        ArgumentParseError: If the text is not valid JSON or not an object
    """
    try:
        # NaN and +/-Infinity are not JSON
        arguments = json.loads(args_json, parse_constant=_reject_constant)
    except (TypeError, ValueError) as e:
        raise ArgumentParseError(
            f"error parsing parameters: {e}", server_name=server_name, cause=e
        ) from e

    if not isinstance(arguments, dict):
        raise ArgumentParseError(
            f"error parsing parameters: expected a JSON object, got {type(arguments).__name__}",
            server_name=server_name,
        )
    return arguments


def _stringify(part: Any) -> str:
    if isinstance(part, dict):
        return json.dumps(part, ensure_ascii=False, default=str)
    return str(part)


def normalize_content(parts: Iterable[ContentPart]) -> ToolResult:
    """
    Collapse tool response content into one ToolResult.

    All text parts are joined with newlines in response order. The first
    image wins over the first audio part; unrecognized parts are
    stringified into the text.
    """
    text_parts: list[str] = []
    image: ImagePart | None = None
    audio: AudioPart | None = None

    for part in parts:
        if isinstance(part, TextPart):
            text_parts.append(part.text)
        elif isinstance(part, ImagePart):
            if image is None:
                image = part
        elif isinstance(part, AudioPart):
            if audio is None:
                audio = part
        else:
            text_parts.append(_stringify(part))

    text = "\n".join(text_parts)

    if image is not None:
        return ImageResult(content=text, data=image.data, media_type=image.mime_type)
    if audio is not None:
        return MediaResult(content=text, data=audio.data, media_type=audio.mime_type)
    return TextResult(content=text)


class MCPToolInvocationBridge:
    """
    Bridge between callers holding raw JSON arguments and MCP sessions.
    """

    def __init__(self, sessions: MCPSessionRegistry) -> None:
        """
        Initialize the bridge.

        Args:
            sessions: Session registry used to obtain or renew sessions
        """
        self._sessions = sessions

    async def run_tool(
        self,
        server_name: str,
        tool_name: str,
        args_json: str | bytes,
        timeout: float | None = None,
    ) -> ToolResult:
        """
        Run a tool on an MCP server.

        Args:
            server_name: Server exposing the tool
            tool_name: Tool to call
            args_json: Tool arguments as a JSON object
            timeout: Optional limit for the remote call in seconds

        Returns:
            The normalized tool result

        Raises:
            ArgumentParseError: If args_json is not a JSON object
            MCPConnectionError: If no session could be obtained
            InvocationError: If the remote call failed
        """
        arguments = parse_arguments(args_json, server_name=server_name)

        session = await self._sessions.get_or_renew(server_name)

        try:
            parts = await asyncio.wait_for(
                session.call_tool(tool_name, arguments), timeout=timeout
            )
        except TimeoutError as e:
            raise InvocationError(
                f"Tool {tool_name} timed out after {timeout}s",
                tool_name=tool_name,
                server_name=server_name,
                cause=e,
            ) from e
        except Exception as e:
            logger.error(f"Failed to call tool {tool_name} on server {server_name}: {e}")
            raise InvocationError(
                f"Tool {tool_name} failed: {e}",
                tool_name=tool_name,
                server_name=server_name,
                cause=e,
            ) from e

        if not parts:
            return TextResult(content="")

        logger.debug(f"Tool {tool_name} on server {server_name} returned {len(parts)} parts")
        return normalize_content(parts)
