"""
MCP session ports - abstract interfaces for the transport collaborator.

The wire protocol (framing, transport, handshake) lives behind these
interfaces. The session registry, bridge and refresh orchestrator only
talk to MCP servers through them.
"""

from abc import abstractmethod
from typing import Any, Protocol, runtime_checkable

from toolrelay.domain.model.mcp.tool import ContentPart, ToolDescriptor


@runtime_checkable
class MCPSessionPort(Protocol):
    """
    An established session with one MCP server.
    """

    @abstractmethod
    async def list_tools(self) -> list[ToolDescriptor]:
        """
        List the tools the server currently exposes.

        Returns:
            Tool descriptors in server order.
        """
        ...

    @abstractmethod
    async def call_tool(self, name: str, arguments: dict[str, Any]) -> list[ContentPart]:
        """
        Call a tool on the server.

        Args:
            name: Tool name as advertised by the server.
            arguments: JSON object of tool arguments.

        Returns:
            The content parts of the response, in response order.
        """
        ...

    @abstractmethod
    async def ping(self) -> bool:
        """
        Check that the session is still usable.

        Returns:
            True if the server answered, False otherwise. May also raise.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the session. Should be idempotent."""
        ...


@runtime_checkable
class MCPConnectorPort(Protocol):
    """
    Factory for MCP sessions, keyed by server name.
    """

    @abstractmethod
    async def connect(self, server_name: str) -> MCPSessionPort:
        """
        Establish a new session with a server.

        Args:
            server_name: Name of a configured server.

        Returns:
            A connected, initialized session.

        Raises:
            Exception: Any failure to connect or complete the handshake.
        """
        ...

    @abstractmethod
    def server_names(self) -> list[str]:
        """
        Get the names of the servers to connect on startup.
        """
        ...

    @abstractmethod
    def timeout_for(self, server_name: str) -> float | None:
        """
        Get the request timeout for a server in seconds, or None for no limit.
        """
        ...
