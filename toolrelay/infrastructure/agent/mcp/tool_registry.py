"""MCP Tool Registry.

Mirrors the list of tools each connected MCP server currently exposes.
A server present in the registry always maps to a non-empty tuple; a
refresh that returns no tools removes the server instead of storing an
empty entry.
"""

import logging
import threading
from collections.abc import Iterable, Iterator

from toolrelay.domain.model.mcp.tool import ToolDescriptor

logger = logging.getLogger(__name__)


class MCPToolRegistry:
    """Thread-safe mapping of server name to its ordered tool list."""

    def __init__(self) -> None:
        self._tools: dict[str, tuple[ToolDescriptor, ...]] = {}
        self._lock = threading.Lock()

    def update_tools(self, name: str, tools: Iterable[ToolDescriptor]) -> None:
        """Replace the tools of a server, removing it when the list is empty.

        Args:
            name: Server name
            tools: Tools in server order
        """
        tools = tuple(tools)
        if not tools:
            self._delete(name)
            return
        self._set(name, tools)

    def _set(self, name: str, tools: tuple[ToolDescriptor, ...]) -> None:
        with self._lock:
            self._tools[name] = tools
        logger.debug(f"Registered {len(tools)} tools for server {name}")

    def _delete(self, name: str) -> None:
        with self._lock:
            removed = self._tools.pop(name, None)
        if removed is not None:
            logger.debug(f"Removed tools for server {name}")

    def get(self, name: str) -> tuple[ToolDescriptor, ...] | None:
        """Get the tools of a server, or None if it has none registered."""
        with self._lock:
            return self._tools.get(name)

    def get_all(self) -> Iterator[tuple[str, tuple[ToolDescriptor, ...]]]:
        """Iterate (server name, tools) pairs.

        The iteration runs over a snapshot taken when the first item is
        requested, so concurrent updates are never observed half-applied.
        """
        with self._lock:
            items = list(self._tools.items())
        yield from items

    def find_tool(self, name: str, tool_name: str) -> ToolDescriptor | None:
        """Look up a single tool of a server by name."""
        for tool in self.get(name) or ():
            if tool.name == tool_name:
                return tool
        return None

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._tools

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)
