"""toolrelay - client-side session and tool registry manager for MCP servers."""

__version__ = "0.1.0"
