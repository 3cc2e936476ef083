"""Error hierarchy for MCP tool sessions.

Every failure surfaced by the session registry, the invocation bridge and
the refresh orchestrator is an MCPError carrying the server name, a
category for routing, and the underlying cause.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Severity levels for MCP errors."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of MCP errors."""
    VALIDATION = "validation"           # Malformed caller input
    EXECUTION = "execution"             # Remote tool call failed
    COMMUNICATION = "communication"     # Session establishment or listing failed


class MCPError(Exception):
    """Base exception for all MCP session errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.COMMUNICATION,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        server_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        """Initialize the MCP error.

        Args:
            message: Human-readable error message
            category: Error category for filtering/routing
            severity: Error severity level
            server_name: Name of the MCP server involved, if any
            cause: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.server_name = server_name
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API responses."""
        data: Dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "server_name": self.server_name,
        }
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.category.value.upper()}] {self.message}"]
        if self.server_name:
            parts.append(f"server={self.server_name}")
        return " | ".join(parts)


class ArgumentParseError(MCPError):
    """Raised when tool arguments are not a valid JSON object."""

    def __init__(
        self,
        message: str,
        server_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.WARNING,
            server_name=server_name,
            cause=cause,
        )


class MCPConnectionError(MCPError):
    """Raised when a session cannot be established or renewed."""

    def __init__(
        self,
        message: str,
        server_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.COMMUNICATION,
            severity=ErrorSeverity.ERROR,
            server_name=server_name,
            cause=cause,
        )


class InvocationError(MCPError):
    """Raised when the remote tool call fails after a session was obtained."""

    def __init__(
        self,
        message: str,
        tool_name: Optional[str] = None,
        server_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.EXECUTION,
            severity=ErrorSeverity.ERROR,
            server_name=server_name,
            cause=cause,
        )
        self.tool_name = tool_name

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary with tool info."""
        data = super().to_dict()
        if self.tool_name:
            data["tool_name"] = self.tool_name
        return data


class ListingError(MCPError):
    """Recorded when refreshing a server's tool list fails."""

    def __init__(
        self,
        message: str,
        server_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(
            message=message,
            category=ErrorCategory.COMMUNICATION,
            severity=ErrorSeverity.ERROR,
            server_name=server_name,
            cause=cause,
        )
