"""
MCP Tool Domain Models.

Defines the tool descriptor, the content parts a tool call can return,
and the normalized ToolResult sum type handed back to callers.
"""

import base64
import binascii
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


@dataclass(frozen=True)
class ToolDescriptor:
    """
    A tool advertised by an MCP server.

    The description and input schema are opaque to this package; the
    complete server payload is kept in ``raw`` and passed through verbatim.
    """

    name: str
    description: str | None = None
    input_schema: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary (MCP protocol format)."""
        if self.raw:
            return dict(self.raw)
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolDescriptor":
        """Create from dictionary (MCP protocol format or snake case)."""
        return cls(
            name=data.get("name", ""),
            description=data.get("description"),
            input_schema=data.get("inputSchema", data.get("input_schema")) or {},
            raw=dict(data),
        )


# =============================================================================
# Content parts
# =============================================================================


@dataclass(frozen=True)
class TextPart:
    """Text content returned by a tool."""

    text: str


@dataclass(frozen=True)
class ImagePart:
    """Image content returned by a tool. ``data`` holds the decoded bytes."""

    data: bytes
    mime_type: str


@dataclass(frozen=True)
class AudioPart:
    """Audio content returned by a tool. ``data`` holds the decoded bytes."""

    data: bytes
    mime_type: str


# Anything else a server sends (resource links, embedded resources, ...) is
# carried as-is and stringified into the text stream.
ContentPart = Union[TextPart, ImagePart, AudioPart, Any]


def _decode_payload(data: Any) -> bytes:
    if isinstance(data, bytes | bytearray):
        return bytes(data)
    if not data:
        return b""
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        # Not base64: keep the raw text rather than dropping the payload
        return str(data).encode("utf-8")


def content_part_from_dict(data: dict[str, Any]) -> ContentPart:
    """
    Parse one MCP content item.

    Args:
        data: Content item in MCP protocol format, e.g.
            {"type": "image", "data": "<base64>", "mimeType": "image/png"}

    Returns:
        TextPart, ImagePart or AudioPart; unrecognized items are returned
        unchanged.
    """
    kind = data.get("type")
    if kind == "text":
        return TextPart(text=data.get("text") or "")
    if kind == "image":
        return ImagePart(
            data=_decode_payload(data.get("data")),
            mime_type=data.get("mimeType", data.get("mime_type")) or "",
        )
    if kind == "audio":
        return AudioPart(
            data=_decode_payload(data.get("data")),
            mime_type=data.get("mimeType", data.get("mime_type")) or "",
        )
    return data


# =============================================================================
# Tool results
# =============================================================================


class ToolResultType(str, Enum):
    """Tag of a normalized tool result."""

    TEXT = "text"
    IMAGE = "image"
    MEDIA = "media"


@dataclass(frozen=True)
class TextResult:
    """Text-only tool result."""

    content: str = ""

    @property
    def type(self) -> ToolResultType:
        return ToolResultType.TEXT

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "content": self.content}


@dataclass(frozen=True)
class ImageResult:
    """Tool result carrying an image and the accompanying text."""

    content: str
    data: bytes
    media_type: str

    @property
    def type(self) -> ToolResultType:
        return ToolResultType.IMAGE

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "content": self.content,
            "data": base64.b64encode(self.data).decode("ascii"),
            "media_type": self.media_type,
        }


@dataclass(frozen=True)
class MediaResult:
    """Tool result carrying an audio payload and the accompanying text."""

    content: str
    data: bytes
    media_type: str

    @property
    def type(self) -> ToolResultType:
        return ToolResultType.MEDIA

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "content": self.content,
            "data": base64.b64encode(self.data).decode("ascii"),
            "media_type": self.media_type,
        }


ToolResult = Union[TextResult, ImageResult, MediaResult]
