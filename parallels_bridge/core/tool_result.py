"""Tool Result — explicit success/error return type for every tool handler.

Invariants:
    - Handlers return ToolResult, never raise for application-level failures
    - to_payload() always yields {"content": [{"type": "text", "text": ...}]}
      and adds "isError": True only for error results
    - Error text always starts with ERROR_MARKER
"""

from dataclasses import dataclass, field
from typing import Literal


ERROR_MARKER = "❌"


@dataclass(frozen=True)
class TextContent:
    """One text block of a tool response."""
    text: str
    type: Literal["text"] = "text"

    def to_payload(self) -> dict:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one tool call: content blocks plus the error flag."""
    content: tuple[TextContent, ...] = field(default_factory=tuple)
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(content=(TextContent(text),))

    @classmethod
    def error(cls, text: str) -> "ToolResult":
        return cls(content=(TextContent(text),), is_error=True)

    @property
    def text(self) -> str:
        """Concatenated text of all content blocks."""
        return "\n".join(block.text for block in self.content)

    def to_payload(self) -> dict:
        payload: dict = {"content": [block.to_payload() for block in self.content]}
        if self.is_error:
            payload["isError"] = True
        return payload
