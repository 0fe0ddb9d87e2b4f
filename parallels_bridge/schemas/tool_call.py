"""Tool Call Schemas — request/response shapes of the HTTP tool-call surface.

Invariants:
    - Response mirrors the agent protocol: content blocks + optional isError
    - isError is omitted (None) for successful calls
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ToolCallRequest(BaseModel):
    """A structured request naming a tool and its arguments."""
    name: str = Field(min_length=1)
    arguments: dict[str, Any] = Field(default_factory=dict)


class TextContentBlock(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolCallResponse(BaseModel):
    content: list[TextContentBlock]
    isError: bool | None = None


class ToolDefinition(BaseModel):
    """Capability-discovery entry for one registered tool."""
    name: str
    description: str
    inputSchema: dict[str, Any]


class ToolListResponse(BaseModel):
    tools: list[ToolDefinition]


class ToolCallRecord(BaseModel):
    """One audit-log row."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tool_name: str
    tool_input: dict[str, Any] | None
    is_error: bool
    output_text: str
    created_at: datetime
