"""ToolCall ORM — audit table for tool invocations made through the HTTP surface.

Invariants:
    - One row per completed tool call (success or error result)
    - Rows are append-only: nothing updates or deletes them

Design Decisions:
    - Logging table, not enforcement: no tool behaviour depends on it
    - JSON column for input: flexible schema for varied tool signatures
    - Generic Uuid type: works on SQLite and PostgreSQL alike
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from parallels_bridge.db.base import Base


class ToolCall(Base):
    """ToolCall log entry."""
    __tablename__ = "tool_calls"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    tool_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    tool_input: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    is_error: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    output_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
