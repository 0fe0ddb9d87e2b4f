"""Tool Call Log — audit recording of completed tool calls.

Invariants:
    - record() never raises: a failed audit write is logged, the tool call still succeeds
    - recent() returns newest first

Design Decisions:
    - Commit per call: HTTP tool calls are independent requests with no
      surrounding unit of work to batch into
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parallels_bridge.core.errors import DatabaseError
from parallels_bridge.core.tool_result import ToolResult
from parallels_bridge.models.tool_call import ToolCall

logger = logging.getLogger(__name__)


class ToolCallLog:
    """Writes and reads ToolCall rows on one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record(
        self, tool_name: str, tool_input: Mapping[str, Any], result: ToolResult,
    ) -> None:
        try:
            self.db.add(ToolCall(
                tool_name=tool_name,
                tool_input=dict(tool_input),
                is_error=result.is_error,
                output_text=result.text,
            ))
            await self.db.commit()
        except (SQLAlchemyError, DatabaseError) as e:
            await self.db.rollback()
            logger.warning(
                f"Failed to log tool call '{tool_name}': {e}",
                extra={"tool_name": tool_name, "error_code": "DATABASE_ERROR"},
            )

    async def recent(self, limit: int = 50) -> list[ToolCall]:
        rows = await self.db.execute(
            select(ToolCall).order_by(ToolCall.created_at.desc()).limit(limit)
        )
        return list(rows.scalars().all())
