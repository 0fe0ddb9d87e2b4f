"""Tool Routes — capability discovery, tool invocation, and the audit trail.

Invariants:
    - POST /call returns the protocol payload: content blocks plus isError only on failure
    - Unknown tool names propagate as UnknownToolError → 404 envelope (error_handlers)
    - Audit recording never changes the response of a tool call
"""

import logging

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from parallels_bridge.config import Settings, get_settings
from parallels_bridge.infrastructure.database import get_db
from parallels_bridge.schemas.tool_call import (
    ToolCallRecord,
    ToolCallRequest,
    ToolCallResponse,
    ToolDefinition,
    ToolListResponse,
)
from parallels_bridge.services.tool_call_log import ToolCallLog
from parallels_bridge.services.tool_dispatch import ToolDispatcher
from parallels_bridge.services.tools_registry import tool_definitions

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


def get_dispatcher(request: Request) -> ToolDispatcher:
    """FastAPI dependency: the dispatcher installed by the lifespan."""
    return request.app.state.dispatcher


@router.get("", response_model=ToolListResponse)
async def list_tools(dispatcher: ToolDispatcher = Depends(get_dispatcher)):
    return ToolListResponse(tools=[
        ToolDefinition(
            name=tool["name"],
            description=tool["description"],
            inputSchema=tool["input_schema"],
        )
        for tool in tool_definitions(dispatcher.list_registered())
    ])


@router.post(
    "/call", response_model=ToolCallResponse, response_model_exclude_none=True,
)
async def call_tool(
    body: ToolCallRequest,
    dispatcher: ToolDispatcher = Depends(get_dispatcher),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    result = await dispatcher.dispatch(body.name, body.arguments)
    logger.info(
        f"Tool call completed: {body.name}",
        extra={"tool_name": body.name, "error_code": "TOOL_ERROR" if result.is_error else None},
    )
    if settings.audit_tool_calls:
        await ToolCallLog(db).record(body.name, body.arguments, result)
    return result.to_payload()


@router.get("/calls", response_model=list[ToolCallRecord])
async def recent_tool_calls(
    limit: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    return await ToolCallLog(db).recent(limit)
