"""MCP stdio Server — exposes the tool dispatcher to agent clients over stdio.

Invariants:
    - list_tools advertises exactly the registered tools, in registration order
    - Tool-level failures travel as CallToolResult(isError=True)
    - Unknown tool names become a JSON-RPC METHOD_NOT_FOUND error, never content
    - Nothing but protocol frames is written to stdout; logs go to stderr

Design Decisions:
    - Low-level mcp.server.Server: the dispatcher already owns schemas and routing
    - CallToolRequest handler installed directly on request_handlers: the
      @call_tool() decorator turns every exception into an isError result,
      which would hide the unknown-tool protocol error
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from mcp import types
from mcp.server import Server
from mcp.shared.exceptions import McpError

from parallels_bridge import __version__
from parallels_bridge.config import get_settings
from parallels_bridge.core.errors import UnknownToolError
from parallels_bridge.core.tool_result import ToolResult
from parallels_bridge.infrastructure.observability import setup_logging
from parallels_bridge.infrastructure.prlctl_executor import PrlctlExecutor
from parallels_bridge.services.tool_dispatch import ToolDispatcher, build_dispatcher
from parallels_bridge.services.tools_registry import tool_definitions

logger = logging.getLogger(__name__)

SERVER_NAME = "parallels-bridge"


def list_tool_definitions(dispatcher: ToolDispatcher) -> list[types.Tool]:
    return [
        types.Tool(
            name=tool["name"],
            description=tool["description"],
            inputSchema=tool["input_schema"],
        )
        for tool in tool_definitions(dispatcher.list_registered())
    ]


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=block.text) for block in result.content],
        isError=result.is_error,
    )


async def call_tool(
    dispatcher: ToolDispatcher, name: str, arguments: Mapping[str, Any] | None,
) -> types.CallToolResult:
    """Dispatch one call; unknown names raise McpError(METHOD_NOT_FOUND)."""
    try:
        result = await dispatcher.dispatch(name, arguments or {})
    except UnknownToolError as e:
        raise McpError(types.ErrorData(
            code=types.METHOD_NOT_FOUND, message=e.message,
        )) from e
    return to_call_tool_result(result)


def create_server(dispatcher: ToolDispatcher) -> Server:
    server = Server(SERVER_NAME, version=__version__)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_tool_definitions(dispatcher)

    async def handle_call_tool(request: types.CallToolRequest) -> types.ServerResult:
        logger.info(
            f"call_tool name={request.params.name}",
            extra={"tool_name": request.params.name},
        )
        result = await call_tool(dispatcher, request.params.name, request.params.arguments)
        return types.ServerResult(result)

    server.request_handlers[types.CallToolRequest] = handle_call_tool
    return server


def main() -> None:
    """Console entry point: serve the tool dispatcher over stdio."""
    from mcp.server.stdio import stdio_server

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    executor = PrlctlExecutor(
        binary=settings.prlctl_binary,
        timeout_seconds=settings.prlctl_timeout_seconds,
        max_output_bytes=settings.prlctl_max_output_bytes,
    )
    server = create_server(build_dispatcher(
        executor,
        screenshot_dir=settings.screenshot_dir,
        boot_wait_seconds=settings.vm_boot_wait_seconds,
    ))

    async def run() -> None:
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )

    logger.info("parallels-bridge MCP server starting on stdio")
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")


if __name__ == "__main__":
    main()
