"""Tool Dispatch — explicit routing from tool name to handler coroutine.

Invariants:
    - Every name->handler mapping is visible in build_dispatcher: no getattr
      magic, no auto-discovery
    - Unknown names raise UnknownToolError; dispatch never converts it to content
    - Known names await the handler and return its ToolResult untouched;
      handler exceptions propagate unchanged. Registered handlers are wrapped
      by tool_handler, so in practice only UnknownToolError leaves dispatch
    - list_registered() reflects registration order; re-registering a name
      replaces the handler but keeps the name's original position

Design Decisions:
    - Explicit dict over getattr: every mapping visible in one place
    - Registration is meant for startup; after that the registry is only read,
      so no locking. This is a usage convention, not enforced.
    - Handlers split by area (lifecycle, snapshots, guest, batch, create):
      max ~4 methods per class
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any

from parallels_bridge.core.errors import UnknownToolError
from parallels_bridge.core.repository_protocols import CommandExecutor
from parallels_bridge.core.tool_result import ToolResult
from parallels_bridge.services.handle_batch import BatchHandlers
from parallels_bridge.services.handle_create_vm import CreateVmHandlers
from parallels_bridge.services.handle_guest import GuestHandlers
from parallels_bridge.services.handle_snapshots import SnapshotHandlers
from parallels_bridge.services.handle_vm_lifecycle import VmLifecycleHandlers

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Mapping[str, Any]], Awaitable[ToolResult]]


class ToolDispatcher:
    """Routes tool name -> handler. Explicit registration, no auto-discovery."""

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, name: str, handler: ToolHandler) -> None:
        if name in self._handlers:
            logger.info(f"Replacing handler for tool '{name}'", extra={"tool_name": name})
        self._handlers[name] = handler

    async def dispatch(
        self, name: str, arguments: Mapping[str, Any] | None = None,
    ) -> ToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            logger.warning(
                f"Unknown tool requested: {name}",
                extra={"tool_name": name, "error_code": "UNKNOWN_TOOL"},
            )
            raise UnknownToolError(name)
        return await handler(arguments or {})

    def list_registered(self) -> list[str]:
        return list(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers


def build_dispatcher(
    executor: CommandExecutor,
    *,
    screenshot_dir: str | None = None,
    ssh_dir: Path | None = None,
    boot_wait_seconds: float = 5.0,
) -> ToolDispatcher:
    """Wire every tool handler against one executor."""
    lifecycle = VmLifecycleHandlers(executor)
    snapshots = SnapshotHandlers(executor)
    guest = GuestHandlers(executor, screenshot_dir=screenshot_dir, ssh_dir=ssh_dir)
    create = CreateVmHandlers(executor, guest, boot_wait_seconds=boot_wait_seconds)
    batch = BatchHandlers(executor)

    # adding a tool requires editing this dict
    handlers: dict[str, ToolHandler] = {
        # VM lifecycle (5 tools)
        "listVMs": lifecycle.list_vms,
        "createVM": create.create_vm,
        "startVM": lifecycle.start_vm,
        "stopVM": lifecycle.stop_vm,
        "deleteVM": lifecycle.delete_vm,

        # Snapshots (3 tools)
        "listSnapshots": snapshots.list_snapshots,
        "takeSnapshot": snapshots.take_snapshot,
        "restoreSnapshot": snapshots.restore_snapshot,

        # Guest access (3 tools)
        "takeScreenshot": guest.take_screenshot,
        "createTerminalSession": guest.create_terminal_session,
        "manageSshAuth": guest.manage_ssh_auth,

        # Fan-out (1 tool)
        "batchOperation": batch.batch_operation,

        # Guest configuration (1 tool)
        "setHostname": guest.set_hostname,
    }

    dispatcher = ToolDispatcher()
    for name, handler in handlers.items():
        dispatcher.register(name, handler)
    return dispatcher
