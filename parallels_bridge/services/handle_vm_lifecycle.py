"""VM Lifecycle Handlers — listVMs, startVM, stopVM, deleteVM.

Invariants:
    - Every VM identifier is sanitized before it reaches argv
    - deleteVM never touches prlctl without confirm=true
    - Application-level failures come back as error ToolResults, never raised
"""

from collections.abc import Mapping
from typing import Any

from parallels_bridge.core.errors import BridgeError
from parallels_bridge.core.format_messages import (
    format_delete_confirmation,
    format_success,
    format_vm_list,
)
from parallels_bridge.core.repository_protocols import CommandExecutor
from parallels_bridge.core.tool_result import ToolResult
from parallels_bridge.schemas.tool_arguments import (
    DeleteVmArguments,
    ListVmsArguments,
    StartVmArguments,
    StopVmArguments,
    validate_arguments,
)
from parallels_bridge.services.handler_support import (
    list_vms,
    raw_argument,
    require_identifier,
    tool_failure,
    tool_handler,
)


class VmLifecycleHandlers:
    """Power and inventory tools (4 methods)."""

    def __init__(self, executor: CommandExecutor):
        self.executor = executor

    @tool_handler("listVMs", "Error listing VMs")
    async def list_vms(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            validate_arguments(ListVmsArguments, arguments, "listVMs")
            vms = await list_vms(self.executor)
        except BridgeError as e:
            return tool_failure("listVMs", "Error listing VMs", e)
        return ToolResult.success(format_vm_list(vms))

    @tool_handler("startVM", "Error starting VM")
    async def start_vm(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(StartVmArguments, arguments, "startVM")
            vm_id = require_identifier(args.vm_id)
            output = await self.executor.execute(["start", vm_id])
        except BridgeError as e:
            return tool_failure(
                "startVM", "Error starting VM", e,
                f"Failed to start VM '{raw_argument(arguments, 'vmId')}'",
            )
        return ToolResult.success(
            format_success(f"VM '{args.vm_id}' started successfully.", output.stdout)
        )

    @tool_handler("stopVM", "Error stopping VM")
    async def stop_vm(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(StopVmArguments, arguments, "stopVM")
            argv = ["stop", require_identifier(args.vm_id)]
            if args.force:
                argv.append("--kill")
            output = await self.executor.execute(argv)
        except BridgeError as e:
            return tool_failure(
                "stopVM", "Error stopping VM", e,
                f"Failed to stop VM '{raw_argument(arguments, 'vmId')}'",
            )
        action = "force stopped" if args.force else "stopped"
        return ToolResult.success(
            format_success(f"VM '{args.vm_id}' {action} successfully.", output.stdout)
        )

    @tool_handler("deleteVM", "Error deleting VM")
    async def delete_vm(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(DeleteVmArguments, arguments, "deleteVM")
            vm_id = require_identifier(args.vm_id)
            if not args.confirm:
                return ToolResult.success(format_delete_confirmation(args.vm_id))
            output = await self.executor.execute(["delete", vm_id])
        except BridgeError as e:
            return tool_failure(
                "deleteVM", "Error deleting VM", e,
                f"Failed to delete VM '{raw_argument(arguments, 'vmId')}'",
            )
        return ToolResult.success(
            format_success(f"VM '{args.vm_id}' has been permanently deleted.", output.stdout)
        )
