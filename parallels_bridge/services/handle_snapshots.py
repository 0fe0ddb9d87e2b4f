"""Snapshot Handlers — listSnapshots, takeSnapshot, restoreSnapshot.

Invariants:
    - VM identifiers always sanitized; snapshot names/descriptions travel as
      single argv entries (no shell), so they are passed verbatim
    - restoreSnapshot passes braced-UUID snapshot ids unchanged and sanitizes names

Design Decisions:
    - "snapshot ... not found" failures get their own message pointing at
      listSnapshots, since that is the common user error
"""

from collections.abc import Mapping
from typing import Any

from parallels_bridge.core.errors import BridgeError, PrlctlExecutionError
from parallels_bridge.core.format_messages import (
    format_error,
    format_snapshot_list,
    format_success,
)
from parallels_bridge.core.parse_prlctl_output import parse_snapshot_list
from parallels_bridge.core.repository_protocols import CommandExecutor
from parallels_bridge.core.sanitize import is_braced_uuid
from parallels_bridge.core.tool_result import ToolResult
from parallels_bridge.schemas.tool_arguments import (
    ListSnapshotsArguments,
    RestoreSnapshotArguments,
    TakeSnapshotArguments,
    validate_arguments,
)
from parallels_bridge.services.handler_support import (
    raw_argument,
    require_identifier,
    tool_failure,
    tool_handler,
)


class SnapshotHandlers:
    """Snapshot tools (3 methods)."""

    def __init__(self, executor: CommandExecutor):
        self.executor = executor

    @tool_handler("listSnapshots", "Error listing snapshots")
    async def list_snapshots(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(ListSnapshotsArguments, arguments, "listSnapshots")
            output = await self.executor.execute(
                ["snapshot-list", require_identifier(args.vm_id)]
            )
        except BridgeError as e:
            return tool_failure(
                "listSnapshots", "Error listing snapshots", e,
                f"Failed to list snapshots for VM '{raw_argument(arguments, 'vmId')}'",
            )
        snapshots = parse_snapshot_list(output.stdout)
        return ToolResult.success(format_snapshot_list(args.vm_id, snapshots))

    @tool_handler("takeSnapshot", "Error creating snapshot")
    async def take_snapshot(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(TakeSnapshotArguments, arguments, "takeSnapshot")
            argv = ["snapshot", require_identifier(args.vm_id), "--name", args.name]
            if args.description:
                argv += ["--description", args.description]
            output = await self.executor.execute(argv)
        except BridgeError as e:
            return tool_failure(
                "takeSnapshot", "Error creating snapshot", e,
                f"Failed to create snapshot for VM '{raw_argument(arguments, 'vmId')}'",
            )
        message = f"Snapshot '{args.name}' created successfully for VM '{args.vm_id}'."
        if args.description:
            message += f"\n\n**Description**: {args.description}"
        return ToolResult.success(format_success(message, output.stdout))

    @tool_handler("restoreSnapshot", "Error restoring snapshot")
    async def restore_snapshot(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(RestoreSnapshotArguments, arguments, "restoreSnapshot")
            vm_id = require_identifier(args.vm_id)
            snapshot_id = (
                args.snapshot_id if is_braced_uuid(args.snapshot_id)
                else require_identifier(args.snapshot_id, "snapshotId")
            )
            output = await self.executor.execute(
                ["snapshot-switch", vm_id, "--id", snapshot_id]
            )
        except PrlctlExecutionError as e:
            if _is_snapshot_not_found(e):
                return ToolResult.error(format_error(
                    "Snapshot not found",
                    f"The specified snapshot '{raw_argument(arguments, 'snapshotId')}' "
                    f"was not found for VM '{raw_argument(arguments, 'vmId')}'.\n\n"
                    "Use the 'listSnapshots' tool to see available snapshots for this VM.",
                ))
            return tool_failure(
                "restoreSnapshot", "Error restoring snapshot", e,
                f"Failed to restore snapshot for VM '{raw_argument(arguments, 'vmId')}'",
            )
        except BridgeError as e:
            return tool_failure("restoreSnapshot", "Error restoring snapshot", e)
        return ToolResult.success(format_success(
            f"VM '{args.vm_id}' has been restored to snapshot '{args.snapshot_id}'.\n\n"
            "**Note**: The VM state has been reverted to the snapshot point. "
            "Any changes made after the snapshot was taken have been discarded.",
            output.stdout,
        ))


def _is_snapshot_not_found(error: PrlctlExecutionError) -> bool:
    text = error.message.lower()
    return "snapshot" in text and "not found" in text
