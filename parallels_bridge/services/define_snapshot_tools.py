"""Snapshot Tool Schemas — listSnapshots, takeSnapshot, restoreSnapshot."""

from parallels_bridge.schemas.tool_arguments import (
    ListSnapshotsArguments,
    RestoreSnapshotArguments,
    TakeSnapshotArguments,
    input_schema,
)

TOOLS_SNAPSHOT = [
    {
        "name": "listSnapshots",
        "description": "List all snapshots for a VM",
        "input_schema": input_schema(ListSnapshotsArguments),
    },
    {
        "name": "takeSnapshot",
        "description": "Create a snapshot of a VM",
        "input_schema": input_schema(TakeSnapshotArguments),
    },
    {
        "name": "restoreSnapshot",
        "description": "Restore a VM to a specified snapshot",
        "input_schema": input_schema(RestoreSnapshotArguments),
    },
]
