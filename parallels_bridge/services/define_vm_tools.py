"""VM Tool Schemas — listVMs, createVM, startVM, stopVM, deleteVM, batchOperation.

Invariants:
    - input_schema is generated from the argument model the handler validates with
    - deleteVM is advertised as requiring confirmation
"""

from parallels_bridge.schemas.tool_arguments import (
    BatchOperationArguments,
    CreateVmArguments,
    DeleteVmArguments,
    ListVmsArguments,
    StartVmArguments,
    StopVmArguments,
    input_schema,
)

TOOLS_VM = [
    {
        "name": "listVMs",
        "description": "List all available Parallels virtual machines",
        "input_schema": input_schema(ListVmsArguments),
    },
    {
        "name": "createVM",
        "description": (
            "Create a new VM from scratch or clone from template "
            "with integrated hostname and user configuration"
        ),
        "input_schema": input_schema(CreateVmArguments),
    },
    {
        "name": "startVM",
        "description": "Start a specified VM",
        "input_schema": input_schema(StartVmArguments),
    },
    {
        "name": "stopVM",
        "description": "Stop a specified VM",
        "input_schema": input_schema(StopVmArguments),
    },
    {
        "name": "deleteVM",
        "description": "Delete a specified VM (requires confirmation)",
        "input_schema": input_schema(DeleteVmArguments),
    },
    {
        "name": "batchOperation",
        "description": "Apply an operation to multiple VMs",
        "input_schema": input_schema(BatchOperationArguments),
    },
]
