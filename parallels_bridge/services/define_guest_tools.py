"""Guest Tool Schemas — takeScreenshot, createTerminalSession, manageSshAuth, setHostname.

Invariants:
    - createTerminalSession is documented as instructions-only (no process spawned)
    - setHostname advertises the RFC 1123 constraint enforced by its argument model
"""

from parallels_bridge.schemas.tool_arguments import (
    CreateTerminalSessionArguments,
    ManageSshAuthArguments,
    SetHostnameArguments,
    TakeScreenshotArguments,
    input_schema,
)

TOOLS_GUEST = [
    {
        "name": "takeScreenshot",
        "description": "Capture a screenshot of a running VM",
        "input_schema": input_schema(TakeScreenshotArguments),
    },
    {
        "name": "createTerminalSession",
        "description": "Get instructions to open a terminal session to a VM",
        "input_schema": input_schema(CreateTerminalSessionArguments),
    },
    {
        "name": "manageSshAuth",
        "description": "Configure SSH authentication for passwordless access",
        "input_schema": input_schema(ManageSshAuthArguments),
    },
    {
        "name": "setHostname",
        "description": (
            "Set the hostname inside a VM to match the VM name or a custom value"
        ),
        "input_schema": input_schema(SetHostnameArguments),
    },
]
