"""Tools Registry — flat list of every advertised tool definition.

Invariants:
    - Every definition has name, description and input_schema
    - tool_definitions() follows the dispatcher's registration order and only
      lists names that are actually registered

Design Decisions:
    - Explicit imports from each define_*_tools.py: no auto-discovery
"""

from parallels_bridge.services.define_guest_tools import TOOLS_GUEST
from parallels_bridge.services.define_snapshot_tools import TOOLS_SNAPSHOT
from parallels_bridge.services.define_vm_tools import TOOLS_VM


ALL_TOOLS: list[dict] = [
    *TOOLS_VM,          # 6 tools
    *TOOLS_SNAPSHOT,    # 3 tools
    *TOOLS_GUEST,       # 4 tools
]

TOOLS_BY_NAME: dict[str, dict] = {tool["name"]: tool for tool in ALL_TOOLS}


def tool_definitions(registered: list[str]) -> list[dict]:
    """Definitions for the registered names, in registration order."""
    return [TOOLS_BY_NAME[name] for name in registered if name in TOOLS_BY_NAME]
