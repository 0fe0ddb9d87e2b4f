"""Boundary Protocols — contracts between core/services and the shell.

Invariants:
    - Handlers only ever see CommandExecutor, never asyncio subprocess APIs
    - Implementations provided by the shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: the controller invocation is the only suspension point
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class PrlctlOutput:
    """Captured text of one successful controller invocation."""
    stdout: str
    stderr: str = ""


class CommandExecutor(Protocol):
    """Runs one controller invocation; raises PrlctlExecutionError on failure."""
    async def execute(self, argv: list[str]) -> PrlctlOutput: ...

