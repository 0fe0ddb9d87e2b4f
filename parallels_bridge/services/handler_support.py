"""Handler Support — shared lookups and failure rendering for tool handlers.

Invariants:
    - require_identifier never returns an empty identifier
    - tool_failure is the only place a BridgeError becomes an error ToolResult
    - A method wrapped by tool_handler never raises Exception: anything that
      escapes its own BridgeError handling comes back as INTERNAL_ERROR content
"""

import functools
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from parallels_bridge.core.domain_types import SanitizedIdentifier, VmRecord
from parallels_bridge.core.errors import (
    BridgeError,
    FieldViolation,
    InternalToolError,
    ToolValidationError,
)
from parallels_bridge.core.format_messages import format_error
from parallels_bridge.core.parse_prlctl_output import parse_vm_list
from parallels_bridge.core.repository_protocols import CommandExecutor
from parallels_bridge.core.sanitize import sanitize_identifier
from parallels_bridge.core.tool_result import ToolResult

logger = logging.getLogger(__name__)


def require_identifier(value: str, field: str = "vmId") -> SanitizedIdentifier:
    """Sanitize value; reject it when nothing usable survives."""
    sanitized = sanitize_identifier(value)
    if not sanitized:
        raise ToolValidationError([FieldViolation(
            field, "must contain at least one letter, digit, '-', '_', '{' or '}'",
        )])
    return sanitized


async def list_vms(executor: CommandExecutor) -> list[VmRecord]:
    output = await executor.execute(["list", "--all"])
    return parse_vm_list(output.stdout)


async def find_vm(executor: CommandExecutor, *identifiers: str) -> VmRecord | None:
    """First VM whose name or UUID equals any of identifiers."""
    for vm in await list_vms(executor):
        if any(vm.matches(identifier) for identifier in identifiers):
            return vm
    return None


def tool_failure(
    tool_name: str,
    title: str,
    error: BridgeError,
    subject: str | None = None,
    hint: str | None = None,
) -> ToolResult:
    """Render a handler-level failure as an error result and log it."""
    logger.warning(
        f"{tool_name} failed: {error.message}",
        extra={"tool_name": tool_name, "error_code": error.code},
    )
    if isinstance(error, ToolValidationError):
        return ToolResult.error(format_error("Invalid arguments", error.message))
    message = f"{subject}: {error.message}" if subject else error.message
    if hint:
        message += f"\n\n{hint}"
    return ToolResult.error(format_error(title, message))


def raw_argument(arguments: Mapping[str, Any] | None, key: str) -> Any:
    """The caller's argument as sent, for failure messages."""
    return (arguments or {}).get(key)


ToolMethod = Callable[[Any, Mapping[str, Any]], Awaitable[ToolResult]]


def tool_handler(tool_name: str, title: str) -> Callable[[ToolMethod], ToolMethod]:
    """Wrap a handler method so an unexpected exception renders as an error result."""
    def decorate(method: ToolMethod) -> ToolMethod:
        @functools.wraps(method)
        async def guarded(self, arguments: Mapping[str, Any]) -> ToolResult:
            try:
                return await method(self, arguments)
            except Exception as e:
                logger.error(
                    f"{tool_name} raised {type(e).__name__}: {e}",
                    exc_info=e,
                    extra={"tool_name": tool_name, "error_code": "INTERNAL_ERROR"},
                )
                return tool_failure(tool_name, title, InternalToolError(tool_name, e))
        return guarded
    return decorate
