"""Batch Handler — one power operation fanned out over many VMs.

Invariants:
    - Targets run concurrently (asyncio.gather); results keep target order
    - One target's failure never aborts the others, whatever it raises
    - isError only when every target failed
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from parallels_bridge.core.domain_types import BatchItemResult, BatchOperation
from parallels_bridge.core.errors import BridgeError
from parallels_bridge.core.format_messages import format_batch_results
from parallels_bridge.core.repository_protocols import CommandExecutor
from parallels_bridge.core.tool_result import TextContent, ToolResult
from parallels_bridge.schemas.tool_arguments import (
    BatchOperationArguments,
    validate_arguments,
)
from parallels_bridge.services.handler_support import (
    require_identifier,
    tool_failure,
    tool_handler,
)

logger = logging.getLogger(__name__)


class BatchHandlers:

    def __init__(self, executor: CommandExecutor):
        self.executor = executor

    @tool_handler("batchOperation", "Error executing batch operation")
    async def batch_operation(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(BatchOperationArguments, arguments, "batchOperation")
        except BridgeError as e:
            return tool_failure("batchOperation", "Error executing batch operation", e)

        results = await asyncio.gather(*(
            self._run_one(vm_id, args.operation, args.force) for vm_id in args.target_vms
        ))
        text = format_batch_results(
            args.operation.value, args.force, len(args.target_vms), list(results),
        )
        all_failed = not any(r.success for r in results)
        return ToolResult(content=(TextContent(text),), is_error=all_failed)

    async def _run_one(
        self, vm_id: str, operation: BatchOperation, force: bool,
    ) -> BatchItemResult:
        try:
            argv = [operation.value, require_identifier(vm_id, "targetVMs")]
            if operation is BatchOperation.STOP and force:
                argv.append("--kill")
            await self.executor.execute(argv)
        except BridgeError as e:
            return BatchItemResult(vm_id=vm_id, success=False, message=e.message)
        except Exception as e:
            logger.error(
                f"batchOperation target {vm_id} raised {type(e).__name__}: {e}",
                exc_info=e,
                extra={"tool_name": "batchOperation", "error_code": "INTERNAL_ERROR"},
            )
            return BatchItemResult(
                vm_id=vm_id, success=False, message=f"Unexpected error: {e}",
            )
        return BatchItemResult(
            vm_id=vm_id, success=True, message=f"{operation.value} completed successfully",
        )
