"""prlctl Executor — async subprocess wrapper with timeout, output cap, and error mapping.

Invariants:
    - argv is passed as a list to create_subprocess_exec; no shell is ever involved
    - Non-zero exit → PrlctlExecutionError carrying exit code, stdout and stderr
    - Missing binary, spawn failure or unencodable argv → PrlctlExecutionError (exit_code None)
    - Timeout → process killed and reaped, then CommandTimeoutError
    - stdout/stderr truncated to max_output_bytes each

Design Decisions:
    - One subprocess per call, no pooling: prlctl is a short-lived CLI
    - Every invocation logged with argv, exit_code and duration_ms
"""

import asyncio
import logging
import time

from parallels_bridge.core.errors import (
    CommandTimeoutError,
    ErrorContext,
    PrlctlExecutionError,
)
from parallels_bridge.core.repository_protocols import PrlctlOutput

logger = logging.getLogger(__name__)


class PrlctlExecutor:
    """Executes `prlctl <argv...>` and returns its captured output."""

    def __init__(
        self,
        binary: str = "prlctl",
        timeout_seconds: float = 120.0,
        max_output_bytes: int = 10 * 1024 * 1024,
    ):
        self.binary = binary
        self.timeout_seconds = timeout_seconds
        self.max_output_bytes = max_output_bytes

    async def execute(self, argv: list[str]) -> PrlctlOutput:
        command = [self.binary, *argv]
        context = ErrorContext(argv=list(argv))
        started = time.monotonic()

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            logger.error(
                f"prlctl binary not found: {self.binary}",
                extra={"argv": argv, "error_code": "PRLCTL_NOT_FOUND"},
            )
            raise PrlctlExecutionError(
                f"prlctl command failed: {self.binary} not found ({e})",
                code="PRLCTL_NOT_FOUND", context=context,
            ) from e
        except OSError as e:
            logger.error(
                f"prlctl could not be started: {e}",
                extra={"argv": argv, "error_code": "PRLCTL_SPAWN_FAILED"},
            )
            raise PrlctlExecutionError(
                f"prlctl command failed: {e}",
                code="PRLCTL_SPAWN_FAILED", context=context,
            ) from e
        except ValueError as e:
            # embedded NUL in an argument; exec never sees it
            logger.error(
                f"prlctl argv rejected: {e}",
                extra={"argv": argv, "error_code": "PRLCTL_INVALID_ARGUMENT"},
            )
            raise PrlctlExecutionError(
                f"prlctl command failed: invalid argument ({e})",
                code="PRLCTL_INVALID_ARGUMENT", context=context,
            ) from e

        try:
            raw_stdout, raw_stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            logger.warning(
                f"prlctl timed out after {self.timeout_seconds:g}s",
                extra={
                    "argv": argv,
                    "error_code": "PRLCTL_TIMEOUT",
                    "duration_ms": self._elapsed_ms(started),
                },
            )
            raise CommandTimeoutError(self.timeout_seconds, context=context)

        stdout = self._decode(raw_stdout)
        stderr = self._decode(raw_stderr)
        exit_code = process.returncode
        log_extra = {
            "argv": argv,
            "exit_code": exit_code,
            "duration_ms": self._elapsed_ms(started),
        }

        if exit_code != 0:
            logger.warning("prlctl exited non-zero", extra=log_extra)
            raise PrlctlExecutionError(
                f"prlctl command failed: exit status {exit_code}\n"
                f"stdout: {stdout}\n"
                f"stderr: {stderr}",
                exit_code=exit_code, stdout=stdout, stderr=stderr,
                context=context,
            )

        logger.debug("prlctl completed", extra=log_extra)
        return PrlctlOutput(stdout=stdout, stderr=stderr)

    def _decode(self, data: bytes | None) -> str:
        return (data or b"")[: self.max_output_bytes].decode("utf-8", errors="replace")

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.monotonic() - started) * 1000)
