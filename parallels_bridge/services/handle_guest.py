"""Guest Access Handlers — takeScreenshot, createTerminalSession, manageSshAuth, setHostname.

Invariants:
    - Guest commands run only via ["exec", sanitized_id, script]; scripts are
      built by core/guest_scripts with every value shlex-quoted
    - createTerminalSession never spawns a process; it renders instructions
    - setHostname refuses to touch a VM that is not running
    - apply_hostname / configure_ssh are reused by createVM's post-configuration
    - Host filesystem calls (mkdir, exists, key reads) run in asyncio.to_thread

Design Decisions:
    - hostnamectl first; /etc/hostname + runtime `hostname` only as fallback
    - setHostname is an error only when no persistent method succeeded;
      a written-but-unverified hostname is reported as partial success
"""

import asyncio
import logging
import shlex
import tempfile
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from parallels_bridge.core.domain_types import ConfigStep, SanitizedIdentifier, VmStatus
from parallels_bridge.core.errors import (
    BridgeError,
    FieldViolation,
    PrlctlExecutionError,
    ResourceNotFoundError,
    ToolValidationError,
)
from parallels_bridge.core.format_messages import (
    format_hostname_failure,
    format_hostname_result,
    format_ssh_success,
    format_success,
    format_terminal_instructions,
)
from parallels_bridge.core.guest_scripts import (
    VERIFY_HOSTNAME_COMMAND,
    build_ssh_setup_script,
    first_ipv4,
    hostname_file_command,
    hostnamectl_command,
    hosts_file_command,
    runtime_hostname_command,
)
from parallels_bridge.core.repository_protocols import CommandExecutor
from parallels_bridge.core.tool_result import ToolResult
from parallels_bridge.schemas.tool_arguments import (
    CreateTerminalSessionArguments,
    ManageSshAuthArguments,
    SetHostnameArguments,
    TakeScreenshotArguments,
    validate_arguments,
)
from parallels_bridge.services.handler_support import (
    find_vm,
    raw_argument,
    require_identifier,
    tool_failure,
    tool_handler,
)

logger = logging.getLogger(__name__)

DEFAULT_PUBLIC_KEYS = ("id_rsa.pub", "id_ed25519.pub", "id_ecdsa.pub")
PERSISTENT_HOSTNAME_METHODS = frozenset({"hostnamectl", "/etc/hostname"})


class GuestHandlers:
    """Tools that reach inside a VM or describe how to (4 methods)."""

    def __init__(
        self,
        executor: CommandExecutor,
        screenshot_dir: str | None = None,
        ssh_dir: Path | None = None,
    ):
        self.executor = executor
        self.screenshot_dir = Path(screenshot_dir) if screenshot_dir else Path(tempfile.gettempdir())
        self.ssh_dir = ssh_dir or Path.home() / ".ssh"

    # ─── takeScreenshot ──────────────────────────────────────────

    @tool_handler("takeScreenshot", "Error capturing screenshot")
    async def take_screenshot(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(TakeScreenshotArguments, arguments, "takeScreenshot")
            vm_id = require_identifier(args.vm_id)
            path = (
                _expand_path(args.output_path, "outputPath") if args.output_path
                else self.default_screenshot_path(vm_id)
            )
            await asyncio.to_thread(_ensure_directory, path.parent)
            output = await self.executor.execute(["capture", vm_id, "--file", str(path)])
            if not await asyncio.to_thread(path.exists):
                raise PrlctlExecutionError("Screenshot file was not created successfully")
        except BridgeError as e:
            return tool_failure(
                "takeScreenshot", "Error capturing screenshot", e,
                f"Failed to capture screenshot for VM '{raw_argument(arguments, 'vmId')}'",
                hint="**Note**: Make sure the VM is running and Parallels Tools are installed.",
            )
        return ToolResult.success(format_success(
            f"Screenshot captured for VM '{args.vm_id}'.\n\n**Saved to**: {path}",
            output.stdout,
        ))

    def default_screenshot_path(self, vm_id: SanitizedIdentifier) -> Path:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        return self.screenshot_dir / f"parallels-{vm_id}-{timestamp}.png"

    # ─── createTerminalSession ───────────────────────────────────

    @tool_handler("createTerminalSession", "Error creating terminal session")
    async def create_terminal_session(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(
                CreateTerminalSessionArguments, arguments, "createTerminalSession",
            )
            argv = ["prlctl", "enter", require_identifier(args.vm_id)]
        except BridgeError as e:
            return tool_failure("createTerminalSession", "Error creating terminal session", e)
        if args.user:
            argv += ["--user", args.user]
        return ToolResult.success(
            format_terminal_instructions(args.vm_id, shlex.join(argv), args.user)
        )

    # ─── manageSshAuth ───────────────────────────────────────────

    @tool_handler("manageSshAuth", "Error configuring SSH authentication")
    async def manage_ssh_auth(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(ManageSshAuthArguments, arguments, "manageSshAuth")
            vm_id = require_identifier(args.vm_id)
            key_path = await self.resolve_public_key(args.public_key_path)
            vm_ip = await self.configure_ssh(
                vm_id, args.username, key_path,
                passwordless_sudo=args.enable_passwordless_sudo,
            )
        except BridgeError as e:
            return tool_failure(
                "manageSshAuth", "Error configuring SSH authentication", e,
                f"Failed to configure SSH for VM '{raw_argument(arguments, 'vmId')}'",
            )
        return ToolResult.success(format_ssh_success(
            args.vm_id, args.username, str(key_path), args.enable_passwordless_sudo, vm_ip,
        ))

    async def resolve_public_key(self, explicit_path: str | None) -> Path:
        """Explicit path, else the first default key present in ssh_dir."""
        if explicit_path:
            path = _expand_path(explicit_path, "publicKeyPath")
            if not await asyncio.to_thread(path.is_file):
                raise ResourceNotFoundError("SSH public key", str(path))
            return path
        for name in DEFAULT_PUBLIC_KEYS:
            candidate = self.ssh_dir / name
            if await asyncio.to_thread(candidate.is_file):
                return candidate
        raise ResourceNotFoundError(
            "SSH public key",
            ", ".join(str(self.ssh_dir / name) for name in DEFAULT_PUBLIC_KEYS),
        )

    async def configure_ssh(
        self,
        vm_id: SanitizedIdentifier,
        username: str,
        key_path: Path,
        *,
        passwordless_sudo: bool = False,
        create_user: bool = False,
    ) -> str | None:
        """Install the key inside the guest; returns the guest's IPv4 when reported."""
        try:
            public_key = (
                await asyncio.to_thread(key_path.read_text, encoding="utf-8")
            ).strip()
        except (OSError, ValueError) as e:
            raise ResourceNotFoundError("SSH public key", str(key_path)) from e
        if not public_key:
            raise ToolValidationError([
                FieldViolation("publicKeyPath", f"public key file '{key_path}' is empty"),
            ])
        script = build_ssh_setup_script(
            username, public_key,
            passwordless_sudo=passwordless_sudo, create_user=create_user,
        )
        output = await self.executor.execute(["exec", vm_id, script])
        return first_ipv4(output.stdout)

    # ─── setHostname ─────────────────────────────────────────────

    @tool_handler("setHostname", "Hostname Configuration Failed")
    async def set_hostname(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(SetHostnameArguments, arguments, "setHostname")
            vm_id = require_identifier(args.vm_id)
            vm = await find_vm(self.executor, args.vm_id, vm_id)
        except BridgeError as e:
            return tool_failure(
                "setHostname", "Hostname Configuration Failed", e,
                f"VM '{raw_argument(arguments, 'vmId')}'",
            )

        if vm is None:
            problem = f"VM '{args.vm_id}' not found"
        elif vm.status is not VmStatus.RUNNING:
            problem = f"VM '{args.vm_id}' is not running (status: {vm.status.value})"
        else:
            problem = None
        if problem:
            logger.info(problem, extra={"tool_name": "setHostname"})
            return ToolResult.error(format_hostname_failure(
                args.vm_id, args.hostname, problem,
                [ConfigStep("VM Status Check", completed=False, error=problem)],
            ))

        steps, current = await self.apply_hostname(vm_id, args.hostname)
        steps = [ConfigStep("VM Status Check", completed=True), *steps]
        persisted = any(
            s.completed and s.method in PERSISTENT_HOSTNAME_METHODS for s in steps
        )
        if current != args.hostname and not persisted:
            return ToolResult.error(format_hostname_failure(
                args.vm_id, args.hostname,
                "Critical hostname configuration methods failed", steps,
            ))
        return ToolResult.success(
            format_hostname_result(args.vm_id, args.hostname, current, steps)
        )

    async def apply_hostname(
        self, vm_id: SanitizedIdentifier, hostname: str,
    ) -> tuple[list[ConfigStep], str | None]:
        """Run the hostname steps in order; returns (steps, hostname reported by the guest)."""
        steps: list[ConfigStep] = []
        persisted = await self._exec_step(
            steps, vm_id, "Hostnamectl Configuration", "hostnamectl",
            hostnamectl_command(hostname),
        )
        if not persisted:
            await self._exec_step(
                steps, vm_id, "/etc/hostname Configuration", "/etc/hostname",
                hostname_file_command(hostname),
            )
            await self._exec_step(
                steps, vm_id, "Runtime Hostname Configuration", "hostname command",
                runtime_hostname_command(hostname),
            )
        await self._exec_step(
            steps, vm_id, "/etc/hosts Configuration", "/etc/hosts",
            hosts_file_command(hostname),
        )

        current: str | None = None
        try:
            output = await self.executor.execute(["exec", vm_id, VERIFY_HOSTNAME_COMMAND])
        except PrlctlExecutionError as e:
            steps.append(ConfigStep(
                "Hostname Verification", completed=False,
                error=f"Verification failed: {e.message}", method="verification",
            ))
        else:
            reported = output.stdout.strip().splitlines()
            current = reported[-1].strip() if reported else None
            steps.append(ConfigStep("Hostname Verification", completed=True, method="verification"))
        return steps, current

    async def _exec_step(
        self,
        steps: list[ConfigStep],
        vm_id: SanitizedIdentifier,
        name: str,
        method: str,
        command: str,
    ) -> bool:
        try:
            await self.executor.execute(["exec", vm_id, command])
        except PrlctlExecutionError as e:
            steps.append(ConfigStep(
                name, completed=False, error=e.message, command=command, method=method,
            ))
            return False
        steps.append(ConfigStep(name, completed=True, command=command, method=method))
        return True


def _expand_path(raw: str, field: str) -> Path:
    """Path with ~ and ~user expanded; an unknown user is a bad argument."""
    try:
        return Path(raw).expanduser()
    except RuntimeError as e:
        raise ToolValidationError([
            FieldViolation(field, f"cannot expand '{raw}': {e}"),
        ]) from e


def _ensure_directory(directory: Path) -> None:
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except (OSError, ValueError) as e:
        raise ToolValidationError([
            FieldViolation("outputPath", f"cannot create directory '{directory}': {e}"),
        ]) from e
