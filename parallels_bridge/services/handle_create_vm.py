"""createVM Handler — create or clone a VM, then apply optional configuration.

Invariants:
    - Name collision with an existing VM is rejected before any change is made
    - Create/clone is the only critical step: its failure is an error result
    - Every later step is recorded as a ConfigStep; failures degrade to a
      summary with manual recovery commands, never to an error result
    - A VM started only for configuration is stopped again afterwards

Design Decisions:
    - Hardware settings apply to fresh VMs only; clones keep the template's
    - Post-configuration reuses GuestHandlers.apply_hostname / configure_ssh
      instead of re-dispatching through the tool registry
"""

import asyncio
import getpass
import logging
from collections.abc import Mapping
from typing import Any

from parallels_bridge.core.domain_types import ConfigStep, SanitizedIdentifier, VmStatus
from parallels_bridge.core.errors import BridgeError, PrlctlExecutionError
from parallels_bridge.core.format_messages import format_create_vm_result, format_error
from parallels_bridge.core.guest_scripts import is_valid_username
from parallels_bridge.core.hostname import hostname_from_vm_name
from parallels_bridge.core.repository_protocols import CommandExecutor
from parallels_bridge.core.tool_result import ToolResult
from parallels_bridge.schemas.tool_arguments import CreateVmArguments, validate_arguments
from parallels_bridge.services.handle_guest import PERSISTENT_HOSTNAME_METHODS, GuestHandlers
from parallels_bridge.services.handler_support import (
    find_vm,
    list_vms,
    raw_argument,
    require_identifier,
    tool_failure,
    tool_handler,
)

logger = logging.getLogger(__name__)


class CreateVmHandlers:

    def __init__(
        self,
        executor: CommandExecutor,
        guest: GuestHandlers,
        boot_wait_seconds: float = 5.0,
    ):
        self.executor = executor
        self.guest = guest
        self.boot_wait_seconds = boot_wait_seconds

    @tool_handler("createVM", "Error creating VM")
    async def create_vm(self, arguments: Mapping[str, Any]) -> ToolResult:
        try:
            args = validate_arguments(CreateVmArguments, arguments, "createVM")
            name = require_identifier(args.name, "name")
            template = (
                require_identifier(args.from_template, "fromTemplate")
                if args.from_template else None
            )
            existing = await list_vms(self.executor)
        except BridgeError as e:
            return tool_failure(
                "createVM", "Error creating VM", e,
                f"Failed to create VM '{raw_argument(arguments, 'name')}'",
            )

        if any(vm.matches(args.name) or vm.matches(name) for vm in existing):
            return ToolResult.error(format_error(
                "Error creating VM", f"VM with name '{args.name}' already exists",
            ))

        if template:
            argv = ["clone", template, "--name", name]
            description = f"Cloning VM from template '{args.from_template}' as '{args.name}'"
        else:
            argv = ["create", name]
            if args.os:
                argv += ["--ostype", args.os.value]
            if args.distribution:
                argv += ["--distribution", args.distribution]
            description = f"Creating new VM '{args.name}'"
            if args.os:
                description += f" with OS type '{args.os.value}'"

        try:
            output = await self.executor.execute(argv)
        except PrlctlExecutionError as e:
            return tool_failure(
                "createVM", "Error creating VM", e, f"Failed to create VM '{args.name}'",
            )
        steps = [ConfigStep("VM Creation", completed=True)]
        logger.info(f"VM created: {name}", extra={"tool_name": "createVM"})

        hardware: list[str] = []
        if not template:
            hardware = await self._configure_hardware(name, args, steps)
        if args.set_hostname or args.create_user or args.enable_ssh_auth:
            await self._post_configure(name, args, steps)

        return ToolResult.success(format_create_vm_result(
            description, name, hardware, steps, output.stdout,
        ))

    async def _configure_hardware(
        self, name: SanitizedIdentifier, args: CreateVmArguments, steps: list[ConfigStep],
    ) -> list[str]:
        commands: list[tuple[list[str], str]] = []
        if args.memory:
            commands.append((["set", name, "--memsize", str(args.memory)], f"Memory: {args.memory}MB"))
        if args.cpus:
            commands.append((["set", name, "--cpus", str(args.cpus)], f"CPUs: {args.cpus}"))
        if args.disk_size:
            commands.append((
                ["set", name, "--device-set", "hdd0", "--size", f"{args.disk_size}G"],
                f"Disk: {args.disk_size}GB",
            ))
        if not commands:
            return []

        applied: list[str] = []
        errors: list[str] = []
        failed_commands: list[str] = []
        for argv, label in commands:
            try:
                await self.executor.execute(argv)
            except PrlctlExecutionError as e:
                errors.append(f"{label}: {e.message}")
                failed_commands.append("prlctl " + " ".join(argv))
            else:
                applied.append(label)
        steps.append(ConfigStep(
            "Hardware Configuration",
            completed=not errors,
            error="; ".join(errors) or None,
            command=" && ".join(failed_commands) or None,
        ))
        return applied

    async def _post_configure(
        self, name: SanitizedIdentifier, args: CreateVmArguments, steps: list[ConfigStep],
    ) -> None:
        try:
            vm = await find_vm(self.executor, name)
        except PrlctlExecutionError:
            vm = None
        was_running = vm is not None and vm.status is VmStatus.RUNNING

        if not was_running:
            try:
                await self.executor.execute(["start", name])
            except PrlctlExecutionError as e:
                steps.append(ConfigStep(
                    "VM Start for Configuration", completed=False,
                    error=f"{e.message} (hostname and user setup skipped)",
                    command=f"prlctl start {name}",
                ))
                return
            steps.append(ConfigStep("VM Start for Configuration", completed=True))
            if self.boot_wait_seconds > 0:
                await asyncio.sleep(self.boot_wait_seconds)

        if args.set_hostname:
            steps.append(await self._hostname_step(name, args.name))
        if args.create_user or args.enable_ssh_auth:
            steps.append(await self._ssh_step(name, create_user=args.create_user))

        if not was_running:
            try:
                await self.executor.execute(["stop", name])
            except PrlctlExecutionError as e:
                steps.append(ConfigStep(
                    "VM Stop after Configuration", completed=False,
                    error=e.message, command=f"prlctl stop {name} --kill",
                ))
            else:
                steps.append(ConfigStep("VM Stop after Configuration", completed=True))

    async def _hostname_step(self, name: SanitizedIdentifier, vm_name: str) -> ConfigStep:
        hostname = hostname_from_vm_name(vm_name)
        if hostname is None:
            return ConfigStep(
                "Hostname Configuration", completed=False,
                error=f"VM name '{vm_name}' cannot be converted to a valid hostname",
            )
        hostname_steps, current = await self.guest.apply_hostname(name, hostname)
        persisted = any(
            s.completed and s.method in PERSISTENT_HOSTNAME_METHODS for s in hostname_steps
        )
        if current == hostname or persisted:
            return ConfigStep("Hostname Configuration", completed=True)
        failures = "; ".join(s.error for s in hostname_steps if s.error)
        return ConfigStep(
            "Hostname Configuration", completed=False,
            error=failures or "Hostname setting failed",
            command=f"setHostname vmId={name} hostname={hostname}",
        )

    async def _ssh_step(self, name: SanitizedIdentifier, create_user: bool) -> ConfigStep:
        try:
            username = getpass.getuser()
        except (OSError, KeyError) as e:
            return ConfigStep(
                "User and SSH Configuration", completed=False,
                error=f"host username could not be determined: {e}",
            )
        if not is_valid_username(username):
            return ConfigStep(
                "User and SSH Configuration", completed=False,
                error=f"host username '{username}' is not a valid guest username",
            )
        recovery = f"manageSshAuth vmId={name} username={username} enablePasswordlessSudo=true"
        try:
            key_path = await self.guest.resolve_public_key(None)
            await self.guest.configure_ssh(
                name, username, key_path,
                passwordless_sudo=create_user, create_user=create_user,
            )
        except BridgeError as e:
            return ConfigStep(
                "User and SSH Configuration", completed=False,
                error=e.message, command=recovery,
            )
        return ConfigStep("User and SSH Configuration", completed=True)
