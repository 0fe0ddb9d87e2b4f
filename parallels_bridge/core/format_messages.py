"""Response Formatting — pure markdown renderers for tool results.

Invariants:
    - All functions are pure (no IO, no async, no subprocess)
    - Error text always begins with ERROR_MARKER followed by a bold title
    - Raw controller output is fenced, never interpreted as markdown

Design Decisions:
    - Display strings echo the caller's original identifier, while argv
      always carries the sanitized one
"""

from parallels_bridge.core.domain_types import (
    BatchItemResult,
    ConfigStep,
    SnapshotRecord,
    VmRecord,
)
from parallels_bridge.core.tool_result import ERROR_MARKER


SUCCESS_MARKER = "✅"
WARNING_MARKER = "⚠️"


def format_error(title: str, message: str) -> str:
    return f"{ERROR_MARKER} **{title}**\n\n{message}"


def format_success(message: str, output: str | None = None) -> str:
    text = f"{SUCCESS_MARKER} **Success**\n\n{message}"
    if output is not None:
        text += f"\n\n**Output:**\n```\n{output.rstrip()}\n```"
    return text


def format_vm_list(vms: list[VmRecord]) -> str:
    lines = ["## Virtual Machines", ""]
    if not vms:
        lines.append("No virtual machines found.")
        return "\n".join(lines) + "\n"
    lines += [f"Found {len(vms)} virtual machine(s):", ""]
    for index, vm in enumerate(vms, start=1):
        lines.append(f"### {index}. {vm.name or vm.uuid}")
        lines.append(f"- **UUID**: {vm.uuid}")
        lines.append(f"- **Status**: {vm.status.value}")
        if vm.ip_address:
            lines.append(f"- **IP Address**: {vm.ip_address}")
        lines.append("")
    return "\n".join(lines)


def format_snapshot_list(vm_id: str, snapshots: list[SnapshotRecord]) -> str:
    lines = [f"## Snapshots for VM '{vm_id}'", ""]
    if not snapshots:
        lines.append("No snapshots found for this VM.")
        return "\n".join(lines) + "\n"
    lines += [f"Found {len(snapshots)} snapshot(s):", ""]
    for index, snapshot in enumerate(snapshots, start=1):
        heading = f"### {index}. {snapshot.name}"
        if snapshot.current:
            heading += " ⭐ (Current)"
        lines.append(heading)
        lines.append(f"- **ID**: {snapshot.id}")
        lines.append(f"- **Date**: {snapshot.date}")
        lines.append("")
    return "\n".join(lines)


def format_delete_confirmation(vm_id: str) -> str:
    return (
        f"{WARNING_MARKER} **Confirmation Required**\n\n"
        f"To delete VM '{vm_id}', please set the 'confirm' parameter to true.\n\n"
        "**Warning**: This action is irreversible and will permanently "
        "delete the VM and all its data."
    )


def format_config_summary(steps: list[ConfigStep], include_commands: bool = False) -> str:
    """Completed vs failed steps, optionally with manual recovery commands."""
    if not steps:
        return ""
    completed = [s for s in steps if s.completed]
    failed = [s for s in steps if not s.completed]
    parts = [f"**Configuration Summary:** {len(completed)}/{len(steps)} steps completed\n"]

    if completed:
        parts.append("**✅ Completed Steps:**")
        parts += [f"- {_step_label(s)}" for s in completed]
        parts.append("")

    if failed:
        parts.append(f"**{WARNING_MARKER} Failed/Skipped Steps:**")
        parts += [
            f"- {_step_label(s)}: {s.error}" if s.error else f"- {_step_label(s)}"
            for s in failed
        ]
        parts.append("")
        with_commands = [s for s in failed if s.command]
        if include_commands and with_commands:
            parts.append("**🛠️ Manual Steps for Failed Items:**")
            parts += [f"- {s.name}: `{s.command}`" for s in with_commands]
            parts.append("")

    return "\n".join(parts)


def _step_label(step: ConfigStep) -> str:
    return f"{step.name} ({step.method})" if step.method else step.name


def format_batch_results(
    operation: str, force: bool, target_count: int, results: list[BatchItemResult],
) -> str:
    succeeded = sum(1 for r in results if r.success)
    lines = [
        "## Batch Operation Results",
        "",
        f"**Operation**: {operation}{' (forced)' if force else ''}",
        f"**Target VMs**: {target_count}",
        f"**Successful**: {succeeded}",
        f"**Failed**: {len(results) - succeeded}",
        "",
        "### Details:",
        "",
    ]
    for result in results:
        marker = SUCCESS_MARKER if result.success else ERROR_MARKER
        lines.append(f"{marker} **{result.vm_id}**: {result.message}")
    return "\n".join(lines) + "\n"


def format_terminal_instructions(vm_id: str, enter_command: str, user: str | None) -> str:
    text = (
        "## Terminal Session Instructions\n\n"
        f"To open an interactive terminal session to VM '{vm_id}', "
        "run the following command in your terminal:\n\n"
        f"```bash\n{enter_command}\n```\n\n"
    )
    if not user:
        text += (
            "**Note**: This will connect as the default user. To connect as a "
            "specific user, add the `--user` parameter.\n\n"
        )
    text += (
        "### Alternative SSH Connection\n\n"
        "If the VM has SSH enabled and you know its IP address, "
        "you can also connect via SSH:\n\n"
        "```bash\n"
        "# First, get the VM's IP address\n"
        "prlctl list --all\n\n"
        "# Then connect via SSH\n"
        f"ssh {user or 'username'}@<vm-ip-address>\n"
        "```\n\n"
        "**Tip**: Use the `manageSshAuth` tool to set up passwordless SSH "
        "access with your public key."
    )
    return text


def format_ssh_success(
    vm_id: str, username: str, key_path: str, passwordless_sudo: bool, vm_ip: str | None,
) -> str:
    lines = [
        f"{SUCCESS_MARKER} **Success**",
        "",
        f"SSH authentication configured for user '{username}' on VM '{vm_id}'.",
        "",
        "**Configuration applied:**",
        "- SSH host keys generated/verified",
        "- SSH service enabled and started",
        f"- Public key from '{key_path}' added to authorized_keys",
    ]
    if passwordless_sudo:
        lines.append(f"- Passwordless sudo enabled for {username}")
    lines += [
        "",
        "**To connect:**",
        f"```bash\nssh {username}@{vm_ip or 'VM_IP_ADDRESS'}\n```",
    ]
    if vm_ip is None:
        lines += ["", "**Note**: Run `prlctl list --all` to find the VM's IP address."]
    return "\n".join(lines)


def format_hostname_failure(
    vm_id: str, hostname: str, message: str, steps: list[ConfigStep],
) -> str:
    text = format_error(
        "Hostname Configuration Failed",
        f"VM: {vm_id}\nTarget Hostname: {hostname}\nError: {message}\n",
    )
    summary = format_config_summary(steps, include_commands=True)
    if summary:
        text += "\n" + summary
    text += (
        "\n**🛠️ Recovery Options:**\n"
        f"- Make sure the VM is running: `prlctl start \"{vm_id}\"`\n"
        f"- Set manually: `prlctl exec \"{vm_id}\" \"sudo hostnamectl set-hostname {hostname}\"`\n"
    )
    return text


def format_hostname_result(
    vm_id: str, hostname: str, current: str | None, steps: list[ConfigStep],
) -> str:
    """Success or partial-success report for setHostname."""
    verified = current == hostname
    marker, status = (SUCCESS_MARKER, "Success") if verified else (WARNING_MARKER, "Partial Success")
    text = (
        f"{marker} **{status}**\n\n"
        f"Hostname configuration completed for VM '{vm_id}'.\n\n"
        f"**Target hostname**: {hostname}\n"
        f"**Current hostname**: {current or 'Unable to determine'}\n\n"
    )
    text += format_config_summary(steps, include_commands=not verified)
    if not verified:
        text += (
            "\n**Note**: Hostname configuration partially succeeded. The persistent "
            "hostname was written and should apply after a reboot.\n"
        )
    text += (
        "\n**📝 Recommendations:**\n"
        "- Restart the VM to ensure all services pick up the new hostname\n"
    )
    if "." in hostname:
        text += "- For FQDN hostnames, ensure DNS is properly configured\n"
    return text


def format_create_vm_result(
    description: str, vm_name: str, hardware: list[str], steps: list[ConfigStep], output: str,
) -> str:
    lines = [
        f"{SUCCESS_MARKER} **Success**",
        "",
        description,
        "",
        "**VM Created:**",
        f"- Name: {vm_name}",
    ]
    lines += [f"- {item}" for item in hardware]
    text = "\n".join(lines) + "\n"
    if len(steps) > 1:
        text += "\n" + format_config_summary(steps, include_commands=True)
    text += (
        "\n**📋 VM Management:**\n"
        f"- Start VM: `prlctl start {vm_name}`\n"
        f"- Stop VM: `prlctl stop {vm_name}`\n"
        f"- VM Info: `prlctl list -i {vm_name}`\n"
        f"\n**Output:**\n```\n{output.rstrip()}\n```"
    )
    return text
