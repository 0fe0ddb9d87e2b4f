"""Response Formatting — markdown renderers for tool results.

Tests:
    - Error text starts with the error marker and a bold title
    - VM and snapshot lists: empty and populated, current marker, IP omission
    - Config summary counts and manual commands only when requested
    - Batch results tally successes and failures
    - Hostname result distinguishes verified from partial success
    - createVM result lists hardware and management commands
"""

from parallels_bridge.core.domain_types import (
    BatchItemResult,
    ConfigStep,
    SnapshotRecord,
    VmRecord,
    VmStatus,
)
from parallels_bridge.core.format_messages import (
    format_batch_results,
    format_config_summary,
    format_create_vm_result,
    format_delete_confirmation,
    format_error,
    format_hostname_result,
    format_snapshot_list,
    format_success,
    format_terminal_instructions,
    format_vm_list,
)
from parallels_bridge.core.tool_result import ERROR_MARKER

UUID = "{11111111-2222-3333-4444-555555555555}"


def test_format_error_shape():
    assert format_error("Boom", "details") == f"{ERROR_MARKER} **Boom**\n\ndetails"


def test_format_success_fences_output():
    text = format_success("Done.", "line one\n")
    assert text.startswith("✅ **Success**\n\nDone.")
    assert text.endswith("**Output:**\n```\nline one\n```")


def test_format_success_without_output():
    assert "Output" not in format_success("Done.")


def test_empty_vm_list():
    assert "No virtual machines found." in format_vm_list([])


def test_vm_list_entries():
    vms = [
        VmRecord(uuid=UUID, status=VmStatus.RUNNING, ip_address="10.0.0.5", name="dev"),
        VmRecord(uuid=UUID, status=VmStatus.STOPPED, ip_address=None, name="build"),
    ]
    text = format_vm_list(vms)
    assert "Found 2 virtual machine(s):" in text
    assert "### 1. dev" in text
    assert "- **Status**: running" in text
    assert "- **IP Address**: 10.0.0.5" in text
    assert text.count("IP Address") == 1


def test_snapshot_list_marks_current():
    snapshots = [
        SnapshotRecord(id=UUID, name="base", date="2024-01-01"),
        SnapshotRecord(id=UUID, name="latest", date="2024-02-01", current=True),
    ]
    text = format_snapshot_list("dev", snapshots)
    assert "## Snapshots for VM 'dev'" in text
    assert "### 2. latest ⭐ (Current)" in text
    assert "### 1. base\n" in text


def test_empty_snapshot_list():
    assert "No snapshots found for this VM." in format_snapshot_list("dev", [])


def test_delete_confirmation_mentions_confirm():
    text = format_delete_confirmation("dev")
    assert "Confirmation Required" in text
    assert "'confirm' parameter" in text


def test_config_summary_counts_and_commands():
    steps = [
        ConfigStep("Set hostname", True, method="hostnamectl"),
        ConfigStep("Update /etc/hosts", False, error="permission denied", command="sudo sed ..."),
    ]
    text = format_config_summary(steps, include_commands=True)
    assert "1/2 steps completed" in text
    assert "- Set hostname (hostnamectl)" in text
    assert "- Update /etc/hosts: permission denied" in text
    assert "`sudo sed ...`" in text
    assert "Manual Steps" not in format_config_summary(steps)


def test_config_summary_empty():
    assert format_config_summary([]) == ""


def test_batch_results():
    results = [
        BatchItemResult("a", True, "Operation completed successfully"),
        BatchItemResult("b", False, "prlctl command failed"),
    ]
    text = format_batch_results("stop", True, 2, results)
    assert "**Operation**: stop (forced)" in text
    assert "**Successful**: 1" in text
    assert "**Failed**: 1" in text
    assert f"{ERROR_MARKER} **b**: prlctl command failed" in text


def test_terminal_instructions_default_user_note():
    text = format_terminal_instructions("dev", "prlctl enter dev", None)
    assert "```bash\nprlctl enter dev\n```" in text
    assert "default user" in text
    assert "ssh username@" in text
    assert "default user" not in format_terminal_instructions("dev", "x", "alice")


def test_hostname_result_verified():
    steps = [ConfigStep("Set hostname", True, method="hostnamectl")]
    text = format_hostname_result("dev", "box", "box", steps)
    assert text.startswith("✅ **Success**")
    assert "**Current hostname**: box" in text
    assert "FQDN" not in text


def test_hostname_result_partial():
    steps = [ConfigStep("Set hostname", True, method="/etc/hostname")]
    text = format_hostname_result("dev", "box.example.com", None, steps)
    assert text.startswith("⚠️ **Partial Success**")
    assert "Unable to determine" in text
    assert "FQDN" in text


def test_create_vm_result():
    steps = [
        ConfigStep("Create VM", True),
        ConfigStep("Set hostname", False, error="VM not running"),
    ]
    text = format_create_vm_result(
        "Created new VM 'dev'", "dev", ["Memory: 2048MB", "CPUs: 2"], steps, "ok\n",
    )
    assert "- Name: dev" in text
    assert "- Memory: 2048MB" in text
    assert "1/2 steps completed" in text
    assert "`prlctl start dev`" in text
    assert text.endswith("```\nok\n```")


def test_create_vm_result_single_step_has_no_summary():
    text = format_create_vm_result("Created", "dev", [], [ConfigStep("Create VM", True)], "")
    assert "Configuration Summary" not in text
