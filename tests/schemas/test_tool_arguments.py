"""Tool Argument Schemas — constraint evaluation and advertised JSON schemas.

Tests:
    - camelCase wire names populate snake_case attributes
    - Missing / out-of-range fields become ToolValidationError naming each field
    - Extra arguments ignored
    - Username and hostname shape rules enforced by field validators
    - input_schema advertises protocol names and required fields
"""

import pytest

from parallels_bridge.core.domain_types import BatchOperation, GuestOs
from parallels_bridge.core.errors import ToolValidationError
from parallels_bridge.schemas.tool_arguments import (
    BatchOperationArguments,
    CreateVmArguments,
    ManageSshAuthArguments,
    RestoreSnapshotArguments,
    SetHostnameArguments,
    StopVmArguments,
    input_schema,
    validate_arguments,
)


def test_aliases_populate_fields():
    args = validate_arguments(RestoreSnapshotArguments, {"vmId": "dev", "snapshotId": "{abc}"})
    assert args.vm_id == "dev"
    assert args.snapshot_id == "{abc}"


def test_defaults_and_extra_arguments():
    args = validate_arguments(StopVmArguments, {"vmId": "dev", "unexpected": 1})
    assert args.force is False
    assert not hasattr(args, "unexpected")


def test_missing_required_field_is_named():
    with pytest.raises(ToolValidationError) as exc:
        validate_arguments(StopVmArguments, {}, tool_name="stopVM")
    assert exc.value.fields == ["vmId"]
    assert exc.value.context.tool_name == "stopVM"


def test_none_arguments_treated_as_empty():
    with pytest.raises(ToolValidationError):
        validate_arguments(StopVmArguments, None)


def test_create_vm_bounds_report_every_violation():
    with pytest.raises(ToolValidationError) as exc:
        validate_arguments(CreateVmArguments, {
            "name": "dev", "memory": 256, "cpus": 32, "diskSize": 4,
        })
    assert sorted(exc.value.fields) == ["cpus", "diskSize", "memory"]


def test_create_vm_accepts_full_arguments():
    args = validate_arguments(CreateVmArguments, {
        "name": "dev",
        "os": "windows-11",
        "memory": 4096,
        "cpus": 4,
        "diskSize": 64,
        "setHostname": False,
        "enableSshAuth": True,
    })
    assert args.os is GuestOs.WINDOWS_11
    assert args.disk_size == 64
    assert args.set_hostname is False
    assert args.enable_ssh_auth is True
    assert args.create_user is False


def test_create_vm_rejects_unknown_os():
    with pytest.raises(ToolValidationError) as exc:
        validate_arguments(CreateVmArguments, {"name": "dev", "os": "beos"})
    assert exc.value.fields == ["os"]


def test_batch_operation_requires_targets_and_known_operation():
    with pytest.raises(ToolValidationError) as exc:
        validate_arguments(BatchOperationArguments, {"targetVMs": [], "operation": "explode"})
    assert sorted(exc.value.fields) == ["operation", "targetVMs"]

    args = validate_arguments(
        BatchOperationArguments, {"targetVMs": ["a", "b"], "operation": "restart"},
    )
    assert args.operation is BatchOperation.RESTART


@pytest.mark.parametrize("username", ["Root", "1abc", "a;b", "x" * 33])
def test_ssh_username_shape(username):
    with pytest.raises(ToolValidationError) as exc:
        validate_arguments(ManageSshAuthArguments, {"vmId": "dev", "username": username})
    assert exc.value.fields == ["username"]


def test_hostname_rule_message_surfaces():
    with pytest.raises(ToolValidationError) as exc:
        validate_arguments(SetHostnameArguments, {"vmId": "dev", "hostname": "-bad"})
    assert exc.value.fields == ["hostname"]
    assert "hyphens" in exc.value.message


def test_input_schema_uses_protocol_names():
    schema = input_schema(RestoreSnapshotArguments)
    assert schema["type"] == "object"
    assert set(schema["properties"]) == {"vmId", "snapshotId"}
    assert sorted(schema["required"]) == ["snapshotId", "vmId"]


def test_create_vm_schema_bounds():
    properties = input_schema(CreateVmArguments)["properties"]
    assert "diskSize" in properties
    assert input_schema(CreateVmArguments)["required"] == ["name"]
