"""Tool Argument Schemas — one Pydantic model per tool, named constraints per field.

Invariants:
    - Wire names are the camelCase protocol names (vmId, snapshotId, ...);
      Python attributes are snake_case via aliases
    - validate_arguments returns the typed model or raises ToolValidationError
      listing every violated field; it never returns partial data
    - Unknown extra arguments are ignored, not rejected

Design Decisions:
    - Models double as the source of each tool's JSON input_schema
      (model_json_schema(by_alias=True)), so schema and validation cannot drift
    - Shape rules that need more than a bound (RFC 1123 hostnames, POSIX
      usernames) live in core/ and are called from field validators
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from parallels_bridge.core.domain_types import BatchOperation, GuestOs
from parallels_bridge.core.errors import ErrorContext, FieldViolation, ToolValidationError
from parallels_bridge.core.guest_scripts import is_valid_username
from parallels_bridge.core.hostname import hostname_violation


class ToolArguments(BaseModel):
    """Base for all tool argument models."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class VmTargetArguments(ToolArguments):
    vm_id: str = Field(alias="vmId", min_length=1, description="VM ID or name")


# ─── VM lifecycle ────────────────────────────────────────────────

class ListVmsArguments(ToolArguments):
    pass


class StartVmArguments(VmTargetArguments):
    pass


class StopVmArguments(VmTargetArguments):
    force: bool = Field(default=False, description="Force stop (kill) the VM")


class DeleteVmArguments(VmTargetArguments):
    confirm: bool = Field(default=False, description="Confirm deletion")


class CreateVmArguments(ToolArguments):
    name: str = Field(min_length=1, max_length=100, description="VM name")
    from_template: str | None = Field(
        default=None, alias="fromTemplate",
        description="Template VM to clone from (optional)",
    )
    os: GuestOs | None = Field(default=None, description="OS type (optional)")
    distribution: str | None = Field(default=None, description="OS distribution (optional)")
    memory: int | None = Field(default=None, ge=512, le=32768, description="Memory in MB (optional)")
    cpus: int | None = Field(default=None, ge=1, le=16, description="Number of CPUs (optional)")
    disk_size: int | None = Field(
        default=None, alias="diskSize", ge=8, le=2048,
        description="Disk size in GB (optional)",
    )
    set_hostname: bool = Field(
        default=True, alias="setHostname",
        description="Set hostname inside VM to match VM name (default: true)",
    )
    create_user: bool = Field(
        default=False, alias="createUser",
        description="Create a user matching the host username with passwordless sudo (default: false)",
    )
    enable_ssh_auth: bool = Field(
        default=False, alias="enableSshAuth",
        description="Setup SSH authentication for passwordless access (default: false)",
    )


class BatchOperationArguments(ToolArguments):
    target_vms: list[str] = Field(
        alias="targetVMs", min_length=1, description="List of VM IDs or names",
    )
    operation: BatchOperation = Field(description="Operation to apply")
    force: bool = Field(default=False, description="Force the operation")


# ─── Snapshots ───────────────────────────────────────────────────

class ListSnapshotsArguments(VmTargetArguments):
    pass


class TakeSnapshotArguments(VmTargetArguments):
    name: str = Field(min_length=1, max_length=100, description="Snapshot name")
    description: str | None = Field(default=None, description="Snapshot description (optional)")


class RestoreSnapshotArguments(VmTargetArguments):
    snapshot_id: str = Field(alias="snapshotId", min_length=1, description="Snapshot ID or name")


# ─── Guest access ────────────────────────────────────────────────

class TakeScreenshotArguments(VmTargetArguments):
    output_path: str | None = Field(
        default=None, alias="outputPath", description="Output file path (optional)",
    )


class CreateTerminalSessionArguments(VmTargetArguments):
    user: str | None = Field(default=None, description="Username (optional)")


class ManageSshAuthArguments(VmTargetArguments):
    username: str = Field(min_length=1, description="Username to configure")
    public_key_path: str | None = Field(
        default=None, alias="publicKeyPath", description="Path to public key (optional)",
    )
    enable_passwordless_sudo: bool = Field(
        default=False, alias="enablePasswordlessSudo", description="Enable passwordless sudo",
    )

    @field_validator("username")
    @classmethod
    def _posix_username(cls, value: str) -> str:
        if not is_valid_username(value):
            raise ValueError(
                "username must be lowercase letters, digits, '_' or '-', "
                "start with a letter or '_', and be at most 32 characters"
            )
        return value


class SetHostnameArguments(VmTargetArguments):
    hostname: str = Field(description="Hostname to set (RFC 1123 compliant)")

    @field_validator("hostname")
    @classmethod
    def _rfc1123(cls, value: str) -> str:
        violation = hostname_violation(value)
        if violation:
            raise ValueError(violation)
        return value


# ─── Validation step ─────────────────────────────────────────────

ArgumentsT = TypeVar("ArgumentsT", bound=ToolArguments)


def validate_arguments(
    model: type[ArgumentsT],
    arguments: Mapping[str, Any] | None,
    tool_name: str | None = None,
) -> ArgumentsT:
    """Evaluate every constraint of `model` against raw tool arguments."""
    try:
        return model.model_validate(dict(arguments or {}))
    except ValidationError as exc:
        violations = [_to_violation(error) for error in exc.errors()]
        raise ToolValidationError(
            violations, context=ErrorContext(tool_name=tool_name),
        ) from exc


def _to_violation(error: Mapping[str, Any]) -> FieldViolation:
    field = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
    return FieldViolation(field=field, message=str(error.get("msg", "invalid value")))


def input_schema(model: type[ToolArguments]) -> dict:
    """JSON Schema advertised for a tool (protocol field names)."""
    return model.model_json_schema(by_alias=True)
