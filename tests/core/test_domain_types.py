"""Domain Types — enums and records shared across the bridge.

Tests:
    - VmStatus.from_token is case/whitespace tolerant and total
    - BatchOperation values are prlctl subcommands
    - Records are frozen
"""

import dataclasses

import pytest

from parallels_bridge.core.domain_types import (
    BatchOperation,
    GuestOs,
    SnapshotRecord,
    VmStatus,
)


def test_vm_status_from_token():
    assert VmStatus.from_token(" Running ") is VmStatus.RUNNING
    assert VmStatus.from_token("STOPPED") is VmStatus.STOPPED
    assert VmStatus.from_token("") is VmStatus.UNKNOWN
    assert VmStatus.from_token("resuming") is VmStatus.UNKNOWN


def test_batch_operations_are_prlctl_subcommands():
    assert [op.value for op in BatchOperation] == [
        "start", "stop", "suspend", "resume", "restart",
    ]


def test_guest_os_values():
    assert GuestOs("windows-11") is GuestOs.WINDOWS_11
    assert {member.value for member in GuestOs} == {"ubuntu", "debian", "windows-11", "macos", "other"}


def test_records_are_frozen():
    snapshot = SnapshotRecord(id="{x}", name="n", date="d")
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.name = "other"
