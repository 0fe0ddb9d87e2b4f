"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SanitizedIdentifier is only ever produced by core.sanitize
    - VmRecord / SnapshotRecord are frozen: built per parse call, never mutated
    - All closed sets of states are Enums, never raw string matching

Design Decisions:
    - NewType over wrapper class for identifiers: zero runtime cost
    - str Enums: serialize to JSON and into argv without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SanitizedIdentifier = NewType("SanitizedIdentifier", str)


# ─── Enums ───────────────────────────────────────────────────────

class VmStatus(str, Enum):
    """VM power states reported by `prlctl list`."""
    RUNNING = "running"
    STOPPED = "stopped"
    SUSPENDED = "suspended"
    PAUSED = "paused"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: str) -> "VmStatus":
        """Map a raw status column to a member; anything unrecognised is UNKNOWN."""
        try:
            return cls(token.strip().lower())
        except ValueError:
            return cls.UNKNOWN


class BatchOperation(str, Enum):
    """Power operations accepted by batchOperation (each is a prlctl subcommand)."""
    START = "start"
    STOP = "stop"
    SUSPEND = "suspend"
    RESUME = "resume"
    RESTART = "restart"


class GuestOs(str, Enum):
    """OS types accepted by createVM (`prlctl create --ostype`)."""
    UBUNTU = "ubuntu"
    DEBIAN = "debian"
    WINDOWS_11 = "windows-11"
    MACOS = "macos"
    OTHER = "other"


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class VmRecord:
    """One row of `prlctl list --all`."""
    uuid: str
    status: VmStatus
    ip_address: str | None
    name: str

    def matches(self, identifier: str) -> bool:
        """True when identifier is this VM's name or UUID (UUID compared case-insensitively)."""
        return identifier == self.name or identifier.lower() == self.uuid.lower()


@dataclass(frozen=True)
class SnapshotRecord:
    """One row of `prlctl snapshot-list`."""
    id: str
    name: str
    date: str
    current: bool = False


@dataclass(frozen=True)
class ConfigStep:
    """One tracked step of a multi-command configuration (createVM, setHostname)."""
    name: str
    completed: bool
    error: str | None = None
    command: str | None = None
    method: str | None = None


@dataclass(frozen=True)
class BatchItemResult:
    """Outcome of one VM inside a batchOperation."""
    vm_id: str
    success: bool
    message: str
