"""prlctl Output Parsers — tabular controller text to typed records.

Invariants:
    - Pure: no IO, never raises for any str input
    - Malformed lines are dropped, never fatal; output order == source line order
    - A row is only recognised when its first column is a braced UUID
    - parse_snapshot_list returns at most one record with current=True

Design Decisions:
    - str.split over regex for `prlctl list`: columns are whitespace-delimited,
      and maxsplit=3 keeps multi-word names intact
    - Hand-rolled quote scanner for snapshot names: escaped quotes inside
      names are legal, and a scanner reports unterminated quotes as malformed
    - Multiple current markers resolve to the first one; later markers are
      ignored rather than reported
"""

from parallels_bridge.core.domain_types import SnapshotRecord, VmRecord, VmStatus
from parallels_bridge.core.sanitize import is_braced_uuid


NO_IP_PLACEHOLDER = "-"
CURRENT_SNAPSHOT_MARKER = "*"


# ─── prlctl list --all ───────────────────────────────────────────

def parse_vm_list(raw: str) -> list[VmRecord]:
    """Parse `prlctl list --all` output (header optional) into VmRecords."""
    records: list[VmRecord] = []
    for line in raw.splitlines():
        record = _parse_vm_line(line)
        if record is not None:
            records.append(record)
    return records


def _parse_vm_line(line: str) -> VmRecord | None:
    """UUID STATUS [IP_ADDR [NAME...]]; None when UUID or STATUS is missing."""
    fields = line.split(None, 3)
    if len(fields) < 2 or not is_braced_uuid(fields[0]):
        return None
    ip_token = fields[2] if len(fields) > 2 else NO_IP_PLACEHOLDER
    return VmRecord(
        uuid=fields[0],
        status=VmStatus.from_token(fields[1]),
        ip_address=None if ip_token == NO_IP_PLACEHOLDER else ip_token,
        name=fields[3].strip() if len(fields) > 3 else "",
    )


# ─── prlctl snapshot-list ────────────────────────────────────────

def parse_snapshot_list(raw: str) -> list[SnapshotRecord]:
    """Parse `{id} [*] "name" date` lines into SnapshotRecords.

    Only the first line carrying the current marker yields current=True.
    """
    records: list[SnapshotRecord] = []
    current_seen = False
    for line in raw.splitlines():
        parsed = _parse_snapshot_line(line)
        if parsed is None:
            continue
        snapshot_id, marked, name, date = parsed
        is_current = marked and not current_seen
        current_seen = current_seen or marked
        records.append(SnapshotRecord(
            id=snapshot_id, name=name, date=date, current=is_current,
        ))
    return records


def _parse_snapshot_line(line: str) -> tuple[str, bool, str, str] | None:
    parts = line.strip().split(None, 1)
    if len(parts) < 2 or not is_braced_uuid(parts[0]):
        return None
    snapshot_id, rest = parts

    marked = rest.startswith(CURRENT_SNAPSHOT_MARKER)
    if marked:
        rest = rest[len(CURRENT_SNAPSHOT_MARKER):].lstrip()

    quoted = _read_quoted(rest)
    if quoted is None:
        return None
    name, remainder = quoted

    date = remainder.strip()
    if not date or not remainder[0].isspace():
        return None
    return snapshot_id, marked, name, date


def _read_quoted(text: str) -> tuple[str, str] | None:
    """Read a double-quoted token with backslash escapes.

    Returns (unescaped content, text after the closing quote), or None
    when text does not start with a quote or the quote never closes.
    """
    if not text.startswith('"'):
        return None
    chars: list[str] = []
    i = 1
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text):
            chars.append(text[i + 1])
            i += 2
            continue
        if ch == '"':
            return "".join(chars), text[i + 1:]
        chars.append(ch)
        i += 1
    return None
