"""Hostname Rules — RFC 1123 validation and VM-name → hostname derivation.

Invariants:
    - hostname_violation returns None for valid hostnames, else a human message
    - hostname_from_vm_name output is either None or passes hostname_violation
"""

MAX_HOSTNAME_LENGTH = 253
MAX_LABEL_LENGTH = 63

_LABEL_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-")


def hostname_violation(hostname: str) -> str | None:
    """Check RFC 1123 shape; return the first violated rule or None."""
    if not hostname:
        return "Hostname cannot be empty"
    if len(hostname) > MAX_HOSTNAME_LENGTH:
        return f"Hostname cannot exceed {MAX_HOSTNAME_LENGTH} characters"
    for label in hostname.split("."):
        if not label:
            return "Hostname cannot contain empty labels"
        if len(label) > MAX_LABEL_LENGTH:
            return f"Hostname labels cannot exceed {MAX_LABEL_LENGTH} characters"
        if any(ch not in _LABEL_CHARS for ch in label):
            return (
                "Hostname must follow RFC 1123 format "
                "(letters, numbers, hyphens only)"
            )
        if label.startswith("-") or label.endswith("-") or "--" in label:
            return (
                "Hostname labels cannot start/end with hyphens "
                "or contain consecutive hyphens"
            )
    return None


def hostname_from_vm_name(vm_name: str) -> str | None:
    """Derive a single-label hostname from a display name, or None if nothing usable remains."""
    chars: list[str] = []
    for ch in vm_name.lower():
        if ch in _LABEL_CHARS and ch != "-":
            chars.append(ch)
        elif chars and chars[-1] != "-":
            chars.append("-")
    label = "".join(chars)[:MAX_LABEL_LENGTH].strip("-")
    return label or None
