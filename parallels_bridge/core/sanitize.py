"""Identifier Sanitizer — converts any string into a shell-safe prlctl identifier.

Invariants:
    - sanitize_identifier is total: never raises, for any str input
    - Output contains only [A-Za-z0-9-_{}]; everything else is removed, never escaped
    - Idempotent: sanitize_identifier(sanitize_identifier(x)) == sanitize_identifier(x)
    - Linear time in input length (single pass, no regex backtracking)

Design Decisions:
    - Allowlist over denylist: unknown metacharacters are dropped by default
    - Braces and hyphens allowed everywhere, so braced UUIDs pass unchanged
      without a UUID-specific branch
    - ASCII-only allowlist: str.isalnum() would admit non-ASCII digits/letters
"""

import string

from parallels_bridge.core.domain_types import SanitizedIdentifier


ALLOWED_CHARACTERS: frozenset[str] = frozenset(
    string.ascii_letters + string.digits + "-_{}"
)

_HEX_DIGITS = frozenset(string.hexdigits)
_UUID_GROUP_LENGTHS = (8, 4, 4, 4, 12)


def sanitize_identifier(value: str) -> SanitizedIdentifier:
    """Strip every character outside the allowlist.

    >>> sanitize_identifier("Test-VM_123;rm -rf /")
    'Test-VM_123rm-rf'
    """
    return SanitizedIdentifier(
        "".join(ch for ch in value if ch in ALLOWED_CHARACTERS)
    )


def is_braced_uuid(token: str) -> bool:
    """True for the Parallels identifier shape `{8-4-4-4-12}` (hex, any case)."""
    if len(token) < 2 or token[0] != "{" or token[-1] != "}":
        return False
    groups = token[1:-1].split("-")
    if tuple(len(g) for g in groups) != _UUID_GROUP_LENGTHS:
        return False
    return all(ch in _HEX_DIGITS for group in groups for ch in group)
