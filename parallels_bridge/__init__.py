"""Parallels Bridge — agent tool calls routed to the prlctl controller.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""

__version__ = "1.0.0"
