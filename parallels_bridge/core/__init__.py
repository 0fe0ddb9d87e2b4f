"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Sanitizer, parsers and formatters are pure and deterministic

Design Decisions:
    - Functional core separated from the subprocess shell: everything that
      touches untrusted input or controller output is testable without prlctl
"""
