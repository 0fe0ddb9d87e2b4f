"""Services Layer — tool handlers, tool definitions, dispatch, and audit logging.

Invariants:
    - Handlers split by area (max ~4 methods each)
    - Tool dispatch uses explicit dict mapping (no auto-discovery)
"""
