"""Pydantic Schemas — tool argument models and HTTP request/response shapes.

Invariants:
    - Tool argument models are the single source of per-tool input schemas
    - HTTP schemas mirror the agent tool-call protocol field names
"""
