"""Infrastructure Layer — subprocess execution, persistence, and logging.

Invariants:
    - Infrastructure never imports from services/
    - Every external failure mapped to a BridgeError subclass (core/errors.py)
"""
