"""Declarative Base — metadata root for the audit tables.

Invariants:
    - Every ORM model inherits from Base
    - create_all() on Base.metadata only sees models imported via parallels_bridge.models
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
