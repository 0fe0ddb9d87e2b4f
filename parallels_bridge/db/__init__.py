"""Database Infrastructure — SQLAlchemy declarative Base for the audit log.

Invariants:
    - Single async engine per process (initialized via init_db)
    - All sessions are async (AsyncSession)

Design Decisions:
    - aiosqlite driver by default: the bridge runs on a developer's Mac next to
      Parallels Desktop, no database server required
"""
