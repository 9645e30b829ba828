"""Database Infrastructure — SQLAlchemy declarative Base.

Invariants:
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for SQLite (native async, no thread pool overhead)
"""
