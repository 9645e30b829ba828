"""Root conftest — shared test configuration and database fixtures.

Invariants:
    - Every test gets a fresh SQLite file database under tmp_path
    - The database fixture is opened with schema created, and closed after the test

Design Decisions:
    - File database over :memory: so pooled connections share one store
      (concurrent lookup_or_new tests need real, separate connections)
"""

import os

import pytest

# Ensure tests never reach a real server by accident
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")

from handshake_tokens.infrastructure.database import Database  # noqa: E402
from handshake_tokens.services.token_store import TokenStore  # noqa: E402


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'tokens.db'}"


@pytest.fixture
async def database(database_url):
    db = Database(database_url)
    await db.open()
    await db.create_schema()
    yield db
    await db.close()


@pytest.fixture
def store(database):
    return TokenStore(database)
