"""Token Store Lifecycle — settings-driven open, schema creation, and shutdown."""

import logging

import pytest

from handshake_tokens.config import Settings
from handshake_tokens.core.domain_types import Namespace
from handshake_tokens.core.errors import EngineError, FailedToOpenError
from handshake_tokens.main import open_token_store, token_store_lifespan


def _settings(url: str, **overrides) -> Settings:
    return Settings(
        database_url=url, log_format="text", _env_file=None, **overrides,
    )


async def test_lifespan_yields_working_store_and_closes(database_url):
    settings = _settings(database_url, database_create_schema=True)
    handlers_before = list(logging.root.handlers)

    async with token_store_lifespan(settings) as store:
        token = await store.lookup_or_new(Namespace.AUTH, 1)
        assert await store.exists(Namespace.AUTH, token) is True

    assert not store.db.is_open
    assert logging.root.handlers == handlers_before


async def test_lifespan_closes_store_when_body_raises(database_url):
    settings = _settings(database_url, database_create_schema=True)
    with pytest.raises(RuntimeError):
        async with token_store_lifespan(settings) as store:
            raise RuntimeError("caller failed")
    assert not store.db.is_open


async def test_failed_startup_removes_log_handler(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'nope' / 'tokens.db'}"
    handlers_before = list(logging.root.handlers)

    for _ in range(2):
        with pytest.raises(FailedToOpenError):
            async with token_store_lifespan(_settings(url)):
                pass

    assert logging.root.handlers == handlers_before


async def test_open_token_store_without_schema_creation(database_url):
    store = await open_token_store(_settings(database_url))
    try:
        assert store.db.is_open
        with pytest.raises(EngineError):
            await store.lookup(Namespace.AUTH, 1)
    finally:
        await store.db.close()


async def test_open_token_store_unreachable_raises(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'nope' / 'tokens.db'}"
    with pytest.raises(FailedToOpenError):
        await open_token_store(_settings(url))
