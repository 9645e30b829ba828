"""Token Store Lifecycle — wires settings, logging, and the database into a TokenStore.

Invariants:
    - The root log handler installed at startup is removed on exit and on failed startup
    - The Database is opened before the TokenStore is handed out and closed on exit
    - Schema creation only when settings.database_create_schema is set

Design Decisions:
    - Async context manager over manual open/close: cleanup runs even when the
      caller's block raises
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from handshake_tokens.config import Settings, get_settings
from handshake_tokens.infrastructure.database import Database
from handshake_tokens.infrastructure.observability import setup_logging
from handshake_tokens.services.token_store import TokenStore

logger = logging.getLogger(__name__)


async def open_token_store(settings: Settings | None = None) -> TokenStore:
    """Open a Database from settings and return a TokenStore on it."""
    settings = settings or get_settings()
    db = Database(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    await db.open()
    if settings.database_create_schema:
        try:
            await db.create_schema()
        except Exception:
            await db.close()
            raise
    return TokenStore(db)


@asynccontextmanager
async def token_store_lifespan(
    settings: Settings | None = None,
) -> AsyncGenerator[TokenStore, None]:
    """Startup/shutdown lifecycle."""
    settings = settings or get_settings()
    handler = setup_logging(settings.log_level, settings.log_format)
    try:
        store = await open_token_store(settings)
    except Exception:
        logging.root.removeHandler(handler)
        raise
    logger.info("Token store started")
    try:
        yield store
    finally:
        await store.db.close()
        logger.info("Token store shut down")
        logging.root.removeHandler(handler)
