"""Database — async pooled store with execute/query/exists primitives.

Invariants:
    - open() succeeds at most once until close(), also under concurrent callers;
      it runs SELECT 1 before reporting open
    - Every session auto-rolls-back on exception (no partial commits leak);
      a failing rollback or close is logged and never replaces the original error
    - Every failure leaving a session is a TokenStoreError (core/errors.py wrap_error)
    - Using a closed Database raises NoConnectionError

Design Decisions:
    - Explicit open()/close() lifecycle instead of building the engine in __init__:
      lets callers observe AlreadyOpen / FailedToOpen / NoConnection distinctly
    - pool_pre_ping for stale connection detection; pool sizing only for server
      backends (SQLite dialects pick their own pool class)
    - expire_on_commit=False: prevents lazy-load issues in async context
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Awaitable, Callable

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine,
)
from sqlalchemy.sql import Executable

import handshake_tokens.models  # noqa: F401
from handshake_tokens.core.errors import (
    AlreadyOpenError, ErrorContext, FailedToOpenError, NoConnectionError,
    wrap_error,
)
from handshake_tokens.db.base import Base

logger = logging.getLogger(__name__)


async def _discard_session_failure(
    step: Callable[[], Awaitable[None]], name: str, operation: str,
) -> None:
    """Run session cleanup; its failure is logged, never raised over the original."""
    try:
        await step()
    except Exception as e:
        error = wrap_error(e)
        logger.error(
            f"DB {operation} {name} failed: {e}",
            extra={"error_code": error.code, "operation": operation},
        )


class Database:
    """Pooled async connection to the token backing store."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.database_url = database_url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._lifecycle_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def _engine_options(self) -> dict[str, Any]:
        # bound token values never appear in error text or logs
        options: dict[str, Any] = {"pool_pre_ping": True, "hide_parameters": True}
        if make_url(self.database_url).get_backend_name() != "sqlite":
            options.update(
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_recycle=3600,
            )
        return options

    async def open(self) -> None:
        """Create the engine and verify connectivity."""
        async with self._lifecycle_lock:
            await self._open()

    async def _open(self) -> None:
        if self.engine is not None:
            raise AlreadyOpenError(ErrorContext(operation="open"))
        try:
            engine = create_async_engine(
                self.database_url, **self._engine_options(),
            )
        except Exception as e:
            logger.error(
                f"DB engine creation failed: {e}",
                extra={"error_code": "FAILED_TO_OPEN", "operation": "open"},
            )
            raise FailedToOpenError(e, ErrorContext(operation="open")) from e
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            await engine.dispose()
            logger.error(
                f"DB connectivity probe failed: {e}",
                extra={"error_code": "FAILED_TO_OPEN", "operation": "open"},
            )
            raise FailedToOpenError(e, ErrorContext(operation="open")) from e

        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine, class_=AsyncSession, expire_on_commit=False,
        )
        logger.info(
            f"Database opened ({engine.url.get_backend_name()})",
            extra={"operation": "open"},
        )

    async def close(self) -> None:
        """Dispose the engine. Closing a closed Database is a no-op."""
        async with self._lifecycle_lock:
            if self.engine is None:
                return
            engine, self.engine = self.engine, None
            self._session_factory = None
            await engine.dispose()
        logger.info("Database closed", extra={"operation": "close"})

    @asynccontextmanager
    async def session(
        self, operation: str = "unknown",
    ) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback; failures re-raised as TokenStoreError."""
        if self._session_factory is None:
            raise NoConnectionError(ErrorContext(operation=operation))
        session = self._session_factory()
        try:
            yield session
        except Exception as e:
            await _discard_session_failure(session.rollback, "rollback", operation)
            error = wrap_error(e, ErrorContext(operation=operation))
            logger.error(
                f"DB {operation} failed: {e}",
                extra={"error_code": error.code, "operation": operation},
            )
            if error is e:
                raise
            raise error from e
        finally:
            await _discard_session_failure(session.close, "close", operation)

    async def execute(self, statement: Executable) -> None:
        """Run a write statement and commit."""
        async with self.session("execute") as db:
            await db.execute(statement)
            await db.commit()

    async def query_get_value(self, statement: Executable) -> Any | None:
        """First column of the first row, or None when no row matches."""
        async with self.session("query") as db:
            result = await db.execute(statement)
            return result.scalars().first()

    async def exists(self, statement: Executable) -> bool:
        """Run a COUNT statement; True iff the count is positive."""
        async with self.session("exists") as db:
            result = await db.execute(statement)
            count = result.scalar()
        return (count or 0) > 0

    async def create_schema(self) -> None:
        """Create all ORM tables (dev/tests; production runs Alembic)."""
        if self.engine is None:
            raise NoConnectionError(ErrorContext(operation="create_schema"))
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            error = wrap_error(e, ErrorContext(operation="create_schema"))
            if error is e:
                raise
            raise error from e

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session("health_check") as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False
