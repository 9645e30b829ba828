"""Error Hierarchy — one closed taxonomy for every token store failure.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Wrapping variants keep the original exception as `.cause` (and `__cause__`)
    - wrap_error() maps any exception to exactly one variant; TokenStoreError passes through

Design Decisions:
    - Single hierarchy with TokenStoreError base: callers catch one type
    - Classification by isinstance against SQLAlchemy's exception tree, most
      specific first (pool errors are also SQLAlchemyError)
"""

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sqlalchemy import exc as sa_exc


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Failure source that produced the error."""
    ENGINE = "engine"
    CONNECTION_POOL = "connection_pool"
    DRIVER = "driver"
    LIFECYCLE = "lifecycle"
    IO = "io"
    UPSTREAM = "upstream"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    namespace: str | None = None
    debug_info: dict[str, Any] | None = None


class TokenStoreError(Exception):
    """Base exception for all token store errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        cause: BaseException | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.cause = cause
        self.context = context or ErrorContext()
        if cause is not None:
            self.__cause__ = cause


# ─── Wrapped Failures ───────────────────────────────────────────

class EngineError(TokenStoreError):
    """The database engine rejected or failed a statement."""
    def __init__(self, cause: BaseException, context: ErrorContext | None = None):
        super().__init__(
            f"Database engine error: {cause!r}",
            "ENGINE_ERROR", ErrorCategory.ENGINE,
            ErrorSeverity.ERROR, cause, context,
        )


class ConnectionPoolError(TokenStoreError):
    """A pooled connection could not be acquired or was lost."""
    def __init__(self, cause: BaseException, context: ErrorContext | None = None):
        super().__init__(
            f"Database connection pool error: {cause!r}",
            "CONNECTION_POOL_ERROR", ErrorCategory.CONNECTION_POOL,
            ErrorSeverity.CRITICAL, cause, context,
        )


class DriverError(TokenStoreError):
    """Failure on the raw driver path or inside SQLAlchemy itself."""
    def __init__(self, cause: BaseException, context: ErrorContext | None = None):
        super().__init__(
            f"Database driver error: {cause!r}",
            "DRIVER_ERROR", ErrorCategory.DRIVER,
            ErrorSeverity.ERROR, cause, context,
        )


class StorageIOError(TokenStoreError):
    """Underlying I/O failure."""
    def __init__(self, cause: OSError, context: ErrorContext | None = None):
        super().__init__(
            str(cause), "IO_ERROR", ErrorCategory.IO,
            ErrorSeverity.CRITICAL, cause, context,
        )


class UpstreamError(TokenStoreError):
    """Generic error from a calling layer, propagated transparently."""
    def __init__(self, cause: BaseException, context: ErrorContext | None = None):
        super().__init__(
            str(cause), "UPSTREAM_ERROR", ErrorCategory.UPSTREAM,
            ErrorSeverity.ERROR, cause, context,
        )


# ─── Lifecycle Errors ───────────────────────────────────────────

class NoConnectionError(TokenStoreError):
    """Store used while no connection is open."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Database: connection closed",
            "NO_CONNECTION", ErrorCategory.LIFECYCLE,
            ErrorSeverity.ERROR, None, context,
        )


class AlreadyOpenError(TokenStoreError):
    """Open attempted while the store is already open."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Database: already open",
            "ALREADY_OPEN", ErrorCategory.LIFECYCLE,
            ErrorSeverity.WARNING, None, context,
        )


class FailedToOpenError(TokenStoreError):
    """Opening the store failed."""
    def __init__(
        self, cause: BaseException | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            "Database: failed to open",
            "FAILED_TO_OPEN", ErrorCategory.LIFECYCLE,
            ErrorSeverity.CRITICAL, cause, context,
        )


def wrap_error(
    exc: BaseException, context: ErrorContext | None = None,
) -> TokenStoreError:
    """Convert any exception into its single taxonomy variant."""
    if isinstance(exc, TokenStoreError):
        return exc
    if isinstance(exc, (sa_exc.TimeoutError, sa_exc.DisconnectionError)):
        return ConnectionPoolError(exc, context)
    if isinstance(exc, sa_exc.DBAPIError):
        return EngineError(exc, context)
    if isinstance(exc, (sa_exc.SQLAlchemyError, sqlite3.Error)):
        return DriverError(exc, context)
    if isinstance(exc, OSError):
        return StorageIOError(exc, context)
    return UpstreamError(exc, context)
