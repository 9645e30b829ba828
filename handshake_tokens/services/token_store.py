"""Token Store — issue, look up, and verify namespaced handshake tokens.

Invariants:
    - save() and exists() never raise TokenStoreError: they degrade to the
      generated token / False and log the discarded failure at WARNING
    - lookup() surfaces store failures; lookup_or_new() treats them as "absent"
    - lookup() returns the oldest matching row (lowest id) when several exist
    - Token values are never logged

Design Decisions:
    - Two tiers: try_save/try_exists are fallible, save/exists wrap them and
      substitute the default, so every discarded error is visible here
    - lookup_or_new is check-then-act without a transaction: two concurrent
      callers can both miss and both insert. Oldest-first lookup makes every
      later call agree on the first issued token
"""

import logging
import time
from typing import Callable

from sqlalchemy import func, insert, select

from handshake_tokens.core.domain_types import (
    ForeignId, Namespace, validate_foreign_id,
)
from handshake_tokens.core.errors import TokenStoreError
from handshake_tokens.core.ids import create_id
from handshake_tokens.infrastructure.database import Database
from handshake_tokens.models.token import Token

logger = logging.getLogger(__name__)


def _unix_now() -> int:
    return int(time.time())


def _coerce_namespace(namespace: Namespace | int) -> Namespace:
    if isinstance(namespace, Namespace):
        return namespace
    return Namespace.from_code(namespace)


class TokenStore:
    """Token persistence on top of the Database collaborator."""

    def __init__(
        self,
        db: Database,
        id_factory: Callable[[], str] = create_id,
        clock: Callable[[], int] = _unix_now,
    ):
        self.db = db
        self._id_factory = id_factory
        self._clock = clock

    # ─── Fallible tier ──────────────────────────────────────────

    async def try_save(
        self, namespace: Namespace | int, foreign_id: ForeignId | int, token: str,
    ) -> None:
        """Insert one token row. Raises TokenStoreError on failure."""
        namespace = _coerce_namespace(namespace)
        foreign_id = validate_foreign_id(foreign_id)
        await self.db.execute(
            insert(Token).values(
                namespace=namespace,
                foreign_id=foreign_id,
                token=token,
                timestamp=self._clock(),
            )
        )

    async def lookup(
        self, namespace: Namespace | int, foreign_id: ForeignId | int,
    ) -> str | None:
        """Token issued for (namespace, foreign_id), or None.

        Raises TokenStoreError when the backing store fails.
        """
        namespace = _coerce_namespace(namespace)
        foreign_id = validate_foreign_id(foreign_id)
        return await self.db.query_get_value(
            select(Token.token)
            .where(Token.namespace == namespace)
            .where(Token.foreign_id == foreign_id)
            .order_by(Token.id.asc())
            .limit(1)
        )

    async def try_exists(self, namespace: Namespace | int, token: str) -> bool:
        """Raises TokenStoreError on failure."""
        namespace = _coerce_namespace(namespace)
        return await self.db.exists(
            select(func.count())
            .select_from(Token)
            .where(Token.namespace == namespace)
            .where(Token.token == token)
        )

    # ─── Best-effort tier ───────────────────────────────────────

    async def save(
        self, namespace: Namespace | int, foreign_id: ForeignId | int,
    ) -> str:
        """Create a new token for the owner and return it.

        The insert is best-effort: on a store failure the token is returned
        anyway and may not be persisted.
        """
        token = self._id_factory()
        try:
            await self.try_save(namespace, foreign_id, token)
        except TokenStoreError as e:
            logger.warning(
                f"Token not persisted, returning it unsaved: {e.message}",
                extra={
                    "error_code": e.code,
                    "operation": "save",
                    "namespace": _coerce_namespace(namespace).name,
                    "foreign_id": int(foreign_id),
                },
            )
        return token

    async def lookup_or_new(
        self, namespace: Namespace | int, foreign_id: ForeignId | int,
    ) -> str:
        """Existing token for the owner, else a freshly saved one."""
        try:
            token = await self.lookup(namespace, foreign_id)
        except TokenStoreError as e:
            logger.warning(
                f"Token lookup failed, issuing a new one: {e.message}",
                extra={
                    "error_code": e.code,
                    "operation": "lookup_or_new",
                    "namespace": _coerce_namespace(namespace).name,
                    "foreign_id": int(foreign_id),
                },
            )
            token = None
        if token is not None:
            return token
        return await self.save(namespace, foreign_id)

    async def exists(self, namespace: Namespace | int, token: str) -> bool:
        """True iff the token was issued in this namespace.

        A store failure reads as False.
        """
        try:
            return await self.try_exists(namespace, token)
        except TokenStoreError as e:
            logger.warning(
                f"Token existence check failed, treating as absent: {e.message}",
                extra={
                    "error_code": e.code,
                    "operation": "exists",
                    "namespace": _coerce_namespace(namespace).name,
                },
            )
            return False
