"""Token ORM — one issued verification token per row.

Invariants:
    - Rows are inserted once and never updated or deleted here
    - No uniqueness on (namespc, foreign_id): several tokens may share an owner
    - token uniqueness comes from generator entropy, not a constraint
    - timestamp is unix seconds

Design Decisions:
    - Integer autoincrement id: gives lookups a deterministic oldest-first order
    - NamespaceType decorator: the column stores the stable integer code and
      loads it back through Namespace.from_code
"""

from sqlalchemy import BigInteger, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from handshake_tokens.core.domain_types import Namespace
from handshake_tokens.db.base import Base


class NamespaceType(TypeDecorator):
    """Persist Namespace as its integer code."""
    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, Namespace):
            return value.code
        return Namespace.from_code(value).code

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Namespace.from_code(value)


class Token(Base):
    """Issued token bound to (namespace, foreign_id)."""
    __tablename__ = "tokens"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    namespace: Mapped[Namespace] = mapped_column(
        "namespc", NamespaceType(), nullable=False, default=Namespace.UNKNOWN,
    )
    foreign_id: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    token: Mapped[str] = mapped_column(Text, nullable=False, default="")
    timestamp: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )



Index("ix_tokens_namespc_foreign_id", Token.namespace, Token.foreign_id)
Index("ix_tokens_namespc_token", Token.namespace, Token.token)
