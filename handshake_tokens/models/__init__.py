"""ORM Models — SQLAlchemy declarative models.

Design Decisions:
    - All models imported here so Base.metadata is complete for create_all
      and Alembic autogenerate
"""

from handshake_tokens.models.token import Token  # noqa: F401
