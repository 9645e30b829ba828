"""Domain Types — token namespaces and owner identity.

Invariants:
    - Namespace codes are stable integers persisted in the `namespc` column;
      existing codes never change meaning
    - ForeignId 0 (NO_OWNER) is a valid owner meaning "no specific owner"

Design Decisions:
    - IntEnum with explicit code()/from_code(): the persisted integer is the
      contract, member names are not
    - NewType for ForeignId: zero runtime cost, full type-checker support
"""

from enum import IntEnum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ForeignId = NewType("ForeignId", int)

NO_OWNER = ForeignId(0)


# ─── Enums ───────────────────────────────────────────────────────

class Namespace(IntEnum):
    """What a token is used for — maps to DB `namespc` column."""
    UNKNOWN = 0
    INVITE_NUMBER = 100
    AUTH = 110

    @property
    def code(self) -> int:
        return int(self.value)

    @classmethod
    def from_code(cls, code: int) -> "Namespace":
        """Resolve a persisted integer code. Unknown codes raise ValueError."""
        if isinstance(code, bool) or not isinstance(code, int):
            raise ValueError(f"Namespace code must be an int, got {code!r}")
        try:
            return cls(code)
        except ValueError:
            raise ValueError(f"Unknown namespace code: {code}") from None

    @classmethod
    def default(cls) -> "Namespace":
        return cls.UNKNOWN


def validate_foreign_id(foreign_id: int) -> ForeignId:
    """Owner ids are non-negative ints; 0 means no specific owner."""
    if isinstance(foreign_id, bool) or not isinstance(foreign_id, int):
        raise ValueError(f"foreign_id must be an int, got {foreign_id!r}")
    if foreign_id < 0:
        raise ValueError(f"foreign_id must be >= 0, got {foreign_id}")
    return ForeignId(foreign_id)
