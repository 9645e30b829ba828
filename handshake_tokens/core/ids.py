"""Token Id Generator — unguessable, URL-safe token strings.

Invariants:
    - Output is TOKEN_ID_LENGTH characters from TOKEN_ID_ALPHABET
    - Every character is drawn from `secrets` (CSPRNG), never `random`

Design Decisions:
    - 11 characters of a 64-symbol alphabet = 66 bits of entropy; short enough
      to embed in an invite link, long enough that uniqueness needs no
      database constraint
"""

import secrets
import string

TOKEN_ID_ALPHABET = string.ascii_letters + string.digits + "-_"
TOKEN_ID_LENGTH = 11


def create_id() -> str:
    return "".join(
        secrets.choice(TOKEN_ID_ALPHABET) for _ in range(TOKEN_ID_LENGTH)
    )
