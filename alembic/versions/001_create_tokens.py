"""Create tokens table.

Revision ID: 001_create_tokens
Revises:
Create Date: 2026-10-19

One row per issued handshake token. No uniqueness on (namespc, foreign_id):
several tokens may exist for one owner.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001_create_tokens'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'tokens',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('namespc', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('foreign_id', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('token', sa.Text(), nullable=False, server_default=''),
        sa.Column('timestamp', sa.BigInteger(), nullable=False, server_default='0'),
    )
    op.create_index(
        'ix_tokens_namespc_foreign_id', 'tokens', ['namespc', 'foreign_id'],
    )
    op.create_index('ix_tokens_namespc_token', 'tokens', ['namespc', 'token'])


def downgrade() -> None:
    op.drop_index('ix_tokens_namespc_token', table_name='tokens')
    op.drop_index('ix_tokens_namespc_foreign_id', table_name='tokens')
    op.drop_table('tokens')
