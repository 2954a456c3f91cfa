"""add user role

Revision ID: b7e2d9c4f1a6
Revises: a1f4c2e8b7d3
Create Date: 2024-06-15 09:00:00.000000

Adds users.role ("user" or "admin"). Existing accounts become regular users.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7e2d9c4f1a6'
down_revision: Union[str, None] = 'a1f4c2e8b7d3'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add the role column."""
    op.add_column(
        'users',
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
    )


def downgrade() -> None:
    """Drop the role column."""
    op.drop_column('users', 'role')
