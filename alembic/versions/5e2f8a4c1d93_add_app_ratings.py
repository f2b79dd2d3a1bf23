"""add app ratings

Revision ID: 5e2f8a4c1d93
Revises: 3a9c1e7d5b20
Create Date: 2026-10-19 16:40:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import mysql


# revision identifiers, used by Alembic.
revision: str = '5e2f8a4c1d93'
down_revision: Union[str, Sequence[str], None] = '3a9c1e7d5b20'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'app_ratings',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), 'mysql'),
            nullable=False,
        ),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
    )
    op.create_index('ix_app_ratings_user_id', 'app_ratings', ['user_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_app_ratings_user_id', table_name='app_ratings')
    op.drop_table('app_ratings')
