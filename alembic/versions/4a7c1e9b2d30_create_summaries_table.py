"""Create summaries table

Revision ID: 4a7c1e9b2d30
Revises:
Create Date: 2026-10-18 10:00:00.000000

This migration creates the summaries table backing the recency cache.
Timestamps are ISO-8601 UTC strings; (subject_id, style) is the cache key.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4a7c1e9b2d30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create summaries table."""
    op.create_table(
        'summaries',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('subject_id', sa.String(), nullable=False),
        sa.Column('source_url', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('raw_text', sa.Text(), nullable=False),
        sa.Column('style', sa.String(), nullable=False),
        sa.Column('created_at', sa.String(40), nullable=False),
        sa.Column('accessed_at', sa.String(40), nullable=False),
        sa.UniqueConstraint('subject_id', 'style', name='uq_summaries_subject_style'),
    )

    # Eviction and recent listings order by last access
    op.create_index('ix_summaries_accessed_at', 'summaries', ['accessed_at'])


def downgrade() -> None:
    """Drop summaries table."""
    op.drop_index('ix_summaries_accessed_at', table_name='summaries')
    op.drop_table('summaries')
