"""initial schema: users, sources, contents

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    """
    Create the users, sources and contents tables.

    All timestamps are TIMESTAMP WITH TIME ZONE. Deleting a user removes
    their sources; deleting a source removes its contents.
    """
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('external_uid', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='USER'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_external_uid', 'users', ['external_uid'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'sources',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False, server_default=''),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('source_type', sa.String(length=16), nullable=False, server_default='RSS'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('refresh_rate', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('last_fetched', sa.DateTime(timezone=True), nullable=True),
        sa.Column('settings', JSON_TYPE, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('refresh_rate BETWEEN 5 AND 1440', name='ck_sources_refresh_rate'),
    )
    op.create_index('ix_sources_user_id', 'sources', ['user_id'])
    # Speeds up the "due for refresh" query
    op.create_index('ix_sources_active_last_fetched', 'sources', ['is_active', 'last_fetched'])

    op.create_table(
        'contents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('source_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('url', sa.String(), nullable=False),
        sa.Column('content_text', sa.Text(), nullable=True),
        sa.Column('content_html', sa.Text(), nullable=True),
        sa.Column('author', sa.String(), nullable=True),
        sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='UNREAD'),
        sa.Column('priority', sa.String(length=16), nullable=False, server_default='MEDIUM'),
        sa.Column('metadata', JSON_TYPE, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['source_id'], ['sources.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source_id', 'url', name='uq_contents_source_url'),
    )
    op.create_index('ix_contents_source_id', 'contents', ['source_id'])
    op.create_index('ix_contents_status', 'contents', ['status'])


def downgrade() -> None:
    op.drop_index('ix_contents_status', table_name='contents')
    op.drop_index('ix_contents_source_id', table_name='contents')
    op.drop_table('contents')

    op.drop_index('ix_sources_active_last_fetched', table_name='sources')
    op.drop_index('ix_sources_user_id', table_name='sources')
    op.drop_table('sources')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_external_uid', table_name='users')
    op.drop_table('users')
