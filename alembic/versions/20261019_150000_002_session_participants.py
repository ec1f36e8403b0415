"""Session participants table; JSONB interests on PostgreSQL.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 15:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add session_participants and backfill it from chat_sessions."""

    op.create_table(
        'session_participants',
        sa.Column('session_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.ForeignKeyConstraint(
            ['session_id'], ['chat_sessions.id'],
            name='fk_session_participants_session_id_chat_sessions',
            ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('session_id', 'user_id', name='pk_session_participants'),
    )

    op.execute(
        """
        INSERT INTO session_participants (session_id, user_id, status)
        SELECT id, user1_id, status FROM chat_sessions
        UNION ALL
        SELECT id, user2_id, status FROM chat_sessions
        """
    )

    op.create_index(
        'uq_session_participants_active_user',
        'session_participants',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    if op.get_bind().dialect.name == 'postgresql':
        op.alter_column(
            'waiting_entries',
            'interests',
            type_=postgresql.JSONB(),
            existing_type=sa.JSON(),
            existing_nullable=False,
            postgresql_using='interests::jsonb',
        )
        op.create_index(
            'ix_waiting_entries_interests',
            'waiting_entries',
            ['interests'],
            postgresql_using='gin',
        )


def downgrade() -> None:
    """Drop session_participants and restore plain JSON interests."""

    if op.get_bind().dialect.name == 'postgresql':
        op.drop_index('ix_waiting_entries_interests', table_name='waiting_entries')
        op.alter_column(
            'waiting_entries',
            'interests',
            type_=sa.JSON(),
            existing_type=postgresql.JSONB(),
            existing_nullable=False,
            postgresql_using='interests::json',
        )

    op.drop_index('uq_session_participants_active_user', table_name='session_participants')
    op.drop_table('session_participants')
