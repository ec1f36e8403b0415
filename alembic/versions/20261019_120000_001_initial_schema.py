"""Initial schema: waiting pool, sessions, messages, voice, signals, reports.

Revision ID: 001
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all initial tables."""

    # Waiting pool
    op.create_table(
        'waiting_entries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('interests', sa.JSON(), nullable=False),
        sa.Column('language', sa.String(20), nullable=False),
        sa.Column('age_group', sa.String(20), nullable=False),
        sa.Column('mood', sa.String(30), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('refreshed_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_waiting_entries'),
        sa.UniqueConstraint('user_id', name='uq_waiting_entries_user_id'),
    )
    op.create_index(
        'ix_waiting_entries_language_created_at',
        'waiting_entries',
        ['language', 'created_at'],
    )

    # Sessions
    op.create_table(
        'chat_sessions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user1_id', sa.Uuid(), nullable=False),
        sa.Column('user2_id', sa.Uuid(), nullable=False),
        sa.Column('user1_interests', sa.JSON(), nullable=False),
        sa.Column('user1_language', sa.String(20), nullable=False),
        sa.Column('user2_interests', sa.JSON(), nullable=False),
        sa.Column('user2_language', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('ended_by', sa.Uuid(), nullable=True),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_chat_sessions'),
        sa.CheckConstraint('user1_id <> user2_id', name='ck_chat_sessions_distinct_participants'),
        sa.CheckConstraint("status IN ('active', 'ended')", name='ck_chat_sessions_status_values'),
    )
    op.create_index('ix_chat_sessions_user1_id', 'chat_sessions', ['user1_id'])
    op.create_index('ix_chat_sessions_user2_id', 'chat_sessions', ['user2_id'])
    op.create_index(
        'uq_chat_sessions_active_user1',
        'chat_sessions',
        ['user1_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )
    op.create_index(
        'uq_chat_sessions_active_user2',
        'chat_sessions',
        ['user2_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    # Messages
    op.create_table(
        'messages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('session_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('message_type', sa.String(20), nullable=False, server_default='text'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_messages'),
        sa.ForeignKeyConstraint(
            ['session_id'], ['chat_sessions.id'],
            name='fk_messages_session_id_chat_sessions', ondelete='CASCADE',
        ),
    )
    op.create_index(
        'ix_messages_session_id_created_at', 'messages', ['session_id', 'created_at']
    )

    # Voice messages
    op.create_table(
        'voice_messages',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('session_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('file_path', sa.String(500), nullable=False),
        sa.Column('file_url', sa.String(500), nullable=False),
        sa.Column('mime_type', sa.String(100), nullable=False),
        sa.Column('duration', sa.Float(), nullable=False),
        sa.Column('file_size', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_voice_messages'),
        sa.ForeignKeyConstraint(
            ['session_id'], ['chat_sessions.id'],
            name='fk_voice_messages_session_id_chat_sessions', ondelete='CASCADE',
        ),
    )
    op.create_index(
        'ix_voice_messages_session_id_created_at',
        'voice_messages',
        ['session_id', 'created_at'],
    )

    # Call signals
    op.create_table(
        'call_signals',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('session_id', sa.Uuid(), nullable=False),
        sa.Column('from_user_id', sa.Uuid(), nullable=False),
        sa.Column('to_user_id', sa.Uuid(), nullable=False),
        sa.Column('signal_type', sa.String(20), nullable=False),
        sa.Column('signal_data', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_call_signals'),
        sa.ForeignKeyConstraint(
            ['session_id'], ['chat_sessions.id'],
            name='fk_call_signals_session_id_chat_sessions', ondelete='CASCADE',
        ),
    )
    op.create_index(
        'ix_call_signals_session_id_to_user_id',
        'call_signals',
        ['session_id', 'to_user_id'],
    )

    # Reports
    op.create_table(
        'reports',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('reporter_user_id', sa.Uuid(), nullable=False),
        sa.Column('reported_user_id', sa.Uuid(), nullable=True),
        sa.Column('session_id', sa.Uuid(), nullable=True),
        sa.Column('reason', sa.String(50), nullable=False),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_reports'),
        sa.ForeignKeyConstraint(
            ['session_id'], ['chat_sessions.id'],
            name='fk_reports_session_id_chat_sessions', ondelete='SET NULL',
        ),
    )
    op.create_index('ix_reports_reporter_user_id', 'reports', ['reporter_user_id'])
    op.create_index('ix_reports_reported_user_id', 'reports', ['reported_user_id'])


def downgrade() -> None:
    op.drop_index('ix_reports_reported_user_id', table_name='reports')
    op.drop_index('ix_reports_reporter_user_id', table_name='reports')
    op.drop_table('reports')
    op.drop_index('ix_call_signals_session_id_to_user_id', table_name='call_signals')
    op.drop_table('call_signals')
    op.drop_index('ix_voice_messages_session_id_created_at', table_name='voice_messages')
    op.drop_table('voice_messages')
    op.drop_index('ix_messages_session_id_created_at', table_name='messages')
    op.drop_table('messages')
    op.drop_index('uq_chat_sessions_active_user2', table_name='chat_sessions')
    op.drop_index('uq_chat_sessions_active_user1', table_name='chat_sessions')
    op.drop_index('ix_chat_sessions_user2_id', table_name='chat_sessions')
    op.drop_index('ix_chat_sessions_user1_id', table_name='chat_sessions')
    op.drop_table('chat_sessions')
    op.drop_index('ix_waiting_entries_language_created_at', table_name='waiting_entries')
    op.drop_table('waiting_entries')
