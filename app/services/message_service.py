"""Message relay: append-only per-session chat log."""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.chat_session import ChatSession
from app.models.message import Message
from app.schemas.message import MessageType
from app.services import session_service

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200


async def create_message(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
    content: str,
    message_type: MessageType = MessageType.text,
) -> Message:
    """
    Append a message to an active session.

    The session row is read with a shared lock so an `end` cannot commit
    between the status check and the insert.
    """
    await session_service.require_participant(
        db, session_id, user_id, require_active=True, lock_for_share=True
    )

    message = Message(
        session_id=session_id,
        user_id=user_id,
        content=content,
        message_type=message_type.value,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    return message


async def get_messages(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
    limit: int = 50,
    since: datetime | None = None,
) -> tuple[ChatSession, list[Message]]:
    """
    Messages of a session, creation-time ascending.

    Without `since` the most recent `limit` messages are returned; with
    `since` the first `limit` messages strictly after it.
    """
    session = await session_service.require_participant(db, session_id, user_id)
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    query = select(Message).where(Message.session_id == session_id)
    if since is not None:
        if since.tzinfo is not None:
            since = since.astimezone(timezone.utc)
        result = await db.execute(
            query.where(Message.created_at > since)
            .order_by(Message.created_at.asc(), Message.id.asc())
            .limit(limit)
        )
        return session, list(result.scalars().all())

    result = await db.execute(
        query.order_by(Message.created_at.desc(), Message.id.desc()).limit(limit)
    )
    # Reverse to get chronological order for display
    messages = list(result.scalars().all())
    messages.reverse()
    return session, messages


async def purge_expired_messages(
    db: AsyncSession,
    now: datetime | None = None,
) -> int:
    """Delete messages older than the retention window. Returns count."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=settings.MESSAGE_RETENTION_HOURS)
    result = await db.execute(
        delete(Message)
        .where(Message.created_at < cutoff)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount
