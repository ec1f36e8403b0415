import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AuthorizationError, NotFoundError, SessionClosedError
from app.models.chat_session import SESSION_ACTIVE, SESSION_ENDED, ChatSession
from app.models.session_participant import SessionParticipant
from app.schemas.chat_session import ChatSessionResponse
from app.schemas.matching import MatchPartner

logger = logging.getLogger(__name__)


async def get_session_by_id(
    db: AsyncSession,
    session_id: UUID,
    lock_for_share: bool = False,
) -> ChatSession | None:
    """Get session by ID, optionally holding a shared row lock until commit."""
    query = (
        select(ChatSession)
        .where(ChatSession.id == session_id)
        .execution_options(populate_existing=True)
    )
    if lock_for_share:
        query = query.with_for_update(read=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_active_session_for_user(
    db: AsyncSession,
    user_id: UUID,
) -> ChatSession | None:
    """The user's active session, if any."""
    result = await db.execute(
        select(ChatSession)
        .where(
            and_(
                or_(ChatSession.user1_id == user_id, ChatSession.user2_id == user_id),
                ChatSession.status == SESSION_ACTIVE,
            )
        )
        .order_by(ChatSession.created_at.desc())
        .limit(1)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def require_participant(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
    require_active: bool = False,
    lock_for_share: bool = False,
) -> ChatSession:
    """
    Load a session for one of its participants.

    Checks run in order: exists (NotFound), participant (Forbidden), active
    when required (SessionClosed). Outsiders get Forbidden whatever the
    session status.
    """
    session = await get_session_by_id(db, session_id, lock_for_share=lock_for_share)
    if session is None:
        raise NotFoundError("Session not found", resource="session")

    if not session.is_participant(user_id):
        raise AuthorizationError()

    if require_active and not session.is_active:
        raise SessionClosedError()

    return session


async def get_session_for_participant(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
) -> ChatSession:
    """
    Session lookup that never reveals existence to outsiders: a missing
    session and a foreign one both raise AuthorizationError.
    """
    session = await get_session_by_id(db, session_id)
    if session is None or not session.is_participant(user_id):
        raise AuthorizationError()
    return session


def to_response(session: ChatSession, viewer_id: UUID) -> ChatSessionResponse:
    """Session fields plus the partner as seen by `viewer_id`."""
    response = ChatSessionResponse.model_validate(session)
    if viewer_id == session.user1_id:
        response.partner = MatchPartner(
            user_id=session.user2_id,
            interests=list(session.user2_interests),
            language=session.user2_language,
        )
    else:
        response.partner = MatchPartner(
            user_id=session.user1_id,
            interests=list(session.user1_interests),
            language=session.user1_language,
        )
    return response


async def end_session(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
) -> ChatSession:
    """
    End a session on behalf of a participant.

    Idempotent: ending an ended session succeeds and keeps the original
    `ended_at`/`ended_by`. The update is conditional on `status='active'` so
    two participants ending at once cannot overwrite each other.
    """
    session = await require_participant(db, session_id, user_id)

    result = await db.execute(
        update(ChatSession)
        .where(
            and_(
                ChatSession.id == session_id,
                ChatSession.status == SESSION_ACTIVE,
            )
        )
        .values(
            status=SESSION_ENDED,
            ended_by=user_id,
            ended_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        await db.execute(
            update(SessionParticipant)
            .where(
                and_(
                    SessionParticipant.session_id == session_id,
                    SessionParticipant.status == SESSION_ACTIVE,
                )
            )
            .values(status=SESSION_ENDED)
            .execution_options(synchronize_session=False)
        )
    await db.commit()

    if result.rowcount:
        logger.info("Session %s ended by %s", session_id, user_id)

    await db.refresh(session)
    return session
