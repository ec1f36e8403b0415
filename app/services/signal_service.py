"""Call signaling relay between the two participants of a session."""

from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.call_signal import CallSignal
from app.schemas.signal import SignalType
from app.services import session_service


async def send_signal(
    db: AsyncSession,
    session_id: UUID,
    from_user_id: UUID,
    signal_type: SignalType,
    signal_data: dict[str, Any],
) -> CallSignal:
    """Queue a signal for the sender's partner."""
    session = await session_service.require_participant(
        db, session_id, from_user_id, require_active=True, lock_for_share=True
    )

    now = datetime.now(timezone.utc)
    signal = CallSignal(
        session_id=session_id,
        from_user_id=from_user_id,
        to_user_id=session.partner_of(from_user_id),
        signal_type=signal_type.value,
        signal_data=signal_data,
        created_at=now,
        expires_at=now + timedelta(seconds=settings.SIGNAL_TTL_SECONDS),
    )
    db.add(signal)
    await db.commit()
    await db.refresh(signal)
    return signal


async def get_pending_signals(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
    since: datetime | None = None,
) -> list[CallSignal]:
    """Unexpired signals addressed to `user_id`, oldest first."""
    await session_service.require_participant(db, session_id, user_id)

    now = datetime.now(timezone.utc)
    conditions = [
        CallSignal.session_id == session_id,
        CallSignal.to_user_id == user_id,
        CallSignal.expires_at > now,
    ]
    if since is not None:
        if since.tzinfo is not None:
            since = since.astimezone(timezone.utc)
        conditions.append(CallSignal.created_at > since)

    result = await db.execute(
        select(CallSignal)
        .where(and_(*conditions))
        .order_by(CallSignal.created_at.asc())
    )
    return list(result.scalars().all())


async def purge_expired_signals(
    db: AsyncSession,
    now: datetime | None = None,
) -> int:
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        delete(CallSignal)
        .where(CallSignal.expires_at < now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    return result.rowcount
