"""
Matchmaking: pairs a caller with the longest-waiting compatible user, or
parks the caller in the waiting pool.

Compatibility is an exact language match plus at least one shared interest.
Age group and mood are stored for display only.

Every attempt runs as one transaction against the session store:

1. take a per-user advisory lock, so two attempts of the same user run one
   after the other;
2. lock the caller's own waiting row (``FOR UPDATE``) so nobody can claim
   the caller while it is choosing a partner;
3. if the caller already sits in an active session, return that session;
4. walk compatible candidates oldest first, page by page, and claim one with
   ``FOR UPDATE SKIP LOCKED``; the claim re-checks the criteria against the
   locked row and deletes it (rowcount must be 1);
5. on a claim, drop the caller's own entry and insert the session with its
   participant rows; otherwise upsert the caller's waiting row.

``session_participants`` carries a partial unique index on ``user_id`` for
active sessions, so a second active session for a user fails the commit.

SQLite has no row or advisory locks, so on that dialect the whole
transaction runs behind a lock owned by the engine.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator
from uuid import UUID

from sqlalchemy import Text, and_, cast, delete, func, or_, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from app.config import settings
from app.core.exceptions import MatchingFailedError, ValidationError
from app.models.chat_session import SESSION_ACTIVE, ChatSession
from app.models.session_participant import SessionParticipant
from app.models.waiting_entry import WaitingEntry
from app.schemas.matching import (
    MatchedResponse,
    MatchOutcome,
    MatchPartner,
    MatchRequest,
    MatchStatusResponse,
    WaitingResponse,
)
from app.services import session_service

logger = logging.getLogger(__name__)

_engine_locks: "weakref.WeakKeyDictionary[Engine, asyncio.Lock]" = weakref.WeakKeyDictionary()


def interests_overlap(a: list[str], b: list[str]) -> bool:
    """Any shared interest qualifies; this is not a similarity score."""
    return not set(a).isdisjoint(b)


def is_compatible(criteria: MatchRequest, entry: WaitingEntry) -> bool:
    return entry.language == criteria.language and interests_overlap(
        criteria.interests, entry.interests
    )


def waiting_cutoff(now: datetime) -> datetime:
    return now - timedelta(seconds=settings.WAITING_ENTRY_TTL_SECONDS)


def advisory_key(user_id: UUID) -> int:
    """Signed 64-bit key for ``pg_advisory_xact_lock``."""
    return int.from_bytes(user_id.bytes[:8], "big", signed=True)


def _validate_criteria(criteria: MatchRequest) -> None:
    if not criteria.interests or not all(i.strip() for i in criteria.interests):
        raise ValidationError("At least one interest is required", field="interests")
    if not criteria.language.strip():
        raise ValidationError("Language is required", field="language")
    if not criteria.age_group.strip():
        raise ValidationError("Age group is required", field="age_group")


def _dialect_name(db: AsyncSession) -> str:
    return db.get_bind().dialect.name


@asynccontextmanager
async def _pool_guard(db: AsyncSession) -> AsyncIterator[None]:
    """Serialize matcher transactions on dialects without row-level locks."""
    if _dialect_name(db) == "postgresql":
        yield
        return

    bind = db.get_bind()
    engine = bind if isinstance(bind, Engine) else bind.engine
    lock = _engine_locks.setdefault(engine, asyncio.Lock())
    async with lock:
        yield


async def _lock_user(db: AsyncSession, user_id: UUID) -> None:
    """Hold a transaction-scoped advisory lock on `user_id` (PostgreSQL)."""
    if _dialect_name(db) != "postgresql":
        return
    await db.execute(select(func.pg_advisory_xact_lock(advisory_key(user_id))))


def _overlap_clause(dialect: str, interests: list[str]) -> ColumnElement[bool] | None:
    """SQL form of `interests_overlap`, or None where the dialect has none."""
    if dialect == "postgresql":
        return WaitingEntry.interests.op("?|", is_comparison=True)(
            cast(postgresql.array(interests), postgresql.ARRAY(Text))
        )
    if dialect == "sqlite":
        element = func.json_each(WaitingEntry.interests).table_valued("value")
        return select(element.c.value).where(element.c.value.in_(interests)).exists()
    return None


def _matched(session: ChatSession, user_id: UUID) -> MatchedResponse:
    if session.user1_id == user_id:
        partner = MatchPartner(
            user_id=session.user2_id,
            interests=list(session.user2_interests),
            language=session.user2_language,
        )
    else:
        partner = MatchPartner(
            user_id=session.user1_id,
            interests=list(session.user1_interests),
            language=session.user1_language,
        )
    return MatchedResponse(session_id=session.id, partner=partner)


async def _lock_own_entry(db: AsyncSession, user_id: UUID) -> WaitingEntry | None:
    result = await db.execute(
        select(WaitingEntry)
        .where(WaitingEntry.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _iter_candidates(
    db: AsyncSession,
    user_id: UUID,
    criteria: MatchRequest,
    now: datetime,
) -> AsyncIterator[UUID]:
    """
    Ids of same-language, unexpired, overlapping entries of other users,
    oldest first. Reads pages of MATCH_CANDIDATE_SCAN_LIMIT rows until the
    pool is exhausted.
    """
    overlap = _overlap_clause(_dialect_name(db), criteria.interests)
    conditions = [
        WaitingEntry.user_id != user_id,
        WaitingEntry.language == criteria.language,
        WaitingEntry.refreshed_at >= waiting_cutoff(now),
    ]
    if overlap is not None:
        conditions.append(overlap)

    page_size = settings.MATCH_CANDIDATE_SCAN_LIMIT
    last: tuple[datetime, UUID] | None = None
    while True:
        query = select(WaitingEntry.id, WaitingEntry.created_at, WaitingEntry.interests).where(
            and_(*conditions)
        )
        if last is not None:
            last_created, last_id = last
            query = query.where(
                or_(
                    WaitingEntry.created_at > last_created,
                    and_(WaitingEntry.created_at == last_created, WaitingEntry.id > last_id),
                )
            )
        result = await db.execute(
            query.order_by(WaitingEntry.created_at.asc(), WaitingEntry.id.asc()).limit(page_size)
        )
        rows = result.all()

        for row in rows:
            if overlap is None and not interests_overlap(criteria.interests, row.interests):
                continue
            yield row.id

        if len(rows) < page_size:
            return
        last = (rows[-1].created_at, rows[-1].id)


async def _claim(
    db: AsyncSession,
    entry_id: UUID,
    criteria: MatchRequest,
    now: datetime,
) -> WaitingEntry | None:
    """
    Take a candidate out of the pool. Returns the locked row, or None if
    another transaction holds or consumed it, or it no longer qualifies.
    """
    result = await db.execute(
        select(WaitingEntry)
        .where(
            and_(
                WaitingEntry.id == entry_id,
                WaitingEntry.language == criteria.language,
                WaitingEntry.refreshed_at >= waiting_cutoff(now),
            )
        )
        .with_for_update(skip_locked=True)
        .execution_options(populate_existing=True)
    )
    entry = result.scalar_one_or_none()
    if entry is None or not interests_overlap(criteria.interests, entry.interests):
        return None

    if await session_service.get_active_session_for_user(db, entry.user_id) is not None:
        logger.debug("Skipping waiting entry of %s, already in a session", entry.user_id)
        return None

    deleted = await db.execute(
        delete(WaitingEntry)
        .where(WaitingEntry.id == entry.id)
        .execution_options(synchronize_session=False)
    )
    if deleted.rowcount != 1:
        return None

    db.expunge(entry)
    return entry


async def _upsert_waiting_entry(
    db: AsyncSession,
    user_id: UUID,
    criteria: MatchRequest,
    now: datetime,
) -> datetime:
    """Insert or refresh the caller's row; returns its enqueue time."""
    values = {
        "user_id": user_id,
        "interests": criteria.interests,
        "language": criteria.language,
        "age_group": criteria.age_group,
        "mood": criteria.mood,
        "created_at": now,
        "refreshed_at": now,
    }
    # created_at is left untouched on refresh so the FIFO position survives polling
    refresh = {
        "interests": criteria.interests,
        "language": criteria.language,
        "age_group": criteria.age_group,
        "mood": criteria.mood,
        "refreshed_at": now,
    }

    dialect = _dialect_name(db)
    if dialect == "postgresql":
        stmt = postgresql.insert(WaitingEntry).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite.insert(WaitingEntry).values(**values)
    else:
        return await _merge_waiting_entry(db, user_id, values, refresh)

    stmt = stmt.on_conflict_do_update(index_elements=[WaitingEntry.user_id], set_=refresh)
    await db.execute(stmt)

    result = await db.execute(
        select(WaitingEntry.created_at).where(WaitingEntry.user_id == user_id)
    )
    return result.scalar_one()


async def _merge_waiting_entry(
    db: AsyncSession,
    user_id: UUID,
    values: dict,
    refresh: dict,
) -> datetime:
    entry = await _lock_own_entry(db, user_id)
    if entry is None:
        entry = WaitingEntry(**values)
        db.add(entry)
    else:
        for key, value in refresh.items():
            setattr(entry, key, value)
    await db.flush()
    return entry.created_at


async def _run_match(
    db: AsyncSession,
    user_id: UUID,
    criteria: MatchRequest,
    now: datetime,
) -> MatchOutcome:
    await _lock_user(db, user_id)
    own_entry = await _lock_own_entry(db, user_id)

    existing = await session_service.get_active_session_for_user(db, user_id)
    if existing is not None:
        if own_entry is not None:
            await db.delete(own_entry)
        return _matched(existing, user_id)

    async for entry_id in _iter_candidates(db, user_id, criteria, now):
        candidate = await _claim(db, entry_id, criteria, now)
        if candidate is None:
            logger.debug("Candidate entry %s unavailable, trying next", entry_id)
            continue

        if own_entry is not None:
            await db.delete(own_entry)

        session = ChatSession(
            user1_id=candidate.user_id,
            user1_interests=list(candidate.interests),
            user1_language=candidate.language,
            user2_id=user_id,
            user2_interests=list(criteria.interests),
            user2_language=criteria.language,
            status=SESSION_ACTIVE,
            created_at=now,
            participants=[
                SessionParticipant(user_id=candidate.user_id, status=SESSION_ACTIVE),
                SessionParticipant(user_id=user_id, status=SESSION_ACTIVE),
            ],
        )
        db.add(session)
        await db.flush()

        logger.info(
            "Matched %s with %s (session=%s, language=%s)",
            user_id,
            candidate.user_id,
            session.id,
            criteria.language,
        )
        return _matched(session, user_id)

    waiting_since = await _upsert_waiting_entry(db, user_id, criteria, now)
    return WaitingResponse(waiting_since=waiting_since)


async def attempt_match(
    db: AsyncSession,
    user_id: UUID,
    criteria: MatchRequest,
) -> MatchOutcome:
    """
    Pair `user_id` with a compatible waiting user or enqueue them.

    Raises ValidationError for bad criteria (before any storage access) and
    MatchingFailedError when the transaction fails; the caller retries.
    """
    _validate_criteria(criteria)
    now = datetime.now(timezone.utc)

    try:
        async with _pool_guard(db):
            try:
                outcome = await _run_match(db, user_id, criteria, now)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
    except SQLAlchemyError as e:
        logger.warning("Matching transaction failed for %s: %s", user_id, e)
        raise MatchingFailedError() from e

    return outcome


async def get_match_status(db: AsyncSession, user_id: UUID) -> MatchStatusResponse:
    """Derive idle / waiting / matched from table membership."""
    session = await session_service.get_active_session_for_user(db, user_id)
    if session is not None:
        matched = _matched(session, user_id)
        return MatchStatusResponse(
            status="matched",
            session_id=matched.session_id,
            partner=matched.partner,
        )

    now = datetime.now(timezone.utc)
    result = await db.execute(
        select(WaitingEntry.created_at).where(
            and_(
                WaitingEntry.user_id == user_id,
                WaitingEntry.refreshed_at >= waiting_cutoff(now),
            )
        )
    )
    waiting_since = result.scalar_one_or_none()
    if waiting_since is not None:
        return MatchStatusResponse(status="waiting", waiting_since=waiting_since)

    return MatchStatusResponse(status="idle")


async def cancel_waiting(db: AsyncSession, user_id: UUID) -> bool:
    """
    Leave the waiting pool. Races safely with a concurrent claim: whichever
    commits first wins and the other deletes nothing.
    """
    async with _pool_guard(db):
        await _lock_user(db, user_id)
        result = await db.execute(
            delete(WaitingEntry)
            .where(WaitingEntry.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

    cancelled = result.rowcount > 0
    if cancelled:
        logger.info("User %s left the waiting pool", user_id)
    return cancelled


async def purge_stale_waiting_entries(db: AsyncSession, now: datetime | None = None) -> int:
    """Delete waiting entries nobody refreshed within the TTL."""
    now = now or datetime.now(timezone.utc)
    async with _pool_guard(db):
        result = await db.execute(
            delete(WaitingEntry)
            .where(WaitingEntry.refreshed_at < waiting_cutoff(now))
            .execution_options(synchronize_session=False)
        )
        await db.commit()
    return result.rowcount
