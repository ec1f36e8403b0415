import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Index, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WaitingEntry(Base):
    """A user currently sitting in the waiting pool."""

    __tablename__ = "waiting_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # One entry per user; repeated attempts upsert this row
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        unique=True,
        nullable=False,
    )

    # JSONB on PostgreSQL, queried with `?|`
    interests: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
    )
    language: Mapped[str] = mapped_column(String(20), nullable=False)

    # Collected for display only, not part of the matching predicate
    age_group: Mapped[str] = mapped_column(String(20), nullable=False)
    mood: Mapped[str | None] = mapped_column(String(30), nullable=True)

    # Enqueue time, kept across refreshes (FIFO position)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    # Last poll; entries not refreshed within the TTL are expired
    refreshed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_waiting_entries_language_created_at", "language", "created_at"),
        Index("ix_waiting_entries_interests", "interests", postgresql_using="gin"),
    )
