import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.message import Message
    from app.models.session_participant import SessionParticipant


SESSION_ACTIVE = "active"
SESSION_ENDED = "ended"


class ChatSession(Base):
    """Two-party anonymous conversation created by the matcher."""

    __tablename__ = "chat_sessions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # user1 was waiting, user2 completed the pair
    user1_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    user2_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Criteria snapshot of each side at match time
    user1_interests: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    user1_language: Mapped[str] = mapped_column(String(20), nullable=False)
    user2_interests: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    user2_language: Mapped[str] = mapped_column(String(20), nullable=False)

    # Status: active, ended
    status: Mapped[str] = mapped_column(String(20), default=SESSION_ACTIVE, nullable=False)

    # If ended, who did it first
    ended_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    messages: Mapped[list["Message"]] = relationship(
        "Message", back_populates="session", cascade="all, delete-orphan"
    )
    participants: Mapped[list["SessionParticipant"]] = relationship(
        "SessionParticipant", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("user1_id <> user2_id", name="distinct_participants"),
        CheckConstraint("status IN ('active', 'ended')", name="status_values"),
        Index(
            "uq_chat_sessions_active_user1",
            "user1_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
        Index(
            "uq_chat_sessions_active_user2",
            "user2_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status == SESSION_ACTIVE

    def is_participant(self, user_id: uuid.UUID) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def partner_of(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.user2_id if user_id == self.user1_id else self.user1_id
