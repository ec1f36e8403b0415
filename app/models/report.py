import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Report(Base):
    __tablename__ = "reports"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Who is making the report
    reporter_user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Who is being reported
    reported_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, nullable=True, index=True
    )

    # Conversation the report refers to
    session_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("chat_sessions.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Reason category: inappropriate_content, harassment, spam, scam, underage, other
    reason: Mapped[str] = mapped_column(String(50), nullable=False)

    # Optional detailed description
    details: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Status: pending, reviewed, dismissed, action_taken
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
