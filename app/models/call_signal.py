"""WebRTC signaling payloads exchanged between the two participants."""

from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class CallSignal(Base):
    __tablename__ = "call_signals"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    session_id: Mapped[UUID] = mapped_column(
        Uuid, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False
    )
    from_user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)
    to_user_id: Mapped[UUID] = mapped_column(Uuid, nullable=False)

    # offer, answer, ice_candidate, hangup
    signal_type: Mapped[str] = mapped_column(String(20), nullable=False)
    signal_data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_call_signals_session_id_to_user_id", "session_id", "to_user_id"),
    )
