"""Voice message upload and listing."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from uuid import UUID

from fastapi import UploadFile
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import ServerError, ValidationError
from app.models.voice_message import VoiceMessage
from app.services import session_service, storage_service

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "webm"


def _validate_upload(content_type: str | None, size: int, duration: float) -> None:
    if not content_type or not content_type.startswith("audio/"):
        raise ValidationError("Invalid file type", field="audio")

    if size == 0:
        raise ValidationError("Empty audio file", field="audio")

    if size > settings.VOICE_MAX_SIZE_BYTES:
        raise ValidationError(
            "File too large",
            field="audio",
            metadata={"max_size_bytes": settings.VOICE_MAX_SIZE_BYTES},
        )

    if not duration > 0 or duration > settings.VOICE_MAX_DURATION_SECONDS:
        raise ValidationError("Invalid duration", field="duration")


def _extension(content_type: str) -> str:
    subtype = content_type.split("/", 1)[1].split(";", 1)[0].strip()
    return subtype if subtype.isalnum() else DEFAULT_EXTENSION


async def upload_voice_message(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
    file: UploadFile,
    duration: float,
) -> VoiceMessage:
    """
    Store an audio blob for a session and record its metadata.

    Args:
        db: Database session
        session_id: Target session
        user_id: Uploading participant
        file: Uploaded audio file
        duration: Length in seconds as reported by the client

    Returns:
        Created VoiceMessage record
    """
    content = await file.read()
    _validate_upload(file.content_type, len(content), duration)

    await session_service.require_participant(
        db, session_id, user_id, require_active=True, lock_for_share=True
    )

    key = f"voice/{session_id}/{user_id}/{uuid.uuid4()}.{_extension(file.content_type)}"
    blob = storage_service.store_blob(key, content)

    now = datetime.now(timezone.utc)
    voice_message = VoiceMessage(
        session_id=session_id,
        user_id=user_id,
        file_path=blob.path,
        file_url=blob.url,
        mime_type=file.content_type,
        duration=duration,
        file_size=blob.size,
        created_at=now,
        expires_at=now + timedelta(hours=settings.MESSAGE_RETENTION_HOURS),
    )
    db.add(voice_message)
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        storage_service.delete_blob(blob.path)
        logger.error("Failed to save voice message for session %s: %s", session_id, e)
        raise ServerError("Failed to save voice message") from e

    await db.refresh(voice_message)
    logger.info("Voice message %s stored (%d bytes)", voice_message.id, blob.size)
    return voice_message


async def get_voice_messages(
    db: AsyncSession,
    session_id: UUID,
    user_id: UUID,
) -> list[VoiceMessage]:
    await session_service.require_participant(db, session_id, user_id)
    result = await db.execute(
        select(VoiceMessage)
        .where(VoiceMessage.session_id == session_id)
        .order_by(VoiceMessage.created_at.asc())
    )
    return list(result.scalars().all())


async def purge_expired_voice_messages(
    db: AsyncSession,
    now: datetime | None = None,
) -> int:
    """Delete expired voice rows and their blobs. Returns count."""
    now = now or datetime.now(timezone.utc)
    result = await db.execute(
        select(VoiceMessage).where(VoiceMessage.expires_at < now)
    )
    expired = list(result.scalars().all())

    for voice_message in expired:
        await db.delete(voice_message)
    await db.commit()

    for voice_message in expired:
        storage_service.delete_blob(voice_message.file_path)
    return len(expired)
