from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.config import settings
from app.core.rate_limit import enforce_rate_limit
from app.database import get_db
from app.schemas.user import CurrentUser
from app.schemas.voice_message import VoiceMessageListResponse, VoiceMessageResponse
from app.services import voice_service

router = APIRouter(prefix="", tags=["voice-messages"])


@router.post(
    "/{session_id}/voice-messages",
    response_model=VoiceMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_voice_message(
    session_id: UUID,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    audio: UploadFile = File(...),
    duration: float = Form(...),
) -> VoiceMessageResponse:
    """
    Upload a voice message.

    - **audio**: audio/* file, up to the configured size limit
    - **duration**: length in seconds
    """
    enforce_rate_limit(request, current_user.id, "voice", settings.RATE_LIMIT_VOICE)
    voice_message = await voice_service.upload_voice_message(
        db, session_id, current_user.id, audio, duration
    )
    return VoiceMessageResponse.model_validate(voice_message)


@router.get("/{session_id}/voice-messages", response_model=VoiceMessageListResponse)
async def list_voice_messages(
    session_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> VoiceMessageListResponse:
    voice_messages = await voice_service.get_voice_messages(
        db, session_id, current_user.id
    )
    return VoiceMessageListResponse(
        voice_messages=[VoiceMessageResponse.model_validate(v) for v in voice_messages]
    )
