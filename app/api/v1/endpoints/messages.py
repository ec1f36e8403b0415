import logging
from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.config import settings
from app.core.exceptions import ContentBlockedError, ContentTooLongError, ValidationError
from app.core.rate_limit import enforce_rate_limit
from app.database import get_db
from app.schemas.message import (
    MessageCreate,
    MessageCreatedResponse,
    MessageListResponse,
    MessageResponse,
)
from app.schemas.user import CurrentUser
from app.services import message_service, moderation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["messages"])


def _screen_content(content: str) -> None:
    """Length and moderation checks that run before the relay is invoked."""
    if not content.strip():
        raise ValidationError("Message cannot be empty", field="content")

    if len(content) > settings.MESSAGE_MAX_LENGTH:
        raise ContentTooLongError(settings.MESSAGE_MAX_LENGTH)

    result = moderation_service.moderate_text(content)
    if not result.allowed:
        logger.info("Message blocked by moderation (reason=%s)", result.reason)
        raise ContentBlockedError(reason=result.reason)


@router.post(
    "/{session_id}/messages",
    response_model=MessageCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    session_id: UUID,
    data: MessageCreate,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageCreatedResponse:
    """Append a message to an active session you participate in."""
    enforce_rate_limit(request, current_user.id, "message", settings.RATE_LIMIT_MESSAGE)
    _screen_content(data.content)

    message = await message_service.create_message(
        db, session_id, current_user.id, data.content, data.message_type
    )
    return MessageCreatedResponse.model_validate(message)


@router.get("/{session_id}/messages", response_model=MessageListResponse)
async def list_messages(
    session_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    limit: int = Query(50, ge=1, le=message_service.MAX_PAGE_SIZE),
    since: datetime | None = Query(None),
) -> MessageListResponse:
    """Session log in creation order. Pass `since` to fetch only newer messages."""
    session, messages = await message_service.get_messages(
        db, session_id, current_user.id, limit=limit, since=since
    )
    return MessageListResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
        session_status=session.status,
    )
