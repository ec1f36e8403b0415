from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.database import get_db
from app.schemas.chat_session import ChatSessionResponse
from app.schemas.user import CurrentUser
from app.services import session_service

router = APIRouter(prefix="", tags=["sessions"])


@router.get("/{session_id}", response_model=ChatSessionResponse)
async def get_session(
    session_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ChatSessionResponse:
    """Get session details. Only participants may see a session."""
    session = await session_service.get_session_for_participant(
        db, session_id, current_user.id
    )
    return session_service.to_response(session, current_user.id)


@router.post("/{session_id}/end", response_model=ChatSessionResponse)
async def end_session(
    session_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ChatSessionResponse:
    """End a session. Ending an already ended session is not an error."""
    session = await session_service.end_session(db, session_id, current_user.id)
    return session_service.to_response(session, current_user.id)
