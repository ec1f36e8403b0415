from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.config import settings
from app.core.rate_limit import enforce_rate_limit
from app.database import get_db
from app.schemas.matching import (
    MatchedResponse,
    MatchRequest,
    MatchStatusResponse,
    WaitingResponse,
)
from app.schemas.user import CurrentUser
from app.services import matching_service

router = APIRouter(prefix="", tags=["matching"])


@router.post("/", response_model=MatchedResponse | WaitingResponse)
async def attempt_match(
    data: MatchRequest,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MatchedResponse | WaitingResponse:
    """
    Try to pair with a waiting user.

    Returns the new (or already active) session when a partner is found,
    otherwise `{"success": false, "status": "waiting"}`. Clients keep polling
    this endpoint, or `/status`, until matched.
    """
    enforce_rate_limit(request, current_user.id, "match", settings.RATE_LIMIT_MATCH)
    return await matching_service.attempt_match(db, current_user.id, data)


@router.get("/status", response_model=MatchStatusResponse)
async def get_match_status(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MatchStatusResponse:
    """Current matching state: idle, waiting or matched."""
    return await matching_service.get_match_status(db, current_user.id)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_matching(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Response:
    """Leave the waiting pool. A no-op if already matched or idle."""
    await matching_service.cancel_waiting(db, current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
