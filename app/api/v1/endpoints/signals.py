from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.config import settings
from app.core.rate_limit import enforce_rate_limit
from app.database import get_db
from app.schemas.signal import SignalCreate, SignalListResponse, SignalResponse
from app.schemas.user import CurrentUser
from app.services import signal_service

router = APIRouter(prefix="", tags=["signals"])


@router.post(
    "/{session_id}/signals",
    response_model=SignalResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_signal(
    session_id: UUID,
    data: SignalCreate,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SignalResponse:
    """Send a call signal (offer, answer, ICE candidate, hangup) to your partner."""
    enforce_rate_limit(request, current_user.id, "signal", settings.RATE_LIMIT_SIGNAL)
    signal = await signal_service.send_signal(
        db, session_id, current_user.id, data.signal_type, data.signal_data
    )
    return SignalResponse.model_validate(signal)


@router.get("/{session_id}/signals", response_model=SignalListResponse)
async def get_signals(
    session_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    since: datetime | None = Query(None),
) -> SignalListResponse:
    """Pending signals addressed to you."""
    signals = await signal_service.get_pending_signals(
        db, session_id, current_user.id, since=since
    )
    return SignalListResponse(signals=[SignalResponse.model_validate(s) for s in signals])
