from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.auth import get_current_user
from app.config import settings
from app.core.rate_limit import enforce_rate_limit
from app.database import get_db
from app.schemas.report import ReportCreate, ReportResponse
from app.schemas.user import CurrentUser
from app.services import report_service

router = APIRouter(prefix="", tags=["reports"])


@router.post("/", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    data: ReportCreate,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ReportResponse:
    """Report a session or a user for abuse."""
    enforce_rate_limit(request, current_user.id, "report", settings.RATE_LIMIT_REPORT)
    report = await report_service.create_report(db, current_user.id, data)
    return ReportResponse.model_validate(report)
