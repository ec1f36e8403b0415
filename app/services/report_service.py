import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ValidationError
from app.models.report import Report
from app.schemas.report import ReportCreate
from app.services import session_service

logger = logging.getLogger(__name__)


async def create_report(
    db: AsyncSession,
    reporter_id: UUID,
    data: ReportCreate,
) -> Report:
    """
    Record an abuse report.

    With a session the reporter must be a participant, and the reported
    user defaults to (and must be) the partner.
    """
    reported_user_id = data.reported_user_id

    if data.session_id is not None:
        session = await session_service.require_participant(
            db, data.session_id, reporter_id
        )
        partner_id = session.partner_of(reporter_id)
        if reported_user_id is None:
            reported_user_id = partner_id
        elif reported_user_id != partner_id:
            raise ValidationError(
                "Reported user is not part of this session",
                field="reported_user_id",
            )

    if reported_user_id == reporter_id:
        raise ValidationError("Cannot report yourself", field="reported_user_id")

    report = Report(
        reporter_user_id=reporter_id,
        reported_user_id=reported_user_id,
        session_id=data.session_id,
        reason=data.reason.value,
        details=data.details,
        status="pending",
    )
    db.add(report)
    await db.commit()
    await db.refresh(report)

    logger.info(
        "Report %s filed by %s (reason=%s, session=%s)",
        report.id,
        reporter_id,
        report.reason,
        report.session_id,
    )
    return report
