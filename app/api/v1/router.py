from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    matching,
    messages,
    reports,
    sessions,
    signals,
    voice_messages,
)

router = APIRouter()

router.include_router(auth.router, prefix="/auth")
router.include_router(matching.router, prefix="/matching")
router.include_router(sessions.router, prefix="/sessions")
router.include_router(messages.router, prefix="/sessions")
router.include_router(voice_messages.router, prefix="/sessions")
router.include_router(signals.router, prefix="/sessions")
router.include_router(reports.router, prefix="/reports")
