from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class VoiceMessageResponse(BaseModel):
    id: UUID
    session_id: UUID
    user_id: UUID
    file_url: str
    mime_type: str
    duration: float
    file_size: int
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VoiceMessageListResponse(BaseModel):
    voice_messages: list[VoiceMessageResponse]
