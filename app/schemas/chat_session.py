from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.schemas.matching import MatchPartner


class ChatSessionResponse(BaseModel):
    """Session details returned to one of its participants"""

    id: UUID
    user1_id: UUID
    user2_id: UUID
    status: str
    created_at: datetime
    ended_at: datetime | None = None
    ended_by: UUID | None = None

    # The other participant as seen by the requester
    partner: MatchPartner | None = None

    model_config = ConfigDict(from_attributes=True)
