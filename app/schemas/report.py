from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class ReportReason(str, Enum):
    inappropriate_content = "inappropriate_content"
    harassment = "harassment"
    spam = "spam"
    scam = "scam"
    underage = "underage"
    other = "other"


class ReportCreate(BaseModel):
    session_id: UUID | None = None
    reported_user_id: UUID | None = None
    reason: ReportReason
    details: str | None = Field(None, max_length=2000)

    @model_validator(mode="after")
    def require_target(self) -> "ReportCreate":
        if self.session_id is None and self.reported_user_id is None:
            raise ValueError("Either session_id or reported_user_id is required")
        return self


class ReportResponse(BaseModel):
    id: UUID
    session_id: UUID | None
    reported_user_id: UUID | None
    reason: str
    details: str | None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}
