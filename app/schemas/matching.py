from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class MatchRequest(BaseModel):
    """Criteria submitted by a user looking for a partner."""

    interests: list[str] = Field(..., min_length=1, max_length=20)
    language: str = Field(..., min_length=1, max_length=20)
    age_group: str = Field(..., min_length=1, max_length=20)
    mood: str | None = Field(None, max_length=30)

    @field_validator("interests")
    @classmethod
    def normalize_interests(cls, value: list[str]) -> list[str]:
        # Trim, drop blanks and duplicates, keep the caller's order
        seen: list[str] = []
        for interest in value:
            interest = interest.strip()
            if interest and interest not in seen:
                seen.append(interest)
        if not seen:
            raise ValueError("At least one interest is required")
        return seen

    @field_validator("language", "age_group")
    @classmethod
    def strip_identifier(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Must not be blank")
        return value

    @field_validator("mood")
    @classmethod
    def strip_mood(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None


class MatchPartner(BaseModel):
    user_id: UUID
    interests: list[str]
    language: str


class MatchedResponse(BaseModel):
    success: Literal[True] = True
    status: Literal["matched"] = "matched"
    session_id: UUID
    partner: MatchPartner


class WaitingResponse(BaseModel):
    success: Literal[False] = False
    status: Literal["waiting"] = "waiting"
    waiting_since: datetime


MatchOutcome = MatchedResponse | WaitingResponse


class MatchStatusResponse(BaseModel):
    """Derived matching state of a user: idle, waiting or matched."""

    status: Literal["idle", "waiting", "matched"]
    session_id: UUID | None = None
    partner: MatchPartner | None = None
    waiting_since: datetime | None = None
