from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SignalType(str, Enum):
    offer = "offer"
    answer = "answer"
    ice_candidate = "ice_candidate"
    hangup = "hangup"


class SignalCreate(BaseModel):
    signal_type: SignalType
    signal_data: dict[str, Any] = {}


class SignalResponse(BaseModel):
    id: UUID
    session_id: UUID
    from_user_id: UUID
    to_user_id: UUID
    signal_type: str
    signal_data: dict[str, Any]
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SignalListResponse(BaseModel):
    signals: list[SignalResponse]
