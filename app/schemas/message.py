"""Message schemas for API requests and responses."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageType(str, Enum):
    text = "text"
    emoji = "emoji"
    voice = "voice"


class MessageCreate(BaseModel):
    """Create a new message. Length is checked separately to report TooLong."""
    content: str = Field(..., min_length=1)
    message_type: MessageType = MessageType.text


class MessageCreatedResponse(BaseModel):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    """Message response."""
    id: UUID
    session_id: UUID
    user_id: UUID
    content: str
    message_type: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageListResponse(BaseModel):
    messages: list[MessageResponse]
    session_status: str
