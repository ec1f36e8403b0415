from app.schemas.chat_session import ChatSessionResponse
from app.schemas.matching import (
    MatchedResponse,
    MatchOutcome,
    MatchPartner,
    MatchRequest,
    MatchStatusResponse,
    WaitingResponse,
)
from app.schemas.message import (
    MessageCreate,
    MessageCreatedResponse,
    MessageListResponse,
    MessageResponse,
    MessageType,
)
from app.schemas.report import ReportCreate, ReportReason, ReportResponse
from app.schemas.signal import SignalCreate, SignalListResponse, SignalResponse, SignalType
from app.schemas.user import CurrentUser, Token, TokenPayload
from app.schemas.voice_message import VoiceMessageListResponse, VoiceMessageResponse

__all__ = [
    "CurrentUser",
    "Token",
    "TokenPayload",
    "MatchRequest",
    "MatchPartner",
    "MatchedResponse",
    "WaitingResponse",
    "MatchOutcome",
    "MatchStatusResponse",
    "ChatSessionResponse",
    "MessageType",
    "MessageCreate",
    "MessageCreatedResponse",
    "MessageResponse",
    "MessageListResponse",
    "VoiceMessageResponse",
    "VoiceMessageListResponse",
    "SignalType",
    "SignalCreate",
    "SignalResponse",
    "SignalListResponse",
    "ReportReason",
    "ReportCreate",
    "ReportResponse",
]
