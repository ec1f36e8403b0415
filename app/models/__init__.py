from app.models.call_signal import CallSignal
from app.models.chat_session import ChatSession
from app.models.message import Message
from app.models.report import Report
from app.models.session_participant import SessionParticipant
from app.models.voice_message import VoiceMessage
from app.models.waiting_entry import WaitingEntry

__all__ = [
    "WaitingEntry",
    "ChatSession",
    "SessionParticipant",
    "Message",
    "VoiceMessage",
    "CallSignal",
    "Report",
]
