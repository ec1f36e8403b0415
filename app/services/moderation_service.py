"""Pattern based text moderation, no external calls."""

import re
from dataclasses import dataclass

from app.config import settings

BANNED_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\b(?:suicide|self-harm|kill\s+myself)\b", re.IGNORECASE),
    re.compile(r"\b(?:terror(?:ism|ists?)?|bomb(?:s|ing)?|shoot(?:s|ing|er)?)\b", re.IGNORECASE),
    re.compile(r"\bchild\s*(?:abuse|porn|sex)", re.IGNORECASE),
    re.compile(r"\b(?:rape[ds]?|raping|sexual\s+assault)\b", re.IGNORECASE),
    re.compile(r"\b(?:hate\s*speech|slurs?)\b", re.IGNORECASE),
    re.compile(r"\b(?:nazis?|kkk|white\s*power)\b", re.IGNORECASE),
    re.compile(r"(?<!\w)(?:fuck|shit|bitch|cunt|asshole)(?!\w)", re.IGNORECASE),
    # links are mostly spam or phishing
    re.compile(r"https?://", re.IGNORECASE),
    re.compile(r"<script|<iframe|<object|<embed", re.IGNORECASE),
]


@dataclass
class ModerationResult:
    allowed: bool
    reason: str | None = None


def moderate_text(text: str) -> ModerationResult:
    if not text or not text.strip():
        return ModerationResult(allowed=False, reason="empty")

    if len(text) > settings.MESSAGE_MAX_LENGTH:
        return ModerationResult(allowed=False, reason="too_long")

    for pattern in BANNED_PATTERNS:
        if pattern.search(text):
            return ModerationResult(
                allowed=False, reason=f"blocked_by_pattern:{pattern.pattern}"
            )

    return ModerationResult(allowed=True)
