import pytest

from app.config import settings
from app.services.moderation_service import moderate_text


class TestModerateText:
    """Tests for pattern based text moderation."""

    def test_plain_text_allowed(self):
        result = moderate_text("hey, what music do you like?")
        assert result.allowed is True
        assert result.reason is None

    def test_empty_text(self):
        assert moderate_text("").reason == "empty"
        assert moderate_text("   ").reason == "empty"

    def test_too_long(self):
        result = moderate_text("a" * (settings.MESSAGE_MAX_LENGTH + 1))
        assert result.allowed is False
        assert result.reason == "too_long"

    @pytest.mark.parametrize(
        "text",
        [
            "check out https://example.com",
            "<script>alert(1)</script>",
            "you are an ASSHOLE",
        ],
    )
    def test_blocked(self, text):
        result = moderate_text(text)
        assert result.allowed is False
        assert result.reason.startswith("blocked_by_pattern:")

    def test_profanity_inside_word_allowed(self):
        # Word boundaries keep innocent words like "shitake" out of the filter
        assert moderate_text("I love shitake mushrooms").allowed is True

    @pytest.mark.parametrize(
        "text",
        [
            "grape juice is underrated",
            "new drapes for the living room",
            "any troubleshooting tips for my router?",
        ],
    )
    def test_harmless_words_containing_patterns_allowed(self, text):
        assert moderate_text(text).allowed is True

    @pytest.mark.parametrize(
        "text",
        [
            "there was a shooting downtown",
            "he was raped",
            "terrorists everywhere",
        ],
    )
    def test_whole_words_still_blocked(self, text):
        assert moderate_text(text).allowed is False
