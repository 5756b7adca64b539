"""
Unit tests for message routing: report requests, canned replies, research queries.
"""

import pytest

from insightear.services.intent import (
    CAPABILITY_REPLY,
    GENERIC_REPLY,
    GREETING_REPLY,
    THANKS_REPLY,
    Intent,
    classify_message,
    conversational_reply,
    is_conversational,
    is_report_request,
)


class TestReportRequest:
    """Tests for is_report_request() and its precedence."""

    @pytest.mark.parametrize("message", ["pdf", "Generate PDF", "can I get the report?", "download it", "yes", "Yes please", "  YES  "])
    def test_report_phrases_match(self, message: str) -> None:
        assert is_report_request(message)
        assert classify_message(message) is Intent.REPORT

    def test_report_wins_over_greeting(self) -> None:
        assert classify_message("hello, send me the pdf") is Intent.REPORT

    def test_report_words_match_whole_words_only(self) -> None:
        assert not is_report_request("What do reporters think of Tesla?")
        assert not is_report_request("yes, tell me about Adidas sales")

    def test_report_requests_are_also_conversational(self) -> None:
        assert is_conversational("pdf report")


class TestConversational:
    """Tests for is_conversational() and conversational_reply()."""

    @pytest.mark.parametrize("message", ["hello", "Hi!", "hey there", "Good morning", "thanks", "Thank you so much!", "help", "What can you do?"])
    def test_small_talk_is_conversational(self, message: str) -> None:
        assert classify_message(message) is Intent.CONVERSATIONAL

    def test_capability_reply(self) -> None:
        assert conversational_reply("What can you do?") == CAPABILITY_REPLY
        assert conversational_reply("help") == CAPABILITY_REPLY

    def test_greeting_reply(self) -> None:
        assert conversational_reply("hello") == GREETING_REPLY
        assert conversational_reply("Hey there!") == GREETING_REPLY

    def test_thanks_reply(self) -> None:
        assert conversational_reply("thanks!") == THANKS_REPLY
        assert conversational_reply("cheers") == THANKS_REPLY

    def test_reply_is_deterministic(self) -> None:
        assert conversational_reply("hello") == conversational_reply("hello")

    @pytest.mark.parametrize("message", ["", "   ", "\n\t", None])
    def test_empty_message_gets_generic_reply(self, message) -> None:
        assert classify_message(message) is Intent.CONVERSATIONAL
        assert conversational_reply(message) == GENERIC_REPLY


class TestResearch:
    """Anything that is not small talk or a report request goes to the assistant."""

    @pytest.mark.parametrize("message", ["What are people saying about Nike?", "hello, how is Apple doing in China?", "Compare Coke and Pepsi sentiment"])
    def test_research_queries(self, message: str) -> None:
        assert classify_message(message) is Intent.RESEARCH
