"""
Intent classification: decide whether a chat message needs the assistant at all.

Responsibility: Pure pattern checks over the message text. Report requests win over
everything; greetings, thanks and capability questions get a canned reply; anything
else is a research query for the assistant. No session state is read here.
"""

import re
from enum import Enum


class Intent(str, Enum):
    REPORT = "report"
    CONVERSATIONAL = "conversational"
    RESEARCH = "research"


_REPORT_WORDS = re.compile(r"\b(pdf|report|download)\b", re.IGNORECASE)
_AFFIRMATIVES = frozenset({"yes", "yes please", "yeah", "yep", "sure", "ok", "okay"})

_GREETING = re.compile(
    r"^(hi|hello|hey|hiya|howdy|sup|yo|greetings|good (morning|afternoon|evening))\b",
    re.IGNORECASE,
)
_GREETING_ONLY = re.compile(
    r"^(hi|hello|hey|hiya|howdy|sup|yo|greetings|good (morning|afternoon|evening))"
    r"( there| insightear| team)?[\s!.,?]*$",
    re.IGNORECASE,
)
_THANKS_ONLY = re.compile(
    r"^(thanks|thank you|thx|ty|cheers|much appreciated)( so much| very much| a lot| again)?[\s!.,]*$",
    re.IGNORECASE,
)
_CAPABILITY = re.compile(
    r"^(help|what can you do|what do you do|who are you|how can you help( me)?)[\s!.?]*$",
    re.IGNORECASE,
)

CAPABILITY_REPLY = (
    "I'm InsightEar GPT, your market research assistant. I can:\n\n"
    "- **Research brands and products** using recent Reddit discussions and news coverage\n"
    "- **Summarize consumer sentiment** and market trends\n"
    "- **Prepare a downloadable report** of the last analysis (just ask for the report)\n\n"
    "Try something like: \"What are people saying about Nike?\""
)
GREETING_REPLY = (
    "Hello! I'm InsightEar GPT, your market research assistant. I can help you analyze brands, "
    "consumer sentiment and market trends using real-time web data. What would you like to research today?"
)
THANKS_REPLY = "You're welcome! Let me know if there's another brand or market you'd like me to look into."
GENERIC_REPLY = (
    "I'm here to help with market research. Ask me about a brand, product or industry "
    "and I'll gather what people and the press are saying."
)


def _normalize(message: str | None) -> str:
    return " ".join((message or "").split()).lower()


def is_report_request(message: str | None) -> bool:
    """True for "give me the report" style messages (mentions pdf/report/download or a bare yes)."""
    text = _normalize(message)
    if not text:
        return False
    if text.rstrip("!.") in _AFFIRMATIVES:
        return True
    return bool(_REPORT_WORDS.search(text))


def is_conversational(message: str | None) -> bool:
    """
    True for greetings, thanks, capability questions and empty input.
    Report requests also match so they can never fall through to the assistant.
    """
    text = _normalize(message)
    if not text:
        return True
    if _GREETING_ONLY.match(text) or _THANKS_ONLY.match(text) or _CAPABILITY.match(text):
        return True
    return is_report_request(text)


def classify_message(message: str | None) -> Intent:
    """Route a message: report request first, then conversational, else research."""
    if is_report_request(message):
        return Intent.REPORT
    if is_conversational(message):
        return Intent.CONVERSATIONAL
    return Intent.RESEARCH


def conversational_reply(message: str | None) -> str:
    """Canned reply for a conversational message. Deterministic given the message."""
    text = _normalize(message)
    if "what can you do" in text or re.search(r"\bhelp\b", text):
        return CAPABILITY_REPLY
    if _GREETING.match(text):
        return GREETING_REPLY
    if "thank" in text or _THANKS_ONLY.match(text):
        return THANKS_REPLY
    return GENERIC_REPLY
