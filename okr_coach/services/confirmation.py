"""
Confirmation and confusion detection for user messages.

Decides whether a message is the user agreeing to move on ("yes, looks
good"), adding new substance, or asking for clarification. Used by the phase
controller for the kr_discovery and validation gates.

Rules:
    - Short messages (<= 10 words) confirm on any confirmation pattern
    - Longer messages need a strong confirmation pattern
    - Messages over 15 words carrying new-information markers never confirm
"""

from dataclasses import dataclass
from typing import Any, Optional

from okr_coach.rules.confirmation import (
    CONFIRMATION_PATTERNS,
    CONFUSION_PATTERNS,
    LONG_MESSAGE_WORDS,
    NEW_INFORMATION_MIN_WORDS,
    NEW_INFORMATION_PATTERNS,
    SHORT_MESSAGE_WORDS,
    STRONG_CONFIRMATION_PATTERNS,
)
from okr_coach.services.text_helpers import matches, normalize_text, word_count

STRONG = "strong"
WEAK = "weak"


@dataclass
class MessageAnalysis:
    """Summary of how a message relates to the conversation flow."""

    is_confirmation: bool
    confirmation_type: Optional[str]
    confidence: float
    is_question: bool
    has_new_information: bool
    word_count: int


def _prepare(message: Any) -> str:
    return normalize_text(message).strip()


def _any_match(patterns, text: str) -> bool:
    return any(matches(p, text) for p in patterns)


def has_new_information(message: Any) -> bool:
    """True for longer messages that add detail, corrections or questions."""
    text = _prepare(message)
    return word_count(text) > NEW_INFORMATION_MIN_WORDS and _any_match(
        NEW_INFORMATION_PATTERNS, text
    )


def is_confirmation(message: Any) -> bool:
    text = _prepare(message)
    if not text or has_new_information(text):
        return False
    if word_count(text) <= SHORT_MESSAGE_WORDS:
        return _any_match(CONFIRMATION_PATTERNS, text)
    return _any_match(STRONG_CONFIRMATION_PATTERNS, text)


def confirmation_type(message: Any) -> Optional[str]:
    """"strong", "weak", or None when the message is not a confirmation."""
    text = _prepare(message)
    if not is_confirmation(text):
        return None
    return STRONG if _any_match(STRONG_CONFIRMATION_PATTERNS, text) else WEAK


def confirmation_confidence(message: Any) -> float:
    text = _prepare(message)
    kind = confirmation_type(text)
    if kind is None:
        return 0.0

    confidence = 0.9 if kind == STRONG else 0.7
    # Long confirmations usually carry caveats
    if word_count(text) > LONG_MESSAGE_WORDS:
        confidence -= 0.1
    return round(confidence, 2)


def is_confusion_or_question(message: Any) -> bool:
    text = _prepare(message)
    return bool(text) and _any_match(CONFUSION_PATTERNS, text)


def analyze_message(message: Any) -> MessageAnalysis:
    text = _prepare(message)
    kind = confirmation_type(text)
    return MessageAnalysis(
        is_confirmation=kind is not None,
        confirmation_type=kind,
        confidence=confirmation_confidence(text),
        is_question=is_confusion_or_question(text),
        has_new_information=has_new_information(text),
        word_count=word_count(text),
    )
