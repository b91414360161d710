"""Tests for confirmation and confusion detection."""

import pytest

from okr_coach.services import confirmation

LONG_STRONG = (
    "yes this matches exactly what the leadership team expects from our group "
    "for the coming quarter so we are ready to proceed now"
)


@pytest.mark.parametrize(
    "message,expected",
    [
        ("yes", True),
        ("Looks good to me", True),
        ("sounds great, let's proceed", True),
        ("👍", True),
        ("we should add a churn metric", False),
        ("", False),
        (None, False),
        (
            "yes but can we also add a retention metric because churn matters a lot "
            "to our leadership team",
            False,
        ),
    ],
)
def test_is_confirmation(message, expected):
    """Short messages confirm on any pattern; new information never confirms."""
    assert confirmation.is_confirmation(message) is expected


def test_long_message_needs_strong_pattern():
    """Messages over ten words only confirm with a strong pattern."""
    assert confirmation.is_confirmation(LONG_STRONG)
    assert not confirmation.is_confirmation(
        "this matches what the leadership team expects so it looks good to me"
    )


def test_confirmation_type():
    """Strong versus weak confirmations."""
    assert confirmation.confirmation_type("Absolutely") == confirmation.STRONG
    assert confirmation.confirmation_type("sounds good") == confirmation.WEAK
    assert confirmation.confirmation_type("tell me more") is None


def test_confirmation_confidence():
    """Strong 0.9, weak 0.7, long confirmations lose 0.1."""
    assert confirmation.confirmation_confidence("yes") == 0.9
    assert confirmation.confirmation_confidence("sounds good") == 0.7
    assert confirmation.confirmation_confidence(LONG_STRONG) == 0.8
    assert confirmation.confirmation_confidence("tell me more") == 0.0


@pytest.mark.parametrize(
    "message,expected",
    [
        ("what do you mean by that?", True),
        ("I'm confused about baselines", True),
        ("Could you give an example", True),
        ("yes", False),
        ("", False),
    ],
)
def test_is_confusion_or_question(message, expected):
    """Questions and confusion markers are recognised."""
    assert confirmation.is_confusion_or_question(message) is expected


def test_analyze_message():
    """analyze_message bundles every signal."""
    analysis = confirmation.analyze_message("sounds good")

    assert analysis.is_confirmation is True
    assert analysis.confirmation_type == confirmation.WEAK
    assert analysis.confidence == 0.7
    assert analysis.is_question is False
    assert analysis.has_new_information is False
    assert analysis.word_count == 2
