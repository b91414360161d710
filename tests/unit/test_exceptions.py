"""Tests for exception hierarchy."""

import pytest


def test_exception_hierarchy():
    """All exceptions inherit from CoachingSystemError."""
    from okr_coach.core.exceptions import (
        CoachingSystemError,
        ConfigurationError,
        InvalidTransitionError,
        PhaseError,
        ScoringError,
        SessionCompletedError,
        SessionError,
        SessionNotFoundError,
        UnknownPhaseError,
        ValidationError,
    )

    assert issubclass(ConfigurationError, CoachingSystemError)
    assert issubclass(SessionError, CoachingSystemError)
    assert issubclass(SessionNotFoundError, SessionError)
    assert issubclass(SessionCompletedError, SessionError)
    assert issubclass(ValidationError, CoachingSystemError)
    assert issubclass(ScoringError, CoachingSystemError)
    assert issubclass(InvalidTransitionError, PhaseError)
    assert issubclass(UnknownPhaseError, PhaseError)


def test_unknown_phase_is_an_assertion():
    """UnknownPhaseError signals a contract violation."""
    from okr_coach.core.exceptions import UnknownPhaseError

    assert issubclass(UnknownPhaseError, AssertionError)


def test_exceptions_can_be_raised():
    """Exceptions can be raised and caught, keeping their message."""
    from okr_coach.core.exceptions import SessionNotFoundError

    with pytest.raises(SessionNotFoundError) as exc_info:
        raise SessionNotFoundError("Session test-123 not found")

    assert exc_info.value.message == "Session test-123 not found"


@pytest.mark.parametrize(
    "error_name, expected",
    [
        ("SessionNotFoundError", 404),
        ("SessionCompletedError", 400),
        ("InvalidTransitionError", 400),
        ("ValidationError", 400),
        ("ScoringError", 500),
        ("UnknownPhaseError", 500),
    ],
)
def test_http_status_mapping(error_name, expected):
    """API status codes follow the exception type."""
    from okr_coach.api.exception_handlers import status_for
    from okr_coach.core import exceptions

    assert status_for(getattr(exceptions, error_name)("boom")) == expected
