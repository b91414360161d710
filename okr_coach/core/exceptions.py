"""
Custom exception hierarchy for the OKR coaching system.

All application exceptions inherit from CoachingSystemError.
"""


class CoachingSystemError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CoachingSystemError):
    """Invalid or missing configuration."""

    pass


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(CoachingSystemError):
    """Session-related error."""

    pass


class SessionNotFoundError(SessionError):
    """Session does not exist."""

    pass


class SessionCompletedError(SessionError):
    """Attempted to send a message to a completed session."""

    pass


class ValidationError(CoachingSystemError):
    """Input validation failed."""

    pass


# =============================================================================
# Scoring Errors
# =============================================================================


class ScoringError(CoachingSystemError):
    """Base for scoring-related errors."""

    pass


# =============================================================================
# Phase Errors
# =============================================================================


class PhaseError(CoachingSystemError):
    """Base for phase state machine errors."""

    pass


class InvalidTransitionError(PhaseError):
    """No transition is defined for the (phase, event) pair."""

    pass


class UnknownPhaseError(PhaseError, AssertionError):
    """Phase value outside the Phase enum.

    This is a caller contract violation, not a user-input problem, so it is
    raised as an assertion failure and never converted into a degraded result.
    """

    pass
