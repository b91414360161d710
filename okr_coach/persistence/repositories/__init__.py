"""Repository implementations."""

from okr_coach.persistence.repositories.checkpoint_repo import CheckpointRepository
from okr_coach.persistence.repositories.message_repo import MessageRepository
from okr_coach.persistence.repositories.session_repo import SessionRepository

__all__ = [
    "SessionRepository",
    "MessageRepository",
    "CheckpointRepository",
]
