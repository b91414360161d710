"""Dependency injection for API routes."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from okr_coach.core.config import coaching_config, settings
from okr_coach.persistence.repositories.checkpoint_repo import CheckpointRepository
from okr_coach.persistence.repositories.message_repo import MessageRepository
from okr_coach.persistence.repositories.session_repo import SessionRepository
from okr_coach.services.coaching_service import CoachingService
from okr_coach.services.pattern_detector import PatternDetector
from okr_coach.services.quality_scorer import QualityScorer


def get_session_repository() -> SessionRepository:
    """FastAPI dependency injection for SessionRepository.

    Each request gets a new repository pointed at the database from settings.
    """
    return SessionRepository(str(settings.database_path))


def get_message_repository() -> MessageRepository:
    return MessageRepository(str(settings.database_path))


def get_checkpoint_repository() -> CheckpointRepository:
    return CheckpointRepository(str(settings.database_path))


@lru_cache(maxsize=1)
def get_coaching_service() -> CoachingService:
    """Process-wide CoachingService.

    Cached so every request shares the same per-session locks; two turns for
    one session are never processed at the same time.
    """
    return CoachingService(
        session_repo=get_session_repository(),
        message_repo=get_message_repository(),
        checkpoint_repo=get_checkpoint_repository(),
        config=coaching_config,
    )


@lru_cache(maxsize=1)
def get_pattern_detector() -> PatternDetector:
    """Stateless detector shared by the analysis endpoints."""
    return PatternDetector(coaching_config)


@lru_cache(maxsize=1)
def get_quality_scorer() -> QualityScorer:
    """Stateless scorer shared by the analysis endpoints."""
    return QualityScorer(coaching_config)


# Type aliases for dependency injection
CoachingServiceDep = Annotated[CoachingService, Depends(get_coaching_service)]
PatternDetectorDep = Annotated[PatternDetector, Depends(get_pattern_detector)]
QualityScorerDep = Annotated[QualityScorer, Depends(get_quality_scorer)]
