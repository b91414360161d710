# noqa
from okr_coach.services.checkpoint_tracker import CheckpointTracker
from okr_coach.services.coaching_service import CoachingService
from okr_coach.services.pattern_detector import PatternDetector
from okr_coach.services.phase_controller import PhaseController
from okr_coach.services.quality_scorer import QualityScorer

__all__ = [
    "CheckpointTracker",
    "CoachingService",
    "PatternDetector",
    "PhaseController",
    "QualityScorer",
]
