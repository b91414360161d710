"""Domain models package."""

from .checkpoint import BacktrackRecord, Checkpoint, CheckpointProgress
from .detection import (
    Dependency,
    DetectionResult,
    InterventionType,
    PatternMatch,
    ReframingExample,
    ReframingOutcome,
    ReframingResponse,
    ReframingStrategy,
    Severity,
)
from .phase import PHASE_ORDER, BacktrackReason, Phase, PhaseDecision, PhaseEvent
from .quality import (
    ObjectiveScope,
    OKRSetScore,
    QualityLevel,
    QualityScore,
    ScoringContext,
)
from .session import (
    ConversationMessage,
    QualityScores,
    Session,
    SessionState,
    SessionSummary,
    TurnResult,
)

__all__ = [
    "BacktrackRecord",
    "Checkpoint",
    "CheckpointProgress",
    "Dependency",
    "DetectionResult",
    "InterventionType",
    "PatternMatch",
    "ReframingExample",
    "ReframingOutcome",
    "ReframingResponse",
    "ReframingStrategy",
    "Severity",
    "PHASE_ORDER",
    "BacktrackReason",
    "Phase",
    "PhaseDecision",
    "PhaseEvent",
    "ObjectiveScope",
    "OKRSetScore",
    "QualityLevel",
    "QualityScore",
    "ScoringContext",
    "ConversationMessage",
    "QualityScores",
    "Session",
    "SessionState",
    "SessionSummary",
    "TurnResult",
]
