"""Session domain models for coaching lifecycle management.

Core Models:
    - QualityScores: Latest objective and key result scores for a session
    - SessionState: Mutable coaching state carried between messages
    - Session: Top-level persisted session entity
    - ConversationMessage: One stored user or assistant message
    - TurnResult: Everything produced by processing one user message
    - SessionSummary: Read-only view of a session for reporting

Session Lifecycle:
    1. Created in the discovery phase with discovery checkpoints
    2. State updates on every user message (phase, scores, checkpoints)
    3. Status moves active -> completed when the validation gate is passed

State Ownership:
    - PhaseController mutates phase, turns_in_phase, suggestions and progress
    - CheckpointTracker mutates the checkpoints field
    - CoachingService copies extracted OKR text and scores into the state
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from okr_coach.domain.models.checkpoint import Checkpoint, CheckpointProgress
from okr_coach.domain.models.detection import DetectionResult, ReframingResponse
from okr_coach.domain.models.phase import Phase, PhaseDecision
from okr_coach.domain.models.quality import OKRSetScore, QualityScore, ScoringContext


class QualityScores(BaseModel):
    """Latest scores for the OKR under construction."""

    objective: Optional[QualityScore] = None
    key_results: List[QualityScore] = Field(default_factory=list)
    okr_set: Optional[OKRSetScore] = None


class SessionState(BaseModel):
    """Mutable coaching state tracked across conversation turns."""

    phase: Phase = Phase.DISCOVERY
    quality_scores: QualityScores = Field(default_factory=QualityScores)
    suggestions: List[str] = Field(default_factory=list)
    progress: float = Field(default=0.0, ge=0.0, le=1.0)

    turns_in_phase: int = Field(
        default=0, ge=0, description="User messages evaluated since entering the phase"
    )
    discovery_answers: int = Field(
        default=0, ge=0, description="User answers given during discovery"
    )

    # Sticky business-context flags, set once and never cleared
    has_stakeholder: bool = False
    has_outcome: bool = False

    reframing_attempts: int = Field(
        default=0, ge=0, description="Consecutive messages that triggered a reframe"
    )
    context: ScoringContext = Field(default_factory=ScoringContext)

    objective_text: Optional[str] = None
    key_result_texts: List[str] = Field(default_factory=list)

    checkpoints: Optional[CheckpointProgress] = None


class Session(BaseModel):
    """Top-level coaching session entity.

    Status Transitions:
        - 'active' -> 'completed': validation approved by the user
        - 'active' -> 'abandoned': session deleted or given up
    """

    id: str
    user_id: str
    created_at: datetime
    updated_at: datetime
    state: SessionState = Field(default_factory=SessionState)
    status: str = Field(default="active")  # "active", "completed", "abandoned"


class ConversationMessage(BaseModel):
    """A single stored message."""

    id: Optional[int] = None
    session_id: str
    role: str = Field(description="user or assistant")
    content: str
    metadata: dict = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)


class TurnResult(BaseModel):
    """Output of processing one user message."""

    session_id: str
    detection: DetectionResult
    objective_score: Optional[QualityScore] = None
    key_result_scores: List[QualityScore] = Field(default_factory=list)
    decision: PhaseDecision
    reframing: Optional[ReframingResponse] = None
    completed_checkpoint: Optional[Checkpoint] = None
    celebration: Optional[str] = None
    response: str = Field(default="", description="Coaching reply assembled for the user")
    state: SessionState


class SessionSummary(BaseModel):
    """Read-only view of a session, available in every phase including completed."""

    session_id: str
    status: str
    phase: Phase
    progress: float = Field(ge=0.0, le=1.0)
    objective: Optional[str] = None
    objective_score: Optional[int] = None
    key_results: List[Dict[str, Any]] = Field(default_factory=list)
    okr_set: Optional[OKRSetScore] = None
    checkpoint_summary: str = ""
    estimated_minutes_remaining: int = 0
    backtrack_count: int = 0
    longest_streak: int = 0
