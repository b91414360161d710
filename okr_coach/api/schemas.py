"""
API request/response schemas.

Pydantic models for API validation and serialization. Domain models
(DetectionResult, QualityScore, PhaseDecision, ...) are returned as-is where
they already describe the payload.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from okr_coach.domain.models.checkpoint import Checkpoint
from okr_coach.domain.models.detection import (
    Dependency,
    DetectionResult,
    ReframingResponse,
)
from okr_coach.domain.models.phase import BacktrackReason, Phase, PhaseDecision
from okr_coach.domain.models.quality import (
    ObjectiveScope,
    OKRSetScore,
    QualityScore,
    ScoringContext,
)
from okr_coach.domain.models.session import ConversationMessage, SessionState


# ============ SESSION SCHEMAS ============


class SessionCreate(BaseModel):
    """Request to create a new coaching session."""

    user_id: str = Field(..., min_length=1, max_length=200)
    context: ScoringContext = Field(default_factory=ScoringContext)


class SessionResponse(BaseModel):
    """Session details response."""

    id: str
    user_id: str
    status: str
    phase: Phase
    progress: float
    suggestions: List[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class SessionStateResponse(SessionResponse):
    """Session details including the full coaching state."""

    state: SessionState


class SessionListResponse(BaseModel):
    """List of sessions response."""

    sessions: List[SessionResponse]
    total: int


class MessageListResponse(BaseModel):
    """Stored conversation for a session, oldest first."""

    session_id: str
    messages: List[ConversationMessage]


class OKRSetListResponse(BaseModel):
    """OKR sets saved when a session completed."""

    session_id: str
    okr_sets: List[Dict[str, Any]]


# ============ TURN SCHEMAS ============


class MessageRequest(BaseModel):
    """Request to process one user message."""

    text: str = Field(..., min_length=1, max_length=5000, description="User's message text")


class MessageResponse(BaseModel):
    """Response from processing one user message."""

    session_id: str
    response: str
    phase: Phase
    progress: float
    decision: PhaseDecision
    detection: DetectionResult
    objective_score: Optional[QualityScore] = None
    key_result_scores: List[QualityScore] = Field(default_factory=list)
    reframing: Optional[ReframingResponse] = None
    completed_checkpoint: Optional[Checkpoint] = None
    celebration: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "session_id": "7d0c8f8e-2f4f-4c1e-9c55-5f0f1f3d2a10",
                "response": "Current focus: clarity and outcome orientation.",
                "phase": "refinement",
                "progress": 0.25,
                "decision": {
                    "current_phase": "discovery",
                    "next_phase": "refinement",
                    "transitioned": True,
                    "event": "objective_identified",
                },
                "detection": {"detected": False, "patterns": [], "confidence": 0.0},
            }
        }


# ============ CHECKPOINT SCHEMAS ============


class CheckpointListResponse(BaseModel):
    session_id: str
    phase: Phase
    checkpoints: List[Checkpoint]


class BacktrackRequest(BaseModel):
    """Request to revisit an earlier phase."""

    phase: Phase
    reason: BacktrackReason = BacktrackReason.USER_REQUEST


# ============ ANALYSIS SCHEMAS ============


class PatternAnalysisRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
    context: ScoringContext = Field(default_factory=ScoringContext)


class PatternAnalysisResponse(BaseModel):
    detection: DetectionResult
    reframing: Optional[ReframingResponse] = None
    text_score: int = Field(ge=0, le=100)
    dependencies: List[Dependency] = Field(default_factory=list)


class ObjectiveAnalysisRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
    context: ScoringContext = Field(default_factory=ScoringContext)
    scope: Optional[ObjectiveScope] = None


class KeyResultAnalysisRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)
    objective: Optional[str] = Field(default=None, max_length=5000)
    context: ScoringContext = Field(default_factory=ScoringContext)


class OKRSetAnalysisRequest(BaseModel):
    objective: str = Field(..., min_length=1, max_length=5000)
    key_results: List[str] = Field(..., min_length=1, max_length=10)
    context: ScoringContext = Field(default_factory=ScoringContext)
    scope: Optional[ObjectiveScope] = None


class OKRSetAnalysisResponse(BaseModel):
    objective: QualityScore
    key_results: List[QualityScore]
    okr_set: OKRSetScore
