"""Checkpoint models for fine-grained progress within a phase.

A checkpoint is created when its phase is entered. Its identity fields
(id, phase, name, description, sequence_order, completion_criteria) are
frozen; only the completion fields change as the conversation proceeds.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from okr_coach.domain.models.phase import BacktrackReason, Phase


class Checkpoint(BaseModel):
    """Phase-scoped completion milestone."""

    id: str = Field(frozen=True)
    phase: Phase = Field(frozen=True)
    name: str = Field(frozen=True)
    description: str = Field(default="", frozen=True)
    sequence_order: int = Field(ge=1, frozen=True)
    completion_criteria: List[str] = Field(default_factory=list, frozen=True)

    is_complete: bool = False
    completion_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    evidence_collected: List[str] = Field(default_factory=list)
    completed_at: Optional[datetime] = None

    def reset(self) -> None:
        """Return the checkpoint to its incomplete state."""
        self.is_complete = False
        self.completion_confidence = 0.0
        self.evidence_collected = []
        self.completed_at = None


class BacktrackRecord(BaseModel):
    """One backtrack, kept for the session's history."""

    from_checkpoint: str
    to_checkpoint: str
    reason: BacktrackReason
    timestamp: datetime = Field(default_factory=datetime.now)
    from_phase: Optional[Phase] = None
    to_phase: Optional[Phase] = None


class CheckpointProgress(BaseModel):
    """Checkpoint state for the current phase of one session.

    Checkpoints are kept ordered by ``sequence_order``. Streak and backtrack
    counters carry over when the phase changes.
    """

    phase: Phase
    checkpoints: List[Checkpoint] = Field(default_factory=list)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    backtrack_count: int = Field(default=0, ge=0)
    backtrack_history: List[BacktrackRecord] = Field(default_factory=list)

    @property
    def completed_count(self) -> int:
        return sum(1 for cp in self.checkpoints if cp.is_complete)

    @property
    def completion_percentage(self) -> float:
        if not self.checkpoints:
            return 100.0 if self.phase == Phase.COMPLETED else 0.0
        return self.completed_count / len(self.checkpoints) * 100

    @property
    def current_checkpoint(self) -> Optional[Checkpoint]:
        """First incomplete checkpoint in sequence order."""
        return next((cp for cp in self.checkpoints if not cp.is_complete), None)

    def get(self, checkpoint_id: str) -> Optional[Checkpoint]:
        return next((cp for cp in self.checkpoints if cp.id == checkpoint_id), None)
