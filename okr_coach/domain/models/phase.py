"""Conversation phase models.

The coaching conversation moves through a closed, ordered set of phases:

    discovery -> refinement -> kr_discovery -> validation -> completed

Forward moves and backtracks are both driven by PhaseEvent values looked up
in an explicit transition table (see okr_coach.rules.phases).
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class Phase(str, Enum):
    """Stage of the guided OKR-creation conversation."""

    DISCOVERY = "discovery"
    REFINEMENT = "refinement"
    KR_DISCOVERY = "kr_discovery"
    VALIDATION = "validation"
    COMPLETED = "completed"

    @property
    def index(self) -> int:
        return PHASE_ORDER.index(self)

    def is_before(self, other: "Phase") -> bool:
        return self.index < other.index


PHASE_ORDER: List[Phase] = [
    Phase.DISCOVERY,
    Phase.REFINEMENT,
    Phase.KR_DISCOVERY,
    Phase.VALIDATION,
    Phase.COMPLETED,
]


class PhaseEvent(str, Enum):
    """Trigger that moves the conversation between phases."""

    OBJECTIVE_IDENTIFIED = "objective_identified"
    OBJECTIVE_ACCEPTED = "objective_accepted"
    FINALIZATION_REQUESTED = "finalization_requested"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"
    KEY_RESULTS_ACCEPTED = "key_results_accepted"
    USER_CONFIRMED = "user_confirmed"
    USER_APPROVED = "user_approved"
    REVISIT_DISCOVERY = "revisit_discovery"
    REVISIT_REFINEMENT = "revisit_refinement"
    REVISIT_KEY_RESULTS = "revisit_key_results"


class BacktrackReason(str, Enum):
    """Why the user is returning to an earlier phase."""

    NEW_INSIGHT = "new_insight"
    MISSED_DETAIL = "missed_detail"
    SCOPE_CHANGE = "scope_change"
    USER_REQUEST = "user_request"


class PhaseDecision(BaseModel):
    """Outcome of evaluating one user message against the phase rules."""

    current_phase: Phase = Field(description="Phase before the message was evaluated")
    next_phase: Phase = Field(description="Phase after the message was evaluated")
    transitioned: bool = False
    event: Optional[PhaseEvent] = None
    backtrack_reason: Optional[BacktrackReason] = None
    guidance: str = ""
    suggestions: List[str] = Field(default_factory=list)
    diagnostics: List[str] = Field(default_factory=list)
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
