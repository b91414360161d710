"""Phase state machine tables.

The transition table is the single source of truth for which phase moves
are legal. PhaseController looks every move up here; there is no string
comparison of phase names anywhere else.
"""

from typing import Dict, List, Tuple

from okr_coach.domain.models.phase import BacktrackReason, Phase, PhaseEvent
from okr_coach.domain.models.quality import ObjectiveScope

TRANSITIONS: Dict[Tuple[Phase, PhaseEvent], Phase] = {
    # Forward
    (Phase.DISCOVERY, PhaseEvent.OBJECTIVE_IDENTIFIED): Phase.REFINEMENT,
    (Phase.REFINEMENT, PhaseEvent.OBJECTIVE_ACCEPTED): Phase.KR_DISCOVERY,
    (Phase.REFINEMENT, PhaseEvent.FINALIZATION_REQUESTED): Phase.KR_DISCOVERY,
    (Phase.REFINEMENT, PhaseEvent.ITERATION_LIMIT_REACHED): Phase.KR_DISCOVERY,
    (Phase.KR_DISCOVERY, PhaseEvent.KEY_RESULTS_ACCEPTED): Phase.VALIDATION,
    (Phase.KR_DISCOVERY, PhaseEvent.USER_CONFIRMED): Phase.VALIDATION,
    (Phase.VALIDATION, PhaseEvent.USER_APPROVED): Phase.COMPLETED,
    # Backtracking
    (Phase.REFINEMENT, PhaseEvent.REVISIT_DISCOVERY): Phase.DISCOVERY,
    (Phase.KR_DISCOVERY, PhaseEvent.REVISIT_DISCOVERY): Phase.DISCOVERY,
    (Phase.VALIDATION, PhaseEvent.REVISIT_DISCOVERY): Phase.DISCOVERY,
    (Phase.KR_DISCOVERY, PhaseEvent.REVISIT_REFINEMENT): Phase.REFINEMENT,
    (Phase.VALIDATION, PhaseEvent.REVISIT_REFINEMENT): Phase.REFINEMENT,
    (Phase.VALIDATION, PhaseEvent.REVISIT_KEY_RESULTS): Phase.KR_DISCOVERY,
}

REVISIT_EVENTS: Dict[Phase, PhaseEvent] = {
    Phase.DISCOVERY: PhaseEvent.REVISIT_DISCOVERY,
    Phase.REFINEMENT: PhaseEvent.REVISIT_REFINEMENT,
    Phase.KR_DISCOVERY: PhaseEvent.REVISIT_KEY_RESULTS,
}


# =============================================================================
# Message classification
# =============================================================================

QUESTION_WORD = r"\bhow\b"
NEGATION = r"\b(not|don't|dont|no|never|isn't|can't|cannot|won't)\b"
# Negations within this many words before a phrase cancel it
NEGATION_WINDOW = 3

# Checked in order; the first reason whose regex matches wins
BACKTRACK_PATTERNS: List[Tuple[BacktrackReason, str]] = [
    (
        BacktrackReason.SCOPE_CHANGE,
        r"\b(change the scope|different scope|broader|narrower|expand the scope"
        r"|narrow the scope|bigger picture)\b",
    ),
    (
        BacktrackReason.USER_REQUEST,
        r"\b(go back|revisit|start over|redo the|rethink the)\b",
    ),
    (
        BacktrackReason.MISSED_DETAIL,
        r"\b(forgot to mention|one more thing|i missed|should have mentioned"
        r"|left out)\b",
    ),
    (
        BacktrackReason.NEW_INSIGHT,
        r"^\s*actually\b|\b(just realized|i realized|i've realized|on second thought"
        r"|now that i think about it)\b",
    ),
]

# Topic -> target phase, checked in order
BACKTRACK_TOPICS: List[Tuple[str, Phase]] = [
    (r"\b(start over|from scratch|context|challenge|problem)\b", Phase.DISCOVERY),
    (r"\b(key results?|krs?|metrics?|measures?|targets?)\b", Phase.KR_DISCOVERY),
    (r"\b(objective|goal)\b", Phase.REFINEMENT),
]

# Sticky business-context flags set during discovery
STAKEHOLDER_PATTERN = (
    r"\b(customers?|users?|clients?|stakeholders?|employees?|patients?|partners?"
    r"|buyers?|members?|people|developers?|engineers?|team|audience|subscribers?"
    r"|shoppers?|students?|leadership|executives?)\b"
)
OUTCOME_PATTERN = (
    r"\b(increase|improve|reduce|achieve|grow|become|transform|enable|decrease"
    r"|accelerate|dominate|outcome|results?|impact|success|so that|in order to"
    r"|retention|revenue|satisfaction|adoption|faster)\b"
)
OBJECTIVE_LIKE_PATTERN = (
    r"\b(become|achieve|transform|revolutionize|dominate|establish|accelerate|maximize"
    r"|increase|improve|reduce|enhance|strengthen|grow|delight|deliver|enable)\b"
)


# =============================================================================
# Progress and scope
# =============================================================================

BASE_COMPLETION_MINUTES: Dict[Phase, int] = {
    Phase.DISCOVERY: 15,
    Phase.REFINEMENT: 20,
    Phase.KR_DISCOVERY: 25,
    Phase.VALIDATION: 10,
    Phase.COMPLETED: 0,
}
LOW_QUALITY_THRESHOLD = 70
LOW_QUALITY_EXTRA_MINUTES = 10

# Checked in order against the objective text
SCOPE_KEYWORDS: List[Tuple[ObjectiveScope, Tuple[str, ...]]] = [
    (ObjectiveScope.STRATEGIC, ("company", "organization", "business", "enterprise", "corporation")),
    (ObjectiveScope.DEPARTMENTAL, ("department", "division", "group", "function")),
    (ObjectiveScope.TEAM, ("team", "my", "our", "personal", "individual", "own")),
]
# Checked against the user's role when the text gives no signal
ROLE_SCOPE_KEYWORDS: List[Tuple[ObjectiveScope, Tuple[str, ...]]] = [
    (ObjectiveScope.STRATEGIC, ("ceo", "executive", "chief", "founder")),
    (ObjectiveScope.DEPARTMENTAL, ("vp", "director", "head of")),
    (ObjectiveScope.TEAM, ("manager", "lead")),
]
