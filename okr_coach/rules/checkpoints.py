"""Checkpoint catalogue.

Each phase has an ordered list of checkpoints; each checkpoint has a list
of criteria. A criterion matches a user message when enough of its
indicator phrases (or its regex) appear. Criteria with no indicators and no
regex need assistant inference and only complete through
CheckpointTracker.complete_checkpoint; criteria marked ``always`` are
satisfied by reaching the checkpoint at all.
"""

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from okr_coach.domain.models.phase import Phase


class CriterionRule(BaseModel):
    """How one completion criterion is recognised in a user message."""

    model_config = ConfigDict(frozen=True)

    text: str
    indicators: Tuple[str, ...] = ()
    pattern: Optional[str] = None
    min_matches: int = 1
    # Criterion is void when any of these appear (e.g. activity without outcome)
    exclude: Tuple[str, ...] = ()
    always: bool = False

    @property
    def needs_inference(self) -> bool:
        return not self.indicators and self.pattern is None and not self.always


class CheckpointDefinition(BaseModel):
    """Static definition of a checkpoint."""

    model_config = ConfigDict(frozen=True)

    id: str
    phase: Phase
    sequence_order: int
    name: str
    description: str
    criteria: Tuple[CriterionRule, ...]
    celebration: str
    next_step: str


def _c(text: str, *indicators: str, **kwargs) -> CriterionRule:
    return CriterionRule(text=text, indicators=tuple(indicators), **kwargs)


_OUTCOME_WORDS = ("achieve", "reach", "become", "improve", "increase", "decrease", "transform", "enable")
_TIME_WORDS = ("quarter", "q1", "q2", "q3", "q4", "month", "year", "90 days", "by end of")


CHECKPOINTS: Dict[Phase, List[CheckpointDefinition]] = {
    Phase.DISCOVERY: [
        CheckpointDefinition(
            id="discovery_context",
            phase=Phase.DISCOVERY,
            sequence_order=1,
            name="Context Gathered",
            description="Understand user role, team, and organizational context",
            criteria=(
                _c("User role/function identified", "manager", "director", "lead", "vp",
                   "engineer", "designer", "product", "marketing", "sales"),
                _c("Team size or scope mentioned", "team", "people", "engineers", "members",
                   "reports", pattern=r"\d+\s+(people|engineers|members)"),
                _c("Organizational context understood", "company", "organization", "startup",
                   "enterprise", "department"),
            ),
            celebration="Great! I understand your context.",
            next_step="Next: Let's explore what challenge you're facing.",
        ),
        CheckpointDefinition(
            id="discovery_challenge",
            phase=Phase.DISCOVERY,
            sequence_order=2,
            name="Challenge Identified",
            description="Articulate the core problem or opportunity to address",
            criteria=(
                _c("Problem or opportunity stated", "problem", "challenge", "issue",
                   "struggling", "difficult", "pain point", "bottleneck", "opportunity",
                   "potential", "could improve", "want to", "aim to", "goal"),
                _c("Why it matters explained", "because", "important", "matters", "impact",
                   "affects", "result in"),
                _c("Current state described", "currently", "right now", "today",
                   "at the moment", "existing"),
            ),
            celebration="Excellent! You've clearly articulated the challenge.",
            next_step="Next: What outcome do you want to achieve?",
        ),
        CheckpointDefinition(
            id="discovery_outcome",
            phase=Phase.DISCOVERY,
            sequence_order=3,
            name="Desired Outcome Articulated",
            description="Express the target result or change sought",
            criteria=(
                _c("Outcome stated (not activity)", *_OUTCOME_WORDS),
                _c("Success criteria mentioned", "success", "measure", "metric", "indicator",
                   "know we succeeded", "looks like"),
                _c("Timeframe indicated", *_TIME_WORDS),
            ),
            celebration="Nice! You're thinking in outcomes, not activities.",
            next_step="Next: Let's confirm the right altitude for this objective.",
        ),
        CheckpointDefinition(
            id="discovery_altitude",
            phase=Phase.DISCOVERY,
            sequence_order=4,
            name="Altitude Confirmed",
            description="Validate the organizational scope (team/initiative/project)",
            criteria=(
                _c("Scope level identified", "team", "initiative", "project", "department",
                   "company", "organization"),
                _c("Stakeholders clarified", "stakeholder", "partner", "customer", "user",
                   "executive", "leadership"),
                _c("Authority/influence confirmed", "control", "influence", "responsible for",
                   "authority", "decision"),
            ),
            celebration="Perfect! We've anchored at the right altitude.",
            next_step="Next: Final scope validation before crafting your objective.",
        ),
        CheckpointDefinition(
            id="discovery_scope",
            phase=Phase.DISCOVERY,
            sequence_order=5,
            name="Scope Validated",
            description="Confirm feasibility and boundaries",
            criteria=(
                _c("What's in scope clarified", "include", "cover", "focus on",
                   "scope includes", "within scope"),
                _c("What's out of scope clarified", "exclude", "not include", "out of scope",
                   "beyond scope", "won't cover"),
                _c("Feasibility confirmed", "achievable", "realistic", "feasible",
                   "can accomplish", "doable"),
            ),
            celebration="Fantastic! Discovery complete - ready to craft your objective!",
            next_step="Next Phase: Refinement - we'll craft your objective.",
        ),
    ],
    Phase.REFINEMENT: [
        CheckpointDefinition(
            id="refinement_draft",
            phase=Phase.REFINEMENT,
            sequence_order=1,
            name="Initial Draft Created",
            description="First version of objective written",
            criteria=(
                _c("Objective statement drafted", "objective:", "objective is", "goal:",
                   "goal is", "want to", "aim to"),
                _c("Outcome-focused language used", "achieve", "reach", "become", "improve",
                   "increase", "decrease", "transform"),
                _c("Timeframe included", "quarter", "q1", "q2", "q3", "q4", "month", "year",
                   "by end"),
            ),
            celebration="Great start! You've got the foundation.",
            next_step="Next: Let's check for outcome focus and measurability.",
        ),
        CheckpointDefinition(
            id="refinement_quality",
            phase=Phase.REFINEMENT,
            sequence_order=2,
            name="Quality Standards Met",
            description="Objective passes core quality checks",
            criteria=(
                _c("Outcome-focused (not activity)"),
                _c("Inspiring and motivating"),
                _c("Clear success visualization"),
            ),
            celebration="Excellent! Your objective is outcome-focused and inspiring.",
            next_step="Next: Anti-pattern check to catch common pitfalls.",
        ),
        CheckpointDefinition(
            id="refinement_antipatterns",
            phase=Phase.REFINEMENT,
            sequence_order=3,
            name="Anti-Patterns Cleared",
            description="Common OKR mistakes addressed",
            criteria=(
                _c("Not a project or activity"),
                _c("Not too vague or too prescriptive"),
                _c("Not outside sphere of influence"),
            ),
            celebration="Nice! You've avoided common OKR pitfalls.",
            next_step="Next: Final polish and you're done with refinement!",
        ),
        CheckpointDefinition(
            id="refinement_finalized",
            phase=Phase.REFINEMENT,
            sequence_order=4,
            name="Objective Finalized",
            description="Objective is polished and approved",
            criteria=(
                _c("User confirms satisfaction", "looks good", "that works", "yes", "correct",
                   "perfect", "ready", "approve", "finalize"),
                _c("Objective scores 7.5+ quality", always=True),
                _c("Ready for key results", "key results", "kr", "next step", "move on",
                   "ready"),
            ),
            celebration="Outstanding! Your objective is refined and ready!",
            next_step="Next Phase: Key Result Discovery - defining how to measure success.",
        ),
    ],
    Phase.KR_DISCOVERY: [
        CheckpointDefinition(
            id="kr_brainstorm",
            phase=Phase.KR_DISCOVERY,
            sequence_order=1,
            name="Metrics Brainstormed",
            description="Generate potential ways to measure the objective",
            criteria=(
                _c("4+ potential metrics identified", pattern=r"measure|metric|track|count",
                   min_matches=4),
                _c("Mix of leading and lagging indicators", "leading", "input", "activity",
                   "behavior", "lagging", "output", "outcome", "result"),
                _c("Quantitative focus", "%", "percent", "number of", "count", "total",
                   "from", "to"),
            ),
            celebration="Great brainstorming! Lots of measurement options.",
            next_step="Next: Let's narrow down to the 3-5 best key results.",
        ),
        CheckpointDefinition(
            id="kr_selection",
            phase=Phase.KR_DISCOVERY,
            sequence_order=2,
            name="Key Results Selected",
            description="Choose 3-5 most important metrics",
            criteria=(
                _c("3-5 key results identified", "choose", "select", "pick", "go with",
                   "focus on", "these",
                   pattern=r"\b[3-5]\s*(key results?|krs?)\b|\bkr\s*[3-5]\b"),
                _c("Collectively comprehensive"),
                _c("Each independent"),
            ),
            celebration="Excellent selection! These KRs comprehensively measure your objective.",
            next_step="Next: Let's make each KR specific and measurable.",
        ),
        CheckpointDefinition(
            id="kr_specificity",
            phase=Phase.KR_DISCOVERY,
            sequence_order=3,
            name="Specificity Achieved",
            description="Each KR has baseline, target, and metric definition",
            criteria=(
                _c("Baseline values established", "currently", "baseline", "starting", "from",
                   "today"),
                _c("Target values defined", "target", "goal", "to", "reach", "achieve"),
                _c("Measurement method clear", "measure", "track", "calculate", "count",
                   "monitor"),
            ),
            celebration="Perfect! Your KRs are specific and measurable.",
            next_step="Next: Quality check to ensure KRs are strong.",
        ),
        CheckpointDefinition(
            id="kr_quality",
            phase=Phase.KR_DISCOVERY,
            sequence_order=4,
            name="Quality Validated",
            description="All KRs pass quality standards",
            criteria=(
                _c("Each KR is quantitative"),
                _c("KRs are independent"),
                _c("Collectively comprehensive"),
            ),
            celebration="Excellent! Your key results meet quality standards.",
            next_step="Next: Final anti-pattern check before completion.",
        ),
        CheckpointDefinition(
            id="kr_finalized",
            phase=Phase.KR_DISCOVERY,
            sequence_order=5,
            name="Key Results Finalized",
            description="All KRs approved and ready",
            criteria=(
                _c("User confirms satisfaction", "looks good", "that works", "yes", "correct",
                   "perfect", "ready", "approve", "done"),
                _c("All KRs score 7.5+ quality"),
                _c("Ready for validation phase", "ready", "review", "validate", "next step"),
            ),
            celebration="Amazing! Your complete OKR is crafted and ready!",
            next_step="Next Phase: Validation - final review and export.",
        ),
    ],
    Phase.VALIDATION: [
        CheckpointDefinition(
            id="validation_review",
            phase=Phase.VALIDATION,
            sequence_order=1,
            name="Final Review Complete",
            description="Comprehensive quality assessment performed",
            criteria=(
                _c("Objective quality confirmed"),
                _c("All KRs quality confirmed"),
                _c("No anti-patterns present"),
            ),
            celebration="Great! Your OKR passes all quality checks.",
            next_step="Next: Stakeholder alignment check.",
        ),
        CheckpointDefinition(
            id="validation_alignment",
            phase=Phase.VALIDATION,
            sequence_order=2,
            name="Alignment Confirmed",
            description="Stakeholder and organizational alignment verified",
            criteria=(
                _c("Stakeholders identified", "stakeholder", "partner", "team", "leadership",
                   "manager", "executive"),
                _c("Alignment strategy discussed", "align", "buy-in", "support", "agreement",
                   "share with"),
                _c("Potential objections addressed", "concern", "objection", "pushback",
                   "resistance", "question"),
            ),
            celebration="Excellent! You've thought through stakeholder alignment.",
            next_step="Next: Export your OKR and you're done!",
        ),
        CheckpointDefinition(
            id="validation_export",
            phase=Phase.VALIDATION,
            sequence_order=3,
            name="OKR Exported",
            description="Final OKR exported and session completed",
            criteria=(
                _c("Export format chosen", "export", "download", "save", "format", "share",
                   "pdf", "json", "csv", "markdown", "text"),
                _c("OKR exported successfully"),
                _c("User satisfaction confirmed", "satisfied", "happy", "good", "done",
                   "complete", "finished"),
            ),
            celebration="Congratulations! You've created a high-quality OKR!",
            next_step="You're ready to share and track your OKR. Great work!",
        ),
    ],
    Phase.COMPLETED: [],
}

# Fraction of criteria that must match, and the floor on matched/total
COMPLETION_RATIO = 0.67
MIN_MATCH_SHARE = 0.5
STREAK_CELEBRATION_MIN = 3
BACKTRACK_AUTONOMY_PROMPT = "Would you like to revisit this, or should we continue forward?"
