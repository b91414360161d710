"""Anti-pattern detection models.

Core Models:
    - PatternMatch: One anti-pattern that fired, with its confidence
    - ReframingStrategy: Question bank and before/after examples for a pattern
    - DetectionResult: Everything detected in one piece of text
    - ReframingResponse: Coaching reply built from a DetectionResult
    - ReframingOutcome: Whether a rewrite removed the original problem

DetectionResult is recomputed for every message and never mutated.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Severity(str, Enum):
    """How strongly an anti-pattern undermines an OKR."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class InterventionType(str, Enum):
    """Coaching move suggested for a detected pattern."""

    ACTIVITY_TO_OUTCOME = "activity_to_outcome"
    METRIC_EDUCATION = "metric_education"
    AMBITION_CALIBRATION = "ambition_calibration"
    CLARITY_IMPROVEMENT = "clarity_improvement"
    ALIGNMENT_CHECK = "alignment_check"


class ReframingExample(BaseModel):
    """A before/after rewrite illustrating a reframing."""

    model_config = ConfigDict(frozen=True)

    before: str
    after: str
    context: str = Field(default="", description="Industry or function the example fits")
    explanation: str = ""
    # Selection metadata; empty industries or functions means the example fits any
    industries: Tuple[str, ...] = ()
    functions: Tuple[str, ...] = ()
    complexity: str = Field(default="medium", description="Team scale: small, medium or large")
    quality_score: int = Field(default=80, ge=0, le=100)


class ReframingStrategy(BaseModel):
    """Question bank and examples for steering away from one anti-pattern."""

    model_config = ConfigDict(frozen=True)

    name: str
    technique: str = Field(
        description="five_whys, outcome_transformation, question_cascade or value_exploration"
    )
    questions: List[str] = Field(min_length=1)
    examples: List[ReframingExample] = Field(min_length=1)
    success_criteria: List[str] = Field(default_factory=list)
    max_attempts: int = Field(default=3, ge=1)


class PatternMatch(BaseModel):
    """One anti-pattern that fired on the input text."""

    id: str
    name: str
    confidence: float = Field(ge=0.0, le=1.0)
    severity: Severity
    intervention: InterventionType
    description: str = ""


class DetectionResult(BaseModel):
    """Result of scanning a text against the anti-pattern catalogue.

    ``patterns`` keeps detection order; it is never re-sorted by confidence.
    ``confidence`` is the maximum of the individual pattern confidences.
    """

    detected: bool = False
    patterns: List[PatternMatch] = Field(default_factory=list)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    severity: Optional[Severity] = None
    suggested_interventions: List[InterventionType] = Field(default_factory=list)
    reframing_strategy: Optional[ReframingStrategy] = None

    @model_validator(mode="after")
    def check_detected_matches_patterns(self) -> "DetectionResult":
        """An empty pattern list always means nothing was detected."""
        if not self.patterns:
            self.detected = False
            self.reframing_strategy = None
            self.confidence = 0.0
            self.severity = None
        else:
            self.detected = True
        return self

    @property
    def pattern_ids(self) -> List[str]:
        return [p.id for p in self.patterns]

    def has_pattern(self, pattern_id: str) -> bool:
        return pattern_id in self.pattern_ids

    def get_pattern(self, pattern_id: str) -> Optional[PatternMatch]:
        return next((p for p in self.patterns if p.id == pattern_id), None)


class ReframingResponse(BaseModel):
    """Coaching reply for the dominant detected pattern."""

    strategy: ReframingStrategy
    question: str
    suggestion: str
    examples: List[ReframingExample] = Field(default_factory=list)
    follow_up_questions: List[str] = Field(default_factory=list)
    expected_outcome: str = ""
    previous_attempts: int = 0
    technique: str = ""


class ReframingOutcome(BaseModel):
    """Comparison of an original text with the user's rewrite."""

    success: bool
    before_score: int
    after_score: int
    before_confidence: float
    after_confidence: float
    intervention: Optional[InterventionType] = None


class Dependency(BaseModel):
    """Something outside the team's control that an objective relies on."""

    type: str = Field(
        description="customer_behavior, other_team, market_dynamics or external_factor"
    )
    description: str
    controllability: str = Field(description="full, high, medium, low or none")
