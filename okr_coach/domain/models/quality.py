"""Quality scoring models for Objectives, Key Results and full OKR sets.

Core Models:
    - QualityScore: Weighted rubric result for one Objective or Key Result
    - OKRSetScore: Aggregate score for an objective with its key results
    - ScoringContext: Typed organisational context passed to the scorer

Dimension scores are integers in [0, 100]. ``overall`` is the weighted sum
of the dimensions using a weight table that sums to exactly 100.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class QualityLevel(str, Enum):
    """Qualitative band for an overall score."""

    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    NEEDS_WORK = "needs_work"
    POOR = "poor"


class ObjectiveScope(str, Enum):
    """Organisational altitude an objective is written for."""

    STRATEGIC = "strategic"
    DEPARTMENTAL = "departmental"
    TEAM = "team"
    INITIATIVE = "initiative"
    PROJECT = "project"


class QualityScore(BaseModel):
    """Rubric result for a single Objective or Key Result."""

    overall: int = Field(ge=0, le=100)
    dimensions: Dict[str, int] = Field(default_factory=dict)
    feedback: List[str] = Field(default_factory=list)
    improvements: List[str] = Field(default_factory=list)
    confidence: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Share of dimensions that had enough signal to score",
    )
    level: QualityLevel = QualityLevel.POOR

    @field_validator("dimensions")
    @classmethod
    def check_dimension_range(cls, v: Dict[str, int]) -> Dict[str, int]:
        for name, value in v.items():
            if not 0 <= value <= 100:
                raise ValueError(f"dimension {name} out of range: {value}")
        return v


class OKRSetScore(BaseModel):
    """Aggregate quality of an objective together with its key results."""

    overall: int = Field(ge=0, le=100)
    coherence: int = Field(ge=0, le=100)
    completeness: int = Field(ge=0, le=100)
    balance: int = Field(ge=0, le=100)
    achievability: int = Field(ge=0, le=100)
    level: QualityLevel = QualityLevel.POOR


class ScoringContext(BaseModel):
    """Organisational context for scoring.

    Every field is optional; a missing field means "no signal" and the
    dependent rule scores neutrally.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    industry: Optional[str] = None
    function: Optional[str] = None
    timeframe: Optional[str] = None
    team_size: Optional[int] = Field(default=None, ge=1)
    requires_cross_functional: Optional[bool] = None

    @field_validator("industry", "function", "timeframe", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    @classmethod
    def coerce(
        cls, value: Union["ScoringContext", Mapping[str, Any], None]
    ) -> "ScoringContext":
        """Build a context from a mapping, an existing context or None.

        Raises:
            pydantic.ValidationError: If a mapping holds values of the wrong type
        """
        if value is None:
            return cls()
        if isinstance(value, ScoringContext):
            return value
        return cls.model_validate(dict(value))
