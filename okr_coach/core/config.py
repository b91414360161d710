"""
Application settings management.

Settings are loaded from environment variables with .env file support.
Coaching thresholds, weights and message templates are loaded from YAML into
a CoachingConfig object that is built once at startup and passed into the
detector, scorer and phase controller.
All configuration is validated using Pydantic.
"""

from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from okr_coach.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment.

    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # ==========================================================================
    # Paths
    # ==========================================================================

    config_dir: Path = Field(
        default=Path("config"),
        description="Directory containing YAML configuration files",
    )
    data_dir: Path = Field(
        default=Path("data"), description="Directory for database and other data files"
    )
    coaching_config_path: Optional[Path] = Field(
        default=None,
        description="Override path to coaching_config.yaml",
    )

    # ==========================================================================
    # Database
    # ==========================================================================

    database_path: Path = Field(
        default=Path("data/okr_coach.db"), description="Path to SQLite database file"
    )

    # ==========================================================================
    # Logging
    # ==========================================================================

    log_sessions_to_keep: int = Field(
        default=5, ge=1, le=100, description="Number of session log files to retain"
    )

    # ==========================================================================
    # Server Configuration
    # ==========================================================================

    host: str = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")
    debug: bool = Field(default=False, description="Enable debug mode")


# ============================================================================
# Coaching Configuration (from YAML)
# ============================================================================


class DetectionConfig(BaseModel):
    """Anti-pattern detection constants."""

    threshold: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Pattern fires above this confidence"
    )
    regex_weight: float = Field(default=0.25, ge=0.0, le=1.0)
    regex_cap: float = Field(default=0.7, ge=0.0, le=1.0)
    keyword_weight: float = Field(default=0.18, ge=0.0, le=1.0)
    keyword_cap: float = Field(default=0.45, ge=0.0, le=1.0)
    context_bonus: float = Field(
        default=0.4, ge=0.0, le=1.0, description="Added when the context rule passes"
    )
    context_floor: float = Field(
        default=0.6,
        ge=0.0,
        le=1.0,
        description="Minimum confidence once the context rule passes with evidence",
    )
    severity_boost: Dict[str, float] = Field(
        default_factory=lambda: {
            "critical": 0.15,
            "high": 0.10,
            "medium": 0.05,
            "low": 0.0,
        }
    )
    max_text_length: int = Field(
        default=5000, ge=1, description="Input is truncated to this many characters"
    )


class ExampleSelectionConfig(BaseModel):
    """Weights for ranking reframing examples against the session context.

    Each component scores in [0, 1]; the weights must sum to 1.0.
    """

    industry_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    function_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    complexity_weight: float = Field(default=0.2, ge=0.0, le=1.0)
    phase_weight: float = Field(default=0.05, ge=0.0, le=1.0)
    quality_weight: float = Field(default=0.05, ge=0.0, le=1.0)
    min_relevance: float = Field(
        default=0.3, ge=0.0, le=1.0, description="Examples scoring at or below this are dropped"
    )
    max_examples: int = Field(default=2, ge=1, le=10)

    @model_validator(mode="after")
    def check_weight_sum(self) -> "ExampleSelectionConfig":
        total = (
            self.industry_weight
            + self.function_weight
            + self.complexity_weight
            + self.phase_weight
            + self.quality_weight
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"example selection weights must sum to 1.0, got {total:.3f}")
        return self


class ScoringConfig(BaseModel):
    """Quality rubric weights and limits.

    Every weight table is expressed in whole percentage points and must sum
    to exactly 100.
    """

    objective_weights: Dict[str, int] = Field(
        default_factory=lambda: {
            "outcome_orientation": 30,
            "inspiration": 20,
            "clarity": 15,
            "alignment": 15,
            "ambition": 20,
        }
    )
    scoped_objective_weights: Dict[str, int] = Field(
        default_factory=lambda: {
            "outcome_orientation": 28,
            "inspiration": 18,
            "clarity": 14,
            "alignment": 14,
            "ambition": 16,
            "scope_appropriateness": 10,
        }
    )
    key_result_weights: Dict[str, int] = Field(
        default_factory=lambda: {
            "quantification": 30,
            "specificity": 25,
            "ambition": 20,
            "relevance": 15,
            "timebound": 10,
        }
    )
    # (max words, clarity score) pairs, checked in order
    clarity_word_limits: List[List[int]] = Field(
        default_factory=lambda: [[10, 100], [12, 85], [15, 65], [20, 50], [30, 25]]
    )
    vague_word_penalty: int = Field(default=10, ge=0, le=100)
    vague_penalty_cap: int = Field(default=30, ge=0, le=100)
    context_keyword_bonus: int = Field(default=10, ge=0, le=100)
    reference_year: Optional[int] = Field(
        default=None,
        description="When set, deadlines before this year score as expired",
    )

    @model_validator(mode="after")
    def check_weight_sums(self) -> "ScoringConfig":
        """Reject weight tables that do not sum to 100."""
        for name in ("objective_weights", "scoped_objective_weights", "key_result_weights"):
            total = sum(getattr(self, name).values())
            if total != 100:
                raise ValueError(f"{name} must sum to 100, got {total}")
        return self

    def weight_tables(self) -> Dict[str, Dict[str, int]]:
        """All weight tables keyed by name."""
        return {
            "objective": self.objective_weights,
            "scoped_objective": self.scoped_objective_weights,
            "key_result": self.key_result_weights,
        }


class PhaseRulesConfig(BaseModel):
    """Phase transition thresholds."""

    objective_threshold: int = Field(default=70, ge=0, le=100)
    key_result_threshold: int = Field(default=70, ge=0, le=100)
    min_key_results: int = Field(default=2, ge=1, le=10)
    max_key_results: int = Field(default=4, ge=1, le=10)
    max_refinement_iterations: int = Field(default=3, ge=1, le=20)
    min_discovery_answers: int = Field(default=3, ge=1, le=20)
    blocking_severities: List[str] = Field(default_factory=lambda: ["high", "critical"])

    @model_validator(mode="after")
    def check_key_result_bounds(self) -> "PhaseRulesConfig":
        if self.min_key_results > self.max_key_results:
            raise ValueError("min_key_results cannot exceed max_key_results")
        return self


class TemplatesConfig(BaseModel):
    """Guidance text emitted by the phase controller."""

    transition_messages: Dict[str, str] = Field(
        default_factory=lambda: {
            "discovery": "Let's start by discovering what you want to achieve.",
            "refinement": "Great! Now let's refine your objective to make it more outcome-oriented.",
            "kr_discovery": "Excellent objective! Now let's create key results to measure your progress.",
            "validation": "Let's review your complete OKR set to ensure it's ready.",
            "completed": "Congratulations! Your OKR is complete and ready to use.",
        }
    )
    phase_focus: Dict[str, str] = Field(
        default_factory=lambda: {
            "discovery": "identifying meaningful business outcomes",
            "refinement": "clarity and outcome orientation",
            "kr_discovery": "measurable success indicators",
            "validation": "final quality assessment",
            "completed": "OKR implementation and tracking",
        }
    )
    phase_suggestions: Dict[str, List[str]] = Field(
        default_factory=lambda: {
            "discovery": [
                "Describe who benefits from this work and what changes for them",
                "Share the outcome you want to see by the end of the period",
            ],
            "refinement": [
                "Lead with an outcome verb rather than a deliverable",
                "Keep the objective under 12 words",
            ],
            "kr_discovery": [
                "Use the form: Increase [metric] from [baseline] to [target] by [date]",
                "Aim for 2 to 4 key results that each measure the objective",
            ],
            "validation": [
                "Review the full OKR set and say 'approve' when it is ready",
            ],
            "completed": [],
        }
    )
    diagnostics: Dict[str, str] = Field(
        default_factory=lambda: {
            "missing_detection": "Pattern analysis was unavailable for this message; staying in the current phase.",
            "malformed_detection": "Pattern analysis result was malformed; staying in the current phase.",
            "missing_objective_score": "No objective score is available yet; share a draft objective so it can be scored.",
            "malformed_objective_score": "The objective score was malformed; staying in the current phase.",
            "missing_key_result_scores": "No key results have been scored yet; propose 2 to 4 measurable key results.",
            "malformed_key_result_scores": "Key result scores were malformed; staying in the current phase.",
        }
    )
    backtrack_reframes: Dict[str, str] = Field(
        default_factory=lambda: {
            "new_insight": "Great insight! This shows you're thinking deeply about your OKR.",
            "missed_detail": "Good catch! Attention to detail like this leads to stronger OKRs.",
            "scope_change": "Excellent - adjusting scope now will save time later.",
            "user_request": "Absolutely - let's revisit that to make sure it's exactly right.",
        }
    )
    completed_summary: str = "This OKR is complete. You can review or export it, but no further changes are tracked."


class CoachingConfig(BaseModel):
    """
    Complete coaching configuration loaded from coaching_config.yaml.

    Built once at startup and passed by reference into PatternDetector,
    QualityScorer, PhaseController and CheckpointTracker.
    """

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    examples: ExampleSelectionConfig = Field(default_factory=ExampleSelectionConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    phases: PhaseRulesConfig = Field(default_factory=PhaseRulesConfig)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    finalization_phrases: List[str] = Field(
        default_factory=lambda: [
            "done",
            "finish",
            "complete",
            "finalize",
            "let's finalize",
            "ready",
            "looks good",
            "that works",
            "perfect",
            "approve",
            "approved",
            "lets go",
            "let's go",
            "ship it",
            "good to go",
            "move on",
            "move to key results",
        ]
    )
    approval_phrases: List[str] = Field(
        default_factory=lambda: [
            "approve",
            "approved",
            "i approve",
            "looks good",
            "finalize",
            "ship it",
            "good to go",
            "we're done",
            "all done",
            "confirm",
            "confirmed",
        ]
    )


def load_coaching_config(config_path: Optional[Path] = None) -> CoachingConfig:
    """
    Load coaching configuration from YAML file.

    Args:
        config_path: Path to coaching_config.yaml. If None, looks in
            settings.config_dir and then the project config/ directory.

    Returns:
        CoachingConfig with validated settings. Defaults are returned when no
        file is found or the file is empty.

    Raises:
        ConfigurationError: If the file exists but cannot be parsed or fails
            validation
    """
    if config_path is None:
        candidates = [
            settings.config_dir / "coaching_config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config" / "coaching_config.yaml",
        ]
        config_path = next((p for p in candidates if p.exists()), None)
        if config_path is None:
            return CoachingConfig()

    config_path = Path(config_path).resolve()

    if not config_path.exists():
        return CoachingConfig()

    try:
        with open(config_path) as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not config_data:
        return CoachingConfig()

    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Coaching config {config_path} must be a mapping")

    try:
        return CoachingConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid coaching config {config_path}: {e}") from e


# Global settings instance
settings = Settings()

# Global coaching config instance (default for services constructed without one)
coaching_config = load_coaching_config(settings.coaching_config_path)
