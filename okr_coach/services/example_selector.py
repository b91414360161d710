"""
Relevance ranking for reframing examples.

Each example is scored against the session context on five components, each
in [0, 1], and combined with the weights in CoachingConfig.examples:

    - industry: 1.0 exact, 0.7 universal example, 0.4 related industry, 0.1 other
    - function: 1.0 match, 0.7 universal example, 0.2 other
    - complexity: team-size band; 1.0 same, 0.6 adjacent, 0.3 otherwise
    - phase: how useful the kind of example is in the current phase
    - quality: the rewrite's quality score / 100

A component with no context signal scores 0.5. Examples at or below
min_relevance are dropped; ties keep catalogue order.
"""

from typing import List, Optional, Sequence

import structlog

from okr_coach.core.config import CoachingConfig, coaching_config
from okr_coach.domain.models.detection import ReframingExample
from okr_coach.domain.models.phase import Phase
from okr_coach.domain.models.quality import ScoringContext
from okr_coach.rules.anti_patterns import (
    COMPLEXITY_ORDER,
    RELATED_INDUSTRY_CLUSTERS,
    TEAM_COMPLEXITY_BANDS,
)
from okr_coach.services.text_helpers import contains_word

log = structlog.get_logger(__name__)

NEUTRAL_SCORE = 0.5
HIGH_QUALITY_EXAMPLE = 85


def complexity_band(team_size: int) -> str:
    for max_size, band in TEAM_COMPLEXITY_BANDS:
        if team_size <= max_size:
            return band
    return COMPLEXITY_ORDER[-1]


def _mentions(names: Sequence[str], value: str) -> bool:
    return any(contains_word(name, value) or contains_word(value, name) for name in names)


class ExampleSelector:
    """Picks the most relevant before/after examples for a reframing reply."""

    def __init__(self, config: Optional[CoachingConfig] = None):
        self.config = config or coaching_config

    def select(
        self,
        examples: Sequence[ReframingExample],
        context: ScoringContext,
        phase: Optional[Phase] = None,
    ) -> List[ReframingExample]:
        selection = self.config.examples
        scored = [
            (self.relevance(example, context, phase), index, example)
            for index, example in enumerate(examples)
        ]
        ranked = sorted(scored, key=lambda item: (-item[0], item[1]))
        selected = [ex for score, _, ex in ranked if score > selection.min_relevance]

        log.debug(
            "examples_selected",
            candidates=len(examples),
            selected=len(selected[: selection.max_examples]),
            top_score=ranked[0][0] if ranked else None,
        )
        return selected[: selection.max_examples]

    def relevance(
        self,
        example: ReframingExample,
        context: ScoringContext,
        phase: Optional[Phase] = None,
    ) -> float:
        """Weighted relevance of one example, rounded to 4 places."""
        weights = self.config.examples
        score = (
            self.industry_score(example, context) * weights.industry_weight
            + self.function_score(example, context) * weights.function_weight
            + self.complexity_score(example, context) * weights.complexity_weight
            + self.phase_score(example, phase) * weights.phase_weight
            + example.quality_score / 100 * weights.quality_weight
        )
        return round(min(score, 1.0), 4)

    @staticmethod
    def industry_score(example: ReframingExample, context: ScoringContext) -> float:
        if not context.industry:
            return NEUTRAL_SCORE
        if not example.industries:
            return 0.7
        if _mentions(example.industries, context.industry):
            return 1.0
        for cluster in RELATED_INDUSTRY_CLUSTERS:
            if _mentions(cluster, context.industry) and any(
                _mentions(cluster, industry) for industry in example.industries
            ):
                return 0.4
        return 0.1

    @staticmethod
    def function_score(example: ReframingExample, context: ScoringContext) -> float:
        if not context.function:
            return NEUTRAL_SCORE
        if not example.functions:
            return 0.7
        if _mentions(example.functions, context.function):
            return 1.0
        return 0.2

    @staticmethod
    def complexity_score(example: ReframingExample, context: ScoringContext) -> float:
        if context.team_size is None or example.complexity not in COMPLEXITY_ORDER:
            return NEUTRAL_SCORE
        distance = abs(
            COMPLEXITY_ORDER.index(complexity_band(context.team_size))
            - COMPLEXITY_ORDER.index(example.complexity)
        )
        if distance == 0:
            return 1.0
        if distance == 1:
            return 0.6
        return 0.3

    @staticmethod
    def phase_score(example: ReframingExample, phase: Optional[Phase]) -> float:
        """Universal examples inspire early; specific and polished ones help later."""
        specific = bool(example.industries or example.functions)
        polished = example.quality_score >= HIGH_QUALITY_EXAMPLE
        if phase == Phase.DISCOVERY:
            return 0.7 if specific else 0.9
        if phase == Phase.REFINEMENT:
            return 0.9 if specific else 0.6
        if phase == Phase.KR_DISCOVERY:
            return 0.8 if polished else 0.6
        if phase == Phase.VALIDATION:
            return 0.9 if polished else 0.7
        return 0.6
