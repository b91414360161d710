"""
Anti-pattern detection over free text.

Scans a message against the rule catalogue in okr_coach.rules.anti_patterns
and returns a DetectionResult. Each rule is scored independently; all rules
above the detection threshold are reported in catalogue order.

Per-rule confidence:
    - gates: confidence 0 if a suppress_if regex matches, or if the rule has
      requires_any regexes and none of them match
    - regex evidence: min(hits * regex_weight, regex_cap)
    - keyword evidence: min(hits * keyword_weight, keyword_cap)
    - no evidence at all: confidence 0
    - context rule passes: max(base + context_bonus, context_floor)
    - plus a severity boost, capped at 1.0

The result-level confidence is the maximum pattern confidence.
"""

from typing import Any, List, Mapping, Optional, Sequence, Union

import structlog

from okr_coach.core.config import CoachingConfig, coaching_config
from okr_coach.domain.models.detection import (
    Dependency,
    DetectionResult,
    InterventionType,
    PatternMatch,
    ReframingOutcome,
    ReframingResponse,
    ReframingStrategy,
)
from okr_coach.domain.models.phase import Phase
from okr_coach.domain.models.quality import ScoringContext
from okr_coach.rules.anti_patterns import (
    ACTIVITY_EXTRACTION_PATTERN,
    ANTI_PATTERN_RULES,
    CONDITIONAL_CLAUSE_PATTERN,
    DEPENDENCY_RULES,
    EXPECTED_OUTCOMES,
    FOLLOW_UP_QUESTIONS,
    GENERIC_REFRAMING_QUESTION,
    TEXT_SCORE_ACTIVITY_WORDS,
    TEXT_SCORE_OUTCOME_WORDS,
    TEXT_SCORE_VAGUE_WORDS,
    AntiPatternRule,
    ContextRule,
)
from okr_coach.services.example_selector import ExampleSelector
from okr_coach.services.text_helpers import (
    clamp,
    compile_pattern,
    count_matches,
    count_words_present,
    matches,
    normalize_text,
)

log = structlog.get_logger(__name__)

ContextInput = Union[ScoringContext, Mapping[str, Any], None]

# Reframed text succeeds when its detection confidence drops below this share
REFRAMING_CONFIDENCE_RATIO = 0.7
REFRAMING_SCORE_GAIN = 10


def coerce_context(context: ContextInput) -> ScoringContext:
    """Validate caller context at the boundary, falling back to an empty context."""
    try:
        return ScoringContext.coerce(context)
    except (ValueError, TypeError) as e:
        # pydantic.ValidationError is a ValueError
        log.warning("scoring_context_invalid", error=str(e))
        return ScoringContext()


class PatternDetector:
    """
    Detects OKR anti-patterns and builds reframing guidance.

    Pure and deterministic: the rule table and configuration are fixed at
    construction, and no state is kept between calls.

    Usage:
        detector = PatternDetector()
        result = detector.detect_patterns("Launch the new mobile app")
        if result.detected:
            reply = detector.generate_reframing_response(result, text)
    """

    def __init__(
        self,
        config: Optional[CoachingConfig] = None,
        rules: Optional[Sequence[AntiPatternRule]] = None,
    ):
        self.config = config or coaching_config
        self.rules: List[AntiPatternRule] = list(
            rules if rules is not None else ANTI_PATTERN_RULES
        )
        self._rules_by_id = {rule.id: rule for rule in self.rules}
        self.example_selector = ExampleSelector(self.config)

    # ==========================================================================
    # Detection
    # ==========================================================================

    def detect_patterns(self, text: Any, context: ContextInput = None) -> DetectionResult:
        """Scan text against every rule.

        Never raises for user input: None is treated as empty and any other
        non-string value is converted with str(). ``context`` is accepted for
        parity with the scorer; the current rule catalogue does not use it.
        """
        normalized = normalize_text(text, self.config.detection.max_text_length)
        if not normalized.strip():
            return DetectionResult()

        patterns: List[PatternMatch] = []
        for rule in self.rules:
            confidence = self.rule_confidence(rule, normalized)
            if confidence > self.config.detection.threshold:
                patterns.append(
                    PatternMatch(
                        id=rule.id,
                        name=rule.name,
                        confidence=confidence,
                        severity=rule.severity,
                        intervention=rule.intervention,
                        description=rule.description,
                    )
                )

        if not patterns:
            return DetectionResult()

        dominant = self._dominant_pattern(patterns)
        interventions: List[InterventionType] = []
        for p in patterns:
            if p.intervention not in interventions:
                interventions.append(p.intervention)

        result = DetectionResult(
            patterns=patterns,
            confidence=max(p.confidence for p in patterns),
            severity=max((p.severity for p in patterns), key=lambda s: s.rank),
            suggested_interventions=interventions,
            reframing_strategy=self._rules_by_id[dominant.id].strategy,
        )

        log.debug(
            "patterns_detected",
            pattern_ids=result.pattern_ids,
            dominant=dominant.id,
            severity=result.severity.value if result.severity else None,
            confidence=result.confidence,
        )
        return result

    def rule_confidence(self, rule: AntiPatternRule, text: str) -> float:
        """Confidence in [0, 1] that ``rule`` applies to already-normalized text."""
        detection = self.config.detection

        if not self.rule_gates_open(rule, text):
            return 0.0

        regex_hits = sum(count_matches(p, text) for p in rule.detection_patterns)
        keyword_hits = count_words_present(rule.keyword_triggers, text)
        if regex_hits == 0 and keyword_hits == 0:
            return 0.0

        confidence = min(regex_hits * detection.regex_weight, detection.regex_cap)
        confidence += min(keyword_hits * detection.keyword_weight, detection.keyword_cap)

        if self.context_rule_passes(rule.context_rule, text):
            confidence = max(confidence + detection.context_bonus, detection.context_floor)

        confidence += detection.severity_boost.get(rule.severity.value, 0.0)
        return round(min(confidence, 1.0), 4)

    @staticmethod
    def rule_gates_open(rule: AntiPatternRule, text: str) -> bool:
        if any(matches(p, text) for p in rule.suppress_if):
            return False
        if rule.requires_any and not any(matches(p, text) for p in rule.requires_any):
            return False
        return True

    @staticmethod
    def context_rule_passes(rule: ContextRule, text: str) -> bool:
        if not all(matches(p, text) for p in rule.all_of):
            return False
        if rule.any_of and not any(matches(p, text) for p in rule.any_of):
            return False
        if any(matches(p, text) for p in rule.none_of):
            return False
        if rule.count_thresholds:
            counts = {name: count_matches(p, text) for name, p in rule.counts.items()}
            return any(
                all(counts.get(name, 0) >= minimum for name, minimum in threshold.items())
                for threshold in rule.count_thresholds
            )
        return True

    @staticmethod
    def _dominant_pattern(patterns: Sequence[PatternMatch]) -> PatternMatch:
        """Highest severity, then highest confidence, then earliest detected."""
        _, dominant = min(
            enumerate(patterns),
            key=lambda item: (-item[1].severity.rank, -item[1].confidence, item[0]),
        )
        return dominant

    # ==========================================================================
    # Reframing
    # ==========================================================================

    def generate_reframing_response(
        self,
        result: DetectionResult,
        text: Any,
        context: ContextInput = None,
        previous_attempts: int = 0,
        phase: Optional[Phase] = None,
    ) -> Optional[ReframingResponse]:
        """Build the coaching reply for the dominant pattern, or None if nothing fired.

        Examples are ranked by ExampleSelector against ``context`` and ``phase``.
        """
        if not result.detected or result.reframing_strategy is None:
            return None

        ctx = coerce_context(context)
        original = normalize_text(text, self.config.detection.max_text_length)
        strategy = result.reframing_strategy
        dominant = self._dominant_pattern(result.patterns)

        question = self._select_question(strategy, original, previous_attempts, ctx)
        examples = self.example_selector.select(strategy.examples, ctx, phase)

        suggestion = question
        if examples:
            first = examples[0]
            suggestion += (
                f'\n\nFor example, instead of:\n"{first.before}"'
                f'\n\nConsider:\n"{first.after}"\n\n{first.explanation}'
            )

        return ReframingResponse(
            strategy=strategy,
            question=question,
            suggestion=suggestion,
            examples=examples,
            follow_up_questions=list(FOLLOW_UP_QUESTIONS.get(dominant.intervention, [])),
            expected_outcome=EXPECTED_OUTCOMES.get(
                dominant.intervention, "User provides more outcome-focused response"
            ),
            previous_attempts=previous_attempts,
            technique=strategy.technique,
        )

    def _select_question(
        self,
        strategy: ReframingStrategy,
        text: str,
        attempts: int,
        context: ScoringContext,
    ) -> str:
        if attempts < 0 or attempts >= len(strategy.questions):
            return GENERIC_REFRAMING_QUESTION

        activity_match = compile_pattern(ACTIVITY_EXTRACTION_PATTERN).search(text)
        activity = activity_match.group(0).strip() if activity_match else "this initiative"

        return (
            strategy.questions[attempts]
            .replace("{activity}", activity)
            .replace("{industry}", context.industry or "your industry")
            .replace("{function}", context.function or "your role")
        )

    def evaluate_reframing_success(
        self, original: Any, reframed: Any, context: ContextInput = None
    ) -> ReframingOutcome:
        """Compare a rewrite with the original text."""
        before = self.detect_patterns(original, context)
        after = self.detect_patterns(reframed, context)
        before_score = self.calculate_text_score(original)
        after_score = self.calculate_text_score(reframed)

        success = (
            after.confidence < before.confidence * REFRAMING_CONFIDENCE_RATIO
            or after_score > before_score + REFRAMING_SCORE_GAIN
        )

        log.info(
            "reframing_evaluated",
            success=success,
            before_score=before_score,
            after_score=after_score,
        )

        return ReframingOutcome(
            success=success,
            before_score=before_score,
            after_score=after_score,
            before_confidence=before.confidence,
            after_confidence=after.confidence,
            intervention=before.patterns[0].intervention if before.patterns else None,
        )

    def calculate_text_score(self, text: Any) -> int:
        """Quick outcome-vs-activity score in [0, 100] used to judge rewrites."""
        normalized = normalize_text(text, self.config.detection.max_text_length)
        score = 50
        score += count_words_present(TEXT_SCORE_OUTCOME_WORDS, normalized) * 10
        score -= count_words_present(TEXT_SCORE_ACTIVITY_WORDS, normalized) * 8
        if any(ch.isdigit() for ch in normalized):
            score += 15
        score -= count_words_present(TEXT_SCORE_VAGUE_WORDS, normalized) * 5
        return int(clamp(score))

    # ==========================================================================
    # Dependencies
    # ==========================================================================

    def extract_dependencies(self, text: Any) -> List[Dependency]:
        """List factors outside the team's control that the text relies on."""
        normalized = normalize_text(text, self.config.detection.max_text_length)
        dependencies: List[Dependency] = []

        for dep_type, description, controllability, patterns in DEPENDENCY_RULES:
            if all(matches(p, normalized) for p in patterns):
                dependencies.append(
                    Dependency(
                        type=dep_type,
                        description=description,
                        controllability=controllability,
                    )
                )

        for clause in compile_pattern(CONDITIONAL_CLAUSE_PATTERN).finditer(normalized):
            snippet = clause.group(0).strip()
            if any(dep.type in snippet for dep in dependencies):
                continue
            dependencies.append(
                Dependency(
                    type="external_factor",
                    description=f"Conditional dependency: {snippet[:80]}",
                    controllability="low",
                )
            )

        return dependencies
