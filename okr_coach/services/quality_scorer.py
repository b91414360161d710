"""
Quality rubric scoring for Objectives, Key Results and full OKR sets.

Each dimension is an integer in [0, 100]. A dimension with no signal in the
text scores neutrally (50 or 75 depending on the rule) rather than 0, and
the share of dimensions that did have signal drives ``confidence``.

The overall score is the weighted sum of the dimensions with weights in
whole percentage points, so it is computed in integer arithmetic and
rounded half up.
"""

from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

import structlog

from okr_coach.core.config import CoachingConfig, coaching_config
from okr_coach.domain.models.quality import (
    ObjectiveScope,
    OKRSetScore,
    QualityLevel,
    QualityScore,
    ScoringContext,
)
from okr_coach.rules.quality import (
    AMBITION_TIERS,
    BUSINESS_INDICATORS,
    EMPTY_TEXT_FEEDBACK,
    FUNCTION_KEYWORDS,
    INCREASE_BANDS,
    INCREASE_UNREALISTIC_SCORE,
    INDUSTRY_KEYWORDS,
    INSPIRATION_TIERS,
    KEY_RESULT_FEEDBACK,
    KEY_RESULT_IMPROVEMENTS,
    KR_BASELINE,
    KR_DOMAINS,
    KR_EXPLICIT_DEADLINES,
    KR_FREQUENCY,
    KR_FROM_NUMBER,
    KR_IMPLICIT_FREQUENCY,
    KR_INCREASE_VERBS,
    KR_METRIC,
    KR_REDUCE_VERBS,
    KR_SOURCE,
    KR_TARGET,
    KR_TIME_METRIC,
    KR_TO_NUMBER,
    KR_UNITS,
    KR_VAGUE_QUANTIFIERS,
    KR_VAGUE_TIMEFRAMES,
    LAGGING_INDICATOR,
    LEADING_INDICATOR,
    MAINTENANCE_WORDS,
    NO_RATIO_AMBITION_SCORE,
    OBJECTIVE_ACTIVITY_VERBS,
    OBJECTIVE_FEEDBACK,
    OBJECTIVE_IMPROVEMENTS,
    OBJECTIVE_OUTCOME_VERBS,
    OKR_SET_WEIGHTS,
    QUALITY_LEVEL_THRESHOLDS,
    REDUCE_BANDS,
    REDUCE_PLATEAU_END,
    REDUCE_PLATEAU_END_TIME,
    REDUCE_UNREALISTIC_SCORE,
    RELATED_DOMAINS,
    SCOPE_ADJUSTMENTS,
    SCOPE_BASE_SCORE,
    SCOPE_INDICATORS,
    STOP_WORDS,
    STRATEGIC_INDICATORS,
    TEAM_CONTROL_MAX_SIZE,
    UNREALISTIC_TARGET_FEEDBACK,
    VAGUE_WORDS,
    WEAK_ALIGNMENT_WORDS,
)
from okr_coach.services.pattern_detector import ContextInput, coerce_context
from okr_coach.services.text_helpers import (
    clamp,
    compile_pattern,
    count_matches,
    count_substrings_present,
    count_words_present,
    matches,
    normalize_text,
    parse_number,
    word_count,
)

log = structlog.get_logger(__name__)

ScopeInput = Union[ObjectiveScope, str, None]

# Confidence reported when every dimension scored neutrally / with full signal
BASE_CONFIDENCE = 0.3
SIGNAL_CONFIDENCE = 0.6

_TERM_PATTERN = r"[a-z0-9][a-z0-9'-]*"


def quality_level(score: float) -> QualityLevel:
    """Map an overall score to its QualityLevel band."""
    for threshold, level in QUALITY_LEVEL_THRESHOLDS:
        if score >= threshold:
            return level
    return QualityLevel.POOR


def weighted_overall(dimensions: Dict[str, int], weights: Dict[str, int]) -> int:
    """Weighted sum of dimensions with integer weights summing to 100, rounded half up."""
    total = sum(dimensions[name] * weight for name, weight in weights.items())
    return (total + 50) // 100


def _interpolate(value: float, bands: Sequence[Tuple[float, float]]) -> float:
    """Piecewise-linear lookup; below the first point returns its score."""
    if value <= bands[0][0]:
        return bands[0][1]
    for (x0, y0), (x1, y1) in zip(bands, bands[1:]):
        if value <= x1:
            return y0 + (y1 - y0) * (value - x0) / (x1 - x0)
    return bands[-1][1]


def _signal_confidence(signaled: int, total: int) -> float:
    return round(BASE_CONFIDENCE + SIGNAL_CONFIDENCE * signaled / total, 2)


def _threshold_messages(
    dimensions: Dict[str, int], table: Sequence[Tuple[str, int, str]]
) -> List[str]:
    return [
        message
        for name, threshold, message in table
        if name in dimensions and dimensions[name] < threshold
    ]


class QualityScorer:
    """
    Scores objectives and key results against the quality rubric.

    Stateless: every call is a pure function of its arguments and the
    configuration passed at construction.
    """

    def __init__(self, config: Optional[CoachingConfig] = None):
        self.config = config or coaching_config

    @staticmethod
    def quality_level(score: float) -> QualityLevel:
        return quality_level(score)

    # ==========================================================================
    # Objectives
    # ==========================================================================

    def score_objective(
        self,
        text: Any,
        context: ContextInput = None,
        scope: ScopeInput = None,
    ) -> QualityScore:
        """Score an objective on outcome orientation, inspiration, clarity,
        alignment and ambition, plus scope appropriateness when a scope is given.

        Args:
            text: Objective text. None or blank text scores 0 with feedback.
            context: ScoringContext or mapping with industry, function, team_size.
            scope: Organisational altitude the objective is written for.

        Returns:
            QualityScore with integer dimensions and overall
        """
        scoring = self.config.scoring
        ctx = coerce_context(context)
        objective_scope = self._coerce_scope(scope)
        weights = (
            scoring.scoped_objective_weights
            if objective_scope is not None
            else scoring.objective_weights
        )

        normalized = normalize_text(text, self.config.detection.max_text_length).strip()
        if not normalized:
            return self._empty_score(weights)

        outcome, outcome_signal = self._outcome_orientation(normalized)
        inspiration, inspiration_signal = self._inspiration(normalized)
        alignment, alignment_signal = self._alignment(normalized, ctx)
        ambition, ambition_signal = self._objective_ambition(normalized)

        dimensions = {
            "outcome_orientation": outcome,
            "inspiration": inspiration,
            "clarity": self._clarity(normalized),
            "alignment": alignment,
            "ambition": ambition,
        }
        signals = [outcome_signal, inspiration_signal, True, alignment_signal, ambition_signal]

        if objective_scope is not None:
            dimensions["scope_appropriateness"] = self._scope_appropriateness(
                normalized, objective_scope, ctx
            )
            signals.append(True)

        overall = weighted_overall(dimensions, weights)
        score = QualityScore(
            overall=overall,
            dimensions=dimensions,
            feedback=_threshold_messages(dimensions, OBJECTIVE_FEEDBACK),
            improvements=_threshold_messages(dimensions, OBJECTIVE_IMPROVEMENTS),
            confidence=_signal_confidence(sum(signals), len(signals)),
            level=quality_level(overall),
        )

        log.debug(
            "objective_scored",
            overall=score.overall,
            level=score.level.value,
            scope=objective_scope.value if objective_scope else None,
        )
        return score

    def _outcome_orientation(self, text: str) -> Tuple[int, bool]:
        activity = count_matches(OBJECTIVE_ACTIVITY_VERBS, text)
        outcome = count_matches(OBJECTIVE_OUTCOME_VERBS, text)

        if activity and not outcome:
            return 0, True
        if outcome and not activity:
            return 100, True
        if outcome > activity:
            return 75, True
        if outcome or activity:
            return 50, True
        return 50, False

    def _inspiration(self, text: str) -> Tuple[int, bool]:
        for score, words in INSPIRATION_TIERS:
            if count_words_present(words, text):
                return score, True
        return 50, False

    def _clarity(self, text: str) -> int:
        words = word_count(text)
        score = 0
        for max_words, limit_score in self.config.scoring.clarity_word_limits:
            if words <= max_words:
                score = limit_score
                break

        vague = count_words_present(VAGUE_WORDS, text)
        penalty = min(vague * self.config.scoring.vague_word_penalty,
                      self.config.scoring.vague_penalty_cap)
        return int(clamp(score - penalty))

    def _alignment(self, text: str, context: ScoringContext) -> Tuple[int, bool]:
        indicators = count_substrings_present(BUSINESS_INDICATORS, text)
        indicators += count_substrings_present(STRATEGIC_INDICATORS, text)
        has_outcome_verb = matches(OBJECTIVE_OUTCOME_VERBS, text)

        if indicators >= 2 and has_outcome_verb:
            score = 100
        elif indicators >= 1 and has_outcome_verb:
            score = 75
        elif indicators >= 1 or matches(WEAK_ALIGNMENT_WORDS, text):
            score = 50
        elif matches(MAINTENANCE_WORDS, text):
            score = 25
        else:
            score = 0

        bonus = self.config.scoring.context_keyword_bonus
        if context.industry in INDUSTRY_KEYWORDS:
            score += count_substrings_present(INDUSTRY_KEYWORDS[context.industry], text) * bonus
        if context.function in FUNCTION_KEYWORDS:
            score += count_substrings_present(FUNCTION_KEYWORDS[context.function], text) * bonus

        signal = indicators > 0 or bool(context.industry or context.function)
        return int(clamp(score)), signal

    def _objective_ambition(self, text: str) -> Tuple[int, bool]:
        if matches(MAINTENANCE_WORDS, text):
            return 0, True
        for score, pattern in AMBITION_TIERS:
            if matches(pattern, text):
                return score, True
        return 50, False

    def _scope_appropriateness(
        self, text: str, scope: ObjectiveScope, context: ScoringContext
    ) -> int:
        found = {name: matches(pattern, text) for name, pattern in SCOPE_INDICATORS.items()}
        measurable = found["measurable_verb"] and found["measurable_number"]

        signals = {
            "market_positioning": found["market_positioning"],
            "organizational_direction": found["organizational_direction"],
            "multiple_departments": (
                found["multiple_departments"] or context.requires_cross_functional is True
            ),
            "measurable_outcome": measurable,
            "tactical_execution": found["tactical_execution"],
            "single_team_focus": not found["not_single_team"],
            # No team size means no signal either way
            "team_control": (
                context.team_size is not None and context.team_size < TEAM_CONTROL_MAX_SIZE
            ),
            "cross_department_dependency": found["cross_department_dependency"],
            "unmeasured_activity": found["disguised_activity"] and not measurable,
        }

        adjustments = SCOPE_ADJUSTMENTS.get(scope, {})
        score = SCOPE_BASE_SCORE + sum(
            delta for name, delta in adjustments.items() if signals.get(name)
        )
        return int(clamp(score))

    @staticmethod
    def _coerce_scope(scope: ScopeInput) -> Optional[ObjectiveScope]:
        if scope is None or isinstance(scope, ObjectiveScope):
            return scope
        try:
            return ObjectiveScope(str(scope).strip().lower())
        except ValueError:
            log.warning("objective_scope_invalid", scope=scope)
            return None

    # ==========================================================================
    # Key results
    # ==========================================================================

    def score_key_result(
        self,
        text: Any,
        objective: Optional[str] = None,
        context: ContextInput = None,
    ) -> QualityScore:
        """Score a key result on quantification, specificity, ambition,
        relevance to the objective and timebound-ness.

        ``context`` is accepted so callers can pass the same context to every
        scorer method; no key result rule reads it.
        """
        weights = self.config.scoring.key_result_weights

        normalized = normalize_text(text, self.config.detection.max_text_length).strip()
        if not normalized:
            return self._empty_score(weights)

        objective_text = normalize_text(
            objective, self.config.detection.max_text_length
        ).strip()

        quantification, has_metric = self._quantification(normalized)
        specificity = self._specificity(normalized)
        ambition, has_ratio, unrealistic = self._key_result_ambition(normalized)
        relevance = self._relevance(normalized, objective_text)
        timebound = self._timebound(normalized)

        dimensions = {
            "quantification": quantification,
            "specificity": specificity,
            "ambition": ambition,
            "relevance": relevance,
            "timebound": timebound,
        }
        signals = [
            has_metric,
            specificity > 0,
            has_ratio,
            bool(objective_text),
            timebound > 0,
        ]

        feedback = _threshold_messages(dimensions, KEY_RESULT_FEEDBACK)
        if unrealistic:
            feedback.append(UNREALISTIC_TARGET_FEEDBACK)

        overall = weighted_overall(dimensions, weights)
        score = QualityScore(
            overall=overall,
            dimensions=dimensions,
            feedback=feedback,
            improvements=_threshold_messages(dimensions, KEY_RESULT_IMPROVEMENTS),
            confidence=_signal_confidence(sum(signals), len(signals)),
            level=quality_level(overall),
        )

        log.debug(
            "key_result_scored",
            overall=score.overall,
            level=score.level.value,
            unrealistic=unrealistic,
        )
        return score

    @staticmethod
    def _quantification(text: str) -> Tuple[int, bool]:
        if not matches(KR_METRIC, text):
            return 0, False
        has_baseline = matches(KR_BASELINE, text)
        has_target = matches(KR_TARGET, text)
        if has_baseline and has_target:
            return 100, True
        if has_target:
            return 75, True
        return 50, True

    @staticmethod
    def _specificity(text: str) -> int:
        has_units = matches(KR_UNITS, text)
        has_frequency = matches(KR_FREQUENCY, text) or matches(KR_IMPLICIT_FREQUENCY, text)
        has_source = matches(KR_SOURCE, text)

        if has_units and has_frequency and has_source:
            return 100
        if has_units and has_frequency:
            return 75
        if has_units:
            return 50
        if matches(KR_VAGUE_QUANTIFIERS, text):
            return 25
        return 0

    @staticmethod
    def _stretch_ratio(text: str) -> Optional[float]:
        from_match = compile_pattern(KR_FROM_NUMBER).search(text)
        to_match = compile_pattern(KR_TO_NUMBER).search(text)
        if not from_match or not to_match:
            return None
        baseline = parse_number(from_match.group(1))
        target = parse_number(to_match.group(1))
        if baseline is None or target is None or baseline <= 0:
            return None
        return target / baseline

    def _key_result_ambition(self, text: str) -> Tuple[int, bool, bool]:
        """Returns (score, ratio found, flagged as unrealistic)."""
        ratio = self._stretch_ratio(text)
        if ratio is None:
            return NO_RATIO_AMBITION_SCORE, False, False

        is_reduction = matches(KR_REDUCE_VERBS, text) or (
            ratio < 1 and not matches(KR_INCREASE_VERBS, text)
        )

        if is_reduction:
            fraction = 1 - ratio
            plateau_end = (
                REDUCE_PLATEAU_END_TIME if matches(KR_TIME_METRIC, text) else REDUCE_PLATEAU_END
            )
            if fraction > plateau_end:
                return REDUCE_UNREALISTIC_SCORE, True, True
            return round(_interpolate(fraction, REDUCE_BANDS)), True, False

        if ratio > INCREASE_BANDS[-1][0]:
            return INCREASE_UNREALISTIC_SCORE, True, True
        return round(_interpolate(ratio, INCREASE_BANDS)), True, False

    @staticmethod
    def _domains(text: str) -> Set[str]:
        return {name for name, pattern in KR_DOMAINS.items() if matches(pattern, text)}

    def _relevance(self, text: str, objective: str) -> int:
        if not objective:
            return 75

        objective_domains = self._domains(objective)
        shared = objective_domains & self._domains(text)
        if len(shared) >= 2:
            return 100
        if shared:
            return 75
        for domain in objective_domains:
            if count_substrings_present(RELATED_DOMAINS.get(domain, ()), text):
                return 75
        return 50

    def _timebound(self, text: str) -> int:
        reference_year = self.config.scoring.reference_year
        for pattern in KR_EXPLICIT_DEADLINES:
            match = compile_pattern(pattern).search(text)
            if not match:
                continue
            year = match.groupdict().get("year")
            if reference_year is not None and year is not None and int(year) < reference_year:
                return 0
            return 100
        if any(matches(p, text) for p in KR_VAGUE_TIMEFRAMES):
            return 50
        return 0

    @staticmethod
    def _empty_score(weights: Dict[str, int]) -> QualityScore:
        return QualityScore(
            overall=0,
            dimensions={name: 0 for name in weights},
            feedback=[EMPTY_TEXT_FEEDBACK],
            confidence=0.0,
            level=QualityLevel.POOR,
        )

    # ==========================================================================
    # OKR sets
    # ==========================================================================

    def score_okr_set(
        self,
        objective: Any,
        key_results: Sequence[Any],
        context: ContextInput = None,
        scope: ScopeInput = None,
    ) -> OKRSetScore:
        """Score an objective together with its key results.

        With no key results every value is 0.
        """
        kr_texts = [
            kr for kr in (normalize_text(k).strip() for k in key_results or []) if kr
        ]
        if not kr_texts:
            return OKRSetScore(
                overall=0, coherence=0, completeness=0, balance=0, achievability=0
            )

        objective_text = normalize_text(objective, self.config.detection.max_text_length)
        objective_score = self.score_objective(objective_text, context, scope)
        kr_scores = [self.score_key_result(kr, objective_text, context) for kr in kr_texts]

        coherence = self._coherence(objective_text, kr_texts)
        completeness = self._completeness(len(kr_texts))
        balance = self._balance(kr_texts)
        achievability = self._achievability(objective_score, kr_scores)

        mean_kr = sum(s.overall for s in kr_scores) / len(kr_scores)
        weighted = (
            OKR_SET_WEIGHTS["objective"] * objective_score.overall
            + OKR_SET_WEIGHTS["key_results"] * mean_kr
            + OKR_SET_WEIGHTS["coherence"] * coherence
            + OKR_SET_WEIGHTS["completeness"] * completeness
            + OKR_SET_WEIGHTS["balance"] * balance
            + OKR_SET_WEIGHTS["achievability"] * achievability
        )
        overall = int(clamp(int(weighted + 0.5)))

        log.debug(
            "okr_set_scored",
            overall=overall,
            key_results=len(kr_texts),
            coherence=coherence,
        )

        return OKRSetScore(
            overall=overall,
            coherence=coherence,
            completeness=completeness,
            balance=balance,
            achievability=achievability,
            level=quality_level(overall),
        )

    @staticmethod
    def _terms(text: str) -> Set[str]:
        return {
            term
            for term in compile_pattern(_TERM_PATTERN).findall(text)
            if len(term) > 3 and term not in STOP_WORDS
        }

    def _coherence(self, objective: str, key_results: Sequence[str]) -> int:
        objective_terms = self._terms(objective)
        score = 50
        for kr in key_results:
            shared = len(objective_terms & self._terms(kr))
            if shared:
                score += min(shared * 5, 15)
            else:
                score -= 10
        return int(clamp(score))

    @staticmethod
    def _completeness(count: int) -> int:
        if 2 <= count <= 4:
            return 100
        if count in (1, 5):
            return 80
        if count == 6:
            return 60
        return max(20, 100 - 10 * count)

    @staticmethod
    def _balance(key_results: Sequence[str]) -> int:
        leading = any(matches(LEADING_INDICATOR, kr) for kr in key_results)
        lagging = any(matches(LAGGING_INDICATOR, kr) for kr in key_results)
        if leading and lagging:
            return 100
        if leading or lagging:
            return 70
        return 30

    @staticmethod
    def _achievability(objective: QualityScore, key_results: Sequence[QualityScore]) -> int:
        kr_ambition = sum(s.dimensions.get("ambition", 0) for s in key_results) / len(key_results)
        challenge = (objective.dimensions.get("ambition", 0) + kr_ambition) / 2
        if 60 <= challenge <= 80:
            return 100
        if 50 <= challenge <= 90:
            return 80
        return 60
