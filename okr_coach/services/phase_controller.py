"""
Phase state machine for the coaching conversation.

Decides, one user message at a time, whether the conversation stays in its
current phase, moves forward, or backtracks to an earlier phase:

    discovery -> refinement -> kr_discovery -> validation -> completed

Every move is looked up in okr_coach.rules.phases.TRANSITIONS. Upstream
signals (DetectionResult, QualityScores) that are missing or malformed never
force an advance: the controller stays put and reports a diagnostic.
An unknown phase value is a caller bug and raises UnknownPhaseError.
"""

from typing import Any, Iterable, List, Mapping, Optional, Set, Tuple, Type, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from okr_coach.core.config import CoachingConfig, coaching_config
from okr_coach.core.exceptions import InvalidTransitionError, UnknownPhaseError
from okr_coach.domain.models.detection import DetectionResult
from okr_coach.domain.models.phase import (
    PHASE_ORDER,
    BacktrackReason,
    Phase,
    PhaseDecision,
    PhaseEvent,
)
from okr_coach.domain.models.quality import ObjectiveScope
from okr_coach.domain.models.session import QualityScores, SessionState
from okr_coach.rules.phases import (
    BACKTRACK_PATTERNS,
    BACKTRACK_TOPICS,
    BASE_COMPLETION_MINUTES,
    LOW_QUALITY_EXTRA_MINUTES,
    LOW_QUALITY_THRESHOLD,
    NEGATION,
    NEGATION_WINDOW,
    OBJECTIVE_LIKE_PATTERN,
    OUTCOME_PATTERN,
    QUESTION_WORD,
    REVISIT_EVENTS,
    ROLE_SCOPE_KEYWORDS,
    SCOPE_KEYWORDS,
    STAKEHOLDER_PATTERN,
    TRANSITIONS,
)
from okr_coach.services import confirmation
from okr_coach.services.checkpoint_tracker import CheckpointTracker
from okr_coach.services.metrics_suggester import suggest_metrics
from okr_coach.services.text_helpers import (
    contains_word,
    matches,
    normalize_text,
    word_pattern,
)

log = structlog.get_logger(__name__)

SignalT = TypeVar("SignalT", bound=BaseModel)

# Phases that count toward overall progress (completed is pinned at 1.0)
_PROGRESS_PHASES = len(PHASE_ORDER) - 1


class PhaseController:
    """
    Finite-state machine over coaching phases.

    Holds no per-session state; everything it changes lives on the
    SessionState passed to evaluate().
    """

    def __init__(
        self,
        config: Optional[CoachingConfig] = None,
        tracker: Optional[CheckpointTracker] = None,
    ):
        self.config = config or coaching_config
        self.tracker = tracker or CheckpointTracker(self.config)

    # ==========================================================================
    # Transition table
    # ==========================================================================

    @staticmethod
    def require_phase(phase: Any) -> Phase:
        """Return ``phase`` as a Phase member or raise UnknownPhaseError."""
        if isinstance(phase, Phase):
            return phase
        try:
            return Phase(phase)
        except ValueError:
            raise UnknownPhaseError(f"Unknown phase: {phase!r}") from None

    def transition(self, phase: Any, event: PhaseEvent) -> Phase:
        """Target phase for ``event`` in ``phase``.

        Raises:
            UnknownPhaseError: If phase is not a Phase member
            InvalidTransitionError: If the pair is not in the transition table
        """
        current = self.require_phase(phase)
        target = TRANSITIONS.get((current, event))
        if target is None:
            raise InvalidTransitionError(
                f"No transition from {current.value} on {getattr(event, 'value', event)}"
            )
        return target

    def can_transition(self, phase: Any, event: PhaseEvent) -> bool:
        return (self.require_phase(phase), event) in TRANSITIONS

    def next_phase(self, phase: Any) -> Optional[Phase]:
        """The following phase on the happy path, or None from completed."""
        current = self.require_phase(phase)
        if current == Phase.COMPLETED:
            return None
        return PHASE_ORDER[current.index + 1]

    # ==========================================================================
    # Evaluation
    # ==========================================================================

    def evaluate(
        self,
        state: SessionState,
        message: Any,
        detection: Any = None,
        quality: Any = None,
        history: Optional[Iterable[Any]] = None,
    ) -> PhaseDecision:
        """
        Evaluate one user message and update ``state`` in place.

        Args:
            state: Session state; phase, turns_in_phase, suggestions, progress,
                checkpoints and the sticky context flags are updated
            message: The user message
            detection: DetectionResult (or mapping) for the message
            quality: QualityScores (or mapping); defaults to state.quality_scores
            history: Earlier user messages (strings or message records)

        Returns:
            PhaseDecision describing what happened

        Raises:
            UnknownPhaseError: If state.phase is not a Phase member
        """
        current = self.require_phase(state.phase)
        text = normalize_text(message, self.config.detection.max_text_length).strip()
        diagnostics: List[str] = []
        malformed: Set[str] = set()

        if current == Phase.COMPLETED:
            state.suggestions = []
            state.progress = 1.0
            return PhaseDecision(
                current_phase=current,
                next_phase=current,
                guidance=self.config.templates.completed_summary,
                progress=1.0,
            )

        detection_result = self._coerce_signal(detection, DetectionResult, "detection", malformed)
        if quality is None:
            scores: Optional[QualityScores] = state.quality_scores
        else:
            scores = self._coerce_signal(quality, QualityScores, "quality", malformed)

        if state.checkpoints is None or state.checkpoints.phase != current:
            state.checkpoints = self.tracker.create_progress(current)

        if text:
            state.turns_in_phase += 1
            if current == Phase.DISCOVERY:
                state.discovery_answers += 1
        self._update_context_flags(state, text, history)

        # Explicit sign-off wins over backtrack phrasing ("Actually, approve it")
        approved = current == Phase.VALIDATION and self.is_approval(text)
        backtrack = None if approved else self.classify_backtrack(text, current)
        if backtrack is not None:
            reason, target = backtrack
            return self.apply_backtrack(state, target, reason, scores)

        event = self._forward_event(
            current, text, state, detection_result, scores, diagnostics, malformed
        )
        if event is None:
            guidance = f"Current focus: {self.phase_focus(current)}."
            return self._record(state, current, current, None, guidance, diagnostics, scores)

        next_phase = self.transition(current, event)
        self.tracker.transition_to_phase(state.checkpoints, next_phase)
        return self._record(
            state,
            current,
            next_phase,
            event,
            self.transition_message(next_phase),
            diagnostics,
            scores,
        )

    def apply_backtrack(
        self,
        state: SessionState,
        target: Any,
        reason: BacktrackReason,
        quality: Optional[QualityScores] = None,
    ) -> PhaseDecision:
        """Move ``state`` back to ``target``, resetting checkpoints and the streak.

        Raises:
            UnknownPhaseError: If either phase is not a Phase member
            InvalidTransitionError: If ``target`` is not an earlier, reachable phase
        """
        current = self.require_phase(state.phase)
        target_phase = self.require_phase(target)
        event = REVISIT_EVENTS.get(target_phase)
        if event is None:
            raise InvalidTransitionError(
                f"Cannot backtrack from {current.value} to {target_phase.value}"
            )
        next_phase = self.transition(current, event)

        if state.checkpoints is None:
            state.checkpoints = self.tracker.create_progress(current)
        reframe = self.tracker.backtrack_to_phase(state.checkpoints, next_phase, reason)
        guidance = f"{reframe}\n\n{self.transition_message(next_phase)}"
        return self._record(
            state,
            current,
            next_phase,
            event,
            guidance,
            [],
            quality if quality is not None else state.quality_scores,
            reason,
        )

    def _forward_event(
        self,
        phase: Phase,
        text: str,
        state: SessionState,
        detection: Optional[DetectionResult],
        scores: Optional[QualityScores],
        diagnostics: List[str],
        malformed: Set[str],
    ) -> Optional[PhaseEvent]:
        rules = self.config.phases

        if phase == Phase.DISCOVERY:
            if detection is None:
                diagnostics.append(self._diagnostic("detection", malformed))
                return None
            objective_like = matches(OBJECTIVE_LIKE_PATTERN, text) or (
                scores is not None and scores.objective is not None
            )
            blocking = any(
                p.severity.value in rules.blocking_severities for p in detection.patterns
            )
            answered = state.discovery_answers >= rules.min_discovery_answers
            if (
                objective_like
                and (not blocking or answered)
                and state.has_stakeholder
                and state.has_outcome
            ):
                return PhaseEvent.OBJECTIVE_IDENTIFIED
            return None

        if phase == Phase.REFINEMENT:
            objective = scores.objective if scores is not None else None
            if objective is None:
                diagnostics.append(self._diagnostic("objective_score", malformed))
                return None
            if objective.overall >= rules.objective_threshold:
                return PhaseEvent.OBJECTIVE_ACCEPTED
            if self.is_finalization(text):
                return PhaseEvent.FINALIZATION_REQUESTED
            if state.turns_in_phase >= rules.max_refinement_iterations:
                return PhaseEvent.ITERATION_LIMIT_REACHED
            return None

        if phase == Phase.KR_DISCOVERY:
            key_results = scores.key_results if scores is not None else []
            if not key_results:
                diagnostics.append(self._diagnostic("key_result_scores", malformed))
                return None
            in_range = rules.min_key_results <= len(key_results) <= rules.max_key_results
            if in_range and all(
                kr.overall >= rules.key_result_threshold for kr in key_results
            ):
                return PhaseEvent.KEY_RESULTS_ACCEPTED
            if confirmation.is_confirmation(text) or self.is_finalization(text):
                return PhaseEvent.USER_CONFIRMED
            return None

        # Validation never advances on scores alone
        if self.is_approval(text):
            return PhaseEvent.USER_APPROVED
        return None

    def _record(
        self,
        state: SessionState,
        current: Phase,
        next_phase: Phase,
        event: Optional[PhaseEvent],
        guidance: str,
        diagnostics: List[str],
        scores: Optional[QualityScores],
        reason: Optional[BacktrackReason] = None,
    ) -> PhaseDecision:
        transitioned = next_phase != current
        state.phase = next_phase
        if transitioned:
            state.turns_in_phase = 0

        suggestions = list(diagnostics)
        suggestions.extend(self.config.templates.phase_suggestions.get(next_phase.value, []))
        if next_phase == Phase.KR_DISCOVERY:
            suggestions.extend(suggest_metrics(state.context.function, state.objective_text))
        state.suggestions = suggestions

        progress = self.calculate_overall_progress(next_phase, scores)
        state.progress = progress

        if transitioned:
            log.info(
                "phase_transition",
                from_phase=current.value,
                to_phase=next_phase.value,
                trigger_event=event.value if event else None,
                backtrack_reason=reason.value if reason else None,
            )
        elif diagnostics:
            log.warning("phase_signal_missing", phase=current.value, diagnostics=diagnostics)

        return PhaseDecision(
            current_phase=current,
            next_phase=next_phase,
            transitioned=transitioned,
            event=event,
            backtrack_reason=reason,
            guidance=guidance,
            suggestions=suggestions,
            diagnostics=list(diagnostics),
            progress=progress,
        )

    @staticmethod
    def _coerce_signal(
        value: Any, model: Type[SignalT], name: str, malformed: Set[str]
    ) -> Optional[SignalT]:
        """Validate an upstream signal; anything unusable becomes None."""
        if value is None:
            return None
        if isinstance(value, model):
            return value
        if isinstance(value, Mapping):
            try:
                return model.model_validate(dict(value))
            except PydanticValidationError as e:
                log.warning("phase_signal_malformed", signal=name, errors=e.error_count())
        else:
            log.warning("phase_signal_malformed", signal=name, type=type(value).__name__)
        malformed.add(name)
        return None

    def _diagnostic(self, key: str, malformed: Set[str]) -> str:
        source = "detection" if key == "detection" else "quality"
        prefix = "malformed" if source in malformed else "missing"
        return self.config.templates.diagnostics[f"{prefix}_{key}"]

    @staticmethod
    def _update_context_flags(
        state: SessionState, text: str, history: Optional[Iterable[Any]]
    ) -> None:
        """Set the sticky stakeholder/outcome flags from this message and history."""
        texts = [text] + _user_texts(history)
        if not state.has_stakeholder:
            state.has_stakeholder = any(matches(STAKEHOLDER_PATTERN, t) for t in texts)
        if not state.has_outcome:
            state.has_outcome = any(matches(OUTCOME_PATTERN, t) for t in texts)

    # ==========================================================================
    # Message classification
    # ==========================================================================

    @staticmethod
    def _is_question(text: str) -> bool:
        return "?" in text or matches(QUESTION_WORD, text)

    @staticmethod
    def _phrase_present(phrases: Iterable[str], text: str) -> bool:
        """A phrase occurs with no negation in the few words before it."""
        for phrase in phrases:
            for match in word_pattern(phrase).finditer(text):
                preceding = " ".join(text[: match.start()].split()[-NEGATION_WINDOW:])
                if not matches(NEGATION, preceding):
                    return True
        return False

    def is_finalization(self, message: Any) -> bool:
        """User asks to wrap up the current phase ("looks good", "let's finalize")."""
        text = normalize_text(message, self.config.detection.max_text_length).strip()
        if not text or self._is_question(text):
            return False
        return self._phrase_present(self.config.finalization_phrases, text)

    def is_approval(self, message: Any) -> bool:
        """Explicit sign-off on the whole OKR set."""
        text = normalize_text(message, self.config.detection.max_text_length).strip()
        if not text or self._is_question(text):
            return False
        if self._phrase_present(self.config.approval_phrases, text):
            return True
        return (
            confirmation.confirmation_type(text) == confirmation.STRONG
            and not matches(NEGATION, text)
        )

    def classify_backtrack(
        self, message: Any, phase: Any
    ) -> Optional[Tuple[BacktrackReason, Phase]]:
        """Reason and target phase when the message asks to go back.

        The target must be strictly earlier than ``phase`` and reachable
        through the transition table; otherwise None.
        """
        current = self.require_phase(phase)
        text = normalize_text(message, self.config.detection.max_text_length).strip()
        if not text or current == Phase.COMPLETED:
            return None

        reason = next((r for r, pattern in BACKTRACK_PATTERNS if matches(pattern, text)), None)
        if reason is None:
            return None

        if reason == BacktrackReason.SCOPE_CHANGE:
            target: Optional[Phase] = Phase.DISCOVERY
        else:
            target = next((p for pattern, p in BACKTRACK_TOPICS if matches(pattern, text)), None)
            if target is None and current.index > 0:
                target = PHASE_ORDER[current.index - 1]

        if target is None or not target.is_before(current):
            return None
        if (current, REVISIT_EVENTS[target]) not in TRANSITIONS:
            return None
        return reason, target

    # ==========================================================================
    # Progress and estimates
    # ==========================================================================

    def calculate_phase_progress(self, phase: Any, quality: Optional[QualityScores]) -> float:
        """Progress within ``phase`` in [0, 1]."""
        current = self.require_phase(phase)
        scores = quality or QualityScores()
        objective = scores.objective

        if current == Phase.DISCOVERY:
            return min(0.8, objective.overall / 100) if objective else 0.2
        if current == Phase.REFINEMENT:
            return objective.overall / 100 if objective else 0.0
        if current == Phase.KR_DISCOVERY:
            if not scores.key_results:
                return 0.0
            return sum(kr.overall for kr in scores.key_results) / len(scores.key_results) / 100
        if current == Phase.VALIDATION:
            return scores.okr_set.overall / 100 if scores.okr_set else 0.0
        return 1.0

    def calculate_overall_progress(self, phase: Any, quality: Optional[QualityScores]) -> float:
        current = self.require_phase(phase)
        if current == Phase.COMPLETED:
            return 1.0
        within = self.calculate_phase_progress(current, quality)
        return round((current.index + within) / _PROGRESS_PHASES, 3)

    def estimate_completion_minutes(self, phase: Any, quality: Optional[QualityScores]) -> int:
        """Rough minutes left in ``phase``; low scores add extra time."""
        current = self.require_phase(phase)
        minutes = BASE_COMPLETION_MINUTES[current]
        if current == Phase.COMPLETED:
            return minutes

        scores = quality or QualityScores()
        low_objective = scores.objective is None or scores.objective.overall < LOW_QUALITY_THRESHOLD
        low_key_result = any(kr.overall < LOW_QUALITY_THRESHOLD for kr in scores.key_results)
        if low_objective or low_key_result:
            minutes += LOW_QUALITY_EXTRA_MINUTES
        return minutes

    @staticmethod
    def detect_objective_scope(
        text: Any, function: Optional[str] = None
    ) -> Optional[ObjectiveScope]:
        """Organisational altitude implied by the objective, then by the user's role."""
        normalized = normalize_text(text)
        for scope, keywords in SCOPE_KEYWORDS:
            if any(contains_word(k, normalized) for k in keywords):
                return scope

        role = normalize_text(function)
        for scope, keywords in ROLE_SCOPE_KEYWORDS:
            if any(contains_word(k, role) for k in keywords):
                return scope
        return None

    # ==========================================================================
    # Templates
    # ==========================================================================

    def phase_focus(self, phase: Any) -> str:
        return self.config.templates.phase_focus.get(self.require_phase(phase).value, "")

    def transition_message(self, phase: Any) -> str:
        return self.config.templates.transition_messages.get(self.require_phase(phase).value, "")


def _user_texts(history: Optional[Iterable[Any]]) -> List[str]:
    """Normalized user message texts from strings, mappings or message records."""
    texts: List[str] = []
    for item in history or []:
        if isinstance(item, str):
            texts.append(normalize_text(item))
            continue
        if isinstance(item, Mapping):
            role, content = item.get("role", "user"), item.get("content")
        else:
            role, content = getattr(item, "role", "user"), getattr(item, "content", None)
        if role == "user" and content:
            texts.append(normalize_text(content))
    return texts
