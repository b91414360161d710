"""
Coaching session orchestration service.

Main entry point for processing user messages. Each turn runs the rule core
synchronously between a state load and a state save:

    1. Load session state and recent history
    2. Detect anti-patterns in the message
    3. Extract OKR content (objective candidate, key result lines)
    4. Score the extracted content
    5. Update checkpoints
    6. Evaluate the phase state machine
    7. Persist state, messages and checkpoints

Turns for the same session are serialized with a per-session asyncio.Lock;
different sessions run concurrently.
"""

import asyncio
import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union
from uuid import uuid4

import structlog

from okr_coach.core.config import CoachingConfig, coaching_config
from okr_coach.core.exceptions import SessionCompletedError, SessionNotFoundError
from okr_coach.domain.models.checkpoint import Checkpoint
from okr_coach.domain.models.detection import DetectionResult, ReframingResponse
from okr_coach.domain.models.phase import BacktrackReason, Phase, PhaseDecision
from okr_coach.domain.models.quality import ScoringContext
from okr_coach.domain.models.session import (
    ConversationMessage,
    QualityScores,
    Session,
    SessionState,
    SessionSummary,
    TurnResult,
)
from okr_coach.persistence.repositories.checkpoint_repo import CheckpointRepository
from okr_coach.persistence.repositories.message_repo import MessageRepository
from okr_coach.persistence.repositories.session_repo import SessionRepository
from okr_coach.rules.phases import OBJECTIVE_LIKE_PATTERN
from okr_coach.rules.quality import KR_METRIC, OBJECTIVE_ACTIVITY_VERBS
from okr_coach.services.checkpoint_tracker import CheckpointTracker
from okr_coach.services.pattern_detector import PatternDetector, coerce_context
from okr_coach.services.phase_controller import PhaseController
from okr_coach.services.quality_scorer import QualityScorer
from okr_coach.services.text_helpers import compile_pattern, matches, word_count

log = structlog.get_logger(__name__)

# Explicit "Objective: ..." / "Our goal is ..." statements
_OBJECTIVE_PREFIX = re.compile(
    r"(?:objective|goal)\s*(?::|is|would be)\s*(?P<text>[^\n]+)", re.IGNORECASE
)
# Bullet, number or "KR1:" prefixes on key result lines
_KR_PREFIX = re.compile(r"^\s*(?:[-*•]|\d+[.)]|kr\s*\d*\s*[:.)-])\s*", re.IGNORECASE)
# Longer messages are treated as conversation, not an objective draft
_MAX_OBJECTIVE_WORDS = 25
_HISTORY_LIMIT = 20

# Checkpoints completed by inference once a score clears this bar
_INFERRED_QUALITY_SCORE = 75


class CoachingService:
    """Orchestrates coaching turns over the rule core and the repositories.

    The detector, scorer, tracker and controller share one CoachingConfig and
    hold no session state, so a single service instance serves every session.
    """

    def __init__(
        self,
        session_repo: SessionRepository,
        message_repo: MessageRepository,
        checkpoint_repo: CheckpointRepository,
        config: Optional[CoachingConfig] = None,
    ):
        self.session_repo = session_repo
        self.message_repo = message_repo
        self.checkpoint_repo = checkpoint_repo
        self.config = config or coaching_config

        self.detector = PatternDetector(self.config)
        self.scorer = QualityScorer(self.config)
        self.tracker = CheckpointTracker(self.config)
        self.controller = PhaseController(self.config, tracker=self.tracker)

        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        return self._locks.setdefault(session_id, asyncio.Lock())

    # ==========================================================================
    # Sessions
    # ==========================================================================

    async def create_session(
        self,
        user_id: str,
        context: Union[ScoringContext, Mapping[str, Any], None] = None,
    ) -> Session:
        """Start a session in discovery with discovery checkpoints."""
        now = datetime.now()
        state = SessionState(
            phase=Phase.DISCOVERY,
            context=coerce_context(context),
            checkpoints=self.tracker.create_progress(Phase.DISCOVERY),
        )
        state.suggestions = list(
            self.config.templates.phase_suggestions.get(Phase.DISCOVERY.value, [])
        )
        state.progress = self.controller.calculate_overall_progress(
            Phase.DISCOVERY, state.quality_scores
        )

        session = await self.session_repo.create(
            Session(
                id=str(uuid4()),
                user_id=user_id,
                created_at=now,
                updated_at=now,
                state=state,
            )
        )
        await self.checkpoint_repo.save_progress(session.id, state.checkpoints)

        log.info("session_created", session_id=session.id, user_id=user_id)
        return session

    async def get_session(self, session_id: str) -> Session:
        """
        Raises:
            SessionNotFoundError: If no session has this ID
        """
        session = await self.session_repo.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    async def list_sessions(self) -> List[Session]:
        """Active sessions, newest first."""
        return await self.session_repo.list_active()

    async def delete_session(self, session_id: str) -> None:
        """Delete a session with its messages, checkpoints and OKR sets.

        Raises:
            SessionNotFoundError: If no session has this ID
        """
        async with self._lock_for(session_id):
            if not await self.session_repo.delete(session_id):
                raise SessionNotFoundError(f"Session {session_id} not found")
        self._locks.pop(session_id, None)
        log.info("session_deleted", session_id=session_id)

    async def get_checkpoints(self, session_id: str) -> List[Checkpoint]:
        await self.get_session(session_id)
        return await self.checkpoint_repo.get_checkpoints(session_id)

    async def get_messages(self, session_id: str) -> List[ConversationMessage]:
        """Full stored conversation in order."""
        await self.get_session(session_id)
        return await self.message_repo.get_all(session_id)

    async def get_okr_sets(self, session_id: str) -> List[Dict[str, Any]]:
        """OKR sets saved for a session; empty until it completes."""
        await self.get_session(session_id)
        return await self.session_repo.get_okr_sets(session_id)

    async def get_summary(self, session_id: str) -> SessionSummary:
        """Read-only summary; allowed in every phase, including completed."""
        session = await self.get_session(session_id)
        state = session.state
        scores = state.quality_scores

        key_results = [
            {
                "text": text,
                "score": scores.key_results[i].overall if i < len(scores.key_results) else None,
            }
            for i, text in enumerate(state.key_result_texts)
        ]
        progress = state.checkpoints or self.tracker.create_progress(state.phase)

        return SessionSummary(
            session_id=session.id,
            status=session.status,
            phase=state.phase,
            progress=state.progress,
            objective=state.objective_text,
            objective_score=scores.objective.overall if scores.objective else None,
            key_results=key_results,
            okr_set=scores.okr_set,
            checkpoint_summary=self.tracker.progress_summary(progress),
            estimated_minutes_remaining=self.controller.estimate_completion_minutes(
                state.phase, scores
            ),
            backtrack_count=progress.backtrack_count,
            longest_streak=progress.longest_streak,
        )

    # ==========================================================================
    # Turns
    # ==========================================================================

    async def process_message(self, session_id: str, text: str) -> TurnResult:
        """Process one user message.

        Raises:
            SessionNotFoundError: If the session does not exist
            SessionCompletedError: If the session has already completed
        """
        async with self._lock_for(session_id):
            return await self._process_message(session_id, text)

    async def _process_message(self, session_id: str, text: str) -> TurnResult:
        session = await self.get_session(session_id)
        state = session.state
        if session.status == "completed" or state.phase == Phase.COMPLETED:
            raise SessionCompletedError(f"Session {session_id} is already completed")

        bound_log = log.bind(session_id=session_id, phase=state.phase.value)
        bound_log.info("processing_message", input_length=len(text or ""))

        history = await self.message_repo.get_recent(session_id, limit=_HISTORY_LIMIT)

        # Detection
        detection = self.detector.detect_patterns(text, state.context)
        reframing = None
        if detection.detected:
            reframing = self.detector.generate_reframing_response(
                detection,
                text,
                state.context,
                previous_attempts=state.reframing_attempts,
                phase=state.phase,
            )
            state.reframing_attempts += 1
        else:
            state.reframing_attempts = 0

        # Extraction and scoring
        self._extract_okr_content(state, text)
        self._score_state(state)

        # Checkpoints for the phase the message was written in
        if state.checkpoints is None or state.checkpoints.phase != state.phase:
            state.checkpoints = self.tracker.create_progress(state.phase)
        completed = self.tracker.evaluate_message(state.checkpoints, text)
        if completed is None:
            completed = self._infer_checkpoint(state, detection)
        celebration = self.tracker.celebration(state.checkpoints, completed) if completed else None

        decision = self.controller.evaluate(
            state, text, detection=detection, quality=state.quality_scores, history=history
        )

        response = self._compose_response(decision, reframing, celebration)
        status = "completed" if decision.next_phase == Phase.COMPLETED else None

        await self.message_repo.save(
            ConversationMessage(
                session_id=session_id,
                role="user",
                content=text or "",
                metadata={"phase": decision.current_phase.value, "patterns": detection.pattern_ids},
            )
        )
        await self.message_repo.save(
            ConversationMessage(
                session_id=session_id,
                role="assistant",
                content=response,
                metadata={
                    "phase": decision.next_phase.value,
                    "event": decision.event.value if decision.event else None,
                },
            )
        )
        await self.session_repo.update_state(session_id, state, status=status)
        await self.checkpoint_repo.save_progress(session_id, state.checkpoints)

        if status == "completed":
            await self._save_okr_set(session_id, state)

        bound_log.info(
            "message_processed",
            next_phase=decision.next_phase.value,
            transitioned=decision.transitioned,
            patterns=detection.pattern_ids,
            progress=state.progress,
        )

        return TurnResult(
            session_id=session_id,
            detection=detection,
            objective_score=state.quality_scores.objective,
            key_result_scores=list(state.quality_scores.key_results),
            decision=decision,
            reframing=reframing,
            completed_checkpoint=completed,
            celebration=celebration,
            response=response,
            state=state,
        )

    async def backtrack(
        self, session_id: str, phase: Phase, reason: BacktrackReason = BacktrackReason.USER_REQUEST
    ) -> PhaseDecision:
        """Apply an explicit user-requested backtrack to an earlier phase.

        Raises:
            SessionNotFoundError: If the session does not exist
            SessionCompletedError: If the session has already completed
            InvalidTransitionError: If ``phase`` is not earlier than the current phase
        """
        async with self._lock_for(session_id):
            session = await self.get_session(session_id)
            state = session.state
            if session.status == "completed" or state.phase == Phase.COMPLETED:
                raise SessionCompletedError(f"Session {session_id} is already completed")

            decision = self.controller.apply_backtrack(state, phase, reason)
            await self.session_repo.update_state(session_id, state)
            await self.checkpoint_repo.save_progress(session_id, state.checkpoints)
            return decision

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @staticmethod
    def _objective_candidate(text: str) -> Optional[str]:
        prefixed = _OBJECTIVE_PREFIX.search(text)
        if prefixed:
            return prefixed.group("text").strip().strip('"').strip()

        first_line = text.strip().splitlines()[0].strip() if text.strip() else ""
        if not first_line or word_count(first_line) > _MAX_OBJECTIVE_WORDS:
            return None
        if matches(OBJECTIVE_LIKE_PATTERN, first_line) or matches(
            OBJECTIVE_ACTIVITY_VERBS, first_line
        ):
            return first_line.strip('"').strip()
        return None

    @staticmethod
    def _key_result_lines(text: str) -> List[str]:
        lines = []
        for raw in text.splitlines():
            line = raw.strip()
            if not line:
                continue
            has_prefix = _KR_PREFIX.match(line) is not None
            if has_prefix or compile_pattern(KR_METRIC).search(line):
                line = _KR_PREFIX.sub("", line, count=1).strip()
                if line:
                    lines.append(line)
        return lines

    def _extract_okr_content(self, state: SessionState, text: str) -> None:
        if not text or not text.strip():
            return
        if state.phase in (Phase.DISCOVERY, Phase.REFINEMENT):
            candidate = self._objective_candidate(text)
            if candidate:
                state.objective_text = candidate
        elif state.phase == Phase.KR_DISCOVERY:
            lines = self._key_result_lines(text)
            if len(lines) > 1:
                state.key_result_texts = lines
            elif lines and lines[0] not in state.key_result_texts:
                state.key_result_texts.append(lines[0])

    def _score_state(self, state: SessionState) -> None:
        objective = state.objective_text
        scope = (
            self.controller.detect_objective_scope(objective, state.context.function)
            if objective
            else None
        )

        objective_score = (
            self.scorer.score_objective(objective, state.context, scope) if objective else None
        )
        kr_scores = [
            self.scorer.score_key_result(kr, objective, state.context)
            for kr in state.key_result_texts
        ]
        okr_set = (
            self.scorer.score_okr_set(objective, state.key_result_texts, state.context, scope)
            if objective and state.key_result_texts
            else None
        )
        state.quality_scores = QualityScores(
            objective=objective_score, key_results=kr_scores, okr_set=okr_set
        )

    def _infer_checkpoint(
        self, state: SessionState, detection: DetectionResult
    ) -> Optional[Checkpoint]:
        """Complete one checkpoint whose criteria are read off the scores.

        Only the earliest incomplete satisfied checkpoint in sequence order is
        completed, so a single message never completes more than one.
        """
        scores = state.quality_scores
        inferred: Dict[str, bool] = {}

        if state.phase == Phase.REFINEMENT and scores.objective is not None:
            inferred["refinement_quality"] = scores.objective.overall >= _INFERRED_QUALITY_SCORE
            inferred["refinement_antipatterns"] = not detection.detected
        elif state.phase == Phase.KR_DISCOVERY and scores.key_results:
            inferred["kr_quality"] = all(
                kr.overall >= _INFERRED_QUALITY_SCORE for kr in scores.key_results
            )
        elif state.phase == Phase.VALIDATION and scores.okr_set is not None:
            inferred["validation_review"] = (
                scores.okr_set.overall >= _INFERRED_QUALITY_SCORE and not detection.detected
            )

        for checkpoint in state.checkpoints.checkpoints:
            if checkpoint.is_complete or not inferred.get(checkpoint.id):
                continue
            return self.tracker.complete_checkpoint(
                state.checkpoints,
                checkpoint.id,
                confidence=0.8,
                evidence=["Inferred from quality scores"],
            )
        return None

    @staticmethod
    def _compose_response(
        decision: PhaseDecision,
        reframing: Optional[ReframingResponse],
        celebration: Optional[str],
    ) -> str:
        parts = []
        if celebration:
            parts.append(celebration)
        if reframing is not None and not decision.transitioned:
            parts.append(reframing.suggestion)
        parts.append(decision.guidance)
        return "\n\n".join(p for p in parts if p)

    async def _save_okr_set(self, session_id: str, state: SessionState) -> None:
        scores = state.quality_scores
        await self.session_repo.save_okr_set(
            session_id,
            state.objective_text or "",
            scores.objective.overall if scores.objective else None,
            [
                (text, scores.key_results[i].overall if i < len(scores.key_results) else None)
                for i, text in enumerate(state.key_result_texts)
            ],
            metadata={
                "okr_set": scores.okr_set.model_dump(mode="json") if scores.okr_set else None
            },
        )
