"""
Checkpoint tracking within a coaching phase.

Each phase carries an ordered list of checkpoints (see
okr_coach.rules.checkpoints). User messages are matched against each
checkpoint's criteria; at most one checkpoint completes per message, and
completions build a streak that backtracking resets.
"""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import structlog

from okr_coach.core.config import CoachingConfig, coaching_config
from okr_coach.domain.models.checkpoint import BacktrackRecord, Checkpoint, CheckpointProgress
from okr_coach.domain.models.phase import BacktrackReason, Phase
from okr_coach.rules.checkpoints import (
    BACKTRACK_AUTONOMY_PROMPT,
    CHECKPOINTS,
    COMPLETION_RATIO,
    MIN_MATCH_SHARE,
    STREAK_CELEBRATION_MIN,
    CheckpointDefinition,
    CriterionRule,
)
from okr_coach.services.text_helpers import (
    count_matches,
    count_substrings_present,
    normalize_text,
)

log = structlog.get_logger(__name__)


def _definitions_by_id() -> Dict[str, CheckpointDefinition]:
    return {d.id: d for defs in CHECKPOINTS.values() for d in defs}


class CheckpointTracker:
    """Creates, completes and rolls back checkpoints on a CheckpointProgress."""

    def __init__(self, config: Optional[CoachingConfig] = None):
        self.config = config or coaching_config
        self._definitions = _definitions_by_id()

    # ==========================================================================
    # Creation and phase changes
    # ==========================================================================

    def create_checkpoints(self, phase: Phase) -> List[Checkpoint]:
        definitions = sorted(CHECKPOINTS.get(phase, []), key=lambda d: d.sequence_order)
        return [
            Checkpoint(
                id=d.id,
                phase=d.phase,
                name=d.name,
                description=d.description,
                sequence_order=d.sequence_order,
                completion_criteria=[c.text for c in d.criteria],
            )
            for d in definitions
        ]

    def create_progress(self, phase: Phase) -> CheckpointProgress:
        """Fresh progress for ``phase`` with every checkpoint incomplete."""
        return CheckpointProgress(phase=phase, checkpoints=self.create_checkpoints(phase))

    def transition_to_phase(
        self, progress: CheckpointProgress, phase: Phase
    ) -> CheckpointProgress:
        """Move ``progress`` to ``phase``; checkpoints are recreated, counters kept."""
        progress.phase = phase
        progress.checkpoints = self.create_checkpoints(phase)
        return progress

    # ==========================================================================
    # Completion
    # ==========================================================================

    @staticmethod
    def criterion_matches(criterion: CriterionRule, text: str) -> bool:
        """Whether one criterion is satisfied by already-normalized text."""
        if criterion.always:
            return True
        if criterion.needs_inference:
            return False
        if count_substrings_present(criterion.exclude, text):
            return False
        if count_substrings_present(criterion.indicators, text):
            return True
        if criterion.pattern is not None:
            return count_matches(criterion.pattern, text) >= criterion.min_matches
        return False

    def _match_checkpoint(self, checkpoint: Checkpoint, text: str) -> Tuple[bool, List[str]]:
        definition = self._definitions.get(checkpoint.id)
        if definition is None or not definition.criteria:
            return False, []

        evidence = [c.text for c in definition.criteria if self.criterion_matches(c, text)]
        total = len(definition.criteria)
        required = max(1, math.floor(total * COMPLETION_RATIO))
        complete = len(evidence) >= required and len(evidence) / total >= MIN_MATCH_SHARE
        return complete, evidence

    def evaluate_message(
        self, progress: CheckpointProgress, message: Any
    ) -> Optional[Checkpoint]:
        """Complete the first incomplete checkpoint the message satisfies.

        Returns:
            The completed checkpoint, or None if nothing completed
        """
        text = normalize_text(message, self.config.detection.max_text_length)
        if not text.strip():
            return None

        for checkpoint in sorted(progress.checkpoints, key=lambda cp: cp.sequence_order):
            if checkpoint.is_complete:
                continue
            complete, evidence = self._match_checkpoint(checkpoint, text)
            if complete:
                total = len(checkpoint.completion_criteria) or 1
                return self._mark_complete(
                    progress, checkpoint, round(len(evidence) / total, 2), evidence
                )
        return None

    def complete_checkpoint(
        self,
        progress: CheckpointProgress,
        checkpoint_id: str,
        confidence: float,
        evidence: Optional[List[str]] = None,
    ) -> Optional[Checkpoint]:
        """Complete a checkpoint whose criteria need assistant inference.

        Returns None when the checkpoint is unknown or already complete.
        """
        checkpoint = progress.get(checkpoint_id)
        if checkpoint is None or checkpoint.is_complete:
            return None
        return self._mark_complete(
            progress, checkpoint, max(0.0, min(1.0, confidence)), list(evidence or [])
        )

    @staticmethod
    def _mark_complete(
        progress: CheckpointProgress,
        checkpoint: Checkpoint,
        confidence: float,
        evidence: List[str],
    ) -> Checkpoint:
        checkpoint.is_complete = True
        checkpoint.completion_confidence = confidence
        checkpoint.evidence_collected = evidence
        checkpoint.completed_at = datetime.now()

        progress.current_streak += 1
        progress.longest_streak = max(progress.longest_streak, progress.current_streak)

        log.info(
            "checkpoint_completed",
            checkpoint_id=checkpoint.id,
            phase=checkpoint.phase.value,
            confidence=confidence,
            streak=progress.current_streak,
        )
        return checkpoint

    # ==========================================================================
    # Backtracking
    # ==========================================================================

    def _reframe(self, reason: BacktrackReason, target: Optional[Checkpoint]) -> str:
        parts = [self.config.templates.backtrack_reframes.get(reason.value, "")]
        if target is not None:
            parts.append(
                f'Revisiting "{target.name}" will help us {target.description.lower()}.'
            )
        parts.append(BACKTRACK_AUTONOMY_PROMPT)
        return "\n\n".join(p for p in parts if p)

    def backtrack(
        self,
        progress: CheckpointProgress,
        from_checkpoint_id: str,
        to_checkpoint_id: str,
        reason: BacktrackReason,
    ) -> str:
        """Reopen checkpoints from ``to`` up to (not including) ``from``.

        Returns:
            Positive reframe text, or "" when either checkpoint is unknown
        """
        source = progress.get(from_checkpoint_id)
        target = progress.get(to_checkpoint_id)
        if source is None or target is None:
            log.warning(
                "checkpoint_backtrack_unknown",
                from_checkpoint=from_checkpoint_id,
                to_checkpoint=to_checkpoint_id,
            )
            return ""

        for checkpoint in progress.checkpoints:
            if target.sequence_order <= checkpoint.sequence_order < source.sequence_order:
                checkpoint.reset()

        progress.current_streak = 0
        progress.backtrack_count += 1
        progress.backtrack_history.append(
            BacktrackRecord(
                from_checkpoint=from_checkpoint_id,
                to_checkpoint=to_checkpoint_id,
                reason=reason,
                from_phase=progress.phase,
                to_phase=progress.phase,
            )
        )

        log.info(
            "checkpoint_backtrack",
            from_checkpoint=from_checkpoint_id,
            to_checkpoint=to_checkpoint_id,
            reason=reason.value,
        )
        return self._reframe(reason, target)

    def backtrack_to_phase(
        self, progress: CheckpointProgress, phase: Phase, reason: BacktrackReason
    ) -> str:
        """Move back to an earlier phase, recreating its checkpoints."""
        from_phase = progress.phase
        current = progress.current_checkpoint
        from_id = current.id if current is not None else from_phase.value

        self.transition_to_phase(progress, phase)
        target = progress.checkpoints[0] if progress.checkpoints else None

        progress.current_streak = 0
        progress.backtrack_count += 1
        progress.backtrack_history.append(
            BacktrackRecord(
                from_checkpoint=from_id,
                to_checkpoint=target.id if target is not None else phase.value,
                reason=reason,
                from_phase=from_phase,
                to_phase=phase,
            )
        )

        log.info(
            "phase_backtrack",
            from_phase=from_phase.value,
            to_phase=phase.value,
            reason=reason.value,
            backtrack_count=progress.backtrack_count,
        )
        return self._reframe(reason, target)

    # ==========================================================================
    # Messages
    # ==========================================================================

    def celebration(self, progress: CheckpointProgress, checkpoint: Checkpoint) -> str:
        definition = self._definitions.get(checkpoint.id)
        if definition is None:
            return ""

        message = definition.celebration
        message += (
            f"\n\nProgress: {progress.completed_count}/{len(progress.checkpoints)} checkpoints"
        )
        if progress.current_streak >= STREAK_CELEBRATION_MIN:
            message += f"\n{progress.current_streak}-checkpoint streak!"
        message += f"\n\n{definition.next_step}"
        return message

    def progress_summary(self, progress: CheckpointProgress) -> str:
        phase_name = progress.phase.value.replace("_", " ").upper()
        summary = f"**{phase_name}** Progress: {round(progress.completion_percentage)}%"

        current = progress.current_checkpoint
        if current is not None:
            summary += f"\nCurrent: {current.name}"
            summary += f"\n{current.description}"

        if progress.current_streak >= STREAK_CELEBRATION_MIN:
            summary += f"\n{progress.current_streak}-checkpoint streak!"
        return summary
