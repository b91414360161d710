"""Consistency checks over the declarative rule tables."""

import re

import pytest

from okr_coach.domain.models.detection import InterventionType
from okr_coach.domain.models.phase import PHASE_ORDER, Phase
from okr_coach.rules.anti_patterns import (
    ANTI_PATTERN_RULES,
    EXPECTED_OUTCOMES,
    FOLLOW_UP_QUESTIONS,
)
from okr_coach.rules.checkpoints import CHECKPOINTS
from okr_coach.rules.phases import REVISIT_EVENTS, TRANSITIONS


class TestAntiPatternCatalogue:
    """Tests for the anti-pattern catalogue."""

    def test_ids_are_unique(self):
        """Rule IDs are unique."""
        ids = [rule.id for rule in ANTI_PATTERN_RULES]
        assert len(ids) == len(set(ids))

    @pytest.mark.parametrize("rule", ANTI_PATTERN_RULES, ids=lambda r: r.id)
    def test_patterns_compile(self, rule):
        """Every detection, gate and context regex compiles."""
        patterns = list(rule.detection_patterns)
        patterns += list(rule.context_rule.all_of)
        patterns += list(rule.context_rule.any_of)
        patterns += list(rule.requires_any) + list(rule.suppress_if)
        patterns += list(rule.context_rule.none_of)
        patterns += list(rule.context_rule.counts.values())
        for pattern in patterns:
            re.compile(pattern, re.IGNORECASE)

    @pytest.mark.parametrize("rule", ANTI_PATTERN_RULES, ids=lambda r: r.id)
    def test_thresholds_name_known_counts(self, rule):
        """Count thresholds only refer to counts the rule defines."""
        for threshold in rule.context_rule.count_thresholds:
            assert set(threshold) <= set(rule.context_rule.counts)

    def test_every_intervention_has_follow_ups(self):
        """Every intervention has follow-up questions and an expected outcome."""
        for intervention in InterventionType:
            assert FOLLOW_UP_QUESTIONS.get(intervention)
            assert EXPECTED_OUTCOMES.get(intervention)


class TestCheckpointCatalogue:
    """Tests for the checkpoint catalogue."""

    def test_every_phase_has_an_entry(self):
        """Every phase has a checkpoint list; completed has none."""
        assert set(CHECKPOINTS) == set(Phase)
        assert CHECKPOINTS[Phase.COMPLETED] == []

    @pytest.mark.parametrize("phase", [p for p in PHASE_ORDER if p != Phase.COMPLETED])
    def test_sequence_orders_are_contiguous(self, phase):
        """Sequence orders run 1..n within each phase."""
        definitions = CHECKPOINTS[phase]
        assert [d.sequence_order for d in definitions] == list(range(1, len(definitions) + 1))
        assert all(d.phase == phase for d in definitions)

    def test_ids_are_unique(self):
        """Checkpoint IDs are unique across phases."""
        ids = [d.id for defs in CHECKPOINTS.values() for d in defs]
        assert len(ids) == len(set(ids))


class TestTransitionTable:
    """Tests for the phase transition table."""

    def test_forward_moves_advance_one_phase(self):
        """Forward transitions move exactly one phase."""
        for (source, event), target in TRANSITIONS.items():
            if event in REVISIT_EVENTS.values():
                continue
            assert target.index == source.index + 1

    def test_revisits_go_backwards(self):
        """Revisit events only lead to earlier phases."""
        for (source, event), target in TRANSITIONS.items():
            if event in REVISIT_EVENTS.values():
                assert target.is_before(source)
                assert REVISIT_EVENTS[target] == event

    def test_completed_has_no_exits(self):
        """Nothing leaves the completed phase."""
        assert all(source != Phase.COMPLETED for source, _ in TRANSITIONS)
