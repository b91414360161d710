"""Tests for PatternDetector."""

import pytest

from okr_coach.core.config import CoachingConfig, DetectionConfig
from okr_coach.domain.models.detection import InterventionType, Severity
from okr_coach.domain.models.quality import ScoringContext
from okr_coach.rules.anti_patterns import (
    ANTI_PATTERN_RULES,
    FIVE_WHYS,
    GENERIC_REFRAMING_QUESTION,
    SPHERE_OF_INFLUENCE,
)
from okr_coach.services.pattern_detector import PatternDetector, coerce_context


@pytest.fixture
def detector(coaching_config):
    return PatternDetector(coaching_config)


class TestDetectPatterns:
    """Tests for detect_patterns."""

    def test_activity_objective_is_flagged(self, detector):
        """A deliverable phrased as an objective triggers activity_focused."""
        result = detector.detect_patterns("Launch the new mobile app")

        assert result.detected is True
        assert result.has_pattern("activity_focused")
        pattern = result.get_pattern("activity_focused")
        assert pattern.confidence == pytest.approx(0.93)
        assert pattern.severity == Severity.HIGH
        assert result.severity == Severity.HIGH
        assert result.confidence == pytest.approx(0.93)
        assert result.reframing_strategy.name == FIVE_WHYS.name
        assert result.suggested_interventions[0] == InterventionType.ACTIVITY_TO_OUTCOME

    def test_patterns_keep_catalogue_order(self, detector):
        """Patterns are listed in catalogue order, not by confidence."""
        result = detector.detect_patterns("Launch the new mobile app")

        catalogue = [rule.id for rule in ANTI_PATTERN_RULES]
        positions = [catalogue.index(pid) for pid in result.pattern_ids]
        assert positions == sorted(positions)

    def test_vanity_metric(self, detector):
        """Follower counts with no business context are vanity metrics."""
        result = detector.detect_patterns("Get 10000 Instagram followers")

        assert result.pattern_ids == ["vanity_metrics"]
        assert result.severity == Severity.MEDIUM
        assert result.confidence == pytest.approx(1.0)

    def test_dominant_pattern_prefers_severity(self, detector):
        """A critical pattern drives the strategy even when listed later."""
        result = detector.detect_patterns(
            "Increase revenue if customers will adopt the new pricing"
        )

        assert result.has_pattern("sphere_of_influence_violation")
        assert result.severity == Severity.CRITICAL
        assert result.reframing_strategy.name == SPHERE_OF_INFLUENCE.name

    def test_outcome_objective_is_clean(self, detector):
        """A measured outcome triggers neither activity nor vagueness."""
        result = detector.detect_patterns(
            "Increase customer retention from 70% to 85% by Q3 2025"
        )

        assert not result.has_pattern("activity_focused")
        assert not result.has_pattern("vague_outcome")

    @pytest.mark.parametrize("text", [None, "", "   ", "\n\t"])
    def test_empty_input_detects_nothing(self, detector, text):
        """Empty or whitespace input yields an empty result."""
        result = detector.detect_patterns(text)

        assert result.detected is False
        assert result.patterns == []
        assert result.confidence == 0.0
        assert result.severity is None
        assert result.reframing_strategy is None

    def test_non_string_input_is_converted(self, detector):
        """Non-string input is converted instead of raising."""
        result = detector.detect_patterns(12345)
        assert result.detected is False

    def test_long_input_is_truncated(self, coaching_config):
        """Text past max_text_length is ignored."""
        config = coaching_config.model_copy(
            update={"detection": DetectionConfig(max_text_length=20)}
        )
        detector = PatternDetector(config)

        # The trigger word sits beyond the truncation point
        text = "x" * 30 + " launch"
        assert detector.detect_patterns(text).detected is False

    def test_detection_is_deterministic(self, detector):
        """The same text always gives the same result."""
        text = "Maintain our weekly meetings and keep the current process"
        assert detector.detect_patterns(text) == detector.detect_patterns(text)

    def test_custom_rule_table(self, coaching_config):
        """An empty rule table detects nothing."""
        detector = PatternDetector(coaching_config, rules=[])
        assert detector.detect_patterns("Launch the new mobile app").detected is False

    def test_confidence_stays_in_range(self, detector):
        """Heavy repetition never pushes confidence past 1.0."""
        text = " ".join(["launch build create deliver deploy implement project"] * 20)
        result = detector.detect_patterns(text)
        assert all(0.0 <= p.confidence <= 1.0 for p in result.patterns)


class TestRuleGates:
    """Tests for the conditions that keep a rule silent."""

    def test_measured_outcome_is_not_vague(self, detector):
        """A number in the text silences vague_outcome despite "better"."""
        result = detector.detect_patterns("Increase revenue by 30% through better onboarding")
        assert not result.has_pattern("vague_outcome")

    def test_vague_outcome_needs_intensity_qualifier(self, detector):
        """An unmeasured verb is only vague alongside a qualifier such as "more"."""
        result = detector.detect_patterns("Increase Instagram followers")

        assert not result.has_pattern("vague_outcome")
        assert result.has_pattern("vanity_metrics")

    def test_vague_outcome_fires_on_qualifier_without_numbers(self, detector):
        """An intensity qualifier with no numbers is vague."""
        result = detector.detect_patterns("Make customers significantly happier")

        assert result.has_pattern("vague_outcome")
        assert result.get_pattern("vague_outcome").confidence == pytest.approx(0.7)

    def test_business_context_silences_vanity_metrics(self, detector):
        """Views tied to revenue are not vanity metrics."""
        result = detector.detect_patterns("Grow page views and revenue")

        assert not result.has_pattern("vanity_metrics")
        assert not result.has_pattern("vague_outcome")

    def test_binary_thinking_needs_completion_framing(self, detector):
        """A present-tense activity verb is activity language, not a binary goal."""
        result = detector.detect_patterns("Launch the new mobile app")

        assert not result.has_pattern("binary_thinking")
        assert result.has_pattern("activity_focused")

    def test_binary_thinking_fires_on_done_state(self, detector):
        """A goal phrased as a finished state is binary."""
        result = detector.detect_patterns("Get the new mobile app launched and live")
        assert result.has_pattern("binary_thinking")

    def test_numbers_silence_binary_thinking(self, detector):
        """A quantified completion goal is not binary."""
        result = detector.detect_patterns("Successfully launch in 3 new markets")
        assert not result.has_pattern("binary_thinking")

    def test_stretch_language_silences_business_as_usual(self, detector):
        """Maintaining while improving is not business as usual."""
        assert detector.detect_patterns(
            "Maintain our weekly meetings and keep the current process"
        ).has_pattern("business_as_usual")
        assert not detector.detect_patterns(
            "Maintain our weekly reports and improve their accuracy"
        ).has_pattern("business_as_usual")

    def test_outcome_language_silences_activity_focus(self, detector):
        """An activity tied to an outcome verb is not activity-focused."""
        result = detector.detect_patterns("Launch the new mobile app to increase retention")
        assert not result.has_pattern("activity_focused")

    @pytest.mark.parametrize(
        "rule_id,text",
        [
            ("activity_focused", "Build a dashboard to improve decisions"),
            ("binary_thinking", "Ship 2 features successfully"),
            ("vanity_metrics", "Grow followers to drive sales"),
            ("business_as_usual", "Continue the routine and accelerate it"),
            ("vague_outcome", "Get more customers to 500 per month"),
        ],
    )
    def test_excluding_condition_zeroes_confidence(self, detector, rule_id, text):
        """A matching exclusion gives the rule no confidence at all."""
        rule = next(r for r in ANTI_PATTERN_RULES if r.id == rule_id)
        assert detector.rule_confidence(rule, text.lower()) == 0.0


class TestContext:
    """Tests for context validation at the boundary."""

    def test_mapping_is_coerced(self):
        """Mappings are validated and normalized."""
        ctx = coerce_context({"industry": " Technology ", "team_size": 8})
        assert ctx.industry == "technology"
        assert ctx.team_size == 8

    def test_invalid_context_falls_back_to_empty(self):
        """Wrongly typed values give an empty context."""
        ctx = coerce_context({"team_size": "a lot"})
        assert ctx == ScoringContext()

    def test_none_is_empty_context(self):
        """None is an empty context."""
        assert coerce_context(None) == ScoringContext()

    def test_invalid_context_does_not_break_detection(self, detector):
        """A bad context does not stop detection."""
        result = detector.detect_patterns("Launch the new mobile app", {"team_size": -3})
        assert result.detected is True


class TestReframing:
    """Tests for reframing responses."""

    def test_first_attempt_uses_first_question(self, detector):
        """The first reply uses the strategy's first question and example."""
        text = "Launch the new mobile app"
        result = detector.detect_patterns(text)

        response = detector.generate_reframing_response(result, text)

        assert response.strategy.name == FIVE_WHYS.name
        assert response.question.startswith("That sounds like a project milestone!")
        assert "launch the new mobile app" in response.question
        assert response.previous_attempts == 0
        assert response.technique == "five_whys"
        assert len(response.examples) == 2
        assert 'For example, instead of:\n"Launch new mobile app"' in response.suggestion
        assert response.follow_up_questions
        assert response.expected_outcome

    def test_later_attempts_cycle_questions(self, detector):
        """Each further attempt moves to the next question."""
        text = "Launch the new mobile app"
        result = detector.detect_patterns(text)

        response = detector.generate_reframing_response(result, text, previous_attempts=1)

        assert response.question.startswith("Why is launch the new mobile app important")

    def test_exhausted_attempts_fall_back_to_generic_question(self, detector):
        """Past the question bank the generic question is used."""
        text = "Launch the new mobile app"
        result = detector.detect_patterns(text)

        response = detector.generate_reframing_response(
            result, text, previous_attempts=len(FIVE_WHYS.questions)
        )

        assert response.question == GENERIC_REFRAMING_QUESTION

    def test_industry_ranks_matching_example_first(self, detector):
        """An industry match outranks catalogue order."""
        text = "Launch the new mobile app"
        result = detector.detect_patterns(text)

        response = detector.generate_reframing_response(result, text, {"industry": "sales"})

        assert [ex.before for ex in response.examples] == [
            "Implement CRM system",
            "Launch new mobile app",
        ]
        assert 'instead of:\n"Implement CRM system"' in response.suggestion

    def test_irrelevant_examples_are_dropped(self, detector):
        """Examples that match nothing in the context fall below min_relevance."""
        text = "Launch the new mobile app"
        result = detector.detect_patterns(text)

        response = detector.generate_reframing_response(
            result, text, {"industry": "sales", "function": "finance", "team_size": 500}
        )

        assert [ex.before for ex in response.examples] == ["Implement CRM system"]

    def test_nothing_detected_returns_none(self, detector):
        """No detection means no reframing reply."""
        result = detector.detect_patterns("")
        assert detector.generate_reframing_response(result, "") is None


class TestReframingSuccess:
    """Tests for evaluate_reframing_success and the text score."""

    def test_outcome_rewrite_succeeds(self, detector):
        """An outcome rewrite of an activity succeeds."""
        outcome = detector.evaluate_reframing_success(
            "Launch the new mobile app",
            "Increase mobile customer retention from 60% to 75% by Q3 2025",
        )

        assert outcome.success is True
        assert outcome.after_score > outcome.before_score
        assert outcome.intervention == InterventionType.ACTIVITY_TO_OUTCOME

    def test_unchanged_text_does_not_succeed(self, detector):
        """Resubmitting the same text is not a success."""
        text = "Launch the new mobile app"
        assert detector.evaluate_reframing_success(text, text).success is False

    def test_text_score(self, detector):
        """The quick text score rewards outcomes and numbers."""
        # 50 - 8 for one activity word
        assert detector.calculate_text_score("Launch the app") == 42
        # 50 + 10 (increase) + 15 (digit)
        assert detector.calculate_text_score("Increase signups to 500") == 75
        assert detector.calculate_text_score(None) == 50


class TestDependencies:
    """Tests for extract_dependencies."""

    def test_customer_behavior(self, detector):
        """Customer choices are a low-control dependency."""
        deps = detector.extract_dependencies("Grow revenue once customers will upgrade")
        types = [d.type for d in deps]
        assert "customer_behavior" in types

    def test_conditional_clause(self, detector):
        """"if ..." clauses are reported as conditional dependencies."""
        deps = detector.extract_dependencies("Ship the feature if legal signs off")
        assert any(d.description.startswith("Conditional dependency: if legal") for d in deps)

    def test_no_dependencies(self, detector):
        """A self-contained objective has no dependencies."""
        assert detector.extract_dependencies("Reduce onboarding time to 2 days") == []
