"""Tests for ExampleSelector and the metric suggestions."""

import pytest

from okr_coach.core.config import ExampleSelectionConfig
from okr_coach.domain.models.detection import ReframingExample
from okr_coach.domain.models.phase import Phase
from okr_coach.domain.models.quality import ScoringContext
from okr_coach.rules.anti_patterns import FIVE_WHYS, SCOPE_RESPECT
from okr_coach.services.example_selector import ExampleSelector, complexity_band
from okr_coach.services.metrics_suggester import (
    function_metrics,
    outcome_type,
    suggest_metrics,
)


@pytest.fixture
def selector(coaching_config):
    return ExampleSelector(coaching_config)


def example(**fields):
    return ReframingExample(before="before", after="after", **fields)


class TestComponentScores:
    """Tests for the individual relevance components."""

    def test_no_context_is_neutral(self, selector):
        """Every context-driven component scores 0.5 with no context."""
        ctx = ScoringContext()
        ex = example(industries=("retail",), functions=("sales",))

        assert selector.industry_score(ex, ctx) == 0.5
        assert selector.function_score(ex, ctx) == 0.5
        assert selector.complexity_score(ex, ctx) == 0.5

    @pytest.mark.parametrize(
        "industries,expected",
        [
            (("retail",), 1.0),
            ((), 0.7),
            (("consumer",), 0.4),
            (("healthcare",), 0.1),
        ],
    )
    def test_industry_score(self, selector, industries, expected):
        """Exact beats universal beats related beats unrelated."""
        ctx = ScoringContext(industry="Retail")
        assert selector.industry_score(example(industries=industries), ctx) == expected

    def test_industry_match_is_whole_word(self, selector):
        """"ai" does not match inside "retail"."""
        ctx = ScoringContext(industry="ai")
        assert selector.industry_score(example(industries=("retail",)), ctx) == 0.1

    def test_function_score(self, selector):
        """A role title containing the function counts as a match."""
        ctx = ScoringContext(function="Product Management")

        assert selector.function_score(example(functions=("product",)), ctx) == 1.0
        assert selector.function_score(example(), ctx) == 0.7
        assert selector.function_score(example(functions=("sales",)), ctx) == 0.2

    @pytest.mark.parametrize(
        "team_size,complexity,expected",
        [
            (6, "small", 1.0),
            (30, "small", 0.6),
            (200, "small", 0.3),
        ],
    )
    def test_complexity_score(self, selector, team_size, complexity, expected):
        """Team-size bands score by distance."""
        ctx = ScoringContext(team_size=team_size)
        assert selector.complexity_score(example(complexity=complexity), ctx) == expected

    def test_complexity_band(self):
        """Team sizes fall into small, medium and large bands."""
        assert complexity_band(10) == "small"
        assert complexity_band(11) == "medium"
        assert complexity_band(51) == "large"

    def test_phase_score(self, selector):
        """Universal examples suit discovery; specific ones suit refinement."""
        universal = example()
        specific = example(functions=("sales",))

        assert selector.phase_score(universal, Phase.DISCOVERY) == 0.9
        assert selector.phase_score(specific, Phase.DISCOVERY) == 0.7
        assert selector.phase_score(specific, Phase.REFINEMENT) == 0.9
        assert selector.phase_score(universal, None) == 0.6


class TestSelect:
    """Tests for ranking and trimming."""

    def test_relevance_uses_configured_weights(self, selector):
        """Relevance is the weighted sum of the components."""
        ctx = ScoringContext(industry="sales")
        crm = FIVE_WHYS.examples[1]

        # 0.4 * 1.0 + 0.3 * 0.5 + 0.2 * 0.5 + 0.05 * 0.9 + 0.05 * 0.8
        assert selector.relevance(crm, ctx, Phase.REFINEMENT) == pytest.approx(0.735)

    def test_function_reorders_examples(self, selector):
        """The example for the user's function comes first."""
        ctx = ScoringContext(function="customer support")
        selected = selector.select(SCOPE_RESPECT.examples, ctx, Phase.REFINEMENT)

        assert selected[0].context == "Customer Support"
        assert len(selected) == 2

    def test_ties_keep_catalogue_order(self, selector):
        """Equal scores keep the order the examples were declared in."""
        selected = selector.select(FIVE_WHYS.examples, ScoringContext())
        assert [ex.before for ex in selected] == [ex.before for ex in FIVE_WHYS.examples]

    def test_max_examples_from_config(self, coaching_config):
        """The number of examples returned follows the config."""
        config = coaching_config.model_copy(
            update={"examples": ExampleSelectionConfig(max_examples=1)}
        )
        selected = ExampleSelector(config).select(SCOPE_RESPECT.examples, ScoringContext())
        assert len(selected) == 1

    def test_empty_candidates(self, selector):
        """No candidates gives no examples."""
        assert selector.select([], ScoringContext()) == []


class TestMetricSuggestions:
    """Tests for key result metric ideas."""

    def test_function_metrics_come_first(self):
        """Function metrics lead and are prefixed for display."""
        ideas = suggest_metrics("sales", "Grow revenue in the midmarket")

        assert ideas == [
            "Metric idea: Win rate on qualified opportunities",
            "Metric idea: Average deal size",
            "Metric idea: Sales cycle length in days",
        ]

    def test_outcome_type_fills_in_without_function(self):
        """With no function the objective's outcome type supplies the metrics."""
        ideas = suggest_metrics(None, "Reduce the cost of onboarding", limit=2)

        assert ideas == [
            "Metric idea: Cycle time from request to delivery",
            "Metric idea: Cost per transaction",
        ]

    @pytest.mark.parametrize(
        "objective,expected",
        [
            ("Grow our customer base", "growth"),
            ("Streamline invoicing", "efficiency"),
            ("Raise product reliability", "quality"),
            ("Explore new research bets", "innovation"),
            ("Delight people", "growth"),
            (None, "growth"),
        ],
    )
    def test_outcome_type(self, objective, expected):
        """The first matching outcome type wins, growth by default."""
        assert outcome_type(objective) == expected

    def test_function_match_is_whole_word(self):
        """Role titles match on whole words and unknown functions give nothing."""
        assert function_metrics("Head of Engineering")[0] == "Deployment frequency per week"
        assert function_metrics("legal") == []
        assert function_metrics(None) == []
