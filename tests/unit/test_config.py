"""Tests for configuration module."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from okr_coach.core.config import (
    CoachingConfig,
    ExampleSelectionConfig,
    PhaseRulesConfig,
    ScoringConfig,
    Settings,
    load_coaching_config,
)
from okr_coach.core.exceptions import ConfigurationError

PROJECT_CONFIG = Path(__file__).resolve().parents[2] / "config" / "coaching_config.yaml"


def test_settings_defaults():
    """Settings have sensible defaults."""
    s = Settings(_env_file=None)

    assert s.database_path == Path("data/okr_coach.db")
    assert s.port == 8000
    assert s.log_sessions_to_keep == 5
    assert s.coaching_config_path is None


def test_settings_from_env():
    """Settings can be overridden via environment variables."""
    os.environ["DEBUG"] = "true"
    os.environ["PORT"] = "9001"

    try:
        s = Settings(_env_file=None)

        assert s.debug
        assert s.port == 9001
    finally:
        del os.environ["DEBUG"]
        del os.environ["PORT"]


def test_settings_validation():
    """Settings validate constraints."""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, port=70000)

    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_sessions_to_keep=0)


class TestCoachingConfig:
    """Tests for the YAML-backed coaching configuration."""

    def test_defaults_are_valid(self):
        """Default weight tables each sum to 100."""
        config = CoachingConfig()

        for table in config.scoring.weight_tables().values():
            assert sum(table.values()) == 100
        assert config.phases.objective_threshold == 70
        assert config.detection.threshold == 0.3

    def test_weights_must_sum_to_100(self):
        """A weight table that does not sum to 100 is rejected."""
        with pytest.raises(ValidationError):
            ScoringConfig(objective_weights={"outcome_orientation": 50, "clarity": 40})

    def test_example_weights_must_sum_to_one(self):
        """Example selection weights that do not sum to 1.0 are rejected."""
        with pytest.raises(ValidationError):
            ExampleSelectionConfig(industry_weight=0.6)
        assert ExampleSelectionConfig(industry_weight=0.3, function_weight=0.4).max_examples == 2

    def test_key_result_bounds(self):
        """min_key_results may not exceed max_key_results."""
        with pytest.raises(ValidationError):
            PhaseRulesConfig(min_key_results=5, max_key_results=3)

    def test_project_yaml_matches_defaults(self):
        """The shipped YAML loads and agrees with the built-in defaults."""
        config = load_coaching_config(PROJECT_CONFIG)
        defaults = CoachingConfig()

        assert config.detection == defaults.detection
        assert config.scoring == defaults.scoring
        assert config.phases == defaults.phases
        assert config.examples == defaults.examples

    def test_partial_yaml_overrides(self, tmp_path):
        """Sections left out fall back to defaults."""
        path = tmp_path / "coaching.yaml"
        path.write_text("phases:\n  objective_threshold: 80\n")

        config = load_coaching_config(path)

        assert config.phases.objective_threshold == 80
        assert config.phases.key_result_threshold == 70
        assert config.scoring == CoachingConfig().scoring

    def test_missing_and_empty_files_give_defaults(self, tmp_path):
        """No file, or an empty file, yields the defaults."""
        assert load_coaching_config(tmp_path / "missing.yaml") == CoachingConfig()

        empty = tmp_path / "empty.yaml"
        empty.write_text("")
        assert load_coaching_config(empty) == CoachingConfig()

    @pytest.mark.parametrize(
        "content",
        [
            "detection: [unclosed",
            "- just\n- a list\n",
            "scoring:\n  objective_weights:\n    clarity: 10\n",
            "detection:\n  threshold: 3.0\n",
        ],
    )
    def test_invalid_yaml_raises_configuration_error(self, tmp_path, content):
        """Unparseable or invalid files raise ConfigurationError."""
        path = tmp_path / "bad.yaml"
        path.write_text(content)

        with pytest.raises(ConfigurationError):
            load_coaching_config(path)
