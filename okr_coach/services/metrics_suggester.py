"""
Key result metric ideas for the kr_discovery phase.

Metrics for the session's business function come first; the list is topped
up from the outcome type the objective reads as (growth, efficiency, quality
or innovation). Growth is assumed when nothing else matches.
"""

from typing import Any, List, Optional

from okr_coach.rules.metrics import (
    FUNCTION_METRICS,
    MAX_METRIC_SUGGESTIONS,
    METRIC_SUGGESTION_PREFIX,
    OUTCOME_METRICS,
    OUTCOME_TYPE_PATTERNS,
)
from okr_coach.services.text_helpers import contains_word, matches, normalize_text


def function_metrics(function: Optional[str]) -> List[str]:
    if not function:
        return []
    metrics: List[str] = []
    for name, names in FUNCTION_METRICS.items():
        if contains_word(name, function) or contains_word(function, name):
            metrics.extend(m for m in names if m not in metrics)
    return metrics


def outcome_type(objective: Any) -> str:
    text = normalize_text(objective)
    for name, pattern in OUTCOME_TYPE_PATTERNS.items():
        if matches(pattern, text):
            return name
    return "growth"


def suggest_metrics(
    function: Optional[str],
    objective: Any = None,
    limit: int = MAX_METRIC_SUGGESTIONS,
) -> List[str]:
    """Up to ``limit`` suggestion lines, each prefixed with "Metric idea: "."""
    metrics = function_metrics(function)
    for metric in OUTCOME_METRICS[outcome_type(objective)]:
        if metric not in metrics:
            metrics.append(metric)
    return [f"{METRIC_SUGGESTION_PREFIX}{m}" for m in metrics[:limit]]
