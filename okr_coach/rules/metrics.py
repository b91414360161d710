"""Key result metric ideas by business function and outcome type.

Function keys are matched as whole words against the session's function, so
"product management" picks up the "product" list. Outcome types are read off
the objective text when no function list applies or it runs short.
"""

from typing import Dict, List

FUNCTION_METRICS: Dict[str, List[str]] = {
    "product": [
        "Feature adoption rate (% of active users using the feature weekly)",
        "7-day activation rate for new sign-ups",
        "30-day retention of new users",
    ],
    "engineering": [
        "Deployment frequency per week",
        "p95 API latency in ms",
        "Change failure rate (% of deployments causing an incident)",
    ],
    "marketing": [
        "Marketing-qualified leads per month",
        "Lead-to-customer conversion rate",
        "Customer acquisition cost",
    ],
    "sales": [
        "Win rate on qualified opportunities",
        "Average deal size",
        "Sales cycle length in days",
    ],
    "customer service": [
        "Customer satisfaction (CSAT) score",
        "First-contact resolution rate",
        "Average resolution time in hours",
    ],
    "support": [
        "First response time in hours",
        "First-contact resolution rate",
        "Ticket backlog older than 7 days",
    ],
    "operations": [
        "Process cycle time in days",
        "On-time delivery rate",
        "Cost per unit processed",
    ],
    "finance": [
        "Days to close the books each month",
        "Forecast accuracy (% variance from actuals)",
        "Days sales outstanding",
    ],
    "hr": [
        "Time to hire in days",
        "Employee engagement score",
        "Regretted attrition rate",
    ],
}

# Checked in order against the objective; the first match supplies metrics
OUTCOME_TYPE_PATTERNS: Dict[str, str] = {
    "growth": r"\b(grow|increase|expand|scale|revenue|sales|customers|users|market)\b",
    "efficiency": r"\b(reduce|optimize|efficiency|cost|faster|automate|streamline)\b",
    "quality": r"\b(quality|satisfaction|experience|reliability|performance|defect|error)\b",
    "innovation": r"\b(innovation|new|launch|develop|create|research|product)\b",
}

OUTCOME_METRICS: Dict[str, List[str]] = {
    "growth": [
        "Monthly recurring revenue",
        "Net new customers per month",
        "Net revenue retention",
    ],
    "efficiency": [
        "Cycle time from request to delivery",
        "Cost per transaction",
        "Share of work automated",
    ],
    "quality": [
        "Net Promoter Score",
        "Defect escape rate",
        "Customer satisfaction score",
    ],
    "innovation": [
        "Experiments run per quarter",
        "Revenue share from products launched this year",
        "Time from idea to first customer",
    ],
}

METRIC_SUGGESTION_PREFIX = "Metric idea: "
MAX_METRIC_SUGGESTIONS = 3
