"""Quality rubric word tables and regexes.

Objective tables drive outcome orientation, inspiration, clarity, alignment,
ambition and scope appropriateness. Key result regexes drive quantification,
specificity, stretch ratio, relevance and timebound scoring.
"""

from typing import Dict, List, Tuple

from okr_coach.domain.models.quality import ObjectiveScope, QualityLevel

# =============================================================================
# Quality levels
# =============================================================================

# Checked in order; the first threshold the score reaches wins
QUALITY_LEVEL_THRESHOLDS: List[Tuple[int, QualityLevel]] = [
    (90, QualityLevel.EXCELLENT),
    (75, QualityLevel.GOOD),
    (60, QualityLevel.ACCEPTABLE),
    (40, QualityLevel.NEEDS_WORK),
]


# =============================================================================
# Objective vocabulary
# =============================================================================

OBJECTIVE_ACTIVITY_VERBS = (
    r"\b(launch|build|create|complete|implement|migrate|deploy|ship|deliver|finish|execute)\b"
)
OBJECTIVE_OUTCOME_VERBS = (
    r"\b(become|achieve|transform|revolutionize|dominate|establish|accelerate|maximize"
    r"|increase|improve|reduce|enhance|strengthen)\b"
)

# (score, words) from strongest to weakest; the first tier that matches wins
INSPIRATION_TIERS: List[Tuple[int, Tuple[str, ...]]] = [
    (100, (
        "revolutionize", "transform", "breakthrough", "extraordinary",
        "delight", "exceptional", "game-changing",
    )),
    (75, (
        "dramatically", "significantly", "dominate", "accelerate", "maximize",
        "strengthen", "best-in-class", "industry-leading", "world-class",
        "leading", "achieve",
    )),
    (50, ("increase", "improve", "enhance", "grow", "develop", "advance")),
    (25, ("optimize", "implement", "configure", "integrate", "deploy", "execute")),
    (0, ("comply", "maintain", "meet requirements", "sustain", "preserve")),
]

VAGUE_WORDS = (
    "better", "good", "more", "less", "some", "many", "few", "various",
    "several", "multiple", "different", "appropriate", "best", "worst",
    "great", "excellent", "everyone", "everything",
)

BUSINESS_INDICATORS = (
    "revenue", "customer", "market", "growth", "value", "adoption",
    "engagement", "satisfaction", "retention", "acquisition", "conversion",
    "profit", "sales", "enterprise", "business",
)
STRATEGIC_INDICATORS = (
    "industry-leading", "best-in-class", "world-class", "leading", "competitive",
    "leadership", "excellence", "premier", "top-tier", "platform", "capabilities",
    "delivery", "operations", "performance", "quality", "reliability", "scale",
    "efficiency", "effectiveness",
)
WEAK_ALIGNMENT_WORDS = r"\b(team|improve)\b"
MAINTENANCE_WORDS = r"\b(maintain|sustain|keep|preserve|continue)\b"

# (score, regex) checked in order after the maintenance check
AMBITION_TIERS: List[Tuple[int, str]] = [
    (100, r"\b(revolutionize|transform|dominate|breakthrough|exceptional|extraordinary)\b"),
    (75, r"\b(dramatically|significantly|accelerate|maximize|achieve)\b"),
    (50, r"\b(improve|increase|enhance|grow|strengthen)\b"),
]

INDUSTRY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "technology": ("user", "customer", "product", "innovation", "digital", "platform", "performance"),
    "healthcare": ("patient", "care", "quality", "safety", "outcome", "treatment", "health"),
    "finance": ("customer", "risk", "compliance", "revenue", "profit", "investment", "return"),
    "retail": ("customer", "sales", "experience", "inventory", "margin", "loyalty", "satisfaction"),
    "manufacturing": ("quality", "efficiency", "cost", "safety", "productivity", "waste", "delivery"),
}
FUNCTION_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "engineering": ("performance", "quality", "reliability", "scalability", "efficiency", "automation"),
    "sales": ("revenue", "pipeline", "conversion", "customer", "growth", "acquisition"),
    "marketing": ("awareness", "engagement", "conversion", "brand", "reach", "acquisition"),
    "operations": ("efficiency", "cost", "quality", "process", "productivity", "satisfaction"),
    "hr": ("retention", "satisfaction", "engagement", "performance", "culture", "development"),
}


# =============================================================================
# Scope appropriateness
# =============================================================================

SCOPE_INDICATORS: Dict[str, str] = {
    "market_positioning": (
        r"\b(become|establish|dominate|lead|transform industry|market leader|define category)\b"
    ),
    "organizational_direction": (
        r"\b(company|organization|business model|strategic|vision|mission)\b"
    ),
    "multiple_departments": r"\b(cross-functional|company-wide|organization-wide)\b",
    "measurable_verb": r"\b(increase|reduce|improve|achieve|reach)\b",
    "measurable_number": r"\d+%|\d+ [a-z]+",
    "tactical_execution": r"\b(our team|our department|our function|our process)\b",
    "not_single_team": r"\b(cross-team|cross-department|company-wide)\b",
    "cross_department_dependency": (
        r"\b(requires|depends on|needs support from|coordinates with)\b"
    ),
    "disguised_activity": r"\b(implement|launch|build|deploy|create)\b",
}

# Team-controllable when the reported team size is below this
TEAM_CONTROL_MAX_SIZE = 50

# Per scope: indicator name -> score adjustment, applied from a base of 70
SCOPE_ADJUSTMENTS: Dict[ObjectiveScope, Dict[str, int]] = {
    ObjectiveScope.STRATEGIC: {
        "market_positioning": 25,
        "organizational_direction": 20,
        "multiple_departments": 15,
        "tactical_execution": -25,
        "single_team_focus": -20,
    },
    ObjectiveScope.DEPARTMENTAL: {
        "multiple_departments": 20,
        "measurable_outcome": 15,
        "market_positioning": -10,
        "tactical_execution": -10,
    },
}
_TEAM_ADJUSTMENTS = {
    "team_control": 25,
    "measurable_outcome": 25,
    "tactical_execution": 20,
    "single_team_focus": 15,
    "market_positioning": -15,
    "organizational_direction": -10,
    "multiple_departments": -15,
    "cross_department_dependency": -10,
    "unmeasured_activity": -15,
}
for _scope in (ObjectiveScope.TEAM, ObjectiveScope.INITIATIVE, ObjectiveScope.PROJECT):
    SCOPE_ADJUSTMENTS[_scope] = _TEAM_ADJUSTMENTS

SCOPE_BASE_SCORE = 70


# =============================================================================
# Key result regexes
# =============================================================================

# "10,000", "2.5" or "800"; thousands separators must come in groups of three
KR_NUMBER = r"(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?"
# k/m/b magnitude or percent, kept with the number so parse_number can scale it
KR_MAGNITUDE = r"(?:[kmb](?![a-z])|%)?"
KR_UNIT_SUFFIX = (
    r"(?:\s?(?:ms|milliseconds?|s|secs?|seconds?|mins?|minutes?|hrs?|hours?|days?|x|pts"
    r"|points?)\b)"
)
KR_AMOUNT = rf"[$€¥£]?{KR_NUMBER}{KR_MAGNITUDE}{KR_UNIT_SUFFIX}?"

KR_METRIC = (
    rf"(nps|launch \d+|deliver \d+|ship \d+|\d+%|[$€¥£]\d+[kmb]?|\d+[kmb]\b"
    rf"|\d+ (users|customers|score|rate|time|hours|days|features?|items?)"
    rf"|\d{{1,3}}(?:,\d{{3}})+|{KR_NUMBER}{KR_UNIT_SUFFIX}"
    rf"|\bfrom\s+{KR_AMOUNT}\s+to\s+{KR_AMOUNT})"
)
KR_LAUNCH_COUNT = r"\b(launch|deliver|ship) \d+"
KR_BASELINE = rf"from\s+({KR_AMOUNT}|nps)"
KR_TARGET = rf"\b(to|reach|achieve)\s+({KR_AMOUNT})"
# Group 1 holds the number and its magnitude; a trailing unit is matched but not captured
KR_FROM_NUMBER = rf"from\s+[$€¥£]?({KR_NUMBER}{KR_MAGNITUDE}){KR_UNIT_SUFFIX}?"
KR_TO_NUMBER = rf"\bto\s+[$€¥£]?({KR_NUMBER}{KR_MAGNITUDE}){KR_UNIT_SUFFIX}?"

KR_UNITS = (
    r"(users|customers|%|\$|€|¥|hours|days|minutes|score|rate|count|features?|items?"
    r"|points?|nps|\d\s?(?:ms|s|secs?|seconds?|mins?|x|pts)\b|\bmau\b|\bdau\b|\bwau\b"
    r"|\bmrr\b|\barr\b)"
)
KR_SOURCE = (
    r"(survey|analytics|data|report|zendesk|salesforce|google analytics|metrics|dashboard)"
)
KR_FREQUENCY = (
    r"(monthly|quarterly|weekly|daily|annual|per month|per quarter|per week|per day"
    r"|\bmau\b|\bdau\b|\bwau\b|\bmrr\b|\barr\b)"
)
KR_IMPLICIT_FREQUENCY = (
    r"(monthly active users|daily active users|weekly active users|monthly recurring revenue"
    r"|annual recurring revenue|7-day retention|30-day retention|response time|load time"
    r"|latency|deployment time|nps)"
)
KR_VAGUE_QUANTIFIERS = r"\b(significant|meaningful|substantial|considerable)\b"

KR_LEADING_VERBS = (
    "increase", "reduce", "achieve", "maintain", "launch", "deliver", "improve",
    "grow", "expand", "scale", "build", "create", "establish", "reach", "attain",
    "hit", "complete", "execute",
)
KR_REDUCE_VERBS = r"\b(reduce|decrease|lower|minimize|cut)\b"
KR_INCREASE_VERBS = r"\b(increase|grow|expand|scale|raise|boost|improve)\b"
KR_TIME_METRIC = r"\b(time|latency|duration|delay)\b"

# Stretch-ratio bands for increase goals: (upper ratio, score at upper ratio)
# Linear interpolation between consecutive points.
INCREASE_BANDS: List[Tuple[float, float]] = [
    (1.0, 0.0),
    (1.2, 25.0),
    (1.5, 100.0),
    (3.0, 100.0),
    (5.0, 50.0),
]
INCREASE_UNREALISTIC_SCORE = 40

# Reduction-fraction bands for reduce goals
REDUCE_BANDS: List[Tuple[float, float]] = [
    (0.0, 0.0),
    (0.2, 25.0),
    (0.3, 100.0),
]
REDUCE_PLATEAU_END = 0.7
REDUCE_PLATEAU_END_TIME = 0.95
REDUCE_UNREALISTIC_SCORE = 50

NO_RATIO_AMBITION_SCORE = 75

# Relevance domains shared between an objective and a key result
KR_DOMAINS: Dict[str, str] = {
    "revenue": r"revenue|mrr|arr|sales|\$\d+",
    "users": r"users|customers|accounts|subscribers",
    "engagement": r"engagement|active|retention|adoption|mau|dau|wau",
    "quality": r"quality|satisfaction|nps|defect|yield|excellence|operational",
    "performance": r"performance|speed|time|uptime|reliability|deployment|delivery|accelerate",
    "growth": r"growth|expand|scale|increase|grow",
    "cost": r"cost|expense|efficiency|savings",
    "market": r"market|share|competitive|industry",
}
RELATED_DOMAINS: Dict[str, Tuple[str, ...]] = {
    "revenue": ("customer", "sales", "pricing", "conversion", "churn", "acquisition"),
    "engagement": ("users", "active", "retention", "features", "adoption", "session"),
    "quality": (
        "defect", "yield", "satisfaction", "nps", "response time", "uptime",
        "performance", "deployment", "delivery", "operational",
    ),
    "performance": (
        "quality", "operational", "delivery", "deployment", "speed", "time",
        "efficiency", "excellence",
    ),
    "growth": (
        "customers", "revenue", "users", "market share", "expansion", "delivery",
        "performance",
    ),
}

_MONTHS = (
    "january|february|march|april|may|june|july|august|september|october"
    r"|november|december|jan|feb|mar|apr|jun|jul|aug|sep|sept|oct|nov|dec"
)
# Explicit deadlines; group "year" captures the year where one is present
KR_EXPLICIT_DEADLINES: Tuple[str, ...] = (
    r"\b(by|before|until|in|during)\s+(end\s+of\s+|mid-?)?(q[1-4]|h[12])\s+(?P<year>\d{4})\b",
    r"\b(by|before|until|in|during)\s+(end\s+of\s+)?(" + _MONTHS + r")\s+(?P<year>\d{4})\b",
    r"\bby\s+end\s+of\s+(the\s+)?(q[1-4]|quarter|month|year|" + _MONTHS + r")\b",
    r"\b(by|before|until)\s+(?P<year>\d{4})\b",
    r"\b(monthly|quarterly|weekly|daily|annual)\s+(throughout|during|in)\s+(q[1-4]|h[12]|\d{4})\b",
)
KR_VAGUE_TIMEFRAMES: Tuple[str, ...] = (
    r"\b(soon|next\s+quarter|this\s+quarter|this\s+year|next\s+year|eventually|later)\b",
    r"\bq[1-4]\b",
    r"\bh[12]\b",
)


# =============================================================================
# OKR set scoring
# =============================================================================

STOP_WORDS = frozenset(
    ("the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by", "an", "a")
)
LEADING_INDICATOR = r"\b(activity|input|effort|process|action|work|task|meeting|training)\b"
LAGGING_INDICATOR = (
    r"\b(result|outcome|revenue|customer|user|satisfaction|score|rating|performance)\b"
)
OKR_SET_WEIGHTS: Dict[str, float] = {
    "objective": 0.4,
    "key_results": 0.4,
    "coherence": 0.1,
    "completeness": 0.05,
    "balance": 0.025,
    "achievability": 0.025,
}


# =============================================================================
# Feedback
# =============================================================================

# (dimension, below threshold, message)
OBJECTIVE_FEEDBACK: List[Tuple[str, int, str]] = [
    ("outcome_orientation", 65, "Focus on the outcome or result rather than the activity or deliverable"),
    ("inspiration", 50, "Add more inspiring language that energizes the team"),
    ("clarity", 70, "Make the objective clearer and more memorable (aim for under 12 words)"),
    ("alignment", 60, "Connect more clearly to business value and strategic priorities"),
    ("ambition", 70, "Increase the ambition level - this should be a stretch goal"),
    ("scope_appropriateness", 60, "Ensure this objective matches your team's span of control and organizational level"),
]
OBJECTIVE_IMPROVEMENTS: List[Tuple[str, int, str]] = [
    ("outcome_orientation", 50, 'Try asking: "What change will this create?" instead of "What will we build?"'),
    ("inspiration", 40, "Consider what excites you most about achieving this outcome"),
    ("clarity", 50, "Simplify the language and aim for under 12 words"),
    ("ambition", 50, "Raise the bar: describe a result that would be a real achievement"),
    ("alignment", 50, "Connect this to clear business value or strategic priorities"),
    ("scope_appropriateness", 60, "Focus on outcomes your team can directly control and measure - avoid company-wide strategic goals unless you're in executive leadership"),
]
KEY_RESULT_FEEDBACK: List[Tuple[str, int, str]] = [
    ("quantification", 50, "Add specific numbers with baseline and target values"),
    ("specificity", 50, "Add units, frequency (monthly, quarterly) and/or measurement source"),
    ("ambition", 60, "Make this more challenging - aim for 70% confidence in achievement"),
    ("relevance", 60, "Make it clearer how this key result supports the objective"),
    ("timebound", 50, "Add a deadline (by Q2 2025) or cadence (monthly throughout Q1 2025)"),
]
KEY_RESULT_IMPROVEMENTS: List[Tuple[str, int, str]] = [
    ("quantification", 40, 'Try: "Increase [metric] from [baseline] to [target] by [date]"'),
    ("specificity", 30, "Name the unit and where the number will come from (survey, analytics, dashboard)"),
    ("timebound", 50, 'Add specific quarter/month: "by Q2 2025" or "by March 2025"'),
]
UNREALISTIC_TARGET_FEEDBACK = (
    "This target may be unrealistic - consider a stretch that is challenging but achievable"
)
EMPTY_TEXT_FEEDBACK = "No text was provided to score"
