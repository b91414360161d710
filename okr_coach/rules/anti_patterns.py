"""Anti-pattern rule catalogue.

Each rule is declared as data: detection regexes, keyword triggers, a
declarative context rule and the reframing strategy used when the rule is
the dominant match. The detector in okr_coach.services.pattern_detector
evaluates these rules without any rule-specific branching.

Rules are listed in detection order; DetectionResult.patterns preserves it.
"""

from typing import Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from okr_coach.domain.models.detection import (
    InterventionType,
    ReframingExample,
    ReframingStrategy,
    Severity,
)


class ContextRule(BaseModel):
    """Declarative context check evaluated over the lower-cased text.

    The rule passes when:
        - every ``all_of`` regex matches
        - at least one ``any_of`` regex matches (if any are given)
        - no ``none_of`` regex matches
        - at least one ``count_thresholds`` entry is satisfied (if any are
          given); an entry is satisfied when every named count reaches its
          minimum
    """

    model_config = ConfigDict(frozen=True)

    all_of: Tuple[str, ...] = ()
    any_of: Tuple[str, ...] = ()
    none_of: Tuple[str, ...] = ()
    counts: Dict[str, str] = Field(default_factory=dict)
    count_thresholds: Tuple[Dict[str, int], ...] = ()


class AntiPatternRule(BaseModel):
    """One entry in the anti-pattern catalogue.

    ``requires_any`` and ``suppress_if`` gate the rule before any evidence is
    counted: the rule cannot fire unless one ``requires_any`` regex matches
    (when given), and never fires when a ``suppress_if`` regex matches. The
    context rule only adds confidence.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    severity: Severity
    intervention: InterventionType
    detection_patterns: Tuple[str, ...]
    keyword_triggers: Tuple[str, ...] = ()
    requires_any: Tuple[str, ...] = ()
    suppress_if: Tuple[str, ...] = ()
    context_rule: ContextRule = Field(default_factory=ContextRule)
    strategy: ReframingStrategy


# =============================================================================
# Shared vocabulary
# =============================================================================

COMPLETION_WORDS = (
    r"\b(done|completed?|complete|finished?|finish|launched?|launch|shipped?|ship"
    r"|delivered?|deliver|implemented?|implement)\b"
)
# Terminal states and "achieve success" aspirations; a bare activity verb is not enough
COMPLETION_FRAMING = (
    r"\b(done|completed?|finished?|launched|shipped|delivered|implemented|ready|live"
    r"|successfully|completely|fully)\b",
    r"\b(achieve|attain|accomplish|reach)\s+(?:the\s+)?(?:\w+\s+)?(goal|excellence|success"
    r"|leadership|greatness|mastery)\b",
)
NUMBER_QUALIFIERS = r"\b(\d+|by\s+\d|from\s+\d|to\s+\d|percent|points?)\b|%"
OUTCOME_LANGUAGE = (
    r"\b(increase|decrease|improve|reduce|enhance|achieve|reach|result|outcome"
    r"|impact|benefit|value|change)\b"
)
INTENSITY_QUALIFIERS = (
    r"\b(best|better|good|great|more|less|some|many|few|various|several|multiple"
    r"|different|appropriate|significant|substantial|significantly|greatly"
    r"|substantially|meaningful|considerable|considerably)\b"
)
BUSINESS_IMPACT_TERMS = (
    r"\b(revenue|conversion|retention|satisfaction|value|business|customer"
    r"|sales|profit|growth)\b"
)
STRETCH_QUALIFIERS = (
    r"\b(improve|increase|enhance|optimize|accelerate|transform|exceed"
    r"|breakthrough|stretch|ambitious)\b"
)


# =============================================================================
# Reframing strategies
# =============================================================================

FIVE_WHYS = ReframingStrategy(
    name="Five Whys Technique",
    technique="five_whys",
    questions=[
        "That sounds like a project milestone! Let's explore what change {activity} will create for your users or customers.",
        "Why is {activity} important to your organization?",
        "What value will {activity} create once it's complete?",
        "How will people's experience change when {activity} is finished?",
        "What business outcome are you hoping to achieve through {activity}?",
    ],
    examples=[
        ReframingExample(
            before="Launch new mobile app",
            after="Delight customers with instant access to their account information",
            context="Technology",
            explanation="Shifted from the deliverable (app) to the customer outcome (instant access)",
            industries=("technology", "software", "saas"),
            functions=("product", "engineering"),
        ),
        ReframingExample(
            before="Implement CRM system",
            after="Transform sales productivity by reducing admin time by 40%",
            context="Sales",
            explanation="Focused on the productivity outcome rather than the system implementation",
            industries=("sales", "b2b"),
            functions=("sales",),
        ),
    ],
    success_criteria=[
        "User describes a change in state rather than a deliverable",
        "User mentions impact on people (customers, users, team)",
        "User connects to business value or strategic outcome",
    ],
    max_attempts=5,
)

OUTCOME_TRANSFORMATION = ReframingStrategy(
    name="Outcome Transformation",
    technique="outcome_transformation",
    questions=[
        "This seems binary - either complete or not. What measurable improvement will we see once this is finished?",
        "When this is done, what will be different? How will you measure that change?",
        "What happens after completion? What outcomes does it enable?",
    ],
    examples=[
        ReframingExample(
            before="Website redesign completed successfully",
            after="Increase user engagement by 50% through improved site experience",
            context="Marketing",
            explanation="Transformed from completion status to measurable user behavior change",
            functions=("marketing", "product"),
        ),
    ],
    success_criteria=[
        "User provides measurable outcomes instead of completion status",
        "User describes quantifiable changes or improvements",
    ],
)

VALUE_EXPLORATION = ReframingStrategy(
    name="Value Exploration",
    technique="value_exploration",
    questions=[
        "These are interesting numbers, but how do they connect to business value? What happens when you achieve this metric?",
        "What business outcome would this metric indicate? How does it drive revenue or customer value?",
        "If you hit these numbers, what changes for your business or customers?",
    ],
    examples=[
        ReframingExample(
            before="Increase social media followers to 10,000",
            after="Drive 25% more qualified leads through improved social media engagement",
            context="Marketing",
            explanation="Connected followers to business outcome of lead generation",
            functions=("marketing",),
        ),
    ],
    success_criteria=[
        "User connects metrics to business value",
        "User explains how metric drives revenue/customer outcomes",
    ],
)

AMBITION_CALIBRATION = ReframingStrategy(
    name="Ambition Calibration",
    technique="question_cascade",
    questions=[
        "This sounds like important ongoing work. For OKRs, let's focus on improvements - how could you excel beyond normal execution?",
        "What would make this feel like a real stretch goal? What would success look like that would make you celebrate?",
        "If you had unlimited resources, what ambitious outcome would you pursue in this area?",
    ],
    examples=[
        ReframingExample(
            before="Maintain current customer satisfaction levels",
            after="Achieve industry-leading customer satisfaction with 95% positive ratings",
            context="Customer Service",
            explanation="Transformed from maintaining status quo to achieving industry leadership",
            functions=("customer service", "support"),
            quality_score=85,
        ),
    ],
    success_criteria=[
        "User raises ambition level significantly",
        "User provides stretch goals that require effort beyond normal duties",
    ],
)

FOCUS = ReframingStrategy(
    name="Focus Strategy",
    technique="question_cascade",
    questions=[
        "You have lots of great metrics! Let's focus on the 3-4 that best indicate success. Which ones are most critical?",
        "If you could only track 3 numbers to know if this objective succeeds, what would they be?",
        "Which of these metrics would you check first each week to gauge progress?",
    ],
    examples=[
        ReframingExample(
            before="Track 8 different metrics including users, sessions, bounce rate, conversion, retention, revenue, costs, and satisfaction",
            after="Focus on 3 key indicators: user retention (+20%), conversion rate (+15%), and customer lifetime value (+30%)",
            context="Product",
            explanation="Narrowed from 8 metrics to 3 most critical outcome indicators",
            functions=("product",),
            complexity="large",
        ),
    ],
    success_criteria=[
        "User reduces number of metrics to 3-5 key indicators",
        "User prioritizes most important success measures",
    ],
    max_attempts=2,
)

SPECIFICITY = ReframingStrategy(
    name="Specificity Enhancement",
    technique="question_cascade",
    questions=[
        "Can you be more specific about what 'better' or 'more' means? What exact numbers would represent success?",
        "What would 'good' look like with specific, measurable criteria?",
        "How will you know when you've achieved 'significant improvement'? What's the specific target?",
    ],
    examples=[
        ReframingExample(
            before="Improve customer satisfaction",
            after="Increase customer satisfaction score from 7.2 to 8.5 on our monthly survey",
            context="Customer Service",
            explanation="Added specific baseline, target, and measurement method",
            functions=("customer service", "support"),
            quality_score=90,
        ),
    ],
    success_criteria=[
        "User provides specific numbers and targets",
        "User defines clear measurement criteria",
    ],
    max_attempts=2,
)

SCOPE_RESPECT = ReframingStrategy(
    name="Scope Respect Strategy",
    technique="outcome_transformation",
    questions=[
        "I understand you want to keep this focused on your team's scope. Let's create an impactful objective within that boundary. What change would you most want to see in your area?",
        "Perfect! Staying within your team's authority makes sense. What outcome would make your team truly proud of their achievement?",
        "Great approach to stay focused on what you can control. What measurable improvement could your team achieve that would create real value?",
    ],
    examples=[
        ReframingExample(
            before="I just want to focus on my team, not the whole company",
            after="Transform our team's operational efficiency by reducing process cycle time from 2 days to 4 hours",
            context="Operations Team",
            explanation="Respected team scope while creating ambitious, measurable outcome",
            functions=("operations",),
            complexity="small",
        ),
        ReframingExample(
            before="This should stay within our department, not company-wide",
            after="Elevate our department's customer response time to industry-leading 2-hour resolution",
            context="Customer Support",
            explanation="Focused on department-level impact with measurable, ambitious target",
            functions=("support", "customer service"),
            complexity="large",
        ),
        ReframingExample(
            before="We don't have authority over the whole organization",
            after="Achieve 95% on-time delivery within our team's project commitments",
            context="Product Team",
            explanation="Stayed within team authority while creating meaningful outcome",
            functions=("product", "engineering"),
            complexity="small",
        ),
    ],
    success_criteria=[
        "User feels respected and heard regarding scope boundaries",
        "User provides ambitious outcome within their stated scope",
        "User maintains engagement without scope resistance",
    ],
)

SPHERE_OF_INFLUENCE = ReframingStrategy(
    name="Sphere of Influence Refinement",
    technique="outcome_transformation",
    questions=[
        "This objective seems to depend on factors outside your team's direct control. What could your team measure and influence directly that would drive this outcome?",
        "Rather than depending on outside factors, what outcomes could your team own that make the result you want more likely?",
        "What can your team control that would increase the probability of success? How would you measure your team's contribution?",
    ],
    examples=[
        ReframingExample(
            before="Increase customer adoption to 10,000 users by getting customers to choose our product",
            after="Reduce friction in onboarding flow to achieve 75% activation rate within first 7 days",
            context="Product Team",
            explanation="Shifted from uncontrollable customer choice to controllable onboarding experience that influences adoption",
            functions=("product",),
            quality_score=85,
        ),
        ReframingExample(
            before="Achieve 50% market share if the market grows and competitors don't respond",
            after="Capture 90% of inbound leads through superior conversion experience and 48-hour response time",
            context="Sales Team",
            explanation="Focused on controllable lead conversion rather than market dynamics",
            functions=("sales",),
        ),
        ReframingExample(
            before="Launch new capability successfully assuming delivery team completes on time",
            after="Achieve 80% user awareness of new capability through targeted in-app messaging and tutorials",
            context="Product Marketing",
            explanation="Owned the awareness and adoption metrics rather than depending on delivery timeline",
            functions=("marketing", "product"),
        ),
        ReframingExample(
            before="Improve customer satisfaction when support team resolves tickets faster",
            after="Reduce average resolution time from 24 hours to 4 hours through automation and process optimization",
            context="Customer Support Operations",
            explanation="Took ownership of the underlying metric (resolution time) rather than depending on another team",
            functions=("support", "operations", "customer service"),
            quality_score=90,
        ),
    ],
    success_criteria=[
        "User identifies outcomes their team can directly control and measure",
        "User removes dependencies on external factors or other teams",
        "User focuses on leading indicators within their sphere of influence",
        "User maintains connection to ultimate business value while owning the path",
    ],
    max_attempts=4,
)


# =============================================================================
# Rule catalogue (detection order)
# =============================================================================

ANTI_PATTERN_RULES: List[AntiPatternRule] = [
    AntiPatternRule(
        id="activity_focused",
        name="Activity-Focused Language",
        description="Language focused on deliverables and activities rather than outcomes",
        severity=Severity.HIGH,
        intervention=InterventionType.ACTIVITY_TO_OUTCOME,
        detection_patterns=(
            r"\b(implement|launch|complete|deliver|build|create|develop|deploy|install|setup"
            r"|configure|write|design|plan|organize|manage|coordinate|execute|conduct|analyze"
            r"|review|research|test)\b",
            r"\b(project|deliverable|milestone|task|feature|function|system|platform|tool"
            r"|process|interview|survey|meeting|workshop)\b",
        ),
        keyword_triggers=(
            "implement", "launch", "complete", "deliver", "build", "create",
            "develop", "deploy", "install", "setup", "configure", "write",
            "design", "plan", "organize", "manage", "coordinate", "execute",
            "conduct", "analyze", "review", "research", "test", "interview",
        ),
        suppress_if=(OUTCOME_LANGUAGE,),
        strategy=FIVE_WHYS,
    ),
    AntiPatternRule(
        id="binary_thinking",
        name="Binary Goals",
        description="Done/not-done goals without measurable outcomes",
        severity=Severity.HIGH,
        intervention=InterventionType.ACTIVITY_TO_OUTCOME,
        detection_patterns=(
            r"\b(done|completed?|complete|finished?|finish|launched?|launch|shipped?|ship"
            r"|delivered?|deliver|implemented?|implement|ready|live|active)\b",
            r"\b(successfully|completely|fully|entirely)\s+(done|completed?|complete|finished?"
            r"|finish|launched?|launch|implemented?|implement)\b",
            r"\b(achieve|attain|accomplish|reach)\s+(?:\w+\s+)?(excellence|success|leadership"
            r"|greatness|mastery)\b",
            r"\b(achieve|attain|accomplish|reach)\s+.*?successfully\b",
        ),
        keyword_triggers=(
            "done", "completed", "finished", "launched", "shipped", "delivered",
            "implemented", "ready", "live", "active", "successfully",
            "achieve excellence", "operational excellence", "achieve success",
        ),
        requires_any=COMPLETION_FRAMING,
        suppress_if=(NUMBER_QUALIFIERS,),
        context_rule=ContextRule(
            any_of=(
                r"\b(achieve|attain|accomplish|reach|improve|enhance|optimize)\s+(excellence"
                r"|success|leadership|satisfaction|quality|performance)\b",
                COMPLETION_WORDS,
            ),
        ),
        strategy=OUTCOME_TRANSFORMATION,
    ),
    AntiPatternRule(
        id="vanity_metrics",
        name="Vanity Metrics",
        description="Metrics that look good but lack business context",
        severity=Severity.MEDIUM,
        intervention=InterventionType.METRIC_EDUCATION,
        detection_patterns=(
            r"\b(followers|likes|views|downloads|page\s*views|impressions|clicks)\b",
            r"\b(social\s*media|facebook|twitter|instagram|linkedin)\s*(followers|likes"
            r"|shares|engagement)\b",
        ),
        keyword_triggers=(
            "followers", "likes", "views", "downloads", "pageviews", "impressions",
            "clicks", "shares", "mentions", "subscribers",
        ),
        suppress_if=(BUSINESS_IMPACT_TERMS,),
        strategy=VALUE_EXPLORATION,
    ),
    AntiPatternRule(
        id="business_as_usual",
        name="Business as Usual",
        description="Regular job duties without stretch or improvement",
        severity=Severity.MEDIUM,
        intervention=InterventionType.AMBITION_CALIBRATION,
        detection_patterns=(
            r"\b(maintain|keep|continue|sustain|preserve|ongoing|regular|routine|normal"
            r"|standard)\b",
            r"\b(daily|weekly|monthly|quarterly)\s+(meetings|reports|reviews|updates|calls)\b",
        ),
        keyword_triggers=(
            "maintain", "keep", "continue", "sustain", "preserve", "ongoing",
            "regular", "routine", "normal", "standard", "current", "existing",
        ),
        suppress_if=(STRETCH_QUALIFIERS,),
        strategy=AMBITION_CALIBRATION,
    ),
    AntiPatternRule(
        id="kitchen_sink",
        name="Kitchen Sink Approach",
        description="Too many goals, metrics or overlapping measurements",
        severity=Severity.LOW,
        intervention=InterventionType.CLARITY_IMPROVEMENT,
        detection_patterns=(
            r"(\d+\s*(?:key\s*result|kr|metric|measure|indicator))",
            r"(increase|improve|reduce|enhance|optimize|achieve|grow|expand|boost)[^,.]+"
            r"((?:,|\s+and)\s*(?:and\s+)?(?:increase|improve|reduce|enhance|optimize"
            r"|achieve|grow|expand|boost))+",
        ),
        context_rule=ContextRule(
            counts={
                "action": r"\b(increas(?:e|ing)|improv(?:e|ing)|reduc(?:e|ing)|enhanc(?:e|ing)"
                r"|optimiz(?:e|ing)|achiev(?:e|ing)|grow(?:ing)?|expand(?:ing)?|boost(?:ing)?"
                r"|mak(?:e|ing)|keep(?:ing)?|be(?:ing|come|coming)?|establish(?:ing)?"
                r"|creat(?:e|ing)|build(?:ing)?|develop(?:ing)?|launch(?:ing)?)\b",
                "joiner": r",|\band\b",
                "kr": r"\b(key\s*results?|krs?)\b",
                "metric": r"\b(metrics?|measures?|track|monitor)\b",
            },
            count_thresholds=(
                {"action": 3, "joiner": 2},
                {"action": 5},
                {"kr": 6},
                {"metric": 8},
            ),
        ),
        strategy=FOCUS,
    ),
    AntiPatternRule(
        id="vague_outcome",
        name="Vague Outcomes",
        description="Outcomes without specific, measurable definitions",
        severity=Severity.MEDIUM,
        intervention=InterventionType.CLARITY_IMPROVEMENT,
        detection_patterns=(
            INTENSITY_QUALIFIERS,
            r"\b(improve|increase|enhance|optimize|boost|grow|expand)\b"
            r"(?!\s+.*\b(?:\d+|by|from|to|%|percent)\b)",
        ),
        keyword_triggers=(
            "best", "better", "good", "great", "more", "less", "some", "many", "few",
            "various", "several", "multiple", "different", "appropriate",
            "significant", "substantial", "meaningful", "considerable", "happy", "low",
        ),
        requires_any=(INTENSITY_QUALIFIERS,),
        suppress_if=(r"\b\d+(\.\d+)?[%$]?\b|\bfrom\s+\d+|\bto\s+\d+|\bby\s+\d+",),
        strategy=SPECIFICITY,
    ),
    AntiPatternRule(
        id="scope_elevation_resistance",
        name="Scope Elevation Resistance",
        description="User resistance to inappropriate scope elevation attempts",
        severity=Severity.HIGH,
        intervention=InterventionType.ALIGNMENT_CHECK,
        detection_patterns=(
            r"\b(just|only|within)\s+(my|our)\s+(team|department|group|area|scope|authority"
            r"|control)\b",
            r"\b(not|can't|cannot|don't)\s+(company|organization|enterprise|corporation"
            r"|corporate)[\s-]*(wide|level|scale)\b",
            r"\b(stay|keep|remain|focus)\s+(within|on|in)\s+(my|our|the)\s+(scope|bounds"
            r"|limits|area|team|department)\b",
        ),
        keyword_triggers=(
            "just my team", "only our department", "within my authority",
            "not company-wide", "stay focused", "keep it local",
            "my scope", "our area", "team level", "department level",
            "not that broad", "too big", "beyond my control",
            "can't influence", "outside my area", "not my responsibility",
        ),
        context_rule=ContextRule(
            all_of=(
                r"\b(no|not|can't|cannot|won't|shouldn't|don't|disagree|resist|oppose"
                r"|against)\b",
            ),
            any_of=(
                r"\b(company|corporate|organization|enterprise|strategic|executive|board"
                r"|c-level|ceo|cto|cfo)\b",
                r"\b(my|our|just|only|within|limited|scope|authority|control|team"
                r"|department|area)\b",
            ),
        ),
        strategy=SCOPE_RESPECT,
    ),
    AntiPatternRule(
        id="sphere_of_influence_violation",
        name="Sphere of Influence Violation",
        description="OKR depends on factors outside the team's direct control or sphere of influence",
        severity=Severity.CRITICAL,
        intervention=InterventionType.ALIGNMENT_CHECK,
        detection_patterns=(
            r"\b(if|when|once|assuming|provided|contingent|dependent|relies on|requires that"
            r"|needs|depends)\b.*\b(they|them|their|other|customer|user|market|partner"
            r"|vendor|external)\b",
            r"\b(customer|user|market|client)s?\s+(will|must|should|needs to|has to|chooses"
            r"|decides|adopts|accepts)\b",
            r"\b(requires|depends on|needs|contingent on|relies on)\b.*\b(team|department"
            r"|group|function|org|partner|vendor|third party|external|other)\b",
        ),
        keyword_triggers=(
            "if customers", "when users", "assuming market", "provided that",
            "customer adoption", "user acceptance", "market conditions",
            "requires other teams", "depends on", "relies on",
            "external dependency", "third party", "vendor delivers",
            "partner provides", "cross-team coordination", "needs support from",
        ),
        context_rule=ContextRule(
            all_of=(
                r"\b(if|when|assuming|provided|contingent|dependent|relies on|requires|needs"
                r"|depends)\b",
                r"\b(customers?|users?|market|clients?|partners?|vendors?|third party|external"
                r"|other team|other department)\b",
                r"\b(will|must|should|chooses|decides|adopts|accepts|agrees|buys)\b",
            ),
        ),
        strategy=SPHERE_OF_INFLUENCE,
    ),
]


# =============================================================================
# Reframing support tables
# =============================================================================

GENERIC_REFRAMING_QUESTION = (
    "Let's step back. What change or improvement will people see when this succeeds?"
)

ACTIVITY_EXTRACTION_PATTERN = (
    r"\b(implement|launch|complete|deliver|build|create|develop|deploy)\s+([^.!?]+)"
)

FOLLOW_UP_QUESTIONS: Dict[InterventionType, List[str]] = {
    InterventionType.ACTIVITY_TO_OUTCOME: [
        "What will be different when this is done?",
        "Who benefits from this change?",
        "How will you know it's working?",
    ],
    InterventionType.METRIC_EDUCATION: [
        "What business result does this metric indicate?",
        "How does this connect to revenue or customer value?",
    ],
    InterventionType.AMBITION_CALIBRATION: [
        "How could you exceed normal expectations here?",
        "What would make this feel like a real achievement?",
    ],
    InterventionType.CLARITY_IMPROVEMENT: [
        "Can you be more specific about what success looks like?",
        "What exact numbers would represent success?",
    ],
    InterventionType.ALIGNMENT_CHECK: [
        "Which part of this outcome does your team directly control?",
        "How does this connect to your organization's priorities?",
    ],
}

EXPECTED_OUTCOMES: Dict[InterventionType, str] = {
    InterventionType.ACTIVITY_TO_OUTCOME: "User shifts from describing tasks to describing results and changes",
    InterventionType.METRIC_EDUCATION: "User connects metrics to business value and customer impact",
    InterventionType.AMBITION_CALIBRATION: "User raises ambition level with challenging but achievable targets",
    InterventionType.CLARITY_IMPROVEMENT: "User provides specific, measurable definitions of success",
    InterventionType.ALIGNMENT_CHECK: "User demonstrates clear connection to organizational goals",
}

# Word lists for the quick before/after text score
TEXT_SCORE_OUTCOME_WORDS = (
    "increase", "decrease", "improve", "reduce", "achieve",
    "result", "outcome", "impact", "value", "benefit",
)
TEXT_SCORE_ACTIVITY_WORDS = (
    "implement", "launch", "complete", "deliver", "build", "create", "develop",
)
TEXT_SCORE_VAGUE_WORDS = ("better", "good", "more", "some", "many")

# Industries close enough that their examples transfer
RELATED_INDUSTRY_CLUSTERS: List[Tuple[str, ...]] = [
    ("technology", "software", "saas", "ai"),
    ("healthcare", "medical", "pharma"),
    ("financial services", "finance", "banking", "insurance", "fintech"),
    ("retail", "ecommerce", "consumer"),
]

# (max team size, complexity band), checked in order; larger teams are "large"
TEAM_COMPLEXITY_BANDS: List[Tuple[int, str]] = [(10, "small"), (50, "medium")]
COMPLEXITY_ORDER = ("small", "medium", "large")


# =============================================================================
# Dependency extraction
# =============================================================================

# (type, description, controllability, patterns that must all match)
DEPENDENCY_RULES: List[Tuple[str, str, str, Tuple[str, ...]]] = [
    (
        "customer_behavior",
        "Depends on customer/user choices or behavior",
        "low",
        (
            r"\b(customer|user|client)s?\s+(will|must|should|needs to|has to|chooses|decides"
            r"|adopts|accepts|buys|uses)\b",
        ),
    ),
    (
        "other_team",
        "Requires coordination or delivery from other teams",
        "medium",
        (
            r"\b(requires|depends on|needs|relies on)\b.*\b(team|department|group|function"
            r"|org)\b|\b(other team|another team|delivery team|design team|sales team"
            r"|support team|operations team)\b",
        ),
    ),
    (
        "market_dynamics",
        "Dependent on market conditions or competitive landscape",
        "none",
        (
            r"\b(market|industry|competition|competitor|economic|economy|trends)\b",
            r"\b(if|when|assuming|provided|grows|changes|shifts|evolves)\b",
        ),
    ),
    (
        "external_factor",
        "Relies on external partners or vendors",
        "low",
        (
            r"\b(partner|vendor|third party|external|supplier|contractor)\b.*\b(delivers"
            r"|provides|completes|supports)\b",
        ),
    ),
]

CONDITIONAL_CLAUSE_PATTERN = (
    r"\b(if|when|once|assuming|provided that|contingent on)\b[^.!?]*"
)
