"""Decision classification suite.

Five independent, total classifiers over a decision's summary text and
metadata: complexity, category, impact, urgency and sentiment.

Keyword vocabularies are declarative, versioned tables. A table holds
prioritized rules; the first matching rule (highest priority first) wins,
and the table's default label applies when nothing matches.

Matching works on word tokens, not raw substrings: a rule keyword matches a
token that starts with it, so ``charg`` matches "charging" but never the
"charge" inside "discharge".

Design Philosophy:
- Total functions: every input gets a label, nothing raises
- Explicit over implicit: vocabularies are data, not nested if-chains
- Testable: pure functions over immutable events
"""

import re
from typing import FrozenSet, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from agentlens.models import (
    AgentPersona,
    DecisionCategory,
    DecisionComplexity,
    DecisionEvent,
    DecisionImpact,
    DecisionSentiment,
    DecisionUrgency,
)

CLASSIFIER_VERSION = "v1.0.0"

_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")

# Confidence below these escalates complexity and impact
COMPLEX_CONFIDENCE_CUTOFF = 70
MODERATE_CONFIDENCE_CUTOFF = 85


def tokenize(text: str) -> List[str]:
    """Lowercase word tokens of ``text``."""
    return _TOKEN_PATTERN.findall(text.lower())


def has_keyword(tokens: Sequence[str], keywords: Sequence[str]) -> bool:
    """True if any token starts with any keyword stem."""
    return any(token.startswith(keyword) for token in tokens for keyword in keywords)


class KeywordRule(BaseModel):
    """One entry of a keyword table."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., description="Label produced when the rule matches")
    keywords: FrozenSet[str] = Field(default_factory=frozenset, description="Token stems")
    agents: Optional[FrozenSet[AgentPersona]] = Field(
        None, description="Personas the rule applies to (None = all)"
    )
    match_any_text: bool = Field(
        default=False, description="Match on persona alone, ignoring keywords"
    )
    priority: int = Field(default=0, description="Rule priority (higher = evaluated first)")
    enabled: bool = True

    def matches(self, tokens: Sequence[str], agent: AgentPersona) -> bool:
        if not self.enabled:
            return False
        if self.agents is not None and agent not in self.agents:
            return False
        if self.match_any_text:
            return True
        return has_keyword(tokens, sorted(self.keywords))


class KeywordTable(BaseModel):
    """Ordered, versioned vocabulary for one classifier."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str = CLASSIFIER_VERSION
    rules: List[KeywordRule]

    def match(self, tokens: Sequence[str], agent: AgentPersona) -> Optional[str]:
        """Label of the highest-priority matching rule, or None.

        Rules of equal priority keep their declaration order.
        """
        for rule in sorted(self.rules, key=lambda r: r.priority, reverse=True):
            if rule.matches(tokens, agent):
                return rule.label
        return None


def _agents(*personas: AgentPersona) -> FrozenSet[AgentPersona]:
    return frozenset(personas)


COMPLEXITY_TABLE = KeywordTable(
    name="complexity",
    rules=[
        KeywordRule(
            label=DecisionComplexity.COMPLEX.value,
            keywords=frozenset({"optimiz", "coordinat", "multi", "synchroni"}),
            priority=10,
        ),
        KeywordRule(
            label=DecisionComplexity.MODERATE.value,
            keywords=frozenset({"adjust", "modif", "rebalanc"}),
            priority=5,
        ),
    ],
)

CATEGORY_TABLE = KeywordTable(
    name="category",
    rules=[
        KeywordRule(
            label=DecisionCategory.OVERRIDE.value,
            keywords=frozenset({"override", "emergency"}),
            priority=10,
        ),
        KeywordRule(
            label=DecisionCategory.DISPATCH.value,
            keywords=frozenset({"dispatch", "battery"}),
            agents=_agents(AgentPersona.OPERATIONS),
            priority=5,
        ),
        KeywordRule(
            label=DecisionCategory.TRADING.value,
            keywords=frozenset({"trade", "trading", "swap", "token"}),
            agents=_agents(AgentPersona.MARKETS),
            priority=5,
        ),
        KeywordRule(
            label=DecisionCategory.MAINTENANCE.value,
            keywords=frozenset({"maintenance", "repair"}),
            agents=_agents(AgentPersona.SENTINEL),
            priority=5,
        ),
        KeywordRule(
            label=DecisionCategory.GOVERNANCE.value,
            agents=_agents(AgentPersona.GOVERNOR),
            match_any_text=True,
            priority=1,
        ),
    ],
)

PERSONA_DEFAULT_CATEGORY = {
    AgentPersona.OPERATIONS: DecisionCategory.DISPATCH,
    AgentPersona.MARKETS: DecisionCategory.TRADING,
    AgentPersona.SENTINEL: DecisionCategory.MAINTENANCE,
    AgentPersona.GOVERNOR: DecisionCategory.GOVERNANCE,
}

IMPACT_TABLE = KeywordTable(
    name="impact",
    rules=[
        KeywordRule(
            label=DecisionImpact.CRITICAL.value,
            keywords=frozenset({"emergency", "critical", "override", "safety"}),
            priority=10,
        ),
        KeywordRule(
            label=DecisionImpact.HIGH.value,
            keywords=frozenset({"significant", "major"}),
            priority=5,
        ),
    ],
)

URGENCY_TABLE = KeywordTable(
    name="urgency",
    rules=[
        KeywordRule(
            label=DecisionUrgency.EMERGENCY.value,
            keywords=frozenset({"emergency", "immediate"}),
            priority=10,
        ),
        KeywordRule(
            label=DecisionUrgency.URGENT.value,
            keywords=frozenset({"urgent"}),
            priority=5,
        ),
        KeywordRule(
            label=DecisionUrgency.ELEVATED.value,
            keywords=frozenset({"priority"}),
            priority=1,
        ),
    ],
)


def classify_complexity(event: DecisionEvent) -> DecisionComplexity:
    """Classify how involved a decision is.

    Returns:
        complex on multi-system phrasing or confidence below 70,
        moderate on adjustment phrasing or confidence below 85,
        otherwise simple
    """
    label = COMPLEXITY_TABLE.match(tokenize(event.summary), event.agent)
    if label == DecisionComplexity.COMPLEX.value or event.confidence < COMPLEX_CONFIDENCE_CUTOFF:
        return DecisionComplexity.COMPLEX
    if label == DecisionComplexity.MODERATE.value or event.confidence < MODERATE_CONFIDENCE_CUTOFF:
        return DecisionComplexity.MODERATE
    return DecisionComplexity.SIMPLE


def categorize_decision(event: DecisionEvent) -> DecisionCategory:
    """Assign a decision category, falling back to the persona default."""
    label = CATEGORY_TABLE.match(tokenize(event.summary), event.agent)
    if label is None:
        return PERSONA_DEFAULT_CATEGORY[event.agent]
    return DecisionCategory(label)


def assess_impact(event: DecisionEvent, complexity: DecisionComplexity) -> DecisionImpact:
    """Assess decision impact.

    A constraint violation always escalates to critical, matching the
    generator's own labelling of violating events.
    """
    label = IMPACT_TABLE.match(tokenize(event.summary), event.agent)
    if label == DecisionImpact.CRITICAL.value or event.has_constraint_violations:
        return DecisionImpact.CRITICAL
    if (
        label == DecisionImpact.HIGH.value
        or complexity == DecisionComplexity.COMPLEX
        or event.confidence < COMPLEX_CONFIDENCE_CUTOFF
    ):
        return DecisionImpact.HIGH
    if complexity == DecisionComplexity.MODERATE or event.confidence < MODERATE_CONFIDENCE_CUTOFF:
        return DecisionImpact.MEDIUM
    return DecisionImpact.LOW


def detect_urgency(event: DecisionEvent, impact: DecisionImpact) -> DecisionUrgency:
    """Detect urgency from keywords and impact severity."""
    label = URGENCY_TABLE.match(tokenize(event.summary), event.agent)
    if label == DecisionUrgency.EMERGENCY.value:
        return DecisionUrgency.EMERGENCY
    if label == DecisionUrgency.URGENT.value or impact == DecisionImpact.CRITICAL:
        return DecisionUrgency.URGENT
    if label == DecisionUrgency.ELEVATED.value or impact == DecisionImpact.HIGH:
        return DecisionUrgency.ELEVATED
    return DecisionUrgency.ROUTINE


def detect_sentiment(urgency: DecisionUrgency, violation_count: int) -> DecisionSentiment:
    """Summarize the operating mood around a decision."""
    if urgency == DecisionUrgency.EMERGENCY or violation_count > 0:
        return DecisionSentiment.EMERGENCY
    if urgency in (DecisionUrgency.URGENT, DecisionUrgency.ELEVATED):
        return DecisionSentiment.STRESSED
    return DecisionSentiment.CALM
