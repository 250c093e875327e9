"""Tests for the decision classification suite."""

from agentlens.engine.classification import (
    CATEGORY_TABLE,
    assess_impact,
    categorize_decision,
    classify_complexity,
    detect_sentiment,
    detect_urgency,
    has_keyword,
    tokenize,
)
from agentlens.engine.generator import DecisionGenerator
from agentlens.engine.random_source import SeededRandom
from agentlens.models import (
    AgentPersona,
    DecisionCategory,
    DecisionComplexity,
    DecisionImpact,
    DecisionSentiment,
    DecisionUrgency,
)


def test_tokenize_lowercases_and_splits() -> None:
    """Test tokenization drops punctuation and case."""
    assert tokenize("Grid sell-back, NOW!") == ["grid", "sell", "back", "now"]


def test_keyword_matches_token_prefix_only() -> None:
    """Test stems match word starts, not substrings."""
    assert has_keyword(tokenize("charging the battery"), ["charg"])
    assert not has_keyword(tokenize("Increased battery discharge"), ["charg"])


def test_complexity_keywords(make_event) -> None:
    """Test multi-system phrasing is complex even at high confidence."""
    event = make_event(summary="Optimized solar panel tilt angle for maximum afternoon capture", confidence=95)
    assert classify_complexity(event) == DecisionComplexity.COMPLEX


def test_complexity_confidence_cutoffs(make_event) -> None:
    """Test confidence alone escalates complexity."""
    summary = "Increased battery discharge rate to meet peak demand surge"
    assert classify_complexity(make_event(summary=summary, confidence=95)) == DecisionComplexity.SIMPLE
    assert classify_complexity(make_event(summary=summary, confidence=80)) == DecisionComplexity.MODERATE
    assert classify_complexity(make_event(summary=summary, confidence=60)) == DecisionComplexity.COMPLEX


def test_complexity_adjustment_is_moderate(make_event) -> None:
    """Test adjustment phrasing is moderate."""
    event = make_event(
        agent=AgentPersona.MARKETS, summary="Adjusted pricing strategy based on competitor analysis", confidence=95
    )
    assert classify_complexity(event) == DecisionComplexity.MODERATE


def test_category_persona_rules(make_event) -> None:
    """Test persona-scoped keyword rules."""
    dispatch = make_event(summary="Increased battery discharge rate to meet peak demand surge")
    trading = make_event(agent=AgentPersona.MARKETS, summary="Executed token sale at optimal liquidity depth")
    maintenance = make_event(
        agent=AgentPersona.SENTINEL, summary="Scheduled preventive maintenance for inverter cooling system"
    )
    governance = make_event(agent=AgentPersona.GOVERNOR, summary="Validated compliance with grid agreement")

    assert categorize_decision(dispatch) == DecisionCategory.DISPATCH
    assert categorize_decision(trading) == DecisionCategory.TRADING
    assert categorize_decision(maintenance) == DecisionCategory.MAINTENANCE
    assert categorize_decision(governance) == DecisionCategory.GOVERNANCE


def test_category_override_has_priority(make_event) -> None:
    """Test override wording beats the governor's catch-all rule."""
    event = make_event(agent=AgentPersona.GOVERNOR, summary="Approved emergency override request with full audit trail")
    assert categorize_decision(event) == DecisionCategory.OVERRIDE


def test_category_falls_back_to_persona_default(make_event) -> None:
    """Test unmatched summaries use the persona's default category."""
    event = make_event(agent=AgentPersona.SENTINEL, summary="Identified anomalous vibration pattern in tracker motor 3")
    assert categorize_decision(event) == DecisionCategory.MAINTENANCE

    market_event = make_event(agent=AgentPersona.MARKETS, summary="Hedged energy exposure through futures contracts")
    assert categorize_decision(market_event) == DecisionCategory.TRADING


def test_category_table_ignores_wrong_persona() -> None:
    """Test persona-scoped rules never fire for other personas."""
    tokens = tokenize("Executed token sale")
    assert CATEGORY_TABLE.match(tokens, AgentPersona.OPERATIONS) is None


def test_impact_violation_is_critical(make_event) -> None:
    """Test a constraint violation always escalates impact to critical."""
    event = make_event(confidence=40, has_constraint_violations=True, impact=DecisionImpact.CRITICAL)
    assert assess_impact(event, classify_complexity(event)) == DecisionImpact.CRITICAL


def test_impact_keywords_and_confidence(make_event) -> None:
    """Test impact from keywords, complexity and confidence."""
    critical = make_event(summary="Triggered safety shutdown due to temperature exceedance", confidence=95)
    high = make_event(summary="Increased battery discharge rate", confidence=60)
    medium = make_event(summary="Increased battery discharge rate", confidence=80)
    low = make_event(summary="Increased battery discharge rate", confidence=95)

    assert assess_impact(critical, classify_complexity(critical)) == DecisionImpact.CRITICAL
    assert assess_impact(high, classify_complexity(high)) == DecisionImpact.HIGH
    assert assess_impact(medium, classify_complexity(medium)) == DecisionImpact.MEDIUM
    assert assess_impact(low, classify_complexity(low)) == DecisionImpact.LOW


def test_urgency_levels(make_event) -> None:
    """Test urgency from keywords and impact."""
    emergency = make_event(summary="Approved emergency override request")
    plain = make_event(summary="Increased battery discharge rate")

    assert detect_urgency(emergency, DecisionImpact.CRITICAL) == DecisionUrgency.EMERGENCY
    assert detect_urgency(plain, DecisionImpact.CRITICAL) == DecisionUrgency.URGENT
    assert detect_urgency(plain, DecisionImpact.HIGH) == DecisionUrgency.ELEVATED
    assert detect_urgency(plain, DecisionImpact.LOW) == DecisionUrgency.ROUTINE


def test_sentiment() -> None:
    """Test sentiment mapping."""
    assert detect_sentiment(DecisionUrgency.EMERGENCY, 0) == DecisionSentiment.EMERGENCY
    assert detect_sentiment(DecisionUrgency.ROUTINE, 1) == DecisionSentiment.EMERGENCY
    assert detect_sentiment(DecisionUrgency.URGENT, 0) == DecisionSentiment.STRESSED
    assert detect_sentiment(DecisionUrgency.ELEVATED, 0) == DecisionSentiment.STRESSED
    assert detect_sentiment(DecisionUrgency.ROUTINE, 0) == DecisionSentiment.CALM


def test_classifiers_are_total(now) -> None:
    """Test every generated event gets a label from every classifier."""
    events = DecisionGenerator(SeededRandom(42)).generate_batch(120, now)

    for event in events:
        complexity = classify_complexity(event)
        impact = assess_impact(event, complexity)
        assert complexity in DecisionComplexity
        assert categorize_decision(event) in DecisionCategory
        assert detect_urgency(event, impact) in DecisionUrgency
