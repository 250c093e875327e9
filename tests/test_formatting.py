"""Tests for response shaping and page statistics."""

from agentlens.engine.formatting import STANDARD_OMITTED, calculate_statistics, format_decision
from agentlens.models import ExplainabilityDepth, ResponseFormat, TrustGrade


def test_minimal_format(enriched_batch) -> None:
    """Test minimal decisions carry identity and one explanation."""
    decision = enriched_batch[0]

    data = format_decision(decision, ResponseFormat.MINIMAL, ExplainabilityDepth.BEGINNER)

    assert set(data) == {"id", "agent", "summary", "confidence", "timestamp", "category", "impact", "explanation"}
    assert data["explanation"] == decision.explanations.beginner


def test_standard_format_omits_verbose_groups(enriched_batch) -> None:
    """Test standard drops verbose groups and adds the chosen explanation."""
    decision = enriched_batch[0]

    data = format_decision(decision, ResponseFormat.STANDARD, ExplainabilityDepth.EXPERT)

    for name in ("sourceHealthScores", "relatedDecisions", "provenanceChain", "alternativeActions"):
        assert name not in data
    assert data["currentExplanation"] == decision.explanations.expert
    assert "riskAssessment" in data
    assert "trustMathematics" in data
    assert len(STANDARD_OMITTED) == 4


def test_standard_format_keeps_requested_alternatives(enriched_batch) -> None:
    """Test alternatives survive the standard view when asked for."""
    decision = next(d for d in enriched_batch if d.alternative_actions)

    data = format_decision(decision, ResponseFormat.STANDARD, keep_alternatives=True)

    assert len(data["alternativeActions"]) == len(decision.alternative_actions)


def test_full_format_sets_current_depth(enriched_batch) -> None:
    """Test full decisions carry every group and the requested depth."""
    decision = enriched_batch[0]

    data = format_decision(decision, ResponseFormat.FULL, ExplainabilityDepth.EXPERT)

    assert data["explanations"]["currentDepth"] == "expert"
    assert "sourceHealthScores" in data
    assert "provenanceChain" in data
    # The stored decision is untouched
    assert decision.explanations.current_depth is None


def test_statistics_empty_page() -> None:
    """Test an empty page yields zero averages and zeroed breakdowns."""
    stats = calculate_statistics([])

    assert stats.avg_confidence == 0.0
    assert stats.avg_quality_score == 0.0
    assert set(stats.trust_distribution) == {grade.value for grade in TrustGrade}
    assert sum(stats.trust_distribution.values()) == 0
    assert stats.decision_type_breakdown == {}


def test_statistics_counts(enriched_batch) -> None:
    """Test breakdowns account for every decision on the page."""
    page = enriched_batch[:20]

    stats = calculate_statistics(page)

    assert sum(stats.trust_distribution.values()) == 20
    assert sum(stats.impact_breakdown.values()) == 20
    assert sum(stats.urgency_breakdown.values()) == 20
    assert sum(stats.decision_type_breakdown.values()) == 20
    assert stats.avg_confidence == round(sum(d.confidence for d in page) / 20, 1)
    assert "suspect" in stats.trust_distribution
