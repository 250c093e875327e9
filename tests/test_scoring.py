"""Unit tests for risk, compliance, quality and resource scoring."""

import pytest

from agentlens.engine.random_source import SeededRandom
from agentlens.engine.scoring import (
    RiskScorer,
    breakdown_confidence,
    calculate_quality_score,
    calculate_resource_impact,
    create_default_scorer,
    score_compliance,
)
from agentlens.models import (
    ComplianceStatus,
    DecisionCategory,
    DecisionComplexity,
    DecisionImpact,
    DecisionOutcome,
    DecisionUrgency,
    OperationalStatus,
    RiskLevel,
)


def test_risk_scorer_weights_validation() -> None:
    """Test that weights must sum to 1.0."""
    # Valid weights
    RiskScorer(impact_weight=0.4, urgency_weight=0.3, confidence_weight=0.2, violation_weight=0.1)

    # Invalid weights (sum > 1.0)
    with pytest.raises(ValueError, match="Weights must sum to 1.0"):
        RiskScorer(impact_weight=0.5, urgency_weight=0.5, confidence_weight=0.5, violation_weight=0.5)


def test_low_risk_decision() -> None:
    """Test a routine, low-impact, confident decision scores low."""
    scorer = create_default_scorer()

    assessment = scorer.assess(DecisionImpact.LOW, DecisionUrgency.ROUTINE, confidence=95, violation_count=0)

    # 10*0.4 + 5*0.3 + 2.5*0.2 = 6
    assert assessment.overall_risk_score == 6
    assert assessment.risk_level == RiskLevel.LOW
    assert assessment.mitigation_strategies == []


def test_violation_with_critical_impact_is_high_risk() -> None:
    """Test a violating critical decision is always high or extreme risk."""
    scorer = create_default_scorer()

    for confidence in range(0, 101, 5):
        for urgency in (DecisionUrgency.URGENT, DecisionUrgency.EMERGENCY):
            assessment = scorer.assess(DecisionImpact.CRITICAL, urgency, confidence, violation_count=1)
            assert assessment.risk_level in (RiskLevel.HIGH, RiskLevel.EXTREME)


def test_risk_factors_explain_score() -> None:
    """Test factor contributions add up to the score."""
    scorer = create_default_scorer()

    assessment = scorer.assess(DecisionImpact.HIGH, DecisionUrgency.ELEVATED, confidence=60, violation_count=1)

    total = sum(factor.contribution for factor in assessment.risk_factors)
    assert int(total) == assessment.overall_risk_score
    assert [f.factor for f in assessment.risk_factors] == [
        "Impact Level",
        "Urgency",
        "Confidence Inverse",
        "Constraint Violations",
    ]
    assert "Resolve constraint violations before proceeding" in assessment.mitigation_strategies
    assert "Require human approval for high-impact changes" in assessment.mitigation_strategies


def test_risk_score_bounded() -> None:
    """Test score stays in [0, 100] even with many violations."""
    scorer = create_default_scorer()
    score = scorer.calculate_risk_score(DecisionImpact.CRITICAL, DecisionUrgency.EMERGENCY, 0, 100)
    assert score == 100


def test_risk_level_thresholds() -> None:
    """Test risk level bucket boundaries."""
    scorer = create_default_scorer()

    assert scorer.determine_risk_level(0) == RiskLevel.LOW
    assert scorer.determine_risk_level(25) == RiskLevel.LOW
    assert scorer.determine_risk_level(26) == RiskLevel.MODERATE
    assert scorer.determine_risk_level(51) == RiskLevel.HIGH
    assert scorer.determine_risk_level(71) == RiskLevel.EXTREME


def test_risk_monotonic_in_impact() -> None:
    """Test raising impact never lowers risk."""
    scorer = create_default_scorer()
    impacts = [DecisionImpact.LOW, DecisionImpact.MEDIUM, DecisionImpact.HIGH, DecisionImpact.CRITICAL]

    scores = [scorer.calculate_risk_score(impact, DecisionUrgency.ROUTINE, 80, 0) for impact in impacts]
    assert scores == sorted(scores)


def test_compliance_violation_is_non_compliant() -> None:
    """Test any violation fails safety."""
    result = score_compliance(DecisionCategory.GOVERNANCE, 1, DecisionOutcome.SUCCESS, True, SeededRandom(1))

    assert result.overall_status == ComplianceStatus.NON_COMPLIANT
    assert result.safety_regulations.compliant is False
    assert result.compliance_score == 60


def test_compliance_governance_clean() -> None:
    """Test governance decisions without violations are fully compliant."""
    result = score_compliance(DecisionCategory.GOVERNANCE, 0, DecisionOutcome.SUCCESS, True, SeededRandom(1))

    assert result.overall_status == ComplianceStatus.FULLY_COMPLIANT
    assert result.compliance_score == 100


def test_compliance_pending_review() -> None:
    """Test pending decisions with unmet prerequisites await review."""
    result = score_compliance(DecisionCategory.OVERRIDE, 0, DecisionOutcome.PENDING, False, SeededRandom(1))

    assert result.overall_status == ComplianceStatus.PENDING_REVIEW


def test_compliance_score_bounds() -> None:
    """Test compliance score stays in range for every category."""
    rng = SeededRandom(4)
    for category in DecisionCategory:
        for violations in (0, 1, 2):
            result = score_compliance(category, violations, DecisionOutcome.SUCCESS, True, rng)
            assert 0 <= result.compliance_score <= 100


def test_quality_score() -> None:
    """Test quality combines confidence, sources and conditions."""
    # 50 + 27 + 16 + 10, capped
    assert calculate_quality_score(90, 4, 0, OperationalStatus.OPTIMAL) == 100
    assert calculate_quality_score(90, 4, 0, OperationalStatus.NOMINAL) == 93
    assert calculate_quality_score(40, 4, 1, OperationalStatus.DEGRADED) == 53
    assert calculate_quality_score(0, 0, 10, OperationalStatus.DEGRADED) == 0


def test_confidence_breakdown() -> None:
    """Test confidence components and weights."""
    breakdown = breakdown_confidence(88, 5, OperationalStatus.NOMINAL, SeededRandom(2))

    assert breakdown.total == 88
    assert breakdown.data_quality.score == 100
    assert breakdown.model_certainty.score == 88
    assert breakdown.context_relevance.score == 75
    assert 83 <= breakdown.historical_accuracy.score <= 93
    weights = [
        breakdown.data_quality.weight,
        breakdown.historical_accuracy.weight,
        breakdown.model_certainty.weight,
        breakdown.context_relevance.weight,
    ]
    assert sum(weights) == 100


def test_resource_impact_scales_with_complexity() -> None:
    """Test complex decisions take longer to infer."""
    simple = calculate_resource_impact(DecisionComplexity.SIMPLE, 4, SeededRandom(1))
    complex_ = calculate_resource_impact(DecisionComplexity.COMPLEX, 4, SeededRandom(1))

    assert simple.inference_time_ms == 90
    assert complex_.inference_time_ms == 165
    assert 4 <= simple.api_calls_count <= 6
    assert 0 <= complex_.efficiency <= 100
