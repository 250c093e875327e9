"""Risk, compliance, quality and resource scoring.

Combines classification signals into bounded 0-100 scores.

Risk Dimensions:
1. Impact severity: low 10, medium 30, high 60, critical 90
2. Urgency severity: routine 5, elevated 20, urgent 50, emergency 80
3. Confidence inverse: (100 - confidence) * 0.5
4. Constraint violations: 20 per violation

Design Philosophy:
- Weighted combination of multiple signals
- Configurable weights that must sum to 1.0
- Explainable (each factor reports its weight and contribution)
- Bounded output (0-100 scale)
"""

from typing import Dict, List

from agentlens.engine.random_source import SeededRandom
from agentlens.models import (
    ComplianceAxis,
    ComplianceScoring,
    ComplianceStatus,
    ConfidenceBreakdown,
    ConfidenceComponent,
    DecisionCategory,
    DecisionComplexity,
    DecisionImpact,
    DecisionOutcome,
    DecisionUrgency,
    OperationalStatus,
    ResourceImpact,
    RiskAssessment,
    RiskFactor,
    RiskLevel,
)

IMPACT_SCORES: Dict[DecisionImpact, int] = {
    DecisionImpact.LOW: 10,
    DecisionImpact.MEDIUM: 30,
    DecisionImpact.HIGH: 60,
    DecisionImpact.CRITICAL: 90,
}

URGENCY_SCORES: Dict[DecisionUrgency, int] = {
    DecisionUrgency.ROUTINE: 5,
    DecisionUrgency.ELEVATED: 20,
    DecisionUrgency.URGENT: 50,
    DecisionUrgency.EMERGENCY: 80,
}

VIOLATION_PENALTY = 20


class RiskScorer:
    """Four-factor weighted risk scorer.

    Produces an integer risk score (0-100), a risk level bucket and the
    mitigation strategies each elevated factor calls for.
    """

    def __init__(
        self,
        impact_weight: float = 0.4,
        urgency_weight: float = 0.3,
        confidence_weight: float = 0.2,
        violation_weight: float = 0.1,
    ) -> None:
        """Initialize scorer with factor weights.

        Args:
            impact_weight: Weight for impact severity (0-1)
            urgency_weight: Weight for urgency severity (0-1)
            confidence_weight: Weight for the confidence inverse (0-1)
            violation_weight: Weight for constraint violations (0-1)

        Note: Weights should sum to 1.0
        """
        total = impact_weight + urgency_weight + confidence_weight + violation_weight
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Weights must sum to 1.0, got {total}")

        self.impact_weight = impact_weight
        self.urgency_weight = urgency_weight
        self.confidence_weight = confidence_weight
        self.violation_weight = violation_weight

    def assess(
        self,
        impact: DecisionImpact,
        urgency: DecisionUrgency,
        confidence: int,
        violation_count: int,
    ) -> RiskAssessment:
        """Build the full risk assessment for a decision.

        Args:
            impact: Classified impact
            urgency: Classified urgency
            confidence: Decision confidence (0-100)
            violation_count: Number of constraint violations

        Returns:
            Risk assessment with score, factors, level and mitigations
        """
        impact_risk = IMPACT_SCORES[impact]
        urgency_risk = URGENCY_SCORES[urgency]
        confidence_risk = (100 - confidence) * 0.5
        violation_risk = violation_count * VIOLATION_PENALTY

        factors = [
            RiskFactor(factor="Impact Level", weight=self.impact_weight, contribution=impact_risk * self.impact_weight),
            RiskFactor(factor="Urgency", weight=self.urgency_weight, contribution=urgency_risk * self.urgency_weight),
            RiskFactor(
                factor="Confidence Inverse",
                weight=self.confidence_weight,
                contribution=confidence_risk * self.confidence_weight,
            ),
            RiskFactor(
                factor="Constraint Violations",
                weight=self.violation_weight,
                contribution=violation_risk * self.violation_weight,
            ),
        ]

        risk_score = self.calculate_risk_score(impact, urgency, confidence, violation_count)

        mitigations: List[str] = []
        if impact_risk > 50:
            mitigations.append("Require human approval for high-impact changes")
        if urgency_risk > 50:
            mitigations.append("Implement rapid response protocols")
        if confidence_risk > 40:
            mitigations.append("Gather additional data before execution")
        if violation_risk > 0:
            mitigations.append("Resolve constraint violations before proceeding")

        return RiskAssessment(
            overall_risk_score=risk_score,
            risk_factors=factors,
            risk_level=self.determine_risk_level(risk_score),
            mitigation_strategies=mitigations,
        )

    def calculate_risk_score(
        self,
        impact: DecisionImpact,
        urgency: DecisionUrgency,
        confidence: int,
        violation_count: int,
    ) -> int:
        """Weighted sum of the four factors, floored and capped at 100."""
        risk_score = (
            IMPACT_SCORES[impact] * self.impact_weight
            + URGENCY_SCORES[urgency] * self.urgency_weight
            + (100 - confidence) * 0.5 * self.confidence_weight
            + violation_count * VIOLATION_PENALTY * self.violation_weight
        )
        # Ensure bounded [0, 100]
        return int(max(0.0, min(100.0, risk_score)))

    def determine_risk_level(self, risk_score: float) -> RiskLevel:
        """Map risk score to risk level category.

        Args:
            risk_score: Risk score (0-100)

        Returns:
            Risk level category
        """
        if risk_score > 70:
            return RiskLevel.EXTREME
        elif risk_score > 50:
            return RiskLevel.HIGH
        elif risk_score > 25:
            return RiskLevel.MODERATE
        else:
            return RiskLevel.LOW


def create_default_scorer() -> RiskScorer:
    """Create scorer with default weights.

    Default weights:
    - Impact: 40% (what is at stake)
    - Urgency: 30% (how little time there is to react)
    - Confidence inverse: 20% (how unsure the agent is)
    - Violations: 10% (constraints already breached)

    Returns:
        RiskScorer with default configuration
    """
    return RiskScorer(
        impact_weight=0.4,
        urgency_weight=0.3,
        confidence_weight=0.2,
        violation_weight=0.1,
    )


FINANCIAL_FAILURE_PROBABILITY = 0.05
OPERATIONAL_FAILURE_PROBABILITY = 0.1
OPERATIONAL_CATEGORIES = frozenset({DecisionCategory.DISPATCH, DecisionCategory.MAINTENANCE})


def score_compliance(
    category: DecisionCategory,
    violation_count: int,
    outcome: DecisionOutcome,
    prerequisites_met: bool,
    rng: SeededRandom,
) -> ComplianceScoring:
    """Three-axis compliance check folded into a four-state status.

    Safety fails exactly when a constraint is violated. Financial rules are
    sampled only for trading decisions and operational policies only for
    dispatch or maintenance decisions.

    Returns:
        non_compliant when safety fails, conditionally_compliant when another
        axis fails, pending_review when every axis passes but the decision is
        still pending with unmet prerequisites, otherwise fully_compliant
    """
    safety_ok = violation_count == 0
    financial_ok = category != DecisionCategory.TRADING or not rng.boolean(FINANCIAL_FAILURE_PROBABILITY)
    operational_ok = category not in OPERATIONAL_CATEGORIES or not rng.boolean(OPERATIONAL_FAILURE_PROBABILITY)

    if not safety_ok:
        status = ComplianceStatus.NON_COMPLIANT
    elif not (financial_ok and operational_ok):
        status = ComplianceStatus.CONDITIONALLY_COMPLIANT
    elif outcome == DecisionOutcome.PENDING and not prerequisites_met:
        status = ComplianceStatus.PENDING_REVIEW
    else:
        status = ComplianceStatus.FULLY_COMPLIANT

    score = (40 if safety_ok else 0) + (30 if financial_ok else 15) + (30 if operational_ok else 15)

    return ComplianceScoring(
        overall_status=status,
        safety_regulations=ComplianceAxis(
            compliant=safety_ok,
            details="All safety constraints satisfied" if safety_ok else "Safety constraint violated",
        ),
        financial_rules=ComplianceAxis(
            compliant=financial_ok,
            details="Within trading limits" if financial_ok else "Approaching exposure limits",
        ),
        operational_policies=ComplianceAxis(
            compliant=operational_ok,
            details="Adheres to operational guidelines" if operational_ok else "Minor policy deviation detected",
        ),
        compliance_score=score,
    )


def calculate_quality_score(
    confidence: int,
    source_count: int,
    violation_count: int,
    status: OperationalStatus,
) -> int:
    """Decision quality (0-100) from confidence, evidence breadth and conditions."""
    quality = 50.0
    quality += confidence / 100 * 30
    quality += min(source_count / 5 * 20, 20)
    quality -= violation_count * 15

    if status == OperationalStatus.OPTIMAL:
        quality += 10
    elif status == OperationalStatus.DEGRADED:
        quality -= 10

    return int(max(0.0, min(100.0, quality)))


CONTEXT_RELEVANCE: Dict[OperationalStatus, int] = {
    OperationalStatus.OPTIMAL: 90,
    OperationalStatus.NOMINAL: 75,
    OperationalStatus.DEGRADED: 60,
    OperationalStatus.MAINTENANCE: 60,
}


def breakdown_confidence(
    confidence: int,
    source_count: int,
    status: OperationalStatus,
    rng: SeededRandom,
) -> ConfidenceBreakdown:
    """Split confidence into four weighted components (weights 30/25/25/20)."""
    data_quality = min(100.0, source_count / 5 * 100)
    historical = confidence + (rng.next_float() - 0.5) * 10
    historical = max(0.0, min(100.0, historical))

    return ConfidenceBreakdown(
        data_quality=ConfidenceComponent(score=int(data_quality), weight=30),
        historical_accuracy=ConfidenceComponent(score=int(historical), weight=25),
        model_certainty=ConfidenceComponent(score=confidence, weight=25),
        context_relevance=ConfidenceComponent(score=CONTEXT_RELEVANCE[status], weight=20),
        total=confidence,
    )


COMPLEXITY_MULTIPLIERS: Dict[DecisionComplexity, float] = {
    DecisionComplexity.SIMPLE: 1.0,
    DecisionComplexity.MODERATE: 1.5,
    DecisionComplexity.COMPLEX: 2.5,
}

BASE_INFERENCE_MS = 50


def calculate_resource_impact(
    complexity: DecisionComplexity, source_count: int, rng: SeededRandom
) -> ResourceImpact:
    """Illustrative compute footprint of reaching the decision."""
    multiplier = COMPLEXITY_MULTIPLIERS[complexity]
    inference_ms = BASE_INFERENCE_MS * multiplier + source_count * 10
    memory_mb = 10 + source_count * 2 + rng.next_float() * 5
    api_calls = source_count + rng.randint(0, 2)
    compute_cost = inference_ms * 0.01 + api_calls * 0.5
    efficiency = min(100.0, 1000 / inference_ms * 100 / multiplier)

    return ResourceImpact(
        inference_time_ms=int(inference_ms),
        memory_used_mb=int(memory_mb * 10) / 10,
        api_calls_count=api_calls,
        compute_cost=int(compute_cost * 100) / 100,
        efficiency=int(efficiency),
    )
