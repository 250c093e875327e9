"""Response shaping and page statistics for decision queries."""

from typing import Any, Dict, List, Sequence

from agentlens.models import (
    DecisionImpact,
    DecisionStatistics,
    DecisionUrgency,
    EnrichedDecision,
    ExplainabilityDepth,
    ResponseFormat,
    TrustGrade,
)

# Verbose groups left out of the standard view
STANDARD_OMITTED = {"source_health_scores", "related_decisions", "provenance_chain", "alternative_actions"}


def _explanation_at(decision: EnrichedDecision, depth: ExplainabilityDepth) -> str:
    return getattr(decision.explanations, depth.value)


def format_decision(
    decision: EnrichedDecision,
    format: ResponseFormat,
    depth: ExplainabilityDepth = ExplainabilityDepth.INTERMEDIATE,
    keep_alternatives: bool = False,
) -> Dict[str, Any]:
    """Render one decision as camelCase JSON-ready data.

    Args:
        decision: Enriched decision
        format: minimal, standard or full
        depth: Which explanation depth to surface
        keep_alternatives: Keep alternative actions in the standard view
            (set when the caller asked for them)

    Returns:
        Dict ready for the response body
    """
    if format == ResponseFormat.MINIMAL:
        return {
            "id": decision.id,
            "agent": decision.agent.value,
            "summary": decision.summary,
            "confidence": decision.confidence,
            "timestamp": decision.timestamp.isoformat(),
            "category": decision.category.value,
            "impact": decision.impact.value,
            "explanation": _explanation_at(decision, depth),
        }

    if format == ResponseFormat.FULL:
        shaped = decision.model_copy(
            update={"explanations": decision.explanations.model_copy(update={"current_depth": depth})}
        )
        return shaped.model_dump(by_alias=True, mode="json", exclude_none=True)

    omitted = STANDARD_OMITTED - {"alternative_actions"} if keep_alternatives else STANDARD_OMITTED
    data = decision.model_dump(by_alias=True, mode="json", exclude_none=True, exclude=omitted)
    data["currentExplanation"] = _explanation_at(decision, depth)
    return data


def format_decisions(
    decisions: Sequence[EnrichedDecision],
    format: ResponseFormat,
    depth: ExplainabilityDepth = ExplainabilityDepth.INTERMEDIATE,
    keep_alternatives: bool = False,
) -> List[Dict[str, Any]]:
    return [format_decision(decision, format, depth, keep_alternatives) for decision in decisions]


def calculate_statistics(decisions: Sequence[EnrichedDecision]) -> DecisionStatistics:
    """Aggregate statistics over a page of decisions.

    Averages are rounded to one decimal; every trust grade, impact and
    urgency level appears in its breakdown even when its count is zero.
    An empty page yields zero averages.
    """
    trust = {grade.value: 0 for grade in TrustGrade}
    impact = {level.value: 0 for level in DecisionImpact}
    urgency = {level.value: 0 for level in DecisionUrgency}
    categories: Dict[str, int] = {}

    for decision in decisions:
        trust[decision.trust_mathematics.trust_grade.value] += 1
        impact[decision.impact.value] += 1
        urgency[decision.urgency.value] += 1
        categories[decision.category.value] = categories.get(decision.category.value, 0) + 1

    count = len(decisions)
    avg_confidence = sum(d.confidence for d in decisions) / count if count else 0.0
    avg_quality = sum(d.quality_score for d in decisions) / count if count else 0.0

    return DecisionStatistics(
        avg_confidence=round(avg_confidence, 1),
        avg_quality_score=round(avg_quality, 1),
        trust_distribution=trust,
        decision_type_breakdown=categories,
        impact_breakdown=impact,
        urgency_breakdown=urgency,
    )
