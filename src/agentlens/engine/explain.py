"""Decision explanations.

Two producers live here:
1. ``generate_explanations`` writes the three-depth narrative attached to
   every enriched decision.
2. ``build_explanation`` assembles the standalone explanation record served
   for a single decision id, and ``shape_explanation`` cuts it down to the
   requested format and fields.

The standalone record is seeded from a digest of the decision id, so the
same id always explains the same way.

Design Philosophy:
- Deterministic: no wall-clock or global randomness inside the builders
- Reuses the enrichment vocabulary (sources, prerequisites, alternatives)
- Invalid ids fail loudly with a ValueError subclass
"""

import hashlib
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from agentlens.engine.classification import categorize_decision, classify_complexity
from agentlens.engine.context import (
    generate_alternative_actions,
    generate_source_health,
    get_data_sources,
    validate_prerequisites,
)
from agentlens.engine.generator import SUMMARY_BANK, make_decision_id
from agentlens.engine.random_source import SeededRandom
from agentlens.engine.trust import DEFAULT_TRUST_CONFIG, TrustConfig, generate_trust_mathematics
from agentlens.models import (
    AgentPersona,
    BeginnerExplanation,
    ChainLink,
    ConfidenceFactor,
    DecisionCategory,
    DecisionChainLinking,
    DecisionComplexity,
    DecisionEvent,
    DecisionExplanation,
    DecisionImpact,
    ExpertExplanation,
    ExplainabilityDepth,
    ExplanationConfidence,
    ExplanationFormat,
    Explanations,
    IntermediateExplanation,
    MultiDepthExplanation,
    OperationalStatus,
    ReasoningChain,
    ReasoningStep,
)

logger = logging.getLogger(__name__)

EXPERT_TECHNICAL_DETAILS = (
    "Technical details: Decision employed multi-source validation with trust mathematics "
    "(sigma deviation analysis), temporal freshness decay modeling, and constraint "
    "satisfaction verification. Confidence derived from Bayesian inference over "
    "{sources} independent data sources with cross-validation."
)


def generate_explanations(
    event: DecisionEvent,
    complexity: DecisionComplexity,
    confidence_explanation: str,
    source_count: int,
) -> Explanations:
    """Beginner, intermediate and expert narratives; each extends the previous one."""
    beginner = f"{event.agent.value.capitalize()} agent decided to {event.summary.lower()}."
    intermediate = (
        f"{beginner} This {complexity.value} decision was made with "
        f"{event.confidence}% confidence. {confidence_explanation}"
    )
    expert = f"{intermediate} {EXPERT_TECHNICAL_DETAILS.format(sources=source_count)}"
    return Explanations(beginner=beginner, intermediate=intermediate, expert=expert)


# ---------------------------------------------------------------------------
# Standalone explanation record
# ---------------------------------------------------------------------------


class InvalidDecisionIdError(ValueError):
    """Raised when a decision id does not name a known agent persona."""


def parse_decision_id(decision_id: str, now: datetime) -> Tuple[AgentPersona, datetime]:
    """Recover the persona and decision time from ``decision-{agent}-{epoch_ms}-{index}``.

    A missing, malformed or out-of-range time segment falls back to ``now``.

    Raises:
        InvalidDecisionIdError: If the second segment is not a persona
    """
    parts = decision_id.split("-")
    if len(parts) < 2:
        raise InvalidDecisionIdError("Invalid decision ID format")
    try:
        agent = AgentPersona(parts[1])
    except ValueError:
        raise InvalidDecisionIdError("Invalid decision ID format") from None

    timestamp = now
    if len(parts) > 2 and parts[2].isdigit():
        try:
            timestamp = datetime.fromtimestamp(int(parts[2]) / 1000, tz=now.tzinfo)
        except (OverflowError, OSError, ValueError):
            logger.debug("Decision id time segment out of range: %s", parts[2])
    return agent, timestamp


def _seed_for(decision_id: str) -> int:
    return int(hashlib.sha256(decision_id.encode("utf-8")).hexdigest()[:16], 16)


FOCUS = {
    AgentPersona.OPERATIONS: "Energy flow",
    AgentPersona.MARKETS: "Market prices",
    AgentPersona.SENTINEL: "Equipment health",
    AgentPersona.GOVERNOR: "Safety checks",
}

TRIGGERS = {
    AgentPersona.OPERATIONS: "load demand change",
    AgentPersona.MARKETS: "price threshold breach",
    AgentPersona.SENTINEL: "equipment anomaly",
    AgentPersona.GOVERNOR: "safety monitoring",
}

ANALOGIES = {
    AgentPersona.OPERATIONS: (
        "Think of it like a smart thermostat: it continuously checks temperature "
        "and adjusts to keep you comfortable while saving energy."
    ),
    AgentPersona.MARKETS: (
        "Think of it like a skilled trader: it watches market conditions and makes "
        "profitable moves at the right time."
    ),
    AgentPersona.SENTINEL: (
        "Think of it like a mechanic listening to an engine: small changes are caught "
        "before they turn into breakdowns."
    ),
    AgentPersona.GOVERNOR: (
        "Think of it like a referee: every move is checked against the rules before it counts."
    ),
}

# (factor, weight, confidence, reasoning)
CONFIDENCE_FACTORS = [
    ("data_quality", 30, 95, "All sources operational, cross-validated, no outliers detected"),
    ("model_accuracy", 35, 87, "Forecast ensemble with 88% historical accuracy on similar conditions"),
    ("context", 20, 92, "Current conditions match training distribution, no anomalies"),
    ("historical", 15, 89, "Similar decisions historically successful 89% of the time"),
]

LOWER_BOUND_MARGIN = 8
UPPER_BOUND_MARGIN = 5
REASONING_STEP_SPACING_MS = 500
REASONING_START_MS = 5000


def _multi_depth(
    agent: AgentPersona,
    summary: str,
    category: DecisionCategory,
    complexity: DecisionComplexity,
    confidence: int,
    source_count: int,
    alternative_count: int,
) -> MultiDepthExplanation:
    return MultiDepthExplanation(
        beginner=BeginnerExplanation(
            summary=f"The {agent.value} agent decided to {summary.lower()} to keep the solar farm running well.",
            key_points=[
                "The system automatically analyzed current conditions",
                f"{FOCUS[agent]} were monitored",
                "The best action was selected from multiple options",
                "This decision helps maximize revenue while staying safe",
            ],
            analogy=ANALOGIES[agent],
        ),
        intermediate=IntermediateExplanation(
            summary=(
                f"{agent.value.capitalize()} agent executed a {category.value} decision after analyzing "
                "real-time energy metrics, price forecasts and safety constraints."
            ),
            detailed_context=[
                f"Decision triggered by {TRIGGERS[agent]}",
                f"Real-time data from {source_count} sources validated and cross-checked",
                f"Alternative actions considered: {alternative_count} options rejected",
            ],
            data_points={
                "confidence": confidence,
                "dataSources": source_count,
                "category": category.value,
                "complexity": complexity.value,
            },
            assumptions=[
                "Weather forecast accuracy: 85%",
                "Grid price stability for next 2 hours",
                "Battery degradation within normal limits",
            ],
            tradeoffs=[
                "Slightly higher battery cycling vs increased revenue",
                "Immediate action vs waiting for potential better prices",
            ],
        ),
        expert=ExpertExplanation(
            summary="Hybrid optimization using receding horizon MPC with forecast integration and a multi-objective cost function.",
            technical_details=[
                "Model: Receding Horizon Model Predictive Control (MPC) with 24h prediction window",
                "Forecasting: LSTM (60%) + ARIMA (40%) ensemble",
                "Optimization: Mixed-Integer Linear Programming",
                "Objective: max(revenue - degradation_cost - grid_fees) subject to constraints",
                "Update frequency: Re-optimize every 5 minutes with rolling horizon",
            ],
            algorithmic_approach=(
                "Dynamic programming with value iteration, state space discretization "
                "(SOC: 20-100%, 1% steps), action space: [-50kW, +50kW, 5kW steps]"
            ),
            mathematical_model=(
                "max sum_t [P(t)*price(t)*dt - a*|P(t)|*degradation - b*losses(P(t))] "
                "s.t. SOC_min <= SOC(t) <= SOC_max, |P(t)| <= P_max"
            ),
            uncertainties=[
                "Weather forecast RMSE: +/-12%",
                "Load forecast RMSE: +/-8%",
                "Price forecast RMSE: +/-15%",
            ],
        ),
    )


def _reasoning_chain(
    summary: str,
    category: DecisionCategory,
    sources: Sequence[str],
    alternative_count: int,
    confidence: int,
    timestamp: datetime,
) -> ReasoningChain:
    templates = [
        (f"Detected triggering condition from {sources[0]}", sources[0], 95),
        (f"Validated freshness and integrity of {len(sources)} data sources", "validation:freshness", 98),
        (f"Forecasted near-term conditions relevant to the {category.value} decision", "forecast_engine:ensemble", 87),
        ("Checked all safety constraints: temperature, voltage, frequency within bounds", "safety_monitor:realtime", 100),
        (f"Evaluated {alternative_count} alternative actions", "decision_engine:optimization", 92),
        (f"Selected action: {summary}", "decision_engine:final_selection", confidence),
    ]
    steps = [
        ReasoningStep(
            step_number=number,
            reasoning=reasoning,
            data_source=source,
            confidence=step_confidence,
            timestamp=timestamp
            - timedelta(milliseconds=REASONING_START_MS - (number - 1) * REASONING_STEP_SPACING_MS),
        )
        for number, (reasoning, source, step_confidence) in enumerate(templates, start=1)
    ]
    return ReasoningChain(
        total_steps=len(steps),
        steps=steps,
        overall_logic=f"Condition-triggered {category.value} decision with multi-constraint validation and alternative evaluation",
        critical_paths=["Step 1: Trigger", "Step 4: Safety validation", "Step 6: Final selection"],
        duration_ms=int((steps[-1].timestamp - steps[0].timestamp).total_seconds() * 1000),
    )


def _explanation_confidence() -> ExplanationConfidence:
    factors = [
        ConfidenceFactor(factor_type=name, weight=weight, confidence=confidence, reasoning=reasoning)
        for name, weight, confidence, reasoning in CONFIDENCE_FACTORS
    ]
    weighted = sum(f.confidence * f.weight for f in factors) / 100
    return ExplanationConfidence(
        overall_confidence=round(weighted),
        factors=factors,
        lower_bound=max(0, round(weighted - LOWER_BOUND_MARGIN)),
        upper_bound=min(100, round(weighted + UPPER_BOUND_MARGIN)),
    )


def _decision_chain(
    agent: AgentPersona, timestamp: datetime, now: datetime, rng: SeededRandom
) -> DecisionChainLinking:
    upstream_agent = rng.choice([persona for persona in AgentPersona if persona != agent])
    downstream_agent = AgentPersona.OPERATIONS if agent == AgentPersona.GOVERNOR else AgentPersona.GOVERNOR
    upstream_at = timestamp - timedelta(seconds=10)
    downstream_at = timestamp + timedelta(seconds=5)

    return DecisionChainLinking(
        upstream_triggers=[
            ChainLink(
                related_decision_id=make_decision_id(upstream_agent, upstream_at, 0),
                relationship_type="triggered_by",
                agent_persona=upstream_agent,
                description=f"{upstream_agent.value.capitalize()} agent flagged a condition needing action",
                strength=rng.randint(70, 95),
                timestamp=upstream_at,
            )
        ],
        downstream_impacts=[
            ChainLink(
                related_decision_id=make_decision_id(downstream_agent, downstream_at, 0),
                relationship_type="triggers",
                agent_persona=downstream_agent,
                description=f"{downstream_agent.value.capitalize()} agent validates the follow-on effects",
                strength=rng.randint(60, 90),
                timestamp=downstream_at,
            )
        ],
        chain_complete=downstream_at <= now,
    )


def build_explanation(
    decision_id: str,
    now: datetime,
    trust_config: TrustConfig = DEFAULT_TRUST_CONFIG,
) -> DecisionExplanation:
    """Assemble the full explanation record for ``decision_id``.

    Args:
        decision_id: Id of the form decision-{agent}-{epoch_ms}-{index}
        now: Reference time (used when the id carries no timestamp)
        trust_config: Trust thresholds for the trust block

    Returns:
        Complete explanation record

    Raises:
        InvalidDecisionIdError: If the id does not name a known persona
    """
    agent, timestamp = parse_decision_id(decision_id, now)
    rng = SeededRandom(_seed_for(decision_id))

    summary = rng.choice(SUMMARY_BANK[agent])
    confidence = rng.randint(trust_config.good, 98)
    event = DecisionEvent(
        id=decision_id,
        agent=agent,
        summary=summary,
        confidence=confidence,
        timestamp=timestamp,
        impact=DecisionImpact.MEDIUM,
    )
    complexity = classify_complexity(event)
    category = categorize_decision(event)

    sources = get_data_sources(agent, category)
    source_health = generate_source_health(sources, rng)
    alternatives = generate_alternative_actions(event, category)

    return DecisionExplanation(
        decision_id=decision_id,
        agent_persona=agent,
        decision_type=category.value,
        timestamp=timestamp,
        summary=summary,
        multi_depth_explanation=_multi_depth(
            agent, summary, category, complexity, confidence, len(sources), len(alternatives)
        ),
        reasoning_chain=_reasoning_chain(summary, category, sources, len(alternatives), confidence, timestamp),
        confidence_breakdown=_explanation_confidence(),
        alternative_actions=alternatives,
        prerequisites=validate_prerequisites(category, OperationalStatus.NOMINAL, source_health, rng),
        trust_mathematics=generate_trust_mathematics(confidence, sources, rng, trust_config),
        decision_chain=_decision_chain(agent, timestamp, now, rng),
        data_sources_count=len(sources),
        trust_score=round(sum(h.reliability for h in source_health) / len(source_health)),
    )


# ---------------------------------------------------------------------------
# Response shaping
# ---------------------------------------------------------------------------

DEPTH_KEYS = {
    ExplainabilityDepth.BEGINNER: ("summary", "keyPoints", "analogy"),
    ExplainabilityDepth.INTERMEDIATE: ("summary", "detailedContext", "dataPoints", "assumptions"),
    ExplainabilityDepth.EXPERT: ("summary", "technicalDetails", "algorithmicApproach", "mathematicalModel"),
}

# Relationship and trust detail left out of the standard view
STANDARD_OMITTED = ("multiDepthExplanation", "decisionChain", "trustMathematics")

ALWAYS_SELECTED = ("decisionId", "timestamp")


def shape_explanation(
    explanation: DecisionExplanation,
    depth: ExplainabilityDepth,
    format: ExplanationFormat,
    fields: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """Cut the record down to the requested format, depth and fields.

    Args:
        explanation: Full record from build_explanation
        depth: Explanation depth used by the standard format
        format: minimal, standard, full or timeline
        fields: Optional top-level camelCase keys to keep; decisionId and
            timestamp are always kept

    Returns:
        JSON-ready dict
    """
    full = explanation.model_dump(by_alias=True, mode="json", exclude_none=True)

    if format == ExplanationFormat.MINIMAL:
        data = {
            "decisionId": full["decisionId"],
            "summary": full["summary"],
            "agentPersona": full["agentPersona"],
            "confidence": full["confidenceBreakdown"]["overallConfidence"],
            "timestamp": full["timestamp"],
        }
    elif format == ExplanationFormat.TIMELINE:
        data = {
            "decisionId": full["decisionId"],
            "summary": full["summary"],
            "reasoningChain": full["reasoningChain"],
            "decisionChain": full["decisionChain"],
            "timestamp": full["timestamp"],
        }
    elif format == ExplanationFormat.FULL:
        data = full
    else:
        chosen = full["multiDepthExplanation"][depth.value]
        data = {key: value for key, value in full.items() if key not in STANDARD_OMITTED}
        data["explanation"] = {key: chosen[key] for key in DEPTH_KEYS[depth] if key in chosen}

    if fields:
        selected = {field: data[field] for field in fields if field in data}
        for key in ALWAYS_SELECTED:
            selected[key] = data[key]
        data = selected

    return data
