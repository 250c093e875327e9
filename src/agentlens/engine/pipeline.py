"""Enrichment pipeline.

Turns a base DecisionEvent into an EnrichedDecision by folding an ordered
list of stages over an immutable accumulator.

Stage Contract:
1. A stage receives the PartialRecord built so far and the shared context
2. It returns a new PartialRecord with its fields added (never mutates)
3. It may read any field an earlier stage produced
4. It draws randomness only from ``context.rng``

Stage order is part of the contract: the shared random stream is consumed
in this order, so reordering stages changes every seeded batch.

Design Philosophy:
- Pure stages, composed with functools.reduce
- Sequential over the batch so a seed reproduces the same output
- No exception handling here; failures surface to the request boundary
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import reduce
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Sequence

from agentlens.engine import classification, context, relational, scoring, trust
from agentlens.engine.explain import generate_explanations
from agentlens.engine.random_source import SeededRandom
from agentlens.engine.scoring import RiskScorer, create_default_scorer
from agentlens.engine.trust import DEFAULT_TRUST_CONFIG, TrustConfig
from agentlens.models import DecisionCategory, DecisionComplexity, DecisionEvent, EnrichedDecision

logger = logging.getLogger(__name__)


class PartialRecord:
    """Read-only mapping of the fields accumulated so far."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, Any]) -> None:
        self._fields = MappingProxyType(dict(fields))

    @classmethod
    def from_event(cls, event: DecisionEvent) -> "PartialRecord":
        return cls(dict(event))

    @property
    def fields(self) -> Mapping[str, Any]:
        return self._fields

    def __getitem__(self, name: str) -> Any:
        return self._fields[name]

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def extend(self, **updates: Any) -> "PartialRecord":
        """Return a new record with ``updates`` layered over the current fields."""
        merged = dict(self._fields)
        merged.update(updates)
        return PartialRecord(merged)


@dataclass(frozen=True)
class EnrichmentOptions:
    include_alternatives: bool = False
    include_replay: bool = False


@dataclass(frozen=True)
class EnrichmentContext:
    """Everything a stage may read besides the record itself."""

    batch: Sequence[DecisionEvent]
    index: int
    rng: SeededRandom
    now: datetime
    trust_config: TrustConfig = DEFAULT_TRUST_CONFIG
    scorer: RiskScorer = create_default_scorer()
    options: EnrichmentOptions = EnrichmentOptions()

    @property
    def event(self) -> DecisionEvent:
        return self.batch[self.index]


Stage = Callable[[PartialRecord, EnrichmentContext], PartialRecord]


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def classify(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    event = ctx.event
    complexity = classification.classify_complexity(event)
    category = classification.categorize_decision(event)
    impact = classification.assess_impact(event, complexity)
    urgency = classification.detect_urgency(event, impact)
    return record.extend(complexity=complexity, category=category, impact=impact, urgency=urgency)


def attach_sources(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    sources = context.get_data_sources(ctx.event.agent, record["category"])
    return record.extend(
        source_provenance=sources,
        source_health_scores=context.generate_source_health(sources, ctx.rng),
    )


def assess_operations(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    event = ctx.event
    workload = context.simulate_workload(event.timestamp, ctx.rng)
    violations = context.generate_constraint_violations(event, record["impact"], ctx.rng)
    status = context.determine_operational_status(event, workload, len(violations))
    return record.extend(
        agent_workload=workload,
        constraint_violations=violations,
        operational_status=status,
        confidence_explanation=context.generate_confidence_explanation(
            event.confidence, len(record["source_provenance"]), record["complexity"], status
        ),
        coordinated_agents=context.detect_coordinated_agents(event),
    )


def apply_trust(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    event = ctx.event
    age_sec = max(0, int((ctx.now - event.timestamp).total_seconds()))
    return record.extend(
        age_sec=age_sec,
        trust_decay_percent=trust.calculate_trust_decay(age_sec, ctx.trust_config.decay_rate),
        trust_mathematics=trust.generate_trust_mathematics(
            event.confidence, record["source_provenance"], ctx.rng, ctx.trust_config
        ),
        proof_hash=context.generate_proof_hash(event.agent, event.id),
    )


def link_chain(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    parent_id, child_ids = relational.generate_decision_chain(ctx.batch, ctx.index, ctx.rng)
    return record.extend(parent_decision_id=parent_id, child_decision_ids=child_ids)


def score_quality(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    violation_count = len(record["constraint_violations"])
    return record.extend(
        quality_score=scoring.calculate_quality_score(
            ctx.event.confidence,
            len(record["source_provenance"]),
            violation_count,
            record["operational_status"],
        ),
        sentiment=classification.detect_sentiment(record["urgency"], violation_count),
    )


def relate(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        related_decisions=relational.generate_related_decisions(
            ctx.event, ctx.batch, record["parent_decision_id"], record["child_decision_ids"], ctx.rng
        )
    )


def observe_outcome(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    outcome, outcome_confidence = context.generate_outcome(ctx.event, record["age_sec"], ctx.rng)
    return record.extend(outcome=outcome, outcome_confidence=outcome_confidence)


def snapshot_agent_state(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        agent_state_context=relational.generate_agent_state_context(ctx.event, ctx.batch, ctx.rng)
    )


def detect_conflicts(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        conflict_detection=relational.detect_conflicts(
            ctx.event, ctx.batch, len(record["constraint_violations"])
        )
    )


def analyze_temporal(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(temporal_pattern=relational.analyze_temporal_pattern(ctx.event, ctx.batch, ctx.rng))


def assess_risk(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        risk_assessment=ctx.scorer.assess(
            record["impact"],
            record["urgency"],
            ctx.event.confidence,
            len(record["constraint_violations"]),
        )
    )


def learn(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        learning_indicators=relational.generate_learning_indicators(ctx.event, ctx.batch),
        consensus_tracking=relational.track_consensus(ctx.event, ctx.batch, record["category"]),
    )


def review_history(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        reversal_history=context.generate_reversal_history(ctx.event, record["age_sec"], ctx.rng),
        performance_benchmark=context.generate_performance_benchmark(
            record["quality_score"], record["outcome"], ctx.rng
        ),
    )


def explain(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        explanations=generate_explanations(
            ctx.event,
            record["complexity"],
            record["confidence_explanation"],
            len(record["source_provenance"]),
        )
    )


def check_prerequisites(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        prerequisites=context.validate_prerequisites(
            record["category"], record["operational_status"], record["source_health_scores"], ctx.rng
        ),
        provenance_chain=context.build_provenance_chain(ctx.event, record["source_provenance"]),
        confidence_breakdown=scoring.breakdown_confidence(
            ctx.event.confidence, len(record["source_provenance"]), record["operational_status"], ctx.rng
        ),
    )


def consider_alternatives(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    wanted = (
        ctx.options.include_alternatives
        or record["category"] == DecisionCategory.TRADING
        or record["complexity"] == DecisionComplexity.COMPLEX
    )
    alternatives = context.generate_alternative_actions(ctx.event, record["category"]) if wanted else []
    return record.extend(alternative_actions=alternatives)


def measure_resources(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        resource_impact=scoring.calculate_resource_impact(
            record["complexity"], len(record["source_provenance"]), ctx.rng
        )
    )


def check_compliance(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        compliance_scoring=scoring.score_compliance(
            record["category"],
            len(record["constraint_violations"]),
            record["outcome"],
            record["prerequisites"].all_met,
            ctx.rng,
        )
    )


def assess_stakeholders(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    category, impact = record["category"], record["impact"]
    return record.extend(
        user_impact=context.estimate_user_impact(category, impact),
        rollback_capability=context.assess_rollback_capability(category, impact, record["age_sec"]),
        velocity_metrics=relational.calculate_velocity_metrics(ctx.event, ctx.batch),
        cross_domain_impact=context.analyze_cross_domain_impact(category, impact),
        predictive_indicators=context.generate_predictive_indicators(
            category, record["complexity"], record["agent_workload"], ctx.rng
        ),
    )


def visualize(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        visualization_data=relational.prepare_visualization_data(
            ctx.event, ctx.batch, record["temporal_pattern"].clustering_score
        )
    )


def notify_and_audit(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    category = record["category"]
    return record.extend(
        notification_triggers=context.generate_notification_triggers(
            category, record["impact"], record["urgency"], len(record["constraint_violations"])
        ),
        audit_trail=context.build_audit_trail(ctx.event, category, record["compliance_scoring"].compliance_score),
        tags=context.generate_decision_tags(
            category,
            record["urgency"],
            record["complexity"],
            record["learning_indicators"].decision_novelty,
            record["conflict_detection"].has_conflicts,
        ),
    )


def finish(record: PartialRecord, ctx: EnrichmentContext) -> PartialRecord:
    return record.extend(
        comparison_data=relational.generate_comparison_data(ctx.event, ctx.batch),
        health_degradation=trust.calculate_health_degradation(record["age_sec"], record["trust_decay_percent"]),
        replay_capability=context.build_replay_capability() if ctx.options.include_replay else None,
    )


STAGES: List[Stage] = [
    classify,
    attach_sources,
    assess_operations,
    apply_trust,
    link_chain,
    score_quality,
    relate,
    observe_outcome,
    snapshot_agent_state,
    detect_conflicts,
    analyze_temporal,
    assess_risk,
    learn,
    review_history,
    explain,
    check_prerequisites,
    consider_alternatives,
    measure_resources,
    check_compliance,
    assess_stakeholders,
    visualize,
    notify_and_audit,
    finish,
]


def enrich_decision(ctx: EnrichmentContext, stages: Sequence[Stage] = STAGES) -> EnrichedDecision:
    """Run every stage over the decision at ``ctx.index``."""
    record = reduce(lambda acc, stage: stage(acc, ctx), stages, PartialRecord.from_event(ctx.event))
    return EnrichedDecision(**record.fields)


def enrich_batch(
    batch: Sequence[DecisionEvent],
    rng: SeededRandom,
    now: datetime,
    trust_config: TrustConfig = DEFAULT_TRUST_CONFIG,
    scorer: Optional[RiskScorer] = None,
    options: EnrichmentOptions = EnrichmentOptions(),
) -> List[EnrichedDecision]:
    """Enrich every event against the whole batch, strictly in batch order.

    Args:
        batch: Base events (newest first, as generated)
        rng: Shared random stream, consumed in batch then stage order
        now: Reference time for ages and decay
        trust_config: Trust thresholds and decay rate
        scorer: Risk scorer (default weights if None)
        options: Optional enrichment switches

    Returns:
        Enriched decisions in the same order as ``batch``
    """
    scorer = scorer or create_default_scorer()
    enriched = [
        enrich_decision(
            EnrichmentContext(
                batch=batch,
                index=index,
                rng=rng,
                now=now,
                trust_config=trust_config,
                scorer=scorer,
                options=options,
            )
        )
        for index in range(len(batch))
    ]
    logger.debug("Enriched %d decisions", len(enriched))
    return enriched
