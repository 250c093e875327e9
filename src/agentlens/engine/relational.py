"""Relational and conflict analysis over a generated batch.

Each function reads the whole batch to annotate one decision and never
writes to any other decision. Cost is O(batch) per decision, O(n^2) per
batch, which is fine for the bounded batch sizes the query engine uses.

Windows:
- Conflicts, consensus, visualization edges: +/-30 minutes
- Temporal clustering, alternatives: +/-5 minutes
- Agent state: the hour (and ten minutes) leading up to the decision
"""

import math
from datetime import datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from agentlens.engine.classification import has_keyword, tokenize
from agentlens.engine.random_source import SeededRandom
from agentlens.models import (
    AgentPersona,
    AgentStateContext,
    CognitiveLoad,
    ComparisonData,
    ConflictDetection,
    ConflictSeverity,
    ConsensusTracking,
    DecisionCategory,
    DecisionEvent,
    DecisionNovelty,
    FieldDifference,
    GraphEdge,
    LearningIndicators,
    RelatedDecision,
    RelationshipKind,
    TemporalPattern,
    TimelinePosition,
    VelocityMetrics,
    VelocityTrend,
    VisualizationData,
)

CONFLICT_WINDOW = timedelta(minutes=30)
CLUSTER_WINDOW = timedelta(minutes=5)
ACTIVE_WINDOW = timedelta(minutes=10)
HOUR = timedelta(hours=1)

PARENT_PROBABILITY = 0.3
CHILD_PROBABILITY = 0.2
ALTERNATIVE_PROBABILITY = 0.3

# Opposite action stems; checked in both directions
OPPOSING_ACTIONS: List[Tuple[str, str]] = [
    ("charg", "discharg"),
    ("buy", "sell"),
    ("buy", "sale"),
    ("increas", "decreas"),
    ("increas", "reduc"),
    ("activat", "deactivat"),
]

NEGATION_MARKERS = frozenset({"not", "avoid", "blocked", "rejected", "denied"})

EXPECTED_PER_CLUSTER_WINDOW = 1
BURST_MULTIPLE = 3
AVERAGE_DECISIONS_PER_HOUR = 5


def _within(a: DecisionEvent, b: DecisionEvent, window: timedelta) -> bool:
    return abs(a.timestamp - b.timestamp) < window


def _hour_start(timestamp: datetime) -> datetime:
    return timestamp.replace(minute=0, second=0, microsecond=0)


def _epoch_ms(timestamp: datetime) -> int:
    return int(timestamp.timestamp() * 1000)


def _keywords(summary: str) -> List[str]:
    """Distinct tokens longer than four characters, in order of appearance."""
    seen: List[str] = []
    for token in tokenize(summary):
        if len(token) > 4 and token not in seen:
            seen.append(token)
    return seen


def _count_in_hour(agent: AgentPersona, batch: Sequence[DecisionEvent], start: datetime) -> int:
    end = start + HOUR
    return sum(1 for other in batch if other.agent == agent and start <= other.timestamp < end)


def generate_decision_chain(
    batch: Sequence[DecisionEvent], index: int, rng: SeededRandom
) -> Tuple[Optional[str], List[str]]:
    """Link a decision to its batch neighbours.

    Returns:
        (parent id or None, child ids)
    """
    parent_id = None
    if index > 0 and rng.boolean(PARENT_PROBABILITY):
        parent_id = batch[index - 1].id

    child_ids: List[str] = []
    if index < len(batch) - 1 and rng.boolean(CHILD_PROBABILITY):
        child_ids.append(batch[index + 1].id)

    return parent_id, child_ids


def generate_related_decisions(
    event: DecisionEvent,
    batch: Sequence[DecisionEvent],
    parent_id: Optional[str],
    child_ids: Sequence[str],
    rng: SeededRandom,
) -> List[RelatedDecision]:
    """Parent, children, and possibly one same-persona alternative."""
    related: List[RelatedDecision] = []
    if parent_id:
        related.append(RelatedDecision(id=parent_id, relationship=RelationshipKind.PARENT))
    for child_id in child_ids:
        related.append(RelatedDecision(id=child_id, relationship=RelationshipKind.CHILD))

    similar = [
        other
        for other in batch
        if other.id != event.id and other.agent == event.agent and _within(other, event, CLUSTER_WINDOW)
    ]
    if similar and rng.boolean(ALTERNATIVE_PROBABILITY):
        related.append(RelatedDecision(id=similar[0].id, relationship=RelationshipKind.ALTERNATIVE))

    return related


def _opposes(tokens: Sequence[str], other_tokens: Sequence[str]) -> bool:
    for first, second in OPPOSING_ACTIONS:
        if has_keyword(tokens, [first]) and has_keyword(other_tokens, [second]):
            return True
        if has_keyword(tokens, [second]) and has_keyword(other_tokens, [first]):
            return True
    return False


def detect_conflicts(
    event: DecisionEvent, batch: Sequence[DecisionEvent], violation_count: int
) -> ConflictDetection:
    """Find decisions within 30 minutes that pull in the opposite direction.

    Severity counts conflicting decisions only: 0 none, 1 minor,
    2 moderate, 3+ severe. A constraint violation adds a reason and marks
    the decision as conflicted without changing the severity tier.
    """
    tokens = tokenize(event.summary)
    conflicting: List[str] = []
    reasons: List[str] = []

    for other in batch:
        if other.id == event.id or not _within(other, event, CONFLICT_WINDOW):
            continue
        if _opposes(tokens, tokenize(other.summary)):
            conflicting.append(other.id)
            reasons.append(f"Conflicts with {other.agent.value} decision: {other.summary[:40]}")

    if violation_count > 0:
        reasons.append("Violates operational constraints")

    if len(conflicting) > 2:
        severity = ConflictSeverity.SEVERE
    elif len(conflicting) > 1:
        severity = ConflictSeverity.MODERATE
    elif conflicting:
        severity = ConflictSeverity.MINOR
    else:
        severity = ConflictSeverity.NONE

    return ConflictDetection(
        has_conflicts=bool(conflicting) or violation_count > 0,
        conflict_severity=severity,
        conflicting_decisions=conflicting,
        conflict_reasons=reasons,
    )


def track_consensus(
    event: DecisionEvent, batch: Sequence[DecisionEvent], category: DecisionCategory
) -> ConsensusTracking:
    """Measure agreement from other personas within 30 minutes.

    Another persona agrees when its summary shares more than half of this
    decision's keywords, and disagrees when it carries a negation marker.
    Strength blends the agreeing ratio (three peers = 100) with this
    decision's confidence and is clamped to [0, 100].
    """
    keywords = _keywords(event.summary)
    agreeing: List[AgentPersona] = []
    disagreeing: List[AgentPersona] = []

    for other in batch:
        if other.id == event.id or other.agent == event.agent:
            continue
        if not _within(other, event, CONFLICT_WINDOW):
            continue
        other_tokens = set(tokenize(other.summary))
        overlap = sum(1 for keyword in keywords if keyword in other_tokens)
        if keywords and overlap > len(keywords) * 0.5:
            if other.agent not in agreeing:
                agreeing.append(other.agent)
        elif other_tokens & NEGATION_MARKERS:
            if other.agent not in disagreeing:
                disagreeing.append(other.agent)

    disagreeing = [agent for agent in disagreeing if agent not in agreeing]
    strength = len(agreeing) / 3 * 100 + (event.confidence - 50)
    strength = max(0.0, min(100.0, strength))

    if agreeing:
        rationale = f"{len(agreeing) + 1} agents agree on {category.value} strategy"
    else:
        rationale = "No multi-agent consensus detected"

    return ConsensusTracking(
        has_consensus=bool(agreeing),
        consensus_strength=int(strength),
        agreeing_agents=agreeing,
        disagreeing_agents=disagreeing,
        consensus_rationale=rationale,
    )


def analyze_temporal_pattern(
    event: DecisionEvent, batch: Sequence[DecisionEvent], rng: SeededRandom
) -> TemporalPattern:
    """Hourly frequency and short-window clustering for the decision's persona."""
    decisions_this_hour = _count_in_hour(event.agent, batch, _hour_start(event.timestamp))

    expected_per_hour = max(1.0, 3 + rng.next_float() * 5)
    deviation = (decisions_this_hour - expected_per_hour) / expected_per_hour * 100

    window_count = sum(
        1 for other in batch if other.agent == event.agent and _within(other, event, CLUSTER_WINDOW)
    )
    clustering = min(100.0, window_count / 5 * 100)

    return TemporalPattern(
        decision_frequency=decisions_this_hour,
        clustering_score=int(clustering),
        is_burst=window_count > EXPECTED_PER_CLUSTER_WINDOW * BURST_MULTIPLE,
        hour_of_day=event.timestamp.hour,
        pattern_deviation=math.floor(deviation),
    )


def generate_agent_state_context(
    event: DecisionEvent, batch: Sequence[DecisionEvent], rng: SeededRandom
) -> AgentStateContext:
    """Snapshot of what the persona was juggling when it decided."""
    recent = [
        other
        for other in batch
        if other.agent == event.agent and timedelta(0) <= event.timestamp - other.timestamp < HOUR
    ]
    active_count = sum(1 for other in recent if event.timestamp - other.timestamp < ACTIVE_WINDOW)

    if active_count > 10:
        load = CognitiveLoad.CRITICAL
    elif active_count > 5:
        load = CognitiveLoad.HEAVY
    elif active_count > 2:
        load = CognitiveLoad.MODERATE
    else:
        load = CognitiveLoad.LIGHT

    utilization = min(100.0, active_count / 15 * 100 + rng.next_float() * 20)

    return AgentStateContext(
        active_decisions_count=active_count,
        recent_action_history=[other.summary[:50] for other in recent[:5]],
        cognitive_load=load,
        resource_utilization=int(utilization),
        decision_burst=active_count > 5,
    )


def calculate_velocity_metrics(event: DecisionEvent, batch: Sequence[DecisionEvent]) -> VelocityMetrics:
    """Compare this hour's decision rate with the previous hour and the average."""
    hour_start = _hour_start(event.timestamp)
    this_hour = _count_in_hour(event.agent, batch, hour_start)
    previous_hour = _count_in_hour(event.agent, batch, hour_start - HOUR)

    if this_hour > previous_hour * 1.2:
        trend = VelocityTrend.ACCELERATING
    elif this_hour < previous_hour * 0.8:
        trend = VelocityTrend.DECELERATING
    else:
        trend = VelocityTrend.STABLE

    compared = (this_hour - AVERAGE_DECISIONS_PER_HOUR) / AVERAGE_DECISIONS_PER_HOUR * 100

    return VelocityMetrics(
        decisions_per_hour=this_hour,
        velocity_trend=trend,
        compared_to_average=math.floor(compared),
        burst_detected=this_hour > AVERAGE_DECISIONS_PER_HOUR * 1.5,
    )


def generate_learning_indicators(event: DecisionEvent, batch: Sequence[DecisionEvent]) -> LearningIndicators:
    """How far a decision strays from its persona's usual behaviour."""
    persona_decisions = [other for other in batch if other.agent == event.agent]
    peers = [other for other in persona_decisions if other.id != event.id]
    keywords = set(_keywords(event.summary))

    if peers:
        similar = sum(1 for other in peers if keywords & set(_keywords(other.summary)))
        novelty = 100 - similar / len(peers) * 100
    else:
        novelty = 100.0
    novelty = max(0.0, min(100.0, novelty))

    average_confidence = sum(other.confidence for other in persona_decisions) / max(1, len(persona_decisions))
    deviation = abs(event.confidence - average_confidence)

    if novelty > 80:
        tier = DecisionNovelty.EXPERIMENTAL
    elif novelty > 60:
        tier = DecisionNovelty.NOVEL
    elif novelty > 30:
        tier = DecisionNovelty.ADAPTIVE
    else:
        tier = DecisionNovelty.ROUTINE

    context = None
    if tier != DecisionNovelty.ROUTINE:
        context = f"Agent exploring {tier.value} approach to decision-making"

    return LearningIndicators(
        novelty_score=int(novelty),
        pattern_deviation=math.floor(deviation),
        is_adaptive=novelty > 50 or deviation > 20,
        decision_novelty=tier,
        learning_context=context,
    )


def generate_comparison_data(event: DecisionEvent, batch: Sequence[DecisionEvent]) -> Optional[ComparisonData]:
    """Compare against the first same-persona decision with similar confidence."""
    baseline = next(
        (
            other
            for other in batch
            if other.id != event.id
            and other.agent == event.agent
            and abs(other.confidence - event.confidence) < 10
        ),
        None,
    )
    if baseline is None:
        return None

    return ComparisonData(
        baseline_decision_id=baseline.id,
        differences=[
            FieldDifference(
                field="timestamp",
                old_value=baseline.timestamp.isoformat(),
                new_value=event.timestamp.isoformat(),
            ),
            FieldDifference(
                field="confidence",
                old_value=str(baseline.confidence),
                new_value=str(event.confidence),
            ),
        ],
        similarity=100 - abs(event.confidence - baseline.confidence) * 2,
    )


def prepare_visualization_data(
    event: DecisionEvent, batch: Sequence[DecisionEvent], clustering_score: int
) -> VisualizationData:
    """Coordinates and edges for timeline and graph views."""
    epoch_ms = _epoch_ms(event.timestamp)
    neighbours = [
        other for other in batch if other.id != event.id and _within(other, event, CONFLICT_WINDOW)
    ]
    edges = [
        GraphEdge(
            source=event.id,
            target=other.id,
            type="same-agent" if other.agent == event.agent else "cross-agent",
        )
        for other in neighbours[:3]
    ]

    cluster_group = None
    if clustering_score > 60:
        cluster_group = f"cluster-{epoch_ms // 3_600_000}"

    return VisualizationData(
        timeline_position=TimelinePosition(x=epoch_ms % 86_400_000, y=event.confidence),
        relationship_graph=edges,
        heatmap_value=event.confidence,
        cluster_group=cluster_group,
    )
