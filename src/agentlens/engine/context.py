"""Operational context groups for enriched decisions.

Covers provenance, workload and status, constraint violations, outcomes,
stakeholder impact, rollback, notifications and the audit trail.

Design Philosophy:
- One small function per attribute group
- Lookup tables over branching where the mapping is fixed
- Random draws only from the injected SeededRandom, in a fixed order
"""

import hashlib
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from agentlens.engine.classification import has_keyword, tokenize
from agentlens.engine.random_source import SeededRandom
from agentlens.models import (
    AgentPersona,
    AlternativeAction,
    ApprovalEntry,
    AuditableEvent,
    AuditTrail,
    CapacityChange,
    ConstraintSeverity,
    ConstraintType,
    ConstraintViolation,
    CrossDomainImpact,
    DecisionCategory,
    DecisionComplexity,
    DecisionEvent,
    DecisionImpact,
    DecisionNovelty,
    DecisionOutcome,
    DecisionUrgency,
    DomainImpact,
    FreshnessRequirement,
    MaintenancePrediction,
    NotificationChannel,
    NotificationTrigger,
    NotificationUrgency,
    OperationalStatus,
    PeerComparison,
    PerformanceBenchmark,
    PredictiveIndicators,
    Prerequisites,
    ProvenanceStage,
    ProvenanceStep,
    ReplayCapability,
    ReplayInput,
    RequiredCondition,
    ReversalHistory,
    ReversalReason,
    RollbackCapability,
    RollbackComplexity,
    SourceHealth,
    TradingOpportunity,
    UserImpact,
    UserImpactLevel,
    WorkloadLevel,
)

# ---------------------------------------------------------------------------
# Sources & provenance
# ---------------------------------------------------------------------------

BASE_SOURCES: Dict[AgentPersona, Tuple[str, ...]] = {
    AgentPersona.OPERATIONS: ("oracle:pyth", "sensor:battery-soc", "sensor:inverter-1", "sensor:grid-meter"),
    AgentPersona.MARKETS: ("market:jupiter", "oracle:pyth", "oracle:switchboard", "blockchain:solana-rpc"),
    AgentPersona.SENTINEL: (
        "sensor:panel-array-a",
        "sensor:inverter-1",
        "sensor:tracker-motor-3",
        "sensor:battery-temp",
    ),
    AgentPersona.GOVERNOR: (
        "blockchain:solana-rpc",
        "audit:compliance-log",
        "constraint:soc-minimum",
        "governance:multisig",
    ),
}

CATEGORY_SOURCES: Dict[DecisionCategory, str] = {
    DecisionCategory.OVERRIDE: "governance:emergency-override",
    DecisionCategory.TRADING: "market:liquidity-pool",
}

# Upper bound on simulated freshness, by source prefix
FRESHNESS_BOUNDS: Dict[str, int] = {"oracle": 10, "sensor": 60, "market": 30}
DEFAULT_FRESHNESS_BOUND = 300

# Maximum acceptable freshness per source prefix
FRESHNESS_REQUIREMENTS: Dict[str, int] = {"oracle": 10}
DEFAULT_FRESHNESS_REQUIREMENT = 60

PROOF_PREFIXES: Dict[AgentPersona, str] = {
    AgentPersona.OPERATIONS: "sig",
    AgentPersona.MARKETS: "zk",
    AgentPersona.SENTINEL: "merkle",
    AgentPersona.GOVERNOR: "consensus",
}


def _prefix(source: str) -> str:
    return source.split(":", 1)[0]


def get_data_sources(agent: AgentPersona, category: DecisionCategory) -> List[str]:
    """Named witnesses backing a decision (a fresh list every call)."""
    sources = list(BASE_SOURCES[agent])
    extra = CATEGORY_SOURCES.get(category)
    if extra:
        sources.append(extra)
    return sources


def generate_source_health(sources: Sequence[str], rng: SeededRandom) -> List[SourceHealth]:
    """Simulated freshness and reliability per source."""
    health = []
    for source in sources:
        bound = FRESHNESS_BOUNDS.get(_prefix(source), DEFAULT_FRESHNESS_BOUND)
        freshness = rng.next_float() * bound
        reliability = 85 + rng.next_float() * 15
        health.append(SourceHealth(source=source, freshness_sec=int(freshness), reliability=int(reliability)))
    return health


def generate_proof_hash(agent: AgentPersona, decision_id: str) -> str:
    """Persona-prefixed proof digest, stable for a given decision id."""
    digest = hashlib.sha256(decision_id.encode("utf-8")).hexdigest()[:60]
    return f"0x{PROOF_PREFIXES[agent]}{digest}"


def build_provenance_chain(event: DecisionEvent, sources: Sequence[str]) -> List[ProvenanceStep]:
    """Ingestion -> processing -> analysis -> decision, ending at the decision time."""
    at = event.timestamp
    return [
        ProvenanceStep(
            step=1,
            stage=ProvenanceStage.INGESTION,
            description=f"Received data from {len(sources)} sources",
            timestamp=at - timedelta(seconds=5),
        ),
        ProvenanceStep(
            step=2,
            stage=ProvenanceStage.PROCESSING,
            description="Validated data integrity and freshness",
            timestamp=at - timedelta(seconds=4),
            data_transformation="Normalized timestamps, validated schemas",
        ),
        ProvenanceStep(
            step=3,
            stage=ProvenanceStage.ANALYSIS,
            description="Applied trust mathematics and confidence scoring",
            timestamp=at - timedelta(seconds=2),
            data_transformation="Computed trust grades, cross-validated sources",
        ),
        ProvenanceStep(
            step=4,
            stage=ProvenanceStage.DECISION,
            description=f"{event.agent.value} agent made final decision",
            timestamp=at,
        ),
    ]


# ---------------------------------------------------------------------------
# Workload, status & violations
# ---------------------------------------------------------------------------

PEAK_HOURS = range(16, 21)


def simulate_workload(timestamp: datetime, rng: SeededRandom) -> WorkloadLevel:
    """Agent workload at decision time; heavier during the evening peak (UTC)."""
    draw = rng.next_float() * 100
    high_cutoff, medium_cutoff = (30, 70) if timestamp.hour in PEAK_HOURS else (10, 40)
    if draw < high_cutoff:
        return WorkloadLevel.HIGH
    if draw < medium_cutoff:
        return WorkloadLevel.MEDIUM
    return WorkloadLevel.LOW


def determine_operational_status(
    event: DecisionEvent, workload: WorkloadLevel, violation_count: int
) -> OperationalStatus:
    if violation_count > 0:
        return OperationalStatus.DEGRADED
    if event.is_in_maintenance:
        return OperationalStatus.MAINTENANCE
    if workload == WorkloadLevel.HIGH:
        return OperationalStatus.DEGRADED
    if workload == WorkloadLevel.MEDIUM:
        return OperationalStatus.NOMINAL
    return OperationalStatus.OPTIMAL


SAMPLED_VIOLATION_PROBABILITY = 0.1


def _keyword_violation(tokens: Sequence[str], impact: DecisionImpact) -> Optional[ConstraintViolation]:
    if has_keyword(tokens, ["battery", "soc"]):
        return ConstraintViolation(
            constraint="battery_soc_minimum",
            severity=ConstraintSeverity.HIGH if impact == DecisionImpact.CRITICAL else ConstraintSeverity.MEDIUM,
            type=ConstraintType.SAFETY,
        )
    if has_keyword(tokens, ["grid", "export"]):
        return ConstraintViolation(
            constraint="grid_export_limit",
            severity=ConstraintSeverity.MEDIUM,
            type=ConstraintType.OPERATIONAL,
        )
    return None


def generate_constraint_violations(
    event: DecisionEvent, impact: DecisionImpact, rng: SeededRandom
) -> List[ConstraintViolation]:
    """Constraint violations attached to a decision.

    An event generated as a violation always yields one record. High and
    critical impact decisions additionally have a small chance of a
    keyword-specific violation.
    """
    tokens = tokenize(event.summary)
    violations: List[ConstraintViolation] = []

    if event.has_constraint_violations:
        violations.append(
            _keyword_violation(tokens, impact)
            or ConstraintViolation(
                constraint="safety_operating_envelope",
                severity=ConstraintSeverity.HIGH,
                type=ConstraintType.SAFETY,
            )
        )

    if impact in (DecisionImpact.HIGH, DecisionImpact.CRITICAL) and rng.boolean(SAMPLED_VIOLATION_PROBABILITY):
        sampled = _keyword_violation(tokens, impact)
        if sampled and all(v.constraint != sampled.constraint for v in violations):
            violations.append(sampled)

    return violations


def generate_confidence_explanation(
    confidence: int,
    source_count: int,
    complexity: DecisionComplexity,
    status: OperationalStatus,
) -> str:
    if confidence >= 85:
        level = "High"
    elif confidence >= 70:
        level = "Medium"
    else:
        level = "Low"

    reasons = [f"{source_count} data sources"]
    if status == OperationalStatus.OPTIMAL:
        reasons.append("optimal conditions")
    elif status == OperationalStatus.DEGRADED:
        reasons.append("degraded conditions")

    if complexity == DecisionComplexity.SIMPLE:
        reasons.append("straightforward decision")
    elif complexity == DecisionComplexity.COMPLEX:
        reasons.append("complex multi-parameter analysis")

    return f"{level} confidence ({', '.join(reasons)})"


COORDINATION_KEYWORDS: Dict[AgentPersona, Tuple[str, ...]] = {
    AgentPersona.OPERATIONS: ("operations", "dispatch", "battery", "energy"),
    AgentPersona.MARKETS: ("markets", "trade", "price", "pricing", "token"),
    AgentPersona.SENTINEL: ("sentinel", "sensor", "health", "diagnostic"),
    AgentPersona.GOVERNOR: ("governor", "constraint", "governance", "compliance"),
}


def detect_coordinated_agents(event: DecisionEvent) -> List[AgentPersona]:
    """The deciding persona plus any persona whose domain the summary touches."""
    tokens = tokenize(event.summary)
    coordinated = [event.agent]
    for agent, keywords in COORDINATION_KEYWORDS.items():
        if agent != event.agent and has_keyword(tokens, keywords):
            coordinated.append(agent)
    return coordinated


# ---------------------------------------------------------------------------
# Outcome, reversal & benchmark
# ---------------------------------------------------------------------------

PENDING_AGE_SEC = 120

# (min confidence, [(cumulative percent, outcome, base confidence, spread)])
OUTCOME_TIERS: List[Tuple[int, List[Tuple[int, DecisionOutcome, int, int]]]] = [
    (
        85,
        [
            (90, DecisionOutcome.SUCCESS, 95, 5),
            (98, DecisionOutcome.PARTIAL, 70, 20),
            (100, DecisionOutcome.FAILURE, 80, 15),
        ],
    ),
    (
        70,
        [
            (75, DecisionOutcome.SUCCESS, 85, 10),
            (95, DecisionOutcome.PARTIAL, 65, 20),
            (100, DecisionOutcome.FAILURE, 70, 20),
        ],
    ),
    (
        0,
        [
            (60, DecisionOutcome.SUCCESS, 75, 15),
            (85, DecisionOutcome.PARTIAL, 60, 20),
            (100, DecisionOutcome.FAILURE, 65, 20),
        ],
    ),
]


def generate_outcome(event: DecisionEvent, age_sec: int, rng: SeededRandom) -> Tuple[DecisionOutcome, int]:
    """Observed outcome and how sure we are of it.

    Decisions younger than two minutes are still pending.
    """
    if age_sec < PENDING_AGE_SEC:
        return DecisionOutcome.PENDING, 0

    draw = rng.next_float() * 100
    for min_confidence, bands in OUTCOME_TIERS:
        if event.confidence < min_confidence:
            continue
        for cutoff, outcome, base, spread in bands:
            if draw < cutoff:
                return outcome, min(100, int(base + rng.next_float() * spread))
    return DecisionOutcome.FAILURE, 0


REVERSAL_MIN_AGE_SEC = 600
REVERSAL_PROBABILITY = 0.05


def generate_reversal_history(event: DecisionEvent, age_sec: int, rng: SeededRandom) -> ReversalHistory:
    if age_sec <= REVERSAL_MIN_AGE_SEC or not rng.boolean(REVERSAL_PROBABILITY):
        return ReversalHistory(was_reversed=False)

    reversed_at = event.timestamp + timedelta(seconds=rng.next_float() * age_sec)
    return ReversalHistory(
        was_reversed=True,
        reversal_timestamp=reversed_at,
        reversal_reason=rng.choice(list(ReversalReason)),
        reversal_authority="human:operator" if rng.boolean(0.7) else "agent:governor",
        reversal_impact="Decision was safely reversed with no lasting effects",
    )


TOTAL_PEERS = 4


def generate_performance_benchmark(
    quality_score: int, outcome: DecisionOutcome, rng: SeededRandom
) -> PerformanceBenchmark:
    """Compare quality against a simulated baseline and the other personas."""
    baseline = 70 + rng.next_float() * 15

    if quality_score > 85:
        rank = 1
    elif quality_score > 70:
        rank = 2
    elif quality_score > 55:
        rank = 3
    else:
        rank = 4

    if outcome == DecisionOutcome.SUCCESS:
        success_rate = 85 + rng.next_float() * 10
    elif outcome == DecisionOutcome.PARTIAL:
        success_rate = 70 + rng.next_float() * 15
    else:
        success_rate = 50 + rng.next_float() * 20

    return PerformanceBenchmark(
        baseline_quality=int(baseline),
        quality_delta=int(quality_score - baseline),
        peer_comparison=PeerComparison(
            better_than_peers=int((TOTAL_PEERS - rank) / TOTAL_PEERS * 100),
            rank=rank,
            total_peers=TOTAL_PEERS,
        ),
        historical_success_rate=int(success_rate),
    )


# ---------------------------------------------------------------------------
# Prerequisites & alternatives
# ---------------------------------------------------------------------------

MIN_SOURCES = 3


def validate_prerequisites(
    category: DecisionCategory,
    status: OperationalStatus,
    source_health: Sequence[SourceHealth],
    rng: SeededRandom,
) -> Prerequisites:
    """Check the conditions a decision should have satisfied before acting."""
    alerts_clear = rng.boolean(0.95)
    conditions = [
        RequiredCondition(
            condition="Minimum data sources available",
            met=len(source_health) >= MIN_SOURCES,
            value=f"{len(source_health)} sources",
        ),
        RequiredCondition(
            condition="Agent operational status nominal",
            met=status in (OperationalStatus.OPTIMAL, OperationalStatus.NOMINAL),
            value=status.value,
        ),
        RequiredCondition(
            condition="No critical system alerts",
            met=alerts_clear,
            value="Clear" if alerts_clear else "Alert active",
        ),
    ]

    if category == DecisionCategory.TRADING:
        liquid = rng.boolean(0.9)
        conditions.append(
            RequiredCondition(
                condition="Market liquidity sufficient",
                met=liquid,
                value="Sufficient" if liquid else "Low",
            )
        )

    freshness = []
    for health in source_health:
        max_age = FRESHNESS_REQUIREMENTS.get(_prefix(health.source), DEFAULT_FRESHNESS_REQUIREMENT)
        freshness.append(
            FreshnessRequirement(
                source=health.source,
                max_age_sec=max_age,
                actual_age_sec=health.freshness_sec,
                met=health.freshness_sec < max_age,
            )
        )

    return Prerequisites(
        all_met=all(c.met for c in conditions) and all(r.met for r in freshness),
        required_conditions=conditions,
        data_freshness_requirements=freshness,
    )


# (action, confidence penalty, rejection reason, potential outcome)
ALTERNATIVES: Dict[DecisionCategory, List[Tuple[str, int, str, str]]] = {
    DecisionCategory.DISPATCH: [
        (
            "Maintain current power output",
            15,
            "Would not optimize for current grid pricing",
            "Suboptimal revenue generation",
        ),
        (
            "Increase battery discharge rate",
            25,
            "Would violate battery longevity constraints",
            "Accelerated battery degradation",
        ),
    ],
    DecisionCategory.TRADING: [
        ("Hold current position", 20, "Market conditions favor active trading", "Missed trading opportunity"),
        (
            "Execute larger trade volume",
            30,
            "Insufficient liquidity for larger volume",
            "Excessive slippage",
        ),
    ],
}


def generate_alternative_actions(event: DecisionEvent, category: DecisionCategory) -> List[AlternativeAction]:
    """Options the agent considered and rejected (dispatch and trading only)."""
    return [
        AlternativeAction(
            action=action,
            confidence_score=max(0, event.confidence - penalty),
            rejection_reason=reason,
            potential_outcome=outcome,
        )
        for action, penalty, reason, outcome in ALTERNATIVES.get(category, [])
    ]


# ---------------------------------------------------------------------------
# Stakeholders, rollback & cross-domain impact
# ---------------------------------------------------------------------------

USER_IMPACT_LEVELS: Dict[DecisionImpact, UserImpactLevel] = {
    DecisionImpact.LOW: UserImpactLevel.MINIMAL,
    DecisionImpact.MEDIUM: UserImpactLevel.MODERATE,
    DecisionImpact.HIGH: UserImpactLevel.SIGNIFICANT,
    DecisionImpact.CRITICAL: UserImpactLevel.SIGNIFICANT,
}

STAKEHOLDERS: Dict[DecisionCategory, List[str]] = {
    DecisionCategory.DISPATCH: ["energy consumers", "grid operators", "token holders"],
    DecisionCategory.TRADING: ["token holders", "liquidity providers"],
    DecisionCategory.MAINTENANCE: ["system operators", "token holders"],
    DecisionCategory.GOVERNANCE: ["all stakeholders", "token holders", "validators"],
    DecisionCategory.OVERRIDE: ["all stakeholders", "system operators"],
}

AFFECTED_USERS: Dict[DecisionImpact, int] = {
    DecisionImpact.LOW: 10,
    DecisionImpact.MEDIUM: 100,
    DecisionImpact.HIGH: 500,
    DecisionImpact.CRITICAL: 1000,
}

IMPACT_DESCRIPTIONS: Dict[DecisionCategory, str] = {
    DecisionCategory.DISPATCH: "Affects energy availability and pricing for consumers",
    DecisionCategory.TRADING: "Impacts token value and portfolio returns",
    DecisionCategory.MAINTENANCE: "May temporarily reduce system capacity",
    DecisionCategory.GOVERNANCE: "Changes operational policies and constraints",
    DecisionCategory.OVERRIDE: "Direct intervention in autonomous operations",
}


def estimate_user_impact(category: DecisionCategory, impact: DecisionImpact) -> UserImpact:
    return UserImpact(
        impact_level=USER_IMPACT_LEVELS[impact],
        affected_stakeholders=list(STAKEHOLDERS[category]),
        estimated_user_count=AFFECTED_USERS[impact],
        impact_description=IMPACT_DESCRIPTIONS[category],
        benefit_analysis=None if impact == DecisionImpact.CRITICAL else "Expected to optimize system performance",
    )


ROLLBACK_COMPLEXITY: Dict[DecisionCategory, RollbackComplexity] = {
    DecisionCategory.DISPATCH: RollbackComplexity.SIMPLE,
    DecisionCategory.TRADING: RollbackComplexity.MODERATE,
    DecisionCategory.MAINTENANCE: RollbackComplexity.COMPLEX,
    DecisionCategory.GOVERNANCE: RollbackComplexity.MODERATE,
    DecisionCategory.OVERRIDE: RollbackComplexity.TRIVIAL,
}

ROLLBACK_PROCEDURES: Dict[RollbackComplexity, Tuple[str, int]] = {
    RollbackComplexity.TRIVIAL: ("Single-click reversal through dashboard", 1),
    RollbackComplexity.SIMPLE: ("Reverse command through agent interface", 5),
    RollbackComplexity.MODERATE: ("Multi-step rollback requiring approval", 15),
    RollbackComplexity.COMPLEX: ("Expert intervention with system coordination", 60),
}

ROLLBACK_WINDOW_SEC = 3600


def assess_rollback_capability(
    category: DecisionCategory, impact: DecisionImpact, age_sec: int
) -> RollbackCapability:
    """Whether and how a decision can still be undone."""
    complexity = ROLLBACK_COMPLEXITY[category]
    procedure, minutes = ROLLBACK_PROCEDURES[complexity]

    if impact == DecisionImpact.LOW:
        window = 3600
    elif impact == DecisionImpact.MEDIUM:
        window = 1800
    else:
        window = 600

    return RollbackCapability(
        can_rollback=age_sec < ROLLBACK_WINDOW_SEC and impact != DecisionImpact.CRITICAL,
        rollback_complexity=complexity,
        rollback_time_window_sec=window,
        rollback_procedure=procedure,
        estimated_rollback_time_min=minutes,
    )


IMPACT_MAGNITUDE: Dict[DecisionImpact, int] = {
    DecisionImpact.LOW: 1,
    DecisionImpact.MEDIUM: 2,
    DecisionImpact.HIGH: 3,
    DecisionImpact.CRITICAL: 4,
}


def _domain(affected: bool, description: str, magnitude: int) -> DomainImpact:
    return DomainImpact(affected=affected, description=description, magnitude=magnitude if affected else 0)


def analyze_cross_domain_impact(category: DecisionCategory, impact: DecisionImpact) -> CrossDomainImpact:
    """Which of the energy, financial, operational and governance domains a decision touches."""
    magnitude = IMPACT_MAGNITUDE[impact]

    energy_descriptions = {
        DecisionCategory.DISPATCH: "Directly affects energy generation and storage",
        DecisionCategory.MAINTENANCE: "May temporarily reduce generation capacity",
    }
    financial_descriptions = {
        DecisionCategory.TRADING: "Affects token value and portfolio returns",
        DecisionCategory.DISPATCH: "Impacts energy revenue optimization",
        DecisionCategory.GOVERNANCE: "May affect operational costs",
    }
    governance_descriptions = {
        DecisionCategory.GOVERNANCE: "Changes policy or constraint enforcement",
        DecisionCategory.OVERRIDE: "Human intervention in autonomous operations",
    }

    return CrossDomainImpact(
        energy_impact=_domain(
            category in energy_descriptions,
            energy_descriptions.get(category, "No direct energy impact"),
            magnitude,
        ),
        financial_impact=_domain(
            category in financial_descriptions,
            financial_descriptions.get(category, "No direct financial impact"),
            magnitude,
        ),
        operational_impact=_domain(True, f"{category.value} decision affects system operations", magnitude),
        governance_impact=_domain(
            category in governance_descriptions,
            governance_descriptions.get(category, "No governance impact"),
            magnitude,
        ),
    )


def generate_predictive_indicators(
    category: DecisionCategory,
    complexity: DecisionComplexity,
    workload: WorkloadLevel,
    rng: SeededRandom,
) -> PredictiveIndicators:
    needs: List[str] = []
    if category == DecisionCategory.MAINTENANCE or complexity == DecisionComplexity.COMPLEX:
        needs.append("Additional diagnostic data may be required")
    if workload == WorkloadLevel.HIGH:
        needs.append("Potential capacity expansion needed")

    maintenance = None
    if category == DecisionCategory.DISPATCH and rng.boolean(0.2):
        maintenance = MaintenancePrediction(
            needed=True, timeframe="within 72 hours", component="battery management system"
        )

    trading = None
    if category == DecisionCategory.TRADING or (category == DecisionCategory.DISPATCH and rng.boolean(0.3)):
        trading = TradingOpportunity(detected=True, timeframe="next 4 hours", confidence=int(70 + rng.next_float() * 20))

    capacity = None
    if category == DecisionCategory.MAINTENANCE:
        direction = "increase" if rng.boolean(0.7) else "decrease"
        capacity = CapacityChange(predicted=True, direction=direction, magnitude=round(5 + rng.next_float() * 15, 1))

    return PredictiveIndicators(
        predicted_future_needs=needs,
        maintenance_prediction=maintenance,
        trading_opportunity=trading,
        capacity_change=capacity,
    )


# ---------------------------------------------------------------------------
# Notifications, audit & tags
# ---------------------------------------------------------------------------

NOTIFICATION_URGENCY: Dict[DecisionUrgency, NotificationUrgency] = {
    DecisionUrgency.ROUTINE: NotificationUrgency.INFO,
    DecisionUrgency.ELEVATED: NotificationUrgency.LOW,
    DecisionUrgency.URGENT: NotificationUrgency.HIGH,
    DecisionUrgency.EMERGENCY: NotificationUrgency.CRITICAL,
}


def generate_notification_triggers(
    category: DecisionCategory,
    impact: DecisionImpact,
    urgency: DecisionUrgency,
    violation_count: int,
) -> List[NotificationTrigger]:
    triggers: List[NotificationTrigger] = []

    if impact == DecisionImpact.CRITICAL or urgency == DecisionUrgency.EMERGENCY:
        triggers.append(
            NotificationTrigger(
                stakeholder="system_operators",
                channel=NotificationChannel.SMS,
                urgency=NotificationUrgency.CRITICAL,
                message=f"CRITICAL: {category.value} decision requires immediate attention",
            )
        )

    if category == DecisionCategory.TRADING and impact != DecisionImpact.LOW:
        triggers.append(
            NotificationTrigger(
                stakeholder="token_holders",
                channel=NotificationChannel.DASHBOARD,
                urgency=NOTIFICATION_URGENCY[urgency],
                message=f"Trading decision executed: {impact.value} impact",
            )
        )

    if violation_count > 0:
        triggers.append(
            NotificationTrigger(
                stakeholder="compliance_team",
                channel=NotificationChannel.SLACK,
                urgency=NotificationUrgency.HIGH,
                message=f"Constraint violation detected in {category.value} decision",
            )
        )

    return triggers


def build_audit_trail(event: DecisionEvent, category: DecisionCategory, compliance_score: int) -> AuditTrail:
    """Regulatory checkpoints, approvals and timestamped events around a decision."""
    at = event.timestamp
    checkpoints = [
        "Energy market compliance verified",
        "Safety constraints validated",
        "Financial limits checked",
    ]
    if category == DecisionCategory.GOVERNANCE:
        checkpoints.append("Governance policy adherence confirmed")

    approvals = [ApprovalEntry(authority=f"agent:{event.agent.value}", timestamp=at - timedelta(seconds=1))]
    if compliance_score < 100 and event.agent != AgentPersona.GOVERNOR:
        approvals.append(ApprovalEntry(authority="agent:governor", timestamp=at))

    flags: List[str] = []
    if compliance_score < 70:
        flags.append("REQUIRES_REVIEW")
    if category == DecisionCategory.OVERRIDE:
        flags.append("HUMAN_INTERVENTION")

    return AuditTrail(
        regulatory_checkpoints=checkpoints,
        approval_chain=approvals,
        compliance_flags=flags,
        auditable_events=[
            AuditableEvent(event="Decision initiated", timestamp=at),
            AuditableEvent(event="Compliance validation", timestamp=at + timedelta(milliseconds=500)),
            AuditableEvent(event="Decision executed", timestamp=at + timedelta(seconds=1)),
        ],
    )


def generate_decision_tags(
    category: DecisionCategory,
    urgency: DecisionUrgency,
    complexity: DecisionComplexity,
    novelty: DecisionNovelty,
    has_conflicts: bool,
) -> List[str]:
    """Free-form tags used by the tag filter; no duplicates, stable order."""
    tags = [category.value, urgency.value, complexity.value]
    if novelty in (DecisionNovelty.EXPERIMENTAL, DecisionNovelty.NOVEL):
        tags.append(novelty.value)
    if complexity == DecisionComplexity.SIMPLE and urgency == DecisionUrgency.ROUTINE:
        tags.append("routine")
    if has_conflicts:
        tags.append("conflict_detected")
    return list(dict.fromkeys(tags))


def build_replay_capability() -> ReplayCapability:
    return ReplayCapability(
        can_replay=True,
        alternative_inputs=[
            ReplayInput(param="confidence_threshold", alternative_value="75"),
            ReplayInput(param="data_freshness_window", alternative_value="30s"),
        ],
        expected_outcome_delta="Confidence may vary by +/-10%, outcome likely similar",
    )
