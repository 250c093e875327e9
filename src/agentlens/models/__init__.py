"""Data models for AgentLens.

Every model serializes to camelCase JSON (``riskAssessment.overallRiskScore``)
while Python code uses snake_case attributes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model emitting camelCase aliases and accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------


class AgentPersona(str, Enum):
    """The four autonomous agent roles."""

    OPERATIONS = "operations"
    MARKETS = "markets"
    SENTINEL = "sentinel"
    GOVERNOR = "governor"


class DecisionComplexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class DecisionCategory(str, Enum):
    DISPATCH = "dispatch"
    TRADING = "trading"
    MAINTENANCE = "maintenance"
    GOVERNANCE = "governance"
    OVERRIDE = "override"


class DecisionImpact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DecisionUrgency(str, Enum):
    ROUTINE = "routine"
    ELEVATED = "elevated"
    URGENT = "urgent"
    EMERGENCY = "emergency"


class DecisionSentiment(str, Enum):
    CALM = "calm"
    STRESSED = "stressed"
    EMERGENCY = "emergency"


class TrustGrade(str, Enum):
    """Five-level trust ladder, best first."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    SUSPECT = "suspect"


class WorkloadLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class OperationalStatus(str, Enum):
    OPTIMAL = "optimal"
    NOMINAL = "nominal"
    DEGRADED = "degraded"
    MAINTENANCE = "maintenance"


class ConstraintSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ConstraintType(str, Enum):
    SAFETY = "safety"
    OPERATIONAL = "operational"
    REGULATORY = "regulatory"


class DecisionOutcome(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILURE = "failure"


class RelationshipKind(str, Enum):
    PARENT = "parent"
    CHILD = "child"
    ALTERNATIVE = "alternative"
    FOLLOWUP = "followup"


class ConflictSeverity(str, Enum):
    NONE = "none"
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"


class CognitiveLoad(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"
    CRITICAL = "critical"


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    EXTREME = "extreme"


class ComplianceStatus(str, Enum):
    FULLY_COMPLIANT = "fully_compliant"
    CONDITIONALLY_COMPLIANT = "conditionally_compliant"
    NON_COMPLIANT = "non_compliant"
    PENDING_REVIEW = "pending_review"


class DecisionNovelty(str, Enum):
    ROUTINE = "routine"
    ADAPTIVE = "adaptive"
    NOVEL = "novel"
    EXPERIMENTAL = "experimental"


class ReversalReason(str, Enum):
    HUMAN_OVERRIDE = "human_override"
    CONSTRAINT_VIOLATION = "constraint_violation"
    IMPROVED_DATA = "improved_data"
    POLICY_CHANGE = "policy_change"
    ERROR_CORRECTION = "error_correction"


class RollbackComplexity(str, Enum):
    TRIVIAL = "trivial"
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class UserImpactLevel(str, Enum):
    NONE = "none"
    MINIMAL = "minimal"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"


class NotificationChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    SLACK = "slack"
    DASHBOARD = "dashboard"


class NotificationUrgency(str, Enum):
    INFO = "info"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class VelocityTrend(str, Enum):
    ACCELERATING = "accelerating"
    DECELERATING = "decelerating"
    STABLE = "stable"


class AgingCurve(str, Enum):
    LINEAR = "linear"
    EXPONENTIAL = "exponential"
    LOGARITHMIC = "logarithmic"


class ProvenanceStage(str, Enum):
    INGESTION = "ingestion"
    PROCESSING = "processing"
    ANALYSIS = "analysis"
    DECISION = "decision"


class SortField(str, Enum):
    TIMESTAMP = "timestamp"
    CONFIDENCE = "confidence"
    IMPACT = "impact"
    URGENCY = "urgency"
    RISK = "risk"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ResponseFormat(str, Enum):
    MINIMAL = "minimal"
    STANDARD = "standard"
    FULL = "full"


class ExplainabilityDepth(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class ExplanationFormat(str, Enum):
    MINIMAL = "minimal"
    STANDARD = "standard"
    FULL = "full"
    TIMELINE = "timeline"


# ---------------------------------------------------------------------------
# Base event
# ---------------------------------------------------------------------------


class DecisionEvent(CamelModel):
    """A single synthetic agent decision, as produced by the generator."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="decision-{agent}-{epoch_ms}-{index}")
    agent: AgentPersona
    summary: str
    confidence: int = Field(..., ge=0, le=100)
    timestamp: datetime
    impact: DecisionImpact
    is_active: bool = False
    constraints_count: int = Field(default=0, ge=0)
    inputs_count: int = Field(default=0, ge=0)
    has_constraint_violations: bool = False
    is_in_maintenance: bool = False
    is_coordinated: bool = False


# ---------------------------------------------------------------------------
# Derived groups
# ---------------------------------------------------------------------------


class TrustMathematics(CamelModel):
    confidence_score: int = Field(..., ge=0, le=100)
    witness_count: int = Field(..., ge=0)
    deviation_sigma: float
    exceeds_threshold: bool
    trust_grade: TrustGrade


class HealthDegradation(CamelModel):
    current_health_score: int = Field(..., ge=0, le=100)
    degradation_rate_per_hour: float
    estimated_validity_hours: int
    aging_curve: AgingCurve


class SourceHealth(CamelModel):
    source: str
    freshness_sec: int
    reliability: int = Field(..., ge=0, le=100)


class ProvenanceStep(CamelModel):
    step: int
    stage: ProvenanceStage
    description: str
    timestamp: datetime
    data_transformation: Optional[str] = None


class ConstraintViolation(CamelModel):
    constraint: str
    severity: ConstraintSeverity
    type: ConstraintType


class RelatedDecision(CamelModel):
    id: str
    relationship: RelationshipKind


class ConflictDetection(CamelModel):
    has_conflicts: bool
    conflict_severity: ConflictSeverity
    conflicting_decisions: List[str] = Field(default_factory=list)
    conflict_reasons: List[str] = Field(default_factory=list)


class ConsensusTracking(CamelModel):
    has_consensus: bool
    consensus_strength: int = Field(..., ge=0, le=100)
    agreeing_agents: List[AgentPersona] = Field(default_factory=list)
    disagreeing_agents: List[AgentPersona] = Field(default_factory=list)
    consensus_rationale: str


class TemporalPattern(CamelModel):
    decision_frequency: int
    clustering_score: int = Field(..., ge=0, le=100)
    is_burst: bool
    hour_of_day: int = Field(..., ge=0, le=23)
    pattern_deviation: int = Field(..., description="Signed percent delta from the expected hourly rate")


class RiskFactor(CamelModel):
    factor: str
    weight: float
    contribution: float


class RiskAssessment(CamelModel):
    overall_risk_score: int = Field(..., ge=0, le=100)
    risk_factors: List[RiskFactor]
    risk_level: RiskLevel
    mitigation_strategies: List[str] = Field(default_factory=list)


class LearningIndicators(CamelModel):
    novelty_score: int = Field(..., ge=0, le=100)
    pattern_deviation: int
    is_adaptive: bool
    decision_novelty: DecisionNovelty
    learning_context: Optional[str] = None


class ReversalHistory(CamelModel):
    was_reversed: bool
    reversal_timestamp: Optional[datetime] = None
    reversal_reason: Optional[ReversalReason] = None
    reversal_authority: Optional[str] = None
    reversal_impact: Optional[str] = None


class PeerComparison(CamelModel):
    better_than_peers: int = Field(..., ge=0, le=100)
    rank: int
    total_peers: int


class PerformanceBenchmark(CamelModel):
    baseline_quality: int = Field(..., ge=0, le=100)
    quality_delta: int = Field(..., description="Signed difference from baseline quality")
    peer_comparison: PeerComparison
    historical_success_rate: int = Field(..., ge=0, le=100)


class Explanations(CamelModel):
    beginner: str
    intermediate: str
    expert: str
    current_depth: Optional[ExplainabilityDepth] = None


class RequiredCondition(CamelModel):
    condition: str
    met: bool
    value: Optional[str] = None


class FreshnessRequirement(CamelModel):
    source: str
    max_age_sec: int
    actual_age_sec: int
    met: bool


class Prerequisites(CamelModel):
    all_met: bool
    required_conditions: List[RequiredCondition]
    data_freshness_requirements: List[FreshnessRequirement]


class ConfidenceComponent(CamelModel):
    score: int = Field(..., ge=0, le=100)
    weight: int


class ConfidenceBreakdown(CamelModel):
    data_quality: ConfidenceComponent
    historical_accuracy: ConfidenceComponent
    model_certainty: ConfidenceComponent
    context_relevance: ConfidenceComponent
    total: int = Field(..., ge=0, le=100)


class AlternativeAction(CamelModel):
    action: str
    confidence_score: int = Field(..., ge=0, le=100)
    rejection_reason: str
    potential_outcome: str


class ResourceImpact(CamelModel):
    inference_time_ms: int
    memory_used_mb: float
    api_calls_count: int
    compute_cost: float
    efficiency: int = Field(..., ge=0, le=100)


class ComplianceAxis(CamelModel):
    compliant: bool
    details: str


class ComplianceScoring(CamelModel):
    overall_status: ComplianceStatus
    safety_regulations: ComplianceAxis
    financial_rules: ComplianceAxis
    operational_policies: ComplianceAxis
    compliance_score: int = Field(..., ge=0, le=100)


class UserImpact(CamelModel):
    impact_level: UserImpactLevel
    affected_stakeholders: List[str]
    estimated_user_count: int
    impact_description: str
    benefit_analysis: Optional[str] = None


class RollbackCapability(CamelModel):
    can_rollback: bool
    rollback_complexity: RollbackComplexity
    rollback_time_window_sec: int
    rollback_procedure: str
    estimated_rollback_time_min: int


class VelocityMetrics(CamelModel):
    decisions_per_hour: int
    velocity_trend: VelocityTrend
    compared_to_average: int = Field(..., description="Signed percent delta from the average hourly rate")
    burst_detected: bool


class DomainImpact(CamelModel):
    affected: bool
    description: str
    magnitude: int = Field(..., ge=0, le=4)


class CrossDomainImpact(CamelModel):
    energy_impact: DomainImpact
    financial_impact: DomainImpact
    operational_impact: DomainImpact
    governance_impact: DomainImpact


class MaintenancePrediction(CamelModel):
    needed: bool
    timeframe: str
    component: str


class TradingOpportunity(CamelModel):
    detected: bool
    timeframe: str
    confidence: int = Field(..., ge=0, le=100)


class CapacityChange(CamelModel):
    predicted: bool
    direction: str
    magnitude: float


class PredictiveIndicators(CamelModel):
    predicted_future_needs: List[str] = Field(default_factory=list)
    maintenance_prediction: Optional[MaintenancePrediction] = None
    trading_opportunity: Optional[TradingOpportunity] = None
    capacity_change: Optional[CapacityChange] = None


class TimelinePosition(CamelModel):
    x: int
    y: int


class GraphEdge(CamelModel):
    source: str = Field(..., alias="from")
    target: str = Field(..., alias="to")
    type: str


class VisualizationData(CamelModel):
    timeline_position: TimelinePosition
    relationship_graph: List[GraphEdge] = Field(default_factory=list)
    heatmap_value: int = Field(..., ge=0, le=100)
    cluster_group: Optional[str] = None


class NotificationTrigger(CamelModel):
    stakeholder: str
    channel: NotificationChannel
    urgency: NotificationUrgency
    message: str
    should_send: bool = True


class ApprovalEntry(CamelModel):
    authority: str
    timestamp: datetime


class AuditableEvent(CamelModel):
    event: str
    timestamp: datetime


class AuditTrail(CamelModel):
    regulatory_checkpoints: List[str]
    approval_chain: List[ApprovalEntry]
    compliance_flags: List[str] = Field(default_factory=list)
    auditable_events: List[AuditableEvent]


class FieldDifference(CamelModel):
    field: str
    old_value: str
    new_value: str


class ComparisonData(CamelModel):
    baseline_decision_id: str
    differences: List[FieldDifference]
    similarity: int = Field(..., ge=0, le=100)


class AgentStateContext(CamelModel):
    active_decisions_count: int
    recent_action_history: List[str]
    cognitive_load: CognitiveLoad
    resource_utilization: int = Field(..., ge=0, le=100)
    decision_burst: bool


class ReplayInput(CamelModel):
    param: str
    alternative_value: str


class ReplayCapability(CamelModel):
    can_replay: bool
    alternative_inputs: List[ReplayInput]
    expected_outcome_delta: str


# ---------------------------------------------------------------------------
# Enriched record
# ---------------------------------------------------------------------------


class EnrichedDecision(DecisionEvent):
    """A DecisionEvent annotated with every derived attribute group.

    ``impact`` here is the classifier's verdict, which may differ from the
    generator's initial label.
    """

    # Trust & temporal
    trust_mathematics: TrustMathematics
    age_sec: int = Field(..., ge=0)
    trust_decay_percent: float = Field(..., gt=0, le=100)
    health_degradation: HealthDegradation

    # Classification
    complexity: DecisionComplexity
    category: DecisionCategory
    urgency: DecisionUrgency
    sentiment: DecisionSentiment

    # Provenance
    source_provenance: List[str]
    source_health_scores: List[SourceHealth]
    provenance_chain: List[ProvenanceStep]
    proof_hash: str

    # Operational
    agent_workload: WorkloadLevel
    operational_status: OperationalStatus
    constraint_violations: List[ConstraintViolation] = Field(default_factory=list)
    confidence_explanation: str
    coordinated_agents: List[AgentPersona]
    quality_score: int = Field(..., ge=0, le=100)
    outcome: DecisionOutcome
    outcome_confidence: int = Field(..., ge=0, le=100)

    # Relational
    parent_decision_id: Optional[str] = None
    child_decision_ids: List[str] = Field(default_factory=list)
    related_decisions: List[RelatedDecision] = Field(default_factory=list)
    conflict_detection: ConflictDetection
    consensus_tracking: ConsensusTracking
    temporal_pattern: TemporalPattern
    velocity_metrics: VelocityMetrics
    learning_indicators: LearningIndicators
    comparison_data: Optional[ComparisonData] = None
    visualization_data: VisualizationData

    # Risk & compliance
    risk_assessment: RiskAssessment
    compliance_scoring: ComplianceScoring
    confidence_breakdown: ConfidenceBreakdown
    resource_impact: ResourceImpact

    # Context & presentation
    agent_state_context: AgentStateContext
    notification_triggers: List[NotificationTrigger] = Field(default_factory=list)
    audit_trail: AuditTrail
    tags: List[str] = Field(default_factory=list)
    reversal_history: ReversalHistory
    performance_benchmark: PerformanceBenchmark
    explanations: Explanations
    prerequisites: Prerequisites
    alternative_actions: List[AlternativeAction] = Field(default_factory=list)
    user_impact: UserImpact
    rollback_capability: RollbackCapability
    cross_domain_impact: CrossDomainImpact
    predictive_indicators: PredictiveIndicators
    replay_capability: Optional[ReplayCapability] = None


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_TRUE_STRINGS = {"true", "1", "yes", "on"}


def enum_or_default(enum_type: type, value: Any, default: Any) -> Any:
    """Return the enum member named by ``value`` or ``default`` if unrecognised."""
    if isinstance(value, enum_type):
        return value
    if value is None:
        return default
    candidate = str(value).strip().lower()
    for member in enum_type:
        if member.value == candidate:
            return member
    return default


def _int_or_default(value: Any, default: int) -> int:
    """Parse a leading integer the way lenient query strings expect (``"20abc"`` -> 20)."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if value is None:
        return default
    text = str(value).strip()
    digits = ""
    for index, char in enumerate(text):
        if char.isdigit() or (index == 0 and char in "+-"):
            digits += char
        else:
            break
    if digits in ("", "+", "-"):
        return default
    return int(digits)


class QueryParameters(BaseModel):
    """Parameters of a decision query.

    Every field degrades to its documented default when the raw value is
    missing or malformed; constructing this model never fails.
    """

    model_config = ConfigDict(frozen=True)

    agent: Optional[AgentPersona] = None
    since: Optional[datetime] = None
    min_confidence: int = 0
    max_confidence: int = 100
    category: Optional[DecisionCategory] = None
    impact: Optional[DecisionImpact] = None
    urgent_only: bool = False
    tags: FrozenSet[str] = frozenset()
    sort_by: Optional[SortField] = None
    order: SortOrder = SortOrder.DESC
    limit: int = DEFAULT_PAGE_SIZE
    cursor: int = 0
    format: ResponseFormat = ResponseFormat.STANDARD
    explainability_depth: ExplainabilityDepth = ExplainabilityDepth.INTERMEDIATE
    include_alternatives: bool = False
    include_replay: bool = False

    @field_validator("agent", mode="before")
    @classmethod
    def _agent(cls, value: Any) -> Optional[AgentPersona]:
        return enum_or_default(AgentPersona, value, None)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, value: Any) -> Optional[DecisionCategory]:
        return enum_or_default(DecisionCategory, value, None)

    @field_validator("impact", mode="before")
    @classmethod
    def _impact(cls, value: Any) -> Optional[DecisionImpact]:
        return enum_or_default(DecisionImpact, value, None)

    @field_validator("sort_by", mode="before")
    @classmethod
    def _sort_by(cls, value: Any) -> Optional[SortField]:
        return enum_or_default(SortField, value, None)

    @field_validator("order", mode="before")
    @classmethod
    def _order(cls, value: Any) -> SortOrder:
        return enum_or_default(SortOrder, value, SortOrder.DESC)

    @field_validator("format", mode="before")
    @classmethod
    def _format(cls, value: Any) -> ResponseFormat:
        return enum_or_default(ResponseFormat, value, ResponseFormat.STANDARD)

    @field_validator("explainability_depth", mode="before")
    @classmethod
    def _depth(cls, value: Any) -> ExplainabilityDepth:
        return enum_or_default(ExplainabilityDepth, value, ExplainabilityDepth.INTERMEDIATE)

    @field_validator("limit", mode="before")
    @classmethod
    def _limit(cls, value: Any) -> int:
        limit = _int_or_default(value, DEFAULT_PAGE_SIZE)
        if limit <= 0:
            return DEFAULT_PAGE_SIZE
        return min(limit, MAX_PAGE_SIZE)

    @field_validator("cursor", mode="before")
    @classmethod
    def _cursor(cls, value: Any) -> int:
        return max(0, _int_or_default(value, 0))

    @field_validator("min_confidence", mode="before")
    @classmethod
    def _min_confidence(cls, value: Any) -> int:
        return max(0, min(100, _int_or_default(value, 0)))

    @field_validator("max_confidence", mode="before")
    @classmethod
    def _max_confidence(cls, value: Any) -> int:
        return max(0, min(100, _int_or_default(value, 100)))

    @field_validator("urgent_only", "include_alternatives", "include_replay", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() in _TRUE_STRINGS

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> FrozenSet[str]:
        if value is None:
            return frozenset()
        if isinstance(value, str):
            value = value.split(",")
        return frozenset(str(tag).strip().lower() for tag in value if str(tag).strip())

    @field_validator("since", mode="before")
    @classmethod
    def _since(cls, value: Any) -> Optional[datetime]:
        if value is None or value == "":
            return None
        if isinstance(value, datetime):
            parsed = value
        else:
            text = str(value).strip()
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            try:
                parsed = datetime.fromisoformat(text)
            except ValueError:
                return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


# ---------------------------------------------------------------------------
# Response envelopes
# ---------------------------------------------------------------------------


class PaginationInfo(CamelModel):
    total_count: int
    has_more: bool
    next_cursor: Optional[str] = None
    current_offset: int


class DecisionStatistics(CamelModel):
    avg_confidence: float
    avg_quality_score: float
    trust_distribution: Dict[str, int]
    decision_type_breakdown: Dict[str, int]
    impact_breakdown: Dict[str, int]
    urgency_breakdown: Dict[str, int]


class SmartDefault(CamelModel):
    field: str
    default_value: str
    reason: str


class AppliedFilters(CamelModel):
    agent: Optional[AgentPersona] = None
    limit: int
    since: Optional[datetime] = None
    min_confidence: int
    max_confidence: int
    category: Optional[DecisionCategory] = None
    impact: Optional[DecisionImpact] = None
    urgency: bool
    sort_by: SortField
    order: SortOrder
    tags: Optional[List[str]] = None


class DecisionListResponse(CamelModel):
    """Envelope returned by the decision query endpoint."""

    data: List[Dict[str, Any]]
    count: int
    cached: bool
    pagination: PaginationInfo
    statistics: DecisionStatistics
    filters: AppliedFilters
    smart_defaults_applied: List[SmartDefault] = Field(default_factory=list)
    optimization_hints: List[str] = Field(default_factory=list)
    trace_id: str


# ---------------------------------------------------------------------------
# Explanation record
# ---------------------------------------------------------------------------


class BeginnerExplanation(CamelModel):
    summary: str
    key_points: List[str]
    analogy: str


class IntermediateExplanation(CamelModel):
    summary: str
    detailed_context: List[str]
    data_points: Dict[str, Any]
    assumptions: List[str]
    tradeoffs: List[str]


class ExpertExplanation(CamelModel):
    summary: str
    technical_details: List[str]
    algorithmic_approach: str
    mathematical_model: str
    uncertainties: List[str]


class MultiDepthExplanation(CamelModel):
    beginner: BeginnerExplanation
    intermediate: IntermediateExplanation
    expert: ExpertExplanation


class ReasoningStep(CamelModel):
    step_number: int
    reasoning: str
    data_source: str
    confidence: int = Field(..., ge=0, le=100)
    timestamp: datetime


class ReasoningChain(CamelModel):
    total_steps: int
    steps: List[ReasoningStep]
    overall_logic: str
    critical_paths: List[str]
    duration_ms: int


class ConfidenceFactor(CamelModel):
    factor_type: str
    weight: int
    confidence: int = Field(..., ge=0, le=100)
    reasoning: str


class ExplanationConfidence(CamelModel):
    overall_confidence: int = Field(..., ge=0, le=100)
    factors: List[ConfidenceFactor]
    lower_bound: int = Field(..., ge=0, le=100)
    upper_bound: int = Field(..., ge=0, le=100)
    confidence_interval: int = 95


class ChainLink(CamelModel):
    related_decision_id: str
    relationship_type: str
    agent_persona: AgentPersona
    description: str
    strength: int = Field(..., ge=0, le=100)
    timestamp: datetime


class DecisionChainLinking(CamelModel):
    upstream_triggers: List[ChainLink]
    downstream_impacts: List[ChainLink]
    chain_complete: bool


class DecisionExplanation(CamelModel):
    """Deeply nested explanation record for a single decision id."""

    decision_id: str
    agent_persona: AgentPersona
    decision_type: str
    timestamp: datetime
    summary: str
    multi_depth_explanation: MultiDepthExplanation
    reasoning_chain: ReasoningChain
    confidence_breakdown: ExplanationConfidence
    alternative_actions: List[AlternativeAction]
    prerequisites: Prerequisites
    trust_mathematics: TrustMathematics
    decision_chain: DecisionChainLinking
    data_sources_count: int
    trust_score: int = Field(..., ge=0, le=100)


class ExplanationMetadata(CamelModel):
    depth: ExplainabilityDepth
    format: ExplanationFormat
    fields_requested: str


class ExplanationResponse(CamelModel):
    """Envelope returned by the explanation endpoint."""

    data: Dict[str, Any]
    source_provenance: str
    freshness_sec: int = 0
    trace_id: str
    metadata: ExplanationMetadata
