"""Filtering, sorting and cursor pagination over enriched decisions.

Design Philosophy:
- Pure functions: inputs are never mutated, new lists are returned
- Filters compose with AND semantics; an unset filter matches everything
- Sorting is stable in both directions (ties keep their incoming order)
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from agentlens.models import (
    DecisionImpact,
    DecisionUrgency,
    EnrichedDecision,
    QueryParameters,
    SortField,
    SortOrder,
)

IMPACT_RANK: Dict[DecisionImpact, int] = {
    DecisionImpact.LOW: 1,
    DecisionImpact.MEDIUM: 2,
    DecisionImpact.HIGH: 3,
    DecisionImpact.CRITICAL: 4,
}

URGENCY_RANK: Dict[DecisionUrgency, int] = {
    DecisionUrgency.ROUTINE: 1,
    DecisionUrgency.ELEVATED: 2,
    DecisionUrgency.URGENT: 3,
    DecisionUrgency.EMERGENCY: 4,
}

URGENT_LEVELS = frozenset({DecisionUrgency.URGENT, DecisionUrgency.EMERGENCY})


def _matches(decision: EnrichedDecision, params: QueryParameters) -> bool:
    if params.agent and decision.agent != params.agent:
        return False
    if params.since and decision.timestamp < params.since:
        return False
    if not params.min_confidence <= decision.confidence <= params.max_confidence:
        return False
    if params.category and decision.category != params.category:
        return False
    if params.impact and decision.impact != params.impact:
        return False
    if params.urgent_only and decision.urgency not in URGENT_LEVELS:
        return False
    if params.tags and not params.tags <= set(decision.tags):
        return False
    return True


def apply_filters(decisions: Sequence[EnrichedDecision], params: QueryParameters) -> List[EnrichedDecision]:
    """Keep decisions matching every supplied filter.

    Tags match when the decision carries every requested tag.
    Applying the same filters twice gives the same result as applying them once.
    """
    return [decision for decision in decisions if _matches(decision, params)]


SORT_KEYS: Dict[SortField, Callable[[EnrichedDecision], object]] = {
    SortField.TIMESTAMP: lambda d: d.timestamp,
    SortField.CONFIDENCE: lambda d: d.confidence,
    SortField.IMPACT: lambda d: IMPACT_RANK[d.impact],
    SortField.URGENCY: lambda d: URGENCY_RANK[d.urgency],
    SortField.RISK: lambda d: d.risk_assessment.overall_risk_score,
}


def apply_sorting(
    decisions: Sequence[EnrichedDecision],
    sort_by: SortField = SortField.TIMESTAMP,
    order: SortOrder = SortOrder.DESC,
) -> List[EnrichedDecision]:
    """Sort by one field; ``sorted(reverse=True)`` keeps ties in incoming order."""
    return sorted(decisions, key=SORT_KEYS[sort_by], reverse=order == SortOrder.DESC)


@dataclass(frozen=True)
class PageSlice:
    """One page of results plus the cursor bookkeeping."""

    items: List[EnrichedDecision]
    total_count: int
    has_more: bool
    next_cursor: Optional[str]
    current_offset: int


def paginate(decisions: Sequence[EnrichedDecision], cursor: int, limit: int) -> PageSlice:
    """Slice ``limit`` items starting at offset ``cursor``.

    Args:
        decisions: Sorted decisions
        cursor: Zero-based offset (negative values are treated as 0)
        limit: Page size (at least 1)

    Returns:
        PageSlice whose next_cursor is the next offset as a string, or None
        on the last page
    """
    cursor = max(0, cursor)
    limit = max(1, limit)
    end = cursor + limit
    has_more = end < len(decisions)
    return PageSlice(
        items=list(decisions[cursor:end]),
        total_count=len(decisions),
        has_more=has_more,
        next_cursor=str(end) if has_more else None,
        current_offset=cursor,
    )
