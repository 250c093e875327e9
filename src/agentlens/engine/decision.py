"""Decision query engine.

This is the main entry point behind the HTTP layer. It orchestrates:
1. Smart defaults and optimization hints (advice about the query itself)
2. Cache lookup (identical queries within the TTL reuse the same page)
3. Generation and enrichment of a fresh seeded batch on a miss
4. Filtering, sorting and pagination
5. Statistics and formatting of the page

Design Philosophy:
- Single responsibility: one method per endpoint
- Deterministic: each cache miss starts a new stream from the configured seed
- Injectable: cache, clock and scorer are constructor arguments
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from agentlens.config import Settings, get_settings
from agentlens.engine.cache import DecisionCache
from agentlens.engine.explain import build_explanation, shape_explanation
from agentlens.engine.formatting import calculate_statistics, format_decisions
from agentlens.engine.generator import DecisionGenerator
from agentlens.engine.pipeline import EnrichmentOptions, enrich_batch
from agentlens.engine.query import PageSlice, apply_filters, apply_sorting, paginate
from agentlens.engine.random_source import SeededRandom
from agentlens.engine.scoring import RiskScorer, create_default_scorer
from agentlens.engine.trust import TrustConfig
from agentlens.models import (
    AppliedFilters,
    DecisionCategory,
    DecisionImpact,
    DecisionListResponse,
    DecisionStatistics,
    ExplainabilityDepth,
    ExplanationFormat,
    PaginationInfo,
    QueryParameters,
    SmartDefault,
    SortField,
)

logger = logging.getLogger(__name__)

LARGE_LIMIT_HINT_THRESHOLD = 50


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class DecisionQueryResult:
    """Everything the query endpoint needs to build its response."""

    data: List[Dict[str, Any]]
    page: PageSlice
    statistics: DecisionStatistics
    filters: AppliedFilters
    smart_defaults: List[SmartDefault] = field(default_factory=list)
    optimization_hints: List[str] = field(default_factory=list)
    cached: bool = False

    def to_response(self, trace_id: str) -> DecisionListResponse:
        return DecisionListResponse(
            data=self.data,
            count=len(self.data),
            cached=self.cached,
            pagination=PaginationInfo(
                total_count=self.page.total_count,
                has_more=self.page.has_more,
                next_cursor=self.page.next_cursor,
                current_offset=self.page.current_offset,
            ),
            statistics=self.statistics,
            filters=self.filters,
            smart_defaults_applied=self.smart_defaults,
            optimization_hints=self.optimization_hints,
            trace_id=trace_id,
        )


class DecisionEngine:
    """Serves decision queries and explanations from synthetic telemetry."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        cache: Optional[DecisionCache] = None,
        now_fn: Callable[[], datetime] = utc_now,
        scorer: Optional[RiskScorer] = None,
    ) -> None:
        """Initialize decision engine.

        Args:
            settings: Application settings (uses get_settings() if None)
            cache: Page cache (a fresh one from settings if None)
            now_fn: Wall clock returning aware datetimes
            scorer: Risk scorer (uses default weights if None)
        """
        self.settings = settings or get_settings()
        self.cache = cache or DecisionCache(
            ttl_seconds=self.settings.cache_ttl_seconds,
            stale_after_seconds=self.settings.cache_stale_seconds,
        )
        self.now_fn = now_fn
        self.scorer = scorer or create_default_scorer()
        self.trust_config = TrustConfig.from_settings(self.settings)

    def query(self, params: QueryParameters) -> DecisionQueryResult:
        """Answer a decision query.

        Args:
            params: Normalized query parameters

        Returns:
            Formatted page with pagination, statistics and query advice
        """
        params, smart_defaults = self._apply_smart_defaults(params)
        hints = self._optimization_hints(params)

        key = self.cache.make_key(params)
        page = self.cache.get(key)
        cached = page is not None
        if page is None:
            page = self._compute_page(params)
            self.cache.set(key, page)

        return DecisionQueryResult(
            data=format_decisions(
                page.items, params.format, params.explainability_depth, params.include_alternatives
            ),
            page=page,
            statistics=calculate_statistics(page.items),
            filters=self._applied_filters(params),
            smart_defaults=smart_defaults,
            optimization_hints=hints,
            cached=cached,
        )

    def explain(
        self,
        decision_id: str,
        depth: ExplainabilityDepth = ExplainabilityDepth.INTERMEDIATE,
        format: ExplanationFormat = ExplanationFormat.STANDARD,
        fields: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Explanation record for one decision id, shaped for the response.

        Raises:
            InvalidDecisionIdError: If the id does not name a known persona
        """
        explanation = build_explanation(decision_id, self.now_fn(), self.trust_config)
        return shape_explanation(explanation, depth, format, fields)

    def _compute_page(self, params: QueryParameters) -> PageSlice:
        now = self.now_fn()
        rng = SeededRandom(self.settings.random_seed)
        generator = DecisionGenerator(rng, self.settings.generation_window_sec, self.trust_config)

        batch = generator.generate_batch(params.limit * self.settings.batch_multiplier, now)
        enriched = enrich_batch(
            batch,
            rng,
            now,
            trust_config=self.trust_config,
            scorer=self.scorer,
            options=EnrichmentOptions(
                include_alternatives=params.include_alternatives,
                include_replay=params.include_replay,
            ),
        )
        filtered = apply_filters(enriched, params)
        ordered = apply_sorting(filtered, params.sort_by or SortField.TIMESTAMP, params.order)
        page = paginate(ordered, params.cursor, params.limit)

        logger.debug(
            "Computed page: batch=%d matched=%d offset=%d returned=%d",
            len(batch),
            len(filtered),
            page.current_offset,
            len(page.items),
        )
        return page

    def _apply_smart_defaults(self, params: QueryParameters) -> Tuple[QueryParameters, List[SmartDefault]]:
        """Resolve the sort field and report context-driven defaults.

        Critical impact queries without an explicit sort are sorted by risk.
        Trading queries always include alternatives. The override urgency
        default is advisory only.
        """
        applied: List[SmartDefault] = []
        updates: Dict[str, Any] = {}

        if params.category == DecisionCategory.OVERRIDE and not params.urgent_only:
            applied.append(
                SmartDefault(field="urgency", default_value="true", reason="Override decisions are typically urgent")
            )

        if params.sort_by is None:
            if params.impact == DecisionImpact.CRITICAL:
                updates["sort_by"] = SortField.RISK
                applied.append(
                    SmartDefault(
                        field="sortBy",
                        default_value="risk",
                        reason="Critical impact decisions best sorted by risk score",
                    )
                )
            else:
                updates["sort_by"] = SortField.TIMESTAMP

        if params.category == DecisionCategory.TRADING and not params.include_alternatives:
            updates["include_alternatives"] = True
            applied.append(
                SmartDefault(
                    field="includeAlternatives",
                    default_value="true",
                    reason="Trading decisions benefit from alternative action analysis",
                )
            )

        return params.model_copy(update=updates), applied

    def _optimization_hints(self, params: QueryParameters) -> List[str]:
        hints: List[str] = []
        if params.agent is None and params.limit > LARGE_LIMIT_HINT_THRESHOLD:
            hints.append("Tip: Filter by specific agent for faster queries with large limits")
        if params.category is None and params.impact is None:
            hints.append("Tip: Add category or impact filters to reduce result set size")
        if params.sort_by == SortField.RISK and params.min_confidence == 0:
            hints.append("Tip: Combine risk sorting with confidence filters for better insights")
        return hints

    @staticmethod
    def _applied_filters(params: QueryParameters) -> AppliedFilters:
        return AppliedFilters(
            agent=params.agent,
            limit=params.limit,
            since=params.since,
            min_confidence=params.min_confidence,
            max_confidence=params.max_confidence,
            category=params.category,
            impact=params.impact,
            urgency=params.urgent_only,
            sort_by=params.sort_by or SortField.TIMESTAMP,
            order=params.order,
            tags=sorted(params.tags) or None,
        )


def create_decision_engine(
    settings: Optional[Settings] = None,
    cache: Optional[DecisionCache] = None,
    now_fn: Callable[[], datetime] = utc_now,
) -> DecisionEngine:
    """Factory function to create a decision engine.

    Args:
        settings: Application settings (uses get_settings() if None)
        cache: Page cache (a fresh one if None)
        now_fn: Wall clock

    Returns:
        Configured DecisionEngine
    """
    return DecisionEngine(settings=settings, cache=cache, now_fn=now_fn, scorer=create_default_scorer())
