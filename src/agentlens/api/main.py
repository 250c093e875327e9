"""FastAPI application for AgentLens.

This is the main entry point for the REST API that provides:
- Decision query endpoint (GET /api/v1/agents/decisions)
- Decision explanation endpoint (GET /api/v1/explanations/{decision_id})
- Health check endpoint (GET /health)

Design Philosophy:
- Lenient query parsing: malformed parameters fall back to defaults
- Dependency injection for the decision engine (overridable in tests)
- Invalid decision ids map to 400, anything unexpected to a logged 500
- OpenAPI documentation auto-generated
"""

import logging
from functools import lru_cache
from typing import Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, Query, Response
from fastapi.responses import JSONResponse

from agentlens.config import get_settings
from agentlens.engine.decision import DecisionEngine, create_decision_engine
from agentlens.engine.explain import InvalidDecisionIdError
from agentlens.log import configure_logging
from agentlens.models import (
    DecisionListResponse,
    ExplainabilityDepth,
    ExplanationFormat,
    ExplanationMetadata,
    ExplanationResponse,
    QueryParameters,
    enum_or_default,
)

SERVICE_NAME = "agentlens"
VERSION = "0.1.0"
EXPLANATION_PROVENANCE = "synthetic:generator+explanation_builder"

configure_logging(get_settings())
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="AgentLens API",
    description="Synthetic AI agent decision telemetry for autonomous energy infrastructure",
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)


@lru_cache
def get_engine() -> DecisionEngine:
    """Process-wide decision engine (and therefore a process-wide cache)."""
    return create_decision_engine(get_settings())


def new_trace_id() -> str:
    return f"trace-{uuid4().hex}"


@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns:
        Status message indicating service health
    """
    return {"status": "ok", "service": SERVICE_NAME, "version": VERSION}


@app.get("/api/v1/agents/decisions", response_model=DecisionListResponse)
def list_decisions(
    response: Response,
    agent: Optional[str] = Query(None, description="operations, markets, sentinel or governor"),
    limit: Optional[str] = Query(None, description="Page size (default 20, max 100)"),
    since: Optional[str] = Query(None, description="ISO-8601 lower bound on timestamp"),
    min_confidence: Optional[str] = Query(None, alias="minConfidence"),
    max_confidence: Optional[str] = Query(None, alias="maxConfidence"),
    category: Optional[str] = Query(None, description="dispatch, trading, maintenance, governance or override"),
    impact: Optional[str] = Query(None, description="low, medium, high or critical"),
    urgency: Optional[str] = Query(None, description="'true' keeps urgent and emergency decisions only"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    order: Optional[str] = Query(None, description="asc or desc (default desc)"),
    format: Optional[str] = Query(None, description="minimal, standard or full"),
    cursor: Optional[str] = Query(None, description="Offset returned as nextCursor"),
    explainability_depth: Optional[str] = Query(None, alias="explainabilityDepth"),
    tags: Optional[str] = Query(None, description="Comma-separated tags"),
    include_alternatives: Optional[str] = Query(None, alias="includeAlternatives"),
    include_replay: Optional[str] = Query(None, alias="includeReplay"),
    engine: DecisionEngine = Depends(get_engine),
) -> DecisionListResponse:
    """Query synthetic agent decisions.

    Every parameter is optional and degrades to its default when malformed.

    Returns:
        Page of enriched decisions with pagination, statistics, applied
        filters, smart defaults and optimization hints
    """
    params = QueryParameters(
        agent=agent,
        limit=limit,
        since=since,
        min_confidence=min_confidence,
        max_confidence=max_confidence,
        category=category,
        impact=impact,
        urgent_only=urgency,
        tags=tags,
        sort_by=sort_by,
        order=order,
        cursor=cursor,
        format=format,
        explainability_depth=explainability_depth,
        include_alternatives=include_alternatives,
        include_replay=include_replay,
    )
    result = engine.query(params)

    response.headers["Cache-Control"] = "private, max-age=30"
    response.headers["X-Data-Source"] = "synthetic-cached" if result.cached else "synthetic"
    response.headers["X-Cache-Hit"] = str(result.cached).lower()
    response.headers["X-Total-Count"] = str(result.page.total_count)
    response.headers["X-Has-More"] = str(result.page.has_more).lower()

    return result.to_response(new_trace_id())


@app.get("/api/v1/explanations/{decision_id}", response_model=ExplanationResponse)
def get_explanation(
    decision_id: str,
    response: Response,
    depth: Optional[str] = Query(None, description="beginner, intermediate or expert"),
    format: Optional[str] = Query(None, description="minimal, standard, full or timeline"),
    fields: Optional[str] = Query(None, description="Comma-separated top-level fields to keep"),
    engine: DecisionEngine = Depends(get_engine),
) -> ExplanationResponse:
    """Explain a single decision.

    Raises:
        InvalidDecisionIdError: Surfaced as 400 when the id names no known persona
    """
    chosen_depth = enum_or_default(ExplainabilityDepth, depth, ExplainabilityDepth.INTERMEDIATE)
    chosen_format = enum_or_default(ExplanationFormat, format, ExplanationFormat.STANDARD)
    field_list = [name.strip() for name in fields.split(",") if name.strip()] if fields else None

    data = engine.explain(decision_id, chosen_depth, chosen_format, field_list)

    response.headers["Cache-Control"] = "no-store, max-age=0"
    response.headers["X-Data-Source"] = "synthetic"
    response.headers["X-Explanation-Depth"] = chosen_depth.value

    return ExplanationResponse(
        data=data,
        source_provenance=EXPLANATION_PROVENANCE,
        freshness_sec=0,
        trace_id=new_trace_id(),
        metadata=ExplanationMetadata(
            depth=chosen_depth,
            format=chosen_format,
            fields_requested=",".join(field_list) if field_list else "all",
        ),
    )


@app.exception_handler(InvalidDecisionIdError)
async def invalid_decision_id_handler(request, exc):
    """Handle decision ids that name no known persona."""
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle unexpected exceptions."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("agentlens.api.main:app", host=settings.api_host, port=settings.api_port, reload=settings.api_reload)
