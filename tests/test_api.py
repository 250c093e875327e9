"""Integration tests for FastAPI endpoints."""

import pytest
from fastapi.testclient import TestClient

from agentlens.api.main import app, get_engine
from agentlens.config import Settings
from agentlens.engine.cache import DecisionCache
from agentlens.engine.decision import DecisionEngine

DECISIONS_URL = "/api/v1/agents/decisions"
EXPLANATION_ID = "decision-markets-1717242900000-3"


@pytest.fixture(scope="function")
def engine(now) -> DecisionEngine:
    """Fixed-clock engine with a fresh cache for each test."""
    return DecisionEngine(settings=Settings(), cache=DecisionCache(), now_fn=lambda: now)


@pytest.fixture(scope="function")
def test_client(engine: DecisionEngine):
    """Create test client with engine dependency override."""
    app.dependency_overrides[get_engine] = lambda: engine
    client = TestClient(app, raise_server_exceptions=False)
    yield client
    app.dependency_overrides.clear()


def test_health_check(test_client: TestClient) -> None:
    """Test health check endpoint."""
    response = test_client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["service"] == "agentlens"
    assert "version" in data


def test_list_decisions_default(test_client: TestClient) -> None:
    """Test the default decision query."""
    response = test_client.get(DECISIONS_URL)

    assert response.status_code == 200
    data = response.json()
    assert data["count"] == len(data["data"]) == 20
    assert data["cached"] is False
    assert data["pagination"] == {"totalCount": 60, "hasMore": True, "nextCursor": "20", "currentOffset": 0}
    assert data["filters"]["limit"] == 20
    assert data["filters"]["sortBy"] == "timestamp"
    assert data["filters"]["order"] == "desc"
    assert data["traceId"].startswith("trace-")
    assert set(data["statistics"]["trustDistribution"]) == {"excellent", "good", "fair", "poor", "suspect"}


def test_list_decisions_headers(test_client: TestClient) -> None:
    """Test cache and pagination headers."""
    response = test_client.get(DECISIONS_URL)

    assert response.headers["cache-control"] == "private, max-age=30"
    assert response.headers["x-data-source"] == "synthetic"
    assert response.headers["x-cache-hit"] == "false"
    assert response.headers["x-total-count"] == "60"
    assert response.headers["x-has-more"] == "true"


def test_repeat_request_served_from_cache(test_client: TestClient) -> None:
    """Test an identical request within the TTL is a cache hit with the same data."""
    first = test_client.get(DECISIONS_URL, params={"agent": "operations"})
    second = test_client.get(DECISIONS_URL, params={"agent": "operations"})

    assert second.status_code == 200
    assert second.headers["x-cache-hit"] == "true"
    assert second.headers["x-data-source"] == "synthetic-cached"
    assert second.json()["cached"] is True
    assert second.json()["data"] == first.json()["data"]
    assert second.json()["traceId"] != first.json()["traceId"]


def test_filter_markets_min_confidence(test_client: TestClient) -> None:
    """Test agent and confidence filters."""
    response = test_client.get(DECISIONS_URL, params={"agent": "markets", "minConfidence": "70"})

    assert response.status_code == 200
    for item in response.json()["data"]:
        assert item["agent"] == "markets"
        assert item["confidence"] >= 70


def test_malformed_params_fall_back(test_client: TestClient) -> None:
    """Test malformed parameters never fail the request."""
    response = test_client.get(
        DECISIONS_URL,
        params={"limit": "abc", "order": "sideways", "agent": "robot", "since": "yesterday", "cursor": "-4"},
    )

    assert response.status_code == 200
    filters = response.json()["filters"]
    assert filters["limit"] == 20
    assert filters["order"] == "desc"
    assert filters.get("agent") is None
    assert response.json()["pagination"]["currentOffset"] == 0


def test_critical_impact_sorted_by_risk(test_client: TestClient) -> None:
    """Test the risk-sort smart default."""
    response = test_client.get(DECISIONS_URL, params={"impact": "critical"})

    data = response.json()
    assert data["filters"]["sortBy"] == "risk"
    assert data["smartDefaultsApplied"][0]["field"] == "sortBy"
    scores = [item["riskAssessment"]["overallRiskScore"] for item in data["data"]]
    assert scores == sorted(scores, reverse=True)


def test_urgency_filter(test_client: TestClient) -> None:
    """Test urgency=true keeps urgent and emergency decisions."""
    response = test_client.get(DECISIONS_URL, params={"urgency": "true", "format": "full"})

    assert response.status_code == 200
    assert all(item["urgency"] in ("urgent", "emergency") for item in response.json()["data"])


def test_cursor_pagination(test_client: TestClient) -> None:
    """Test the next cursor advances the page."""
    response = test_client.get(DECISIONS_URL, params={"limit": "20", "cursor": "20"})

    pagination = response.json()["pagination"]
    assert pagination["currentOffset"] == 20
    assert pagination["hasMore"] is True
    assert pagination["nextCursor"] == "40"


def test_minimal_format(test_client: TestClient) -> None:
    """Test the minimal format."""
    response = test_client.get(DECISIONS_URL, params={"format": "minimal", "limit": "5"})

    items = response.json()["data"]
    assert len(items) == 5
    assert set(items[0]) == {"id", "agent", "summary", "confidence", "timestamp", "category", "impact", "explanation"}


def test_full_format_with_replay(test_client: TestClient) -> None:
    """Test full decisions carry replay capability when requested."""
    response = test_client.get(
        DECISIONS_URL, params={"format": "full", "includeReplay": "true", "explainabilityDepth": "expert"}
    )

    item = response.json()["data"][0]
    assert item["replayCapability"]["canReplay"] is True
    assert item["explanations"]["currentDepth"] == "expert"
    assert item["proofHash"].startswith("0x")


def test_get_explanation(test_client: TestClient) -> None:
    """Test the explanation endpoint."""
    response = test_client.get(f"/api/v1/explanations/{EXPLANATION_ID}")

    assert response.status_code == 200
    body = response.json()
    assert body["data"]["decisionId"] == EXPLANATION_ID
    assert body["data"]["agentPersona"] == "markets"
    assert body["sourceProvenance"] == "synthetic:generator+explanation_builder"
    assert body["freshnessSec"] == 0
    assert body["metadata"] == {"depth": "intermediate", "format": "standard", "fieldsRequested": "all"}
    assert response.headers["x-explanation-depth"] == "intermediate"
    assert response.headers["cache-control"] == "no-store, max-age=0"


def test_get_explanation_is_stable(test_client: TestClient) -> None:
    """Test repeated explanation requests return the same record."""
    first = test_client.get(f"/api/v1/explanations/{EXPLANATION_ID}", params={"format": "full"})
    second = test_client.get(f"/api/v1/explanations/{EXPLANATION_ID}", params={"format": "full"})

    assert first.json()["data"] == second.json()["data"]


def test_get_explanation_timeline_and_fields(test_client: TestClient) -> None:
    """Test explanation format and field selection."""
    timeline = test_client.get(f"/api/v1/explanations/{EXPLANATION_ID}", params={"format": "timeline"})
    assert "reasoningChain" in timeline.json()["data"]

    selected = test_client.get(
        f"/api/v1/explanations/{EXPLANATION_ID}", params={"format": "full", "fields": "summary, trustScore"}
    )
    assert set(selected.json()["data"]) == {"summary", "trustScore", "decisionId", "timestamp"}
    assert selected.json()["metadata"]["fieldsRequested"] == "summary,trustScore"


def test_get_explanation_bad_depth_falls_back(test_client: TestClient) -> None:
    """Test an unknown depth uses intermediate."""
    response = test_client.get(f"/api/v1/explanations/{EXPLANATION_ID}", params={"depth": "wizard"})

    assert response.status_code == 200
    assert response.json()["metadata"]["depth"] == "intermediate"


def test_get_explanation_invalid_id(test_client: TestClient) -> None:
    """Test an id without a known persona returns 400."""
    response = test_client.get("/api/v1/explanations/decision-robot-1-0")

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid decision ID format"


def test_unexpected_error_returns_500(test_client: TestClient, engine: DecisionEngine, monkeypatch) -> None:
    """Test unexpected failures surface as a generic 500."""

    def explode(params):
        raise RuntimeError("boom")

    monkeypatch.setattr(engine, "query", explode)

    response = test_client.get(DECISIONS_URL)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_value_error_inside_engine_returns_500(test_client: TestClient, engine: DecisionEngine, monkeypatch) -> None:
    """Test only invalid decision ids map to 400; other ValueErrors are server errors."""

    def explode(params):
        raise ValueError("bad internal state")

    monkeypatch.setattr(engine, "query", explode)

    response = test_client.get(DECISIONS_URL)

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_get_explanation_out_of_range_timestamp(test_client: TestClient) -> None:
    """Test an oversized time segment in the id still yields an explanation."""
    response = test_client.get("/api/v1/explanations/decision-markets-99999999999999999999-1")

    assert response.status_code == 200
    assert response.json()["data"]["agentPersona"] == "markets"
