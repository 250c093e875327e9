"""Tests for data models and lenient query parsing."""

from datetime import datetime, timezone

import pytest

from agentlens.models import (
    AgentPersona,
    DecisionCategory,
    ExplainabilityDepth,
    GraphEdge,
    QueryParameters,
    ResponseFormat,
    SortField,
    SortOrder,
    TrustMathematics,
    TrustGrade,
    enum_or_default,
)


def test_query_defaults() -> None:
    """Test an empty query uses every default."""
    params = QueryParameters()

    assert params.agent is None
    assert params.limit == 20
    assert params.cursor == 0
    assert params.order == SortOrder.DESC
    assert params.sort_by is None
    assert params.format == ResponseFormat.STANDARD
    assert params.explainability_depth == ExplainabilityDepth.INTERMEDIATE
    assert params.tags == frozenset()


@pytest.mark.parametrize(
    "raw, expected",
    [("abc", 20), ("0", 20), ("-3", 20), ("500", 100), ("20abc", 20), ("35", 35), (None, 20)],
)
def test_limit_degrades(raw, expected) -> None:
    """Test malformed or out-of-range limits fall back or clamp."""
    assert QueryParameters(limit=raw).limit == expected


def test_cursor_degrades() -> None:
    """Test negative or junk cursors become zero."""
    assert QueryParameters(cursor="-5").cursor == 0
    assert QueryParameters(cursor="junk").cursor == 0
    assert QueryParameters(cursor="40").cursor == 40


def test_enums_degrade() -> None:
    """Test unknown enum values become defaults and case is ignored."""
    params = QueryParameters(
        agent="bogus", category="DISPATCH", sort_by="nope", order="sideways", format="fancy"
    )

    assert params.agent is None
    assert params.category == DecisionCategory.DISPATCH
    assert params.sort_by is None
    assert params.order == SortOrder.DESC
    assert params.format == ResponseFormat.STANDARD


def test_confidence_bounds_clamped() -> None:
    """Test confidence filters are clamped to 0-100."""
    params = QueryParameters(min_confidence="-10", max_confidence="150")
    assert params.min_confidence == 0
    assert params.max_confidence == 100


def test_flags() -> None:
    """Test boolean flags accept common truthy spellings."""
    assert QueryParameters(urgent_only="true").urgent_only is True
    assert QueryParameters(urgent_only="YES").urgent_only is True
    assert QueryParameters(urgent_only="maybe").urgent_only is False
    assert QueryParameters(include_alternatives="1").include_alternatives is True


def test_tags_normalized() -> None:
    """Test tags are trimmed, lowercased and de-duplicated."""
    assert QueryParameters(tags="A, b,,c,a").tags == frozenset({"a", "b", "c"})


def test_since_parsing() -> None:
    """Test ISO timestamps parse and junk is ignored."""
    params = QueryParameters(since="2024-01-01T00:00:00Z")
    assert params.since == datetime(2024, 1, 1, tzinfo=timezone.utc)

    naive = QueryParameters(since="2024-01-01T00:00:00")
    assert naive.since.tzinfo is not None

    assert QueryParameters(since="not-a-date").since is None


def test_sort_field_parsing() -> None:
    """Test sort field names parse."""
    assert QueryParameters(sort_by="risk").sort_by == SortField.RISK


def test_enum_or_default() -> None:
    """Test enum lookup helper."""
    assert enum_or_default(AgentPersona, " Governor ", None) == AgentPersona.GOVERNOR
    assert enum_or_default(AgentPersona, AgentPersona.MARKETS, None) == AgentPersona.MARKETS
    assert enum_or_default(AgentPersona, "robot", AgentPersona.OPERATIONS) == AgentPersona.OPERATIONS


def test_camel_case_serialization() -> None:
    """Test models dump camelCase and accept either spelling."""
    trust = TrustMathematics(
        confidence_score=90, witness_count=4, deviation_sigma=0.7, exceeds_threshold=True, trust_grade="excellent"
    )
    dumped = trust.model_dump(by_alias=True, mode="json")

    assert dumped["confidenceScore"] == 90
    assert dumped["trustGrade"] == "excellent"
    assert TrustMathematics(**dumped).trust_grade == TrustGrade.EXCELLENT


def test_graph_edge_aliases() -> None:
    """Test graph edges use from/to on the wire."""
    edge = GraphEdge(source="a", target="b", type="same-agent")
    assert edge.model_dump(by_alias=True) == {"from": "a", "to": "b", "type": "same-agent"}
