"""Shared fixtures for AgentLens tests."""

from datetime import datetime, timedelta, timezone
from typing import Callable, List

import pytest

from agentlens.engine.generator import DecisionGenerator, make_decision_id
from agentlens.engine.pipeline import enrich_batch
from agentlens.engine.random_source import SeededRandom
from agentlens.models import AgentPersona, DecisionEvent, DecisionImpact, EnrichedDecision

FIXED_NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def build_event(
    agent: AgentPersona = AgentPersona.OPERATIONS,
    summary: str = "Increased battery discharge rate to meet peak demand surge",
    confidence: int = 92,
    seconds_ago: int = 600,
    impact: DecisionImpact = DecisionImpact.MEDIUM,
    index: int = 0,
    **overrides,
) -> DecisionEvent:
    timestamp = FIXED_NOW - timedelta(seconds=seconds_ago)
    return DecisionEvent(
        id=make_decision_id(agent, timestamp, index),
        agent=agent,
        summary=summary,
        confidence=confidence,
        timestamp=timestamp,
        impact=impact,
        constraints_count=5,
        inputs_count=8,
        **overrides,
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference time."""
    return FIXED_NOW


@pytest.fixture
def make_event() -> Callable[..., DecisionEvent]:
    """Factory for hand-built decision events."""
    return build_event


@pytest.fixture(scope="function")
def enriched_batch() -> List[EnrichedDecision]:
    """Sixty seeded, enriched decisions."""
    rng = SeededRandom(42)
    batch = DecisionGenerator(rng).generate_batch(60, FIXED_NOW)
    return enrich_batch(batch, rng, FIXED_NOW)
