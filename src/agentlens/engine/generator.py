"""Base decision event generator.

Produces a batch of plausible agent decisions for the four personas.

Per-event draw order (fixed, so seeded batches are reproducible):
1. Persona
2. Timestamp offset within the generation window
3. Active flag, violation flag, coordination flag
4. Confidence tier and value
5. Impact label
6. Maintenance flag (sentinel only)
7. Summary text
8. Constraint and input counts

Design Philosophy:
- Total: every count yields a batch, nothing raises
- Violations always force the low confidence band and critical impact
- Output sorted newest first (stable)
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, List

from agentlens.engine.random_source import SeededRandom
from agentlens.engine.trust import DEFAULT_TRUST_CONFIG, TrustConfig
from agentlens.models import AgentPersona, DecisionEvent, DecisionImpact

logger = logging.getLogger(__name__)

PERSONAS: List[AgentPersona] = list(AgentPersona)

SUMMARY_BANK: Dict[AgentPersona, List[str]] = {
    AgentPersona.OPERATIONS: [
        "Increased battery discharge rate to meet peak demand surge",
        "Optimized solar panel tilt angle for maximum afternoon capture",
        "Initiated grid sell-back during high wholesale pricing window",
        "Reduced inverter load to prevent thermal stress during heatwave",
        "Activated demand response protocol for grid stabilization event",
    ],
    AgentPersona.MARKETS: [
        "Executed token sale at optimal liquidity depth on Jupiter",
        "Adjusted pricing strategy based on competitor analysis",
        "Hedged energy exposure through futures contracts",
        "Increased reserve holdings ahead of volatility forecast",
        "Rebalanced portfolio to optimize yield vs risk ratio",
    ],
    AgentPersona.SENTINEL: [
        "Detected early-stage degradation in Panel Array B efficiency",
        "Scheduled preventive maintenance for inverter cooling system",
        "Identified anomalous vibration pattern in tracker motor 3",
        "Confirmed all safety interlocks operational after storm event",
        "Updated firmware on 12 IoT sensors to patch security vulnerability",
    ],
    AgentPersona.GOVERNOR: [
        "Enforced maximum discharge constraint during low SOC period",
        "Approved emergency override request with full audit trail",
        "Blocked risky trade execution exceeding volatility threshold",
        "Validated compliance with grid interconnection agreement",
        "Triggered safety shutdown due to temperature exceedance",
    ],
}

COORDINATION_BANK: Dict[AgentPersona, List[str]] = {
    AgentPersona.OPERATIONS: [
        "Coordinated with Markets agent to optimize battery discharge timing for peak pricing",
        "Synchronized with Sentinel agent on panel maintenance scheduling to minimize revenue impact",
        "Collaborated with Governor agent to balance energy dispatch within safety constraints",
    ],
    AgentPersona.MARKETS: [
        "Coordinated with Operations agent for synchronized sell timing during high generation",
        "Aligned with Governor agent on risk-adjusted position sizing for volatility management",
        "Synchronized with Operations agent on battery charge scheduling for arbitrage opportunities",
    ],
    AgentPersona.SENTINEL: [
        "Escalated critical battery temperature alert to Governor agent for safety enforcement",
        "Coordinated with Operations agent to schedule maintenance during low-generation forecast",
        "Collaborated with Governor agent on firmware update approval for security compliance",
    ],
    AgentPersona.GOVERNOR: [
        "Enforced discharge limits in coordination with Operations agent during low SOC event",
        "Approved Markets agent trade execution after multi-sig consensus validation",
        "Coordinated with Sentinel agent on emergency shutdown protocol during sensor anomaly",
    ],
}

ACTIVE_PROBABILITY = 0.3
VIOLATION_PROBABILITY = 0.1
COORDINATION_PROBABILITY = 0.2
LOW_CONFIDENCE_PROBABILITY = 0.15
MAINTENANCE_PROBABILITY = 0.2
MAX_NORMAL_CONFIDENCE = 98


def make_decision_id(agent: AgentPersona, timestamp: datetime, index: int) -> str:
    """Build an id whose second dash-separated segment is the persona."""
    epoch_ms = int(timestamp.timestamp() * 1000)
    return f"decision-{agent.value}-{epoch_ms}-{index}"


class DecisionGenerator:
    """Generates batches of base decision events from a seeded stream."""

    def __init__(
        self,
        rng: SeededRandom,
        window_sec: int = 7200,
        trust_config: TrustConfig = DEFAULT_TRUST_CONFIG,
    ) -> None:
        """Initialize generator.

        Args:
            rng: Random source; the generator consumes it in a fixed order
            window_sec: How far back timestamps may reach
            trust_config: Thresholds bounding the confidence tiers
        """
        self.rng = rng
        self.window_sec = max(0, window_sec)
        self.trust_config = trust_config

    def generate_batch(self, count: int, now: datetime) -> List[DecisionEvent]:
        """Generate ``count`` events with timestamps at or before ``now``.

        Args:
            count: Number of events (non-positive counts yield an empty list)
            now: Reference time (timezone-aware)

        Returns:
            Events sorted by timestamp, newest first
        """
        events = [self._generate_event(index, now) for index in range(max(0, count))]
        events.sort(key=lambda event: event.timestamp, reverse=True)
        logger.debug("Generated %d base decision events", len(events))
        return events

    def _generate_event(self, index: int, now: datetime) -> DecisionEvent:
        rng = self.rng
        agent = rng.choice(PERSONAS)
        timestamp = now - timedelta(seconds=rng.randint(0, self.window_sec))

        is_active = rng.boolean(ACTIVE_PROBABILITY)
        has_violation = rng.boolean(VIOLATION_PROBABILITY)
        is_coordinated = rng.boolean(COORDINATION_PROBABILITY)

        confidence = self._sample_confidence(has_violation)
        impact = self._derive_impact(confidence, has_violation)

        # Only sentinel draws for maintenance
        is_in_maintenance = agent == AgentPersona.SENTINEL and rng.boolean(MAINTENANCE_PROBABILITY)

        if is_coordinated:
            summary = rng.choice(COORDINATION_BANK[agent])
        else:
            summary = rng.choice(SUMMARY_BANK[agent])

        return DecisionEvent(
            id=make_decision_id(agent, timestamp, index),
            agent=agent,
            summary=summary,
            confidence=confidence,
            timestamp=timestamp,
            impact=impact,
            is_active=is_active,
            constraints_count=rng.randint(3, 8),
            inputs_count=rng.randint(5, 15),
            has_constraint_violations=has_violation,
            is_in_maintenance=is_in_maintenance,
            is_coordinated=is_coordinated,
        )

    def _sample_confidence(self, has_violation: bool) -> int:
        """Sample confidence from the violation, low or normal band."""
        config = self.trust_config
        if has_violation:
            return self.rng.randint(config.poor, max(config.poor, config.fair - 5))
        if self.rng.boolean(LOW_CONFIDENCE_PROBABILITY):
            return self.rng.randint(config.fair, max(config.fair, config.good - 5))
        return self.rng.randint(config.good, max(config.good, MAX_NORMAL_CONFIDENCE))

    def _derive_impact(self, confidence: int, has_violation: bool) -> DecisionImpact:
        """Initial impact label; trends downward as confidence rises."""
        if has_violation:
            return DecisionImpact.CRITICAL
        if confidence >= self.trust_config.excellent:
            return self.rng.choice([DecisionImpact.LOW, DecisionImpact.MEDIUM, DecisionImpact.HIGH])
        if confidence >= self.trust_config.good:
            return self.rng.choice([DecisionImpact.MEDIUM, DecisionImpact.HIGH])
        return DecisionImpact.HIGH
