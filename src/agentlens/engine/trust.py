"""Trust mathematics and temporal decay.

Trust Ladder (confidence -> grade):
1. excellent: >= 90
2. good: >= 70
3. fair: >= 50
4. poor: >= 30
5. suspect: below poor

Design Philosophy:
- Thresholds live in one frozen config object shared with the generator
- Decay is a pure exponential of age: 100 at age zero, strictly decreasing
- Random draws come only from the injected SeededRandom
"""

from dataclasses import dataclass
from typing import List

from agentlens.config import Settings
from agentlens.engine.random_source import SeededRandom
from agentlens.models import AgingCurve, HealthDegradation, TrustGrade, TrustMathematics


@dataclass(frozen=True)
class TrustConfig:
    """Threshold ladder and decay constant for trust calculations."""

    excellent: int = 90
    good: int = 70
    fair: int = 50
    poor: int = 30
    decay_rate: float = 0.8

    def __post_init__(self) -> None:
        if not (self.excellent >= self.good >= self.fair >= self.poor):
            raise ValueError(
                "Trust thresholds must be ordered excellent >= good >= fair >= poor, "
                f"got {self.excellent}/{self.good}/{self.fair}/{self.poor}"
            )
        if not 0.0 < self.decay_rate < 1.0:
            raise ValueError(f"Decay rate must be in (0, 1), got {self.decay_rate}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "TrustConfig":
        return cls(
            excellent=settings.trust_excellent_threshold,
            good=settings.trust_good_threshold,
            fair=settings.trust_fair_threshold,
            poor=settings.trust_poor_threshold,
            decay_rate=settings.trust_decay_rate,
        )


DEFAULT_TRUST_CONFIG = TrustConfig()


def calculate_trust_grade(confidence: float, config: TrustConfig = DEFAULT_TRUST_CONFIG) -> TrustGrade:
    """Map confidence to a trust grade.

    Args:
        confidence: Confidence (0-100)
        config: Threshold ladder

    Returns:
        Trust grade; never decreases as confidence rises
    """
    if confidence >= config.excellent:
        return TrustGrade.EXCELLENT
    elif confidence >= config.good:
        return TrustGrade.GOOD
    elif confidence >= config.fair:
        return TrustGrade.FAIR
    elif confidence >= config.poor:
        return TrustGrade.POOR
    else:
        return TrustGrade.SUSPECT


def calculate_trust_decay(age_sec: float, decay_rate: float = DEFAULT_TRUST_CONFIG.decay_rate) -> float:
    """Remaining trust after ``age_sec`` seconds.

    decay = rate ** (age_minutes) * 100

    Args:
        age_sec: Age in seconds (negative ages are treated as zero)
        decay_rate: Per-minute retention factor in (0, 1)

    Returns:
        Remaining trust percentage in (0, 100]
    """
    age_min = max(0.0, age_sec) / 60.0
    return (decay_rate ** age_min) * 100.0


def generate_trust_mathematics(
    confidence: int,
    sources: List[str],
    rng: SeededRandom,
    config: TrustConfig = DEFAULT_TRUST_CONFIG,
) -> TrustMathematics:
    """Build the trust block for a decision.

    Sigma is drawn narrower for high-confidence decisions, simulating
    tighter agreement between witnesses.
    """
    if confidence >= config.excellent:
        sigma = rng.uniform(0.5, 1.0)
    else:
        sigma = rng.uniform(1.0, 2.5)

    return TrustMathematics(
        confidence_score=confidence,
        witness_count=len(sources),
        deviation_sigma=round(sigma, 2),
        exceeds_threshold=confidence >= config.good,
        trust_grade=calculate_trust_grade(confidence, config),
    )


def calculate_health_degradation(age_sec: int, trust_decay_percent: float) -> HealthDegradation:
    """Estimate how quickly a decision's supporting evidence goes stale.

    Args:
        age_sec: Decision age in seconds
        trust_decay_percent: Remaining trust from calculate_trust_decay

    Returns:
        Health score, hourly degradation rate and aging curve
    """
    lost_trust = 100.0 - trust_decay_percent
    current_health = max(0.0, min(100.0, trust_decay_percent - age_sec / 360.0))
    rate_per_hour = lost_trust / max(1.0, age_sec / 3600.0)
    validity_hours = current_health / max(0.1, rate_per_hour)

    if rate_per_hour > 5:
        curve = AgingCurve.EXPONENTIAL
    elif rate_per_hour < 2:
        curve = AgingCurve.LOGARITHMIC
    else:
        curve = AgingCurve.LINEAR

    return HealthDegradation(
        current_health_score=int(current_health),
        degradation_rate_per_hour=int(rate_per_hour * 10) / 10,
        estimated_validity_hours=int(validity_hours),
        aging_curve=curve,
    )
