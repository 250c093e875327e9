"""Deterministic random source for synthetic telemetry.

Design Philosophy:
- Explicit instances, never a module-level singleton
- Identical seed => identical stream, as long as call order is preserved
- Re-seeding mid-sequence is not supported (create a new instance instead)
"""

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


class SeededRandom:
    """Reproducible stream of pseudo-random draws.

    Wraps a private ``random.Random`` so that no other code in the process
    can disturb the sequence.
    """

    def __init__(self, seed: int) -> None:
        """Initialize the stream.

        Args:
            seed: Integer seed; equal seeds yield equal sequences
        """
        self.seed = seed
        self._rng = random.Random(seed)

    def next_float(self) -> float:
        """Return a float in [0, 1)."""
        return self._rng.random()

    def randint(self, minimum: int, maximum: int) -> int:
        """Return an integer in [minimum, maximum] inclusive."""
        if minimum > maximum:
            minimum, maximum = maximum, minimum
        return self._rng.randint(minimum, maximum)

    def uniform(self, minimum: float, maximum: float) -> float:
        """Return a float between minimum and maximum."""
        return self._rng.uniform(minimum, maximum)

    def choice(self, items: Sequence[T], weights: Optional[Sequence[float]] = None) -> T:
        """Pick one element, uniformly or by relative weight.

        Args:
            items: Non-empty sequence to pick from
            weights: Optional relative weights, one per item

        Returns:
            The selected element

        Raises:
            ValueError: If items is empty or weights do not match items
        """
        if not items:
            raise ValueError("Cannot choose from an empty sequence")
        if weights is None:
            return items[self._rng.randrange(len(items))]
        if len(weights) != len(items):
            raise ValueError(f"Expected {len(items)} weights, got {len(weights)}")
        total = float(sum(weights))
        if total <= 0:
            raise ValueError("Weights must sum to a positive value")

        threshold = self._rng.random() * total
        cumulative = 0.0
        for item, weight in zip(items, weights):
            cumulative += weight
            if threshold < cumulative:
                return item
        return items[-1]

    def boolean(self, probability: float = 0.5) -> bool:
        """Return True with the given probability."""
        return self._rng.random() < probability
