"""Tests for the seeded random source."""

import pytest

from agentlens.engine.random_source import SeededRandom


def test_same_seed_same_sequence() -> None:
    """Test that equal seeds produce identical draws."""
    first = SeededRandom(7)
    second = SeededRandom(7)

    draws_a = [first.next_float() for _ in range(20)] + [first.randint(0, 100) for _ in range(20)]
    draws_b = [second.next_float() for _ in range(20)] + [second.randint(0, 100) for _ in range(20)]

    assert draws_a == draws_b


def test_different_seeds_diverge() -> None:
    """Test that different seeds produce different streams."""
    first = [SeededRandom(1).next_float() for _ in range(5)]
    second = [SeededRandom(2).next_float() for _ in range(5)]
    assert first != second


def test_randint_inclusive_bounds() -> None:
    """Test randint stays within inclusive bounds and tolerates swapped bounds."""
    rng = SeededRandom(3)
    values = {rng.randint(1, 3) for _ in range(200)}
    assert values == {1, 2, 3}

    assert all(5 <= rng.randint(10, 5) <= 10 for _ in range(50))


def test_next_float_range() -> None:
    """Test floats fall in [0, 1)."""
    rng = SeededRandom(11)
    assert all(0.0 <= rng.next_float() < 1.0 for _ in range(500))


def test_choice_empty_raises() -> None:
    """Test choosing from nothing is an error."""
    with pytest.raises(ValueError, match="empty"):
        SeededRandom(1).choice([])


def test_choice_weight_mismatch_raises() -> None:
    """Test weights must line up with items."""
    with pytest.raises(ValueError, match="Expected 2 weights"):
        SeededRandom(1).choice(["a", "b"], weights=[1.0])


def test_choice_non_positive_weights_raise() -> None:
    """Test all-zero weights are rejected."""
    with pytest.raises(ValueError, match="positive"):
        SeededRandom(1).choice(["a", "b"], weights=[0, 0])


def test_weighted_choice_respects_zero_weight() -> None:
    """Test an item with zero weight is never picked."""
    rng = SeededRandom(5)
    picks = {rng.choice(["never", "always"], weights=[0, 1]) for _ in range(100)}
    assert picks == {"always"}


def test_boolean_extremes() -> None:
    """Test probability 0 is always False and 1 always True."""
    rng = SeededRandom(9)
    assert not any(rng.boolean(0.0) for _ in range(100))
    assert all(rng.boolean(1.0) for _ in range(100))
