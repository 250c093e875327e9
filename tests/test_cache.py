"""Tests for the decision page cache."""

from agentlens.engine.cache import DecisionCache
from agentlens.models import QueryParameters


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def test_miss_then_hit() -> None:
    """Test a stored value is served until it expires."""
    clock = FakeClock()
    cache = DecisionCache(ttl_seconds=30, stale_after_seconds=300, clock=clock)

    assert cache.get("key") is None
    cache.set("key", "page")
    assert cache.get("key") == "page"

    clock.advance(29.9)
    assert cache.get("key") == "page"


def test_entry_expires_at_ttl() -> None:
    """Test an entry is not served once it reaches the TTL."""
    clock = FakeClock()
    cache = DecisionCache(ttl_seconds=30, stale_after_seconds=300, clock=clock)
    cache.set("key", "page")

    clock.advance(30)

    assert cache.get("key") is None
    # Expired but not yet stale
    assert len(cache) == 1


def test_set_sweeps_stale_entries() -> None:
    """Test writes evict entries past the staleness horizon."""
    clock = FakeClock()
    cache = DecisionCache(ttl_seconds=30, stale_after_seconds=300, clock=clock)
    cache.set("old", 1)

    clock.advance(301)
    cache.set("new", 2)

    assert len(cache) == 1
    assert cache.get("new") == 2


def test_sweep_returns_removed_count() -> None:
    """Test an explicit sweep reports what it removed."""
    clock = FakeClock()
    cache = DecisionCache(ttl_seconds=30, stale_after_seconds=60, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)

    clock.advance(61)

    assert cache.sweep() == 2
    assert len(cache) == 0


def test_clear() -> None:
    """Test clearing empties the cache."""
    cache = DecisionCache()
    cache.set("a", 1)
    cache.clear()
    assert len(cache) == 0


def test_key_ignores_tag_order_and_spelling() -> None:
    """Test equivalent parameters share a key."""
    first = QueryParameters(agent="Markets", tags="b,a", limit="20")
    second = QueryParameters(agent="markets", tags="A, B", limit=20)

    assert DecisionCache.make_key(first) == DecisionCache.make_key(second)


def test_key_includes_cursor_and_flags() -> None:
    """Test parameters that shape the page change the key."""
    base = DecisionCache.make_key(QueryParameters())

    assert DecisionCache.make_key(QueryParameters(cursor="20")) != base
    assert DecisionCache.make_key(QueryParameters(include_replay="true")) != base
    assert DecisionCache.make_key(QueryParameters(format="full")) != base
