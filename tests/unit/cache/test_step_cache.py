"""Unit tests for the step response cache."""

import pytest

from litefetch.cache import StepCache, fingerprint
from litefetch.config import CacheConfig


@pytest.fixture
def cache(clock) -> StepCache:
    """Default-sized cache on the fake clock."""
    return StepCache(clock=clock)


class TestFreshness:
    """Tests for TTL handling."""

    def test_hit_within_ttl(self, cache, clock):
        """Test an entry younger than the TTL is served."""
        cache.put("k", "body")
        clock.advance(299)

        found = cache.lookup("k", 5)

        assert found.hit
        assert found.result == "hit"
        assert found.entry.body == "body"
        assert found.age_seconds == pytest.approx(299)

    def test_expired_entry_evicted(self, cache, clock):
        """Test a stale entry is dropped on lookup."""
        cache.put("k", "body")
        clock.advance(6 * 60)

        assert cache.lookup("k", 5).result == "expired"
        assert "k" not in cache

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_non_positive_ttl_never_hits(self, cache, ttl):
        """Test cache_minutes <= 0 disables reads."""
        cache.put("k", "body")
        assert cache.get("k", ttl) is None
        assert cache.stats()["misses"] == 0

    def test_reads_do_not_refresh(self, cache, clock):
        """Test age is measured from the write, not the last read."""
        cache.put("k", "body")
        clock.advance(50)
        cache.get("k", 1)
        clock.advance(15)
        assert cache.get("k", 1) is None


class TestBounds:
    """Tests for size limits and eviction."""

    def test_eviction_bound(self, clock):
        """Test inserting past capacity never exceeds max_entries."""
        cache = StepCache(CacheConfig(max_entries=100), clock=clock)
        for i in range(250):
            cache.put(f"k{i}", "x")
            clock.advance(1)
            assert len(cache) <= 100

    def test_evicts_oldest_fifth(self, clock):
        """Test the oldest 20% by timestamp are evicted first."""
        cache = StepCache(CacheConfig(max_entries=10), clock=clock)
        for i in range(10):
            cache.put(f"k{i}", "x")
            clock.advance(1)

        cache.put("new", "x")

        assert len(cache) == 9
        assert "k0" not in cache and "k1" not in cache
        assert all(f"k{i}" in cache for i in range(2, 10))
        assert cache.stats()["evictions"] == 2

    def test_overwrite_does_not_evict(self, clock):
        cache = StepCache(CacheConfig(max_entries=2), clock=clock)
        cache.put("a", "1")
        cache.put("b", "1")
        cache.put("a", "2")
        assert len(cache) == 2
        assert cache.get("a", 1) == "2"

    def test_oversized_body_rejected(self, clock, logger, log_output):
        """Test bodies above max_body_bytes are not stored."""
        cache = StepCache(CacheConfig(max_body_bytes=4), clock=clock, logger=logger)

        assert cache.put("small", "abcd")
        assert not cache.put("big", "ééé")  # 6 bytes in UTF-8

        assert "big" not in cache
        assert cache.stats()["rejected"] == 1
        assert "cache_rejected" in log_output.getvalue()


class TestClear:
    """Tests for clear()."""

    def test_clear_prefix(self, cache):
        cache.put("a_s1_x", "1")
        cache.put("a.0_s1_x", "1")
        cache.put("b_s1_x", "1")

        assert cache.clear("a_") == 1
        assert "a.0_s1_x" in cache
        assert cache.clear() == 2
        assert len(cache) == 0


class TestFingerprint:
    """Tests for fingerprint()."""

    def test_deterministic(self):
        assert fingerprint("i", "s", "https://x", "b") == fingerprint("i", "s", "https://x", "b")

    def test_components_distinguish(self):
        """Test every component changes the key."""
        base = fingerprint("i", "s", "https://x", "")
        assert base.startswith("i_s_")
        assert fingerprint("i.0", "s", "https://x", "") != base
        assert fingerprint("i", "t", "https://x", "") != base
        assert fingerprint("i", "s", "https://y", "") != base
        assert fingerprint("i", "s", "https://x", "{}") != base

    def test_no_concatenation_collisions(self):
        assert fingerprint("i", "s", "ab", "c") != fingerprint("i", "s", "a", "bc")
