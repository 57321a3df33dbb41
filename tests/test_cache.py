"""Analysis cache tests: TTL, LRU eviction, sweeping and disposal."""

import time

import pytest

from vibeguard.cache import AnalysisCache, AnalysisResult, Fingerprint


def result_for(text, language_id="javascript", findings=()):
    return AnalysisResult(fingerprint=Fingerprint.of(text, language_id), findings=tuple(findings))


class TestFingerprint:

    def test_same_text_same_fingerprint(self):
        assert Fingerprint.of("abc", "python") == Fingerprint.of("abc", "python")

    def test_language_is_part_of_identity(self):
        """Identical text in another language is a different document version."""
        assert Fingerprint.of("abc", "python") != Fingerprint.of("abc", "javascript")

    def test_lone_surrogates_are_hashable(self):
        assert Fingerprint.of("\ud800", "python").content_hash


class TestLookup:

    def test_miss_then_hit(self, cache):
        result = result_for("a = 1")

        assert cache.get("doc", result.fingerprint) is None
        cache.put("doc", result)
        assert cache.get("doc", result.fingerprint) is result

        stats = cache.get_stats()
        assert (stats["hits"], stats["misses"], stats["writes"]) == (1, 1, 1)
        assert stats["hit_rate"] == 0.5

    def test_key_includes_document_id(self, cache):
        """The same content under another uri is not shared."""
        result = result_for("a = 1")
        cache.put("first", result)

        assert cache.get("second", result.fingerprint) is None

    def test_changed_content_misses(self, cache):
        cache.put("doc", result_for("a = 1"))

        assert cache.get("doc", Fingerprint.of("a = 2", "javascript")) is None

    def test_create_stamps_cache_clock(self, cache, clock):
        """Results built by the cache carry its clock, not the wall clock."""
        clock.advance(5)

        result = cache.create(Fingerprint.of("a = 1", "javascript"), [])

        assert result.created_at == 1005.0
        assert result.findings == ()

    def test_invalidate_drops_all_versions(self, cache):
        cache.put("doc", result_for("v1"))
        cache.put("doc", result_for("v2"))
        cache.put("other", result_for("v1"))

        assert cache.invalidate("doc") == 2
        assert len(cache) == 1


class TestExpiry:
    """Entries expire ttl seconds after insertion."""

    def test_entry_expires_after_ttl(self, cache, clock):
        result = result_for("a = 1")
        cache.put("doc", result)

        clock.advance(59)
        assert cache.get("doc", result.fingerprint) is result

        clock.advance(1)
        assert cache.get("doc", result.fingerprint) is None
        assert cache.get_stats()["expirations"] == 1

    def test_access_does_not_extend_lifetime(self, cache, clock):
        """Hits do not refresh the insertion time."""
        result = result_for("a = 1")
        cache.put("doc", result)

        for _ in range(5):
            clock.advance(11)
            assert cache.get("doc", result.fingerprint) is result

        clock.advance(5)
        assert cache.get("doc", result.fingerprint) is None

    def test_sweep_removes_expired_entries(self, cache, clock):
        cache.put("old", result_for("old"))
        clock.advance(30)
        cache.put("new", result_for("new"))
        clock.advance(31)

        assert cache.sweep() == 1
        assert len(cache) == 1


class TestEviction:

    def test_least_recently_used_is_evicted(self, clock):
        """Reading an entry protects it from the next eviction."""
        cache = AnalysisCache(ttl=60.0, capacity=2, sweep_interval=None, clock=clock)
        a, b, c = result_for("a"), result_for("b"), result_for("c")
        cache.put("a", a)
        cache.put("b", b)
        cache.get("a", a.fingerprint)
        cache.put("c", c)

        assert cache.get("b", b.fingerprint) is None
        assert cache.get("a", a.fingerprint) is a
        assert cache.get("c", c.fingerprint) is c
        assert cache.get_stats()["evictions"] == 1
        cache.dispose()

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            AnalysisCache(capacity=0, sweep_interval=None)


class TestDisposal:

    def test_sweeper_thread_removes_entries(self, clock):
        """The background sweeper expires entries without any lookup."""
        cache = AnalysisCache(ttl=1.0, capacity=10, sweep_interval=0.01, clock=clock)
        cache.put("doc", result_for("a"))
        clock.advance(2)

        deadline = time.monotonic() + 2
        while len(cache) and time.monotonic() < deadline:
            time.sleep(0.01)

        assert len(cache) == 0
        cache.dispose()

    def test_dispose_stops_sweeper_and_clears(self, clock):
        cache = AnalysisCache(ttl=60.0, capacity=10, sweep_interval=0.01, clock=clock)
        sweeper = cache._sweeper
        cache.put("doc", result_for("a"))

        cache.dispose()

        assert cache.disposed
        assert len(cache) == 0
        assert not sweeper.is_alive()

    def test_put_after_dispose_is_ignored(self, cache):
        cache.dispose()
        cache.put("doc", result_for("a"))

        assert len(cache) == 0

    def test_context_manager_disposes(self, clock):
        with AnalysisCache(sweep_interval=None, clock=clock) as cache:
            cache.put("doc", result_for("a"))

        assert cache.disposed
