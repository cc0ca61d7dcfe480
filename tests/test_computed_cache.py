"""Tests for the computed-artifact cache."""

import threading
import time

import pytest

from page_audit.computed import NetworkRecords
from page_audit.core.artifacts import Artifacts
from page_audit.core.computed import ComputedArtifact, ComputedArtifactCache
from page_audit.core.errors import UsageError
from tests.helpers import make_artifacts


class CountingArtifact(ComputedArtifact):
    name = "Counting"
    calls = 0

    @classmethod
    def compute(cls, source, cache):
        cls.calls += 1
        return len(source)


@pytest.fixture(autouse=True)
def reset_counter():
    CountingArtifact.calls = 0


class TestComputedArtifactCache:
    """Memoization keyed by the identity of the source."""

    @pytest.mark.unit
    def test_computes_once_per_source(self):
        cache = ComputedArtifactCache()
        artifacts = make_artifacts()

        first = CountingArtifact.request(artifacts, cache)
        second = CountingArtifact.request(artifacts, cache)

        assert first == second
        assert CountingArtifact.calls == 1
        assert cache.computations == 1
        assert (CountingArtifact.name, artifacts) in cache

    @pytest.mark.unit
    def test_equal_sources_are_cached_separately(self):
        cache = ComputedArtifactCache()
        data = {"DOMStats": {"total_elements": 1}}
        first, second = Artifacts(data), Artifacts(data)

        CountingArtifact.request(first, cache)
        CountingArtifact.request(second, cache)

        assert CountingArtifact.calls == 2
        assert len(cache) == 2

    @pytest.mark.unit
    def test_tuple_sources_use_member_identity(self):
        cache = ComputedArtifactCache()
        log = [{"event": "request"}]
        copy = [{"event": "request"}]

        cache.get("Pair", (log, "x"), compute=lambda source, _: len(source[0]))
        cache.get("Pair", (log, "x"), compute=lambda source, _: len(source[0]))
        cache.get("Pair", (copy, "x"), compute=lambda source, _: len(source[0]))

        assert cache.computations == 2

    @pytest.mark.unit
    def test_lookup_by_registered_name(self, artifacts):
        cache = ComputedArtifactCache()

        records = cache.get("NetworkRecords", artifacts)

        assert records is NetworkRecords.request(artifacts, cache)
        assert cache.computations == 1

    @pytest.mark.unit
    def test_unknown_name(self, artifacts):
        with pytest.raises(UsageError, match="Unknown computed artifact"):
            ComputedArtifactCache().get("NoSuchThing", artifacts)

    @pytest.mark.unit
    def test_failures_are_memoized(self, artifacts):
        cache = ComputedArtifactCache()
        calls = []

        def explode(source, _):
            calls.append(source)
            raise ValueError("bad timeline")

        for _ in range(3):
            with pytest.raises(ValueError, match="bad timeline"):
                cache.get("Exploding", artifacts, compute=explode)

        assert len(calls) == 1

    @pytest.mark.unit
    def test_interrupted_computation_is_not_memoized(self, artifacts):
        cache = ComputedArtifactCache()
        calls = []

        def interrupted_once(source, _):
            calls.append(source)
            if len(calls) == 1:
                raise KeyboardInterrupt
            return "timeline"

        with pytest.raises(KeyboardInterrupt):
            cache.get("Interrupted", artifacts, compute=interrupted_once)
        assert ("Interrupted", artifacts) not in cache

        assert cache.get("Interrupted", artifacts, compute=interrupted_once) == "timeline"
        assert cache.get("Interrupted", artifacts, compute=interrupted_once) == "timeline"
        assert len(calls) == 2

    @pytest.mark.unit
    def test_waiter_recomputes_after_interruption(self, artifacts):
        cache = ComputedArtifactCache()
        started = threading.Event()
        calls = []

        def slow_then_interrupted(source, _):
            calls.append(source)
            if len(calls) == 1:
                started.set()
                time.sleep(0.05)
                raise KeyboardInterrupt
            return "timeline"

        def owner():
            with pytest.raises(KeyboardInterrupt):
                cache.get("Slow", artifacts, compute=slow_then_interrupted)

        owner_thread = threading.Thread(target=owner)
        owner_thread.start()
        started.wait(timeout=1)

        assert cache.get("Slow", artifacts, compute=slow_then_interrupted) == "timeline"
        owner_thread.join(timeout=1)
        assert len(calls) == 2

    @pytest.mark.unit
    def test_self_dependency_is_a_usage_error(self, artifacts):
        cache = ComputedArtifactCache()

        def recursive(source, inner_cache):
            return inner_cache.get("Recursive", source, compute=recursive)

        with pytest.raises(UsageError, match="depends on itself"):
            cache.get("Recursive", artifacts, compute=recursive)

    @pytest.mark.unit
    def test_nested_computations_share_the_cache(self, artifacts):
        cache = ComputedArtifactCache()

        count = cache.get(
            "RequestCount",
            artifacts,
            compute=lambda source, c: len(NetworkRecords.request(source, c)),
        )

        assert count == 1
        assert ("NetworkRecords", artifacts) in cache
        assert cache.computations == 2

    @pytest.mark.unit
    def test_concurrent_requests_compute_once(self, artifacts):
        cache = ComputedArtifactCache()
        calls = []
        results = []

        def slow(source, _):
            calls.append(1)
            time.sleep(0.05)
            return "done"

        def worker():
            results.append(cache.get("Slow", artifacts, compute=slow))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert results == ["done"] * 8

    @pytest.mark.unit
    def test_clear(self, artifacts):
        cache = ComputedArtifactCache()
        CountingArtifact.request(artifacts, cache)
        cache.clear()
        CountingArtifact.request(artifacts, cache)

        assert CountingArtifact.calls == 2
