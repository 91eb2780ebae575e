"""
Unit tests for weighted sampling.
"""

import math

import pytest

from systems.sampling import WeightedSampler, weighted_choice


class TestWeightedSampler:
    """Tests for WeightedSampler.choose()."""

    def test_constant_roll_picks_second_entry(self, fixed_rng):
        """r = 0.9 over [(a, 1), (b, 3)] lands in b's range."""
        sampler = WeightedSampler()
        assert sampler.choose([("a", 1), ("b", 3)], rng=fixed_rng(0.9)) == "b"

    def test_low_roll_picks_first_entry(self, fixed_rng):
        """r = 0.1 lands in a's range."""
        sampler = WeightedSampler()
        assert sampler.choose([("a", 1), ("b", 3)], rng=fixed_rng(0.1)) == "a"

    def test_zero_total_returns_last(self, fixed_rng):
        """All-zero weights fall back to the last entry."""
        sampler = WeightedSampler()
        assert sampler.choose([("a", 0), ("b", 0), ("c", 0)], rng=fixed_rng(0.5)) == "c"

    def test_invalid_weights_count_as_zero(self, fixed_rng):
        """NaN, negative and non-numeric weights are never picked."""
        sampler = WeightedSampler()
        entries = [("nan", math.nan), ("neg", -5), ("bad", "x"), ("ok", 1)]
        for r in (0.0, 0.5, 0.999):
            assert sampler.choose(entries, rng=fixed_rng(r)) == "ok"

    def test_empty_entries_raise(self):
        """An empty table is a programming error."""
        with pytest.raises(ValueError):
            WeightedSampler().choose([])

    def test_cache_reuses_total_for_same_key(self, fixed_rng):
        """The cached total is used while the key stays the same."""
        sampler = WeightedSampler()
        sampler.choose([("a", 1), ("b", 3)], cache_key="k", rng=fixed_rng(0.5))
        assert sampler._totals["k"] == 4

        sampler.clear_cache()
        assert sampler._totals == {}

    def test_cache_is_bounded(self, fixed_rng):
        """Old keys are evicted once the cache is full."""
        sampler = WeightedSampler(max_cache_size=2)
        for key in ("k1", "k2", "k3"):
            sampler.choose([("a", 1)], cache_key=key, rng=fixed_rng(0.5))
        assert list(sampler._totals) == ["k2", "k3"]

    def test_distribution_follows_weights(self, rng):
        """Over many draws the heavier entry wins about 3 times as often."""
        counts = {"a": 0, "b": 0}
        for _ in range(4000):
            counts[weighted_choice([("a", 1), ("b", 3)], rng=rng)] += 1
        ratio = counts["b"] / counts["a"]
        assert 2.5 < ratio < 3.6
