from __future__ import annotations

import math
import random
from typing import Dict, Hashable, Optional, Sequence, Tuple, TypeVar

from engine.error_handler import get_logger

log = get_logger("sampling")

T = TypeVar("T")


def _clean_weight(weight: float) -> float:
    """Non-numeric, NaN and non-positive weights count as zero."""
    try:
        w = float(weight)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(w) or w <= 0:
        return 0.0
    return w


class WeightedSampler:
    """
    Pick one item from a list of (item, weight) pairs with probability
    proportional to its weight.

    A total-weight cache can be enabled per call by passing ``cache_key``.
    The key must encode every input that affects the weights (e.g.
    "12-True" for level 12 boss tables); the cached total is reused only
    while the key matches.

    Degenerate input: if every weight is zero (or invalid) the *last*
    item is returned instead of raising. Rolling loot must never crash a
    combat tick.
    """

    def __init__(self, max_cache_size: int = 512) -> None:
        self._totals: Dict[Hashable, float] = {}
        self.max_cache_size = max_cache_size

    def clear_cache(self) -> None:
        self._totals.clear()

    def _total(self, weights: Sequence[float], cache_key: Optional[Hashable]) -> float:
        if cache_key is not None and cache_key in self._totals:
            return self._totals[cache_key]

        total = sum(weights)
        if cache_key is not None:
            if len(self._totals) >= self.max_cache_size:
                # Drop the oldest entry (dicts keep insertion order)
                self._totals.pop(next(iter(self._totals)))
            self._totals[cache_key] = total
        return total

    def choose(
        self,
        entries: Sequence[Tuple[T, float]],
        cache_key: Optional[Hashable] = None,
        rng=None,
    ) -> T:
        """
        Args:
            entries: non-empty sequence of (item, weight)
            cache_key: optional key for the total-weight cache
            rng: object with a random() method; defaults to the random module

        Returns:
            The chosen item.
        """
        if not entries:
            raise ValueError("WeightedSampler.choose() needs at least one entry")

        rng = rng if rng is not None else random
        weights = [_clean_weight(w) for _, w in entries]
        total = self._total(weights, cache_key)

        if total <= 0:
            log.debug("All weights are zero, falling back to the last entry")
            return entries[-1][0]

        roll = rng.random() * total
        for (item, _), weight in zip(entries, weights):
            if weight <= 0:
                continue
            roll -= weight
            if roll <= 0:
                return item

        # Float drift can leave a tiny positive remainder
        return entries[-1][0]


# Shared sampler used by the item / enemy generators
default_sampler = WeightedSampler()


def weighted_choice(
    entries: Sequence[Tuple[T, float]],
    cache_key: Optional[Hashable] = None,
    rng=None,
) -> T:
    return default_sampler.choose(entries, cache_key=cache_key, rng=rng)
