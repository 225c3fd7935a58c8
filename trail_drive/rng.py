"""Deterministic random utilities."""

from __future__ import annotations

import random
from typing import Callable, Sequence, TypeVar

T = TypeVar("T")


class DeterministicRNG:
    """Wraps :mod:`random` with deterministic replay support."""

    def __init__(self, seed: int) -> None:
        self._seed = seed & 0xFFFFFFFF
        # nosec B311 - deterministic pseudo-RNG acceptable for game mechanics
        self._random = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    def random(self) -> float:
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        return self._random.randint(a, b)

    def chance(self, probability: float) -> bool:
        """Return ``True`` with the given probability."""

        return self._random.random() < probability


def _default_weight(item) -> float:
    weight = getattr(item, "weight", None)
    return 1 if weight is None else weight


def weighted_pick(
    rng: DeterministicRNG,
    items: Sequence[T],
    weight: Callable[[T], float] = _default_weight,
) -> T:
    """Pick one item with probability proportional to its weight.

    Draws ``r`` uniformly from ``[0, total)`` and walks the items in order,
    subtracting each weight until the remainder drops to zero or below. Items
    without a weight count as 1.
    """

    if not items:
        raise ValueError("Cannot pick from an empty weighted list")
    weights = [weight(item) for item in items]
    total = sum(weights)
    if total <= 0:
        raise ValueError(f"Weighted list has non-positive total weight {total}")
    remainder = rng.random() * total
    for item, item_weight in zip(items, weights):
        remainder -= item_weight
        if remainder <= 0:
            return item
    return items[-1]


__all__ = ["DeterministicRNG", "weighted_pick"]
