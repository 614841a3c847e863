"""
Mastery-weighted sampling without replacement.

Each remaining candidate is weighted by ``(6 - box) ** 2`` so a box-1 item
is 25x more likely per draw than a box-5 item. Weights are recomputed over
the shrinking pool on every draw.
"""

from __future__ import annotations

import random
from collections.abc import Callable, Hashable, Mapping, Sequence
from typing import TypeVar

from loguru import logger

MIN_BOX = 1
MAX_BOX = 5

T = TypeVar("T")


def clamp_box(box: int) -> int:
    """Clamp a mastery level into [MIN_BOX, MAX_BOX]."""
    return min(max(box, MIN_BOX), MAX_BOX)


def get_box(mastery: Mapping[Hashable, int], item_id: Hashable) -> int:
    """Current box for an id; absent (or falsy) entries count as box 1."""
    return clamp_box(mastery.get(item_id) or MIN_BOX)


def weight_for_box(box: int) -> int:
    """Selection weight for a mastery box."""
    w = (MAX_BOX + 1) - clamp_box(box)
    return w * w


def sample_by_weight(
    candidates: Sequence[T],
    mastery: Mapping[Hashable, int],
    k: int,
    rng: random.Random,
    key: Callable[[T], Hashable] | None = None,
) -> list[T]:
    """
    Draw up to k candidates without replacement, biased toward low mastery.

    Args:
        candidates: Ordered candidate pool (order matters for reproducibility)
        mastery: Mastery map keyed by ``key(candidate)``
        k: Number of draws
        rng: Injected random source
        key: Maps a candidate to its mastery identity (defaults to itself)

    Returns:
        Drawn candidates in draw order; the whole pool if k exceeds it
    """
    key = key or (lambda c: c)
    pool = list(candidates)
    picked: list[T] = []

    while pool and len(picked) < k:
        weights = [weight_for_box(get_box(mastery, key(c))) for c in pool]
        total = sum(weights)
        cursor = rng.random() * total

        idx = len(pool) - 1
        acc = 0
        for i, w in enumerate(weights):
            acc += w
            if cursor < acc:
                idx = i
                break

        picked.append(pool.pop(idx))

    if len(picked) < k:
        logger.debug(f"Sampler pool exhausted: wanted {k}, drew {len(picked)}")

    return picked
