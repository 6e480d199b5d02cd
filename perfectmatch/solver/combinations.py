"""
Combination generation for the night solver.

Enumerates every fixed-size, order-independent, duplicate-free subset
of a sequence of distinct items.
"""

from __future__ import annotations

import itertools
from typing import Hashable, Iterator, Sequence, TypeVar

T = TypeVar("T", bound=Hashable)


def iter_combinations(items: Sequence[T], k: int) -> Iterator[frozenset[T]]:
    """
    Lazily yield every k-element subset of `items`.

    Items are assumed pairwise distinct. Edge cases:
    - k == 0 yields exactly one empty subset
    - k > len(items) yields nothing
    - k == len(items) yields the whole set once

    Raises:
        ValueError: If k is negative
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    for combo in itertools.combinations(items, k):
        yield frozenset(combo)


def combinations(items: Sequence[T], k: int) -> set[frozenset[T]]:
    """Every k-element subset of `items`, as a set of frozensets."""
    return set(iter_combinations(items, k))
