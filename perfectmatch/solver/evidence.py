"""
Evidence classification for the Perfect Match solver.

Truth booth verdicts split into two sets:
    forced    — confirmed pairs; present in every Solution
    forbidden — denied pairs; present in no Solution and never counted
                as correct at any matching night

No normalization beyond partitioning. Conflicting verdicts for one pair
are a structural error caught by validation, not here.
"""

from __future__ import annotations

from typing import Iterable, NamedTuple

from ..domain import BinaryTestResult, PairKey


class ClassifiedEvidence(NamedTuple):
    """Forced and forbidden pairs derived from truth booth results."""
    forced: frozenset[PairKey]
    forbidden: frozenset[PairKey]


def classify_evidence(results: Iterable[BinaryTestResult]) -> ClassifiedEvidence:
    """
    Partition binary test results into forced and forbidden pairs.

    Unpacks as a tuple: `forced, forbidden = classify_evidence(tests)`.
    """
    forced: set[PairKey] = set()
    forbidden: set[PairKey] = set()
    for result in results:
        if result.is_match:
            forced.add(result.pair)
        else:
            forbidden.add(result.pair)
    return ClassifiedEvidence(frozenset(forced), frozenset(forbidden))
