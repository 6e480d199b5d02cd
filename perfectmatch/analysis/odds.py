"""
Pair probabilities.

For every pair seen at a matching night or a truth booth:

    probability = 100 * (Solutions containing the pair) / (all Solutions)

Confirmed matches are fixed at 100. Every Solution counts once; no
weighting, no smoothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..domain import PairKey, Season, Solution
from ..solver.evidence import classify_evidence


@dataclass(frozen=True)
class PairOdds:
    """Share of consistent Solutions in which a pair is a perfect match."""
    pair: PairKey
    probability: float
    solution_count: int
    confirmed: bool = False

    @property
    def certain(self) -> bool:
        return self.probability == 100.0


def compute_pair_odds(season: Season, solutions: Sequence[Solution]) -> list[PairOdds]:
    """
    Probability of every observed pair, highest first.

    Returns an empty list when there are no Solutions to weigh.
    """
    if not solutions:
        return []

    forced = classify_evidence(season.tests).forced
    total = len(solutions)
    odds = []
    for pair in season.observed_pairs():
        count = sum(1 for solution in solutions if pair in solution)
        confirmed = pair in forced
        probability = 100.0 if confirmed else 100.0 * count / total
        odds.append(PairOdds(pair, probability, count, confirmed))

    odds.sort(key=lambda o: (-o.probability, o.pair))
    return odds
