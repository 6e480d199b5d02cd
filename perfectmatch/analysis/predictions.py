"""
Prediction check.

A player's predicted pairing can only be scored once the evidence pins
down a single Solution. Until then the check reports how many Solutions
remain and gives no score.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..domain import Season, Solution


@dataclass(frozen=True)
class PredictionCheck:
    """Result of comparing a prediction with the solved season."""
    final: bool
    solution_count: int
    total: int
    correct: Optional[int] = None
    correct_pairs: tuple[str, ...] = ()

    @property
    def summary(self) -> str:
        if not self.final:
            return (
                f"{self.solution_count} possible solutions remain, "
                f"a final check is not possible yet"
            )
        return f"{self.correct} of {self.total} perfect matches predicted correctly"


def check_predictions(
    season: Season,
    predictions: dict[str, str],
    solutions: Sequence[Solution],
) -> PredictionCheck:
    """
    Score predictions (man id -> woman id) against a unique Solution.

    Ids must already be canonical; see ingestion.snapshot.canonical_id.
    """
    total = min(len(season.men), len(season.women))
    if len(solutions) != 1:
        return PredictionCheck(final=False, solution_count=len(solutions), total=total)

    mapping = solutions[0].mapping
    hits = tuple(
        f"{man}-{woman}"
        for man, woman in sorted(predictions.items())
        if mapping.get(man) == woman
    )
    return PredictionCheck(
        final=True,
        solution_count=1,
        total=total,
        correct=len(hits),
        correct_pairs=hits,
    )
