"""
Assignment accumulation across matching nights.

Folds every night's candidate assignments together, starting from the
confirmed pairs, into the global set of consistent pairings.

Assignments are packed into integer bitsets over the season's pairs, and
each packed assignment carries the bitsets of the men and women it uses.
A merged assignment is injective iff it has as many men and as many
women as it has pairs, so the validity filter is three popcounts and is
applied after every merge rather than at the end.

The fold is order-independent: the surviving set is exactly the set of
injective unions of the seed with one assignment per night.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional, Sequence

from ..domain import (
    Assignment,
    PairKey,
    SeasonValidationError,
    Solution,
    ValidationRule,
    is_injective,
)
from .limits import UNLIMITED, SearchGuard

logger = logging.getLogger(__name__)


# =============================================================================
# BITSET PACKING
# =============================================================================

class PackedAssignment(NamedTuple):
    """An Assignment as bitsets of pairs, men and women."""
    pairs: int
    men: int
    women: int


class PairIndex:
    """Bit positions for every pair, man and woman seen in a fold."""

    def __init__(self, pairs: Iterable[PairKey]):
        self.keys = sorted(set(pairs))
        self._pair_bits = {pair: 1 << i for i, pair in enumerate(self.keys)}
        men = sorted({pair.man for pair in self.keys})
        women = sorted({pair.woman for pair in self.keys})
        self._man_bits = {man: 1 << i for i, man in enumerate(men)}
        self._woman_bits = {woman: 1 << i for i, woman in enumerate(women)}

    def pack(self, assignment: Iterable[PairKey]) -> PackedAssignment:
        pairs = men = women = 0
        for pair in assignment:
            pairs |= self._pair_bits[pair]
            men |= self._man_bits[pair.man]
            women |= self._woman_bits[pair.woman]
        return PackedAssignment(pairs, men, women)

    def unpack(self, packed: PackedAssignment) -> Assignment:
        found = []
        bits = packed.pairs
        while bits:
            lowest = bits & -bits
            found.append(self.keys[lowest.bit_length() - 1])
            bits ^= lowest
        return frozenset(found)


def merge_packed(a: PackedAssignment, b: PackedAssignment) -> Optional[PackedAssignment]:
    """Union of two assignments, or None if the union reuses a contestant."""
    pairs = a.pairs | b.pairs
    men = a.men | b.men
    women = a.women | b.women
    count = pairs.bit_count()
    if men.bit_count() != count or women.bit_count() != count:
        return None
    return PackedAssignment(pairs, men, women)


# =============================================================================
# FOLD
# =============================================================================

@dataclass(frozen=True)
class AccumulationResult:
    """
    Surviving assignments after folding every night.

    `exhausted_after` names the night after which nothing survived, so an
    empty result can be told apart from a season without nights.
    """
    assignments: frozenset[Assignment]
    exhausted_after: Optional[str] = None

    @property
    def contradictory(self) -> bool:
        return not self.assignments


def accumulate(
    forced: Iterable[PairKey],
    night_assignments: Sequence[Iterable[Assignment]],
    labels: Optional[Sequence[str]] = None,
    guard: Optional[SearchGuard] = None,
    log: Optional[logging.Logger] = None,
) -> AccumulationResult:
    """
    Fold per-night assignments into the global set of consistent pairings.

    Args:
        forced: Confirmed pairs, the seed of every assignment
        night_assignments: One collection of assignments per night
        labels: Night names used in logs and `exhausted_after`
        guard: Search guard enforcing size and cancellation limits
        log: Logger to trace the fold with (module logger by default)

    Returns:
        AccumulationResult with the surviving assignments

    Raises:
        SeasonValidationError: If the confirmed pairs reuse a contestant (V7)
        SearchAborted: If the guard stops the search
    """
    log = log or logger
    guard = guard or UNLIMITED.start()
    seed = frozenset(forced)
    if not is_injective(seed):
        raise SeasonValidationError(
            ValidationRule.V7_MULTIPLE_CONFIRMED_PARTNERS,
            "Confirmed matches give one contestant two partners",
        )

    nights = [frozenset(frozenset(a) for a in assignments) for assignments in night_assignments]
    if labels is None:
        labels = [f"#{position + 1}" for position in range(len(nights))]
    if len(labels) != len(nights):
        raise ValueError(f"Got {len(labels)} labels for {len(nights)} nights")

    index = PairIndex(
        [pair for pair in seed]
        + [pair for night in nights for assignment in night for pair in assignment]
    )
    current = {index.pack(seed)}

    for label, night in zip(labels, nights):
        guard.check_cancelled(label)
        candidates = {index.pack(assignment) for assignment in night}
        merged: set[PackedAssignment] = set()
        for accumulated in current:
            for candidate in candidates:
                guard.step(label)
                combined = merge_packed(accumulated, candidate)
                if combined is not None and combined not in merged:
                    merged.add(combined)
                    guard.check_size(len(merged), label)

        log.debug(
            f"Night {label}: {len(current)} x {len(candidates)} merges, "
            f"{len(merged)} consistent"
        )
        current = merged
        if not current:
            log.info(f"No consistent pairing survives night {label}")
            return AccumulationResult(frozenset(), exhausted_after=label)

    return AccumulationResult(frozenset(index.unpack(packed) for packed in current))


def to_solutions(assignments: Iterable[Assignment]) -> list[Solution]:
    """Project assignments into Solutions, in a deterministic order."""
    solutions = [Solution(frozenset(assignment)) for assignment in assignments]
    solutions.sort(key=Solution.sort_key)
    return solutions
