"""
Night constraint solving.

For one matching night, enumerate every self-consistent answer to
"which of tonight's pairs were actually correct", honoring the announced
correct count and the truth booth evidence.

Because a night's pairs already form a full bijection, any subset of
them is injective on its own. Conflicts can only arise across nights,
which is the accumulator's job.

A night either yields its assignments or an explicit contradiction.
There is no silent skip.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..domain import Assignment, PairingEvent, PairKey
from .combinations import iter_combinations
from .limits import SearchGuard


class ContradictionKind(Enum):
    """Why a night cannot be satisfied."""
    CONFIRMED_EXCEED_COUNT = "confirmed_exceed_count"
    COUNT_EXCEEDS_CANDIDATES = "count_exceeds_candidates"


@dataclass(frozen=True)
class EventContradiction:
    """
    A matching night whose announced count is arithmetically impossible.

    CONFIRMED_EXCEED_COUNT: more confirmed pairs sat together than the
        night announced as correct.
    COUNT_EXCEEDS_CANDIDATES: more correct pairs were announced than
        there are pairs left that are not denied.
    """
    event_id: str
    kind: ContradictionKind
    correct_count: int
    confirmed_count: int
    open_count: int

    @property
    def message(self) -> str:
        if self.kind is ContradictionKind.CONFIRMED_EXCEED_COUNT:
            return (
                f"Event '{self.event_id}' announced {self.correct_count} correct pairs "
                f"but seated {self.confirmed_count} confirmed matches"
            )
        return (
            f"Event '{self.event_id}' announced {self.correct_count} correct pairs "
            f"but only {self.confirmed_count + self.open_count} pairs are not ruled out"
        )


@dataclass(frozen=True)
class NightResult:
    """
    Outcome of solving one night.

    Either `contradiction` is None and `assignments` holds every valid
    choice of correct pairs, or `contradiction` says why there is none.
    """
    event_id: str
    assignments: frozenset[Assignment]
    contradiction: Optional[EventContradiction] = None

    @property
    def ok(self) -> bool:
        return self.contradiction is None


def solve_night(
    event: PairingEvent,
    forced: frozenset[PairKey],
    forbidden: frozenset[PairKey],
    guard: Optional[SearchGuard] = None,
) -> NightResult:
    """
    Compute every valid assignment of correct pairs for one night.

    Args:
        event: The matching night
        forced: Pairs confirmed as perfect matches
        forbidden: Pairs confirmed as no match
        guard: Optional search guard; the candidate count is checked
            against its ceiling before anything is enumerated, and
            cancellation is polled while enumerating

    Returns:
        NightResult with the assignments, or with an EventContradiction
    """
    event_keys = [pair for pair in event.pairs if pair not in forbidden]
    confirmed = frozenset(pair for pair in event_keys if pair in forced)
    remaining = event.correct_count - len(confirmed)
    open_keys = [pair for pair in event_keys if pair not in forced]

    kind = None
    if remaining < 0:
        kind = ContradictionKind.CONFIRMED_EXCEED_COUNT
    elif remaining > len(open_keys):
        kind = ContradictionKind.COUNT_EXCEEDS_CANDIDATES
    if kind is not None:
        return NightResult(
            event_id=event.event_id,
            assignments=frozenset(),
            contradiction=EventContradiction(
                event_id=event.event_id,
                kind=kind,
                correct_count=event.correct_count,
                confirmed_count=len(confirmed),
                open_count=len(open_keys),
            ),
        )

    if guard is not None:
        guard.check_size(math.comb(len(open_keys), remaining), event.event_id)

    assignments: set[Assignment] = set()
    for combo in iter_combinations(open_keys, remaining):
        if guard is not None:
            guard.step(event.event_id)
        assignments.add(confirmed | combo)

    return NightResult(event_id=event.event_id, assignments=frozenset(assignments))
