"""
Core Domain Objects for the Perfect Match deduction engine.

Every object in this module is an immutable snapshot. The engine reads
them, never mutates them, and creates only transient Assignment sets
while solving.

Domain Objects:
    Contestant        — A person in one of the two groups
    PairKey           — Canonical (man, woman) pair, the unit of evidence
    PairingEvent      — A matching night: one full pairing + correct count
    BinaryTestResult  — A truth booth: one pair, confirmed or denied
    Season            — Everything above for one contest instance
    Solution          — A consistent (possibly partial) partner mapping
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional


# =============================================================================
# STRUCTURAL ERRORS
# =============================================================================

class ValidationRule(Enum):
    """
    Structural rules a season snapshot must satisfy before solving.

    V1: Every PairKey references known contestants
    V2: A PairKey's members belong to opposite groups, man first
    V3: Contestant ids are unique
    V4: A pairing event pairs every contestant exactly once
    V5: A pairing event's correct count is within [0, number of pairs]
    V6: A PairKey carries at most one binary test verdict
    V7: No contestant is confirmed with two different partners
    V8: Both groups have the same size
    """
    V1_UNKNOWN_CONTESTANT = "unknown_contestant"
    V2_WRONG_GROUP = "wrong_group"
    V3_DUPLICATE_CONTESTANT = "duplicate_contestant"
    V4_NON_BIJECTIVE_EVENT = "non_bijective_event"
    V5_COUNT_OUT_OF_RANGE = "count_out_of_range"
    V6_CONFLICTING_TESTS = "conflicting_tests"
    V7_MULTIPLE_CONFIRMED_PARTNERS = "multiple_confirmed_partners"
    V8_UNEQUAL_GROUPS = "unequal_groups"


class SeasonValidationError(Exception):
    """Raised when a season snapshot violates a structural rule."""

    def __init__(self, rule: ValidationRule, reason: str, subject_id: Optional[str] = None):
        self.rule = rule
        self.reason = reason
        self.subject_id = subject_id
        super().__init__(f"[{rule.value}] {reason}")


# =============================================================================
# CONTESTANTS
# =============================================================================

class Group(Enum):
    """The two disjoint contestant groups."""
    MEN = "men"
    WOMEN = "women"

    @property
    def other(self) -> Group:
        return Group.WOMEN if self is Group.MEN else Group.MEN


@dataclass(frozen=True)
class Contestant:
    """A contestant. Created by the season editor; the engine only reads it."""
    contestant_id: str
    name: str
    group: Group

    def __post_init__(self):
        if not self.contestant_id:
            raise SeasonValidationError(
                ValidationRule.V1_UNKNOWN_CONTESTANT,
                "contestant_id is required",
            )


# =============================================================================
# EVIDENCE
# =============================================================================

@dataclass(frozen=True, order=True)
class PairKey:
    """
    Canonical (man, woman) pair.

    Two PairKeys are equal iff both members match. Ordering is by man,
    then woman, and is only used to make output deterministic.
    """
    man: str
    woman: str

    def member(self, group: Group) -> str:
        return self.man if group is Group.MEN else self.woman

    def involves(self, contestant_id: str) -> bool:
        return contestant_id in (self.man, self.woman)

    def __str__(self) -> str:
        return f"{self.man}-{self.woman}"


@dataclass(frozen=True)
class PairingEvent:
    """
    A matching night.

    `pairs` is the full pairing seated that night; `correct_count` is the
    only feedback revealed. Which pairs are correct is unknown.
    """
    event_id: str
    pairs: tuple[PairKey, ...]
    correct_count: int

    def __post_init__(self):
        # Accept any iterable of pairs but store an immutable tuple
        object.__setattr__(self, "pairs", tuple(self.pairs))


@dataclass(frozen=True)
class BinaryTestResult:
    """A truth booth verdict on a single nominated pair."""
    result_id: str
    pair: PairKey
    is_match: bool


# =============================================================================
# SEASON
# =============================================================================

@dataclass(frozen=True)
class Season:
    """
    Read-only snapshot of one contest instance.

    Ids are already canonical strings; see ingestion.snapshot for the
    boundary that guarantees it.
    """
    season_id: str
    contestants: tuple[Contestant, ...] = field(default_factory=tuple)
    events: tuple[PairingEvent, ...] = field(default_factory=tuple)
    tests: tuple[BinaryTestResult, ...] = field(default_factory=tuple)
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "contestants", tuple(self.contestants))
        object.__setattr__(self, "events", tuple(self.events))
        object.__setattr__(self, "tests", tuple(self.tests))

    @property
    def men(self) -> list[Contestant]:
        return [c for c in self.contestants if c.group is Group.MEN]

    @property
    def women(self) -> list[Contestant]:
        return [c for c in self.contestants if c.group is Group.WOMEN]

    def get_contestant(self, contestant_id: str) -> Optional[Contestant]:
        """Find a contestant by id."""
        for contestant in self.contestants:
            if contestant.contestant_id == contestant_id:
                return contestant
        return None

    def observed_pairs(self) -> list[PairKey]:
        """Every PairKey seated at an event or sent to a truth booth, sorted."""
        seen = {pair for event in self.events for pair in event.pairs}
        seen.update(test.pair for test in self.tests)
        return sorted(seen)


# =============================================================================
# SOLUTION
# =============================================================================

Assignment = frozenset[PairKey]


@dataclass(frozen=True)
class Solution:
    """
    A consistent pairing derived from one surviving Assignment.

    May be partial: contestants whose partner the evidence never pinned
    down simply do not appear.
    """
    pairs: frozenset[PairKey]

    def __post_init__(self):
        object.__setattr__(self, "pairs", frozenset(self.pairs))

    @classmethod
    def from_mapping(cls, mapping: dict[str, str]) -> Solution:
        """Build a Solution from a man id -> woman id mapping."""
        return cls(frozenset(PairKey(man, woman) for man, woman in mapping.items()))

    @property
    def mapping(self) -> dict[str, str]:
        """Man id -> woman id, in man order."""
        return {pair.man: pair.woman for pair in sorted(self.pairs)}

    def partner_of(self, contestant_id: str, group: Group) -> Optional[str]:
        """The partner this Solution assigns to a contestant, if any."""
        for pair in self.pairs:
            if pair.member(group) == contestant_id:
                return pair.member(group.other)
        return None

    def sort_key(self) -> tuple[PairKey, ...]:
        return tuple(sorted(self.pairs))

    def __contains__(self, pair: object) -> bool:
        return pair in self.pairs

    def __iter__(self) -> Iterator[PairKey]:
        return iter(sorted(self.pairs))

    def __len__(self) -> int:
        return len(self.pairs)


def is_injective(pairs: Iterable[PairKey]) -> bool:
    """True when no contestant appears in two different pairs."""
    men: set[str] = set()
    women: set[str] = set()
    for pair in set(pairs):
        if pair.man in men or pair.woman in women:
            return False
        men.add(pair.man)
        women.add(pair.woman)
    return True
