"""
Partner possibility analysis.

Turns a set of Solutions into a per-contestant view:
    possible_partners — every partner some Solution assigns, minus
                        denied pairs
    certain_partner   — set when a truth booth confirmed the pair, or when
                        exactly one Solution remains
    contradictions    — contestants left with no possible partner

Confirmed evidence always wins over inferred possibilities. An empty
possibility set is reported as data, never raised. Without any Solution
it means the input evidence is inconsistent. With Solutions it means none
of them pins down a partner for that contestant. The caller decides how
to surface either case.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..domain import Contestant, Group, PairKey, Season, Solution
from ..solver.evidence import classify_evidence


# =============================================================================
# ANALYSIS OBJECTS
# =============================================================================

@dataclass
class PartnerPossibility:
    """What the evidence still allows for one contestant."""
    contestant_id: str
    name: str
    group: Group
    possible_partners: list[str] = field(default_factory=list)
    certain_partner: Optional[str] = None

    @property
    def is_determined(self) -> bool:
        return self.certain_partner is not None


@dataclass(frozen=True)
class PartnerContradiction:
    """A contestant the evidence leaves without any partner."""
    contestant_id: str
    name: str
    group: Group
    message: str


@dataclass
class PartnerAnalysis:
    """Per-contestant possibilities for both groups, plus contradictions."""
    men: dict[str, PartnerPossibility]
    women: dict[str, PartnerPossibility]
    contradictions: list[PartnerContradiction] = field(default_factory=list)

    def get(self, contestant_id: str) -> Optional[PartnerPossibility]:
        """Find a contestant's entry in either group."""
        return self.men.get(contestant_id) or self.women.get(contestant_id)

    @property
    def fully_determined(self) -> bool:
        entries = list(self.men.values()) + list(self.women.values())
        return bool(entries) and all(entry.is_determined for entry in entries)


# =============================================================================
# ANALYZER
# =============================================================================

def _entries(contestants: list[Contestant]) -> dict[str, PartnerPossibility]:
    return {
        c.contestant_id: PartnerPossibility(c.contestant_id, c.name, c.group)
        for c in contestants
    }


def analyze_partner_possibilities(
    season: Season,
    solutions: Sequence[Solution],
) -> PartnerAnalysis:
    """
    Compute possible and certain partners for every contestant.

    Args:
        season: Season snapshot (contestants and truth booth results)
        solutions: Solutions from solve() for the same season

    Returns:
        PartnerAnalysis; inputs are not modified
    """
    forced, forbidden = classify_evidence(season.tests)
    men = _entries(season.men)
    women = _entries(season.women)
    # Kept per group: a man and a woman may share an id
    possible: dict[Group, dict[str, set[str]]] = {
        Group.MEN: {cid: set() for cid in men},
        Group.WOMEN: {cid: set() for cid in women},
    }

    # Union of every Solution's partners, minus denied pairs
    for solution in solutions:
        for pair in solution.pairs:
            if pair in forbidden:
                continue
            if pair.man in men:
                possible[Group.MEN][pair.man].add(pair.woman)
            if pair.woman in women:
                possible[Group.WOMEN][pair.woman].add(pair.man)

    # Confirmed matches collapse both sides to the confirmed partner
    for pair in sorted(forced):
        _lock(men, women, possible, pair)

    if len(solutions) == 1:
        for pair in solutions[0].pairs:
            if pair.man in men:
                men[pair.man].certain_partner = pair.woman
            if pair.woman in women:
                women[pair.woman].certain_partner = pair.man

    if solutions:
        reason = "no remaining solution assigns a partner"
    else:
        reason = "the evidence is contradictory"

    contradictions = []
    for entries in (men, women):
        for entry in entries.values():
            entry.possible_partners = sorted(possible[entry.group][entry.contestant_id])
            if not entry.possible_partners:
                contradictions.append(PartnerContradiction(
                    contestant_id=entry.contestant_id,
                    name=entry.name,
                    group=entry.group,
                    message=f"{entry.name or entry.contestant_id} has no possible partner "
                            f"- {reason}",
                ))

    return PartnerAnalysis(men=men, women=women, contradictions=contradictions)


def _lock(
    men: dict[str, PartnerPossibility],
    women: dict[str, PartnerPossibility],
    possible: dict[Group, dict[str, set[str]]],
    pair: PairKey,
) -> None:
    if pair.man in men:
        possible[Group.MEN][pair.man] = {pair.woman}
        men[pair.man].certain_partner = pair.woman
    if pair.woman in women:
        possible[Group.WOMEN][pair.woman] = {pair.man}
        women[pair.woman].certain_partner = pair.man
