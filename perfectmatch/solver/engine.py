"""
Perfect Match Solver — the deduction engine's entry point.

Pipeline:
    1. Structural validation (optional, on by default)
    2. Classify truth booth verdicts into forced / forbidden pairs
    3. Solve every matching night independently
    4. Fold the nights' assignments into global consistent pairings
    5. Project the survivors into Solutions

The engine is a pure function of the season snapshot: identical input
gives identical, identically ordered output. Diagnostics go to an
injected logger; nothing is printed and nothing is stored.

Outcomes a caller can tell apart:
    NO_EVIDENCE   — no matching nights yet, no solutions
    SOLVED        — at least one consistent pairing
    CONTRADICTORY — a night is impossible, or no pairing survives the fold
    TOO_MANY      — the assignment ceiling was passed
    CANCELLED     — timeout or caller cancellation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..config import SolverConfig
from ..domain import PairKey, Season, Solution
from ..validation import validate_season
from .accumulator import accumulate, to_solutions
from .evidence import classify_evidence
from .limits import SearchAborted, SearchCancelled, SearchLimitExceeded
from .night import EventContradiction, solve_night

logger = logging.getLogger(__name__)


# =============================================================================
# SOLVE RESULT
# =============================================================================

class SolveStatus(Enum):
    """Overall outcome of a solve."""
    NO_EVIDENCE = "no_evidence"
    SOLVED = "solved"
    CONTRADICTORY = "contradictory"
    TOO_MANY = "too_many_possibilities"
    CANCELLED = "cancelled"


@dataclass
class SolveResult:
    """
    Complete result of solving one season.

    Exposes:
    - All consistent Solutions (empty unless SOLVED)
    - Every impossible night, for audit
    - The night after which the fold ran dry, if it did
    - The forced and forbidden pairs the solve used
    """
    status: SolveStatus
    solutions: list[Solution] = field(default_factory=list)
    event_contradictions: list[EventContradiction] = field(default_factory=list)
    exhausted_after: Optional[str] = None
    forced: frozenset[PairKey] = frozenset()
    forbidden: frozenset[PairKey] = frozenset()
    message: str = ""

    @property
    def solved(self) -> bool:
        return self.status is SolveStatus.SOLVED

    @property
    def is_unique(self) -> bool:
        return len(self.solutions) == 1


# =============================================================================
# SOLVER
# =============================================================================

def solve_season(
    season: Season,
    config: Optional[SolverConfig] = None,
    log: Optional[logging.Logger] = None,
    cancel_requested: Optional[Callable[[], bool]] = None,
) -> SolveResult:
    """
    Solve a season and report a structured outcome.

    Args:
        season: Season snapshot with canonical ids
        config: Solver settings (defaults apply if None)
        log: Logger to trace the solve with (module logger by default)
        cancel_requested: Polled during the search; True aborts it

    Returns:
        SolveResult; logical contradictions and search aborts are statuses

    Raises:
        SeasonValidationError: If the snapshot is structurally malformed
    """
    config = config or SolverConfig()
    log = log or logger

    if config.validate:
        validate_season(season)

    evidence = classify_evidence(season.tests)
    log.info(
        f"Solving season '{season.season_id}': {len(season.events)} nights, "
        f"{len(evidence.forced)} confirmed, {len(evidence.forbidden)} denied"
    )

    if not season.events:
        return SolveResult(
            status=SolveStatus.NO_EVIDENCE,
            forced=evidence.forced,
            forbidden=evidence.forbidden,
            message="No matching nights yet",
        )

    guard = config.search_limits(cancel_requested).start()
    try:
        night_results = [
            solve_night(event, evidence.forced, evidence.forbidden, guard)
            for event in season.events
        ]

        contradictions = [r.contradiction for r in night_results if r.contradiction]
        if contradictions:
            for contradiction in contradictions:
                log.warning(contradiction.message)
            return SolveResult(
                status=SolveStatus.CONTRADICTORY,
                event_contradictions=contradictions,
                forced=evidence.forced,
                forbidden=evidence.forbidden,
                message=f"{len(contradictions)} matching night(s) cannot be satisfied",
            )

        for result in night_results:
            log.debug(f"Night {result.event_id}: {len(result.assignments)} candidate assignments")

        accumulated = accumulate(
            evidence.forced,
            [result.assignments for result in night_results],
            labels=[result.event_id for result in night_results],
            guard=guard,
            log=log,
        )
    except SearchAborted as e:
        status = (
            SolveStatus.TOO_MANY if isinstance(e, SearchLimitExceeded)
            else SolveStatus.CANCELLED
        )
        log.warning(f"Search aborted at {e.event_id or 'start'}: {e.reason}")
        return SolveResult(
            status=status,
            forced=evidence.forced,
            forbidden=evidence.forbidden,
            message=e.reason,
        )

    if accumulated.contradictory:
        return SolveResult(
            status=SolveStatus.CONTRADICTORY,
            exhausted_after=accumulated.exhausted_after,
            forced=evidence.forced,
            forbidden=evidence.forbidden,
            message=f"No pairing is consistent with the evidence "
                    f"(ran dry after night {accumulated.exhausted_after})",
        )

    solutions = to_solutions(accumulated.assignments)
    log.info(f"Solver complete: {len(solutions)} consistent pairings")
    return SolveResult(
        status=SolveStatus.SOLVED,
        solutions=solutions,
        forced=evidence.forced,
        forbidden=evidence.forbidden,
        message=f"{len(solutions)} consistent pairing(s)",
    )


def solve(
    season: Season,
    config: Optional[SolverConfig] = None,
    log: Optional[logging.Logger] = None,
) -> list[Solution]:
    """
    Every pairing still consistent with the season's evidence.

    Returns the empty list both when there are no matching nights and
    when the evidence is contradictory; use solve_season() to tell the
    two apart.

    Raises:
        SeasonValidationError: If the snapshot is structurally malformed
        SearchAborted: If a search limit stops the solve
    """
    config = config or SolverConfig()
    result = solve_season(season, config, log)
    if result.status is SolveStatus.TOO_MANY:
        raise SearchLimitExceeded(result.message)
    if result.status is SolveStatus.CANCELLED:
        raise SearchCancelled(result.message)
    return result.solutions
