"""
Season Report Orchestrator for the Perfect Match CLI.

Ties the engine's stages together for one season:
    1. Load the snapshot (or use the bundled sample season)
    2. Solve
    3. Analyze partner possibilities
    4. Derive pair odds

Read-only and deterministic. Nothing is persisted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..analysis.odds import PairOdds, compute_pair_odds
from ..analysis.partners import PartnerAnalysis, analyze_partner_possibilities
from ..config import SolverConfig
from ..domain import Season
from ..ingestion.snapshot import load_season, season_from_dict
from ..solver.engine import SolveResult, solve_season

logger = logging.getLogger(__name__)


# =============================================================================
# SEASON REPORT
# =============================================================================

@dataclass
class SeasonReport:
    """
    Everything the CLI shows about one season.

    Exposes:
    - The structured solve outcome
    - Per-contestant partner analysis
    - Pair odds (empty without solutions)
    """
    season: Season
    result: SolveResult
    analysis: PartnerAnalysis
    odds: list[PairOdds] = field(default_factory=list)

    def display_name(self, contestant_id: str) -> str:
        """Contestant name with id, or the bare id if unknown."""
        contestant = self.season.get_contestant(contestant_id)
        if contestant is None or not contestant.name:
            return contestant_id
        return f"{contestant.name} ({contestant_id})"


# =============================================================================
# SAMPLE DATA (For Demo Purposes)
# =============================================================================

SAMPLE_SEASON = {
    "id": "demo",
    "name": "Demo Season",
    "candidates": [
        {"id": 1, "name": "Alex", "gender": "Mann"},
        {"id": 2, "name": "Ben", "gender": "Mann"},
        {"id": 3, "name": "Chris", "gender": "Mann"},
        {"id": 4, "name": "Dana", "gender": "Frau"},
        {"id": 5, "name": "Eva", "gender": "Frau"},
        {"id": 6, "name": "Fay", "gender": "Frau"},
    ],
    "matchingNights": [
        {
            "id": 1,
            "couples": [{"mann": 1, "frau": 4}, {"mann": 2, "frau": 5}, {"mann": 3, "frau": 6}],
            "lights": 1,
        },
        {
            "id": 2,
            "couples": [{"mann": 1, "frau": 5}, {"mann": 2, "frau": 4}, {"mann": 3, "frau": 6}],
            "lights": 1,
        },
    ],
    "truthBooths": [
        {"id": 1, "couple": {"man": 1, "woman": 4}, "is_perfect_match": False},
    ],
}


# =============================================================================
# PIPELINE EXECUTION
# =============================================================================

def build_report(
    season: Season,
    config: Optional[SolverConfig] = None,
) -> SeasonReport:
    """
    Solve and analyze one season.

    Raises:
        SeasonValidationError: If the snapshot is structurally malformed
    """
    result = solve_season(season, config)
    analysis = analyze_partner_possibilities(season, result.solutions)
    odds = compute_pair_odds(season, result.solutions)
    logger.info(
        f"Report for '{season.season_id}': {result.status.value}, "
        f"{len(analysis.contradictions)} partner contradictions"
    )
    return SeasonReport(season=season, result=result, analysis=analysis, odds=odds)


def run_season(
    season_path: Optional[str] = None,
    config: Optional[SolverConfig] = None,
) -> SeasonReport:
    """
    Load a season file (the sample season if None) and build its report.

    Raises:
        FileNotFoundError: If the season file doesn't exist
        SeasonFormatError: If the file is not a valid snapshot
        SeasonValidationError: If the snapshot is structurally malformed
    """
    if season_path is None:
        season = season_from_dict(SAMPLE_SEASON)
    else:
        season = load_season(season_path)
    return build_report(season, config)
