"""
Perfect Match CLI — Read-Only Interface to the deduction engine.

Commands:
    perfectmatch solve [SEASON]              — Consistent pairings
    perfectmatch analyze [SEASON]            — Possible / certain partners
    perfectmatch odds [SEASON]               — Pair probabilities
    perfectmatch check SEASON PREDICTIONS    — Score a prediction

SEASON is a YAML or JSON snapshot; without it the bundled demo season is
used. The CLI never writes season data.

Exit codes: 0 success, 1 unreadable or malformed input, 2 search aborted.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

import yaml

from ..analysis.partners import PartnerPossibility
from ..analysis.predictions import check_predictions
from ..config import SolverConfig, config_from_dict, load_config
from ..domain import SeasonValidationError
from ..ingestion.snapshot import SeasonFormatError, load_predictions
from ..solver.engine import SolveStatus
from .pipeline import SeasonReport, run_season

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_SEARCH_ABORTED = 2


# =============================================================================
# OUTPUT FORMATTING
# =============================================================================

def format_status_badge(status: SolveStatus) -> str:
    """Format a solve status as a visual badge."""
    badges = {
        SolveStatus.NO_EVIDENCE: "[NO EVIDENCE]",
        SolveStatus.SOLVED: "[SOLVED]",
        SolveStatus.CONTRADICTORY: "[CONTRADICTION]",
        SolveStatus.TOO_MANY: "[TOO MANY]",
        SolveStatus.CANCELLED: "[CANCELLED]",
    }
    return badges.get(status, "[?]")


def format_solution(report: SeasonReport, index: int) -> str:
    """Format one solution as a numbered list of couples."""
    solution = report.result.solutions[index]
    couples = ", ".join(
        f"{report.display_name(man)} + {report.display_name(woman)}"
        for man, woman in solution.mapping.items()
    )
    return f"  #{index + 1}: {couples or '(no pairs determined)'}"


def format_possibility(report: SeasonReport, entry: PartnerPossibility) -> str:
    """Format one contestant's partner possibilities."""
    name = report.display_name(entry.contestant_id)
    if entry.certain_partner is not None:
        return f"  {name}: certain -> {report.display_name(entry.certain_partner)}"
    if not entry.possible_partners:
        return f"  {name}: no possible partner"
    partners = ", ".join(report.display_name(p) for p in entry.possible_partners)
    return f"  {name}: {partners}"


def format_odds_row(report: SeasonReport, index: int) -> str:
    """Format one pair probability row."""
    odds = report.odds[index]
    couple = f"{report.display_name(odds.pair.man)} + {report.display_name(odds.pair.woman)}"
    marker = "  [CONFIRMED]" if odds.confirmed else ""
    return f"  {couple:<40} {odds.probability:>7.2f}%{marker}"


# =============================================================================
# CLI COMMANDS
# =============================================================================

def _exit_code(report: SeasonReport) -> int:
    if report.result.status in (SolveStatus.TOO_MANY, SolveStatus.CANCELLED):
        return EXIT_SEARCH_ABORTED
    return EXIT_OK


def cmd_solve(args: argparse.Namespace, config: SolverConfig) -> int:
    """Show every consistent pairing."""
    report = run_season(args.season, config)
    result = report.result

    print(f"Perfect Match — {report.season.name or report.season.season_id}")
    print("=" * 50)
    print(f"{format_status_badge(result.status)} {result.message}")

    for contradiction in result.event_contradictions:
        print(f"  • {contradiction.message}")
    if result.exhausted_after is not None:
        print(f"  • No pairing survives matching night {result.exhausted_after}")

    if result.solutions:
        print()
        shown = min(len(result.solutions), config.max_listed_solutions)
        for index in range(shown):
            print(format_solution(report, index))
        if len(result.solutions) > shown:
            print(f"  ... and {len(result.solutions) - shown} more")

    return _exit_code(report)


def cmd_analyze(args: argparse.Namespace, config: SolverConfig) -> int:
    """Show possible and certain partners per contestant."""
    report = run_season(args.season, config)
    analysis = report.analysis

    print(f"Perfect Match — Partner Analysis ({len(report.result.solutions)} solutions)")
    print("=" * 50)
    print("MEN:")
    for entry in analysis.men.values():
        print(format_possibility(report, entry))
    print()
    print("WOMEN:")
    for entry in analysis.women.values():
        print(format_possibility(report, entry))

    if analysis.contradictions:
        print()
        print("CONTRADICTIONS:")
        for contradiction in analysis.contradictions:
            print(f"  • {contradiction.message}")

    return _exit_code(report)


def cmd_odds(args: argparse.Namespace, config: SolverConfig) -> int:
    """Show the probability of every observed pair."""
    report = run_season(args.season, config)

    print("Perfect Match — Pair Odds")
    print("=" * 50)
    if not report.odds:
        print(f"No odds available: {report.result.message}")
        return _exit_code(report)

    for index in range(len(report.odds)):
        print(format_odds_row(report, index))
    return _exit_code(report)


def cmd_check(args: argparse.Namespace, config: SolverConfig) -> int:
    """Score a prediction file against the solved season."""
    report = run_season(args.season, config)
    predictions = load_predictions(args.predictions)
    check = check_predictions(report.season, predictions, report.result.solutions)

    print("Perfect Match — Prediction Check")
    print("=" * 50)
    print(check.summary)
    return _exit_code(report)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="perfectmatch",
        description="Perfect Match deduction engine — who can still be whose match",
    )
    parser.add_argument(
        "--config",
        help="YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        help="Log level (overrides the configuration file)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    solve_parser = subparsers.add_parser("solve", help="List consistent pairings")
    solve_parser.add_argument("season", nargs="?", help="Season snapshot (YAML/JSON)")
    solve_parser.set_defaults(func=cmd_solve)

    analyze_parser = subparsers.add_parser("analyze", help="Show partner possibilities")
    analyze_parser.add_argument("season", nargs="?", help="Season snapshot (YAML/JSON)")
    analyze_parser.set_defaults(func=cmd_analyze)

    odds_parser = subparsers.add_parser("odds", help="Show pair probabilities")
    odds_parser.add_argument("season", nargs="?", help="Season snapshot (YAML/JSON)")
    odds_parser.set_defaults(func=cmd_odds)

    check_parser = subparsers.add_parser("check", help="Score a prediction file")
    check_parser.add_argument("season", help="Season snapshot (YAML/JSON)")
    check_parser.add_argument("predictions", help="Predictions (man id: woman id)")
    check_parser.set_defaults(func=cmd_check)

    return parser


def setup_logging(log_level: str) -> None:
    """Configure root logging for CLI runs."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    try:
        config = config_from_dict(load_config(args.config)) if args.config else SolverConfig()
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Invalid configuration")
        print(f"Reason: {e}")
        return EXIT_INPUT_ERROR

    setup_logging(args.log_level or config.log_level)

    try:
        return args.func(args, config)
    except (FileNotFoundError, SeasonFormatError, SeasonValidationError) as e:
        print(f"ERROR: Cannot solve season")
        print(f"Reason: {e}")
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
