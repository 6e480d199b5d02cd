"""
Tests for partner analysis, pair odds and prediction checks.

These tests verify:
1. Possible partners are the union over Solutions, minus denied pairs
2. Confirmed matches override inferred possibilities
3. A unique Solution makes its partners certain
4. Empty possibility sets are reported once per contestant, not raised
5. Odds follow solution counts, with confirmed pairs fixed at 100
6. Predictions are only scored once a single Solution remains
"""

import pytest

from perfectmatch.analysis.odds import compute_pair_odds
from perfectmatch.analysis.partners import analyze_partner_possibilities
from perfectmatch.analysis.predictions import check_predictions
from perfectmatch.domain import (
    BinaryTestResult,
    Contestant,
    Group,
    PairingEvent,
    PairKey,
    Season,
    Solution,
)
from perfectmatch.solver.engine import solve


# =============================================================================
# TEST FIXTURES
# =============================================================================

CONTESTANTS = (
    Contestant("A", "Anton", Group.MEN),
    Contestant("B", "Bruno", Group.MEN),
    Contestant("X", "Xenia", Group.WOMEN),
    Contestant("Y", "Yara", Group.WOMEN),
)


def make_season(correct_count: int = 1, tests=()) -> Season:
    """Two couples seated as A-X and B-Y at a single night."""
    event = PairingEvent("n1", (PairKey("A", "X"), PairKey("B", "Y")), correct_count)
    return Season("s1", contestants=CONTESTANTS, events=(event,), tests=tuple(tests))


def booth(man: str, woman: str, is_match: bool) -> BinaryTestResult:
    return BinaryTestResult(f"{man}{woman}", PairKey(man, woman), is_match)


def sol(*pairs: tuple[str, str]) -> Solution:
    return Solution(frozenset(PairKey(m, w) for m, w in pairs))


# =============================================================================
# PARTNER POSSIBILITY TESTS
# =============================================================================

class TestPossiblePartners:
    """Test the union of partners across Solutions."""

    def test_scenario_a_possibilities(self):
        season = make_season()
        analysis = analyze_partner_possibilities(season, solve(season))

        assert analysis.men["A"].possible_partners == ["X"]
        assert analysis.men["B"].possible_partners == ["Y"]
        assert analysis.women["X"].possible_partners == ["A"]
        assert analysis.women["Y"].possible_partners == ["B"]
        assert analysis.contradictions == []

    def test_no_certainty_with_several_solutions(self):
        season = make_season()
        analysis = analyze_partner_possibilities(season, solve(season))

        assert all(e.certain_partner is None for e in analysis.men.values())
        assert all(e.certain_partner is None for e in analysis.women.values())
        assert not analysis.fully_determined

    def test_denied_partner_excluded(self):
        season = make_season(tests=[booth("B", "Y", False)])
        analysis = analyze_partner_possibilities(season, [sol(("B", "Y")), sol(("A", "X"))])

        assert analysis.men["B"].possible_partners == []
        assert analysis.men["A"].possible_partners == ["X"]

    def test_entries_keep_names_and_groups(self):
        season = make_season()
        analysis = analyze_partner_possibilities(season, solve(season))

        entry = analysis.get("X")
        assert entry.name == "Xenia"
        assert entry.group is Group.WOMEN
        assert analysis.get("nobody") is None

    def test_man_and_woman_sharing_an_id_stay_apart(self):
        season = Season("s2", contestants=(
            Contestant("1", "Anton", Group.MEN),
            Contestant("2", "Bruno", Group.MEN),
            Contestant("1", "Xenia", Group.WOMEN),
            Contestant("2", "Yara", Group.WOMEN),
        ))
        analysis = analyze_partner_possibilities(season, [sol(("1", "2"))])

        assert analysis.men["1"].possible_partners == ["2"]
        assert analysis.men["2"].possible_partners == []
        assert analysis.women["1"].possible_partners == []
        assert analysis.women["2"].possible_partners == ["1"]


# =============================================================================
# CERTAINTY TESTS
# =============================================================================

class TestCertainPartners:
    """Test confirmed overrides and unique-solution certainty."""

    def test_confirmed_match_collapses_possibilities(self):
        season = make_season(tests=[booth("A", "X", True)])
        solutions = [sol(("A", "X")), sol(("A", "Y"), ("B", "X"))]
        analysis = analyze_partner_possibilities(season, solutions)

        assert analysis.men["A"].possible_partners == ["X"]
        assert analysis.men["A"].certain_partner == "X"
        assert analysis.women["X"].possible_partners == ["A"]
        assert analysis.women["X"].certain_partner == "A"
        assert analysis.men["B"].certain_partner is None

    def test_unique_complete_solution_determines_everyone(self):
        season = make_season(correct_count=2)
        solutions = solve(season)
        analysis = analyze_partner_possibilities(season, solutions)

        assert len(solutions) == 1
        assert analysis.fully_determined
        assert analysis.men["A"].certain_partner == "X"
        assert analysis.men["B"].certain_partner == "Y"
        assert analysis.women["Y"].certain_partner == "B"

    def test_scenario_b_unique_partial_solution(self):
        season = make_season(tests=[booth("A", "X", True)])
        analysis = analyze_partner_possibilities(season, solve(season))

        assert analysis.men["A"].certain_partner == "X"
        assert analysis.men["B"].certain_partner is None
        assert [c.contestant_id for c in analysis.contradictions] == ["B", "Y"]


# =============================================================================
# CONTRADICTION TESTS
# =============================================================================

class TestContradictions:
    """Test that empty possibility sets are reported as data."""

    def test_no_solutions_flags_everyone_once(self):
        analysis = analyze_partner_possibilities(make_season(), [])
        ids = [c.contestant_id for c in analysis.contradictions]

        assert sorted(ids) == ["A", "B", "X", "Y"]
        assert len(ids) == len(set(ids))

    def test_contradiction_record_contents(self):
        season = make_season(tests=[booth("B", "Y", False)])
        analysis = analyze_partner_possibilities(season, [sol(("A", "X"))])
        record = next(c for c in analysis.contradictions if c.contestant_id == "B")

        assert record.group is Group.MEN
        assert record.name == "Bruno"
        assert "Bruno has no possible partner" in record.message

    def test_unassigned_contestant_not_called_contradictory(self):
        season = make_season(tests=[booth("A", "X", True)])
        analysis = analyze_partner_possibilities(season, solve(season))

        assert analysis.contradictions
        for record in analysis.contradictions:
            assert "no remaining solution assigns a partner" in record.message
            assert "contradictory" not in record.message

    def test_no_solutions_called_contradictory(self):
        analysis = analyze_partner_possibilities(make_season(), [])

        assert all("evidence is contradictory" in c.message for c in analysis.contradictions)

    def test_inputs_not_mutated(self):
        season = make_season()
        solutions = solve(season)
        snapshot = list(solutions)

        first = analyze_partner_possibilities(season, solutions)
        second = analyze_partner_possibilities(season, solutions)

        assert solutions == snapshot
        assert first == second


# =============================================================================
# ODDS TESTS
# =============================================================================

class TestPairOdds:
    """Test probability derivation from Solutions."""

    def test_even_split(self):
        season = make_season()
        odds = compute_pair_odds(season, solve(season))

        assert [(str(o.pair), o.probability) for o in odds] == [("A-X", 50.0), ("B-Y", 50.0)]
        assert all(o.solution_count == 1 for o in odds)

    def test_confirmed_pair_fixed_at_100(self):
        season = make_season(tests=[booth("A", "X", True)])
        odds = compute_pair_odds(season, [sol(("B", "Y")), sol(("A", "X"))])
        by_pair = {str(o.pair): o for o in odds}

        assert by_pair["A-X"].probability == 100.0
        assert by_pair["A-X"].confirmed
        assert by_pair["A-X"].certain
        assert by_pair["B-Y"].probability == pytest.approx(50.0)

    def test_booth_only_pairs_included(self):
        season = make_season(tests=[booth("B", "X", False)])
        odds = compute_pair_odds(season, solve(season))
        by_pair = {str(o.pair): o for o in odds}

        assert by_pair["B-X"].probability == 0.0
        assert [str(o.pair) for o in odds][-1] == "B-X"

    def test_no_solutions_no_odds(self):
        assert compute_pair_odds(make_season(), []) == []


# =============================================================================
# PREDICTION CHECK TESTS
# =============================================================================

class TestPredictionCheck:
    """Test scoring predictions against the solved season."""

    def test_scored_when_unique(self):
        season = make_season(correct_count=2)
        check = check_predictions(season, {"A": "X", "B": "X"}, solve(season))

        assert check.final
        assert check.correct == 1
        assert check.total == 2
        assert check.correct_pairs == ("A-X",)
        assert "1 of 2" in check.summary

    def test_not_final_with_several_solutions(self):
        season = make_season()
        check = check_predictions(season, {"A": "X"}, solve(season))

        assert not check.final
        assert check.correct is None
        assert check.solution_count == 2
        assert "2 possible solutions" in check.summary
