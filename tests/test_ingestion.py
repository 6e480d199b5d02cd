"""
Tests for season snapshot ingestion.

These tests verify:
1. Ids are canonicalized at the boundary (7, 7.0, "7", "7.0", "007" are one id)
2. Both the neutral and the editor's original key sets are understood
3. Group labels are mapped through their aliases
4. Malformed snapshots raise SeasonFormatError instead of being guessed at
5. Files are read as YAML (and therefore JSON)
"""

import json

import pytest

from perfectmatch.cli.pipeline import SAMPLE_SEASON
from perfectmatch.domain import Group, PairKey
from perfectmatch.ingestion.snapshot import (
    SeasonFormatError,
    canonical_id,
    load_predictions,
    load_season,
    parse_group,
    predictions_from_dict,
    season_from_dict,
)
from perfectmatch.solver.engine import solve


# =============================================================================
# TEST FIXTURES
# =============================================================================

def make_snapshot(**overrides) -> dict:
    """Neutral-key snapshot with two couples and one night."""
    snapshot = {
        "id": "s1",
        "name": "Test Season",
        "contestants": [
            {"id": "A", "name": "Anton", "group": "men"},
            {"id": "B", "name": "Bruno", "group": "men"},
            {"id": "X", "name": "Xenia", "group": "women"},
            {"id": "Y", "name": "Yara", "group": "women"},
        ],
        "events": [
            {"id": "n1", "pairs": [{"man": "A", "woman": "X"}, {"man": "B", "woman": "Y"}],
             "correct_count": 1},
        ],
        "tests": [
            {"id": "t1", "pair": {"man": "A", "woman": "Y"}, "is_match": False},
        ],
    }
    snapshot.update(overrides)
    return snapshot


# =============================================================================
# ID CANONICALIZATION
# =============================================================================

class TestCanonicalId:
    """Test id normalization."""

    @pytest.mark.parametrize("raw", [7, 7.0, "7", " 007 ", "+7", "7.0", "7.00"])
    def test_numeric_forms_collapse(self, raw):
        assert canonical_id(raw) == "7"

    def test_text_ids_kept(self):
        assert canonical_id(" anna-1 ") == "anna-1"

    def test_fractional_text_id_kept_as_text(self):
        assert canonical_id("7.5") == "7.5"

    @pytest.mark.parametrize("raw", [None, True, False, 7.5, "", "   ", [1], {"id": 1}])
    def test_invalid_ids_rejected(self, raw):
        with pytest.raises(SeasonFormatError):
            canonical_id(raw)

    def test_error_names_field(self):
        with pytest.raises(SeasonFormatError, match="pair.man"):
            canonical_id(None, "pair.man")


# =============================================================================
# GROUP ALIASES
# =============================================================================

class TestParseGroup:
    """Test group label mapping."""

    @pytest.mark.parametrize("label", ["men", "Mann", "M", "male"])
    def test_men_aliases(self, label):
        assert parse_group(label) is Group.MEN

    @pytest.mark.parametrize("label", ["women", "FRAU", "w", "f", "female"])
    def test_women_aliases(self, label):
        assert parse_group(label) is Group.WOMEN

    def test_group_passthrough(self):
        assert parse_group(Group.WOMEN) is Group.WOMEN

    def test_unknown_label(self):
        with pytest.raises(SeasonFormatError, match="not a known group"):
            parse_group("other")


# =============================================================================
# SNAPSHOT CONVERSION
# =============================================================================

class TestSeasonFromDict:
    """Test conversion of snapshot dictionaries."""

    def test_neutral_keys(self):
        season = season_from_dict(make_snapshot())

        assert season.season_id == "s1"
        assert season.name == "Test Season"
        assert [c.contestant_id for c in season.men] == ["A", "B"]
        assert season.events[0].pairs == (PairKey("A", "X"), PairKey("B", "Y"))
        assert season.events[0].correct_count == 1
        assert season.tests[0].pair == PairKey("A", "Y")
        assert season.tests[0].is_match is False

    def test_original_keys(self):
        season = season_from_dict(SAMPLE_SEASON)

        assert [c.contestant_id for c in season.contestants] == ["1", "2", "3", "4", "5", "6"]
        assert season.get_contestant("4").group is Group.WOMEN
        assert [e.event_id for e in season.events] == ["1", "2"]
        assert season.events[1].pairs[0] == PairKey("1", "5")
        assert season.tests[0].pair == PairKey("1", "4")

    def test_mixed_id_types_refer_to_one_contestant(self):
        snapshot = make_snapshot(
            contestants=[
                {"id": 7, "name": "Anton", "group": "men"},
                {"id": "8", "name": "Xenia", "group": "women"},
            ],
            events=[{"pairs": [{"man": "007", "woman": 8.0}], "correct_count": "1"}],
            tests=[],
        )
        season = season_from_dict(snapshot)

        assert season.events[0].pairs == (PairKey("7", "8"),)
        assert [s.mapping for s in solve(season)] == [{"7": "8"}]

    def test_decimal_text_ids_refer_to_one_contestant(self):
        snapshot = {
            "id": "s1",
            "candidates": [
                {"id": 7.0, "name": "Anton", "gender": "Mann"},
                {"id": 8, "name": "Xenia", "gender": "Frau"},
            ],
            "matchingNights": [{"couples": [{"mann": "7.0", "frau": "8"}], "lights": 1}],
        }
        season = season_from_dict(snapshot)

        assert season.events[0].pairs == (PairKey("7", "8"),)
        assert [s.mapping for s in solve(season)] == [{"7": "8"}]

    def test_default_ids(self):
        snapshot = make_snapshot(
            events=[{"pairs": [{"man": "A", "woman": "X"}, {"man": "B", "woman": "Y"}],
                     "correct_count": 0}],
            tests=[{"pair": {"man": "A", "woman": "X"}, "is_match": False}],
        )
        del snapshot["id"]
        season = season_from_dict(snapshot)

        assert season.season_id == "season"
        assert season.events[0].event_id == "night-1"
        assert season.tests[0].result_id == "box-1"

    def test_missing_sections_are_empty(self):
        season = season_from_dict({"id": "empty"})

        assert season.contestants == ()
        assert season.events == ()
        assert season.tests == ()


# =============================================================================
# MALFORMED SNAPSHOTS
# =============================================================================

class TestMalformedSnapshots:
    """Test that malformed input is refused with a named field."""

    def test_not_a_mapping(self):
        with pytest.raises(SeasonFormatError, match="season must be a mapping"):
            season_from_dict([1, 2, 3])

    def test_missing_correct_count(self):
        snapshot = make_snapshot(events=[{"pairs": [{"man": "A", "woman": "X"}]}])
        with pytest.raises(SeasonFormatError, match="correct_count"):
            season_from_dict(snapshot)

    @pytest.mark.parametrize("count", [1.5, "many", True])
    def test_non_integer_correct_count(self, count):
        snapshot = make_snapshot(
            events=[{"pairs": [{"man": "A", "woman": "X"}], "correct_count": count}]
        )
        with pytest.raises(SeasonFormatError, match="must be an integer"):
            season_from_dict(snapshot)

    def test_non_boolean_verdict(self):
        snapshot = make_snapshot(tests=[{"pair": {"man": "A", "woman": "X"}, "is_match": "yes"}])
        with pytest.raises(SeasonFormatError, match="true or false"):
            season_from_dict(snapshot)

    def test_events_not_a_list(self):
        with pytest.raises(SeasonFormatError, match="events must be a list"):
            season_from_dict(make_snapshot(events={"n1": {}}))

    def test_pair_missing_woman(self):
        snapshot = make_snapshot(
            events=[{"pairs": [{"man": "A"}], "correct_count": 0}]
        )
        with pytest.raises(SeasonFormatError, match="woman"):
            season_from_dict(snapshot)


# =============================================================================
# FILE LOADING
# =============================================================================

class TestLoadSeason:
    """Test reading snapshots from disk."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "season.yaml"
        path.write_text(
            "id: s1\n"
            "contestants:\n"
            "  - {id: A, name: Anton, group: men}\n"
            "  - {id: X, name: Xenia, group: women}\n"
            "events:\n"
            "  - id: n1\n"
            "    pairs: [{man: A, woman: X}]\n"
            "    correct_count: 1\n",
            encoding="utf-8",
        )
        season = load_season(str(path))

        assert season.season_id == "s1"
        assert season.events[0].pairs == (PairKey("A", "X"),)

    def test_load_json(self, tmp_path):
        path = tmp_path / "season.json"
        path.write_text(json.dumps(SAMPLE_SEASON), encoding="utf-8")

        season = load_season(str(path))

        assert season.season_id == "demo"
        assert len(season.events) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_season(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(SeasonFormatError, match="empty"):
            load_season(str(path))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("contestants: [unclosed\n", encoding="utf-8")
        with pytest.raises(SeasonFormatError, match="Invalid season file"):
            load_season(str(path))


# =============================================================================
# PREDICTIONS
# =============================================================================

class TestPredictions:
    """Test prediction mapping ingestion."""

    def test_ids_canonicalized_and_blanks_skipped(self):
        predictions = predictions_from_dict({1: 4, "02": "5", 3: None, 4: ""})
        assert predictions == {"1": "4", "2": "5"}

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "predictions.yaml"
        path.write_text("1: 5\n2: 4\n", encoding="utf-8")

        assert load_predictions(str(path)) == {"1": "5", "2": "4"}

    def test_empty_file_is_no_predictions(self, tmp_path):
        path = tmp_path / "predictions.yaml"
        path.write_text("", encoding="utf-8")

        assert load_predictions(str(path)) == {}

    def test_not_a_mapping(self):
        with pytest.raises(SeasonFormatError):
            predictions_from_dict(["1", "4"])
