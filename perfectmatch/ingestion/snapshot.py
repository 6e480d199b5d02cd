"""
Season Snapshot Ingestion for the Perfect Match deduction engine.

Converts a season snapshot produced by the season editor (a dict, or a
JSON/YAML file) into immutable domain objects.

Design principles:
- Ids are canonicalized here and nowhere else: every id becomes a str,
  and 7, 7.0, "7" and "007" are the same contestant
- Two key sets are understood: the neutral one (contestants / events /
  tests) and the editor's original one (candidates / matchingNights /
  truthBooths)
- A malformed snapshot raises SeasonFormatError naming the field; there
  is no guessing
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml

from ..domain import (
    BinaryTestResult,
    Contestant,
    Group,
    PairingEvent,
    PairKey,
    Season,
)

logger = logging.getLogger(__name__)


class SeasonFormatError(Exception):
    """Raised when a season snapshot cannot be read."""
    pass


# =============================================================================
# NORMALIZATION
# =============================================================================

GROUP_ALIASES = {
    "men": Group.MEN, "man": Group.MEN, "male": Group.MEN, "m": Group.MEN,
    "mann": Group.MEN, "herr": Group.MEN,
    "women": Group.WOMEN, "woman": Group.WOMEN, "female": Group.WOMEN,
    "f": Group.WOMEN, "w": Group.WOMEN, "frau": Group.WOMEN, "dame": Group.WOMEN,
}

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_INTEGRAL_DECIMAL_PATTERN = re.compile(r"^([+-]?\d+)\.0+$")

_MISSING = object()


def canonical_id(value: Any, field_name: str = "id") -> str:
    """
    Normalize an external id to its canonical string form.

    - int 7, float 7.0, "7", "7.0" and " 007 " all become "7"
    - other strings are stripped and kept as they are

    Raises:
        SeasonFormatError: For booleans, None, empty or non-scalar ids
    """
    if isinstance(value, bool) or value is None:
        raise SeasonFormatError(f"{field_name} must be a string or number, got {value!r}")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise SeasonFormatError(f"{field_name} must be a whole number, got {value!r}")
        return str(int(value))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise SeasonFormatError(f"{field_name} is empty")
        if _INTEGER_PATTERN.match(text):
            return str(int(text))
        decimal = _INTEGRAL_DECIMAL_PATTERN.match(text)
        if decimal:
            return str(int(decimal.group(1)))
        return text
    raise SeasonFormatError(f"{field_name} must be a string or number, got {type(value).__name__}")


def parse_group(value: Any, field_name: str = "group") -> Group:
    """
    Map a group label to a Group.

    Raises:
        SeasonFormatError: If the label is not a known alias
    """
    if isinstance(value, Group):
        return value
    group = GROUP_ALIASES.get(str(value).strip().lower())
    if group is None:
        raise SeasonFormatError(f"{field_name} '{value}' is not a known group")
    return group


def _first(mapping: dict, *keys: str, default: Any = _MISSING) -> Any:
    """Value of the first key present in `mapping`."""
    for key in keys:
        if key in mapping:
            return mapping[key]
    if default is _MISSING:
        raise SeasonFormatError(f"Missing required field: {' / '.join(keys)}")
    return default


def _as_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise SeasonFormatError(f"{field_name} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise SeasonFormatError(f"{field_name} must be an integer, got {value!r}")
    if number != value and not (isinstance(value, str) and _INTEGER_PATTERN.match(value.strip())):
        raise SeasonFormatError(f"{field_name} must be an integer, got {value!r}")
    return number


def _as_list(value: Any, field_name: str) -> list:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise SeasonFormatError(f"{field_name} must be a list")
    return list(value)


def _as_mapping(value: Any, field_name: str) -> dict:
    if not isinstance(value, dict):
        raise SeasonFormatError(f"{field_name} must be a mapping")
    return value


# =============================================================================
# CONVERSION
# =============================================================================

def parse_pair(data: Any, field_name: str = "pair") -> PairKey:
    """Convert a {man, woman} (or {mann, frau}) mapping to a PairKey."""
    data = _as_mapping(data, field_name)
    return PairKey(
        man=canonical_id(_first(data, "man", "mann"), f"{field_name}.man"),
        woman=canonical_id(_first(data, "woman", "frau"), f"{field_name}.woman"),
    )


def parse_contestant(data: Any, position: int) -> Contestant:
    label = f"contestants[{position}]"
    data = _as_mapping(data, label)
    return Contestant(
        contestant_id=canonical_id(_first(data, "id", "contestant_id"), f"{label}.id"),
        name=str(_first(data, "name", default="") or ""),
        group=parse_group(_first(data, "group", "gender"), f"{label}.group"),
    )


def parse_event(data: Any, position: int) -> PairingEvent:
    label = f"events[{position}]"
    data = _as_mapping(data, label)
    raw_id = _first(data, "id", "event_id", default=None)
    pairs = _as_list(_first(data, "pairs", "couples"), f"{label}.pairs")
    return PairingEvent(
        event_id=canonical_id(raw_id, f"{label}.id") if raw_id is not None else f"night-{position + 1}",
        pairs=tuple(parse_pair(p, f"{label}.pairs[{i}]") for i, p in enumerate(pairs)),
        correct_count=_as_int(_first(data, "correct_count", "lights"), f"{label}.correct_count"),
    )


def parse_test(data: Any, position: int) -> BinaryTestResult:
    label = f"tests[{position}]"
    data = _as_mapping(data, label)
    raw_id = _first(data, "id", "result_id", default=None)
    verdict = _first(data, "is_match", "is_perfect_match")
    if not isinstance(verdict, bool):
        raise SeasonFormatError(f"{label}.is_match must be true or false, got {verdict!r}")
    return BinaryTestResult(
        result_id=canonical_id(raw_id, f"{label}.id") if raw_id is not None else f"box-{position + 1}",
        pair=parse_pair(_first(data, "pair", "couple"), f"{label}.pair"),
        is_match=verdict,
    )


def season_from_dict(data: Any) -> Season:
    """
    Build a Season from a snapshot dictionary.

    Raises:
        SeasonFormatError: If any field is missing or malformed
    """
    data = _as_mapping(data, "season")
    contestants = _as_list(_first(data, "contestants", "candidates", default=[]), "contestants")
    events = _as_list(
        _first(data, "events", "matchingNights", "matching_nights", default=[]), "events"
    )
    tests = _as_list(
        _first(data, "tests", "truthBooths", "truth_booths", "matchboxes", default=[]), "tests"
    )
    raw_id = _first(data, "id", "season_id", default="season")

    season = Season(
        season_id=canonical_id(raw_id, "season.id"),
        name=str(data.get("name") or ""),
        contestants=tuple(parse_contestant(c, i) for i, c in enumerate(contestants)),
        events=tuple(parse_event(e, i) for i, e in enumerate(events)),
        tests=tuple(parse_test(t, i) for i, t in enumerate(tests)),
    )
    logger.debug(
        f"Ingested season '{season.season_id}': {len(season.contestants)} contestants, "
        f"{len(season.events)} nights, {len(season.tests)} truth booths"
    )
    return season


def load_season(filepath: str) -> Season:
    """
    Load a season snapshot from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        SeasonFormatError: If the content is not a valid snapshot
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Season file not found: {filepath}")

    logger.info(f"Loading season from {filepath}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SeasonFormatError(f"Invalid season file {filepath}: {e}")

    if data is None:
        raise SeasonFormatError(f"Season file is empty: {filepath}")
    return season_from_dict(data)


def load_predictions(filepath: str) -> dict[str, str]:
    """
    Load a prediction file mapping man id -> woman id.

    Raises:
        FileNotFoundError: If the file doesn't exist
        SeasonFormatError: If the content is not a mapping of ids
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Predictions file not found: {filepath}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SeasonFormatError(f"Invalid predictions file {filepath}: {e}")

    return predictions_from_dict(data or {})


def predictions_from_dict(data: Any) -> dict[str, str]:
    """Canonicalize a man id -> woman id prediction mapping."""
    data = _as_mapping(data, "predictions")
    return {
        canonical_id(man, "predictions.man"): canonical_id(woman, f"predictions[{man}]")
        for man, woman in data.items()
        if woman not in (None, "")
    }
