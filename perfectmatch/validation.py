"""
Structural Validation for the Perfect Match deduction engine.

The engine reasons about evidence, it does not repair it. A snapshot that
breaks a structural rule is refused up front with a SeasonValidationError
naming the rule, so that a data-entry mistake is never reported as a
logical contradiction.

Checks (in order):
1. Contestant ids are unique and both groups have the same size
2. Every pair references a known man and a known woman
3. Every pairing event seats each contestant exactly once
4. Every correct count lies in [0, number of pairs]
5. No pair carries both a confirm and a deny verdict
6. No contestant is confirmed with two different partners
"""

from __future__ import annotations

from typing import Optional

from .domain import (
    BinaryTestResult,
    Group,
    PairingEvent,
    PairKey,
    Season,
    SeasonValidationError,
    ValidationRule,
)


# =============================================================================
# CONTESTANTS
# =============================================================================

def validate_contestants(season: Season) -> None:
    """
    Validate the contestant roster.

    Raises:
        SeasonValidationError: On duplicate ids (V3) or unequal groups (V8)
    """
    seen: set[str] = set()
    for contestant in season.contestants:
        if contestant.contestant_id in seen:
            raise SeasonValidationError(
                ValidationRule.V3_DUPLICATE_CONTESTANT,
                f"Contestant id '{contestant.contestant_id}' is used twice",
                contestant.contestant_id,
            )
        seen.add(contestant.contestant_id)

    men, women = len(season.men), len(season.women)
    if men != women:
        raise SeasonValidationError(
            ValidationRule.V8_UNEQUAL_GROUPS,
            f"Groups must be the same size, got {men} men and {women} women",
            season.season_id,
        )


def validate_pair(
    season: Season,
    pair: PairKey,
    subject_id: Optional[str] = None,
) -> None:
    """
    Validate that a PairKey references a man and a woman of this season.

    Raises:
        SeasonValidationError: On unknown ids (V1) or swapped groups (V2)
    """
    for member_id, expected in ((pair.man, Group.MEN), (pair.woman, Group.WOMEN)):
        contestant = season.get_contestant(member_id)
        if contestant is None:
            raise SeasonValidationError(
                ValidationRule.V1_UNKNOWN_CONTESTANT,
                f"Pair {pair} references unknown contestant '{member_id}'",
                subject_id,
            )
        if contestant.group is not expected:
            raise SeasonValidationError(
                ValidationRule.V2_WRONG_GROUP,
                f"Pair {pair}: '{member_id}' belongs to {contestant.group.value}, "
                f"expected {expected.value}",
                subject_id,
            )


# =============================================================================
# PAIRING EVENTS
# =============================================================================

def validate_event(season: Season, event: PairingEvent) -> None:
    """
    Validate one matching night.

    Raises:
        SeasonValidationError: If the pairing is not a full bijection (V4)
            or the correct count is out of range (V5)
    """
    for pair in event.pairs:
        validate_pair(season, pair, event.event_id)

    men = [pair.man for pair in event.pairs]
    women = [pair.woman for pair in event.pairs]
    if len(set(men)) != len(men) or len(set(women)) != len(women):
        raise SeasonValidationError(
            ValidationRule.V4_NON_BIJECTIVE_EVENT,
            f"Event '{event.event_id}' seats a contestant more than once",
            event.event_id,
        )
    if len(men) != len(season.men):
        raise SeasonValidationError(
            ValidationRule.V4_NON_BIJECTIVE_EVENT,
            f"Event '{event.event_id}' seats {len(men)} pairs, "
            f"expected {len(season.men)}",
            event.event_id,
        )

    if not 0 <= event.correct_count <= len(event.pairs):
        raise SeasonValidationError(
            ValidationRule.V5_COUNT_OUT_OF_RANGE,
            f"Event '{event.event_id}' announces {event.correct_count} correct pairs "
            f"out of {len(event.pairs)}",
            event.event_id,
        )


# =============================================================================
# BINARY TESTS
# =============================================================================

def validate_tests(season: Season, tests: tuple[BinaryTestResult, ...]) -> None:
    """
    Validate truth booth verdicts against each other.

    Raises:
        SeasonValidationError: On contradicting verdicts for one pair (V6)
            or a contestant confirmed with two partners (V7)
    """
    verdicts: dict[PairKey, bool] = {}
    for test in tests:
        validate_pair(season, test.pair, test.result_id)
        previous = verdicts.get(test.pair)
        if previous is not None and previous != test.is_match:
            raise SeasonValidationError(
                ValidationRule.V6_CONFLICTING_TESTS,
                f"Pair {test.pair} is both confirmed and denied",
                test.result_id,
            )
        verdicts[test.pair] = test.is_match

    confirmed_partner: dict[str, str] = {}
    for pair, is_match in sorted(verdicts.items()):
        if not is_match:
            continue
        for member, partner in ((pair.man, pair.woman), (pair.woman, pair.man)):
            known = confirmed_partner.setdefault(member, partner)
            if known != partner:
                raise SeasonValidationError(
                    ValidationRule.V7_MULTIPLE_CONFIRMED_PARTNERS,
                    f"'{member}' is confirmed with both '{known}' and '{partner}'",
                    member,
                )


# =============================================================================
# FULL SEASON
# =============================================================================

def validate_season(season: Season) -> None:
    """
    Apply every structural check to a season snapshot.

    Raises:
        SeasonValidationError: On the first violated rule
    """
    validate_contestants(season)
    for event in season.events:
        validate_event(season, event)
    validate_tests(season, season.tests)
