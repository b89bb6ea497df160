"""
Schedule generator: league (circle method) and single-elimination bracket plans.
"""

import random
from collections import Counter

import pytest

from lineup.errors import InsufficientCompetitors
from lineup.models.match import BYE, MATCH_BYE_ADVANCED, MATCH_COMPLETED, MATCH_PENDING, ROLE_LOSER, ROLE_WINNER
from lineup.services.schedule_generator import THIRD_PLACE_CODE, generate, resolve_placeholder, seeding_order
from lineup.utils.bracket_seeding import next_power_of_two
from tests.conftest import make_roster


def _by_key(drafts):
    return {d.key: d for d in drafts}


def _play_out(drafts, pick=min):
    """Complete every playable match (winner chosen by `pick`) until nothing is pending."""
    by_key = _by_key(drafts)
    while True:
        playable = [d for d in drafts if d.status == MATCH_PENDING and d.side_a and d.side_b]
        if not playable:
            return
        for draft in playable:
            draft.winner = pick(draft.side_a, draft.side_b)
            draft.status = MATCH_COMPLETED
        for draft in drafts:
            if draft.side_a is None and draft.feeder_a and draft.feeder_b:
                resolved = resolve_placeholder(
                    by_key[draft.feeder_a], draft.feeder_a_role, by_key[draft.feeder_b], draft.feeder_b_role
                )
                if resolved:
                    draft.side_a, draft.side_b, draft.status, draft.winner = resolved


# ============================================================================
# League
# ============================================================================


def test_league_five_competitors():
    roster = make_roster(5)
    drafts = generate(roster, "league")

    assert len(drafts) == 15
    assert max(d.round for d in drafts) == 5

    byes = [d for d in drafts if d.is_bye]
    assert len(byes) == 5
    for draft in byes:
        assert draft.status == MATCH_BYE_ADVANCED
        assert draft.winner != BYE and draft.winner in (draft.side_a, draft.side_b)

    played = [d for d in drafts if not d.is_bye]
    assert len(played) == 10
    assert all(d.status == MATCH_PENDING and d.winner is None for d in played)
    assert len({frozenset((d.side_a, d.side_b)) for d in played}) == 10

    appearances = Counter(side for d in played for side in (d.side_a, d.side_b))
    assert appearances == {c.id: 4 for c in roster}

    # Every competitor sits out exactly once
    assert Counter(d.winner for d in byes) == {c.id: 1 for c in roster}


def test_league_even_field_has_no_byes():
    roster = make_roster(6)
    drafts = generate(roster, "league")

    assert len(drafts) == 15
    assert not any(d.is_bye for d in drafts)
    for round_num in range(1, 6):
        sides = [s for d in drafts if d.round == round_num for s in (d.side_a, d.side_b)]
        assert sorted(sides) == sorted(c.id for c in roster)


def test_league_match_codes():
    drafts = generate(make_roster(4), "league")
    assert [d.match_code for d in drafts[:3]] == ["RR_01_01", "RR_01_02", "RR_02_01"]
    assert all(d.format == "league" for d in drafts)
    assert all(d.feeder_a is None and d.feeder_b is None for d in drafts)


# ============================================================================
# Bracket
# ============================================================================


def test_bracket_five_competitors_by_skill():
    roster = make_roster(5, skills=[5, 4, 3, 2, 1])
    drafts = generate(roster, "bracket", rng=random.Random(0))
    by_key = _by_key(drafts)

    assert len(drafts) == 7
    round_one = [d for d in drafts if d.round == 1]
    assert [(d.side_a, d.side_b) for d in round_one] == [
        ("p1", BYE),
        ("p4", "p5"),
        ("p2", BYE),
        ("p3", BYE),
    ]
    assert [d.status for d in round_one] == [MATCH_BYE_ADVANCED, MATCH_PENDING, MATCH_BYE_ADVANCED, MATCH_BYE_ADVANCED]
    assert by_key[(1, 1)].winner == "p1"

    # Semi 1 waits for p4/p5; semi 2 is already set by two byes
    semi_one = by_key[(2, 1)]
    assert (semi_one.side_a, semi_one.side_b) == (None, None)
    assert semi_one.feeder_a == (1, 1) and semi_one.feeder_b == (1, 2)
    assert semi_one.feeder_a_role == ROLE_WINNER

    semi_two = by_key[(2, 2)]
    assert (semi_two.side_a, semi_two.side_b, semi_two.status) == ("p2", "p3", MATCH_PENDING)

    final = by_key[(3, 1)]
    assert final.match_code == "KO_03_01"
    assert (final.side_a, final.side_b) == (None, None)


def test_bracket_two_competitors_single_match():
    drafts = generate(make_roster(2), "bracket", rng=random.Random(0))
    assert len(drafts) == 1
    assert {drafts[0].side_a, drafts[0].side_b} == {"p1", "p2"}
    assert drafts[0].status == MATCH_PENDING


def test_bracket_eight_competitors_no_byes():
    drafts = generate(make_roster(8, skills=[8, 7, 6, 5, 4, 3, 2, 1]), "bracket", rng=random.Random(0))
    assert len(drafts) == 7
    assert not any(d.is_bye for d in drafts)
    round_one = [(d.side_a, d.side_b) for d in drafts if d.round == 1]
    assert round_one == [("p1", "p8"), ("p4", "p5"), ("p2", "p7"), ("p3", "p6")]


@pytest.mark.parametrize("n", range(2, 18))
def test_bracket_shape_and_single_champion(n):
    roster = make_roster(n)
    drafts = generate(roster, "bracket", rng=random.Random(n))
    size = next_power_of_two(n)

    assert len(drafts) == size - 1
    round_one = [d for d in drafts if d.round == 1]
    assert sum(1 for d in round_one if d.is_bye) == size - n
    assert sorted(s for d in round_one for s in (d.side_a, d.side_b) if s != BYE) == sorted(c.id for c in roster)

    _play_out(drafts)

    assert all(d.status in (MATCH_COMPLETED, MATCH_BYE_ADVANCED) for d in drafts)
    losers = {d.loser for d in drafts if d.status == MATCH_COMPLETED}
    unbeaten = {c.id for c in roster} - losers
    final = max(drafts, key=lambda d: d.key)
    assert unbeaten == {final.winner}


def test_bracket_third_place_match():
    roster = make_roster(4, skills=[4, 3, 2, 1])
    drafts = generate(roster, "bracket", rng=random.Random(0), third_place_match=True)
    by_key = _by_key(drafts)

    assert len(drafts) == 4
    third = by_key[(2, 2)]
    assert third.match_code == THIRD_PLACE_CODE
    assert third.feeder_a == (1, 1) and third.feeder_b == (1, 2)
    assert third.feeder_a_role == ROLE_LOSER and third.feeder_b_role == ROLE_LOSER

    _play_out(drafts)

    # min() picks p1 over p4 and p2 over p3
    assert by_key[(2, 1)].winner == "p1"
    assert {third.side_a, third.side_b} == {"p4", "p3"}
    assert third.winner == "p3"


def test_third_place_with_a_bye_semi_goes_to_the_other_loser():
    drafts = generate(make_roster(3, skills=[3, 2, 1]), "bracket", rng=random.Random(0), third_place_match=True)
    by_key = _by_key(drafts)
    third = by_key[(2, 2)]
    assert third.side_a is None

    _play_out(drafts)

    assert third.status == MATCH_BYE_ADVANCED
    assert third.side_a == BYE
    assert third.winner == "p3"


def test_third_place_ignored_without_semis():
    drafts = generate(make_roster(2), "bracket", rng=random.Random(0), third_place_match=True)
    assert len(drafts) == 1


def test_bracket_same_seed_same_plan():
    roster = make_roster(6)
    first = generate(roster, "bracket", rng=random.Random(9))
    second = generate(roster, "bracket", rng=random.Random(9))
    assert [(d.side_a, d.side_b) for d in first] == [(d.side_a, d.side_b) for d in second]


def test_seeding_falls_back_to_shuffle_with_unrated_players():
    roster = make_roster(4, skills=[1, None, 5, 3])
    order = seeding_order(roster, random.Random(0))
    shuffled = list(roster)
    random.Random(0).shuffle(shuffled)
    assert order == [c.id for c in shuffled]

    rated = make_roster(4, skills=[1, 2, 5, 3])
    assert seeding_order(rated, random.Random(0)) == ["p3", "p4", "p2", "p1"]


# ============================================================================
# Errors
# ============================================================================


@pytest.mark.parametrize("format", ["league", "bracket"])
@pytest.mark.parametrize("count", [0, 1])
def test_fewer_than_two_competitors(format, count):
    with pytest.raises(InsufficientCompetitors):
        generate(make_roster(count), format, rng=random.Random(0))


def test_unknown_format():
    with pytest.raises(ValueError):
        generate(make_roster(4), "swiss")
