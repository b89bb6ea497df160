"""
Tests for round-robin pairings and single-elimination seeding helpers.
"""

from itertools import combinations

import pytest

from lineup.utils.bracket_seeding import (
    bracket_round_count,
    downstream_slot,
    feeder_slots,
    next_power_of_two,
    place_seeds,
    seed_order,
    semifinal_round,
)
from lineup.utils.round_robin import padded_size, rr_matches, rr_pairings_by_round, rr_round_count


# ============================================================================
# Round robin
# ============================================================================


@pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7, 8, 11])
def test_rr_every_pair_meets_once(n):
    pairings = rr_pairings_by_round(n)
    real = [(a, b) for _, _, a, b in pairings if a < n and b < n]

    assert len(real) == rr_matches(n)
    assert {frozenset(p) for p in real} == {frozenset(p) for p in combinations(range(n), 2)}


@pytest.mark.parametrize("n", [2, 3, 4, 5, 6, 7])
def test_rr_each_position_once_per_round(n):
    pairings = rr_pairings_by_round(n)
    rounds = sorted({p[0] for p in pairings})
    assert rounds == list(range(1, rr_round_count(n) + 1))

    for round_num in rounds:
        in_round = [p for p in pairings if p[0] == round_num]
        assert [p[1] for p in in_round] == list(range(1, padded_size(n) // 2 + 1))
        seen = [pos for _, _, a, b in in_round for pos in (a, b)]
        assert sorted(seen) == list(range(padded_size(n)))


def test_rr_odd_field_has_one_bye_per_round():
    pairings = rr_pairings_by_round(5)
    assert rr_round_count(5) == 5
    for round_num in range(1, 6):
        byes = [p for p in pairings if p[0] == round_num and 5 in (p[2], p[3])]
        assert len(byes) == 1


def test_rr_counts():
    assert rr_round_count(4) == 3
    assert rr_round_count(6) == 5
    assert rr_matches(5) == 10
    assert padded_size(5) == 6


# ============================================================================
# Bracket seeding
# ============================================================================


def test_seed_order():
    assert seed_order(1) == [1]
    assert seed_order(2) == [1, 2]
    assert seed_order(4) == [1, 4, 2, 3]
    assert seed_order(8) == [1, 8, 4, 5, 2, 7, 3, 6]


def test_seed_order_first_round_sums():
    """Every first-round pair in a P bracket sums to P + 1."""
    order = seed_order(16)
    assert sorted(order) == list(range(1, 17))
    assert all(order[i] + order[i + 1] == 17 for i in range(0, 16, 2))


def test_seed_order_rejects_non_power_of_two():
    with pytest.raises(ValueError):
        seed_order(6)


def test_next_power_of_two_and_rounds():
    assert [next_power_of_two(n) for n in (1, 2, 3, 5, 8, 9)] == [1, 2, 4, 8, 8, 16]
    assert bracket_round_count(2) == 1
    assert bracket_round_count(8) == 3
    assert semifinal_round(1) is None
    assert semifinal_round(3) == 2


def test_place_seeds_fills_byes_against_top_seeds():
    pairs = place_seeds(["a", "b", "c"], 4, "BYE")
    assert pairs == [("a", "BYE"), ("b", "c")]


def test_slot_wiring():
    assert downstream_slot(1) == (1, "a")
    assert downstream_slot(2) == (1, "b")
    assert downstream_slot(3) == (2, "a")
    assert feeder_slots(2) == (3, 4)
