"""
Single-elimination seeding.

Deterministic rules for placing seeds into bracket slots so that top seeds
meet as late as possible, and for wiring rounds together.
"""

from typing import List, Optional, Sequence, Tuple


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (n >= 1)."""
    size = 1
    while size < n:
        size *= 2
    return size


def bracket_round_count(bracket_size: int) -> int:
    """log2 of the bracket size: 2 -> 1, 8 -> 3."""
    return bracket_size.bit_length() - 1


def seed_order(bracket_size: int) -> List[int]:
    """
    Return 1-based seeds in slot order for a power-of-two bracket.

    Built by recursive halving: every seed s in the bracket of size k is paired
    with (2k + 1 - s) when the bracket doubles.

        2 -> [1, 2]
        4 -> [1, 4, 2, 3]
        8 -> [1, 8, 4, 5, 2, 7, 3, 6]

    Adjacent pairs are the first-round matches (1 v 8, 4 v 5, 2 v 7, 3 v 6).
    """
    if bracket_size < 1 or bracket_size & (bracket_size - 1):
        raise ValueError(f"bracket_size must be a power of two, got {bracket_size}")

    order = [1]
    size = 1
    while size < bracket_size:
        size *= 2
        order = [s for seed in order for s in (seed, size + 1 - seed)]
    return order


def place_seeds(seeded: Sequence[str], bracket_size: int, bye: str) -> List[Tuple[str, str]]:
    """
    Pair seeded competitors into first-round matches.

    Args:
        seeded: Competitor ids, best seed first
        bracket_size: Power of two >= len(seeded)
        bye: Marker placed in slots beyond the field size

    Returns:
        List of (side_a, side_b) in bracket slot order
    """
    slots: List[str] = []
    for seed in seed_order(bracket_size):
        slots.append(seeded[seed - 1] if seed <= len(seeded) else bye)
    return [(slots[i], slots[i + 1]) for i in range(0, len(slots), 2)]


def feeder_slots(slot: int) -> Tuple[int, int]:
    """1-based slots in the previous round whose winners meet in `slot`."""
    return 2 * slot - 1, 2 * slot


def downstream_slot(slot: int) -> Tuple[int, str]:
    """
    Return (next_round_slot, side) that the winner of `slot` feeds.

    Odd slots feed side "a", even slots feed side "b".
    """
    return (slot + 1) // 2, "a" if slot % 2 == 1 else "b"


def semifinal_round(round_count: int) -> Optional[int]:
    """Round number of the semi-finals, or None for a bracket without them."""
    return round_count - 1 if round_count >= 2 else None
