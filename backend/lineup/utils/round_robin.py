"""
Round Robin Pairings (circle method)

Position-based pairings shared by league generation and its tests.
Positions are 0-based indexes into the competitor list; odd fields are padded
with a BYE position so every round has the same number of pairings.
"""

from typing import List, Tuple


def padded_size(n: int) -> int:
    """Number of circle positions: n for even n, n + 1 (one BYE) for odd n."""
    return n + 1 if n % 2 == 1 else n


def rr_round_count(n: int) -> int:
    """
    Return number of RR rounds for n competitors.
    Even n: n-1 rounds. Odd n: n rounds (with BYE).
    """
    return padded_size(n) - 1


def rr_matches(n: int) -> int:
    """Round robin match count excluding byes: n * (n-1) / 2"""
    return (n * (n - 1)) // 2


def rr_pairings_by_round(n: int) -> List[Tuple[int, int, int, int]]:
    """
    Round-robin pairings. Returns list of (round_index, sequence_in_round, idx_a, idx_b).

    idx_a, idx_b are 0-based positions; for odd n the position n is the BYE and
    its pairings are kept so each round lists n'/2 pairings.

    Circle method: position 0 stays fixed, the remaining n'-1 positions rotate
    one step per round. In each round the circle is paired from both ends
    inward: (0, last), (1, last-1), ...
    """
    n2 = padded_size(n)
    half = n2 // 2
    positions = list(range(n2))

    result: List[Tuple[int, int, int, int]] = []
    for round_num in range(1, n2):
        for i in range(half):
            a, b = positions[i], positions[n2 - 1 - i]
            result.append((round_num, i + 1, a, b))
        # Rotate: keep 0, move last to second, shift others
        positions = [positions[0]] + [positions[-1]] + positions[1:-1]

    return result
