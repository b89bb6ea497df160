"""
Schedule Generator

Builds the complete match plan for a set of competitors. Pure: returns
MatchDraft objects; TournamentState persists them.

Formats:
- league: round robin via the circle method, odd fields padded with one BYE
- bracket: single elimination, power-of-two field with BYE slots, later
  rounds created as placeholders wired to their two feeder matches

Guarantees:
- league: N*(N-1)/2 non-bye matches, N'-1 rounds, one match per competitor per round
- bracket: P-1 match slots (P = next power of two >= N), plus one for an
  optional third-place match
"""

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from lineup.errors import InsufficientCompetitors
from lineup.models.match import (
    BYE,
    MATCH_BYE_ADVANCED,
    MATCH_COMPLETED,
    MATCH_PENDING,
    ROLE_LOSER,
    ROLE_WINNER,
)
from lineup.models.schedule_batch import MatchFormat
from lineup.services.roster import Competitor
from lineup.utils.bracket_seeding import (
    bracket_round_count,
    downstream_slot,
    next_power_of_two,
    place_seeds,
    semifinal_round,
)
from lineup.utils.round_robin import padded_size, rr_pairings_by_round

logger = logging.getLogger(__name__)

THIRD_PLACE_CODE = "3RD"

MatchKey = Tuple[int, int]  # (round, slot)


@dataclass
class MatchDraft:
    format: str
    match_code: str
    round: int
    slot: int
    side_a: Optional[str] = None
    side_b: Optional[str] = None
    status: str = MATCH_PENDING
    winner: Optional[str] = None
    feeder_a: Optional[MatchKey] = None
    feeder_b: Optional[MatchKey] = None
    feeder_a_role: Optional[str] = None
    feeder_b_role: Optional[str] = None

    @property
    def key(self) -> MatchKey:
        return (self.round, self.slot)

    @property
    def is_decided(self) -> bool:
        return self.status in (MATCH_COMPLETED, MATCH_BYE_ADVANCED)

    @property
    def is_bye(self) -> bool:
        return BYE in (self.side_a, self.side_b)

    @property
    def loser(self) -> Optional[str]:
        if not self.is_decided or self.winner is None:
            return None
        return self.side_b if self.winner == self.side_a else self.side_a


# ============================================================================
# Shared side resolution (used at generation time and by advancement)
# ============================================================================


def side_from_feeder(feeder, role: str) -> Optional[str]:
    """Competitor a decided feeder sends downstream for `role`, else None."""
    if feeder is None or not feeder.is_decided:
        return None
    return feeder.loser if role == ROLE_LOSER else feeder.winner


def resolve_placeholder(feeder_a, role_a: str, feeder_b, role_b: str) -> Optional[Tuple[str, str, str, Optional[str]]]:
    """
    Decide a placeholder's sides once both feeders are decided.

    Feeders are any objects exposing `is_decided`, `winner` and `loser`
    (MatchDraft or the Match table model).

    Returns:
        (side_a, side_b, status, winner) or None while a feeder is still open.
        A BYE on one side makes the match bye-advanced for the other side.
    """
    side_a = side_from_feeder(feeder_a, role_a)
    side_b = side_from_feeder(feeder_b, role_b)
    if side_a is None or side_b is None:
        return None
    if side_a == BYE and side_b == BYE:
        return side_a, side_b, MATCH_BYE_ADVANCED, BYE
    if side_b == BYE:
        return side_a, side_b, MATCH_BYE_ADVANCED, side_a
    if side_a == BYE:
        return side_a, side_b, MATCH_BYE_ADVANCED, side_b
    return side_a, side_b, MATCH_PENDING, None


# ============================================================================
# League
# ============================================================================


def generate_league(competitors: Sequence[Competitor]) -> List[MatchDraft]:
    """Round robin for all competitors in the given order."""
    ids = [c.id for c in competitors]
    n = len(ids)
    bye_position = n if padded_size(n) > n else None

    def side(position: int) -> str:
        return BYE if position == bye_position else ids[position]

    drafts: List[MatchDraft] = []
    for round_num, seq, pos_a, pos_b in rr_pairings_by_round(n):
        draft = MatchDraft(
            format=MatchFormat.league.value,
            match_code=f"RR_{round_num:02d}_{seq:02d}",
            round=round_num,
            slot=seq,
            side_a=side(pos_a),
            side_b=side(pos_b),
        )
        if draft.is_bye:
            draft.status = MATCH_BYE_ADVANCED
            draft.winner = draft.side_b if draft.side_a == BYE else draft.side_a
        drafts.append(draft)
    return drafts


# ============================================================================
# Bracket
# ============================================================================


def seeding_order(competitors: Sequence[Competitor], rng: random.Random) -> List[str]:
    """
    Competitor ids best seed first.

    Ranked by skill_score descending when every competitor has one (ties in
    shuffled order); otherwise a single shuffle fixes the whole bracket.
    """
    shuffled = list(competitors)
    rng.shuffle(shuffled)
    if shuffled and all(c.skill_score is not None for c in shuffled):
        shuffled = sorted(shuffled, key=lambda c: -c.skill_score)
    return [c.id for c in shuffled]


def generate_bracket(
    competitors: Sequence[Competitor],
    rng: random.Random,
    third_place_match: bool = False,
) -> List[MatchDraft]:
    """Single elimination with BYE slots and placeholder rounds."""
    seeded = seeding_order(competitors, rng)
    bracket_size = next_power_of_two(len(seeded))
    round_count = bracket_round_count(bracket_size)
    fmt = MatchFormat.bracket.value

    drafts: Dict[MatchKey, MatchDraft] = {}

    # Round 1: seeded pairs, BYE sides advance immediately
    for slot, (side_a, side_b) in enumerate(place_seeds(seeded, bracket_size, BYE), start=1):
        draft = MatchDraft(format=fmt, match_code=f"KO_01_{slot:02d}", round=1, slot=slot, side_a=side_a, side_b=side_b)
        if draft.is_bye:
            draft.status = MATCH_BYE_ADVANCED
            draft.winner = side_b if side_a == BYE else side_a
        drafts[draft.key] = draft

    # Rounds 2..log2(P): placeholders wired to feeders
    for round_num in range(2, round_count + 1):
        for slot in range(1, bracket_size // (2**round_num) + 1):
            drafts[(round_num, slot)] = MatchDraft(
                format=fmt,
                match_code=f"KO_{round_num:02d}_{slot:02d}",
                round=round_num,
                slot=slot,
            )
    for (round_num, slot), draft in list(drafts.items()):
        if round_num == round_count:
            continue
        next_slot, side = downstream_slot(slot)
        target = drafts[(round_num + 1, next_slot)]
        if side == "a":
            target.feeder_a, target.feeder_a_role = draft.key, ROLE_WINNER
        else:
            target.feeder_b, target.feeder_b_role = draft.key, ROLE_WINNER

    semis = semifinal_round(round_count)
    if third_place_match and semis is not None:
        third = MatchDraft(
            format=fmt,
            match_code=THIRD_PLACE_CODE,
            round=round_count,
            slot=2,
            feeder_a=(semis, 1),
            feeder_a_role=ROLE_LOSER,
            feeder_b=(semis, 2),
            feeder_b_role=ROLE_LOSER,
        )
        drafts[third.key] = third

    ordered = sorted(drafts.values(), key=lambda d: d.key)
    _resolve_decided_feeders(ordered, drafts)
    return ordered


def _resolve_decided_feeders(ordered: List[MatchDraft], by_key: Dict[MatchKey, MatchDraft]) -> None:
    """Fill placeholders whose feeders are already decided by byes (in round order)."""
    for draft in ordered:
        if draft.feeder_a is None or draft.feeder_b is None:
            continue
        resolved = resolve_placeholder(
            by_key[draft.feeder_a], draft.feeder_a_role, by_key[draft.feeder_b], draft.feeder_b_role
        )
        if resolved is None:
            continue
        draft.side_a, draft.side_b, draft.status, draft.winner = resolved


# ============================================================================
# Entry point
# ============================================================================


def generate(
    competitors: Sequence[Competitor],
    format: str,
    rng: Optional[random.Random] = None,
    third_place_match: bool = False,
) -> List[MatchDraft]:
    """
    Produce the full match plan.

    Args:
        competitors: Teams or individuals taking part
        format: "league" | "bracket"
        rng: Random source for bracket seeding; fresh unseeded generator when omitted
        third_place_match: Bracket only; adds a semi-final losers match (P >= 4)

    Returns:
        MatchDraft list ordered by (round, slot)

    Raises:
        InsufficientCompetitors: fewer than two competitors
        ValueError: unknown format
    """
    fmt = MatchFormat(format)
    if len(competitors) < 2:
        raise InsufficientCompetitors(f"At least 2 competitors are required, got {len(competitors)}")

    if fmt == MatchFormat.league:
        drafts = generate_league(competitors)
    else:
        drafts = generate_bracket(competitors, rng or random.Random(), third_place_match=third_place_match)

    logger.debug(
        "Generated %s schedule for %d competitors: %d match slots (%d bye-advanced)",
        fmt.value,
        len(competitors),
        len(drafts),
        sum(1 for d in drafts if d.status == MATCH_BYE_ADVANCED),
    )
    return drafts
