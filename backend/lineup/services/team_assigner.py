"""
Team Assigner

Partitions a roster into N teams. Pure: no session, no clock, randomness only
through the `rng` argument.

Strategies:
- random: shuffle, then deal round-robin into buckets
- skill-balanced: shuffle (tie-break), stable sort by effective skill
  descending, then snake draft 0..K-1, K-1..0, ...

Both strategies guarantee an exact partition with team sizes differing by at
most one.
"""

import logging
import random
import statistics
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from lineup.errors import InsufficientParticipants, InvalidTeamCount
from lineup.models.generation_batch import AssignmentStrategy
from lineup.services.roster import Competitor

logger = logging.getLogger(__name__)

# Team color palette
TEAM_COLORS = [
    "#EF4444",  # Red
    "#3B82F6",  # Blue
    "#10B981",  # Green
    "#F59E0B",  # Amber
    "#8B5CF6",  # Purple
    "#EC4899",  # Pink
    "#06B6D4",  # Cyan
    "#F97316",  # Orange
    "#84CC16",  # Lime
    "#6366F1",  # Indigo
]

_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


@dataclass
class TeamDraft:
    """One team of an assignment result, before it is persisted."""

    index: int
    name: str
    color: str
    members: List[Competitor] = field(default_factory=list)
    skill_total: Optional[float] = None

    @property
    def member_ids(self) -> List[str]:
        return [m.id for m in self.members]


def team_name(index: int) -> str:
    """チームA, チームB, ... then チーム27, チーム28 past Z."""
    if index < len(_LETTERS):
        return f"チーム{_LETTERS[index]}"
    return f"チーム{index + 1}"


def team_color(index: int) -> str:
    return TEAM_COLORS[index % len(TEAM_COLORS)]


def effective_scores(roster: Sequence[Competitor]) -> Dict[str, float]:
    """
    Map competitor id -> score used for balancing.

    Unrated competitors get the median of the rated scores. When nobody is
    rated everyone scores 0.0, so the draft order is just the shuffle.
    """
    rated = [c.skill_score for c in roster if c.skill_score is not None]
    fallback = statistics.median(rated) if rated else 0.0
    return {c.id: (c.skill_score if c.skill_score is not None else fallback) for c in roster}


def snake_order(team_count: int, picks: int) -> List[int]:
    """Team index for each pick: 0,1,2,2,1,0,0,1,2,... truncated to `picks`."""
    order: List[int] = []
    forward = list(range(team_count))
    while len(order) < picks:
        order.extend(forward)
        forward = forward[::-1]
    return order[:picks]


def _validate(roster: Sequence[Competitor], team_count: int) -> None:
    if team_count < 1:
        raise InvalidTeamCount(f"team_count must be >= 1, got {team_count}")
    if len(roster) < team_count:
        raise InsufficientParticipants(
            f"Cannot split {len(roster)} participants into {team_count} teams: "
            f"each team needs at least one member"
        )


def _empty_drafts(team_count: int) -> List[TeamDraft]:
    return [TeamDraft(index=i, name=team_name(i), color=team_color(i)) for i in range(team_count)]


def assign_random(roster: Sequence[Competitor], team_count: int, rng: random.Random) -> List[TeamDraft]:
    """Uniform shuffle, then deal member i to team i % team_count."""
    _validate(roster, team_count)
    shuffled = list(roster)
    rng.shuffle(shuffled)

    drafts = _empty_drafts(team_count)
    for i, competitor in enumerate(shuffled):
        drafts[i % team_count].members.append(competitor)
    return drafts


def assign_skill_balanced(roster: Sequence[Competitor], team_count: int, rng: random.Random) -> List[TeamDraft]:
    """Snake draft over competitors sorted by effective skill (ties broken by shuffle)."""
    _validate(roster, team_count)
    scores = effective_scores(roster)

    ordered = list(roster)
    rng.shuffle(ordered)
    # sorted() is stable, so equal scores keep their shuffled order
    ordered = sorted(ordered, key=lambda c: -scores[c.id])

    drafts = _empty_drafts(team_count)
    for competitor, team_index in zip(ordered, snake_order(team_count, len(ordered))):
        drafts[team_index].members.append(competitor)

    for draft in drafts:
        draft.skill_total = float(sum(scores[m.id] for m in draft.members))
    return drafts


def assign(
    roster: Sequence[Competitor],
    team_count: int,
    strategy: str,
    rng: Optional[random.Random] = None,
) -> List[TeamDraft]:
    """
    Partition `roster` into `team_count` teams.

    Args:
        roster: Eligible competitors (attending participants)
        team_count: Number of teams (>= 1)
        strategy: "random" | "skill-balanced"
        rng: Random source; a fresh unseeded generator when omitted

    Returns:
        TeamDraft list in team order

    Raises:
        InvalidTeamCount: team_count < 1
        InsufficientParticipants: fewer competitors than teams
        ValueError: unknown strategy
    """
    rng = rng or random.Random()
    strategy = AssignmentStrategy(strategy)

    if strategy == AssignmentStrategy.random:
        drafts = assign_random(roster, team_count, rng)
    else:
        drafts = assign_skill_balanced(roster, team_count, rng)

    logger.debug(
        "Assigned %d competitors into %d teams (%s): sizes=%s",
        len(roster),
        team_count,
        strategy.value,
        [len(d.members) for d in drafts],
    )
    return drafts
