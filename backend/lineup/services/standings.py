"""
League table for a round-robin schedule batch.

Ordering: points desc, goal difference desc, goals for desc, competitor id asc.
Only completed matches count; byes and unplayed matches are ignored.
"""

from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from lineup.config import DRAW_POINTS, LOSS_POINTS, WIN_POINTS
from lineup.models.match import BYE, MATCH_COMPLETED, Match


@dataclass
class StandingRow:
    competitor_id: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0
    rank: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def to_dict(self) -> dict:
        result = asdict(self)
        result["goal_difference"] = self.goal_difference
        return result


def compute_standings(
    matches: Iterable[Match],
    competitor_ids: Optional[Sequence[str]] = None,
    win_points: int = WIN_POINTS,
    draw_points: int = DRAW_POINTS,
    loss_points: int = LOSS_POINTS,
) -> List[StandingRow]:
    """
    Build the league table.

    Args:
        matches: Matches of one schedule batch
        competitor_ids: Everyone in the field; competitors without a completed
            match still get a zero row. Defaults to sides seen in `matches`.
        win_points / draw_points / loss_points: Scoring rules

    Returns:
        Rows ranked 1..N
    """
    matches = list(matches)
    if competitor_ids is None:
        seen: List[str] = []
        for m in matches:
            for side in (m.side_a, m.side_b):
                if side is not None and side != BYE and side not in seen:
                    seen.append(side)
        competitor_ids = seen

    rows: Dict[str, StandingRow] = {cid: StandingRow(competitor_id=cid) for cid in competitor_ids}

    for match in matches:
        if match.status != MATCH_COMPLETED or match.score_a is None or match.score_b is None:
            continue
        row_a = rows.setdefault(match.side_a, StandingRow(competitor_id=match.side_a))
        row_b = rows.setdefault(match.side_b, StandingRow(competitor_id=match.side_b))

        for row, scored, conceded in ((row_a, match.score_a, match.score_b), (row_b, match.score_b, match.score_a)):
            row.played += 1
            row.goals_for += scored
            row.goals_against += conceded
            if scored > conceded:
                row.won += 1
                row.points += win_points
            elif scored < conceded:
                row.lost += 1
                row.points += loss_points
            else:
                row.drawn += 1
                row.points += draw_points

    ranked = sorted(rows.values(), key=lambda r: (-r.points, -r.goal_difference, -r.goals_for, r.competitor_id))
    for index, row in enumerate(ranked, start=1):
        row.rank = index
    return ranked
