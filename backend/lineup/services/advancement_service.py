"""
Bracket Advancement: when a match is decided, populate downstream placeholders.

A placeholder is only filled once BOTH of its feeders are decided (completed or
bye-advanced); it then becomes pending, or bye-advanced when one side is BYE.
Only side_a/side_b/status/winner of downstream matches in the same schedule
batch are touched. Caller commits.
"""

import logging
from typing import List

from lineup.models.match import MATCH_BYE_ADVANCED, Match
from lineup.services.schedule_generator import resolve_placeholder
from lineup.services.tournament_store import TournamentStore

logger = logging.getLogger(__name__)


def apply_advancement_for_decided_match(store: TournamentStore, match: Match) -> List[Match]:
    """
    Given a decided match, resolve every downstream match that lists it as a source.

    Cascades through bye-advanced downstream matches so a bye never stalls the bracket.

    Returns:
        Downstream matches whose sides were populated by this call

    Idempotent: a downstream match whose sides are already set is left alone.
    """
    populated: List[Match] = []
    queue = [match]
    while queue:
        current = queue.pop(0)
        if not current.is_decided:
            continue
        for down in store.downstream_matches(current):
            if down.side_a is not None and down.side_b is not None:
                continue
            feeder_a = store.get_match(down.source_match_a_id) if down.source_match_a_id else None
            feeder_b = store.get_match(down.source_match_b_id) if down.source_match_b_id else None
            resolved = resolve_placeholder(feeder_a, down.source_a_role, feeder_b, down.source_b_role)
            if resolved is None:
                continue
            down.side_a, down.side_b, down.status, down.winner = resolved
            store.save(down)
            populated.append(down)
            logger.info(
                "Advanced into match %s (%s): %s vs %s [%s]",
                down.id,
                down.match_code,
                down.side_a,
                down.side_b,
                down.status,
            )
            if down.status == MATCH_BYE_ADVANCED:
                queue.append(down)
    return populated
