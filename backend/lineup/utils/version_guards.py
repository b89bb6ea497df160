"""
Batch Safety Guards

Reusable guards for the batch-versioning rules:
- Results only on matches of the active schedule batch
- Optimistic checks of the caller's expected batch ids
- Event ownership validation
"""

from typing import Optional

from lineup.errors import AlreadyGeneratingConflict, InvalidMatchState, MatchNotFound
from lineup.models.generation_batch import BATCH_ACTIVE
from lineup.models.match import Match
from lineup.models.schedule_batch import ScheduleBatch
from lineup.services.tournament_store import TournamentStore


def require_expected_batch(current_id: Optional[int], expected_id: Optional[int], label: str) -> None:
    """
    Optimistic concurrency check.

    Args:
        current_id: Id of the batch that is active right now (None if none)
        expected_id: Id the caller last observed; None skips the check
        label: "generation" | "schedule", used in the message

    Raises:
        AlreadyGeneratingConflict: the active batch moved on since the caller read it
    """
    if expected_id is None:
        return
    if current_id != expected_id:
        raise AlreadyGeneratingConflict(
            f"STALE_{label.upper()}_BATCH: expected active {label} batch {expected_id}, found {current_id}"
        )


def get_match_or_404(store: TournamentStore, match_id: int, event_id: int) -> Match:
    """
    Get a match that belongs to the event.

    Raises:
        MatchNotFound: Unknown id or match of another event
    """
    match = store.get_match(match_id)
    if not match or match.event_id != event_id:
        raise MatchNotFound(f"Match {match_id} not found for event {event_id}")
    return match


def require_active_schedule_batch(store: TournamentStore, match: Match) -> ScheduleBatch:
    """
    Require that a match belongs to the event's active schedule batch.

    Raises:
        InvalidMatchState: The match's batch has been superseded
    """
    batch = store.get_schedule_batch(match.schedule_batch_id)
    if batch is None or batch.status != BATCH_ACTIVE:
        raise InvalidMatchState(
            f"SCHEDULE_BATCH_SUPERSEDED: match {match.id} belongs to schedule batch "
            f"{match.schedule_batch_id}, which is no longer active"
        )
    return batch
