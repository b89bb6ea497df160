"""
Runtime: match results, league standings and lifecycle state.
Results are accepted only on pending matches of the active schedule batch.
When a bracket match completes, downstream placeholders are populated.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from lineup.errors import LineupError
from lineup.routes.common import get_tournament_state, http_error
from lineup.routes.matches import MatchResponse, match_to_response
from lineup.services.tournament_state import TournamentState

router = APIRouter()


class MatchResultUpdate(BaseModel):
    score_a: int = Field(ge=0)
    score_b: int = Field(ge=0)
    expected_schedule_batch_id: Optional[int] = None


class StandingResponse(BaseModel):
    competitor_id: str
    played: int
    won: int
    drawn: int
    lost: int
    goals_for: int
    goals_against: int
    goal_difference: int
    points: int
    rank: int


class TournamentStateResponse(BaseModel):
    event_id: int
    phase: str
    generation_batch_id: Optional[int] = None
    schedule_batch_id: Optional[int] = None


@router.patch("/events/{event_id}/matches/{match_id}/result", response_model=MatchResponse)
def record_match_result(
    event_id: int,
    match_id: int,
    payload: MatchResultUpdate,
    state: TournamentState = Depends(get_tournament_state),
) -> MatchResponse:
    """Record a score. Ties are rejected for bracket matches."""
    try:
        match = state.record_result(
            match_id,
            payload.score_a,
            payload.score_b,
            expected_schedule_batch_id=payload.expected_schedule_batch_id,
        )
    except LineupError as e:
        raise http_error(e)
    return match_to_response(match)


@router.get("/events/{event_id}/standings", response_model=List[StandingResponse])
def get_standings(event_id: int, state: TournamentState = Depends(get_tournament_state)):
    """League table for the active schedule batch (empty for brackets)."""
    return [StandingResponse(**row.to_dict()) for row in state.standings()]


@router.get("/events/{event_id}/state", response_model=TournamentStateResponse)
def get_state(event_id: int, state: TournamentState = Depends(get_tournament_state)):
    """Lifecycle phase plus the active batch ids (use them as expected ids for optimistic checks)."""
    return TournamentStateResponse(**state.snapshot())
