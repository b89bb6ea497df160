"""
Match Schedule API Routes
Generates league/bracket schedules and serves the active schedule and its history.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict

from lineup.errors import LineupError
from lineup.models.match import Match
from lineup.models.schedule_batch import CompetitionType
from lineup.routes.common import CompetitorPayload, get_tournament_state, http_error, roster_from_payload
from lineup.services.tournament_state import MatchGenerationConfig, TournamentState

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class MatchGenerateRequest(MatchGenerationConfig):
    # Individual competition only; team competition uses the active teams
    roster: Optional[List[CompetitorPayload]] = None


class MatchResponse(BaseModel):
    id: int
    event_id: int
    schedule_batch_id: int
    generation_batch_id: Optional[int] = None
    format: str
    match_code: str
    round: int
    slot: int
    side_a: Optional[str] = None
    side_b: Optional[str] = None
    result: Optional[Dict[str, Any]] = None
    winner: Optional[str] = None
    status: str
    source_match_a_id: Optional[int] = None
    source_match_b_id: Optional[int] = None
    completed_at: Optional[datetime] = None


class ScheduleBatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    version_number: int
    generation_batch_id: Optional[int] = None
    format: str
    competition_type: str
    third_place_match: bool
    status: str
    created_at: datetime
    superseded_at: Optional[datetime] = None


def match_to_response(m: Match) -> MatchResponse:
    return MatchResponse(
        id=m.id,
        event_id=m.event_id,
        schedule_batch_id=m.schedule_batch_id,
        generation_batch_id=m.generation_batch_id,
        format=m.format,
        match_code=m.match_code,
        round=m.round,
        slot=m.slot,
        side_a=m.side_a,
        side_b=m.side_b,
        result=m.result,
        winner=m.winner,
        status=m.status,
        source_match_a_id=m.source_match_a_id,
        source_match_b_id=m.source_match_b_id,
        completed_at=m.completed_at,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/events/{event_id}/matches/generate", response_model=List[MatchResponse], status_code=201)
def generate_matches(
    event_id: int, request: MatchGenerateRequest, state: TournamentState = Depends(get_tournament_state)
):
    """
    Generate a new schedule batch (league or bracket).

    Team competition uses the teams of the active generation batch; individual
    competition uses the roster in the request body. The previous schedule is
    superseded and kept as history.
    """
    config = MatchGenerationConfig(**request.model_dump(exclude={"roster"}))
    roster = None
    if config.competition_type == CompetitionType.individual:
        roster = roster_from_payload(request.roster or [])
    try:
        matches = state.generate_matches(config, roster=roster)
    except LineupError as e:
        raise http_error(e)
    return [match_to_response(m) for m in matches]


@router.get("/events/{event_id}/matches", response_model=List[MatchResponse])
def get_matches(
    event_id: int,
    schedule_batch_id: Optional[int] = Query(None, description="Read a superseded batch instead of the active one"),
    state: TournamentState = Depends(get_tournament_state),
):
    """
    Matches ordered by round, slot.

    Defaults to the active schedule batch; pass schedule_batch_id to read history.
    """
    if schedule_batch_id is None:
        matches = state.current_matches()
    else:
        matches = state.matches_for_batch(schedule_batch_id)
        if not matches:
            raise HTTPException(status_code=404, detail="Schedule batch not found")
    return [match_to_response(m) for m in matches]


@router.get("/events/{event_id}/schedule-batches", response_model=List[ScheduleBatchResponse])
def get_schedule_batches(event_id: int, state: TournamentState = Depends(get_tournament_state)):
    """All schedule batches for the event, oldest first."""
    return [ScheduleBatchResponse.model_validate(b) for b in state.list_schedule_batches()]
