"""
Team Generation API Routes
Splits the attending roster into teams and exposes the active split and its history.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from lineup.errors import LineupError
from lineup.models.generation_batch import GenerationBatch
from lineup.models.team import Team
from lineup.routes.common import CompetitorPayload, get_tournament_state, http_error, roster_from_payload
from lineup.services.tournament_state import TeamGenerationConfig, TournamentState

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class TeamGenerateRequest(TeamGenerationConfig):
    roster: List[CompetitorPayload]


class TeamMemberResponse(BaseModel):
    competitor_id: str
    display_name: str
    skill_score: Optional[float] = None


class TeamResponse(BaseModel):
    id: int
    event_id: int
    generation_batch_id: int
    name: str
    color: str
    order: int
    skill_total: Optional[float] = None
    member_ids: List[str]
    members: List[TeamMemberResponse]


class GenerationBatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    version_number: int
    strategy: str
    team_count: int
    status: str
    created_at: datetime
    superseded_at: Optional[datetime] = None


def _team_to_response(team: Team) -> TeamResponse:
    return TeamResponse(
        id=team.id,
        event_id=team.event_id,
        generation_batch_id=team.generation_batch_id,
        name=team.name,
        color=team.color,
        order=team.order,
        skill_total=team.skill_total,
        member_ids=team.member_ids,
        members=[
            TeamMemberResponse(competitor_id=m.competitor_id, display_name=m.display_name, skill_score=m.skill_score)
            for m in team.members
        ],
    )


def _batch_to_response(batch: GenerationBatch) -> GenerationBatchResponse:
    return GenerationBatchResponse.model_validate(batch)


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/events/{event_id}/teams/generate", response_model=List[TeamResponse], status_code=201)
def generate_teams(event_id: int, request: TeamGenerateRequest, state: TournamentState = Depends(get_tournament_state)):
    """
    Split the roster into teams as a new generation batch.

    The previous split, and any schedule built on it, is superseded (kept as
    history). Matches must be generated again explicitly.
    """
    roster = roster_from_payload(request.roster)
    config = TeamGenerationConfig(**request.model_dump(exclude={"roster"}))
    try:
        teams = state.generate_teams(roster, config)
    except LineupError as e:
        raise http_error(e)
    return [_team_to_response(t) for t in teams]


@router.get("/events/{event_id}/teams", response_model=List[TeamResponse])
def get_teams(event_id: int, state: TournamentState = Depends(get_tournament_state)):
    """Teams of the active generation batch, in draft order. Empty before the first split."""
    return [_team_to_response(t) for t in state.current_teams()]


@router.get("/events/{event_id}/generation-batches", response_model=List[GenerationBatchResponse])
def get_generation_batches(event_id: int, state: TournamentState = Depends(get_tournament_state)):
    """All team splits for the event, oldest first."""
    return [_batch_to_response(b) for b in state.list_generation_batches()]
