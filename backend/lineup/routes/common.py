"""
Shared route plumbing: TournamentState dependency, roster payloads and
engine error -> HTTP translation.
"""

from typing import List, Optional

from fastapi import Depends, HTTPException
from pydantic import BaseModel, field_validator
from sqlmodel import Session

from lineup.database import get_session
from lineup.errors import AlreadyGeneratingConflict, LineupError, MatchNotFound
from lineup.services.roster import KIND_INDIVIDUAL, Competitor, RosterSnapshot
from lineup.services.tournament_state import TournamentState
from lineup.services.tournament_store import TournamentStore


def get_tournament_state(event_id: int, session: Session = Depends(get_session)) -> TournamentState:
    return TournamentState(event_id, TournamentStore(session))


class CompetitorPayload(BaseModel):
    id: str
    display_name: str
    skill_score: Optional[float] = None

    @field_validator("id", "display_name")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


def roster_from_payload(payload: List[CompetitorPayload]) -> RosterSnapshot:
    try:
        return RosterSnapshot.of(
            Competitor(id=c.id, display_name=c.display_name, skill_score=c.skill_score, kind=KIND_INDIVIDUAL)
            for c in payload
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def http_error(exc: LineupError) -> HTTPException:
    """Map an engine error to the HTTP status the UI layer expects."""
    if isinstance(exc, MatchNotFound):
        status_code = 404
    elif isinstance(exc, AlreadyGeneratingConflict):
        status_code = 409
    else:
        status_code = 422
    return HTTPException(status_code=status_code, detail=exc.to_detail())
