from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

from lineup.models.generation_batch import BATCH_ACTIVE

if TYPE_CHECKING:
    from lineup.models.match import Match


class MatchFormat(str, Enum):
    league = "league"
    bracket = "bracket"


class CompetitionType(str, Enum):
    team = "team"
    individual = "individual"


class ScheduleBatch(SQLModel, table=True):
    """All matches produced by one generation call. Older batches stay as read-only history."""

    __table_args__ = (SAUniqueConstraint("event_id", "version_number", name="uq_schedule_batch_event_version"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(index=True)
    version_number: int
    # Null for individual competition (matches reference roster competitors directly)
    generation_batch_id: Optional[int] = Field(default=None, foreign_key="generationbatch.id")
    format: str  # "league" | "bracket"
    competition_type: str  # "team" | "individual"
    third_place_match: bool = Field(default=False)
    status: str = Field(default=BATCH_ACTIVE)  # "active" | "superseded"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    superseded_at: Optional[datetime] = Field(default=None)

    # Relationships
    matches: List["Match"] = Relationship(back_populates="schedule_batch")
