from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from lineup.models.team import Team

BATCH_ACTIVE = "active"
BATCH_SUPERSEDED = "superseded"


class AssignmentStrategy(str, Enum):
    random = "random"
    skill_balanced = "skill-balanced"


class GenerationBatch(SQLModel, table=True):
    """One team-split result for an event. Superseded, never edited, by later splits."""

    __table_args__ = (SAUniqueConstraint("event_id", "version_number", name="uq_generation_batch_event_version"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(index=True)
    version_number: int
    strategy: str  # "random" | "skill-balanced"
    team_count: int
    status: str = Field(default=BATCH_ACTIVE)  # "active" | "superseded"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    superseded_at: Optional[datetime] = Field(default=None)

    # Relationships
    teams: List["Team"] = Relationship(back_populates="generation_batch")
