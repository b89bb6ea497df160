from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from lineup.models.generation_batch import GenerationBatch


class Team(SQLModel, table=True):
    __table_args__ = (
        # Team order and names are unique within one split
        SAUniqueConstraint("generation_batch_id", "order", name="uq_batch_team_order"),
        SAUniqueConstraint("generation_batch_id", "name", name="uq_batch_team_name"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(index=True)
    generation_batch_id: int = Field(foreign_key="generationbatch.id", index=True)
    name: str
    color: str
    order: int  # 0-based draft position
    skill_total: Optional[float] = Field(default=None)  # Only for skill-balanced splits
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    generation_batch: "GenerationBatch" = Relationship(back_populates="teams")
    members: List["TeamMember"] = Relationship(
        back_populates="team", sa_relationship_kwargs={"order_by": "TeamMember.position"}
    )

    @property
    def member_ids(self) -> List[str]:
        return [m.competitor_id for m in self.members]


class TeamMember(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("team_id", "competitor_id", name="uq_team_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    team_id: int = Field(foreign_key="team.id", index=True)
    competitor_id: str  # Participant id from the roster snapshot
    display_name: str
    skill_score: Optional[float] = Field(default=None)
    position: int  # Pick order within the team

    team: "Team" = Relationship(back_populates="members")
