from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from lineup.models.schedule_batch import ScheduleBatch

BYE = "BYE"

MATCH_PENDING = "pending"
MATCH_BYE_ADVANCED = "bye-advanced"
MATCH_COMPLETED = "completed"

ROLE_WINNER = "WINNER"
ROLE_LOSER = "LOSER"


class Match(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("schedule_batch_id", "match_code", name="uq_match_batch_code"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    event_id: int = Field(index=True)
    schedule_batch_id: int = Field(foreign_key="schedulebatch.id", index=True)
    generation_batch_id: Optional[int] = Field(default=None, foreign_key="generationbatch.id")
    format: str  # "league" | "bracket"
    match_code: str  # "RR_01_02", "KO_02_01", "3RD"
    round: int
    slot: int

    # Competitor id, "BYE", or null while waiting for an upstream winner
    side_a: Optional[str] = Field(default=None)
    side_b: Optional[str] = Field(default=None)

    score_a: Optional[int] = Field(default=None)
    score_b: Optional[int] = Field(default=None)
    winner: Optional[str] = Field(default=None)  # Null for a drawn league match
    status: str = Field(default=MATCH_PENDING)  # "pending" | "bye-advanced" | "completed"

    # Bracket wiring: upstream match -> side (roles WINNER | LOSER)
    source_match_a_id: Optional[int] = Field(default=None, foreign_key="match.id")
    source_match_b_id: Optional[int] = Field(default=None, foreign_key="match.id")
    source_a_role: Optional[str] = Field(default=None)
    source_b_role: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = Field(default=None)

    # Relationships
    schedule_batch: "ScheduleBatch" = Relationship(back_populates="matches")

    @property
    def result(self) -> Optional[Dict[str, Any]]:
        if self.score_a is None or self.score_b is None:
            return None
        return {"score_a": self.score_a, "score_b": self.score_b}

    @property
    def is_decided(self) -> bool:
        return self.status in (MATCH_COMPLETED, MATCH_BYE_ADVANCED)

    @property
    def loser(self) -> Optional[str]:
        """Side that did not advance; BYE for a bye-advanced match."""
        if not self.is_decided or self.winner is None:
            return None
        return self.side_b if self.winner == self.side_a else self.side_a
