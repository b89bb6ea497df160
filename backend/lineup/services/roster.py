"""
Roster snapshot supplied by the Participant subsystem.

Immutable holders only; no behaviour beyond construction checks.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

KIND_INDIVIDUAL = "individual"
KIND_TEAM = "team"


@dataclass(frozen=True)
class Competitor:
    id: str
    display_name: str
    skill_score: Optional[float] = None  # Ordinal rating (e.g. 1-5); None = unrated
    kind: str = KIND_INDIVIDUAL  # "individual" | "team"


@dataclass(frozen=True)
class RosterSnapshot:
    """Attending competitors for one event at the moment a command was issued."""

    competitors: Tuple[Competitor, ...] = ()

    def __post_init__(self):
        seen = set()
        for competitor in self.competitors:
            if competitor.id in seen:
                raise ValueError(f"Duplicate competitor id in roster: {competitor.id}")
            seen.add(competitor.id)

    @classmethod
    def of(cls, competitors: Iterable[Competitor]) -> "RosterSnapshot":
        return cls(tuple(competitors))

    def __len__(self) -> int:
        return len(self.competitors)

    def __iter__(self) -> Iterator[Competitor]:
        return iter(self.competitors)

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(c.id for c in self.competitors)
