"""
Tournament Store

Persistence port for TournamentState. Wraps a SQLModel session; all reads
and writes of batches, teams and matches for the engine go through here.
Nothing is committed until TournamentState calls commit().
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import Session, select

from lineup.models.generation_batch import BATCH_ACTIVE, BATCH_SUPERSEDED, GenerationBatch
from lineup.models.match import Match
from lineup.models.schedule_batch import ScheduleBatch
from lineup.models.team import Team, TeamMember
from lineup.services.schedule_generator import MatchDraft
from lineup.services.team_assigner import TeamDraft


class TournamentStore:
    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Generation batches / teams
    # ------------------------------------------------------------------

    def active_generation_batch(self, event_id: int) -> Optional[GenerationBatch]:
        return self.session.exec(
            select(GenerationBatch)
            .where(GenerationBatch.event_id == event_id, GenerationBatch.status == BATCH_ACTIVE)
            .order_by(GenerationBatch.version_number.desc())
        ).first()

    def list_generation_batches(self, event_id: int) -> List[GenerationBatch]:
        return list(
            self.session.exec(
                select(GenerationBatch)
                .where(GenerationBatch.event_id == event_id)
                .order_by(GenerationBatch.version_number)
            ).all()
        )

    def next_generation_version(self, event_id: int) -> int:
        current = self.session.exec(
            select(func.max(GenerationBatch.version_number)).where(GenerationBatch.event_id == event_id)
        ).one()
        return (current or 0) + 1

    def teams_for_batch(self, generation_batch_id: int) -> List[Team]:
        return list(
            self.session.exec(
                select(Team).where(Team.generation_batch_id == generation_batch_id).order_by(Team.order)
            ).all()
        )

    def add_generation_batch(self, batch: GenerationBatch, drafts: Sequence[TeamDraft]) -> List[Team]:
        """Stage a batch and its teams/members. Flushes so ids are assigned."""
        self.session.add(batch)
        self.session.flush()

        teams: List[Team] = []
        for draft in drafts:
            team = Team(
                event_id=batch.event_id,
                generation_batch_id=batch.id,
                name=draft.name,
                color=draft.color,
                order=draft.index,
                skill_total=draft.skill_total,
            )
            self.session.add(team)
            self.session.flush()
            for position, competitor in enumerate(draft.members):
                self.session.add(
                    TeamMember(
                        team_id=team.id,
                        competitor_id=competitor.id,
                        display_name=competitor.display_name,
                        skill_score=competitor.skill_score,
                        position=position,
                    )
                )
            teams.append(team)
        self.session.flush()
        return teams

    # ------------------------------------------------------------------
    # Schedule batches / matches
    # ------------------------------------------------------------------

    def active_schedule_batch(self, event_id: int) -> Optional[ScheduleBatch]:
        return self.session.exec(
            select(ScheduleBatch)
            .where(ScheduleBatch.event_id == event_id, ScheduleBatch.status == BATCH_ACTIVE)
            .order_by(ScheduleBatch.version_number.desc())
        ).first()

    def get_schedule_batch(self, schedule_batch_id: int) -> Optional[ScheduleBatch]:
        return self.session.get(ScheduleBatch, schedule_batch_id)

    def list_schedule_batches(self, event_id: int) -> List[ScheduleBatch]:
        return list(
            self.session.exec(
                select(ScheduleBatch).where(ScheduleBatch.event_id == event_id).order_by(ScheduleBatch.version_number)
            ).all()
        )

    def next_schedule_version(self, event_id: int) -> int:
        current = self.session.exec(
            select(func.max(ScheduleBatch.version_number)).where(ScheduleBatch.event_id == event_id)
        ).one()
        return (current or 0) + 1

    def matches_for_batch(self, schedule_batch_id: int) -> List[Match]:
        return list(
            self.session.exec(
                select(Match)
                .where(Match.schedule_batch_id == schedule_batch_id)
                .order_by(Match.round, Match.slot)
            ).all()
        )

    def get_match(self, match_id: int) -> Optional[Match]:
        return self.session.get(Match, match_id)

    def downstream_matches(self, match: Match) -> List[Match]:
        """Matches in the same batch fed by `match` (either side)."""
        return list(
            self.session.exec(
                select(Match)
                .where(
                    Match.schedule_batch_id == match.schedule_batch_id,
                    (Match.source_match_a_id == match.id) | (Match.source_match_b_id == match.id),
                )
                .order_by(Match.round, Match.slot)
            ).all()
        )

    def add_schedule_batch(self, batch: ScheduleBatch, drafts: Sequence[MatchDraft]) -> List[Match]:
        """
        Stage a batch and its matches, translating draft feeder keys into
        source_match ids. Drafts must be in (round, slot) order so feeders are
        flushed before the matches that reference them.
        """
        self.session.add(batch)
        self.session.flush()

        by_key: Dict[tuple, Match] = {}
        matches: List[Match] = []
        for draft in drafts:
            match = Match(
                event_id=batch.event_id,
                schedule_batch_id=batch.id,
                generation_batch_id=batch.generation_batch_id,
                format=draft.format,
                match_code=draft.match_code,
                round=draft.round,
                slot=draft.slot,
                side_a=draft.side_a,
                side_b=draft.side_b,
                status=draft.status,
                winner=draft.winner,
                source_match_a_id=by_key[draft.feeder_a].id if draft.feeder_a else None,
                source_match_b_id=by_key[draft.feeder_b].id if draft.feeder_b else None,
                source_a_role=draft.feeder_a_role,
                source_b_role=draft.feeder_b_role,
            )
            self.session.add(match)
            self.session.flush()
            by_key[draft.key] = match
            matches.append(match)
        return matches

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def supersede(self, batch) -> None:
        """Mark a generation or schedule batch superseded. Rows are kept."""
        batch.status = BATCH_SUPERSEDED
        batch.superseded_at = datetime.now(timezone.utc)
        self.session.add(batch)

    def save(self, *rows) -> None:
        for row in rows:
            self.session.add(row)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    def refresh(self, *rows) -> None:
        for row in rows:
            self.session.refresh(row)
