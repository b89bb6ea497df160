"""
Tournament State

The batch-versioned aggregate for one event. Owns the active GenerationBatch
(team split) and ScheduleBatch (matches) and exposes the only mutating entry
points:

1. generate_teams   - new GenerationBatch; supersedes the previous split and
                      any schedule built on it
2. generate_matches - new ScheduleBatch; supersedes the previous schedule
3. record_result    - completes a pending match of the active schedule and
                      advances bracket winners

Every command runs under the per-event writer lock, validates fully before
writing, and commits once (rollback on any failure). Regeneration never edits
or deletes an older batch; it is kept as history.
"""

import logging
import random
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError

from lineup.config import DEFAULT_RNG_SEED
from lineup.errors import AlreadyGeneratingConflict, AmbiguousResult, InsufficientParticipants, InvalidMatchState
from lineup.models.generation_batch import AssignmentStrategy, GenerationBatch
from lineup.models.match import MATCH_BYE_ADVANCED, MATCH_COMPLETED, MATCH_PENDING, Match
from lineup.models.schedule_batch import CompetitionType, MatchFormat, ScheduleBatch
from lineup.models.team import Team
from lineup.services import schedule_generator, team_assigner
from lineup.services.advancement_service import apply_advancement_for_decided_match
from lineup.services.roster import KIND_TEAM, Competitor
from lineup.services.standings import StandingRow, compute_standings
from lineup.services.tournament_store import TournamentStore
from lineup.utils.event_lock import event_lock
from lineup.utils.version_guards import get_match_or_404, require_active_schedule_batch, require_expected_batch

logger = logging.getLogger(__name__)

RngFactory = Callable[[Optional[int]], random.Random]


class TournamentPhase(str, Enum):
    no_teams = "no_teams"
    teams_generated = "teams_generated"
    matches_generated = "matches_generated"
    in_progress = "in_progress"
    completed = "completed"


# ============================================================================
# Command configs
# ============================================================================


class TeamGenerationConfig(BaseModel):
    team_count: int
    strategy: AssignmentStrategy = AssignmentStrategy.random
    seed: Optional[int] = None
    expected_generation_batch_id: Optional[int] = None


class MatchGenerationConfig(BaseModel):
    format: MatchFormat
    competition_type: CompetitionType = CompetitionType.team
    third_place_match: bool = False
    seed: Optional[int] = None
    expected_schedule_batch_id: Optional[int] = None

    @field_validator("third_place_match")
    @classmethod
    def validate_third_place(cls, v, info):
        if v and info.data.get("format") == MatchFormat.league:
            raise ValueError("third_place_match is only available for bracket format")
        return v


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Seeded generator for reproducible runs; otherwise fresh entropy per call."""
    if seed is None:
        seed = DEFAULT_RNG_SEED
    return random.Random(seed)


def team_as_competitor(team: Team) -> Competitor:
    return Competitor(id=str(team.id), display_name=team.name, skill_score=team.skill_total, kind=KIND_TEAM)


# ============================================================================
# Aggregate
# ============================================================================


class TournamentState:
    def __init__(self, event_id: int, store: TournamentStore, rng_factory: Optional[RngFactory] = None):
        self.event_id = event_id
        self.store = store
        self.rng_factory = rng_factory or make_rng

    # ------------------------------------------------------------------
    # Reads (no lock; active batch id first, then its rows)
    # ------------------------------------------------------------------

    def current_generation_batch(self) -> Optional[GenerationBatch]:
        return self.store.active_generation_batch(self.event_id)

    def current_schedule_batch(self) -> Optional[ScheduleBatch]:
        return self.store.active_schedule_batch(self.event_id)

    def current_teams(self) -> List[Team]:
        batch = self.current_generation_batch()
        if batch is None:
            return []
        return self.store.teams_for_batch(batch.id)

    def current_matches(self) -> List[Match]:
        batch = self.current_schedule_batch()
        if batch is None:
            return []
        return self.store.matches_for_batch(batch.id)

    def matches_for_batch(self, schedule_batch_id: int) -> List[Match]:
        """Matches of any batch of this event, including superseded history."""
        batch = self.store.get_schedule_batch(schedule_batch_id)
        if batch is None or batch.event_id != self.event_id:
            return []
        return self.store.matches_for_batch(schedule_batch_id)

    def list_generation_batches(self) -> List[GenerationBatch]:
        return self.store.list_generation_batches(self.event_id)

    def list_schedule_batches(self) -> List[ScheduleBatch]:
        return self.store.list_schedule_batches(self.event_id)

    def phase(self) -> TournamentPhase:
        schedule = self.current_schedule_batch()
        if schedule is not None:
            matches = self.store.matches_for_batch(schedule.id)
            if matches and all(m.is_decided for m in matches):
                return TournamentPhase.completed
            if any(m.status == MATCH_COMPLETED for m in matches):
                return TournamentPhase.in_progress
            return TournamentPhase.matches_generated
        if self.current_generation_batch() is not None:
            return TournamentPhase.teams_generated
        return TournamentPhase.no_teams

    def snapshot(self) -> Dict:
        generation = self.current_generation_batch()
        schedule = self.current_schedule_batch()
        return {
            "event_id": self.event_id,
            "phase": self.phase().value,
            "generation_batch_id": generation.id if generation else None,
            "schedule_batch_id": schedule.id if schedule else None,
        }

    def standings(self) -> List[StandingRow]:
        """League table of the active schedule; empty for brackets or no schedule."""
        batch = self.current_schedule_batch()
        if batch is None or batch.format != MatchFormat.league.value:
            return []
        return compute_standings(self.store.matches_for_batch(batch.id))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def generate_teams(self, roster: Sequence[Competitor], config: TeamGenerationConfig) -> List[Team]:
        """
        Split the roster into a new GenerationBatch.

        Raises:
            AlreadyGeneratingConflict: concurrent command or stale expected batch id
            InvalidTeamCount / InsufficientParticipants: from the assigner
        """
        with event_lock(self.event_id, "generate_teams"):
            previous = self.current_generation_batch()
            require_expected_batch(
                previous.id if previous else None, config.expected_generation_batch_id, "generation"
            )

            drafts = team_assigner.assign(
                list(roster), config.team_count, config.strategy.value, rng=self.rng_factory(config.seed)
            )

            try:
                batch = GenerationBatch(
                    event_id=self.event_id,
                    version_number=self.store.next_generation_version(self.event_id),
                    strategy=config.strategy.value,
                    team_count=config.team_count,
                )
                superseded_schedule = None
                if previous is not None:
                    self.store.supersede(previous)
                    schedule = self.current_schedule_batch()
                    if schedule is not None and schedule.generation_batch_id == previous.id:
                        self.store.supersede(schedule)
                        superseded_schedule = schedule.id
                teams = self.store.add_generation_batch(batch, drafts)
                self.store.commit()
            except IntegrityError as e:
                self.store.rollback()
                raise AlreadyGeneratingConflict(
                    f"Team generation for event {self.event_id} raced with another writer"
                ) from e
            except Exception:
                self.store.rollback()
                raise

            logger.info(
                "Event %s: generation batch %s (v%s, %s) created with %d teams; superseded generation=%s schedule=%s",
                self.event_id,
                batch.id,
                batch.version_number,
                batch.strategy,
                len(teams),
                previous.id if previous else None,
                superseded_schedule,
            )
            return teams

    def generate_matches(
        self, config: MatchGenerationConfig, roster: Optional[Sequence[Competitor]] = None
    ) -> List[Match]:
        """
        Build a new ScheduleBatch from the active teams (team format) or the
        given roster (individual format).

        Raises:
            AlreadyGeneratingConflict: concurrent command or stale expected batch id
            InsufficientParticipants: no teams generated / empty individual roster
            InsufficientCompetitors: fewer than two competitors
        """
        with event_lock(self.event_id, "generate_matches"):
            previous = self.current_schedule_batch()
            require_expected_batch(previous.id if previous else None, config.expected_schedule_batch_id, "schedule")

            generation_batch_id = None
            if config.competition_type == CompetitionType.team:
                generation = self.current_generation_batch()
                if generation is None:
                    raise InsufficientParticipants(f"Teams have not been generated for event {self.event_id}")
                competitors = [team_as_competitor(t) for t in self.store.teams_for_batch(generation.id)]
                generation_batch_id = generation.id
            else:
                competitors = list(roster or [])
                if not competitors:
                    raise InsufficientParticipants(f"No participants selected for event {self.event_id}")

            drafts = schedule_generator.generate(
                competitors,
                config.format.value,
                rng=self.rng_factory(config.seed),
                third_place_match=config.third_place_match,
            )

            try:
                batch = ScheduleBatch(
                    event_id=self.event_id,
                    version_number=self.store.next_schedule_version(self.event_id),
                    generation_batch_id=generation_batch_id,
                    format=config.format.value,
                    competition_type=config.competition_type.value,
                    third_place_match=config.third_place_match,
                )
                if previous is not None:
                    self.store.supersede(previous)
                matches = self.store.add_schedule_batch(batch, drafts)
                self.store.commit()
            except IntegrityError as e:
                self.store.rollback()
                raise AlreadyGeneratingConflict(
                    f"Match generation for event {self.event_id} raced with another writer"
                ) from e
            except Exception:
                self.store.rollback()
                raise

            logger.info(
                "Event %s: schedule batch %s (v%s, %s/%s) created with %d matches; superseded=%s",
                self.event_id,
                batch.id,
                batch.version_number,
                batch.format,
                batch.competition_type,
                len(matches),
                previous.id if previous else None,
            )
            return matches

    def record_result(
        self,
        match_id: int,
        score_a: int,
        score_b: int,
        expected_schedule_batch_id: Optional[int] = None,
    ) -> Match:
        """
        Complete a pending match of the active schedule batch.

        Raises:
            MatchNotFound: unknown match or other event
            InvalidMatchState: bye, already completed, waiting for upstream, or superseded batch
            AmbiguousResult: tie in a bracket match
            AlreadyGeneratingConflict: concurrent command or stale expected batch id
            ValueError: negative score
        """
        with event_lock(self.event_id, "record_result"):
            match = get_match_or_404(self.store, match_id, self.event_id)
            batch = require_active_schedule_batch(self.store, match)
            require_expected_batch(batch.id, expected_schedule_batch_id, "schedule")

            if match.status == MATCH_BYE_ADVANCED:
                raise InvalidMatchState(f"Match {match_id} is a bye and takes no result")
            if match.status == MATCH_COMPLETED:
                raise InvalidMatchState(f"Match {match_id} already has a result")
            if match.status != MATCH_PENDING or match.side_a is None or match.side_b is None:
                raise InvalidMatchState(f"Match {match_id} is waiting for upstream winners")
            if score_a < 0 or score_b < 0:
                raise ValueError("Scores must be >= 0")
            if score_a == score_b and match.format == MatchFormat.bracket.value:
                raise AmbiguousResult(f"Match {match_id} is an elimination match; a tie cannot advance")

            try:
                match.score_a = score_a
                match.score_b = score_b
                match.status = MATCH_COMPLETED
                match.completed_at = datetime.now(timezone.utc)
                if score_a > score_b:
                    match.winner = match.side_a
                elif score_b > score_a:
                    match.winner = match.side_b
                else:
                    match.winner = None
                self.store.save(match)

                advanced: List[Match] = []
                if match.format == MatchFormat.bracket.value:
                    advanced = apply_advancement_for_decided_match(self.store, match)
                self.store.commit()
                self.store.refresh(match)
            except Exception:
                self.store.rollback()
                raise

            logger.info(
                "Event %s: match %s (%s) completed %s-%s, winner=%s, advanced=%d",
                self.event_id,
                match.id,
                match.match_code,
                score_a,
                score_b,
                match.winner,
                len(advanced),
            )
            return match
