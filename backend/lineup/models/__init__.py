from lineup.models.generation_batch import AssignmentStrategy, GenerationBatch
from lineup.models.match import Match
from lineup.models.schedule_batch import CompetitionType, MatchFormat, ScheduleBatch
from lineup.models.team import Team, TeamMember

__all__ = [
    "AssignmentStrategy",
    "CompetitionType",
    "GenerationBatch",
    "Match",
    "MatchFormat",
    "ScheduleBatch",
    "Team",
    "TeamMember",
]
