# Force SQLModel table registration at test discovery time
from lineup.models.generation_batch import GenerationBatch  # noqa: F401
from lineup.models.match import Match  # noqa: F401
from lineup.models.schedule_batch import ScheduleBatch  # noqa: F401
from lineup.models.team import Team, TeamMember  # noqa: F401
