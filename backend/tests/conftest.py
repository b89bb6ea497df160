import os

# Keep app startup (init_db) off the on-disk default database
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import random  # noqa: E402
from typing import List, Optional, Sequence  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from lineup.database import get_session  # noqa: E402
from lineup.main import app  # noqa: E402
from lineup.services.roster import Competitor  # noqa: E402
from lineup.services.tournament_state import TournamentState  # noqa: E402
from lineup.services.tournament_store import TournamentStore  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. All models MUST be imported before create_all() (see session_fixture)
# 4. App dependency overridden to use test_engine (see client_fixture)
# 5. Tables created per test and dropped afterwards
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on fresh tables"""
    # Import all models to ensure they're registered BEFORE create_all
    from lineup.models.generation_batch import GenerationBatch  # noqa: F401
    from lineup.models.match import Match  # noqa: F401
    from lineup.models.schedule_batch import ScheduleBatch  # noqa: F401
    from lineup.models.team import Team, TeamMember  # noqa: F401

    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session

    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Provide a test client with overridden database session

    Override MUST be set BEFORE TestClient() and stay in place for the
    entire duration so the app never uses its own engine.
    """
    app.dependency_overrides[get_session] = override_get_session

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()


# ============================================================================
# Engine helpers
# ============================================================================


def seeded_rng_factory(default_seed: int = 1234):
    """rng_factory that stays deterministic when a command passes no seed."""

    def factory(seed: Optional[int]) -> random.Random:
        return random.Random(default_seed if seed is None else seed)

    return factory


def make_roster(count: int, skills: Optional[Sequence[Optional[float]]] = None) -> List[Competitor]:
    """p1..pN with optional skill scores in the same order."""
    roster = []
    for i in range(count):
        skill = skills[i] if skills is not None else None
        roster.append(Competitor(id=f"p{i + 1}", display_name=f"Player {i + 1}", skill_score=skill))
    return roster


@pytest.fixture(name="state")
def state_fixture(session: Session) -> TournamentState:
    """TournamentState for event 1 with a deterministic rng."""
    return TournamentState(1, TournamentStore(session), rng_factory=seeded_rng_factory())


@pytest.fixture(name="make_state")
def make_state_fixture(session: Session):
    def _make(event_id: int) -> TournamentState:
        return TournamentState(event_id, TournamentStore(session), rng_factory=seeded_rng_factory())

    return _make
