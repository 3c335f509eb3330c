"""
Shared test fixtures: in-memory database, a fixed clock and sample schedules.

Every test gets a fresh in-memory SQLite database, so nothing leaks
between tests.
"""

from datetime import date, datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hyrox_coach.database import enable_sqlite_foreign_keys
from hyrox_coach.models import Base
from hyrox_coach.schemas.completion import CompletionRecord
from hyrox_coach.schemas.program import GeneratedProgram, WeekPlan
from hyrox_coach.services.program_repository import SqlAlchemyProgramRepository
from hyrox_coach.services.program_service import ProgramOrchestrator
from hyrox_coach.services.program_templates import coverage, full_sim, rest, run_zone2

# Monday
PROGRAM_START = date(2026, 3, 2)
NOW = datetime(2026, 3, 9, 9, 0)


class FixedClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def repository(db_session) -> SqlAlchemyProgramRepository:
    return SqlAlchemyProgramRepository(db_session)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def orchestrator(repository, clock) -> ProgramOrchestrator:
    return ProgramOrchestrator(repository, clock=clock)


@pytest.fixture
def user_program(repository):
    """A stored program row, for ledger tests."""
    return repository.create_user_program("user-1", {
        "program_id": "personalized-8-week",
        "start_date": datetime.combine(PROGRAM_START, datetime.min.time()),
        "program_data": None,
    })


@pytest.fixture
def wednesday_run_schedule():
    """Two weeks with a single Wednesday run in week 1."""
    return [
        WeekPlan(week=1, phase="Base", theme="Single run", workouts=[
            rest(1),
            run_zone2(3, 30),
        ]),
        WeekPlan(week=2, phase="Taper", theme="Rest", is_deload=True, workouts=[
            rest(1),
        ]),
    ]


@pytest.fixture
def key_workout_schedule():
    """One week: a 50% coverage session on Thursday and a full simulation on Saturday."""
    return [
        WeekPlan(week=1, phase="Peak", theme="Simulation", workouts=[
            coverage(4, 50, 45),
            full_sim(6),
        ]),
    ]


@pytest.fixture
def make_program():
    def _make(schedule, weeks=None):
        return GeneratedProgram(
            id="personalized-test",
            template_id="personalized-8-week",
            name="Test Program",
            description="Hand-built schedule",
            weeks=weeks or len(schedule),
            days_per_week=3,
            schedule=schedule,
            created_at=NOW,
        )
    return _make


@pytest.fixture
def make_completion():
    """Build a completion record the analyzer can read."""
    def _make(completed_at, rpe=None, status="full", percent=100, week=1, day_of_week=1, feeling=None):
        return CompletionRecord(
            week=week,
            day_of_week=day_of_week,
            completed_at=completed_at,
            rpe=rpe,
            completion_status=status,
            percent_complete=percent,
            performance_data={"feeling": feeling} if feeling else None,
        )
    return _make
