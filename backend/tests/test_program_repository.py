"""Tests for the SQLAlchemy program repository."""

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from conftest import NOW, PROGRAM_START
from hyrox_coach.database import enable_sqlite_foreign_keys
from hyrox_coach.models import Base, CompletedWorkout
from hyrox_coach.services.program_repository import SqlAlchemyProgramRepository


@pytest.fixture
def session_factory(tmp_path):
    """File-backed database so two sessions use separate connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'hyrox_coach.db'}",
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


class TestUpsertCompletedWorkout:

    def test_concurrent_insert_of_same_slot_keeps_last_write(self, session_factory, monkeypatch):
        session_a, session_b = session_factory(), session_factory()
        repo_a = SqlAlchemyProgramRepository(session_a)
        repo_b = SqlAlchemyProgramRepository(session_b)
        program_id = repo_a.create_user_program("user-1", {
            "program_id": "personalized-8-week",
            "start_date": datetime.combine(PROGRAM_START, datetime.min.time()),
        }).id

        lookup = repo_a._find_completion
        raced = []

        def lookup_then_other_writer_commits(*args):
            found = lookup(*args)
            if not raced:
                raced.append(True)
                repo_b.upsert_completed_workout(program_id, 1, 1, {"rpe": 5, "completed_at": NOW})
            return found

        monkeypatch.setattr(repo_a, "_find_completion", lookup_then_other_writer_commits)

        record = repo_a.upsert_completed_workout(program_id, 1, 1, {"rpe": 9, "completed_at": NOW})

        assert raced
        assert record.rpe == 9

        check = session_factory()
        stored = check.query(CompletedWorkout).filter(CompletedWorkout.user_program_id == program_id).all()
        assert len(stored) == 1
        assert stored[0].rpe == 9

        for session in (session_a, session_b, check):
            session.close()

    def test_existing_slot_is_overwritten(self, repository, user_program):
        repository.upsert_completed_workout(user_program.id, 1, 1, {"rpe": 5, "completed_at": NOW})
        record = repository.upsert_completed_workout(user_program.id, 1, 1, {"rpe": 8, "completed_at": NOW})

        assert record.rpe == 8
        assert len(repository.list_completed_workouts(user_program.id)) == 1
