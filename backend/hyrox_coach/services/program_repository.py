import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hyrox_coach.exceptions import ConflictError, PersistenceError
from hyrox_coach.models.completed_workout import CompletedWorkout
from hyrox_coach.models.user_program import UserProgram

logger = logging.getLogger(__name__)


class ProgramRepository(ABC):
    """Persistence collaborator for user programs and their completion records"""

    @abstractmethod
    def get_user_program(self, user_id: str) -> Optional[UserProgram]:
        """Current program of a user, or None"""

    @abstractmethod
    def create_user_program(self, user_id: str, fields: Dict[str, Any]) -> UserProgram:
        """Create a program for the user, deleting any existing one first"""

    @abstractmethod
    def delete_user_program(self, user_id: str) -> bool:
        """Delete the user's program and its completions. Returns False if there was none."""

    @abstractmethod
    def upsert_completed_workout(
        self,
        user_program_id: str,
        week: int,
        day_of_week: int,
        fields: Dict[str, Any]
    ) -> CompletedWorkout:
        """Insert or overwrite the completion at (program, week, day); the last writer wins"""

    @abstractmethod
    def list_completed_workouts(self, user_program_id: str) -> List[CompletedWorkout]:
        """Completions of a program ordered by completed_at ascending"""

    @abstractmethod
    def update_intensity_modifier(self, user_program_id: str, modifier: float) -> None:
        """Persist a new intensity modifier"""


class SqlAlchemyProgramRepository(ProgramRepository):
    """ProgramRepository backed by a SQLAlchemy session"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_program(self, user_id: str) -> Optional[UserProgram]:
        try:
            return self.db.query(UserProgram).filter(UserProgram.user_id == user_id).first()
        except SQLAlchemyError as e:
            self._rollback("get_user_program", e)
            raise PersistenceError("Storage failure during get_user_program") from e

    def create_user_program(self, user_id: str, fields: Dict[str, Any]) -> UserProgram:
        try:
            existing = self.db.query(UserProgram).filter(UserProgram.user_id == user_id).first()
            if existing:
                self.db.delete(existing)
                self.db.flush()
                logger.info(f"Replaced existing program {existing.id} for user {user_id}")

            program = UserProgram(user_id=user_id, **fields)
            self.db.add(program)
            self.db.commit()
            self.db.refresh(program)
            return program
        except SQLAlchemyError as e:
            self._rollback("create_user_program", e)
            raise PersistenceError("Storage failure during create_user_program") from e

    def delete_user_program(self, user_id: str) -> bool:
        try:
            program = self.db.query(UserProgram).filter(UserProgram.user_id == user_id).first()
            if not program:
                return False
            self.db.delete(program)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self._rollback("delete_user_program", e)
            raise PersistenceError("Storage failure during delete_user_program") from e

    def upsert_completed_workout(
        self,
        user_program_id: str,
        week: int,
        day_of_week: int,
        fields: Dict[str, Any]
    ) -> CompletedWorkout:
        try:
            try:
                record = self._write_completion(user_program_id, week, day_of_week, fields)
            except IntegrityError:
                # Another writer inserted this slot after our lookup; overwrite its row
                self.db.rollback()
                logger.info(
                    f"Completion for week {week}, day {day_of_week} was inserted concurrently; overwriting"
                )
                record = self._write_completion(user_program_id, week, day_of_week, fields)
            self.db.refresh(record)
            return record
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(
                f"Completion for week {week}, day {day_of_week} could not be written"
            ) from e
        except SQLAlchemyError as e:
            self._rollback("upsert_completed_workout", e)
            raise PersistenceError("Storage failure during upsert_completed_workout") from e

    def list_completed_workouts(self, user_program_id: str) -> List[CompletedWorkout]:
        try:
            return self.db.query(CompletedWorkout).filter(
                CompletedWorkout.user_program_id == user_program_id
            ).order_by(CompletedWorkout.completed_at.asc()).all()
        except SQLAlchemyError as e:
            self._rollback("list_completed_workouts", e)
            raise PersistenceError("Storage failure during list_completed_workouts") from e

    def update_intensity_modifier(self, user_program_id: str, modifier: float) -> None:
        try:
            program = self.db.query(UserProgram).filter(UserProgram.id == user_program_id).first()
            if program:
                program.intensity_modifier = modifier
                self.db.commit()
        except SQLAlchemyError as e:
            self._rollback("update_intensity_modifier", e)
            raise PersistenceError("Storage failure during update_intensity_modifier") from e

    # Private helper methods

    def _find_completion(self, user_program_id: str, week: int, day_of_week: int) -> Optional[CompletedWorkout]:
        return self.db.query(CompletedWorkout).filter(
            CompletedWorkout.user_program_id == user_program_id,
            CompletedWorkout.week == week,
            CompletedWorkout.day_of_week == day_of_week
        ).first()

    def _write_completion(
        self,
        user_program_id: str,
        week: int,
        day_of_week: int,
        fields: Dict[str, Any]
    ) -> CompletedWorkout:
        record = self._find_completion(user_program_id, week, day_of_week)
        if record:
            for key, value in fields.items():
                setattr(record, key, value)
        else:
            record = CompletedWorkout(
                user_program_id=user_program_id,
                week=week,
                day_of_week=day_of_week,
                **fields
            )
            self.db.add(record)
        self.db.commit()
        return record

    def _rollback(self, operation: str, error: SQLAlchemyError) -> None:
        self.db.rollback()
        logger.error(f"Database error in {operation}: {error}")
