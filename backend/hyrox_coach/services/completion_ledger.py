import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from hyrox_coach.exceptions import ValidationError
from hyrox_coach.models.completed_workout import CompletedWorkout, CompletionStatus
from hyrox_coach.services.program_repository import ProgramRepository

logger = logging.getLogger(__name__)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class CompletionLedger:
    """Record which scheduled workouts were done, keyed by (program, week, day)"""

    STATUSES = [status.value for status in CompletionStatus]

    def __init__(self, repository: ProgramRepository):
        self.repository = repository

    def validate_completion(
        self,
        week: Any,
        day_of_week: Any,
        fields: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Check a completion and return the full set of columns to write.

        Every problem is collected before raising, so a rejected completion
        reports all of them and writes nothing. Omitted optional fields reset
        to their defaults, since re-completing a slot overwrites it.
        """
        fields = fields or {}
        errors: List[str] = []

        if not _is_int(week) or week < 1:
            errors.append("Week must be a positive integer")
        if not _is_int(day_of_week) or not 0 <= day_of_week <= 6:
            errors.append("Day of week must be an integer between 0 (Sunday) and 6 (Saturday)")

        rpe = fields.get("rpe")
        if rpe is not None and (not _is_int(rpe) or not 1 <= rpe <= 10):
            errors.append("RPE must be an integer between 1 and 10")

        status = fields.get("completion_status")
        if isinstance(status, CompletionStatus):
            status = status.value
        if status is not None and status not in self.STATUSES:
            errors.append(f"Completion status must be one of {', '.join(self.STATUSES)}")

        percent = fields.get("percent_complete")
        if percent is not None and (not _is_number(percent) or not 0 <= percent <= 100):
            errors.append("Percent complete must be between 0 and 100")

        duration = fields.get("actual_duration")
        if duration is not None and (not _is_number(duration) or duration < 0):
            errors.append("Actual duration must be a non-negative number of minutes")

        session_id = fields.get("session_id")
        if session_id is not None and not isinstance(session_id, str):
            errors.append("Session ID must be a string")

        performance_data = fields.get("performance_data")
        if performance_data is not None and not isinstance(performance_data, dict):
            errors.append("Performance data must be an object")

        if errors:
            raise ValidationError(errors)

        return {
            "session_id": session_id,
            "actual_duration": round(duration) if duration is not None else None,
            "rpe": rpe,
            "completion_status": CompletionStatus(status) if status else CompletionStatus.FULL,
            "percent_complete": round(percent) if percent is not None else 100,
            "performance_data": performance_data,
        }

    def record_completion(
        self,
        user_program_id: str,
        week: Any,
        day_of_week: Any,
        fields: Optional[Mapping[str, Any]] = None,
        now: Optional[datetime] = None
    ) -> CompletedWorkout:
        """Validate and upsert a completion, refreshing completed_at to now"""
        values = self.validate_completion(week, day_of_week, fields)
        values["completed_at"] = now or datetime.utcnow()

        record = self.repository.upsert_completed_workout(user_program_id, week, day_of_week, values)
        logger.info(
            f"Recorded {record.completion_status.value} completion for program {user_program_id} "
            f"week {week} day {day_of_week}"
        )
        return record

    def list_completions(self, user_program_id: str) -> List[CompletedWorkout]:
        """Completions of a program, oldest first"""
        return self.repository.list_completed_workouts(user_program_id)
