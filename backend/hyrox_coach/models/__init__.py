"""Database models for the HYROX coach application."""

from hyrox_coach.models.base import Base
from hyrox_coach.models.user_program import UserProgram
from hyrox_coach.models.completed_workout import CompletedWorkout, CompletionStatus

__all__ = [
    "Base",
    "UserProgram",
    "CompletedWorkout",
    "CompletionStatus",
]
