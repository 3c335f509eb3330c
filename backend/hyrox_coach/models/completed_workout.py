"""Completed workout model: one record per (program, week, day) slot."""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import Integer, String, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hyrox_coach.models.base import Base

if TYPE_CHECKING:
    from hyrox_coach.models.user_program import UserProgram


class CompletionStatus(str, enum.Enum):
    """How much of a scheduled workout was done."""
    FULL = "full"
    PARTIAL = "partial"
    SKIPPED = "skipped"


def _new_id() -> str:
    return uuid.uuid4().hex


class CompletedWorkout(Base):
    """
    Completion record for a scheduled workout.

    Keyed by (user_program_id, week, day_of_week); re-completing the same
    slot overwrites the record instead of adding a new one.
    """

    __tablename__ = "completed_workouts"
    __table_args__ = (
        UniqueConstraint(
            "user_program_id", "week", "day_of_week",
            name="uq_completed_workout_program_week_day",
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_program_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("user_programs.id", ondelete="CASCADE"), index=True
    )
    week: Mapped[int] = mapped_column(Integer)
    day_of_week: Mapped[int] = mapped_column(Integer)  # 0=Sunday, 6=Saturday

    session_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    completed_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

    # Performance fields
    actual_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # minutes
    rpe: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)  # 1-10
    completion_status: Mapped[CompletionStatus] = mapped_column(
        Enum(CompletionStatus),
        default=CompletionStatus.FULL
    )
    percent_complete: Mapped[int] = mapped_column(Integer, default=100)
    performance_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Relationships
    user_program: Mapped["UserProgram"] = relationship(
        "UserProgram", back_populates="completed_workouts"
    )

    def __repr__(self) -> str:
        return (
            f"<CompletedWorkout(week={self.week}, day_of_week={self.day_of_week}, "
            f"status='{self.completion_status.value}')>"
        )
