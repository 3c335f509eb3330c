"""User program model: the live instance of a training program."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import Integer, String, DateTime, Float
from sqlalchemy.types import JSON
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hyrox_coach.models.base import Base

if TYPE_CHECKING:
    from hyrox_coach.models.completed_workout import CompletedWorkout


def _new_id() -> str:
    return uuid.uuid4().hex


class UserProgram(Base):
    """A user's enrolled training program. At most one per user."""

    __tablename__ = "user_programs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    program_id: Mapped[str] = mapped_column(String(255))

    # Schedule anchors
    start_date: Mapped[datetime] = mapped_column(DateTime)
    race_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Personalization inputs
    fitness_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # beginner/intermediate/advanced
    days_per_week: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    weak_stations: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)

    # Materialized schedule, stored as a versioned GeneratedProgram document
    program_data: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # Adjusted by the performance analyzer after each completion
    intensity_modifier: Mapped[float] = mapped_column(Float, default=1.0)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    completed_workouts: Mapped[List["CompletedWorkout"]] = relationship(
        "CompletedWorkout",
        back_populates="user_program",
        cascade="all, delete-orphan",
        order_by="CompletedWorkout.completed_at",
    )

    def __repr__(self) -> str:
        return f"<UserProgram(id={self.id}, user_id='{self.user_id}', program_id='{self.program_id}')>"
