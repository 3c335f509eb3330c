"""Pydantic schemas for the user program lifecycle."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from hyrox_coach.schemas.completion import CompletionRecord
from hyrox_coach.schemas.program import GeneratedProgram, ScheduledWorkout


class StartProgramRequest(BaseModel):
    """Schema for enrolling in a program, by template or by personalization."""

    program_id: Optional[str] = Field(None, description="Template ID to enroll in")
    personalization: Optional[Dict[str, Any]] = Field(
        None,
        description="fitness_level, days_per_week, optional race_date and weak_stations",
    )
    start_date: Optional[date] = Field(None, description="Week 1 anchor; defaults to today")

    class Config:
        json_schema_extra = {
            "example": {
                "personalization": {
                    "fitness_level": "intermediate",
                    "days_per_week": 4,
                    "race_date": "2026-12-12",
                    "weak_stations": ["wall_balls", "sled_push"]
                }
            }
        }


class UserProgramResponse(BaseModel):
    """Schema for the current program with its completion history."""

    id: str
    program_id: str
    start_date: datetime
    race_date: Optional[datetime] = None
    fitness_level: Optional[str] = None
    days_per_week: Optional[int] = None
    weak_stations: List[str] = Field(default_factory=list)
    intensity_modifier: float = 1.0
    program_data: Optional[GeneratedProgram] = None
    completed_workouts: List[CompletionRecord] = Field(default_factory=list)


class QuitResponse(BaseModel):
    """Acknowledgement for quitting a program."""

    success: bool = True


class MakeupRequest(BaseModel):
    """Schema for requesting a condensed makeup of a missed workout."""

    week: int = Field(..., ge=1)
    day_of_week: int = Field(..., ge=0, le=6)


class TodayWorkoutResponse(BaseModel):
    """Today's scheduled workout with the intensity modifier applied."""

    week: int
    day_of_week: int
    workout: Optional[ScheduledWorkout] = None
    intensity_modifier: float
    adaptation: str = Field(..., description="Human-readable description of the modifier")
    completed: bool = False
