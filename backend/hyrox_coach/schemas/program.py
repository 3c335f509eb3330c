"""Pydantic schemas for program templates, schedules and generated programs."""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


SCHEDULE_SCHEMA_VERSION = 1


class FitnessLevel(str, Enum):
    """Athlete fitness levels."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ScheduledWorkoutType(str, Enum):
    """Workout categories that can appear in a weekly schedule."""
    RUN = "run"
    STRENGTH = "strength"
    QUICK = "quick"        # Short mixed workout
    STATION = "station"    # Station practice
    COVERAGE = "coverage"  # Partial race coverage (percentage of race volume)
    FULL = "full"          # Full race simulation
    REST = "rest"


class RunType(str, Enum):
    """Running session types."""
    ZONE2 = "zone2"
    TEMPO = "tempo"
    INTERVALS = "intervals"


class StrengthFocus(str, Enum):
    """Strength session focus areas."""
    LOWER = "lower"
    UPPER = "upper"
    FULL = "full"


# ============== Workout Parameter Schemas ==============

class IntervalSet(BaseModel):
    """Running interval prescription."""
    reps: int = Field(..., gt=0, description="Number of repeats")
    distance: int = Field(..., gt=0, description="Repeat distance in meters")
    rest: int = Field(..., gt=0, description="Rest between repeats in seconds")


class StrengthExercise(BaseModel):
    """A single strength exercise prescription."""
    name: str = Field(..., max_length=255)
    sets: int = Field(..., ge=1)
    reps: str = Field(..., description="Rep prescription, e.g. '8', '8-10', '20 steps', 'max'")
    notes: Optional[str] = None


class WorkoutParams(BaseModel):
    """Type-specific parameter bag for a scheduled workout."""

    # run
    run_type: Optional[RunType] = None
    duration: Optional[int] = Field(None, gt=0, description="Duration in minutes")
    hr_zone: Optional[str] = None
    intervals: Optional[IntervalSet] = None

    # strength
    strength_focus: Optional[StrengthFocus] = None
    exercises: Optional[List[StrengthExercise]] = None
    station_work: Optional[List[str]] = None

    # station
    stations: Optional[List[str]] = None
    sets: Optional[int] = Field(None, ge=1)

    # coverage
    coverage: Optional[int] = Field(None, gt=0, le=150, description="Percentage of race volume")

    # quick
    focus: Optional[str] = None

    # makeup tagging
    is_makeup: Optional[bool] = None
    original_week: Optional[int] = None
    original_day_of_week: Optional[int] = None
    condense_factor: Optional[float] = None


class ScheduledWorkout(BaseModel):
    """A workout placed on a day of a program week."""

    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday, 6=Saturday")
    day_name: str = Field(..., description="Display name of the day")
    type: ScheduledWorkoutType = Field(..., description="Workout type")
    estimated_minutes: int = Field(..., ge=0, description="Estimated duration in minutes")
    params: WorkoutParams = Field(default_factory=WorkoutParams)

    @model_validator(mode="after")
    def check_type_params(self):
        params = self.params
        if self.type == ScheduledWorkoutType.RUN:
            if params.run_type is None or params.duration is None:
                raise ValueError("run workouts need run_type and duration")
            if params.run_type == RunType.INTERVALS and params.intervals is None:
                raise ValueError("interval runs need an interval prescription")
        elif self.type == ScheduledWorkoutType.STRENGTH:
            if params.strength_focus is None or not params.exercises:
                raise ValueError("strength workouts need a focus and at least one exercise")
        elif self.type == ScheduledWorkoutType.STATION:
            if not params.stations:
                raise ValueError("station workouts need at least one station")
        elif self.type == ScheduledWorkoutType.COVERAGE:
            if params.coverage is None:
                raise ValueError("coverage workouts need a coverage percentage")
        return self


class WeekPlan(BaseModel):
    """One week of a program."""

    week: int = Field(..., ge=1, description="1-based week number")
    phase: str = Field(..., description="Training phase label, e.g. Base, Peak, Taper")
    theme: str = Field(..., description="Theme of the week")
    is_deload: bool = Field(False, description="Reduced-volume recovery week")
    workouts: List[ScheduledWorkout] = Field(..., min_length=1)


class ProgramTemplate(BaseModel):
    """Immutable periodized program definition."""

    id: str
    name: str
    description: str
    weeks: int = Field(..., description="Total weeks (8 or 12)")
    target_level: FitnessLevel
    default_days_per_week: int = Field(..., ge=3, le=6)
    schedule: List[WeekPlan]

    class Config:
        frozen = True


class ProgramTemplateSummary(BaseModel):
    """Catalog listing entry without the full schedule."""

    id: str
    name: str
    description: str
    weeks: int
    target_level: FitnessLevel
    default_days_per_week: int


# ============== Personalization & Generated Programs ==============

class Personalization(BaseModel):
    """Validated athlete inputs for program generation."""

    fitness_level: FitnessLevel
    days_per_week: int = Field(..., ge=3, le=6)
    race_date: Optional[date] = None
    weak_stations: List[str] = Field(default_factory=list)


class PersonalizationValidation(BaseModel):
    """Outcome of validating raw personalization input."""

    valid: bool
    errors: List[str] = Field(default_factory=list)


class GeneratedProgram(BaseModel):
    """A fully materialized schedule, independent of the template it came from."""

    schema_version: int = Field(SCHEDULE_SCHEMA_VERSION, description="Stored document version")
    id: str
    template_id: str
    name: str
    description: str
    weeks: int
    days_per_week: int
    schedule: List[WeekPlan]
    personalization: Optional[Personalization] = None
    created_at: datetime


class ProgramSummary(BaseModel):
    """Workout counts of a generated program, for previews."""

    total_workouts: int
    run_workouts: int
    strength_workouts: int
    station_workouts: int
    coverage_workouts: int
    full_simulations: int
    rest_days: int
