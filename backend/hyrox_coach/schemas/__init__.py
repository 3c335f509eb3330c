"""Pydantic schemas package for API request/response models."""

from hyrox_coach.schemas.program import (
    FitnessLevel,
    GeneratedProgram,
    Personalization,
    PersonalizationValidation,
    ProgramSummary,
    ProgramTemplate,
    ProgramTemplateSummary,
    ScheduledWorkout,
    ScheduledWorkoutType,
    WeekPlan,
    WorkoutParams,
)
from hyrox_coach.schemas.completion import (
    CompleteWorkoutRequest,
    CompletionRecord,
)
from hyrox_coach.schemas.analysis import (
    InsightsResponse,
    MissedWorkout,
    MissedWorkoutSummary,
    PerformanceAlert,
    PerformanceAnalysis,
    ProgramProgress,
    RaceReadinessScore,
)
from hyrox_coach.schemas.user_program import (
    MakeupRequest,
    QuitResponse,
    StartProgramRequest,
    TodayWorkoutResponse,
    UserProgramResponse,
)

__all__ = [
    # Program schemas
    "FitnessLevel",
    "GeneratedProgram",
    "Personalization",
    "PersonalizationValidation",
    "ProgramSummary",
    "ProgramTemplate",
    "ProgramTemplateSummary",
    "ScheduledWorkout",
    "ScheduledWorkoutType",
    "WeekPlan",
    "WorkoutParams",
    # Completion schemas
    "CompleteWorkoutRequest",
    "CompletionRecord",
    # Analysis schemas
    "InsightsResponse",
    "MissedWorkout",
    "MissedWorkoutSummary",
    "PerformanceAlert",
    "PerformanceAnalysis",
    "ProgramProgress",
    "RaceReadinessScore",
    # User program schemas
    "MakeupRequest",
    "QuitResponse",
    "StartProgramRequest",
    "TodayWorkoutResponse",
    "UserProgramResponse",
]
