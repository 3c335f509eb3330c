"""Pydantic schemas for missed-workout detection and performance analysis."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from hyrox_coach.schemas.program import ScheduledWorkout


class Importance(str, Enum):
    """How much a missed workout matters."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SuggestedAction(str, Enum):
    """Recovery action for a missed workout."""
    SKIP = "skip"
    MAKEUP_CONDENSED = "makeup_condensed"
    MAKEUP_FULL = "makeup_full"


class Trend(str, Enum):
    """Direction of recent performance."""
    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class AlertSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertType(str, Enum):
    HIGH_FATIGUE = "high_fatigue"
    LOW_COMPLETION = "low_completion"
    OVERTRAINING = "overtraining"
    UNDERTRAINED = "undertrained"
    INCONSISTENT = "inconsistent"


# ============== Missed Workouts ==============

class MissedWorkout(BaseModel):
    """A scheduled workout whose date has passed with no completion record."""

    week: int
    day_of_week: int
    day_name: str
    workout: ScheduledWorkout
    days_since_missed: int = Field(..., ge=1)
    importance: Importance
    suggested_action: SuggestedAction
    impact_on_readiness: int = Field(..., le=0, description="Negative readiness points")


class MissedWorkoutSummary(BaseModel):
    """All missed workouts of a program and what to do about them."""

    missed_workouts: List[MissedWorkout] = Field(default_factory=list)
    total_missed: int = 0
    readiness_impact: int = Field(0, le=0)
    recommendations: List[str] = Field(default_factory=list)


# ============== Performance ==============

class PerformanceAlert(BaseModel):
    """Threshold crossing worth telling the athlete about."""

    type: AlertType
    severity: AlertSeverity
    message: str


class PerformanceAnalysis(BaseModel):
    """Rolling-window view of recent training."""

    overall_trend: Trend
    recent_completion_rate: int = Field(..., ge=0, le=100, description="Last 7 days, percent")
    overall_completion_rate: int = Field(..., ge=0, le=100, description="All time, percent")
    average_rpe: Optional[float] = Field(None, description="Mean RPE over the last 7 days")
    fatigue_score: int = Field(..., ge=0, le=100, description="Higher means more fatigued")
    suggested_intensity_modifier: float = Field(1.0)
    alerts: List[PerformanceAlert] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ReadinessFactors(BaseModel):
    """Per-factor breakdown of the race readiness score (each 0-100)."""

    program_completion: int
    key_workout_completion: int
    performance_trend: int
    weekly_consistency: int
    fatigue_management: int
    urgency_penalty: int = Field(0, ge=0)


class RaceReadinessScore(BaseModel):
    """Composite race preparedness score."""

    score: int = Field(..., ge=0, le=100)
    factors: ReadinessFactors
    message: str


class ProgramProgress(BaseModel):
    """Where the athlete is in the program."""

    current_week: int
    total_weeks: int
    completed_workouts: int
    total_workouts: int = Field(..., description="Non-rest workouts scheduled to date")
    used_fallback: bool = Field(False, description="Stored schedule was unreadable; estimates were used")


class InsightsResponse(BaseModel):
    """Combined performance analysis, race readiness and progress."""

    analysis: PerformanceAnalysis
    race_readiness: RaceReadinessScore
    program_progress: ProgramProgress
