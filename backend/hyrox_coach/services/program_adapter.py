"""Scale scheduled workouts by the intensity modifier and build makeup sessions."""

import re
from typing import Optional

from hyrox_coach.config import get_settings
from hyrox_coach.schemas.analysis import MissedWorkout
from hyrox_coach.schemas.program import (
    IntervalSet,
    RunType,
    ScheduledWorkout,
    ScheduledWorkoutType,
)

STEPS_PATTERN = re.compile(r"^(\d+)\s*(steps|each side|per side|per leg)$", re.IGNORECASE)
RANGE_PATTERN = re.compile(r"^(\d+)-(\d+)$")
SINGLE_PATTERN = re.compile(r"^(\d+)$")


def scale_value(value: float, modifier: float, minimum: Optional[int] = None, maximum: Optional[int] = None) -> int:
    scaled = round(value * modifier)
    if minimum is not None:
        scaled = max(minimum, scaled)
    if maximum is not None:
        scaled = min(maximum, scaled)
    return scaled


def scale_rep_string(reps: str, modifier: float) -> str:
    """
    Scale a rep prescription such as "8", "8-10" or "20 steps".

    Reps move opposite to the modifier: harder sessions mean heavier loads
    and fewer reps. "max", "amrap" and unrecognized formats are unchanged.
    """
    if reps.strip().lower() in ("max", "amrap"):
        return reps

    inverse = 2 - modifier

    match = STEPS_PATTERN.match(reps)
    if match:
        return f"{scale_value(int(match.group(1)), inverse, 10, 40)} {match.group(2)}"

    match = RANGE_PATTERN.match(reps)
    if match:
        low = scale_value(int(match.group(1)), inverse, 4, 20)
        high = scale_value(int(match.group(2)), inverse, 6, 25)
        return f"{low}-{high}"

    match = SINGLE_PATTERN.match(reps)
    if match:
        return str(scale_value(int(match.group(1)), inverse, 4, 25))

    return reps


def clamp_modifier(modifier: float) -> float:
    settings = get_settings()
    return max(settings.INTENSITY_MODIFIER_MIN, min(settings.INTENSITY_MODIFIER_MAX, modifier))


def _scale_workout(workout: ScheduledWorkout, factor: float) -> ScheduledWorkout:
    if workout.type == ScheduledWorkoutType.REST:
        return workout

    scaled = workout.model_copy(deep=True)
    params = scaled.params

    if workout.type == ScheduledWorkoutType.COVERAGE:
        if params.coverage is not None:
            params.coverage = scale_value(params.coverage, factor, 25, 150)
        scaled.estimated_minutes = scale_value(workout.estimated_minutes, factor, 20, 90)

    elif workout.type == ScheduledWorkoutType.RUN:
        if params.run_type in (RunType.ZONE2, RunType.TEMPO) and params.duration is not None:
            params.duration = scale_value(params.duration, factor, 15, 75)
            scaled.estimated_minutes = params.duration
        elif params.run_type == RunType.INTERVALS and params.intervals:
            params.intervals = IntervalSet(
                reps=scale_value(params.intervals.reps, factor, 3, 12),
                distance=scale_value(params.intervals.distance, factor, 200, 800),
                # Shorter rest when harder
                rest=scale_value(params.intervals.rest, 2 - factor, 60, 180),
            )

    elif workout.type == ScheduledWorkoutType.STATION:
        if params.sets is not None:
            params.sets = scale_value(params.sets, factor, 1, 3)
        scaled.estimated_minutes = scale_value(workout.estimated_minutes, factor, 15, 60)

    elif workout.type == ScheduledWorkoutType.STRENGTH:
        if params.exercises:
            for exercise in params.exercises:
                exercise.sets = scale_value(exercise.sets, factor, 2, 5)
                exercise.reps = scale_rep_string(exercise.reps, factor)
        scaled.estimated_minutes = scale_value(workout.estimated_minutes, factor, 30, 75)

    elif workout.type == ScheduledWorkoutType.FULL:
        scaled.estimated_minutes = scale_value(workout.estimated_minutes, factor, 60, 120)

    elif workout.type == ScheduledWorkoutType.QUICK:
        if params.duration is not None:
            params.duration = scale_value(params.duration, factor, 15, 45)
            scaled.estimated_minutes = params.duration
        else:
            scaled.estimated_minutes = scale_value(workout.estimated_minutes, factor, 15, 45)

    return scaled


def apply_intensity_modifier(workout: ScheduledWorkout, modifier: float) -> ScheduledWorkout:
    """Return a copy of the workout scaled by the modifier (clamped to the configured range)"""
    return _scale_workout(workout, clamp_modifier(modifier))


def condense_factor_for(days_late: int) -> float:
    """75% within 3 days, 50% within a week, 35% after that"""
    if days_late <= 3:
        return 0.75
    if days_late <= 7:
        return 0.5
    return 0.35


def generate_makeup_workout(missed: MissedWorkout) -> ScheduledWorkout:
    """
    Condensed version of a missed workout, tagged with its original slot.

    The condense factor is applied directly, not through the intensity
    modifier range, so a week-old miss really is half the volume (down to
    each workout type's minimums).
    """
    factor = condense_factor_for(missed.days_since_missed)
    makeup = _scale_workout(missed.workout, factor)
    if makeup is missed.workout:
        makeup = makeup.model_copy(deep=True)

    makeup.params.is_makeup = True
    makeup.params.original_week = missed.week
    makeup.params.original_day_of_week = missed.day_of_week
    makeup.params.condense_factor = factor
    return makeup


def get_adaptation_description(modifier: float) -> str:
    if modifier < 0.85:
        return "Reduced intensity (recovery focus)"
    if modifier < 0.95:
        return "Slightly reduced intensity"
    if modifier > 1.15:
        return "Increased intensity (challenge mode)"
    if modifier > 1.05:
        return "Slightly increased intensity"
    return "Standard intensity"
