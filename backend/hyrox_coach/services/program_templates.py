"""
Static catalog of periodized HYROX program templates.

Two templates ship with the app:
- 8-week race prep (intermediate): Specificity -> Peak -> Taper
- 12-week complete (beginner): Base -> Pace -> Accelerate -> Prime -> Taper

Both are written as six-day weeks; the plan generator collapses them to the
athlete's available days.
"""

import math
from typing import Dict, List, Optional

from hyrox_coach.schemas.program import (
    FitnessLevel,
    ProgramTemplate,
    RunType,
    ScheduledWorkout,
    ScheduledWorkoutType,
    StrengthExercise,
    StrengthFocus,
    WeekPlan,
    WorkoutParams,
)


# Race stations in race order
HYROX_STATIONS: List[str] = [
    "skierg",
    "sled_push",
    "sled_pull",
    "burpee_broad_jump",
    "rowing",
    "farmers_carry",
    "sandbag_lunges",
    "wall_balls",
]

# Stations most athletes struggle with; used when no weak stations are given
DEFAULT_WEAK_STATIONS: List[str] = [
    "burpee_broad_jump",
    "sandbag_lunges",
    "farmers_carry",
    "wall_balls",
]

# Race-weeks threshold: races this close get the 8-week template
EIGHT_WEEK_MAX_WEEKS_UNTIL_RACE = 10

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


STRENGTH_WORKOUT_TEMPLATES: Dict[str, List[StrengthExercise]] = {
    "lower": [
        StrengthExercise(name="Back Squat", sets=4, reps="8", notes="Focus on depth and controlled tempo"),
        StrengthExercise(name="Romanian Deadlift", sets=3, reps="10", notes="Flat back, feel the hamstrings"),
        StrengthExercise(name="Walking Lunges", sets=3, reps="20 steps", notes="Knee touches ground each rep"),
        StrengthExercise(name="Calf Raises", sets=3, reps="15"),
    ],
    "upper": [
        StrengthExercise(name="Bench Press", sets=4, reps="8"),
        StrengthExercise(name="Bent Over Row", sets=4, reps="8"),
        StrengthExercise(name="Overhead Press", sets=3, reps="10"),
        StrengthExercise(name="Pull-ups", sets=3, reps="max"),
    ],
    "full": [
        StrengthExercise(name="Deadlift", sets=4, reps="5"),
        StrengthExercise(name="Clean and Press", sets=3, reps="6"),
        StrengthExercise(name="Kettlebell Swings", sets=4, reps="15"),
        StrengthExercise(name="Burpees", sets=3, reps="10"),
    ],
}


# ============== Workout builders ==============

def _workout(
    day_of_week: int,
    workout_type: ScheduledWorkoutType,
    estimated_minutes: int,
    params: Optional[WorkoutParams] = None,
) -> ScheduledWorkout:
    return ScheduledWorkout(
        day_of_week=day_of_week,
        day_name=DAY_NAMES[day_of_week],
        type=workout_type,
        estimated_minutes=estimated_minutes,
        params=params or WorkoutParams(),
    )


def run_zone2(day: int, minutes: int) -> ScheduledWorkout:
    return _workout(day, ScheduledWorkoutType.RUN, minutes, WorkoutParams(
        run_type=RunType.ZONE2, duration=minutes, hr_zone="65-75% max HR",
    ))


def run_tempo(day: int, minutes: int) -> ScheduledWorkout:
    return _workout(day, ScheduledWorkoutType.RUN, minutes, WorkoutParams(
        run_type=RunType.TEMPO, duration=minutes, hr_zone="80-85% max HR",
    ))


def run_intervals(day: int, reps: int, distance: int, rest: int) -> ScheduledWorkout:
    # ~200 m per minute of running, plus rests and a 10 minute warmup/cooldown
    minutes = math.ceil(reps * (distance / 200 + rest / 60) + 10)
    return _workout(day, ScheduledWorkoutType.RUN, minutes, WorkoutParams(
        run_type=RunType.INTERVALS,
        duration=minutes,
        intervals={"reps": reps, "distance": distance, "rest": rest},
    ))


def strength(
    day: int,
    focus: StrengthFocus,
    station_work: List[str],
    exercise_count: Optional[int] = None,
) -> ScheduledWorkout:
    exercises = STRENGTH_WORKOUT_TEMPLATES[focus.value]
    if exercise_count is not None:
        exercises = exercises[:exercise_count]
    minutes = 50 if focus == StrengthFocus.FULL else 45
    return _workout(day, ScheduledWorkoutType.STRENGTH, minutes, WorkoutParams(
        strength_focus=focus,
        exercises=[e.model_copy() for e in exercises],
        station_work=list(station_work),
    ))


def station_practice(day: int, stations: List[str], sets: int, minutes: int) -> ScheduledWorkout:
    return _workout(day, ScheduledWorkoutType.STATION, minutes, WorkoutParams(
        stations=list(stations), sets=sets,
    ))


def coverage(day: int, percent: int, minutes: int) -> ScheduledWorkout:
    return _workout(day, ScheduledWorkoutType.COVERAGE, minutes, WorkoutParams(coverage=percent))


def full_sim(day: int) -> ScheduledWorkout:
    return _workout(day, ScheduledWorkoutType.FULL, 75)


def rest(day: int) -> ScheduledWorkout:
    return _workout(day, ScheduledWorkoutType.REST, 0)


LOWER = StrengthFocus.LOWER
UPPER = StrengthFocus.UPPER
FULL = StrengthFocus.FULL


# ============== 8-week intermediate program ==============

def _eight_week_schedule() -> List[WeekPlan]:
    return [
        # Specificity (weeks 1-4)
        WeekPlan(week=1, phase="Specificity", theme="Build Race Fitness", workouts=[
            strength(1, LOWER, ["sled_push"]),
            station_practice(2, ["burpee_broad_jump", "wall_balls"], 2, 30),
            rest(3),
            strength(4, UPPER, ["sled_pull", "farmers_carry"]),
            run_intervals(5, 6, 400, 90),
            coverage(6, 50, 45),
        ]),
        WeekPlan(week=2, phase="Specificity", theme="Build Race Fitness", workouts=[
            strength(1, LOWER, ["sandbag_lunges"]),
            station_practice(2, ["skierg", "rowing"], 2, 30),
            rest(3),
            strength(4, UPPER, ["wall_balls"]),
            run_tempo(5, 30),
            coverage(6, 50, 45),
        ]),
        WeekPlan(week=3, phase="Specificity", theme="Increase Intensity", workouts=[
            strength(1, FULL, ["sled_push", "sled_pull"]),
            station_practice(2, ["burpee_broad_jump", "sandbag_lunges", "wall_balls"], 2, 35),
            rest(3),
            run_intervals(4, 8, 400, 90),
            station_practice(5, ["farmers_carry", "rowing"], 2, 25),
            coverage(6, 75, 55),
        ]),
        WeekPlan(week=4, phase="Specificity", theme="Deload Week", is_deload=True, workouts=[
            run_zone2(1, 25),
            station_practice(2, ["skierg", "wall_balls"], 1, 20),
            rest(3),
            run_zone2(4, 25),
            rest(5),
            coverage(6, 50, 35),
        ]),
        # Peak (weeks 5-7)
        WeekPlan(week=5, phase="Peak", theme="Race Simulations", workouts=[
            strength(1, FULL, ["sled_push", "burpee_broad_jump"]),
            station_practice(2, ["skierg", "sled_pull", "rowing", "wall_balls"], 2, 40),
            rest(3),
            run_intervals(4, 5, 1000, 180),
            rest(5),
            coverage(6, 100, 70),
        ]),
        WeekPlan(week=6, phase="Peak", theme="Race Simulations", workouts=[
            strength(1, LOWER, ["sandbag_lunges"]),
            station_practice(2, ["burpee_broad_jump", "farmers_carry", "wall_balls"], 2, 35),
            rest(3),
            run_tempo(4, 35),
            rest(5),
            full_sim(6),
        ]),
        WeekPlan(week=7, phase="Peak", theme="Final Push", workouts=[
            strength(1, UPPER, ["sled_pull"]),
            station_practice(2, ["skierg", "rowing", "wall_balls"], 2, 30),
            rest(3),
            run_intervals(4, 4, 1000, 180),
            rest(5),
            full_sim(6),
        ]),
        # Taper
        WeekPlan(week=8, phase="Taper", theme="Race Ready", is_deload=True, workouts=[
            run_zone2(1, 20),
            station_practice(2, ["skierg", "wall_balls"], 1, 15),
            rest(3),
            run_zone2(4, 15),
            rest(5),
            coverage(6, 50, 30),
        ]),
    ]


# ============== 12-week beginner program ==============

def _twelve_week_schedule() -> List[WeekPlan]:
    return [
        # Base (weeks 1-4)
        WeekPlan(week=1, phase="Base", theme="Foundation", workouts=[
            run_zone2(1, 30),
            station_practice(2, ["skierg", "wall_balls"], 2, 25),
            rest(3),
            strength(4, LOWER, ["sled_push"], exercise_count=3),
            rest(5),
            coverage(6, 25, 30),
        ]),
        WeekPlan(week=2, phase="Base", theme="Foundation", workouts=[
            run_zone2(1, 30),
            station_practice(2, ["rowing", "burpee_broad_jump"], 2, 25),
            rest(3),
            strength(4, UPPER, ["sled_pull"], exercise_count=3),
            rest(5),
            coverage(6, 25, 30),
        ]),
        WeekPlan(week=3, phase="Base", theme="Build Endurance", workouts=[
            run_zone2(1, 35),
            station_practice(2, ["farmers_carry", "sandbag_lunges"], 2, 30),
            rest(3),
            strength(4, FULL, ["wall_balls"], exercise_count=3),
            run_zone2(5, 25),
            coverage(6, 25, 35),
        ]),
        WeekPlan(week=4, phase="Base", theme="Deload", is_deload=True, workouts=[
            run_zone2(1, 20),
            station_practice(2, ["skierg", "rowing"], 1, 15),
            rest(3),
            run_zone2(4, 20),
            rest(5),
            coverage(6, 25, 25),
        ]),
        # Pace (weeks 5-8)
        WeekPlan(week=5, phase="Pace", theme="Build Speed", workouts=[
            strength(1, LOWER, ["sled_push", "sandbag_lunges"]),
            station_practice(2, ["burpee_broad_jump", "wall_balls", "skierg"], 2, 35),
            rest(3),
            run_tempo(4, 30),
            station_practice(5, ["farmers_carry"], 2, 20),
            coverage(6, 50, 45),
        ]),
        WeekPlan(week=6, phase="Pace", theme="Build Speed", workouts=[
            strength(1, UPPER, ["sled_pull", "wall_balls"]),
            station_practice(2, ["rowing", "sled_push", "sled_pull"], 2, 35),
            rest(3),
            run_intervals(4, 6, 400, 90),
            station_practice(5, ["sandbag_lunges"], 2, 20),
            coverage(6, 50, 45),
        ]),
        WeekPlan(week=7, phase="Pace", theme="Half Simulations", workouts=[
            strength(1, FULL, ["burpee_broad_jump"]),
            station_practice(2, ["skierg", "sled_push", "rowing", "wall_balls"], 2, 40),
            rest(3),
            run_tempo(4, 35),
            rest(5),
            coverage(6, 50, 50),
        ]),
        WeekPlan(week=8, phase="Pace", theme="Deload", is_deload=True, workouts=[
            run_zone2(1, 25),
            station_practice(2, ["wall_balls", "burpee_broad_jump"], 1, 20),
            rest(3),
            run_zone2(4, 25),
            rest(5),
            coverage(6, 50, 35),
        ]),
        # Accelerate (weeks 9-10)
        WeekPlan(week=9, phase="Accelerate", theme="Race Intensity", workouts=[
            strength(1, FULL, ["sled_push", "sled_pull"]),
            station_practice(2, ["skierg", "burpee_broad_jump", "rowing", "farmers_carry", "wall_balls"], 2, 45),
            rest(3),
            run_intervals(4, 5, 1000, 180),
            rest(5),
            coverage(6, 75, 55),
        ]),
        WeekPlan(week=10, phase="Accelerate", theme="Full Simulations", workouts=[
            strength(1, LOWER, ["sandbag_lunges"]),
            station_practice(2, ["sled_push", "sled_pull", "burpee_broad_jump", "wall_balls"], 2, 40),
            rest(3),
            run_tempo(4, 30),
            rest(5),
            full_sim(6),
        ]),
        # Prime
        WeekPlan(week=11, phase="Prime", theme="Technical Polish", workouts=[
            run_zone2(1, 30),
            station_practice(2, ["burpee_broad_jump", "sandbag_lunges", "wall_balls"], 2, 35),
            rest(3),
            run_intervals(4, 4, 800, 120),
            rest(5),
            full_sim(6),
        ]),
        # Taper
        WeekPlan(week=12, phase="Taper", theme="Race Ready", is_deload=True, workouts=[
            run_zone2(1, 20),
            station_practice(2, ["skierg", "wall_balls"], 1, 15),
            rest(3),
            run_zone2(4, 15),
            rest(5),
            coverage(6, 50, 30),
        ]),
    ]


PROGRAM_TEMPLATES: List[ProgramTemplate] = [
    ProgramTemplate(
        id="personalized-8-week",
        name="8-Week Race Prep",
        description=(
            "Intensive 8-week program for intermediate athletes with race-specific "
            "training, running, and strength work."
        ),
        weeks=8,
        target_level=FitnessLevel.INTERMEDIATE,
        default_days_per_week=6,
        schedule=_eight_week_schedule(),
    ),
    ProgramTemplate(
        id="personalized-12-week",
        name="12-Week Complete",
        description=(
            "Comprehensive 12-week program building from base fitness to race day. "
            "Includes running, strength, and station work."
        ),
        weeks=12,
        target_level=FitnessLevel.BEGINNER,
        default_days_per_week=6,
        schedule=_twelve_week_schedule(),
    ),
]


def list_templates() -> List[ProgramTemplate]:
    """All templates in the catalog."""
    return list(PROGRAM_TEMPLATES)


def get_template_by_id(template_id: str) -> Optional[ProgramTemplate]:
    """Look up a template, returning None for unknown IDs."""
    for template in PROGRAM_TEMPLATES:
        if template.id == template_id:
            return template
    return None


def get_template_for_length(weeks: int) -> ProgramTemplate:
    return next(t for t in PROGRAM_TEMPLATES if t.weeks == weeks)


def select_template_for_weeks_until_race(weeks_until_race: int) -> ProgramTemplate:
    """8-week template when the race is at most 10 weeks out, otherwise 12-week."""
    if weeks_until_race <= EIGHT_WEEK_MAX_WEEKS_UNTIL_RACE:
        return get_template_for_length(8)
    return get_template_for_length(12)


def is_key_workout(workout: ScheduledWorkout, min_coverage: int = 75) -> bool:
    """Full simulations and high race-coverage sessions are key workouts."""
    if workout.type == ScheduledWorkoutType.FULL:
        return True
    if workout.type == ScheduledWorkoutType.COVERAGE:
        return (workout.params.coverage or 0) >= min_coverage
    return False
