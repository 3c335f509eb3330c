import logging
import math
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from hyrox_coach.exceptions import ValidationError
from hyrox_coach.schemas.program import (
    FitnessLevel,
    GeneratedProgram,
    Personalization,
    PersonalizationValidation,
    ProgramSummary,
    ProgramTemplate,
    RunType,
    ScheduledWorkout,
    ScheduledWorkoutType,
    WeekPlan,
)
from hyrox_coach.services.program_templates import (
    DAY_NAMES,
    DEFAULT_WEAK_STATIONS,
    HYROX_STATIONS,
    get_template_for_length,
    is_key_workout,
    select_template_for_weeks_until_race,
)

logger = logging.getLogger(__name__)


def calculate_weeks_until_race(race_date: Optional[date], today: date) -> Optional[int]:
    """Whole weeks (rounded up) from today until the race, never negative."""
    if race_date is None:
        return None
    days = (race_date - today).days
    return max(0, math.ceil(days / 7))


def parse_date(value: Any) -> date:
    """Accept a date, datetime or ISO-8601 string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            return date.fromisoformat(text)
    raise ValueError(f"Not a date: {value!r}")


class PlanGenerator:
    """Generate personalized HYROX programs from the template catalog"""

    # Lower rank is dropped first when a week has more sessions than training days
    DROP_RANK = {
        ScheduledWorkoutType.QUICK: 0,
        ScheduledWorkoutType.STATION: 1,
        ScheduledWorkoutType.STRENGTH: 3,
        ScheduledWorkoutType.RUN: 4,
        ScheduledWorkoutType.COVERAGE: 5,
        ScheduledWorkoutType.FULL: 6,
    }

    # Among equal ranks, days with a lower value here are kept
    DAY_PRIORITY = {
        6: 1,  # Saturday (simulation day)
        1: 2,  # Monday (strength day)
        4: 3,  # Thursday (tempo/intervals)
        2: 4,  # Tuesday (station practice)
        5: 5,  # Friday (extra work)
        3: 6,  # Wednesday
        0: 7,  # Sunday
    }

    WEAK_STATION_EXTRA_MINUTES = 5
    WEAK_STATION_MINUTES_TOLERANCE = 0.10  # Max growth of a week's minutes from weak-station work

    def __init__(self, key_workout_min_coverage: int = 75):
        self.key_workout_min_coverage = key_workout_min_coverage

    # ============== Validation ==============

    def validate_personalization(
        self,
        data: Mapping[str, Any],
        today: Optional[date] = None
    ) -> PersonalizationValidation:
        """
        Check raw personalization input and report every problem found.

        Rules:
        - fitness_level is required and must be beginner, intermediate or advanced
        - days_per_week is required and must be an integer from 3 to 6
        - race_date, if present, must parse and be today or later
        - weak_stations, if present, must be a list of known station IDs
        """
        today = today or date.today()
        errors: List[str] = []

        fitness_level = data.get("fitness_level")
        valid_levels = [level.value for level in FitnessLevel]
        if fitness_level is None or fitness_level == "":
            errors.append("Fitness level is required")
        elif fitness_level not in valid_levels:
            errors.append(
                f"Invalid fitness level '{fitness_level}': must be one of {', '.join(valid_levels)}"
            )

        days_per_week = data.get("days_per_week")
        if days_per_week is None:
            errors.append("Days per week is required")
        elif isinstance(days_per_week, bool) or not isinstance(days_per_week, int) or not 3 <= days_per_week <= 6:
            errors.append("Days per week must be an integer between 3 and 6")

        race_date = data.get("race_date")
        if race_date is not None and race_date != "":
            try:
                parsed = parse_date(race_date)
            except (TypeError, ValueError):
                errors.append(f"Race date '{race_date}' is not a valid ISO-8601 date")
            else:
                if parsed < today:
                    errors.append("Race date must be today or in the future")

        weak_stations = data.get("weak_stations")
        if weak_stations is not None:
            if not isinstance(weak_stations, list) or not all(isinstance(s, str) for s in weak_stations):
                errors.append("Weak stations must be a list of station identifiers")
            else:
                unknown = [s for s in weak_stations if s not in HYROX_STATIONS]
                if unknown:
                    errors.append(f"Unknown weak stations: {', '.join(unknown)}")

        return PersonalizationValidation(valid=not errors, errors=errors)

    def parse_personalization(
        self,
        data: Mapping[str, Any],
        today: Optional[date] = None
    ) -> Personalization:
        """Validate raw input and build a Personalization, raising ValidationError on any problem."""
        result = self.validate_personalization(data, today)
        if not result.valid:
            raise ValidationError(result.errors)

        race_date = data.get("race_date")
        return Personalization(
            fitness_level=FitnessLevel(data["fitness_level"]),
            days_per_week=data["days_per_week"],
            race_date=parse_date(race_date) if race_date else None,
            weak_stations=list(data.get("weak_stations") or []),
        )

    # ============== Generation ==============

    def generate_program(
        self,
        personalization: Personalization,
        today: Optional[date] = None,
        created_at: Optional[datetime] = None
    ) -> GeneratedProgram:
        """
        Build a complete personalized schedule.

        Steps:
        1. Pick the template from weeks until race (8-week when no race date)
        2. Collapse each week to the athlete's training days
        3. Rotate weak-station emphasis into station and strength sessions
        4. Scale coverage and interval volume for the fitness level
        """
        today = today or date.today()
        weeks_until_race = calculate_weeks_until_race(personalization.race_date, today)
        template = self.select_program_template(weeks_until_race)

        schedule = [
            self.adjust_week_for_days_per_week(week, personalization.days_per_week)
            for week in template.schedule
        ]

        weak_stations = personalization.weak_stations or list(DEFAULT_WEAK_STATIONS)
        schedule = self.add_weak_station_focus(schedule, weak_stations)
        schedule = self.adjust_for_fitness_level(schedule, personalization.fitness_level)

        program = GeneratedProgram(
            id=f"personalized-{uuid.uuid4().hex[:12]}",
            template_id=template.id,
            name=template.name,
            description=template.description,
            weeks=template.weeks,
            days_per_week=personalization.days_per_week,
            schedule=schedule,
            personalization=personalization,
            created_at=created_at or datetime.utcnow(),
        )

        logger.info(
            f"Generated program {program.id} from {template.id} "
            f"({personalization.fitness_level.value}, {personalization.days_per_week} days/week)"
        )
        return program

    def materialize_template(
        self,
        template: ProgramTemplate,
        created_at: Optional[datetime] = None
    ) -> GeneratedProgram:
        """Copy a template's schedule as-is so the enrolled program outlives template edits."""
        return GeneratedProgram(
            id=template.id,
            template_id=template.id,
            name=template.name,
            description=template.description,
            weeks=template.weeks,
            days_per_week=template.default_days_per_week,
            schedule=[week.model_copy(deep=True) for week in template.schedule],
            created_at=created_at or datetime.utcnow(),
        )

    def select_program_template(self, weeks_until_race: Optional[int]) -> ProgramTemplate:
        """Template for the time available; 8-week when there is no race date"""
        if weeks_until_race is None:
            return get_template_for_length(8)
        return select_template_for_weeks_until_race(weeks_until_race)

    def adjust_week_for_days_per_week(self, week: WeekPlan, days_per_week: int) -> WeekPlan:
        """
        Collapse a week to at most `days_per_week` training sessions.

        Dropped sessions become rest days so the calendar keeps its shape.
        Key workouts are never dropped, and no sessions are added when the
        athlete has more days than the template uses.
        """
        workouts = [w.model_copy(deep=True) for w in week.workouts]
        training = [w for w in workouts if w.type != ScheduledWorkoutType.REST]
        excess = len(training) - days_per_week

        if excess > 0:
            droppable = [
                w for w in training
                if not is_key_workout(w, self.key_workout_min_coverage)
            ]
            droppable.sort(key=self._drop_order)
            dropped_days = {w.day_of_week for w in droppable[:excess]}
            workouts = [
                self._rest_day(w.day_of_week) if w.day_of_week in dropped_days else w
                for w in workouts
            ]

        workouts.sort(key=lambda w: w.day_of_week)
        return WeekPlan(
            week=week.week,
            phase=week.phase,
            theme=week.theme,
            is_deload=week.is_deload,
            workouts=workouts,
        )

    def add_weak_station_focus(
        self,
        schedule: List[WeekPlan],
        weak_stations: List[str]
    ) -> List[WeekPlan]:
        """
        Work one missing weak station into each station and strength session.

        The weak station added rotates week to week. Deload weeks are left
        alone. Appending costs a few minutes; once a week would grow past the
        tolerance, the weak station replaces a non-weak one instead.
        """
        if not weak_stations:
            return schedule

        rotation = 0
        adjusted = []

        for week in schedule:
            if week.is_deload:
                adjusted.append(week)
                continue

            base_minutes = sum(w.estimated_minutes for w in week.workouts)
            budget = int(base_minutes * self.WEAK_STATION_MINUTES_TOLERANCE)
            added_minutes = 0
            week_modified = False
            workouts = []

            for workout in week.workouts:
                workout = workout.model_copy(deep=True)
                params = workout.params

                if workout.type == ScheduledWorkoutType.STATION and params.stations:
                    missing = [s for s in weak_stations if s not in params.stations]
                    if missing:
                        station = missing[rotation % len(missing)]
                        if added_minutes + self.WEAK_STATION_EXTRA_MINUTES <= budget:
                            params.stations = params.stations + [station]
                            workout.estimated_minutes += self.WEAK_STATION_EXTRA_MINUTES
                            added_minutes += self.WEAK_STATION_EXTRA_MINUTES
                        else:
                            params.stations = self._substitute_station(params.stations, station, weak_stations)
                        week_modified = True

                elif workout.type == ScheduledWorkoutType.STRENGTH and params.station_work is not None:
                    missing = [s for s in weak_stations if s not in params.station_work]
                    if missing:
                        params.station_work = params.station_work + [missing[rotation % len(missing)]]
                        week_modified = True

                workouts.append(workout)

            if week_modified:
                rotation += 1

            adjusted.append(week.model_copy(update={"workouts": workouts}))

        return adjusted

    def adjust_for_fitness_level(
        self,
        schedule: List[WeekPlan],
        fitness_level: FitnessLevel
    ) -> List[WeekPlan]:
        """
        Scale race coverage and interval volume for the athlete's level.

        - Beginner: coverage -25 (min 25) at 80% of the minutes, 2 fewer interval reps (min 3)
        - Advanced: coverage +25 (max 150) at 120% of the minutes, 2 more interval reps
        """
        if fitness_level == FitnessLevel.INTERMEDIATE:
            return schedule

        adjusted = []
        for week in schedule:
            workouts = []
            for workout in week.workouts:
                workout = workout.model_copy(deep=True)
                params = workout.params

                if workout.type == ScheduledWorkoutType.COVERAGE and params.coverage:
                    if fitness_level == FitnessLevel.BEGINNER:
                        params.coverage = max(25, params.coverage - 25)
                        workout.estimated_minutes = round(workout.estimated_minutes * 0.8)
                    else:
                        params.coverage = min(150, params.coverage + 25)
                        workout.estimated_minutes = round(workout.estimated_minutes * 1.2)

                elif (
                    workout.type == ScheduledWorkoutType.RUN
                    and params.run_type == RunType.INTERVALS
                    and params.intervals
                ):
                    if fitness_level == FitnessLevel.BEGINNER:
                        params.intervals.reps = max(3, params.intervals.reps - 2)
                    else:
                        params.intervals.reps = params.intervals.reps + 2

                workouts.append(workout)
            adjusted.append(week.model_copy(update={"workouts": workouts}))

        return adjusted

    def get_program_summary(self, program: GeneratedProgram) -> ProgramSummary:
        """Count workouts by type across the whole schedule"""
        counts: Dict[ScheduledWorkoutType, int] = {t: 0 for t in ScheduledWorkoutType}
        total = 0
        for week in program.schedule:
            for workout in week.workouts:
                total += 1
                counts[workout.type] += 1

        return ProgramSummary(
            total_workouts=total,
            run_workouts=counts[ScheduledWorkoutType.RUN],
            strength_workouts=counts[ScheduledWorkoutType.STRENGTH],
            station_workouts=counts[ScheduledWorkoutType.STATION],
            coverage_workouts=counts[ScheduledWorkoutType.COVERAGE],
            full_simulations=counts[ScheduledWorkoutType.FULL],
            rest_days=counts[ScheduledWorkoutType.REST],
        )

    # Private helper methods

    def _drop_order(self, workout: ScheduledWorkout) -> tuple:
        rank = self.DROP_RANK.get(workout.type, 2)
        # Multi-station practice outranks a single-station day
        if workout.type == ScheduledWorkoutType.STATION and len(workout.params.stations or []) > 1:
            rank += 1
        return (rank, -self.DAY_PRIORITY.get(workout.day_of_week, 99))

    def _rest_day(self, day_of_week: int) -> ScheduledWorkout:
        return ScheduledWorkout(
            day_of_week=day_of_week,
            day_name=DAY_NAMES[day_of_week],
            type=ScheduledWorkoutType.REST,
            estimated_minutes=0,
        )

    def _substitute_station(
        self,
        stations: List[str],
        weak_station: str,
        weak_stations: List[str]
    ) -> List[str]:
        """Swap the last non-weak station for a weak one, keeping the station count."""
        replaced = list(stations)
        for i in range(len(replaced) - 1, -1, -1):
            if replaced[i] not in weak_stations:
                replaced[i] = weak_station
                return replaced
        return replaced
