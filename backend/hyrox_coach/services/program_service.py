import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from pydantic import ValidationError as SchemaValidationError

from hyrox_coach.config import get_settings
from hyrox_coach.exceptions import NotFoundError, ValidationError
from hyrox_coach.models.completed_workout import CompletedWorkout, CompletionStatus
from hyrox_coach.models.user_program import UserProgram
from hyrox_coach.schemas.analysis import (
    InsightsResponse,
    MissedWorkoutSummary,
    PerformanceAnalysis,
    ProgramProgress,
)
from hyrox_coach.schemas.program import (
    SCHEDULE_SCHEMA_VERSION,
    GeneratedProgram,
    ScheduledWorkout,
    ScheduledWorkoutType,
)
from hyrox_coach.schemas.user_program import TodayWorkoutResponse
from hyrox_coach.services.completion_ledger import CompletionLedger
from hyrox_coach.services.missed_workout_detector import (
    MissedWorkoutDetector,
    completed_slots,
    day_of_week_for,
    get_current_week,
    get_workout_date,
)
from hyrox_coach.services.performance_analyzer import PerformanceAnalyzer
from hyrox_coach.services.plan_generator import PlanGenerator, calculate_weeks_until_race
from hyrox_coach.services.program_adapter import (
    apply_intensity_modifier,
    generate_makeup_workout,
    get_adaptation_description,
)
from hyrox_coach.services.program_repository import ProgramRepository
from hyrox_coach.services.program_templates import get_template_by_id, is_key_workout

logger = logging.getLogger(__name__)

# Used when the stored schedule cannot be read
FALLBACK_TOTAL_WEEKS = 8
FALLBACK_WORKOUTS_PER_WEEK = 5


@dataclass
class ScheduleStats:
    """Schedule density up to a point in time"""
    total_weeks: int
    current_week: int
    scheduled_to_date: int
    scheduled_recent: Optional[int]
    key_workouts_expected: int
    key_slots: Set[Tuple[int, int]] = field(default_factory=set)
    used_fallback: bool = False


class ProgramOrchestrator:
    """
    Program lifecycle for one user at a time: start, complete, quit, and
    the derived views (missed workouts, insights, today's workout).

    Nothing derived is stored; every view is recomputed from the stored
    schedule and the full completion history.
    """

    def __init__(
        self,
        repository: ProgramRepository,
        clock: Optional[Callable[[], datetime]] = None,
        generator: Optional[PlanGenerator] = None,
        detector: Optional[MissedWorkoutDetector] = None,
        analyzer: Optional[PerformanceAnalyzer] = None,
        commit_threshold: Optional[float] = None
    ):
        settings = get_settings()
        self.repository = repository
        self.clock = clock or datetime.utcnow
        self.generator = generator or PlanGenerator(settings.KEY_WORKOUT_MIN_COVERAGE)
        self.ledger = CompletionLedger(repository)
        self.detector = detector or MissedWorkoutDetector()
        self.analyzer = analyzer or PerformanceAnalyzer()
        self.key_workout_min_coverage = settings.KEY_WORKOUT_MIN_COVERAGE
        self.commit_threshold = (
            settings.INTENSITY_MODIFIER_COMMIT_THRESHOLD if commit_threshold is None else commit_threshold
        )

    # ============== Lifecycle ==============

    def get_current_program(self, user_id: str) -> Optional[UserProgram]:
        return self.repository.get_user_program(user_id)

    def start_program(
        self,
        user_id: str,
        program_id: Optional[str] = None,
        personalization: Optional[Mapping[str, Any]] = None,
        start_date: Optional[date] = None
    ) -> UserProgram:
        """
        Enroll the user, replacing any program they already have.

        A personalization payload generates a tailored schedule; otherwise
        the template named by `program_id` is copied as-is. Validation
        happens before anything is written.
        """
        now = self.clock()
        today = now.date()
        anchor = start_date or today

        if personalization is not None:
            profile = self.generator.parse_personalization(personalization, today)
            program = self.generator.generate_program(profile, today, created_at=now)
            fields: Dict[str, Any] = {
                "race_date": datetime.combine(profile.race_date, time()) if profile.race_date else None,
                "fitness_level": profile.fitness_level.value,
                "days_per_week": profile.days_per_week,
                "weak_stations": profile.weak_stations,
            }
        elif program_id:
            template = get_template_by_id(program_id)
            if template is None:
                raise NotFoundError(f"Program template '{program_id}' not found")
            program = self.generator.materialize_template(template, created_at=now)
            fields = {"days_per_week": template.default_days_per_week, "weak_stations": []}
        else:
            raise ValidationError(["Either program_id or personalization is required"])

        fields.update({
            "program_id": program.id,
            "start_date": datetime.combine(anchor, time()),
            "program_data": program.model_dump(mode="json"),
            "intensity_modifier": 1.0,
        })

        user_program = self.repository.create_user_program(user_id, fields)
        logger.info(f"User {user_id} started program {program.id} ({program.weeks} weeks) on {anchor}")
        return user_program

    def quit_program(self, user_id: str) -> None:
        """Delete the user's program and its whole completion history"""
        if not self.repository.delete_user_program(user_id):
            raise NotFoundError("No active program found")
        logger.info(f"User {user_id} quit their program")

    def complete_workout(
        self,
        user_id: str,
        week: Any,
        day_of_week: Any,
        fields: Optional[Mapping[str, Any]] = None
    ) -> CompletedWorkout:
        """Record a completion, then re-evaluate the intensity modifier from the full history"""
        user_program = self._require_program(user_id)
        now = self.clock()

        record = self.ledger.record_completion(user_program.id, week, day_of_week, fields, now=now)
        self._refresh_intensity_modifier(user_program, now)
        return record

    # ============== Derived views ==============

    def get_missed_workouts(self, user_id: str) -> MissedWorkoutSummary:
        user_program = self._require_program(user_id)
        program = self.parse_program_data(user_program)
        if program is None:
            return MissedWorkoutSummary()

        completions = self.ledger.list_completions(user_program.id)
        return self.detector.get_summary(user_program.start_date, program.schedule, completions, self.clock())

    def get_insights(self, user_id: str) -> InsightsResponse:
        """Performance analysis, race readiness and program progress"""
        user_program = self._require_program(user_id)
        now = self.clock()
        completions = self.ledger.list_completions(user_program.id)
        stats = self.get_schedule_stats(user_program, now, completions)

        analysis = self._analyze(completions, stats, now)

        key_completed = sum(
            1 for c in completions
            if (c.week, c.day_of_week) in stats.key_slots and c.completion_status != CompletionStatus.SKIPPED
        )
        race_date = user_program.race_date.date() if user_program.race_date else None
        readiness = self.analyzer.calculate_race_readiness(
            completions,
            stats.scheduled_to_date,
            key_completed,
            stats.key_workouts_expected,
            calculate_weeks_until_race(race_date, now.date()),
            stats.current_week,
            now,
        )

        return InsightsResponse(
            analysis=analysis,
            race_readiness=readiness,
            program_progress=ProgramProgress(
                current_week=stats.current_week,
                total_weeks=stats.total_weeks,
                completed_workouts=len(completions),
                total_workouts=stats.scheduled_to_date,
                used_fallback=stats.used_fallback,
            ),
        )

    def get_todays_workout(self, user_id: str) -> TodayWorkoutResponse:
        """Today's scheduled workout with the stored intensity modifier applied"""
        user_program = self._require_program(user_id)
        now = self.clock()
        modifier = user_program.intensity_modifier
        program = self.parse_program_data(user_program)
        total_weeks = program.weeks if program else FALLBACK_TOTAL_WEEKS

        week_number = get_current_week(user_program.start_date, now, total_weeks)
        day_of_week = day_of_week_for(now)

        workout = None
        if program is not None:
            for week in program.schedule:
                if week.week != week_number:
                    continue
                for scheduled in week.workouts:
                    if scheduled.day_of_week == day_of_week:
                        workout = apply_intensity_modifier(scheduled, modifier)
                        break

        completions = self.ledger.list_completions(user_program.id)
        return TodayWorkoutResponse(
            week=week_number,
            day_of_week=day_of_week,
            workout=workout,
            intensity_modifier=modifier,
            adaptation=get_adaptation_description(modifier),
            completed=(week_number, day_of_week) in completed_slots(completions),
        )

    def get_makeup_workout(self, user_id: str, week: int, day_of_week: int) -> ScheduledWorkout:
        """Condensed makeup for a workout that is currently reported as missed"""
        summary = self.get_missed_workouts(user_id)
        for missed in summary.missed_workouts:
            if missed.week == week and missed.day_of_week == day_of_week:
                return generate_makeup_workout(missed)
        raise NotFoundError(f"No missed workout at week {week}, day {day_of_week}")

    # ============== Schedule helpers ==============

    def parse_program_data(self, user_program: UserProgram) -> Optional[GeneratedProgram]:
        """
        Read the stored schedule document.

        Returns None (and logs a warning) when the document is missing,
        malformed, or written by a newer schema version.
        """
        data = user_program.program_data
        if not data:
            logger.warning(f"Program {user_program.id} has no stored schedule")
            return None

        version = data.get("schema_version", SCHEDULE_SCHEMA_VERSION) if isinstance(data, dict) else None
        if version != SCHEDULE_SCHEMA_VERSION:
            logger.warning(f"Program {user_program.id} has unsupported schedule version {version!r}")
            return None

        try:
            return GeneratedProgram.model_validate(data)
        except SchemaValidationError as e:
            logger.warning(f"Program {user_program.id} has an unreadable schedule: {e.error_count()} errors")
            return None

    def get_schedule_stats(
        self,
        user_program: UserProgram,
        now: datetime,
        completions: Iterable[CompletedWorkout] = ()
    ) -> ScheduleStats:
        """
        Workouts and key workouts due so far, with estimates when the schedule is unreadable.

        A workout is due once its date has passed. Today's workout only
        counts once it has been completed.
        """
        program = self.parse_program_data(user_program)

        if program is None:
            current_week = get_current_week(user_program.start_date, now, FALLBACK_TOTAL_WEEKS)
            elapsed_days = max(0, (now.date() - user_program.start_date.date()).days)
            logger.warning(
                f"Using fallback schedule estimates for program {user_program.id} "
                f"({FALLBACK_TOTAL_WEEKS} weeks, {FALLBACK_WORKOUTS_PER_WEEK} workouts/week)"
            )
            return ScheduleStats(
                total_weeks=FALLBACK_TOTAL_WEEKS,
                current_week=current_week,
                scheduled_to_date=min(elapsed_days, FALLBACK_TOTAL_WEEKS * 7) * FALLBACK_WORKOUTS_PER_WEEK // 7,
                scheduled_recent=None,
                key_workouts_expected=0,
                used_fallback=True,
            )

        today = now.date()
        recent_start = today - timedelta(days=PerformanceAnalyzer.RECENT_WINDOW_DAYS)
        scheduled_to_date = 0
        scheduled_recent = 0
        key_expected = 0
        key_slots: Set[Tuple[int, int]] = set()
        done = completed_slots(completions)

        for week in program.schedule:
            for workout in week.workouts:
                if workout.type == ScheduledWorkoutType.REST:
                    continue
                key = is_key_workout(workout, self.key_workout_min_coverage)
                if key:
                    key_slots.add((week.week, workout.day_of_week))

                scheduled = get_workout_date(user_program.start_date, week.week, workout.day_of_week)
                if scheduled > today:
                    continue
                if scheduled == today and (week.week, workout.day_of_week) not in done:
                    continue
                scheduled_to_date += 1
                if scheduled > recent_start:
                    scheduled_recent += 1
                if key:
                    key_expected += 1

        return ScheduleStats(
            total_weeks=program.weeks,
            current_week=get_current_week(user_program.start_date, now, program.weeks),
            scheduled_to_date=scheduled_to_date,
            scheduled_recent=scheduled_recent,
            key_workouts_expected=key_expected,
            key_slots=key_slots,
        )

    # Private helper methods

    def _require_program(self, user_id: str) -> UserProgram:
        user_program = self.repository.get_user_program(user_id)
        if not user_program:
            raise NotFoundError("No active program found")
        return user_program

    def _analyze(
        self,
        completions: List[CompletedWorkout],
        stats: ScheduleStats,
        now: datetime
    ) -> PerformanceAnalysis:
        return self.analyzer.analyze_recent_performance(
            completions,
            stats.scheduled_to_date,
            stats.current_week,
            now,
            scheduled_recent=stats.scheduled_recent,
        )

    def _refresh_intensity_modifier(self, user_program: UserProgram, now: datetime) -> None:
        """Commit a new modifier only when it moves by more than the commit threshold"""
        completions = self.ledger.list_completions(user_program.id)
        stats = self.get_schedule_stats(user_program, now, completions)
        analysis = self._analyze(completions, stats, now)

        current = user_program.intensity_modifier
        suggested = self.analyzer.suggest_intensity_modifier(analysis)
        if round(abs(suggested - current), 4) > self.commit_threshold:
            self.repository.update_intensity_modifier(user_program.id, suggested)
            logger.info(
                f"Intensity modifier for program {user_program.id} changed {current} -> {suggested}"
            )

