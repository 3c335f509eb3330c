"""
Missed-workout detection.

A workout's calendar date comes from the program start date: week N covers
the 7 days starting at start + (N-1)*7, and the day-of-week places the
workout inside that window. Anything non-rest whose date is before today and
has no completion record (of any status) is missed.
"""

import logging
import math
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Protocol, Set, Tuple, Union

from hyrox_coach.config import get_settings
from hyrox_coach.schemas.analysis import (
    Importance,
    MissedWorkout,
    MissedWorkoutSummary,
    SuggestedAction,
)
from hyrox_coach.schemas.program import ScheduledWorkout, ScheduledWorkoutType, WeekPlan
from hyrox_coach.services.program_templates import is_key_workout

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]

IMPORTANCE_ORDER = {
    Importance.CRITICAL: 0,
    Importance.HIGH: 1,
    Importance.MEDIUM: 2,
    Importance.LOW: 3,
}


class CompletionKey(Protocol):
    week: int
    day_of_week: int


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def day_of_week_for(value: DateLike) -> int:
    """Day of week with Sunday as 0"""
    return (_as_date(value).weekday() + 1) % 7


def get_workout_date(start_date: DateLike, week: int, day_of_week: int) -> date:
    """Calendar date of the workout at (week, day_of_week)"""
    start = _as_date(start_date)
    offset = (day_of_week - day_of_week_for(start) + 7) % 7
    return start + timedelta(days=(week - 1) * 7 + offset)


def get_current_week(start_date: DateLike, now: DateLike, total_weeks: int) -> int:
    """1-based program week containing `now`, clamped to the program length"""
    days = (_as_date(now) - _as_date(start_date)).days
    week = math.floor(days / 7) + 1
    return max(1, min(week, max(1, total_weeks)))


def completed_slots(completions: Iterable[CompletionKey]) -> Set[Tuple[int, int]]:
    return {(c.week, c.day_of_week) for c in completions}


class MissedWorkoutDetector:
    """Find scheduled workouts that were never completed and rank them"""

    def __init__(
        self,
        critical_window_days: Optional[int] = None,
        stale_after_days: Optional[int] = None,
        key_workout_min_coverage: Optional[int] = None,
        impact_critical: Optional[int] = None,
        impact_high: Optional[int] = None,
        impact_medium: Optional[int] = None,
        impact_low: Optional[int] = None,
        impact_floor: Optional[int] = None
    ):
        settings = get_settings()

        def pick(value, default):
            return default if value is None else value

        self.critical_window_days = pick(critical_window_days, settings.MISSED_CRITICAL_WINDOW_DAYS)
        self.stale_after_days = pick(stale_after_days, settings.MISSED_STALE_AFTER_DAYS)
        self.key_workout_min_coverage = pick(key_workout_min_coverage, settings.KEY_WORKOUT_MIN_COVERAGE)
        self.impact_floor = pick(impact_floor, settings.MISSED_IMPACT_FLOOR)
        self.impacts = {
            Importance.CRITICAL: pick(impact_critical, settings.MISSED_IMPACT_CRITICAL),
            Importance.HIGH: pick(impact_high, settings.MISSED_IMPACT_HIGH),
            Importance.MEDIUM: pick(impact_medium, settings.MISSED_IMPACT_MEDIUM),
            Importance.LOW: pick(impact_low, settings.MISSED_IMPACT_LOW),
        }

    def find_missed_workouts(
        self,
        start_date: DateLike,
        schedule: List[WeekPlan],
        completions: Iterable[CompletionKey],
        now: DateLike
    ) -> List[MissedWorkout]:
        """
        Every past, non-rest, uncompleted workout, most important first.

        Ties in importance are broken by recency (most recent first).
        """
        today = _as_date(now)
        done = completed_slots(completions)
        missed: List[MissedWorkout] = []

        for week in schedule:
            for workout in week.workouts:
                if workout.type == ScheduledWorkoutType.REST:
                    continue
                if (week.week, workout.day_of_week) in done:
                    continue

                scheduled = get_workout_date(start_date, week.week, workout.day_of_week)
                if scheduled >= today:
                    continue

                days_since = max(1, (today - scheduled).days)
                importance = self.classify_importance(workout, days_since)
                missed.append(MissedWorkout(
                    week=week.week,
                    day_of_week=workout.day_of_week,
                    day_name=workout.day_name,
                    workout=workout,
                    days_since_missed=days_since,
                    importance=importance,
                    suggested_action=self.suggest_action(importance, days_since),
                    impact_on_readiness=self.impacts[importance],
                ))

        missed.sort(key=lambda m: (IMPORTANCE_ORDER[m.importance], m.days_since_missed))
        return missed

    def classify_importance(self, workout: ScheduledWorkout, days_since_missed: int) -> Importance:
        """
        Importance from workout type and recency.

        - Key workouts: critical within the recency window, high up to the
          staleness threshold
        - Other workouts: high within the recency window, medium up to the
          staleness threshold
        - Anything older: low
        """
        if days_since_missed > self.stale_after_days:
            return Importance.LOW

        key = is_key_workout(workout, self.key_workout_min_coverage)
        recent = days_since_missed <= self.critical_window_days

        if key:
            return Importance.CRITICAL if recent else Importance.HIGH
        return Importance.HIGH if recent else Importance.MEDIUM

    def suggest_action(self, importance: Importance, days_since_missed: int) -> SuggestedAction:
        if days_since_missed > self.stale_after_days or importance == Importance.LOW:
            return SuggestedAction.SKIP
        if importance == Importance.CRITICAL:
            return SuggestedAction.MAKEUP_FULL
        return SuggestedAction.MAKEUP_CONDENSED

    def generate_recommendations(self, missed: List[MissedWorkout]) -> List[str]:
        """Short advice driven by the most severe misses"""
        recommendations: List[str] = []
        if not missed:
            return recommendations

        critical = [m for m in missed if m.importance == Importance.CRITICAL]
        high = [m for m in missed if m.importance == Importance.HIGH]
        recent = [m for m in missed if m.days_since_missed <= self.critical_window_days]

        if critical:
            plural = "s" if len(critical) > 1 else ""
            recommendations.append(
                f"You have {len(critical)} key workout{plural} missed. "
                f"Full simulations and high-coverage sessions are essential for race preparation."
            )

        if high:
            plural = "s" if len(high) > 1 else ""
            recommendations.append(
                f"{len(high)} important workout{plural} missed. "
                f"Consider doing condensed versions to maintain fitness."
            )

        if 0 < len(recent) <= 3:
            recommendations.append(
                "You can still make up recent workouts. Focus on the most important ones first."
            )

        if len(missed) > 5:
            recommendations.append(
                "Many workouts missed. Consider reducing program intensity and focusing on consistency."
            )

        if all(m.importance == Importance.LOW for m in missed):
            recommendations.append(
                "Missed workouts are low priority. Focus on upcoming key sessions instead."
            )

        return recommendations

    def get_summary(
        self,
        start_date: DateLike,
        schedule: List[WeekPlan],
        completions: Iterable[CompletionKey],
        now: DateLike
    ) -> MissedWorkoutSummary:
        """Missed workouts, their count, aggregate readiness impact and advice"""
        missed = self.find_missed_workouts(start_date, schedule, completions, now)
        impact = sum(m.impact_on_readiness for m in missed)

        return MissedWorkoutSummary(
            missed_workouts=missed,
            total_missed=len(missed),
            readiness_impact=max(self.impact_floor, impact),
            recommendations=self.generate_recommendations(missed),
        )
