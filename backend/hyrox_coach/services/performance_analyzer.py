import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Protocol, Sequence

from hyrox_coach.config import get_settings
from hyrox_coach.schemas.analysis import (
    AlertSeverity,
    AlertType,
    PerformanceAlert,
    PerformanceAnalysis,
    RaceReadinessScore,
    ReadinessFactors,
    Trend,
)

logger = logging.getLogger(__name__)


class CompletionData(Protocol):
    completed_at: datetime
    rpe: Optional[int]
    completion_status: Any
    percent_complete: int
    performance_data: Optional[Dict[str, Any]]


def _status(completion: CompletionData) -> str:
    status = completion.completion_status
    return getattr(status, "value", status) or "full"


class PerformanceAnalyzer:
    """
    Turn completion history into trend, fatigue, alerts and race readiness.

    Everything here is a pure function of its arguments; the caller passes
    `now` so results are reproducible.
    """

    RECENT_WINDOW_DAYS = 7
    FREQUENCY_WINDOW_DAYS = 3
    CONSISTENCY_WINDOW_DAYS = 14

    # Readiness factor weights; key workouts count most
    READINESS_WEIGHTS = {
        "program_completion": 0.25,
        "key_workout_completion": 0.35,
        "performance_trend": 0.15,
        "weekly_consistency": 0.15,
        "fatigue_management": 0.10,
    }
    URGENCY_WEEKS = 4
    URGENCY_MAX_PENALTY = 20

    FEELING_FATIGUE = {"hard": 5, "too_hard": 10}
    FEELING_FATIGUE_CAP = 20

    def __init__(
        self,
        full_completion_percent: Optional[int] = None,
        modifier_min: Optional[float] = None,
        modifier_max: Optional[float] = None
    ):
        settings = get_settings()
        self.full_completion_percent = (
            settings.FULL_COMPLETION_PERCENT if full_completion_percent is None else full_completion_percent
        )
        self.modifier_min = settings.INTENSITY_MODIFIER_MIN if modifier_min is None else modifier_min
        self.modifier_max = settings.INTENSITY_MODIFIER_MAX if modifier_max is None else modifier_max

    # ============== Building blocks ==============

    def completion_credit(self, completion: CompletionData) -> float:
        """
        How much one record counts toward completion rates.

        Skipped counts 0. Full at or above the full-completion threshold
        counts 1. Anything else counts its percent complete.
        """
        status = _status(completion)
        if status == "skipped":
            return 0.0
        percent = completion.percent_complete if completion.percent_complete is not None else 100
        if status == "full" and percent >= self.full_completion_percent:
            return 1.0
        return max(0.0, min(1.0, percent / 100))

    def get_recent(
        self,
        completions: Sequence[CompletionData],
        now: datetime,
        days: int,
        until_days: int = 0
    ) -> List[CompletionData]:
        """Completions in the window (now - days, now - until_days]"""
        start = now - timedelta(days=days)
        end = now - timedelta(days=until_days)
        return [c for c in completions if start < c.completed_at <= end]

    def average_rpe(self, completions: Sequence[CompletionData]) -> Optional[float]:
        rpes = [c.rpe for c in completions if c.rpe is not None]
        if not rpes:
            return None
        return round(sum(rpes) / len(rpes), 1)

    def calculate_fatigue_score(
        self,
        completions: Sequence[CompletionData],
        current_week: int,
        now: datetime
    ) -> int:
        """
        Rough fatigue composite in [0, 100].

        Adds an RPE component (15 per point above 4, 15 when no RPE was
        logged), a frequency component (10 per session in the last 3 days,
        max 30) and a subjective feeling component (max 20). Early program
        weeks are scaled down while the body adapts.
        """
        recent = self.get_recent(completions, now, self.RECENT_WINDOW_DAYS)
        if not recent:
            return 0

        avg_rpe = self.average_rpe(recent)
        rpe_fatigue = max(0.0, (avg_rpe - 4) * 15) if avg_rpe is not None else 15.0

        last_days = [
            c for c in self.get_recent(recent, now, self.FREQUENCY_WINDOW_DAYS)
            if _status(c) != "skipped"
        ]
        frequency_fatigue = min(len(last_days) * 10, 30)

        feeling_fatigue = 0
        for c in recent:
            feeling = (c.performance_data or {}).get("feeling")
            feeling_fatigue += self.FEELING_FATIGUE.get(feeling, 0)
        feeling_fatigue = min(feeling_fatigue, self.FEELING_FATIGUE_CAP)

        week_modifier = 0.7 if current_week <= 2 else 1.0
        score = round((rpe_fatigue + frequency_fatigue + feeling_fatigue) * week_modifier)
        return max(0, min(100, score))

    def determine_trend(self, completions: Sequence[CompletionData], now: datetime) -> Trend:
        """
        Compare the last 7 days against the 7 days before.

        Improving: completion up by more than 10 points without RPE rising
        more than half a point. Declining: completion down more than 15
        points or RPE up more than 1.5. Each window needs at least two
        records, otherwise the trend is stable.
        """
        recent = self.get_recent(completions, now, self.RECENT_WINDOW_DAYS)
        earlier = self.get_recent(
            completions, now, 2 * self.RECENT_WINDOW_DAYS, until_days=self.RECENT_WINDOW_DAYS
        )
        if len(recent) < 2 or len(earlier) < 2:
            return Trend.STABLE

        recent_completion = sum(self.completion_credit(c) for c in recent) / len(recent)
        earlier_completion = sum(self.completion_credit(c) for c in earlier) / len(earlier)
        recent_rpe = self.average_rpe(recent)
        earlier_rpe = self.average_rpe(earlier)

        completion_delta = recent_completion - earlier_completion
        rpe_delta = (recent_rpe if recent_rpe is not None else 5) - (earlier_rpe if earlier_rpe is not None else 5)

        if completion_delta > 0.1 and rpe_delta <= 0.5:
            return Trend.IMPROVING
        if completion_delta < -0.15 or rpe_delta > 1.5:
            return Trend.DECLINING
        return Trend.STABLE

    # ============== Analysis ==============

    def analyze_recent_performance(
        self,
        completions: Sequence[CompletionData],
        total_scheduled_to_date: int,
        current_week: int,
        now: datetime,
        scheduled_recent: Optional[int] = None
    ) -> PerformanceAnalysis:
        """
        Rolling-window analysis of the completion history.

        `scheduled_recent` is the number of non-rest workouts scheduled in
        the last 7 days. Without it the expected count is estimated from the
        total scheduled so far, as at most one workout a day.
        """
        ordered = sorted(completions, key=lambda c: c.completed_at)
        recent = self.get_recent(ordered, now, self.RECENT_WINDOW_DAYS)

        if scheduled_recent is None:
            expected_recent = min(7, total_scheduled_to_date - (len(ordered) - len(recent)))
        else:
            expected_recent = scheduled_recent

        recent_credit = sum(self.completion_credit(c) for c in recent)
        if expected_recent > 0:
            recent_rate = round(recent_credit / expected_recent * 100)
        else:
            recent_rate = 100

        if total_scheduled_to_date > 0:
            overall_rate = round(sum(self.completion_credit(c) for c in ordered) / total_scheduled_to_date * 100)
        else:
            overall_rate = 0

        recent_rate = max(0, min(100, recent_rate))
        overall_rate = max(0, min(100, overall_rate))
        average_rpe = self.average_rpe(recent)
        fatigue = self.calculate_fatigue_score(ordered, current_week, now)
        trend = self.determine_trend(ordered, now)

        modifier = self._intensity_modifier(recent_rate, average_rpe, fatigue, trend)
        alerts = self.generate_alerts(ordered, recent_rate, average_rpe, fatigue, now)

        analysis = PerformanceAnalysis(
            overall_trend=trend,
            recent_completion_rate=recent_rate,
            overall_completion_rate=overall_rate,
            average_rpe=average_rpe,
            fatigue_score=fatigue,
            suggested_intensity_modifier=modifier,
            alerts=alerts,
        )
        analysis.recommendations = self.generate_recommendations(analysis)
        logger.debug(
            f"Analysis: completion {recent_rate}%, fatigue {fatigue}, trend {trend.value}, modifier {modifier}"
        )
        return analysis

    def generate_alerts(
        self,
        completions: Sequence[CompletionData],
        completion_rate: int,
        average_rpe: Optional[float],
        fatigue_score: int,
        now: datetime
    ) -> List[PerformanceAlert]:
        alerts: List[PerformanceAlert] = []

        if fatigue_score > 70:
            critical = fatigue_score > 85
            alerts.append(PerformanceAlert(
                type=AlertType.HIGH_FATIGUE,
                severity=AlertSeverity.CRITICAL if critical else AlertSeverity.WARNING,
                message=(
                    "Very high fatigue detected. Consider taking an extra rest day."
                    if critical else
                    "Elevated fatigue levels. Focus on recovery and sleep."
                ),
            ))

        if completion_rate < 50:
            critical = completion_rate < 30
            alerts.append(PerformanceAlert(
                type=AlertType.LOW_COMPLETION,
                severity=AlertSeverity.CRITICAL if critical else AlertSeverity.WARNING,
                message=(
                    "Workout completion is very low. Consider adjusting your program."
                    if critical else
                    "Some workouts are being missed. Try to maintain consistency."
                ),
            ))

        if average_rpe is not None and average_rpe > 7.5 and fatigue_score > 60:
            alerts.append(PerformanceAlert(
                type=AlertType.OVERTRAINING,
                severity=AlertSeverity.WARNING,
                message="Signs of potential overtraining. Prioritize rest and recovery.",
            ))

        recent = self.get_recent(completions, now, self.RECENT_WINDOW_DAYS)
        if self._longest_streak(recent, lambda c: c.rpe is not None and c.rpe >= 8) >= 3:
            alerts.append(PerformanceAlert(
                type=AlertType.OVERTRAINING,
                severity=AlertSeverity.CRITICAL,
                message="Multiple consecutive hard workouts. A deload may be needed.",
            ))

        if self._trailing_streak(completions, lambda c: _status(c) == "skipped") >= 3:
            alerts.append(PerformanceAlert(
                type=AlertType.INCONSISTENT,
                severity=AlertSeverity.CRITICAL,
                message="Three or more workouts skipped in a row. Consider fewer training days per week.",
            ))

        if average_rpe is not None and average_rpe < 4 and completion_rate >= 90:
            alerts.append(PerformanceAlert(
                type=AlertType.UNDERTRAINED,
                severity=AlertSeverity.INFO,
                message="Workouts feel easy. You may be ready for more intensity.",
            ))

        return alerts

    def generate_recommendations(self, analysis: PerformanceAnalysis) -> List[str]:
        recommendations: List[str] = []

        if analysis.fatigue_score > 60:
            recommendations.append("Take an extra rest day and prioritize 8+ hours of sleep")
            recommendations.append("Consider light stretching or foam rolling")

        if analysis.average_rpe is not None and analysis.average_rpe < 5:
            recommendations.append("Workouts feel easy - consider increasing intensity")

        if analysis.recent_completion_rate < 70:
            recommendations.append("Schedule workouts at consistent times to build habit")

        if analysis.overall_trend == Trend.IMPROVING:
            recommendations.append("Great progress! Stay consistent with your current approach")
        elif analysis.overall_trend == Trend.DECLINING:
            recommendations.append("Focus on completing workouts rather than intensity")
            recommendations.append("Review sleep, nutrition, and stress levels")

        if analysis.suggested_intensity_modifier < 1:
            recommendations.append("Intensity has been automatically reduced to aid recovery")

        return recommendations

    def suggest_intensity_modifier(self, analysis: PerformanceAnalysis) -> float:
        """Multiplier for future workout demands, within the configured bounds"""
        return self._intensity_modifier(
            analysis.recent_completion_rate,
            analysis.average_rpe,
            analysis.fatigue_score,
            analysis.overall_trend,
        )

    # ============== Race readiness ==============

    def calculate_race_readiness(
        self,
        completions: Sequence[CompletionData],
        scheduled_to_date: int,
        key_workouts_completed: int,
        key_workouts_expected: int,
        weeks_until_race: Optional[int],
        current_week: int,
        now: datetime
    ) -> RaceReadinessScore:
        """
        Weighted race readiness score in [0, 100].

        With a race date, low completion is penalized harder as the race
        gets closer (up to 20 points in the final 4 weeks).
        """
        if scheduled_to_date <= 0:
            return RaceReadinessScore(
                score=0,
                factors=ReadinessFactors(
                    program_completion=0,
                    key_workout_completion=0,
                    performance_trend=0,
                    weekly_consistency=0,
                    fatigue_management=0,
                ),
                message="Not enough training data yet. Complete a few workouts to see your readiness.",
            )

        completion_ratio = min(1.0, sum(self.completion_credit(c) for c in completions) / scheduled_to_date)
        if key_workouts_expected > 0:
            key_ratio = min(1.0, key_workouts_completed / key_workouts_expected)
        else:
            key_ratio = 1.0

        trend = self.determine_trend(completions, now)
        trend_factor = {Trend.IMPROVING: 100, Trend.STABLE: 75, Trend.DECLINING: 40}[trend]

        attended = [
            c for c in self.get_recent(completions, now, self.CONSISTENCY_WINDOW_DAYS)
            if _status(c) != "skipped"
        ]
        consistency = 80 if len(attended) >= 4 else len(attended) * 20

        fatigue = self.calculate_fatigue_score(completions, current_week, now)

        factors = {
            "program_completion": round(completion_ratio * 100),
            "key_workout_completion": round(key_ratio * 100),
            "performance_trend": trend_factor,
            "weekly_consistency": consistency,
            "fatigue_management": max(0, 100 - fatigue),
        }
        weighted = sum(factors[name] * weight for name, weight in self.READINESS_WEIGHTS.items())

        penalty = 0
        if weeks_until_race is not None:
            urgency = max(0.0, (self.URGENCY_WEEKS - weeks_until_race) / self.URGENCY_WEEKS)
            penalty = round((1 - completion_ratio) * self.URGENCY_MAX_PENALTY * urgency)

        score = max(0, min(100, round(weighted - penalty)))

        return RaceReadinessScore(
            score=score,
            factors=ReadinessFactors(urgency_penalty=penalty, **factors),
            message=self._readiness_message(score, weeks_until_race),
        )

    # Private helper methods

    def _intensity_modifier(
        self,
        completion_rate: int,
        average_rpe: Optional[float],
        fatigue_score: int,
        trend: Trend
    ) -> float:
        modifier = 1.0

        if completion_rate < 50:
            modifier -= 0.2
        elif completion_rate < 70:
            modifier -= 0.1

        if average_rpe is not None:
            if average_rpe > 8:
                modifier -= 0.1
            elif average_rpe < 5 and completion_rate > 90:
                modifier += 0.05

        if fatigue_score > 85:
            modifier -= 0.15
        elif fatigue_score > 70:
            modifier -= 0.1

        if trend == Trend.DECLINING:
            modifier -= 0.05
        elif completion_rate >= 90 and fatigue_score < 50:
            modifier += 0.05
            if trend == Trend.IMPROVING:
                modifier += 0.05

        return max(self.modifier_min, min(self.modifier_max, round(modifier, 2)))

    def _readiness_message(self, score: int, weeks_until_race: Optional[int]) -> str:
        if weeks_until_race is not None and weeks_until_race <= 1:
            if score >= 80:
                return "Race ready! Focus on rest and mental preparation."
            if score >= 60:
                return "Race week! Trust your training and stay positive."
            return "Race is near. Focus on what you can control."
        if score >= 80:
            return "Elite readiness. Stay consistent and keep sharpening."
        if score >= 60:
            return "On track for race day. Keep up the good work."
        if score >= 40:
            return "Needs focus. Prioritize key workouts."
        return "Significant gaps. Focus on consistency over intensity."

    def _longest_streak(self, completions: Sequence[CompletionData], predicate) -> int:
        longest = current = 0
        for c in sorted(completions, key=lambda c: c.completed_at):
            current = current + 1 if predicate(c) else 0
            longest = max(longest, current)
        return longest

    def _trailing_streak(self, completions: Sequence[CompletionData], predicate) -> int:
        streak = 0
        for c in sorted(completions, key=lambda c: c.completed_at, reverse=True):
            if not predicate(c):
                break
            streak += 1
        return streak
