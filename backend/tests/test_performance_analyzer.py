"""Tests for performance analysis, intensity modifier and race readiness."""

from datetime import datetime, timedelta

import pytest

from hyrox_coach.schemas.analysis import AlertSeverity, AlertType, Trend
from hyrox_coach.services.performance_analyzer import PerformanceAnalyzer

NOW = datetime(2026, 3, 20, 12, 0)


@pytest.fixture
def analyzer():
    return PerformanceAnalyzer()


def days_ago(days, hours=0):
    return NOW - timedelta(days=days, hours=hours)


class TestCompletionRates:

    def test_no_history(self, analyzer):
        analysis = analyzer.analyze_recent_performance([], 0, 1, NOW, scheduled_recent=0)
        assert analysis.recent_completion_rate == 100
        assert analysis.overall_completion_rate == 0
        assert analysis.average_rpe is None
        assert analysis.fatigue_score == 0

    def test_recent_rate_against_scheduled(self, analyzer, make_completion):
        completions = [make_completion(days_ago(1), rpe=6), make_completion(days_ago(2), rpe=6)]
        analysis = analyzer.analyze_recent_performance(completions, 4, 3, NOW, scheduled_recent=4)
        assert analysis.recent_completion_rate == 50
        assert analysis.overall_completion_rate == 50

    def test_partial_and_skipped_credit(self, analyzer, make_completion):
        completions = [
            make_completion(days_ago(1), status="partial", percent=50),
            make_completion(days_ago(2), status="skipped", percent=0),
        ]
        analysis = analyzer.analyze_recent_performance(completions, 2, 3, NOW, scheduled_recent=2)
        assert analysis.recent_completion_rate == 25

    def test_full_below_threshold_counts_its_percent(self, analyzer, make_completion):
        assert analyzer.completion_credit(make_completion(NOW, percent=80)) == 1.0
        assert analyzer.completion_credit(make_completion(NOW, percent=60)) == 0.6

    def test_rates_are_capped(self, analyzer, make_completion):
        completions = [make_completion(days_ago(d)) for d in range(1, 6)]
        analysis = analyzer.analyze_recent_performance(completions, 2, 3, NOW, scheduled_recent=2)
        assert analysis.recent_completion_rate == 100
        assert analysis.overall_completion_rate == 100

    def test_estimates_recent_schedule_when_not_given(self, analyzer, make_completion):
        completions = [make_completion(days_ago(1)), make_completion(days_ago(20))]
        analysis = analyzer.analyze_recent_performance(completions, 5, 3, NOW)
        # 5 scheduled, 1 completed before the window: 4 expected recently
        assert analysis.recent_completion_rate == 25

    def test_average_rpe_uses_recent_window(self, analyzer, make_completion):
        completions = [
            make_completion(days_ago(1), rpe=6),
            make_completion(days_ago(2), rpe=7),
            make_completion(days_ago(10), rpe=2),
        ]
        analysis = analyzer.analyze_recent_performance(completions, 3, 3, NOW, scheduled_recent=2)
        assert analysis.average_rpe == 6.5


class TestFatigue:

    def test_hard_sessions_raise_fatigue_and_lower_modifier(self, analyzer, make_completion):
        def run(rpe):
            completions = [
                make_completion(days_ago(d), rpe=rpe, day_of_week=dow)
                for d, dow in ((1, 6), (3, 4), (5, 2))
            ]
            return analyzer.analyze_recent_performance(completions, 3, 3, NOW, scheduled_recent=3)

        hard = run(9)
        easy = run(4)

        assert hard.fatigue_score > easy.fatigue_score
        assert analyzer.suggest_intensity_modifier(hard) <= analyzer.suggest_intensity_modifier(easy)

    def test_fatigue_components(self, analyzer, make_completion):
        completions = [make_completion(days_ago(1), rpe=8), make_completion(days_ago(2), rpe=8)]
        # (8 - 4) * 15 + 2 sessions in 3 days * 10
        assert analyzer.calculate_fatigue_score(completions, 3, NOW) == 80

    def test_early_weeks_are_scaled_down(self, analyzer, make_completion):
        completions = [make_completion(days_ago(1), rpe=8), make_completion(days_ago(2), rpe=8)]
        assert analyzer.calculate_fatigue_score(completions, 1, NOW) == 56

    def test_no_rpe_gives_moderate_baseline(self, analyzer, make_completion):
        completions = [make_completion(days_ago(5))]
        assert analyzer.calculate_fatigue_score(completions, 3, NOW) == 15

    def test_feeling_adds_fatigue(self, analyzer, make_completion):
        plain = [make_completion(days_ago(5), rpe=6)]
        hard = [make_completion(days_ago(5), rpe=6, feeling="too_hard")]
        assert analyzer.calculate_fatigue_score(hard, 3, NOW) == analyzer.calculate_fatigue_score(plain, 3, NOW) + 10

    def test_fatigue_is_bounded(self, analyzer, make_completion):
        completions = [
            make_completion(days_ago(0, hours=h), rpe=10, feeling="too_hard") for h in range(1, 8)
        ]
        assert analyzer.calculate_fatigue_score(completions, 8, NOW) == 100


class TestTrend:

    def test_stable_without_enough_history(self, analyzer, make_completion):
        completions = [make_completion(days_ago(1)), make_completion(days_ago(9))]
        assert analyzer.determine_trend(completions, NOW) == Trend.STABLE

    def test_improving(self, analyzer, make_completion):
        completions = [
            make_completion(days_ago(10), rpe=6, status="partial", percent=50),
            make_completion(days_ago(9), rpe=6, status="partial", percent=50),
            make_completion(days_ago(2), rpe=6),
            make_completion(days_ago(1), rpe=6),
        ]
        assert analyzer.determine_trend(completions, NOW) == Trend.IMPROVING

    def test_declining_on_rising_rpe(self, analyzer, make_completion):
        completions = [
            make_completion(days_ago(10), rpe=5),
            make_completion(days_ago(9), rpe=5),
            make_completion(days_ago(2), rpe=8),
            make_completion(days_ago(1), rpe=8),
        ]
        assert analyzer.determine_trend(completions, NOW) == Trend.DECLINING


class TestIntensityModifier:

    @pytest.mark.parametrize("status, rpe, feeling", [
        ("skipped", None, None),
        ("full", 10, "too_hard"),
        ("full", 1, None),
        ("partial", 10, "hard"),
    ])
    def test_stays_within_bounds(self, analyzer, make_completion, status, rpe, feeling):
        completions = [
            make_completion(days_ago(0, hours=h), rpe=rpe, status=status, feeling=feeling)
            for h in range(1, 12)
        ]
        analysis = analyzer.analyze_recent_performance(completions, 11, 5, NOW, scheduled_recent=11)
        modifier = analyzer.suggest_intensity_modifier(analysis)
        assert 0.7 <= modifier <= 1.3
        assert modifier == analysis.suggested_intensity_modifier

    def test_everything_skipped_reduces_intensity(self, analyzer, make_completion):
        completions = [make_completion(days_ago(d), status="skipped", percent=0) for d in range(1, 5)]
        analysis = analyzer.analyze_recent_performance(completions, 4, 3, NOW, scheduled_recent=4)
        assert analysis.suggested_intensity_modifier < 1.0

    def test_consistent_easy_training_increases_intensity(self, analyzer, make_completion):
        completions = [make_completion(days_ago(d), rpe=4) for d in (1, 3, 5)]
        analysis = analyzer.analyze_recent_performance(completions, 3, 3, NOW, scheduled_recent=3)
        assert analysis.suggested_intensity_modifier > 1.0

    def test_custom_bounds(self, make_completion):
        analyzer = PerformanceAnalyzer(modifier_min=0.9, modifier_max=1.05)
        completions = [make_completion(days_ago(d), status="skipped", percent=0) for d in range(1, 5)]
        analysis = analyzer.analyze_recent_performance(completions, 4, 3, NOW, scheduled_recent=4)
        assert analysis.suggested_intensity_modifier == 0.9


class TestAlerts:

    def test_consecutive_skips_are_critical(self, analyzer, make_completion):
        completions = [
            make_completion(days_ago(6), rpe=6),
            make_completion(days_ago(3), status="skipped"),
            make_completion(days_ago(2), status="skipped"),
            make_completion(days_ago(1), status="skipped"),
        ]
        analysis = analyzer.analyze_recent_performance(completions, 4, 3, NOW, scheduled_recent=4)
        inconsistent = [a for a in analysis.alerts if a.type == AlertType.INCONSISTENT]
        assert len(inconsistent) == 1
        assert inconsistent[0].severity == AlertSeverity.CRITICAL

    def test_low_completion(self, analyzer, make_completion):
        completions = [make_completion(days_ago(1), rpe=6)]
        analysis = analyzer.analyze_recent_performance(completions, 4, 3, NOW, scheduled_recent=4)
        low = next(a for a in analysis.alerts if a.type == AlertType.LOW_COMPLETION)
        assert low.severity == AlertSeverity.CRITICAL

    def test_high_fatigue_warning(self, analyzer, make_completion):
        completions = [make_completion(days_ago(1), rpe=9), make_completion(days_ago(2), rpe=9)]
        analysis = analyzer.analyze_recent_performance(completions, 2, 3, NOW, scheduled_recent=2)
        assert analysis.fatigue_score > 70
        assert any(a.type == AlertType.HIGH_FATIGUE for a in analysis.alerts)
        assert any("rest day" in r for r in analysis.recommendations)

    def test_consecutive_hard_sessions(self, analyzer, make_completion):
        completions = [make_completion(days_ago(d), rpe=8) for d in (1, 2, 4)]
        analysis = analyzer.analyze_recent_performance(completions, 3, 3, NOW, scheduled_recent=3)
        assert any(
            a.type == AlertType.OVERTRAINING and a.severity == AlertSeverity.CRITICAL
            for a in analysis.alerts
        )

    def test_undertrained(self, analyzer, make_completion):
        completions = [make_completion(days_ago(d), rpe=3) for d in (1, 3)]
        analysis = analyzer.analyze_recent_performance(completions, 2, 3, NOW, scheduled_recent=2)
        assert [a.type for a in analysis.alerts] == [AlertType.UNDERTRAINED]


class TestRaceReadiness:

    def test_no_scheduled_workouts(self, analyzer):
        readiness = analyzer.calculate_race_readiness([], 0, 0, 0, 4, 1, NOW)
        assert readiness.score == 0
        assert "Not enough" in readiness.message

    @pytest.mark.parametrize("scheduled, key_done, key_expected, weeks", [
        (1, 0, 0, None),
        (10, 0, 3, 0),
        (10, 5, 3, 1),
        (3, 3, 3, 20),
        (50, 0, 10, 2),
    ])
    def test_score_is_bounded(self, analyzer, make_completion, scheduled, key_done, key_expected, weeks):
        completions = [make_completion(days_ago(d), rpe=10) for d in range(1, 6)]
        readiness = analyzer.calculate_race_readiness(
            completions, scheduled, key_done, key_expected, weeks, 4, NOW
        )
        assert 0 <= readiness.score <= 100

    def test_key_workouts_weigh_more(self, analyzer, make_completion):
        completions = [make_completion(days_ago(d), rpe=6) for d in (1, 3, 5)]
        with_keys = analyzer.calculate_race_readiness(completions, 6, 2, 2, None, 3, NOW)
        without_keys = analyzer.calculate_race_readiness(completions, 6, 0, 2, None, 3, NOW)
        assert with_keys.score - without_keys.score == 35

    def test_urgency_penalty_only_with_race_date(self, analyzer, make_completion):
        completions = [make_completion(days_ago(d), rpe=6) for d in (1, 3)]
        no_race = analyzer.calculate_race_readiness(completions, 10, 0, 0, None, 6, NOW)
        race_soon = analyzer.calculate_race_readiness(completions, 10, 0, 0, 1, 6, NOW)
        race_far = analyzer.calculate_race_readiness(completions, 10, 0, 0, 10, 6, NOW)

        assert no_race.factors.urgency_penalty == 0
        assert race_far.factors.urgency_penalty == 0
        assert race_soon.factors.urgency_penalty == 12
        assert race_soon.score == no_race.score - 12

    def test_race_week_message(self, analyzer, make_completion):
        completions = [make_completion(days_ago(1), rpe=6)]
        readiness = analyzer.calculate_race_readiness(completions, 1, 0, 0, 1, 8, NOW)
        assert readiness.message.startswith("Race")

    def test_deterministic(self, analyzer, make_completion):
        completions = [make_completion(days_ago(d), rpe=7) for d in (1, 2, 8, 9)]
        first = analyzer.calculate_race_readiness(completions, 8, 1, 2, 3, 4, NOW)
        second = analyzer.calculate_race_readiness(completions, 8, 1, 2, 3, 4, NOW)
        assert first == second
