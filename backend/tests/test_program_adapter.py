"""Tests for intensity scaling and makeup workouts."""

import pytest

from hyrox_coach.schemas.analysis import Importance, MissedWorkout, SuggestedAction
from hyrox_coach.schemas.program import ScheduledWorkoutType
from hyrox_coach.services.program_adapter import (
    apply_intensity_modifier,
    condense_factor_for,
    generate_makeup_workout,
    get_adaptation_description,
    scale_rep_string,
)
from hyrox_coach.services.program_templates import (
    coverage,
    full_sim,
    rest,
    run_intervals,
    run_zone2,
)


def missed(workout, days, week=2):
    return MissedWorkout(
        week=week,
        day_of_week=workout.day_of_week,
        day_name=workout.day_name,
        workout=workout,
        days_since_missed=days,
        importance=Importance.HIGH,
        suggested_action=SuggestedAction.MAKEUP_CONDENSED,
        impact_on_readiness=-12,
    )


class TestIntensityModifier:

    def test_rest_day_unchanged(self):
        workout = rest(0)
        assert apply_intensity_modifier(workout, 1.3) == workout

    def test_coverage_scales_with_modifier(self):
        scaled = apply_intensity_modifier(coverage(4, 50, 45), 1.2)
        assert scaled.params.coverage == 60
        assert scaled.estimated_minutes == 54

    def test_modifier_is_clamped(self):
        scaled = apply_intensity_modifier(coverage(4, 50, 45), 2.0)
        assert scaled.params.coverage == 65

    def test_zone2_run_duration(self):
        scaled = apply_intensity_modifier(run_zone2(3, 30), 0.8)
        assert scaled.params.duration == 24
        assert scaled.estimated_minutes == 24

    def test_intervals_get_shorter_rest_when_harder(self):
        scaled = apply_intensity_modifier(run_intervals(5, 6, 400, 90), 1.2)
        assert scaled.params.intervals.reps == 7
        assert scaled.params.intervals.distance == 480
        assert scaled.params.intervals.rest == 72

    def test_neutral_modifier_keeps_values(self):
        workout = coverage(4, 50, 45)
        scaled = apply_intensity_modifier(workout, 1.0)
        assert scaled.params.coverage == 50
        assert scaled.estimated_minutes == 45

    def test_original_is_not_mutated(self):
        workout = coverage(4, 50, 45)
        apply_intensity_modifier(workout, 1.3)
        assert workout.params.coverage == 50
        assert workout.estimated_minutes == 45

    def test_full_simulation_keeps_a_minimum(self):
        scaled = apply_intensity_modifier(full_sim(6), 0.7)
        assert scaled.type == ScheduledWorkoutType.FULL
        assert scaled.estimated_minutes >= 60


class TestRepStrings:

    @pytest.mark.parametrize("reps, modifier, expected", [
        ("8-10", 0.8, "10-12"),
        ("20 steps", 0.8, "24 steps"),
        ("8", 1.3, "6"),
        ("max", 1.3, "max"),
        ("AMRAP", 0.7, "AMRAP"),
        ("30 sec", 1.3, "30 sec"),
    ])
    def test_scale_rep_string(self, reps, modifier, expected):
        assert scale_rep_string(reps, modifier) == expected


class TestMakeupWorkout:

    @pytest.mark.parametrize("days, factor", [(1, 0.75), (3, 0.75), (4, 0.5), (7, 0.5), (8, 0.35)])
    def test_condense_factor(self, days, factor):
        assert condense_factor_for(days) == factor

    def test_recent_miss_is_lightly_condensed(self):
        makeup = generate_makeup_workout(missed(coverage(4, 80, 60), days=2))
        assert makeup.params.coverage == 60
        assert makeup.estimated_minutes == 45

    def test_old_miss_is_heavily_condensed(self):
        makeup = generate_makeup_workout(missed(coverage(4, 80, 60), days=10))
        assert makeup.params.coverage == 28
        assert makeup.estimated_minutes == 21

    def test_makeup_is_tagged(self):
        makeup = generate_makeup_workout(missed(coverage(4, 80, 60), days=2, week=3))
        assert makeup.params.is_makeup is True
        assert makeup.params.original_week == 3
        assert makeup.params.original_day_of_week == 4
        assert makeup.params.condense_factor == 0.75

    def test_missed_workout_not_mutated(self):
        entry = missed(coverage(4, 80, 60), days=2)
        generate_makeup_workout(entry)
        assert entry.workout.params.coverage == 80
        assert entry.workout.params.is_makeup is None


class TestAdaptationDescription:

    @pytest.mark.parametrize("modifier, text", [
        (0.7, "Reduced intensity (recovery focus)"),
        (0.9, "Slightly reduced intensity"),
        (1.0, "Standard intensity"),
        (1.1, "Slightly increased intensity"),
        (1.3, "Increased intensity (challenge mode)"),
    ])
    def test_description(self, modifier, text):
        assert get_adaptation_description(modifier) == text
