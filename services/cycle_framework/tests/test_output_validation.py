"""
Output Validation Tests

Tests that generated plans make training sense.
These tests validate the QUALITY of output, not just correctness.

Each test checks a specific aspect of plan quality.
"""

import pytest
from datetime import date, timedelta

from services.cycle_framework import (
    ConfigService,
    CyclePhase,
    CycleProfile,
    FitnessPlanGenerator,
    FitnessPreferences,
    PeriodizationPhase,
    RaceTrainingPeriodizer,
    RaceWorkoutType,
    StaticContentCatalog,
    WorkoutType,
)
from services.cycle_framework.constants import (
    Difficulty,
    ExperienceLevel,
    RaceType,
    RunnerLevel,
    Weekday,
    RUN_WORKOUT_TYPES,
)

PROFILE = CycleProfile(anchor_date=date(2024, 3, 1), cycle_length_days=28, period_length_days=5)
START = date(2024, 3, 4)


@pytest.fixture(scope="module")
def catalog():
    return StaticContentCatalog.from_config(ConfigService())


def race_plan(race_type=RaceType.MARATHON, level=RunnerLevel.INTERMEDIATE, weeks=18, days=(4, 2, 1)):
    start = date(2024, 1, 6)
    return RaceTrainingPeriodizer().generate(
        race_type=race_type,
        race_date=start + timedelta(days=weeks * 7),
        training_start_date=start,
        runner_level=level,
        run_days_per_week=days[0],
        cross_train_days_per_week=days[1],
        rest_days_per_week=days[2],
    )


class TestFitnessPlanQuality:
    """Fitness plans respect the body's cycle and the user's week."""

    def test_menstrual_workouts_are_gentle(self, catalog):
        """Menstrual days get low-intensity sessions."""
        prefs = FitnessPreferences(experience_level=ExperienceLevel.ADVANCED, desired_weekly_frequency=7)
        entries = FitnessPlanGenerator().generate(PROFILE, prefs, date(2024, 3, 1), catalog, horizon_days=56)
        menstrual = [e for e in entries if e.cycle_phase == CyclePhase.MENSTRUAL and not e.is_rest_day]
        assert menstrual
        for e in menstrual:
            assert e.difficulty == Difficulty.BEGINNER, f"{e.date}: {e.workout_title}"

    def test_ovulatory_window_allows_peak_effort(self, catalog):
        """Advanced users get high-intensity work around ovulation."""
        prefs = FitnessPreferences(experience_level=ExperienceLevel.ADVANCED, desired_weekly_frequency=7)
        entries = FitnessPlanGenerator().generate(PROFILE, prefs, date(2024, 3, 13), catalog, horizon_days=3)
        assert all(e.cycle_phase == CyclePhase.OVULATORY for e in entries)
        assert all(e.difficulty == Difficulty.ADVANCED for e in entries)

    @pytest.mark.parametrize("frequency", range(0, 8))
    @pytest.mark.parametrize("rest_days", [(), (Weekday.SUNDAY,), (Weekday.MONDAY, Weekday.THURSDAY)])
    def test_frequency_and_rest_sweep(self, catalog, frequency, rest_days):
        prefs = FitnessPreferences(desired_weekly_frequency=frequency, preferred_rest_days=rest_days)
        entries = FitnessPlanGenerator().generate(PROFILE, prefs, START, catalog, horizon_days=28)

        assert len(entries) == 28
        for week in range(4):
            block = entries[week * 7:(week + 1) * 7]
            workouts = sum(1 for e in block if not e.is_rest_day)
            assert workouts == min(frequency, 7 - len(rest_days))
        for e in entries:
            if Weekday(e.date.weekday()) in rest_days:
                assert e.is_rest_day

    def test_variety_within_a_week(self, catalog):
        """A full week uses more than two workout types."""
        prefs = FitnessPreferences(desired_weekly_frequency=6)
        entries = FitnessPlanGenerator().generate(PROFILE, prefs, date(2024, 3, 6), catalog, horizon_days=7)
        types = {e.workout_type for e in entries if not e.is_rest_day}
        assert len(types) >= 3

    def test_rest_entries_are_complete(self, catalog):
        prefs = FitnessPreferences(desired_weekly_frequency=2)
        entries = FitnessPlanGenerator().generate(PROFILE, prefs, START, catalog)
        for e in entries:
            if e.is_rest_day:
                assert e.workout_type == WorkoutType.REST
                assert e.duration_minutes == 0
                assert e.workout_title
                assert e.benefits


class TestRacePlanQuality:
    """Race plans build, cut back and taper sensibly."""

    @pytest.mark.parametrize("race_type", list(RaceType))
    @pytest.mark.parametrize("level", list(RunnerLevel))
    def test_taper_is_lighter_than_peak(self, race_type, level):
        plan = race_plan(race_type=race_type, level=level)
        peak = max(w.total_miles for w in plan.weeks if w.phase != PeriodizationPhase.TAPER)
        taper = [w.total_miles for w in plan.weeks if w.phase == PeriodizationPhase.TAPER]
        assert all(t < peak for t in taper)
        assert taper == sorted(taper, reverse=True)

    def test_long_run_is_longest_run_of_week(self):
        plan = race_plan()
        for week in plan.weeks:
            if week.phase == PeriodizationPhase.TAPER:
                continue
            runs = [d.workout for d in week.days if d.workout_type in RUN_WORKOUT_TYPES and d.workout.distance_miles]
            long_run = next(d.workout for d in week.days if d.workout_type == RaceWorkoutType.LONG_RUN)
            assert long_run.distance_miles == max(r.distance_miles for r in runs)

    @pytest.mark.parametrize("days", [(4, 2, 1), (3, 2, 2)])
    def test_hard_sessions_not_back_to_back(self, days):
        plan = race_plan(days=days)
        hard = {RaceWorkoutType.TEMPO_RUN, RaceWorkoutType.INTERVAL_RUN, RaceWorkoutType.LONG_RUN}
        all_days = [d for w in plan.weeks for d in w.days]
        for prev, curr in zip(all_days, all_days[1:]):
            if prev.workout_type in (RaceWorkoutType.TEMPO_RUN, RaceWorkoutType.INTERVAL_RUN):
                assert curr.workout_type not in hard, f"{prev.date} then {curr.date}"

    def test_cutback_weeks_present(self):
        """An 18-week plan has regular down weeks before the taper."""
        plan = race_plan()
        down = [w for w in plan.weeks if w.is_down_week]
        assert len(down) == 4
        assert all(w.phase != PeriodizationPhase.TAPER for w in down)

    def test_quality_work_only_after_base(self):
        plan = race_plan()
        for week in plan.weeks:
            types = {d.workout_type for d in week.days}
            if week.phase in (PeriodizationPhase.BASE_BUILDING, PeriodizationPhase.TAPER):
                assert RaceWorkoutType.TEMPO_RUN not in types
                assert RaceWorkoutType.INTERVAL_RUN not in types
