"""
Race Training Periodizer

Builds a week-by-week race training plan anchored to a race date:
- Phase allocation (base building -> intervals -> speed/strength -> taper)
- Weekly slot layout from run / cross-training / rest day budgets
- Down weeks every few weeks
- Optional cycle-phase annotations

Usage:
    periodizer = RaceTrainingPeriodizer()
    plan = periodizer.generate(
        race_type="half_marathon",
        race_date=date(2024, 6, 1),
        training_start_date=date(2024, 3, 23),
        runner_level="intermediate",
        run_days_per_week=4,
        cross_train_days_per_week=2,
        rest_days_per_week=1,
        race_goal="Finish strong",
    )
    if plan is None:
        # not configured yet
        ...
"""

import math
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from core.exceptions import InvalidConfigurationError

from .constants import (
    CyclePhase,
    PeriodizationPhase,
    RaceType,
    RaceWorkoutType,
    RunnerLevel,
    Weekday,
    WorkoutIntensity,
    BASE_RUN_DISTANCE_MILES,
    CROSS_TRAINING_ACTIVITIES,
    CROSS_TRAINING_MINUTES,
    CYCLE_ADAPTATIONS,
    DOWN_WEEK_FREQUENCY,
    DOWN_WEEK_REDUCTION,
    INTERVAL_REPS,
    INTERVAL_REST_MINUTES,
    INTERVAL_WARMUP_COOLDOWN_MINUTES,
    INTERVAL_WORK_MINUTES,
    LONG_RUN_MULTIPLIER,
    LONG_RUN_WEEKDAY,
    PACE_MINUTES_PER_MILE,
    PERIODIZATION_FOCUS,
    PERIODIZATION_SHARES,
    PHASE_VOLUME_MODIFIERS,
    RACE_TYPE_ALIASES,
    RECOVERY_MINUTES,
    STRENGTH_TRAINING_MINUTES,
    TAPER_FINAL_MODIFIER,
    TAPER_LONG_THRESHOLD_WEEKS,
    TAPER_WEEKS_LONG,
    TAPER_WEEKS_SHORT,
    TEMPO_RUN_MULTIPLIER,
)
from .models import CycleProfile
from .phase_calculator import CyclePhaseCalculator

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7

# Slot kinds used while laying out a week
_LONG = "long"
_RUN = "run"
_CROSS = "cross"
_REST = "rest"


@dataclass(frozen=True)
class RaceParameters:
    """Race settings as entered by the user. Any field may still be missing."""
    race_type: Optional[RaceType] = None
    race_date: Optional[date] = None
    training_start_date: Optional[date] = None
    runner_level: Optional[RunnerLevel] = None
    run_days_per_week: Optional[int] = None
    cross_train_days_per_week: Optional[int] = None
    rest_days_per_week: Optional[int] = None
    race_goal: Optional[str] = None


@dataclass
class RaceWorkout:
    """A single prescribed session."""
    workout_type: RaceWorkoutType
    distance_miles: Optional[float]
    duration_minutes: int
    intensity: WorkoutIntensity
    description: str
    instructions: List[str] = field(default_factory=list)


@dataclass
class DailyTrainingPlan:
    date: date
    weekday: Weekday
    workout_type: RaceWorkoutType
    workout: Optional[RaceWorkout]
    cycle_phase: Optional[CyclePhase] = None
    cycle_adaptations: List[str] = field(default_factory=list)
    is_race_day: bool = False
    is_after_race: bool = False


@dataclass
class WeeklyTrainingPlan:
    week_number: int  # 1-indexed
    phase: PeriodizationPhase
    focus: str
    is_down_week: bool
    volume_modifier: float
    days: List[DailyTrainingPlan]

    @property
    def start_date(self) -> date:
        return self.days[0].date

    @property
    def total_miles(self) -> float:
        return round(sum(
            d.workout.distance_miles or 0.0 for d in self.days if d.workout is not None
        ), 1)


@dataclass
class RaceTrainingPlan:
    """Complete race training plan."""

    race_type: RaceType
    race_date: date
    training_start_date: date
    runner_level: RunnerLevel
    run_days_per_week: int
    cross_train_days_per_week: int
    rest_days_per_week: int
    race_goal: Optional[str]

    total_weeks: int
    weeks: List[WeeklyTrainingPlan]

    def get_week(self, week_num: int) -> Optional[WeeklyTrainingPlan]:
        """Get a week by its 1-indexed number."""
        for week in self.weeks:
            if week.week_number == week_num:
                return week
        return None

    def get_phase_weeks(self, phase: PeriodizationPhase) -> List[int]:
        """Week numbers belonging to a phase."""
        return [w.week_number for w in self.weeks if w.phase == phase]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "race_type": self.race_type.value,
            "race_date": self.race_date.isoformat(),
            "training_start_date": self.training_start_date.isoformat(),
            "runner_level": self.runner_level.value,
            "run_days_per_week": self.run_days_per_week,
            "cross_train_days_per_week": self.cross_train_days_per_week,
            "rest_days_per_week": self.rest_days_per_week,
            "race_goal": self.race_goal,
            "total_weeks": self.total_weeks,
            "weeks": [
                {
                    "week_number": w.week_number,
                    "start_date": w.start_date.isoformat(),
                    "phase": w.phase.value,
                    "focus": w.focus,
                    "is_down_week": w.is_down_week,
                    "volume_modifier": w.volume_modifier,
                    "total_miles": w.total_miles,
                    "days": [
                        {
                            "date": d.date.isoformat(),
                            "weekday": d.weekday.name.lower(),
                            "workout_type": d.workout_type.value,
                            "workout": {
                                "workout_type": d.workout.workout_type.value,
                                "distance_miles": d.workout.distance_miles,
                                "duration_minutes": d.workout.duration_minutes,
                                "intensity": d.workout.intensity.value,
                                "description": d.workout.description,
                                "instructions": list(d.workout.instructions),
                            } if d.workout else None,
                            "cycle_phase": d.cycle_phase.value if d.cycle_phase else None,
                            "cycle_adaptations": list(d.cycle_adaptations),
                            "is_race_day": d.is_race_day,
                            "is_after_race": d.is_after_race,
                        }
                        for d in w.days
                    ],
                }
                for w in self.weeks
            ],
        }


class RaceTrainingPeriodizer:
    """
    Periodize training backwards from a race date.

    Taper always occupies the final week(s); phases never go backwards.
    """

    def __init__(
        self,
        calculator: Optional[CyclePhaseCalculator] = None,
        config=None,
    ):
        self.calculator = calculator or CyclePhaseCalculator()
        self.down_week_frequency = DOWN_WEEK_FREQUENCY
        self.down_week_reduction = DOWN_WEEK_REDUCTION
        self.taper_short = TAPER_WEEKS_SHORT
        self.taper_long = TAPER_WEEKS_LONG
        self.taper_threshold = TAPER_LONG_THRESHOLD_WEEKS
        self.speed_share = PERIODIZATION_SHARES["speed_strength"]
        self.interval_share = PERIODIZATION_SHARES["interval_workouts"]
        if config is not None:
            self._apply_config(config)

    def generate_from_parameters(
        self,
        params: RaceParameters,
        profile: Optional[CycleProfile] = None,
    ) -> Optional[RaceTrainingPlan]:
        return self.generate(
            race_type=params.race_type,
            race_date=params.race_date,
            training_start_date=params.training_start_date,
            runner_level=params.runner_level,
            run_days_per_week=params.run_days_per_week,
            cross_train_days_per_week=params.cross_train_days_per_week,
            rest_days_per_week=params.rest_days_per_week,
            race_goal=params.race_goal,
            profile=profile,
        )

    def generate(
        self,
        race_type,
        race_date: Optional[date],
        training_start_date: Optional[date],
        runner_level,
        run_days_per_week: Optional[int],
        cross_train_days_per_week: Optional[int],
        rest_days_per_week: Optional[int],
        race_goal: Optional[str] = None,
        profile: Optional[CycleProfile] = None,
    ) -> Optional[RaceTrainingPlan]:
        """
        Generate a plan, or None when race training is not configured.

        Raises:
            InvalidConfigurationError: start not before race, or day
                budgets that are negative or do not add up to 7
        """
        required = (
            race_type, race_date, training_start_date, runner_level,
            run_days_per_week, cross_train_days_per_week, rest_days_per_week,
        )
        if any(value is None for value in required):
            logger.debug("Race training not configured; no plan generated")
            return None

        race = self._coerce_race_type(race_type)
        level = self._coerce_level(runner_level)
        self._validate(
            race_date, training_start_date,
            run_days_per_week, cross_train_days_per_week, rest_days_per_week,
        )
        if profile is not None:
            self.calculator.validate(profile)

        days_until_race = (race_date - training_start_date).days
        total_weeks = math.ceil(days_until_race / DAYS_PER_WEEK)
        phases = self.allocate_phases(total_weeks)
        modifiers = self.volume_modifiers(phases)
        slots = self.weekly_slots(run_days_per_week, cross_train_days_per_week, rest_days_per_week)

        weeks: List[WeeklyTrainingPlan] = []
        non_taper_index = 0
        for index, phase in enumerate(phases):
            is_down = False
            modifier = modifiers[index]
            if phase != PeriodizationPhase.TAPER:
                non_taper_index += 1
                if non_taper_index % self.down_week_frequency == 0:
                    is_down = True
                    modifier = round(modifier * self.down_week_reduction, 2)

            week_start = training_start_date + timedelta(days=index * DAYS_PER_WEEK)
            weeks.append(
                self._build_week(
                    week_number=index + 1,
                    week_start=week_start,
                    phase=phase,
                    is_down=is_down,
                    modifier=modifier,
                    slots=slots,
                    race=race,
                    level=level,
                    race_date=race_date,
                    profile=profile,
                )
            )

        logger.info(
            f"Generated race plan: {race.value} {level.value} {total_weeks}w "
            f"({training_start_date} -> {race_date})"
        )

        return RaceTrainingPlan(
            race_type=race,
            race_date=race_date,
            training_start_date=training_start_date,
            runner_level=level,
            run_days_per_week=run_days_per_week,
            cross_train_days_per_week=cross_train_days_per_week,
            rest_days_per_week=rest_days_per_week,
            race_goal=race_goal,
            total_weeks=total_weeks,
            weeks=weeks,
        )

    # ========== Phase allocation ==========

    def allocate_phases(self, total_weeks: int) -> List[PeriodizationPhase]:
        """
        Phase for each week, in order.

        Taper takes the final week(s). Speed/strength and intervals take
        their shares of what remains and base building gets the rest,
        never less than one week when any non-taper week exists.
        """
        if total_weeks < 1:
            return []
        if total_weeks < 2:
            return [PeriodizationPhase.TAPER] * total_weeks

        taper = self.taper_short if total_weeks < self.taper_threshold else self.taper_long
        taper = min(taper, total_weeks - 1)
        remaining = total_weeks - taper

        speed = self._share(remaining, self.speed_share)
        interval = self._share(remaining, self.interval_share)
        base = remaining - speed - interval

        # Keep at least one base week: collapse interval first, then speed
        while base < 1 and interval > 0:
            interval -= 1
            base += 1
        while base < 1 and speed > 0:
            speed -= 1
            base += 1

        return (
            [PeriodizationPhase.BASE_BUILDING] * base
            + [PeriodizationPhase.INTERVAL_WORKOUTS] * interval
            + [PeriodizationPhase.SPEED_STRENGTH] * speed
            + [PeriodizationPhase.TAPER] * taper
        )

    def volume_modifiers(self, phases: List[PeriodizationPhase]) -> List[float]:
        """Per-week load relative to peak. Taper weeks strictly decrease."""
        taper_weeks = sum(1 for p in phases if p == PeriodizationPhase.TAPER)
        start = PHASE_VOLUME_MODIFIERS[PeriodizationPhase.TAPER]
        step = (start - TAPER_FINAL_MODIFIER) / max(taper_weeks - 1, 1)

        modifiers = []
        taper_index = 0
        for phase in phases:
            if phase == PeriodizationPhase.TAPER:
                modifiers.append(round(start - taper_index * step, 2))
                taper_index += 1
            else:
                modifiers.append(PHASE_VOLUME_MODIFIERS[phase])
        return modifiers

    @staticmethod
    def _share(weeks: int, pct: float) -> int:
        return int(weeks * pct + 0.5)

    # ========== Weekly layout ==========

    def weekly_slots(self, run_days: int, cross_days: int, rest_days: int) -> Dict[Weekday, str]:
        """
        Slot kind per weekday.

        Long run on Saturday, rest spread evenly from Monday,
        cross-training spread over the free days, runs fill the rest.
        """
        slots: List[Optional[str]] = [None] * DAYS_PER_WEEK

        if run_days > 0:
            slots[LONG_RUN_WEEKDAY] = _LONG

        for i in range(rest_days):
            day = int(i * DAYS_PER_WEEK / rest_days)
            while slots[day] is not None:
                day = (day + 1) % DAYS_PER_WEEK
            slots[day] = _REST

        free = [d for d in range(DAYS_PER_WEEK) if slots[d] is None]
        for i in range(cross_days):
            slots[free[int(i * len(free) / cross_days)]] = _CROSS

        for d in range(DAYS_PER_WEEK):
            if slots[d] is None:
                slots[d] = _RUN

        return {Weekday(d): slots[d] for d in range(DAYS_PER_WEEK)}

    def _build_week(
        self,
        week_number: int,
        week_start: date,
        phase: PeriodizationPhase,
        is_down: bool,
        modifier: float,
        slots: Dict[Weekday, str],
        race: RaceType,
        level: RunnerLevel,
        race_date: date,
        profile: Optional[CycleProfile],
    ) -> WeeklyTrainingPlan:
        run_sequence = self._run_sequence(phase, is_down)
        run_index = 0
        cross_index = 0
        days: List[DailyTrainingPlan] = []

        for offset in range(DAYS_PER_WEEK):
            day = week_start + timedelta(days=offset)
            weekday = Weekday(day.weekday())
            slot = slots[weekday]

            if day >= race_date:
                workout_type = RaceWorkoutType.REST
                workout = None
            elif slot == _LONG:
                workout_type = (
                    RaceWorkoutType.EASY_RUN if phase == PeriodizationPhase.TAPER
                    else RaceWorkoutType.LONG_RUN
                )
                workout = self._build_workout(workout_type, race, level, modifier, week_number)
            elif slot == _RUN:
                workout_type = run_sequence[min(run_index, len(run_sequence) - 1)]
                run_index += 1
                workout = self._build_workout(workout_type, race, level, modifier, week_number)
            elif slot == _CROSS:
                workout_type = RaceWorkoutType.CROSS_TRAINING
                if phase == PeriodizationPhase.SPEED_STRENGTH and cross_index == 0:
                    workout_type = RaceWorkoutType.STRENGTH_TRAINING
                cross_index += 1
                workout = self._build_workout(workout_type, race, level, modifier, week_number)
            else:
                workout_type = RaceWorkoutType.REST
                workout = None

            cycle_phase = None
            adaptations: List[str] = []
            if profile is not None:
                result = self.calculator.phase_for_date(day, profile)
                if result.has_data:
                    cycle_phase = result.phase
                    adaptations = list(CYCLE_ADAPTATIONS[result.phase])

            days.append(DailyTrainingPlan(
                date=day,
                weekday=weekday,
                workout_type=workout_type,
                workout=workout,
                cycle_phase=cycle_phase,
                cycle_adaptations=adaptations,
                is_race_day=day == race_date,
                is_after_race=day > race_date,
            ))

        return WeeklyTrainingPlan(
            week_number=week_number,
            phase=phase,
            focus=PERIODIZATION_FOCUS[phase],
            is_down_week=is_down,
            volume_modifier=modifier,
            days=days,
        )

    @staticmethod
    def _run_sequence(phase: PeriodizationPhase, is_down: bool) -> List[RaceWorkoutType]:
        """Run types for the non-long run slots of a week, in date order."""
        easy = RaceWorkoutType.EASY_RUN
        if is_down or phase == PeriodizationPhase.BASE_BUILDING:
            return [easy]
        if phase == PeriodizationPhase.INTERVAL_WORKOUTS:
            return [RaceWorkoutType.TEMPO_RUN, RaceWorkoutType.INTERVAL_RUN, easy]
        if phase == PeriodizationPhase.SPEED_STRENGTH:
            return [RaceWorkoutType.INTERVAL_RUN, RaceWorkoutType.TEMPO_RUN, easy]
        return [easy, RaceWorkoutType.RECOVERY, easy]

    # ========== Workouts ==========

    def _build_workout(
        self,
        workout_type: RaceWorkoutType,
        race: RaceType,
        level: RunnerLevel,
        modifier: float,
        week_number: int,
    ) -> RaceWorkout:
        base = BASE_RUN_DISTANCE_MILES[race][level]

        if workout_type == RaceWorkoutType.EASY_RUN:
            return self._distance_run(
                workout_type, base * modifier, WorkoutIntensity.EASY,
                "Easy conversational pace run",
                ["Keep effort relaxed", "You should be able to hold a conversation"],
            )
        if workout_type == RaceWorkoutType.LONG_RUN:
            return self._distance_run(
                workout_type, base * LONG_RUN_MULTIPLIER * modifier, WorkoutIntensity.MODERATE,
                "Long steady run to build endurance",
                ["Start slower than feels natural", "Practice race-day fueling and hydration"],
            )
        if workout_type == RaceWorkoutType.TEMPO_RUN:
            return self._distance_run(
                workout_type, base * TEMPO_RUN_MULTIPLIER * modifier, WorkoutIntensity.HARD,
                "Comfortably hard sustained effort",
                ["Warm up with 10 minutes easy", "Hold a steady, controlled hard pace", "Cool down with 10 minutes easy"],
            )
        if workout_type == RaceWorkoutType.INTERVAL_RUN:
            reps = INTERVAL_REPS[level]
            duration = reps * (INTERVAL_WORK_MINUTES + INTERVAL_REST_MINUTES) + INTERVAL_WARMUP_COOLDOWN_MINUTES
            return RaceWorkout(
                workout_type=workout_type,
                distance_miles=None,
                duration_minutes=duration,
                intensity=WorkoutIntensity.VERY_HARD,
                description=f"{reps} x {INTERVAL_WORK_MINUTES} min hard, {INTERVAL_REST_MINUTES} min easy",
                instructions=[
                    "Warm up 10 minutes easy",
                    f"Run {reps} repeats of {INTERVAL_WORK_MINUTES} minutes at hard effort",
                    f"Recover {INTERVAL_REST_MINUTES} minutes easy between repeats",
                    "Cool down 10 minutes easy",
                ],
            )
        if workout_type == RaceWorkoutType.RECOVERY:
            pace = PACE_MINUTES_PER_MILE[RaceWorkoutType.RECOVERY]
            return RaceWorkout(
                workout_type=workout_type,
                distance_miles=round(RECOVERY_MINUTES / pace, 1),
                duration_minutes=RECOVERY_MINUTES,
                intensity=WorkoutIntensity.EASY,
                description="Very easy recovery jog",
                instructions=["Keep it short and gentle", "Walk breaks are fine"],
            )
        if workout_type == RaceWorkoutType.STRENGTH_TRAINING:
            return RaceWorkout(
                workout_type=workout_type,
                distance_miles=None,
                duration_minutes=max(1, round(STRENGTH_TRAINING_MINUTES * modifier)),
                intensity=WorkoutIntensity.MODERATE,
                description="Runner-specific strength session",
                instructions=["Squats, lunges and calf raises", "Core stability work", "Single-leg balance drills"],
            )

        activity = CROSS_TRAINING_ACTIVITIES[(week_number - 1) % len(CROSS_TRAINING_ACTIVITIES)]
        return RaceWorkout(
            workout_type=RaceWorkoutType.CROSS_TRAINING,
            distance_miles=None,
            duration_minutes=max(1, round(CROSS_TRAINING_MINUTES * modifier)),
            intensity=WorkoutIntensity.MODERATE,
            description=f"{activity} at moderate effort",
            instructions=["Low-impact aerobic work", "Keep effort moderate and steady"],
        )

    @staticmethod
    def _distance_run(
        workout_type: RaceWorkoutType,
        miles: float,
        intensity: WorkoutIntensity,
        description: str,
        instructions: List[str],
    ) -> RaceWorkout:
        distance = max(0.5, round(miles, 1))
        return RaceWorkout(
            workout_type=workout_type,
            distance_miles=distance,
            duration_minutes=round(distance * PACE_MINUTES_PER_MILE[workout_type]),
            intensity=intensity,
            description=description,
            instructions=instructions,
        )

    # ========== Internal Methods ==========

    @staticmethod
    def _coerce_race_type(value) -> RaceType:
        if isinstance(value, RaceType):
            return value
        race = RACE_TYPE_ALIASES.get(str(value).strip().lower())
        if race is None:
            raise InvalidConfigurationError(f"Unknown race type: {value!r}", field="race_type")
        return race

    @staticmethod
    def _coerce_level(value) -> RunnerLevel:
        if isinstance(value, RunnerLevel):
            return value
        try:
            return RunnerLevel(str(value).strip().lower())
        except ValueError:
            raise InvalidConfigurationError(f"Unknown runner level: {value!r}", field="runner_level")

    @staticmethod
    def _validate(
        race_date: date,
        training_start_date: date,
        run_days: int,
        cross_days: int,
        rest_days: int,
    ):
        if training_start_date >= race_date:
            raise InvalidConfigurationError(
                f"training_start_date ({training_start_date}) must be before race_date ({race_date})",
                field="training_start_date",
            )
        budgets = {
            "run_days_per_week": run_days,
            "cross_train_days_per_week": cross_days,
            "rest_days_per_week": rest_days,
        }
        for name, value in budgets.items():
            if value < 0:
                raise InvalidConfigurationError(f"{name} cannot be negative (got {value})", field=name)
        total = run_days + cross_days + rest_days
        if total != DAYS_PER_WEEK:
            raise InvalidConfigurationError(
                f"Weekly day budgets must sum to {DAYS_PER_WEEK} (got {total})",
                field="weekly_days",
            )

    def _apply_config(self, config):
        down = config.get_down_week_rules()
        self.down_week_frequency = int(down.get("frequency", self.down_week_frequency))
        self.down_week_reduction = float(down.get("reduction", self.down_week_reduction))

        taper = config.get_taper_rules()
        self.taper_short = int(taper.get("short_weeks", self.taper_short))
        self.taper_long = int(taper.get("long_weeks", self.taper_long))
        self.taper_threshold = int(taper.get("long_threshold_weeks", self.taper_threshold))

        shares = config.get_phase_shares()
        self.speed_share = float(shares.get("speed_strength", self.speed_share))
        self.interval_share = float(shares.get("interval_workouts", self.interval_share))
