"""
Constants for cycle-aware plan generation.

These are DEFAULTS that can be overridden by config (plan_rules.yaml).
They exist here for type safety and documentation.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple


class CyclePhase(str, Enum):
    """The four canonical cycle phases."""
    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATORY = "ovulatory"
    LUTEAL = "luteal"

    def display_name(self, variant: "PhaseDisplayVariant" = None) -> str:
        """Human label, optionally with the moon-tracking alias."""
        base = self.value.capitalize()
        if variant == PhaseDisplayVariant.MOON:
            return f"{base} Moon"
        return base

    @classmethod
    def from_label(cls, label: str) -> Optional["CyclePhase"]:
        """
        Map any known label back to a canonical phase.

        Accepts canonical values, display names, moon aliases
        ("Luteal Moon") and the legacy "ovulation" spelling.
        """
        if not label:
            return None
        key = label.strip().lower()
        if key.endswith(" moon"):
            key = key[: -len(" moon")].strip()
        return PHASE_LABEL_ALIASES.get(key)


class PhaseDisplayVariant(str, Enum):
    """Presentation-only tag; never changes phase arithmetic."""
    STANDARD = "standard"
    MOON = "moon"


PHASE_LABEL_ALIASES: Dict[str, CyclePhase] = {
    "menstrual": CyclePhase.MENSTRUAL,
    "menstruation": CyclePhase.MENSTRUAL,
    "period": CyclePhase.MENSTRUAL,
    "follicular": CyclePhase.FOLLICULAR,
    "ovulatory": CyclePhase.OVULATORY,
    "ovulation": CyclePhase.OVULATORY,
    "luteal": CyclePhase.LUTEAL,
}

# Phase used for selection when a date has no cycle data
DEFAULT_PHASE = CyclePhase.FOLLICULAR


class Regularity(str, Enum):
    REGULAR = "regular"
    IRREGULAR = "irregular"


class WorkoutStatus(str, Enum):
    SUGGESTED = "suggested"
    CONFIRMED = "confirmed"


class WorkoutType(str, Enum):
    """Catalog workout types."""
    YOGA = "yoga"
    STRENGTH = "strength"
    CARDIO = "cardio"
    PILATES = "pilates"
    DANCE = "dance"
    WALKING = "walking"
    STRETCHING = "stretching"
    MEDITATION = "meditation"
    HIIT = "hiit"
    BOXING = "boxing"
    RUN = "run"
    CYCLE = "cycle"
    REST = "rest"


# Free-text answers -> workout types
WORKOUT_TYPE_ALIASES: Dict[str, WorkoutType] = {
    "strength training": WorkoutType.STRENGTH,
    "free weights": WorkoutType.STRENGTH,
    "weights": WorkoutType.STRENGTH,
    "walk": WorkoutType.WALKING,
    "stretch": WorkoutType.STRETCHING,
    "mobility": WorkoutType.STRETCHING,
    "running": WorkoutType.RUN,
    "cycling": WorkoutType.CYCLE,
    "spin": WorkoutType.CYCLE,
    "dance cardio": WorkoutType.DANCE,
    "sports": WorkoutType.CARDIO,
}


class Difficulty(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class Intensity(str, Enum):
    """Catalog intensity tag."""
    LOW = "low"
    MID = "mid"
    HIGH = "high"


INTENSITY_TO_DIFFICULTY: Dict[Intensity, Difficulty] = {
    Intensity.LOW: Difficulty.BEGINNER,
    Intensity.MID: Difficulty.INTERMEDIATE,
    Intensity.HIGH: Difficulty.ADVANCED,
}


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class PlanStartPolicy(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    NEXT_PERIOD_START = "next_period_start"
    CUSTOM = "custom"


class Weekday(int, Enum):
    """Matches ``date.weekday()``."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_name(cls, name: str) -> Optional["Weekday"]:
        return WEEKDAY_ALIASES.get(name.strip().lower())


WEEKDAY_ALIASES: Dict[str, Weekday] = {
    "monday": Weekday.MONDAY, "mon": Weekday.MONDAY,
    "tuesday": Weekday.TUESDAY, "tue": Weekday.TUESDAY, "tues": Weekday.TUESDAY,
    "wednesday": Weekday.WEDNESDAY, "wed": Weekday.WEDNESDAY,
    "thursday": Weekday.THURSDAY, "thu": Weekday.THURSDAY,
    "thur": Weekday.THURSDAY, "thurs": Weekday.THURSDAY,
    "friday": Weekday.FRIDAY, "fri": Weekday.FRIDAY,
    "saturday": Weekday.SATURDAY, "sat": Weekday.SATURDAY,
    "sunday": Weekday.SUNDAY, "sun": Weekday.SUNDAY,
}


# ========== Cycle arithmetic ==========

DEFAULT_CYCLE_LENGTH_DAYS = 28
DEFAULT_PERIOD_LENGTH_DAYS = 5
OVULATION_WINDOW_DAYS = 3
LUTEAL_OFFSET_DAYS = 14            # ovulation centred on cycle_length - 14
MIN_NON_MENSTRUAL_DAYS = 4         # cycle_length >= period_length + 4

# Prediction confidence
REGULARITY_TOLERANCE_DAYS = 3
REGULARITY_LOOKBACK_CYCLES = 6
REGULAR_WINDOW_RADIUS_DAYS = 1
WIDENING_WINDOW_RADIUS_DAYS = 4
PREDICTED_CYCLES = 3


# ========== Fitness plan ==========

DEFAULT_HORIZON_DAYS = 14
DEFAULT_WEEKLY_FREQUENCY = 4

# From this day of a plan week (0-based), a week with no favourite yet
# selects from favourite types only
FAVORITE_GUARANTEE_FROM_DAY = 4

# Selection scoring weights
FITNESS_SCORING = {
    "favorite_bonus": 3,
    "goal_bonus": 1,
    "level_bonus": 1,
    "phase_intensity_bonus": 2,
    "repeat_template_penalty": 2,
}

# Intensities that suit each phase
PHASE_PREFERRED_INTENSITIES: Dict[CyclePhase, List[Intensity]] = {
    CyclePhase.MENSTRUAL: [Intensity.LOW],
    CyclePhase.FOLLICULAR: [Intensity.MID, Intensity.HIGH],
    CyclePhase.OVULATORY: [Intensity.HIGH],
    CyclePhase.LUTEAL: [Intensity.MID, Intensity.LOW],
}

# Intensities each experience level is matched with
LEVEL_INTENSITIES: Dict[ExperienceLevel, List[Intensity]] = {
    ExperienceLevel.BEGINNER: [Intensity.LOW],
    ExperienceLevel.INTERMEDIATE: [Intensity.LOW, Intensity.MID],
    ExperienceLevel.ADVANCED: [Intensity.LOW, Intensity.MID, Intensity.HIGH],
}

# Goal keyword -> workout types that serve it
GOAL_WORKOUT_TYPES: Dict[str, List[WorkoutType]] = {
    "weight": [WorkoutType.HIIT, WorkoutType.CARDIO, WorkoutType.DANCE, WorkoutType.RUN],
    "flexib": [WorkoutType.YOGA, WorkoutType.STRETCHING, WorkoutType.PILATES],
    "mobility": [WorkoutType.YOGA, WorkoutType.STRETCHING, WorkoutType.PILATES],
    "strength": [WorkoutType.STRENGTH, WorkoutType.PILATES],
    "tone": [WorkoutType.PILATES, WorkoutType.STRENGTH],
    "race": [WorkoutType.RUN, WorkoutType.CARDIO],
    "event": [WorkoutType.RUN, WorkoutType.CARDIO],
    "fun": [WorkoutType.DANCE, WorkoutType.BOXING],
    "fitness": [WorkoutType.CARDIO, WorkoutType.STRENGTH, WorkoutType.HIIT],
}

# Injury tag -> workout types that load the injured area
INJURY_RESTRICTIONS: Dict[str, List[WorkoutType]] = {
    "ankle": [WorkoutType.HIIT, WorkoutType.RUN, WorkoutType.DANCE],
    "knee": [WorkoutType.HIIT, WorkoutType.RUN, WorkoutType.DANCE],
    "hip": [WorkoutType.RUN, WorkoutType.HIIT],
    "wrist": [WorkoutType.STRENGTH, WorkoutType.BOXING],
    "shoulder": [WorkoutType.STRENGTH, WorkoutType.BOXING],
    "back": [WorkoutType.STRENGTH, WorkoutType.BOXING],
}

# Low-impact defaults when the catalog has nothing usable for a phase.
# (title, type, minutes, description)
PHASE_DEFAULT_WORKOUTS: Dict[CyclePhase, List[Tuple[str, WorkoutType, int, str]]] = {
    CyclePhase.MENSTRUAL: [
        ("Gentle Restorative Yoga", WorkoutType.YOGA, 20, "Slow, supported poses to ease cramps and tension"),
        ("Easy Walk", WorkoutType.WALKING, 20, "Relaxed outdoor walk at conversational pace"),
        ("Full-Body Stretch", WorkoutType.STRETCHING, 15, "Light mobility for hips, back and hamstrings"),
    ],
    CyclePhase.FOLLICULAR: [
        ("Brisk Walk", WorkoutType.WALKING, 30, "Steady walk building aerobic base"),
        ("Core Pilates", WorkoutType.PILATES, 25, "Controlled core and posture work"),
        ("Flow Yoga", WorkoutType.YOGA, 25, "Energising vinyasa flow"),
    ],
    CyclePhase.OVULATORY: [
        ("Power Walk", WorkoutType.WALKING, 30, "Fast-paced walk with short hill efforts"),
        ("Pilates Sculpt", WorkoutType.PILATES, 25, "Low-impact strength through full range"),
        ("Flow Yoga", WorkoutType.YOGA, 25, "Energising vinyasa flow"),
    ],
    CyclePhase.LUTEAL: [
        ("Mat Pilates", WorkoutType.PILATES, 25, "Steady, moderate pilates session"),
        ("Easy Walk", WorkoutType.WALKING, 25, "Relaxed walk to manage stress"),
        ("Yin Yoga", WorkoutType.YOGA, 20, "Long-held stretches for recovery"),
    ],
}

REST_DAY_TITLE = "Rest Day"
REST_DAY_DESCRIPTION = "Scheduled rest day for recovery"
REST_DAY_BENEFITS = ["Recovery", "Rest", "Restoration"]


# ========== Race training ==========

class RaceType(str, Enum):
    FIVE_K = "5k"
    TEN_K = "10k"
    HALF_MARATHON = "half_marathon"
    MARATHON = "marathon"


RACE_TYPE_ALIASES: Dict[str, RaceType] = {
    "5k": RaceType.FIVE_K,
    "10k": RaceType.TEN_K,
    "half": RaceType.HALF_MARATHON,
    "half marathon": RaceType.HALF_MARATHON,
    "half_marathon": RaceType.HALF_MARATHON,
    "marathon": RaceType.MARATHON,
}


class RunnerLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class PeriodizationPhase(str, Enum):
    """Training phases, in the order they occur."""
    BASE_BUILDING = "base_building"
    INTERVAL_WORKOUTS = "interval_workouts"
    SPEED_STRENGTH = "speed_strength"
    TAPER = "taper"

    @property
    def order(self) -> int:
        return PERIODIZATION_ORDER.index(self)


PERIODIZATION_ORDER: List[PeriodizationPhase] = [
    PeriodizationPhase.BASE_BUILDING,
    PeriodizationPhase.INTERVAL_WORKOUTS,
    PeriodizationPhase.SPEED_STRENGTH,
    PeriodizationPhase.TAPER,
]

PERIODIZATION_FOCUS: Dict[PeriodizationPhase, str] = {
    PeriodizationPhase.BASE_BUILDING: "Build aerobic base with easy runs and cross-training",
    PeriodizationPhase.INTERVAL_WORKOUTS: "Introduce speed work and tempo runs",
    PeriodizationPhase.SPEED_STRENGTH: "Focus on race pace and strength training",
    PeriodizationPhase.TAPER: "Reduce volume, maintain intensity for race day",
}


class RaceWorkoutType(str, Enum):
    EASY_RUN = "easy_run"
    TEMPO_RUN = "tempo_run"
    INTERVAL_RUN = "interval_run"
    LONG_RUN = "long_run"
    CROSS_TRAINING = "cross_training"
    STRENGTH_TRAINING = "strength_training"
    RECOVERY = "recovery"
    REST = "rest"


RUN_WORKOUT_TYPES = {
    RaceWorkoutType.EASY_RUN,
    RaceWorkoutType.TEMPO_RUN,
    RaceWorkoutType.INTERVAL_RUN,
    RaceWorkoutType.LONG_RUN,
    RaceWorkoutType.RECOVERY,
}


class WorkoutIntensity(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    VERY_HARD = "very_hard"


# Base easy-run distance (miles) by race type and runner level
BASE_RUN_DISTANCE_MILES: Dict[RaceType, Dict[RunnerLevel, float]] = {
    RaceType.FIVE_K: {RunnerLevel.BEGINNER: 2.0, RunnerLevel.INTERMEDIATE: 3.0, RunnerLevel.ADVANCED: 4.0},
    RaceType.TEN_K: {RunnerLevel.BEGINNER: 3.0, RunnerLevel.INTERMEDIATE: 5.0, RunnerLevel.ADVANCED: 6.0},
    RaceType.HALF_MARATHON: {RunnerLevel.BEGINNER: 4.0, RunnerLevel.INTERMEDIATE: 6.0, RunnerLevel.ADVANCED: 7.0},
    RaceType.MARATHON: {RunnerLevel.BEGINNER: 6.0, RunnerLevel.INTERMEDIATE: 8.0, RunnerLevel.ADVANCED: 10.0},
}

# Minutes per mile by run type
PACE_MINUTES_PER_MILE: Dict[RaceWorkoutType, float] = {
    RaceWorkoutType.EASY_RUN: 10.0,
    RaceWorkoutType.LONG_RUN: 10.0,
    RaceWorkoutType.TEMPO_RUN: 8.0,
    RaceWorkoutType.RECOVERY: 11.0,
}

LONG_RUN_MULTIPLIER = 1.5
TEMPO_RUN_MULTIPLIER = 0.7

# Interval session: reps x work minutes, rest minutes, warm-up + cool-down
INTERVAL_REPS: Dict[RunnerLevel, int] = {
    RunnerLevel.BEGINNER: 4,
    RunnerLevel.INTERMEDIATE: 6,
    RunnerLevel.ADVANCED: 8,
}
INTERVAL_WORK_MINUTES = 3
INTERVAL_REST_MINUTES = 2
INTERVAL_WARMUP_COOLDOWN_MINUTES = 20

CROSS_TRAINING_MINUTES = 45
STRENGTH_TRAINING_MINUTES = 30
RECOVERY_MINUTES = 20
CROSS_TRAINING_ACTIVITIES = ["Cycling", "Swimming", "Elliptical", "Rowing"]

# Relative training load by phase (1.0 = peak)
PHASE_VOLUME_MODIFIERS: Dict[PeriodizationPhase, float] = {
    PeriodizationPhase.BASE_BUILDING: 0.8,
    PeriodizationPhase.INTERVAL_WORKOUTS: 0.9,
    PeriodizationPhase.SPEED_STRENGTH: 1.0,
    PeriodizationPhase.TAPER: 0.7,
}
TAPER_FINAL_MODIFIER = 0.4

# Down (cutback) weeks
DOWN_WEEK_FREQUENCY = 4
DOWN_WEEK_REDUCTION = 0.8

# Phase allocation shares of the non-taper weeks
PERIODIZATION_SHARES = {
    "speed_strength": 0.25,
    "interval_workouts": 0.35,
}
TAPER_WEEKS_SHORT = 1
TAPER_WEEKS_LONG = 2
TAPER_LONG_THRESHOLD_WEEKS = 8    # plans this long get the longer taper

LONG_RUN_WEEKDAY = Weekday.SATURDAY

# Cycle adaptation notes attached to race-plan days
CYCLE_ADAPTATIONS: Dict[CyclePhase, List[str]] = {
    CyclePhase.MENSTRUAL: [
        "Reduce intensity by 10-20%",
        "Focus on gentle movement and recovery",
        "Increase hydration and iron-rich foods",
    ],
    CyclePhase.FOLLICULAR: [
        "Great time for high-intensity workouts",
        "Focus on building strength and speed",
        "Optimal time for new training challenges",
    ],
    CyclePhase.OVULATORY: [
        "Peak performance phase",
        "Ideal for race pace workouts",
        "Focus on technique and form",
    ],
    CyclePhase.LUTEAL: [
        "Reduce intensity during second half",
        "Focus on endurance and base building",
        "Increase recovery time between sessions",
    ],
}
