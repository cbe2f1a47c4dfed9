"""
Domain Models

Immutable value types shared by the phase calculator, the fitness
planner and the catalog. Race-plan types live with the periodizer.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from .constants import (
    CyclePhase,
    Difficulty,
    ExperienceLevel,
    Intensity,
    PlanStartPolicy,
    Regularity,
    Weekday,
    WorkoutStatus,
    WorkoutType,
    DEFAULT_CYCLE_LENGTH_DAYS,
    DEFAULT_PERIOD_LENGTH_DAYS,
    DEFAULT_WEEKLY_FREQUENCY,
)


@dataclass(frozen=True)
class CycleProfile:
    """Observed cycle data for one person."""
    anchor_date: Optional[date] = None  # last period start
    cycle_length_days: int = DEFAULT_CYCLE_LENGTH_DAYS
    period_length_days: int = DEFAULT_PERIOD_LENGTH_DAYS
    is_irregular: bool = False
    profile_id: Optional[str] = None

    @property
    def has_anchor(self) -> bool:
        return self.anchor_date is not None


@dataclass(frozen=True)
class PhaseResult:
    """Phase lookup for one date. ``has_data`` is False when no phase can be known."""
    phase: Optional[CyclePhase]
    cycle_day: Optional[int]
    has_data: bool

    @classmethod
    def no_data(cls) -> "PhaseResult":
        return cls(phase=None, cycle_day=None, has_data=False)


@dataclass(frozen=True)
class PredictionWindow:
    """Point estimate plus an uncertainty band."""
    date: date
    phase: CyclePhase
    cycle_day: int
    regularity: Regularity
    width_days: int
    window_start: date
    window_end: date
    is_widened: bool


@dataclass(frozen=True)
class FitnessPreferences:
    goal: str = ""
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    desired_weekly_frequency: int = DEFAULT_WEEKLY_FREQUENCY
    favorite_workout_types: Tuple[WorkoutType, ...] = ()
    disliked_workout_types: Tuple[WorkoutType, ...] = ()
    preferred_rest_days: Tuple[Weekday, ...] = ()
    injuries: Tuple[str, ...] = ()
    plan_start_policy: PlanStartPolicy = PlanStartPolicy.TODAY
    custom_start_date: Optional[date] = None


@dataclass(frozen=True)
class WorkoutTemplate:
    """A catalog item. ``phases`` holds canonical phase values or "all"."""
    key: str
    title: str
    description: str
    duration_minutes: int
    workout_type: WorkoutType
    phases: Tuple[str, ...]
    intensity: Intensity = Intensity.MID
    equipment: Tuple[str, ...] = ()
    benefits: Tuple[str, ...] = ()
    media_ref: Optional[str] = None
    instructor: Optional[str] = None
    contraindications: Tuple[str, ...] = ()

    def applies_to(self, phase: CyclePhase) -> bool:
        return phase.value in self.phases

    @property
    def is_all_phases(self) -> bool:
        return "all" in self.phases


@dataclass(frozen=True)
class PlanEntry:
    """One day of a fitness plan."""
    date: date
    workout_title: str
    description: str
    duration_minutes: int
    workout_type: WorkoutType
    cycle_phase: CyclePhase
    difficulty: Difficulty
    equipment: Tuple[str, ...] = ()
    benefits: Tuple[str, ...] = ()
    media_ref: Optional[str] = None
    status: WorkoutStatus = WorkoutStatus.SUGGESTED
    cycle_day: Optional[int] = None
    is_rest_day: bool = False
    phase_is_estimated: bool = False
    template_key: Optional[str] = None

    def confirmed(self) -> "PlanEntry":
        return replace(self, status=WorkoutStatus.CONFIRMED)

    def with_changes(self, **changes: Any) -> "PlanEntry":
        """Copy with user edits applied; the original entry is untouched."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "workout_title": self.workout_title,
            "description": self.description,
            "duration_minutes": self.duration_minutes,
            "workout_type": self.workout_type.value,
            "cycle_phase": self.cycle_phase.value,
            "difficulty": self.difficulty.value,
            "equipment": list(self.equipment),
            "benefits": list(self.benefits),
            "media_ref": self.media_ref,
            "status": self.status.value,
            "cycle_day": self.cycle_day,
            "is_rest_day": self.is_rest_day,
            "phase_is_estimated": self.phase_is_estimated,
            "template_key": self.template_key,
        }


@dataclass(frozen=True)
class CustomWorkoutEntry:
    """A workout the user logged themselves."""
    date: date
    title: str
    workout_type: WorkoutType
    duration_minutes: int
    notes: str = ""
    cycle_phase: Optional[CyclePhase] = None


@dataclass
class CustomWorkoutLog:
    """
    Append-only log of user-entered workouts.

    Plan generation never reads from or writes to this log.
    """
    _entries: List[CustomWorkoutEntry] = field(default_factory=list)

    def append(self, entry: CustomWorkoutEntry) -> None:
        self._entries.append(entry)

    @property
    def entries(self) -> Tuple[CustomWorkoutEntry, ...]:
        return tuple(self._entries)

    def for_date(self, day: date) -> List[CustomWorkoutEntry]:
        return [e for e in self._entries if e.date == day]

    def __len__(self) -> int:
        return len(self._entries)
