"""
Input Schemas

Pydantic models that turn raw onboarding answers ("4 days",
"Beginner (just starting out)", "Monday, Friday") into the frozen
domain types the engines consume.

Usage:
    profile = parse_answers(CycleProfileIn, payload["cycle"]).to_domain()
"""

import re
import logging
from datetime import date
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.exceptions import InvalidConfigurationError

from .catalog import parse_workout_type
from .constants import (
    ExperienceLevel,
    PlanStartPolicy,
    RaceType,
    RunnerLevel,
    Weekday,
    WorkoutType,
    DEFAULT_CYCLE_LENGTH_DAYS,
    DEFAULT_PERIOD_LENGTH_DAYS,
    DEFAULT_WEEKLY_FREQUENCY,
    MIN_NON_MENSTRUAL_DAYS,
    RACE_TYPE_ALIASES,
)
from .models import CycleProfile, FitnessPreferences
from .race_periodizer import RaceParameters

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Answers that mean "nothing selected"
_EMPTY_ANSWERS = {"", "none", "no", "n/a", "no preference", "not sure"}

_START_POLICY_ALIASES = {
    "today": PlanStartPolicy.TODAY,
    "tomorrow": PlanStartPolicy.TOMORROW,
    "next period": PlanStartPolicy.NEXT_PERIOD_START,
    "next period start": PlanStartPolicy.NEXT_PERIOD_START,
    "next_period_start": PlanStartPolicy.NEXT_PERIOD_START,
    "custom": PlanStartPolicy.CUSTOM,
    "custom date": PlanStartPolicy.CUSTOM,
}


# =============================================================================
# PARSING HELPERS
# =============================================================================

def _leading_int(value: Any) -> Optional[int]:
    """'4 days' -> 4, 28 -> 28, None -> None."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = re.search(r"-?\d+", str(value))
    if not match:
        raise ValueError(f"expected a number, got {value!r}")
    return int(match.group())


def _split_answers(value: Any) -> List[str]:
    """Comma-separated string or list -> list without 'none' answers. Non-strings pass through."""
    if value is None:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    cleaned = [i.strip() if isinstance(i, str) else i for i in items]
    return [i for i in cleaned if not (isinstance(i, str) and i.lower() in _EMPTY_ANSWERS)]


def _first_word(value: Any) -> str:
    """'Beginner (just starting out)' -> 'beginner'."""
    text = str(value).strip().lower()
    return re.split(r"[\s(]", text, maxsplit=1)[0]


def parse_answers(schema: Type[SchemaT], data: Any) -> SchemaT:
    """
    Validate raw answers against a schema.

    Raises:
        InvalidConfigurationError: named after the first offending field
    """
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = first.get("loc") or ()
        field = str(loc[0]) if loc else None
        raise InvalidConfigurationError(first.get("msg", str(e)), field=field) from e


# =============================================================================
# SCHEMAS
# =============================================================================

class CycleProfileIn(BaseModel):
    """Cycle onboarding answers."""
    model_config = ConfigDict(extra="ignore")

    last_period_start: Optional[date] = None
    cycle_length_days: int = Field(default=DEFAULT_CYCLE_LENGTH_DAYS)
    period_length_days: int = Field(default=DEFAULT_PERIOD_LENGTH_DAYS, ge=1)
    is_irregular: bool = False
    profile_id: Optional[str] = None

    @field_validator("cycle_length_days", "period_length_days", mode="before")
    @classmethod
    def parse_days(cls, v):
        parsed = _leading_int(v)
        return parsed if parsed is not None else v

    @field_validator("is_irregular", mode="before")
    @classmethod
    def parse_regularity(cls, v):
        if isinstance(v, str):
            answer = v.strip().lower()
            if answer in ("irregular", "not sure", "yes", "true"):
                return True
            if answer in ("regular", "no", "false"):
                return False
        return v

    @model_validator(mode="after")
    def check_lengths(self):
        if self.cycle_length_days < self.period_length_days + MIN_NON_MENSTRUAL_DAYS:
            raise ValueError(
                f"cycle_length_days must be at least period_length_days + {MIN_NON_MENSTRUAL_DAYS}"
            )
        return self

    def to_domain(self) -> CycleProfile:
        return CycleProfile(
            anchor_date=self.last_period_start,
            cycle_length_days=self.cycle_length_days,
            period_length_days=self.period_length_days,
            is_irregular=self.is_irregular,
            profile_id=self.profile_id,
        )


class FitnessPreferencesIn(BaseModel):
    """Fitness onboarding answers."""
    model_config = ConfigDict(extra="ignore")

    goal: str = ""
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    desired_weekly_frequency: int = Field(default=DEFAULT_WEEKLY_FREQUENCY, ge=0, le=7)
    favorite_workout_types: List[WorkoutType] = Field(default_factory=list)
    disliked_workout_types: List[WorkoutType] = Field(default_factory=list)
    preferred_rest_days: List[Weekday] = Field(default_factory=list)
    injuries: List[str] = Field(default_factory=list)
    plan_start_policy: PlanStartPolicy = PlanStartPolicy.TODAY
    custom_start_date: Optional[date] = None

    @field_validator("experience_level", mode="before")
    @classmethod
    def parse_level(cls, v):
        return _first_word(v) if isinstance(v, str) else v

    @field_validator("desired_weekly_frequency", mode="before")
    @classmethod
    def parse_frequency(cls, v):
        parsed = _leading_int(v)
        return parsed if parsed is not None else v

    @field_validator("favorite_workout_types", "disliked_workout_types", mode="before")
    @classmethod
    def parse_workout_types(cls, v):
        types = []
        for answer in _split_answers(v):
            workout_type = parse_workout_type(answer)
            if workout_type is None:
                raise ValueError(f"unknown workout type {answer!r}")
            types.append(workout_type)
        return types

    @field_validator("preferred_rest_days", mode="before")
    @classmethod
    def parse_rest_days(cls, v):
        days = []
        for answer in _split_answers(v):
            if isinstance(answer, str) and not answer.isdigit():
                weekday = Weekday.from_name(answer)
                if weekday is None:
                    raise ValueError(f"unknown weekday {answer!r}")
                days.append(weekday)
            else:
                days.append(int(answer))
        return days

    @field_validator("injuries", mode="before")
    @classmethod
    def parse_injuries(cls, v):
        return [str(i).lower() for i in _split_answers(v)]

    @field_validator("plan_start_policy", mode="before")
    @classmethod
    def parse_start_policy(cls, v):
        if isinstance(v, str):
            return _START_POLICY_ALIASES.get(v.strip().lower(), v)
        return v

    @model_validator(mode="after")
    def check_custom_start(self):
        if self.plan_start_policy == PlanStartPolicy.CUSTOM and self.custom_start_date is None:
            raise ValueError("custom_start_date is required for a custom start")
        return self

    def to_domain(self) -> FitnessPreferences:
        return FitnessPreferences(
            goal=self.goal,
            experience_level=self.experience_level,
            desired_weekly_frequency=self.desired_weekly_frequency,
            favorite_workout_types=tuple(dict.fromkeys(self.favorite_workout_types)),
            disliked_workout_types=tuple(dict.fromkeys(self.disliked_workout_types)),
            preferred_rest_days=tuple(dict.fromkeys(self.preferred_rest_days)),
            injuries=tuple(self.injuries),
            plan_start_policy=self.plan_start_policy,
            custom_start_date=self.custom_start_date,
        )


class RaceParametersIn(BaseModel):
    """
    Race training answers.

    Every field is optional: an incomplete form yields parameters the
    periodizer treats as "not configured".
    """
    model_config = ConfigDict(extra="ignore")

    race_type: Optional[RaceType] = None
    race_date: Optional[date] = None
    training_start_date: Optional[date] = None
    runner_level: Optional[RunnerLevel] = None
    run_days_per_week: Optional[int] = Field(default=None, ge=0, le=7)
    cross_train_days_per_week: Optional[int] = Field(default=None, ge=0, le=7)
    rest_days_per_week: Optional[int] = Field(default=None, ge=0, le=7)
    race_goal: Optional[str] = None

    @field_validator("race_type", mode="before")
    @classmethod
    def parse_race_type(cls, v):
        if isinstance(v, str):
            return RACE_TYPE_ALIASES.get(v.strip().lower(), v)
        return v

    @field_validator("runner_level", mode="before")
    @classmethod
    def parse_runner_level(cls, v):
        return _first_word(v) if isinstance(v, str) else v

    @field_validator("run_days_per_week", "cross_train_days_per_week", "rest_days_per_week", mode="before")
    @classmethod
    def parse_day_budget(cls, v):
        return _leading_int(v)

    def to_domain(self) -> RaceParameters:
        return RaceParameters(
            race_type=self.race_type,
            race_date=self.race_date,
            training_start_date=self.training_start_date,
            runner_level=self.runner_level,
            run_days_per_week=self.run_days_per_week,
            cross_train_days_per_week=self.cross_train_days_per_week,
            rest_days_per_week=self.rest_days_per_week,
            race_goal=self.race_goal,
        )
