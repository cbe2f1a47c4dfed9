"""
Fitness Plan Generator

Builds a day-by-day fitness plan that follows the cycle:
- Phase per date (estimated when no cycle data exists)
- Weekly frequency cap and preferred rest days
- Dislikes and injury exclusions
- A favourite each plan week, no immediate repeat when scores tie

Selection is deterministic: the same inputs always produce the same plan.

Usage:
    generator = FitnessPlanGenerator()
    entries = generator.generate(
        profile=profile,
        preferences=preferences,
        start_date=date(2024, 3, 4),
        catalog=catalog,
    )
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional, Set, Tuple

from core.exceptions import InvalidConfigurationError

from .catalog import ContentCatalog, parse_workout_type
from .constants import (
    CyclePhase,
    Difficulty,
    Intensity,
    PlanStartPolicy,
    Weekday,
    WorkoutStatus,
    WorkoutType,
    DEFAULT_HORIZON_DAYS,
    DEFAULT_PHASE,
    FAVORITE_GUARANTEE_FROM_DAY,
    FITNESS_SCORING,
    GOAL_WORKOUT_TYPES,
    INJURY_RESTRICTIONS,
    INTENSITY_TO_DIFFICULTY,
    LEVEL_INTENSITIES,
    PHASE_DEFAULT_WORKOUTS,
    PHASE_PREFERRED_INTENSITIES,
    REST_DAY_BENEFITS,
    REST_DAY_DESCRIPTION,
    REST_DAY_TITLE,
)
from .models import CycleProfile, FitnessPreferences, PlanEntry, WorkoutTemplate
from .phase_calculator import CyclePhaseCalculator

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7


class FitnessPlanGenerator:
    """
    Generate suggested workouts for a horizon of consecutive days.

    Plan weeks are 7-day blocks counted from the plan start date,
    not calendar weeks.
    """

    def __init__(
        self,
        calculator: Optional[CyclePhaseCalculator] = None,
        config=None,
        horizon_days: int = DEFAULT_HORIZON_DAYS,
    ):
        self.calculator = calculator or CyclePhaseCalculator()
        self.horizon_days = horizon_days
        self.weights = dict(FITNESS_SCORING)
        self.phase_intensities: Dict[CyclePhase, List[Intensity]] = dict(PHASE_PREFERRED_INTENSITIES)
        self.injury_restrictions: Dict[str, List[WorkoutType]] = dict(INJURY_RESTRICTIONS)
        if config is not None:
            self._apply_config(config)

    @classmethod
    def from_settings(cls, settings, config=None, calculator: Optional[CyclePhaseCalculator] = None):
        return cls(
            calculator=calculator,
            config=config,
            horizon_days=settings.DEFAULT_HORIZON_DAYS,
        )

    # ========== Start date ==========

    def resolve_start_date(
        self,
        profile: CycleProfile,
        preferences: FitnessPreferences,
        reference_date: date,
    ) -> date:
        """Apply the plan start policy relative to ``reference_date``."""
        policy = preferences.plan_start_policy

        if policy == PlanStartPolicy.TODAY:
            return reference_date
        if policy == PlanStartPolicy.TOMORROW:
            return reference_date + timedelta(days=1)
        if policy == PlanStartPolicy.NEXT_PERIOD_START:
            next_start = self.calculator.next_period_start(profile, reference_date)
            if next_start is None:
                logger.debug("No period anchor; next_period_start policy starts today")
                return reference_date
            return next_start
        if policy == PlanStartPolicy.CUSTOM:
            if preferences.custom_start_date is None:
                raise InvalidConfigurationError(
                    "custom start policy requires custom_start_date",
                    field="custom_start_date",
                )
            return preferences.custom_start_date

        raise InvalidConfigurationError(f"Unknown start policy: {policy}", field="plan_start_policy")

    def generate_for_preferences(
        self,
        profile: CycleProfile,
        preferences: FitnessPreferences,
        reference_date: date,
        catalog: ContentCatalog,
        horizon_days: Optional[int] = None,
    ) -> List[PlanEntry]:
        start = self.resolve_start_date(profile, preferences, reference_date)
        return self.generate(profile, preferences, start, catalog, horizon_days)

    # ========== Generation ==========

    def generate(
        self,
        profile: CycleProfile,
        preferences: FitnessPreferences,
        start_date: date,
        catalog: ContentCatalog,
        horizon_days: Optional[int] = None,
    ) -> List[PlanEntry]:
        """
        Generate exactly ``horizon_days`` entries on consecutive dates.

        Raises:
            InvalidConfigurationError: bad horizon, frequency or cycle lengths
        """
        horizon = self.horizon_days if horizon_days is None else horizon_days
        self._validate(profile, preferences, horizon)

        rest_days = set(preferences.preferred_rest_days)
        disliked = set(preferences.disliked_workout_types)
        restricted_types, injury_tags = self._injury_exclusions(preferences.injuries)

        workouts_per_week: Dict[int, int] = defaultdict(int)
        templates_per_week: Dict[int, Set[str]] = defaultdict(set)
        favorites_per_week: Dict[int, int] = defaultdict(int)
        last_type: Optional[WorkoutType] = None

        entries: List[PlanEntry] = []
        for offset in range(horizon):
            day = start_date + timedelta(days=offset)
            week_index = offset // DAYS_PER_WEEK

            result = self.calculator.phase_for_date(day, profile)
            phase = result.phase if result.has_data else DEFAULT_PHASE
            estimated = not result.has_data

            if (
                Weekday(day.weekday()) in rest_days
                or workouts_per_week[week_index] >= preferences.desired_weekly_frequency
            ):
                entries.append(self._rest_entry(day, phase, result.cycle_day, estimated))
                continue

            candidates = [
                t for t in catalog.candidates_for_phase(phase)
                if self._is_allowed(t.workout_type, disliked, restricted_types)
                and not self._has_contraindication(t, injury_tags)
            ]

            if (
                offset % DAYS_PER_WEEK >= FAVORITE_GUARANTEE_FROM_DAY
                and not favorites_per_week[week_index]
            ):
                candidates = self._favorites_only(candidates, preferences, day)

            entry: Optional[PlanEntry] = None
            if candidates:
                template = self._select(
                    candidates, phase, preferences, offset, last_type, templates_per_week[week_index]
                )
                entry = self._template_entry(day, template, phase, result.cycle_day, estimated)
            else:
                logger.debug(f"No catalog candidates for {phase.value} on {day}, using phase defaults")
                entry = self._default_entry(
                    day, phase, result.cycle_day, estimated, offset, last_type, disliked, restricted_types
                )

            if entry is None:
                logger.warning(
                    f"Every default workout for {phase.value} is excluded on {day}; scheduling rest"
                )
                entries.append(self._rest_entry(day, phase, result.cycle_day, estimated))
                continue

            entries.append(entry)
            workouts_per_week[week_index] += 1
            if entry.template_key:
                templates_per_week[week_index].add(entry.template_key)
            if entry.workout_type in preferences.favorite_workout_types:
                favorites_per_week[week_index] += 1
            last_type = entry.workout_type

        workout_count = sum(1 for e in entries if not e.is_rest_day)
        logger.info(
            f"Generated fitness plan: {start_date} +{horizon}d, "
            f"{workout_count} workouts, {horizon - workout_count} rest days"
        )
        return entries

    # ========== Selection ==========

    def score_template(
        self,
        template: WorkoutTemplate,
        phase: CyclePhase,
        preferences: FitnessPreferences,
        used_this_week: Set[str],
    ) -> int:
        """Deterministic preference score for one candidate."""
        w = self.weights
        score = 0
        if template.workout_type in preferences.favorite_workout_types:
            score += w["favorite_bonus"]
        if template.workout_type in self._goal_types(preferences.goal):
            score += w["goal_bonus"]
        if template.intensity in LEVEL_INTENSITIES.get(preferences.experience_level, []):
            score += w["level_bonus"]
        if template.intensity in self.phase_intensities.get(phase, []):
            score += w["phase_intensity_bonus"]
        if template.key in used_this_week:
            score -= w["repeat_template_penalty"]
        return score

    def _select(
        self,
        candidates: List[WorkoutTemplate],
        phase: CyclePhase,
        preferences: FitnessPreferences,
        offset: int,
        last_type: Optional[WorkoutType],
        used_this_week: Set[str],
    ) -> WorkoutTemplate:
        # Score first; repeating the previous workout day's type only loses ties
        scored = [
            ((self.score_template(t, phase, preferences, used_this_week), t.workout_type != last_type), t)
            for t in candidates
        ]
        best = max(key for key, _ in scored)
        ties = [t for key, t in scored if key == best]
        return ties[offset % len(ties)]

    @staticmethod
    def _favorites_only(
        candidates: List[WorkoutTemplate],
        preferences: FitnessPreferences,
        day: date,
    ) -> List[WorkoutTemplate]:
        """Narrow to favourite types when any are available."""
        favorites = [t for t in candidates if t.workout_type in preferences.favorite_workout_types]
        if favorites:
            logger.debug(f"No favourite yet this plan week on {day}; choosing from {len(favorites)} favourites")
            return favorites
        return candidates

    def _goal_types(self, goal: str) -> Set[WorkoutType]:
        goal = (goal or "").lower()
        types: Set[WorkoutType] = set()
        for keyword, goal_types in GOAL_WORKOUT_TYPES.items():
            if keyword in goal:
                types.update(goal_types)
        return types

    # ========== Exclusions ==========

    def _injury_exclusions(self, injuries: Tuple[str, ...]) -> Tuple[Set[WorkoutType], Set[str]]:
        """Workout types ruled out by injuries, plus the normalised injury tags."""
        tags = {i.strip().lower() for i in injuries if i and i.strip()}
        restricted: Set[WorkoutType] = set()
        for tag in tags:
            for area, types in self.injury_restrictions.items():
                if area in tag:
                    restricted.update(types)
        return restricted, tags

    @staticmethod
    def _has_contraindication(template: WorkoutTemplate, injury_tags: Set[str]) -> bool:
        return any(
            area in tag
            for area in template.contraindications
            for tag in injury_tags
        )

    @staticmethod
    def _is_allowed(
        workout_type: WorkoutType,
        disliked: Set[WorkoutType],
        restricted: Set[WorkoutType],
    ) -> bool:
        return workout_type not in disliked and workout_type not in restricted

    # ========== Entries ==========

    def _template_entry(
        self,
        day: date,
        template: WorkoutTemplate,
        phase: CyclePhase,
        cycle_day: Optional[int],
        estimated: bool,
    ) -> PlanEntry:
        return PlanEntry(
            date=day,
            workout_title=template.title,
            description=template.description,
            duration_minutes=template.duration_minutes,
            workout_type=template.workout_type,
            cycle_phase=phase,
            difficulty=INTENSITY_TO_DIFFICULTY[template.intensity],
            equipment=template.equipment,
            benefits=template.benefits,
            media_ref=template.media_ref,
            status=WorkoutStatus.SUGGESTED,
            cycle_day=cycle_day,
            phase_is_estimated=estimated,
            template_key=template.key,
        )

    def _default_entry(
        self,
        day: date,
        phase: CyclePhase,
        cycle_day: Optional[int],
        estimated: bool,
        offset: int,
        last_type: Optional[WorkoutType],
        disliked: Set[WorkoutType],
        restricted: Set[WorkoutType],
    ) -> Optional[PlanEntry]:
        options = [
            d for d in PHASE_DEFAULT_WORKOUTS[phase]
            if self._is_allowed(d[1], disliked, restricted)
        ]
        if not options:
            return None

        fresh = [d for d in options if d[1] != last_type]
        pool = fresh or options
        title, workout_type, minutes, description = pool[offset % len(pool)]
        return PlanEntry(
            date=day,
            workout_title=title,
            description=description,
            duration_minutes=minutes,
            workout_type=workout_type,
            cycle_phase=phase,
            difficulty=Difficulty.BEGINNER,
            status=WorkoutStatus.SUGGESTED,
            cycle_day=cycle_day,
            phase_is_estimated=estimated,
        )

    @staticmethod
    def _rest_entry(
        day: date,
        phase: CyclePhase,
        cycle_day: Optional[int],
        estimated: bool,
    ) -> PlanEntry:
        return PlanEntry(
            date=day,
            workout_title=REST_DAY_TITLE,
            description=REST_DAY_DESCRIPTION,
            duration_minutes=0,
            workout_type=WorkoutType.REST,
            cycle_phase=phase,
            difficulty=Difficulty.BEGINNER,
            benefits=tuple(REST_DAY_BENEFITS),
            status=WorkoutStatus.SUGGESTED,
            cycle_day=cycle_day,
            is_rest_day=True,
            phase_is_estimated=estimated,
        )

    # ========== Internal Methods ==========

    def _validate(self, profile: CycleProfile, preferences: FitnessPreferences, horizon: int):
        if horizon < 1:
            raise InvalidConfigurationError(
                f"horizon_days must be at least 1 (got {horizon})",
                field="horizon_days",
            )
        if not 0 <= preferences.desired_weekly_frequency <= DAYS_PER_WEEK:
            raise InvalidConfigurationError(
                f"desired_weekly_frequency must be 0-7 (got {preferences.desired_weekly_frequency})",
                field="desired_weekly_frequency",
            )
        self.calculator.validate(profile)

    def _apply_config(self, config):
        self.weights.update(config.get_scoring_weights())

        for phase_name, intensities in config.get_phase_intensities().items():
            phase = CyclePhase.from_label(phase_name)
            if phase is not None:
                self.phase_intensities[phase] = [Intensity(i) for i in intensities]

        for area, type_names in config.get_injury_restrictions().items():
            types = [parse_workout_type(t) for t in type_names]
            self.injury_restrictions[area.lower()] = [t for t in types if t is not None]
