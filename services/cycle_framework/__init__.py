# Cycle-Aware Plan Framework
#
# Deterministic scheduling engines that follow the menstrual cycle.
#
# Architecture:
# - Phase calculator: date -> phase + cycle day from sparse cycle data
# - Prediction confidence: regularity and uncertainty bands
# - Fitness plan generator: cycle-aware day-by-day workouts
# - Race periodizer: week-by-week race training
# - Config-driven scoring and periodization rules
# - Optional caller-owned caching

from .config import ConfigService
from .cache import PlanCacheService
from .catalog import ContentCatalog, StaticContentCatalog
from .phase_calculator import CyclePhaseCalculator
from .prediction_confidence import PredictionConfidenceModel
from .fitness_planner import FitnessPlanGenerator
from .race_periodizer import (
    RaceTrainingPeriodizer,
    RaceParameters,
    RaceTrainingPlan,
    WeeklyTrainingPlan,
    DailyTrainingPlan,
    RaceWorkout,
)
from .models import (
    CycleProfile,
    PhaseResult,
    PredictionWindow,
    FitnessPreferences,
    WorkoutTemplate,
    PlanEntry,
    CustomWorkoutEntry,
    CustomWorkoutLog,
)
from .constants import (
    CyclePhase,
    PhaseDisplayVariant,
    Regularity,
    WorkoutType,
    PeriodizationPhase,
    RaceWorkoutType,
)

__all__ = [
    # Core services
    'ConfigService',
    'PlanCacheService',
    'ContentCatalog',
    'StaticContentCatalog',

    # Engines
    'CyclePhaseCalculator',
    'PredictionConfidenceModel',
    'FitnessPlanGenerator',
    'RaceTrainingPeriodizer',

    # Models
    'CycleProfile',
    'PhaseResult',
    'PredictionWindow',
    'FitnessPreferences',
    'WorkoutTemplate',
    'PlanEntry',
    'CustomWorkoutEntry',
    'CustomWorkoutLog',
    'RaceParameters',
    'RaceTrainingPlan',
    'WeeklyTrainingPlan',
    'DailyTrainingPlan',
    'RaceWorkout',

    # Constants
    'CyclePhase',
    'PhaseDisplayVariant',
    'Regularity',
    'WorkoutType',
    'PeriodizationPhase',
    'RaceWorkoutType',
]
