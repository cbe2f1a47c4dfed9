"""
Prediction Confidence Model

Classifies cycle regularity from logged period starts and attaches an
uncertainty band to phase predictions.

Regular cycles get a narrow band around the point estimate; irregular
cycles get the wide "widening window" around each predicted period start.
The point estimate itself always comes from CyclePhaseCalculator.

Usage:
    model = PredictionConfidenceModel.from_settings(settings)
    regularity = model.classify(profile, history)
    window = model.prediction_window(day, profile, regularity)
"""

import logging
from datetime import date, timedelta
from typing import List, Optional, Sequence, Set

from .constants import (
    Regularity,
    PREDICTED_CYCLES,
    REGULAR_WINDOW_RADIUS_DAYS,
    REGULARITY_LOOKBACK_CYCLES,
    REGULARITY_TOLERANCE_DAYS,
    WIDENING_WINDOW_RADIUS_DAYS,
)
from .models import CycleProfile, PredictionWindow
from .phase_calculator import CyclePhaseCalculator

logger = logging.getLogger(__name__)


class PredictionConfidenceModel:
    """Regularity classification and prediction bands."""

    def __init__(
        self,
        calculator: Optional[CyclePhaseCalculator] = None,
        tolerance_days: int = REGULARITY_TOLERANCE_DAYS,
        lookback_cycles: int = REGULARITY_LOOKBACK_CYCLES,
        regular_radius_days: int = REGULAR_WINDOW_RADIUS_DAYS,
        irregular_radius_days: int = WIDENING_WINDOW_RADIUS_DAYS,
    ):
        self.calculator = calculator or CyclePhaseCalculator()
        self.tolerance_days = tolerance_days
        self.lookback_cycles = lookback_cycles
        self.regular_radius_days = regular_radius_days
        self.irregular_radius_days = irregular_radius_days

    @classmethod
    def from_settings(cls, settings, calculator: Optional[CyclePhaseCalculator] = None):
        return cls(
            calculator=calculator,
            tolerance_days=settings.REGULARITY_TOLERANCE_DAYS,
            lookback_cycles=settings.REGULARITY_LOOKBACK_CYCLES,
            irregular_radius_days=settings.WIDENING_WINDOW_RADIUS_DAYS,
        )

    @staticmethod
    def cycle_lengths(history: Sequence[date]) -> List[int]:
        """Lengths between consecutive logged period starts, oldest first."""
        starts = sorted(set(history))
        return [(b - a).days for a, b in zip(starts, starts[1:])]

    def classify(self, profile: CycleProfile, cycle_history: Sequence[date]) -> Regularity:
        """
        Regular when the spread of recent cycle lengths is within tolerance.

        Fewer than two recorded lengths, or a self-reported irregular
        profile, is always irregular.
        """
        if profile.is_irregular:
            return Regularity.IRREGULAR

        lengths = self.cycle_lengths(cycle_history)[-self.lookback_cycles:]
        if len(lengths) < 2:
            logger.debug(f"Only {len(lengths)} cycle length(s) on record, treating as irregular")
            return Regularity.IRREGULAR

        spread = max(lengths) - min(lengths)
        if spread <= self.tolerance_days:
            return Regularity.REGULAR
        return Regularity.IRREGULAR

    def radius_for(self, regularity: Regularity) -> int:
        if regularity == Regularity.REGULAR:
            return self.regular_radius_days
        return self.irregular_radius_days

    def prediction_window(
        self,
        target: date,
        profile: CycleProfile,
        regularity: Regularity,
    ) -> Optional[PredictionWindow]:
        """Phase estimate for ``target`` with its band, or None without data."""
        result = self.calculator.phase_for_date(target, profile)
        if not result.has_data:
            return None

        radius = self.radius_for(regularity)
        return PredictionWindow(
            date=target,
            phase=result.phase,
            cycle_day=result.cycle_day,
            regularity=regularity,
            width_days=2 * radius + 1,
            window_start=target - timedelta(days=radius),
            window_end=target + timedelta(days=radius),
            is_widened=regularity == Regularity.IRREGULAR,
        )

    def widening_window_days(
        self,
        profile: CycleProfile,
        regularity: Regularity,
        num_cycles: int = PREDICTED_CYCLES,
    ) -> Set[date]:
        """
        Dates on which a period could plausibly start.

        Empty for regular profiles and for profiles without an anchor.
        """
        if regularity == Regularity.REGULAR or not profile.has_anchor:
            return set()

        radius = self.irregular_radius_days
        days: Set[date] = set()
        for start in self.calculator.predicted_period_starts(profile, count=num_cycles):
            for offset in range(-radius, radius + 1):
                days.add(start + timedelta(days=offset))
        return days
