"""
Cycle Phase Calculator

Maps a calendar date to a cycle phase and cycle day using:
- Last period start (anchor)
- Average cycle length
- Period length

Usage:
    calculator = CyclePhaseCalculator()
    result = calculator.phase_for_date(date(2024, 3, 13), profile)
    if result.has_data:
        print(result.phase, result.cycle_day)
"""

import logging
from datetime import date, timedelta
from functools import lru_cache
from typing import Dict, List, Optional, Tuple

from core.exceptions import InvalidConfigurationError

from .constants import (
    CyclePhase,
    LUTEAL_OFFSET_DAYS,
    MIN_NON_MENSTRUAL_DAYS,
    OVULATION_WINDOW_DAYS,
    PREDICTED_CYCLES,
)
from .models import CycleProfile, PhaseResult

logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def _compute_ranges(cycle_length: int, period_length: int) -> Tuple[Tuple[CyclePhase, int, int], ...]:
    width = min(OVULATION_WINDOW_DAYS, cycle_length - period_length - 2)
    centre = cycle_length - LUTEAL_OFFSET_DAYS

    # Keep one follicular day before and one luteal day after the window
    start = centre - (width - 1) // 2
    start = max(start, period_length + 2)
    start = min(start, cycle_length - width)
    end = start + width - 1

    return (
        (CyclePhase.MENSTRUAL, 1, period_length),
        (CyclePhase.FOLLICULAR, period_length + 1, start - 1),
        (CyclePhase.OVULATORY, start, end),
        (CyclePhase.LUTEAL, end + 1, cycle_length),
    )


class CyclePhaseCalculator:
    """
    Deterministic phase lookup.

    Dates before the anchor, or profiles without an anchor, yield an
    explicit no-data result. A phase is never guessed.
    """

    def validate(self, profile: CycleProfile) -> None:
        """Raise ``InvalidConfigurationError`` for lengths the arithmetic cannot use."""
        self._validate_lengths(profile.cycle_length_days, profile.period_length_days)

    def phase_ranges(
        self,
        cycle_length: int,
        period_length: int,
    ) -> Dict[CyclePhase, Tuple[int, int]]:
        """
        Inclusive (first_day, last_day) per phase.

        The four ranges partition [1, cycle_length] in canonical order.
        """
        self._validate_lengths(cycle_length, period_length)
        return {
            phase: (first, last)
            for phase, first, last in _compute_ranges(cycle_length, period_length)
        }

    def cycle_day(self, target: date, profile: CycleProfile) -> Optional[int]:
        """1-based day within the cycle, or None before the anchor."""
        if not profile.has_anchor or target < profile.anchor_date:
            return None
        days_since = (target - profile.anchor_date).days
        length = profile.cycle_length_days
        return ((days_since % length) + length) % length + 1

    def phase_for_date(self, target: date, profile: CycleProfile) -> PhaseResult:
        self.validate(profile)

        day = self.cycle_day(target, profile)
        if day is None:
            return PhaseResult.no_data()

        for phase, first, last in _compute_ranges(
            profile.cycle_length_days, profile.period_length_days
        ):
            if first <= day <= last:
                return PhaseResult(phase=phase, cycle_day=day, has_data=True)

        # Unreachable while the ranges partition the cycle
        raise InvalidConfigurationError(
            f"Cycle day {day} not covered by phase ranges",
            field="cycle_length_days",
        )

    def phase_timeline(
        self,
        start: date,
        days: int,
        profile: CycleProfile,
    ) -> List[Tuple[date, PhaseResult]]:
        """Phase results for ``days`` consecutive dates from ``start``."""
        return [
            (start + timedelta(days=i), self.phase_for_date(start + timedelta(days=i), profile))
            for i in range(days)
        ]

    def next_period_start(self, profile: CycleProfile, on_or_after: date) -> Optional[date]:
        """Earliest predicted period start on or after the given date."""
        if not profile.has_anchor:
            return None
        self.validate(profile)
        if on_or_after <= profile.anchor_date:
            return profile.anchor_date

        length = profile.cycle_length_days
        elapsed = (on_or_after - profile.anchor_date).days
        cycles = -(-elapsed // length)  # ceil
        return profile.anchor_date + timedelta(days=cycles * length)

    def predicted_period_starts(
        self,
        profile: CycleProfile,
        count: int = PREDICTED_CYCLES,
        after: Optional[date] = None,
    ) -> List[date]:
        """
        The next ``count`` predicted period starts strictly after ``after``.

        ``after`` defaults to the anchor itself, so the first prediction is
        one full cycle after the last logged period.
        """
        if not profile.has_anchor or count <= 0:
            return []
        first = self.next_period_start(profile, (after or profile.anchor_date) + timedelta(days=1))
        length = profile.cycle_length_days
        return [first + timedelta(days=k * length) for k in range(count)]

    # ========== Internal Methods ==========

    @staticmethod
    def _validate_lengths(cycle_length: int, period_length: int) -> None:
        if period_length < 1:
            raise InvalidConfigurationError(
                f"period_length_days must be at least 1 (got {period_length})",
                field="period_length_days",
            )
        if cycle_length < period_length + MIN_NON_MENSTRUAL_DAYS:
            raise InvalidConfigurationError(
                f"cycle_length_days ({cycle_length}) must be at least "
                f"period_length_days + {MIN_NON_MENSTRUAL_DAYS} ({period_length + MIN_NON_MENSTRUAL_DAYS})",
                field="cycle_length_days",
            )
