"""
Tests for cycle phase calculation.

Covers phase ranges, cycle-day arithmetic, the explicit no-data result
and period-start predictions.
"""

import pytest
from datetime import date, timedelta

from core.exceptions import InvalidConfigurationError
from services.cycle_framework import (
    CyclePhase,
    CyclePhaseCalculator,
    CycleProfile,
    PhaseDisplayVariant,
)


class TestPhaseRanges:
    """Phase ranges for a given cycle and period length."""

    def test_standard_cycle(self, calculator):
        ranges = calculator.phase_ranges(28, 5)
        assert ranges[CyclePhase.MENSTRUAL] == (1, 5)
        assert ranges[CyclePhase.FOLLICULAR] == (6, 12)
        assert ranges[CyclePhase.OVULATORY] == (13, 15)
        assert ranges[CyclePhase.LUTEAL] == (16, 28)

    def test_long_cycle_moves_ovulation_later(self, calculator):
        ranges = calculator.phase_ranges(35, 7)
        assert ranges[CyclePhase.OVULATORY] == (20, 22)
        assert ranges[CyclePhase.FOLLICULAR] == (8, 19)
        assert ranges[CyclePhase.LUTEAL] == (23, 35)

    def test_short_cycle_clamps_after_follicular_day(self, calculator):
        """Ovulation centred on day 7 would touch the period; it is pushed to leave one follicular day."""
        ranges = calculator.phase_ranges(21, 5)
        assert ranges[CyclePhase.FOLLICULAR] == (6, 6)
        assert ranges[CyclePhase.OVULATORY] == (7, 9)
        assert ranges[CyclePhase.LUTEAL] == (10, 21)

    def test_minimum_cycle_shrinks_ovulation_window(self, calculator):
        """With cycle = period + 4 only two days fit between follicular and luteal."""
        ranges = calculator.phase_ranges(9, 5)
        assert ranges[CyclePhase.MENSTRUAL] == (1, 5)
        assert ranges[CyclePhase.FOLLICULAR] == (6, 6)
        assert ranges[CyclePhase.OVULATORY] == (7, 8)
        assert ranges[CyclePhase.LUTEAL] == (9, 9)

    def test_ranges_partition_every_valid_cycle(self, calculator):
        """Every day 1..L belongs to exactly one phase, in canonical order."""
        for cycle_length in range(5, 61):
            for period_length in range(1, cycle_length - 3):
                ranges = calculator.phase_ranges(cycle_length, period_length)
                ordered = [
                    ranges[CyclePhase.MENSTRUAL],
                    ranges[CyclePhase.FOLLICULAR],
                    ranges[CyclePhase.OVULATORY],
                    ranges[CyclePhase.LUTEAL],
                ]
                expected_start = 1
                for first, last in ordered:
                    assert first == expected_start, (cycle_length, period_length, ordered)
                    assert last >= first, (cycle_length, period_length, ordered)
                    expected_start = last + 1
                assert expected_start == cycle_length + 1

    def test_ovulation_window_never_wider_than_three_days(self, calculator):
        for cycle_length in range(9, 50):
            first, last = calculator.phase_ranges(cycle_length, 5)[CyclePhase.OVULATORY]
            assert 2 <= last - first + 1 <= 3

    def test_cycle_too_short_rejected(self, calculator):
        with pytest.raises(InvalidConfigurationError) as exc:
            calculator.phase_ranges(8, 5)
        assert exc.value.error_code == "VALIDATION_ERROR_CYCLE_LENGTH_DAYS"

    def test_zero_period_rejected(self, calculator):
        with pytest.raises(InvalidConfigurationError) as exc:
            calculator.phase_ranges(28, 0)
        assert exc.value.field == "period_length_days"


class TestPhaseForDate:
    """Date -> phase lookups."""

    def test_anchor_is_menstrual_day_one(self, calculator, profile, anchor_date):
        result = calculator.phase_for_date(anchor_date, profile)
        assert result.has_data
        assert result.phase == CyclePhase.MENSTRUAL
        assert result.cycle_day == 1

    @pytest.mark.parametrize("offset,phase,cycle_day", [
        (4, CyclePhase.MENSTRUAL, 5),
        (5, CyclePhase.FOLLICULAR, 6),
        (12, CyclePhase.OVULATORY, 13),
        (19, CyclePhase.LUTEAL, 20),
        (27, CyclePhase.LUTEAL, 28),
        (28, CyclePhase.MENSTRUAL, 1),
    ])
    def test_known_days(self, calculator, profile, anchor_date, offset, phase, cycle_day):
        result = calculator.phase_for_date(anchor_date + timedelta(days=offset), profile)
        assert result.phase == phase
        assert result.cycle_day == cycle_day

    def test_phases_repeat_every_cycle(self, calculator, profile, anchor_date):
        for offset in range(28):
            day = anchor_date + timedelta(days=offset)
            first = calculator.phase_for_date(day, profile)
            for k in (1, 2, 5):
                later = calculator.phase_for_date(day + timedelta(days=28 * k), profile)
                assert later == first

    def test_no_anchor_returns_no_data(self, calculator, empty_profile):
        result = calculator.phase_for_date(date(2024, 3, 10), empty_profile)
        assert result.has_data is False
        assert result.phase is None
        assert result.cycle_day is None

    def test_date_before_anchor_returns_no_data(self, calculator, profile, anchor_date):
        result = calculator.phase_for_date(anchor_date - timedelta(days=1), profile)
        assert not result.has_data
        assert result.phase is None

    def test_invalid_profile_raises(self, calculator, anchor_date):
        profile = CycleProfile(anchor_date=anchor_date, cycle_length_days=7, period_length_days=5)
        with pytest.raises(InvalidConfigurationError):
            calculator.phase_for_date(anchor_date, profile)

    def test_timeline_is_consecutive(self, calculator, profile, anchor_date):
        timeline = calculator.phase_timeline(anchor_date, 30, profile)
        assert len(timeline) == 30
        assert [d for d, _ in timeline] == [anchor_date + timedelta(days=i) for i in range(30)]
        assert timeline[29][1].cycle_day == 2


class TestPeriodPredictions:
    """Predicted period start dates."""

    def test_next_period_start_on_anchor(self, calculator, profile, anchor_date):
        assert calculator.next_period_start(profile, anchor_date) == anchor_date

    def test_next_period_start_mid_cycle(self, calculator, profile):
        assert calculator.next_period_start(profile, date(2024, 3, 2)) == date(2024, 3, 29)

    def test_next_period_start_on_predicted_day(self, calculator, profile):
        assert calculator.next_period_start(profile, date(2024, 3, 29)) == date(2024, 3, 29)

    def test_next_period_start_without_anchor(self, calculator, empty_profile):
        assert calculator.next_period_start(empty_profile, date(2024, 3, 2)) is None

    def test_predicted_period_starts(self, calculator, profile):
        assert calculator.predicted_period_starts(profile) == [
            date(2024, 3, 29),
            date(2024, 4, 26),
            date(2024, 5, 24),
        ]

    def test_predicted_period_starts_after_date(self, calculator, profile):
        starts = calculator.predicted_period_starts(profile, count=2, after=date(2024, 3, 29))
        assert starts == [date(2024, 4, 26), date(2024, 5, 24)]


class TestPhaseLabels:
    """Display variants map onto the four canonical phases."""

    def test_moon_display_name(self):
        assert CyclePhase.LUTEAL.display_name(PhaseDisplayVariant.MOON) == "Luteal Moon"
        assert CyclePhase.FOLLICULAR.display_name() == "Follicular"

    @pytest.mark.parametrize("label,phase", [
        ("Menstrual Moon", CyclePhase.MENSTRUAL),
        ("ovulation", CyclePhase.OVULATORY),
        ("Ovulatory Moon", CyclePhase.OVULATORY),
        ("Follicular", CyclePhase.FOLLICULAR),
        ("luteal", CyclePhase.LUTEAL),
    ])
    def test_from_label(self, label, phase):
        assert CyclePhase.from_label(label) == phase

    def test_unknown_label(self):
        assert CyclePhase.from_label("new moon") is None
        assert CyclePhase.from_label("") is None

    def test_round_trip_every_variant(self):
        for phase in CyclePhase:
            for variant in PhaseDisplayVariant:
                assert CyclePhase.from_label(phase.display_name(variant)) == phase
